"""
面试 CRUD 操作
"""
import secrets
from datetime import datetime, timedelta
from typing import Optional, List, Tuple
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.base import utc_now
from app.models.interview import Interview, InterviewToken, InterviewStatus
from app.models.application import Application
from app.models.candidate import Candidate
from app.models.job import Job
from .base import CRUDBase

# (面试, 申请, 候选人, 岗位)
InterviewRow = Tuple[Interview, Application, Candidate, Job]


class CRUDInterview(CRUDBase[Interview]):
    """面试 CRUD 操作类"""

    def _joined(self):
        return (
            select(self.model, Application, Candidate, Job)
            .join(Application, Application.id == self.model.application_id)
            .join(Candidate, Candidate.id == Application.candidate_id)
            .join(Job, Job.id == Application.job_id)
        )

    def _filtered(self, query, *, start_date=None, end_date=None, status=None, application_id=None):
        if start_date:
            query = query.where(self.model.scheduled_at >= start_date)
        if end_date:
            query = query.where(self.model.scheduled_at <= end_date)
        if status:
            query = query.where(self.model.status == status)
        if application_id:
            query = query.where(self.model.application_id == application_id)
        return query

    async def get_list(
        self,
        db: AsyncSession,
        *,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        status: Optional[str] = None,
        application_id: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[InterviewRow]:
        """按时间范围、状态筛选面试"""
        query = self._filtered(
            self._joined(),
            start_date=start_date, end_date=end_date, status=status, application_id=application_id,
        )
        query = query.order_by(self.model.scheduled_at.asc()).offset(skip).limit(limit)
        result = await db.execute(query)
        return [tuple(row) for row in result.all()]

    async def count_list(
        self,
        db: AsyncSession,
        *,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        status: Optional[str] = None,
        application_id: Optional[str] = None
    ) -> int:
        query = self._filtered(
            select(func.count()).select_from(self.model),
            start_date=start_date, end_date=end_date, status=status, application_id=application_id,
        )
        result = await db.execute(query)
        return result.scalar() or 0

    async def get_detail(self, db: AsyncSession, id: str) -> Optional[InterviewRow]:
        result = await db.execute(self._joined().where(self.model.id == id))
        row = result.first()
        return tuple(row) if row else None

    async def get_by_application_and_type(
        self,
        db: AsyncSession,
        application_id: str,
        type: str
    ) -> Optional[Interview]:
        result = await db.execute(
            select(self.model)
            .where(self.model.application_id == application_id, self.model.type == type)
            .order_by(self.model.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def count_by_status(self, db: AsyncSession, status: str) -> int:
        return await self.count(db, self.model.status == status)

    async def get_recent(self, db: AsyncSession, *, since, limit: int = 10) -> List[InterviewRow]:
        """近期面试（用于动态）"""
        query = self._joined().where(self.model.scheduled_at >= since)
        query = query.order_by(self.model.scheduled_at.desc()).limit(limit)
        result = await db.execute(query)
        return [tuple(row) for row in result.all()]

    async def mark_completed(self, db: AsyncSession, *, db_obj: Interview) -> Interview:
        return await self.update(db, db_obj=db_obj, obj_in={
            "status": InterviewStatus.COMPLETED.value,
            "completed_at": db_obj.completed_at or utc_now(),
        })


class CRUDInterviewToken(CRUDBase[InterviewToken]):
    """面试令牌 CRUD 操作类"""

    async def get_by_token(self, db: AsyncSession, token: str) -> Optional[InterviewToken]:
        return await self.get_by(db, token=token)

    async def issue(self, db: AsyncSession, *, application_id: str, days: int) -> InterviewToken:
        """签发新令牌"""
        return await self.create(db, obj_in={
            "token": secrets.token_hex(32),
            "application_id": application_id,
            "expires_at": utc_now() + timedelta(days=days),
            "used": False,
        })

    @staticmethod
    def is_valid(token: Optional[InterviewToken]) -> bool:
        """令牌存在、未使用且未过期"""
        return token is not None and not token.used and utc_now() <= token.expires_at


interview_crud = CRUDInterview(Interview)
interview_token_crud = CRUDInterviewToken(InterviewToken)
