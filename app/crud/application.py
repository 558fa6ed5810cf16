"""
应聘申请 CRUD 操作
"""
from typing import Optional, List, Tuple
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.base import utc_now
from app.models.application import Application, ApplicationStatus, MatchResult
from app.models.candidate import Candidate
from app.models.job import Job
from .base import CRUDBase

# (申请, 候选人, 岗位)
ApplicationRow = Tuple[Application, Candidate, Job]


class CRUDApplication(CRUDBase[Application]):
    """应聘申请 CRUD 操作类"""

    def _joined(self):
        return (
            select(self.model, Candidate, Job)
            .join(Candidate, Candidate.id == self.model.candidate_id)
            .join(Job, Job.id == self.model.job_id)
        )

    def _filtered(self, query, *, job_id=None, candidate_id=None, status=None):
        if job_id:
            query = query.where(self.model.job_id == job_id)
        if candidate_id:
            query = query.where(self.model.candidate_id == candidate_id)
        if status:
            query = query.where(self.model.status == status)
        return query

    async def get_list(
        self,
        db: AsyncSession,
        *,
        job_id: Optional[str] = None,
        candidate_id: Optional[str] = None,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[ApplicationRow]:
        """获取申请列表（含候选人、岗位）"""
        query = self._filtered(self._joined(), job_id=job_id, candidate_id=candidate_id, status=status)
        query = query.order_by(self.model.applied_at.desc()).offset(skip).limit(limit)
        result = await db.execute(query)
        return [tuple(row) for row in result.all()]

    async def count_list(
        self,
        db: AsyncSession,
        *,
        job_id: Optional[str] = None,
        candidate_id: Optional[str] = None,
        status: Optional[str] = None
    ) -> int:
        query = self._filtered(
            select(func.count()).select_from(self.model),
            job_id=job_id, candidate_id=candidate_id, status=status,
        )
        result = await db.execute(query)
        return result.scalar() or 0

    async def get_detail(self, db: AsyncSession, id: str) -> Optional[ApplicationRow]:
        """获取单个申请（含候选人、岗位）"""
        result = await db.execute(self._joined().where(self.model.id == id))
        row = result.first()
        return tuple(row) if row else None

    async def get_by_job_candidate(
        self,
        db: AsyncSession,
        job_id: str,
        candidate_id: str
    ) -> Optional[Application]:
        result = await db.execute(
            select(self.model).where(
                self.model.job_id == job_id,
                self.model.candidate_id == candidate_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_latest_for_candidate(
        self,
        db: AsyncSession,
        candidate_id: str
    ) -> Optional[Application]:
        """候选人最近一次投递"""
        result = await db.execute(
            select(self.model)
            .where(self.model.candidate_id == candidate_id)
            .order_by(self.model.applied_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def set_status(
        self,
        db: AsyncSession,
        *,
        db_obj: Application,
        status: str
    ) -> Application:
        """更新申请状态，录用时记录录用时间"""
        if status == ApplicationStatus.HIRED.value and db_obj.hired_at is None:
            db_obj.hired_at = utc_now()
        return await self.update(db, db_obj=db_obj, obj_in={"status": status})

    async def save_match(
        self,
        db: AsyncSession,
        *,
        db_obj: Application,
        match: MatchResult
    ) -> Application:
        """保存匹配结果"""
        return await self.update(db, db_obj=db_obj, obj_in=match.model_dump())

    async def count_qualified(self, db: AsyncSession, threshold: int) -> int:
        return await self.count(db, self.model.matching_score >= threshold)

    async def get_hired(self, db: AsyncSession) -> List[Application]:
        result = await db.execute(
            select(self.model).where(self.model.hired_at.is_not(None))
        )
        return list(result.scalars().all())

    async def get_recent(self, db: AsyncSession, *, since, limit: int = 10) -> List[ApplicationRow]:
        """近期投递（用于动态）"""
        query = self._joined().where(self.model.applied_at >= since)
        query = query.order_by(self.model.applied_at.desc()).limit(limit)
        result = await db.execute(query)
        return [tuple(row) for row in result.all()]


application_crud = CRUDApplication(Application)
