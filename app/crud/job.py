"""
岗位 CRUD 操作
"""
from typing import Optional, List, Dict
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.job import Job, JobCreate, ARCHIVED_JOB_STATUSES
from app.models.application import Application
from .base import CRUDBase


class CRUDJob(CRUDBase[Job]):
    """岗位 CRUD 操作类"""

    def _filtered(self, query, *, archived: bool, status: Optional[str]):
        if archived:
            query = query.where(self.model.status.in_(ARCHIVED_JOB_STATUSES))
        else:
            query = query.where(self.model.status.not_in(ARCHIVED_JOB_STATUSES))
        if status:
            query = query.where(self.model.status == status)
        return query

    async def get_list(
        self,
        db: AsyncSession,
        *,
        archived: bool = False,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Job]:
        """获取岗位列表，默认不含已关闭/已放弃的岗位"""
        query = self._filtered(select(self.model), archived=archived, status=status)
        query = query.order_by(self.model.created_at.desc()).offset(skip).limit(limit)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def count_list(
        self,
        db: AsyncSession,
        *,
        archived: bool = False,
        status: Optional[str] = None
    ) -> int:
        query = self._filtered(
            select(func.count()).select_from(self.model), archived=archived, status=status
        )
        result = await db.execute(query)
        return result.scalar() or 0

    async def application_counts(self, db: AsyncSession, job_ids: List[str]) -> Dict[str, int]:
        """批量统计各岗位的申请数量"""
        if not job_ids:
            return {}
        result = await db.execute(
            select(Application.job_id, func.count(Application.id))
            .where(Application.job_id.in_(job_ids))
            .group_by(Application.job_id)
        )
        return {job_id: count for job_id, count in result.all()}

    async def create_job(self, db: AsyncSession, *, obj_in: JobCreate) -> Job:
        """创建岗位"""
        return await self.create(db, obj_in=obj_in.model_dump())


job_crud = CRUDJob(Job)
