"""
批量筛选 CRUD 操作
"""
from typing import Optional, List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.bulk import BulkJob, BulkCandidate
from .base import CRUDBase


class CRUDBulkJob(CRUDBase[BulkJob]):
    """批量任务 CRUD 操作类"""
    pass


class CRUDBulkCandidate(CRUDBase[BulkCandidate]):
    """批量候选人 CRUD 操作类"""

    async def get_by_bulk_job(
        self,
        db: AsyncSession,
        bulk_job_id: str,
        *,
        min_score: Optional[int] = None,
        shortlisted_only: bool = False
    ) -> List[BulkCandidate]:
        """按匹配分从高到低返回"""
        query = select(self.model).where(self.model.bulk_job_id == bulk_job_id)
        if min_score is not None:
            query = query.where(self.model.matching_score >= min_score)
        if shortlisted_only:
            query = query.where(self.model.is_shortlisted == True)
        query = query.order_by(self.model.matching_score.desc(), self.model.file_name.asc())
        result = await db.execute(query)
        return list(result.scalars().all())

    async def set_shortlist(
        self,
        db: AsyncSession,
        bulk_job_id: str,
        candidate_ids: List[str]
    ) -> int:
        """将指定候选人设为入围，其余取消入围；返回入围人数"""
        wanted = set(candidate_ids)
        shortlisted = 0
        for candidate in await self.get_by_bulk_job(db, bulk_job_id):
            candidate.is_shortlisted = candidate.id in wanted
            if candidate.is_shortlisted:
                shortlisted += 1
        await db.flush()
        return shortlisted


bulk_job_crud = CRUDBulkJob(BulkJob)
bulk_candidate_crud = CRUDBulkCandidate(BulkCandidate)
