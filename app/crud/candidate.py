"""
候选人 CRUD 操作
"""
from typing import Optional, List
from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.base import utc_now
from app.models.candidate import Candidate
from .base import CRUDBase


class CRUDCandidate(CRUDBase[Candidate]):
    """候选人 CRUD 操作类"""

    def _filtered(self, query, *, archived: bool, search: Optional[str]):
        if archived:
            query = query.where(self.model.archived_at.is_not(None))
        else:
            query = query.where(self.model.archived_at.is_(None))
        if search:
            pattern = f"%{search}%"
            query = query.where(or_(
                self.model.first_name.ilike(pattern),
                self.model.last_name.ilike(pattern),
                self.model.email.ilike(pattern),
            ))
        return query

    async def get_by_email(self, db: AsyncSession, email: str) -> Optional[Candidate]:
        """根据邮箱查找（不区分大小写）"""
        result = await db.execute(
            select(self.model).where(func.lower(self.model.email) == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def get_list(
        self,
        db: AsyncSession,
        *,
        archived: bool = False,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Candidate]:
        query = self._filtered(select(self.model), archived=archived, search=search)
        order = self.model.archived_at.desc() if archived else self.model.created_at.desc()
        result = await db.execute(query.order_by(order).offset(skip).limit(limit))
        return list(result.scalars().all())

    async def count_list(
        self,
        db: AsyncSession,
        *,
        archived: bool = False,
        search: Optional[str] = None
    ) -> int:
        query = self._filtered(
            select(func.count()).select_from(self.model), archived=archived, search=search
        )
        result = await db.execute(query)
        return result.scalar() or 0

    async def archive(self, db: AsyncSession, *, db_obj: Candidate) -> Candidate:
        """归档（软删除）"""
        db_obj.archived_at = utc_now()
        return await self.save(db, db_obj)

    async def restore(self, db: AsyncSession, *, db_obj: Candidate) -> Candidate:
        """从归档中恢复"""
        db_obj.archived_at = None
        return await self.save(db, db_obj)

    async def merge_screening_responses(
        self,
        db: AsyncSession,
        *,
        db_obj: Candidate,
        responses: dict
    ) -> Candidate:
        """合并保存初筛回答"""
        merged = dict(db_obj.screening_responses or {})
        merged.update(responses)
        db_obj.screening_responses = merged
        return await self.save(db, db_obj)


candidate_crud = CRUDCandidate(Candidate)
