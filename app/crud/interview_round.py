"""
面试轮次 CRUD 操作
"""
from typing import Optional, List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.interview_round import InterviewRound
from .base import CRUDBase


class CRUDInterviewRound(CRUDBase[InterviewRound]):
    """面试轮次 CRUD 操作类"""

    async def get_list(self, db: AsyncSession, *, job_id: Optional[str] = None) -> List[InterviewRound]:
        """按岗位、轮次序号排列"""
        query = select(self.model)
        if job_id:
            query = query.where(self.model.job_id == job_id)
        query = query.order_by(self.model.job_id, self.model.round_number)
        result = await db.execute(query)
        return list(result.scalars().all())


interview_round_crud = CRUDInterviewRound(InterviewRound)
