"""
面试评估 CRUD 操作
"""
from typing import Optional, List, Tuple
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.evaluation import Evaluation
from app.models.interview import Interview
from app.models.application import Application
from app.models.candidate import Candidate
from app.models.job import Job
from .base import CRUDBase

# (评估, 面试, 候选人, 岗位)
EvaluationRow = Tuple[Evaluation, Interview, Candidate, Job]


class CRUDEvaluation(CRUDBase[Evaluation]):
    """面试评估 CRUD 操作类"""

    def _joined(self):
        return (
            select(self.model, Interview, Candidate, Job)
            .join(Interview, Interview.id == self.model.interview_id)
            .join(Application, Application.id == Interview.application_id)
            .join(Candidate, Candidate.id == Application.candidate_id)
            .join(Job, Job.id == Application.job_id)
        )

    def _filtered(self, query, *, job_id=None, recommendation=None):
        if job_id:
            query = query.where(Application.job_id == job_id)
        if recommendation:
            query = query.where(self.model.recommendation == recommendation)
        return query

    async def get_list(
        self,
        db: AsyncSession,
        *,
        job_id: Optional[str] = None,
        recommendation: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[EvaluationRow]:
        query = self._filtered(self._joined(), job_id=job_id, recommendation=recommendation)
        query = query.order_by(self.model.created_at.desc()).offset(skip).limit(limit)
        result = await db.execute(query)
        return [tuple(row) for row in result.all()]

    async def count_list(
        self,
        db: AsyncSession,
        *,
        job_id: Optional[str] = None,
        recommendation: Optional[str] = None
    ) -> int:
        query = (
            select(func.count(self.model.id))
            .join(Interview, Interview.id == self.model.interview_id)
            .join(Application, Application.id == Interview.application_id)
        )
        query = self._filtered(query, job_id=job_id, recommendation=recommendation)
        result = await db.execute(query)
        return result.scalar() or 0

    async def get_detail(self, db: AsyncSession, id: str) -> Optional[EvaluationRow]:
        result = await db.execute(self._joined().where(self.model.id == id))
        row = result.first()
        return tuple(row) if row else None


evaluation_crud = CRUDEvaluation(Evaluation)
