"""
初筛问卷令牌 CRUD 操作
"""
import secrets
from datetime import timedelta
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.base import utc_now
from app.models.screening import ScreeningToken, ScreeningStatus
from .base import CRUDBase


class CRUDScreeningToken(CRUDBase[ScreeningToken]):
    """初筛令牌 CRUD 操作类"""

    async def get_by_token(self, db: AsyncSession, token: str) -> Optional[ScreeningToken]:
        return await self.get_by(db, token=token)

    async def issue(
        self,
        db: AsyncSession,
        *,
        candidate_id: str,
        job_id: str,
        days: int
    ) -> ScreeningToken:
        """签发问卷令牌（token 长度不超过 50）"""
        return await self.create(db, obj_in={
            "token": secrets.token_urlsafe(24)[:50],
            "candidate_id": candidate_id,
            "job_id": job_id,
            "status": ScreeningStatus.PENDING.value,
            "expires_at": utc_now() + timedelta(days=days),
        })

    @staticmethod
    def is_expired(token: ScreeningToken) -> bool:
        return token.status == ScreeningStatus.EXPIRED.value or utc_now() > token.expires_at

    async def complete(
        self,
        db: AsyncSession,
        *,
        db_obj: ScreeningToken,
        responses: dict,
        score: int
    ) -> ScreeningToken:
        return await self.update(db, db_obj=db_obj, obj_in={
            "status": ScreeningStatus.COMPLETED.value,
            "responses": responses,
            "score": score,
            "submitted_at": utc_now(),
        })


screening_token_crud = CRUDScreeningToken(ScreeningToken)
