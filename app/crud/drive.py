"""
招聘会 CRUD 操作
"""
import secrets
from typing import Optional, List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.drive import DriveSession, DriveCandidate, DriveCandidateInput
from .base import CRUDBase


class CRUDDriveSession(CRUDBase[DriveSession]):
    """招聘会 CRUD 操作类"""
    pass


class CRUDDriveCandidate(CRUDBase[DriveCandidate]):
    """招聘会候选人 CRUD 操作类"""

    async def get_by_token(self, db: AsyncSession, token: str) -> Optional[DriveCandidate]:
        return await self.get_by(db, registration_token=token)

    async def get_by_session(
        self,
        db: AsyncSession,
        drive_session_id: Optional[str] = None
    ) -> List[DriveCandidate]:
        query = select(self.model)
        if drive_session_id:
            query = query.where(self.model.drive_session_id == drive_session_id)
        result = await db.execute(query.order_by(self.model.created_at.asc()))
        return list(result.scalars().all())

    async def create_for_session(
        self,
        db: AsyncSession,
        *,
        drive_session_id: str,
        obj_in: DriveCandidateInput
    ) -> DriveCandidate:
        """导入候选人并生成报名令牌"""
        return await self.create(db, obj_in={
            **obj_in.model_dump(),
            "drive_session_id": drive_session_id,
            "registration_token": secrets.token_hex(16),
        })


drive_session_crud = CRUDDriveSession(DriveSession)
drive_candidate_crud = CRUDDriveCandidate(DriveCandidate)
