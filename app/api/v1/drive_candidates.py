"""
招聘会候选人 API 路由
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.response import success_response, ResponseModel
from app.core.exceptions import NotFoundException
from app.crud import drive_candidate_crud
from app.models.drive import DriveCandidateUpdate, DriveCandidateResponse

router = APIRouter()


@router.get("", summary="获取招聘会候选人", response_model=ResponseModel[List[DriveCandidateResponse]])
async def get_drive_candidates(
    drive_session_id: Optional[str] = Query(None, description="招聘会ID"),
    db: AsyncSession = Depends(get_db),
):
    candidates = await drive_candidate_crud.get_by_session(db, drive_session_id)
    return success_response(
        data=[DriveCandidateResponse.model_validate(c).model_dump() for c in candidates]
    )


@router.put("/{candidate_id}", summary="更新招聘会候选人", response_model=ResponseModel[DriveCandidateResponse])
async def update_drive_candidate(
    candidate_id: str,
    data: DriveCandidateUpdate,
    db: AsyncSession = Depends(get_db),
):
    candidate = await drive_candidate_crud.get(db, candidate_id)
    if not candidate:
        raise NotFoundException(f"招聘会候选人不存在: {candidate_id}")

    candidate = await drive_candidate_crud.update(db, db_obj=candidate, obj_in=data)
    return success_response(
        data=DriveCandidateResponse.model_validate(candidate).model_dump(),
        message="候选人更新成功"
    )
