"""
招聘会报名 API 路由（候选人通过报名邮件中的链接访问）
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.core.database import get_db
from app.core.response import success_response, ResponseModel, DictResponse
from app.core.exceptions import NotFoundException
from app.crud import drive_candidate_crud, drive_session_crud, job_crud
from app.models.base import utc_now
from app.models.drive import (
    DriveCandidate,
    DriveRegistration,
    DriveCandidateResponse,
    DriveSessionResponse,
    RegistrationStatus,
)

router = APIRouter()


async def _get_candidate_or_404(db: AsyncSession, token: str) -> DriveCandidate:
    candidate = await drive_candidate_crud.get_by_token(db, token)
    if not candidate:
        raise NotFoundException("报名链接不存在或已失效")
    return candidate


@router.get("/{token}", summary="获取报名信息", response_model=DictResponse)
async def get_registration(
    token: str,
    db: AsyncSession = Depends(get_db),
):
    candidate = await _get_candidate_or_404(db, token)
    session = await drive_session_crud.get(db, candidate.drive_session_id)
    if not session:
        raise NotFoundException("招聘会不存在")
    job = await job_crud.get(db, session.job_id)

    return success_response(data={
        "candidate": DriveCandidateResponse.model_validate(candidate).model_dump(),
        "drive_session": DriveSessionResponse.model_validate(session).model_dump(),
        "job": {
            "id": job.id,
            "title": job.title,
            "department": job.department,
            "location": job.location,
            "description": job.description,
        } if job else None,
    })


@router.post("/{token}", summary="提交报名", response_model=ResponseModel[DriveCandidateResponse])
async def submit_registration(
    token: str,
    data: DriveRegistration,
    db: AsyncSession = Depends(get_db),
):
    """
    候选人补充个人信息，报名状态变为 registered
    """
    candidate = await _get_candidate_or_404(db, token)
    candidate = await drive_candidate_crud.update(db, db_obj=candidate, obj_in={
        **data.model_dump(exclude_unset=True),
        "registration_status": RegistrationStatus.REGISTERED.value,
        "registered_at": utc_now(),
    })
    logger.info("招聘会报名完成: candidate={}, session={}", candidate.id, candidate.drive_session_id)
    return success_response(
        data=DriveCandidateResponse.model_validate(candidate).model_dump(),
        message="报名成功"
    )
