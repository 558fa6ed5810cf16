"""
面试轮次 API 路由
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.core.database import get_db
from app.core.response import success_response, ResponseModel, MessageResponse
from app.core.exceptions import NotFoundException, BadRequestException
from app.crud import interview_round_crud, interview_crud, application_crud, job_crud
from app.models.application import ApplicationStatus
from app.models.base import to_utc
from app.models.interview import InterviewResponse, InterviewStatus
from app.models.interview_round import (
    InterviewRound,
    InterviewRoundCreate,
    InterviewRoundUpdate,
    InterviewRoundResponse,
    RoundScheduleRequest,
)
from .interviews import to_interview_response

router = APIRouter()


async def _get_round_or_404(db: AsyncSession, round_id: str) -> InterviewRound:
    interview_round = await interview_round_crud.get(db, round_id)
    if not interview_round:
        raise NotFoundException(f"面试轮次不存在: {round_id}")
    return interview_round


def _dump(interview_round: InterviewRound) -> dict:
    return InterviewRoundResponse.model_validate(interview_round).model_dump()


@router.get("", summary="获取面试轮次", response_model=ResponseModel[List[InterviewRoundResponse]])
async def get_interview_rounds(
    job_id: Optional[str] = Query(None, description="岗位ID"),
    db: AsyncSession = Depends(get_db),
):
    rounds = await interview_round_crud.get_list(db, job_id=job_id)
    return success_response(data=[_dump(r) for r in rounds])


@router.post("", summary="创建面试轮次", response_model=ResponseModel[InterviewRoundResponse])
async def create_interview_round(
    data: InterviewRoundCreate,
    db: AsyncSession = Depends(get_db),
):
    if not await job_crud.get(db, data.job_id):
        raise NotFoundException(f"岗位不存在: {data.job_id}")
    interview_round = await interview_round_crud.create(db, obj_in=data)
    return success_response(data=_dump(interview_round), message="面试轮次创建成功")


@router.get("/{round_id}", summary="获取面试轮次详情", response_model=ResponseModel[InterviewRoundResponse])
async def get_interview_round(
    round_id: str,
    db: AsyncSession = Depends(get_db),
):
    return success_response(data=_dump(await _get_round_or_404(db, round_id)))


@router.put("/{round_id}", summary="更新面试轮次", response_model=ResponseModel[InterviewRoundResponse])
async def update_interview_round(
    round_id: str,
    data: InterviewRoundUpdate,
    db: AsyncSession = Depends(get_db),
):
    interview_round = await _get_round_or_404(db, round_id)
    interview_round = await interview_round_crud.update(db, db_obj=interview_round, obj_in=data)
    return success_response(data=_dump(interview_round), message="面试轮次更新成功")


@router.delete("/{round_id}", summary="删除面试轮次", response_model=MessageResponse)
async def delete_interview_round(
    round_id: str,
    db: AsyncSession = Depends(get_db),
):
    """删除轮次，已安排的面试保留，只解除与轮次的关联"""
    await _get_round_or_404(db, round_id)
    await interview_round_crud.delete(db, id=round_id)
    return success_response(message="面试轮次删除成功")


@router.post("/{round_id}/schedule", summary="按轮次安排面试", response_model=ResponseModel[InterviewResponse])
async def schedule_from_round(
    round_id: str,
    data: RoundScheduleRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    按轮次配置（类型、时长、形式、面试官）创建面试

    申请须属于该轮次所在岗位；申请状态变为 interview_scheduled
    """
    interview_round = await _get_round_or_404(db, round_id)
    if not interview_round.is_active:
        raise BadRequestException(f"面试轮次已停用: {interview_round.title}")

    application = await application_crud.get(db, data.application_id)
    if not application:
        raise NotFoundException(f"申请不存在: {data.application_id}")
    if application.job_id != interview_round.job_id:
        raise BadRequestException("申请与面试轮次不属于同一岗位")

    interview = await interview_crud.create(db, obj_in={
        "application_id": application.id,
        "round_id": interview_round.id,
        "round_number": interview_round.round_number,
        "type": interview_round.type,
        "scheduled_at": to_utc(data.scheduled_at),
        "duration": interview_round.duration,
        "format": interview_round.format,
        "interviewer_email": interview_round.interviewer_email,
        "interviewer_notes": data.notes,
        "status": InterviewStatus.SCHEDULED.value,
    })
    await application_crud.set_status(
        db, db_obj=application, status=ApplicationStatus.INTERVIEW_SCHEDULED.value
    )
    logger.info("按轮次安排面试: round={}, interview={}", interview_round.id, interview.id)

    row = await interview_crud.get_detail(db, interview.id)
    return success_response(data=to_interview_response(row), message="面试安排成功")
