"""
候选人自助预约面试 API 路由（通过邮件中的令牌访问）
"""
from datetime import datetime, timezone
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.core.database import get_db
from app.core.response import success_response, ResponseModel, DictResponse
from app.core.exceptions import NotFoundException
from app.crud import interview_token_crud, interview_crud, application_crud
from app.crud.application import ApplicationRow
from app.models.application import ApplicationStatus
from app.models.interview import (
    InterviewType,
    InterviewFormat,
    InterviewStatus,
    InterviewResponse,
    InterviewToken,
    TokenScheduleRequest,
)
from app.services.email_service import email_service, interview_confirmation_email, public_link
from .interviews import to_interview_response

router = APIRouter()

AI_INTERVIEW_DURATION = 30


async def _resolve_token(db: AsyncSession, token: str) -> tuple:
    """校验令牌，返回 (令牌, 申请行)；无效、已使用或过期均视为不存在"""
    interview_token = await interview_token_crud.get_by_token(db, token)
    if not interview_token_crud.is_valid(interview_token):
        raise NotFoundException("面试链接无效或已过期")
    row = await application_crud.get_detail(db, interview_token.application_id)
    if not row:
        raise NotFoundException("应聘申请不存在")
    return interview_token, row


def _summary(interview_token: InterviewToken, row: ApplicationRow) -> dict:
    application, candidate, job = row
    return {
        "token": interview_token.token,
        "expires_at": interview_token.expires_at.isoformat(),
        "application_id": application.id,
        "application_status": application.status,
        "candidate": {
            "id": candidate.id,
            "name": candidate.full_name,
            "email": candidate.email,
        },
        "job": {
            "id": job.id,
            "title": job.title,
            "department": job.department,
            "location": job.location,
        },
    }


@router.get("/verify/{token}", summary="校验面试预约令牌", response_model=DictResponse)
async def verify_interview_token(
    token: str,
    db: AsyncSession = Depends(get_db),
):
    interview_token, row = await _resolve_token(db, token)
    return success_response(data=_summary(interview_token, row), message="令牌有效")


@router.post("/{token}/schedule", summary="候选人预约面试时间", response_model=ResponseModel[InterviewResponse])
async def schedule_with_token(
    token: str,
    data: TokenScheduleRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    候选人选择日期与时间，创建或更新该申请的 AI 视频面试（30 分钟）

    确认邮件发送失败不影响预约结果
    """
    interview_token, (application, candidate, job) = await _resolve_token(db, token)
    scheduled_at = datetime.combine(data.scheduled_date, data.scheduled_time, tzinfo=timezone.utc)
    meeting_url = public_link(f"interview/{token}")

    interview = await interview_crud.get_by_application_and_type(
        db, application.id, InterviewType.AI_VIDEO.value
    )
    values = {
        "scheduled_at": scheduled_at,
        "duration": AI_INTERVIEW_DURATION,
        "format": InterviewFormat.VIDEO_CALL.value,
        "meeting_url": meeting_url,
        "status": InterviewStatus.SCHEDULED.value,
    }
    if interview:
        interview = await interview_crud.update(db, db_obj=interview, obj_in=values)
    else:
        interview = await interview_crud.create(db, obj_in={
            **values,
            "application_id": application.id,
            "type": InterviewType.AI_VIDEO.value,
        })

    await application_crud.set_status(
        db, db_obj=application, status=ApplicationStatus.INTERVIEW_SCHEDULED.value
    )
    await interview_token_crud.update(db, db_obj=interview_token, obj_in={"used": True})

    sent = await email_service.send_content(
        candidate.email,
        interview_confirmation_email(candidate.full_name, job.title, scheduled_at, meeting_url),
    )
    logger.info(
        "候选人已预约面试: application={}, at={}, email_sent={}",
        application.id, scheduled_at, sent,
    )

    row = await interview_crud.get_detail(db, interview.id)
    return success_response(data=to_interview_response(row), message="面试预约成功")
