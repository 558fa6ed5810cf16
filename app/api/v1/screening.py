"""
初筛问卷 API 路由（候选人通过邮件链接访问，无需登录）
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.core.config import settings
from app.core.database import get_db
from app.core.response import success_response, ResponseModel, DictResponse
from app.core.exceptions import NotFoundException, BadRequestException, GoneException
from app.crud import (
    screening_token_crud,
    candidate_crud,
    job_crud,
    application_crud,
    interview_token_crud,
)
from app.models.application import ApplicationStatus
from app.models.screening import (
    ScreeningToken,
    ScreeningStatus,
    ScreeningSubmission,
    ScreeningResult,
)
from app.services.email_service import (
    email_service,
    interview_invitation_email,
    rejection_email,
)
from app.services.screening_evaluator import evaluate_screening, SCREENING_QUESTIONS

router = APIRouter()


async def _get_token_or_404(db: AsyncSession, token: str) -> ScreeningToken:
    screening_token = await screening_token_crud.get_by_token(db, token)
    if not screening_token:
        raise NotFoundException("初筛问卷链接不存在")
    if screening_token_crud.is_expired(screening_token):
        raise GoneException("初筛问卷链接已过期")
    return screening_token


@router.get("/verify/{token}", summary="校验初筛问卷令牌", response_model=DictResponse)
async def verify_screening_token(
    token: str,
    db: AsyncSession = Depends(get_db),
):
    """
    返回候选人、岗位概要与问卷题目；已提交的问卷同时返回已填写的回答
    """
    screening_token = await _get_token_or_404(db, token)
    candidate = await candidate_crud.get(db, screening_token.candidate_id)
    job = await job_crud.get(db, screening_token.job_id)
    if not candidate or not job:
        raise NotFoundException("候选人或岗位不存在")

    return success_response(data={
        "token": screening_token.token,
        "status": screening_token.status,
        "responses": screening_token.responses,
        "expires_at": screening_token.expires_at.isoformat(),
        "candidate": {
            "first_name": candidate.first_name,
            "last_name": candidate.last_name,
            "email": candidate.email,
        },
        "job": {
            "title": job.title,
            "department": job.department,
            "location": job.location,
            "description": job.description,
            "requirements": job.requirements,
            "salary_min": job.salary_min,
            "salary_max": job.salary_max,
            "experience_level": job.experience_level,
        },
        "questions": SCREENING_QUESTIONS,
    })


@router.post("/submit/{token}", summary="提交初筛问卷", response_model=ResponseModel[ScreeningResult])
async def submit_screening(
    token: str,
    data: ScreeningSubmission,
    db: AsyncSession = Depends(get_db),
):
    """
    提交并自动评估初筛问卷

    通过: 申请状态变为 interview_invited，签发面试预约令牌并发送邀请邮件；
    未通过: 申请状态变为 rejected 并发送婉拒邮件
    """
    screening_token = await _get_token_or_404(db, token)
    if screening_token.status == ScreeningStatus.COMPLETED.value:
        raise BadRequestException("初筛问卷已提交")

    candidate = await candidate_crud.get(db, screening_token.candidate_id)
    job = await job_crud.get(db, screening_token.job_id)
    if not candidate or not job:
        raise NotFoundException("候选人或岗位不存在")

    responses = data.model_dump(by_alias=True, exclude_none=True)
    result = evaluate_screening(data, job)

    await screening_token_crud.complete(
        db, db_obj=screening_token, responses=responses, score=result.score
    )
    await candidate_crud.merge_screening_responses(db, db_obj=candidate, responses=responses)

    application = await application_crud.get_by_job_candidate(db, job.id, candidate.id)
    if not application:
        application = await application_crud.create(db, obj_in={
            "job_id": job.id,
            "candidate_id": candidate.id,
            "status": ApplicationStatus.SCREENED.value,
        })

    if result.qualified:
        await application_crud.set_status(
            db, db_obj=application, status=ApplicationStatus.INTERVIEW_INVITED.value
        )
        interview_token = await interview_token_crud.issue(
            db, application_id=application.id, days=settings.interview_token_days
        )
        content = interview_invitation_email(candidate.full_name, job.title, interview_token.token)
    else:
        await application_crud.set_status(
            db, db_obj=application, status=ApplicationStatus.REJECTED.value
        )
        content = rejection_email(candidate.full_name, job.title)

    sent = await email_service.send_content(candidate.email, content)
    logger.info(
        "初筛问卷已提交: candidate={}, job={}, score={}, qualified={}, email_sent={}",
        candidate.id, job.id, result.score, result.qualified, sent,
    )
    return success_response(data=result.model_dump(), message=result.message)
