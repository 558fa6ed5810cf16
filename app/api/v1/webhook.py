"""
入站邮件 Webhook 路由

邮件服务商把候选人的回复推送到 /webhook/email，
识别为初筛问卷回复时自动解析答案并推进应聘流程
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.core.config import settings
from app.core.database import get_db
from app.core.response import success_response, DictResponse
from app.crud import candidate_crud, application_crud, interview_token_crud, job_crud
from app.models.application import ApplicationStatus
from app.models.email import InboundEmail
from app.services import email_webhook
from app.services.email_service import (
    email_service,
    interview_invitation_email,
    rejection_email,
)

router = APIRouter()


@router.post("/email", summary="接收入站邮件", response_model=DictResponse)
async def receive_email(
    data: InboundEmail,
    db: AsyncSession = Depends(get_db),
):
    """
    处理候选人回复邮件

    找不到候选人或不是问卷回复时直接返回 200，避免服务商重试
    """
    sender = email_webhook.extract_email(data.from_address)
    candidate = await candidate_crud.get_by_email(db, sender) if sender else None
    if not candidate:
        logger.info("入站邮件未匹配到候选人: from={}", sender)
        return success_response(data={"processed": False}, message="No matching candidate")

    if not email_webhook.is_screening_response(data.subject, data.text):
        return success_response(
            data={"processed": False, "candidate_id": candidate.id},
            message="Not a screening response"
        )

    answers = email_webhook.parse_screening_answers(data.text)
    if answers:
        await candidate_crud.merge_screening_responses(db, db_obj=candidate, responses=answers)
    qualified = email_webhook.evaluate_screening_answers(answers)

    result = {
        "processed": True,
        "candidate_id": candidate.id,
        "answers": len(answers),
        "qualified": qualified,
        "email_sent": False,
    }

    application = await application_crud.get_latest_for_candidate(db, candidate.id)
    if not application:
        logger.info("候选人没有应聘申请，仅保存回答: candidate={}", candidate.id)
        return success_response(data=result, message="Screening response recorded")

    job = await job_crud.get(db, application.job_id)
    if qualified:
        await application_crud.set_status(
            db, db_obj=application, status=ApplicationStatus.INTERVIEW_INVITED.value
        )
        token = await interview_token_crud.issue(
            db, application_id=application.id, days=settings.interview_token_days
        )
        content = interview_invitation_email(candidate.full_name, job.title, token.token)
    else:
        await application_crud.set_status(
            db, db_obj=application, status=ApplicationStatus.REJECTED.value
        )
        content = rejection_email(candidate.full_name, job.title)

    result["email_sent"] = await email_service.send_content(candidate.email, content)
    logger.info(
        "问卷回复已处理: candidate={}, answers={}, qualified={}",
        candidate.id, len(answers), qualified,
    )
    return success_response(data=result, message="Screening response processed")
