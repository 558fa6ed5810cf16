"""
录用流程 API 路由
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.core.database import get_db
from app.core.response import success_response, DictResponse
from app.core.exceptions import NotFoundException
from app.crud import application_crud, candidate_crud, job_crud
from app.models.application import AdvanceStageRequest
from app.services.email_service import email_service, stage_email

router = APIRouter()


@router.post("/advance-stage", summary="推进录用阶段", response_model=DictResponse)
async def advance_stage(
    data: AdvanceStageRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    更新申请状态，并按新阶段给候选人发送通知

    technical_round、final_round、offered、hired 有对应邮件；
    邮件发送失败不影响状态更新
    """
    application = await application_crud.get(db, data.application_id)
    if not application:
        raise NotFoundException(f"申请不存在: {data.application_id}")
    candidate = await candidate_crud.get(db, application.candidate_id)
    job = await job_crud.get(db, application.job_id)

    await application_crud.set_status(db, db_obj=application, status=data.new_status)

    email_sent = False
    content = stage_email(data.new_status, candidate.full_name, job.title)
    if content:
        email_sent = await email_service.send_content(candidate.email, content)

    logger.info(
        "录用阶段已更新: application={}, status={}, email_sent={}",
        application.id, data.new_status, email_sent,
    )
    return success_response(
        data={"application_id": application.id, "new_status": data.new_status, "email_sent": email_sent},
        message=f"已推进到 {data.new_status} 阶段"
    )
