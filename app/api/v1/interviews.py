"""
面试管理 API 路由

包括面试安排、AI 面试启动、面试评估与面试问题生成
"""
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.core.database import get_db
from app.core.response import (
    success_response,
    paged_response,
    ResponseModel,
    PagedResponseModel,
    MessageResponse,
    DictResponse,
)
from app.core.exceptions import NotFoundException, BadRequestException, ExternalServiceException
from app.crud import interview_crud, application_crud, candidate_crud, job_crud, evaluation_crud
from app.crud.interview import InterviewRow
from app.models.application import ApplicationStatus
from app.models.base import utc_now, to_utc
from app.models.evaluation import InterviewEvaluationCreate, EvaluationResponse
from app.models.interview import (
    InterviewCreate,
    InterviewUpdate,
    InterviewResponse,
    InterviewScheduleRequest,
    InterviewStatus,
    GenerateQuestionsRequest,
)
from app.services import ai_interview
from app.services.ai_interview import AIInterviewError
from app.services.agents import get_interview_assist_agent
from app.services.email_service import (
    email_service,
    interview_details_email,
    interview_link_email,
    interviewer_invitation_email,
    public_link,
)

router = APIRouter()


def to_interview_response(row: InterviewRow) -> dict:
    interview, application, candidate, job = row
    response = InterviewResponse.model_validate(interview)
    response.candidate_id = candidate.id
    response.candidate_name = candidate.full_name
    response.candidate_email = candidate.email
    response.job_id = job.id
    response.job_title = job.title
    return response.model_dump()


async def _get_detail_or_404(db: AsyncSession, interview_id: str) -> InterviewRow:
    row = await interview_crud.get_detail(db, interview_id)
    if not row:
        raise NotFoundException(f"面试不存在: {interview_id}")
    return row


@router.get("", summary="获取面试列表", response_model=PagedResponseModel[InterviewResponse])
async def get_interviews(
    page: int = Query(1, ge=1, description="页码"),
    page_size: int = Query(50, ge=1, le=200, description="每页数量"),
    start_date: Optional[datetime] = Query(None, description="开始时间"),
    end_date: Optional[datetime] = Query(None, description="结束时间"),
    status: Optional[str] = Query(None, description="面试状态"),
    application_id: Optional[str] = Query(None, description="申请ID"),
    db: AsyncSession = Depends(get_db),
):
    """
    获取面试列表，按面试时间升序（日历视图）
    """
    filters = {
        "start_date": to_utc(start_date) if start_date else None,
        "end_date": to_utc(end_date) if end_date else None,
        "status": status,
        "application_id": application_id,
    }
    skip = (page - 1) * page_size
    rows = await interview_crud.get_list(db, skip=skip, limit=page_size, **filters)
    total = await interview_crud.count_list(db, **filters)
    return paged_response([to_interview_response(r) for r in rows], total, page, page_size)


@router.post("", summary="创建面试", response_model=ResponseModel[InterviewResponse])
async def create_interview(
    data: InterviewCreate,
    db: AsyncSession = Depends(get_db),
):
    if not await application_crud.get(db, data.application_id):
        raise NotFoundException(f"申请不存在: {data.application_id}")

    payload = data.model_dump()
    if data.scheduled_at:
        payload["scheduled_at"] = to_utc(data.scheduled_at)
    interview = await interview_crud.create(db, obj_in=payload)
    row = await _get_detail_or_404(db, interview.id)
    return success_response(data=to_interview_response(row), message="面试创建成功")


@router.post("/schedule", summary="为候选人安排面试", response_model=ResponseModel[InterviewResponse])
async def schedule_interview(
    data: InterviewScheduleRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    按候选人安排面试，未指定岗位时使用候选人最近一次申请；
    申请状态变为 interview_scheduled
    """
    candidate = await candidate_crud.get(db, data.candidate_id)
    if not candidate:
        raise NotFoundException(f"候选人不存在: {data.candidate_id}")

    if data.job_id:
        application = await application_crud.get_by_job_candidate(db, data.job_id, candidate.id)
    else:
        application = await application_crud.get_latest_for_candidate(db, candidate.id)
    if not application:
        raise NotFoundException("候选人没有对应的应聘申请")

    interview = await interview_crud.create(db, obj_in={
        "application_id": application.id,
        "type": data.type,
        "scheduled_at": to_utc(data.scheduled_at),
        "duration": data.duration,
        "format": data.format,
        "meeting_url": data.meeting_url,
        "interviewer_email": data.interviewer_email,
        "interviewer_notes": data.interviewer_notes,
        "status": InterviewStatus.SCHEDULED.value,
    })
    await application_crud.set_status(
        db, db_obj=application, status=ApplicationStatus.INTERVIEW_SCHEDULED.value
    )
    logger.info("面试已安排: interview={}, application={}", interview.id, application.id)

    row = await _get_detail_or_404(db, interview.id)
    return success_response(data=to_interview_response(row), message="面试安排成功")


@router.post("/generate-questions", summary="生成面试问题", response_model=DictResponse)
async def generate_questions(
    data: GenerateQuestionsRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    生成岗位面试问题，自定义问题优先，其余由 LLM 生成，不可用时使用模板
    """
    job = await job_crud.get(db, data.job_id)
    if not job:
        raise NotFoundException(f"岗位不存在: {data.job_id}")

    result = await get_interview_assist_agent().generate_questions(
        job, total_questions=data.total_questions, custom_questions=data.custom_questions
    )
    return success_response(data=result, message="面试问题生成成功")


@router.get("/{interview_id}", summary="获取面试详情", response_model=ResponseModel[InterviewResponse])
async def get_interview(
    interview_id: str,
    db: AsyncSession = Depends(get_db),
):
    row = await _get_detail_or_404(db, interview_id)
    return success_response(data=to_interview_response(row))


@router.put("/{interview_id}", summary="更新面试", response_model=ResponseModel[InterviewResponse])
async def update_interview(
    interview_id: str,
    data: InterviewUpdate,
    db: AsyncSession = Depends(get_db),
):
    interview = (await _get_detail_or_404(db, interview_id))[0]
    update_data = data.model_dump(exclude_unset=True)
    if update_data.get("scheduled_at"):
        update_data["scheduled_at"] = to_utc(update_data["scheduled_at"])
    if update_data.get("status") == InterviewStatus.IN_PROGRESS.value and not interview.started_at:
        update_data["started_at"] = utc_now()
    if update_data.get("status") == InterviewStatus.COMPLETED.value and not interview.completed_at:
        update_data["completed_at"] = utc_now()

    await interview_crud.update(db, db_obj=interview, obj_in=update_data)
    row = await _get_detail_or_404(db, interview_id)
    return success_response(data=to_interview_response(row), message="面试更新成功")


@router.delete("/{interview_id}", summary="删除面试", response_model=MessageResponse)
async def delete_interview(
    interview_id: str,
    db: AsyncSession = Depends(get_db),
):
    await _get_detail_or_404(db, interview_id)
    await interview_crud.delete(db, id=interview_id)
    return success_response(message="面试删除成功")


@router.post("/{interview_id}/launch-ai-interview", summary="启动 AI 面试", response_model=DictResponse)
async def launch_ai_interview(
    interview_id: str,
    db: AsyncSession = Depends(get_db),
):
    """
    将候选人简历与岗位 JD 提交给外部 AI 面试系统，保存返回的登录链接

    简历或 JD 缺失时根据候选人、岗位字段自动拼接
    """
    interview, _, candidate, job = await _get_detail_or_404(db, interview_id)

    submission = ai_interview.build_submission(candidate, job)
    errors = ai_interview.validate_submission_data(submission)
    if errors:
        raise BadRequestException("AI 面试数据校验失败", data={"errors": errors})

    try:
        login_url = await ai_interview.submit_candidate_data(submission)
    except AIInterviewError as e:
        if e.errors:
            raise BadRequestException(e.message, data={"errors": e.errors})
        raise ExternalServiceException(e.message)

    await interview_crud.update(db, db_obj=interview, obj_in={
        "status": InterviewStatus.AI_INTERVIEW_LAUNCHED.value,
        "interview_link": login_url,
        "scheduled_at": utc_now(),
    })
    sent = await email_service.send_content(
        candidate.email, interview_link_email(candidate.full_name, job.title, login_url)
    )
    logger.info("AI 面试已启动: interview={}, email_sent={}", interview_id, sent)

    row = await _get_detail_or_404(db, interview_id)
    return success_response(
        data={"login_url": login_url, "email_sent": sent, "interview": to_interview_response(row)},
        message="AI 面试已启动"
    )


@router.post("/{interview_id}/evaluation", summary="提交面试评估", response_model=ResponseModel[EvaluationResponse])
async def submit_interview_evaluation(
    interview_id: str,
    data: InterviewEvaluationCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    保存面试评估并将面试标记为已完成
    """
    interview = (await _get_detail_or_404(db, interview_id))[0]
    evaluation = await evaluation_crud.create(db, obj_in={**data.model_dump(), "interview_id": interview.id})
    await interview_crud.mark_completed(db, db_obj=interview)

    _, _, candidate, job = await evaluation_crud.get_detail(db, evaluation.id)
    response = EvaluationResponse.model_validate(evaluation)
    response.candidate_name = candidate.full_name
    response.job_id = job.id
    response.job_title = job.title
    response.interview_type = interview.type
    return success_response(data=response.model_dump(), message="面试评估已保存")


@router.post("/{interview_id}/send-invitations", summary="发送面试邀请", response_model=DictResponse)
async def send_invitations(
    interview_id: str,
    db: AsyncSession = Depends(get_db),
):
    """
    生成面试会议页链接，分别通知候选人与面试官

    未登记面试官邮箱时只通知候选人
    """
    interview, _, candidate, job = await _get_detail_or_404(db, interview_id)
    meeting_url = public_link(f"interview-session/{interview.id}")
    await interview_crud.update(db, db_obj=interview, obj_in={"meeting_url": meeting_url})

    candidate_sent = await email_service.send_content(
        candidate.email,
        interview_details_email(
            candidate.full_name, job.title, interview.type,
            interview.scheduled_at, interview.duration, meeting_url,
        ),
    )
    interviewer_sent = False
    if interview.interviewer_email:
        interviewer_sent = await email_service.send_content(
            interview.interviewer_email,
            interviewer_invitation_email(
                candidate.full_name, job.title, interview.scheduled_at, interview.duration, meeting_url,
            ),
        )
    logger.info(
        "面试邀请已发送: interview={}, candidate={}, interviewer={}",
        interview_id, candidate_sent, interviewer_sent,
    )
    return success_response(
        data={
            "meeting_url": meeting_url,
            "candidate_email_sent": candidate_sent,
            "interviewer_email_sent": interviewer_sent,
        },
        message="面试邀请已发送"
    )
