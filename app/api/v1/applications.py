"""
应聘申请 API 路由
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.core.config import settings
from app.core.database import get_db
from app.core.response import (
    success_response,
    paged_response,
    ResponseModel,
    PagedResponseModel,
    MessageResponse,
)
from app.core.exceptions import (
    NotFoundException,
    BadRequestException,
    ConflictException,
    ExternalServiceException,
)
from app.crud import application_crud, candidate_crud, job_crud, interview_token_crud, setting_crud
from app.crud.application import ApplicationRow
from app.models.application import ApplicationCreate, ApplicationUpdate, ApplicationResponse
from app.models.interview import InterviewTokenResponse
from app.services.agents import resume_matcher
from app.services.agents.resume_matcher import CandidateProfile, JobRequirements, MatchingError
from app.services.email_service import public_link

router = APIRouter()

CLAUDE_KEY_SETTING = "CLAUDE_API_KEY"


def _to_response(row: ApplicationRow) -> dict:
    application, candidate, job = row
    response = ApplicationResponse.model_validate(application)
    response.candidate_name = candidate.full_name
    response.candidate_email = candidate.email
    response.job_title = job.title
    return response.model_dump()


async def _get_detail_or_404(db: AsyncSession, application_id: str) -> ApplicationRow:
    row = await application_crud.get_detail(db, application_id)
    if not row:
        raise NotFoundException(f"申请不存在: {application_id}")
    return row


@router.get("", summary="获取申请列表", response_model=PagedResponseModel[ApplicationResponse])
async def get_applications(
    page: int = Query(1, ge=1, description="页码"),
    page_size: int = Query(20, ge=1, le=100, description="每页数量"),
    job_id: Optional[str] = Query(None, description="岗位ID"),
    candidate_id: Optional[str] = Query(None, description="候选人ID"),
    status: Optional[str] = Query(None, description="申请状态"),
    db: AsyncSession = Depends(get_db),
):
    """
    获取申请列表，支持按岗位、候选人、状态筛选
    """
    skip = (page - 1) * page_size
    rows = await application_crud.get_list(
        db, job_id=job_id, candidate_id=candidate_id, status=status, skip=skip, limit=page_size
    )
    total = await application_crud.count_list(db, job_id=job_id, candidate_id=candidate_id, status=status)
    return paged_response([_to_response(r) for r in rows], total, page, page_size)


@router.post("", summary="创建申请", response_model=ResponseModel[ApplicationResponse])
async def create_application(
    data: ApplicationCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    创建应聘申请，同一候选人对同一岗位只能申请一次
    """
    if not await job_crud.get(db, data.job_id):
        raise NotFoundException(f"岗位不存在: {data.job_id}")
    if not await candidate_crud.get(db, data.candidate_id):
        raise NotFoundException(f"候选人不存在: {data.candidate_id}")
    if await application_crud.get_by_job_candidate(db, data.job_id, data.candidate_id):
        raise ConflictException("该候选人已申请此岗位")

    application = await application_crud.create(db, obj_in=data)
    row = await _get_detail_or_404(db, application.id)
    return success_response(data=_to_response(row), message="申请创建成功")


@router.get("/{application_id}", summary="获取申请详情", response_model=ResponseModel[ApplicationResponse])
async def get_application(
    application_id: str,
    db: AsyncSession = Depends(get_db),
):
    row = await _get_detail_or_404(db, application_id)
    return success_response(data=_to_response(row))


@router.put("/{application_id}", summary="更新申请", response_model=ResponseModel[ApplicationResponse])
async def update_application(
    application_id: str,
    data: ApplicationUpdate,
    db: AsyncSession = Depends(get_db),
):
    application, _, _ = await _get_detail_or_404(db, application_id)
    update_data = data.model_dump(exclude_unset=True)
    status = update_data.pop("status", None)
    if update_data:
        application = await application_crud.update(db, db_obj=application, obj_in=update_data)
    if status:
        await application_crud.set_status(db, db_obj=application, status=status)

    row = await _get_detail_or_404(db, application_id)
    return success_response(data=_to_response(row), message="申请更新成功")


@router.delete("/{application_id}", summary="删除申请", response_model=MessageResponse)
async def delete_application(
    application_id: str,
    db: AsyncSession = Depends(get_db),
):
    await _get_detail_or_404(db, application_id)
    await application_crud.delete(db, id=application_id)
    return success_response(message="申请删除成功")


@router.post("/{application_id}/calculate-match", summary="AI 计算匹配度", response_model=ResponseModel[ApplicationResponse])
async def calculate_match(
    application_id: str,
    db: AsyncSession = Depends(get_db),
):
    """
    使用 Claude 计算候选人与岗位的匹配度并保存

    密钥优先读取组织设置 CLAUDE_API_KEY，其次为环境变量与应用配置
    """
    application, candidate, job = await _get_detail_or_404(db, application_id)

    api_key = await setting_crud.get_value(db, CLAUDE_KEY_SETTING, settings.anthropic_api_key)
    if not api_key:
        raise BadRequestException("未配置 Claude API 密钥，请在设置中填写 CLAUDE_API_KEY")

    profile = CandidateProfile(
        skills=candidate.skills or [],
        experience=candidate.experience or 0,
        position=candidate.position,
        resume_text=candidate.resume_text,
    )
    try:
        match = await resume_matcher.calculate_resume_job_match(
            profile, JobRequirements.from_job(job), api_key
        )
    except MatchingError as e:
        raise ExternalServiceException(str(e))

    await application_crud.save_match(db, db_obj=application, match=match)
    logger.info("匹配度已更新: application={}, score={}", application_id, match.matching_score)

    row = await _get_detail_or_404(db, application_id)
    return success_response(data=_to_response(row), message="匹配度计算完成")


@router.post("/{application_id}/generate-token", summary="生成面试预约链接", response_model=ResponseModel[InterviewTokenResponse])
async def generate_interview_token(
    application_id: str,
    db: AsyncSession = Depends(get_db),
):
    """
    生成候选人自助预约面试的令牌，有效期见 interview_token_days
    """
    await _get_detail_or_404(db, application_id)
    token = await interview_token_crud.issue(
        db, application_id=application_id, days=settings.interview_token_days
    )
    response = InterviewTokenResponse.model_validate(token)
    response.schedule_url = public_link(f"schedule/{token.token}")
    return success_response(data=response.model_dump(), message="预约链接已生成")
