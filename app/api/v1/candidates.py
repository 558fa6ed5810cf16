"""
候选人管理 API 路由
"""
import uuid
from pathlib import Path
from typing import Optional
from fastapi import APIRouter, Depends, Query, Form, File, UploadFile
from pydantic import ValidationError
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
    DictResponse,
)
from app.core.exceptions import NotFoundException, BadRequestException, ConflictException
from app.crud import candidate_crud, job_crud, application_crud, screening_token_crud
from app.models.application import ApplicationStatus
from app.models.candidate import (
    Candidate,
    CandidateCreate,
    CandidateUpdate,
    CandidateResponse,
    CandidateDetailResponse,
    ScreeningEmailRequest,
)
from app.services.email_service import email_service, public_link, screening_form_email
from app.services.resume_extractor import detect_skills, extract_text_from_bytes

router = APIRouter()


def _split_skills(raw: Optional[str]) -> list:
    if not raw:
        return []
    return [s.strip() for s in raw.split(",") if s.strip()]


def _save_resume(file_name: str, data: bytes) -> str:
    """保存简历文件，返回相对上传目录的文件名"""
    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    stored = f"{uuid.uuid4().hex}{Path(file_name).suffix.lower()}"
    (upload_dir / stored).write_bytes(data)
    return stored


async def _get_candidate_or_404(db: AsyncSession, candidate_id: str) -> Candidate:
    candidate = await candidate_crud.get(db, candidate_id)
    if not candidate:
        raise NotFoundException(f"候选人不存在: {candidate_id}")
    return candidate


@router.get("", summary="获取候选人列表", response_model=PagedResponseModel[CandidateResponse])
async def get_candidates(
    page: int = Query(1, ge=1, description="页码"),
    page_size: int = Query(20, ge=1, le=100, description="每页数量"),
    search: Optional[str] = Query(None, description="按姓名或邮箱搜索"),
    db: AsyncSession = Depends(get_db),
):
    """
    获取候选人列表（不含已归档）
    """
    skip = (page - 1) * page_size
    candidates = await candidate_crud.get_list(db, search=search, skip=skip, limit=page_size)
    total = await candidate_crud.count_list(db, search=search)
    items = [CandidateResponse.model_validate(c).model_dump() for c in candidates]
    return paged_response(items, total, page, page_size)


@router.get("/archived", summary="获取已归档候选人", response_model=PagedResponseModel[CandidateResponse])
async def get_archived_candidates(
    page: int = Query(1, ge=1, description="页码"),
    page_size: int = Query(20, ge=1, le=100, description="每页数量"),
    db: AsyncSession = Depends(get_db),
):
    skip = (page - 1) * page_size
    candidates = await candidate_crud.get_list(db, archived=True, skip=skip, limit=page_size)
    total = await candidate_crud.count_list(db, archived=True)
    items = [CandidateResponse.model_validate(c).model_dump() for c in candidates]
    return paged_response(items, total, page, page_size)


@router.post("", summary="新增候选人（上传简历）", response_model=ResponseModel[CandidateDetailResponse])
async def create_candidate(
    first_name: str = Form(..., description="名"),
    last_name: str = Form("", description="姓"),
    email: str = Form(..., description="邮箱"),
    phone: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    location_preference: Optional[str] = Form(None),
    position: Optional[str] = Form(None),
    skills: Optional[str] = Form(None, description="技能，逗号分隔"),
    experience: int = Form(0, ge=0),
    current_ctc: Optional[str] = Form(None),
    expected_ctc: Optional[str] = Form(None),
    notice_period: Optional[str] = Form(None),
    willing_to_relocate: bool = Form(False),
    selected_job_id: Optional[str] = Form(None, description="同时投递的岗位"),
    resume: UploadFile = File(..., description="简历文件（PDF/DOC/DOCX/TXT）"),
    db: AsyncSession = Depends(get_db),
):
    """
    新增候选人

    先提取简历文本，提取失败直接返回 400；邮箱重复返回 409。
    指定 selected_job_id 时同时创建应聘申请；未填写技能时从简历中识别该岗位要求的技能。
    """
    data = await resume.read()
    extraction = extract_text_from_bytes(data, resume.filename or "")
    if not extraction.success:
        raise BadRequestException(f"简历文本提取失败: {extraction.error}")

    try:
        candidate_in = CandidateCreate(
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone=phone,
            location=location,
            location_preference=location_preference,
            position=position,
            skills=_split_skills(skills),
            experience=experience,
            current_ctc=current_ctc,
            expected_ctc=expected_ctc,
            notice_period=notice_period,
            willing_to_relocate=willing_to_relocate,
            resume_text=extraction.text,
        )
    except ValidationError as e:
        raise BadRequestException("候选人信息不合法", data={"errors": [err["msg"] for err in e.errors()]})

    if await candidate_crud.get_by_email(db, candidate_in.email):
        raise ConflictException(f"邮箱已存在: {candidate_in.email}")

    job = None
    if selected_job_id:
        job = await job_crud.get(db, selected_job_id)
        if not job:
            raise NotFoundException(f"岗位不存在: {selected_job_id}")

    if not candidate_in.skills and job:
        candidate_in.skills = detect_skills(extraction.text, job.skill_list)

    candidate_in.resume_url = _save_resume(resume.filename or "resume", data)
    candidate = await candidate_crud.create(db, obj_in=candidate_in)

    if job:
        await application_crud.create(db, obj_in={
            "job_id": job.id,
            "candidate_id": candidate.id,
            "status": ApplicationStatus.APPLIED.value,
        })

    logger.info("候选人已创建: id={}, email={}, job={}", candidate.id, candidate.email, selected_job_id)
    return success_response(
        data=CandidateDetailResponse.model_validate(candidate).model_dump(),
        message="候选人创建成功"
    )


@router.post("/send-screening-email", summary="发送初筛问卷", response_model=DictResponse)
async def send_screening_email(
    data: ScreeningEmailRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    生成初筛问卷令牌并发送邮件，应聘申请状态变为 screening_sent
    """
    candidate = await _get_candidate_or_404(db, data.candidate_id)
    job = await job_crud.get(db, data.job_id)
    if not job:
        raise NotFoundException(f"岗位不存在: {data.job_id}")

    token = await screening_token_crud.issue(
        db, candidate_id=candidate.id, job_id=job.id, days=settings.screening_token_days
    )

    application = await application_crud.get_by_job_candidate(db, job.id, candidate.id)
    if application:
        await application_crud.set_status(
            db, db_obj=application, status=ApplicationStatus.SCREENING_SENT.value
        )
    else:
        await application_crud.create(db, obj_in={
            "job_id": job.id,
            "candidate_id": candidate.id,
            "status": ApplicationStatus.SCREENING_SENT.value,
        })

    sent = await email_service.send_content(
        candidate.email, screening_form_email(candidate.full_name, job.title, token.token)
    )
    return success_response(
        data={
            "token": token.token,
            "screening_url": public_link(f"screening/{token.token}"),
            "expires_at": token.expires_at.isoformat(),
            "email_sent": sent,
        },
        message="初筛问卷已发送" if sent else "初筛问卷已生成，邮件未发送"
    )


@router.get("/{candidate_id}", summary="获取候选人详情", response_model=ResponseModel[CandidateDetailResponse])
async def get_candidate(
    candidate_id: str,
    db: AsyncSession = Depends(get_db),
):
    candidate = await _get_candidate_or_404(db, candidate_id)
    return success_response(data=CandidateDetailResponse.model_validate(candidate).model_dump())


@router.patch("/{candidate_id}", summary="更新候选人", response_model=ResponseModel[CandidateDetailResponse])
async def update_candidate(
    candidate_id: str,
    data: CandidateUpdate,
    db: AsyncSession = Depends(get_db),
):
    candidate = await _get_candidate_or_404(db, candidate_id)

    if data.email and data.email != candidate.email:
        existing = await candidate_crud.get_by_email(db, data.email)
        if existing and existing.id != candidate.id:
            raise ConflictException(f"邮箱已存在: {data.email}")

    candidate = await candidate_crud.update(db, db_obj=candidate, obj_in=data)
    return success_response(
        data=CandidateDetailResponse.model_validate(candidate).model_dump(),
        message="候选人更新成功"
    )


@router.post("/{candidate_id}/archive", summary="归档候选人", response_model=ResponseModel[CandidateResponse])
async def archive_candidate(
    candidate_id: str,
    db: AsyncSession = Depends(get_db),
):
    candidate = await _get_candidate_or_404(db, candidate_id)
    candidate = await candidate_crud.archive(db, db_obj=candidate)
    return success_response(
        data=CandidateResponse.model_validate(candidate).model_dump(),
        message="候选人已归档"
    )


@router.post("/{candidate_id}/restore", summary="恢复候选人", response_model=ResponseModel[CandidateResponse])
async def restore_candidate(
    candidate_id: str,
    db: AsyncSession = Depends(get_db),
):
    candidate = await _get_candidate_or_404(db, candidate_id)
    candidate = await candidate_crud.restore(db, db_obj=candidate)
    return success_response(
        data=CandidateResponse.model_validate(candidate).model_dump(),
        message="候选人已恢复"
    )


@router.delete("/{candidate_id}", summary="删除候选人", response_model=MessageResponse)
async def delete_candidate(
    candidate_id: str,
    db: AsyncSession = Depends(get_db),
):
    """
    删除候选人（同时删除其应聘申请）
    """
    await _get_candidate_or_404(db, candidate_id)
    await candidate_crud.delete(db, id=candidate_id)
    return success_response(message="候选人删除成功")
