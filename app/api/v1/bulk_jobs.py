"""
批量简历筛选 API 路由

上传一批简历文件，针对指定岗位逐份解析、打分，生成批量候选人；
HR 入围后可一键加入候选人库并发送初筛问卷
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Form, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.core.config import settings
from app.core.database import get_db
from app.core.progress_cache import progress_cache
from app.core.response import (
    success_response,
    paged_response,
    ResponseModel,
    PagedResponseModel,
    DictResponse,
)
from app.core.exceptions import NotFoundException, BadRequestException
from app.crud import (
    bulk_job_crud,
    bulk_candidate_crud,
    job_crud,
    candidate_crud,
    application_crud,
    screening_token_crud,
    setting_crud,
)
from app.models.application import ApplicationStatus
from app.models.bulk import (
    BulkJob,
    BulkJobStatus,
    BulkJobResponse,
    BulkCandidateResponse,
    ShortlistRequest,
)
from app.services.bulk_processor import run_bulk_job
from app.services.email_service import email_service, screening_form_email
from .applications import CLAUDE_KEY_SETTING

router = APIRouter()


async def _get_bulk_job_or_404(db: AsyncSession, bulk_job_id: str) -> BulkJob:
    bulk_job = await bulk_job_crud.get(db, bulk_job_id)
    if not bulk_job:
        raise NotFoundException(f"批量任务不存在: {bulk_job_id}")
    return bulk_job


async def _to_response(db: AsyncSession, bulk_job: BulkJob) -> dict:
    response = BulkJobResponse.model_validate(bulk_job)
    job = await job_crud.get(db, bulk_job.job_id)
    response.job_title = job.title if job else None
    return response.model_dump()


@router.get("", summary="获取批量任务列表", response_model=PagedResponseModel[BulkJobResponse])
async def get_bulk_jobs(
    page: int = Query(1, ge=1, description="页码"),
    page_size: int = Query(20, ge=1, le=100, description="每页数量"),
    db: AsyncSession = Depends(get_db),
):
    skip = (page - 1) * page_size
    bulk_jobs = await bulk_job_crud.get_multi(db, skip=skip, limit=page_size)
    total = await bulk_job_crud.count(db)
    items = [await _to_response(db, b) for b in bulk_jobs]
    return paged_response(items, total, page, page_size)


@router.post("", summary="上传简历并批量筛选", response_model=ResponseModel[BulkJobResponse])
async def create_bulk_job(
    job_id: str = Form(..., description="目标岗位ID"),
    started_by: Optional[str] = Form(None, description="发起人"),
    resumes: Optional[List[UploadFile]] = File(None, description="简历文件，最多 50 份"),
    db: AsyncSession = Depends(get_db),
):
    """
    批量筛选简历

    请求内同步处理全部文件：有 Claude 密钥时使用 AI 匹配，否则使用规则匹配。
    单个文件失败只计入已处理数，不中断整个任务。
    """
    if not resumes:
        raise BadRequestException("请至少上传一份简历")
    if len(resumes) > settings.max_bulk_files:
        raise BadRequestException(f"单次最多上传 {settings.max_bulk_files} 份简历")

    job = await job_crud.get(db, job_id)
    if not job:
        raise NotFoundException(f"岗位不存在: {job_id}")

    files = [(f.filename or "resume", await f.read()) for f in resumes]
    bulk_job = await bulk_job_crud.create(db, obj_in={
        "job_id": job.id,
        "total_files": len(files),
        "status": BulkJobStatus.PROCESSING.value,
        "started_by": started_by,
    })
    logger.info("批量筛选开始: bulk_job_id={}, job={}, files={}", bulk_job.id, job.id, len(files))

    api_key = await setting_crud.get_value(db, CLAUDE_KEY_SETTING, settings.anthropic_api_key)
    bulk_job = await run_bulk_job(db, bulk_job, job, files, api_key=api_key or None)

    return success_response(data=await _to_response(db, bulk_job), message="批量筛选完成")


@router.get("/{bulk_job_id}", summary="获取批量任务详情", response_model=ResponseModel[BulkJobResponse])
async def get_bulk_job(
    bulk_job_id: str,
    db: AsyncSession = Depends(get_db),
):
    bulk_job = await _get_bulk_job_or_404(db, bulk_job_id)
    return success_response(data=await _to_response(db, bulk_job))


@router.get("/{bulk_job_id}/progress", summary="获取批量任务进度", response_model=DictResponse)
async def get_bulk_job_progress(
    bulk_job_id: str,
    db: AsyncSession = Depends(get_db),
):
    """
    优先读取内存进度缓存，缓存中没有时按数据库记录计算
    """
    bulk_job = await _get_bulk_job_or_404(db, bulk_job_id)
    cached = progress_cache.get(bulk_job_id)
    if cached:
        data = cached.to_dict()
    else:
        total = bulk_job.total_files
        processed = bulk_job.processed_files
        data = {
            "total": total,
            "processed": processed,
            "qualified": bulk_job.qualified_candidates,
            "current_file": "",
            "progress": int(processed / total * 100) if total else 0,
        }
    data["status"] = bulk_job.status
    return success_response(data=data)


@router.get("/{bulk_job_id}/candidates", summary="获取批量候选人", response_model=ResponseModel[List[BulkCandidateResponse]])
async def get_bulk_candidates(
    bulk_job_id: str,
    min_score: Optional[int] = Query(None, ge=0, le=100, description="最低匹配分"),
    db: AsyncSession = Depends(get_db),
):
    """按匹配分从高到低返回"""
    await _get_bulk_job_or_404(db, bulk_job_id)
    candidates = await bulk_candidate_crud.get_by_bulk_job(db, bulk_job_id, min_score=min_score)
    return success_response(
        data=[BulkCandidateResponse.model_validate(c).model_dump() for c in candidates]
    )


@router.post("/{bulk_job_id}/shortlist", summary="设置入围名单", response_model=DictResponse)
async def shortlist_candidates(
    bulk_job_id: str,
    data: ShortlistRequest,
    db: AsyncSession = Depends(get_db),
):
    """指定的候选人入围，本任务内其余候选人取消入围"""
    await _get_bulk_job_or_404(db, bulk_job_id)
    shortlisted = await bulk_candidate_crud.set_shortlist(db, bulk_job_id, data.candidate_ids)
    return success_response(data={"shortlisted": shortlisted}, message="入围名单已更新")


@router.post("/{bulk_job_id}/add-to-main-list", summary="入围候选人加入候选人库", response_model=DictResponse)
async def add_to_main_list(
    bulk_job_id: str,
    db: AsyncSession = Depends(get_db),
):
    """
    将入围且尚未加入的候选人写入候选人库并创建应聘申请

    没有邮箱的候选人跳过；邮箱已存在时复用已有候选人
    """
    bulk_job = await _get_bulk_job_or_404(db, bulk_job_id)
    shortlisted = await bulk_candidate_crud.get_by_bulk_job(db, bulk_job_id, shortlisted_only=True)

    added = 0
    skipped = 0
    for bulk_candidate in shortlisted:
        if bulk_candidate.added_to_main_list:
            continue
        if not bulk_candidate.email:
            skipped += 1
            continue

        candidate = await candidate_crud.get_by_email(db, bulk_candidate.email)
        if not candidate:
            candidate = await candidate_crud.create(db, obj_in={
                "first_name": bulk_candidate.first_name or "Unknown",
                "last_name": bulk_candidate.last_name,
                "email": bulk_candidate.email.lower(),
                "phone": bulk_candidate.phone,
                "skills": bulk_candidate.skills or [],
                "experience": bulk_candidate.experience,
                "resume_text": bulk_candidate.resume_text,
            })

        if not await application_crud.get_by_job_candidate(db, bulk_job.job_id, candidate.id):
            await application_crud.create(db, obj_in={
                "job_id": bulk_job.job_id,
                "candidate_id": candidate.id,
                "status": ApplicationStatus.APPLIED.value,
                "matching_score": bulk_candidate.matching_score,
                "skills_match": bulk_candidate.skills_match,
                "experience_match": bulk_candidate.experience_match,
                "analysis": bulk_candidate.analysis,
            })

        await bulk_candidate_crud.update(db, db_obj=bulk_candidate, obj_in={
            "added_to_main_list": True,
            "candidate_id": candidate.id,
        })
        added += 1

    logger.info("批量候选人加入候选人库: bulk_job_id={}, added={}, skipped={}", bulk_job_id, added, skipped)
    return success_response(
        data={"added": added, "skipped": skipped},
        message=f"已加入 {added} 名候选人"
    )


@router.post("/{bulk_job_id}/send-screening-emails", summary="向入围候选人发送初筛问卷", response_model=DictResponse)
async def send_screening_emails(
    bulk_job_id: str,
    db: AsyncSession = Depends(get_db),
):
    """
    仅处理已加入候选人库的入围候选人
    """
    bulk_job = await _get_bulk_job_or_404(db, bulk_job_id)
    job = await job_crud.get(db, bulk_job.job_id)
    if not job:
        raise NotFoundException(f"岗位不存在: {bulk_job.job_id}")

    shortlisted = await bulk_candidate_crud.get_by_bulk_job(db, bulk_job_id, shortlisted_only=True)
    tokens = 0
    sent = 0
    for bulk_candidate in shortlisted:
        if not bulk_candidate.added_to_main_list or not bulk_candidate.candidate_id:
            continue
        candidate = await candidate_crud.get(db, bulk_candidate.candidate_id)
        if not candidate:
            continue

        token = await screening_token_crud.issue(
            db, candidate_id=candidate.id, job_id=job.id, days=settings.screening_token_days
        )
        tokens += 1
        application = await application_crud.get_by_job_candidate(db, job.id, candidate.id)
        if application:
            await application_crud.set_status(
                db, db_obj=application, status=ApplicationStatus.SCREENING_SENT.value
            )
        if await email_service.send_content(
            candidate.email, screening_form_email(candidate.full_name, job.title, token.token)
        ):
            sent += 1

    return success_response(
        data={"tokens_created": tokens, "emails_sent": sent},
        message=f"已生成 {tokens} 份初筛问卷"
    )
