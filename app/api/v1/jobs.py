"""
岗位管理 API 路由
"""
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
)
from app.core.exceptions import NotFoundException, BadRequestException
from app.crud import job_crud
from app.models.base import utc_now
from app.models.job import (
    Job,
    JobStatus,
    JobCreate,
    JobUpdate,
    JobResponse,
    JobGenerateRequest,
    JobGenerateResponse,
    ARCHIVED_JOB_STATUSES,
    can_transition,
)
from app.services.agents import get_job_generator

router = APIRouter()


async def _list_jobs(db: AsyncSession, *, archived: bool, status: Optional[str], page: int, page_size: int):
    skip = (page - 1) * page_size
    jobs = await job_crud.get_list(db, archived=archived, status=status, skip=skip, limit=page_size)
    total = await job_crud.count_list(db, archived=archived, status=status)
    counts = await job_crud.application_counts(db, [j.id for j in jobs])

    items = []
    for job in jobs:
        item = JobResponse.model_validate(job)
        item.application_count = counts.get(job.id, 0)
        items.append(item.model_dump())
    return paged_response(items, total, page, page_size)


async def _get_job_or_404(db: AsyncSession, job_id: str) -> Job:
    job = await job_crud.get(db, job_id)
    if not job:
        raise NotFoundException(f"岗位不存在: {job_id}")
    return job


async def _job_response(db: AsyncSession, job: Job) -> dict:
    response = JobResponse.model_validate(job)
    counts = await job_crud.application_counts(db, [job.id])
    response.application_count = counts.get(job.id, 0)
    return response.model_dump()


@router.get("", summary="获取岗位列表", response_model=PagedResponseModel[JobResponse])
async def get_jobs(
    page: int = Query(1, ge=1, description="页码"),
    page_size: int = Query(20, ge=1, le=100, description="每页数量"),
    status: Optional[str] = Query(None, description="状态筛选（draft/active）"),
    db: AsyncSession = Depends(get_db),
):
    """
    获取在招岗位列表（草稿与招聘中），已关闭和已放弃的岗位见归档列表
    """
    return await _list_jobs(db, archived=False, status=status, page=page, page_size=page_size)


@router.get("/archived", summary="获取归档岗位", response_model=PagedResponseModel[JobResponse])
async def get_archived_jobs(
    page: int = Query(1, ge=1, description="页码"),
    page_size: int = Query(20, ge=1, le=100, description="每页数量"),
    db: AsyncSession = Depends(get_db),
):
    return await _list_jobs(db, archived=True, status=None, page=page, page_size=page_size)


@router.post("/generate-jd", summary="AI 生成岗位描述", response_model=ResponseModel[JobGenerateResponse])
async def generate_job_description(data: JobGenerateRequest):
    """
    根据岗位名称、部门、经验级别、技能生成 JD

    LLM 未配置或调用失败时使用模板生成
    """
    result = await get_job_generator().generate(data)
    return success_response(data=result.model_dump(), message="岗位描述生成成功")


@router.post("", summary="创建岗位", response_model=ResponseModel[JobResponse])
async def create_job(
    data: JobCreate,
    db: AsyncSession = Depends(get_db),
):
    job = await job_crud.create_job(db, obj_in=data)
    logger.info("岗位已创建: id={}, title={}, status={}", job.id, job.title, job.status)
    return success_response(data=await _job_response(db, job), message="岗位创建成功")


@router.get("/{job_id}", summary="获取岗位详情", response_model=ResponseModel[JobResponse])
async def get_job(
    job_id: str,
    db: AsyncSession = Depends(get_db),
):
    job = await _get_job_or_404(db, job_id)
    return success_response(data=await _job_response(db, job))


async def _update_job(db: AsyncSession, job_id: str, data: JobUpdate) -> dict:
    job = await _get_job_or_404(db, job_id)
    update_data = data.model_dump(exclude_unset=True)

    target = update_data.get("status")
    if target and target != job.status:
        if not can_transition(job.status, target):
            raise BadRequestException(f"岗位状态不能从 {job.status} 变更为 {target}")
        if target == JobStatus.DROPPED.value and not (data.drop_reason or "").strip():
            raise BadRequestException("放弃岗位时必须填写原因")
        if target in ARCHIVED_JOB_STATUSES:
            update_data["closed_at"] = utc_now()
        logger.info("岗位状态变更: id={}, {} -> {}", job.id, job.status, target)

    salary_min = update_data.get("salary_min", job.salary_min)
    salary_max = update_data.get("salary_max", job.salary_max)
    if salary_min is not None and salary_max is not None and salary_min > salary_max:
        raise BadRequestException("最低薪资不能高于最高薪资")

    job = await job_crud.update(db, db_obj=job, obj_in=update_data)
    return await _job_response(db, job)


@router.patch("/{job_id}", summary="更新岗位", response_model=ResponseModel[JobResponse])
async def update_job(
    job_id: str,
    data: JobUpdate,
    db: AsyncSession = Depends(get_db),
):
    """
    更新岗位信息

    状态只允许 draft→active、active→closed/dropped，已关闭或已放弃的岗位不可重新开放
    """
    return success_response(data=await _update_job(db, job_id, data), message="岗位更新成功")


@router.put("/{job_id}", summary="更新岗位（PUT）", response_model=ResponseModel[JobResponse])
async def replace_job(
    job_id: str,
    data: JobUpdate,
    db: AsyncSession = Depends(get_db),
):
    return success_response(data=await _update_job(db, job_id, data), message="岗位更新成功")


@router.delete("/{job_id}", summary="删除岗位", response_model=MessageResponse)
async def delete_job(
    job_id: str,
    db: AsyncSession = Depends(get_db),
):
    """
    删除岗位（同时删除关联的申请）
    """
    await _get_job_or_404(db, job_id)
    await job_crud.delete(db, id=job_id)
    return success_response(message="岗位删除成功")
