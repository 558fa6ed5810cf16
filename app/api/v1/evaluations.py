"""
面试评估 API 路由
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.response import (
    success_response,
    paged_response,
    ResponseModel,
    PagedResponseModel,
    DictResponse,
)
from app.core.exceptions import NotFoundException
from app.crud import evaluation_crud, interview_crud
from app.crud.evaluation import EvaluationRow
from app.models.evaluation import (
    EvaluationCreate,
    EvaluationResponse,
    ResponseEvaluationRequest,
    ResponseEvaluationResult,
)
from app.services.agents import get_interview_assist_agent

router = APIRouter()


def _to_response(row: EvaluationRow, with_interview: bool = False) -> dict:
    evaluation, interview, candidate, job = row
    response = EvaluationResponse.model_validate(evaluation)
    response.candidate_name = candidate.full_name
    response.job_id = job.id
    response.job_title = job.title
    response.interview_type = interview.type
    data = response.model_dump()
    if with_interview:
        data["interview"] = {
            "id": interview.id,
            "type": interview.type,
            "status": interview.status,
            "scheduled_at": interview.scheduled_at,
            "completed_at": interview.completed_at,
        }
        data["candidate"] = {
            "id": candidate.id,
            "name": candidate.full_name,
            "email": candidate.email,
            "position": candidate.position,
        }
        data["job"] = {
            "id": job.id,
            "title": job.title,
            "department": job.department,
        }
    return data


@router.get("", summary="获取评估列表", response_model=PagedResponseModel[EvaluationResponse])
async def get_evaluations(
    page: int = Query(1, ge=1, description="页码"),
    page_size: int = Query(20, ge=1, le=100, description="每页数量"),
    job_id: Optional[str] = Query(None, description="岗位ID"),
    recommendation: Optional[str] = Query(None, description="录用建议"),
    db: AsyncSession = Depends(get_db),
):
    skip = (page - 1) * page_size
    rows = await evaluation_crud.get_list(
        db, job_id=job_id, recommendation=recommendation, skip=skip, limit=page_size
    )
    total = await evaluation_crud.count_list(db, job_id=job_id, recommendation=recommendation)
    return paged_response([_to_response(r) for r in rows], total, page, page_size)


@router.post("", summary="创建评估", response_model=ResponseModel[EvaluationResponse])
async def create_evaluation(
    data: EvaluationCreate,
    db: AsyncSession = Depends(get_db),
):
    if not await interview_crud.get(db, data.interview_id):
        raise NotFoundException(f"面试不存在: {data.interview_id}")

    evaluation = await evaluation_crud.create(db, obj_in=data)
    row = await evaluation_crud.get_detail(db, evaluation.id)
    return success_response(data=_to_response(row), message="评估创建成功")


@router.post("/evaluate-response", summary="AI 评估单题回答", response_model=ResponseModel[ResponseEvaluationResult])
async def evaluate_response(data: ResponseEvaluationRequest):
    """
    对候选人的单个回答打分（1-10），LLM 不可用时使用启发式评分
    """
    result = await get_interview_assist_agent().evaluate_response(data)
    return success_response(data=result.model_dump())


@router.get("/{evaluation_id}", summary="获取评估详情", response_model=DictResponse)
async def get_evaluation(
    evaluation_id: str,
    db: AsyncSession = Depends(get_db),
):
    row = await evaluation_crud.get_detail(db, evaluation_id)
    if not row:
        raise NotFoundException(f"评估不存在: {evaluation_id}")
    return success_response(data=_to_response(row, with_interview=True))
