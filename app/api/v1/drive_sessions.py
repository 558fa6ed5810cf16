"""
招聘会（校园招聘 / 现场招聘）API 路由
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.core.database import get_db
from app.core.response import success_response, ResponseModel, MessageResponse, DictResponse
from app.core.exceptions import NotFoundException
from app.crud import drive_session_crud, drive_candidate_crud, job_crud
from app.models.drive import (
    DriveSession,
    DriveSessionCreate,
    DriveSessionStatsResponse,
    DriveCandidateResponse,
    CutoffUpdate,
    BulkScheduleRequest,
)
from app.services import drive_progression
from app.services.drive_evaluator import (
    qualification_for,
    session_stats,
    ready_for_technical_round,
    ready_for_interview,
    filter_candidates,
    candidates_csv,
)
from app.services.email_service import email_service, drive_registration_email

router = APIRouter()


async def _get_session_or_404(db: AsyncSession, session_id: str) -> DriveSession:
    session = await drive_session_crud.get(db, session_id)
    if not session:
        raise NotFoundException(f"招聘会不存在: {session_id}")
    return session


async def _with_stats(db: AsyncSession, session: DriveSession) -> dict:
    candidates = await drive_candidate_crud.get_by_session(db, session.id)
    job = await job_crud.get(db, session.job_id)
    response = DriveSessionStatsResponse.model_validate(session)
    data = response.model_dump()
    data.update(session_stats(session, candidates))
    data["job_title"] = job.title if job else None
    return data


@router.get("", summary="获取招聘会列表（含统计）", response_model=ResponseModel[List[DriveSessionStatsResponse]])
async def get_drive_sessions(db: AsyncSession = Depends(get_db)):
    sessions = await drive_session_crud.get_multi(db, limit=1000)
    return success_response(data=[await _with_stats(db, s) for s in sessions])


@router.post("", summary="创建招聘会并导入候选人", response_model=ResponseModel[DriveSessionStatsResponse])
async def create_drive_session(
    data: DriveSessionCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    创建招聘会，为每位候选人生成报名令牌并发送报名邮件

    同一招聘会内重复的邮箱只导入一次
    """
    if not await job_crud.get(db, data.job_id):
        raise NotFoundException(f"岗位不存在: {data.job_id}")

    session = await drive_session_crud.create(db, obj_in=data.model_dump(exclude={"candidates"}))

    seen = set()
    sent = 0
    for candidate_in in data.candidates:
        if candidate_in.email in seen:
            continue
        seen.add(candidate_in.email)
        candidate = await drive_candidate_crud.create_for_session(
            db, drive_session_id=session.id, obj_in=candidate_in
        )
        if await email_service.send_content(
            candidate.email,
            drive_registration_email(candidate.name, session.name, candidate.registration_token),
        ):
            sent += 1

    session = await drive_session_crud.update(db, db_obj=session, obj_in={"total_candidates": len(seen)})
    logger.info("招聘会已创建: id={}, candidates={}, emails_sent={}", session.id, len(seen), sent)
    return success_response(data=await _with_stats(db, session), message="招聘会创建成功")


@router.get("/{session_id}", summary="获取招聘会详情", response_model=ResponseModel[DriveSessionStatsResponse])
async def get_drive_session(
    session_id: str,
    db: AsyncSession = Depends(get_db),
):
    session = await _get_session_or_404(db, session_id)
    return success_response(data=await _with_stats(db, session))


@router.delete("/{session_id}", summary="删除招聘会", response_model=MessageResponse)
async def delete_drive_session(
    session_id: str,
    db: AsyncSession = Depends(get_db),
):
    """删除招聘会及其候选人"""
    await _get_session_or_404(db, session_id)
    await drive_session_crud.delete(db, id=session_id)
    return success_response(message="招聘会删除成功")


@router.put("/{session_id}/cutoffs", summary="更新分数线并重新判定晋级", response_model=DictResponse)
async def update_cutoffs(
    session_id: str,
    data: CutoffUpdate,
    db: AsyncSession = Depends(get_db),
):
    session = await _get_session_or_404(db, session_id)
    session = await drive_session_crud.update(db, db_obj=session, obj_in=data)

    updated = 0
    for candidate in await drive_candidate_crud.get_by_session(db, session.id):
        status = qualification_for(
            candidate.aptitude_score,
            candidate.technical_score,
            session.aptitude_cutoff,
            session.technical_cutoff,
        )
        if status and status != candidate.qualification_status:
            await drive_candidate_crud.update(db, db_obj=candidate, obj_in={"qualification_status": status})
            updated += 1

    return success_response(
        data={"session": await _with_stats(db, session), "candidates_updated": updated},
        message=f"分数线已更新，{updated} 名候选人的晋级状态已重新计算"
    )


@router.post("/{session_id}/send-next-round", summary="通知第一轮达标者进入技术测试", response_model=DictResponse)
async def send_next_round(
    session_id: str,
    db: AsyncSession = Depends(get_db),
):
    """
    能力测试达到分数线且仍在第一轮的候选人进入第二轮，并发送技术测试通知
    """
    session = await _get_session_or_404(db, session_id)
    qualified = ready_for_technical_round(session, await drive_candidate_crud.get_by_session(db, session.id))

    sent = 0
    for candidate in qualified:
        if await drive_progression.advance_to_technical_round(db, session, candidate):
            sent += 1

    logger.info("第二轮通知: drive={}, qualified={}, emails_sent={}", session.id, len(qualified), sent)
    return success_response(
        data={"emails_sent": sent, "total_qualified": len(qualified)},
        message=f"{len(qualified)} 名候选人进入技术测试"
    )


@router.post("/{session_id}/schedule-interviews", summary="为第二轮达标者安排 AI 面试", response_model=DictResponse)
async def schedule_interviews(
    session_id: str,
    db: AsyncSession = Depends(get_db),
):
    """
    技术测试达到分数线、仍在第二轮且尚未安排面试的候选人进入 AI 视频面试
    """
    session = await _get_session_or_404(db, session_id)
    qualified = ready_for_interview(session, await drive_candidate_crud.get_by_session(db, session.id))

    sent = 0
    for candidate in qualified:
        if await drive_progression.schedule_ai_interview(db, session, candidate):
            sent += 1

    return success_response(
        data={"interviews_scheduled": len(qualified), "total_qualified": len(qualified), "emails_sent": sent},
        message=f"已为 {len(qualified)} 名候选人安排 AI 面试"
    )


@router.post("/{session_id}/bulk-schedule-interviews", summary="为选定候选人安排 AI 面试", response_model=DictResponse)
async def bulk_schedule_interviews(
    session_id: str,
    data: BulkScheduleRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    不看分数线，直接为选定候选人安排面试

    不属于该招聘会或已安排面试的候选人计入 errors
    """
    session = await _get_session_or_404(db, session_id)

    scheduled = 0
    sent = 0
    errors = []
    for candidate_id in data.candidate_ids:
        candidate = await drive_candidate_crud.get(db, candidate_id)
        if not candidate or candidate.drive_session_id != session.id:
            errors.append(f"Candidate {candidate_id} not found")
            continue
        if candidate.interview_scheduled:
            errors.append(f"Candidate {candidate.name} already has interview scheduled")
            continue
        if await drive_progression.schedule_ai_interview(db, session, candidate):
            sent += 1
        scheduled += 1

    return success_response(
        data={
            "interviews_scheduled": scheduled,
            "total_requested": len(data.candidate_ids),
            "emails_sent": sent,
            "errors": errors,
        },
        message=f"已安排 {scheduled} 场面试，{len(errors)} 个错误"
    )


@router.get("/{session_id}/candidates/filtered", summary="筛选招聘会候选人（可导出 CSV）")
async def get_filtered_candidates(
    session_id: str,
    min_aptitude_score: Optional[int] = Query(None, ge=0, le=100),
    max_aptitude_score: Optional[int] = Query(None, ge=0, le=100),
    min_technical_score: Optional[int] = Query(None, ge=0, le=100),
    max_technical_score: Optional[int] = Query(None, ge=0, le=100),
    qualification_status: Optional[str] = Query(None, description="晋级状态"),
    registration_status: Optional[str] = Query(None, description="报名状态"),
    export: Optional[str] = Query(None, description="csv 时返回 CSV 文件"),
    db: AsyncSession = Depends(get_db),
):
    session = await _get_session_or_404(db, session_id)
    filters = {
        "min_aptitude": min_aptitude_score,
        "max_aptitude": max_aptitude_score,
        "min_technical": min_technical_score,
        "max_technical": max_technical_score,
        "qualification_status": qualification_status,
        "registration_status": registration_status,
    }
    candidates = filter_candidates(await drive_candidate_crud.get_by_session(db, session.id), **filters)

    if export == "csv":
        headers = {"Content-Disposition": f'attachment; filename="drive-candidates-{session.id}.csv"'}
        return StreamingResponse(iter([candidates_csv(candidates)]), media_type="text/csv", headers=headers)

    return success_response(data={
        "candidates": [DriveCandidateResponse.model_validate(c).model_dump() for c in candidates],
        "count": len(candidates),
        "filters": filters,
    })
