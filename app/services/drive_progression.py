"""
招聘会晋级流程

第一轮（能力测试）达标者进入第二轮（技术测试），第二轮达标者进入
第三轮 AI 视频面试。进入面试时为招聘会候选人建立候选人档案与应聘申请，
签发面试预约令牌并发送邀请邮件。
"""
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.crud import (
    application_crud,
    candidate_crud,
    drive_candidate_crud,
    interview_crud,
    interview_token_crud,
)
from app.models.application import Application, ApplicationStatus
from app.models.base import utc_now
from app.models.candidate import Candidate
from app.models.drive import (
    DriveCandidate,
    DriveSession,
    QualificationStatus,
    RegistrationStatus,
)
from app.models.interview import InterviewStatus, InterviewType
from app.services.drive_evaluator import INTERVIEW_ROUND
from app.services.email_service import email_service, drive_interview_email, technical_round_email

TECHNICAL_ROUND = 2
AI_INTERVIEW_DURATION = 30


def _percent(score) -> str:
    return "-" if score is None else f"{score}%"


async def advance_to_technical_round(
    db: AsyncSession,
    session: DriveSession,
    candidate: DriveCandidate,
) -> bool:
    """进入第二轮并发送技术测试通知，返回邮件是否发送成功"""
    sent = await email_service.send_content(
        candidate.email,
        technical_round_email(candidate.name, session.name, candidate.aptitude_score, session.technical_cutoff),
    )
    await drive_candidate_crud.update(db, db_obj=candidate, obj_in={"current_round": TECHNICAL_ROUND})
    return sent


async def _candidate_profile(db: AsyncSession, candidate: DriveCandidate) -> Candidate:
    """按邮箱复用候选人档案，没有时新建"""
    profile = await candidate_crud.get_by_email(db, candidate.email)
    if profile:
        return profile
    first_name, _, last_name = candidate.name.strip().partition(" ")
    return await candidate_crud.create(db, obj_in={
        "first_name": first_name or candidate.name,
        "last_name": last_name.strip(),
        "email": candidate.email.lower(),
        "phone": candidate.phone,
    })


async def _drive_application(
    db: AsyncSession,
    session: DriveSession,
    candidate: DriveCandidate,
    profile: Candidate,
) -> Application:
    application = await application_crud.get_by_job_candidate(db, session.job_id, profile.id)
    if application:
        return application
    return await application_crud.create(db, obj_in={
        "job_id": session.job_id,
        "candidate_id": profile.id,
        "status": ApplicationStatus.INTERVIEW_SCHEDULED.value,
        "notes": (
            f"Drive recruitment candidate - Aptitude: {_percent(candidate.aptitude_score)}, "
            f"Technical: {_percent(candidate.technical_score)}"
        ),
    })


async def schedule_ai_interview(
    db: AsyncSession,
    session: DriveSession,
    candidate: DriveCandidate,
) -> bool:
    """
    为招聘会候选人安排 AI 视频面试

    建立候选人档案和应聘申请（已存在时复用），创建面试记录并签发
    面试预约令牌，候选人进入第三轮。返回邀请邮件是否发送成功。
    """
    profile = await _candidate_profile(db, candidate)
    application = await _drive_application(db, session, candidate, profile)

    interview = await interview_crud.create(db, obj_in={
        "application_id": application.id,
        "type": InterviewType.AI_VIDEO.value,
        "scheduled_at": utc_now(),
        "duration": AI_INTERVIEW_DURATION,
        "status": InterviewStatus.SCHEDULED.value,
        "interviewer_notes": "AI Video Interview - Drive Recruitment",
    })
    token = await interview_token_crud.issue(
        db, application_id=application.id, days=settings.interview_token_days
    )

    await drive_candidate_crud.update(db, db_obj=candidate, obj_in={
        "current_round": INTERVIEW_ROUND,
        "registration_status": RegistrationStatus.INTERVIEW_SCHEDULED.value,
        "interview_scheduled": True,
        "qualification_status": QualificationStatus.QUALIFIED.value,
    })

    sent = await email_service.send_content(
        candidate.email,
        drive_interview_email(
            candidate.name, session.name, candidate.aptitude_score, candidate.technical_score, token.token
        ),
    )
    logger.info(
        "招聘会面试已安排: drive={}, candidate={}, interview={}, email_sent={}",
        session.id, candidate.email, interview.id, sent,
    )
    return sent
