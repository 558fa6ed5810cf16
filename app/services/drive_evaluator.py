"""
招聘会统计、晋级判定与候选人筛选导出
"""
import csv
import io
from typing import Iterable, List, Optional

from app.models.drive import (
    DriveCandidate,
    DriveSession,
    QualificationStatus,
    RegistrationStatus,
)

INTERVIEW_ROUND = 3
SELECTED_STATUSES = (RegistrationStatus.SELECTED.value, RegistrationStatus.HIRED.value)


def qualification_for(
    aptitude_score: Optional[int],
    technical_score: Optional[int],
    aptitude_cutoff: int,
    technical_cutoff: int,
) -> Optional[str]:
    """
    按分数线判定晋级状态

    两项成绩都有时须同时达标；只有能力测试成绩时只看能力测试；
    都没有时返回 None（保持原状态）
    """
    if aptitude_score is not None and technical_score is not None:
        passed = aptitude_score >= aptitude_cutoff and technical_score >= technical_cutoff
    elif aptitude_score is not None:
        passed = aptitude_score >= aptitude_cutoff
    else:
        return None
    return QualificationStatus.QUALIFIED.value if passed else QualificationStatus.NOT_QUALIFIED.value


def session_stats(session: DriveSession, candidates: Iterable[DriveCandidate]) -> dict:
    """招聘会各环节人数"""
    candidates = list(candidates)
    aptitude = [c.aptitude_score for c in candidates if c.aptitude_score is not None]
    technical = [c.technical_score for c in candidates if c.technical_score is not None]
    return {
        "total_candidates": len(candidates),
        "registered_candidates": sum(
            1 for c in candidates if c.registration_status != RegistrationStatus.PENDING.value
        ),
        "aptitude_completed": len(aptitude),
        "aptitude_qualified": sum(1 for s in aptitude if s >= session.aptitude_cutoff),
        "technical_completed": len(technical),
        "technical_qualified": sum(1 for s in technical if s >= session.technical_cutoff),
        "interview_scheduled": sum(
            1 for c in candidates
            if c.current_round == INTERVIEW_ROUND
            or c.registration_status == RegistrationStatus.INTERVIEW_SCHEDULED.value
        ),
        "final_selected": sum(1 for c in candidates if c.registration_status in SELECTED_STATUSES),
    }


def ready_for_technical_round(session: DriveSession, candidates: Iterable[DriveCandidate]) -> List[DriveCandidate]:
    """第一轮达到能力测试分数线、尚未进入第二轮的候选人"""
    return [
        c for c in candidates
        if c.current_round == 1
        and c.aptitude_score is not None
        and c.aptitude_score >= session.aptitude_cutoff
    ]


def ready_for_interview(session: DriveSession, candidates: Iterable[DriveCandidate]) -> List[DriveCandidate]:
    """第二轮达到技术测试分数线、尚未安排面试的候选人"""
    return [
        c for c in candidates
        if c.current_round == 2
        and not c.interview_scheduled
        and c.technical_score is not None
        and c.technical_score >= session.technical_cutoff
    ]


def _in_range(score: Optional[int], low: Optional[int], high: Optional[int]) -> bool:
    if low is None and high is None:
        return True
    if score is None:
        return False
    return (low is None or score >= low) and (high is None or score <= high)


def filter_candidates(
    candidates: Iterable[DriveCandidate],
    *,
    min_aptitude: Optional[int] = None,
    max_aptitude: Optional[int] = None,
    min_technical: Optional[int] = None,
    max_technical: Optional[int] = None,
    qualification_status: Optional[str] = None,
    registration_status: Optional[str] = None,
) -> List[DriveCandidate]:
    """
    按成绩区间与状态筛选

    指定了某项成绩的区间时，没有该项成绩的候选人被排除
    """
    return [
        c for c in candidates
        if _in_range(c.aptitude_score, min_aptitude, max_aptitude)
        and _in_range(c.technical_score, min_technical, max_technical)
        and (not qualification_status or c.qualification_status == qualification_status)
        and (not registration_status or c.registration_status == registration_status)
    ]


CSV_HEADERS = [
    "Name", "Email", "Phone", "College", "Aptitude Score", "Technical Score", "Status", "Qualification",
]


def candidates_csv(candidates: Iterable[DriveCandidate]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_HEADERS)
    for c in candidates:
        writer.writerow([
            c.name,
            c.email,
            c.phone or "",
            c.college or "",
            "" if c.aptitude_score is None else c.aptitude_score,
            "" if c.technical_score is None else c.technical_score,
            c.registration_status,
            c.qualification_status,
        ])
    return buffer.getvalue()
