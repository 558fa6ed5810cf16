"""
仪表盘指标与近期动态
"""
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.crud import application_crud, interview_crud
from app.models.application import ApplicationStatus
from app.models.base import utc_now
from app.models.dashboard import ActivityItem, ActivityTone, DashboardMetrics
from app.models.interview import InterviewStatus

ACTIVITY_WINDOW_DAYS = 30
ACTIVITY_LIMIT = 10

POSITIVE = ActivityTone.POSITIVE.value
NEGATIVE = ActivityTone.NEGATIVE.value
NEUTRAL = ActivityTone.NEUTRAL.value

# 申请状态 -> (动态文案, 倾向)
APPLICATION_ACTIVITIES = {
    ApplicationStatus.APPLIED.value: ("Applied for position", NEUTRAL),
    ApplicationStatus.SCREENING_SENT.value: ("Screening form sent", NEUTRAL),
    ApplicationStatus.SCREENED.value: ("Completed screening", POSITIVE),
    ApplicationStatus.QUALIFIED.value: ("Qualified after screening", POSITIVE),
    ApplicationStatus.INTERVIEW_INVITED.value: ("Interview invitation sent", POSITIVE),
    ApplicationStatus.INTERVIEW_SCHEDULED.value: ("Interview scheduled", POSITIVE),
    ApplicationStatus.INTERVIEWED.value: ("Interview completed", POSITIVE),
    ApplicationStatus.TECHNICAL_ROUND.value: ("Moved to technical round", POSITIVE),
    ApplicationStatus.FINAL_ROUND.value: ("Moved to final round", POSITIVE),
    ApplicationStatus.OFFERED.value: ("Offer extended", POSITIVE),
    ApplicationStatus.HIRED.value: ("Hired!", POSITIVE),
    ApplicationStatus.REJECTED.value: ("Application rejected", NEGATIVE),
}

INTERVIEW_ACTIVITIES = {
    InterviewStatus.SCHEDULED.value: ("Interview scheduled", POSITIVE),
    InterviewStatus.COMPLETED.value: ("Interview completed", POSITIVE),
    InterviewStatus.NO_SHOW.value: ("Interview no-show", NEGATIVE),
    InterviewStatus.CANCELLED.value: ("Interview cancelled", NEGATIVE),
}


def format_time_ago(moment: datetime, now: Optional[datetime] = None) -> str:
    """相对时间描述，如 "3 days ago"；未来时间统一显示 Upcoming"""
    seconds = int(((now or utc_now()) - moment).total_seconds())
    if seconds < 0:
        return "Upcoming"
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24
    for value, unit in ((days, "day"), (hours, "hour"), (minutes, "minute")):
        if value > 0:
            return f"{value} {unit}{'s' if value > 1 else ''} ago"
    return "Just now"


def average_days_to_hire(pairs) -> float:
    """(投递时间, 录用时间) 列表的平均天数，保留一位小数"""
    durations = [(hired - applied).total_seconds() / 86400 for applied, hired in pairs]
    if not durations:
        return 0
    return round(sum(durations) / len(durations), 1)


async def get_metrics(db: AsyncSession) -> DashboardMetrics:
    hired = await application_crud.get_hired(db)
    return DashboardMetrics(
        total_applications=await application_crud.count(db),
        interviews_scheduled=await interview_crud.count_by_status(db, InterviewStatus.SCHEDULED.value),
        qualified_candidates=await application_crud.count_qualified(db, settings.qualification_threshold),
        avg_time_to_hire=average_days_to_hire((a.applied_at, a.hired_at) for a in hired),
    )


async def get_recent_activities(db: AsyncSession, now: Optional[datetime] = None) -> List[ActivityItem]:
    """最近 30 天的投递与面试动态，按时间倒序取前 10 条"""
    now = now or utc_now()
    since = now - timedelta(days=ACTIVITY_WINDOW_DAYS)
    activities: List[ActivityItem] = []

    for application, candidate, job in await application_crud.get_recent(db, since=since, limit=ACTIVITY_LIMIT):
        message, tone = APPLICATION_ACTIVITIES.get(application.status, ("Status updated", NEUTRAL))
        activities.append(ActivityItem(
            id=f"app-{application.id}",
            message=message,
            candidate=candidate.full_name,
            position=job.title,
            time=format_time_ago(application.applied_at, now),
            status=tone,
            occurred_at=application.applied_at,
        ))

    for interview, _, candidate, job in await interview_crud.get_recent(db, since=since, limit=ACTIVITY_LIMIT):
        message, tone = INTERVIEW_ACTIVITIES.get(interview.status, ("Interview status updated", NEUTRAL))
        activities.append(ActivityItem(
            id=f"interview-{interview.id}",
            message=message,
            candidate=candidate.full_name,
            position=job.title,
            time=format_time_ago(interview.scheduled_at, now),
            status=tone,
            occurred_at=interview.scheduled_at,
        ))

    activities.sort(key=lambda a: a.occurred_at, reverse=True)
    return activities[:ACTIVITY_LIMIT]
