"""
API v1 路由模块
"""
from . import (
    jobs,
    candidates,
    applications,
    interviews,
    interview_tokens,
    interview_rounds,
    evaluations,
    hiring,
    bulk_jobs,
    screening,
    drive_sessions,
    drive_candidates,
    drive_register,
    dashboard,
    settings,
    email,
    webhook,
)

__all__ = [
    "jobs",
    "candidates",
    "applications",
    "interviews",
    "interview_tokens",
    "interview_rounds",
    "evaluations",
    "hiring",
    "bulk_jobs",
    "screening",
    "drive_sessions",
    "drive_candidates",
    "drive_register",
    "dashboard",
    "settings",
    "email",
    "webhook",
]
