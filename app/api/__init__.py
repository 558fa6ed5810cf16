"""
API 路由模块

api_router 挂载在 /api/v1；入站邮件 webhook_router 挂载在 /webhook
"""
from fastapi import APIRouter

from .v1 import (
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

# (路由, 前缀, 文档分组)
V1_ROUTES = [
    (dashboard.router, "/dashboard", "仪表盘"),
    (jobs.router, "/jobs", "岗位管理"),
    (candidates.router, "/candidates", "候选人管理"),
    (applications.router, "/applications", "应聘申请"),
    (interviews.router, "/interviews", "面试管理"),
    (interview_tokens.router, "/interview-tokens", "面试预约"),
    (interview_rounds.router, "/interview-rounds", "面试轮次"),
    (evaluations.router, "/evaluations", "面试评估"),
    (hiring.router, "/hiring", "录用流程"),
    (bulk_jobs.router, "/bulk-jobs", "批量筛选"),
    (screening.router, "/screening", "初筛问卷"),
    (drive_sessions.router, "/drive-sessions", "招聘会"),
    (drive_candidates.router, "/drive-candidates", "招聘会"),
    (drive_register.router, "/drive/register", "招聘会报名"),
    (settings.router, "/settings", "组织设置"),
    (email.router, "/email", "邮件"),
]

api_router = APIRouter()
for router, prefix, tag in V1_ROUTES:
    api_router.include_router(router, prefix=prefix, tags=[tag])

webhook_router = APIRouter()
webhook_router.include_router(webhook.router, tags=["Webhook"])
