"""
仪表盘 API 路由
"""
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.response import success_response, ResponseModel
from app.models.dashboard import DashboardMetrics, ActivityItem
from app.services import dashboard

router = APIRouter()


@router.get("/metrics", summary="获取招聘指标", response_model=ResponseModel[DashboardMetrics])
async def get_metrics(db: AsyncSession = Depends(get_db)):
    """
    总申请数、已安排面试数、达标候选人数（匹配分不低于阈值）、平均录用天数
    """
    metrics = await dashboard.get_metrics(db)
    return success_response(data=metrics.model_dump())


@router.get("/activities", summary="获取近期动态", response_model=ResponseModel[List[ActivityItem]])
async def get_activities(db: AsyncSession = Depends(get_db)):
    activities = await dashboard.get_recent_activities(db)
    return success_response(data=[a.model_dump() for a in activities])
