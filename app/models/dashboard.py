"""
仪表盘响应 Schema
"""
from datetime import datetime
from enum import Enum

from .base import SQLModelBase


class ActivityTone(str, Enum):
    """动态的情感倾向（前端据此着色）"""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class DashboardMetrics(SQLModelBase):
    """招聘关键指标"""
    total_applications: int = 0
    interviews_scheduled: int = 0
    qualified_candidates: int = 0
    avg_time_to_hire: float = 0


class ActivityItem(SQLModelBase):
    """近期动态"""
    id: str
    message: str
    candidate: str
    position: str
    time: str
    status: str = ActivityTone.NEUTRAL.value
    occurred_at: datetime
