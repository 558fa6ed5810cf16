"""
初筛问卷令牌模型模块 - SQLModel 版本
"""
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any
from pydantic import field_validator
from sqlmodel import Field, Column, JSON
from sqlalchemy import Column as SAColumn, String, ForeignKey

from .base import SQLModelBase, TimestampMixin, IDMixin


class ScreeningStatus(str, Enum):
    """问卷状态"""
    PENDING = "pending"
    COMPLETED = "completed"
    EXPIRED = "expired"


# ==================== 表模型 ====================

class ScreeningToken(TimestampMixin, IDMixin, SQLModelBase, table=True):
    """初筛问卷令牌表模型"""
    __tablename__ = "screening_tokens"

    token: str = Field(..., max_length=50, unique=True, index=True, description="令牌")
    candidate_id: str = Field(
        sa_column=SAColumn(String(36), ForeignKey("candidates.id", ondelete="CASCADE"), index=True, nullable=False),
        description="候选人ID"
    )
    job_id: str = Field(
        sa_column=SAColumn(String(36), ForeignKey("jobs.id", ondelete="CASCADE"), index=True, nullable=False),
        description="岗位ID"
    )
    status: str = Field(ScreeningStatus.PENDING.value, index=True, description="状态")
    responses: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON), description="问卷回答")
    score: Optional[int] = Field(None, description="问卷得分")
    submitted_at: Optional[datetime] = Field(None, description="提交时间")
    expires_at: datetime = Field(..., description="过期时间")


# ==================== 请求 Schema ====================

class ScreeningSubmission(SQLModelBase):
    """
    初筛问卷提交内容

    years_of_experience 取值: 0-1 / 2-3 / 4-5 / 6-8 / 9-12 / 13+
    available_to_start 取值: immediately / 1-2-weeks / 3-4-weeks / 1-2-months / 其他
    """
    model_config = {
        "from_attributes": True,
        "populate_by_name": True,
        "str_strip_whitespace": True,
        "extra": "allow",
    }

    years_of_experience: Optional[str] = Field(None, alias="yearsOfExperience")
    expected_salary: Optional[float] = Field(None, alias="expectedSalary")
    available_to_start: Optional[str] = Field(None, alias="availableToStart")
    has_required_skills: bool = Field(False, alias="hasRequiredSkills")
    notes: Optional[str] = None

    @field_validator("expected_salary", mode="before")
    @classmethod
    def parse_salary(cls, v):
        if isinstance(v, str):
            v = v.replace(",", "").strip()
            return v or None
        return v


# ==================== 响应 Schema ====================

class ScreeningResult(SQLModelBase):
    """问卷评估结果"""
    qualified: bool
    score: int
    max_score: int
    percentage: float
    message: str = ""
