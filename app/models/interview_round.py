"""
面试轮次模型模块 - SQLModel 版本

岗位预设的面试流程（第几轮、类型、时长、通过分数等），
安排面试时按轮次配置生成面试记录
"""
from datetime import datetime
from typing import Optional, List
from pydantic import field_validator
from sqlmodel import Field, Column, JSON
from sqlalchemy import Column as SAColumn, String, ForeignKey

from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse
from .interview import InterviewType, InterviewFormat, _check_choice


# ==================== 表模型 ====================

class InterviewRound(TimestampMixin, IDMixin, SQLModelBase, table=True):
    """面试轮次表模型"""
    __tablename__ = "interview_rounds"

    job_id: str = Field(
        sa_column=SAColumn(String(36), ForeignKey("jobs.id", ondelete="CASCADE"), index=True, nullable=False),
        description="岗位ID"
    )
    round_number: int = Field(..., ge=1, description="轮次序号")
    title: str = Field(..., max_length=200, description="名称，如 1st Technical Round")
    type: str = Field(InterviewType.TECHNICAL.value, description="面试类型")
    duration: int = Field(60, ge=1, description="时长（分钟）")
    format: str = Field(InterviewFormat.VIDEO_CALL.value, description="面试形式")
    required_score: int = Field(70, ge=0, le=100, description="通过分数")
    interviewer_role: Optional[str] = Field(None, max_length=100, description="面试官角色")
    interviewer_email: Optional[str] = Field(None, max_length=255, description="指定面试官邮箱")
    question_types: List[str] = Field(default_factory=list, sa_column=Column(JSON), description="问题类型")
    evaluation_criteria: List[str] = Field(default_factory=list, sa_column=Column(JSON), description="评估要点")
    is_active: bool = Field(True, description="是否启用")


# ==================== 请求 Schema ====================

class InterviewRoundCreate(SQLModelBase):
    """创建面试轮次请求"""
    job_id: str
    round_number: int = Field(..., ge=1)
    title: str = Field(..., min_length=1, max_length=200)
    type: str = InterviewType.TECHNICAL.value
    duration: int = Field(60, ge=1, le=480)
    format: str = InterviewFormat.VIDEO_CALL.value
    required_score: int = Field(70, ge=0, le=100)
    interviewer_role: Optional[str] = None
    interviewer_email: Optional[str] = None
    question_types: List[str] = Field(default_factory=list)
    evaluation_criteria: List[str] = Field(default_factory=list)
    is_active: bool = True

    @field_validator("type")
    @classmethod
    def check_type(cls, v: str) -> str:
        return _check_choice(v, InterviewType, "type")

    @field_validator("format")
    @classmethod
    def check_format(cls, v: str) -> str:
        return _check_choice(v, InterviewFormat, "format")


class InterviewRoundUpdate(SQLModelBase):
    """更新面试轮次请求"""
    round_number: Optional[int] = Field(None, ge=1)
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    type: Optional[str] = None
    duration: Optional[int] = Field(None, ge=1, le=480)
    format: Optional[str] = None
    required_score: Optional[int] = Field(None, ge=0, le=100)
    interviewer_role: Optional[str] = None
    interviewer_email: Optional[str] = None
    question_types: Optional[List[str]] = None
    evaluation_criteria: Optional[List[str]] = None
    is_active: Optional[bool] = None

    @field_validator("type")
    @classmethod
    def check_type(cls, v: Optional[str]) -> Optional[str]:
        return _check_choice(v, InterviewType, "type")

    @field_validator("format")
    @classmethod
    def check_format(cls, v: Optional[str]) -> Optional[str]:
        return _check_choice(v, InterviewFormat, "format")


class RoundScheduleRequest(SQLModelBase):
    """按轮次安排面试"""
    application_id: str
    scheduled_at: datetime
    notes: Optional[str] = None


# ==================== 响应 Schema ====================

class InterviewRoundResponse(TimestampResponse):
    """面试轮次响应"""
    job_id: str
    round_number: int
    title: str
    type: str
    duration: int
    format: str
    required_score: int
    interviewer_role: Optional[str]
    interviewer_email: Optional[str]
    question_types: List[str]
    evaluation_criteria: List[str]
    is_active: bool
