"""
面试模型模块 - SQLModel 版本

包含面试记录与候选人自助预约使用的面试令牌
"""
from datetime import datetime, date, time
from enum import Enum
from typing import Optional, List
from pydantic import field_validator
from sqlmodel import Field, Column, JSON
from sqlalchemy import Column as SAColumn, String, ForeignKey

from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse


class InterviewType(str, Enum):
    """面试类型"""
    SCREENING = "screening"
    TECHNICAL = "technical"
    HR = "hr"
    FINAL = "final"
    AI_VIDEO = "ai_video"


class InterviewFormat(str, Enum):
    """面试形式"""
    VIDEO_CALL = "video_call"
    PHONE = "phone"
    IN_PERSON = "in_person"


class InterviewStatus(str, Enum):
    """面试状态"""
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"
    AI_INTERVIEW_LAUNCHED = "ai_interview_launched"


def _check_choice(v: Optional[str], enum_cls, label: str) -> Optional[str]:
    values = [e.value for e in enum_cls]
    if v is not None and v not in values:
        raise ValueError(f"{label} 必须是 {values} 之一")
    return v


# ==================== 表模型 ====================

class Interview(TimestampMixin, IDMixin, SQLModelBase, table=True):
    """面试表模型"""
    __tablename__ = "interviews"

    application_id: str = Field(
        sa_column=SAColumn(String(36), ForeignKey("applications.id", ondelete="CASCADE"), index=True, nullable=False),
        description="应聘申请ID"
    )
    type: str = Field(InterviewType.SCREENING.value, description="面试类型")
    round_number: int = Field(1, ge=1, description="面试轮次")
    round_id: Optional[str] = Field(
        default=None,
        sa_column=SAColumn(String(36), ForeignKey("interview_rounds.id", ondelete="SET NULL"), index=True, nullable=True),
        description="面试轮次ID"
    )
    scheduled_at: Optional[datetime] = Field(None, index=True, description="面试时间")
    duration: int = Field(60, ge=1, description="时长（分钟）")
    format: str = Field(InterviewFormat.VIDEO_CALL.value, description="面试形式")
    meeting_url: Optional[str] = Field(None, max_length=500, description="会议链接")
    interview_link: Optional[str] = Field(None, max_length=500, description="AI 面试登录链接")
    interviewer_email: Optional[str] = Field(None, max_length=255, description="面试官邮箱")
    interviewer_notes: Optional[str] = Field(None, description="面试官备注")
    status: str = Field(InterviewStatus.SCHEDULED.value, index=True, description="面试状态")
    transcript: Optional[str] = Field(None, description="面试记录")
    ai_analysis: Optional[dict] = Field(default=None, sa_column=Column(JSON), description="AI 分析结果")
    started_at: Optional[datetime] = Field(None, description="开始时间")
    completed_at: Optional[datetime] = Field(None, description="结束时间")

    def __repr__(self) -> str:
        return f"<Interview(id={self.id}, type={self.type}, status={self.status})>"


class InterviewToken(TimestampMixin, IDMixin, SQLModelBase, table=True):
    """候选人自助预约面试令牌"""
    __tablename__ = "interview_tokens"

    token: str = Field(..., max_length=64, unique=True, index=True, description="令牌")
    application_id: str = Field(
        sa_column=SAColumn(String(36), ForeignKey("applications.id", ondelete="CASCADE"), index=True, nullable=False),
        description="应聘申请ID"
    )
    expires_at: datetime = Field(..., description="过期时间")
    used: bool = Field(False, description="是否已使用")


# ==================== 请求 Schema ====================

class InterviewCreate(SQLModelBase):
    """创建面试请求"""
    application_id: str
    type: str = InterviewType.SCREENING.value
    round_number: int = Field(1, ge=1)
    scheduled_at: Optional[datetime] = None
    duration: int = Field(60, ge=1, le=480)
    format: str = InterviewFormat.VIDEO_CALL.value
    meeting_url: Optional[str] = None
    interviewer_email: Optional[str] = None
    interviewer_notes: Optional[str] = None

    @field_validator("type")
    @classmethod
    def check_type(cls, v: str) -> str:
        return _check_choice(v, InterviewType, "type")

    @field_validator("format")
    @classmethod
    def check_format(cls, v: str) -> str:
        return _check_choice(v, InterviewFormat, "format")


class InterviewUpdate(SQLModelBase):
    """更新面试请求"""
    type: Optional[str] = None
    round_number: Optional[int] = Field(None, ge=1)
    scheduled_at: Optional[datetime] = None
    duration: Optional[int] = Field(None, ge=1, le=480)
    format: Optional[str] = None
    meeting_url: Optional[str] = None
    interviewer_email: Optional[str] = None
    interviewer_notes: Optional[str] = None
    status: Optional[str] = None
    transcript: Optional[str] = None

    @field_validator("type")
    @classmethod
    def check_type(cls, v: Optional[str]) -> Optional[str]:
        return _check_choice(v, InterviewType, "type")

    @field_validator("format")
    @classmethod
    def check_format(cls, v: Optional[str]) -> Optional[str]:
        return _check_choice(v, InterviewFormat, "format")

    @field_validator("status")
    @classmethod
    def check_status(cls, v: Optional[str]) -> Optional[str]:
        return _check_choice(v, InterviewStatus, "status")


class InterviewScheduleRequest(SQLModelBase):
    """按候选人安排面试（HR 操作）"""
    candidate_id: str
    job_id: Optional[str] = Field(None, description="候选人有多个申请时指定岗位")
    scheduled_at: datetime
    type: str = InterviewType.SCREENING.value
    duration: int = Field(60, ge=1, le=480)
    format: str = InterviewFormat.VIDEO_CALL.value
    meeting_url: Optional[str] = None
    interviewer_email: Optional[str] = None
    interviewer_notes: Optional[str] = None

    @field_validator("type")
    @classmethod
    def check_type(cls, v: str) -> str:
        return _check_choice(v, InterviewType, "type")


class TokenScheduleRequest(SQLModelBase):
    """候选人通过令牌自助预约"""
    scheduled_date: date
    scheduled_time: time


class GenerateQuestionsRequest(SQLModelBase):
    """生成面试问题请求"""
    job_id: str
    total_questions: int = Field(8, ge=1, le=30)
    custom_questions: List[str] = Field(default_factory=list)


# ==================== 响应 Schema ====================

class InterviewResponse(TimestampResponse):
    """面试响应"""
    application_id: str
    type: str
    round_number: int
    round_id: Optional[str] = None
    scheduled_at: Optional[datetime]
    duration: int
    format: str
    meeting_url: Optional[str]
    interview_link: Optional[str]
    interviewer_email: Optional[str] = None
    interviewer_notes: Optional[str]
    status: str
    transcript: Optional[str]
    ai_analysis: Optional[dict] = None
    started_at: Optional[datetime]
    completed_at: Optional[datetime]

    # 关联信息（由 API 填充）
    candidate_id: Optional[str] = None
    candidate_name: Optional[str] = None
    candidate_email: Optional[str] = None
    job_id: Optional[str] = None
    job_title: Optional[str] = None


class InterviewTokenResponse(SQLModelBase):
    """面试令牌响应"""
    token: str
    application_id: str
    expires_at: datetime
    used: bool
    schedule_url: Optional[str] = None
