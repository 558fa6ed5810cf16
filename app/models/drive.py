"""
招聘会（校园招聘 / 现场招聘）模型模块 - SQLModel 版本
"""
from datetime import datetime
from enum import Enum
from typing import Optional, List
from pydantic import field_validator
from sqlmodel import Field
from sqlalchemy import Column as SAColumn, String, ForeignKey

from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse


class DriveType(str, Enum):
    """招聘会类型"""
    WALK_IN = "walk-in"
    CAMPUS = "campus"


class DriveSessionStatus(str, Enum):
    """招聘会状态"""
    DRAFT = "draft"
    ACTIVE = "active"
    COMPLETED = "completed"


class RegistrationStatus(str, Enum):
    """报名状态"""
    PENDING = "pending"
    REGISTERED = "registered"
    TEST_COMPLETED = "test_completed"
    INTERVIEW_SCHEDULED = "interview_scheduled"
    SELECTED = "selected"
    HIRED = "hired"
    REJECTED = "rejected"


class QualificationStatus(str, Enum):
    """晋级状态"""
    PENDING = "pending"
    QUALIFIED = "qualified"
    NOT_QUALIFIED = "not_qualified"


# ==================== 表模型 ====================

class DriveSession(TimestampMixin, IDMixin, SQLModelBase, table=True):
    """招聘会表模型"""
    __tablename__ = "drive_sessions"

    name: str = Field(..., max_length=200, description="名称")
    type: str = Field(DriveType.CAMPUS.value, description="类型")
    job_id: str = Field(
        sa_column=SAColumn(String(36), ForeignKey("jobs.id", ondelete="CASCADE"), index=True, nullable=False),
        description="岗位ID"
    )
    description: Optional[str] = Field(None, description="说明")
    aptitude_cutoff: int = Field(60, ge=0, le=100, description="能力测试分数线")
    technical_cutoff: int = Field(70, ge=0, le=100, description="技术测试分数线")
    test_duration: int = Field(60, ge=1, description="测试时长（分钟）")
    question_count: int = Field(50, ge=1, description="题目数量")
    total_candidates: int = Field(0, ge=0, description="候选人总数")
    status: str = Field(DriveSessionStatus.ACTIVE.value, index=True, description="状态")


class DriveCandidate(TimestampMixin, IDMixin, SQLModelBase, table=True):
    """招聘会候选人表模型"""
    __tablename__ = "drive_candidates"

    drive_session_id: str = Field(
        sa_column=SAColumn(String(36), ForeignKey("drive_sessions.id", ondelete="CASCADE"), index=True, nullable=False),
        description="招聘会ID"
    )
    name: str = Field(..., max_length=200)
    email: str = Field(..., max_length=255, index=True)
    phone: Optional[str] = Field(None, max_length=50)
    college: Optional[str] = Field(None, max_length=200)
    registration_token: str = Field(..., max_length=64, unique=True, index=True, description="报名令牌")
    registration_status: str = Field(RegistrationStatus.PENDING.value, index=True)
    registered_at: Optional[datetime] = None
    aptitude_score: Optional[int] = Field(None, ge=0, le=100)
    technical_score: Optional[int] = Field(None, ge=0, le=100)
    current_round: int = Field(1, ge=1)
    qualification_status: str = Field(QualificationStatus.PENDING.value)
    interview_scheduled: bool = Field(False)


# ==================== 请求 Schema ====================

class DriveCandidateInput(SQLModelBase):
    """创建招聘会时导入的候选人"""
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., max_length=255)
    phone: Optional[str] = None
    college: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("邮箱格式不正确")
        return v


class DriveSessionCreate(SQLModelBase):
    """创建招聘会请求"""
    name: str = Field(..., min_length=1, max_length=200)
    type: str = DriveType.CAMPUS.value
    job_id: str
    description: Optional[str] = None
    aptitude_cutoff: int = Field(60, ge=0, le=100)
    technical_cutoff: int = Field(70, ge=0, le=100)
    test_duration: int = Field(60, ge=1)
    question_count: int = Field(50, ge=1)
    candidates: List[DriveCandidateInput] = Field(default_factory=list)

    @field_validator("type")
    @classmethod
    def check_type(cls, v: str) -> str:
        values = [t.value for t in DriveType]
        if v not in values:
            raise ValueError(f"type 必须是 {values} 之一")
        return v


class CutoffUpdate(SQLModelBase):
    """更新分数线请求"""
    aptitude_cutoff: int = Field(..., ge=0, le=100)
    technical_cutoff: int = Field(..., ge=0, le=100)


class DriveCandidateUpdate(SQLModelBase):
    """更新招聘会候选人"""
    name: Optional[str] = None
    phone: Optional[str] = None
    college: Optional[str] = None
    registration_status: Optional[str] = None
    aptitude_score: Optional[int] = Field(None, ge=0, le=100)
    technical_score: Optional[int] = Field(None, ge=0, le=100)
    current_round: Optional[int] = Field(None, ge=1)
    qualification_status: Optional[str] = None
    interview_scheduled: Optional[bool] = None

    @field_validator("registration_status")
    @classmethod
    def check_registration_status(cls, v: Optional[str]) -> Optional[str]:
        values = [s.value for s in RegistrationStatus]
        if v is not None and v not in values:
            raise ValueError(f"registration_status 必须是 {values} 之一")
        return v

    @field_validator("qualification_status")
    @classmethod
    def check_qualification_status(cls, v: Optional[str]) -> Optional[str]:
        values = [s.value for s in QualificationStatus]
        if v is not None and v not in values:
            raise ValueError(f"qualification_status 必须是 {values} 之一")
        return v


class BulkScheduleRequest(SQLModelBase):
    """为选定的招聘会候选人安排面试"""
    candidate_ids: List[str] = Field(..., min_length=1)


class DriveRegistration(SQLModelBase):
    """候选人报名提交的个人信息"""
    name: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=50)
    college: Optional[str] = Field(None, max_length=200)


# ==================== 响应 Schema ====================

class DriveSessionResponse(TimestampResponse):
    """招聘会响应"""
    name: str
    type: str
    job_id: str
    description: Optional[str]
    aptitude_cutoff: int
    technical_cutoff: int
    test_duration: int
    question_count: int
    total_candidates: int
    status: str


class DriveSessionStatsResponse(DriveSessionResponse):
    """招聘会响应（含统计）"""
    job_title: Optional[str] = None
    registered_candidates: int = 0
    aptitude_completed: int = 0
    aptitude_qualified: int = 0
    technical_completed: int = 0
    technical_qualified: int = 0
    interview_scheduled: int = 0
    final_selected: int = 0


class DriveCandidateResponse(TimestampResponse):
    """招聘会候选人响应"""
    drive_session_id: str
    name: str
    email: str
    phone: Optional[str]
    college: Optional[str]
    registration_token: str
    registration_status: str
    registered_at: Optional[datetime]
    aptitude_score: Optional[int]
    technical_score: Optional[int]
    current_round: int
    qualification_status: str
    interview_scheduled: bool
