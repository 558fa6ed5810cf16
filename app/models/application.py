"""
应聘申请模型模块

Application 连接岗位和候选人，记录匹配得分并承载面试、初筛等流程状态
"""
from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import field_validator
from sqlmodel import Field, UniqueConstraint
from sqlalchemy import Column as SAColumn, String, ForeignKey

from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse, utc_now


class ApplicationStatus(str, Enum):
    """应聘申请状态枚举"""
    APPLIED = "applied"                          # 已投递
    SCREENING_SENT = "screening_sent"            # 已发送初筛问卷
    SCREENED = "screened"                        # 已初筛
    QUALIFIED = "qualified"                      # 初筛通过
    INTERVIEW_INVITED = "interview_invited"      # 已发面试邀请
    INTERVIEW_SCHEDULED = "interview_scheduled"  # 已预约面试
    INTERVIEWED = "interviewed"                  # 已面试
    TECHNICAL_ROUND = "technical_round"          # 技术面
    FINAL_ROUND = "final_round"                  # 终面
    OFFERED = "offered"                          # 已发 Offer
    HIRED = "hired"                              # 已录用
    REJECTED = "rejected"                        # 已拒绝


APPLICATION_STATUSES = [s.value for s in ApplicationStatus]


def _check_status(v: Optional[str]) -> Optional[str]:
    if v is not None and v not in APPLICATION_STATUSES:
        raise ValueError(f"未知申请状态: {v}")
    return v


# ==================== 表模型 ====================

class Application(TimestampMixin, IDMixin, SQLModelBase, table=True):
    """
    应聘申请表模型

    关联关系:
    - N:1 -> Job
    - N:1 -> Candidate
    - 1:N -> Interview / InterviewToken
    """
    __tablename__ = "applications"
    __table_args__ = (
        UniqueConstraint("job_id", "candidate_id", name="uq_application_job_candidate"),
    )

    job_id: str = Field(
        sa_column=SAColumn(String(36), ForeignKey("jobs.id", ondelete="CASCADE"), index=True, nullable=False),
        description="岗位ID"
    )
    candidate_id: str = Field(
        sa_column=SAColumn(String(36), ForeignKey("candidates.id", ondelete="CASCADE"), index=True, nullable=False),
        description="候选人ID"
    )

    status: str = Field(ApplicationStatus.APPLIED.value, index=True, description="申请状态")

    # 匹配结果
    matching_score: Optional[int] = Field(None, ge=0, le=100, description="综合匹配分")
    skills_match: Optional[int] = Field(None, ge=0, le=100, description="技能匹配分")
    experience_match: Optional[int] = Field(None, ge=0, le=100, description="经验匹配分")
    analysis: Optional[str] = Field(None, description="匹配分析")

    notes: Optional[str] = Field(None, description="备注信息")
    applied_at: datetime = Field(default_factory=utc_now, description="投递时间")
    hired_at: Optional[datetime] = Field(None, description="录用时间")

    def __repr__(self) -> str:
        return f"<Application(id={self.id}, status={self.status})>"


# ==================== 请求 Schema ====================

class ApplicationCreate(SQLModelBase):
    """创建应聘申请请求"""
    job_id: str = Field(..., description="岗位ID")
    candidate_id: str = Field(..., description="候选人ID")
    status: str = Field(ApplicationStatus.APPLIED.value, description="初始状态")
    notes: Optional[str] = None

    @field_validator("status")
    @classmethod
    def check_status(cls, v: str) -> str:
        return _check_status(v)


class ApplicationUpdate(SQLModelBase):
    """更新应聘申请请求"""
    status: Optional[str] = None
    notes: Optional[str] = None
    matching_score: Optional[int] = Field(None, ge=0, le=100)
    skills_match: Optional[int] = Field(None, ge=0, le=100)
    experience_match: Optional[int] = Field(None, ge=0, le=100)
    analysis: Optional[str] = None

    @field_validator("status")
    @classmethod
    def check_status(cls, v: Optional[str]) -> Optional[str]:
        return _check_status(v)


class AdvanceStageRequest(SQLModelBase):
    """推进录用阶段请求"""
    application_id: str
    new_status: str

    @field_validator("new_status")
    @classmethod
    def check_new_status(cls, v: str) -> str:
        return _check_status(v)


# ==================== 响应 Schema ====================

class ApplicationResponse(TimestampResponse):
    """应聘申请响应"""
    job_id: str
    candidate_id: str
    status: str
    matching_score: Optional[int]
    skills_match: Optional[int]
    experience_match: Optional[int]
    analysis: Optional[str]
    notes: Optional[str]
    applied_at: datetime
    hired_at: Optional[datetime]

    # 关联信息（由 API 填充）
    candidate_name: Optional[str] = None
    candidate_email: Optional[str] = None
    job_title: Optional[str] = None


class MatchResult(SQLModelBase):
    """简历-岗位匹配结果"""
    matching_score: int = Field(..., ge=0, le=100)
    skills_match: int = Field(..., ge=0, le=100)
    experience_match: int = Field(..., ge=0, le=100)
    analysis: str = ""
