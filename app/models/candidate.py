"""
候选人模型模块 - SQLModel 版本
"""
from datetime import datetime
from typing import Optional, List, Dict, Any
from pydantic import field_validator
from sqlmodel import Field, Column, JSON

from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse


def _check_email(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip().lower()
    if "@" not in v or v.startswith("@") or v.endswith("@"):
        raise ValueError("邮箱格式不正确")
    return v


# ==================== 基础字段定义 ====================

class CandidateBase(SQLModelBase):
    """候选人基础字段"""
    first_name: str = Field(..., min_length=1, max_length=100, description="名")
    last_name: str = Field("", max_length=100, description="姓")
    email: str = Field(..., max_length=255, description="邮箱")
    phone: Optional[str] = Field(None, max_length=50, description="手机号")
    location: Optional[str] = Field(None, max_length=100, description="当前所在地")
    location_preference: Optional[str] = Field(None, max_length=100, description="期望工作地")
    position: Optional[str] = Field(None, max_length=200, description="当前职位")
    experience: int = Field(0, ge=0, description="工作年限")
    current_ctc: Optional[str] = Field(None, max_length=50, description="当前薪资")
    expected_ctc: Optional[str] = Field(None, max_length=50, description="期望薪资")
    notice_period: Optional[str] = Field(None, max_length=50, description="离职通知期")
    willing_to_relocate: bool = Field(False, description="是否愿意搬迁")


# ==================== 表模型 ====================

class Candidate(CandidateBase, TimestampMixin, IDMixin, table=True):
    """候选人表模型"""
    __tablename__ = "candidates"

    email: str = Field(..., max_length=255, unique=True, index=True, description="邮箱")
    skills: List[str] = Field(default_factory=list, sa_column=Column(JSON), description="技能列表")
    resume_url: Optional[str] = Field(None, max_length=500, description="简历文件路径")
    resume_text: Optional[str] = Field(None, description="简历文本")
    screening_responses: Optional[Dict[str, Any]] = Field(
        default=None, sa_column=Column(JSON), description="初筛问卷回答"
    )
    archived_at: Optional[datetime] = Field(None, index=True, description="归档时间")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return f"<Candidate(id={self.id}, email={self.email})>"


# ==================== 请求 Schema ====================

class CandidateCreate(CandidateBase):
    """创建候选人（由表单字段组装）"""
    skills: List[str] = Field(default_factory=list)
    resume_url: Optional[str] = None
    resume_text: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _check_email(v)


class CandidateUpdate(SQLModelBase):
    """更新候选人请求"""
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = None
    location: Optional[str] = None
    location_preference: Optional[str] = None
    position: Optional[str] = None
    skills: Optional[List[str]] = None
    experience: Optional[int] = Field(None, ge=0)
    current_ctc: Optional[str] = None
    expected_ctc: Optional[str] = None
    notice_period: Optional[str] = None
    willing_to_relocate: Optional[bool] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v: Optional[str]) -> Optional[str]:
        return _check_email(v)


class ScreeningEmailRequest(SQLModelBase):
    """发送初筛问卷邮件请求"""
    candidate_id: str
    job_id: str


# ==================== 响应 Schema ====================

class CandidateResponse(TimestampResponse):
    """候选人详情响应"""
    first_name: str
    last_name: str
    email: str
    phone: Optional[str]
    location: Optional[str]
    location_preference: Optional[str]
    position: Optional[str]
    skills: List[str] = []
    experience: int
    current_ctc: Optional[str]
    expected_ctc: Optional[str]
    notice_period: Optional[str]
    willing_to_relocate: bool
    resume_url: Optional[str]
    screening_responses: Optional[Dict[str, Any]] = None
    archived_at: Optional[datetime]


class CandidateDetailResponse(CandidateResponse):
    """候选人详情（含简历文本）"""
    resume_text: Optional[str] = None
