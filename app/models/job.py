"""
岗位模型模块 - SQLModel 版本

合并了 Model 和 Schema，减少代码重复
"""
from datetime import datetime
from enum import Enum
from typing import Optional, List
from pydantic import field_validator, model_validator
from sqlmodel import Field

from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse


class JobStatus(str, Enum):
    """岗位状态枚举"""
    DRAFT = "draft"        # 草稿
    ACTIVE = "active"      # 招聘中
    CLOSED = "closed"      # 已关闭
    DROPPED = "dropped"    # 已放弃


class WorkType(str, Enum):
    """办公方式"""
    REMOTE = "remote"
    ONSITE = "onsite"
    HYBRID = "hybrid"


# 允许的状态流转，终态不可再变更
JOB_STATUS_TRANSITIONS = {
    JobStatus.DRAFT.value: [JobStatus.ACTIVE.value],
    JobStatus.ACTIVE.value: [JobStatus.CLOSED.value, JobStatus.DROPPED.value],
    JobStatus.CLOSED.value: [],
    JobStatus.DROPPED.value: [],
}

ARCHIVED_JOB_STATUSES = [JobStatus.CLOSED.value, JobStatus.DROPPED.value]


def can_transition(current: str, target: str) -> bool:
    """判断岗位状态能否从 current 变为 target（保持原状态视为允许）"""
    if current == target:
        return True
    return target in JOB_STATUS_TRANSITIONS.get(current, [])


def _check_work_type(v: Optional[str]) -> Optional[str]:
    if v is not None and v not in [w.value for w in WorkType]:
        raise ValueError(f"work_type 必须是 {[w.value for w in WorkType]} 之一")
    return v


# ==================== 基础字段定义 ====================

class JobBase(SQLModelBase):
    """岗位基础字段 - 用于创建和继承"""
    title: str = Field(..., min_length=1, max_length=200, description="岗位名称", index=True)
    department: Optional[str] = Field(None, max_length=100, description="所属部门")
    description: Optional[str] = Field(None, description="岗位描述/JD")
    requirements: Optional[str] = Field(None, description="任职要求")
    skills: Optional[str] = Field(None, description="技能要求，逗号或分号分隔")
    experience_level: Optional[str] = Field(None, max_length=50, description="经验级别")
    location: Optional[str] = Field(None, max_length=100, description="工作地点")
    work_type: str = Field(WorkType.ONSITE.value, max_length=20, description="办公方式")
    positions: int = Field(1, ge=1, description="招聘人数")
    salary_min: Optional[int] = Field(None, ge=0, description="最低薪资")
    salary_max: Optional[int] = Field(None, ge=0, description="最高薪资")


# ==================== 表模型 ====================

class Job(JobBase, TimestampMixin, IDMixin, table=True):
    """岗位表模型"""
    __tablename__ = "jobs"

    status: str = Field(default=JobStatus.DRAFT.value, index=True, description="岗位状态")
    drop_reason: Optional[str] = Field(None, description="放弃原因")
    closed_at: Optional[datetime] = Field(None, description="关闭/放弃时间")

    @property
    def skill_list(self) -> List[str]:
        """拆分后的技能列表"""
        if not self.skills:
            return []
        parts = self.skills.replace(";", ",").split(",")
        return [s.strip() for s in parts if s.strip()]

    def __repr__(self) -> str:
        return f"<Job(id={self.id}, title={self.title}, status={self.status})>"


# ==================== 请求 Schema ====================

class JobCreate(JobBase):
    """创建岗位请求"""
    status: str = Field(JobStatus.DRAFT.value, description="初始状态，仅允许 draft 或 active")

    @field_validator("status")
    @classmethod
    def check_initial_status(cls, v: str) -> str:
        if v not in (JobStatus.DRAFT.value, JobStatus.ACTIVE.value):
            raise ValueError("新建岗位只能是 draft 或 active 状态")
        return v

    @field_validator("work_type")
    @classmethod
    def check_work_type(cls, v: str) -> str:
        return _check_work_type(v)

    @model_validator(mode="after")
    def check_salary_range(self):
        if self.salary_min is not None and self.salary_max is not None and self.salary_min > self.salary_max:
            raise ValueError("最低薪资不能高于最高薪资")
        return self


class JobUpdate(SQLModelBase):
    """更新岗位请求 - 所有字段可选"""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    department: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    requirements: Optional[str] = None
    skills: Optional[str] = None
    experience_level: Optional[str] = Field(None, max_length=50)
    location: Optional[str] = Field(None, max_length=100)
    work_type: Optional[str] = None
    positions: Optional[int] = Field(None, ge=1)
    salary_min: Optional[int] = Field(None, ge=0)
    salary_max: Optional[int] = Field(None, ge=0)
    status: Optional[str] = None
    drop_reason: Optional[str] = None

    @field_validator("status")
    @classmethod
    def check_status(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in JOB_STATUS_TRANSITIONS:
            raise ValueError(f"未知岗位状态: {v}")
        return v

    @field_validator("work_type")
    @classmethod
    def check_work_type(cls, v: Optional[str]) -> Optional[str]:
        return _check_work_type(v)


class JobGenerateRequest(SQLModelBase):
    """AI 生成 JD 请求"""
    title: str = Field(..., min_length=1, max_length=200)
    department: Optional[str] = None
    work_type: Optional[str] = None
    experience_level: Optional[str] = None
    skills: Optional[str] = None
    location: Optional[str] = None
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None


# ==================== 响应 Schema ====================

class JobResponse(TimestampResponse):
    """岗位详情响应"""
    title: str
    department: Optional[str]
    description: Optional[str]
    requirements: Optional[str]
    skills: Optional[str]
    experience_level: Optional[str]
    location: Optional[str]
    work_type: str
    positions: int
    salary_min: Optional[int]
    salary_max: Optional[int]
    status: str
    drop_reason: Optional[str]
    closed_at: Optional[datetime]
    application_count: int = Field(0, description="申请数量")


class JobGenerateResponse(SQLModelBase):
    """AI 生成 JD 结果"""
    description: str
    requirements: str
    benefits: str
    generated_by: str = Field("template", description="llm 或 template")
