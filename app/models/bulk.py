"""
批量简历筛选模型模块 - SQLModel 版本
"""
from datetime import datetime
from enum import Enum
from typing import Optional, List
from sqlmodel import Field, Column, JSON
from sqlalchemy import Column as SAColumn, String, ForeignKey

from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse


class BulkJobStatus(str, Enum):
    """批量任务状态"""
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


# ==================== 表模型 ====================

class BulkJob(TimestampMixin, IDMixin, SQLModelBase, table=True):
    """批量筛选任务表模型"""
    __tablename__ = "bulk_jobs"

    job_id: str = Field(
        sa_column=SAColumn(String(36), ForeignKey("jobs.id", ondelete="CASCADE"), index=True, nullable=False),
        description="目标岗位ID"
    )
    total_files: int = Field(0, ge=0, description="上传文件数")
    processed_files: int = Field(0, ge=0, description="已处理文件数")
    qualified_candidates: int = Field(0, ge=0, description="达标人数")
    status: str = Field(BulkJobStatus.PROCESSING.value, index=True, description="任务状态")
    started_by: Optional[str] = Field(None, max_length=100, description="发起人")
    error_message: Optional[str] = Field(None, description="错误信息")
    completed_at: Optional[datetime] = Field(None, description="完成时间")


class BulkCandidate(TimestampMixin, IDMixin, SQLModelBase, table=True):
    """批量筛选中解析出的候选人"""
    __tablename__ = "bulk_candidates"

    bulk_job_id: str = Field(
        sa_column=SAColumn(String(36), ForeignKey("bulk_jobs.id", ondelete="CASCADE"), index=True, nullable=False),
        description="批量任务ID"
    )
    file_name: str = Field(..., max_length=255, description="原始文件名")
    first_name: str = Field("", max_length=100)
    last_name: str = Field("", max_length=100)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    resume_text: Optional[str] = Field(None, description="简历文本")
    skills: List[str] = Field(default_factory=list, sa_column=Column(JSON), description="识别出的技能")
    experience: int = Field(0, ge=0, description="工作年限")
    matching_score: int = Field(0, ge=0, le=100, index=True, description="综合匹配分")
    skills_match: int = Field(0, ge=0, le=100)
    experience_match: int = Field(0, ge=0, le=100)
    analysis: Optional[str] = Field(None, description="匹配分析")
    is_shortlisted: bool = Field(False, description="是否入围")
    added_to_main_list: bool = Field(False, description="是否已加入候选人库")
    candidate_id: Optional[str] = Field(None, max_length=36, description="加入候选人库后的候选人ID")
    processed_at: Optional[datetime] = Field(None, description="处理时间")


# ==================== 请求 Schema ====================

class ShortlistRequest(SQLModelBase):
    """入围名单请求"""
    candidate_ids: List[str] = Field(..., description="入围的批量候选人ID列表")


# ==================== 响应 Schema ====================

class BulkJobResponse(TimestampResponse):
    """批量任务响应"""
    job_id: str
    total_files: int
    processed_files: int
    qualified_candidates: int
    status: str
    started_by: Optional[str]
    error_message: Optional[str]
    completed_at: Optional[datetime]
    job_title: Optional[str] = None


class BulkCandidateResponse(TimestampResponse):
    """批量候选人响应"""
    bulk_job_id: str
    file_name: str
    first_name: str
    last_name: str
    email: Optional[str]
    phone: Optional[str]
    skills: List[str] = []
    experience: int
    matching_score: int
    skills_match: int
    experience_match: int
    analysis: Optional[str]
    is_shortlisted: bool
    added_to_main_list: bool
    candidate_id: Optional[str]
    processed_at: Optional[datetime]
