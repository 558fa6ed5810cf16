"""
面试评估模型模块 - SQLModel 版本
"""
from enum import Enum
from typing import Optional, List
from pydantic import field_validator, model_validator
from sqlmodel import Field, Column, JSON
from sqlalchemy import Column as SAColumn, String, ForeignKey

from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse


class Recommendation(str, Enum):
    """录用建议"""
    HIRE = "hire"
    MAYBE = "maybe"
    REJECT = "reject"


# 推荐等级阈值
RECOMMENDATION_THRESHOLDS = [
    (75, Recommendation.HIRE.value),
    (50, Recommendation.MAYBE.value),
    (0, Recommendation.REJECT.value),
]

DIMENSION_FIELDS = [
    "technical_score",
    "communication_score",
    "cultural_fit_score",
    "problem_solving_score",
    "leadership_score",
]


def recommendation_for(score: int) -> str:
    """根据综合分得出录用建议"""
    for threshold, level in RECOMMENDATION_THRESHOLDS:
        if score >= threshold:
            return level
    return Recommendation.REJECT.value


# ==================== 表模型 ====================

class Evaluation(TimestampMixin, IDMixin, SQLModelBase, table=True):
    """面试评估表模型"""
    __tablename__ = "evaluations"

    interview_id: str = Field(
        sa_column=SAColumn(String(36), ForeignKey("interviews.id", ondelete="CASCADE"), index=True, nullable=False),
        description="面试ID"
    )
    technical_score: Optional[int] = Field(None, ge=0, le=100, description="技术能力")
    communication_score: Optional[int] = Field(None, ge=0, le=100, description="沟通能力")
    cultural_fit_score: Optional[int] = Field(None, ge=0, le=100, description="文化匹配")
    problem_solving_score: Optional[int] = Field(None, ge=0, le=100, description="解决问题")
    leadership_score: Optional[int] = Field(None, ge=0, le=100, description="领导力")
    overall_score: int = Field(0, ge=0, le=100, description="综合得分")
    recommendation: str = Field(Recommendation.MAYBE.value, index=True, description="录用建议")
    feedback: Optional[str] = Field(None, description="评语")
    strengths: List[str] = Field(default_factory=list, sa_column=Column(JSON), description="优势")
    improvements: List[str] = Field(default_factory=list, sa_column=Column(JSON), description="待改进")
    evaluated_by: Optional[str] = Field(None, max_length=100, description="评估人")


# ==================== 请求 Schema ====================

class EvaluationBase(SQLModelBase):
    """评估提交字段"""
    technical_score: Optional[int] = Field(None, ge=0, le=100)
    communication_score: Optional[int] = Field(None, ge=0, le=100)
    cultural_fit_score: Optional[int] = Field(None, ge=0, le=100)
    problem_solving_score: Optional[int] = Field(None, ge=0, le=100)
    leadership_score: Optional[int] = Field(None, ge=0, le=100)
    overall_score: Optional[int] = Field(None, ge=0, le=100)
    recommendation: Optional[str] = None
    feedback: Optional[str] = None
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    evaluated_by: Optional[str] = None

    @field_validator("recommendation")
    @classmethod
    def check_recommendation(cls, v: Optional[str]) -> Optional[str]:
        values = [r.value for r in Recommendation]
        if v is not None and v not in values:
            raise ValueError(f"recommendation 必须是 {values} 之一")
        return v

    @model_validator(mode="after")
    def fill_defaults(self):
        """未给出综合分时取各维度均值，未给出建议时按综合分推导"""
        if self.overall_score is None:
            scores = [getattr(self, f) for f in DIMENSION_FIELDS if getattr(self, f) is not None]
            self.overall_score = round(sum(scores) / len(scores)) if scores else 0
        if self.recommendation is None:
            self.recommendation = recommendation_for(self.overall_score)
        return self


class InterviewEvaluationCreate(EvaluationBase):
    """为指定面试提交评估（面试 ID 来自路径）"""
    pass


class EvaluationCreate(EvaluationBase):
    """创建评估请求"""
    interview_id: str


class ResponseEvaluationRequest(SQLModelBase):
    """单题回答评估请求"""
    question: str = Field(..., min_length=1)
    answer: str = Field("", description="候选人回答")
    job_title: Optional[str] = None
    job_description: Optional[str] = None


# ==================== 响应 Schema ====================

class EvaluationResponse(TimestampResponse):
    """评估响应"""
    interview_id: str
    technical_score: Optional[int]
    communication_score: Optional[int]
    cultural_fit_score: Optional[int]
    problem_solving_score: Optional[int]
    leadership_score: Optional[int]
    overall_score: int
    recommendation: str
    feedback: Optional[str]
    strengths: List[str] = []
    improvements: List[str] = []
    evaluated_by: Optional[str]

    # 关联信息（由 API 填充）
    candidate_name: Optional[str] = None
    job_id: Optional[str] = None
    job_title: Optional[str] = None
    interview_type: Optional[str] = None


class ResponseEvaluationResult(SQLModelBase):
    """单题回答评估结果"""
    score: int = Field(..., ge=1, le=10)
    feedback: str
    strengths: List[str] = []
    improvements: List[str] = []
