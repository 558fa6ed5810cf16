"""
SQLModel 模型模块

使用 SQLModel 统一 ORM Model 和 Pydantic Schema
"""
from .base import SQLModelBase, TimestampMixin, utc_now
from .job import (
    Job, JobStatus, WorkType, JobCreate, JobUpdate, JobResponse,
    JobGenerateRequest, JobGenerateResponse, can_transition, ARCHIVED_JOB_STATUSES,
)
from .candidate import (
    Candidate, CandidateCreate, CandidateUpdate, CandidateResponse,
    CandidateDetailResponse, ScreeningEmailRequest,
)
from .application import (
    Application, ApplicationStatus, ApplicationCreate, ApplicationUpdate,
    ApplicationResponse, MatchResult, AdvanceStageRequest,
)
from .interview import (
    Interview, InterviewToken, InterviewType, InterviewStatus, InterviewFormat,
    InterviewCreate, InterviewUpdate, InterviewScheduleRequest, TokenScheduleRequest,
    GenerateQuestionsRequest, InterviewResponse, InterviewTokenResponse,
)
from .interview_round import (
    InterviewRound, InterviewRoundCreate, InterviewRoundUpdate, RoundScheduleRequest,
    InterviewRoundResponse,
)
from .evaluation import (
    Evaluation, Recommendation, EvaluationCreate, InterviewEvaluationCreate,
    EvaluationResponse, ResponseEvaluationRequest, ResponseEvaluationResult,
    recommendation_for,
)
from .bulk import (
    BulkJob, BulkCandidate, BulkJobStatus, ShortlistRequest,
    BulkJobResponse, BulkCandidateResponse,
)
from .screening import ScreeningToken, ScreeningStatus, ScreeningSubmission, ScreeningResult
from .drive import (
    DriveSession, DriveCandidate, DriveSessionCreate, DriveCandidateInput,
    DriveCandidateUpdate, DriveRegistration, CutoffUpdate, BulkScheduleRequest, DriveSessionResponse,
    DriveSessionStatsResponse, DriveCandidateResponse, RegistrationStatus,
    QualificationStatus,
)
from .setting import OrganizationSetting, SettingUpsert, SettingResponse, mask_value

__all__ = [
    # Base
    "SQLModelBase",
    "TimestampMixin",
    "utc_now",
    # Job
    "Job",
    "JobStatus",
    "WorkType",
    "JobCreate",
    "JobUpdate",
    "JobResponse",
    "JobGenerateRequest",
    "JobGenerateResponse",
    "can_transition",
    "ARCHIVED_JOB_STATUSES",
    # Candidate
    "Candidate",
    "CandidateCreate",
    "CandidateUpdate",
    "CandidateResponse",
    "CandidateDetailResponse",
    "ScreeningEmailRequest",
    # Application
    "Application",
    "ApplicationStatus",
    "ApplicationCreate",
    "ApplicationUpdate",
    "ApplicationResponse",
    "MatchResult",
    "AdvanceStageRequest",
    # Interview
    "Interview",
    "InterviewToken",
    "InterviewType",
    "InterviewStatus",
    "InterviewFormat",
    "InterviewCreate",
    "InterviewUpdate",
    "InterviewScheduleRequest",
    "TokenScheduleRequest",
    "GenerateQuestionsRequest",
    "InterviewResponse",
    "InterviewTokenResponse",
    # Interview round
    "InterviewRound",
    "InterviewRoundCreate",
    "InterviewRoundUpdate",
    "RoundScheduleRequest",
    "InterviewRoundResponse",
    # Evaluation
    "Evaluation",
    "Recommendation",
    "EvaluationCreate",
    "InterviewEvaluationCreate",
    "EvaluationResponse",
    "ResponseEvaluationRequest",
    "ResponseEvaluationResult",
    "recommendation_for",
    # Bulk
    "BulkJob",
    "BulkCandidate",
    "BulkJobStatus",
    "ShortlistRequest",
    "BulkJobResponse",
    "BulkCandidateResponse",
    # Screening
    "ScreeningToken",
    "ScreeningStatus",
    "ScreeningSubmission",
    "ScreeningResult",
    # Drive
    "DriveSession",
    "DriveCandidate",
    "DriveSessionCreate",
    "DriveCandidateInput",
    "DriveCandidateUpdate",
    "DriveRegistration",
    "CutoffUpdate",
    "BulkScheduleRequest",
    "DriveSessionResponse",
    "DriveSessionStatsResponse",
    "DriveCandidateResponse",
    "RegistrationStatus",
    "QualificationStatus",
    # Setting
    "OrganizationSetting",
    "SettingUpsert",
    "SettingResponse",
    "mask_value",
]
