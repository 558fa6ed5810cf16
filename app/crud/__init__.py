"""
CRUD 操作模块
"""
from .job import job_crud
from .candidate import candidate_crud
from .application import application_crud
from .interview import interview_crud, interview_token_crud
from .interview_round import interview_round_crud
from .evaluation import evaluation_crud
from .bulk import bulk_job_crud, bulk_candidate_crud
from .screening import screening_token_crud
from .drive import drive_session_crud, drive_candidate_crud
from .setting import setting_crud

__all__ = [
    "job_crud",
    "candidate_crud",
    "application_crud",
    "interview_crud",
    "interview_token_crud",
    "interview_round_crud",
    "evaluation_crud",
    "bulk_job_crud",
    "bulk_candidate_crud",
    "screening_token_crud",
    "drive_session_crud",
    "drive_candidate_crud",
    "setting_crud",
]
