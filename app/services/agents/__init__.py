"""
agents 模块入口。
提供各子模块的便捷导出。
"""

from .llm_client import LLMClient, get_llm_client
from .resume_matcher import (
    CandidateProfile,
    JobRequirements,
    MatchingError,
    calculate_resume_job_match,
    calculate_basic_match,
)
from .job_generator import JobDescriptionGenerator, get_job_generator
from .interview_agents import InterviewAssistAgent, get_interview_assist_agent

__all__ = [
    "LLMClient",
    "get_llm_client",
    "CandidateProfile",
    "JobRequirements",
    "MatchingError",
    "calculate_resume_job_match",
    "calculate_basic_match",
    "JobDescriptionGenerator",
    "get_job_generator",
    "InterviewAssistAgent",
    "get_interview_assist_agent",
]
