"""
外部 AI 面试系统对接

提交候选人简历与岗位 JD，换取候选人登录面试的链接。
"""
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional

import httpx
from loguru import logger

from app.core.config import settings


SUBMIT_PATH = "/api/ai-interview/submit-external-data"


class AIInterviewError(Exception):
    """AI 面试系统调用失败"""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []


@dataclass
class AIInterviewSubmission:
    """提交给 AI 面试系统的数据（字段名与对方接口一致）"""
    email: str
    resume: str
    jobDescription: str
    candidateName: str
    positionName: str

    def to_payload(self) -> Dict[str, str]:
        return asdict(self)


def build_resume_text(candidate: Any) -> str:
    """简历原文缺失时，根据候选人资料拼出一份简历"""
    if candidate.resume_text and candidate.resume_text.strip():
        return candidate.resume_text
    lines = [
        f"Name: {candidate.first_name} {candidate.last_name}",
        f"Email: {candidate.email}",
    ]
    if candidate.phone:
        lines.append(f"Phone: {candidate.phone}")
    if candidate.location:
        lines.append(f"Location: {candidate.location}")
    lines.append(f"Current Position: {candidate.position or 'Not specified'}")
    lines.append(f"Experience: {candidate.experience or 0} years")
    if candidate.skills:
        lines.append(f"Skills: {', '.join(candidate.skills)}")
    return "\n".join(lines)


def build_job_description(job: Any) -> str:
    """岗位描述缺失时，根据岗位字段拼出 JD"""
    parts = []
    if job.description and job.description.strip():
        parts.append(job.description)
    else:
        parts.append(f"Position: {job.title}")
        if job.department:
            parts.append(f"Department: {job.department}")
        if job.experience_level:
            parts.append(f"Experience Level: {job.experience_level}")
        if job.location:
            parts.append(f"Location: {job.location}")
    if job.requirements:
        parts.append(f"Requirements: {job.requirements}")
    if job.skills:
        parts.append(f"Required Skills: {job.skills}")
    return "\n".join(parts)


def build_submission(candidate: Any, job: Any) -> AIInterviewSubmission:
    return AIInterviewSubmission(
        email=candidate.email,
        resume=build_resume_text(candidate),
        jobDescription=build_job_description(job),
        candidateName=f"{candidate.first_name} {candidate.last_name}".strip(),
        positionName=job.title,
    )


def validate_submission_data(data: AIInterviewSubmission) -> List[str]:
    """提交前校验，返回错误列表（为空表示通过）"""
    errors = []
    if not data.email or "@" not in data.email:
        errors.append("Valid email address is required")
    if not data.candidateName or len(data.candidateName.strip()) < 2:
        errors.append("Candidate name is required")
    if not data.positionName or len(data.positionName.strip()) < 2:
        errors.append("Position name is required")
    if not data.resume or len(data.resume.strip()) < 10:
        errors.append("Resume content is required and must be substantial")
    if not data.jobDescription or len(data.jobDescription.strip()) < 10:
        errors.append("Job description is required and must be substantial")
    return errors


def resolve_login_url(login_url: str, base_url: Optional[str] = None) -> str:
    """相对路径补全为绝对地址"""
    if login_url.startswith(("http://", "https://")):
        return login_url
    base = (base_url or settings.ai_interview_base_url).rstrip("/")
    return f"{base}/{login_url.lstrip('/')}"


async def submit_candidate_data(data: AIInterviewSubmission) -> str:
    """
    提交候选人数据

    Returns:
        候选人登录 AI 面试的绝对地址

    Raises:
        AIInterviewError: 校验失败、请求失败或响应缺少 loginUrl
    """
    errors = validate_submission_data(data)
    if errors:
        raise AIInterviewError("AI 面试数据校验失败", errors)

    url = f"{settings.ai_interview_base_url.rstrip('/')}{SUBMIT_PATH}"
    logger.info(
        "提交 AI 面试数据: email={}, position={}, resume_length={}",
        data.email, data.positionName, len(data.resume),
    )

    async with httpx.AsyncClient(timeout=settings.ai_interview_timeout) as client:
        try:
            response = await client.post(
                url,
                json=data.to_payload(),
                headers={"Accept": "application/json"},
            )
            response.raise_for_status()
            result = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "AI 面试系统返回错误: status={}, response={}",
                exc.response.status_code,
                exc.response.text[:500],
            )
            raise AIInterviewError(f"AI 面试系统请求失败: HTTP {exc.response.status_code}") from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("AI 面试系统调用异常: {}", exc)
            raise AIInterviewError(f"AI 面试系统请求失败: {exc}") from exc

    if not isinstance(result, dict):
        logger.error("AI 面试系统返回格式异常: {!r}", result)
        raise AIInterviewError("AI 面试系统返回格式异常")
    if not result.get("success"):
        raise AIInterviewError(result.get("error") or "AI 面试系统返回失败结果")
    login_url = result.get("loginUrl")
    if not login_url:
        raise AIInterviewError("AI 面试系统未返回登录链接")

    return resolve_login_url(login_url)
