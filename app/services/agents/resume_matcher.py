"""
简历-岗位匹配服务

优先使用 Claude 给出综合匹配分；无可用密钥或调用失败时，
批量筛选等场景可退回到基于规则的加权匹配。
"""
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from anthropic import AsyncAnthropic
from loguru import logger

from app.core.config import settings
from app.models.application import MatchResult
from .llm_client import parse_json_content


class MatchingError(Exception):
    """AI 匹配失败"""
    pass


@dataclass
class CandidateProfile:
    """参与匹配的候选人信息"""
    skills: List[str] = field(default_factory=list)
    experience: int = 0
    position: Optional[str] = None
    resume_text: Optional[str] = None


@dataclass
class JobRequirements:
    """参与匹配的岗位要求"""
    title: str
    skills: Optional[str] = None
    experience_level: Optional[str] = None
    description: Optional[str] = None
    requirements: Optional[str] = None

    @classmethod
    def from_job(cls, job: Any) -> "JobRequirements":
        return cls(
            title=job.title,
            skills=job.skills,
            experience_level=job.experience_level,
            description=job.description,
            requirements=job.requirements,
        )


# 经验级别对应的年限区间，按顺序匹配
EXPERIENCE_BANDS: List[Tuple[Tuple[str, ...], Tuple[int, int]]] = [
    (("entry", "junior"), (0, 2)),
    (("mid", "intermediate"), (2, 5)),
    (("senior",), (5, 10)),
    (("lead", "principal"), (8, 20)),
]
DEFAULT_BAND = (0, 15)

SKILLS_WEIGHT = 0.6
EXPERIENCE_WEIGHT = 0.4


def round_half_up(value: float) -> int:
    """四舍五入，.5 一律进位"""
    return int(math.floor(value + 0.5))


def clamp_score(value: Any) -> int:
    """把任意分值规整为 [0, 100] 的整数，无法解析时为 0"""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(number):
        return 0
    return round_half_up(min(100.0, max(0.0, number)))


def normalize_match(data: Dict[str, Any]) -> MatchResult:
    """将模型返回的 JSON 转换为匹配结果"""
    return MatchResult(
        matching_score=clamp_score(data.get("matchingScore", data.get("matching_score"))),
        skills_match=clamp_score(data.get("skillsMatch", data.get("skills_match"))),
        experience_match=clamp_score(data.get("experienceMatch", data.get("experience_match"))),
        analysis=str(data.get("analysis") or ""),
    )


def build_match_prompt(candidate: CandidateProfile, job: JobRequirements) -> str:
    """构造匹配提示词，简历截取前 2000 字，JD 与要求各截取前 1000 字"""
    resume_line = ""
    if candidate.resume_text:
        resume_line = f"- Resume Content: {candidate.resume_text[:2000]}\n"
    return (
        "Analyze how well this candidate matches the job requirements and provide a detailed scoring:\n\n"
        "CANDIDATE PROFILE:\n"
        f"- Skills: {', '.join(candidate.skills)}\n"
        f"- Experience: {candidate.experience} years\n"
        f"- Current Position: {candidate.position or 'Not specified'}\n"
        f"{resume_line}\n"
        "JOB REQUIREMENTS:\n"
        f"- Title: {job.title}\n"
        f"- Required Skills: {job.skills or ''}\n"
        f"- Experience Level: {job.experience_level or ''}\n"
        f"- Description: {(job.description or '')[:1000]}\n"
        f"- Requirements: {(job.requirements or '')[:1000]}\n\n"
        "Please analyze and return ONLY a JSON response with this exact structure:\n"
        "{\n"
        '  "matchingScore": <overall_score_0_to_100>,\n'
        '  "skillsMatch": <skills_matching_percentage_0_to_100>,\n'
        '  "experienceMatch": <experience_level_match_0_to_100>,\n'
        '  "analysis": "<brief_explanation_of_scoring>"\n'
        "}\n\n"
        "Consider technical skills alignment, experience level appropriateness, "
        "role relevance and overall fit."
    )


async def calculate_resume_job_match(
    candidate: CandidateProfile,
    job: JobRequirements,
    api_key: str,
) -> MatchResult:
    """
    调用 Claude 计算匹配度

    Raises:
        MatchingError: 未提供密钥、调用失败或返回内容无法解析
    """
    if not api_key:
        raise MatchingError("未配置 Claude API 密钥，请在设置中填写 CLAUDE_API_KEY")

    logger.info(
        "开始 AI 匹配: job={}, skills={}, experience={}",
        job.title, len(candidate.skills), candidate.experience,
    )
    try:
        client = AsyncAnthropic(api_key=api_key)
        response = await client.messages.create(
            model=settings.anthropic_model,
            max_tokens=settings.anthropic_max_tokens,
            temperature=0.3,
            messages=[{"role": "user", "content": build_match_prompt(candidate, job)}],
        )
        text = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )
        result = normalize_match(parse_json_content(text))
    except Exception as exc:
        logger.error("AI 匹配失败: {}", exc)
        raise MatchingError(f"AI 匹配失败: {exc}。请检查设置中的 Claude API 密钥。") from exc

    logger.info("AI 匹配完成: score={}", result.matching_score)
    return result


def _experience_band(level: Optional[str]) -> Tuple[int, int]:
    level = (level or "mid").lower()
    for keywords, band in EXPERIENCE_BANDS:
        if any(k in level for k in keywords):
            return band
    return DEFAULT_BAND


def _experience_score(years: int, band: Tuple[int, int]) -> float:
    low, high = band
    if low <= years <= high:
        return 100.0
    if years < low:
        return max(0.0, years / low * 80)
    return max(60.0, 100.0 - (years - high) * 5)


def calculate_basic_match(candidate: CandidateProfile, job: JobRequirements) -> MatchResult:
    """
    基于规则的匹配

    技能占 60%：岗位技能与候选人技能互相包含，或出现在简历文本中即视为命中；
    经验占 40%：按经验级别对应的年限区间打分。
    """
    job_skills = [
        s.strip().lower()
        for s in (job.skills or "").replace(";", ",").split(",")
        if s.strip()
    ]
    candidate_skills = [s.strip().lower() for s in candidate.skills if s and s.strip()]
    resume_text = (candidate.resume_text or "").lower()

    matched = [
        skill for skill in job_skills
        if any(skill in cs or cs in skill for cs in candidate_skills)
        or (resume_text and skill in resume_text)
    ]
    skills_score = len(matched) / len(job_skills) * 100 if job_skills else 0.0

    years = max(0, candidate.experience or 0)
    band = _experience_band(job.experience_level)
    experience_score = _experience_score(years, band)

    overall = round_half_up(skills_score * SKILLS_WEIGHT + experience_score * EXPERIENCE_WEIGHT)
    analysis = (
        f"规则匹配: 技能命中 {len(matched)}/{len(job_skills)} ({round_half_up(skills_score)}%)；"
        f"经验 {years} 年，要求 {band[0]}-{band[1]} 年 ({round_half_up(experience_score)}%)；"
        f"综合 {overall}% (技能 60% + 经验 40%)"
    )
    return MatchResult(
        matching_score=clamp_score(overall),
        skills_match=clamp_score(skills_score),
        experience_match=clamp_score(experience_score),
        analysis=analysis,
    )
