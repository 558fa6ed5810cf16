"""
简历匹配服务测试
"""
import pytest

from app.services.agents import resume_matcher
from app.services.agents.resume_matcher import (
    CandidateProfile,
    JobRequirements,
    MatchingError,
    calculate_basic_match,
    clamp_score,
    normalize_match,
    build_match_prompt,
)


@pytest.mark.parametrize("raw, expected", [
    (150, 100),
    (-20, 0),
    (72.6, 73),
    (72.5, 73),
    (2.5, 3),
    (0.5, 1),
    ("88", 88),
    ("abc", 0),
    (None, 0),
    (float("nan"), 0),
])
def test_clamp_score(raw, expected):
    """匹配分始终落在 [0, 100]"""
    assert clamp_score(raw) == expected


def test_normalize_match_clamps_every_score():
    result = normalize_match({
        "matchingScore": 130,
        "skillsMatch": -5,
        "experienceMatch": "64.4",
        "analysis": "ok",
    })
    assert result.matching_score == 100
    assert result.skills_match == 0
    assert result.experience_match == 64
    assert result.analysis == "ok"


def test_build_match_prompt_truncates_long_text():
    candidate = CandidateProfile(skills=["Python"], experience=3, resume_text="r" * 5000)
    job = JobRequirements(title="Dev", description="d" * 3000, requirements="q" * 3000)
    prompt = build_match_prompt(candidate, job)
    assert "r" * 2000 in prompt
    assert "r" * 2001 not in prompt
    assert "d" * 1001 not in prompt
    assert "q" * 1001 not in prompt
    assert "matchingScore" in prompt


def test_basic_match_full_skills_within_band():
    candidate = CandidateProfile(skills=["Python", "FastAPI"], experience=3)
    job = JobRequirements(title="Dev", skills="python; fastapi", experience_level="Mid-level")
    result = calculate_basic_match(candidate, job)
    assert result.skills_match == 100
    assert result.experience_match == 100
    assert result.matching_score == 100


def test_basic_match_uses_resume_text_for_skills():
    candidate = CandidateProfile(skills=[], experience=1, resume_text="Worked with Docker and Go")
    job = JobRequirements(title="Dev", skills="Docker, Kubernetes", experience_level="entry")
    result = calculate_basic_match(candidate, job)
    assert result.skills_match == 50
    assert result.experience_match == 100
    # 50 * 0.6 + 100 * 0.4
    assert result.matching_score == 70


def test_basic_match_below_and_above_band():
    job = JobRequirements(title="Dev", skills="Python", experience_level="senior")
    below = calculate_basic_match(CandidateProfile(skills=["Python"], experience=2), job)
    # 2 / 5 * 80
    assert below.experience_match == 32

    above = calculate_basic_match(CandidateProfile(skills=["Python"], experience=14), job)
    # max(60, 100 - 4 * 5)
    assert above.experience_match == 80

    far_above = calculate_basic_match(CandidateProfile(skills=["Python"], experience=40), job)
    assert far_above.experience_match == 60


def test_basic_match_rounds_half_up():
    candidate = CandidateProfile(skills=["Python", "Rust", "Java"], experience=3)
    job = JobRequirements(
        title="Dev",
        skills="python, go, rust, java, kotlin, swift, scala, ruby",
        experience_level="mid",
    )
    result = calculate_basic_match(candidate, job)
    # 3 / 8 = 37.5%
    assert result.skills_match == 38
    # 37.5 * 0.6 + 100 * 0.4 = 62.5
    assert result.matching_score == 63
    assert "综合 63%" in result.analysis


def test_basic_match_without_job_skills():
    result = calculate_basic_match(
        CandidateProfile(skills=["Python"], experience=5),
        JobRequirements(title="Dev", skills="", experience_level=None),
    )
    assert result.skills_match == 0
    # 未填写级别按 mid 处理，5 年在区间内
    assert result.experience_match == 100
    assert result.matching_score == 40


@pytest.mark.asyncio
async def test_llm_match_requires_key():
    with pytest.raises(MatchingError):
        await resume_matcher.calculate_resume_job_match(
            CandidateProfile(), JobRequirements(title="Dev"), ""
        )
