"""
初筛问卷评分

满分 100：工作年限 30、期望薪资 25、到岗时间 20、技能确认 25，得分率 >= 70% 即通过。
"""
from typing import Any, Dict, List, Tuple

from app.models.screening import ScreeningResult, ScreeningSubmission


EXPERIENCE_MAX = 30
SALARY_MAX = 25
AVAILABILITY_MAX = 20
SKILLS_MAX = 25
PASS_PERCENTAGE = 70

# 经验级别关键字 -> [(年限选项, 得分)]
EXPERIENCE_TABLE: List[Tuple[Tuple[str, ...], Dict[str, int]]] = [
    (("entry", "junior"), {"0-1": 30, "2-3": 30, "4-5": 25}),
    (("mid", "intermediate"), {"2-3": 30, "4-5": 30, "6-8": 25, "0-1": 10}),
    (("senior",), {"6-8": 30, "9-12": 30, "13+": 30, "4-5": 20}),
]

AVAILABILITY_SCORES = {
    "immediately": 20,
    "1-2-weeks": 20,
    "3-4-weeks": 15,
    "1-2-months": 10,
}

# 问卷题目（前端按此渲染表单，key 与提交字段一致）
SCREENING_QUESTIONS: List[Dict[str, Any]] = [
    {
        "key": "yearsOfExperience",
        "question": "How many years of relevant experience do you have?",
        "type": "select",
        "options": ["0-1", "2-3", "4-5", "6-8", "9-12", "13+"],
    },
    {
        "key": "expectedSalary",
        "question": "What is your expected annual salary?",
        "type": "number",
    },
    {
        "key": "availableToStart",
        "question": "When are you available to start?",
        "type": "select",
        "options": ["immediately", "1-2-weeks", "3-4-weeks", "1-2-months", "more-than-2-months"],
    },
    {
        "key": "hasRequiredSkills",
        "question": "Do you have the skills listed in the job requirements?",
        "type": "boolean",
    },
    {
        "key": "notes",
        "question": "Anything else you would like us to know?",
        "type": "text",
    },
]

QUALIFIED_MESSAGE = (
    "Thank you for your responses. You qualify for the next stage and will "
    "receive an interview invitation shortly."
)
REJECTED_MESSAGE = (
    "Thank you for your responses. Unfortunately, you do not meet the current "
    "requirements for this position."
)


def score_experience(years: str, experience_level: str) -> int:
    level = (experience_level or "").lower()
    for keywords, table in EXPERIENCE_TABLE:
        if any(k in level for k in keywords):
            return table.get(years or "", 0)
    return 0


def score_salary(expected: float, salary_min: Any, salary_max: Any) -> int:
    if salary_min and salary_max:
        if salary_min <= expected <= salary_max * 1.1:
            return SALARY_MAX
        if expected <= salary_max * 1.2:
            return 15
        return 0
    if salary_max:
        if expected <= salary_max * 1.1:
            return SALARY_MAX
        if expected <= salary_max * 1.2:
            return 15
        return 0
    # 岗位未给出薪资范围
    return 20


def score_availability(available: str) -> int:
    return AVAILABILITY_SCORES.get(available or "", 0)


def evaluate_screening(submission: ScreeningSubmission, job: Any) -> ScreeningResult:
    """按岗位要求给问卷打分"""
    score = score_experience(submission.years_of_experience, job.experience_level)
    score += score_salary(submission.expected_salary or 0, job.salary_min, job.salary_max)
    score += score_availability(submission.available_to_start)
    if submission.has_required_skills:
        score += SKILLS_MAX

    max_score = EXPERIENCE_MAX + SALARY_MAX + AVAILABILITY_MAX + SKILLS_MAX
    percentage = round(score / max_score * 100, 2)
    qualified = percentage >= PASS_PERCENTAGE
    return ScreeningResult(
        qualified=qualified,
        score=score,
        max_score=max_score,
        percentage=percentage,
        message=QUALIFIED_MESSAGE if qualified else REJECTED_MESSAGE,
    )
