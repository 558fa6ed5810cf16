"""
面试助手 Agent 模块。
提供面试问题生成、单题回答评估，LLM 不可用时使用模板与启发式规则。
"""
import re
from typing import Any, Dict, List, Optional
from loguru import logger

from app.models.evaluation import ResponseEvaluationRequest, ResponseEvaluationResult
from .llm_client import get_llm_client


# ============ 模板问题 ============

GENERIC_QUESTIONS = [
    "Tell me about yourself and what interests you about this position.",
    "What experience do you have that's most relevant to this role?",
    "Describe a challenging project you've worked on and how you overcame obstacles.",
    "Where do you see yourself in five years and how does this role fit into your career goals?",
    "What questions do you have about the role or our company?",
    "Tell me about a time when you had to work with a difficult team member.",
    "How do you prioritize tasks when you have multiple deadlines?",
    "What motivates you to do your best work?",
    "Describe a time when you had to learn something new quickly.",
    "What do you consider your greatest professional achievement?",
]

ROLE_SPECIFIC_QUESTIONS = {
    "Software Engineer": [
        "Walk me through your approach to debugging a complex technical issue.",
        "How do you stay current with new technologies and programming languages?",
        "Describe your experience with version control and collaborative coding.",
    ],
    "Data Scientist": [
        "Explain a machine learning project you've worked on from start to finish.",
        "How do you approach data cleaning and validation?",
        "What statistical methods do you use most frequently in your work?",
    ],
    "Product Manager": [
        "How do you prioritize features when working with limited resources?",
        "Describe how you gather and incorporate user feedback into product decisions.",
        "Tell me about a time when you had to make a difficult product tradeoff.",
    ],
}


# ============ 提示词模板 ============

QUESTION_SYSTEM_PROMPT = (
    "You are an expert HR interviewer creating engaging, professional interview questions. "
    "Respond with JSON: {\"questions\": [\"question 1\", \"question 2\"]}."
)

QUESTION_PROMPT = """Generate {count} professional interview questions for a {job_title} position in the {department} department.

Job Description: {description}
Job Requirements: {requirements}
Required Skills: {skills}
Experience Level: {experience_level}
{existing}
Generate a mix of behavioral, technical, situational and experience-based questions.
Make questions natural and conversational, as if an interviewer is speaking them.
"""

EVALUATION_SYSTEM_PROMPT = (
    "You are an expert interview evaluator. Provide fair, constructive feedback "
    "focusing on job-relevant skills and communication."
)

EVALUATION_PROMPT = """Evaluate this interview response for a {job_title} position:

Job Context: {job_description}

Question: {question}
Answer: {answer}

Provide a JSON response with:
{{
  "score": number (1-10),
  "feedback": "Brief constructive feedback",
  "strengths": ["strength1", "strength2"],
  "improvements": ["improvement1", "improvement2"]
}}
"""


def fallback_questions(job_title: str, count: int) -> List[str]:
    """模板问题：通用问题 + 岗位专属问题"""
    questions = list(GENERIC_QUESTIONS)
    questions.extend(ROLE_SPECIFIC_QUESTIONS.get(job_title, []))
    return questions[:count]


def heuristic_evaluation(answer: str) -> ResponseEvaluationResult:
    """
    启发式评估，按回答长度与是否包含具体数据打分
    """
    text = (answer or "").strip()
    words = len(text.split())
    if not text:
        return ResponseEvaluationResult(
            score=1,
            feedback="No answer was provided.",
            strengths=[],
            improvements=["Provide an answer to the question"],
        )

    if words < 20:
        score = 4
    elif words < 60:
        score = 6
    else:
        score = 7

    strengths = ["Clear communication"]
    improvements = []
    if re.search(r"\d", text):
        score += 1
        strengths.append("Uses concrete figures")
    else:
        improvements.append("Consider quantifiable results")
    if words < 60:
        improvements.append("Could provide more specific examples")
    else:
        strengths.append("Detailed response")

    return ResponseEvaluationResult(
        score=min(score, 10),
        feedback="Automatic evaluation based on response depth and specificity.",
        strengths=strengths,
        improvements=improvements,
    )


def _clamp_ten(value: Any, default: int = 5) -> int:
    try:
        number = int(round(float(value)))
    except (TypeError, ValueError):
        return default
    return min(10, max(1, number))


def _as_list(value: Any) -> List[str]:
    if isinstance(value, list):
        return [str(v) for v in value if v]
    if value:
        return [str(value)]
    return []


class InterviewAssistAgent:
    """
    面试助手 Agent。
    """

    def __init__(self):
        self.llm = get_llm_client()

    async def generate_questions(
        self,
        job: Any,
        total_questions: int = 8,
        custom_questions: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        """
        生成面试问题，自定义问题优先，其余由 LLM 补足

        返回:
            {"questions": [...], "generated_by": "custom" | "llm" | "template"}
        """
        questions = [q.strip() for q in (custom_questions or []) if q and q.strip()]
        if len(questions) >= total_questions:
            return {"questions": questions[:total_questions], "generated_by": "custom"}

        needed = total_questions - len(questions)
        generated_by = "template"
        extra: List[str] = []

        if self.llm.is_configured():
            existing = ""
            if questions:
                numbered = "\n".join(f"{i + 1}. {q}" for i, q in enumerate(questions))
                existing = f"\nComplement these existing questions without repeating them:\n{numbered}\n"
            prompt = QUESTION_PROMPT.format(
                count=needed,
                job_title=job.title,
                department=job.department or "General",
                description=(job.description or "")[:1000],
                requirements=(job.requirements or "")[:1000],
                skills=job.skills or "",
                experience_level=job.experience_level or "mid",
                existing=existing,
            )
            try:
                data = await self.llm.complete_json(
                    QUESTION_SYSTEM_PROMPT, prompt, temperature=0.7, max_tokens=800
                )
                extra = [q.strip() for q in _as_list(data.get("questions")) if q.strip()]
                generated_by = "llm"
            except Exception as e:
                logger.warning("LLM 生成面试问题失败，使用模板: {}", e)

        if not extra:
            generated_by = "template"
            extra = [q for q in fallback_questions(job.title, total_questions) if q not in questions]

        questions.extend(extra[:needed])
        return {"questions": questions[:total_questions], "generated_by": generated_by}

    async def evaluate_response(self, req: ResponseEvaluationRequest) -> ResponseEvaluationResult:
        """评估单题回答，LLM 不可用或失败时使用启发式评分"""
        if not self.llm.is_configured() or not req.answer.strip():
            return heuristic_evaluation(req.answer)

        prompt = EVALUATION_PROMPT.format(
            job_title=req.job_title or "the open",
            job_description=(req.job_description or "Not provided")[:1000],
            question=req.question,
            answer=req.answer,
        )
        try:
            data = await self.llm.complete_json(
                EVALUATION_SYSTEM_PROMPT, prompt, temperature=0.3, max_tokens=500
            )
        except Exception as e:
            logger.warning("LLM 回答评估失败，使用启发式评分: {}", e)
            return heuristic_evaluation(req.answer)

        return ResponseEvaluationResult(
            score=_clamp_ten(data.get("score")),
            feedback=str(data.get("feedback") or ""),
            strengths=_as_list(data.get("strengths")),
            improvements=_as_list(data.get("improvements")),
        )


_agent: Optional[InterviewAssistAgent] = None


def get_interview_assist_agent() -> InterviewAssistAgent:
    """获取面试助手单例"""
    global _agent
    if _agent is None:
        _agent = InterviewAssistAgent()
    return _agent
