"""
岗位 JD 生成服务。
LLM 可用时生成描述、任职要求与福利；未配置或调用失败时使用模板。
"""
from typing import Dict, Optional
from loguru import logger

from app.models.job import JobGenerateRequest, JobGenerateResponse
from .llm_client import get_llm_client


SYSTEM_PROMPT = (
    "You are an expert HR professional and technical recruiter. Create compelling, "
    "professional job descriptions that attract top talent. Always respond with valid "
    "JSON containing description, requirements, and benefits fields."
)


def format_salary(salary_min: Optional[int], salary_max: Optional[int]) -> str:
    """薪资区间文案"""
    if salary_min and salary_max:
        return f"${salary_min:,} - ${salary_max:,}"
    if salary_min:
        return f"Starting from ${salary_min:,}"
    if salary_max:
        return f"Up to ${salary_max:,}"
    return "Competitive salary"


class JobDescriptionGenerator:
    """JD 生成器"""

    def __init__(self):
        self.llm = get_llm_client()

    def _build_prompt(self, req: JobGenerateRequest) -> str:
        lines = [
            "Create a professional job description for the following position:",
            "",
            f"Job Title: {req.title}",
            f"Department: {req.department or 'General'}",
            f"Work Type: {req.work_type or 'onsite'}",
            f"Experience Level: {req.experience_level or 'mid'}",
            f"Required Skills: {req.skills or ''}",
        ]
        if req.location:
            lines.append(f"Location: {req.location}")
        if req.salary_min or req.salary_max:
            lines.append(f"Salary: {format_salary(req.salary_min, req.salary_max)}")
        lines += [
            "",
            "Please generate:",
            "1. A compelling job description (3-4 paragraphs)",
            "2. Detailed requirements and qualifications",
            "3. Benefits and what the company offers",
            "",
            'Format the response as JSON with three fields: "description", "requirements", and "benefits".',
        ]
        return "\n".join(lines)

    def generate_template(self, req: JobGenerateRequest) -> JobGenerateResponse:
        """模板生成，不依赖 LLM"""
        department = req.department or "General"
        work_type = (req.work_type or "onsite").lower()
        level = (req.experience_level or "mid").lower()
        skills = req.skills or "relevant technologies"
        salary = format_salary(req.salary_min, req.salary_max)

        description = (
            f"We are seeking a talented {req.title} to join our {department} team. "
            f"This is a {work_type} position ideal for a {level} professional looking to make a significant impact.\n\n"
            "**About the Role:**\n"
            f"As a {req.title}, you will drive key initiatives and work with cross-functional teams "
            "to deliver high-quality solutions that meet our business objectives.\n\n"
            "**Key Responsibilities:**\n"
            f"• Lead and execute projects related to {department.lower()} operations\n"
            "• Collaborate with team members to design and implement solutions\n"
            "• Participate in reviews, planning sessions and team meetings\n"
            "• Contribute to process improvements and share knowledge"
        )
        requirements = (
            "**Required Qualifications:**\n"
            f"• {level.capitalize()} level experience in a relevant field\n"
            f"• Strong proficiency in: {skills}\n"
            "• Excellent problem-solving and communication skills\n"
            "• Ability to work independently and manage multiple priorities\n"
            "• Bachelor's degree in a relevant field or equivalent experience\n\n"
            "**Preferred Qualifications:**\n"
            f"• Experience in the {department.lower()} domain\n"
            "• Track record of successful project delivery"
        )
        benefits = (
            "**What We Offer:**\n"
            f"• Competitive compensation ({salary})\n"
            "• Comprehensive health, dental, and vision insurance\n"
            "• Flexible PTO and company holidays\n"
            "• Professional development budget\n"
            f"• {work_type.capitalize()} work flexibility\n"
            "• Opportunity for career growth and advancement"
        )
        return JobGenerateResponse(
            description=description,
            requirements=requirements,
            benefits=benefits,
            generated_by="template",
        )

    async def generate(self, req: JobGenerateRequest) -> JobGenerateResponse:
        """生成 JD，LLM 失败时回退到模板"""
        template = self.generate_template(req)
        if not self.llm.is_configured():
            logger.info("LLM 未配置，使用模板生成 JD: {}", req.title)
            return template

        try:
            data: Dict = await self.llm.complete_json(
                SYSTEM_PROMPT, self._build_prompt(req), temperature=0.7, max_tokens=2000
            )
        except Exception as exc:
            logger.warning("LLM 生成 JD 失败，回退到模板: {}", exc)
            return template

        def pick(key: str) -> str:
            value = data.get(key)
            if isinstance(value, list):
                value = "\n".join(f"• {v}" for v in value)
            return str(value) if value else getattr(template, key)

        return JobGenerateResponse(
            description=pick("description"),
            requirements=pick("requirements"),
            benefits=pick("benefits"),
            generated_by="llm",
        )


_generator: Optional[JobDescriptionGenerator] = None


def get_job_generator() -> JobDescriptionGenerator:
    """获取 JD 生成器单例"""
    global _generator
    if _generator is None:
        _generator = JobDescriptionGenerator()
    return _generator
