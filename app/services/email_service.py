"""
邮件发送服务

通过 SMTP（STARTTLS + 登录）发送邮件，发送在线程池中执行。
发送失败或未配置 SMTP 时返回 False，不向调用方抛出异常。
"""
import asyncio
import smtplib
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape
from typing import Optional, Tuple

from loguru import logger

from app.core.config import settings


EmailContent = Tuple[str, str, str]  # (subject, text, html)


class EmailService:
    """SMTP 邮件服务"""

    def is_configured(self) -> bool:
        return settings.smtp_configured

    def _build_message(self, to: str, subject: str, text: str, html: Optional[str]) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["From"] = settings.smtp_from or settings.smtp_user
        msg["To"] = to
        msg["Subject"] = subject
        msg.attach(MIMEText(text, "plain", "utf-8"))
        if html:
            msg.attach(MIMEText(html, "html", "utf-8"))
        return msg

    def _send_sync(self, msg: MIMEMultipart) -> None:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=30) as server:
            if settings.smtp_use_tls:
                server.starttls()
            server.login(settings.smtp_user, settings.smtp_password)
            server.send_message(msg)

    async def send(self, to: str, subject: str, text: str, html: Optional[str] = None) -> bool:
        """发送邮件，成功返回 True；任何失败都只记录日志"""
        if not self.is_configured():
            logger.warning("SMTP 未配置，跳过发送: to={}, subject={!r}", to, subject)
            return False

        try:
            msg = self._build_message(to, subject, text, html)
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, self._send_sync, msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("邮件发送失败: to={}, subject={!r}, error={}", to, subject, e)
            return False
        except Exception:
            # 头部含换行、编码错误等构造失败
            logger.exception("邮件构造或发送异常: to={!r}, subject={!r}", to, subject)
            return False

        logger.info("邮件已发送: to={}, subject={!r}", to, subject)
        return True

    async def send_content(self, to: str, content: EmailContent) -> bool:
        subject, text, html = content
        return await self.send(to, subject, text, html)


def public_link(path: str) -> str:
    return f"{settings.public_base_url.rstrip('/')}/{path.lstrip('/')}"


def _html(*paragraphs: str, link: Optional[str] = None, link_text: str = "") -> str:
    """段落中的动态内容须由调用方转义"""
    body = "".join(f"<p>{p}</p>" for p in paragraphs)
    if link:
        body += f'<p><a href="{escape(link)}">{escape(link_text or link)}</a></p>'
    return f'<div style="font-family: Arial, sans-serif; max-width: 600px;">{body}</div>'


def _greeting(name: str) -> str:
    return f"Dear {escape(name)},"


def _strong(value) -> str:
    return f"<strong>{escape(str(value))}</strong>"


SIGNATURE = "\n\nBest regards,\nRecruiting Team"


# ==================== 邮件模板 ====================

def screening_form_email(candidate_name: str, job_title: str, token: str) -> EmailContent:
    link = public_link(f"screening/{token}")
    subject = f"Screening Questions - {job_title}"
    text = (
        f"Dear {candidate_name},\n\n"
        f"Thank you for your interest in the {job_title} position. "
        f"Please complete a short screening form:\n{link}\n\n"
        f"The link expires in {settings.screening_token_days} days.{SIGNATURE}"
    )
    html = _html(
        _greeting(candidate_name),
        f"Thank you for your interest in the {_strong(job_title)} position. "
        "Please complete a short screening form.",
        link=link, link_text="Complete Screening Form",
    )
    return subject, text, html


def interview_invitation_email(candidate_name: str, job_title: str, token: str) -> EmailContent:
    link = public_link(f"schedule/{token}")
    subject = f"Interview Invitation - {job_title}"
    text = (
        f"Dear {candidate_name},\n\n"
        f"Congratulations! You have been selected for an interview for the {job_title} position. "
        f"Please choose a time that suits you:\n{link}\n\n"
        f"The link expires in {settings.interview_token_days} days.{SIGNATURE}"
    )
    html = _html(
        _greeting(candidate_name),
        f"Congratulations! You have been selected for an interview for the {_strong(job_title)} position.",
        link=link, link_text="Schedule Your Interview",
    )
    return subject, text, html


def rejection_email(candidate_name: str, job_title: str) -> EmailContent:
    subject = f"Your Application - {job_title}"
    text = (
        f"Dear {candidate_name},\n\n"
        f"Thank you for your interest in the {job_title} position. After careful review, "
        "we have decided to move forward with other candidates whose qualifications more closely "
        f"match our current needs.\n\nWe wish you the best in your job search.{SIGNATURE}"
    )
    html = _html(
        _greeting(candidate_name),
        f"Thank you for your interest in the {_strong(job_title)} position. After careful review, "
        "we have decided to move forward with other candidates.",
        "We wish you the best in your job search.",
    )
    return subject, text, html


def interview_confirmation_email(
    candidate_name: str, job_title: str, scheduled_at: datetime, meeting_url: Optional[str]
) -> EmailContent:
    when = scheduled_at.strftime("%Y-%m-%d %H:%M")
    subject = f"Interview Confirmed - {job_title}"
    text = (
        f"Dear {candidate_name},\n\n"
        f"Your interview for the {job_title} position is confirmed for {when} (UTC).\n"
        f"Join here: {meeting_url or 'link will be shared before the interview'}{SIGNATURE}"
    )
    html = _html(
        _greeting(candidate_name),
        f"Your interview for the {_strong(job_title)} position is confirmed for {_strong(when)} (UTC).",
        link=meeting_url, link_text="Join Interview",
    )
    return subject, text, html


def interview_details_email(
    candidate_name: str,
    job_title: str,
    interview_type: str,
    scheduled_at: Optional[datetime],
    duration: int,
    meeting_url: str,
) -> EmailContent:
    """HR 安排的面试邀请（含类型、时间、时长）"""
    when = scheduled_at.strftime("%Y-%m-%d %H:%M") + " (UTC)" if scheduled_at else "to be confirmed"
    subject = f"Interview Invitation - {job_title}"
    text = (
        f"Dear {candidate_name},\n\n"
        f"You have been scheduled for an interview for the position of {job_title}.\n\n"
        f"Type: {interview_type}\nDate & Time: {when}\nDuration: {duration} minutes\n"
        f"Meeting Link: {meeting_url}\n\nPlease be prepared and join on time. Good luck!{SIGNATURE}"
    )
    html = _html(
        _greeting(candidate_name),
        f"You have been scheduled for an interview for the position of {_strong(job_title)}.",
        f"Type: {escape(interview_type)}<br>Date &amp; Time: {escape(when)}<br>Duration: {duration} minutes",
        link=meeting_url, link_text="Join Interview",
    )
    return subject, text, html


def interviewer_invitation_email(
    candidate_name: str,
    job_title: str,
    scheduled_at: Optional[datetime],
    duration: int,
    meeting_url: str,
) -> EmailContent:
    when = scheduled_at.strftime("%Y-%m-%d %H:%M") + " (UTC)" if scheduled_at else "to be confirmed"
    subject = f"Interview Assignment - {candidate_name} for {job_title}"
    text = (
        f"You are scheduled to interview {candidate_name} for the {job_title} position.\n\n"
        f"Date & Time: {when}\nDuration: {duration} minutes\nMeeting Link: {meeting_url}{SIGNATURE}"
    )
    html = _html(
        f"You are scheduled to interview {_strong(candidate_name)} for the {_strong(job_title)} position.",
        f"Date &amp; Time: {escape(when)}<br>Duration: {duration} minutes",
        link=meeting_url, link_text="Join Interview",
    )
    return subject, text, html


def interview_link_email(candidate_name: str, job_title: str, login_url: str) -> EmailContent:
    subject = f"Your AI Interview - {job_title}"
    text = (
        f"Dear {candidate_name},\n\n"
        f"Your AI interview for the {job_title} position is ready. Start it here:\n{login_url}{SIGNATURE}"
    )
    html = _html(
        _greeting(candidate_name),
        f"Your AI interview for the {_strong(job_title)} position is ready.",
        link=login_url, link_text="Start AI Interview",
    )
    return subject, text, html


# ==================== 招聘会 ====================

def drive_registration_email(name: str, drive_name: str, token: str) -> EmailContent:
    link = public_link(f"drive/register/{token}")
    subject = f"Registration - {drive_name}"
    text = (
        f"Dear {name},\n\n"
        f"You have been invited to the {drive_name} hiring drive. "
        f"Complete your registration here:\n{link}{SIGNATURE}"
    )
    html = _html(
        _greeting(name),
        f"You have been invited to the {_strong(drive_name)} hiring drive.",
        link=link, link_text="Complete Registration",
    )
    return subject, text, html


def technical_round_email(name: str, drive_name: str, aptitude_score: int, technical_cutoff: int) -> EmailContent:
    subject = f"Round 2: Technical Test Invitation - {drive_name}"
    text = (
        f"Dear {name},\n\n"
        "Congratulations! You have passed Round 1 (Aptitude Test) and are invited to Round 2.\n\n"
        f"Your Aptitude Score: {aptitude_score}%\n"
        f"Round 2 cutoff: {technical_cutoff}%\n\n"
        f"The technical assessment details will be shared by the {drive_name} team.{SIGNATURE}"
    )
    html = _html(
        _greeting(name),
        "Congratulations! You have passed Round 1 (Aptitude Test) and are invited to Round 2.",
        f"Your Aptitude Score: {_strong(f'{aptitude_score}%')}<br>Round 2 cutoff: {technical_cutoff}%",
        f"The technical assessment details will be shared by the {_strong(drive_name)} team.",
    )
    return subject, text, html


def drive_interview_email(
    name: str, drive_name: str, aptitude_score: Optional[int], technical_score: Optional[int], token: str
) -> EmailContent:
    """招聘会终面（AI 视频面试）邀请，链接为面试预约页"""
    link = public_link(f"schedule/{token}")
    aptitude = f"{aptitude_score}%" if aptitude_score is not None else "-"
    technical = f"{technical_score}%" if technical_score is not None else "-"
    subject = f"Final Round: AI Video Interview - {drive_name}"
    text = (
        f"Dear {name},\n\n"
        "Congratulations! You have completed both test rounds and are invited to the final AI video interview.\n\n"
        f"Round 1 (Aptitude): {aptitude}\nRound 2 (Technical): {technical}\n\n"
        f"Choose your interview slot here:\n{link}\n\n"
        f"The link expires in {settings.interview_token_days} days.{SIGNATURE}"
    )
    html = _html(
        _greeting(name),
        "Congratulations! You have completed both test rounds and are invited to the final AI video interview.",
        f"Round 1 (Aptitude): {escape(aptitude)}<br>Round 2 (Technical): {escape(technical)}",
        link=link, link_text="Schedule Your Interview",
    )
    return subject, text, html


# ==================== 录用流程 ====================

STAGE_EMAILS = {
    "technical_round": (
        "Technical Round Invitation - {job}",
        "Congratulations on progressing to the technical round for the {job} position! "
        "Our technical team will contact you within 24 hours to schedule the assessment.",
    ),
    "final_round": (
        "Final Round Interview - {job}",
        "Excellent progress! You have been selected for the final interview round for the {job} position. "
        "Our HR team will reach out to schedule this interview at a convenient time.",
    ),
    "offered": (
        "Job Offer - {job}",
        "We are pleased to offer you the position of {job}. "
        "Please confirm your acceptance by replying to this email within 5 business days.",
    ),
    "hired": (
        "Welcome aboard - {job}",
        "Congratulations on accepting the offer for {job}! We are thrilled to have you join the team. "
        "Our HR team will be in touch with onboarding details and required documentation.",
    ),
}


def stage_email(stage: str, candidate_name: str, job_title: str) -> Optional[EmailContent]:
    """录用流程阶段通知，没有对应模板的阶段返回 None"""
    template = STAGE_EMAILS.get(stage)
    if not template:
        return None
    subject_tpl, body_tpl = template
    subject = subject_tpl.format(job=job_title)
    text = f"Dear {candidate_name},\n\n{body_tpl.format(job=job_title)}{SIGNATURE}"
    html = _html(_greeting(candidate_name), body_tpl.format(job=_strong(job_title)))
    return subject, text, html


email_service = EmailService()
