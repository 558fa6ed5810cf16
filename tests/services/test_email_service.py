"""
邮件服务测试

不连接真实 SMTP，替换同步发送函数
"""
from datetime import datetime, timezone

import pytest

from app.core.config import settings
from app.services.email_service import (
    EmailService,
    interview_confirmation_email,
    screening_form_email,
    stage_email,
)


@pytest.fixture
def smtp_service(monkeypatch) -> EmailService:
    monkeypatch.setattr(settings, "smtp_user", "hr@example.com")
    monkeypatch.setattr(settings, "smtp_password", "secret")
    return EmailService()


@pytest.mark.asyncio
async def test_send_not_configured():
    assert await EmailService().send("a@example.com", "Hi", "Hello") is False


@pytest.mark.asyncio
async def test_send_success(smtp_service, monkeypatch):
    sent = []
    monkeypatch.setattr(smtp_service, "_send_sync", sent.append)

    assert await smtp_service.send("a@example.com", "Hi", "Hello", "<p>Hello</p>") is True
    assert sent[0]["To"] == "a@example.com"
    assert sent[0]["Subject"] == "Hi"


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [
    ValueError("Header values may not contain linefeed or carriage return characters"),
    UnicodeEncodeError("ascii", "é", 0, 1, "ordinal not in range(128)"),
    OSError("connection refused"),
])
async def test_send_failure_returns_false(smtp_service, monkeypatch, error):
    def broken(msg):
        raise error

    monkeypatch.setattr(smtp_service, "_send_sync", broken)
    assert await smtp_service.send("a@example.com", "Hi", "Hello") is False


@pytest.mark.asyncio
async def test_malformed_header_returns_false(smtp_service, monkeypatch):
    def broken_build(to, subject, text, html):
        raise ValueError(f"invalid header: {subject!r}")

    monkeypatch.setattr(smtp_service, "_build_message", broken_build)
    assert await smtp_service.send("a@example.com\nBcc: x@example.com", "Hi\nthere", "Hello") is False


def test_html_escapes_names(monkeypatch):
    monkeypatch.setattr(settings, "public_base_url", "http://frontend.test")
    subject, text, html = screening_form_email("<b>Eve</b>", "R&D <Lead>", "tok123")

    assert "&lt;b&gt;Eve&lt;/b&gt;" in html
    assert "<b>Eve</b>" not in html
    assert "R&amp;D &lt;Lead&gt;" in html
    assert "http://frontend.test/screening/tok123" in html
    # 纯文本部分保持原样
    assert "Dear <b>Eve</b>," in text
    assert subject == "Screening Questions - R&D <Lead>"


def test_confirmation_email_time():
    when = datetime(2030, 2, 1, 14, 30, tzinfo=timezone.utc)
    _, text, html = interview_confirmation_email("Jane", "Engineer", when, None)
    assert "2030-02-01 14:30 (UTC)" in text
    assert "<a href" not in html


def test_stage_email():
    subject, text, html = stage_email("offered", "Jane Doe", "Engineer")
    assert subject == "Job Offer - Engineer"
    assert "position of Engineer" in text
    assert "<strong>Engineer</strong>" in html

    assert stage_email("technical_round", "Jane", "Engineer")[0] == "Technical Round Invitation - Engineer"
    assert stage_email("interviewed", "Jane", "Engineer") is None
