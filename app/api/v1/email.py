"""
邮件 API 路由
"""
from fastapi import APIRouter

from app.core.response import success_response, DictResponse
from app.models.email import EmailTestRequest
from app.services.email_service import email_service

router = APIRouter()


@router.post("/test", summary="发送测试邮件", response_model=DictResponse)
async def send_test_email(data: EmailTestRequest):
    """SMTP 未配置或发送失败时 sent 为 false"""
    sent = await email_service.send(data.to, data.subject, data.text, f"<p>{data.text}</p>")
    return success_response(
        data={"sent": sent, "configured": email_service.is_configured()},
        message="测试邮件已发送" if sent else "测试邮件发送失败"
    )
