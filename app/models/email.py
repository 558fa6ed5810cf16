"""
邮件相关请求 Schema
"""
from typing import Optional
from sqlmodel import Field

from .base import SQLModelBase


class EmailTestRequest(SQLModelBase):
    """测试邮件请求"""
    to: str = Field(..., min_length=3)
    subject: str = "Test email"
    text: str = "This is a test email from the recruiting platform."


class InboundEmail(SQLModelBase):
    """邮件服务商推送的入站邮件（字段名 from 为保留字，使用别名）"""
    from_address: str = Field("", alias="from")
    subject: Optional[str] = None
    text: Optional[str] = None
    html: Optional[str] = None
