"""
组织设置模型模块

键值对形式保存组织级配置（如 CLAUDE_API_KEY）
"""
from typing import Optional
from sqlmodel import Field

from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse


# 返回时需要脱敏的键名片段
SECRET_KEY_MARKERS = ("KEY", "SECRET", "PASSWORD", "TOKEN")


class OrganizationSetting(TimestampMixin, IDMixin, SQLModelBase, table=True):
    """组织设置表模型"""
    __tablename__ = "organization_settings"

    key: str = Field(..., max_length=100, unique=True, index=True, description="配置键")
    value: str = Field("", description="配置值")
    description: Optional[str] = Field(None, max_length=255, description="说明")


class SettingUpsert(SQLModelBase):
    """新增或更新配置"""
    key: str = Field(..., min_length=1, max_length=100)
    value: str = ""
    description: Optional[str] = None


class SettingResponse(TimestampResponse):
    """配置响应（敏感值脱敏）"""
    key: str
    value: str
    description: Optional[str]
    is_secret: bool = False


def mask_value(key: str, value: str) -> str:
    """敏感配置只保留末四位"""
    if not any(marker in key.upper() for marker in SECRET_KEY_MARKERS):
        return value
    if len(value) <= 4:
        return "*" * len(value)
    return "*" * (len(value) - 4) + value[-4:]
