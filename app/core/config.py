"""
应用配置模块

使用 pydantic-settings 管理环境变量和应用配置
"""
from functools import lru_cache
from pathlib import Path
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
import json

# 项目根目录
BASE_DIR = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    """应用配置类"""

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # 应用基础配置
    app_name: str = "Recruit-ATS-API"
    app_env: str = "development"
    debug: bool = True

    # 数据库配置
    database_url: str = f"sqlite+aiosqlite:///{BASE_DIR / 'data' / 'recruit.db'}"

    # CORS 配置
    cors_origins: List[str] = ["*"]

    # LLM 配置（OpenAI 兼容接口，用于 JD 生成、面试题生成、回答评估）
    llm_model: str = "gpt-4o"
    llm_api_key: str = ""
    llm_base_url: str = "https://api.openai.com/v1"
    llm_temperature: float = 0.7
    llm_timeout: int = 120
    llm_max_concurrency: int = 5
    llm_rate_limit: int = 60

    # Claude 配置（用于简历-岗位匹配）
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-3-5-sonnet-20241022"
    anthropic_max_tokens: int = 1000

    # SMTP 邮件配置
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_from: str = ""
    smtp_use_tls: bool = True

    # 外部 AI 面试服务
    ai_interview_base_url: str = "https://ai-interview-36q0.onrender.com"
    ai_interview_timeout: int = 30

    # 邮件中链接使用的前端地址
    public_base_url: str = "http://localhost:5173"

    # 上传与业务参数
    upload_dir: Path = BASE_DIR / "uploads"
    max_bulk_files: int = 50
    qualification_threshold: int = 70
    interview_token_days: int = 7
    screening_token_days: int = 7

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator("database_url", mode="before")
    @classmethod
    def fix_database_path(cls, v):
        if isinstance(v, str) and "./data/" in v:
            return v.replace("./data/", str(BASE_DIR / "data") + "/")
        return v

    @property
    def smtp_configured(self) -> bool:
        """SMTP 账号是否已配置"""
        return bool(self.smtp_user and self.smtp_password)


@lru_cache
def get_settings() -> Settings:
    """获取配置单例"""
    return Settings()


# 全局配置实例
settings = get_settings()
