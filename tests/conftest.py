"""
测试配置文件

提供测试用的 fixtures：内存数据库、测试客户端、测试数据工厂等
"""
from typing import AsyncGenerator, Optional
from dataclasses import dataclass, field

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import app.models  # noqa: F401  注册全部表
from app.core.config import settings
from app.core.database import get_db, enable_sqlite_foreign_keys
from app.main import create_app
from app.services.email_service import email_service


RESUME_TEXT = (
    "Jane Doe\n"
    "jane.doe@example.com | +1 555 123 4567\n"
    "Senior Python developer with 6 years of experience building FastAPI services, "
    "PostgreSQL databases and Docker based deployments."
)


# ========== 测试数据工厂 ==========

@dataclass
class DataFactory:
    """
    测试数据工厂类

    集中管理测试数据创建，避免各测试文件重复代码
    字段变更时只需修改此处
    """
    client: AsyncClient
    _counter: int = field(default=0, repr=False)

    def _next_id(self) -> str:
        """生成唯一后缀，避免数据冲突"""
        self._counter += 1
        return str(self._counter)

    async def create_job(self, **overrides) -> dict:
        """创建岗位（默认 active），返回完整响应数据"""
        suffix = self._next_id()
        data = {
            "title": f"Python Engineer {suffix}",
            "department": "Engineering",
            "description": "Build and maintain backend services.",
            "requirements": "Solid Python and SQL skills.",
            "skills": "Python, FastAPI, SQL",
            "experience_level": "mid",
            "location": "Remote",
            "work_type": "remote",
            "salary_min": 80000,
            "salary_max": 120000,
            "status": "active",
            **overrides
        }
        resp = await self.client.post("/api/v1/jobs", json=data)
        assert resp.status_code == 200, f"创建岗位失败: {resp.text}"
        return resp.json()["data"]

    async def create_candidate(
        self,
        resume: bytes = RESUME_TEXT.encode(),
        filename: str = "resume.txt",
        **overrides
    ) -> dict:
        """上传简历创建候选人"""
        suffix = self._next_id()
        data = {
            "first_name": "Jane",
            "last_name": f"Doe{suffix}",
            "email": f"candidate{suffix}@example.com",
            "phone": "+1 555 0100",
            "position": "Backend Developer",
            "skills": "Python, FastAPI",
            "experience": "4",
            **overrides
        }
        resp = await self.client.post(
            "/api/v1/candidates",
            data=data,
            files={"resume": (filename, resume, "text/plain")},
        )
        assert resp.status_code == 200, f"创建候选人失败: {resp.text}"
        return resp.json()["data"]

    async def create_application(
        self,
        job_id: Optional[str] = None,
        candidate_id: Optional[str] = None,
        **overrides
    ) -> dict:
        """创建应聘申请，自动创建依赖的岗位和候选人"""
        if job_id is None:
            job_id = (await self.create_job())["id"]
        if candidate_id is None:
            candidate_id = (await self.create_candidate())["id"]

        data = {"job_id": job_id, "candidate_id": candidate_id, **overrides}
        resp = await self.client.post("/api/v1/applications", json=data)
        assert resp.status_code == 200, f"创建申请失败: {resp.text}"
        return resp.json()["data"]

    async def create_interview(self, application_id: Optional[str] = None, **overrides) -> dict:
        """创建面试"""
        if application_id is None:
            application_id = (await self.create_application())["id"]

        data = {
            "application_id": application_id,
            "type": "technical",
            "scheduled_at": "2030-01-15T10:00:00",
            "duration": 60,
            "format": "video_call",
            **overrides
        }
        resp = await self.client.post("/api/v1/interviews", json=data)
        assert resp.status_code == 200, f"创建面试失败: {resp.text}"
        return resp.json()["data"]

    async def create_evaluation(self, interview_id: Optional[str] = None, **overrides) -> dict:
        """创建面试评估"""
        if interview_id is None:
            interview_id = (await self.create_interview())["id"]

        data = {
            "interview_id": interview_id,
            "technical_score": 80,
            "communication_score": 70,
            "feedback": "Good fundamentals.",
            **overrides
        }
        resp = await self.client.post("/api/v1/evaluations", json=data)
        assert resp.status_code == 200, f"创建评估失败: {resp.text}"
        return resp.json()["data"]

    async def send_screening(self, candidate_id: str, job_id: str) -> dict:
        """发送初筛问卷，返回令牌信息"""
        resp = await self.client.post(
            "/api/v1/candidates/send-screening-email",
            json={"candidate_id": candidate_id, "job_id": job_id},
        )
        assert resp.status_code == 200, f"发送初筛问卷失败: {resp.text}"
        return resp.json()["data"]


@pytest_asyncio.fixture
async def factory(client: AsyncClient) -> DataFactory:
    """提供测试数据工厂实例"""
    return DataFactory(client=client)


# 使用内存 SQLite 作为测试数据库
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """
    隔离外部依赖：不发邮件、不调用 LLM、简历写入临时目录
    """
    monkeypatch.setattr(settings, "upload_dir", tmp_path / "uploads")
    monkeypatch.setattr(settings, "smtp_user", "")
    monkeypatch.setattr(settings, "smtp_password", "")
    monkeypatch.setattr(settings, "anthropic_api_key", "")
    monkeypatch.setattr(settings, "public_base_url", "http://frontend.test")
    monkeypatch.setattr(settings, "llm_api_key", "")
    monkeypatch.delenv("CLAUDE_API_KEY", raising=False)


@pytest.fixture
def outbox(monkeypatch) -> list:
    """记录发出的邮件，发送一律视为成功"""
    sent = []

    async def fake_send(to, subject, text, html=None):
        sent.append({"to": to, "subject": subject, "text": text, "html": html})
        return True

    monkeypatch.setattr(email_service, "send", fake_send)
    return sent


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    为每个测试函数提供独立的数据库会话

    每个测试使用独立的内存库，测试后释放引擎
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    提供测试用的 HTTP 客户端

    覆盖 get_db 依赖，使用测试数据库
    """
    app = create_app()

    # 覆盖数据库依赖
    async def override_get_db():
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db

    # 创建异步测试客户端
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    # 清理依赖覆盖
    app.dependency_overrides.clear()
