"""
应聘申请 API 测试

匹配度计算通过替换 resume_matcher.calculate_resume_job_match 隔离外部调用
"""
import pytest
from httpx import AsyncClient

from app.core.config import settings
from app.models.application import MatchResult
from app.services.agents import resume_matcher
from app.services.agents.resume_matcher import MatchingError


class TestApplicationAPI:
    """应聘申请 API 测试类"""

    @pytest.mark.asyncio
    async def test_create_application(self, client: AsyncClient, factory):
        """测试创建申请"""
        job = await factory.create_job(title="Backend Engineer")
        candidate = await factory.create_candidate(first_name="Ada", last_name="Lovelace")

        application = await factory.create_application(job_id=job["id"], candidate_id=candidate["id"])

        assert application["status"] == "applied"
        assert application["candidate_name"] == "Ada Lovelace"
        assert application["job_title"] == "Backend Engineer"
        assert application["candidate_email"] == candidate["email"]
        assert application["matching_score"] is None

    @pytest.mark.asyncio
    async def test_create_application_duplicate(self, client: AsyncClient, factory):
        """同一候选人对同一岗位只能申请一次"""
        application = await factory.create_application()

        response = await client.post("/api/v1/applications", json={
            "job_id": application["job_id"],
            "candidate_id": application["candidate_id"],
        })
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_create_application_missing_refs(self, client: AsyncClient, factory):
        job = await factory.create_job()
        response = await client.post("/api/v1/applications", json={
            "job_id": job["id"], "candidate_id": "missing",
        })
        assert response.status_code == 404

        response = await client.post("/api/v1/applications", json={
            "job_id": "missing", "candidate_id": "missing",
        })
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_create_application_invalid_status(self, client: AsyncClient, factory):
        job = await factory.create_job()
        candidate = await factory.create_candidate()
        response = await client.post("/api/v1/applications", json={
            "job_id": job["id"], "candidate_id": candidate["id"], "status": "unknown",
        })
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_list_filters(self, client: AsyncClient, factory):
        job = await factory.create_job()
        first = await factory.create_application(job_id=job["id"])
        await factory.create_application(job_id=job["id"])
        await factory.create_application()

        response = await client.get("/api/v1/applications", params={"job_id": job["id"]})
        assert response.json()["data"]["total"] == 2

        await client.put(f"/api/v1/applications/{first['id']}", json={"status": "rejected"})
        response = await client.get("/api/v1/applications", params={"status": "rejected"})
        data = response.json()["data"]
        assert data["total"] == 1
        assert data["items"][0]["id"] == first["id"]

    @pytest.mark.asyncio
    async def test_hired_sets_hired_at(self, client: AsyncClient, factory):
        application = await factory.create_application()

        response = await client.put(f"/api/v1/applications/{application['id']}", json={
            "status": "hired", "notes": "Accepted offer",
        })
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "hired"
        assert data["notes"] == "Accepted offer"
        assert data["hired_at"] is not None

    @pytest.mark.asyncio
    async def test_delete_application(self, client: AsyncClient, factory):
        application = await factory.create_application()

        response = await client.delete(f"/api/v1/applications/{application['id']}")
        assert response.status_code == 200

        response = await client.get(f"/api/v1/applications/{application['id']}")
        assert response.status_code == 404


class TestCalculateMatch:
    """AI 匹配度计算测试"""

    @pytest.mark.asyncio
    async def test_without_key(self, client: AsyncClient, factory):
        application = await factory.create_application()

        response = await client.post(f"/api/v1/applications/{application['id']}/calculate-match")
        assert response.status_code == 400
        assert "CLAUDE_API_KEY" in response.json()["message"]

    @pytest.mark.asyncio
    async def test_saves_scores(self, client: AsyncClient, factory, monkeypatch):
        calls = {}

        async def fake_match(candidate, job, api_key):
            calls["api_key"] = api_key
            calls["skills"] = candidate.skills
            calls["title"] = job.title
            return MatchResult(matching_score=82, skills_match=90, experience_match=70, analysis="Strong fit")

        monkeypatch.setattr(resume_matcher, "calculate_resume_job_match", fake_match)
        monkeypatch.setattr(settings, "anthropic_api_key", "env-key")

        application = await factory.create_application()
        response = await client.post(f"/api/v1/applications/{application['id']}/calculate-match")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["matching_score"] == 82
        assert data["skills_match"] == 90
        assert data["experience_match"] == 70
        assert data["analysis"] == "Strong fit"
        assert calls["api_key"] == "env-key"
        assert calls["skills"] == ["Python", "FastAPI"]
        assert calls["title"] == application["job_title"]

    @pytest.mark.asyncio
    async def test_organization_key_takes_precedence(self, client: AsyncClient, factory, monkeypatch):
        seen = []

        async def fake_match(candidate, job, api_key):
            seen.append(api_key)
            return MatchResult(matching_score=50, skills_match=50, experience_match=50)

        monkeypatch.setattr(resume_matcher, "calculate_resume_job_match", fake_match)
        monkeypatch.setattr(settings, "anthropic_api_key", "env-key")

        await client.post("/api/v1/settings", json={"key": "CLAUDE_API_KEY", "value": "org-key"})
        application = await factory.create_application()
        await client.post(f"/api/v1/applications/{application['id']}/calculate-match")

        assert seen == ["org-key"]

    @pytest.mark.asyncio
    async def test_matcher_failure(self, client: AsyncClient, factory, monkeypatch):
        async def failing_match(candidate, job, api_key):
            raise MatchingError("AI 匹配失败: invalid x-api-key")

        monkeypatch.setattr(resume_matcher, "calculate_resume_job_match", failing_match)
        monkeypatch.setattr(settings, "anthropic_api_key", "bad-key")

        application = await factory.create_application()
        response = await client.post(f"/api/v1/applications/{application['id']}/calculate-match")
        assert response.status_code == 502

        response = await client.get(f"/api/v1/applications/{application['id']}")
        assert response.json()["data"]["matching_score"] is None


class TestInterviewTokenIssue:
    """面试预约链接生成测试"""

    @pytest.mark.asyncio
    async def test_generate_token(self, client: AsyncClient, factory):
        application = await factory.create_application()

        response = await client.post(f"/api/v1/applications/{application['id']}/generate-token")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["application_id"] == application["id"]
        assert data["used"] is False
        assert data["schedule_url"] == f"http://frontend.test/schedule/{data['token']}"

    @pytest.mark.asyncio
    async def test_generate_token_unknown_application(self, client: AsyncClient):
        response = await client.post("/api/v1/applications/missing/generate-token")
        assert response.status_code == 404
