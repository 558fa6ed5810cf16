"""
批量简历筛选 API 测试
"""
import pytest
from httpx import AsyncClient

from app.core.config import settings
from app.core.progress_cache import progress_cache
from app.models.application import MatchResult
from app.services.agents import resume_matcher


JANE_RESUME = (
    b"Jane Doe\n"
    b"jane.doe@example.com | +1 555 123 4567\n"
    b"Senior Python developer with 6 years of experience building FastAPI services, "
    b"PostgreSQL databases and Docker based deployments."
)

RESUME_FILES = [
    ("jane_doe.txt", JANE_RESUME),
    ("john_smith.txt", b"John Smith\njohn@example.com\nJava developer with 1 year experience"),
    ("broken.bin", b"\x00\x01\x02\x03" * 100),
    ("no_email.txt", b"Python and FastAPI engineer, 3 years experience"),
]


async def upload(client: AsyncClient, job_id: str, files=RESUME_FILES):
    return await client.post(
        "/api/v1/bulk-jobs",
        data={"job_id": job_id, "started_by": "hr@example.com"},
        files=[("resumes", (name, content, "text/plain")) for name, content in files],
    )


class TestBulkUpload:
    """批量上传与打分测试"""

    @pytest.mark.asyncio
    async def test_process_batch_with_rule_matching(self, client: AsyncClient, factory):
        """无 Claude 密钥时使用规则匹配，无法解析的文件只计入已处理数"""
        job = await factory.create_job()

        response = await upload(client, job["id"])
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "completed"
        assert data["total_files"] == 4
        assert data["processed_files"] == 4
        assert data["qualified_candidates"] == 2
        assert data["started_by"] == "hr@example.com"
        assert data["job_title"] == job["title"]

        response = await client.get(f"/api/v1/bulk-jobs/{data['id']}/candidates")
        candidates = response.json()["data"]
        assert [c["file_name"] for c in candidates] == ["jane_doe.txt", "no_email.txt", "john_smith.txt"]
        assert [c["matching_score"] for c in candidates] == [98, 80, 16]

        jane = candidates[0]
        assert (jane["first_name"], jane["last_name"]) == ("Jane", "Doe")
        assert jane["email"] == "jane.doe@example.com"
        assert jane["experience"] == 6
        assert jane["skills"] == ["Python", "FastAPI", "SQL"]
        assert candidates[1]["email"] is None

    @pytest.mark.asyncio
    async def test_min_score_filter(self, client: AsyncClient, factory):
        job = await factory.create_job()
        bulk_job = (await upload(client, job["id"])).json()["data"]

        response = await client.get(f"/api/v1/bulk-jobs/{bulk_job['id']}/candidates", params={"min_score": 50})
        assert len(response.json()["data"]) == 2

    @pytest.mark.asyncio
    async def test_ai_matching_used_when_key_configured(self, client: AsyncClient, factory, monkeypatch):
        async def fake_match(candidate, job, api_key):
            return MatchResult(matching_score=77, skills_match=70, experience_match=90, analysis="AI")

        monkeypatch.setattr(resume_matcher, "calculate_resume_job_match", fake_match)
        monkeypatch.setattr(settings, "anthropic_api_key", "env-key")

        job = await factory.create_job()
        bulk_job = (await upload(client, job["id"], RESUME_FILES[:2])).json()["data"]
        assert bulk_job["qualified_candidates"] == 2

        candidates = (await client.get(f"/api/v1/bulk-jobs/{bulk_job['id']}/candidates")).json()["data"]
        assert {c["matching_score"] for c in candidates} == {77}
        assert {c["analysis"] for c in candidates} == {"AI"}

    @pytest.mark.asyncio
    async def test_progress(self, client: AsyncClient, factory):
        job = await factory.create_job()
        bulk_job = (await upload(client, job["id"])).json()["data"]

        response = await client.get(f"/api/v1/bulk-jobs/{bulk_job['id']}/progress")
        data = response.json()["data"]
        assert data["total"] == 4
        assert data["processed"] == 4
        assert data["qualified"] == 2
        assert data["progress"] == 100
        assert data["status"] == "completed"

    @pytest.mark.asyncio
    async def test_progress_cache_released_after_each_batch(self, client: AsyncClient, factory):
        """批次结束后进度缓存被清理，进度改由数据库记录提供"""
        job = await factory.create_job()
        first = (await upload(client, job["id"])).json()["data"]
        second = (await upload(client, job["id"], files=RESUME_FILES[:2])).json()["data"]

        assert progress_cache.get(first["id"]) is None
        assert progress_cache.get(second["id"]) is None

        response = await client.get(f"/api/v1/bulk-jobs/{second['id']}/progress")
        data = response.json()["data"]
        assert (data["total"], data["processed"], data["progress"]) == (2, 2, 100)

    @pytest.mark.asyncio
    async def test_list_and_detail(self, client: AsyncClient, factory):
        job = await factory.create_job()
        bulk_job = (await upload(client, job["id"], RESUME_FILES[:1])).json()["data"]

        response = await client.get("/api/v1/bulk-jobs")
        assert response.json()["data"]["total"] == 1

        response = await client.get(f"/api/v1/bulk-jobs/{bulk_job['id']}")
        assert response.json()["data"]["id"] == bulk_job["id"]

        response = await client.get("/api/v1/bulk-jobs/missing")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_requires_files(self, client: AsyncClient, factory):
        job = await factory.create_job()
        response = await client.post("/api/v1/bulk-jobs", data={"job_id": job["id"]})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_file_limit(self, client: AsyncClient, factory, monkeypatch):
        monkeypatch.setattr(settings, "max_bulk_files", 2)
        job = await factory.create_job()
        response = await upload(client, job["id"])
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_job(self, client: AsyncClient):
        response = await upload(client, "missing")
        assert response.status_code == 404


class TestBulkShortlist:
    """入围、加入候选人库与发送问卷测试"""

    async def _prepare(self, client: AsyncClient, factory):
        job = await factory.create_job()
        bulk_job = (await upload(client, job["id"])).json()["data"]
        candidates = (await client.get(f"/api/v1/bulk-jobs/{bulk_job['id']}/candidates")).json()["data"]
        by_file = {c["file_name"]: c for c in candidates}
        return job, bulk_job, by_file

    @pytest.mark.asyncio
    async def test_shortlist_replaces_previous(self, client: AsyncClient, factory):
        _, bulk_job, by_file = await self._prepare(client, factory)
        url = f"/api/v1/bulk-jobs/{bulk_job['id']}/shortlist"

        response = await client.post(url, json={"candidate_ids": [by_file["jane_doe.txt"]["id"], by_file["john_smith.txt"]["id"]]})
        assert response.json()["data"] == {"shortlisted": 2}

        response = await client.post(url, json={"candidate_ids": [by_file["no_email.txt"]["id"]]})
        assert response.json()["data"] == {"shortlisted": 1}

        candidates = (await client.get(f"/api/v1/bulk-jobs/{bulk_job['id']}/candidates")).json()["data"]
        assert [c["file_name"] for c in candidates if c["is_shortlisted"]] == ["no_email.txt"]

    @pytest.mark.asyncio
    async def test_add_to_main_list(self, client: AsyncClient, factory):
        """无邮箱的候选人跳过，其余创建候选人与申请"""
        job, bulk_job, by_file = await self._prepare(client, factory)
        await client.post(f"/api/v1/bulk-jobs/{bulk_job['id']}/shortlist", json={
            "candidate_ids": [by_file["jane_doe.txt"]["id"], by_file["no_email.txt"]["id"]],
        })

        response = await client.post(f"/api/v1/bulk-jobs/{bulk_job['id']}/add-to-main-list")
        assert response.json()["data"] == {"added": 1, "skipped": 1}

        applications = (await client.get("/api/v1/applications", params={"job_id": job["id"]})).json()["data"]
        assert applications["total"] == 1
        application = applications["items"][0]
        assert application["candidate_email"] == "jane.doe@example.com"
        assert application["candidate_name"] == "Jane Doe"
        assert application["matching_score"] == 98

        # 已加入的不会重复加入
        response = await client.post(f"/api/v1/bulk-jobs/{bulk_job['id']}/add-to-main-list")
        assert response.json()["data"] == {"added": 0, "skipped": 1}

        candidates = (await client.get(f"/api/v1/bulk-jobs/{bulk_job['id']}/candidates")).json()["data"]
        jane = next(c for c in candidates if c["file_name"] == "jane_doe.txt")
        assert jane["added_to_main_list"] is True
        assert jane["candidate_id"] == application["candidate_id"]

    @pytest.mark.asyncio
    async def test_add_reuses_existing_candidate(self, client: AsyncClient, factory):
        existing = await factory.create_candidate(email="jane.doe@example.com")
        _, bulk_job, by_file = await self._prepare(client, factory)
        await client.post(f"/api/v1/bulk-jobs/{bulk_job['id']}/shortlist", json={
            "candidate_ids": [by_file["jane_doe.txt"]["id"]],
        })

        await client.post(f"/api/v1/bulk-jobs/{bulk_job['id']}/add-to-main-list")

        listing = (await client.get("/api/v1/candidates")).json()["data"]
        assert listing["total"] == 1
        candidates = (await client.get(f"/api/v1/bulk-jobs/{bulk_job['id']}/candidates")).json()["data"]
        jane = next(c for c in candidates if c["file_name"] == "jane_doe.txt")
        assert jane["candidate_id"] == existing["id"]

    @pytest.mark.asyncio
    async def test_send_screening_emails(self, client: AsyncClient, factory):
        job, bulk_job, by_file = await self._prepare(client, factory)
        await client.post(f"/api/v1/bulk-jobs/{bulk_job['id']}/shortlist", json={
            "candidate_ids": [by_file["jane_doe.txt"]["id"], by_file["john_smith.txt"]["id"]],
        })

        # 尚未加入候选人库时不发送
        response = await client.post(f"/api/v1/bulk-jobs/{bulk_job['id']}/send-screening-emails")
        assert response.json()["data"] == {"tokens_created": 0, "emails_sent": 0}

        await client.post(f"/api/v1/bulk-jobs/{bulk_job['id']}/add-to-main-list")
        response = await client.post(f"/api/v1/bulk-jobs/{bulk_job['id']}/send-screening-emails")
        assert response.json()["data"] == {"tokens_created": 2, "emails_sent": 0}

        applications = (await client.get("/api/v1/applications", params={"job_id": job["id"]})).json()["data"]
        assert {a["status"] for a in applications["items"]} == {"screening_sent"}
