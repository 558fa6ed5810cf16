"""
候选人 API 测试

覆盖简历上传、邮箱唯一、归档恢复和初筛问卷发送
"""
import pytest
from httpx import AsyncClient


class TestCandidateAPI:
    """候选人 API 测试类"""

    @pytest.mark.asyncio
    async def test_create_candidate_extracts_resume(self, client: AsyncClient, factory):
        """测试上传简历创建候选人"""
        candidate = await factory.create_candidate(email="Jane.Upload@Example.com")

        assert candidate["email"] == "jane.upload@example.com"
        assert candidate["skills"] == ["Python", "FastAPI"]
        assert candidate["experience"] == 4
        assert "FastAPI services" in candidate["resume_text"]
        assert candidate["resume_url"].endswith(".txt")
        assert candidate["archived_at"] is None

    @pytest.mark.asyncio
    async def test_create_candidate_saves_file(self, client: AsyncClient, factory, tmp_path):
        candidate = await factory.create_candidate()
        stored = tmp_path / "uploads" / candidate["resume_url"]
        assert stored.exists()

    @pytest.mark.asyncio
    async def test_create_candidate_with_job_creates_application(self, client: AsyncClient, factory):
        job = await factory.create_job()
        candidate = await factory.create_candidate(selected_job_id=job["id"])

        response = await client.get("/api/v1/applications", params={"candidate_id": candidate["id"]})
        items = response.json()["data"]["items"]
        assert len(items) == 1
        assert items[0]["job_id"] == job["id"]
        assert items[0]["status"] == "applied"

    @pytest.mark.asyncio
    async def test_create_candidate_detects_job_skills(self, client: AsyncClient, factory):
        """未填写技能时从简历中识别所选岗位的技能"""
        job = await factory.create_job(skills="Python, FastAPI, SQL, Kubernetes")

        detected = await factory.create_candidate(skills="", selected_job_id=job["id"])
        assert detected["skills"] == ["Python", "FastAPI", "SQL"]

        # 填写了技能则以表单为准
        given = await factory.create_candidate(skills="Go", selected_job_id=job["id"])
        assert given["skills"] == ["Go"]

        # 未选岗位时没有可参照的技能
        bare = await factory.create_candidate(skills="")
        assert bare["skills"] == []

    @pytest.mark.asyncio
    async def test_create_candidate_unknown_job(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/candidates",
            data={"first_name": "A", "email": "a@example.com", "selected_job_id": "missing"},
            files={"resume": ("cv.txt", b"Plain text resume", "text/plain")},
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_create_candidate_duplicate_email(self, client: AsyncClient, factory):
        """同一邮箱只能创建一次"""
        await factory.create_candidate(email="dup@example.com")

        response = await client.post(
            "/api/v1/candidates",
            data={"first_name": "Other", "email": "DUP@example.com"},
            files={"resume": ("cv.txt", b"Another resume", "text/plain")},
        )
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_create_candidate_unreadable_resume(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/candidates",
            data={"first_name": "A", "email": "a@example.com"},
            files={"resume": ("photo.png", b"\x89PNG\x00\x01\x02\x03" * 64, "image/png")},
        )
        assert response.status_code == 400
        assert response.json()["success"] is False

        listing = await client.get("/api/v1/candidates")
        assert listing.json()["data"]["total"] == 0

    @pytest.mark.asyncio
    async def test_create_candidate_invalid_email(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/candidates",
            data={"first_name": "A", "email": "not-an-email"},
            files={"resume": ("cv.txt", b"Plain text resume", "text/plain")},
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_search_candidates(self, client: AsyncClient, factory):
        await factory.create_candidate(first_name="Alice", email="alice@example.com")
        await factory.create_candidate(first_name="Bob", email="bob@example.com")

        response = await client.get("/api/v1/candidates", params={"search": "alice"})
        data = response.json()["data"]
        assert data["total"] == 1
        assert data["items"][0]["first_name"] == "Alice"

    @pytest.mark.asyncio
    async def test_update_candidate(self, client: AsyncClient, factory):
        candidate = await factory.create_candidate()
        response = await client.patch(f"/api/v1/candidates/{candidate['id']}", json={
            "position": "Tech Lead",
            "skills": ["Python", "Kubernetes"],
        })
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["position"] == "Tech Lead"
        assert data["skills"] == ["Python", "Kubernetes"]

    @pytest.mark.asyncio
    async def test_update_candidate_email_conflict(self, client: AsyncClient, factory):
        await factory.create_candidate(email="taken@example.com")
        candidate = await factory.create_candidate()

        response = await client.patch(f"/api/v1/candidates/{candidate['id']}", json={
            "email": "taken@example.com",
        })
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_archive_and_restore(self, client: AsyncClient, factory):
        """归档后不在默认列表中，恢复后重新出现"""
        candidate = await factory.create_candidate()

        response = await client.post(f"/api/v1/candidates/{candidate['id']}/archive")
        assert response.status_code == 200
        assert response.json()["data"]["archived_at"] is not None

        assert (await client.get("/api/v1/candidates")).json()["data"]["total"] == 0
        assert (await client.get("/api/v1/candidates/archived")).json()["data"]["total"] == 1

        response = await client.post(f"/api/v1/candidates/{candidate['id']}/restore")
        assert response.json()["data"]["archived_at"] is None
        assert (await client.get("/api/v1/candidates")).json()["data"]["total"] == 1

    @pytest.mark.asyncio
    async def test_delete_candidate_removes_applications(self, client: AsyncClient, factory):
        application = await factory.create_application()

        response = await client.delete(f"/api/v1/candidates/{application['candidate_id']}")
        assert response.status_code == 200

        response = await client.get(f"/api/v1/applications/{application['id']}")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_get_candidate_not_found(self, client: AsyncClient):
        response = await client.get("/api/v1/candidates/not-exist-id")
        assert response.status_code == 404


class TestScreeningEmail:
    """初筛问卷发送测试"""

    @pytest.mark.asyncio
    async def test_send_screening_creates_application(self, client: AsyncClient, factory):
        job = await factory.create_job()
        candidate = await factory.create_candidate()

        data = await factory.send_screening(candidate["id"], job["id"])
        assert len(data["token"]) == 32
        assert data["screening_url"] == f"http://frontend.test/screening/{data['token']}"
        # 未配置 SMTP
        assert data["email_sent"] is False

        response = await client.get("/api/v1/applications", params={"candidate_id": candidate["id"]})
        items = response.json()["data"]["items"]
        assert len(items) == 1
        assert items[0]["status"] == "screening_sent"

    @pytest.mark.asyncio
    async def test_send_screening_updates_existing_application(self, client: AsyncClient, factory):
        application = await factory.create_application()

        await factory.send_screening(application["candidate_id"], application["job_id"])

        response = await client.get(f"/api/v1/applications/{application['id']}")
        assert response.json()["data"]["status"] == "screening_sent"

    @pytest.mark.asyncio
    async def test_send_screening_unknown_job(self, client: AsyncClient, factory):
        candidate = await factory.create_candidate()
        response = await client.post("/api/v1/candidates/send-screening-email", json={
            "candidate_id": candidate["id"], "job_id": "missing",
        })
        assert response.status_code == 404
