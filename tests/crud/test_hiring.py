"""
录用流程 API 测试
"""
import pytest
from httpx import AsyncClient


async def advance(client: AsyncClient, application_id: str, new_status: str):
    return await client.post("/api/v1/hiring/advance-stage", json={
        "application_id": application_id, "new_status": new_status,
    })


class TestAdvanceStage:
    """推进录用阶段测试"""

    @pytest.mark.asyncio
    async def test_technical_round_notifies_candidate(self, client: AsyncClient, factory, outbox):
        application = await factory.create_application()

        response = await advance(client, application["id"], "technical_round")
        assert response.status_code == 200
        assert response.json()["data"] == {
            "application_id": application["id"],
            "new_status": "technical_round",
            "email_sent": True,
        }

        assert outbox[0]["to"] == application["candidate_email"]
        assert outbox[0]["subject"] == f"Technical Round Invitation - {application['job_title']}"
        assert f"Dear {application['candidate_name']}," in outbox[0]["text"]

        response = await client.get(f"/api/v1/applications/{application['id']}")
        assert response.json()["data"]["status"] == "technical_round"

    @pytest.mark.asyncio
    async def test_hired_records_hire_time(self, client: AsyncClient, factory, outbox):
        application = await factory.create_application()

        response = await advance(client, application["id"], "hired")
        assert response.json()["data"]["email_sent"] is True
        assert outbox[0]["subject"] == f"Welcome aboard - {application['job_title']}"

        data = (await client.get(f"/api/v1/applications/{application['id']}")).json()["data"]
        assert data["status"] == "hired"
        assert data["hired_at"] is not None

    @pytest.mark.asyncio
    async def test_status_updated_when_email_fails(self, client: AsyncClient, factory):
        """未配置 SMTP 时仍更新状态"""
        application = await factory.create_application()

        response = await advance(client, application["id"], "offered")
        assert response.json()["data"]["email_sent"] is False

        response = await client.get(f"/api/v1/applications/{application['id']}")
        assert response.json()["data"]["status"] == "offered"

    @pytest.mark.asyncio
    async def test_stage_without_template_sends_nothing(self, client: AsyncClient, factory, outbox):
        application = await factory.create_application()

        response = await advance(client, application["id"], "interviewed")
        assert response.json()["data"]["email_sent"] is False
        assert outbox == []

    @pytest.mark.asyncio
    async def test_validation(self, client: AsyncClient, factory):
        application = await factory.create_application()

        response = await advance(client, application["id"], "promoted")
        assert response.status_code == 422

        response = await advance(client, "missing", "final_round")
        assert response.status_code == 404
