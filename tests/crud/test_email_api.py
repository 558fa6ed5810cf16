"""
测试邮件 API
"""
import pytest
from httpx import AsyncClient


class TestEmailAPI:

    @pytest.mark.asyncio
    async def test_send_without_smtp(self, client: AsyncClient):
        """未配置 SMTP 时不发送，也不报错"""
        response = await client.post("/api/v1/email/test", json={"to": "hr@example.com"})
        assert response.status_code == 200
        assert response.json()["data"] == {"sent": False, "configured": False}

    @pytest.mark.asyncio
    async def test_recipient_required(self, client: AsyncClient):
        response = await client.post("/api/v1/email/test", json={"subject": "Hi"})
        assert response.status_code == 422
