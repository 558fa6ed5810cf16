"""
系统接口测试
"""
import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_reports_integrations(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "healthy"
    # 测试环境下邮件与模型均未配置
    assert data["integrations"]["smtp"] is False
    assert data["integrations"]["llm"] is False
    assert data["integrations"]["claude"] is False


@pytest.mark.asyncio
async def test_unknown_route_uses_error_envelope(client: AsyncClient):
    response = await client.get("/api/v1/no-such-resource")
    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["code"] == 404
