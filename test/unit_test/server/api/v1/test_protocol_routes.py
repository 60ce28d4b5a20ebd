import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def test_ping_returns_pong(client: AsyncClient):
    response = await client.get("http://localhost/ping")
    assert response.status_code == 200
    assert response.text == "pong"


async def test_dispatch_system_ping(client: AsyncClient):
    response = await client.post(
        "http://localhost/",
        json={"version": "1.0", "action": {"name": "system.ping", "parameters": {}}},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["version"] == "1.0"
    assert body["status"] == "success"
    assert body["result"]["status"] == "active"
    assert body["result"]["version"] == "1.0"
    assert "timestamp" in body["result"]


async def test_dispatch_unknown_tool(client: AsyncClient):
    response = await client.post(
        "http://localhost/",
        json={"version": "1.0", "action": {"name": "doesNotExist", "parameters": {}}},
    )
    assert response.status_code == 200
    assert response.json() == {"version": "1.0", "status": "error", "error": "Unknown tool: doesNotExist"}


async def test_dispatch_invalid_envelope(client: AsyncClient):
    response = await client.post("http://localhost/", json={"action": {"name": "analyzeText"}})
    body = response.json()
    assert body["status"] == "error"
    assert body["error"].startswith("Invalid request:")


async def test_dispatch_non_json_body(client: AsyncClient):
    response = await client.post(
        "http://localhost/", content=b"not json", headers={"content-type": "application/json"}
    )
    body = response.json()
    assert body["status"] == "error"
    assert "not valid JSON" in body["error"]


async def test_dispatch_tool(client: AsyncClient):
    response = await client.post(
        "http://localhost/",
        json={"version": "1.0", "action": {"name": "analyzeText", "parameters": {"text": "Hello world. Bye."}}},
    )
    body = response.json()
    assert body["status"] == "success"
    assert body["result"]["statistics"]["sentenceCount"] == 2


async def test_tools_hides_system_namespace_by_default(client: AsyncClient):
    response = await client.get("http://localhost/tools")
    assert response.status_code == 200
    names = [t["name"] for t in response.json()["tools"]]
    assert names[0] == "analyzeText"
    assert "executeCode" not in names
    assert not any(n.startswith("system.") for n in names)


async def test_tools_can_include_system_namespace(client: AsyncClient):
    response = await client.get("http://localhost/tools", params={"include_system": "true"})
    names = [t["name"] for t in response.json()["tools"]]
    assert names[:2] == ["system.getTools", "system.ping"]
