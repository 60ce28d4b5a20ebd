"""End-to-end checks of the envelope protocol over HTTP.

``HttpToolClient`` talks to the FastAPI application through an in-process ASGI
transport, so the full path (client, route, dispatcher, registry, tool) runs.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from toolmesh_ai.agent_core.factory import build_orchestrator
from toolmesh_ai.agent_core.schemas.config import OrchestratorConfig
from toolmesh_ai.protocol.client import HttpToolClient
from toolmesh_ai.protocol.errors import ToolCallError
from toolmesh_ai.server.core.config import Settings
from toolmesh_ai.server.main import create_app

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def http_client():
    app = create_app(Settings(retry_delay_seconds=0, completion_model=None))
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def tool_client(http_client: AsyncClient) -> HttpToolClient:
    return HttpToolClient("http://testserver", client=http_client)


async def test_ping_over_http(tool_client: HttpToolClient):
    result = await tool_client.ping()

    assert result["status"] == "active"
    assert result["version"] == "1.0"


async def test_unknown_tool_over_http(tool_client: HttpToolClient):
    with pytest.raises(ToolCallError, match="Unknown tool: doesNotExist"):
        await tool_client.call_tool("doesNotExist", {})


async def test_invalid_parameters_over_http(tool_client: HttpToolClient):
    with pytest.raises(ToolCallError) as exc_info:
        await tool_client.call_tool("analyzeText", {})

    assert str(exc_info.value).startswith("Tool execution failed: Invalid parameters for analyzeText")


async def test_catalog_over_http(tool_client: HttpToolClient):
    tools = await tool_client.get_available_tools()
    names = [t["name"] for t in tools]

    assert "searchWeb" in names
    assert all(not n.startswith("system.") for n in names)


async def test_orchestrator_over_http(tool_client: HttpToolClient, no_sleep):
    orchestrator = build_orchestrator(
        client=tool_client,
        config=OrchestratorConfig(retry_delay_seconds=0),
        sleep=no_sleep,
    )
    await orchestrator.load_available_tools()

    response = await orchestrator.process_query("search for model context protocol")

    assert "### searchWeb:" in response
    assert "Search results for: model context protocol" in response
    assert [t.role.value for t in orchestrator.context.turns] == ["user", "assistant"]
