import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from toolmesh_ai.server.exception_handlers import setup_exception_handlers

pytestmark = pytest.mark.asyncio


async def test_unhandled_exception_returns_json_500():
    app = FastAPI()
    setup_exception_handlers(app)

    @app.get("/boom")
    async def boom():
        raise RuntimeError("kaboom")

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://localhost") as client:
        response = await client.get("http://localhost/boom")

    assert response.status_code == 500
    body = response.json()
    assert body["detail"] == "Internal server error"
    assert body["error_type"] == "RuntimeError"
    assert isinstance(body["error_id"], int)
