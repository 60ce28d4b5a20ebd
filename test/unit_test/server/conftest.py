from typing import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from toolmesh_ai.server.core.config import Settings
from toolmesh_ai.server.main import create_app


@pytest_asyncio.fixture
async def app():
    settings = Settings(retry_delay_seconds=0, completion_model=None, enable_code_execution=False)
    return create_app(settings)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as ac:
        yield ac
