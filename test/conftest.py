from __future__ import annotations

from typing import Any, Iterable, List, Optional

import httpx
import pytest

from toolmesh_ai.protocol.dispatcher import Dispatcher
from toolmesh_ai.protocol.registry import ToolRegistry
from toolmesh_ai.tools import register_builtin_tools


@pytest.fixture(autouse=True)
def _global_offline_http_guard(monkeypatch: pytest.MonkeyPatch):
    allowed_prefixes: Iterable[str] = (
        "http://mock",
        "https://mock",
        "http://localhost",
        "http://127.0.0.1",
        "http://testserver",
        "/",  # Allow relative paths (used by ASGI transport)
    )

    orig_async = httpx._client.AsyncClient.request

    def _is_allowed(url_str: str) -> bool:
        return any(url_str.startswith(p) for p in allowed_prefixes)

    async def offline_async(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str) or str(self.base_url).startswith(tuple(allowed_prefixes)):
            return await orig_async(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard (async): {url_str}")

    monkeypatch.setattr(httpx._client.AsyncClient, "request", offline_async, raising=True)


class ScriptedCompletion:
    """Completion service returning queued replies; an ``Exception`` entry is raised instead."""

    def __init__(self, replies: Optional[List[Any]] = None) -> None:
        self.replies = list(replies or [])
        self.calls: List[dict] = []

    async def complete(self, system_instruction: str, user_prompt: str, max_tokens: int) -> str:
        self.calls.append(
            {"system_instruction": system_instruction, "user_prompt": user_prompt, "max_tokens": max_tokens}
        )
        if not self.replies:
            raise RuntimeError("no scripted reply left")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def scripted_completion():
    """Factory fixture: ``scripted_completion([reply, ...])``."""
    return ScriptedCompletion


@pytest.fixture
def registry() -> ToolRegistry:
    return register_builtin_tools(ToolRegistry())


@pytest.fixture
def dispatcher(registry: ToolRegistry) -> Dispatcher:
    return Dispatcher(registry, timeout_seconds=5.0)


async def _no_sleep(_seconds: float) -> None:
    return None


@pytest.fixture
def no_sleep():
    """Awaitable replacing ``asyncio.sleep`` between retry attempts."""
    return _no_sleep
