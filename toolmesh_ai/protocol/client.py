"""Tool clients used by the orchestrator to reach a dispatcher.

Both clients speak the same envelope protocol:

- ``LocalToolClient`` hands envelopes to an in-process ``Dispatcher``.
- ``HttpToolClient`` POSTs envelopes to a remote server with ``httpx``.

``call_tool`` returns the ``result`` mapping of a success envelope and raises
``ToolCallError`` for an error envelope or a malformed response.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional

import httpx

from toolmesh_ai.core.logging_config import get_logger

from .dispatcher import Dispatcher
from .envelope import ErrorEnvelope, build_request, parse_response
from .errors import InvalidEnvelope, ToolCallError
from .registry import SYSTEM_PREFIX

logger = get_logger(__name__)


class ToolClient(ABC):
    """Base class for envelope-speaking tool clients."""

    async def call_tool(self, name: str, parameters: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """Invoke ``name`` and return its result mapping.

        Raises:
            ToolCallError: If the tool returned an error envelope or the response is malformed.
        """
        try:
            request = build_request(name, parameters)
        except InvalidEnvelope as exc:
            raise ToolCallError(str(exc)) from exc

        raw = await self._send(request)
        try:
            response = parse_response(raw)
        except InvalidEnvelope as exc:
            raise ToolCallError(f"Invalid response from {name}: {exc}") from exc

        if isinstance(response, ErrorEnvelope):
            raise ToolCallError(response.error)
        return response.result

    async def ping(self) -> Dict[str, Any]:
        return await self.call_tool(f"{SYSTEM_PREFIX}ping")

    async def get_available_tools(self) -> List[Dict[str, Any]]:
        """Return the public tool catalog via ``system.getTools``."""
        result = await self.call_tool(f"{SYSTEM_PREFIX}getTools")
        tools = result.get("tools")
        if not isinstance(tools, list):
            raise ToolCallError("Malformed tool catalog")
        return tools

    @abstractmethod
    async def _send(self, envelope: Dict[str, Any]) -> Any:
        """Deliver a request envelope and return the raw response envelope."""


class LocalToolClient(ToolClient):
    """In-process client bound to a ``Dispatcher``."""

    def __init__(self, dispatcher: Dispatcher) -> None:
        self._dispatcher = dispatcher

    async def _send(self, envelope: Dict[str, Any]) -> Any:
        return await self._dispatcher.dispatch(envelope)


class HttpToolClient(ToolClient):
    """HTTP client for a remote toolmesh server (``POST /``)."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._client = client

    async def _send(self, envelope: Dict[str, Any]) -> Any:
        url = f"{self._base_url}/"
        try:
            if self._client is not None:
                response = await self._client.post(url, json=envelope, timeout=self._timeout)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(url, json=envelope)
        except httpx.HTTPError as exc:
            logger.warning(f"HTTP transport error calling {url}: {exc}")
            raise ToolCallError(f"Transport error: {exc}") from exc

        if not response.is_success:
            logger.warning(f"HTTP {response.status_code} from {url}")
            raise ToolCallError(f"HTTP {response.status_code}: {response.reason_phrase}")
        try:
            return response.json()
        except ValueError as exc:
            raise ToolCallError(f"Response is not valid JSON: {exc}") from exc
