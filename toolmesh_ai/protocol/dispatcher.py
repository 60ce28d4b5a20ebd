"""Dispatcher: one request envelope in, one response envelope out.

``Dispatcher.dispatch`` is total. Validation failures, unknown tools, handler
faults and timeouts are all converted into error envelopes:

- ``Invalid request: <validation message>``
- ``Unknown tool: <name>``
- ``Tool execution failed: <handler message>``
- ``Unexpected error: <message>``

Sync handlers are run with ``asyncio.to_thread`` so they never block the
event loop and are bounded by the same per-call timeout as async ones.
"""

from __future__ import annotations

import asyncio
import inspect
import time
from typing import Any, Dict, Optional

from toolmesh_ai.core.logging_config import get_logger

from .envelope import build_error, build_success, parse_request
from .errors import InvalidEnvelope, ToolExecutionFailure, ToolNotFound
from .registry import ToolRecord, ToolRegistry

logger = get_logger(__name__)


class Dispatcher:
    """Route request envelopes to registered tool handlers."""

    def __init__(self, registry: ToolRegistry, *, timeout_seconds: Optional[float] = None) -> None:
        self._registry = registry
        self._timeout = timeout_seconds

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    async def dispatch(self, envelope: Any) -> Dict[str, Any]:
        """Handle a raw request envelope and always return a response envelope."""
        started = time.perf_counter()
        tool_name = "<invalid>"
        try:
            try:
                request = parse_request(envelope)
            except InvalidEnvelope as exc:
                logger.warning(f"Rejected invalid request: {exc}")
                return build_error(f"Invalid request: {exc}")

            tool_name = request.action.name
            try:
                record = self._registry.lookup(tool_name)
            except ToolNotFound as exc:
                logger.warning(f"Unknown tool requested: {tool_name}")
                return build_error(str(exc))

            try:
                result = await self._invoke(record, dict(request.action.parameters))
            except ToolExecutionFailure as exc:
                logger.error(
                    "Tool %s failed after %.1fms: %s",
                    tool_name,
                    (time.perf_counter() - started) * 1000,
                    exc,
                )
                return build_error(f"Tool execution failed: {exc}")

            logger.info("Tool %s succeeded in %.1fms", tool_name, (time.perf_counter() - started) * 1000)
            return build_success(result)
        except Exception as exc:
            logger.exception(f"Unexpected error while dispatching {tool_name}")
            return build_error(f"Unexpected error: {exc}")

    async def _invoke(self, record: ToolRecord, parameters: Dict[str, Any]) -> Any:
        try:
            if _is_async_callable(record.handler):
                call = record.handler(parameters)
            else:
                # sync handlers run on a worker thread, inside the timeout
                call = asyncio.to_thread(record.handler, parameters)
            if self._timeout is not None:
                outcome = await asyncio.wait_for(call, timeout=self._timeout)
            else:
                outcome = await call
            if inspect.isawaitable(outcome):
                outcome = await outcome
            return outcome
        except asyncio.TimeoutError as exc:
            raise ToolExecutionFailure(record.name, f"{record.name} timed out after {self._timeout}s") from exc
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            raise ToolExecutionFailure(record.name, str(exc) or exc.__class__.__name__) from exc


def _is_async_callable(handler: Any) -> bool:
    return inspect.iscoroutinefunction(handler) or inspect.iscoroutinefunction(getattr(handler, "__call__", None))
