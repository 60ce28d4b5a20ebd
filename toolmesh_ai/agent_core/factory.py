from __future__ import annotations

"""Convenience factories for wiring the agent core.

These helpers build the default tool registry and an ``Orchestrator`` bound
to an in-process dispatcher, keeping application wiring and tests concise.
Deployments that talk to a remote tool server can construct an
``Orchestrator`` with an ``HttpToolClient`` directly.
"""

from typing import Any, Optional

import httpx

from toolmesh_ai.protocol.client import LocalToolClient, ToolClient
from toolmesh_ai.protocol.dispatcher import Dispatcher
from toolmesh_ai.protocol.registry import ToolRegistry
from toolmesh_ai.tools import register_builtin_tools

from .completion import CompletionService, PydanticAICompletion
from .context import ConversationContext
from .orchestrator import Orchestrator
from .runtime.retry import Sleep
from .schemas.config import OrchestratorConfig


def build_default_registry(
    *,
    enable_code_execution: bool = False,
    github_api_url: str = "https://api.github.com",
    http_timeout_seconds: float = 30.0,
    http_client: Optional[httpx.AsyncClient] = None,
) -> ToolRegistry:
    """Build a ``ToolRegistry`` holding the ``system.`` tools and the built-in tools."""
    return register_builtin_tools(
        ToolRegistry(),
        enable_code_execution=enable_code_execution,
        github_api_url=github_api_url,
        http_timeout_seconds=http_timeout_seconds,
        http_client=http_client,
    )


def build_completion(model: Any | None) -> Optional[CompletionService]:
    """Wrap a Pydantic AI model (instance or ``"provider:model"`` name); ``None`` stays ``None``."""
    if model is None or (isinstance(model, str) and not model.strip()):
        return None
    return PydanticAICompletion(model)


def build_orchestrator(
    *,
    client: Optional[ToolClient] = None,
    registry: Optional[ToolRegistry] = None,
    config: Optional[OrchestratorConfig] = None,
    completion: Optional[CompletionService] = None,
    model: Any | None = None,
    tool_timeout_seconds: Optional[float] = None,
    context: Optional[ConversationContext] = None,
    sleep: Optional[Sleep] = None,
) -> Orchestrator:
    """Construct an ``Orchestrator``.

    When no ``client`` is given, a ``LocalToolClient`` over ``registry`` (or
    the default registry) is used. ``completion`` takes precedence over
    ``model``.
    """
    if client is None:
        dispatcher = Dispatcher(registry or build_default_registry(), timeout_seconds=tool_timeout_seconds)
        client = LocalToolClient(dispatcher)
    return Orchestrator(
        client=client,
        completion=completion if completion is not None else build_completion(model),
        config=config,
        context=context,
        sleep=sleep,
    )
