"""FastAPI dependencies resolving the per-app objects stored on ``app.state``."""

from fastapi import Request

from toolmesh_ai.agent_core.context import SessionStore
from toolmesh_ai.agent_core.orchestrator import Orchestrator
from toolmesh_ai.protocol.dispatcher import Dispatcher
from toolmesh_ai.protocol.registry import ToolRegistry


def get_registry(request: Request) -> ToolRegistry:
    return request.app.state.registry


def get_dispatcher(request: Request) -> Dispatcher:
    return request.app.state.dispatcher


def get_orchestrator(request: Request) -> Orchestrator:
    return request.app.state.orchestrator


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.sessions
