"""
Main Application Entry Point.

This module builds the FastAPI application, configures middleware (CORS) and
exception handlers, and includes all API routers.

``create_app`` wires one tool registry, dispatcher, orchestrator and session
store per application instance and keeps them on ``app.state``.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from toolmesh_ai import __version__
from toolmesh_ai.agent_core.completion import CompletionService
from toolmesh_ai.agent_core.context import SessionStore
from toolmesh_ai.agent_core.factory import build_completion, build_default_registry
from toolmesh_ai.agent_core.orchestrator import Orchestrator
from toolmesh_ai.core.logging_config import get_logger, setup_logging
from toolmesh_ai.protocol.client import LocalToolClient
from toolmesh_ai.protocol.dispatcher import Dispatcher
from toolmesh_ai.protocol.registry import ToolRegistry

from .api.v1 import agent, health, protocol
from .core import constant
from .core.config import Settings, get_settings
from .exception_handlers import setup_exception_handlers

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Configures logging and loads the tool catalog into the orchestrator on
    startup; clears all sessions on shutdown.
    """
    settings: Settings = app.state.settings
    setup_logging(settings.log_level, settings.log_format, settings.enable_file_logging)
    logger.info("Starting up toolmesh-ai Server...")
    await app.state.orchestrator.load_available_tools()
    logger.info(f"{len(app.state.registry)} tools registered")

    yield

    logger.info("Shutting down toolmesh-ai Server...")
    app.state.sessions.clear()


def create_app(
    settings: Optional[Settings] = None,
    *,
    registry: Optional[ToolRegistry] = None,
    completion: Optional[CompletionService] = None,
) -> FastAPI:
    """
    Build a FastAPI application.

    Args:
        settings: Settings to use; defaults to the process-wide settings.
        registry: Tool registry to serve; defaults to the built-in tools.
        completion: Completion service for the orchestrator; defaults to the
                    model named by ``settings.completion_model`` (if any).
    """
    settings = settings or get_settings()
    if registry is None:
        registry = build_default_registry(
            enable_code_execution=settings.enable_code_execution,
            github_api_url=settings.github_api_url,
            http_timeout_seconds=settings.http_timeout_seconds,
        )
    dispatcher = Dispatcher(registry, timeout_seconds=settings.tool_timeout_seconds)
    orchestrator = Orchestrator(
        client=LocalToolClient(dispatcher),
        completion=completion if completion is not None else build_completion(settings.completion_model),
        config=settings.orchestrator,
    )

    app = FastAPI(
        title=constant.PROJECT_NAME,
        description="""
        toolmesh-ai Server API

        Invoke registered tools through a uniform request/response envelope and
        submit free-form queries to the agent orchestrator.
        """,
        version=__version__,
        openapi_url=f"{constant.API_V1_STR}/openapi.json",
        docs_url=f"{constant.API_V1_STR}/docs",
        redoc_url=f"{constant.API_V1_STR}/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.registry = registry
    app.state.dispatcher = dispatcher
    app.state.orchestrator = orchestrator
    app.state.sessions = SessionStore(history_limit=settings.history_limit, max_sessions=settings.max_sessions)

    cors = settings.cors
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors.origins,
        allow_credentials=cors.allow_credentials,
        allow_methods=cors.allow_methods,
        allow_headers=cors.allow_headers,
    )
    setup_exception_handlers(app)

    app.include_router(health.router, tags=["health"])
    app.include_router(protocol.router, tags=["protocol"])
    app.include_router(agent.router, prefix=f"{constant.API_V1_STR}/agent", tags=["agent"])
    return app


app = create_app()
