"""
Protocol Endpoints.

The minimal transport for the dispatcher:

- ``POST /``: one request envelope in, one response envelope out (always HTTP 200),
- ``GET /ping``: liveness, answers ``pong``,
- ``GET /tools``: the tool catalog in registration order.
"""

import json
from typing import Any, Dict

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse

from toolmesh_ai.core.logging_config import get_logger
from toolmesh_ai.protocol.dispatcher import Dispatcher
from toolmesh_ai.protocol.envelope import build_error
from toolmesh_ai.protocol.registry import SYSTEM_PREFIX, ToolRegistry

from ...dependencies import get_dispatcher, get_registry
from ...schemas import ToolCatalogResponse

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/",
    summary="Dispatch Envelope",
    description="Invoke a registered tool with a request envelope and receive a response envelope.",
    response_description="Success or error envelope.",
)
async def dispatch_envelope(request: Request, dispatcher: Dispatcher = Depends(get_dispatcher)) -> Dict[str, Any]:
    """
    Dispatch a request envelope.

    Malformed bodies are answered with an error envelope rather than an HTTP error.
    """
    try:
        payload: Any = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        logger.warning(f"Request body is not valid JSON: {exc}")
        return build_error(f"Invalid request: body is not valid JSON ({exc})")
    return await dispatcher.dispatch(payload)


@router.get(
    "/ping",
    summary="Ping",
    description="Liveness probe for the protocol transport.",
    response_class=PlainTextResponse,
)
async def ping() -> str:
    return "pong"


@router.get(
    "/tools",
    summary="List Tools",
    description="List registered tools. Reserved system tools are hidden unless include_system is true.",
    response_model=ToolCatalogResponse,
)
async def list_tools(
    include_system: bool = Query(default=False, description="Include tools in the reserved system. namespace"),
    registry: ToolRegistry = Depends(get_registry),
) -> ToolCatalogResponse:
    exclude = None if include_system else SYSTEM_PREFIX
    return ToolCatalogResponse(tools=registry.list_tools(exclude_prefix=exclude))
