"""Protocol dispatch layer.

Envelope codec, tool registry, dispatcher and the clients that talk to it.
"""

from .client import HttpToolClient, LocalToolClient, ToolClient
from .dispatcher import Dispatcher
from .envelope import (
    PROTOCOL_VERSION,
    build_error,
    build_request,
    build_success,
    validate_request,
    validate_response,
)
from .errors import (
    DuplicateTool,
    InvalidEnvelope,
    InvalidTool,
    ToolCallError,
    ToolExecutionFailure,
    ToolMeshError,
    ToolNotFound,
)
from .registry import SYSTEM_PREFIX, BaseTool, ToolRecord, ToolRegistry

__all__ = [
    "PROTOCOL_VERSION",
    "SYSTEM_PREFIX",
    "BaseTool",
    "Dispatcher",
    "DuplicateTool",
    "HttpToolClient",
    "InvalidEnvelope",
    "InvalidTool",
    "LocalToolClient",
    "ToolCallError",
    "ToolClient",
    "ToolExecutionFailure",
    "ToolMeshError",
    "ToolNotFound",
    "ToolRecord",
    "ToolRegistry",
    "build_error",
    "build_request",
    "build_success",
    "validate_request",
    "validate_response",
]
