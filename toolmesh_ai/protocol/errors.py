"""Error types for the protocol and orchestration layers.

Defines a small hierarchy of exceptions. Registration-time and envelope
construction errors are raised to the caller; everything raised inside the
control loop is absorbed by a fallback and never escapes ``process_query``.
"""

from __future__ import annotations


class ToolMeshError(Exception):
    """Base error for all toolmesh-ai exceptions."""


class InvalidEnvelope(ToolMeshError):
    """Raised when a request or response envelope has an invalid shape."""


class DuplicateTool(ToolMeshError):
    """Raised when a tool name is registered twice."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Tool '{name}' is already registered")
        self.name = name


class InvalidTool(ToolMeshError):
    """Raised when a registration record is malformed."""


class ToolNotFound(ToolMeshError, LookupError):
    """Raised when the requested tool is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class ToolExecutionFailure(ToolMeshError):
    """Raised when a tool handler fails to produce a result."""

    def __init__(self, tool_name: str, message: str) -> None:
        super().__init__(message)
        self.tool_name = tool_name


class ToolCallError(ToolMeshError):
    """Raised by tool clients when a call returns an error envelope."""


class AnalysisParseFailure(ToolMeshError):
    """Raised when completion output cannot be parsed into a task analysis."""


class PlanParseFailure(ToolMeshError):
    """Raised when completion output cannot be parsed into a plan."""


class StepExhausted(ToolMeshError):
    """Raised when a plan step fails on every attempt."""

    def __init__(self, action: str, attempts: int, last_error: BaseException) -> None:
        super().__init__(str(last_error))
        self.action = action
        self.attempts = attempts
        self.last_error = last_error


class SynthesisFailure(ToolMeshError):
    """Raised when the completion service cannot produce a final response."""
