"""Tool registry.

The registry maps a tool name to an immutable ``ToolRecord`` (handler,
description and optional parameter schema). It is add-only: names are unique
and records are never replaced.

Two built-in tools live in the reserved ``system.`` namespace and are
registered before any user tool:

- ``system.getTools``: the public catalog (every tool outside ``system.``),
- ``system.ping``: a liveness probe returning ``{timestamp, status, version}``.

``register`` is serialized with a lock; ``lookup``/``list_tools`` read a
snapshot and take no lock, so registration is expected to happen during setup.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, ClassVar, Dict, List, Optional, Type, Union

from pydantic import BaseModel, ValidationError

from toolmesh_ai.core.logging_config import get_logger
from toolmesh_ai.core.schemas import format_validation_error

from .envelope import PROTOCOL_VERSION
from .errors import DuplicateTool, InvalidTool, ToolNotFound

logger = get_logger(__name__)

SYSTEM_PREFIX = "system."

ToolResult = Union[Dict[str, Any], Any]
ToolHandler = Callable[[Dict[str, Any]], Union[ToolResult, Awaitable[ToolResult]]]


@dataclass(frozen=True)
class ToolRecord:
    """Registration record for one tool.

    Attributes
    ----------
    name:
        Unique tool name used in ``action.name``.
    handler:
        Callable receiving the parameter mapping. May be sync or async.
    description:
        Human readable description shown in the catalog.
    schema:
        Optional JSON schema describing the accepted parameters.
    """

    name: str
    handler: ToolHandler
    description: str
    schema: Optional[Dict[str, Any]] = field(default=None)

    def describe(self) -> Dict[str, Any]:
        """Catalog entry for this tool."""
        return {
            "name": self.name,
            "description": self.description,
            "schema": dict(self.schema) if self.schema is not None else None,
        }


class BaseTool(ABC):
    """Declarative tool with a pydantic input model.

    Subclasses set ``name``, ``description`` and ``input_model`` and implement
    ``run``. The parameter schema published in the catalog is the input
    model's JSON schema.
    """

    name: ClassVar[str]
    description: ClassVar[str] = ""
    input_model: ClassVar[Type[BaseModel]]

    def schema(self) -> Dict[str, Any]:
        return self.input_model.model_json_schema()

    async def __call__(self, parameters: Dict[str, Any]) -> Dict[str, Any]:
        try:
            parsed = self.input_model.model_validate(parameters)
        except ValidationError as exc:
            raise ValueError(f"Invalid parameters for {self.name}: {format_validation_error(exc)}") from exc
        return await self.run(parsed)

    @abstractmethod
    async def run(self, params: Any) -> Dict[str, Any]:
        """Execute the tool with validated parameters."""


class ToolRegistry:
    """
    In-memory, add-only mapping of tool names to registration records.

    Notes:
        - ``register`` raises ``DuplicateTool`` for an existing name and leaves the registry unchanged.
        - ``lookup`` raises ``ToolNotFound`` if the tool is missing.
        - ``list_tools`` preserves registration order.
    """

    def __init__(self, *, include_system_tools: bool = True) -> None:
        """Initialize the registry, pre-registering the ``system.`` tools by default."""
        self._tools: Dict[str, ToolRecord] = {}
        self._lock = threading.Lock()
        if include_system_tools:
            self._register_system_tools()

    def register(
        self,
        name: str,
        handler: ToolHandler,
        description: str,
        schema: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Register a tool handler under ``name``.

        Args:
            name: Unique, non-empty tool name.
            handler: Callable receiving the parameter mapping.
            description: Catalog description.
            schema: Optional JSON schema of the parameters.

        Raises:
            InvalidTool: If the name is empty, the handler is not callable or the description is not a string.
            DuplicateTool: If ``name`` is already registered.
        """
        if not isinstance(name, str) or not name.strip():
            raise InvalidTool("Tool name must be a non-empty string")
        if not callable(handler):
            raise InvalidTool(f"Handler for tool '{name}' is not callable")
        if not isinstance(description, str):
            raise InvalidTool(f"Description for tool '{name}' must be a string")
        if schema is not None and not isinstance(schema, dict):
            raise InvalidTool(f"Schema for tool '{name}' must be a mapping")

        record = ToolRecord(
            name=name,
            handler=handler,
            description=description,
            schema=dict(schema) if schema is not None else None,
        )
        with self._lock:
            if name in self._tools:
                raise DuplicateTool(name)
            self._tools[name] = record
        logger.debug("Registered tool %s", name)

    def register_tool(self, tool: BaseTool) -> None:
        """Register a declarative ``BaseTool`` instance."""
        self.register(tool.name, tool, tool.description, tool.schema())

    def lookup(self, name: str) -> ToolRecord:
        """
        Retrieve a registered tool by name.

        Raises:
            ToolNotFound: If no tool is registered with the given name.
        """
        try:
            return self._tools[name]
        except (KeyError, TypeError):
            raise ToolNotFound(str(name)) from None

    def has(self, name: str) -> bool:
        """Check if a tool is registered."""
        return isinstance(name, str) and name in self._tools

    def list_tools(self, exclude_prefix: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Return catalog entries in registration order.

        Args:
            exclude_prefix: Skip tools whose name starts with this prefix (e.g. ``"system."``).
        """
        records = list(self._tools.values())
        return [r.describe() for r in records if not (exclude_prefix and r.name.startswith(exclude_prefix))]

    def names(self) -> List[str]:
        return list(self._tools.keys())

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return self.has(name)  # type: ignore[arg-type]

    def _register_system_tools(self) -> None:
        def get_tools(_parameters: Dict[str, Any]) -> Dict[str, Any]:
            return {"tools": self.list_tools(exclude_prefix=SYSTEM_PREFIX)}

        def ping(_parameters: Dict[str, Any]) -> Dict[str, Any]:
            return {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "status": "active",
                "version": PROTOCOL_VERSION,
            }

        self.register(
            f"{SYSTEM_PREFIX}getTools",
            get_tools,
            "List the available tools with their descriptions and parameter schemas",
            {"type": "object", "properties": {}},
        )
        self.register(
            f"{SYSTEM_PREFIX}ping",
            ping,
            "Health check returning the server status and protocol version",
            {"type": "object", "properties": {}},
        )
