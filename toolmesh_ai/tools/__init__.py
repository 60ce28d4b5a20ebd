"""Built-in tools and their registration."""

from __future__ import annotations

from typing import Optional

import httpx

from toolmesh_ai.protocol.registry import ToolRegistry

from .code import AnalyzeCodeTool, ExecuteCodeTool, GeneratePlanTool
from .search import SearchCodeTool, SearchRepositoriesTool, SearchWebTool
from .text import AnalyzeTextTool, ExtractEntitiesTool, SummarizeTextTool


def register_builtin_tools(
    registry: ToolRegistry,
    *,
    enable_code_execution: bool = False,
    github_api_url: str = "https://api.github.com",
    http_timeout_seconds: float = 30.0,
    code_timeout_seconds: float = 10.0,
    http_client: Optional[httpx.AsyncClient] = None,
) -> ToolRegistry:
    """Register the built-in tools on ``registry`` and return it.

    ``executeCode`` is only registered when ``enable_code_execution`` is set.
    """
    registry.register_tool(AnalyzeTextTool())
    registry.register_tool(SummarizeTextTool())
    registry.register_tool(ExtractEntitiesTool())
    registry.register_tool(SearchWebTool())
    registry.register_tool(
        SearchRepositoriesTool(api_url=github_api_url, timeout_seconds=http_timeout_seconds, client=http_client)
    )
    registry.register_tool(
        SearchCodeTool(api_url=github_api_url, timeout_seconds=http_timeout_seconds, client=http_client)
    )
    registry.register_tool(GeneratePlanTool())
    registry.register_tool(AnalyzeCodeTool())
    if enable_code_execution:
        registry.register_tool(ExecuteCodeTool(timeout_seconds=code_timeout_seconds))
    return registry


__all__ = [
    "AnalyzeCodeTool",
    "AnalyzeTextTool",
    "ExecuteCodeTool",
    "ExtractEntitiesTool",
    "GeneratePlanTool",
    "SearchCodeTool",
    "SearchRepositoriesTool",
    "SearchWebTool",
    "SummarizeTextTool",
    "register_builtin_tools",
]
