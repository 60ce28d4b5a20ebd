"""Search tools.

``searchWeb`` returns deterministic simulated results. ``searchRepositories``
and ``searchCode`` call the GitHub search API through ``httpx``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx
from pydantic import Field

from toolmesh_ai.protocol.registry import BaseTool

from .base import ToolInput

logger = logging.getLogger(__name__)

GITHUB_HEADERS = {
    "Accept": "application/vnd.github.v3+json",
    "User-Agent": "toolmesh-ai",
}


class QueryInput(ToolInput):
    query: str = Field(..., min_length=1, description="Search query")


class PagedQueryInput(QueryInput):
    per_page: int = Field(5, alias="perPage", ge=1, le=100, description="Number of results to return")


class SearchWebTool(BaseTool):
    name = "searchWeb"
    description = "Search the web (simulated results)"
    input_model = QueryInput

    async def run(self, params: QueryInput) -> Dict[str, Any]:
        query = params.query
        slug = quote(query.lower())
        return {
            "query": query,
            "totalResults": 42,
            "results": [
                {
                    "title": f"Search results for: {query}",
                    "url": f"https://example.com/search?q={quote(query)}",
                    "snippet": f'Example search result for "{query}".',
                },
                {
                    "title": f"{query} - Documentation",
                    "url": f"https://docs.example.com/{slug}",
                    "snippet": f'Documentation related to "{query}".',
                },
                {
                    "title": f"Tutorial: How to use {query}",
                    "url": f"https://tutorial.example.com/{slug}",
                    "snippet": f'A step by step tutorial on using "{query}" in your projects.',
                },
            ],
        }


class _GitHubSearchTool(BaseTool):
    """Base for tools backed by the GitHub search API."""

    endpoint: str = ""
    label: str = ""
    input_model = PagedQueryInput

    def __init__(
        self,
        *,
        api_url: str = "https://api.github.com",
        timeout_seconds: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout_seconds
        self._client = client

    async def _search(self, params: PagedQueryInput) -> Dict[str, Any]:
        url = f"{self._api_url}/search/{self.endpoint}"
        query_params = {"q": params.query, "per_page": params.per_page}
        try:
            if self._client is not None:
                response = await self._client.get(url, params=query_params, headers=GITHUB_HEADERS, timeout=self._timeout)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(url, params=query_params, headers=GITHUB_HEADERS)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise RuntimeError(
                f"Error while searching {self.label}: {exc.response.status_code} {exc.response.reason_phrase}"
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning(f"GitHub search request failed: {exc}")
            raise RuntimeError(f"Error while searching {self.label}: {exc}") from exc
        return response.json()


class SearchRepositoriesTool(_GitHubSearchTool):
    name = "searchRepositories"
    description = "Search GitHub repositories"
    endpoint = "repositories"
    label = "repositories"

    async def run(self, params: PagedQueryInput) -> Dict[str, Any]:
        data = await self._search(params)
        return {
            "totalCount": data.get("total_count", 0),
            "items": [
                {
                    "name": repo.get("name"),
                    "fullName": repo.get("full_name"),
                    "description": repo.get("description"),
                    "url": repo.get("html_url"),
                    "stars": repo.get("stargazers_count"),
                }
                for repo in data.get("items", [])
            ],
        }


class SearchCodeTool(_GitHubSearchTool):
    name = "searchCode"
    description = "Search code in GitHub repositories"
    endpoint = "code"
    label = "code"

    async def run(self, params: PagedQueryInput) -> Dict[str, Any]:
        data = await self._search(params)
        return {
            "totalCount": data.get("total_count", 0),
            "items": [
                {
                    "name": item.get("name"),
                    "path": item.get("path"),
                    "repository": (item.get("repository") or {}).get("full_name"),
                    "url": item.get("html_url"),
                }
                for item in data.get("items", [])
            ],
        }
