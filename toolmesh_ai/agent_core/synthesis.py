"""Response synthesis.

The completion service turns the query and a transcript of step results into
a user-facing answer. When it fails, returns blank text, or is not configured,
``render_results`` formats every step deterministically so the caller always
receives an answer.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from toolmesh_ai.protocol.errors import SynthesisFailure

from .completion import CompletionService
from .schemas.domain import StepResult

logger = logging.getLogger(__name__)

SYNTHESIS_SYSTEM_PROMPT = (
    "You are a helpful assistant. Using the tool results provided, answer the user's request clearly and concisely. "
    "Mention failed steps briefly and do not invent results that are not in the transcript."
)


def _dump(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


def render_transcript(results: Sequence[StepResult]) -> str:
    """Plain-text transcript of every step, used as completion input."""
    blocks = []
    for index, step in enumerate(results, start=1):
        outcome = f"error: {step.error}" if not step.succeeded else f"result: {_dump(step.result)}"
        blocks.append(f"Step {index}: {step.action}\nparameters: {_dump(step.parameters)}\n{outcome}")
    return "\n\n".join(blocks) if blocks else "(no steps were executed)"


def _render_statistics(result: Dict[str, Any]) -> Optional[str]:
    stats = result.get("statistics")
    if not isinstance(stats, dict):
        return None
    lines = [
        "Text statistics:",
        f"- Sentences: {stats.get('sentenceCount')}",
        f"- Words: {stats.get('wordCount')}",
        f"- Average word length: {stats.get('averageWordLength')}",
        f"- Average sentence length: {stats.get('averageSentenceLength')}",
    ]
    top_words = result.get("topWords")
    if isinstance(top_words, list) and top_words:
        lines.append("")
        lines.append("Most frequent words:")
        for entry in top_words:
            if isinstance(entry, dict):
                lines.append(f"- \"{entry.get('word')}\": {entry.get('count')} occurrences")
    return "\n".join(lines)


_ENTITY_LABELS = (
    ("technologies", "Technologies"),
    ("concepts", "Concepts"),
    ("processes", "Processes"),
    ("names", "Names"),
)


def _render_entities(result: Dict[str, Any]) -> Optional[str]:
    entities = result.get("entities")
    if not isinstance(entities, dict):
        return None
    lines = []
    for key, label in _ENTITY_LABELS:
        values = entities.get(key) or []
        if values:
            lines.append(f"{label}: {', '.join(str(v) for v in values)}")
    return "\n".join(lines) if lines else "No entities found."


def _render_repositories(result: Dict[str, Any]) -> Optional[str]:
    items = result.get("items")
    if not isinstance(items, list):
        return None
    lines = ["Repositories found:", ""]
    for index, repo in enumerate(items, start=1):
        if not isinstance(repo, dict):
            continue
        lines.append(f"{index}. **{repo.get('name')}** ({repo.get('fullName')})")
        lines.append(f"   {repo.get('description') or 'No description'}")
        lines.append(f"   stars: {repo.get('stars')} | {repo.get('url')}")
    return "\n".join(lines)


def _render_web_results(result: Dict[str, Any]) -> Optional[str]:
    items = result.get("results")
    if not isinstance(items, list):
        return None
    lines = [f"Search results ({result.get('totalResults', len(items))} total):", ""]
    for index, item in enumerate(items, start=1):
        if not isinstance(item, dict):
            continue
        lines.append(f"{index}. {item.get('title')}")
        lines.append(f"   {item.get('url')}")
        if item.get("snippet"):
            lines.append(f"   {item.get('snippet')}")
    return "\n".join(lines)


def _render_plan(result: Dict[str, Any]) -> Optional[str]:
    steps = result.get("plan")
    if not isinstance(steps, list):
        return None
    lines = ["Plan:", ""]
    for index, step in enumerate(steps, start=1):
        if isinstance(step, dict):
            lines.append(f"{index}. {step.get('action')}: {step.get('description')}")
    return "\n".join(lines)


def _render_code_execution(result: Dict[str, Any]) -> Optional[str]:
    return f"Code execution result:\n```\n{_dump(result)}\n```"


_RENDERERS: Dict[str, Callable[[Dict[str, Any]], Optional[str]]] = {
    "analyzeText": _render_statistics,
    "extractEntities": _render_entities,
    "searchRepositories": _render_repositories,
    "searchWeb": _render_web_results,
    "generatePlan": _render_plan,
    "executeCode": _render_code_execution,
}


def render_step(step: StepResult) -> str:
    if not step.succeeded:
        return f"An error occurred: {step.error}"
    renderer = _RENDERERS.get(step.action)
    rendered = renderer(step.result) if renderer else None
    return rendered if rendered is not None else f"Result: {_dump(step.result)}"


def render_results(results: Sequence[StepResult]) -> str:
    """Deterministic, per-action formatting of every step result."""
    if not results:
        return "No tool steps were needed for this request."
    sections: List[str] = ["Here are the results:"]
    for step in results:
        sections.append(f"### {step.action}:\n\n{render_step(step)}")
    return "\n\n".join(sections) + "\n"


class ResponseSynthesizer:
    """Produce the final answer, preferring the completion service."""

    def __init__(self, completion: Optional[CompletionService] = None, *, max_tokens: int = 1024) -> None:
        self._completion = completion
        self._max_tokens = max_tokens

    async def synthesize(self, query: str, results: Sequence[StepResult]) -> str:
        if self._completion is None:
            return render_results(results)
        try:
            return await self._complete(query, results)
        except Exception as exc:
            logger.warning(f"Synthesis via completion failed, rendering deterministically: {exc}")
            return render_results(results)

    async def _complete(self, query: str, results: Sequence[StepResult]) -> str:
        prompt = f"User request:\n{query}\n\nTool results:\n{render_transcript(results)}"
        text = await self._completion.complete(SYNTHESIS_SYSTEM_PROMPT, prompt, self._max_tokens)  # type: ignore[union-attr]
        if not isinstance(text, str) or not text.strip():
            raise SynthesisFailure("completion returned no text")
        return text.strip()
