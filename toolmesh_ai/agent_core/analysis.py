"""Intent analysis: free-form query to ``TaskAnalysis``.

Completion output is parsed by a pipeline tried in order:

1. direct JSON parse of ``{"type": ..., "targetContent": ...}``,
2. pattern extraction of the ``type`` and ``targetContent`` fields from raw text,
3. keyword classification of the query itself.

The last stage always produces an analysis, so ``TaskAnalyzer.analyze`` never
raises.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional, Tuple

from toolmesh_ai.protocol.errors import AnalysisParseFailure

from .completion import CompletionService
from .schemas.domain import TaskAnalysis, TaskType

logger = logging.getLogger(__name__)

ANALYSIS_SYSTEM_PROMPT = (
    "You classify user requests for a tool-using assistant. "
    "Choose exactly one type from: analyze, search, generate, execute. "
    "Extract the content the task should operate on. "
    'Respond with strict JSON only: {"type": "<type>", "targetContent": "<content>"}'
)

# Checked in order; the first type with a matching keyword wins.
TASK_KEYWORDS: Tuple[Tuple[TaskType, Tuple[str, ...]], ...] = (
    (TaskType.analyze, ("analyze", "analyse", "examine", "inspect", "check")),
    (TaskType.search, ("search", "find", "look up", "look for")),
    (TaskType.generate, ("generate", "create", "write", "build")),
    (TaskType.execute, ("execute", "run")),
)

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*(.*?)\s*```$", re.DOTALL)
_TYPE_RE = re.compile(r'"type"\s*:\s*"([A-Za-z]+)"')
_TARGET_RE = re.compile(r'"targetContent"\s*:\s*"((?:[^"\\]|\\.)*)"', re.DOTALL)
_LEADING_FILLER_RE = re.compile(r"^(?:(?:me|for|about|on|up)\s+)+", re.IGNORECASE)


def _keyword_pattern(keyword: str) -> re.Pattern[str]:
    words = r"\s+".join(re.escape(part) for part in keyword.split())
    return re.compile(rf"\b{words}\b", re.IGNORECASE)


def _coerce_type(value: Any) -> Optional[TaskType]:
    if not isinstance(value, str):
        return None
    try:
        return TaskType(value.strip().lower())
    except ValueError:
        return None


def strip_code_fence(text: str) -> str:
    stripped = text.strip()
    match = _FENCE_RE.match(stripped)
    return match.group(1) if match else stripped


def classify_by_keywords(query: str) -> TaskAnalysis:
    """Classify ``query`` with the keyword table.

    Keywords of the matched type are removed from the target content. When no
    keyword matches, the type is ``unknown`` and the whole query is the target.
    """
    for task_type, keywords in TASK_KEYWORDS:
        patterns = [_keyword_pattern(k) for k in keywords]
        if not any(p.search(query) for p in patterns):
            continue
        target = query
        for pattern in patterns:
            target = pattern.sub(" ", target)
        target = re.sub(r"[ \t]{2,}", " ", target).strip(" \t\n:,")
        target = _LEADING_FILLER_RE.sub("", target)
        return TaskAnalysis(type=task_type, target_content=target or query.strip(), original_query=query)
    return TaskAnalysis(type=TaskType.unknown, target_content=query, original_query=query)


def parse_structured_analysis(text: str, query: str) -> TaskAnalysis:
    """Stage 1: parse the completion text as a JSON object.

    Raises:
        AnalysisParseFailure: If the text is not a JSON object with a known ``type``.
    """
    try:
        data = json.loads(strip_code_fence(text))
    except (TypeError, ValueError) as exc:
        raise AnalysisParseFailure(f"not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise AnalysisParseFailure("JSON value is not an object")
    task_type = _coerce_type(data.get("type"))
    if task_type is None:
        raise AnalysisParseFailure(f"unsupported task type: {data.get('type')!r}")
    target = data.get("targetContent", data.get("target_content"))
    if not isinstance(target, str) or not target.strip():
        target = query
    return TaskAnalysis(type=task_type, target_content=target, original_query=query)


def extract_analysis_fields(text: str, query: str) -> TaskAnalysis:
    """Stage 2: locate ``type`` and ``targetContent`` independently in raw text.

    Raises:
        AnalysisParseFailure: If no supported ``type`` field can be found.
    """
    type_match = _TYPE_RE.search(text or "")
    task_type = _coerce_type(type_match.group(1)) if type_match else None
    if task_type is None:
        raise AnalysisParseFailure("no task type found in completion text")
    target = query
    target_match = _TARGET_RE.search(text)
    if target_match:
        raw = target_match.group(1)
        try:
            target = json.loads(f'"{raw}"')
        except ValueError:
            target = raw
        if not target.strip():
            target = query
    return TaskAnalysis(type=task_type, target_content=target, original_query=query)


def parse_analysis(text: Optional[str], query: str) -> TaskAnalysis:
    """Run the whole pipeline over a completion result."""
    if text:
        for stage in (parse_structured_analysis, extract_analysis_fields):
            try:
                return stage(text, query)
            except AnalysisParseFailure as exc:
                logger.debug(f"Analysis stage {stage.__name__} did not match: {exc}")
    logger.info("Falling back to keyword classification")
    return classify_by_keywords(query)


class TaskAnalyzer:
    """Classify queries, preferring the completion service when one is configured."""

    def __init__(self, completion: Optional[CompletionService] = None, *, max_tokens: int = 1024) -> None:
        self._completion = completion
        self._max_tokens = max_tokens

    async def analyze(self, query: str) -> TaskAnalysis:
        if self._completion is None:
            return classify_by_keywords(query)
        try:
            text = await self._completion.complete(ANALYSIS_SYSTEM_PROMPT, query, self._max_tokens)
        except Exception as exc:
            logger.warning(f"Analysis completion failed, using keyword classifier: {exc}")
            return classify_by_keywords(query)
        return parse_analysis(text, query)

