"""Deterministic plan rules keyed by task type.

This is the canonical rule table used whenever the completion service is
absent or its plan cannot be parsed:

=========  ==================================================
type       steps
=========  ==================================================
analyze    ``analyzeText{text}``, ``extractEntities{text}``
search     ``searchWeb{query}``
generate   ``generatePlan{task, requirements: []}``
execute    ``executeCode{language, code}`` from a fenced block
unknown    ``analyzeText{text}``
=========  ==================================================
"""

from __future__ import annotations

import re
from typing import Callable, Dict, List, Optional, Tuple

from ..schemas.domain import Plan, PlanStep, TaskAnalysis, TaskType

DEFAULT_CODE_LANGUAGE = "python"

# Tool names the default rules can emit, in catalog order.
DEFAULT_TOOL_CATALOG: Tuple[str, ...] = (
    "analyzeText",
    "summarizeText",
    "extractEntities",
    "searchWeb",
    "searchRepositories",
    "searchCode",
    "generatePlan",
    "analyzeCode",
    "executeCode",
)

_CODE_BLOCK_RE = re.compile(r"```([A-Za-z0-9_+-]*)[ \t]*\n?(.*?)```", re.DOTALL)


def extract_code_block(text: str) -> Optional[Tuple[str, str]]:
    """Return ``(language, code)`` of the first fenced block, or ``None``."""
    match = _CODE_BLOCK_RE.search(text or "")
    if not match:
        return None
    code = match.group(2).strip()
    if not code:
        return None
    language = (match.group(1) or DEFAULT_CODE_LANGUAGE).lower()
    if language in ("py", "python3"):
        language = DEFAULT_CODE_LANGUAGE
    return language, code


def _analyze(analysis: TaskAnalysis) -> List[PlanStep]:
    return [
        PlanStep(action="analyzeText", parameters={"text": analysis.target_content}),
        PlanStep(action="extractEntities", parameters={"text": analysis.target_content}),
    ]


def _search(analysis: TaskAnalysis) -> List[PlanStep]:
    return [PlanStep(action="searchWeb", parameters={"query": analysis.target_content})]


def _generate(analysis: TaskAnalysis) -> List[PlanStep]:
    return [PlanStep(action="generatePlan", parameters={"task": analysis.target_content, "requirements": []})]


def _execute(analysis: TaskAnalysis) -> List[PlanStep]:
    block = extract_code_block(analysis.original_query) or extract_code_block(analysis.target_content)
    if block is None:
        return []
    language, code = block
    return [PlanStep(action="executeCode", parameters={"language": language, "code": code})]


def _default(analysis: TaskAnalysis) -> List[PlanStep]:
    return [PlanStep(action="analyzeText", parameters={"text": analysis.target_content})]


PLAN_RULES: Dict[TaskType, Callable[[TaskAnalysis], List[PlanStep]]] = {
    TaskType.analyze: _analyze,
    TaskType.search: _search,
    TaskType.generate: _generate,
    TaskType.execute: _execute,
    TaskType.unknown: _default,
}


def plan_from_rules(analysis: TaskAnalysis) -> Plan:
    rule = PLAN_RULES.get(analysis.type, _default)
    return Plan(steps=rule(analysis))
