from __future__ import annotations

"""Plan generation.

``TaskPlanner`` turns a ``TaskAnalysis`` into an ordered ``Plan``.

Completion output is parsed by a pipeline tried in order:

1. direct JSON parse (``{"steps": [...]}`` or a bare list of steps),
2. extraction of the first balanced ``{...}``/``[...]`` block in the text,
3. the deterministic rule table in ``planning.rules``.

An empty plan is valid and yields zero executed steps. Plans longer than
``max_steps`` are truncated.
"""

import json
import logging
from typing import Any, Optional, Sequence

from toolmesh_ai.protocol.errors import PlanParseFailure

from ..analysis import strip_code_fence
from ..completion import CompletionService
from ..schemas.domain import Plan, PlanStep, TaskAnalysis
from .rules import DEFAULT_TOOL_CATALOG, plan_from_rules

logger = logging.getLogger(__name__)

PLAN_SYSTEM_PROMPT = (
    "You are a planner for a tool-using assistant. "
    "Given a classified task and the list of available tools, return the minimal ordered list of tool calls. "
    'Respond with strict JSON only: {"steps": [{"action": "<tool name>", "parameters": {...}}]}'
)


def _coerce_plan(data: Any) -> Plan:
    if isinstance(data, dict):
        if "steps" in data:
            items = data["steps"]
        elif "action" in data:
            items = [data]
        else:
            raise PlanParseFailure("object has neither 'steps' nor 'action'")
    elif isinstance(data, list):
        items = data
    else:
        raise PlanParseFailure("JSON value is not an object or list")
    if not isinstance(items, list):
        raise PlanParseFailure("'steps' is not a list")

    steps = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise PlanParseFailure(f"step {index} is not an object")
        action = item.get("action")
        parameters = item.get("parameters", {})
        if not isinstance(action, str) or not action.strip():
            raise PlanParseFailure(f"step {index} has no action")
        if parameters is None:
            parameters = {}
        if not isinstance(parameters, dict):
            raise PlanParseFailure(f"step {index} parameters are not an object")
        steps.append(PlanStep(action=action, parameters=parameters))
    return Plan(steps=steps)


def parse_structured_plan(text: str) -> Plan:
    """Stage 1: the whole completion text is JSON.

    Raises:
        PlanParseFailure: If the text is not JSON or not plan shaped.
    """
    try:
        data = json.loads(strip_code_fence(text))
    except (TypeError, ValueError) as exc:
        raise PlanParseFailure(f"not valid JSON: {exc}") from exc
    return _coerce_plan(data)


def find_balanced_block(text: str) -> Optional[str]:
    """Return the first balanced ``{...}`` or ``[...]`` block, ignoring brackets inside strings."""
    pairs = {"{": "}", "[": "]"}
    start = next((i for i, ch in enumerate(text) if ch in pairs), None)
    if start is None:
        return None

    stack = []
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        ch = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in pairs:
            stack.append(pairs[ch])
        elif ch in ("}", "]"):
            if not stack or stack.pop() != ch:
                return None
            if not stack:
                return text[start : index + 1]
    return None


def extract_plan_block(text: str) -> Plan:
    """Stage 2: parse the first balanced JSON block embedded in prose.

    Raises:
        PlanParseFailure: If no block is found or it is not plan shaped.
    """
    block = find_balanced_block(text or "")
    if block is None:
        raise PlanParseFailure("no balanced JSON block found")
    try:
        data = json.loads(block)
    except ValueError as exc:
        raise PlanParseFailure(f"embedded block is not valid JSON: {exc}") from exc
    return _coerce_plan(data)


def parse_plan(text: Optional[str], analysis: TaskAnalysis) -> Plan:
    """Run the whole pipeline over a completion result."""
    if text:
        for stage in (parse_structured_plan, extract_plan_block):
            try:
                return stage(text)
            except PlanParseFailure as exc:
                logger.debug(f"Plan stage {stage.__name__} did not match: {exc}")
    logger.info(f"Falling back to rule-based plan for task type '{analysis.type.value}'")
    return plan_from_rules(analysis)


class TaskPlanner:
    """Planner producing ordered tool invocations.

    - ``completion=None``: deterministic rule table only.
    - ``completion!=None``: asks the completion service first, then falls back
      through the parse pipeline.
    """

    def __init__(
        self,
        completion: Optional[CompletionService] = None,
        *,
        max_steps: int = 20,
        max_tokens: int = 1024,
        tool_catalog: Sequence[str] = DEFAULT_TOOL_CATALOG,
    ) -> None:
        self._completion = completion
        self._max_steps = max_steps
        self._max_tokens = max_tokens
        self._tool_catalog = list(tool_catalog)

    @property
    def tool_catalog(self) -> list[str]:
        return list(self._tool_catalog)

    def set_tool_catalog(self, names: Sequence[str]) -> None:
        self._tool_catalog = list(names)

    async def plan(self, analysis: TaskAnalysis) -> Plan:
        """Generate a plan for ``analysis``; never raises for completion or parse failures."""
        if self._completion is None:
            plan = plan_from_rules(analysis)
        else:
            try:
                text = await self._completion.complete(PLAN_SYSTEM_PROMPT, self._prompt(analysis), self._max_tokens)
            except Exception as exc:
                logger.warning(f"Plan completion failed, using rule table: {exc}")
                text = None
            plan = parse_plan(text, analysis)
        return self._bounded(plan)

    def _prompt(self, analysis: TaskAnalysis) -> str:
        return (
            "Create a plan for this task.\n\n"
            f"task={json.dumps(analysis.model_dump(by_alias=True, mode='json'), ensure_ascii=False)}\n"
            f"available_tools={json.dumps(self._tool_catalog)}\n"
        )

    def _bounded(self, plan: Plan) -> Plan:
        if len(plan.steps) <= self._max_steps:
            return plan
        logger.warning(f"Plan has {len(plan.steps)} steps; truncating to {self._max_steps}")
        return Plan(steps=plan.steps[: self._max_steps])
