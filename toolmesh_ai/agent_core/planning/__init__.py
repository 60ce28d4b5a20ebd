"""Planning subsystem: completion-driven plans with a deterministic rule table fallback."""

from .planner import TaskPlanner, find_balanced_block, parse_plan
from .rules import DEFAULT_TOOL_CATALOG, PLAN_RULES, extract_code_block, plan_from_rules

__all__ = [
    "DEFAULT_TOOL_CATALOG",
    "PLAN_RULES",
    "TaskPlanner",
    "extract_code_block",
    "find_balanced_block",
    "parse_plan",
    "plan_from_rules",
]
