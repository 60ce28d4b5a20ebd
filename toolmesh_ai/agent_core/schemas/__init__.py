"""Schemas and DTOs for the agent core."""

from .config import OrchestratorConfig
from .domain import (
    ConversationTurn,
    Phase,
    Plan,
    PlanStep,
    StepResult,
    TaskAnalysis,
    TaskType,
    TurnRole,
)

__all__ = [
    "ConversationTurn",
    "OrchestratorConfig",
    "Phase",
    "Plan",
    "PlanStep",
    "StepResult",
    "TaskAnalysis",
    "TaskType",
    "TurnRole",
]
