from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from toolmesh_ai.core.schemas import BaseSchema


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TaskType(str, Enum):
    analyze = "analyze"
    search = "search"
    generate = "generate"
    execute = "execute"
    unknown = "unknown"


class TurnRole(str, Enum):
    user = "user"
    assistant = "assistant"


class Phase(str, Enum):
    idle = "idle"
    analyzing = "analyzing"
    planning = "planning"
    executing = "executing"
    synthesizing = "synthesizing"


class TaskAnalysis(BaseSchema):
    """Classified intent of one caller query."""

    type: TaskType
    target_content: str = Field(alias="targetContent")
    original_query: str = Field(alias="originalQuery")


class PlanStep(BaseSchema):
    action: str = Field(..., min_length=1, description="Tool name to invoke")
    parameters: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("action")
    @classmethod
    def _strip_action(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("action must not be blank")
        return value


class Plan(BaseSchema):
    """Ordered tool invocations; list order is execution order."""

    steps: List[PlanStep] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.steps)


class StepResult(BaseSchema):
    """Outcome of one plan step.

    ``result`` is the tool output on success and ``{"error": message}`` when
    every attempt failed.
    """

    action: str
    parameters: Dict[str, Any] = Field(default_factory=dict)
    result: Dict[str, Any] = Field(default_factory=dict)
    succeeded: bool = True
    attempts: int = 1

    @property
    def error(self) -> Optional[str]:
        if self.succeeded:
            return None
        return str(self.result.get("error", ""))

    @classmethod
    def failure(cls, action: str, parameters: Dict[str, Any], message: str, attempts: int) -> "StepResult":
        return cls(
            action=action,
            parameters=parameters,
            result={"error": message},
            succeeded=False,
            attempts=attempts,
        )


class ConversationTurn(BaseSchema):
    role: TurnRole
    content: str
    timestamp: datetime = Field(default_factory=_utc_now)
