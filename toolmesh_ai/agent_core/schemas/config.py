"""Configuration models for the orchestration loop."""

from __future__ import annotations

from pydantic import BaseModel, Field


class OrchestratorConfig(BaseModel):
    """Control-loop configuration consumed by ``Orchestrator``."""

    max_retries: int = Field(default=3, ge=1, description="Total attempts per plan step")
    retry_delay_seconds: float = Field(default=1.0, ge=0, description="Fixed delay between step attempts")
    history_limit: int = Field(default=20, ge=1, description="Maximum conversation turns kept in memory")
    max_plan_steps: int = Field(default=20, ge=1, description="Upper bound on executed plan steps")
    completion_max_tokens: int = Field(default=1024, ge=1, description="Token budget per completion call")
