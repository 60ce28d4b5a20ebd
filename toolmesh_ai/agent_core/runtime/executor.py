from __future__ import annotations

"""Sequential plan execution.

Steps run strictly one after another through a ``ToolClient``. Each step gets
a bounded number of attempts; a step that exhausts them is recorded as
``{"error": <last message>}`` and execution moves on to the next step. The
result list always has exactly one entry per step, in plan order.
"""

import asyncio
import logging
from typing import List, Optional

from toolmesh_ai.protocol.client import ToolClient
from toolmesh_ai.protocol.errors import StepExhausted

from ..schemas.domain import Plan, PlanStep, StepResult
from .retry import Sleep, retry_fixed

logger = logging.getLogger(__name__)


class PlanExecutor:
    """Execute plans against a tool client with per-step retries."""

    def __init__(
        self,
        client: ToolClient,
        *,
        max_retries: int = 3,
        retry_delay_seconds: float = 1.0,
        sleep: Optional[Sleep] = None,
    ) -> None:
        self._client = client
        self._max_retries = max_retries
        self._retry_delay = retry_delay_seconds
        self._sleep: Sleep = sleep or asyncio.sleep

    async def execute(self, plan: Plan) -> List[StepResult]:
        results: List[StepResult] = []
        total = len(plan.steps)
        for index, step in enumerate(plan.steps, start=1):
            logger.debug(f"Executing step {index}/{total}: {step.action}")
            results.append(await self.execute_step(step))
        return results

    async def execute_step(self, step: PlanStep) -> StepResult:
        """Run one step; never raises for tool failures."""
        parameters = dict(step.parameters)

        async def _call() -> dict:
            return await self._client.call_tool(step.action, parameters)

        try:
            output, attempts = await retry_fixed(
                _call,
                label=step.action,
                max_attempts=self._max_retries,
                delay_seconds=self._retry_delay,
                sleep=self._sleep,
            )
        except StepExhausted as exc:
            logger.error(f"Step {step.action} failed after {exc.attempts} attempts: {exc.last_error}")
            return StepResult.failure(step.action, parameters, str(exc.last_error), exc.attempts)
        return StepResult(action=step.action, parameters=parameters, result=output, attempts=attempts)
