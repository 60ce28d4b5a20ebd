from __future__ import annotations

"""Completion capability used for analysis, planning and synthesis.

The orchestrator only depends on the ``CompletionService`` protocol:

``await complete(system_instruction, user_prompt, max_tokens) -> str``

``PydanticAICompletion`` implements it on top of a Pydantic AI ``Agent``. The
model can be any Pydantic AI model instance or a ``"provider:model"`` string.
Failures are propagated to the caller; each stage of the orchestrator owns its
own fallback.
"""

import logging
from typing import Any, Protocol, runtime_checkable

from pydantic_ai import Agent

logger = logging.getLogger(__name__)


@runtime_checkable
class CompletionService(Protocol):
    """Opaque text completion capability."""

    async def complete(self, system_instruction: str, user_prompt: str, max_tokens: int) -> str: ...


class PydanticAICompletion:
    """``CompletionService`` backed by Pydantic AI.

    A fresh ``Agent`` is built per call so that each stage can supply its own
    system prompt against the same model.
    """

    def __init__(self, model: Any) -> None:
        """
        Args:
            model: A Pydantic AI model instance (e.g. ``TestModel``) or a model name
                   such as ``"openai:gpt-4o"``.
        """
        if model is None:
            raise ValueError("model is required for PydanticAICompletion")
        self._model = model

    @property
    def model(self) -> Any:
        return self._model

    async def complete(self, system_instruction: str, user_prompt: str, max_tokens: int) -> str:
        agent: Agent = Agent(
            self._model,
            output_type=str,
            system_prompt=system_instruction,
        )
        result = await agent.run(user_prompt, model_settings={"max_tokens": max_tokens})
        text = result.output
        logger.debug(f"Completion returned {len(text or '')} characters")
        return text if isinstance(text, str) else str(text)
