from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pytest

from toolmesh_ai.agent_core.completion import CompletionService, PydanticAICompletion
from toolmesh_ai.agent_core.factory import build_completion


@pytest.mark.asyncio
async def test_completion_builds_agent_per_call(monkeypatch: pytest.MonkeyPatch) -> None:
    created = []

    @dataclass
    class _FakeResult:
        output: str

    class _FakeAgent:
        def __init__(self, model: Any, *, output_type: Any, system_prompt: str):
            self.model = model
            self.output_type = output_type
            self.system_prompt = system_prompt
            self.calls: list = []
            created.append(self)

        async def run(self, prompt: str, *, model_settings: Any = None) -> _FakeResult:
            self.calls.append((prompt, model_settings))
            return _FakeResult(output=f"echo: {prompt}")

    import toolmesh_ai.agent_core.completion as completion_mod

    monkeypatch.setattr(completion_mod, "Agent", _FakeAgent)

    service = PydanticAICompletion(model="fake-model")
    text = await service.complete("be terse", "hello", 64)

    assert text == "echo: hello"
    agent = created[0]
    assert agent.model == "fake-model"
    assert agent.output_type is str
    assert agent.system_prompt == "be terse"
    assert agent.calls == [("hello", {"max_tokens": 64})]


@pytest.mark.asyncio
async def test_completion_with_testmodel_returns_text() -> None:
    pytest.importorskip("pydantic_ai")
    from pydantic_ai.models.test import TestModel

    service = PydanticAICompletion(TestModel(custom_output_text='{"type": "search", "targetContent": "x"}'))

    text = await service.complete("classify", "find x", 100)

    assert text == '{"type": "search", "targetContent": "x"}'


def test_completion_requires_model() -> None:
    with pytest.raises(ValueError):
        PydanticAICompletion(None)


def test_build_completion() -> None:
    assert build_completion(None) is None
    assert build_completion("  ") is None
    service = build_completion("openai:gpt-4o")
    assert isinstance(service, PydanticAICompletion)
    assert isinstance(service, CompletionService)
