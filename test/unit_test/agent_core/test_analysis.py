from __future__ import annotations

import pytest

from toolmesh_ai.agent_core.analysis import (
    TaskAnalyzer,
    classify_by_keywords,
    extract_analysis_fields,
    parse_analysis,
    parse_structured_analysis,
)
from toolmesh_ai.agent_core.schemas.domain import TaskType
from toolmesh_ai.protocol.errors import AnalysisParseFailure


@pytest.mark.parametrize(
    "query, expected_type, expected_target",
    [
        ("Analyze this text: MCP is a protocol", TaskType.analyze, "this text: MCP is a protocol"),
        ("search for rust async runtimes", TaskType.search, "rust async runtimes"),
        ("Find Python web frameworks", TaskType.search, "Python web frameworks"),
        ("Generate a REST API with auth", TaskType.generate, "a REST API with auth"),
        ("run this please", TaskType.execute, "this please"),
        ("hello there", TaskType.unknown, "hello there"),
    ],
)
def test_keyword_classifier(query: str, expected_type: TaskType, expected_target: str) -> None:
    analysis = classify_by_keywords(query)

    assert analysis.type is expected_type
    assert analysis.target_content == expected_target
    assert analysis.original_query == query


def test_keyword_classifier_first_matching_type_wins() -> None:
    # "check" (analyze) is listed before "find" (search)
    assert classify_by_keywords("find and check the logs").type is TaskType.analyze


def test_keyword_classifier_matches_whole_words_only() -> None:
    assert classify_by_keywords("the runtime is fast").type is TaskType.unknown


def test_structured_parse() -> None:
    analysis = parse_structured_analysis('{"type": "search", "targetContent": "rust async runtimes"}', "q")

    assert analysis.type is TaskType.search
    assert analysis.target_content == "rust async runtimes"
    assert analysis.original_query == "q"


def test_structured_parse_accepts_fenced_json_and_defaults_target() -> None:
    analysis = parse_structured_analysis('```json\n{"type": "generate"}\n```', "make a thing")

    assert analysis.type is TaskType.generate
    assert analysis.target_content == "make a thing"


@pytest.mark.parametrize("text", ["not json", "[1, 2]", '{"type": "dance"}'])
def test_structured_parse_failures(text: str) -> None:
    with pytest.raises(AnalysisParseFailure):
        parse_structured_analysis(text, "q")


def test_pattern_extraction_from_noisy_text() -> None:
    text = 'Sure! Here you go: "type": "analyze", and "targetContent": "some \\"quoted\\" text" -- done'

    analysis = extract_analysis_fields(text, "q")

    assert analysis.type is TaskType.analyze
    assert analysis.target_content == 'some "quoted" text'


def test_pattern_extraction_requires_type() -> None:
    with pytest.raises(AnalysisParseFailure):
        extract_analysis_fields('"targetContent": "x"', "q")


def test_pipeline_falls_back_to_keywords() -> None:
    analysis = parse_analysis("I could not decide.", "search for llamas")

    assert analysis.type is TaskType.search
    assert analysis.target_content == "llamas"


def test_task_analysis_serializes_with_camel_case_aliases() -> None:
    data = classify_by_keywords("hello").model_dump(by_alias=True, mode="json")

    assert data == {"type": "unknown", "targetContent": "hello", "originalQuery": "hello"}


@pytest.mark.asyncio
async def test_analyzer_uses_completion(scripted_completion) -> None:
    completion = scripted_completion(['{"type": "search", "targetContent": "rust async runtimes"}'])

    analysis = await TaskAnalyzer(completion, max_tokens=50).analyze("anything")

    assert analysis.type is TaskType.search
    assert completion.calls[0]["user_prompt"] == "anything"
    assert completion.calls[0]["max_tokens"] == 50


@pytest.mark.asyncio
async def test_analyzer_survives_completion_failure(scripted_completion) -> None:
    completion = scripted_completion([RuntimeError("service down")])

    analysis = await TaskAnalyzer(completion).analyze("analyze the logs")

    assert analysis.type is TaskType.analyze
    assert analysis.target_content == "the logs"


@pytest.mark.asyncio
async def test_analyzer_without_completion_uses_keywords() -> None:
    analysis = await TaskAnalyzer().analyze("write a poem")

    assert analysis.type is TaskType.generate
