from __future__ import annotations

import pytest

from toolmesh_ai.tools.text import AnalyzeTextTool, ExtractEntitiesTool, SummarizeTextTool

pytestmark = pytest.mark.asyncio

TEXT = (
    "The Model Context Protocol connects clients to tools. "
    "Clients send requests and tools return results. "
    "Protocol validation keeps the protocol predictable."
)


async def test_analyze_text_statistics() -> None:
    result = await AnalyzeTextTool()({"text": "One two three. Four five!"})

    stats = result["statistics"]
    assert stats["sentenceCount"] == 2
    assert stats["wordCount"] == 5
    assert stats["characterCount"] == len("One two three. Four five!")
    assert stats["averageSentenceLength"] == 2.5
    assert stats["averageWordLength"] == round(19 / 5, 2)


async def test_analyze_text_top_words_skip_short_and_stop_words() -> None:
    result = await AnalyzeTextTool()({"text": TEXT})

    top = {entry["word"]: entry["count"] for entry in result["topWords"]}
    assert top["protocol"] == 3
    assert "the" not in top
    assert "to" not in top
    assert len(result["topWords"]) <= 10


async def test_analyze_text_requires_text() -> None:
    with pytest.raises(ValueError, match="analyzeText"):
        await AnalyzeTextTool()({"text": ""})


async def test_summarize_respects_max_length() -> None:
    result = await SummarizeTextTool()({"text": TEXT, "maxLength": 60})

    assert 0 < result["length"] <= 60
    assert result["summary"] in TEXT
    assert result["compressionRatio"].endswith("%")


async def test_summarize_always_returns_at_least_one_sentence() -> None:
    result = await SummarizeTextTool()({"text": TEXT, "maxLength": 1})

    assert result["summary"]
    assert result["length"] == len(result["summary"])


async def test_extract_entities() -> None:
    result = await ExtractEntitiesTool()(
        {"text": "We deploy a Python API on the cloud. The Model Context Protocol drives integration testing."}
    )

    entities = result["entities"]
    assert "Python" in entities["technologies"]
    assert "API" in entities["technologies"]
    assert "integration" in entities["processes"]
    assert "testing" in entities["processes"]
    assert "Model Context Protocol" in entities["names"]
