"""Text tools: statistics, extractive summary and entity heuristics."""

from __future__ import annotations

import re
from collections import Counter
from typing import Any, Dict, List

from pydantic import Field

from toolmesh_ai.protocol.registry import BaseTool

from .base import ToolInput

STOP_WORDS = frozenset({"a", "an", "the", "and", "or", "but", "to", "of", "in", "on", "is", "for", "with", "that", "this"})

TECH_KEYWORDS = (
    "API", "framework", "language", "library", "platform", "protocol", "server",
    "client", "database", "cloud", "AI", "ML", "model", "algorithm", "JavaScript",
    "Python", "Java", "C++", "React", "Node.js", "MCP", "REST",
)
CONCEPT_KEYWORDS = (
    "concept", "pattern", "paradigm", "architecture", "design", "structure",
    "service", "module", "component", "abstraction", "encapsulation", "inheritance",
    "polymorphism", "interface", "schema", "model", "standard", "convention",
)
PROCESS_KEYWORDS = (
    "process", "workflow", "pipeline", "lifecycle", "development", "deployment",
    "integration", "testing", "validation", "verification", "authentication",
    "authorization", "monitoring", "logging", "debugging", "compilation",
)

_WORD_RE = re.compile(r"[A-Za-z0-9À-ž]+(?:'[A-Za-z]+)?")
_SENTENCE_RE = re.compile(r"[^.!?]+(?:[.!?]+|$)")
_CAPITALIZED_RUN_RE = re.compile(r"\b[A-Z][A-Za-z0-9]+(?:\s+[A-Z][A-Za-z0-9]+){0,3}\b")


def tokenize_words(text: str) -> List[str]:
    return _WORD_RE.findall(text)


def tokenize_sentences(text: str) -> List[str]:
    return [s.strip() for s in _SENTENCE_RE.findall(text) if s.strip()]


class TextInput(ToolInput):
    text: str = Field(..., min_length=1, description="Text to process")


class SummarizeInput(TextInput):
    max_length: int = Field(200, alias="maxLength", ge=1, description="Maximum summary length in characters")


class AnalyzeTextTool(BaseTool):
    name = "analyzeText"
    description = "Compute sentence and word statistics and the most frequent words of a text"
    input_model = TextInput

    async def run(self, params: TextInput) -> Dict[str, Any]:
        text = params.text
        words = tokenize_words(text)
        sentences = tokenize_sentences(text)

        frequency = Counter(
            w.lower() for w in words if len(w) > 2 and w.lower() not in STOP_WORDS
        )
        top_words = [{"word": word, "count": count} for word, count in frequency.most_common(10)]

        word_count = len(words)
        sentence_count = len(sentences)
        return {
            "statistics": {
                "sentenceCount": sentence_count,
                "wordCount": word_count,
                "characterCount": len(text),
                "averageWordLength": round(sum(len(w) for w in words) / word_count, 2) if word_count else 0,
                "averageSentenceLength": round(word_count / sentence_count, 2) if sentence_count else 0,
            },
            "topWords": top_words,
        }


class SummarizeTextTool(BaseTool):
    name = "summarizeText"
    description = "Build an extractive summary from the highest scoring sentences"
    input_model = SummarizeInput

    async def run(self, params: SummarizeInput) -> Dict[str, Any]:
        text = params.text
        sentences = tokenize_sentences(text)
        frequency = Counter(w.lower() for w in tokenize_words(text) if len(w) > 3)

        def score(sentence: str) -> float:
            words = tokenize_words(sentence)
            if not words:
                return 0.0
            return sum(frequency.get(w.lower(), 0) for w in words) / len(words)

        # stable sort: ties keep document order
        ranked = sorted(sentences, key=score, reverse=True)
        chosen: List[str] = []
        length = 0
        for sentence in ranked:
            if chosen and length + len(sentence) + 1 > params.max_length:
                break
            chosen.append(sentence)
            length += len(sentence) + 1

        summary = " ".join(chosen).strip()
        return {
            "summary": summary,
            "length": len(summary),
            "compressionRatio": f"{round(len(summary) / len(text) * 100)}%",
        }


def _detect_keywords(text: str, keywords: tuple[str, ...]) -> List[str]:
    found: List[str] = []
    for keyword in keywords:
        match = re.search(rf"(?<![A-Za-z0-9]){re.escape(keyword)}(?![A-Za-z0-9])", text, re.IGNORECASE)
        if match and match.group(0) not in found:
            found.append(match.group(0))
    return found


class ExtractEntitiesTool(BaseTool):
    name = "extractEntities"
    description = "Detect technologies, concepts, processes and capitalized names in a text"
    input_model = TextInput

    async def run(self, params: TextInput) -> Dict[str, Any]:
        text = params.text
        names: List[str] = []
        for sentence in tokenize_sentences(text):
            for match in _CAPITALIZED_RUN_RE.finditer(sentence):
                phrase = match.group(0)
                if match.start() == 0:
                    # first word of a sentence is capitalized regardless
                    phrase = phrase.partition(" ")[2]
                if phrase and phrase not in names:
                    names.append(phrase)
        return {
            "entities": {
                "technologies": _detect_keywords(text, TECH_KEYWORDS),
                "concepts": _detect_keywords(text, CONCEPT_KEYWORDS),
                "processes": _detect_keywords(text, PROCESS_KEYWORDS),
                "names": names,
            }
        }
