from __future__ import annotations

import copy

import pytest

from toolmesh_ai.protocol.envelope import (
    build_error,
    build_request,
    build_success,
    validate_request,
    validate_response,
)
from toolmesh_ai.protocol.errors import InvalidEnvelope


def test_build_request_produces_valid_envelope() -> None:
    env = build_request("analyzeText", {"text": "hello"})

    assert env == {"version": "1.0", "action": {"name": "analyzeText", "parameters": {"text": "hello"}}}
    assert validate_request(env) is None


def test_build_request_defaults_parameters_to_empty_mapping() -> None:
    assert build_request("system.ping")["action"]["parameters"] == {}


@pytest.mark.parametrize("name", ["", "   ", None, 42])
def test_build_request_rejects_empty_or_non_string_name(name) -> None:
    with pytest.raises(InvalidEnvelope):
        build_request(name)


def test_build_request_rejects_non_mapping_parameters() -> None:
    with pytest.raises(InvalidEnvelope):
        build_request("analyzeText", ["not", "a", "mapping"])  # type: ignore[arg-type]


def test_build_success_wraps_non_mapping_result() -> None:
    assert build_success([1, 2]) == {"version": "1.0", "status": "success", "result": {"result": [1, 2]}}
    assert build_success({"a": 1})["result"] == {"a": 1}


def test_build_error_is_valid_response() -> None:
    env = build_error("boom")

    assert env == {"version": "1.0", "status": "error", "error": "boom"}
    assert validate_response(env) is None


@pytest.mark.parametrize(
    "envelope",
    [
        {"action": {"name": "x", "parameters": {}}},
        {"version": "2.0", "action": {"name": "x", "parameters": {}}},
        {"version": "1.0"},
        {"version": "1.0", "action": {"parameters": {}}},
        {"version": "1.0", "action": {"name": "", "parameters": {}}},
        {"version": "1.0", "action": {"name": 7, "parameters": {}}},
        {"version": "1.0", "action": {"name": "x", "parameters": "nope"}},
        {"version": "1.0", "action": {"name": "x"}, "extra": True},
        "not an object",
        None,
    ],
)
def test_validate_request_reports_problems(envelope) -> None:
    message = validate_request(envelope)

    assert isinstance(message, str) and message


@pytest.mark.parametrize(
    "envelope",
    [
        {"version": "1.0", "status": "success"},
        {"version": "1.0", "status": "error"},
        {"version": "1.0", "status": "success", "result": {}, "error": "both"},
        {"version": "1.0", "status": "pending", "result": {}},
        {"status": "success", "result": {}},
    ],
)
def test_validate_response_enforces_discrimination(envelope) -> None:
    assert validate_response(envelope) is not None


def test_validate_request_is_pure_and_idempotent() -> None:
    env = {"version": "1.0", "action": {"name": "analyzeText", "parameters": {"text": "x"}}}
    snapshot = copy.deepcopy(env)

    first = validate_request(env)
    second = validate_request(env)

    assert first is None and second is None
    assert env == snapshot
