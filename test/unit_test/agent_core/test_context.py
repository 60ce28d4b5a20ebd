from __future__ import annotations

import pytest

from toolmesh_ai.agent_core.context import ConversationContext, SessionStore
from toolmesh_ai.agent_core.schemas.domain import TurnRole


def test_append_records_role_content_and_timestamp() -> None:
    ctx = ConversationContext()
    turn = ctx.append("user", "hello")

    assert turn.role is TurnRole.user
    assert turn.content == "hello"
    assert turn.timestamp is not None
    assert len(ctx) == 1


def test_twenty_first_turn_evicts_exactly_the_oldest() -> None:
    ctx = ConversationContext()
    for i in range(20):
        ctx.append("user", f"m{i}")
    assert len(ctx) == 20

    ctx.append("assistant", "m20")

    contents = [t.content for t in ctx.turns]
    assert len(contents) == 20
    assert contents[0] == "m1"
    assert contents[-1] == "m20"


def test_reset_clears_turns() -> None:
    ctx = ConversationContext(max_turns=3)
    ctx.append("user", "a")
    ctx.reset()

    assert len(ctx) == 0
    assert ctx.turns == []


def test_turns_returns_a_copy() -> None:
    ctx = ConversationContext()
    ctx.append("user", "a")
    ctx.turns.clear()

    assert len(ctx) == 1


def test_invalid_role_and_capacity_are_rejected() -> None:
    with pytest.raises(ValueError):
        ConversationContext(max_turns=0)
    with pytest.raises(ValueError):
        ConversationContext().append("system", "x")


def test_session_store_get_or_create_and_drop() -> None:
    store = SessionStore(history_limit=5)

    sid, ctx = store.get_or_create()
    same_sid, same_ctx = store.get_or_create(sid)
    assert same_sid == sid and same_ctx is ctx
    assert ctx.max_turns == 5

    named_sid, _ = store.get_or_create("abc")
    assert named_sid == "abc"
    assert len(store) == 2

    assert store.drop("abc") is True
    assert store.drop("abc") is False
    assert "abc" not in store

    store.clear()
    assert len(store) == 0


def test_session_store_evicts_least_recently_used_session() -> None:
    store = SessionStore(max_sessions=2)
    store.get_or_create("a")
    store.get_or_create("b")
    store.get_or_create("a")

    store.get_or_create("c")

    assert len(store) == 2
    assert "b" not in store
    assert "a" in store and "c" in store


def test_session_store_stays_bounded_for_anonymous_queries() -> None:
    store = SessionStore(max_sessions=10)

    for _ in range(200):
        store.get_or_create()

    assert len(store) == 10


def test_session_store_rejects_non_positive_capacity() -> None:
    with pytest.raises(ValueError):
        SessionStore(max_sessions=0)
