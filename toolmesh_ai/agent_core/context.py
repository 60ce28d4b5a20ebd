"""Conversation context and per-server session store.

``ConversationContext`` is a fixed-capacity buffer of turns: appending past
capacity evicts the oldest turn. ``SessionStore`` maps session ids to
contexts and is owned by whoever creates it (the server keeps one on
``app.state``).
"""

from __future__ import annotations

import threading
from collections import OrderedDict, deque
from typing import Deque, List, Optional, Union
from uuid import uuid4

from toolmesh_ai.core.logging_config import get_logger

from .schemas.domain import ConversationTurn, TurnRole

logger = get_logger(__name__)

DEFAULT_HISTORY_LIMIT = 20
DEFAULT_MAX_SESSIONS = 1000


class ConversationContext:
    """Bounded, ordered log of conversation turns."""

    def __init__(self, max_turns: int = DEFAULT_HISTORY_LIMIT) -> None:
        if max_turns < 1:
            raise ValueError("max_turns must be at least 1")
        self._turns: Deque[ConversationTurn] = deque(maxlen=max_turns)

    @property
    def max_turns(self) -> int:
        return self._turns.maxlen or DEFAULT_HISTORY_LIMIT

    def append(self, role: Union[TurnRole, str], content: str) -> ConversationTurn:
        """Record a turn, evicting the oldest one when the buffer is full."""
        turn = ConversationTurn(role=TurnRole(role), content=content)
        self._turns.append(turn)
        return turn

    def reset(self) -> None:
        self._turns.clear()

    @property
    def turns(self) -> List[ConversationTurn]:
        return list(self._turns)

    def __len__(self) -> int:
        return len(self._turns)


class SessionStore:
    """Mapping of session id to ``ConversationContext``.

    The store holds at most ``max_sessions`` contexts. Creating one more evicts
    the least recently used session.
    """

    def __init__(self, history_limit: int = DEFAULT_HISTORY_LIMIT, max_sessions: int = DEFAULT_MAX_SESSIONS) -> None:
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self._history_limit = history_limit
        self._max_sessions = max_sessions
        self._sessions: OrderedDict[str, ConversationContext] = OrderedDict()
        self._lock = threading.Lock()

    @property
    def max_sessions(self) -> int:
        return self._max_sessions

    def get_or_create(self, session_id: Optional[str] = None) -> tuple[str, ConversationContext]:
        """Return ``(session_id, context)``, creating a new session when needed."""
        with self._lock:
            sid = session_id or str(uuid4())
            context = self._sessions.get(sid)
            if context is None:
                context = ConversationContext(self._history_limit)
                self._sessions[sid] = context
                while len(self._sessions) > self._max_sessions:
                    evicted, _ = self._sessions.popitem(last=False)
                    logger.debug(f"Evicted least recently used session {evicted}")
            else:
                self._sessions.move_to_end(sid)
            return sid, context

    def get(self, session_id: str) -> Optional[ConversationContext]:
        return self._sessions.get(session_id)

    def drop(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions
