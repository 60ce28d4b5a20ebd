"""Bounded fixed-delay retry for async callables."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Tuple, TypeVar

from toolmesh_ai.protocol.errors import StepExhausted

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


async def retry_fixed(
    operation: Callable[[], Awaitable[T]],
    *,
    label: str,
    max_attempts: int = 3,
    delay_seconds: float = 1.0,
    sleep: Sleep = asyncio.sleep,
) -> Tuple[T, int]:
    """Await ``operation`` up to ``max_attempts`` times.

    The delay is applied only between attempts, never after the last one.

    Returns:
        ``(value, attempts_used)`` of the first successful attempt.

    Raises:
        StepExhausted: If every attempt raised. Carries the last error.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    last_error: BaseException = RuntimeError("no attempt made")
    for attempt in range(1, max_attempts + 1):
        try:
            return await operation(), attempt
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            last_error = exc
            logger.warning(f"{label}: attempt {attempt}/{max_attempts} failed: {exc}")
            if attempt < max_attempts and delay_seconds > 0:
                await sleep(delay_seconds)
    raise StepExhausted(label, max_attempts, last_error)
