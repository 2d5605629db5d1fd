"""
Bounded polling combinator.

Confirmation polling is a fixed sequence of (sleep, fetch) steps that stops at
the first terminal value. The sleep is an ordinary awaitable, so cancelling
the calling task interrupts it; an optional monotonic deadline lets callers
cut the budget short without cancelling.
"""

import asyncio
import time
from typing import Awaitable, Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class PollOutcome(Generic[T]):
    """
    Result of a polling run.

    Attributes:
        value: Last fetched value (terminal when ``timed_out`` is False)
        attempts: Number of fetches performed
        timed_out: True when the budget or deadline ran out first
    """

    __slots__ = ("value", "attempts", "timed_out")

    def __init__(self, value: Optional[T], attempts: int, timed_out: bool):
        self.value = value
        self.attempts = attempts
        self.timed_out = timed_out

    def __repr__(self) -> str:
        return f"PollOutcome(value={self.value!r}, attempts={self.attempts}, timed_out={self.timed_out})"


async def poll_until(
    fetch: Callable[[], Awaitable[T]],
    is_terminal: Callable[[T], bool],
    *,
    interval: float,
    max_attempts: int,
    deadline: Optional[float] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> PollOutcome[T]:
    """
    Sleep ``interval`` then ``fetch()``, up to ``max_attempts`` times.

    Args:
        fetch: Coroutine function returning the current state
        is_terminal: Predicate that ends polling when it returns True
        interval: Seconds to sleep before every fetch
        max_attempts: Maximum number of fetches
        deadline: Optional ``clock()`` value after which no further attempt starts
        sleep: Awaitable sleep, ``asyncio.sleep`` by default
        clock: Monotonic clock the deadline is measured against

    Returns:
        PollOutcome: Terminal value and attempt count, or ``timed_out=True``
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    value: Optional[T] = None
    attempts = 0
    while attempts < max_attempts:
        if deadline is not None and clock() >= deadline:
            break
        await sleep(interval)
        attempts += 1
        value = await fetch()
        if is_terminal(value):
            return PollOutcome(value, attempts, timed_out=False)

    return PollOutcome(value, attempts, timed_out=True)
