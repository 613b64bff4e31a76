# backoffice_ui/utils/timing.py
"""
Time budgets for the interaction engine. Everything is in integer
milliseconds on the monotonic clock, because that is what Playwright's
`timeout=` arguments take.
"""

from __future__ import annotations

import asyncio
import functools
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from backoffice_ui.utils.logger import get_logger


def now_ms() -> int:
    return time.monotonic_ns() // 1_000_000


async def async_sleep_ms(ms: int) -> None:
    """No-op for zero or negative delays, so tests can configure them away."""
    if ms > 0:
        await asyncio.sleep(ms / 1000)


class Stopwatch:
    """
    with Stopwatch() as sw:
        ...
    sw.elapsed_ms()   # keeps counting after the block; read it where needed
    """

    def __init__(self) -> None:
        self.started_at: Optional[int] = None

    def start(self) -> "Stopwatch":
        self.started_at = now_ms()
        return self

    def elapsed_ms(self) -> int:
        return 0 if self.started_at is None else max(0, now_ms() - self.started_at)

    def __enter__(self) -> "Stopwatch":
        return self.start()

    def __exit__(self, *exc: Any) -> None:
        return None


@dataclass
class Deadline:
    """
    A fixed point in monotonic time.

    Budgets handed to Playwright are floored at 1 ms because a timeout
    of 0 means "wait forever" there.
    """
    budget_ms: int
    started_ms: int = field(default_factory=now_ms)

    @property
    def at_ms(self) -> int:
        return self.started_ms + max(0, self.budget_ms)

    def remaining_ms(self) -> int:
        return max(0, self.at_ms - now_ms())

    def expired(self) -> bool:
        return self.remaining_ms() <= 0

    def cap(self, timeout_ms: int) -> int:
        """Clamp `timeout_ms` to what is left, never below 1 ms."""
        return max(1, min(timeout_ms, self.remaining_ms()))

    def split(self, parts_left: int) -> int:
        """Even share of the remaining budget across `parts_left` consumers."""
        return max(1, self.remaining_ms() // max(1, parts_left))


def _fmt(ms: int) -> str:
    return f"{ms} ms" if ms < 1000 else f"{ms / 1000:.2f} s"


def measure(label: str = "", level: str = "INFO") -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Log how long the decorated function (sync or async) took."""
    log = get_logger(__name__)
    emit = getattr(log, level.lower(), log.info)

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        what = label or func.__qualname__

        if asyncio.iscoroutinefunction(func):
            @functools.wraps(func)
            async def timed_async(*args: Any, **kwargs: Any) -> Any:
                sw = Stopwatch().start()
                try:
                    return await func(*args, **kwargs)
                finally:
                    emit(f"{what}: {_fmt(sw.elapsed_ms())}")
            return timed_async

        @functools.wraps(func)
        def timed(*args: Any, **kwargs: Any) -> Any:
            sw = Stopwatch().start()
            try:
                return func(*args, **kwargs)
            finally:
                emit(f"{what}: {_fmt(sw.elapsed_ms())}")
        return timed
    return decorator

