# clock.py

from __future__ import annotations

import time
from datetime import UTC, datetime
from typing import Protocol


def iso_from_ms(ms: int) -> str:
    """Epoch milliseconds -> ISO-8601 UTC with a trailing Z."""
    dt = datetime.fromtimestamp(ms / 1000, UTC)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Clock(Protocol):
    def now_ms(self) -> int: ...

    def now_iso(self) -> str: ...


class SystemClock:
    def now_ms(self) -> int:
        return int(time.time() * 1000)

    def now_iso(self) -> str:
        return iso_from_ms(self.now_ms())


class FixedClock:
    """Manually advanced clock for tests and replays."""

    def __init__(self, ms: int = 0) -> None:
        self.ms = ms

    def advance(self, ms: int) -> None:
        self.ms += ms

    def now_ms(self) -> int:
        return self.ms

    def now_iso(self) -> str:
        return iso_from_ms(self.ms)


SYSTEM_CLOCK = SystemClock()
