"""Injectable "today" used for future-transaction and current-month decisions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Protocol


class Clock(Protocol):
    def today(self) -> date:  # pragma: no cover - interface
        ...


class SystemClock:
    """Wall-clock date."""

    def today(self) -> date:
        return date.today()


@dataclass
class FixedClock:
    """Clock pinned to a date; tests move it with ``advance_to``."""

    current: date

    def today(self) -> date:
        return self.current

    def advance_to(self, day: date) -> None:
        self.current = day
