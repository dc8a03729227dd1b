from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PeriodWindow:
    """Start/end of one class period, in minutes since local midnight."""

    start: int
    end: int

    @classmethod
    def of(cls, start_h: int, start_m: int, end_h: int, end_m: int) -> "PeriodWindow":
        return cls(start=start_h * 60 + start_m, end=end_h * 60 + end_m)

    def contains(self, minute: int) -> bool:
        return self.start <= minute <= self.end


@dataclass(frozen=True)
class MarkingVerdict:
    allowed: bool
    reason: str
