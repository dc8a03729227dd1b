from __future__ import annotations

from abc import ABC, abstractmethod


class PercentageCalculator(ABC):
    """Calculator interface (Strategy Pattern for attendance percentages)."""

    @abstractmethod
    def percentage(self, present: int, total: int) -> int:
        raise NotImplementedError
