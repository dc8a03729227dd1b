from __future__ import annotations

import math

from .base import PercentageCalculator


class RoundedPercentageCalculator(PercentageCalculator):
    """Whole-number percentage, halves rounded up; 0 when there is no data.

    No data and 0% look the same to callers.
    """

    def percentage(self, present: int, total: int) -> int:
        if total <= 0:
            return 0
        return int(math.floor(present * 100 / total + 0.5))
