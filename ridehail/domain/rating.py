"""Driver rating aggregation."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional


def average_rating(ratings: Iterable[Optional[int]]) -> Optional[float]:
    """Mean of the given ratings to one decimal place, halves rounded up.

    ``None`` entries (unrated rides) are skipped; returns ``None`` when
    nothing is left to average.
    """
    values = [r for r in ratings if r is not None]
    if not values:
        return None
    mean = Decimal(sum(values)) / Decimal(len(values))
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))
