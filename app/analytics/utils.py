from __future__ import annotations

import math
from collections import Counter
from typing import Hashable, Iterable, TypeVar

K = TypeVar("K", bound=Hashable)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up, the way dashboard numbers are displayed."""
    return int(math.floor(value + 0.5))


def round_one_decimal(value: float) -> float:
    return math.floor(value * 10 + 0.5) / 10


def percent_of(part: float, whole: float) -> int:
    if not whole:
        return 0
    return round_half_up(part / whole * 100)


def population(size: int) -> int:
    return size or 1


def ranked_counts(values: Iterable[K], limit: int | None = None) -> list[tuple[K, int]]:
    """Tally values and order by count descending; ties keep first-seen order."""
    counts = Counter(values)
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return ranked if limit is None else ranked[:limit]
