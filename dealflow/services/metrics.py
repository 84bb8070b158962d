"""Pure math / metric helpers (no DB access)."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timedelta


def approval_rate(approved: int, not_approved: int, under_review: int) -> int:
    """Approved share of all decisions as a whole percentage.

    Rounds half up (2 of 3 -> 67, 1 of 8 -> 13).  Returns 0 when there is
    nothing to divide by.
    """
    total = approved + not_approved + under_review
    if total <= 0:
        return 0
    # Integer form of floor(100 * approved / total + 0.5); avoids float drift.
    return (200 * approved + total) // (2 * total)


def top_key(counts: Mapping[str, int]) -> str | None:
    """Key with the highest count, ties going to the alphabetically first key.

    Returns None for an empty mapping.
    """
    if not counts:
        return None
    return min(counts, key=lambda k: (-counts[k], k))


def within_window(created: datetime, now: datetime, window: timedelta) -> bool:
    """True when *created* is less than *window* before *now*."""
    return now - created < window
