"""Utility functions for formatting Discord messages."""

from __future__ import annotations

import math
from functools import cache

PROGRESS_BAR_LENGTH = 20
PROGRESS_FILLED = "█"
PROGRESS_EMPTY = "░"


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


@cache
def format_duration(seconds: int | float | None) -> str | None:
    """Format seconds as M:SS or H:MM:SS. None stays None."""
    if seconds is None or (isinstance(seconds, float) and math.isnan(seconds)):
        return None

    total_seconds = max(0, int(seconds))
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    secs = total_seconds % 60

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def build_progress_bar(elapsed: float | None, total: int | float | None) -> str | None:
    """Render ``[████░░…] M:SS / M:SS (NN%)``; None when the total is unknown."""
    if not total or total <= 0:
        return None

    ratio = min(1.0, max(0.0, (elapsed or 0) / total))
    filled = _round_half_up(ratio * PROGRESS_BAR_LENGTH)
    bar = PROGRESS_FILLED * filled + PROGRESS_EMPTY * (PROGRESS_BAR_LENGTH - filled)
    elapsed_label = format_duration(elapsed or 0) or "0:00"
    total_label = format_duration(total) or "0:00"
    return f"[{bar}] {elapsed_label} / {total_label} ({_round_half_up(ratio * 100)}%)"


@cache
def truncate(text: str, max_length: int = 60) -> str:
    """Cut *text* to *max_length* characters, ending in ``...`` when shortened."""
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."
