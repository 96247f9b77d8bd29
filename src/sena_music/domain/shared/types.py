"""Reusable Pydantic Annotated types for domain-wide validation.

Constrained types used across the package are defined here once,
so models can simply annotate their fields::

    from sena_music.domain.shared.types import HttpUrlStr, NonEmptyStr

    class MyModel(BaseModel):
        locator: HttpUrlStr
        name: NonEmptyStr
"""

from __future__ import annotations

from typing import Annotated

from pydantic import Field

# ── Numeric constraints ─────────────────────────────────────────────

DiscordSnowflake = Annotated[int, Field(gt=0, lt=2**64)]
"""Positive integer that fits a Discord snowflake (1 … 2^64-1)."""

PositiveInt = Annotated[int, Field(gt=0)]
"""Integer > 0."""

DurationSeconds = Annotated[int, Field(ge=0)]
"""Track duration in whole seconds."""

SessionId = Annotated[int, Field(ge=0)]
"""Monotonic playback session counter, unique per guild queue."""


# ── String constraints ──────────────────────────────────────────────

NonEmptyStr = Annotated[str, Field(min_length=1)]
"""String with at least one character."""

TrackTitleStr = Annotated[str, Field(min_length=1, max_length=500)]
"""Track title: 1-500 characters."""

HttpUrlStr = Annotated[str, Field(pattern=r"^https?://")]
"""String that starts with http:// or https://."""
