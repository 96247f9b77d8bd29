"""Core domain entities for the music bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from sena_music.domain.shared.types import (
    DurationSeconds,
    HttpUrlStr,
    NonEmptyStr,
    SessionId,
    TrackTitleStr,
)


class Track(BaseModel):
    """Immutable value object representing one playable queue item."""

    model_config = ConfigDict(frozen=True, strict=True)

    title: TrackTitleStr
    locator: HttpUrlStr
    requested_by: NonEmptyStr = "Unknown"
    duration: DurationSeconds | None = None
    thumbnail: HttpUrlStr | None = None
    artist: NonEmptyStr | None = None

    @property
    def duration_formatted(self) -> str | None:
        """Format duration as M:SS or H:MM:SS, or None when unknown."""
        if self.duration is None:
            return None

        hours, remainder = divmod(self.duration, 3600)
        minutes, seconds = divmod(remainder, 60)

        if hours > 0:
            return f"{hours}:{minutes:02d}:{seconds:02d}"
        return f"{minutes}:{seconds:02d}"


# ── Resolver results ────────────────────────────────────────────────


class SingleResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    track: Track


class PlaylistResult(BaseModel):
    """An expanded playlist: display title plus its playable tracks, in order."""

    model_config = ConfigDict(frozen=True)

    title: NonEmptyStr
    tracks: tuple[Track, ...] = Field(min_length=1)


ResolveResult = SingleResult | PlaylistResult


# ── Queue add results ───────────────────────────────────────────────


class AddTrackResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["track"] = "track"
    track: Track


class AddPlaylistResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["playlist"] = "playlist"
    title: NonEmptyStr
    track_count: int = Field(ge=1)
    first_track: Track


AddResult = AddTrackResult | AddPlaylistResult


# ── Playback session ────────────────────────────────────────────────


@dataclass
class PlaybackSession:
    """The single live playback of one track.

    A new session is created every time a track starts; it is never reused for
    another track. Times are read from the queue's monotonic clock, in seconds.
    Elapsed time is derived on demand rather than polled.
    """

    id: SessionId
    track: Track
    started_at: float
    handle: Any = None
    paused_at: float | None = None
    accumulated_pause: float = 0.0
    paused: bool = False

    def pause(self, now: float) -> bool:
        if self.paused:
            return False
        self.paused = True
        self.paused_at = now
        return True

    def resume(self, now: float) -> bool:
        if not self.paused:
            return False
        if self.paused_at is not None:
            self.accumulated_pause += max(0.0, now - self.paused_at)
        self.paused_at = None
        self.paused = False
        return True

    def elapsed_seconds(self, now: float) -> float:
        reference = self.paused_at if self.paused and self.paused_at is not None else now
        elapsed = max(0.0, reference - self.started_at - self.accumulated_pause)
        if self.track.duration is not None:
            elapsed = min(elapsed, float(self.track.duration))
        return elapsed
