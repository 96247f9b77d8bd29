"""Transport events consumed by the guild queue state machine.

The voice transport never calls back into queue internals; it posts one of these
messages and the queue's ``dispatch`` decides what the event means for the
current session.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

from sena_music.domain.shared.types import NonEmptyStr, SessionId


class TransportEvent(BaseModel):
    """Base class for all playback transport events."""

    model_config = ConfigDict(frozen=True)

    session_id: SessionId


class TrackEnded(TransportEvent):
    """The transport reached the end of the stream (naturally, by stop, or after a dropped connection)."""

    event_type: Literal["TrackEnded"] = "TrackEnded"
    interrupted: bool = False


class PlaybackFailed(TransportEvent):
    """The transport hit a non-transient decode or playback error."""

    event_type: Literal["PlaybackFailed"] = "PlaybackFailed"
    error: NonEmptyStr
