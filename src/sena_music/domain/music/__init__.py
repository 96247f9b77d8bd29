"""
Music Bounded Context

Domain logic for tracks, queue state and playback sessions.
"""

from sena_music.domain.music.entities import (
    AddPlaylistResult,
    AddTrackResult,
    PlaybackSession,
    PlaylistResult,
    SingleResult,
    Track,
)
from sena_music.domain.music.events import PlaybackFailed, TrackEnded, TransportEvent
from sena_music.domain.music.value_objects import QueueState, SourceKind

__all__ = [
    # Entities
    "Track",
    "PlaybackSession",
    # Results
    "SingleResult",
    "PlaylistResult",
    "AddTrackResult",
    "AddPlaylistResult",
    # Value Objects
    "QueueState",
    "SourceKind",
    # Events
    "TransportEvent",
    "TrackEnded",
    "PlaybackFailed",
]
