"""Immutable value objects for the music bounded context."""

from __future__ import annotations

import re
from enum import Enum
from typing import Final
from urllib.parse import parse_qs, urlparse

YOUTUBE_WATCH_URL: Final[str] = "https://www.youtube.com/watch?v={video_id}"

HTTP_PATTERN: Final[re.Pattern[str]] = re.compile(r"^https?://", re.IGNORECASE)
SPOTIFY_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"(?:open\.spotify\.com|spotify\.link|spoti\.fi)", re.IGNORECASE
)
SOUNDCLOUD_PATTERN: Final[re.Pattern[str]] = re.compile(r"soundcloud\.com", re.IGNORECASE)


def is_youtube_url(value: str | None) -> bool:
    """Return True for youtube.com (any subdomain), youtu.be and music.youtube.com links."""
    if not value or not isinstance(value, str):
        return False
    try:
        host = (urlparse(value).hostname or "").lower()
    except ValueError:
        return False
    return host == "youtube.com" or host.endswith(".youtube.com") or host == "youtu.be"


def has_playlist_marker(url: str) -> bool:
    try:
        return "list" in parse_qs(urlparse(url).query)
    except ValueError:
        return False


def youtube_watch_url(video_id: str) -> str:
    return YOUTUBE_WATCH_URL.format(video_id=video_id)


class SourceKind(Enum):
    """How a user query is resolved, in priority order."""

    CROSS_SERVICE = "cross_service"
    PLAYLIST = "playlist"
    DIRECT = "direct"
    SEARCH = "search"
    UNSUPPORTED = "unsupported"

    @classmethod
    def classify(cls, query: str) -> SourceKind:
        """Classify a non-empty query.

        Cross-service links win over everything else; any other link that is not on
        the streaming platform is unsupported, and anything that is not a link is
        free-text search.
        """
        query = query.strip()
        if SPOTIFY_PATTERN.search(query):
            return cls.CROSS_SERVICE
        if HTTP_PATTERN.match(query):
            if not is_youtube_url(query):
                return cls.UNSUPPORTED
            if has_playlist_marker(query):
                return cls.PLAYLIST
            return cls.DIRECT
        return cls.SEARCH


class QueueState(Enum):
    """Guild queue state with enforced transitions.

    State transitions:
    - IDLE -> TRANSITIONING (a head track is being started)
    - TRANSITIONING -> PLAYING (stream acquired and handed to the transport)
    - TRANSITIONING -> IDLE (queue exhausted or stopped mid-start)
    - PLAYING <-> PAUSED (pause / resume)
    - PLAYING, PAUSED -> TRANSITIONING (track ended, advance to next)
    - PLAYING, PAUSED -> IDLE (stop / disconnect)
    """

    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    TRANSITIONING = "transitioning"

    def can_transition_to(self, target: QueueState) -> bool:
        """Check if transition to target state is valid."""
        valid_transitions = {
            QueueState.IDLE: {QueueState.TRANSITIONING},
            QueueState.TRANSITIONING: {QueueState.PLAYING, QueueState.IDLE},
            QueueState.PLAYING: {
                QueueState.PAUSED,
                QueueState.TRANSITIONING,
                QueueState.IDLE,
            },
            QueueState.PAUSED: {
                QueueState.PLAYING,
                QueueState.TRANSITIONING,
                QueueState.IDLE,
            },
        }
        return target in valid_transitions.get(self, set())
