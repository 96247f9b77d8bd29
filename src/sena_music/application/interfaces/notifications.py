"""Ports for everything the guild queue tells its text channel."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from ...domain.music.entities import Track


class MessageChannel(Protocol):
    """The bound text channel of a guild queue."""

    async def send(self, content: str | None = None, **kwargs: Any) -> Any: ...


@dataclass(frozen=True)
class NowPlayingSnapshot:
    track: Track
    elapsed_seconds: float
    paused: bool
    up_next: Track | None = None


SnapshotProvider = Callable[[], "NowPlayingSnapshot | None"]


class PlaybackAnnouncer(ABC):
    """Posts and keeps refreshing the now-playing message of one guild."""

    @abstractmethod
    async def track_started(self, snapshot: SnapshotProvider) -> None:
        """Announce a freshly started track and begin periodic refreshes."""
        ...

    @abstractmethod
    async def refresh(self) -> None:
        """Re-render the current announcement immediately (e.g. after pause)."""
        ...

    @abstractmethod
    def stop(self) -> None:
        """Stop refreshing and forget the current announcement."""
        ...
