"""Port interface for the voice connection and audio player of each guild."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from sena_music.domain.shared.types import DiscordSnowflake, SessionId

if TYPE_CHECKING:
    from ...domain.music.events import TransportEvent
    from .stream_strategy import AudioStreamHandle

EventSink = Callable[["TransportEvent"], Awaitable[None]]


class VoiceTransport(ABC):
    """Interface for voice channel connection and playback, keyed by guild."""

    @abstractmethod
    async def connect(self, guild_id: DiscordSnowflake, channel_id: DiscordSnowflake) -> None:
        """Join a voice channel and wait until the connection is ready.

        Raises:
            VoiceConnectionError: on timeout or failure; the half-open connection is torn down.
        """
        ...

    @abstractmethod
    async def disconnect(self, guild_id: DiscordSnowflake) -> bool:
        """Leave voice in a guild."""
        ...

    @abstractmethod
    def is_connected(self, guild_id: DiscordSnowflake) -> bool:
        ...

    @abstractmethod
    async def play(
        self, guild_id: DiscordSnowflake, handle: AudioStreamHandle, session_id: SessionId
    ) -> None:
        """Start playing *handle*; its end or failure is reported as a TransportEvent."""
        ...

    @abstractmethod
    async def stop(self, guild_id: DiscordSnowflake) -> bool:
        """Stop the current stream. The transport then reports TrackEnded."""
        ...

    @abstractmethod
    async def pause(self, guild_id: DiscordSnowflake) -> bool:
        """Pause playback; False when there is nothing playing."""
        ...

    @abstractmethod
    async def resume(self, guild_id: DiscordSnowflake) -> bool:
        """Resume playback; False when nothing is paused."""
        ...

    @abstractmethod
    def set_event_sink(self, guild_id: DiscordSnowflake, sink: EventSink | None) -> None:
        """Route transport events for a guild to *sink* (None unregisters)."""
        ...
