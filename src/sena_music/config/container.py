"""Dependency Injection Container

Manages the application's dependency graph, providing lazy initialization
and lifecycle management for the resolver, playback pipeline, voice transport
and the per-guild queues. Components are created on first access and cached.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..domain.shared.messages import ErrorMessages

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..application.interfaces.audio_resolver import AudioResolver
    from ..application.interfaces.notifications import MessageChannel
    from ..application.interfaces.stream_strategy import StreamStrategy
    from ..application.interfaces.voice_transport import VoiceTransport
    from ..application.services.guild_queue import GuildQueue
    from ..application.services.playback_pipeline import FallbackPlaybackPipeline
    from ..application.services.queue_registry import QueueRegistry
    from ..infrastructure.audio.spotify_catalog import SpotifyCatalog
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    Components are lazily initialized when first accessed. The voice transport
    and everything built on it need the bot, so ``set_bot`` must run first.
    """

    settings: Settings
    _bot: Bot | None = None

    # Infrastructure adapters
    _spotify_catalog: SpotifyCatalog | None = None
    _audio_resolver: AudioResolver | None = None
    _voice_transport: VoiceTransport | None = None

    # Application services
    _strategies: list[StreamStrategy] | None = None
    _pipeline: FallbackPlaybackPipeline | None = None
    _queue_registry: QueueRegistry | None = None

    def set_bot(self, bot: Bot) -> None:
        """Set the Discord bot instance."""
        self._bot = bot

    @property
    def bot(self) -> Bot:
        """Get the Discord bot instance."""
        if self._bot is None:
            raise RuntimeError(ErrorMessages.BOT_NOT_INITIALIZED)
        return self._bot

    # === Infrastructure Adapters ===

    @property
    def spotify_catalog(self) -> SpotifyCatalog:
        if self._spotify_catalog is None:
            from ..infrastructure.audio.spotify_catalog import SpotifyCatalog

            self._spotify_catalog = SpotifyCatalog(self.settings.spotify)
        return self._spotify_catalog

    @property
    def audio_resolver(self) -> AudioResolver:
        """Get the audio resolver."""
        if self._audio_resolver is None:
            from ..infrastructure.audio.ytdlp_resolver import YtDlpResolver

            self._audio_resolver = YtDlpResolver(self.settings.audio, spotify=self.spotify_catalog)
        return self._audio_resolver

    @property
    def voice_transport(self) -> VoiceTransport:
        """Get the voice transport shared by every guild queue."""
        if self._voice_transport is None:
            from ..infrastructure.discord.voice_transport import DiscordVoiceTransport

            self._voice_transport = DiscordVoiceTransport(self.bot, self.settings.audio)
        return self._voice_transport

    # === Application Services ===

    @property
    def strategies(self) -> list[StreamStrategy]:
        if self._strategies is None:
            from ..infrastructure.audio.stream_strategies import build_default_strategies

            self._strategies = build_default_strategies(self.settings.audio)
        return self._strategies

    @property
    def pipeline(self) -> FallbackPlaybackPipeline:
        if self._pipeline is None:
            from ..application.services.playback_pipeline import FallbackPlaybackPipeline

            self._pipeline = FallbackPlaybackPipeline(self.strategies)
        return self._pipeline

    @property
    def queue_registry(self) -> QueueRegistry:
        """Get the registry holding one queue per guild."""
        if self._queue_registry is None:
            from ..application.services.queue_registry import QueueRegistry

            self._queue_registry = QueueRegistry(self.create_guild_queue)
        return self._queue_registry

    def create_guild_queue(self, guild_id: int, text_channel: MessageChannel) -> GuildQueue:
        """Queue factory used by the registry on a guild's first command."""
        from ..application.services.guild_queue import GuildQueue
        from ..infrastructure.discord.now_playing import NowPlayingAnnouncer

        announcer = NowPlayingAnnouncer(
            text_channel,
            guild_id=guild_id,
            refresh_seconds=self.settings.audio.now_playing_refresh_seconds,
        )
        return GuildQueue(
            guild_id,
            text_channel,
            resolver=self.audio_resolver,
            pipeline=self.pipeline,
            transport=self.voice_transport,
            announcer=announcer,
        )

    # === Lifecycle ===

    async def shutdown(self) -> None:
        """Disconnect every guild and release the resolver's HTTP client."""
        if self._queue_registry is not None:
            await self._queue_registry.close_all()

        if self._audio_resolver is not None:
            try:
                await self._audio_resolver.aclose()
            except Exception as exc:
                logger.warning("Failed closing audio resolver: %r", exc)


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
