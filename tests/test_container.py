"""
Unit Tests for the Dependency Injection Container

Tests lazy initialization and caching of components, the queue factory wiring,
and shutdown ordering.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from sena_music.application.services.guild_queue import GuildQueue
from sena_music.application.services.playback_pipeline import FallbackPlaybackPipeline
from sena_music.application.services.queue_registry import QueueRegistry
from sena_music.config.container import Container, create_container
from sena_music.config.settings import AudioSettings, Settings
from sena_music.infrastructure.audio.spotify_catalog import SpotifyCatalog
from sena_music.infrastructure.audio.ytdlp_resolver import YtDlpResolver
from sena_music.infrastructure.discord.now_playing import NowPlayingAnnouncer
from sena_music.infrastructure.discord.voice_transport import DiscordVoiceTransport

from conftest import GUILD_ID, FakeChannel


@pytest.fixture
def settings():
    return Settings(_env_file=None, audio=AudioSettings(now_playing_refresh_seconds=5.0))


@pytest.fixture
def container(settings):
    return create_container(settings)


class TestBot:
    def test_bot_required_before_use(self, container):
        with pytest.raises(RuntimeError, match="Bot not initialized"):
            _ = container.bot

    def test_set_bot(self, container):
        bot = MagicMock()
        container.set_bot(bot)

        assert container.bot is bot

    def test_voice_transport_needs_bot(self, container):
        with pytest.raises(RuntimeError):
            _ = container.voice_transport

    def test_voice_transport_cached(self, container):
        container.set_bot(MagicMock())

        transport = container.voice_transport

        assert isinstance(transport, DiscordVoiceTransport)
        assert container.voice_transport is transport


class TestLazyComponents:
    def test_create_container(self, settings):
        container = create_container(settings)

        assert isinstance(container, Container)
        assert container.settings is settings

    def test_audio_resolver_cached(self, container):
        resolver = container.audio_resolver

        assert isinstance(resolver, YtDlpResolver)
        assert container.audio_resolver is resolver

    def test_spotify_catalog_cached(self, container):
        catalog = container.spotify_catalog

        assert isinstance(catalog, SpotifyCatalog)
        assert container.spotify_catalog is catalog

    def test_strategies_in_fallback_order(self, container):
        assert [s.name for s in container.strategies] == ["library", "info", "extractor"]

    def test_pipeline_uses_strategies(self, container):
        pipeline = container.pipeline

        assert isinstance(pipeline, FallbackPlaybackPipeline)
        assert container.pipeline is pipeline

    def test_queue_registry_cached(self, container):
        registry = container.queue_registry

        assert isinstance(registry, QueueRegistry)
        assert container.queue_registry is registry


class TestGuildQueueFactory:
    @pytest.mark.asyncio
    async def test_registry_creates_wired_queue(self, container):
        container.set_bot(MagicMock())
        channel = FakeChannel()

        queue = container.queue_registry.get(GUILD_ID, channel)

        assert isinstance(queue, GuildQueue)
        assert queue.guild_id == GUILD_ID
        assert container.queue_registry.get(GUILD_ID, FakeChannel()) is queue

    @pytest.mark.asyncio
    async def test_factory_builds_announcer_from_settings(self, container):
        container.set_bot(MagicMock())

        queue = container.create_guild_queue(GUILD_ID, FakeChannel())

        announcer = queue._announcer
        assert isinstance(announcer, NowPlayingAnnouncer)
        assert announcer._refresh_seconds == 5.0


class TestShutdown:
    @pytest.mark.asyncio
    async def test_shutdown_without_components(self, container):
        await container.shutdown()

    @pytest.mark.asyncio
    async def test_shutdown_closes_queues_then_resolver(self, container):
        calls: list[str] = []
        registry = MagicMock()
        registry.close_all = AsyncMock(side_effect=lambda: calls.append("queues"))
        resolver = MagicMock()
        resolver.aclose = AsyncMock(side_effect=lambda: calls.append("resolver"))
        container._queue_registry = registry
        container._audio_resolver = resolver

        await container.shutdown()

        assert calls == ["queues", "resolver"]

    @pytest.mark.asyncio
    async def test_resolver_close_failure_logged(self, container, caplog):
        resolver = MagicMock()
        resolver.aclose = AsyncMock(side_effect=RuntimeError("socket"))
        container._audio_resolver = resolver

        await container.shutdown()

        assert "Failed closing audio resolver" in caplog.text
