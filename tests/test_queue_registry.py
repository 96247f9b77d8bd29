"""Unit tests for QueueRegistry."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from sena_music.application.services.queue_registry import QueueRegistry


def _factory():
    created: list[tuple[int, object]] = []

    def factory(guild_id, text_channel):
        queue = MagicMock()
        queue.guild_id = guild_id
        queue.text_channel = text_channel
        queue.disconnect = AsyncMock()
        created.append((guild_id, text_channel))
        return queue

    return factory, created


class TestQueueRegistry:
    def test_get_creates_once_per_guild(self):
        factory, created = _factory()
        registry = QueueRegistry(factory)

        first = registry.get(1, "general")
        again = registry.get(1, "music")

        assert first is again
        assert created == [(1, "general")]
        assert first.text_channel == "general"

    def test_guilds_are_isolated(self):
        factory, _ = _factory()
        registry = QueueRegistry(factory)

        assert registry.get(1, "a") is not registry.get(2, "b")
        assert len(registry) == 2
        assert 1 in registry and 2 in registry

    def test_peek_does_not_create(self):
        factory, created = _factory()
        registry = QueueRegistry(factory)

        assert registry.peek(1) is None
        assert created == []
        assert 1 not in registry

    def test_independent_registries(self):
        factory, _ = _factory()
        a, b = QueueRegistry(factory), QueueRegistry(factory)
        a.get(1, "x")

        assert b.peek(1) is None

    @pytest.mark.asyncio
    async def test_close_all_disconnects_and_clears(self):
        factory, _ = _factory()
        registry = QueueRegistry(factory)
        queues = [registry.get(g, "c") for g in (1, 2)]

        await registry.close_all()

        for queue in queues:
            queue.disconnect.assert_awaited_once()
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_close_all_continues_after_failure(self):
        factory, _ = _factory()
        registry = QueueRegistry(factory)
        broken = registry.get(1, "c")
        broken.disconnect.side_effect = RuntimeError("voice gone")
        healthy = registry.get(2, "c")

        await registry.close_all()

        healthy.disconnect.assert_awaited_once()
        assert len(registry) == 0

    def test_iterates_queues(self):
        factory, _ = _factory()
        registry = QueueRegistry(factory)
        registry.get(1, "c")
        registry.get(2, "c")

        assert sorted(q.guild_id for q in registry) == [1, 2]
