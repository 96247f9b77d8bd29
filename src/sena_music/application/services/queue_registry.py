"""Queue Registry - one GuildQueue per guild, created on first use."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING

from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ..interfaces.notifications import MessageChannel
    from .guild_queue import GuildQueue

logger = logging.getLogger(__name__)

QueueFactory = Callable[[int, "MessageChannel"], "GuildQueue"]


class QueueRegistry:
    """Keyed store with get-or-create semantics.

    Queues live until the registry is closed. The text channel passed on first use
    becomes the queue's notification channel; later calls reuse it.
    """

    def __init__(self, factory: QueueFactory) -> None:
        self._factory = factory
        self._queues: dict[int, GuildQueue] = {}

    def get(self, guild_id: int, text_channel: MessageChannel) -> GuildQueue:
        queue = self._queues.get(guild_id)
        if queue is None:
            queue = self._factory(guild_id, text_channel)
            self._queues[guild_id] = queue
            logger.info(LogTemplates.QUEUE_CREATED, guild_id)
        return queue

    def peek(self, guild_id: int) -> GuildQueue | None:
        """Return the guild's queue without creating one."""
        return self._queues.get(guild_id)

    def __contains__(self, guild_id: object) -> bool:
        return guild_id in self._queues

    def __len__(self) -> int:
        return len(self._queues)

    def __iter__(self) -> Iterator[GuildQueue]:
        return iter(list(self._queues.values()))

    async def close_all(self) -> None:
        """Disconnect every queue. Used on bot shutdown only."""
        for guild_id, queue in list(self._queues.items()):
            try:
                await queue.disconnect()
                logger.info(LogTemplates.QUEUE_CLOSED, guild_id)
            except Exception:
                logger.exception(LogTemplates.QUEUE_CLOSE_FAILED, guild_id)
        self._queues.clear()
