"""Posts the now-playing embed for a guild and keeps its progress bar current."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from sena_music.application.interfaces.notifications import PlaybackAnnouncer, SnapshotProvider
from sena_music.domain.shared.messages import LogTemplates
from sena_music.infrastructure.discord.embeds import build_now_playing_embed

if TYPE_CHECKING:
    from ...application.interfaces.notifications import MessageChannel

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_SECONDS: float = 15.0


class NowPlayingAnnouncer(PlaybackAnnouncer):
    """One announcer per guild queue.

    Each started track gets a fresh message. A background task edits it every
    ``refresh_seconds``; the task ends on track change, stop, or the first failed
    send or edit.
    """

    def __init__(
        self,
        channel: MessageChannel,
        *,
        guild_id: int | None = None,
        refresh_seconds: float = DEFAULT_REFRESH_SECONDS,
    ) -> None:
        self._channel = channel
        self._guild_id = guild_id
        self._refresh_seconds = refresh_seconds
        self._snapshot: SnapshotProvider | None = None
        self._message: Any = None
        self._task: asyncio.Task[None] | None = None

    @property
    def message(self) -> Any:
        return self._message

    @property
    def is_refreshing(self) -> bool:
        return self._task is not None and not self._task.done()

    async def track_started(self, snapshot: SnapshotProvider) -> None:
        self.stop()
        current = snapshot()
        if current is None:
            return

        try:
            message = await self._channel.send(embed=build_now_playing_embed(current))
        except Exception:
            logger.exception(LogTemplates.NOW_PLAYING_SEND_FAILED, self._guild_id)
            return

        self._snapshot = snapshot
        self._message = message
        self._task = asyncio.create_task(
            self._refresh_loop(), name=f"now-playing-{self._guild_id}"
        )

    async def refresh(self) -> None:
        if not await self._edit():
            self.stop()

    def stop(self) -> None:
        task, self._task = self._task, None
        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()
        self._message = None
        self._snapshot = None

    async def _refresh_loop(self) -> None:
        while True:
            await asyncio.sleep(self._refresh_seconds)
            if not await self._edit():
                self._message = None
                self._snapshot = None
                return

    async def _edit(self) -> bool:
        if self._message is None or self._snapshot is None:
            return False
        current = self._snapshot()
        if current is None:
            return False
        try:
            await self._message.edit(embed=build_now_playing_embed(current))
        except Exception:
            logger.exception(LogTemplates.NOW_PLAYING_EDIT_FAILED, self._guild_id)
            return False
        return True

