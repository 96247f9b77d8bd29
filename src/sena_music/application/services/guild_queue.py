"""Guild Queue - per-server track queue and playback state machine."""

from __future__ import annotations

import asyncio
import itertools
import logging
import random
import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from ...domain.music.entities import (
    AddPlaylistResult,
    AddResult,
    AddTrackResult,
    PlaybackSession,
    PlaylistResult,
    Track,
)
from ...domain.music.events import PlaybackFailed, TransportEvent
from ...domain.music.value_objects import QueueState, is_youtube_url
from ...domain.shared.exceptions import (
    InvalidOperationError,
    PlaybackError,
    VoiceConnectionError,
)
from ...domain.shared.messages import DiscordUIMessages, LogTemplates
from ..interfaces.notifications import NowPlayingSnapshot, PlaybackAnnouncer

if TYPE_CHECKING:
    from ..interfaces.audio_resolver import AudioResolver
    from ..interfaces.notifications import MessageChannel, SnapshotProvider
    from ..interfaces.voice_transport import VoiceTransport
    from .playback_pipeline import FallbackPlaybackPipeline

logger = logging.getLogger(__name__)


def requester_display_name(requester: Any) -> str:
    """Display name of the requesting member, frozen at add-time."""
    if isinstance(requester, str):
        return requester or "Unknown"
    for attr in ("display_name", "nick", "name"):
        value = getattr(requester, attr, None)
        if isinstance(value, str) and value:
            return value
    return "Unknown"


class NullAnnouncer(PlaybackAnnouncer):
    """Announcer used when a queue has nowhere to post now-playing messages."""

    async def track_started(self, snapshot: SnapshotProvider) -> None:
        return None

    async def refresh(self) -> None:
        return None

    def stop(self) -> None:
        return None


class GuildQueue:
    """Owns one guild's ordered tracks, its playback session and its voice link.

    ``songs[0]`` is the track loaded into the current session (or about to be);
    the rest is "up next". Transport completions arrive as messages through
    :meth:`dispatch` and drive every track advance. All mutation happens on the
    event loop, so the only interleavings are at ``await`` points; those are
    covered by the session id check, the ``is_transitioning`` guard and the
    ordered commit of concurrent ``add`` calls.
    """

    def __init__(
        self,
        guild_id: int,
        text_channel: MessageChannel,
        *,
        resolver: AudioResolver,
        pipeline: FallbackPlaybackPipeline,
        transport: VoiceTransport,
        announcer: PlaybackAnnouncer | None = None,
        clock: Callable[[], float] = time.monotonic,
        rng: random.Random | None = None,
    ) -> None:
        self._guild_id = guild_id
        self._text_channel = text_channel
        self._resolver = resolver
        self._pipeline = pipeline
        self._transport = transport
        self._announcer = announcer or NullAnnouncer()
        self._clock = clock
        self._rng = rng or random.Random()

        self._songs: list[Track] = []
        self._state = QueueState.IDLE
        self._session: PlaybackSession | None = None
        self._session_ids = itertools.count(1)
        self._is_transitioning = False
        self._deferred_event: TransportEvent | None = None

        # Concurrent adds resolve in parallel but commit in call order.
        self._commit_cond = asyncio.Condition()
        self._next_ticket = 0
        self._commit_turn = 0
        self._finished_tickets: set[int] = set()

        self._transport.set_event_sink(guild_id, self.dispatch)

    # === Read-only views ===

    @property
    def guild_id(self) -> int:
        return self._guild_id

    @property
    def text_channel(self) -> MessageChannel:
        return self._text_channel

    @property
    def songs(self) -> tuple[Track, ...]:
        return tuple(self._songs)

    @property
    def current(self) -> Track | None:
        return self._songs[0] if self._songs else None

    @property
    def state(self) -> QueueState:
        return self._state

    @property
    def session(self) -> PlaybackSession | None:
        return self._session

    @property
    def is_transitioning(self) -> bool:
        return self._is_transitioning

    @property
    def is_connected(self) -> bool:
        return self._transport.is_connected(self._guild_id)

    def get_elapsed_seconds(self) -> float:
        """Seconds played in the current session, excluding paused time."""
        if self._session is None:
            return 0.0
        return self._session.elapsed_seconds(self._clock())

    def snapshot(self) -> NowPlayingSnapshot | None:
        if self._session is None or not self._songs:
            return None
        return NowPlayingSnapshot(
            track=self._songs[0],
            elapsed_seconds=self.get_elapsed_seconds(),
            paused=self._session.paused,
            up_next=self._songs[1] if len(self._songs) > 1 else None,
        )

    # === Connection ===

    async def connect(self, voice_channel: Any) -> bool:
        """Join *voice_channel* unless a connection already exists.

        On failure the text channel is notified, the connection stays unset and
        queued tracks are kept for a later attempt.
        """
        if self.is_connected:
            return True

        channel_id = getattr(voice_channel, "id", voice_channel)
        try:
            await self._transport.connect(self._guild_id, channel_id)
        except VoiceConnectionError as exc:
            logger.warning(LogTemplates.VOICE_CONNECT_FAILED, self._guild_id, exc.message)
            await self._notify(DiscordUIMessages.FAILED_TO_JOIN_VOICE)
            return False

        if self._songs and self._can_start():
            await self._start_playback()
        return True

    async def disconnect(self) -> None:
        """Leave voice. Queued tracks are kept; the live session is dropped."""
        self._announcer.stop()
        self._session = None
        self._set_state(QueueState.IDLE)
        await self._transport.disconnect(self._guild_id)

    # === Queue mutation ===

    async def add(self, query: str, requester: Any) -> AddResult:
        """Resolve *query* and append the resulting track(s).

        Starts playback when the queue was idle. Raises ``ResolutionError`` with
        the queue left untouched when nothing playable is found.
        """
        requested_by = requester_display_name(requester)
        ticket = self._next_ticket
        self._next_ticket += 1

        try:
            result = await self._resolver.resolve(query, requested_by)
        except BaseException:
            async with self._commit_cond:
                self._finish_ticket(ticket)
            raise

        tracks = list(result.tracks) if isinstance(result, PlaylistResult) else [result.track]

        async with self._ordered_commit(ticket):
            position = len(self._songs)
            self._songs.extend(tracks)

        if isinstance(result, PlaylistResult):
            logger.info(
                LogTemplates.QUEUE_PLAYLIST_ADDED,
                result.title,
                len(tracks),
                len(result.tracks),
                self._guild_id,
            )
            added: AddResult = AddPlaylistResult(
                title=result.title, track_count=len(tracks), first_track=tracks[0]
            )
        else:
            logger.info(LogTemplates.QUEUE_ADDED, tracks[0].title, position, self._guild_id)
            added = AddTrackResult(track=tracks[0])

        if self._can_start():
            await self._start_playback()
        return added

    def remove(self, index: int) -> Track | None:
        """Remove the track at 1-based *index* of "up next"; the head cannot be removed."""
        if index <= 0 or index >= len(self._songs):
            return None
        track = self._songs.pop(index)
        logger.info(LogTemplates.QUEUE_REMOVED, track.title, self._guild_id)
        return track

    def shuffle(self) -> None:
        """Randomly permute everything after the head (Fisher-Yates)."""
        if len(self._songs) < 3:
            return
        upcoming = self._songs[1:]
        self._rng.shuffle(upcoming)
        self._songs[1:] = upcoming
        logger.info(LogTemplates.QUEUE_SHUFFLED, self._guild_id)

    # === Playback control ===

    async def skip(self) -> bool:
        """Stop the current track; the transport's end event advances the queue."""
        if not self._songs or self._is_transitioning:
            return False

        if self._session is None:
            dropped = self._songs.pop(0)
            logger.info(LogTemplates.QUEUE_SKIPPED, dropped.title, self._guild_id)
            return True

        logger.info(LogTemplates.QUEUE_SKIPPED, self._session.track.title, self._guild_id)
        await self._transport.stop(self._guild_id)
        return True

    async def stop(self) -> None:
        """Clear every track, stop the transport and go idle."""
        cleared = len(self._songs)
        self._songs.clear()
        session = self._session
        self._session = None
        self._announcer.stop()
        self._set_state(QueueState.IDLE)

        if session is not None:
            await self._transport.stop(self._guild_id)
            logger.info(LogTemplates.PLAYBACK_STOPPED, self._guild_id)

        logger.info(LogTemplates.QUEUE_CLEARED, cleared, self._guild_id)
        await self._notify(DiscordUIMessages.STOPPED_AND_CLEARED)

    async def pause(self) -> bool:
        session = self._session
        if session is None or self._state is not QueueState.PLAYING:
            return False
        if not await self._transport.pause(self._guild_id):
            return False

        session.pause(self._clock())
        self._set_state(QueueState.PAUSED)
        logger.info(LogTemplates.PLAYBACK_PAUSED, self._guild_id)
        await self._announcer.refresh()
        return True

    async def resume(self) -> bool:
        session = self._session
        if session is None or self._state is not QueueState.PAUSED:
            return False
        if not await self._transport.resume(self._guild_id):
            return False

        session.resume(self._clock())
        self._set_state(QueueState.PLAYING)
        logger.info(LogTemplates.PLAYBACK_RESUMED, self._guild_id)
        await self._announcer.refresh()
        return True

    # === Transport events ===

    async def dispatch(self, event: TransportEvent) -> None:
        """Apply one transport event to the state machine.

        Events for an older session and events on an empty queue are dropped. An
        event for the live session that arrives mid-transition is held and applied
        once the transition finishes.
        """
        pending: TransportEvent | None = event
        while pending is not None:
            session = self._accept(pending)
            if session is None:
                return

            self._is_transitioning = True
            try:
                if isinstance(pending, PlaybackFailed):
                    await self._notify(DiscordUIMessages.PLAYBACK_ERROR.format(error=pending.error))
                await self._advance(session)
            finally:
                self._is_transitioning = False
            pending = self._take_deferred()

    def _accept(self, event: TransportEvent) -> PlaybackSession | None:
        """The live session *event* belongs to, or None when it must not be applied now."""
        event_name = type(event).__name__
        session = self._session
        if session is None or event.session_id != session.id:
            logger.debug(
                LogTemplates.EVENT_STALE,
                event_name,
                event.session_id,
                self._guild_id,
                session.id if session else None,
            )
            return None
        if self._is_transitioning:
            logger.debug(LogTemplates.EVENT_DURING_TRANSITION, event_name, self._guild_id)
            self._deferred_event = event
            return None
        if not self._songs:
            logger.debug(LogTemplates.EVENT_EMPTY_QUEUE, event_name, self._guild_id)
            return None
        return session

    def _take_deferred(self) -> TransportEvent | None:
        event, self._deferred_event = self._deferred_event, None
        return event

    async def _start_playback(self) -> None:
        """Start the head, then apply an end event the new session got while starting."""
        await self._start_head()
        pending = self._take_deferred()
        if pending is not None:
            await self.dispatch(pending)

    async def _advance(self, finished: PlaybackSession) -> None:
        logger.info(LogTemplates.QUEUE_ADVANCING, finished.track.title, self._guild_id)
        if self._songs and self._songs[0] is finished.track:
            self._songs.pop(0)
        self._session = None
        self._announcer.stop()

        if self._songs:
            self._set_state(QueueState.TRANSITIONING)
            await self._start_head()
            return

        self._set_state(QueueState.IDLE)
        logger.info(LogTemplates.QUEUE_ENDED, self._guild_id)
        await self._notify(DiscordUIMessages.QUEUE_ENDED)

    # === Internals ===

    def _can_start(self) -> bool:
        return self._state is QueueState.IDLE and not self._is_transitioning and self.is_connected

    async def _start_head(self) -> None:
        """Start the head track, dropping heads that cannot be played."""
        self._is_transitioning = True
        started = False
        try:
            while self._songs:
                self._set_state(QueueState.TRANSITIONING)
                track = self._songs[0]

                if not is_youtube_url(track.locator):
                    logger.warning(LogTemplates.PLAYBACK_INVALID_LOCATOR, track.locator, self._guild_id)
                    self._songs.pop(0)
                    await self._notify(DiscordUIMessages.INVALID_URL_SKIPPING)
                    continue

                if not self.is_connected:
                    logger.info(LogTemplates.PLAYBACK_NOT_CONNECTED, track.title, self._guild_id)
                    break

                try:
                    handle = await self._pipeline.acquire_stream(track.locator)
                except PlaybackError as exc:
                    logger.error(LogTemplates.PLAYBACK_ALL_FAILED, track.title, self._guild_id)
                    logger.debug("Strategy failures: %s", [str(f) for f in exc.failures])
                    self._drop_if_head(track)
                    await self._notify(DiscordUIMessages.ALL_METHODS_FAILED)
                    continue

                if not self._songs or self._songs[0] is not track:
                    logger.info(LogTemplates.PLAYBACK_HANDLE_DISCARDED, self._guild_id)
                    handle.cleanup()
                    continue

                session = PlaybackSession(
                    id=next(self._session_ids),
                    track=track,
                    started_at=self._clock(),
                    handle=handle,
                )
                self._session = session
                try:
                    await self._transport.play(self._guild_id, handle, session.id)
                except VoiceConnectionError:
                    handle.cleanup()
                    self._session = None
                    logger.info(LogTemplates.PLAYBACK_NOT_CONNECTED, track.title, self._guild_id)
                    break
                except PlaybackError as exc:
                    handle.cleanup()
                    self._session = None
                    logger.error(LogTemplates.TRANSPORT_FATAL_ERROR, self._guild_id, exc.message)
                    self._drop_if_head(track)
                    await self._notify(DiscordUIMessages.PLAYBACK_ERROR.format(error=exc.message))
                    continue

                self._set_state(QueueState.PLAYING)
                started = True
                logger.info(LogTemplates.PLAYBACK_STARTED, track.title, self._guild_id, handle.strategy)
                await self._announcer.track_started(self.snapshot)
                return
        finally:
            self._is_transitioning = False
            if not started and self._session is None:
                self._set_state(QueueState.IDLE)

    def _drop_if_head(self, track: Track) -> None:
        if self._songs and self._songs[0] is track:
            self._songs.pop(0)

    def _set_state(self, target: QueueState) -> None:
        if target is self._state:
            return
        if not self._state.can_transition_to(target):
            raise InvalidOperationError(target.value, self._state.value)
        logger.debug(LogTemplates.QUEUE_STATE_CHANGED, self._guild_id, self._state.value, target.value)
        self._state = target

    def _finish_ticket(self, ticket: int) -> None:
        self._finished_tickets.add(ticket)
        while self._commit_turn in self._finished_tickets:
            self._finished_tickets.discard(self._commit_turn)
            self._commit_turn += 1
        self._commit_cond.notify_all()

    @asynccontextmanager
    async def _ordered_commit(self, ticket: int) -> AsyncIterator[None]:
        async with self._commit_cond:
            try:
                await self._commit_cond.wait_for(lambda: self._commit_turn == ticket)
                yield
            finally:
                self._finish_ticket(ticket)

    async def _notify(self, content: str) -> None:
        try:
            await self._text_channel.send(content)
        except Exception:
            logger.exception(LogTemplates.NOTIFY_FAILED, self._guild_id)
