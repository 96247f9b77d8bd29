"""Discord voice transport implementing VoiceTransport for connection and playback."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import discord

from sena_music.application.interfaces.voice_transport import EventSink, VoiceTransport
from sena_music.config.settings import AudioSettings
from sena_music.domain.music.events import PlaybackFailed, TrackEnded, TransportEvent
from sena_music.domain.shared.exceptions import (
    PlaybackError,
    TransientStreamError,
    VoiceConnectionError,
)
from sena_music.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from ...application.interfaces.stream_strategy import AudioStreamHandle

logger = logging.getLogger(__name__)


def classify_player_error(session_id: int, error: BaseException | None) -> TransportEvent:
    """Map the voice player's ``after`` error to a transport event.

    Dropped-connection errors surface as an interrupted end rather than a failure
    so the queue does not announce them.
    """
    if error is None:
        return TrackEnded(session_id=session_id)
    if TransientStreamError.matches(error):
        return TrackEnded(session_id=session_id, interrupted=True)
    message = str(error) or type(error).__name__
    return PlaybackFailed(session_id=session_id, error=message)


class DiscordVoiceTransport(VoiceTransport):
    def __init__(self, bot: discord.Client, settings: AudioSettings | None = None) -> None:
        self._bot = bot
        self._settings = settings or AudioSettings()
        self._sinks: dict[int, EventSink] = {}

    def _get_voice_client(self, guild_id: int) -> discord.VoiceClient | None:
        guild = self._bot.get_guild(guild_id)
        if not guild:
            return None

        vc = guild.voice_client
        return vc if isinstance(vc, discord.VoiceClient) else None

    def set_event_sink(self, guild_id: int, sink: EventSink | None) -> None:
        if sink is None:
            self._sinks.pop(guild_id, None)
        else:
            self._sinks[guild_id] = sink

    # TODO(integ): Test real voice connect with a test bot in a test guild.
    # Verify: successful connect, self-deaf, timeout, permission denied (Forbidden).
    async def connect(self, guild_id: int, channel_id: int) -> None:
        vc = self._get_voice_client(guild_id)
        if vc is not None:
            if vc.is_connected():
                return
            logger.warning(LogTemplates.VOICE_STALE_CLEANUP, guild_id)
            await self._force_disconnect(vc, guild_id)

        guild = self._bot.get_guild(guild_id)
        channel = guild.get_channel(channel_id) if guild else None
        if guild is None or not isinstance(channel, discord.VoiceChannel | discord.StageChannel):
            raise VoiceConnectionError(
                channel_id, ErrorMessages.VOICE_CHANNEL_INVALID.format(channel_id=channel_id)
            )

        try:
            async with asyncio.timeout(self._settings.voice_connect_timeout):
                await channel.connect(self_deaf=True)
        except TimeoutError as exc:
            logger.error(LogTemplates.VOICE_CONNECTION_TIMEOUT, channel_id)
            await self._force_disconnect(self._get_voice_client(guild_id), guild_id)
            raise VoiceConnectionError(
                channel_id, ErrorMessages.VOICE_CONNECT_TIMEOUT.format(channel_id=channel_id)
            ) from exc
        except discord.Forbidden as exc:
            logger.error(LogTemplates.VOICE_NO_PERMISSION, channel_id)
            raise VoiceConnectionError(channel_id) from exc
        except (discord.ClientException, discord.HTTPException, OSError) as exc:
            logger.error(LogTemplates.VOICE_CONNECT_FAILED, guild_id, exc)
            await self._force_disconnect(self._get_voice_client(guild_id), guild_id)
            raise VoiceConnectionError(channel_id) from exc

        await self._ensure_self_deaf(guild, channel)
        logger.info(LogTemplates.VOICE_CONNECTED, channel.name, guild.name)

    async def _ensure_self_deaf(
        self,
        guild: discord.Guild,
        channel: discord.VoiceChannel | discord.StageChannel,
    ) -> None:
        try:
            await guild.change_voice_state(channel=channel, self_deaf=True)
        except Exception as exc:
            logger.debug(LogTemplates.VOICE_SELF_DEAFEN_FAILED, guild.id, exc)

    async def _force_disconnect(self, vc: discord.VoiceClient | None, guild_id: int) -> None:
        if vc is None:
            return
        try:
            await vc.disconnect(force=True)
        except Exception as exc:
            logger.debug(LogTemplates.VOICE_CONNECT_FAILED, guild_id, exc)

    async def disconnect(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        if not vc:
            return True

        try:
            await vc.disconnect(force=True)
        except Exception:
            logger.exception("Failed to disconnect from voice")
            return False
        logger.info(LogTemplates.VOICE_DISCONNECTED, guild_id)
        return True

    def is_connected(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        return vc is not None and vc.is_connected()

    # TODO(integ): Test playing a short clip on a live voice connection and check that
    # the after callback reaches the queue through run_coroutine_threadsafe.
    async def play(self, guild_id: int, handle: AudioStreamHandle, session_id: int) -> None:
        vc = self._get_voice_client(guild_id)
        if not vc or not vc.is_connected():
            logger.warning(LogTemplates.VOICE_NOT_CONNECTED, guild_id)
            raise VoiceConnectionError(
                None, ErrorMessages.VOICE_NOT_CONNECTED.format(guild_id=guild_id)
            )

        if vc.is_playing() or vc.is_paused():
            vc.stop()

        loop = asyncio.get_running_loop()

        def after_callback(error: Exception | None = None) -> None:
            logger.debug(LogTemplates.TRANSPORT_TRACK_ENDED, session_id, guild_id, error)
            event = classify_player_error(session_id, error)
            if isinstance(event, TrackEnded) and event.interrupted:
                logger.warning(LogTemplates.TRANSPORT_TRANSIENT_ERROR, guild_id, error)
            elif isinstance(event, PlaybackFailed):
                logger.error(LogTemplates.TRANSPORT_FATAL_ERROR, guild_id, error)
            asyncio.run_coroutine_threadsafe(self._deliver(guild_id, event), loop)

        try:
            vc.play(handle.source, after=after_callback)
        except discord.ClientException as exc:
            logger.error(LogTemplates.VOICE_CLIENT_ERROR, exc)
            raise PlaybackError(handle.stream_url or "", message=str(exc)) from exc

    async def _deliver(self, guild_id: int, event: TransportEvent) -> None:
        """Runs on the bot loop; hands the event to the guild's queue."""
        sink = self._sinks.get(guild_id)
        if sink is None:
            logger.warning(LogTemplates.VOICE_NO_EVENT_SINK, guild_id)
            return
        try:
            await sink(event)
        except Exception:
            logger.exception(LogTemplates.VOICE_EVENT_SINK_ERROR, type(event).__name__, guild_id)

    async def stop(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        if not vc:
            return False

        if vc.is_playing() or vc.is_paused():
            vc.stop()
            return True
        return False

    async def pause(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        if not vc or not vc.is_playing():
            return False
        vc.pause()
        return True

    async def resume(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        if not vc or not vc.is_paused():
            return False
        vc.resume()
        return True
