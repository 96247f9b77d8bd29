"""Stream strategies for the fallback playback pipeline.

Each strategy turns a locator into a discord.py audio source on its own, so a
failure in one (a stale player client, a format the library mis-selects, a
library bug) leaves the others usable:

1. ``library``   - yt-dlp in-process, format chosen by the format selector.
2. ``info``      - yt-dlp raw info without format processing; best audio-only
   format picked here by bitrate.
3. ``extractor`` - the yt-dlp executable in a subprocess, piped through ffmpeg
   to Ogg/Opus with reconnect-on-drop.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any, cast

import discord
from yt_dlp import YoutubeDL

from sena_music.application.interfaces.stream_strategy import AudioStreamHandle, StreamStrategy
from sena_music.config.settings import AudioSettings
from sena_music.domain.shared.exceptions import StrategyError
from sena_music.domain.shared.messages import ErrorMessages, LogTemplates
from sena_music.infrastructure.audio.models import FormatInfo, YtDlpOpts, YtDlpTrackInfo
from sena_music.infrastructure.audio.transcoder import FFmpegConfig
from sena_music.infrastructure.audio.ytdlp_process import YtDlpProcessError, dump_single_json

logger = logging.getLogger(__name__)


def pick_audio_only(formats: list[FormatInfo]) -> str | None:
    """Highest-bitrate audio-only format URL; falls back to the last format with audio."""
    audio_only = [f for f in formats if f.url and f.is_audio_only]
    if audio_only:
        best = max(audio_only, key=lambda f: f.abr or 0.0)
        return best.url
    with_audio = [f for f in formats if f.url and f.has_audio]
    if with_audio:
        return with_audio[-1].url
    return None


def pick_direct_url(info: YtDlpTrackInfo) -> str | None:
    """Direct media URL from a processed extraction result.

    Prefers the selected format's ``url``, then the first merged
    ``requested_formats`` entry, then the last audio-only format.
    """
    if info.url:
        return info.url
    for fmt in info.requested_formats:
        if fmt.url:
            return fmt.url
    audio_only = [f for f in info.formats if f.url and f.is_audio_only]
    if audio_only:
        return audio_only[-1].url
    return None


class YtDlpStreamStrategy(StreamStrategy):
    """Shared plumbing for strategies that end in an ffmpeg-backed source."""

    def __init__(self, settings: AudioSettings, ffmpeg: FFmpegConfig | None = None) -> None:
        self._settings = settings
        self._ffmpeg = ffmpeg or FFmpegConfig.from_settings(settings)

    def _fail(self, message: str) -> StrategyError:
        return StrategyError(self.name, message)

    def _build_handle(
        self, stream_url: str, factory: Callable[[str], discord.AudioSource]
    ) -> AudioStreamHandle:
        try:
            source = factory(stream_url)
        except (discord.ClientException, OSError) as exc:
            raise self._fail(ErrorMessages.SOURCE_CREATION_FAILED.format(error=exc)) from exc
        return AudioStreamHandle(source=source, strategy=self.name, stream_url=stream_url)

    def _extract_sync(self, locator: str, *, process: bool = True) -> dict[str, Any]:
        opts = YtDlpOpts(format=self._settings.ytdlp_format)
        with YoutubeDL(params=cast(Any, opts.model_dump(exclude_none=True))) as ydl:
            data = ydl.extract_info(locator, download=False, process=process)
        if not isinstance(data, dict):
            raise self._fail(ErrorMessages.NO_DIRECT_URL)
        return dict(data)

    async def _extract(self, locator: str, *, process: bool = True) -> YtDlpTrackInfo:
        try:
            data = await asyncio.to_thread(self._extract_sync, locator, process=process)
        except StrategyError:
            raise
        except Exception as exc:
            raise self._fail(str(exc) or type(exc).__name__) from exc
        return YtDlpTrackInfo.model_validate(data)


class LibraryStreamStrategy(YtDlpStreamStrategy):
    name = "library"

    async def attempt(self, locator: str) -> AudioStreamHandle:
        info = await self._extract(locator)
        stream_url = pick_direct_url(info)
        if not stream_url:
            raise self._fail(ErrorMessages.NO_DIRECT_URL)
        return self._build_handle(stream_url, self._ffmpeg.create_pcm_source)


class InfoStreamStrategy(YtDlpStreamStrategy):
    name = "info"

    async def attempt(self, locator: str) -> AudioStreamHandle:
        info = await self._extract(locator, process=False)
        stream_url = pick_audio_only(info.formats)
        if not stream_url:
            raise self._fail(ErrorMessages.NO_AUDIO_FORMAT)
        return self._build_handle(stream_url, self._ffmpeg.create_pcm_source)


class ExtractorTranscodeStrategy(YtDlpStreamStrategy):
    name = "extractor"

    async def attempt(self, locator: str) -> AudioStreamHandle:
        try:
            data = await dump_single_json(
                self._settings.ytdlp_executable,
                locator,
                ("-f", self._settings.ytdlp_format),
            )
        except YtDlpProcessError as exc:
            raise self._fail(str(exc)) from exc

        stream_url = pick_direct_url(YtDlpTrackInfo.model_validate(data))
        if not stream_url:
            raise self._fail(ErrorMessages.NO_DIRECT_URL)
        logger.debug(LogTemplates.EXTRACTOR_DIRECT_URL, len(stream_url))
        return self._build_handle(stream_url, self._ffmpeg.create_opus_source)


def build_default_strategies(settings: AudioSettings) -> list[StreamStrategy]:
    """Strategies in fallback order; the in-process ones are dropped when disabled."""
    ffmpeg = FFmpegConfig.from_settings(settings)
    strategies: list[StreamStrategy] = []
    if settings.disable_primary_stream:
        logger.info(LogTemplates.PIPELINE_PRIMARY_DISABLED)
    else:
        strategies.append(LibraryStreamStrategy(settings, ffmpeg))
        strategies.append(InfoStreamStrategy(settings, ffmpeg))
    strategies.append(ExtractorTranscodeStrategy(settings, ffmpeg))
    return strategies
