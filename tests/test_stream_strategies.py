"""
Unit Tests for the playback stream strategies

Tests for:
- Format selection helpers
- Library / info / extractor strategies with yt-dlp patched out
- Strategy list construction and the primary-stream switch
- FFmpeg option building
"""

from unittest.mock import AsyncMock, MagicMock, patch

import discord
import pytest

from sena_music.config.settings import AudioSettings
from sena_music.domain.shared.exceptions import StrategyError
from sena_music.infrastructure.audio.models import FormatInfo, YtDlpTrackInfo
from sena_music.infrastructure.audio.stream_strategies import (
    ExtractorTranscodeStrategy,
    InfoStreamStrategy,
    LibraryStreamStrategy,
    build_default_strategies,
    pick_audio_only,
    pick_direct_url,
)
from sena_music.infrastructure.audio.transcoder import FFmpegConfig
from sena_music.infrastructure.audio.ytdlp_process import YtDlpProcessError

MODULE = "sena_music.infrastructure.audio.stream_strategies"
LOCATOR = "https://www.youtube.com/watch?v=abc"


def _fmt(url, acodec="opus", vcodec="none", abr=None) -> FormatInfo:
    return FormatInfo(url=url, acodec=acodec, vcodec=vcodec, abr=abr)


@pytest.fixture
def settings():
    return AudioSettings()


@pytest.fixture
def ffmpeg():
    mock = MagicMock(spec=FFmpegConfig)
    mock.create_pcm_source.side_effect = lambda url: f"pcm:{url}"
    mock.create_opus_source.side_effect = lambda url: f"opus:{url}"
    return mock


def _patch_youtube_dl(data):
    """Patch YoutubeDL so extract_info returns *data* (or raises it)."""
    ydl = MagicMock()
    if isinstance(data, Exception):
        ydl.extract_info.side_effect = data
    else:
        ydl.extract_info.return_value = data
    factory = MagicMock()
    factory.return_value.__enter__.return_value = ydl
    return patch(f"{MODULE}.YoutubeDL", factory), ydl


# =============================================================================
# Format selection
# =============================================================================


class TestPickAudioOnly:
    def test_highest_bitrate_wins(self):
        formats = [_fmt("https://a/1", abr=48), _fmt("https://a/2", abr=160), _fmt("https://a/3", abr=128)]

        assert pick_audio_only(formats) == "https://a/2"

    def test_falls_back_to_last_format_with_audio(self):
        formats = [
            _fmt("https://v/1", vcodec="avc1"),
            _fmt("https://v/2", vcodec="vp9"),
            _fmt("https://v/3", acodec="none", vcodec="vp9"),
        ]

        assert pick_audio_only(formats) == "https://v/2"

    def test_no_audio(self):
        assert pick_audio_only([_fmt("https://v/1", acodec="none", vcodec="vp9")]) is None
        assert pick_audio_only([]) is None


class TestPickDirectUrl:
    def test_prefers_selected_url(self):
        info = YtDlpTrackInfo(url="https://direct", requested_formats=[{"url": "https://merged"}])

        assert pick_direct_url(info) == "https://direct"

    def test_requested_formats_next(self):
        info = YtDlpTrackInfo(requested_formats=[{"url": ""}, {"url": "https://merged"}])

        assert pick_direct_url(info) == "https://merged"

    def test_last_audio_only_format(self):
        info = YtDlpTrackInfo(
            formats=[
                {"url": "https://a/1", "acodec": "opus", "vcodec": "none"},
                {"url": "https://a/2", "acodec": "mp4a", "vcodec": "none"},
                {"url": "https://v/1", "acodec": "mp4a", "vcodec": "avc1"},
            ]
        )

        assert pick_direct_url(info) == "https://a/2"

    def test_nothing_usable(self):
        assert pick_direct_url(YtDlpTrackInfo()) is None


# =============================================================================
# Strategies
# =============================================================================


class TestLibraryStreamStrategy:
    @pytest.mark.asyncio
    async def test_builds_pcm_source(self, settings, ffmpeg):
        patcher, ydl = _patch_youtube_dl({"id": "abc", "url": "https://stream/abc"})
        with patcher:
            handle = await LibraryStreamStrategy(settings, ffmpeg).attempt(LOCATOR)

        assert handle.strategy == "library"
        assert handle.stream_url == "https://stream/abc"
        assert handle.source == "pcm:https://stream/abc"
        ydl.extract_info.assert_called_once_with(LOCATOR, download=False, process=True)

    @pytest.mark.asyncio
    async def test_extraction_error_becomes_strategy_error(self, settings, ffmpeg):
        patcher, _ = _patch_youtube_dl(RuntimeError("HTTP Error 403: Forbidden"))
        with patcher, pytest.raises(StrategyError) as exc_info:
            await LibraryStreamStrategy(settings, ffmpeg).attempt(LOCATOR)

        assert exc_info.value.strategy == "library"
        assert "403" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_missing_url(self, settings, ffmpeg):
        patcher, _ = _patch_youtube_dl({"id": "abc"})
        with patcher, pytest.raises(StrategyError):
            await LibraryStreamStrategy(settings, ffmpeg).attempt(LOCATOR)

    @pytest.mark.asyncio
    async def test_non_dict_result(self, settings, ffmpeg):
        patcher, _ = _patch_youtube_dl(None)
        with patcher, pytest.raises(StrategyError):
            await LibraryStreamStrategy(settings, ffmpeg).attempt(LOCATOR)

    @pytest.mark.asyncio
    async def test_source_creation_failure(self, settings, ffmpeg):
        ffmpeg.create_pcm_source.side_effect = discord.ClientException("ffmpeg was not found.")
        patcher, _ = _patch_youtube_dl({"url": "https://stream/abc"})
        with patcher, pytest.raises(StrategyError, match="ffmpeg was not found"):
            await LibraryStreamStrategy(settings, ffmpeg).attempt(LOCATOR)


class TestInfoStreamStrategy:
    @pytest.mark.asyncio
    async def test_uses_unprocessed_info(self, settings, ffmpeg):
        data = {
            "id": "abc",
            "formats": [
                {"url": "https://a/low", "acodec": "opus", "vcodec": "none", "abr": 50},
                {"url": "https://a/high", "acodec": "opus", "vcodec": "none", "abr": 160},
            ],
        }
        patcher, ydl = _patch_youtube_dl(data)
        with patcher:
            handle = await InfoStreamStrategy(settings, ffmpeg).attempt(LOCATOR)

        assert handle.strategy == "info"
        assert handle.stream_url == "https://a/high"
        ydl.extract_info.assert_called_once_with(LOCATOR, download=False, process=False)

    @pytest.mark.asyncio
    async def test_no_audio_format(self, settings, ffmpeg):
        patcher, _ = _patch_youtube_dl({"formats": []})
        with patcher, pytest.raises(StrategyError) as exc_info:
            await InfoStreamStrategy(settings, ffmpeg).attempt(LOCATOR)

        assert exc_info.value.strategy == "info"


class TestExtractorTranscodeStrategy:
    @pytest.mark.asyncio
    async def test_builds_opus_source(self, settings, ffmpeg):
        dump = AsyncMock(return_value={"url": "https://stream/x"})
        with patch(f"{MODULE}.dump_single_json", dump):
            handle = await ExtractorTranscodeStrategy(settings, ffmpeg).attempt(LOCATOR)

        assert handle.strategy == "extractor"
        assert handle.source == "opus:https://stream/x"
        dump.assert_awaited_once_with("yt-dlp", LOCATOR, ("-f", "bestaudio/best"))

    @pytest.mark.asyncio
    async def test_process_error(self, settings, ffmpeg):
        dump = AsyncMock(side_effect=YtDlpProcessError("yt-dlp exited with code 1"))
        with patch(f"{MODULE}.dump_single_json", dump), pytest.raises(StrategyError) as exc_info:
            await ExtractorTranscodeStrategy(settings, ffmpeg).attempt(LOCATOR)

        assert exc_info.value.strategy == "extractor"
        assert "code 1" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_no_url_in_output(self, settings, ffmpeg):
        with patch(f"{MODULE}.dump_single_json", AsyncMock(return_value={"id": "x"})):
            with pytest.raises(StrategyError):
                await ExtractorTranscodeStrategy(settings, ffmpeg).attempt(LOCATOR)


class TestBuildDefaultStrategies:
    def test_full_order(self, settings):
        names = [s.name for s in build_default_strategies(settings)]

        assert names == ["library", "info", "extractor"]

    def test_primary_disabled(self):
        strategies = build_default_strategies(AudioSettings(disable_primary_stream=True))

        assert [s.name for s in strategies] == ["extractor"]


# =============================================================================
# FFmpeg options
# =============================================================================


class TestFFmpegConfig:
    def test_before_options_enable_reconnect(self):
        before = FFmpegConfig().get_before_options()

        assert "-reconnect 1" in before
        assert "-reconnect_streamed 1" in before
        assert "-reconnect_delay_max 5" in before

    def test_options_drop_video(self):
        assert FFmpegConfig().get_options() == "-vn"

    def test_from_settings(self):
        config = FFmpegConfig.from_settings(
            AudioSettings(ffmpeg_path="/usr/bin/ffmpeg", opus_bitrate=96, default_volume=0.5)
        )

        assert config.executable == "/usr/bin/ffmpeg"
        assert config.opus_bitrate == 96
        assert config.default_volume == 0.5

    def test_create_opus_source(self):
        with patch("discord.FFmpegOpusAudio") as opus:
            FFmpegConfig(opus_bitrate=96).create_opus_source("https://stream/x")

        assert opus.call_args.kwargs["bitrate"] == 96
        assert opus.call_args.args == ("https://stream/x",)

    def test_create_pcm_source_wraps_volume(self):
        with patch("discord.FFmpegPCMAudio") as pcm, patch("discord.PCMVolumeTransformer") as vol:
            FFmpegConfig(default_volume=0.7).create_pcm_source("https://stream/x")

        vol.assert_called_once_with(pcm.return_value, volume=0.7)
