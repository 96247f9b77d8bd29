"""
FFmpeg Transcoder Options

Builds the ffmpeg command-line fragments shared by every playback strategy and
creates the discord.py audio sources that wrap the ffmpeg process.
"""

from __future__ import annotations

from dataclasses import dataclass

import discord

from sena_music.config.settings import AudioSettings


@dataclass
class FFmpegConfig:
    """Configuration for FFmpeg audio processing."""

    executable: str = "ffmpeg"

    # Reconnection settings for streaming
    reconnect: bool = True
    reconnect_streamed: bool = True
    reconnect_delay_max: int = 5

    # Audio processing
    disable_video: bool = True
    analyze_duration_zero: bool = True
    loglevel: str = "error"

    # Opus output for the transcode strategy
    opus_bitrate: int = 128

    # Volume (handled by PCMVolumeTransformer)
    default_volume: float = 1.0

    @classmethod
    def from_settings(cls, settings: AudioSettings) -> FFmpegConfig:
        return cls(
            executable=settings.ffmpeg_path,
            opus_bitrate=settings.opus_bitrate,
            default_volume=settings.default_volume,
        )

    def get_before_options(self) -> str:
        """Get FFmpeg before_options string (input side)."""
        opts = []
        if self.reconnect:
            opts.append("-reconnect 1")
        if self.reconnect_streamed:
            opts.append("-reconnect_streamed 1")
        if self.reconnect_delay_max:
            opts.append(f"-reconnect_delay_max {self.reconnect_delay_max}")
        if self.analyze_duration_zero:
            opts.append("-analyzeduration 0")
        if self.loglevel:
            opts.append(f"-loglevel {self.loglevel}")
        return " ".join(opts)

    def get_options(self) -> str:
        """Get FFmpeg options string (output side)."""
        opts = []
        if self.disable_video:
            opts.append("-vn")
        return " ".join(opts)

    def create_pcm_source(self, stream_url: str) -> discord.PCMVolumeTransformer:
        """Decode *stream_url* to PCM with inline volume control."""
        source = discord.FFmpegPCMAudio(
            stream_url,
            executable=self.executable,
            before_options=self.get_before_options(),
            options=self.get_options(),
        )
        return discord.PCMVolumeTransformer(source, volume=self.default_volume)

    def create_opus_source(self, stream_url: str) -> discord.FFmpegOpusAudio:
        """Transcode *stream_url* to Ogg/Opus at the configured bitrate."""
        return discord.FFmpegOpusAudio(
            stream_url,
            bitrate=self.opus_bitrate,
            executable=self.executable,
            before_options=self.get_before_options(),
            options=self.get_options(),
        )
