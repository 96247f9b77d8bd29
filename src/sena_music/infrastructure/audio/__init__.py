"""Audio infrastructure - yt-dlp resolver, Spotify catalog and playback strategies."""

from sena_music.infrastructure.audio.models import (
    FormatInfo,
    OEmbedInfo,
    YtDlpOpts,
    YtDlpPlaylistInfo,
    YtDlpTrackInfo,
)
from sena_music.infrastructure.audio.spotify_catalog import SpotifyCatalog
from sena_music.infrastructure.audio.stream_strategies import (
    ExtractorTranscodeStrategy,
    InfoStreamStrategy,
    LibraryStreamStrategy,
    build_default_strategies,
)
from sena_music.infrastructure.audio.transcoder import FFmpegConfig
from sena_music.infrastructure.audio.ytdlp_resolver import YtDlpResolver

__all__ = [
    "ExtractorTranscodeStrategy",
    "FFmpegConfig",
    "FormatInfo",
    "InfoStreamStrategy",
    "LibraryStreamStrategy",
    "OEmbedInfo",
    "SpotifyCatalog",
    "YtDlpOpts",
    "YtDlpPlaylistInfo",
    "YtDlpResolver",
    "YtDlpTrackInfo",
    "build_default_strategies",
]
