"""Pydantic models for yt-dlp data transformation and configuration.

These are infrastructure-specific models for parsing external yt-dlp data
(in-process ``YoutubeDL`` results and the executable's ``--dump-single-json``
output alike) and for configuring yt-dlp options.
"""

from __future__ import annotations

from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sena_music.domain.shared.types import NonEmptyStr, PositiveInt

DEFAULT_RETRIES: Final[int] = 3
DEFAULT_SOCKET_TIMEOUT: Final[int] = 10
DEFAULT_HTTP_CHUNK_SIZE: Final[int] = 1024 * 1024  # 1 MiB
LOG_URL_TRUNCATE: Final[int] = 60


def _blank_to_none(v: Any) -> str | None:
    if not isinstance(v, str) or not v.strip():
        return None
    return v


def _non_negative_int(v: Any) -> int | None:
    if v is None or isinstance(v, bool):
        return None
    try:
        val = int(v)
    except (TypeError, ValueError):
        return None
    return val if val >= 0 else None


def _non_negative_float(v: Any) -> float | None:
    if v is None or isinstance(v, bool):
        return None
    try:
        val = float(v)
    except (TypeError, ValueError):
        return None
    return val if val >= 0 else None


# ── Pydantic models for yt-dlp data ────────────────────────────────────


class ThumbnailInfo(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    url: NonEmptyStr | None = None

    @field_validator("url", mode="before")
    @classmethod
    def _coerce_url(cls, v: Any) -> str | None:
        return _blank_to_none(v)


class FormatInfo(BaseModel):
    """A single format entry from yt-dlp extraction."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    url: NonEmptyStr | None = None
    acodec: NonEmptyStr | None = None
    vcodec: NonEmptyStr | None = None
    abr: float | None = None

    @field_validator("url", "acodec", "vcodec", mode="before")
    @classmethod
    def _coerce_str(cls, v: Any) -> str | None:
        return _blank_to_none(v)

    @field_validator("abr", mode="before")
    @classmethod
    def _coerce_abr(cls, v: Any) -> float | None:
        return _non_negative_float(v)

    @property
    def has_audio(self) -> bool:
        return self.acodec is not None and self.acodec != "none"

    @property
    def is_audio_only(self) -> bool:
        return self.has_audio and (self.vcodec is None or self.vcodec == "none")


class YtDlpTrackInfo(BaseModel):
    """Trimmed yt-dlp extraction result for a single video or a flat playlist entry.

    Extra fields from yt-dlp are silently ignored, keeping memory usage low.
    Before-validators coerce garbage from external yt-dlp data gracefully.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: NonEmptyStr | None = None
    webpage_url: NonEmptyStr | None = None
    url: NonEmptyStr | None = None
    title: NonEmptyStr | None = None
    duration: int | None = None
    thumbnail: NonEmptyStr | None = None
    thumbnails: list[ThumbnailInfo] = Field(default_factory=list)
    uploader: NonEmptyStr | None = None
    channel: NonEmptyStr | None = None
    artist: NonEmptyStr | None = None
    formats: list[FormatInfo] = Field(default_factory=list)
    requested_formats: list[FormatInfo] = Field(default_factory=list)

    @field_validator(
        "id", "webpage_url", "url", "title", "thumbnail",
        "uploader", "channel", "artist",
        mode="before",
    )
    @classmethod
    def _coerce_empty_to_none(cls, v: Any) -> str | None:
        """Convert empty / whitespace-only / non-string values to None."""
        return _blank_to_none(v)

    @field_validator("duration", mode="before")
    @classmethod
    def _coerce_duration(cls, v: Any) -> int | None:
        """Coerce to non-negative int; return None for garbage values."""
        return _non_negative_int(v)

    @field_validator("thumbnails", "formats", "requested_formats", mode="before")
    @classmethod
    def _coerce_list(cls, v: Any) -> list[Any]:
        if not isinstance(v, list):
            return []
        return [item for item in v if isinstance(item, dict)]

    @property
    def best_thumbnail(self) -> str | None:
        """Last (largest) thumbnail, else the single ``thumbnail`` field."""
        for thumb in reversed(self.thumbnails):
            if thumb.url:
                return thumb.url
        return self.thumbnail

    @property
    def display_artist(self) -> str | None:
        return self.artist or self.uploader or self.channel


class YtDlpPlaylistInfo(BaseModel):
    """Flat playlist listing: title plus entries in playlist order."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    title: NonEmptyStr | None = None
    playlist_count: int | None = None
    entries: list[YtDlpTrackInfo] = Field(default_factory=list)

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, v: Any) -> str | None:
        return _blank_to_none(v)

    @field_validator("playlist_count", mode="before")
    @classmethod
    def _coerce_count(cls, v: Any) -> int | None:
        return _non_negative_int(v)

    @field_validator("entries", mode="before")
    @classmethod
    def _coerce_entries(cls, v: Any) -> list[Any]:
        """Entries may be a list or a lazy generator; unavailable items come back as None."""
        if v is None or isinstance(v, str | bytes | dict):
            return []
        try:
            return [e for e in v if isinstance(e, dict)]
        except TypeError:
            return []


# ── yt-dlp option models ───────────────────────────────────────────────


class YtDlpOpts(BaseModel):
    """Typed yt-dlp configuration options passed to YoutubeDL."""

    model_config = ConfigDict(frozen=True)

    quiet: bool = True
    no_warnings: bool = True
    noprogress: bool = True
    noplaylist: bool = True
    default_search: NonEmptyStr = "ytsearch"
    forceipv4: bool = True
    retries: PositiveInt = DEFAULT_RETRIES
    socket_timeout: PositiveInt = DEFAULT_SOCKET_TIMEOUT
    http_chunk_size: PositiveInt = DEFAULT_HTTP_CHUNK_SIZE
    format: NonEmptyStr | None = None
    skip_download: bool = True
    extract_flat: NonEmptyStr | bool = False
    playlistend: PositiveInt | None = None


# ── oEmbed metadata ────────────────────────────────────────────────────


class OEmbedInfo(BaseModel):
    """The fields we use from a YouTube oEmbed response."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    title: NonEmptyStr | None = None
    author_name: NonEmptyStr | None = None
    thumbnail_url: NonEmptyStr | None = None

    @field_validator("title", "author_name", "thumbnail_url", mode="before")
    @classmethod
    def _coerce_str(cls, v: Any) -> str | None:
        return _blank_to_none(v)
