"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from environment variables with support for .env files,
type validation, and sensible defaults. All settings are frozen and immutable
after initialization.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.messages import ErrorMessages


class DiscordSettings(BaseModel):
    """Discord bot configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    token: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("token", "bot_token", "discord_token")
    )
    test_guild_ids: tuple[int, ...] = Field(
        default_factory=tuple, validation_alias=AliasChoices("test_guild_ids", "test_guilds")
    )
    sync_on_startup: bool = True

    status_text: str = "/play"
    status_type: Literal["playing", "streaming", "listening", "watching", "competing", "custom"] = (
        "listening"
    )
    status_state: Literal["online", "idle", "dnd", "invisible"] = "online"
    status_stream_url: str | None = None

    @field_validator("status_type", "status_state", mode="before")
    @classmethod
    def normalize_status(cls, v: str) -> str:
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("test_guild_ids", mode="before")
    @classmethod
    def validate_snowflake_ids(cls, v: tuple[int, ...] | list[int]) -> tuple[int, ...]:
        """Validate Discord snowflake IDs and convert lists to tuples."""
        if isinstance(v, list):
            v = tuple(v)
        for snowflake in v:
            if not 0 < int(snowflake) < 2**64:
                raise ValueError(ErrorMessages.INVALID_SNOWFLAKE)
        return v


class AudioSettings(BaseModel):
    """Audio resolution and playback configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    max_playlist_length: int = Field(
        default=400,
        ge=1,
        le=5000,
        validation_alias=AliasChoices("max_playlist_length", "max_playlist"),
    )
    disable_primary_stream: bool = Field(
        default=False,
        validation_alias=AliasChoices("disable_primary_stream", "disable_playdl", "no_playdl"),
    )
    ffmpeg_path: str = Field(
        default="ffmpeg",
        min_length=1,
        validation_alias=AliasChoices("ffmpeg_path", "ffmpeg"),
    )
    ytdlp_executable: str = Field(default="yt-dlp", min_length=1)
    ytdlp_format: str = "bestaudio/best"
    default_volume: float = Field(default=1.0, ge=0.0, le=2.0)
    opus_bitrate: int = Field(default=128, ge=16, le=512)
    voice_connect_timeout: float = Field(default=15.0, gt=0.0, le=120.0)
    now_playing_refresh_seconds: float = Field(default=15.0, gt=0.0)
    metadata_timeout: float = Field(default=10.0, gt=0.0)


class SpotifySettings(BaseModel):
    """Spotify Web API credentials (client-credentials flow)."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    client_id: str = ""
    client_secret: SecretStr = SecretStr("")

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret.get_secret_value())


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, DEBUG, LOG_LEVEL (top-level)
    - DISCORD__TOKEN, DISCORD__TEST_GUILD_IDS (JSON array), DISCORD__SYNC_ON_STARTUP
    - AUDIO__MAX_PLAYLIST_LENGTH, AUDIO__DISABLE_PRIMARY_STREAM, AUDIO__FFMPEG_PATH, ...
    - SPOTIFY__CLIENT_ID, SPOTIFY__CLIENT_SECRET
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    discord: DiscordSettings = Field(default_factory=DiscordSettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)
    spotify: SpotifySettings = Field(default_factory=SpotifySettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=valid_levels))
        return v_upper


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
