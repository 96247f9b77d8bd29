"""Application services: fallback playback pipeline, guild queue and queue registry."""

from sena_music.application.services.guild_queue import GuildQueue
from sena_music.application.services.playback_pipeline import FallbackPlaybackPipeline
from sena_music.application.services.queue_registry import QueueRegistry

__all__ = [
    "FallbackPlaybackPipeline",
    "GuildQueue",
    "QueueRegistry",
]
