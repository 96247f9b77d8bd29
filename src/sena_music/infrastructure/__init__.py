"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Discord (bot, cog, voice transport, now-playing announcer, views)
- Audio (yt-dlp resolver, Spotify catalog, FFmpeg stream strategies)
"""

from sena_music.infrastructure.discord.bot import create_bot
from sena_music.infrastructure.discord.voice_transport import DiscordVoiceTransport

__all__ = [
    "create_bot",
    "DiscordVoiceTransport",
]
