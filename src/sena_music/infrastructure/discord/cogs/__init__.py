"""Discord cogs - command handlers."""

from sena_music.infrastructure.discord.cogs.music_cog import MusicCog

__all__ = ["MusicCog"]
