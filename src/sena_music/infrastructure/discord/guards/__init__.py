"""Voice channel guard functions for Discord cogs."""

from sena_music.infrastructure.discord.guards.voice_guards import (
    check_voice_permissions,
    get_member,
    get_member_voice_channel,
    reply,
    send_ephemeral,
)

__all__ = [
    "check_voice_permissions",
    "get_member",
    "get_member_voice_channel",
    "reply",
    "send_ephemeral",
]
