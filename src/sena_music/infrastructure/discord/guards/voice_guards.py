"""Reusable guard functions for the music slash commands.

These are free functions that take the interaction explicitly, so both the cog
and the component views can use them.
"""

from __future__ import annotations

import discord

from sena_music.domain.shared.messages import DiscordUIMessages

VoiceChannel = discord.VoiceChannel | discord.StageChannel


async def reply(interaction: discord.Interaction, message: str, *, ephemeral: bool = False) -> None:
    """Answer the interaction, or follow up when it was already answered or deferred."""
    if interaction.response.is_done():
        await interaction.followup.send(message, ephemeral=ephemeral)
    else:
        await interaction.response.send_message(message, ephemeral=ephemeral)


async def send_ephemeral(interaction: discord.Interaction, message: str) -> None:
    await reply(interaction, message, ephemeral=True)


async def get_member(interaction: discord.Interaction) -> discord.Member | None:
    """The invoking guild member, or None after telling the user this is server-only."""
    user = interaction.user
    if interaction.guild is None or not isinstance(user, discord.Member):
        await send_ephemeral(interaction, DiscordUIMessages.SERVER_ONLY)
        return None
    return user


async def get_member_voice_channel(
    interaction: discord.Interaction, *, ephemeral: bool = False
) -> tuple[discord.Member, VoiceChannel] | None:
    """The member and the voice channel they are in; replies "Join a voice channel first…" otherwise."""
    member = await get_member(interaction)
    if member is None:
        return None

    channel = member.voice.channel if member.voice else None
    if not isinstance(channel, discord.VoiceChannel | discord.StageChannel):
        await reply(interaction, DiscordUIMessages.JOIN_VOICE_FIRST, ephemeral=ephemeral)
        return None
    return member, channel


async def check_voice_permissions(interaction: discord.Interaction, channel: VoiceChannel) -> bool:
    """The bot needs Connect and Speak in *channel*."""
    guild = interaction.guild
    me = guild.me if guild is not None else None
    if me is None:
        await reply(interaction, DiscordUIMessages.NEED_CONNECT_PERMISSION)
        return False

    permissions = channel.permissions_for(me)
    if not permissions.connect:
        await reply(interaction, DiscordUIMessages.NEED_CONNECT_PERMISSION)
        return False
    if not permissions.speak:
        await reply(interaction, DiscordUIMessages.NEED_SPEAK_PERMISSION)
        return False
    return True
