"""Slash-command music cog delegating to the guild queues."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import discord
from discord import app_commands
from discord.ext import commands

from sena_music.application.services.guild_queue import requester_display_name
from sena_music.domain.music.entities import AddPlaylistResult
from sena_music.domain.music.value_objects import SOUNDCLOUD_PATTERN, QueueState
from sena_music.domain.shared.exceptions import DomainError, ResolutionError
from sena_music.domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates
from sena_music.infrastructure.discord.embeds import (
    build_added_embed,
    build_now_playing_embed,
    build_playlist_embed,
    build_queue_embed,
    build_search_embed,
    clamp_page,
    queue_page_count,
)
from sena_music.infrastructure.discord.guards.voice_guards import (
    check_voice_permissions,
    get_member_voice_channel,
    reply,
)
from sena_music.infrastructure.discord.views.queue_view import QueuePageView
from sena_music.infrastructure.discord.views.search_view import SearchResultsView

if TYPE_CHECKING:
    from ....application.services.guild_queue import GuildQueue
    from ....config.container import Container
    from ....domain.music.entities import AddResult, Track

logger = logging.getLogger(__name__)

SEARCH_RESULT_LIMIT = 3


class MusicCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    def _existing_queue(self, interaction: discord.Interaction) -> GuildQueue | None:
        if interaction.guild_id is None:
            return None
        return self.container.queue_registry.peek(interaction.guild_id)

    async def _queue_for(self, interaction: discord.Interaction) -> GuildQueue | None:
        """Get or create the guild's queue after the interaction was deferred."""
        if interaction.guild_id is None:
            await interaction.followup.send(DiscordUIMessages.SERVER_ONLY, ephemeral=True)
            return None
        return self.container.queue_registry.get(interaction.guild_id, interaction.channel)

    async def _active_queue(
        self, interaction: discord.Interaction, empty_message: str
    ) -> GuildQueue | None:
        """The guild's queue when it has songs; otherwise reply with *empty_message*."""
        queue = self._existing_queue(interaction)
        if queue is None or not queue.songs:
            await reply(interaction, empty_message)
            return None
        return queue

    # ─────────────────────────────────────────────────────────────────
    # Play
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="play", description="Play a song from YouTube or Spotify.")
    @app_commands.describe(query="Song title or link")
    @app_commands.guild_only()
    async def play(self, interaction: discord.Interaction, query: str) -> None:
        if SOUNDCLOUD_PATTERN.search(query):
            await reply(interaction, DiscordUIMessages.SOUNDCLOUD_DISABLED)
            return

        found = await get_member_voice_channel(interaction)
        if found is None:
            return
        member, channel = found

        if not await check_voice_permissions(interaction, channel):
            return

        # Resolution and voice connect can exceed the 3-second interaction deadline
        await interaction.response.defer()

        queue = await self._queue_for(interaction)
        if queue is None:
            return
        await queue.connect(channel)

        was_idle = queue.state is QueueState.IDLE
        try:
            result = await queue.add(query, member)
        except ResolutionError as exc:
            await interaction.followup.send(DiscordUIMessages.PLAY_FAILED.format(error=exc.message))
            return
        except Exception as exc:
            logger.exception(LogTemplates.COMMAND_PLAY_FAILED, interaction.guild_id, query)
            await interaction.followup.send(DiscordUIMessages.PLAY_FAILED.format(error=exc))
            return

        embed = self._build_add_embed(queue, result, was_idle, requester_display_name(member))
        await interaction.followup.send(embed=embed)

    def _build_add_embed(
        self, queue: GuildQueue, result: AddResult, was_idle: bool, requester_name: str
    ) -> discord.Embed:
        if isinstance(result, AddPlaylistResult):
            return build_playlist_embed(result, requester_name=requester_name)

        songs = queue.songs
        position = next(
            (i for i, song in enumerate(songs) if song.locator == result.track.locator), -1
        )
        is_now = position == 0 and was_idle
        return build_added_embed(
            result.track,
            position=position,
            is_now=is_now,
            requester_name=requester_name,
            up_next=songs[1] if len(songs) > 1 else None,
        )

    @app_commands.command(
        name="playsong", description="Search for songs and choose from top 3 results."
    )
    @app_commands.describe(query="Song title or artist to search for")
    @app_commands.guild_only()
    async def playsong(self, interaction: discord.Interaction, query: str) -> None:
        found = await get_member_voice_channel(interaction)
        if found is None:
            return
        member, _channel = found

        await interaction.response.defer()

        try:
            tracks = await self.container.audio_resolver.search(query, SEARCH_RESULT_LIMIT)
        except ResolutionError as exc:
            await interaction.followup.send(exc.message)
            return
        except Exception as exc:
            logger.exception(LogTemplates.COMMAND_SEARCH_FAILED, query)
            await interaction.followup.send(DiscordUIMessages.SEARCH_FAILED.format(error=exc))
            return

        if not tracks:
            await interaction.followup.send(DiscordUIMessages.NO_RESULTS)
            return

        requester_name = requester_display_name(member)
        embed = build_search_embed(tracks, query, requester_name=requester_name)
        view = SearchResultsView(
            requester_id=member.id, tracks=tracks, on_select=self._play_search_result
        )
        message = await interaction.followup.send(embed=embed, view=view, wait=True)
        view.set_message(message)

    async def _play_search_result(self, interaction: discord.Interaction, track: Track) -> None:
        found = await get_member_voice_channel(interaction, ephemeral=True)
        if found is None:
            return
        member, channel = found

        await interaction.response.defer()

        queue = await self._queue_for(interaction)
        if queue is None:
            return
        await queue.connect(channel)

        was_idle = queue.state is QueueState.IDLE
        try:
            result = await queue.add(track.locator, member)
        except DomainError as exc:
            await interaction.followup.send(
                DiscordUIMessages.ADD_FAILED.format(error=exc.message), ephemeral=True
            )
            return

        embed = self._build_add_embed(queue, result, was_idle, requester_display_name(member))
        await interaction.edit_original_response(embed=embed, view=None)

    # ─────────────────────────────────────────────────────────────────
    # Queue
    # ─────────────────────────────────────────────────────────────────

    async def _send_queue_page(
        self, interaction: discord.Interaction, queue: GuildQueue, page: int, title: str
    ) -> None:
        songs = queue.songs
        page = clamp_page(page, len(songs))
        total_pages = queue_page_count(len(songs))
        embed = build_queue_embed(songs, page, title=title)

        kwargs: dict[str, Any] = {"embed": embed}
        view: QueuePageView | None = None
        if total_pages > 1:
            view = QueuePageView(
                guild_id=queue.guild_id,
                registry=self.container.queue_registry,
                page=page,
                total_pages=total_pages,
                title=title,
            )
            kwargs["view"] = view

        await interaction.response.send_message(**kwargs)
        if view is not None:
            view.set_message(await interaction.original_response())

    @app_commands.command(name="queue", description="Show the current song queue.")
    @app_commands.describe(page="Page number")
    @app_commands.guild_only()
    async def queue(
        self,
        interaction: discord.Interaction,
        page: app_commands.Range[int, 1] = 1,
    ) -> None:
        queue = await self._active_queue(interaction, DiscordUIMessages.QUEUE_EMPTY)
        if queue is None:
            return
        await self._send_queue_page(interaction, queue, page - 1, DiscordUIMessages.EMBED_QUEUE)

    @app_commands.command(name="remove", description="Remove a song from the queue.")
    @app_commands.describe(index="Song number")
    @app_commands.guild_only()
    async def remove(self, interaction: discord.Interaction, index: int) -> None:
        queue = await self._active_queue(interaction, DiscordUIMessages.QUEUE_EMPTY)
        if queue is None:
            return

        removed = queue.remove(index)
        if removed is None:
            await reply(interaction, DiscordUIMessages.INVALID_QUEUE_NUMBER)
            return
        await reply(interaction, DiscordUIMessages.REMOVED_TRACK.format(title=removed.title))

    @app_commands.command(name="shuffle", description="Shuffle the queue.")
    @app_commands.guild_only()
    async def shuffle(self, interaction: discord.Interaction) -> None:
        queue = await self._active_queue(interaction, DiscordUIMessages.QUEUE_EMPTY)
        if queue is None:
            return
        queue.shuffle()
        await self._send_queue_page(interaction, queue, 0, DiscordUIMessages.EMBED_SHUFFLED)

    # ─────────────────────────────────────────────────────────────────
    # Transport controls
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="skip", description="Skip the currently playing song.")
    @app_commands.guild_only()
    async def skip(self, interaction: discord.Interaction) -> None:
        queue = await self._active_queue(interaction, DiscordUIMessages.NOTHING_PLAYING)
        if queue is None:
            return
        if await queue.skip():
            await reply(interaction, DiscordUIMessages.SKIPPED)
        else:
            await reply(interaction, DiscordUIMessages.NOTHING_TO_SKIP)

    @app_commands.command(name="stop", description="Stop playback and clear the queue.")
    @app_commands.guild_only()
    async def stop(self, interaction: discord.Interaction) -> None:
        queue = await self._active_queue(interaction, DiscordUIMessages.NOTHING_PLAYING)
        if queue is None:
            return
        await queue.stop()
        await reply(interaction, DiscordUIMessages.STOPPED)

    @app_commands.command(name="pause", description="Pause the currently playing song.")
    @app_commands.guild_only()
    async def pause(self, interaction: discord.Interaction) -> None:
        queue = await self._active_queue(interaction, DiscordUIMessages.NOTHING_PLAYING)
        if queue is None:
            return
        if await queue.pause():
            await reply(interaction, DiscordUIMessages.PAUSED)
        else:
            await reply(interaction, DiscordUIMessages.PAUSE_FAILED)

    @app_commands.command(name="resume", description="Resume a paused song.")
    @app_commands.guild_only()
    async def resume(self, interaction: discord.Interaction) -> None:
        queue = await self._active_queue(interaction, DiscordUIMessages.NOTHING_PLAYING)
        if queue is None:
            return
        if await queue.resume():
            await reply(interaction, DiscordUIMessages.RESUMED)
        else:
            await reply(interaction, DiscordUIMessages.RESUME_FAILED)

    @app_commands.command(name="nowplaying", description="Show the currently playing song.")
    @app_commands.guild_only()
    async def nowplaying(self, interaction: discord.Interaction) -> None:
        queue = await self._active_queue(interaction, DiscordUIMessages.NOTHING_PLAYING)
        if queue is None:
            return

        snapshot = queue.snapshot()
        if snapshot is None:
            await reply(interaction, DiscordUIMessages.NOTHING_PLAYING)
            return
        embed = build_now_playing_embed(snapshot, status=queue.state.value)
        await interaction.response.send_message(embed=embed)

    @app_commands.command(name="volume", description="Set volume (1–100).")
    @app_commands.describe(level="Volume %")
    @app_commands.guild_only()
    async def volume(
        self, interaction: discord.Interaction, level: app_commands.Range[int, 1, 100]
    ) -> None:
        await reply(interaction, DiscordUIMessages.VOLUME_NOT_IMPLEMENTED)


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(MusicCog(bot, container))
