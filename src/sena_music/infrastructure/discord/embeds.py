"""Embed builders for now-playing, queue, playlist and search replies."""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import TYPE_CHECKING, Final

import discord

from sena_music.domain.shared.messages import DiscordUIMessages
from sena_music.utils.reply import build_progress_bar, format_duration, truncate

if TYPE_CHECKING:
    from ...application.interfaces.notifications import NowPlayingSnapshot
    from ...domain.music.entities import AddPlaylistResult, Track

EMBED_COLOR: Final[int] = 0xFFC6E6
QUEUE_PAGE_SIZE: Final[int] = 20
QUEUE_TITLE_LENGTH: Final[int] = 60


def describe_track(track: Track) -> str:
    """Two-line summary used for "Up Next" and "First Track" fields."""
    artist = track.artist or DiscordUIMessages.UNKNOWN
    duration = format_duration(track.duration) or "?"
    return f"**{track.title}**\n{artist} • {duration}"


def build_now_playing_embed(snapshot: NowPlayingSnapshot, *, status: str | None = None) -> discord.Embed:
    """Now-playing card.

    Without ``status`` this is the channel announcement (requester as a field);
    with it, the ``/nowplaying`` reply (status field, requester in the footer).
    """
    track = snapshot.track
    embed = discord.Embed(
        title=DiscordUIMessages.EMBED_NOW_PLAYING,
        description=f"**{track.title}**",
        color=EMBED_COLOR,
    )
    embed.add_field(name="Artist", value=track.artist or DiscordUIMessages.UNKNOWN, inline=True)
    embed.add_field(
        name="Duration",
        value=format_duration(track.duration) or DiscordUIMessages.UNKNOWN,
        inline=True,
    )
    if status is None:
        embed.add_field(name="Requested By", value=track.requested_by, inline=True)
    else:
        embed.add_field(name="Status", value=status, inline=True)
        embed.set_footer(text=DiscordUIMessages.REQUESTED_BY.format(name=track.requested_by))

    progress = build_progress_bar(snapshot.elapsed_seconds, track.duration)
    if progress:
        embed.add_field(name="Progress", value=progress, inline=False)
    elif snapshot.elapsed_seconds > 0:
        embed.add_field(
            name="Elapsed", value=format_duration(snapshot.elapsed_seconds) or "0:00", inline=False
        )

    if snapshot.up_next is not None:
        embed.add_field(name="Up Next", value=describe_track(snapshot.up_next), inline=False)

    if track.thumbnail:
        embed.set_thumbnail(url=track.thumbnail)
    return embed


def build_added_embed(
    track: Track,
    *,
    position: int,
    is_now: bool,
    requester_name: str,
    up_next: Track | None = None,
) -> discord.Embed:
    embed = discord.Embed(
        title=DiscordUIMessages.EMBED_NOW_PLAYING if is_now else DiscordUIMessages.EMBED_ADDED_TO_QUEUE,
        description=f"**{track.title}**",
        color=EMBED_COLOR,
    )
    embed.add_field(name="Artist", value=track.artist or DiscordUIMessages.UNKNOWN, inline=True)
    embed.add_field(
        name="Duration",
        value=format_duration(track.duration) or DiscordUIMessages.UNKNOWN,
        inline=True,
    )
    embed.add_field(name="Position", value="Now" if is_now else f"#{position}", inline=True)
    embed.set_footer(text=DiscordUIMessages.REQUESTED_BY.format(name=requester_name))

    if is_now:
        if track.duration:
            progress = build_progress_bar(0, track.duration) or DiscordUIMessages.STARTING
            embed.add_field(name="Progress", value=progress, inline=False)
        if up_next is not None:
            embed.add_field(name="Up Next", value=describe_track(up_next), inline=False)

    if track.thumbnail:
        embed.set_thumbnail(url=track.thumbnail)
    return embed


def build_playlist_embed(result: AddPlaylistResult, *, requester_name: str) -> discord.Embed:
    embed = discord.Embed(
        title=DiscordUIMessages.EMBED_PLAYLIST_QUEUED,
        description=DiscordUIMessages.PLAYLIST_DESCRIPTION.format(
            count=result.track_count, title=result.title
        ),
        color=EMBED_COLOR,
    )
    embed.set_footer(text=DiscordUIMessages.REQUESTED_BY.format(name=requester_name))
    embed.add_field(name="First Track", value=describe_track(result.first_track), inline=False)
    if result.first_track.thumbnail:
        embed.set_thumbnail(url=result.first_track.thumbnail)
    return embed


def queue_page_count(song_count: int) -> int:
    return max(1, math.ceil(song_count / QUEUE_PAGE_SIZE))


def clamp_page(page: int, song_count: int) -> int:
    return max(0, min(page, queue_page_count(song_count) - 1))


def build_queue_embed(
    songs: Sequence[Track],
    page: int,
    *,
    title: str = DiscordUIMessages.EMBED_QUEUE,
) -> discord.Embed:
    """One page of the queue; ``page`` is zero-based and clamped to the valid range."""
    page = clamp_page(page, len(songs))
    total_pages = queue_page_count(len(songs))
    start = page * QUEUE_PAGE_SIZE
    end = min(start + QUEUE_PAGE_SIZE, len(songs))

    lines: list[str] = []
    for index in range(start, end):
        name = truncate(songs[index].title, QUEUE_TITLE_LENGTH)
        lines.append(f"**▶️ Now:** {name}" if index == 0 else f"**{index}.** {name}")

    embed = discord.Embed(title=title, description="\n".join(lines), color=EMBED_COLOR)
    embed.set_footer(
        text=DiscordUIMessages.QUEUE_FOOTER.format(
            page=page + 1,
            total_pages=total_pages,
            count=len(songs),
            plural="s" if len(songs) > 1 else "",
        )
    )
    if songs and songs[0].thumbnail:
        embed.set_thumbnail(url=songs[0].thumbnail)
    return embed


def build_search_embed(tracks: Sequence[Track], query: str, *, requester_name: str) -> discord.Embed:
    embed = discord.Embed(
        title=DiscordUIMessages.EMBED_SEARCH_RESULTS,
        description=DiscordUIMessages.SEARCH_DESCRIPTION.format(count=len(tracks), query=query),
        color=EMBED_COLOR,
    )
    embed.set_footer(text=DiscordUIMessages.REQUESTED_BY.format(name=requester_name))
    for index, track in enumerate(tracks, start=1):
        duration = format_duration(track.duration) or "Live"
        artist = track.artist or DiscordUIMessages.UNKNOWN
        embed.add_field(
            name=truncate(f"{index}. {track.title}", 256),
            value=f"{artist} • {duration}\n[Watch]({track.locator})",
            inline=False,
        )
    if tracks and tracks[0].thumbnail:
        embed.set_thumbnail(url=tracks[0].thumbnail)
    return embed
