"""AudioResolver implementation using yt-dlp for URL resolution and search."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Final, cast
from urllib.parse import urlparse

import httpx
from pydantic import ValidationError
from yt_dlp import YoutubeDL

from sena_music.application.interfaces.audio_resolver import AudioResolver
from sena_music.config.settings import AudioSettings
from sena_music.domain.music.entities import PlaylistResult, SingleResult, Track
from sena_music.domain.music.value_objects import (
    HTTP_PATTERN,
    SourceKind,
    is_youtube_url,
    youtube_watch_url,
)
from sena_music.domain.shared.exceptions import MetadataEnrichmentError, ResolutionError
from sena_music.domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates
from sena_music.infrastructure.audio.models import (
    LOG_URL_TRUNCATE,
    OEmbedInfo,
    YtDlpOpts,
    YtDlpPlaylistInfo,
    YtDlpTrackInfo,
)
from sena_music.infrastructure.audio.spotify_catalog import SpotifyCatalog
from sena_music.infrastructure.audio.ytdlp_process import YtDlpProcessError, dump_single_json

logger = logging.getLogger(__name__)

OEMBED_URL: Final[str] = "https://www.youtube.com/oembed"
DEFAULT_SEARCH_LIMIT: Final[int] = 3
DEFAULT_PLAYLIST_TITLE: Final[str] = "YouTube Playlist"
UNTITLED: Final[str] = "Untitled"
TITLE_MAX_LENGTH: Final[int] = 500
SPOTIFY_SHORT_HOSTS: Final[frozenset[str]] = frozenset({"spotify.link", "spoti.fi"})


class YtDlpResolver(AudioResolver):
    """Turns free text, YouTube links, YouTube playlists and Spotify links into tracks.

    Search and listing run yt-dlp in-process on a worker thread. Playlist listing
    falls back to the yt-dlp executable when the in-process listing fails or comes
    back short. Single tracks get best-effort metadata from oEmbed, then yt-dlp.
    """

    def __init__(
        self,
        settings: AudioSettings | None = None,
        spotify: SpotifyCatalog | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or AudioSettings()
        self._spotify = spotify
        self._http_client = http_client
        self._owns_http_client = http_client is None
        self._base_opts = YtDlpOpts(format=self._settings.ytdlp_format)

    # ── yt-dlp options ───────────────────────────────────────────────

    def _get_opts(self, **overrides: Any) -> YtDlpOpts:
        if overrides:
            return self._base_opts.model_copy(update=overrides)
        return self._base_opts

    def _get_search_opts(self) -> YtDlpOpts:
        return self._get_opts(extract_flat="in_playlist")

    def _get_playlist_opts(self, limit: int) -> YtDlpOpts:
        return self._get_opts(noplaylist=False, extract_flat="in_playlist", playlistend=limit)

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            timeout = httpx.Timeout(self._settings.metadata_timeout)
            self._http_client = httpx.AsyncClient(timeout=timeout)
        return self._http_client

    # ── Sync yt-dlp calls (run in a worker thread) ───────────────────

    def _search_sync(self, query: str, limit: int) -> list[YtDlpTrackInfo]:
        search_query = f"ytsearch{limit}:{query}"
        with YoutubeDL(params=cast(Any, self._get_search_opts().model_dump(exclude_none=True))) as ydl:
            data = ydl.extract_info(search_query, download=False)
        if not isinstance(data, dict):
            return []
        return YtDlpPlaylistInfo.model_validate(data).entries

    def _extract_playlist_sync(self, url: str, limit: int) -> YtDlpPlaylistInfo:
        opts = self._get_playlist_opts(limit)
        with YoutubeDL(params=cast(Any, opts.model_dump(exclude_none=True))) as ydl:
            data = ydl.extract_info(url, download=False)
        if not isinstance(data, dict):
            return YtDlpPlaylistInfo()
        return YtDlpPlaylistInfo.model_validate(data)

    def _extract_info_sync(self, url: str) -> YtDlpTrackInfo | None:
        with YoutubeDL(params=cast(Any, self._get_opts().model_dump(exclude_none=True))) as ydl:
            data = ydl.extract_info(url, download=False)
        return YtDlpTrackInfo.model_validate(data) if isinstance(data, dict) else None

    # ── Entry mapping ────────────────────────────────────────────────

    @staticmethod
    def _entry_locator(info: YtDlpTrackInfo) -> str | None:
        for candidate in (info.webpage_url, info.url):
            if is_youtube_url(candidate):
                return candidate
        if info.id:
            return youtube_watch_url(info.id)
        return None

    def _entry_to_track(
        self,
        info: YtDlpTrackInfo,
        requester: str,
        fallback_title: str | None = None,
    ) -> Track | None:
        locator = self._entry_locator(info)
        if not locator or not is_youtube_url(locator):
            return None

        title = (info.title or fallback_title or UNTITLED)[:TITLE_MAX_LENGTH]
        thumbnail = info.best_thumbnail
        if thumbnail and not HTTP_PATTERN.match(thumbnail):
            thumbnail = None

        try:
            return Track(
                title=title,
                locator=locator,
                requested_by=requester or DiscordUIMessages.UNKNOWN,
                duration=info.duration,
                thumbnail=thumbnail,
                artist=info.display_artist,
            )
        except ValidationError as exc:
            logger.debug("Dropping entry %s: %s", locator[:LOG_URL_TRUNCATE], exc)
            return None

    # ── Public API ───────────────────────────────────────────────────

    async def resolve(self, query: str, requester: str) -> SingleResult | PlaylistResult:
        query = (query or "").strip()
        if not query:
            raise ResolutionError(ErrorMessages.EMPTY_QUERY)

        kind = SourceKind.classify(query)
        logger.debug(LogTemplates.RESOLVE_STARTED, query, kind.value)

        try:
            if kind is SourceKind.UNSUPPORTED:
                raise ResolutionError(ErrorMessages.UNSUPPORTED_SOURCE, query=query)
            if kind is SourceKind.PLAYLIST:
                return await self._resolve_playlist(query, requester)
            if kind is SourceKind.CROSS_SERVICE:
                track = await self._resolve_cross_service(query, requester)
            elif kind is SourceKind.DIRECT:
                track = Track(
                    title=query[:TITLE_MAX_LENGTH],
                    locator=query,
                    requested_by=requester or DiscordUIMessages.UNKNOWN,
                )
            else:
                track = await self._search_first(query, requester)
        except ResolutionError as exc:
            logger.warning(LogTemplates.RESOLVE_FAILED, query, exc.message)
            raise ResolutionError(
                ErrorMessages.SEARCH_FAILED.format(error=exc.message), query=query
            ) from exc

        if not is_youtube_url(track.locator):
            raise ResolutionError(ErrorMessages.UNPLAYABLE_URL, query=query)

        return SingleResult(track=await self._enrich(track))

    async def search(self, query: str, limit: int = DEFAULT_SEARCH_LIMIT) -> list[Track]:
        query = (query or "").strip()
        if not query:
            raise ResolutionError(ErrorMessages.EMPTY_QUERY)
        try:
            return await self._search_tracks(query, limit, DiscordUIMessages.UNKNOWN)
        except ResolutionError as exc:
            raise ResolutionError(
                ErrorMessages.SEARCH_FAILED.format(error=exc.message), query=query
            ) from exc

    async def aclose(self) -> None:
        if self._owns_http_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    # ── Search ───────────────────────────────────────────────────────

    async def _search_tracks(self, query: str, limit: int, requester: str) -> list[Track]:
        try:
            infos = await asyncio.to_thread(self._search_sync, query, limit)
        except Exception as exc:
            logger.exception(LogTemplates.YTDLP_FAILED_SEARCH, query)
            raise ResolutionError(str(exc) or type(exc).__name__, query=query) from exc

        tracks: list[Track] = []
        for info in infos:
            track = self._entry_to_track(info, requester)
            if track is not None:
                tracks.append(track)
        return tracks[:limit]

    async def _search_first(self, query: str, requester: str) -> Track:
        tracks = await self._search_tracks(query, 1, requester)
        if not tracks:
            raise ResolutionError(ErrorMessages.NO_SEARCH_RESULTS, query=query)
        return tracks[0]

    # ── Cross-service links ──────────────────────────────────────────

    async def _expand_short_link(self, url: str) -> str:
        host = (urlparse(url).hostname or "").lower()
        if host not in SPOTIFY_SHORT_HOSTS:
            return url
        try:
            response = await self._get_http_client().get(url, follow_redirects=True)
        except httpx.HTTPError as exc:
            raise ResolutionError(
                ErrorMessages.SPOTIFY_LOOKUP_FAILED.format(error=exc), query=url
            ) from exc
        return str(response.url)

    async def _resolve_cross_service(self, url: str, requester: str) -> Track:
        if self._spotify is None or not self._spotify.is_configured:
            raise ResolutionError(ErrorMessages.SPOTIFY_NOT_CONFIGURED, query=url)

        lookup = await self._spotify.lookup(await self._expand_short_link(url))
        tracks = await self._search_tracks(lookup.terms, 1, requester)
        if not tracks:
            message = (
                ErrorMessages.SPOTIFY_NO_MATCH
                if lookup.kind == "track"
                else ErrorMessages.SPOTIFY_NO_MATCH_PLAYLIST
            )
            raise ResolutionError(message, query=url)

        track = tracks[0]
        return track.model_copy(update={"artist": lookup.primary_artist or track.artist})

    # ── Playlists ────────────────────────────────────────────────────

    def _playlist_tracks(
        self, listing: YtDlpPlaylistInfo, requester: str, limit: int
    ) -> list[Track]:
        tracks: list[Track] = []
        for entry in listing.entries:
            track = self._entry_to_track(entry, requester, fallback_title=listing.title)
            if track is not None:
                tracks.append(track)
            if len(tracks) >= limit:
                break
        return tracks

    async def _resolve_playlist(self, url: str, requester: str) -> PlaylistResult:
        limit = self._settings.max_playlist_length
        listing: YtDlpPlaylistInfo | None = None
        tracks: list[Track] = []
        primary_error: Exception | None = None

        try:
            listing = await asyncio.to_thread(self._extract_playlist_sync, url, limit)
        except Exception as exc:
            primary_error = exc
            logger.warning(LogTemplates.PLAYLIST_FALLBACK, url)

        if listing is not None:
            tracks = self._playlist_tracks(listing, requester, limit)
            expected = min(listing.playlist_count or len(listing.entries), limit)
            if tracks and len(tracks) >= expected:
                return self._playlist_result(listing, tracks)
            logger.info(LogTemplates.PLAYLIST_PRIMARY_INCOMPLETE, url, len(tracks), expected)

        try:
            data = await dump_single_json(
                self._settings.ytdlp_executable,
                url,
                ("--flat-playlist", "--playlist-end", str(limit)),
            )
            fallback = YtDlpPlaylistInfo.model_validate(data)
        except (YtDlpProcessError, ValidationError) as exc:
            logger.warning(LogTemplates.PLAYLIST_FALLBACK_FAILED, url, exc)
            if listing is None:
                raise ResolutionError(
                    ErrorMessages.PLAYLIST_LOADING_FAILED.format(error=primary_error or exc),
                    query=url,
                ) from exc
        else:
            fallback_tracks = self._playlist_tracks(fallback, requester, limit)
            logger.info(LogTemplates.PLAYLIST_FALLBACK_COLLECTED, len(fallback_tracks), url)
            if listing is None or len(fallback_tracks) > len(tracks):
                listing, tracks = fallback, fallback_tracks

        return self._playlist_result(listing, tracks)

    @staticmethod
    def _playlist_result(listing: YtDlpPlaylistInfo | None, tracks: list[Track]) -> PlaylistResult:
        if listing is None or not listing.entries:
            raise ResolutionError(ErrorMessages.PLAYLIST_EMPTY)
        if not tracks:
            raise ResolutionError(ErrorMessages.PLAYLIST_NO_PLAYABLE)
        return PlaylistResult(title=listing.title or DEFAULT_PLAYLIST_TITLE, tracks=tuple(tracks))

    # ── Metadata enrichment ──────────────────────────────────────────

    async def _fetch_oembed(self, locator: str) -> OEmbedInfo:
        try:
            response = await self._get_http_client().get(
                OEMBED_URL, params={"url": locator, "format": "json"}
            )
            response.raise_for_status()
            return OEmbedInfo.model_validate(response.json())
        except (httpx.HTTPError, ValueError) as exc:
            raise MetadataEnrichmentError(locator, str(exc) or type(exc).__name__) from exc

    async def _enrich(self, track: Track) -> Track:
        """Fill title, artist, thumbnail and duration where missing. Never raises."""
        updates: dict[str, Any] = {}
        placeholder_title = track.title == track.locator[:TITLE_MAX_LENGTH]

        try:
            oembed = await self._fetch_oembed(track.locator)
        except MetadataEnrichmentError as exc:
            logger.debug(LogTemplates.METADATA_PRIMARY_FAILED, track.locator, exc.message)
        else:
            if placeholder_title and oembed.title:
                updates["title"] = oembed.title[:TITLE_MAX_LENGTH]
            if not track.artist and oembed.author_name:
                updates["artist"] = oembed.author_name
            if not track.thumbnail and oembed.thumbnail_url and HTTP_PATTERN.match(oembed.thumbnail_url):
                updates["thumbnail"] = oembed.thumbnail_url

        merged = track.model_copy(update=updates)
        if merged.duration is not None and merged.thumbnail and merged.artist:
            return merged

        try:
            info = await asyncio.to_thread(self._extract_info_sync, track.locator)
        except Exception as exc:
            logger.warning(LogTemplates.METADATA_SECONDARY_FAILED, track.locator, exc)
            return merged
        if info is None:
            return merged

        if merged.duration is None and info.duration is not None:
            updates["duration"] = info.duration
        if not merged.artist and info.display_artist:
            updates["artist"] = info.display_artist
        thumbnail = info.best_thumbnail
        if not merged.thumbnail and thumbnail and HTTP_PATTERN.match(thumbnail):
            updates["thumbnail"] = thumbnail
        if "title" not in updates and placeholder_title and info.title:
            updates["title"] = info.title[:TITLE_MAX_LENGTH]
        return track.model_copy(update=updates)
