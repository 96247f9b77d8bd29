"""Spotify catalog lookups used to turn Spotify links into search terms."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Final

import spotipy
from pydantic import BaseModel, ConfigDict
from spotipy.oauth2 import SpotifyClientCredentials

from sena_music.config.settings import SpotifySettings
from sena_music.domain.shared.exceptions import ResolutionError
from sena_music.domain.shared.messages import ErrorMessages, LogTemplates
from sena_music.domain.shared.types import NonEmptyStr

logger = logging.getLogger(__name__)

REQUESTS_TIMEOUT: Final[int] = 10
SPOTIFY_RESOURCE_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"open\.spotify\.com/(?:intl-[a-z]{2}(?:-[a-z]{2})?/)?(?:embed/)?"
    r"(?P<kind>[a-z]+)/(?P<id>[A-Za-z0-9]+)",
    re.IGNORECASE,
)
SPOTIFY_URI_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^spotify:(?P<kind>[a-z]+):(?P<id>[A-Za-z0-9]+)$", re.IGNORECASE
)


class SpotifyLookup(BaseModel):
    """Search terms derived from a Spotify track, plus the display hints that go with it."""

    model_config = ConfigDict(frozen=True)

    kind: NonEmptyStr
    name: NonEmptyStr
    terms: NonEmptyStr
    primary_artist: NonEmptyStr | None = None


def parse_spotify_url(url: str) -> tuple[str, str] | None:
    """Return ``(resource kind, id)`` for an ``open.spotify.com`` link or ``spotify:`` URI."""
    match = SPOTIFY_RESOURCE_PATTERN.search(url) or SPOTIFY_URI_PATTERN.match(url.strip())
    if match is None:
        return None
    return match.group("kind").lower(), match.group("id")


def _lookup_from_track(kind: str, track: dict[str, Any]) -> SpotifyLookup | None:
    name = track.get("name")
    if not isinstance(name, str) or not name.strip():
        return None
    artists = [
        a["name"]
        for a in track.get("artists") or []
        if isinstance(a, dict) and isinstance(a.get("name"), str) and a["name"]
    ]
    terms = " ".join([name, *artists])
    return SpotifyLookup(
        kind=kind,
        name=name,
        terms=terms,
        primary_artist=artists[0] if artists else None,
    )


class SpotifyCatalog:
    """Thin async facade over spotipy's client-credentials flow.

    Only tracks and playlists are supported. A playlist yields its first track only.
    """

    def __init__(self, settings: SpotifySettings, client: spotipy.Spotify | None = None) -> None:
        self._settings = settings
        self._client = client

    @property
    def is_configured(self) -> bool:
        return self._client is not None or self._settings.is_configured

    def _get_client(self) -> spotipy.Spotify:
        if self._client is None:
            if not self._settings.is_configured:
                raise ResolutionError(ErrorMessages.SPOTIFY_NOT_CONFIGURED)
            auth = SpotifyClientCredentials(
                client_id=self._settings.client_id,
                client_secret=self._settings.client_secret.get_secret_value(),
            )
            self._client = spotipy.Spotify(
                auth_manager=auth, requests_timeout=REQUESTS_TIMEOUT, retries=3
            )
        return self._client

    def _lookup_sync(self, url: str) -> SpotifyLookup:
        parsed = parse_spotify_url(url)
        if parsed is None:
            raise ResolutionError(ErrorMessages.SPOTIFY_UNSUPPORTED_RESOURCE, query=url)
        kind, resource_id = parsed

        client = self._get_client()
        if kind == "track":
            track = client.track(resource_id)
            lookup = _lookup_from_track(kind, track or {})
            if lookup is None:
                raise ResolutionError(ErrorMessages.SPOTIFY_NO_MATCH, query=url)
            return lookup

        if kind == "playlist":
            page = client.playlist_items(
                resource_id,
                fields="items(track(name,artists(name)))",
                limit=1,
                additional_types=("track",),
            )
            for item in (page or {}).get("items") or []:
                track = item.get("track") if isinstance(item, dict) else None
                if isinstance(track, dict):
                    lookup = _lookup_from_track(kind, track)
                    if lookup is not None:
                        return lookup
            raise ResolutionError(ErrorMessages.SPOTIFY_EMPTY_PLAYLIST, query=url)

        raise ResolutionError(ErrorMessages.SPOTIFY_UNSUPPORTED_RESOURCE, query=url)

    async def lookup(self, url: str) -> SpotifyLookup:
        """Resolve a Spotify link to YouTube search terms.

        Raises:
            ResolutionError: when credentials are missing, the resource type is not
                a track or playlist, the playlist is empty, or the Web API call fails.
        """
        try:
            lookup = await asyncio.to_thread(self._lookup_sync, url)
        except ResolutionError:
            raise
        except spotipy.SpotifyException as exc:
            raise ResolutionError(
                ErrorMessages.SPOTIFY_LOOKUP_FAILED.format(error=exc.msg or exc), query=url
            ) from exc
        except Exception as exc:
            raise ResolutionError(
                ErrorMessages.SPOTIFY_LOOKUP_FAILED.format(error=exc), query=url
            ) from exc

        logger.info(LogTemplates.SPOTIFY_RESOLVED, lookup.kind, lookup.terms)
        return lookup
