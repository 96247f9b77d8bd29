"""Port interface for resolving user queries to playable tracks."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from sena_music.domain.shared.types import NonEmptyStr, PositiveInt

if TYPE_CHECKING:
    from ...domain.music.entities import PlaylistResult, SingleResult, Track


class AudioResolver(ABC):
    """Interface for turning free text, direct links and cross-service links into tracks."""

    @abstractmethod
    async def resolve(self, query: NonEmptyStr, requester: str) -> SingleResult | PlaylistResult:
        """Resolve a query to a single track or an expanded playlist.

        Raises:
            ResolutionError: when no usable source is found.
        """
        ...

    @abstractmethod
    async def search(self, query: NonEmptyStr, limit: PositiveInt = 3) -> list[Track]:
        """Search the streaming source and return up to *limit* candidate tracks."""
        ...

    async def aclose(self) -> None:
        """Release any network clients held by the resolver."""
        return None
