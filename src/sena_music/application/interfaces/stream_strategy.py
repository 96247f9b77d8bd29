"""Port interface for a single way of turning a locator into decodable audio."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class AudioStreamHandle:
    """A stream ready to hand to the voice transport.

    ``source`` is the transport-specific audio source object. It is owned by exactly
    one playback session and released through ``cleanup()`` when that session ends
    without the transport taking it over.
    """

    source: Any
    strategy: str
    stream_url: str | None = None

    def cleanup(self) -> None:
        cleanup = getattr(self.source, "cleanup", None)
        if cleanup is None:
            return
        try:
            cleanup()
        except Exception as exc:
            logger.debug("Error cleaning up %s source: %r", self.strategy, exc)


class StreamStrategy(ABC):
    """One self-contained method of acquiring a stream, attempted in fallback order."""

    name: str = "strategy"

    @abstractmethod
    async def attempt(self, locator: str) -> AudioStreamHandle:
        """Produce a stream for *locator*.

        Raises:
            StrategyError: when this strategy cannot produce a stream.
        """
        ...
