"""Base exception classes for domain-level errors."""

from __future__ import annotations

from collections.abc import Sequence
from typing import ClassVar


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class ResolutionError(DomainError):
    """Raised when a query cannot be turned into a playable locator."""

    def __init__(self, message: str, query: str | None = None) -> None:
        super().__init__(message, code="RESOLUTION_ERROR")
        self.query = query


class StrategyError(DomainError):
    """Raised by a single playback strategy when it cannot produce a stream."""

    def __init__(self, strategy: str, message: str) -> None:
        super().__init__(message, code="STRATEGY_ERROR")
        self.strategy = strategy

    def __str__(self) -> str:
        return f"[{self.strategy}] {self.message}"


class PlaybackError(DomainError):
    """Raised when every playback strategy failed for a locator."""

    def __init__(
        self,
        locator: str,
        failures: Sequence[StrategyError] = (),
        message: str | None = None,
    ) -> None:
        msg = message or f"All playback strategies failed for {locator}"
        super().__init__(msg, code="PLAYBACK_ERROR")
        self.locator = locator
        self.failures = tuple(failures)


class TransientStreamError(DomainError):
    """A mid-playback network hiccup that must not skip the current track."""

    PATTERNS: ClassVar[tuple[str, ...]] = (
        "aborted",
        "premature close",
        "socket hang up",
        "connection reset",
        "broken pipe",
    )

    def __init__(self, message: str) -> None:
        super().__init__(message, code="TRANSIENT_STREAM_ERROR")

    @classmethod
    def matches(cls, error: BaseException | str) -> bool:
        """Return True when the error text looks like a dropped connection."""
        text = str(error).lower()
        return any(pattern in text for pattern in cls.PATTERNS)


class VoiceConnectionError(DomainError):
    """Raised when the voice transport does not become ready in time."""

    def __init__(self, channel_id: int | None, message: str | None = None) -> None:
        msg = message or f"Could not connect to voice channel {channel_id}"
        super().__init__(msg, code="VOICE_CONNECTION_ERROR")
        self.channel_id = channel_id


class MetadataEnrichmentError(DomainError):
    """Best-effort metadata lookup failed. Never surfaced to users."""

    def __init__(self, locator: str, message: str | None = None) -> None:
        msg = message or f"Metadata lookup failed for {locator}"
        super().__init__(msg, code="METADATA_ENRICHMENT_ERROR")
        self.locator = locator


class InvalidOperationError(DomainError):
    """Raised when an operation is invalid in the current state."""

    def __init__(self, operation: str, current_state: str, message: str | None = None) -> None:
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(msg, code="INVALID_OPERATION")
        self.operation = operation
        self.current_state = current_state
