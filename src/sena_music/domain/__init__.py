"""
Domain Layer

Contains pure business logic organized by bounded contexts:
- shared/: Cross-cutting types, messages and exceptions
- music/: Track, queue state and transport events
"""

from sena_music.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
