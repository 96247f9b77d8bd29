"""Discord UI views and components."""

from __future__ import annotations

from sena_music.infrastructure.discord.views.base_view import BaseInteractiveView
from sena_music.infrastructure.discord.views.queue_view import QueuePageView
from sena_music.infrastructure.discord.views.search_view import SearchResultsView

__all__ = [
    "BaseInteractiveView",
    "QueuePageView",
    "SearchResultsView",
]
