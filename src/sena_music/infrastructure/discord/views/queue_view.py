"""Previous/next pagination for the queue listing."""

from __future__ import annotations

from typing import TYPE_CHECKING

import discord

from sena_music.domain.shared.messages import DiscordUIMessages
from sena_music.infrastructure.discord.embeds import (
    build_queue_embed,
    clamp_page,
    queue_page_count,
)
from sena_music.infrastructure.discord.views.base_view import BaseInteractiveView

if TYPE_CHECKING:
    from ....application.services.queue_registry import QueueRegistry


class QueuePageView(BaseInteractiveView):
    """Buttons carry ``queue:<guild id>:<target page>`` ids and re-read the live queue on click."""

    def __init__(
        self,
        *,
        guild_id: int,
        registry: QueueRegistry,
        page: int = 0,
        total_pages: int = 1,
        title: str = DiscordUIMessages.EMBED_QUEUE,
        timeout: float | None = 300.0,
    ) -> None:
        super().__init__(timeout=timeout)
        self.guild_id = guild_id
        self.registry = registry
        self.page = page
        self.total_pages = total_pages
        self.title = title

        self.previous_button: discord.ui.Button[QueuePageView] = discord.ui.Button(
            label="◀", style=discord.ButtonStyle.primary
        )
        self.next_button: discord.ui.Button[QueuePageView] = discord.ui.Button(
            label="▶", style=discord.ButtonStyle.primary
        )
        self.previous_button.callback = self._on_previous
        self.next_button.callback = self._on_next
        self.add_item(self.previous_button)
        self.add_item(self.next_button)
        self._sync_buttons()

    def _sync_buttons(self) -> None:
        self.previous_button.custom_id = f"queue:{self.guild_id}:{self.page - 1}"
        self.previous_button.disabled = self.page <= 0
        self.next_button.custom_id = f"queue:{self.guild_id}:{self.page + 1}"
        self.next_button.disabled = self.page >= self.total_pages - 1

    async def _on_previous(self, interaction: discord.Interaction) -> None:
        await self.show_page(interaction, self.page - 1)

    async def _on_next(self, interaction: discord.Interaction) -> None:
        await self.show_page(interaction, self.page + 1)

    async def show_page(self, interaction: discord.Interaction, target: int) -> None:
        if interaction.guild_id != self.guild_id:
            await interaction.response.send_message(
                DiscordUIMessages.OTHER_SERVER_QUEUE, ephemeral=True
            )
            return

        queue = self.registry.peek(self.guild_id)
        songs = queue.songs if queue is not None else ()
        if not songs:
            await interaction.response.send_message(
                DiscordUIMessages.QUEUE_NOW_EMPTY, ephemeral=True
            )
            return

        self.page = clamp_page(target, len(songs))
        self.total_pages = queue_page_count(len(songs))
        self._sync_buttons()
        embed = build_queue_embed(songs, self.page, title=self.title)
        await interaction.response.edit_message(
            embed=embed, view=self if self.total_pages > 1 else None
        )
