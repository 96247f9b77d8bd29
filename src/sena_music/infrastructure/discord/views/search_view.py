"""Result buttons for ``/playsong``."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import TYPE_CHECKING

import discord

from sena_music.domain.shared.messages import DiscordUIMessages
from sena_music.infrastructure.discord.views.base_view import BaseInteractiveView

if TYPE_CHECKING:
    from ....domain.music.entities import Track

OnSelect = Callable[[discord.Interaction, "Track"], Awaitable[None]]


class SearchResultsView(BaseInteractiveView):
    """One numbered button per result. Only the user who searched may pick."""

    def __init__(
        self,
        *,
        requester_id: int,
        tracks: Sequence[Track],
        on_select: OnSelect,
        timeout: float | None = 120.0,
    ) -> None:
        super().__init__(timeout=timeout)
        self.requester_id = requester_id
        self.tracks = tuple(tracks)
        self._on_select = on_select

        for index, _track in enumerate(self.tracks):
            button: discord.ui.Button[SearchResultsView] = discord.ui.Button(
                label=str(index + 1),
                emoji="▶️" if index == 0 else "🎵",
                style=discord.ButtonStyle.success if index == 0 else discord.ButtonStyle.primary,
                custom_id=f"playsong:{requester_id}:{index}",
            )
            button.callback = self._make_callback(index)
            self.add_item(button)

    def _make_callback(self, index: int) -> Callable[[discord.Interaction], Awaitable[None]]:
        async def callback(interaction: discord.Interaction) -> None:
            await self.select(interaction, index)

        return callback

    async def interaction_check(self, interaction: discord.Interaction) -> bool:
        if interaction.user.id != self.requester_id:
            await interaction.response.send_message(
                DiscordUIMessages.NOT_YOUR_SEARCH, ephemeral=True
            )
            return False
        return True

    async def select(self, interaction: discord.Interaction, index: int) -> None:
        self.stop()
        await self._on_select(interaction, self.tracks[index])
