"""Fallback Playback Pipeline - first strategy to produce a stream wins."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from ...domain.shared.exceptions import PlaybackError, StrategyError
from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ..interfaces.stream_strategy import AudioStreamHandle, StreamStrategy

logger = logging.getLogger(__name__)


class FallbackPlaybackPipeline:
    """Tries each stream strategy once, in priority order.

    There are no retries inside a strategy. A ``StrategyError`` is the expected way
    for a strategy to decline; anything else is logged with its traceback and
    treated the same way so one broken strategy cannot hide the others.
    """

    def __init__(self, strategies: Sequence[StreamStrategy]) -> None:
        if not strategies:
            raise ValueError("FallbackPlaybackPipeline needs at least one strategy")
        self._strategies = tuple(strategies)

    @property
    def strategies(self) -> tuple[StreamStrategy, ...]:
        return self._strategies

    async def acquire_stream(self, locator: str) -> AudioStreamHandle:
        """Return the first stream any strategy produces for *locator*.

        Raises:
            PlaybackError: after every strategy has been attempted and failed.
        """
        failures: list[StrategyError] = []

        for strategy in self._strategies:
            logger.debug(LogTemplates.PIPELINE_ATTEMPT, strategy.name, locator)
            try:
                handle = await strategy.attempt(locator)
            except StrategyError as exc:
                logger.warning(LogTemplates.PIPELINE_STRATEGY_FAILED, strategy.name, locator, exc.message)
                failures.append(exc)
                continue
            except Exception as exc:
                logger.exception(LogTemplates.PIPELINE_STRATEGY_CRASHED, strategy.name, locator)
                failures.append(StrategyError(strategy.name, repr(exc)))
                continue

            logger.info(LogTemplates.PIPELINE_STRATEGY_SUCCEEDED, strategy.name, locator)
            return handle

        raise PlaybackError(locator, failures)
