#!/usr/bin/env python3
"""SenaBot launcher: settings, logging and the external tool check, then the bot until shutdown."""

from __future__ import annotations

import json
import logging
import logging.config
import shutil
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from sena_music.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from sena_music.config.settings import AudioSettings

logger = logging.getLogger(__name__)

_LOGGING_CONFIG_PATH = Path(__file__).resolve().parents[2] / "logging_config.json"
FALLBACK_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logging(log_level: str = "INFO", config_path: Path = _LOGGING_CONFIG_PATH) -> None:
    """Apply the JSON logging config; an unreadable or rejected file leaves plain stderr logging.

    The root level always follows *log_level*, whatever the file says.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    try:
        with open(config_path) as f:
            logging.config.dictConfig(json.load(f))
    except (OSError, ValueError) as exc:
        logging.basicConfig(level=level, format=FALLBACK_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        logger.warning(LogTemplates.LOGGING_CONFIG_FALLBACK, config_path, exc)

    logging.getLogger().setLevel(level)


def log_dependency_report(audio: AudioSettings) -> dict[str, str | None]:
    """Log where the external audio tools resolve to; missing ones only degrade playback."""
    report = {
        "ffmpeg": shutil.which(audio.ffmpeg_path),
        "yt-dlp": shutil.which(audio.ytdlp_executable),
    }
    for name, location in report.items():
        if location is None:
            logger.warning(LogTemplates.DEPENDENCY_MISSING, name)
        else:
            logger.info(LogTemplates.DEPENDENCY_FOUND, name, location)
    return report


def main() -> int:
    """Run the bot until it stops; the return value is the process exit code."""
    from sena_music.config.settings import get_settings

    settings = get_settings()
    setup_logging(settings.log_level)

    token = settings.discord.token.get_secret_value()
    if not token:
        logger.error(ErrorMessages.DISCORD_TOKEN_REQUIRED)
        return 1

    logger.info(LogTemplates.BOT_STARTING.format(environment=settings.environment))
    log_dependency_report(settings.audio)

    from sena_music.config.container import create_container
    from sena_music.infrastructure.discord.bot import create_bot

    bot = create_bot(create_container(settings), settings)
    logger.info(LogTemplates.BOT_STARTING_RUN)
    try:
        bot.run_with_graceful_shutdown(token)
    except KeyboardInterrupt:
        logger.info(LogTemplates.BOT_KEYBOARD_INTERRUPT)
    except Exception as exc:
        logger.exception(LogTemplates.BOT_FATAL_ERROR, exc)
        return 1
    else:
        logger.info(LogTemplates.BOT_STOPPED)
    return 0


def cli() -> None:
    """``sena-music`` console script."""
    sys.exit(main())


if __name__ == "__main__":
    cli()  # pragma: no cover
