"""Async wrapper around the yt-dlp executable's ``--dump-single-json`` output."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Sequence
from typing import Any, Final

from sena_music.domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)

STDERR_TRUNCATE: Final[int] = 300


class YtDlpProcessError(Exception):
    """The yt-dlp executable could not be run or returned unusable output."""


async def dump_single_json(
    executable: str,
    url: str,
    extra_args: Sequence[str] = (),
) -> dict[str, Any]:
    """Run ``<executable> --dump-single-json ... <url>`` and parse stdout.

    Raises:
        YtDlpProcessError: when the executable is missing or cannot be started,
            exits non-zero or prints something that is not a JSON object.
    """
    args = [
        "--dump-single-json",
        "--no-warnings",
        "--skip-download",
        *extra_args,
        url,
    ]
    logger.debug(LogTemplates.EXTRACTOR_SPAWN, executable, url)

    try:
        proc = await asyncio.create_subprocess_exec(
            executable,
            *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as exc:
        raise YtDlpProcessError(ErrorMessages.EXTRACTOR_NOT_FOUND.format(executable=executable)) from exc
    except OSError as exc:
        raise YtDlpProcessError(
            ErrorMessages.EXTRACTOR_NOT_RUNNABLE.format(executable=executable, error=exc)
        ) from exc

    stdout, stderr = await proc.communicate()
    if proc.returncode != 0:
        message = stderr.decode(errors="replace").strip()[:STDERR_TRUNCATE]
        raise YtDlpProcessError(
            ErrorMessages.EXTRACTOR_EXITED.format(code=proc.returncode, stderr=message)
        )

    try:
        data = json.loads(stdout)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise YtDlpProcessError(ErrorMessages.EXTRACTOR_BAD_JSON) from exc

    if not isinstance(data, dict):
        raise YtDlpProcessError(ErrorMessages.EXTRACTOR_BAD_JSON)
    return data
