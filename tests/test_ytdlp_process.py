"""Unit tests for the yt-dlp subprocess wrapper."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from sena_music.infrastructure.audio.ytdlp_process import YtDlpProcessError, dump_single_json

SPAWN = "sena_music.infrastructure.audio.ytdlp_process.asyncio.create_subprocess_exec"


def _proc(stdout: bytes = b"{}", stderr: bytes = b"", returncode: int = 0) -> MagicMock:
    proc = MagicMock()
    proc.communicate = AsyncMock(return_value=(stdout, stderr))
    proc.returncode = returncode
    return proc


class TestDumpSingleJson:
    @pytest.mark.asyncio
    async def test_parses_stdout(self):
        spawn = AsyncMock(return_value=_proc(b'{"id": "abc", "title": "Song"}'))
        with patch(SPAWN, spawn):
            data = await dump_single_json("yt-dlp", "https://x", ("--flat-playlist",))

        assert data == {"id": "abc", "title": "Song"}
        args = spawn.call_args.args
        assert args[0] == "yt-dlp"
        assert "--dump-single-json" in args
        assert args[-2:] == ("--flat-playlist", "https://x")

    @pytest.mark.asyncio
    async def test_missing_executable(self):
        with patch(SPAWN, AsyncMock(side_effect=FileNotFoundError())):
            with pytest.raises(YtDlpProcessError, match="yt-dlp"):
                await dump_single_json("yt-dlp", "https://x")

    @pytest.mark.asyncio
    async def test_unrunnable_executable(self):
        error = PermissionError(13, "Permission denied")
        with patch(SPAWN, AsyncMock(side_effect=error)):
            with pytest.raises(YtDlpProcessError, match="Cannot run /opt/yt-dlp") as exc_info:
                await dump_single_json("/opt/yt-dlp", "https://x")

        assert exc_info.value.__cause__ is error

    @pytest.mark.asyncio
    async def test_non_zero_exit_includes_truncated_stderr(self):
        stderr = b"ERROR: Video unavailable " + b"x" * 1000
        with patch(SPAWN, AsyncMock(return_value=_proc(b"", stderr, returncode=1))):
            with pytest.raises(YtDlpProcessError) as exc_info:
                await dump_single_json("yt-dlp", "https://x")

        message = str(exc_info.value)
        assert "Video unavailable" in message
        assert len(message) < 500

    @pytest.mark.asyncio
    @pytest.mark.parametrize("stdout", [b"not json", b"[1, 2]", b"\xff\xfe"])
    async def test_bad_output(self, stdout):
        with patch(SPAWN, AsyncMock(return_value=_proc(stdout))):
            with pytest.raises(YtDlpProcessError):
                await dump_single_json("yt-dlp", "https://x")
