"""
Tests for main.py - Main Entry Point

Tests for the main entry point including:
- Logging configuration
- External tool report
- Token validation
- Bot run outcomes and exit codes
"""

import json
import logging
from unittest.mock import MagicMock, mock_open, patch

import pytest
from pydantic import SecretStr

from sena_music.config.settings import AudioSettings
from sena_music.main import cli, log_dependency_report, main, setup_logging


class TestLoggingSetup:
    """Tests for logging configuration."""

    def _make_valid_config(self) -> dict:
        return {
            "version": 1,
            "disable_existing_loggers": False,
            "handlers": {},
            "loggers": {
                "discord.gateway": {"level": "WARNING"},
                "httpx": {"level": "WARNING"},
                "spotipy": {"level": "WARNING"},
            },
            "root": {"level": "INFO", "handlers": []},
        }

    def test_dictconfig_called_when_json_exists(self):
        """Should call dictConfig when logging_config.json exists."""
        config = self._make_valid_config()
        m = mock_open(read_data=json.dumps(config))
        with (
            patch("builtins.open", m),
            patch("logging.config.dictConfig") as mock_dc,
        ):
            setup_logging()

            mock_dc.assert_called_once_with(config)

    def test_fallback_to_basicconfig_when_json_missing(self):
        """Should fall back to basicConfig when logging_config.json is missing."""
        with (
            patch("builtins.open", side_effect=FileNotFoundError),
            patch("logging.basicConfig") as mock_bc,
        ):
            setup_logging()

            mock_bc.assert_called_once()
            assert mock_bc.call_args[1]["level"] == logging.INFO

    def test_fallback_to_basicconfig_when_json_malformed(self):
        """Should fall back to basicConfig when JSON is malformed."""
        m = mock_open(read_data="{invalid json")
        with (
            patch("builtins.open", m),
            patch("logging.basicConfig") as mock_bc,
        ):
            setup_logging()

            mock_bc.assert_called_once()

    def test_fallback_when_config_unreadable(self, caplog):
        """Should fall back and say why when the file cannot be opened."""
        with (
            patch("builtins.open", side_effect=PermissionError(13, "Permission denied")),
            patch("logging.basicConfig") as mock_bc,
            caplog.at_level(logging.WARNING, logger="sena_music.main"),
        ):
            setup_logging()

        mock_bc.assert_called_once()
        assert "Permission denied" in caplog.text

    def test_fallback_when_dictconfig_rejects_config(self):
        """Should fall back when dictConfig raises ValueError (e.g. unknown formatter)."""
        m = mock_open(read_data=json.dumps({"version": 1}))
        with (
            patch("builtins.open", m),
            patch("logging.config.dictConfig", side_effect=ValueError("bad")),
            patch("logging.basicConfig") as mock_bc,
        ):
            setup_logging("WARNING")

            assert mock_bc.call_args[1]["level"] == logging.WARNING

    def test_root_logger_level_overridden_by_settings(self):
        """Should override root logger level with the provided log_level."""
        config = self._make_valid_config()
        m = mock_open(read_data=json.dumps(config))
        with (
            patch("builtins.open", m),
            patch("logging.config.dictConfig"),
            patch("logging.getLogger") as mock_get_logger,
        ):
            mock_root = MagicMock()
            mock_get_logger.return_value = mock_root

            setup_logging("DEBUG")

            mock_root.setLevel.assert_called_once_with(logging.DEBUG)

    def test_shipped_config_is_valid(self):
        """The repository's logging_config.json should load through dictConfig."""
        with patch("logging.config.dictConfig") as mock_dc, patch("logging.basicConfig") as mock_bc:
            setup_logging()

        mock_bc.assert_not_called()
        loaded = mock_dc.call_args[0][0]
        assert loaded["formatters"]["console"]["()"] == "sena_music.utils.logging.ColoredFormatter"


class TestDependencyReport:
    def test_reports_found_and_missing(self, caplog):
        audio = AudioSettings(ffmpeg_path="ffmpeg", ytdlp_executable="yt-dlp")
        locations = {"ffmpeg": "/usr/bin/ffmpeg", "yt-dlp": None}

        with (
            patch("sena_music.main.shutil.which", side_effect=locations.get),
            caplog.at_level(logging.INFO, logger="sena_music.main"),
        ):
            report = log_dependency_report(audio)

        assert report == {"ffmpeg": "/usr/bin/ffmpeg", "yt-dlp": None}
        assert "Found ffmpeg at /usr/bin/ffmpeg" in caplog.text
        assert "yt-dlp not found on PATH" in caplog.text


def _mock_settings(token: str = "test_token_123") -> MagicMock:
    mock_settings = MagicMock()
    mock_settings.discord.token = SecretStr(token)
    mock_settings.log_level = "INFO"
    mock_settings.environment = "test"
    return mock_settings


class TestMainFunction:
    """Tests for main entry point function."""

    @pytest.fixture(autouse=True)
    def quiet(self):
        with (
            patch("sena_music.main.setup_logging"),
            patch("sena_music.main.log_dependency_report"),
        ):
            yield

    def test_main_returns_error_without_token(self):
        """Should return error code when Discord token is missing."""
        with (
            patch("sena_music.config.settings.get_settings", return_value=_mock_settings("")),
            patch("sena_music.config.container.create_container") as create_container,
        ):
            exit_code = main()

        assert exit_code == 1
        create_container.assert_not_called()

    def test_main_successful_run(self):
        """Should return 0 on successful bot run."""
        settings = _mock_settings()
        mock_bot = MagicMock()

        with (
            patch("sena_music.config.settings.get_settings", return_value=settings),
            patch("sena_music.config.container.create_container") as create_container,
            patch("sena_music.infrastructure.discord.bot.create_bot", return_value=mock_bot) as create_bot,
        ):
            exit_code = main()

        assert exit_code == 0
        create_container.assert_called_once_with(settings)
        create_bot.assert_called_once_with(create_container.return_value, settings)
        mock_bot.run_with_graceful_shutdown.assert_called_once_with("test_token_123")

    @pytest.mark.parametrize(("error", "expected"), [(KeyboardInterrupt(), 0), (RuntimeError("crash"), 1)])
    def test_main_run_outcomes(self, error, expected):
        """Should map interrupts to 0 and crashes to 1."""
        mock_bot = MagicMock()
        mock_bot.run_with_graceful_shutdown.side_effect = error

        with (
            patch("sena_music.config.settings.get_settings", return_value=_mock_settings()),
            patch("sena_music.config.container.create_container"),
            patch("sena_music.infrastructure.discord.bot.create_bot", return_value=mock_bot),
        ):
            assert main() == expected

    def test_cli_exits_with_main_result(self):
        with patch("sena_music.main.main", return_value=3), pytest.raises(SystemExit) as exc_info:
            cli()

        assert exc_info.value.code == 3
