"""Tests for logging configuration."""

import os
from pathlib import Path
from unittest.mock import MagicMock, Mock, patch

from ai_observability_core.logging import get_pipeline_logger, setup_logging
from ai_observability_core.logging.logging_config import DEFAULT_LOG_LEVELS, LoggingConfig


class TestLoggingConfig:
    """Test LoggingConfig class."""

    def test_default_config_path_from_env(self):
        """Test getting config path from environment."""
        with patch.dict(os.environ, {"AI_OBSERVABILITY_LOGGING_CONFIG": "/path/to/config.yml"}):
            config = LoggingConfig()
            assert config.config_path == Path("/path/to/config.yml")

    def test_own_env_var_wins_over_prefect(self):
        with patch.dict(
            os.environ,
            {"AI_OBSERVABILITY_LOGGING_CONFIG": "/ours.yml", "PREFECT_LOGGING_SETTINGS_PATH": "/prefect.yml"},
        ):
            assert LoggingConfig().config_path == Path("/ours.yml")

    def test_default_config_path_from_prefect_env(self):
        """Test getting config path from Prefect environment."""
        with patch.dict(os.environ, {"PREFECT_LOGGING_SETTINGS_PATH": "/prefect/config.yml"}, clear=True):
            config = LoggingConfig()
            assert config.config_path == Path("/prefect/config.yml")

    def test_no_config_path_returns_none(self):
        """Test that no env vars results in None config path."""
        with patch.dict(os.environ, clear=True):
            config = LoggingConfig()
            assert config.config_path is None

    def test_load_config_from_file(self, tmp_path: Path) -> None:
        """Test loading config from YAML file."""
        config_file = tmp_path / "logging.yml"
        config_file.write_text("""
version: 1
disable_existing_loggers: false
handlers:
  console:
    class: logging.StreamHandler
""")

        config = LoggingConfig(config_path=config_file)
        loaded = config.load_config()

        assert loaded["version"] == 1
        assert loaded["disable_existing_loggers"] is False
        assert "console" in loaded["handlers"]

    def test_missing_file_falls_back_to_defaults(self, tmp_path: Path) -> None:
        loaded = LoggingConfig(config_path=tmp_path / "absent.yml").load_config()
        assert "ai_observability_core" in loaded["loggers"]

    def test_default_level_from_env(self):
        with patch.dict(os.environ, {"AI_OBSERVABILITY_LOG_LEVEL": "DEBUG"}, clear=True):
            loaded = LoggingConfig().load_config()
        assert loaded["loggers"]["ai_observability_core"]["level"] == "DEBUG"

    def test_config_is_cached(self):
        config = LoggingConfig()
        assert config.load_config() is config.load_config()

    @patch("logging.config.dictConfig")
    def test_apply_config(self, mock_dict_config: Mock) -> None:
        """Test applying logging configuration."""
        config = LoggingConfig()
        config.apply()

        mock_dict_config.assert_called_once()
        call_args = mock_dict_config.call_args[0][0]
        assert call_args["version"] == 1

    @patch("logging.config.dictConfig")
    def test_apply_with_prefect_settings(self, mock_dict_config: Mock) -> None:
        """Test applying config with a prefect logger section."""
        with patch.dict(os.environ, clear=True):
            custom_config = {"version": 1, "loggers": {"prefect": {"level": "DEBUG"}}}
            with patch.object(LoggingConfig, "load_config", return_value=custom_config):
                LoggingConfig().apply()

                assert os.environ.get("PREFECT_LOGGING_LEVEL") == "DEBUG"


class TestSetupLogging:
    """Test setup_logging function."""

    @patch("ai_observability_core.logging.logging_config.LoggingConfig.apply")
    def test_setup_logging_basic(self, mock_apply: Mock) -> None:
        setup_logging()
        mock_apply.assert_called_once()

    @patch("ai_observability_core.logging.logging_config.get_logger")
    @patch("ai_observability_core.logging.logging_config.LoggingConfig.apply")
    def test_setup_logging_with_level(self, mock_apply: Mock, mock_get_logger: Mock) -> None:
        """Test setup_logging with custom level."""
        mock_logger = MagicMock()
        mock_get_logger.return_value = mock_logger

        with patch.dict(os.environ):
            setup_logging(level="DEBUG")

            assert mock_get_logger.call_count == len(DEFAULT_LOG_LEVELS)
            mock_logger.setLevel.assert_called_with("DEBUG")
            assert os.environ["PREFECT_LOGGING_LEVEL"] == "DEBUG"

    @patch("ai_observability_core.logging.logging_config.LoggingConfig")
    def test_setup_logging_with_config_path(self, mock_config_class: Mock, tmp_path: Path) -> None:
        config_file = tmp_path / "custom.yml"
        mock_instance = MagicMock()
        mock_config_class.return_value = mock_instance

        setup_logging(config_path=config_file)

        mock_config_class.assert_called_once_with(config_file)
        mock_instance.apply.assert_called_once()


class TestGetPipelineLogger:
    """Test get_pipeline_logger function."""

    @patch("ai_observability_core.logging.logging_config.setup_logging")
    @patch("ai_observability_core.logging.logging_config.get_logger")
    def test_get_pipeline_logger_ensures_setup(self, mock_get_logger: Mock, mock_setup: Mock) -> None:
        mock_logger = MagicMock()
        mock_get_logger.return_value = mock_logger

        import ai_observability_core.logging.logging_config as logging_config

        with patch.object(logging_config, "_logging_config", None):
            logger = get_pipeline_logger("test.module")

        mock_setup.assert_called_once()
        mock_get_logger.assert_called_with("test.module")
        assert logger == mock_logger

    @patch("ai_observability_core.logging.logging_config.get_logger")
    def test_get_pipeline_logger_reuses_config(self, mock_get_logger: Mock) -> None:
        """Test that subsequent calls don't re-setup logging."""
        import ai_observability_core.logging.logging_config as logging_config

        with (
            patch.object(logging_config, "_logging_config", MagicMock()),
            patch("ai_observability_core.logging.logging_config.setup_logging") as mock_setup,
        ):
            get_pipeline_logger("module1")
            get_pipeline_logger("module2")

            mock_setup.assert_not_called()
            assert mock_get_logger.call_count == 2
