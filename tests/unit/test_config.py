"""Unit tests for configuration management."""

import os
from unittest.mock import patch

import pytest

from phpscope.core.config import ScopeConfig, get_config, reload_config


class TestScopeConfig:
    """Tests for ScopeConfig."""

    def test_default_values(self) -> None:
        """Test default configuration values."""
        # Clear env and disable .env file loading
        with patch.dict(os.environ, {}, clear=True):
            config = ScopeConfig(_env_file=None)

            assert config.parse_function_body is True
            assert config.save_token_streams is True
            assert config.file_extensions == [".php"]
            assert config.exclude_dirs == ["vendor", ".git"]
            assert config.log_level == "WARNING"

    def test_env_override(self) -> None:
        """Test environment variable override."""
        with patch.dict(
            os.environ,
            {
                "PHPSCOPE_PARSE_FUNCTION_BODY": "false",
                "PHPSCOPE_SAVE_TOKEN_STREAMS": "0",
                "PHPSCOPE_LOG_LEVEL": "DEBUG",
            },
        ):
            config = ScopeConfig(_env_file=None)
            assert config.parse_function_body is False
            assert config.save_token_streams is False
            assert config.log_level == "DEBUG"

    def test_list_override_from_json(self) -> None:
        """Test list settings are read as JSON."""
        with patch.dict(os.environ, {"PHPSCOPE_FILE_EXTENSIONS": '[".php", ".inc"]'}):
            config = ScopeConfig(_env_file=None)
            assert config.file_extensions == [".php", ".inc"]

    def test_validation_boolean(self) -> None:
        """Test invalid booleans are rejected."""
        with patch.dict(os.environ, {"PHPSCOPE_PARSE_FUNCTION_BODY": "maybe"}):
            with pytest.raises(ValueError):
                ScopeConfig(_env_file=None)

    def test_unrelated_env_ignored(self) -> None:
        """Test variables without the prefix are ignored."""
        with patch.dict(os.environ, {"LOG_LEVEL": "DEBUG"}, clear=True):
            config = ScopeConfig(_env_file=None)
            assert config.log_level == "WARNING"


class TestConfigCaching:
    """Tests for configuration caching."""

    def test_get_config_cached(self) -> None:
        """Test that get_config returns cached instance."""
        reload_config()
        assert get_config() is get_config()

    def test_reload_config(self) -> None:
        """Test that reload_config picks up changed environment."""
        with patch.dict(os.environ, {"PHPSCOPE_LOG_LEVEL": "INFO"}):
            config = reload_config()
            assert config.log_level == "INFO"
        reload_config()
