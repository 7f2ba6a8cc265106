"""Tests for configuration management module."""

import logging
import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from sheetlink.config import Settings, validate_settings_on_startup


class TestSettings:
    """Tests for the Settings class."""

    def test_default_values(self) -> None:
        """Test default configuration values."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.max_file_size_mb == 10
        assert settings.max_header_search_rows == 10
        assert settings.max_url_length == 2000
        assert settings.template_cache_ttl_seconds == 7200
        assert settings.log_level == "INFO"
        assert settings.debug is False
        assert settings.cors_origins == "*"
        assert settings.server_host == "0.0.0.0"
        assert settings.server_port == 8000

    def test_environment_overrides(self) -> None:
        """Values are read from SHEETLINK_ prefixed variables."""
        env = {
            "SHEETLINK_MAX_FILE_SIZE_MB": "25",
            "SHEETLINK_MAX_HEADER_SEARCH_ROWS": "5",
            "SHEETLINK_MAX_URL_LENGTH": "500",
            "SHEETLINK_LOG_LEVEL": "debug",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = Settings(_env_file=None)

        assert settings.max_file_size_mb == 25
        assert settings.max_header_search_rows == 5
        assert settings.max_url_length == 500
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("max_file_size_mb", 0),
            ("max_file_size_mb", 101),
            ("max_header_search_rows", 0),
            ("max_header_search_rows", 51),
            ("max_url_length", 99),
            ("max_url_length", 10001),
            ("template_cache_ttl_seconds", 0),
            ("server_port", 70000),
            ("log_level", "VERBOSE"),
        ],
    )
    def test_out_of_range_values_rejected(self, field: str, value: object) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: value})

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("max_file_size_mb", 1),
            ("max_file_size_mb", 100),
            ("max_header_search_rows", 50),
            ("max_url_length", 100),
            ("max_url_length", 10000),
        ],
    )
    def test_boundary_values_accepted(self, field: str, value: int) -> None:
        settings = Settings(_env_file=None, **{field: value})
        assert getattr(settings, field) == value


class TestComputedProperties:
    """Tests for derived settings."""

    def test_max_file_size_bytes(self) -> None:
        settings = Settings(_env_file=None, max_file_size_mb=2)
        assert settings.max_file_size_bytes == 2 * 1024 * 1024

    def test_cors_origins_list(self) -> None:
        assert Settings(_env_file=None).cors_origins_list == ["*"]
        settings = Settings(
            _env_file=None, cors_origins="http://a.test, http://b.test"
        )
        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]

    def test_log_level_int(self) -> None:
        settings = Settings(_env_file=None, log_level="warning")
        assert settings.log_level_int == logging.WARNING

    def test_to_safe_dict(self) -> None:
        safe = Settings(_env_file=None).to_safe_dict()
        assert safe["max_header_search_rows"] == 10
        assert safe["template_cache_ttl_seconds"] == 7200


class TestValidateSettingsOnStartup:
    """Tests for startup validation logging."""

    def test_warns_on_permissive_cors(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="sheetlink.config"):
            validate_settings_on_startup(Settings(_env_file=None))
        assert "CORS is configured to allow all origins" in caplog.text

    def test_no_warning_with_restricted_cors(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        settings = Settings(_env_file=None, cors_origins="http://a.test")
        with caplog.at_level(logging.INFO, logger="sheetlink.config"):
            validate_settings_on_startup(settings)
        assert "CORS" not in caplog.text
        assert "Configuration loaded" in caplog.text
