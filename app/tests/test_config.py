# app/tests/test_config.py
"""Tests for configuration management and startup validation."""
import os
from unittest.mock import patch

import pytest

from app.config import (
    DEFAULT_LOG_LEVEL,
    AppConfig,
    ConfigurationError,
    load_config,
    log_config_snapshot,
)
from corrector.engine import FINISHED_STATUSES
from corrector.expression.gate import DEFAULT_MAX_EXPRESSION_LENGTH
from events.catalog import BUNDLED_SPORTS_DIR


class TestLoadConfig:
    """Tests for load_config function."""

    def test_default_values(self):
        """Config loads with sensible defaults when no env vars set."""
        with patch.dict(os.environ, {}, clear=True):
            config = load_config()

        assert config.service_name == "sport-events"
        assert config.environment == "development"
        assert config.catalog_dir == BUNDLED_SPORTS_DIR
        assert config.default_locale == "fr"
        assert config.max_expression_length == DEFAULT_MAX_EXPRESSION_LENGTH
        assert config.finished_statuses == FINISHED_STATUSES
        assert config.log_level == DEFAULT_LOG_LEVEL
        assert config.warnings == []

    def test_environment(self):
        """Environment is read from EVENTS_ENV."""
        with patch.dict(os.environ, {"EVENTS_ENV": "production"}, clear=True):
            config = load_config()

        assert config.environment == "production"

    def test_catalog_dir(self, tmp_path):
        """An existing directory is used as the catalog root."""
        with patch.dict(os.environ, {"EVENTS_CATALOG_DIR": str(tmp_path)}, clear=True):
            config = load_config()

        assert config.catalog_dir == tmp_path

    def test_missing_catalog_dir_uses_bundled(self, tmp_path):
        """A missing directory falls back to the bundled catalog with warning."""
        missing = tmp_path / "missing"
        with patch.dict(os.environ, {"EVENTS_CATALOG_DIR": str(missing)}, clear=True):
            config = load_config()

        assert config.catalog_dir == BUNDLED_SPORTS_DIR
        assert any("not a directory" in w for w in config.warnings)

    def test_finished_statuses(self):
        """Finished statuses are a comma-separated, case-insensitive list."""
        with patch.dict(os.environ, {"CORRECTION_FINISHED_STATUSES": "ft, aet ,,PEN"}, clear=True):
            config = load_config()

        assert config.finished_statuses == frozenset({"FT", "AET", "PEN"})

    def test_empty_finished_statuses_uses_default(self):
        """An empty list falls back to the defaults with warning."""
        with patch.dict(os.environ, {"CORRECTION_FINISHED_STATUSES": " , "}, clear=True):
            config = load_config()

        assert config.finished_statuses == FINISHED_STATUSES
        assert any("is empty" in w for w in config.warnings)

    def test_invalid_log_level(self):
        """Unknown log level falls back to INFO with warning."""
        with patch.dict(os.environ, {"EVENTS_LOG_LEVEL": "chatty"}, clear=True):
            config = load_config()

        assert config.log_level == "INFO"
        assert any("EVENTS_LOG_LEVEL" in w for w in config.warnings)


class TestLocale:
    """Tests for EVENTS_DEFAULT_LOCALE validation."""

    def test_english(self):
        with patch.dict(os.environ, {"EVENTS_DEFAULT_LOCALE": "EN"}, clear=True):
            config = load_config()

        assert config.default_locale == "en"

    def test_unsupported_locale_fails_fast(self):
        with patch.dict(os.environ, {"EVENTS_DEFAULT_LOCALE": "de"}, clear=True):
            with pytest.raises(ConfigurationError):
                load_config(fail_fast=True)

    def test_unsupported_locale_warns_without_fail_fast(self):
        with patch.dict(os.environ, {"EVENTS_DEFAULT_LOCALE": "de"}, clear=True):
            config = load_config(fail_fast=False)

        assert config.default_locale == "fr"
        assert any("EVENTS_DEFAULT_LOCALE" in w for w in config.warnings)


class TestExpressionLengthValidation:
    """Tests for EXPRESSION_MAX_LENGTH validation."""

    def test_valid_length_accepted(self):
        with patch.dict(os.environ, {"EXPRESSION_MAX_LENGTH": "1000"}, clear=True):
            config = load_config()

        assert config.max_expression_length == 1000

    def test_invalid_string_uses_default_with_warning(self):
        with patch.dict(os.environ, {"EXPRESSION_MAX_LENGTH": "long"}, clear=True):
            config = load_config()

        assert config.max_expression_length == DEFAULT_MAX_EXPRESSION_LENGTH
        assert any("not a valid integer" in w for w in config.warnings)

    def test_below_minimum_uses_default_with_warning(self):
        with patch.dict(os.environ, {"EXPRESSION_MAX_LENGTH": "3"}, clear=True):
            config = load_config()

        assert config.max_expression_length == DEFAULT_MAX_EXPRESSION_LENGTH
        assert any("below minimum" in w for w in config.warnings)


class TestConfigSnapshot:
    """Tests for log_config_snapshot."""

    def test_snapshot_contents(self):
        config = AppConfig(environment="test", default_locale="en")
        snapshot = log_config_snapshot(config)

        assert snapshot.startswith("[STARTUP] service=sport-events")
        assert "environment=test" in snapshot
        assert "default_locale=en" in snapshot
        assert "finished_statuses=FINISHED,FT" in snapshot
