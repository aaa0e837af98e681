# app/config.py
"""
Centralized configuration management with startup validation.

All settings are OPTIONAL environment variables; invalid values fall back
to defaults with a collected warning. Only an unsupported locale is
fatal, and only when fail_fast is set.
"""
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from corrector.engine import FINISHED_STATUSES
from corrector.expression.gate import DEFAULT_MAX_EXPRESSION_LENGTH
from events.catalog import BUNDLED_SPORTS_DIR
from events.models import DEFAULT_LOCALE, SUPPORTED_LOCALES

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

SERVICE_NAME = "sport-events"
SERVICE_VERSION = "0.1.0"

MIN_EXPRESSION_LENGTH = 16
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
DEFAULT_LOG_LEVEL = "INFO"


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(Exception):
    """Raised when configuration is invalid and fail_fast is set."""

    pass


# =============================================================================
# Configuration Dataclass
# =============================================================================


@dataclass
class AppConfig:
    """Application configuration loaded from environment."""

    # Service info
    service_name: str = SERVICE_NAME
    service_version: str = SERVICE_VERSION
    environment: str = "development"

    # Catalog
    catalog_dir: Path = BUNDLED_SPORTS_DIR
    default_locale: str = DEFAULT_LOCALE

    # Correction
    max_expression_length: int = DEFAULT_MAX_EXPRESSION_LENGTH
    finished_statuses: frozenset = FINISHED_STATUSES

    log_level: str = DEFAULT_LOG_LEVEL

    # Warnings collected during config load
    warnings: list = field(default_factory=list)


# =============================================================================
# Configuration Loading
# =============================================================================


def _parse_int_env(
    name: str, default: int, min_value: Optional[int] = None
) -> tuple[int, Optional[str]]:
    """
    Parse an integer environment variable with validation.

    Returns (value, warning_message).
    On invalid input, returns default with a warning.
    """
    raw = os.environ.get(name)
    if raw is None:
        return default, None

    try:
        value = int(raw)
    except ValueError:
        warning = f"{name}='{raw}' is not a valid integer; using default {default}"
        return default, warning

    if min_value is not None and value < min_value:
        warning = f"{name}={value} is below minimum {min_value}; using default {default}"
        return default, warning

    return value, None


def _parse_list_env(name: str, default: frozenset) -> tuple[frozenset, Optional[str]]:
    """Parse a comma-separated list; empty entries are dropped."""
    raw = os.environ.get(name)
    if raw is None:
        return default, None

    values = frozenset(part.strip().upper() for part in raw.split(",") if part.strip())
    if not values:
        return default, f"{name} is empty; using default {','.join(sorted(default))}"
    return values, None


def load_config(fail_fast: bool = True) -> AppConfig:
    """
    Load and validate application configuration from environment.

    Args:
        fail_fast: If True, raise ConfigurationError on critical issues.
                   If False, collect warnings and continue.

    Returns:
        AppConfig instance with validated configuration.

    Raises:
        ConfigurationError: If EVENTS_DEFAULT_LOCALE is unsupported
                           and fail_fast is True.
    """
    warnings = []

    environment = os.environ.get("EVENTS_ENV", "development")

    # Catalog location
    catalog_dir = BUNDLED_SPORTS_DIR
    raw_dir = os.environ.get("EVENTS_CATALOG_DIR")
    if raw_dir:
        candidate = Path(raw_dir).expanduser()
        if candidate.is_dir():
            catalog_dir = candidate
        else:
            warnings.append(
                f"EVENTS_CATALOG_DIR='{raw_dir}' is not a directory; using bundled catalog"
            )

    # Locale
    default_locale = os.environ.get("EVENTS_DEFAULT_LOCALE", DEFAULT_LOCALE).strip().lower()
    if default_locale not in SUPPORTED_LOCALES:
        message = (
            f"EVENTS_DEFAULT_LOCALE='{default_locale}' is not one of "
            f"{', '.join(SUPPORTED_LOCALES)}"
        )
        if fail_fast:
            raise ConfigurationError(message)
        warnings.append(f"{message}; using default {DEFAULT_LOCALE}")
        default_locale = DEFAULT_LOCALE

    max_expression_length, length_warning = _parse_int_env(
        "EXPRESSION_MAX_LENGTH",
        DEFAULT_MAX_EXPRESSION_LENGTH,
        min_value=MIN_EXPRESSION_LENGTH,
    )
    if length_warning:
        warnings.append(length_warning)

    finished_statuses, status_warning = _parse_list_env(
        "CORRECTION_FINISHED_STATUSES", FINISHED_STATUSES
    )
    if status_warning:
        warnings.append(status_warning)

    log_level = os.environ.get("EVENTS_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
    if log_level not in VALID_LOG_LEVELS:
        warnings.append(f"EVENTS_LOG_LEVEL='{log_level}' is not valid; using {DEFAULT_LOG_LEVEL}")
        log_level = DEFAULT_LOG_LEVEL

    # Log warnings
    for warning in warnings:
        logger.warning(f"[CONFIG] {warning}")

    return AppConfig(
        environment=environment,
        catalog_dir=catalog_dir,
        default_locale=default_locale,
        max_expression_length=max_expression_length,
        finished_statuses=finished_statuses,
        log_level=log_level,
        warnings=warnings,
    )


def log_config_snapshot(config: AppConfig) -> str:
    """
    Generate and log a one-line configuration snapshot.

    Returns the snapshot string for testing purposes.
    """
    snapshot = (
        f"[STARTUP] service={config.service_name} "
        f"version={config.service_version} "
        f"environment={config.environment} "
        f"catalog_dir={config.catalog_dir} "
        f"default_locale={config.default_locale} "
        f"max_expression_length={config.max_expression_length} "
        f"finished_statuses={','.join(sorted(config.finished_statuses))} "
        f"log_level={config.log_level}"
    )
    logger.info(snapshot)
    return snapshot
