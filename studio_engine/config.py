"""
Centralized configuration with environment variable overrides.

Studio details, calendar grid bounds, lifecycle policy and integration
credentials all live here. Nothing is hardcoded in scheduling or
lifecycle logic.
"""

import logging
import os
from dataclasses import dataclass, field
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from studio_engine.logging_context import LOG_FORMAT, install_request_id_filter

load_dotenv()

logger = logging.getLogger(__name__)

SQUARE_ENVIRONMENTS = ("sandbox", "production")


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_bool(env_var: str, default: str) -> bool:
    """Parse a boolean flag ("true"/"false", "1"/"0", "yes"/"no")."""
    raw = os.getenv(env_var, default).strip().lower()
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"Invalid boolean for {env_var}: {raw!r}")


@dataclass(frozen=True)
class StudioConfig:
    """Studio identity and locale."""

    name: str = os.getenv("STUDIO_NAME", "T Creative Studio")
    timezone: str = os.getenv("STUDIO_TIMEZONE", "America/Los_Angeles")
    default_location: str = os.getenv("DEFAULT_LOCATION", "T Creative Studio")


@dataclass(frozen=True)
class CalendarConfig:
    """Visible hour range of the day/week/staff time grids."""

    day_start_hour: int = _safe_int("CALENDAR_DAY_START_HOUR", "8")
    day_end_hour: int = _safe_int("CALENDAR_DAY_END_HOUR", "20")


@dataclass(frozen=True)
class LifecycleConfig:
    """Booking status policy and side-effect retry limits."""

    strict_transitions: bool = _safe_bool("STRICT_TRANSITIONS", "true")
    max_side_effect_attempts: int = _safe_int("MAX_SIDE_EFFECT_ATTEMPTS", "3")


@dataclass(frozen=True)
class PaymentConfig:
    """Payment-order provider credentials. Empty values mean cash-only mode."""

    access_token: str = os.getenv("SQUARE_ACCESS_TOKEN", "")
    location_id: str = os.getenv("SQUARE_LOCATION_ID", "")
    environment: str = os.getenv("SQUARE_ENVIRONMENT", "sandbox")
    currency: str = os.getenv("PAYMENT_CURRENCY", "USD")

    @property
    def is_configured(self) -> bool:
        return bool(self.access_token and self.location_id)


@dataclass(frozen=True)
class NotificationConfig:
    """Outbound email settings."""

    from_email: str = os.getenv("EMAIL_FROM", "T Creative <noreply@tcreativestudio.com>")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    studio: StudioConfig = field(default_factory=StudioConfig)
    calendar: CalendarConfig = field(default_factory=CalendarConfig)
    lifecycle: LifecycleConfig = field(default_factory=LifecycleConfig)
    payment: PaymentConfig = field(default_factory=PaymentConfig)
    notification: NotificationConfig = field(default_factory=NotificationConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.studio.timezone)


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    try:
        ZoneInfo(config.studio.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(
            f"STUDIO_TIMEZONE is not a known IANA zone: {config.studio.timezone!r}"
        ) from None

    start, end = config.calendar.day_start_hour, config.calendar.day_end_hour
    if not 0 <= start <= 23:
        raise ValueError(f"CALENDAR_DAY_START_HOUR must be between 0 and 23, got {start}")
    if not 1 <= end <= 24:
        raise ValueError(f"CALENDAR_DAY_END_HOUR must be between 1 and 24, got {end}")
    if start >= end:
        raise ValueError(
            f"CALENDAR_DAY_START_HOUR ({start}) must be before CALENDAR_DAY_END_HOUR ({end})"
        )

    if config.lifecycle.max_side_effect_attempts < 1:
        raise ValueError(
            "MAX_SIDE_EFFECT_ATTEMPTS must be >= 1, "
            f"got {config.lifecycle.max_side_effect_attempts}"
        )

    if config.payment.environment not in SQUARE_ENVIRONMENTS:
        raise ValueError(
            f"SQUARE_ENVIRONMENT must be one of {SQUARE_ENVIRONMENTS}, "
            f"got {config.payment.environment!r}"
        )
    if len(config.payment.currency) != 3:
        raise ValueError(f"PAYMENT_CURRENCY must be a 3-letter code, got {config.payment.currency!r}")


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    install_request_id_filter()
    if not config.lifecycle.strict_transitions:
        logger.warning("STRICT_TRANSITIONS disabled: any booking status change will be accepted")
    logger.info("Configuration loaded for '%s'", config.studio.name)
    return config


# Singleton instance
settings = load_config()
