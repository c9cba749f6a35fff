"""
Centralized configuration with environment variable overrides.

Business wording, session lifetimes, Redis connectivity and the optional
intent classifier are all configured here. Nothing is hardcoded in the
dialog or session logic.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


def _working_hours_from_env() -> dict[str, str]:
    defaults = {day: "09:00-17:00" for day in WEEKDAYS[:5]}
    defaults["saturday"] = "10:00-14:00"
    defaults["sunday"] = "closed"
    return {day: os.getenv(f"HOURS_{day.upper()}", defaults[day]) for day in WEEKDAYS}


@dataclass(frozen=True)
class BusinessConfig:
    """Business-facing wording for the spoken prompts."""

    name: str = os.getenv("COMPANY_NAME", "Your Company")
    working_hours: dict[str, str] = field(default_factory=_working_hours_from_env)


@dataclass(frozen=True)
class SessionConfig:
    """Per-call session lifetime and dialog thresholds."""

    default_language: str = os.getenv("DEFAULT_LANGUAGE", "english")
    ttl_seconds: int = _safe_int("SESSION_TTL_SECONDS", "3600")
    retry_escalation_threshold: int = _safe_int("RETRY_ESCALATION_THRESHOLD", "2")
    fallback_max_age_minutes: int = _safe_int("FALLBACK_MAX_AGE_MINUTES", "60")
    fallback_sweep_interval_sec: float = _safe_float("FALLBACK_SWEEP_INTERVAL_SECONDS", "300")


@dataclass(frozen=True)
class RedisConfig:
    """Primary session store connectivity."""

    url: Optional[str] = os.getenv("REDIS_URL") or None
    host: str = os.getenv("REDIS_HOST", "localhost")
    port: int = _safe_int("REDIS_PORT", "6379")
    db: int = _safe_int("REDIS_DB", "0")
    password: Optional[str] = os.getenv("REDIS_PASSWORD") or None
    socket_timeout_sec: float = _safe_float("REDIS_SOCKET_TIMEOUT", "5.0")
    connect_timeout_sec: float = _safe_float("REDIS_CONNECT_TIMEOUT", "10.0")
    operation_timeout_sec: float = _safe_float("REDIS_OPERATION_TIMEOUT", "5.0")

    def get_redis_url(self) -> str:
        if self.url:
            return self.url
        auth = f":{self.password}@" if self.password else ""
        return f"redis://{auth}{self.host}:{self.port}/{self.db}"


@dataclass(frozen=True)
class ClassifierConfig:
    """Optional LLM fallback for menu intent classification."""

    api_key: Optional[str] = os.getenv("OPENAI_API_KEY") or None
    model: str = os.getenv("CLASSIFIER_MODEL", "gpt-3.5-turbo")
    timeout_sec: float = _safe_float("CLASSIFIER_TIMEOUT", "3.0")

    @property
    def enabled(self) -> bool:
        return self.api_key is not None


@dataclass(frozen=True)
class TelephonyConfig:
    """Voice and routing settings for the rendered markup."""

    tts_voice: str = os.getenv("TTS_VOICE", "alice")
    tts_language: str = os.getenv("TTS_LANGUAGE", "en-US")
    base_path: str = os.getenv("VOICE_BOT_BASE_PATH", "/voice-bot")
    port: int = _safe_int("PORT", "8000")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    business: BusinessConfig = field(default_factory=BusinessConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    redis: RedisConfig = field(default_factory=RedisConfig)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    telephony: TelephonyConfig = field(default_factory=TelephonyConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def _validate_hours(day: str, value: str) -> None:
    if value.strip().lower() == "closed":
        return
    parts = value.split("-")
    if len(parts) != 2 or not all(p.strip() for p in parts):
        raise ValueError(
            f"HOURS_{day.upper()} must look like '09:00-17:00' or 'closed', got {value!r}"
        )


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.session.ttl_seconds < 1:
        raise ValueError(
            f"SESSION_TTL_SECONDS must be >= 1, got {config.session.ttl_seconds}"
        )
    if config.session.retry_escalation_threshold < 1:
        raise ValueError(
            "RETRY_ESCALATION_THRESHOLD must be >= 1, "
            f"got {config.session.retry_escalation_threshold}"
        )
    if config.session.fallback_max_age_minutes < 1:
        raise ValueError(
            "FALLBACK_MAX_AGE_MINUTES must be >= 1, "
            f"got {config.session.fallback_max_age_minutes}"
        )
    if config.session.fallback_sweep_interval_sec <= 0:
        raise ValueError(
            "FALLBACK_SWEEP_INTERVAL_SECONDS must be > 0, "
            f"got {config.session.fallback_sweep_interval_sec}"
        )

    for name, value in [
        ("REDIS_SOCKET_TIMEOUT", config.redis.socket_timeout_sec),
        ("REDIS_CONNECT_TIMEOUT", config.redis.connect_timeout_sec),
        ("REDIS_OPERATION_TIMEOUT", config.redis.operation_timeout_sec),
        ("CLASSIFIER_TIMEOUT", config.classifier.timeout_sec),
    ]:
        if value <= 0:
            raise ValueError(f"{name} must be > 0, got {value}")

    for day in WEEKDAYS:
        _validate_hours(day, config.business.working_hours.get(day, "closed"))


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] [%(call_id)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    from src.logging_context import install_call_id_filter

    install_call_id_filter()
    logger.info("Configuration loaded for '%s'", config.business.name)
    return config


# Singleton instance
settings = load_config()
