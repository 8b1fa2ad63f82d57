"""Environment-based configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass


DEFAULT_SOURCE_URL = "https://www.dhlottery.co.kr/common.do?method=getLottoNumber&drwNo="


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class BaseConfig:
    """Base configuration shared by all environments."""

    APP_ENV: str = os.getenv("APP_ENV", "development")
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-secret")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Remote source
    SOURCE_URL: str = os.getenv("SOURCE_URL", DEFAULT_SOURCE_URL)
    REQUEST_TIMEOUT_SECONDS: float = _env_float("REQUEST_TIMEOUT_SECONDS", 10.0)
    # Transport-level retries per relay. 0 moves straight to the next relay.
    HTTP_RETRIES: int = _env_int("HTTP_RETRIES", 0)
    HTTP_BACKOFF_FACTOR: float = _env_float("HTTP_BACKOFF_FACTOR", 0.3)

    # Collection
    PACING_DELAY_SECONDS: float = _env_float("PACING_DELAY_SECONDS", 0.4)
    RETRY_PACING_DELAY_SECONDS: float = _env_float("RETRY_PACING_DELAY_SECONDS", 0.5)
    RETRY_DELAY_SECONDS: float = _env_float("RETRY_DELAY_SECONDS", 2.0)
    MAX_BATCH_RETRIES: int = _env_int("MAX_BATCH_RETRIES", 3)
    WAVE_SIZE: int = _env_int("WAVE_SIZE", 1)
    ROUND_WINDOW: int = _env_int("ROUND_WINDOW", 20)
    MINIMUM_ROUNDS: int = _env_int("MINIMUM_ROUNDS", 15)
    LATEST_ROUND_LOOKBACK: int = _env_int("LATEST_ROUND_LOOKBACK", 30)

    # Analysis / recommendation
    HOT_THRESHOLD: int = _env_int("HOT_THRESHOLD", 3)
    COLD_THRESHOLD: int = _env_int("COLD_THRESHOLD", 1)
    DUPLICATE_ATTEMPTS: int = _env_int("DUPLICATE_ATTEMPTS", 10)

    # Top-level pipeline
    ANALYSIS_MAX_ATTEMPTS: int = _env_int("ANALYSIS_MAX_ATTEMPTS", 3)
    ANALYSIS_BACKOFF_SECONDS: float = _env_float("ANALYSIS_BACKOFF_SECONDS", 3.0)


@dataclass(frozen=True)
class DevelopmentConfig(BaseConfig):
    """Development configuration."""

    DEBUG: bool = True


@dataclass(frozen=True)
class ProductionConfig(BaseConfig):
    """Production configuration."""

    DEBUG: bool = False


def get_config() -> type[BaseConfig]:
    """Resolve configuration class based on APP_ENV."""

    env = os.getenv("APP_ENV", "development").lower().strip()
    if env == "production":
        return ProductionConfig
    return DevelopmentConfig
