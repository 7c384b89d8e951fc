"""Application configuration classes."""

from __future__ import annotations

import os

SUPPORTED_RATE_PROVIDERS = {"exchangerate_api", "mock"}
PROVIDER_ALIASES = {"exchangerate-api": "exchangerate_api", "exchangerateapi": "exchangerate_api"}


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value is not None else default


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "money-calculator"
    SECRET_KEY = _get_env("SECRET_KEY", "change-me")

    FX_RATE_PROVIDER = _get_env("FX_RATE_PROVIDER", "exchangerate_api")
    EXCHANGE_RATE_API_BASE_URL = _get_env(
        "EXCHANGE_RATE_API_BASE_URL", "https://v6.exchangerate-api.com"
    )
    EXCHANGE_RATE_API_KEY = _get_env("EXCHANGE_RATE_API_KEY", "")
    REQUEST_TIMEOUT_SECONDS = int(_get_env("REQUEST_TIMEOUT_SECONDS", "10"))
    EXCHANGE_RATE_API_MAX_RETRIES = int(_get_env("EXCHANGE_RATE_API_MAX_RETRIES", "3"))
    EXCHANGE_RATE_API_BACKOFF_SECONDS = float(_get_env("EXCHANGE_RATE_API_BACKOFF_SECONDS", "0.5"))

    RATE_CACHE_VALIDITY_MINUTES = int(_get_env("RATE_CACHE_VALIDITY_MINUTES", "30"))
    RATE_CACHE_TIMEZONE = _get_env("RATE_CACHE_TIMEZONE", "UTC")
    CACHE_SWEEP_ENABLED = _get_env("CACHE_SWEEP_ENABLED", "true").lower() == "true"
    CACHE_SWEEP_CRON = _get_env("CACHE_SWEEP_CRON", "*/10 * * * *")
    SCHEDULER_TIMEZONE = _get_env("SCHEDULER_TIMEZONE", "UTC")

    LOG_LEVEL = _get_env("LOG_LEVEL", "INFO")
    LOG_JSON_ENABLED = _get_env("LOG_JSON_ENABLED", "false").lower() == "true"
    LOG_FORMAT = _get_env("LOG_FORMAT", "%(asctime)s %(levelname)s [%(name)s] %(message)s")


class DevelopmentConfig(BaseConfig):
    """Configuration for local development."""

    DEBUG = True
    TESTING = False


class ProductionConfig(BaseConfig):
    """Configuration for production deployments."""

    DEBUG = False
    TESTING = False


CONFIG_BY_ENV = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
}


def get_config(config_name: str | None = None) -> type[BaseConfig]:
    """Return the config class for the requested environment.

    Args:
        config_name: Optional explicit config identifier. If omitted, the
            APP_ENV environment variable is consulted.

    Raises:
        KeyError: If the requested configuration is not defined.
        ValueError: If the provider or cache settings are invalid.
    """

    env_candidate = config_name if config_name is not None else os.getenv("APP_ENV", "development")
    env_name = (env_candidate or "development").lower()
    try:
        config_cls = CONFIG_BY_ENV[env_name]
    except KeyError as exc:
        raise KeyError(f"Unknown APP_ENV '{env_name}'") from exc

    _validate_provider(config_cls)
    _validate_cache(config_cls)
    return config_cls


def _validate_provider(config_cls: type[BaseConfig]) -> None:
    normalized = _normalize_provider(config_cls.FX_RATE_PROVIDER)
    if normalized not in SUPPORTED_RATE_PROVIDERS:
        raise ValueError(
            f"Unsupported FX_RATE_PROVIDER '{config_cls.FX_RATE_PROVIDER}'. "
            f"Allowed values: {sorted(SUPPORTED_RATE_PROVIDERS)}"
        )
    config_cls.FX_RATE_PROVIDER = normalized


def _validate_cache(config_cls: type[BaseConfig]) -> None:
    if config_cls.RATE_CACHE_VALIDITY_MINUTES < 0:
        raise ValueError(
            "RATE_CACHE_VALIDITY_MINUTES must be non-negative, "
            f"got {config_cls.RATE_CACHE_VALIDITY_MINUTES}"
        )


def _normalize_provider(value: str | None) -> str:
    if not value:
        return ""
    normalized = value.strip().lower()
    return PROVIDER_ALIASES.get(normalized, normalized)
