"""Application configuration classes."""

from __future__ import annotations

import os
import re

CURRENCY_LOAD_MOCK_PATTERN = re.compile(r"^(disabled|enabled|emulate:\d+)$")


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value is not None else default


def _default_cache_dir() -> str:
    xdg_cache = os.getenv("XDG_CACHE_HOME") or os.path.join(os.path.expanduser("~"), ".cache")
    return os.path.join(xdg_cache, "currency-exchange")


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "currency-exchange"

    RATES_API_SCHEME = "https"
    RATES_API_HOST = "api.dolarapp.dev"
    RATES_API_VERSION = "v1"
    REQUEST_TIMEOUT_SECONDS = float(_get_env("REQUEST_TIMEOUT_SECONDS", "10"))
    RATES_API_MAX_RETRIES = int(_get_env("RATES_API_MAX_RETRIES", "3"))
    CURRENCIES_API_MAX_RETRIES = int(_get_env("CURRENCIES_API_MAX_RETRIES", "1"))
    RATES_API_BACKOFF_SECONDS = float(_get_env("RATES_API_BACKOFF_SECONDS", "0.5"))
    CURRENCY_LOAD_MOCK = _get_env("CURRENCY_LOAD_MOCK", "disabled")

    RATES_CACHE_DIR = _get_env("RATES_CACHE_DIR", _default_cache_dir())
    RATE_EXPIRE_SECONDS = int(_get_env("RATE_EXPIRE_SECONDS", "3600"))
    RATES_SERVICE_MAX_WORKERS = int(_get_env("RATES_SERVICE_MAX_WORKERS", "4"))

    SCHEDULER_ENABLED = _get_env("SCHEDULER_ENABLED", "false").lower() == "true"
    RATES_REFRESH_INTERVAL_SECONDS = int(_get_env("RATES_REFRESH_INTERVAL_SECONDS", "300"))

    LOG_LEVEL = _get_env("LOG_LEVEL", "INFO")
    LOG_JSON_ENABLED = _get_env("LOG_JSON_ENABLED", "false").lower() == "true"
    LOG_FORMAT = _get_env("LOG_FORMAT", "%(asctime)s %(levelname)s [%(name)s] %(message)s")

    @classmethod
    def rates_api_base_url(cls) -> str:
        return f"{cls.RATES_API_SCHEME}://{cls.RATES_API_HOST}/{cls.RATES_API_VERSION}"


class DevelopmentConfig(BaseConfig):
    """Configuration for local development."""

    DEBUG = True
    TESTING = False


class StagingConfig(BaseConfig):
    """Configuration for demo builds that emulate the currency list."""

    DEBUG = False
    TESTING = False
    CURRENCY_LOAD_MOCK = _get_env("CURRENCY_LOAD_MOCK", "enabled")


class ProductionConfig(BaseConfig):
    """Configuration for production deployments."""

    DEBUG = False
    TESTING = False


CONFIG_BY_ENV = {
    "development": DevelopmentConfig,
    "staging": StagingConfig,
    "production": ProductionConfig,
}


def get_config(config_name: str | None = None) -> type[BaseConfig]:
    """Return the config class for the requested environment.

    Args:
        config_name: Optional explicit config identifier. If omitted, the
            APP_ENV environment variable is consulted.

    Raises:
        KeyError: If the requested configuration is not defined.
        ValueError: If CURRENCY_LOAD_MOCK or the retry counts are invalid.
    """

    env_candidate = config_name if config_name is not None else os.getenv("APP_ENV", "development")
    env_name = (env_candidate or "development").lower()
    try:
        config_cls = CONFIG_BY_ENV[env_name]
    except KeyError as exc:
        raise KeyError(f"Unknown APP_ENV '{env_name}'") from exc

    _validate(config_cls)
    return config_cls


def _validate(config_cls: type[BaseConfig]) -> None:
    mock_value = str(config_cls.CURRENCY_LOAD_MOCK).strip().lower()
    if not CURRENCY_LOAD_MOCK_PATTERN.match(mock_value):
        raise ValueError(
            f"Unsupported CURRENCY_LOAD_MOCK '{config_cls.CURRENCY_LOAD_MOCK}'. "
            "Allowed values: 'disabled', 'enabled', 'emulate:<milliseconds>'"
        )
    config_cls.CURRENCY_LOAD_MOCK = mock_value

    if config_cls.RATES_API_MAX_RETRIES < 1 or config_cls.CURRENCIES_API_MAX_RETRIES < 1:
        raise ValueError("Rate API attempt counts must be at least 1.")
