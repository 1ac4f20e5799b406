"""Rate-management core for the currency exchange app."""

from __future__ import annotations

from datetime import timedelta

from requests import Session

from config import get_config

from .loadable import Loadable, LoadState
from .logging import setup_logging
from .models import HOME_CURRENCY_ID, Rate
from .providers import CurrencyLoadMock, RateAPI
from .services import (
    JSONFileSettings,
    RatesCache,
    RatesService,
    Subscription,
    SubscriptionClosed,
    convert,
    init_scheduler,
)

__all__ = [
    "CurrencyLoadMock",
    "HOME_CURRENCY_ID",
    "LoadState",
    "Loadable",
    "Rate",
    "RateAPI",
    "RatesCache",
    "RatesService",
    "Subscription",
    "SubscriptionClosed",
    "convert",
    "create_rates_service",
]


def create_rates_service(
    config_name: str | None = None,
    *,
    cache_dir: str | None = None,
    session: Session | None = None,
) -> RatesService:
    """Build a fully wired rates service for the configured environment."""

    config = get_config(config_name)
    setup_logging(config)

    directory = cache_dir if cache_dir is not None else config.RATES_CACHE_DIR
    cache = RatesCache(directory, JSONFileSettings(directory))
    rate_api = RateAPI.from_config(config, session=session)
    service = RatesService(
        cache,
        rate_api,
        expire_interval=timedelta(seconds=config.RATE_EXPIRE_SECONDS),
        max_workers=config.RATES_SERVICE_MAX_WORKERS,
    )
    init_scheduler(service, config)
    return service
