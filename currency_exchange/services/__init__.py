"""Service layer modules."""

from .conversion import convert
from .rates_cache import RATES_FILE_NAME, SELECTED_CURRENCY_ID_KEY, RatesCache
from .rates_service import RATE_EXPIRE_INTERVAL, RatesService
from .scheduler import init_scheduler, shutdown_scheduler
from .settings_store import InMemorySettings, JSONFileSettings, SettingsStore
from .subscriptions import SubscriberRegistry, Subscription, SubscriptionClosed

__all__ = [
    "InMemorySettings",
    "JSONFileSettings",
    "RATES_FILE_NAME",
    "RATE_EXPIRE_INTERVAL",
    "RatesCache",
    "RatesService",
    "SELECTED_CURRENCY_ID_KEY",
    "SettingsStore",
    "SubscriberRegistry",
    "Subscription",
    "SubscriptionClosed",
    "convert",
    "init_scheduler",
    "shutdown_scheduler",
]
