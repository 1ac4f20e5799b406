"""Rates service: authoritative in-memory rate state shared by every observer."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timedelta
from time import perf_counter
from typing import Protocol

from currency_exchange.errors import (
    LoadingFailedError,
    RateAPIError,
    RatesCacheError,
    RatesServiceError,
)
from currency_exchange.loadable import Loadable
from currency_exchange.logging import service_log_extra
from currency_exchange.models import Rate, RateSet, merge_rates, normalize_code
from currency_exchange.utils.datetime import utc_now

from .rates_cache import RatesCache
from .scheduler import shutdown_scheduler
from .subscriptions import SubscriberRegistry, Subscription

logger = logging.getLogger(__name__)

RATE_EXPIRE_INTERVAL = timedelta(hours=1)


class RateSource(Protocol):
    def fetch_currencies(self) -> list[str]: ...

    def fetch_rates(self, currency_ids: Sequence[str]) -> list[Rate]: ...


class RatesService:
    """Owns the rate set, the currency list and the selected rate.

    Every state change happens under one lock and is published to subscribers
    before the lock is released, so observers see transitions in order and never
    a half-applied update. Fetches run on the service executor outside the lock;
    cache writes go through a single-worker executor in submission order.

    Failure policy: while nothing was ever loaded ("cold"), a failed update moves
    all state to ``failed(LoadingFailedError)``. Once data is loaded ("warm"),
    failures are logged and the displayed data stays as it is.
    """

    name = "rates_service"

    def __init__(
        self,
        cache: RatesCache,
        rate_api: RateSource,
        *,
        clock: Callable[[], datetime] = utc_now,
        expire_interval: timedelta = RATE_EXPIRE_INTERVAL,
        max_workers: int = 4,
    ) -> None:
        self._cache = cache
        self._rate_api = rate_api
        self._clock = clock
        self._expire_interval = expire_interval
        self._lock = threading.RLock()
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="rates-service")
        # One worker keeps cache writes in submission order.
        self._persist_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="rates-persist")

        self._rates: Loadable[RateSet] = Loadable.loading()
        self._currencies: Loadable[list[str]] = Loadable.loading()
        self._selected_rate: Loadable[Rate] = Loadable.loading()
        self._currencies_subscribers: SubscriberRegistry[Loadable[list[str]]] = SubscriberRegistry()
        self._selected_rate_subscribers: SubscriberRegistry[Loadable[Rate]] = SubscriberRegistry()

        self.scheduler = None
        self.restore_future: Future[None] = self._executor.submit(self._restore_from_cache)

    # Observation -------------------------------------------------------------

    @property
    def current_selected_rate(self) -> Loadable[Rate]:
        return self._selected_rate

    @property
    def current_currencies(self) -> Loadable[list[str]]:
        return self._currencies

    @property
    def current_rates(self) -> Loadable[RateSet]:
        with self._lock:
            return self._rates.map(dict)

    def subscribe_selected_rate(self) -> Subscription[Loadable[Rate]]:
        with self._lock:
            return self._selected_rate_subscribers.subscribe(self._selected_rate)

    def subscribe_currencies(self) -> Subscription[Loadable[list[str]]]:
        with self._lock:
            return self._currencies_subscribers.subscribe(self._currencies)

    # Commands ----------------------------------------------------------------

    def update_rates(self) -> Future[None]:
        """Start a fetch cycle in the background; the future completes after it."""

        return self._executor.submit(self._update_rates)

    def select_rate(self, currency_id: str) -> bool:
        """Select a loaded currency; unknown codes and unloaded state are ignored."""

        try:
            code = normalize_code(currency_id)
        except ValueError:
            return False

        with self._lock:
            if not self._rates.is_loaded:
                return False
            rate = self._rates.value.get(code)  # type: ignore[union-attr]
            if rate is None:
                logger.debug("Ignoring selection of unknown currency %s", code)
                return False
            self._set_selected_rate(Loadable.loaded(rate))
            self._submit_background(self._cache.cache_selected_currency_id, code)
        return True

    # Expiry ------------------------------------------------------------------

    def expire_interval(self, rate: Rate) -> float:
        """Seconds until ``rate`` leaves the freshness window; negative once expired."""

        expire_date = rate.date + self._expire_interval
        return (expire_date - self._clock()).total_seconds()

    def is_rate_expired(self, rate: Rate) -> bool:
        return self.expire_interval(rate) < 0

    # Lifecycle ---------------------------------------------------------------

    def close(self, wait: bool = True) -> None:
        """Stop the scheduler and both executors; pending writes finish when ``wait``."""

        shutdown_scheduler(self)
        self._executor.shutdown(wait=wait)
        self._persist_executor.shutdown(wait=wait)

    def __enter__(self) -> RatesService:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # Internals ---------------------------------------------------------------

    def _restore_from_cache(self) -> None:
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="rates-restore") as pool:
            rates_future = pool.submit(self._cache.get_cached_rates)
            selected_future = pool.submit(self._cache.get_cached_selected_currency_id)
            cached_rates = rates_future.result()
            cached_selected_id = selected_future.result()

        with self._lock:
            if not (self._rates.is_loading and self._selected_rate.is_loading):
                logger.debug("Skipping cache restore; rates already resolved")
                return
            if not cached_rates:
                logger.info("No cached rates to restore")
                return
            self._apply_rates(list(cached_rates.values()), cached_selected_id)

        logger.info(
            "Restored cached rates",
            extra=service_log_extra(
                event="rates.restore",
                status="success",
                source=self.name,
                count=len(cached_rates),
            ),
        )

    def _update_rates(self) -> None:
        start = perf_counter()
        try:
            currencies = self._rate_api.fetch_currencies()
            if not currencies:
                raise LoadingFailedError("Currency list is empty")
            rates = self._rate_api.fetch_rates(currencies)
            with self._lock:
                previous = self._selected_rate
                selected_id = previous.value.currency_id if previous.is_loaded else None  # type: ignore[union-attr]
                self._apply_rates(rates, selected_id)
        except Exception as exc:
            self._handle_update_failure(exc, (perf_counter() - start) * 1000)
            return

        logger.info(
            "Rates updated",
            extra=service_log_extra(
                event="rates.update",
                status="success",
                source=self.name,
                duration_ms=(perf_counter() - start) * 1000,
                count=len(rates),
            ),
        )
        self._cache_current_state()

    def _apply_rates(self, rates: Sequence[Rate], selected_id: str | None) -> None:
        """Merge ``rates`` and pick the selection; caller holds the lock.

        The previous selection survives when its code is in the merged set,
        otherwise the first rate of ``rates`` is selected.
        """

        if not rates:
            raise LoadingFailedError("No rates to apply")

        existing = self._rates.value if self._rates.is_loaded else None
        merged = merge_rates(existing, rates)
        self._set_rates(Loadable.loaded(merged))

        selected = merged.get(selected_id) if selected_id else None
        self._set_selected_rate(Loadable.loaded(selected or rates[0]))

    def _handle_update_failure(self, error: Exception, duration_ms: float) -> None:
        with self._lock:
            cold = (
                self._rates.is_loading
                and self._currencies.is_loading
                and self._selected_rate.is_loading
            )
            if cold:
                failure = LoadingFailedError()
                self._set_rates(Loadable.failed(failure))
                self._set_selected_rate(Loadable.failed(failure))

        log = logger.error if cold else logger.warning
        log(
            "Rates update failed: %s",
            error,
            exc_info=not isinstance(error, (RateAPIError, RatesServiceError)),
            extra=service_log_extra(
                event="rates.update",
                status="failed" if cold else "absorbed",
                source=self.name,
                duration_ms=duration_ms,
                error=str(error),
            ),
        )

    def _set_rates(self, rates: Loadable[RateSet]) -> None:
        self._rates = rates
        self._currencies = rates.map(list)
        self._currencies_subscribers.publish(self._currencies)

    def _set_selected_rate(self, rate: Loadable[Rate]) -> None:
        self._selected_rate = rate
        self._selected_rate_subscribers.publish(rate)

    def _cache_current_state(self) -> None:
        # Submitted under the lock so writes queue in the same order as state changes.
        with self._lock:
            if self._rates.is_loaded:
                self._submit_background(self._persist_rates, list(self._rates.value.values()))  # type: ignore[union-attr]
            if self._selected_rate.is_loaded:
                self._submit_background(
                    self._cache.cache_selected_currency_id,
                    self._selected_rate.value.currency_id,  # type: ignore[union-attr]
                )

    def _persist_rates(self, rates: list[Rate]) -> None:
        try:
            self._cache.cache_rates(rates)
        except RatesCacheError as exc:
            logger.warning(
                "Failed to persist rates: %s",
                exc,
                extra=service_log_extra(
                    event="rates.persist",
                    status="error",
                    source=self.name,
                    error=str(exc),
                ),
            )

    def _submit_background(self, fn: Callable[..., object], *args: object) -> None:
        try:
            self._persist_executor.submit(fn, *args)
        except RuntimeError:
            logger.debug("Executor closed; skipping background %s", getattr(fn, "__name__", fn))
