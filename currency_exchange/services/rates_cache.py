"""Persistent store for the last known rate set and the selected currency."""

from __future__ import annotations

import json
import logging
import os
import threading
from collections.abc import Iterable
from pathlib import Path

from currency_exchange.errors import (
    CacheDecodingError,
    CacheDirectoryNotFound,
    CacheWriteError,
    DataEncodingError,
    FileContentNotFound,
    RateDecodingError,
    RatesCacheError,
)
from currency_exchange.models import Rate, RateSet, decode_rate_set, encode_rate_set, merge_rates
from currency_exchange.utils.files import atomic_write_text

from .settings_store import SettingsStore

logger = logging.getLogger(__name__)

SELECTED_CURRENCY_ID_KEY = "selectedCurrencyID"
RATES_FILE_NAME = "rates.json"


class RatesCache:
    """Offline copy of the rate set and the user's selected currency.

    The on-disk state is restored once, on a background thread started by the
    constructor. Readers that arrive before the restore finished wait for it and then
    get the restored value; readers never see "no cache" just because the restore is
    still running. Writes go through one lock, so read-merge-write cycles on
    ``rates.json`` never lose updates.
    """

    def __init__(
        self,
        cache_dir: str | os.PathLike[str] | None,
        settings: SettingsStore,
        *,
        restore_in_background: bool = True,
    ) -> None:
        self._cache_dir = Path(cache_dir) if cache_dir is not None else None
        self._settings = settings
        self._lock = threading.Lock()

        self._rates: RateSet | None = None
        self._rates_ready = threading.Event()
        self._selected_currency_id: str | None = None
        self._selected_ready = threading.Event()

        if restore_in_background:
            threading.Thread(target=self.restore, name="rates-cache-restore", daemon=True).start()

    @property
    def rates_path(self) -> Path | None:
        if self._cache_dir is None:
            return None
        return self._cache_dir / RATES_FILE_NAME

    def wait_restored(self, timeout: float | None = None) -> bool:
        """Block until both cached values are resolved; False on timeout."""

        return self._rates_ready.wait(timeout) and self._selected_ready.wait(timeout)

    def restore(self) -> None:
        """Load both cached values unless a write already resolved them."""

        with self._lock:
            if not self._rates_ready.is_set():
                try:
                    self._rates = self._restore_rates()
                finally:
                    self._rates_ready.set()

        with self._lock:
            if not self._selected_ready.is_set():
                try:
                    self._selected_currency_id = self._restore_selected_currency_id()
                finally:
                    self._selected_ready.set()

    def get_cached_rates(self) -> RateSet | None:
        self._rates_ready.wait()
        with self._lock:
            return dict(self._rates) if self._rates is not None else None

    def get_cached_selected_currency_id(self) -> str | None:
        self._selected_ready.wait()
        with self._lock:
            return self._selected_currency_id

    def cache_rates(self, rates: Iterable[Rate]) -> RateSet:
        """Merge ``rates`` into the cached set and rewrite ``rates.json``.

        Raises:
            CacheDirectoryNotFound: No cache directory is configured.
            DataEncodingError: The merged set cannot be serialised.
            CacheWriteError: The file cannot be written.
        """

        with self._lock:
            if not self._rates_ready.is_set():
                self._rates = self._restore_rates()
            merged = merge_rates(self._rates, rates)
            self._rates = merged
            self._rates_ready.set()
            self._write_rates(merged)
        logger.debug("Cached %s rate(s)", len(merged))
        return dict(merged)

    def cache_selected_currency_id(self, currency_id: str) -> None:
        """Remember the selection; persistence is best-effort and never raises."""

        with self._lock:
            self._selected_currency_id = currency_id
            self._selected_ready.set()
            try:
                self._settings.set_string(SELECTED_CURRENCY_ID_KEY, currency_id)
            except (OSError, TypeError, ValueError) as exc:
                logger.warning("Failed to persist selected currency %s: %s", currency_id, exc)

    def _restore_rates(self) -> RateSet | None:
        try:
            return self._read_rates()
        except FileNotFoundError:
            logger.debug("No cached rates at %s", self.rates_path)
        except (RatesCacheError, OSError) as exc:
            logger.warning("Ignoring unreadable rates cache: %s", exc)
        return None

    def _restore_selected_currency_id(self) -> str | None:
        try:
            return self._settings.get_string(SELECTED_CURRENCY_ID_KEY)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable selected currency: %s", exc)
        return None

    def _read_rates(self) -> RateSet:
        path = self._require_path()
        try:
            raw = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise CacheDecodingError(f"{path} is not UTF-8 text") from exc
        if not raw.strip():
            raise FileContentNotFound(f"{path} is empty")
        try:
            return decode_rate_set(json.loads(raw))
        except (ValueError, RateDecodingError) as exc:
            raise CacheDecodingError(f"{path}: {exc}") from exc

    def _write_rates(self, rates: RateSet) -> None:
        path = self._require_path()
        try:
            content = json.dumps(encode_rate_set(rates), indent=2)
        except (TypeError, ValueError) as exc:
            raise DataEncodingError(str(exc)) from exc
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            atomic_write_text(path, content)
        except OSError as exc:
            raise CacheWriteError(f"Could not write {path}: {exc}") from exc

    def _require_path(self) -> Path:
        path = self.rates_path
        if path is None:
            raise CacheDirectoryNotFound()
        return path
