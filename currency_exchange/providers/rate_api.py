"""Client for the remote ticker service: currency list and rate quotes."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from time import perf_counter
from typing import Any

from currency_exchange.errors import RateAPIError, RateDecodingError
from currency_exchange.logging import service_log_extra
from currency_exchange.models import Rate, normalize_code

from .http_client import HTTPClient, HTTPClientConfig

logger = logging.getLogger(__name__)

RATES_PATH = "/tickers"
CURRENCIES_PATH = "/tickers-currencies"
RATES_ATTEMPTS = 3
CURRENCIES_ATTEMPTS = 1

MOCK_CURRENCIES = ("MXN", "ARS", "BRL", "COP")
DEFAULT_MOCK_DELAY_MS = 3000


@dataclass(frozen=True)
class CurrencyLoadMock:
    """Replace the currency list request with a fixed, delayed answer.

    ``delay_ms is None`` means the mock is disabled and the network is used.
    """

    delay_ms: int | None = None

    @classmethod
    def disabled(cls) -> CurrencyLoadMock:
        return cls(delay_ms=None)

    @classmethod
    def emulate(cls, milliseconds: int) -> CurrencyLoadMock:
        if milliseconds < 0:
            raise ValueError("Emulated delay cannot be negative.")
        return cls(delay_ms=int(milliseconds))

    @classmethod
    def enabled(cls) -> CurrencyLoadMock:
        return cls.emulate(DEFAULT_MOCK_DELAY_MS)

    @classmethod
    def parse(cls, value: str | None) -> CurrencyLoadMock:
        """Parse ``disabled``, ``enabled`` or ``emulate:<ms>``."""

        normalized = (value or "disabled").strip().lower()
        if normalized == "disabled":
            return cls.disabled()
        if normalized == "enabled":
            return cls.enabled()
        prefix, _, milliseconds = normalized.partition(":")
        if prefix == "emulate" and milliseconds.isdigit():
            return cls.emulate(int(milliseconds))
        raise ValueError(f"Unsupported currency load mock '{value}'")

    @property
    def is_enabled(self) -> bool:
        return self.delay_ms is not None


class RateAPI:
    """Fetches the supported currency list and ask/bid quotes for those currencies."""

    name = "rates_api"

    def __init__(
        self,
        client: HTTPClient,
        currency_load_mock: CurrencyLoadMock | None = None,
        *,
        rates_attempts: int = RATES_ATTEMPTS,
        currencies_attempts: int = CURRENCIES_ATTEMPTS,
    ) -> None:
        self._client = client
        self._currency_load_mock = currency_load_mock or CurrencyLoadMock.disabled()
        self._rates_attempts = rates_attempts
        self._currencies_attempts = currencies_attempts

    @classmethod
    def from_config(cls, config: Any, session=None) -> RateAPI:
        client_config = HTTPClientConfig(
            base_url=config.rates_api_base_url(),
            timeout=float(getattr(config, "REQUEST_TIMEOUT_SECONDS", 10)),
            max_retries=int(getattr(config, "RATES_API_MAX_RETRIES", RATES_ATTEMPTS)),
            backoff_seconds=float(getattr(config, "RATES_API_BACKOFF_SECONDS", 0.5)),
        )
        return cls(
            HTTPClient(client_config, session=session),
            CurrencyLoadMock.parse(getattr(config, "CURRENCY_LOAD_MOCK", "disabled")),
            rates_attempts=client_config.max_retries,
            currencies_attempts=int(getattr(config, "CURRENCIES_API_MAX_RETRIES", CURRENCIES_ATTEMPTS)),
        )

    def fetch_rates(self, currency_ids: Iterable[str]) -> list[Rate]:
        """Fetch quotes for ``currency_ids``; one undecodable entry fails the batch."""

        codes = [normalize_code(code) for code in currency_ids]
        params = {"currencies": ",".join(codes)}
        payload = self._get(RATES_PATH, params=params, max_attempts=self._rates_attempts)
        if not isinstance(payload, list):
            raise RateDecodingError(f"Expected a JSON array of rates, got {type(payload).__name__}")
        return [Rate.from_json(item) for item in payload]

    def fetch_currencies(self) -> list[str]:
        if self._currency_load_mock.is_enabled:
            return self._emulate_currencies()

        payload = self._get(CURRENCIES_PATH, max_attempts=self._currencies_attempts)
        return self._decode_currencies(payload)

    def _emulate_currencies(self) -> list[str]:
        delay_ms = self._currency_load_mock.delay_ms or 0
        logger.debug("Emulating currency list request with %sms delay", delay_ms)
        time.sleep(delay_ms / 1000)
        return list(MOCK_CURRENCIES)

    @staticmethod
    def _decode_currencies(payload: Any) -> list[str]:
        if not isinstance(payload, Sequence) or isinstance(payload, str | bytes):
            raise RateDecodingError(
                f"Expected a JSON array of currency codes, got {type(payload).__name__}"
            )
        codes: list[str] = []
        for item in payload:
            if not isinstance(item, str):
                raise RateDecodingError(f"Currency code must be a string, got {item!r}")
            try:
                codes.append(normalize_code(item))
            except ValueError as exc:
                raise RateDecodingError(str(exc)) from exc
        return codes

    def _get(
        self,
        path: str,
        params: Mapping[str, Any] | None = None,
        *,
        max_attempts: int,
    ) -> Any:
        start = perf_counter()
        try:
            payload = self._client.get(path, params=params, max_attempts=max_attempts)
        except RateAPIError as exc:
            logger.warning(
                "Rate API request failed: %s",
                exc,
                extra=service_log_extra(
                    event="rates_api.fetch",
                    status="error",
                    source=self.name,
                    duration_ms=(perf_counter() - start) * 1000,
                    path=path,
                    error=str(exc),
                ),
            )
            raise
        logger.info(
            "Rate API request succeeded",
            extra=service_log_extra(
                event="rates_api.fetch",
                status="success",
                source=self.name,
                duration_ms=(perf_counter() - start) * 1000,
                path=path,
            ),
        )
        return payload
