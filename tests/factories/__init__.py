"""Helper factories for building rates, payloads and fake collaborators in tests."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from currency_exchange.errors import DataFetchingError
from currency_exchange.models import Rate

OBSERVED_AT = datetime(2025, 11, 8, 12, 0, tzinfo=UTC)


def make_rate(code: str, ask: float = 18.5, bid: float = 18.1, date: datetime = OBSERVED_AT) -> Rate:
    """Return a rate quoted against the home currency."""

    return Rate(currency_id=code, ask=ask, bid=bid, date=date)


def make_rate_payload(
    code: str = "mxn",
    ask: Any = 18.5,
    bid: Any = 18.1,
    date: str = "2025-11-08T12:00:00.000000000",
) -> dict[str, Any]:
    """Return a ticker payload in wire format."""

    return {"ask": ask, "bid": bid, "book": f"usdc_{code}", "date": date}


class FakeRateAPI:
    """Rate source answering from queued responses; queued exceptions are raised."""

    def __init__(self, currencies=None, rates=None):
        self.currencies_responses = list(currencies or [])
        self.rates_responses = list(rates or [])
        self.currencies_calls = 0
        self.rates_calls: list[list[str]] = []

    def fetch_currencies(self) -> list[str]:
        self.currencies_calls += 1
        return list(self._next(self.currencies_responses))

    def fetch_rates(self, currency_ids) -> list[Rate]:
        self.rates_calls.append(list(currency_ids))
        return list(self._next(self.rates_responses))

    @staticmethod
    def _next(responses):
        if not responses:
            raise DataFetchingError("No response available")
        result = responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result
