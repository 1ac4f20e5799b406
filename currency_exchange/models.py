"""Rate value object and the JSON encoding shared by the wire format and the cache."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict

from .errors import RateDecodingError
from .utils.datetime import ensure_utc, format_rate_date, parse_rate_date

HOME_CURRENCY_ID = "USDC"
BOOK_PREFIX = "usdc_"

RateSet = Dict[str, "Rate"]


def normalize_code(code: str) -> str:
    if not isinstance(code, str) or not code.strip():
        raise ValueError("Currency code cannot be blank.")
    normalized = code.strip().upper()
    if not normalized.isascii():
        raise ValueError(f"Currency code must be ASCII: {code!r}")
    return normalized


@dataclass(frozen=True)
class Rate:
    """Latest quote of one foreign currency against the home currency."""

    currency_id: str
    ask: float
    bid: float
    date: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "currency_id", normalize_code(self.currency_id))
        object.__setattr__(self, "ask", _positive_float("ask", self.ask))
        object.__setattr__(self, "bid", _positive_float("bid", self.bid))
        object.__setattr__(self, "date", ensure_utc(self.date))

    @property
    def book(self) -> str:
        return BOOK_PREFIX + self.currency_id.lower()

    @classmethod
    def from_json(cls, payload: Any) -> Rate:
        """Decode a ``{"ask", "bid", "book", "date"}`` object.

        Raises:
            RateDecodingError: On a missing field, a ``book`` without the
                ``usdc_`` prefix, a non-numeric price or a malformed date.
        """

        if not isinstance(payload, Mapping):
            raise RateDecodingError(f"Rate payload must be an object, got {type(payload).__name__}")

        book = payload.get("book")
        if not isinstance(book, str):
            raise RateDecodingError("`book` value was not decoded")
        if not book.startswith(BOOK_PREFIX):
            raise RateDecodingError(f"`book` value has no prefix `{BOOK_PREFIX}`: {book!r}")

        ask = _decode_double(payload, "ask")
        bid = _decode_double(payload, "bid")

        try:
            date = parse_rate_date(payload["date"])
        except KeyError as exc:
            raise RateDecodingError("`date` value was not decoded") from exc
        except ValueError as exc:
            raise RateDecodingError(f"`date` value is invalid: {exc}") from exc

        try:
            return cls(currency_id=book[len(BOOK_PREFIX):], ask=ask, bid=bid, date=date)
        except ValueError as exc:
            raise RateDecodingError(str(exc)) from exc

    def to_json(self) -> dict[str, Any]:
        return {
            "ask": self.ask,
            "bid": self.bid,
            "book": self.book,
            "date": format_rate_date(self.date),
        }


def merge_rates(existing: Mapping[str, Rate] | None, rates: Iterable[Rate]) -> RateSet:
    """Merge ``rates`` over ``existing``; known codes are overwritten, never dropped."""

    merged: RateSet = dict(existing or {})
    for rate in rates:
        merged[rate.currency_id] = rate
    return merged


def encode_rate_set(rates: Mapping[str, Rate]) -> dict[str, dict[str, Any]]:
    return {code: rate.to_json() for code, rate in rates.items()}


def decode_rate_set(payload: Any) -> RateSet:
    """Decode a persisted ``code -> rate`` object, keyed by the decoded ``book`` code."""

    if not isinstance(payload, Mapping):
        raise RateDecodingError("Cached rate set must be a JSON object")
    return merge_rates(None, (Rate.from_json(item) for item in payload.values()))


def _positive_float(name: str, value: Any) -> float:
    number = float(value)
    if math.isnan(number) or number <= 0:
        raise ValueError(f"Rate {name} must be positive, got {value!r}")
    return number


def _decode_double(payload: Mapping[str, Any], key: str) -> float:
    try:
        value = payload[key]
    except KeyError as exc:
        raise RateDecodingError(f"`{key}` value was not decoded") from exc

    if isinstance(value, bool):
        raise RateDecodingError(f"`{key}` must be numeric, got a boolean")
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError as exc:
            raise RateDecodingError(f"`{key}` is not a numeric string: {value!r}") from exc
    raise RateDecodingError(f"`{key}` must be a number or numeric string, got {type(value).__name__}")
