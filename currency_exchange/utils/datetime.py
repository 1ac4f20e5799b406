"""Shared datetime helpers for enforcing UTC awareness."""

from __future__ import annotations

from datetime import UTC, datetime

RATE_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"
RATE_FRACTION_DIGITS = 9


def ensure_utc(value: datetime) -> datetime:
    """Return a timezone-aware datetime in UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def utc_now() -> datetime:
    """Return the current UTC datetime."""

    return datetime.now(UTC)


def format_rate_date(value: datetime) -> str:
    """Render a timestamp as ``yyyy-MM-ddTHH:mm:ss`` plus nine fractional digits.

    Python keeps microseconds, so the last three nanosecond digits are always zero.
    """

    normalized = ensure_utc(value)
    fraction = f"{normalized.microsecond:06d}".ljust(RATE_FRACTION_DIGITS, "0")
    return f"{normalized.strftime(RATE_DATE_FORMAT)}.{fraction}"


def parse_rate_date(value: str) -> datetime:
    """Parse a rate timestamp, truncating sub-microsecond digits.

    Raises:
        ValueError: If the string does not follow the rate date format.
    """

    if not isinstance(value, str):
        raise ValueError(f"Rate date must be a string, got {type(value).__name__}")

    seconds_part, separator, fraction = value.partition(".")
    parsed = datetime.strptime(seconds_part, RATE_DATE_FORMAT)
    if separator:
        if not fraction.isdigit() or len(fraction) > RATE_FRACTION_DIGITS:
            raise ValueError(f"Invalid fractional seconds in rate date: {value!r}")
        parsed = parsed.replace(microsecond=int(fraction[:6].ljust(6, "0")))
    return parsed.replace(tzinfo=UTC)
