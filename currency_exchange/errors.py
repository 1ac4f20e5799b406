"""Error taxonomy shared by the rate client, the cache and the rates service."""

from __future__ import annotations


class CurrencyExchangeError(Exception):
    """Base class for every error raised by the package."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    default_message = "Currency exchange operation failed."


# Rate source client -------------------------------------------------------


class RateAPIError(CurrencyExchangeError):
    """Raised when the remote rate service cannot satisfy a request."""

    default_message = "Rate API request failed."


class DataFetchingError(RateAPIError):
    """Transport failure that survived every retry attempt."""

    default_message = "Rate data could not be fetched."

    def __init__(self, message: str | None = None, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DataDecodingError(RateAPIError):
    """Response body is not valid JSON."""

    default_message = "Response body could not be decoded."


class RateDecodingError(RateAPIError):
    """Response JSON does not have the expected shape or field values."""

    default_message = "Rate payload could not be decoded."


# Persistent store ---------------------------------------------------------


class RatesCacheError(CurrencyExchangeError):
    """Raised by the persistent rate cache."""

    default_message = "Rates cache operation failed."


class CacheDirectoryNotFound(RatesCacheError):
    default_message = "Cache directory is not configured or does not exist."


class FileContentNotFound(RatesCacheError):
    default_message = "Cached file has no content."


class DataEncodingError(RatesCacheError):
    default_message = "Rates could not be encoded for the cache."


class CacheDecodingError(RatesCacheError):
    default_message = "Cached rates could not be decoded."


class CacheWriteError(RatesCacheError):
    default_message = "Cached rates could not be written."


# Rates service ------------------------------------------------------------


class RatesServiceError(CurrencyExchangeError):
    """Coarse-grained failures surfaced to rate observers."""

    default_message = "Rates service failure."

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other)

    def __hash__(self) -> int:
        return hash(type(self))


class LoadingFailedError(RatesServiceError):
    """Rates could not be loaded and nothing was loaded before."""

    default_message = "Rates loading failed."
