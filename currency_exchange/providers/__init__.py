"""Remote rate source: HTTP transport and the ticker API client."""

from .http_client import HTTPClient, HTTPClientConfig
from .rate_api import MOCK_CURRENCIES, CurrencyLoadMock, RateAPI

__all__ = [
    "CurrencyLoadMock",
    "HTTPClient",
    "HTTPClientConfig",
    "MOCK_CURRENCIES",
    "RateAPI",
]
