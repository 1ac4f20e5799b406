"""Requests-based GET client with bounded retries and jittered backoff."""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import requests
from requests import Response, Session
from requests.exceptions import JSONDecodeError, RequestException

from currency_exchange.errors import DataDecodingError, DataFetchingError

logger = logging.getLogger(__name__)


class HTTPStatusError(RuntimeError):
    """Error status from the server; counts as a failed attempt."""

    def __init__(self, status_code: int, detail: str = "") -> None:
        kind = "Server" if status_code >= 500 else "Client"
        super().__init__(f"{kind} error {status_code}" + (f": {detail}" if detail else ""))
        self.status_code = status_code


@dataclass(frozen=True)
class HTTPClientConfig:
    """Connection and retry settings for one remote host."""

    base_url: str
    timeout: float = 10.0
    max_retries: int = 3
    backoff_seconds: float = 0.5
    backoff_jitter: float = 0.2


class HTTPClient:
    """GET JSON documents, retrying transport failures and error statuses.

    ``max_retries`` is the total number of attempts. A body that is not valid JSON
    fails immediately, since asking again would not change it.
    """

    def __init__(self, config: HTTPClientConfig, session: Session | None = None) -> None:
        self._config = config
        self._session = session or requests.Session()

    @property
    def config(self) -> HTTPClientConfig:
        return self._config

    def get(
        self,
        path: str,
        params: Mapping[str, Any] | None = None,
        *,
        max_attempts: int | None = None,
    ) -> Any:
        url = f"{self._config.base_url.rstrip('/')}/{path.lstrip('/')}"
        if max_attempts is None:
            max_attempts = self._config.max_retries
        response = self._get_with_retries(url, params, max(1, max_attempts))
        try:
            return response.json()
        except (JSONDecodeError, ValueError) as exc:
            raise DataDecodingError(f"Invalid JSON response from {url}") from exc

    def _get_with_retries(
        self, url: str, params: Mapping[str, Any] | None, attempts: int
    ) -> Response:
        failure: Exception | None = None
        for attempt in range(1, attempts + 1):
            try:
                response = self._session.get(url, params=params, timeout=self._config.timeout)
                if response.status_code >= 400:
                    detail = response.text if response.status_code < 500 else ""
                    raise HTTPStatusError(response.status_code, detail)
                return response
            except (RequestException, HTTPStatusError) as exc:
                failure = exc
            if attempt == attempts:
                break
            delay = self._backoff(attempt)
            logger.warning(
                "GET %s failed (attempt %s/%s): %s; retrying in %.2fs",
                url,
                attempt,
                attempts,
                failure,
                delay,
            )
            time.sleep(delay)

        raise DataFetchingError(
            f"Failed to fetch {url} after {attempts} attempt(s): {failure}",
            status_code=getattr(failure, "status_code", None),
        ) from failure

    def _backoff(self, attempt: int) -> float:
        jitter = self._config.backoff_jitter
        delay = self._config.backoff_seconds * 2 ** (attempt - 1) + random.uniform(-jitter, jitter)
        return max(delay, 0.0)
