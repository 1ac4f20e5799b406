from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from requests import Response
from requests.exceptions import ConnectionError as RequestsConnectionError

from currency_exchange.errors import DataDecodingError, DataFetchingError
from currency_exchange.providers.http_client import HTTPClient, HTTPClientConfig


def make_response(status_code: int, json_data=None) -> Response:
    resp = MagicMock(spec=Response)
    resp.status_code = status_code
    resp.text = "error"
    if json_data is None:
        resp.json.side_effect = ValueError("no json")  # type: ignore[attr-defined]
    else:
        resp.json.return_value = json_data  # type: ignore[attr-defined]
    return resp


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr("time.sleep", lambda *_: None)
    monkeypatch.setattr("random.uniform", lambda *_: 0)


def test_http_client_success():
    session = MagicMock()
    config = HTTPClientConfig(base_url="https://example.com/v1", max_retries=1)
    client = HTTPClient(config=config, session=session)
    session.get.return_value = make_response(200, ["MXN"])

    payload = client.get("/tickers-currencies", params={"foo": "bar"})

    assert payload == ["MXN"]
    session.get.assert_called_once_with(
        "https://example.com/v1/tickers-currencies", params={"foo": "bar"}, timeout=config.timeout
    )


def test_http_client_retries_then_succeeds():
    session = MagicMock()
    config = HTTPClientConfig(base_url="https://example.com", max_retries=2, backoff_seconds=0)
    client = HTTPClient(config=config, session=session)
    session.get.side_effect = [make_response(500), make_response(200, {"value": 1})]

    payload = client.get("/data")

    assert payload == {"value": 1}
    assert session.get.call_count == 2


def test_http_client_retries_transport_errors_until_exhausted():
    session = MagicMock()
    config = HTTPClientConfig(base_url="https://example.com", max_retries=3, backoff_seconds=0)
    client = HTTPClient(config=config, session=session)
    session.get.side_effect = RequestsConnectionError("offline")

    with pytest.raises(DataFetchingError) as exc_info:
        client.get("/data")

    assert "Failed to fetch" in str(exc_info.value)
    assert exc_info.value.status_code is None
    assert session.get.call_count == 3


def test_http_client_reports_last_status_code():
    session = MagicMock()
    config = HTTPClientConfig(base_url="https://example.com", max_retries=2, backoff_seconds=0)
    client = HTTPClient(config=config, session=session)
    session.get.return_value = make_response(503)

    with pytest.raises(DataFetchingError) as exc_info:
        client.get("/data")

    assert exc_info.value.status_code == 503
    assert session.get.call_count == 2


def test_http_client_per_call_attempts_override_config():
    session = MagicMock()
    config = HTTPClientConfig(base_url="https://example.com", max_retries=3, backoff_seconds=0)
    client = HTTPClient(config=config, session=session)
    session.get.side_effect = RequestsConnectionError("offline")

    with pytest.raises(DataFetchingError):
        client.get("/data", max_attempts=0)

    assert session.get.call_count == 1


def test_http_client_does_not_retry_invalid_json():
    session = MagicMock()
    config = HTTPClientConfig(base_url="https://example.com", max_retries=3, backoff_seconds=0)
    client = HTTPClient(config=config, session=session)
    session.get.return_value = make_response(200)

    with pytest.raises(DataDecodingError):
        client.get("/data")

    session.get.assert_called_once()
