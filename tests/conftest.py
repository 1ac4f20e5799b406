"""Shared pytest fixtures."""

from __future__ import annotations

import json
import sys
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from currency_exchange.services import InMemorySettings, RatesCache, RatesService  # noqa: E402


@pytest.fixture()
def cache_dir(tmp_path: Path) -> Path:
    return tmp_path / "cache"


@pytest.fixture()
def settings() -> InMemorySettings:
    return InMemorySettings()


@pytest.fixture()
def rates_cache(cache_dir: Path, settings: InMemorySettings) -> RatesCache:
    return RatesCache(cache_dir, settings)


@pytest.fixture()
def make_service(rates_cache: RatesCache) -> Iterator[Callable[..., RatesService]]:
    """Build services that are closed after the test; waits for the restore by default."""

    services: list[RatesService] = []

    def _factory(rate_api, *, cache: RatesCache | None = None, clock=None, wait_restore: bool = True):
        kwargs = {"clock": clock} if clock is not None else {}
        service = RatesService(cache or rates_cache, rate_api, **kwargs)
        services.append(service)
        if wait_restore:
            service.restore_future.result(timeout=5)
        return service

    yield _factory

    for service in services:
        service.close()


@pytest.fixture(scope="session")
def fixtures_dir() -> Path:
    """Return the path to bundled JSON fixtures."""

    return ROOT_DIR / "tests" / "fixtures"


@pytest.fixture()
def write_rates_file(cache_dir: Path) -> Callable[[dict], Path]:
    def _writer(payload: dict) -> Path:
        cache_dir.mkdir(parents=True, exist_ok=True)
        path = cache_dir / "rates.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    return _writer
