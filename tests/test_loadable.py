from __future__ import annotations

from currency_exchange.errors import LoadingFailedError
from currency_exchange.loadable import Loadable, LoadState


def test_loading_passes_through_map():
    result = Loadable.loading().map(lambda value: value * 2)

    assert result == Loadable.loading()
    assert result.is_loading


def test_loaded_value_is_transformed():
    result = Loadable.loaded(3).map(lambda value: value * 2)

    assert result == Loadable.loaded(6)
    assert result.state is LoadState.LOADED


def test_failure_passes_through_map_and_compares_by_error_type():
    failed = Loadable.failed(LoadingFailedError("network down"))

    mapped = failed.map(lambda value: value * 2)

    assert mapped.is_failed
    assert mapped == Loadable.failed(LoadingFailedError())
    assert mapped != Loadable.loading()
