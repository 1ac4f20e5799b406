"""Tri-state container distinguishing "still loading" from "loaded" and "failed"."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from .errors import RatesServiceError

T = TypeVar("T")
U = TypeVar("U")


class LoadState(str, Enum):
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass(frozen=True)
class Loadable(Generic[T]):
    """Immutable load state published to rate observers.

    ``loading`` means no value is available yet. ``loaded`` carries a value and
    ``failed`` carries the domain error that ended loading.
    """

    state: LoadState
    value: T | None = None
    error: RatesServiceError | None = None

    @classmethod
    def loading(cls) -> Loadable[T]:
        return cls(state=LoadState.LOADING)

    @classmethod
    def loaded(cls, value: T) -> Loadable[T]:
        return cls(state=LoadState.LOADED, value=value)

    @classmethod
    def failed(cls, error: RatesServiceError) -> Loadable[T]:
        return cls(state=LoadState.FAILED, error=error)

    @property
    def is_loading(self) -> bool:
        return self.state is LoadState.LOADING

    @property
    def is_loaded(self) -> bool:
        return self.state is LoadState.LOADED

    @property
    def is_failed(self) -> bool:
        return self.state is LoadState.FAILED

    def map(self, transform: Callable[[T], U]) -> Loadable[U]:
        """Transform a loaded value; loading and failed states pass through."""

        if self.state is LoadState.LOADED:
            return Loadable(state=LoadState.LOADED, value=transform(self.value))  # type: ignore[arg-type]
        return Loadable(state=self.state, error=self.error)
