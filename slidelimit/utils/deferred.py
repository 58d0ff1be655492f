"""Deferred values computed at most once, on first access.

A ``Deferred`` wraps a zero-argument callable. Nothing runs at construction;
the first ``get()`` evaluates the callable and memoizes the result so later
reads (from any call site or thread) return the same value without
re-running the computation.
"""

from __future__ import annotations

import threading
from typing import Callable, Generic, TypeVar

T = TypeVar("T")

_UNSET = object()


class Deferred(Generic[T]):
    """Compute-once cache cell around a thunk.

    Concurrent first reads are serialized with a lock: the first reader
    evaluates, the others wait and observe the memoized value. If the thunk
    raises, the exception propagates and nothing is memoized.
    """

    def __init__(self, thunk: Callable[[], T]) -> None:
        self._thunk = thunk
        self._value: object = _UNSET
        self._lock = threading.Lock()

    def __repr__(self) -> str:  # pragma: no cover - representation only
        state = repr(self._value) if self.resolved else "<pending>"
        return f"Deferred({state})"

    @property
    def resolved(self) -> bool:
        """Whether the value has already been computed."""
        return self._value is not _UNSET

    def get(self) -> T:
        """Return the value, evaluating the thunk on first access.

        Returns:
            The memoized value.
        """

        if self._value is _UNSET:
            with self._lock:
                if self._value is _UNSET:
                    self._value = self._thunk()
        return self._value  # type: ignore[return-value]


def later(thunk: Callable[[], T]) -> Deferred[T]:
    """Build a deferred value evaluated on first ``get()``."""
    return Deferred(thunk)


def now(value: T) -> Deferred[T]:
    """Build an already-resolved deferred value."""
    deferred: Deferred[T] = Deferred(lambda: value)
    deferred.get()
    return deferred
