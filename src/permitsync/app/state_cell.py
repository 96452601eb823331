from __future__ import annotations

import logging
from threading import RLock
from typing import Callable, Generic, TypeVar


T = TypeVar("T")

_LOGGER = logging.getLogger("permitsync.state")


class StateCell(Generic[T]):
    """A value that notifies subscribers synchronously whenever it is reassigned."""

    def __init__(self, initial: T, *, name: str = "") -> None:
        self._value = initial
        self._name = str(name or "").strip() or "state"
        self._subscribers: list[Callable[[T], None]] = []
        self._lock = RLock()

    @property
    def name(self) -> str:
        return self._name

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        with self._lock:
            self._value = value
            subscribers = tuple(self._subscribers)

        for subscriber in subscribers:
            try:
                subscriber(value)
            except Exception:
                _LOGGER.warning("Subscriber failed for %s", self._name, exc_info=True)
                continue

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        with self._lock:
            self._subscribers.append(callback)

        def _unsubscribe() -> None:
            with self._lock:
                try:
                    self._subscribers.remove(callback)
                except ValueError:
                    return

        return _unsubscribe

    def read_only(self) -> "ReadOnlyStateCell[T]":
        return ReadOnlyStateCell(self)


class ReadOnlyStateCell(Generic[T]):
    __slots__ = ("_cell",)

    def __init__(self, cell: StateCell[T]) -> None:
        self._cell = cell

    @property
    def name(self) -> str:
        return self._cell.name

    @property
    def value(self) -> T:
        return self._cell.value

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        return self._cell.subscribe(callback)
