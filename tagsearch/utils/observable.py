"""Observable values published to a presentation layer."""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from tagsearch.logging import logger

T = TypeVar("T")
Subscriber = Callable[[T], None]


class Observable(Generic[T]):
    """Holds a value and notifies subscribers whenever it changes.

    Subscribers receive the new value synchronously. Setting an equal value
    is not published.
    """

    def __init__(self, value: T, *, name: str = "value") -> None:
        self._value = value
        self._name = name
        self._subscribers: list[Subscriber[T]] = []

    @property
    def value(self) -> T:
        return self._value

    @property
    def name(self) -> str:
        return self._name

    def set(self, value: T) -> bool:
        if value == self._value:
            return False
        self._value = value
        for callback in list(self._subscribers):
            try:
                callback(value)
            except Exception:
                logger.exception("observable_subscriber_failed", observable=self._name)
        return True

    def subscribe(self, callback: Subscriber[T], *, replay: bool = False) -> Callable[[], None]:
        """Register ``callback``; returns a function that unsubscribes it."""

        self._subscribers.append(callback)
        if replay:
            callback(self._value)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def __repr__(self) -> str:
        return f"Observable({self._name}={self._value!r})"


__all__ = ["Observable", "Subscriber"]
