"""
Per-event-type listener list.

Listeners run synchronously in registration order. The listener list is
copied when an emission starts, so subscribing from inside a listener only
affects later emissions; unsubscribing a listener that has not run yet in
the current emission skips it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Generic, Type, TypeVar

from ..errors import ListenerError, ReentrantEmissionError

E = TypeVar("E")

Listener = Callable[[E], None]


@dataclass(frozen=True)
class Subscription:
    """Token returned by subscribe; pass it back to unsubscribe."""
    event_type: type
    token: int


def listener_name(listener: Callable) -> str:
    return getattr(listener, "__qualname__", None) or repr(listener)


def event_target(event) -> object:
    """Best-effort TargetID an event is about, for error context."""
    for attr in ("target", "defender", "active", "attacker"):
        value = getattr(event, attr, None)
        if value is not None:
            return value
    return None


class Handler(Generic[E]):
    """Ordered listeners for one event type."""

    def __init__(self, event_type: Type[E]):
        self.event_type = event_type
        self._listeners: Dict[int, Listener] = {}
        self._next_token = 0
        self._emitting = False

    @property
    def name(self) -> str:
        return self.event_type.__name__

    def __len__(self) -> int:
        return len(self._listeners)

    @property
    def emitting(self) -> bool:
        return self._emitting

    def subscribe(self, listener: Listener) -> Subscription:
        token = self._next_token
        self._next_token += 1
        self._listeners[token] = listener
        return Subscription(self.event_type, token)

    def unsubscribe(self, subscription: Subscription) -> bool:
        return self._listeners.pop(subscription.token, None) is not None

    def emit(self, event: E) -> E:
        """Run every listener on `event`; stop at the first failure."""
        if self._emitting:
            raise ReentrantEmissionError(self.name)

        self._emitting = True
        try:
            for token, listener in list(self._listeners.items()):
                if token not in self._listeners:
                    continue
                try:
                    listener(event)
                except (ListenerError, ReentrantEmissionError):
                    raise
                except Exception as exc:
                    raise ListenerError(
                        self.name,
                        listener_name(listener),
                        exc,
                        target=event_target(event),
                    ) from exc
        finally:
            self._emitting = False
        return event


__all__ = ["Handler", "Subscription", "Listener", "listener_name", "event_target"]
