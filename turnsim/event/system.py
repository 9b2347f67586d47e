"""
Typed publish/subscribe bus.

One System per simulation. Handlers are created lazily per event type and
kept in a plain dict, so the order in which types were first touched never
influences listener order (only registration order within a type does).

Usage:
    events = System()
    sub = events.subscribe(BeforeHitEvent, on_before_hit)
    events.emit(BeforeHitEvent(attacker, defender, hit))
    events.unsubscribe(sub)
"""

from __future__ import annotations

from typing import Dict, Type, TypeVar

from .handler import Handler, Listener, Subscription

E = TypeVar("E")


class System:
    """Event bus holding one Handler per event type."""

    def __init__(self):
        self._handlers: Dict[type, Handler] = {}

    def handler(self, event_type: Type[E]) -> Handler[E]:
        handler = self._handlers.get(event_type)
        if handler is None:
            handler = Handler(event_type)
            self._handlers[event_type] = handler
        return handler

    def subscribe(self, event_type: Type[E], listener: Listener) -> Subscription:
        return self.handler(event_type).subscribe(listener)

    def unsubscribe(self, subscription: Subscription) -> bool:
        handler = self._handlers.get(subscription.event_type)
        if handler is None:
            return False
        return handler.unsubscribe(subscription)

    def emit(self, event: E) -> E:
        """Deliver `event` to every listener of its exact type."""
        return self.handler(type(event)).emit(event)

    def listener_count(self, event_type: type) -> int:
        handler = self._handlers.get(event_type)
        return len(handler) if handler else 0


__all__ = ["System"]
