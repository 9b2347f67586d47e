"""
Engine exceptions.

Validation errors are raised before any state is touched. Listener errors
are raised mid-emission and leave already-applied effects in place.
"""

from __future__ import annotations

from typing import Any, Optional


class EngineError(Exception):
    """Base class for every error raised by the engine."""


class InvalidTargetError(EngineError):
    """A TargetID is unknown, removed, or of the wrong category."""

    def __init__(self, target: Any, reason: str = "not a valid target"):
        self.target = target
        self.reason = reason
        super().__init__(f"target {target}: {reason}")


class InvalidModifierError(EngineError):
    """A modifier instance is malformed or references an unknown kind."""

    def __init__(self, modifier: Any, reason: str):
        self.modifier = modifier
        self.reason = reason
        super().__init__(f"modifier {modifier!r}: {reason}")


class NotFoundError(EngineError):
    """Static metadata is missing for a target."""

    def __init__(self, target: Any, what: str = "metadata"):
        self.target = target
        self.what = what
        super().__init__(f"no {what} for target {target}")


class ListenerError(EngineError):
    """A subscriber raised while an event was being emitted."""

    def __init__(
        self,
        event_type: str,
        listener: str,
        cause: BaseException,
        target: Any = None,
        modifier: Optional[str] = None,
        phase: Optional[str] = None,
    ):
        self.event_type = event_type
        self.listener = listener
        self.cause = cause
        self.target = target
        self.modifier = modifier
        self.phase = phase

        parts = [f"listener {listener} failed during {event_type}"]
        if phase is not None:
            parts.append(f"phase={phase}")
        if target is not None:
            parts.append(f"target={target}")
        if modifier is not None:
            parts.append(f"modifier={modifier}")
        parts.append(f"cause={cause!r}")
        super().__init__(", ".join(parts))


class ReentrantEmissionError(EngineError):
    """An event type was emitted while an emission of that type was running."""

    def __init__(self, event_type: str):
        self.event_type = event_type
        super().__init__(f"{event_type} emitted while already emitting {event_type}")


class ConfigError(EngineError):
    """A simulation config could not be parsed or validated."""


__all__ = [
    "EngineError",
    "InvalidTargetError",
    "InvalidModifierError",
    "NotFoundError",
    "ListenerError",
    "ReentrantEmissionError",
    "ConfigError",
]
