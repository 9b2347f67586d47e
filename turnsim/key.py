"""
Identifiers shared by every engine component.

TargetIDs are plain ints wrapped in a NewType so the type checker can tell
them apart from counts and gauge values. They are issued by a single
generator per simulation and never reused.
"""

from __future__ import annotations

from typing import NewType

TargetID = NewType("TargetID", int)

# Modifier kinds are referenced by their registered name.
ModifierKey = str


class TargetIDGenerator:
    """Issues increasing TargetIDs starting at 1."""

    def __init__(self, start: int = 1):
        self._next = start

    def new(self) -> TargetID:
        value = TargetID(self._next)
        self._next += 1
        return value

    @property
    def issued(self) -> int:
        """Number of IDs handed out so far."""
        return self._next - 1


__all__ = ["TargetID", "ModifierKey", "TargetIDGenerator"]
