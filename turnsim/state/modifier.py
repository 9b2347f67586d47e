"""
Modifier instances.

A ModifierInstance is both the request passed to add_modifier (only `name`
and `source` are required) and the live record the modifier manager keeps.
Fields the caller leaves at None are filled from the kind's metadata when
the instance goes live.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, FrozenSet, Optional

from ..key import ModifierKey, TargetID
from ..model import BehaviorFlag, Property, StatusType

INFINITE_DURATION = -1


@dataclass
class ModifierInstance:
    """One applied effect on one target."""

    name: Optional[ModifierKey] = None
    source: Optional[TargetID] = None
    duration: int = INFINITE_DURATION
    count: Optional[float] = None
    # Per-instance stat override; None means use the kind's stats
    stats: Optional[Dict[Property, float]] = None
    # Free-form payload for hooks (e.g. snapshot of the source's ATK)
    state: Any = None
    # Skip the "added this turn" grace tick
    tick_immediately: bool = False

    # Set by the manager when the instance goes live
    owner: Optional[TargetID] = None
    status_type: StatusType = StatusType.UNKNOWN
    flags: FrozenSet[BehaviorFlag] = frozenset()
    max_count: float = 1.0
    skip_next_tick: bool = field(default=False, repr=False)

    @property
    def is_infinite(self) -> bool:
        return self.duration == INFINITE_DURATION

    def copy(self) -> ModifierInstance:
        return replace(self, stats=dict(self.stats) if self.stats is not None else None)


__all__ = ["ModifierInstance", "INFINITE_DURATION"]
