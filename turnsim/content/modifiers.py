"""
Modifier kinds - static metadata for every buff/debuff the engine knows.

=== STACKING ===

StackingBehavior decides what add_modifier does when the target already
holds the kind:
- MULTIPLE: always a new instance
- MERGE_BY_SOURCE: one instance per (target, source); count summed and
  capped at max_count, duration merged by DurationMerge
- REPLACE_BY_SOURCE: the old instance from that source is removed first
- UNIQUE: one instance per target whatever the source, merged like
  MERGE_BY_SOURCE

DurationMerge (MERGE_BY_SOURCE / UNIQUE only):
- MAX: keep the longer of the two (default)
- SUM: add the durations
- REPLACE: take the incoming duration
An infinite duration absorbs a finite one under MAX and SUM.

=== TICKING ===

Finite durations drop by one per owner turn, at TURN_END by default or at
TURN_START for kinds with tick_at=TURN_START (damage-over-time, which
fires before it ticks).

=== STATS ===

`stats` are additive property contributions folded into the owner's Stats
snapshot. With stats_scale_with_count they are multiplied by count.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Mapping, Optional

from ..key import TargetID
from ..model import (
    BehaviorFlag,
    DurationMerge,
    Property,
    StackingBehavior,
    StatusType,
    TickMoment,
)
from ..state.modifier import INFINITE_DURATION, ModifierInstance


# =============================================================================
# KIND METADATA
# =============================================================================

@dataclass(frozen=True)
class ModifierConfig:
    """
    Static description of a modifier kind.

    Attributes:
        name: Registered kind name (e.g., "Burn")
        status_type: BUFF, DEBUFF or UNKNOWN
        stacking: What a repeated add does
        duration_merge: How durations combine when instances merge
        max_count: Cap for count
        flags: Behavior flags contributed while active
        stats: Property contributions while active
        stats_scale_with_count: Multiply stats by count
        tick_at: When finite durations decrement
        params: Numeric knobs read by hooks (overridable per instance)
    """
    name: str
    status_type: StatusType = StatusType.UNKNOWN
    stacking: StackingBehavior = StackingBehavior.MULTIPLE
    duration_merge: DurationMerge = DurationMerge.MAX
    max_count: float = 1.0
    flags: FrozenSet[BehaviorFlag] = frozenset()
    stats: Mapping[Property, float] = field(default_factory=dict)
    stats_scale_with_count: bool = True
    tick_at: TickMoment = TickMoment.TURN_END
    params: Mapping[str, float] = field(default_factory=dict)


# Complete kind definitions
MODIFIER_DATA: Dict[str, Dict[str, Any]] = {
    # =========== DEBUFFS ===========
    "Burn": {
        "type": StatusType.DEBUFF,
        "stacking": StackingBehavior.MERGE_BY_SOURCE,
        "flags": {BehaviorFlag.STAT_DOT, BehaviorFlag.STAT_DOT_BURN},
        "tick_at": TickMoment.TURN_START,
        "params": {"dot_multiplier": 0.5},
        "notes": "Fire DoT from the source at the owner's turn start, then ticks.",
    },
    "Vulnerability": {
        "type": StatusType.DEBUFF,
        "stacking": StackingBehavior.MERGE_BY_SOURCE,
        "flags": {BehaviorFlag.STAT_VULNERABILITY},
        "params": {"amount": 0.10},
        "notes": "Owner takes `amount` more damage from every hit.",
    },
    "DefenseDown": {
        "type": StatusType.DEBUFF,
        "stacking": StackingBehavior.MULTIPLE,
        "flags": {BehaviorFlag.STAT_DEF_DOWN},
        "stats": {Property.DEF_PERCENT: -0.15},
        "notes": "Independent per application.",
    },
    "Frozen": {
        "type": StatusType.DEBUFF,
        "stacking": StackingBehavior.UNIQUE,
        "duration_merge": DurationMerge.REPLACE,
        "flags": {BehaviorFlag.DISABLE_ACTION, BehaviorFlag.STAT_CTRL},
        "notes": "Owner skips its action while active.",
    },

    # =========== BUFFS ===========
    "AttackUp": {
        "type": StatusType.BUFF,
        "stacking": StackingBehavior.MERGE_BY_SOURCE,
        "max_count": 3,
        "flags": {BehaviorFlag.STAT_ATK_UP},
        "stats": {Property.ATK_PERCENT: 0.10},
        "notes": "+10% ATK per count, up to 3.",
    },
    "Fortify": {
        "type": StatusType.BUFF,
        "stacking": StackingBehavior.REPLACE_BY_SOURCE,
        "stats": {Property.DEF_PERCENT: 0.20},
        "notes": "Re-applying from the same source refreshes the instance.",
    },
}


def create_modifier_config(name: str) -> ModifierConfig:
    """
    Build a ModifierConfig from MODIFIER_DATA.

    Raises:
        KeyError: unknown kind
    """
    data = MODIFIER_DATA[name]
    return ModifierConfig(
        name=name,
        status_type=data.get("type", StatusType.UNKNOWN),
        stacking=data.get("stacking", StackingBehavior.MULTIPLE),
        duration_merge=data.get("duration_merge", DurationMerge.MAX),
        max_count=float(data.get("max_count", 1)),
        flags=frozenset(data.get("flags", ())),
        stats=dict(data.get("stats", {})),
        stats_scale_with_count=data.get("stats_scale_with_count", True),
        tick_at=data.get("tick_at", TickMoment.TURN_END),
        params=dict(data.get("params", {})),
    )


# =============================================================================
# INSTANCE FACTORIES
# =============================================================================

def create_modifier(
    name: str,
    source: TargetID,
    duration: int = INFINITE_DURATION,
    count: Optional[float] = None,
    state: Any = None,
) -> ModifierInstance:
    return ModifierInstance(name=name, source=source, duration=duration, count=count, state=state)


def create_burn(source: TargetID, duration: int = 2, dot_multiplier: Optional[float] = None) -> ModifierInstance:
    state = {"dot_multiplier": dot_multiplier} if dot_multiplier is not None else None
    return create_modifier("Burn", source, duration, state=state)


def create_vulnerability(source: TargetID, duration: int = 2, amount: Optional[float] = None) -> ModifierInstance:
    state = {"amount": amount} if amount is not None else None
    return create_modifier("Vulnerability", source, duration, state=state)


def create_defense_down(source: TargetID, duration: int = 2) -> ModifierInstance:
    return create_modifier("DefenseDown", source, duration)


def create_frozen(source: TargetID, duration: int = 1) -> ModifierInstance:
    return create_modifier("Frozen", source, duration)


def create_attack_up(source: TargetID, count: float = 1, duration: int = 2) -> ModifierInstance:
    return create_modifier("AttackUp", source, duration, count=count)


def create_fortify(source: TargetID, duration: int = 2) -> ModifierInstance:
    return create_modifier("Fortify", source, duration)


__all__ = [
    "ModifierConfig",
    "MODIFIER_DATA",
    "create_modifier_config",
    "create_modifier",
    "create_burn",
    "create_vulnerability",
    "create_defense_down",
    "create_frozen",
    "create_attack_up",
    "create_fortify",
]
