"""
Event payloads.

Every payload is a plain dataclass passed by reference to each listener in
turn. Fields that listeners are expected to change (the Hit on
BeforeHitEvent, heal_amount on HealStartEvent) are documented as mutable;
everything else is informational.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, List, Optional

from ..key import TargetID
from ..model import AttackEffect, AttackType, DamageType
from ..state.combat import Hit
from ..state.modifier import ModifierInstance
from ..state.stats import Stats

if TYPE_CHECKING:
    from ..engine.combat import AttackEndHold


# =============================================================================
# Attack pipeline
# =============================================================================

@dataclass
class AttackStartEvent:
    attacker: TargetID
    targets: List[TargetID]
    attack_type: AttackType
    attack_effect: AttackEffect
    damage_type: DamageType
    # Set by the combat manager while the event is being emitted
    _hold_factory: Optional[Callable[[], "AttackEndHold"]] = field(default=None, repr=False)

    def hold_end(self) -> "AttackEndHold":
        """Delay AttackEndEvent until the returned hold is released."""
        if self._hold_factory is None:
            raise RuntimeError("hold_end() is only available during attack start")
        return self._hold_factory()


@dataclass
class AttackEndEvent:
    attacker: TargetID
    targets: List[TargetID]
    attack_type: AttackType
    attack_effect: AttackEffect
    damage_type: DamageType


@dataclass
class BeforeHitEvent:
    """Mutable: listeners edit `hit` in place."""
    attacker: TargetID
    defender: TargetID
    hit: Hit


@dataclass
class DamageResultEvent:
    attacker: TargetID
    defender: TargetID
    attack_type: AttackType
    damage_type: DamageType
    attack_effect: AttackEffect
    base_damage: float
    bonus_damage: float
    total_damage: float
    hp_damage: float
    shield_damage: float
    health_remaining: float
    is_crit: bool


@dataclass
class AfterHitEvent:
    attacker: TargetID
    defender: TargetID
    attack_type: AttackType
    damage_type: DamageType
    attack_effect: AttackEffect
    is_crit: bool


# =============================================================================
# Modifiers
# =============================================================================

@dataclass
class ModifierAddedEvent:
    target: TargetID
    modifier: ModifierInstance
    merged: bool = False


@dataclass
class ModifierRemovedEvent:
    target: TargetID
    modifier: ModifierInstance


@dataclass
class ModifierExtendedDurationEvent:
    target: TargetID
    modifier: ModifierInstance
    old_value: int
    new_value: int


@dataclass
class ModifierExtendedCountEvent:
    target: TargetID
    modifier: ModifierInstance
    old_value: float
    new_value: float


# =============================================================================
# Attributes
# =============================================================================

@dataclass
class EnergyChangeEvent:
    target: TargetID
    old_energy: float
    new_energy: float


@dataclass
class HPChangeEvent:
    target: TargetID
    source: Optional[TargetID]
    old_hp: float
    new_hp: float
    max_hp: float


@dataclass
class StanceChangeEvent:
    target: TargetID
    source: Optional[TargetID]
    old_stance: float
    new_stance: float


@dataclass
class StanceBreakEvent:
    target: TargetID
    source: Optional[TargetID]


# =============================================================================
# Heal / shield
# =============================================================================

@dataclass
class HealStartEvent:
    """Mutable: listeners may change heal_amount before it is applied."""
    target: TargetID
    healer: TargetID
    healer_stats: Stats
    target_stats: Stats
    heal_amount: float


@dataclass
class HealEndEvent:
    target: TargetID
    healer: TargetID
    heal_amount: float
    overflow_heal: float


@dataclass
class ShieldAddedEvent:
    target: TargetID
    shield_id: str
    source: TargetID
    shield_hp: float


@dataclass
class ShieldRemovedEvent:
    target: TargetID
    shield_id: str
    broken: bool = False


# =============================================================================
# Turns / targets
# =============================================================================

@dataclass
class GaugeChangeEvent:
    target: TargetID
    old_gauge: float
    new_gauge: float


@dataclass
class TurnStartEvent:
    active: TargetID
    delta_av: float
    total_av: float


@dataclass
class TurnEndEvent:
    active: TargetID


@dataclass
class TargetDeathEvent:
    target: TargetID
    killer: Optional[TargetID]


@dataclass
class TargetRemovedEvent:
    target: TargetID


__all__ = [
    "AttackStartEvent",
    "AttackEndEvent",
    "BeforeHitEvent",
    "DamageResultEvent",
    "AfterHitEvent",
    "ModifierAddedEvent",
    "ModifierRemovedEvent",
    "ModifierExtendedDurationEvent",
    "ModifierExtendedCountEvent",
    "EnergyChangeEvent",
    "HPChangeEvent",
    "StanceChangeEvent",
    "StanceBreakEvent",
    "HealStartEvent",
    "HealEndEvent",
    "ShieldAddedEvent",
    "ShieldRemovedEvent",
    "GaugeChangeEvent",
    "TurnStartEvent",
    "TurnEndEvent",
    "TargetDeathEvent",
    "TargetRemovedEvent",
]
