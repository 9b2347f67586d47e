"""
Transient combat requests and the per-hit working record.

None of these outlive the call that consumes them. A Hit is handed to
BeforeHit listeners by reference, so whatever they change (snapshot stats,
immunity) is what the damage rule sees.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from ..key import TargetID
from ..model import AttackEffect, AttackType, DamageFormula, DamageType
from .stats import Stats


@dataclass
class Attack:
    """One attacker hitting one or more defenders."""

    attacker: TargetID
    targets: List[TargetID]
    attack_type: AttackType = AttackType.NORMAL
    attack_effect: AttackEffect = AttackEffect.SINGLE
    damage_type: DamageType = DamageType.PHYSICAL
    base_damage: Dict[DamageFormula, float] = field(
        default_factory=lambda: {DamageFormula.BY_ATK: 1.0}
    )
    damage_value: float = 0.0
    hit_ratio: float = 1.0
    energy_gain: float = 0.0
    stance_damage: float = 0.0


@dataclass
class Hit:
    """One attacker/defender pair inside an Attack."""

    attacker: TargetID
    defender: TargetID
    attacker_stats: Stats
    defender_stats: Stats
    attack_type: AttackType
    attack_effect: AttackEffect
    damage_type: DamageType
    formula: Dict[DamageFormula, float]
    damage_value: float = 0.0
    hit_ratio: float = 1.0
    stance_damage: float = 0.0
    index: int = 0
    immune: bool = False

    # Filled by the damage rule
    base_damage: float = 0.0
    bonus_damage: float = 0.0
    total_damage: float = 0.0
    hp_damage: float = 0.0
    shield_damage: float = 0.0
    is_crit: bool = False


@dataclass
class Heal:
    """Healing from one source to one or more targets."""

    source: TargetID
    targets: List[TargetID]
    base_heal: Dict[DamageFormula, float] = field(default_factory=dict)
    heal_value: float = 0.0


@dataclass
class Shield:
    """A shield request; HP is computed from the source's stats."""

    source: TargetID
    target: TargetID
    base_shield: Dict[DamageFormula, float] = field(default_factory=dict)
    shield_value: float = 0.0


def formula_value(stats: Stats, formula: Dict[DamageFormula, float]) -> float:
    """Sum of stat * multiplier over a formula map."""
    total = 0.0
    for kind, mult in formula.items():
        if kind is DamageFormula.BY_ATK:
            total += stats.atk * mult
        elif kind is DamageFormula.BY_DEF:
            total += stats.defense * mult
        elif kind is DamageFormula.BY_MAX_HP:
            total += stats.max_hp * mult
    return total


__all__ = ["Attack", "Hit", "Heal", "Shield", "formula_value"]
