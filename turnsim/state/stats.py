"""
Stat containers.

BaseStats is static per target (supplied by the info collaborator).
Stats is a detached snapshot: base properties folded with every active
modifier contribution at the moment it was requested. Editing a snapshot
only changes that snapshot, which is what lets hit listeners tweak the
numbers a single hit sees.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet

from ..key import TargetID
from ..model import (
    BehaviorFlag,
    DamageType,
    Property,
    damage_percent_property,
    resistance_property,
)


@dataclass
class BaseStats:
    """Unmodified stats of a character or enemy."""

    hp: float
    atk: float
    defense: float
    spd: float
    crit_chance: float = 0.05
    crit_damage: float = 0.50
    max_energy: float = 0.0
    toughness: float = 0.0
    # Anything else (resistances, damage bonuses, effect hit rate...)
    extra: Dict[Property, float] = field(default_factory=dict)

    def properties(self) -> Dict[Property, float]:
        props = {
            Property.HP_BASE: self.hp,
            Property.ATK_BASE: self.atk,
            Property.DEF_BASE: self.defense,
            Property.SPD_BASE: self.spd,
            Property.CRIT_CHANCE: self.crit_chance,
            Property.CRIT_DMG: self.crit_damage,
        }
        for prop, value in self.extra.items():
            props[prop] = props.get(prop, 0.0) + value
        return props


@dataclass
class Stats:
    """Point-in-time view of a target's derived attributes."""

    target: TargetID
    level: int
    props: Dict[Property, float]
    flags: FrozenSet[BehaviorFlag] = frozenset()
    current_hp: float = 0.0
    energy: float = 0.0
    max_energy: float = 0.0
    stance: float = 0.0
    max_stance: float = 0.0
    debuff_count: int = 0

    # -------------------------------------------------------------------------
    # Raw property access
    # -------------------------------------------------------------------------

    def get_property(self, prop: Property) -> float:
        return self.props.get(prop, 0.0)

    def add_property(self, prop: Property, amount: float) -> None:
        self.props[prop] = self.props.get(prop, 0.0) + amount

    def _derived(self, base: Property, percent: Property, flat: Property) -> float:
        return self.get_property(base) * (1 + self.get_property(percent)) + self.get_property(flat)

    # -------------------------------------------------------------------------
    # Derived stats
    # -------------------------------------------------------------------------

    @property
    def max_hp(self) -> float:
        return self._derived(Property.HP_BASE, Property.HP_PERCENT, Property.HP_FLAT)

    @property
    def atk(self) -> float:
        return self._derived(Property.ATK_BASE, Property.ATK_PERCENT, Property.ATK_FLAT)

    @property
    def defense(self) -> float:
        return max(0.0, self._derived(Property.DEF_BASE, Property.DEF_PERCENT, Property.DEF_FLAT))

    @property
    def spd(self) -> float:
        return self._derived(Property.SPD_BASE, Property.SPD_PERCENT, Property.SPD_FLAT)

    @property
    def crit_chance(self) -> float:
        return self.get_property(Property.CRIT_CHANCE)

    @property
    def crit_damage(self) -> float:
        return self.get_property(Property.CRIT_DMG)

    @property
    def energy_regen(self) -> float:
        return 1 + self.get_property(Property.ENERGY_REGEN)

    @property
    def effect_hit_rate(self) -> float:
        return self.get_property(Property.EFFECT_HIT_RATE)

    @property
    def effect_res(self) -> float:
        return self.get_property(Property.EFFECT_RES)

    @property
    def heal_boost(self) -> float:
        return self.get_property(Property.HEAL_BOOST)

    @property
    def damage_taken(self) -> float:
        return self.get_property(Property.ALL_DMG_TAKEN)

    @property
    def hp_ratio(self) -> float:
        max_hp = self.max_hp
        return self.current_hp / max_hp if max_hp > 0 else 0.0

    @property
    def is_broken(self) -> bool:
        return self.max_stance > 0 and self.stance <= 0

    def damage_percent(self, damage_type: DamageType) -> float:
        return (self.get_property(Property.ALL_DMG_PERCENT)
                + self.get_property(damage_percent_property(damage_type)))

    def resistance(self, damage_type: DamageType) -> float:
        return self.get_property(resistance_property(damage_type))

    def copy(self) -> Stats:
        return Stats(
            target=self.target,
            level=self.level,
            props=dict(self.props),
            flags=self.flags,
            current_hp=self.current_hp,
            energy=self.energy,
            max_energy=self.max_energy,
            stance=self.stance,
            max_stance=self.max_stance,
            debuff_count=self.debuff_count,
        )


__all__ = ["BaseStats", "Stats"]
