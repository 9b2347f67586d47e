"""
Damage rules - turn a Hit's snapshots into numbers.

A rule fills the result fields of a Hit in place:
    base_damage  - formula stats * multipliers + flat value, times hit ratio
    bonus_damage - base after crit and damage% bonuses
    total_damage - bonus after the defender-side multipliers

Shield/HP split is not a rule concern; the combat manager does it after.

Standard order:
1. Base (Σ stat * multiplier + damage_value) * hit_ratio
2. Crit (one roll per hit, no roll at 0% or 100%)
3. Damage% (all + element)
4. DEF multiplier from attacker level
5. RES multiplier, clamped
6. Damage taken (vulnerability)
7. Toughness multiplier (unbroken targets with toughness take less)
"""

from __future__ import annotations

from typing import Callable, Dict, Protocol

from ..state.combat import Hit, formula_value
from ..state.rng import Random

__all__ = [
    "DamageRule",
    "StandardDamageRule",
    "DAMAGE_RULES",
    "create_damage_rule",
    "def_multiplier",
    "res_multiplier",
    # Constants
    "DEF_LEVEL_BASE",
    "DEF_LEVEL_MULT",
    "RES_MULT_MIN",
    "RES_MULT_MAX",
    "UNBROKEN_MULT",
]


# =============================================================================
# CONSTANTS
# =============================================================================

# DEF multiplier: 1 - def / (def + DEF_LEVEL_BASE + DEF_LEVEL_MULT * level)
DEF_LEVEL_BASE = 200.0
DEF_LEVEL_MULT = 10.0

RES_MULT_MIN = 0.1
RES_MULT_MAX = 2.0

# Targets with toughness take 10% less while not broken
UNBROKEN_MULT = 0.9


# =============================================================================
# MULTIPLIERS
# =============================================================================

def def_multiplier(defense: float, attacker_level: int) -> float:
    return 1.0 - defense / (defense + DEF_LEVEL_BASE + DEF_LEVEL_MULT * attacker_level)


def res_multiplier(resistance: float) -> float:
    return min(max(1.0 - resistance, RES_MULT_MIN), RES_MULT_MAX)


# =============================================================================
# RULES
# =============================================================================

class DamageRule(Protocol):
    def compute(self, hit: Hit, rng: Random) -> None:
        ...


class StandardDamageRule:
    """Default rule; see module docstring for the order of operations."""

    name = "standard"

    def compute(self, hit: Hit, rng: Random) -> None:
        if hit.immune:
            hit.base_damage = hit.bonus_damage = hit.total_damage = 0.0
            hit.is_crit = False
            return

        atk = hit.attacker_stats
        defn = hit.defender_stats

        base = (formula_value(atk, hit.formula) + hit.damage_value) * hit.hit_ratio
        hit.is_crit = rng.random_boolean_chance(atk.crit_chance)
        crit_mult = 1.0 + atk.crit_damage if hit.is_crit else 1.0
        bonus = base * crit_mult * (1.0 + atk.damage_percent(hit.damage_type))

        mult = def_multiplier(defn.defense, atk.level)
        mult *= res_multiplier(defn.resistance(hit.damage_type))
        mult *= 1.0 + defn.damage_taken
        if defn.max_stance > 0 and not defn.is_broken:
            mult *= UNBROKEN_MULT

        hit.base_damage = base
        hit.bonus_damage = bonus
        hit.total_damage = max(0.0, bonus * mult)


DAMAGE_RULES: Dict[str, Callable[[], DamageRule]] = {
    "standard": StandardDamageRule,
}


def create_damage_rule(name: str) -> DamageRule:
    """
    Raises:
        KeyError: unknown rule name
    """
    return DAMAGE_RULES[name]()
