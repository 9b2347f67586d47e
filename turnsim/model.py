"""
Enumerations used across the engine.

Values are strings so they survive JSON configs and pickled batch results
without a lookup table.
"""

from __future__ import annotations

from enum import Enum


class TargetCategory(Enum):
    CHARACTER = "CHARACTER"
    ENEMY = "ENEMY"
    NEUTRAL = "NEUTRAL"


class StatusType(Enum):
    """Modifier classification."""
    UNKNOWN = "UNKNOWN"
    BUFF = "BUFF"
    DEBUFF = "DEBUFF"


class BehaviorFlag(Enum):
    """Capability tags contributed by active modifiers."""
    DISABLE_ACTION = "DISABLE_ACTION"
    UNTARGETABLE = "UNTARGETABLE"
    STAT_CTRL = "STAT_CTRL"
    STAT_DOT = "STAT_DOT"
    STAT_DOT_BURN = "STAT_DOT_BURN"
    STAT_DEF_DOWN = "STAT_DEF_DOWN"
    STAT_ATK_UP = "STAT_ATK_UP"
    STAT_VULNERABILITY = "STAT_VULNERABILITY"
    STAT_SHIELD = "STAT_SHIELD"


class AttackType(Enum):
    NORMAL = "NORMAL"
    SKILL = "SKILL"
    ULT = "ULT"
    DOT = "DOT"
    PURSUED = "PURSUED"
    INSERT = "INSERT"


class AttackEffect(Enum):
    SINGLE = "SINGLE"
    BLAST = "BLAST"
    AOE = "AOE"
    BOUNCE = "BOUNCE"


class DamageType(Enum):
    PHYSICAL = "PHYSICAL"
    FIRE = "FIRE"
    ICE = "ICE"
    THUNDER = "THUNDER"
    WIND = "WIND"
    QUANTUM = "QUANTUM"
    IMAGINARY = "IMAGINARY"


class DamageFormula(Enum):
    """Which stat a base damage/heal/shield multiplier scales with."""
    BY_ATK = "BY_ATK"
    BY_DEF = "BY_DEF"
    BY_MAX_HP = "BY_MAX_HP"


class EnergyAdd(Enum):
    NORMAL = "NORMAL"    # scaled by energy regeneration
    FIXED = "FIXED"      # raw amount
    REPLACE = "REPLACE"  # forced set


class ModifyGauge(Enum):
    BY_AMOUNT = "BY_AMOUNT"    # raw gauge units
    NORMALIZED = "NORMALIZED"  # fraction of the action threshold


class StackingBehavior(Enum):
    MULTIPLE = "MULTIPLE"
    MERGE_BY_SOURCE = "MERGE_BY_SOURCE"
    REPLACE_BY_SOURCE = "REPLACE_BY_SOURCE"
    UNIQUE = "UNIQUE"


class DurationMerge(Enum):
    MAX = "MAX"
    SUM = "SUM"
    REPLACE = "REPLACE"


class TickMoment(Enum):
    TURN_START = "TURN_START"
    TURN_END = "TURN_END"


class Property(Enum):
    """Stat properties folded into a Stats snapshot."""
    HP_BASE = "HP_BASE"
    HP_PERCENT = "HP_PERCENT"
    HP_FLAT = "HP_FLAT"
    ATK_BASE = "ATK_BASE"
    ATK_PERCENT = "ATK_PERCENT"
    ATK_FLAT = "ATK_FLAT"
    DEF_BASE = "DEF_BASE"
    DEF_PERCENT = "DEF_PERCENT"
    DEF_FLAT = "DEF_FLAT"
    SPD_BASE = "SPD_BASE"
    SPD_PERCENT = "SPD_PERCENT"
    SPD_FLAT = "SPD_FLAT"
    CRIT_CHANCE = "CRIT_CHANCE"
    CRIT_DMG = "CRIT_DMG"
    ENERGY_REGEN = "ENERGY_REGEN"
    EFFECT_HIT_RATE = "EFFECT_HIT_RATE"
    EFFECT_RES = "EFFECT_RES"
    HEAL_BOOST = "HEAL_BOOST"
    ALL_DMG_PERCENT = "ALL_DMG_PERCENT"
    ALL_DMG_TAKEN = "ALL_DMG_TAKEN"
    PHYSICAL_DMG_PERCENT = "PHYSICAL_DMG_PERCENT"
    FIRE_DMG_PERCENT = "FIRE_DMG_PERCENT"
    ICE_DMG_PERCENT = "ICE_DMG_PERCENT"
    THUNDER_DMG_PERCENT = "THUNDER_DMG_PERCENT"
    WIND_DMG_PERCENT = "WIND_DMG_PERCENT"
    QUANTUM_DMG_PERCENT = "QUANTUM_DMG_PERCENT"
    IMAGINARY_DMG_PERCENT = "IMAGINARY_DMG_PERCENT"
    PHYSICAL_RES = "PHYSICAL_RES"
    FIRE_RES = "FIRE_RES"
    ICE_RES = "ICE_RES"
    THUNDER_RES = "THUNDER_RES"
    WIND_RES = "WIND_RES"
    QUANTUM_RES = "QUANTUM_RES"
    IMAGINARY_RES = "IMAGINARY_RES"


def damage_percent_property(damage_type: DamageType) -> Property:
    return Property[f"{damage_type.value}_DMG_PERCENT"]


def resistance_property(damage_type: DamageType) -> Property:
    return Property[f"{damage_type.value}_RES"]


__all__ = [
    "TargetCategory",
    "StatusType",
    "BehaviorFlag",
    "AttackType",
    "AttackEffect",
    "DamageType",
    "DamageFormula",
    "EnergyAdd",
    "ModifyGauge",
    "StackingBehavior",
    "DurationMerge",
    "TickMoment",
    "Property",
    "damage_percent_property",
    "resistance_property",
]
