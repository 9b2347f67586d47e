"""
Calculation module - pluggable numeric rules.
"""

from .damage import (
    DamageRule, StandardDamageRule, DAMAGE_RULES, create_damage_rule,
    def_multiplier, res_multiplier,
    DEF_LEVEL_BASE, DEF_LEVEL_MULT, RES_MULT_MIN, RES_MULT_MAX, UNBROKEN_MULT,
)

__all__ = [
    "DamageRule", "StandardDamageRule", "DAMAGE_RULES", "create_damage_rule",
    "def_multiplier", "res_multiplier",
    "DEF_LEVEL_BASE", "DEF_LEVEL_MULT", "RES_MULT_MIN", "RES_MULT_MAX", "UNBROKEN_MULT",
]
