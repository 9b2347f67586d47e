"""
State module - data records and the deterministic random source.
"""

from .rng import XorShift128, Random, seed_to_long, long_to_seed
from .stats import BaseStats, Stats
from .modifier import ModifierInstance, INFINITE_DURATION
from .combat import Attack, Hit, Heal, Shield, formula_value
from .info import CharacterInfo, EnemyInfo

__all__ = [
    "XorShift128", "Random", "seed_to_long", "long_to_seed",
    "BaseStats", "Stats",
    "ModifierInstance", "INFINITE_DURATION",
    "Attack", "Hit", "Heal", "Shield", "formula_value",
    "CharacterInfo", "EnemyInfo",
]
