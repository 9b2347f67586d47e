"""
Static metadata records served by the info collaborator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Tuple

from ..model import DamageType
from .stats import BaseStats


@dataclass(frozen=True)
class CharacterInfo:
    key: str
    base_stats: BaseStats
    level: int = 80
    ascension: int = 6
    eidolon: int = 0
    traces: Tuple[str, ...] = ()
    element: DamageType = DamageType.PHYSICAL
    max_energy: float = 120.0


@dataclass(frozen=True)
class EnemyInfo:
    key: str
    base_stats: BaseStats
    level: int = 80
    weaknesses: FrozenSet[DamageType] = frozenset()
    # Resistance to specific modifier kinds (0.0 - 1.0)
    debuff_res: Dict[str, float] = field(default_factory=dict)
    toughness: float = 0.0


__all__ = ["CharacterInfo", "EnemyInfo"]
