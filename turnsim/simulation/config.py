"""
Run configuration.

A run is described by one JSON document:

    {
        "seed": "BATTLE1",
        "max_cycles": 10,
        "damage_rule": "standard",
        "characters": [
            {"key": "pyro", "hp": 1000, "atk": 600, "def": 400, "spd": 105,
             "element": "FIRE", "script": "basic_character"}
        ],
        "enemies": [
            {"key": "slime", "hp": 8000, "atk": 300, "def": 900, "spd": 90,
             "toughness": 60, "weaknesses": ["FIRE"]}
        ]
    }

Property names in "extra" are Property enum names (e.g. "FIRE_DMG_PERCENT").
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

from ..calc.damage import DAMAGE_RULES
from ..errors import ConfigError
from ..model import DamageType, Property, resistance_property
from ..registry import ACTION_SCRIPTS
from ..state.info import CharacterInfo, EnemyInfo
from ..state.stats import BaseStats

# Default elemental resistance of an enemy that is not weak to the element
DEFAULT_ENEMY_RES = 0.2


# =============================================================================
# Roster entries
# =============================================================================

@dataclass
class CharacterConfig:
    key: str
    hp: float
    atk: float
    defense: float
    spd: float
    level: int = 80
    element: DamageType = DamageType.PHYSICAL
    crit_chance: float = 0.05
    crit_damage: float = 0.50
    max_energy: float = 120.0
    energy: float = 0.0
    script: str = "basic_character"
    extra: Dict[Property, float] = field(default_factory=dict)

    def to_info(self) -> CharacterInfo:
        base = BaseStats(
            hp=self.hp,
            atk=self.atk,
            defense=self.defense,
            spd=self.spd,
            crit_chance=self.crit_chance,
            crit_damage=self.crit_damage,
            max_energy=self.max_energy,
            extra=dict(self.extra),
        )
        return CharacterInfo(
            key=self.key,
            base_stats=base,
            level=self.level,
            element=self.element,
            max_energy=self.max_energy,
        )


@dataclass
class EnemyConfig:
    key: str
    hp: float
    atk: float
    defense: float
    spd: float
    level: int = 80
    toughness: float = 0.0
    weaknesses: List[DamageType] = field(default_factory=list)
    script: str = "basic_enemy"
    extra: Dict[Property, float] = field(default_factory=dict)

    def to_info(self) -> EnemyInfo:
        extra: Dict[Property, float] = {}
        for dt in DamageType:
            if dt not in self.weaknesses:
                extra[resistance_property(dt)] = DEFAULT_ENEMY_RES
        extra.update(self.extra)
        base = BaseStats(
            hp=self.hp,
            atk=self.atk,
            defense=self.defense,
            spd=self.spd,
            crit_chance=0.0,
            crit_damage=0.0,
            toughness=self.toughness,
            extra=extra,
        )
        return EnemyInfo(
            key=self.key,
            base_stats=base,
            level=self.level,
            weaknesses=frozenset(self.weaknesses),
            toughness=self.toughness,
        )


# =============================================================================
# Run config
# =============================================================================

@dataclass
class SimConfig:
    """Everything needed to build one Simulation."""

    characters: List[CharacterConfig]
    enemies: List[EnemyConfig]
    seed: Union[int, str] = 0
    max_cycles: int = 10
    damage_rule: str = "standard"

    def __post_init__(self):
        if not self.characters:
            raise ConfigError("config needs at least one character")
        if not self.enemies:
            raise ConfigError("config needs at least one enemy")
        if self.max_cycles <= 0:
            raise ConfigError(f"max_cycles must be positive, got {self.max_cycles}")
        if self.damage_rule not in DAMAGE_RULES:
            raise ConfigError(f"unknown damage rule: {self.damage_rule}")
        for entry in list(self.characters) + list(self.enemies):
            if entry.script not in ACTION_SCRIPTS:
                raise ConfigError(f"{entry.key}: unknown script {entry.script!r}")

    def with_seed(self, seed: Union[int, str]) -> SimConfig:
        return SimConfig(
            characters=list(self.characters),
            enemies=list(self.enemies),
            seed=seed,
            max_cycles=self.max_cycles,
            damage_rule=self.damage_rule,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SimConfig:
        """
        Raises:
            ConfigError: missing fields, bad enum names, empty rosters
        """
        if not isinstance(data, dict):
            raise ConfigError("config must be a JSON object")
        try:
            characters = [_character(c) for c in data.get("characters", [])]
            enemies = [_enemy(e) for e in data.get("enemies", [])]
            max_cycles = int(data.get("max_cycles", 10))
        except (TypeError, ValueError, AttributeError) as e:
            raise ConfigError(f"malformed config: {e}") from e
        return cls(
            characters=characters,
            enemies=enemies,
            seed=data.get("seed", 0),
            max_cycles=max_cycles,
            damage_rule=data.get("damage_rule", "standard"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "seed": self.seed,
            "max_cycles": self.max_cycles,
            "damage_rule": self.damage_rule,
            "characters": [
                {
                    "key": c.key, "hp": c.hp, "atk": c.atk, "def": c.defense, "spd": c.spd,
                    "level": c.level, "element": c.element.value,
                    "crit_chance": c.crit_chance, "crit_damage": c.crit_damage,
                    "max_energy": c.max_energy, "energy": c.energy, "script": c.script,
                    "extra": {p.value: v for p, v in c.extra.items()},
                }
                for c in self.characters
            ],
            "enemies": [
                {
                    "key": e.key, "hp": e.hp, "atk": e.atk, "def": e.defense, "spd": e.spd,
                    "level": e.level, "toughness": e.toughness,
                    "weaknesses": [w.value for w in e.weaknesses], "script": e.script,
                    "extra": {p.value: v for p, v in e.extra.items()},
                }
                for e in self.enemies
            ],
        }


def load_config(path: Union[str, Path]) -> SimConfig:
    """Read a SimConfig from a JSON file."""
    try:
        with open(path) as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"cannot read config {path}: {e}") from e
    return SimConfig.from_dict(data)


# =============================================================================
# Parsing helpers
# =============================================================================

def _require(entry: Dict[str, Any], name: str, what: str) -> Any:
    if name not in entry:
        raise ConfigError(f"{what} {entry.get('key', '?')!r}: missing field {name!r}")
    return entry[name]


def _enum(enum_cls, value: Any, what: str):
    try:
        return enum_cls[str(value).upper()]
    except KeyError:
        raise ConfigError(f"unknown {what}: {value!r}") from None


def _extra(entry: Dict[str, Any]) -> Dict[Property, float]:
    return {_enum(Property, k, "property"): float(v) for k, v in entry.get("extra", {}).items()}


def _character(entry: Dict[str, Any]) -> CharacterConfig:
    what = "character"
    return CharacterConfig(
        key=_require(entry, "key", what),
        hp=float(_require(entry, "hp", what)),
        atk=float(_require(entry, "atk", what)),
        defense=float(_require(entry, "def", what)),
        spd=float(_require(entry, "spd", what)),
        level=int(entry.get("level", 80)),
        element=_enum(DamageType, entry.get("element", "PHYSICAL"), "damage type"),
        crit_chance=float(entry.get("crit_chance", 0.05)),
        crit_damage=float(entry.get("crit_damage", 0.50)),
        max_energy=float(entry.get("max_energy", 120.0)),
        energy=float(entry.get("energy", 0.0)),
        script=entry.get("script", "basic_character"),
        extra=_extra(entry),
    )


def _enemy(entry: Dict[str, Any]) -> EnemyConfig:
    what = "enemy"
    return EnemyConfig(
        key=_require(entry, "key", what),
        hp=float(_require(entry, "hp", what)),
        atk=float(_require(entry, "atk", what)),
        defense=float(_require(entry, "def", what)),
        spd=float(_require(entry, "spd", what)),
        level=int(entry.get("level", 80)),
        toughness=float(entry.get("toughness", 0.0)),
        weaknesses=[_enum(DamageType, w, "damage type") for w in entry.get("weaknesses", [])],
        script=entry.get("script", "basic_enemy"),
        extra=_extra(entry),
    )


__all__ = ["CharacterConfig", "EnemyConfig", "SimConfig", "load_config", "DEFAULT_ENEMY_RES"]
