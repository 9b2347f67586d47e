"""
Engine facade - the capability contracts action logic programs against.

Each Protocol covers one responsibility. Engine is all of them plus direct
access to the event bus and the random source. Simulation satisfies Engine
structurally by delegating to the components it owns; nothing inherits
from these classes.

Usage:
    def act(engine: Engine, me: TargetID) -> None:
        target = engine.rand.choice(engine.enemies())
        engine.attack(Attack(attacker=me, targets=[target]))
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Protocol

from ..key import ModifierKey, TargetID
from ..model import BehaviorFlag, EnergyAdd, ModifyGauge, StatusType, TargetCategory
from ..state.combat import Attack, Heal
from ..state.combat import Shield as ShieldRequest
from ..state.info import CharacterInfo, EnemyInfo
from ..state.modifier import ModifierInstance
from ..state.rng import Random
from ..state.stats import BaseStats, Stats

if TYPE_CHECKING:
    from ..event.system import System


class Modifier(Protocol):
    def add_modifier(self, target: TargetID, instance: ModifierInstance) -> None: ...
    def remove_modifier(self, target: TargetID, kind: ModifierKey) -> None: ...
    def remove_modifier_from_source(self, target: TargetID, source: TargetID, kind: ModifierKey) -> None: ...
    def remove_modifier_instance(self, instance: ModifierInstance) -> bool: ...
    def extend_modifier_duration(self, target: TargetID, kind: ModifierKey, amount: int) -> None: ...
    def extend_modifier_count(self, target: TargetID, kind: ModifierKey, amount: float) -> None: ...
    def has_modifier(self, target: TargetID, kind: ModifierKey) -> bool: ...
    def modifier_count(self, target: TargetID, status_type: StatusType) -> int: ...
    def has_behavior_flag(self, target: TargetID, *flags: BehaviorFlag) -> bool: ...
    def modifiers(self, target: TargetID, kind: Optional[ModifierKey] = None) -> List[ModifierInstance]: ...


class Attribute(Protocol):
    def stats(self, target: TargetID) -> Stats: ...
    def add_energy(self, target: TargetID, add_type: EnergyAdd, amount: float) -> float: ...
    def energy(self, target: TargetID) -> float: ...
    def full_energy(self, target: TargetID) -> bool: ...
    def modify_hp(self, target: TargetID, amount: float, source: Optional[TargetID] = None) -> float: ...
    def set_hp_ratio(self, target: TargetID, ratio: float, source: Optional[TargetID] = None) -> float: ...
    def hp(self, target: TargetID) -> float: ...
    def modify_stance(self, target: TargetID, amount: float, source: Optional[TargetID] = None) -> float: ...
    def stance(self, target: TargetID) -> float: ...


class Combat(Protocol):
    def attack(self, atk: Attack) -> None: ...
    def heal(self, heal: Heal) -> None: ...


class Shield(Protocol):
    def add_shield(self, shield_id: str, shield: ShieldRequest) -> float: ...
    def remove_shield(self, shield_id: str, target: TargetID) -> bool: ...
    def is_shielded(self, target: TargetID) -> bool: ...
    def has_shield(self, target: TargetID, shield_id: str) -> bool: ...


class Turn(Protocol):
    def modify_gauge(self, target: TargetID, modify_type: ModifyGauge, amount: float) -> float: ...
    def set_gauge(self, target: TargetID, amount: float) -> float: ...
    def gauge(self, target: TargetID) -> float: ...
    def action_value(self, target: TargetID) -> float: ...
    def turn_order(self) -> List[TargetID]: ...
    def active_target(self) -> Optional[TargetID]: ...


class Validator(Protocol):
    def is_valid(self, target: TargetID) -> bool: ...
    def is_character(self, target: TargetID) -> bool: ...
    def is_enemy(self, target: TargetID) -> bool: ...
    def is_neutral(self, target: TargetID) -> bool: ...


class Info(Protocol):
    def character_info(self, target: TargetID) -> CharacterInfo: ...
    def enemy_info(self, target: TargetID) -> EnemyInfo: ...
    def base_stats(self, target: TargetID) -> BaseStats: ...


class Target(Protocol):
    def characters(self) -> List[TargetID]: ...
    def enemies(self) -> List[TargetID]: ...
    def neutrals(self) -> List[TargetID]: ...
    def adjacent_to(self, target: TargetID) -> List[TargetID]: ...
    def category(self, target: TargetID) -> TargetCategory: ...
    def add_neutral(self, name: str = "") -> TargetID: ...


class Engine(Modifier, Attribute, Combat, Shield, Turn, Validator, Info, Target, Protocol):
    events: System
    rand: Random


__all__ = [
    "Modifier", "Attribute", "Combat", "Shield", "Turn",
    "Validator", "Info", "Target", "Engine",
]
