"""
Simulation context - one battle, fully isolated.

A Simulation owns its random source, its event bus and one instance of
every engine component. Nothing is shared between two Simulations, which is
what lets the batch driver run them in separate processes without any
coordination.

It is also the Engine facade: action scripts and modifier hooks receive
the Simulation itself and reach every capability through it.

Usage:
    sim = Simulation(load_config("battle.json"))
    result = sim.run()
    print(result.to_dict())

    # Or drive it by hand
    sim = Simulation(config)
    pyro = sim.characters()[0]
    sim.add_modifier(sim.enemies()[0], create_burn(pyro, duration=3))
    sim.step()
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Union

from ..calc.damage import DamageRule, create_damage_rule
from ..event.events import DamageResultEvent, TargetDeathEvent, TargetRemovedEvent
from ..event.system import System
from ..engine.attribute import AttributeService
from ..engine.combat import CombatManager
from ..engine.info import InfoService
from ..engine.modifier import ModifierManager
from ..engine.shield import ShieldManager
from ..engine.target import TargetRegistry
from ..engine.turn import TurnController
from ..key import ModifierKey, TargetID
from ..model import BehaviorFlag, EnergyAdd, ModifyGauge, StatusType, TargetCategory
from ..registry import ModifierRegistry, get_action_script
from ..state.combat import Attack, Heal, Shield
from ..state.info import CharacterInfo, EnemyInfo
from ..state.modifier import ModifierInstance
from ..state.rng import Random
from ..state.stats import BaseStats, Stats
from .config import CharacterConfig, EnemyConfig, SimConfig

logger = logging.getLogger(__name__)

# Action value of the first cycle and of every later one
FIRST_CYCLE_AV = 150.0
CYCLE_AV = 100.0


def cycles_elapsed(total_av: float) -> int:
    if total_av < FIRST_CYCLE_AV:
        return 0
    return 1 + int((total_av - FIRST_CYCLE_AV) // CYCLE_AV)


def cycle_limit(max_cycles: int) -> float:
    """Total action value at which `max_cycles` cycles are complete."""
    return FIRST_CYCLE_AV + CYCLE_AV * (max_cycles - 1)


# =============================================================================
# Result
# =============================================================================

@dataclass
class IterationResult:
    """Outcome of one Simulation.run()."""

    seed: Union[int, str]
    victory: bool
    turns: int
    cycles: int
    total_av: float
    total_damage: float
    cancelled: bool = False
    rand_draws: int = 0

    # TargetID -> external key, for every target ever issued
    target_id_mapping: Dict[int, str] = field(default_factory=dict)
    turn_order: List[int] = field(default_factory=list)
    damage_dealt: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "seed": self.seed,
            "victory": self.victory,
            "turns": self.turns,
            "cycles": self.cycles,
            "total_av": self.total_av,
            "total_damage": self.total_damage,
            "cancelled": self.cancelled,
            "rand_draws": self.rand_draws,
            "target_id_mapping": {str(k): v for k, v in self.target_id_mapping.items()},
            "turn_order": list(self.turn_order),
            "damage_dealt": dict(self.damage_dealt),
        }


# =============================================================================
# Simulation
# =============================================================================

class Simulation:
    """Owns every component of one battle and exposes the Engine facade."""

    def __init__(
        self,
        config: SimConfig,
        registry: Optional[ModifierRegistry] = None,
        rule: Optional[DamageRule] = None,
    ):
        self.config = config
        self.rand = Random(config.seed)
        self.events = System()

        self._targets = TargetRegistry()
        self._info = InfoService()
        self._modifiers = ModifierManager(self.events, self._targets, registry, engine=self)
        self._attributes = AttributeService(self.events, self._targets, self._modifiers)
        self._shields = ShieldManager(self.events, self._targets, self._attributes)
        self._turns = TurnController(self.events, self._targets, self._attributes)
        self._combat = CombatManager(
            self.events, self._targets, self._attributes, self._shields, self.rand,
            rule or create_damage_rule(config.damage_rule),
        )

        self._scripts: Dict[TargetID, Any] = {}
        self._keys: Dict[TargetID, str] = {}
        self._damage: Dict[TargetID, float] = {}
        self._turn_log: List[TargetID] = []

        self.events.subscribe(TargetDeathEvent, self._on_death)
        self.events.subscribe(DamageResultEvent, self._on_damage_result)

        for character in config.characters:
            self.add_character(character)
        for enemy in config.enemies:
            self.add_enemy(enemy)

    # =========================================================================
    # Roster
    # =========================================================================

    def _external_key(self, key: str) -> str:
        taken = set(self._keys.values())
        if key not in taken:
            return key
        n = 2
        while f"{key}#{n}" in taken:
            n += 1
        return f"{key}#{n}"

    def add_character(self, config: CharacterConfig) -> TargetID:
        key = self._external_key(config.key)
        target = self._targets.add_target(TargetCategory.CHARACTER, key)
        info = config.to_info()
        self._info.add_character(target, info)
        self._attributes.register(target, info.base_stats, level=info.level, energy=config.energy)
        self._join(target, key, config.script)
        return target

    def add_enemy(self, config: EnemyConfig) -> TargetID:
        key = self._external_key(config.key)
        target = self._targets.add_target(TargetCategory.ENEMY, key)
        info = config.to_info()
        self._info.add_enemy(target, info)
        self._attributes.register(target, info.base_stats, level=info.level)
        self._join(target, key, config.script)
        return target

    def add_neutral(self, name: str = "") -> TargetID:
        """Neutrals take no turns and have no stats."""
        target = self._targets.add_target(TargetCategory.NEUTRAL, name)
        self._keys[target] = self._targets.name(target)
        return target

    def _join(self, target: TargetID, key: str, script: Optional[str]) -> None:
        self._keys[target] = key
        self._turns.add_target(target)
        factory = get_action_script(script) if script else None
        if factory is not None:
            self._scripts[target] = factory(self, target)

    def remove_target(self, target: TargetID) -> None:
        """Take a target out of combat along with everything attached to it."""
        self._targets.remove_target(target)
        self._modifiers.remove_all(target)
        self._shields.remove_all(target)
        self._turns.remove_target(target)
        self._scripts.pop(target, None)
        logger.debug("removed %s (%s)", target, self._keys.get(target))
        self.events.emit(TargetRemovedEvent(target))

    def _on_death(self, event: TargetDeathEvent) -> None:
        if self._targets.is_valid(event.target):
            self.remove_target(event.target)

    def _on_damage_result(self, event: DamageResultEvent) -> None:
        self._damage[event.attacker] = self._damage.get(event.attacker, 0.0) + event.total_damage

    # =========================================================================
    # Run loop
    # =========================================================================

    def step(self) -> Optional[TargetID]:
        """Play one turn. Returns the actor, or None if nobody can act."""
        active = self._turns.start_turn()
        if active is None:
            return None
        self._turn_log.append(active)
        script = self._scripts.get(active)
        if script is not None and self._targets.is_valid(active):
            script.act()
        self._turns.end_turn()
        return active

    def run(self, cancel: Optional[threading.Event] = None) -> IterationResult:
        """
        Play until one side is defeated, max_cycles elapse, or `cancel` is
        set. Cancellation is only checked between turns.
        """
        logger.info("simulation start (seed=%s)", self.config.seed)
        limit = cycle_limit(self.config.max_cycles)
        cancelled = False

        while self._targets.characters() and self._targets.enemies():
            if cancel is not None and cancel.is_set():
                cancelled = True
                break
            order = self._turns.turn_order()
            if not order:
                break
            if self._turns.total_av + self._turns.action_value(order[0]) > limit:
                break
            if self.step() is None:
                break

        result = self.result(cancelled=cancelled)
        logger.info("simulation finished (seed=%s, victory=%s, turns=%d, cycles=%d)",
                    self.config.seed, result.victory, result.turns, result.cycles)
        return result

    def result(self, cancelled: bool = False) -> IterationResult:
        characters = [t for t, _ in self._targets.issued().items()
                      if self._targets.category(t) is TargetCategory.CHARACTER]
        return IterationResult(
            seed=self.config.seed,
            victory=not self._targets.enemies() and bool(self._targets.characters()),
            turns=len(self._turn_log),
            cycles=cycles_elapsed(self._turns.total_av),
            total_av=self._turns.total_av,
            total_damage=sum(self._damage.get(t, 0.0) for t in characters),
            cancelled=cancelled,
            rand_draws=self.rand.counter,
            target_id_mapping={int(t): key for t, key in self._keys.items()},
            turn_order=[int(t) for t in self._turn_log],
            damage_dealt={self._keys[t]: dmg for t, dmg in self._damage.items() if t in self._keys},
        )

    # =========================================================================
    # Engine facade: Modifier
    # =========================================================================

    def add_modifier(self, target: TargetID, instance: ModifierInstance) -> None:
        self._modifiers.add_modifier(target, instance)

    def remove_modifier(self, target: TargetID, kind: ModifierKey) -> None:
        self._modifiers.remove_modifier(target, kind)

    def remove_modifier_from_source(self, target: TargetID, source: TargetID, kind: ModifierKey) -> None:
        self._modifiers.remove_modifier_from_source(target, source, kind)

    def remove_modifier_instance(self, instance: ModifierInstance) -> bool:
        return self._modifiers.remove_modifier_instance(instance)

    def extend_modifier_duration(self, target: TargetID, kind: ModifierKey, amount: int) -> None:
        self._modifiers.extend_modifier_duration(target, kind, amount)

    def extend_modifier_count(self, target: TargetID, kind: ModifierKey, amount: float) -> None:
        self._modifiers.extend_modifier_count(target, kind, amount)

    def has_modifier(self, target: TargetID, kind: ModifierKey) -> bool:
        return self._modifiers.has_modifier(target, kind)

    def modifier_count(self, target: TargetID, status_type: StatusType) -> int:
        return self._modifiers.modifier_count(target, status_type)

    def has_behavior_flag(self, target: TargetID, *flags: BehaviorFlag) -> bool:
        return self._modifiers.has_behavior_flag(target, *flags)

    def behavior_flags(self, target: TargetID) -> FrozenSet[BehaviorFlag]:
        return self._modifiers.behavior_flags(target)

    def modifiers(self, target: TargetID, kind: Optional[ModifierKey] = None) -> List[ModifierInstance]:
        return self._modifiers.modifiers(target, kind)

    # =========================================================================
    # Engine facade: Attribute
    # =========================================================================

    def stats(self, target: TargetID) -> Stats:
        return self._attributes.stats(target)

    def add_energy(self, target: TargetID, add_type: EnergyAdd, amount: float) -> float:
        return self._attributes.add_energy(target, add_type, amount)

    def energy(self, target: TargetID) -> float:
        return self._attributes.energy(target)

    def full_energy(self, target: TargetID) -> bool:
        return self._attributes.full_energy(target)

    def modify_hp(self, target: TargetID, amount: float, source: Optional[TargetID] = None) -> float:
        hp = self._attributes.modify_hp(target, amount, source)
        self._check_death(target, source)
        return hp

    def set_hp_ratio(self, target: TargetID, ratio: float, source: Optional[TargetID] = None) -> float:
        hp = self._attributes.set_hp_ratio(target, ratio, source)
        self._check_death(target, source)
        return hp

    def _check_death(self, target: TargetID, source: Optional[TargetID]) -> None:
        # Hits check for death in the combat pipeline; direct HP writes do it here
        if self._targets.is_valid(target) and self._attributes.hp(target) <= 0:
            self.events.emit(TargetDeathEvent(target, source))

    def hp(self, target: TargetID) -> float:
        return self._attributes.hp(target)

    def modify_stance(self, target: TargetID, amount: float, source: Optional[TargetID] = None) -> float:
        return self._attributes.modify_stance(target, amount, source)

    def stance(self, target: TargetID) -> float:
        return self._attributes.stance(target)

    # =========================================================================
    # Engine facade: Combat / Shield
    # =========================================================================

    def attack(self, atk: Attack) -> None:
        self._combat.attack(atk)

    def heal(self, heal: Heal) -> None:
        self._combat.heal(heal)

    def add_shield(self, shield_id: str, shield: Shield) -> float:
        return self._shields.add_shield(shield_id, shield)

    def remove_shield(self, shield_id: str, target: TargetID) -> bool:
        return self._shields.remove_shield(shield_id, target)

    def is_shielded(self, target: TargetID) -> bool:
        return self._shields.is_shielded(target)

    def has_shield(self, target: TargetID, shield_id: str) -> bool:
        return self._shields.has_shield(target, shield_id)

    # =========================================================================
    # Engine facade: Turn
    # =========================================================================

    def modify_gauge(self, target: TargetID, modify_type: ModifyGauge, amount: float) -> float:
        return self._turns.modify_gauge(target, modify_type, amount)

    def set_gauge(self, target: TargetID, amount: float) -> float:
        return self._turns.set_gauge(target, amount)

    def gauge(self, target: TargetID) -> float:
        return self._turns.gauge(target)

    def action_value(self, target: TargetID) -> float:
        return self._turns.action_value(target)

    def turn_order(self) -> List[TargetID]:
        return self._turns.turn_order()

    def active_target(self) -> Optional[TargetID]:
        return self._turns.active

    # =========================================================================
    # Engine facade: Validator / Target / Info
    # =========================================================================

    def is_valid(self, target: TargetID) -> bool:
        return self._targets.is_valid(target)

    def is_character(self, target: TargetID) -> bool:
        return self._targets.is_character(target)

    def is_enemy(self, target: TargetID) -> bool:
        return self._targets.is_enemy(target)

    def is_neutral(self, target: TargetID) -> bool:
        return self._targets.is_neutral(target)

    def characters(self) -> List[TargetID]:
        return self._targets.characters()

    def enemies(self) -> List[TargetID]:
        return self._targets.enemies()

    def neutrals(self) -> List[TargetID]:
        return self._targets.neutrals()

    def adjacent_to(self, target: TargetID) -> List[TargetID]:
        return self._targets.adjacent_to(target)

    def category(self, target: TargetID) -> TargetCategory:
        return self._targets.category(target)

    def character_info(self, target: TargetID) -> CharacterInfo:
        return self._info.character_info(target)

    def enemy_info(self, target: TargetID) -> EnemyInfo:
        return self._info.enemy_info(target)

    def base_stats(self, target: TargetID) -> BaseStats:
        return self._info.base_stats(target)


__all__ = ["Simulation", "IterationResult", "cycles_elapsed", "cycle_limit",
           "FIRST_CYCLE_AV", "CYCLE_AV"]
