"""
Attribute service - live HP/energy/stance and stat snapshots.

Base stats are registered once per target; everything else about a
target's numbers comes from the modifier manager at the moment stats() is
called. Snapshots are detached copies, so callers may edit them freely.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict

from ..errors import InvalidTargetError
from ..event.events import (
    EnergyChangeEvent,
    HPChangeEvent,
    StanceBreakEvent,
    StanceChangeEvent,
    TurnStartEvent,
)
from ..event.system import System
from ..key import TargetID
from ..model import EnergyAdd, Property, StatusType
from ..state.stats import BaseStats, Stats
from .modifier import ModifierManager
from .target import TargetRegistry

logger = logging.getLogger(__name__)


@dataclass
class _Live:
    base: Dict[Property, float]
    level: int
    hp: float
    energy: float
    max_energy: float
    stance: float
    max_stance: float


class AttributeService:

    def __init__(self, events: System, targets: TargetRegistry, modifiers: ModifierManager):
        self.events = events
        self.targets = targets
        self.modifiers = modifiers
        self._live: Dict[TargetID, _Live] = {}

        events.subscribe(TurnStartEvent, self._on_turn_start)

    def register(
        self,
        target: TargetID,
        base: BaseStats,
        level: int = 80,
        hp_ratio: float = 1.0,
        energy: float = 0.0,
    ) -> None:
        self.targets.validate(target)
        live = _Live(
            base=base.properties(),
            level=level,
            hp=0.0,
            energy=min(max(0.0, energy), base.max_energy),
            max_energy=base.max_energy,
            stance=base.toughness,
            max_stance=base.toughness,
        )
        self._live[target] = live
        live.hp = self.stats(target).max_hp * hp_ratio

    def _get(self, target: TargetID) -> _Live:
        self.targets.validate(target)
        live = self._live.get(target)
        if live is None:
            raise InvalidTargetError(target, "has no attributes")
        return live

    # =========================================================================
    # Snapshots
    # =========================================================================

    def stats(self, target: TargetID) -> Stats:
        live = self._get(target)
        props = dict(live.base)
        for prop, amount in self.modifiers.modifier_stats(target).items():
            props[prop] = props.get(prop, 0.0) + amount
        return Stats(
            target=target,
            level=live.level,
            props=props,
            flags=self.modifiers.behavior_flags(target),
            current_hp=live.hp,
            energy=live.energy,
            max_energy=live.max_energy,
            stance=live.stance,
            max_stance=live.max_stance,
            debuff_count=self.modifiers.modifier_count(target, StatusType.DEBUFF),
        )

    # =========================================================================
    # Energy
    # =========================================================================

    def add_energy(self, target: TargetID, add_type: EnergyAdd, amount: float) -> float:
        """
        Change energy and return the new value.

        NORMAL scales by energy regen, FIXED adds as-is, REPLACE sets.
        """
        live = self._get(target)
        old = live.energy
        if add_type is EnergyAdd.REPLACE:
            new = amount
        elif add_type is EnergyAdd.NORMAL:
            new = old + amount * self.stats(target).energy_regen
        else:
            new = old + amount
        live.energy = min(max(0.0, new), live.max_energy)
        self.events.emit(EnergyChangeEvent(target, old, live.energy))
        return live.energy

    def energy(self, target: TargetID) -> float:
        return self._get(target).energy

    def full_energy(self, target: TargetID) -> bool:
        live = self._get(target)
        return live.max_energy > 0 and live.energy >= live.max_energy

    # =========================================================================
    # HP
    # =========================================================================

    def modify_hp(self, target: TargetID, amount: float, source: TargetID = None) -> float:
        """
        Add `amount` (negative for damage), clamped to [0, max HP].

        Reaching 0 HP here emits no TargetDeathEvent; the combat pipeline
        and the Simulation facade decide when a target dies.
        """
        live = self._get(target)
        max_hp = self.stats(target).max_hp
        old = live.hp
        live.hp = min(max(0.0, old + amount), max_hp)
        self.events.emit(HPChangeEvent(target, source, old, live.hp, max_hp))
        return live.hp

    def set_hp_ratio(self, target: TargetID, ratio: float, source: TargetID = None) -> float:
        live = self._get(target)
        max_hp = self.stats(target).max_hp
        return self.modify_hp(target, max_hp * ratio - live.hp, source)

    def hp(self, target: TargetID) -> float:
        return self._get(target).hp

    # =========================================================================
    # Stance (toughness)
    # =========================================================================

    def modify_stance(self, target: TargetID, amount: float, source: TargetID = None) -> float:
        """Targets without toughness are unaffected."""
        live = self._get(target)
        if live.max_stance <= 0:
            return 0.0
        old = live.stance
        live.stance = min(max(0.0, old + amount), live.max_stance)
        if live.stance == old:
            return live.stance
        self.events.emit(StanceChangeEvent(target, source, old, live.stance))
        if old > 0 and live.stance == 0:
            logger.debug("%s broken by %s", target, source)
            self.events.emit(StanceBreakEvent(target, source))
        return live.stance

    def stance(self, target: TargetID) -> float:
        return self._get(target).stance

    def _on_turn_start(self, event: TurnStartEvent) -> None:
        # Broken targets recover full toughness when their turn comes up
        live = self._live.get(event.active)
        if live is None or live.max_stance <= 0 or live.stance > 0:
            return
        old = live.stance
        live.stance = live.max_stance
        self.events.emit(StanceChangeEvent(event.active, None, old, live.stance))


__all__ = ["AttributeService"]
