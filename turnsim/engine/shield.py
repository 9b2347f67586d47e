"""
Shield manager.

Every shield on a target absorbs each hit at the same time: the hit's HP
damage is whatever exceeds the strongest shield, and every shield loses the
full damage. A shield at or below zero breaks and is removed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Tuple

from ..event.events import ShieldAddedEvent, ShieldRemovedEvent
from ..event.system import System
from ..key import TargetID
from ..state.combat import Shield, formula_value
from .target import TargetRegistry

logger = logging.getLogger(__name__)


@dataclass
class ShieldInstance:
    shield_id: str
    source: TargetID
    hp: float


class ShieldManager:

    def __init__(self, events: System, targets: TargetRegistry, attributes):
        self.events = events
        self.targets = targets
        self.attributes = attributes
        self._shields: Dict[TargetID, Dict[str, ShieldInstance]] = {}

    def add_shield(self, shield_id: str, shield: Shield) -> float:
        """Add or replace `shield_id` on shield.target. Returns its HP."""
        self.targets.validate(shield.target)
        self.targets.validate(shield.source)
        source_stats = self.attributes.stats(shield.source)
        hp = formula_value(source_stats, shield.base_shield) + shield.shield_value

        if self.has_shield(shield.target, shield_id):
            self._drop(shield.target, shield_id, broken=False)
        self._shields.setdefault(shield.target, {})[shield_id] = ShieldInstance(shield_id, shield.source, hp)
        logger.debug("shield %s on %s (%.1f hp)", shield_id, shield.target, hp)
        self.events.emit(ShieldAddedEvent(shield.target, shield_id, shield.source, hp))
        return hp

    def remove_shield(self, shield_id: str, target: TargetID) -> bool:
        self.targets.validate(target)
        return self._drop(target, shield_id, broken=False)

    def remove_all(self, target: TargetID) -> None:
        for shield_id in list(self._shields.get(target, {})):
            self._drop(target, shield_id, broken=False)
        self._shields.pop(target, None)

    def is_shielded(self, target: TargetID) -> bool:
        return bool(self._shields.get(target))

    def has_shield(self, target: TargetID, shield_id: str) -> bool:
        return shield_id in self._shields.get(target, {})

    def shield_hp(self, target: TargetID) -> float:
        """HP of the strongest shield on target."""
        shields = self._shields.get(target)
        return max((s.hp for s in shields.values()), default=0.0) if shields else 0.0

    def absorb(self, target: TargetID, damage: float) -> Tuple[float, float]:
        """
        Run `damage` through every shield on target.

        Returns:
            (shield_damage, hp_damage)
        """
        shields = self._shields.get(target)
        if not shields or damage <= 0:
            return 0.0, max(0.0, damage)
        strongest = self.shield_hp(target)
        absorbed = min(damage, strongest)
        for shield in list(shields.values()):
            shield.hp -= damage
            if shield.hp <= 0:
                self._drop(target, shield.shield_id, broken=True)
        return absorbed, damage - absorbed

    def _drop(self, target: TargetID, shield_id: str, broken: bool) -> bool:
        shields = self._shields.get(target, {})
        if shields.pop(shield_id, None) is None:
            return False
        logger.debug("shield %s on %s %s", shield_id, target, "broken" if broken else "removed")
        self.events.emit(ShieldRemovedEvent(target, shield_id, broken=broken))
        return True


__all__ = ["ShieldManager", "ShieldInstance"]
