"""
Turn/gauge controller.

Every target fills a gauge from 0 to BASE_GAUGE at a rate equal to its
speed. The next actor is whoever is closest to a full gauge in time (its
action value); ties go to the lower TargetID.

    action_value = (BASE_GAUGE - gauge) / spd

start_turn() advances the clock by the head's action value, so every other
gauge moves up by its own speed times that delta. end_turn() resets the
actor's gauge to 0.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, List, Optional

from ..errors import InvalidTargetError
from ..event.events import GaugeChangeEvent, TurnEndEvent, TurnStartEvent
from ..event.system import System
from ..key import TargetID
from ..model import ModifyGauge
from .target import TargetRegistry

logger = logging.getLogger(__name__)

BASE_GAUGE = 10000.0


class TurnController:

    def __init__(self, events: System, targets: TargetRegistry, attributes):
        self.events = events
        self.targets = targets
        self.attributes = attributes
        self._gauges: Dict[TargetID, float] = {}
        self._active: Optional[TargetID] = None
        self._total_av = 0.0

    @property
    def active(self) -> Optional[TargetID]:
        return self._active

    @property
    def total_av(self) -> float:
        return self._total_av

    # =========================================================================
    # Membership
    # =========================================================================

    def add_target(self, target: TargetID, gauge: float = 0.0) -> None:
        self.targets.validate(target)
        self._gauges[target] = self._clamp(gauge)

    def remove_target(self, target: TargetID) -> None:
        self._gauges.pop(target, None)

    def _check(self, target: TargetID) -> None:
        self.targets.validate(target)
        if target not in self._gauges:
            raise InvalidTargetError(target, "not in turn order")

    @staticmethod
    def _clamp(gauge: float) -> float:
        return min(max(0.0, gauge), BASE_GAUGE)

    # =========================================================================
    # Gauge mutation
    # =========================================================================

    def modify_gauge(self, target: TargetID, modify_type: ModifyGauge, amount: float) -> float:
        """
        BY_AMOUNT adds raw gauge units; NORMALIZED adds a fraction of a full
        gauge (0.25 is a 25% action advance, -0.25 a delay).
        """
        self._check(target)
        if modify_type is ModifyGauge.NORMALIZED:
            amount = amount * BASE_GAUGE
        return self._set(target, self._gauges[target] + amount)

    def set_gauge(self, target: TargetID, amount: float) -> float:
        self._check(target)
        return self._set(target, amount)

    def _set(self, target: TargetID, value: float) -> float:
        old = self._gauges[target]
        new = self._clamp(value)
        self._gauges[target] = new
        if new != old:
            logger.debug("gauge %s: %.1f -> %.1f", target, old, new)
            self.events.emit(GaugeChangeEvent(target, old, new))
        return new

    def gauge(self, target: TargetID) -> float:
        self._check(target)
        return self._gauges[target]

    # =========================================================================
    # Ordering
    # =========================================================================

    def action_value(self, target: TargetID) -> float:
        self._check(target)
        spd = self.attributes.stats(target).spd
        if spd <= 0:
            return math.inf
        return (BASE_GAUGE - self._gauges[target]) / spd

    def turn_order(self) -> List[TargetID]:
        """Live targets, next actor first."""
        live = [t for t in self._gauges if self.targets.is_valid(t)]
        return sorted(live, key=lambda t: (self.action_value(t), t))

    def start_turn(self) -> Optional[TargetID]:
        """Advance time to the next actor and emit TurnStartEvent."""
        order = self.turn_order()
        if not order:
            return None
        head = order[0]
        delta = self.action_value(head)
        if math.isinf(delta):
            return None

        if delta > 0:
            for target in list(self._gauges):
                if self.targets.is_valid(target):
                    spd = self.attributes.stats(target).spd
                    self._gauges[target] = self._clamp(self._gauges[target] + spd * delta)
        self._gauges[head] = BASE_GAUGE
        self._total_av += delta
        self._active = head

        logger.debug("turn start %s (av +%.2f, total %.2f)", head, delta, self._total_av)
        self.events.emit(TurnStartEvent(head, delta, self._total_av))
        return head

    def end_turn(self) -> None:
        active = self._active
        if active is None:
            return
        if active in self._gauges:
            self._gauges[active] = 0.0
        self.events.emit(TurnEndEvent(active))
        self._active = None


__all__ = ["TurnController", "BASE_GAUGE"]
