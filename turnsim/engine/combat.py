"""
Combat manager - the attack pipeline and healing.

Attack pipeline, strictly in this order:

    AttackStartEvent
    for each defender, in list order:
        BeforeHitEvent      (listeners may edit hit snapshots, set immune)
        damage rule         (fills base/bonus/total on the Hit)
        shields, HP, stance
        DamageResultEvent
        AfterHitEvent
        TargetDeathEvent    (only if the defender reached 0 HP)
    attacker energy gain
    AttackEndEvent          (deferred while any AttackEndHold is open)

Every target named by the attack is validated before anything is emitted.
A defender that leaves combat partway through (killed by an earlier hit's
listeners, say) is skipped.

Heal: HealStartEvent (heal_amount is mutable) -> clamp to missing HP ->
apply -> HealEndEvent with the overflow.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from ..errors import InvalidTargetError
from ..event.events import (
    AfterHitEvent,
    AttackEndEvent,
    AttackStartEvent,
    BeforeHitEvent,
    DamageResultEvent,
    HealEndEvent,
    HealStartEvent,
    TargetDeathEvent,
    TurnEndEvent,
)
from ..event.system import System
from ..model import EnergyAdd
from ..state.combat import Attack, Heal, Hit, formula_value
from ..state.rng import Random
from ..calc.damage import DamageRule, StandardDamageRule
from .attribute import AttributeService
from .shield import ShieldManager
from .target import TargetRegistry

logger = logging.getLogger(__name__)


# =============================================================================
# Deferred attack end
# =============================================================================

class AttackEndHold:
    """Keeps an attack's AttackEndEvent pending until released."""

    def __init__(self, pending: _PendingEnd):
        self._pending = pending
        self.released = False

    def release(self) -> None:
        if self.released:
            return
        self.released = True
        self._pending.release_one()


class _PendingEnd:

    def __init__(self, manager: CombatManager, event: AttackEndEvent):
        self.manager = manager
        self.event = event
        self.holds: List[AttackEndHold] = []
        self.closed = False
        self.emitted = False

    def hold(self) -> AttackEndHold:
        if self.emitted:
            raise RuntimeError("attack has already ended")
        hold = AttackEndHold(self)
        self.holds.append(hold)
        return hold

    def open_holds(self) -> int:
        return sum(1 for h in self.holds if not h.released)

    def close(self) -> None:
        self.closed = True
        self._maybe_emit()

    def release_one(self) -> None:
        self._maybe_emit()

    def _maybe_emit(self) -> None:
        if self.closed and not self.emitted and self.open_holds() == 0:
            self.emitted = True
            self.manager._finish(self)


# =============================================================================
# Manager
# =============================================================================

class CombatManager:

    def __init__(
        self,
        events: System,
        targets: TargetRegistry,
        attributes: AttributeService,
        shields: ShieldManager,
        rand: Random,
        rule: Optional[DamageRule] = None,
    ):
        self.events = events
        self.targets = targets
        self.attributes = attributes
        self.shields = shields
        self.rand = rand
        self.rule = rule or StandardDamageRule()
        self._pending: List[_PendingEnd] = []

        events.subscribe(TurnEndEvent, self._on_turn_end)

    # =========================================================================
    # Attack
    # =========================================================================

    def attack(self, atk: Attack) -> None:
        """
        Run one attack to completion.

        Raises:
            InvalidTargetError: attacker or any defender is not a live target
        """
        self.targets.validate(atk.attacker)
        if not atk.targets:
            raise InvalidTargetError(None, "attack has no targets")
        for defender in atk.targets:
            self.targets.validate(defender)

        targets = list(atk.targets)
        pending = _PendingEnd(self, AttackEndEvent(
            atk.attacker, targets, atk.attack_type, atk.attack_effect, atk.damage_type,
        ))
        self._pending.append(pending)

        try:
            logger.debug("attack start %s -> %s (%s)", atk.attacker, targets, atk.attack_type.value)
            self.events.emit(AttackStartEvent(
                atk.attacker, targets, atk.attack_type, atk.attack_effect, atk.damage_type,
                _hold_factory=pending.hold,
            ))

            for index, defender in enumerate(targets):
                if not self.targets.is_valid(atk.attacker):
                    break
                if not self.targets.is_valid(defender):
                    logger.debug("skip hit on %s: no longer in combat", defender)
                    continue
                self._hit(atk, defender, index)

            if atk.energy_gain > 0 and self.targets.is_valid(atk.attacker):
                self.attributes.add_energy(atk.attacker, EnergyAdd.NORMAL, atk.energy_gain)

            pending.close()
        finally:
            # An interrupted attack never ends; its holds become no-ops
            if not pending.closed:
                pending.emitted = True
                self._pending.remove(pending)

    def _hit(self, atk: Attack, defender, index: int) -> None:
        hit = Hit(
            attacker=atk.attacker,
            defender=defender,
            attacker_stats=self.attributes.stats(atk.attacker),
            defender_stats=self.attributes.stats(defender),
            attack_type=atk.attack_type,
            attack_effect=atk.attack_effect,
            damage_type=atk.damage_type,
            formula=dict(atk.base_damage),
            damage_value=atk.damage_value,
            hit_ratio=atk.hit_ratio,
            stance_damage=atk.stance_damage,
            index=index,
        )
        self.events.emit(BeforeHitEvent(atk.attacker, defender, hit))

        if hit.defender != defender:
            if not self.targets.is_valid(hit.defender):
                logger.debug("skip redirected hit on %s: no longer in combat", hit.defender)
                return
            logger.debug("hit on %s redirected to %s", defender, hit.defender)
            defender = hit.defender
            hit.defender_stats = self.attributes.stats(defender)

        self.rule.compute(hit, self.rand)
        hit.shield_damage, hit.hp_damage = self.shields.absorb(defender, hit.total_damage)
        if hit.hp_damage > 0:
            self.attributes.modify_hp(defender, -hit.hp_damage, atk.attacker)
        if hit.stance_damage > 0 and not hit.immune:
            self.attributes.modify_stance(defender, -hit.stance_damage, atk.attacker)

        self.events.emit(DamageResultEvent(
            attacker=atk.attacker,
            defender=defender,
            attack_type=hit.attack_type,
            damage_type=hit.damage_type,
            attack_effect=hit.attack_effect,
            base_damage=hit.base_damage,
            bonus_damage=hit.bonus_damage,
            total_damage=hit.total_damage,
            hp_damage=hit.hp_damage,
            shield_damage=hit.shield_damage,
            health_remaining=self.attributes.hp(defender),
            is_crit=hit.is_crit,
        ))
        self.events.emit(AfterHitEvent(
            atk.attacker, defender, hit.attack_type, hit.damage_type, hit.attack_effect, hit.is_crit,
        ))

        if self.targets.is_valid(defender) and self.attributes.hp(defender) <= 0:
            logger.debug("%s killed by %s", defender, atk.attacker)
            self.events.emit(TargetDeathEvent(defender, atk.attacker))

    def _finish(self, pending: _PendingEnd) -> None:
        if pending in self._pending:
            self._pending.remove(pending)
        logger.debug("attack end %s", pending.event.attacker)
        self.events.emit(pending.event)

    def held_attacks(self) -> int:
        """Attacks whose end event is still being held open."""
        return len(self._pending)

    def _on_turn_end(self, event: TurnEndEvent) -> None:
        for pending in list(self._pending):
            if not pending.closed:
                continue
            logger.warning(
                "attack by %s still held at turn end of %s; releasing %d hold(s)",
                pending.event.attacker, event.active, pending.open_holds(),
            )
            for hold in pending.holds:
                hold.release()

    # =========================================================================
    # Heal
    # =========================================================================

    def heal(self, heal: Heal) -> None:
        """
        Raises:
            InvalidTargetError: source or any target is not a live target
        """
        self.targets.validate(heal.source)
        for target in heal.targets:
            self.targets.validate(target)

        for target in heal.targets:
            if not self.targets.is_valid(target) or not self.targets.is_valid(heal.source):
                continue
            healer_stats = self.attributes.stats(heal.source)
            target_stats = self.attributes.stats(target)
            amount = (formula_value(healer_stats, heal.base_heal) + heal.heal_value) \
                * (1.0 + healer_stats.heal_boost)

            start = self.events.emit(HealStartEvent(
                target=target,
                healer=heal.source,
                healer_stats=healer_stats,
                target_stats=target_stats,
                heal_amount=amount,
            ))
            requested = max(0.0, start.heal_amount)
            missing = max(0.0, target_stats.max_hp - self.attributes.hp(target))
            applied = min(requested, missing)
            if applied > 0:
                self.attributes.modify_hp(target, applied, heal.source)
            self.events.emit(HealEndEvent(target, heal.source, applied, requested - applied))


__all__ = ["CombatManager", "AttackEndHold"]
