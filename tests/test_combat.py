"""
Combat Tests

Attack pipeline ordering, validation, hit snapshots, deferred attack end,
death handling, and healing.
"""

import logging

import pytest

from conftest import make_character, make_config, make_enemy

from turnsim.errors import InvalidTargetError, ListenerError
from turnsim.event import (
    AfterHitEvent,
    AttackEndEvent,
    AttackStartEvent,
    BeforeHitEvent,
    DamageResultEvent,
    EnergyChangeEvent,
    HealEndEvent,
    HealStartEvent,
    TargetDeathEvent,
    TargetRemovedEvent,
    TurnEndEvent,
)
from turnsim.model import AttackEffect, AttackType, DamageFormula, DamageType, Property
from turnsim.simulation import Simulation
from turnsim.state.combat import Attack, Heal

# ATK 100 into DEF 50 at level 80, no crit, no resistance
EXPECTED_HIT = 100.0 * (1 - 50.0 / 1050.0)

PIPELINE = [
    AttackStartEvent, BeforeHitEvent, DamageResultEvent, AfterHitEvent,
    TargetDeathEvent, TargetRemovedEvent, EnergyChangeEvent, AttackEndEvent,
]


def attack(attacker, targets, **kwargs):
    return Attack(
        attacker=attacker,
        targets=list(targets),
        attack_type=kwargs.pop("attack_type", AttackType.NORMAL),
        damage_type=kwargs.pop("damage_type", DamageType.PHYSICAL),
        **kwargs,
    )


def trace(sim, types=PIPELINE):
    """Record (event name, subject) for every emission of the given types."""
    log = []
    for event_type in types:
        def listener(e, name=event_type.__name__):
            subject = getattr(e, "defender", None) or getattr(e, "target", None)
            log.append((name, subject))
        sim.events.subscribe(event_type, listener)
    return log


@pytest.fixture
def two_slimes():
    return Simulation(make_config(enemies=[make_enemy(), make_enemy(spd=80)]))


# =============================================================================
# Pipeline order
# =============================================================================


class TestPipeline:

    def test_single_target_order(self, sim):
        hero, slime = sim.characters()[0], sim.enemies()[0]
        log = trace(sim)

        sim.attack(attack(hero, [slime], energy_gain=20))

        assert [name for name, _ in log] == [
            "AttackStartEvent", "BeforeHitEvent", "DamageResultEvent",
            "AfterHitEvent", "EnergyChangeEvent", "AttackEndEvent",
        ]

    def test_defenders_in_list_order(self, two_slimes):
        hero = two_slimes.characters()[0]
        first, second = two_slimes.enemies()
        log = trace(two_slimes, [BeforeHitEvent, DamageResultEvent, AfterHitEvent])

        two_slimes.attack(attack(hero, [second, first], attack_effect=AttackEffect.BLAST))

        assert log == [
            ("BeforeHitEvent", second), ("DamageResultEvent", second), ("AfterHitEvent", second),
            ("BeforeHitEvent", first), ("DamageResultEvent", first), ("AfterHitEvent", first),
        ]

    def test_damage_numbers(self, sim):
        hero, slime = sim.characters()[0], sim.enemies()[0]
        results = []
        sim.events.subscribe(DamageResultEvent, results.append)

        sim.attack(attack(hero, [slime]))

        [result] = results
        assert result.base_damage == pytest.approx(100.0)
        assert result.total_damage == pytest.approx(EXPECTED_HIT)
        assert result.hp_damage == pytest.approx(EXPECTED_HIT)
        assert result.health_remaining == pytest.approx(5000.0 - EXPECTED_HIT)
        assert not result.is_crit
        assert sim.hp(slime) == pytest.approx(5000.0 - EXPECTED_HIT)

    def test_energy_gain_uses_regen(self, sim):
        hero, slime = sim.characters()[0], sim.enemies()[0]
        sim.attack(attack(hero, [slime], energy_gain=20))
        assert sim.energy(hero) == pytest.approx(20.0)

    def test_stance_damage(self):
        sim = Simulation(make_config(enemies=[make_enemy(toughness=60)]))
        hero, slime = sim.characters()[0], sim.enemies()[0]

        sim.attack(attack(hero, [slime], stance_damage=10))

        assert sim.stance(slime) == 50.0


# =============================================================================
# Validation
# =============================================================================


class TestValidation:

    def test_invalid_defender_aborts_before_any_event(self, sim):
        hero, slime = sim.characters()[0], sim.enemies()[0]
        log = trace(sim)

        with pytest.raises(InvalidTargetError):
            sim.attack(attack(hero, [slime, 999]))

        assert log == []
        assert sim.hp(slime) == 5000.0

    def test_removed_attacker(self, sim):
        hero, slime = sim.characters()[0], sim.enemies()[0]
        sim.remove_target(hero)
        with pytest.raises(InvalidTargetError):
            sim.attack(attack(hero, [slime]))

    def test_no_targets(self, sim):
        hero = sim.characters()[0]
        with pytest.raises(InvalidTargetError):
            sim.attack(attack(hero, []))


# =============================================================================
# Hit snapshots
# =============================================================================


class TestBeforeHit:

    def test_immune_hit_deals_nothing(self, sim):
        hero, slime = sim.characters()[0], sim.enemies()[0]

        def immune(event):
            event.hit.immune = True

        sim.events.subscribe(BeforeHitEvent, immune)
        sim.attack(attack(hero, [slime], stance_damage=10))

        assert sim.hp(slime) == 5000.0

    def test_snapshot_edit_only_affects_this_hit(self, sim):
        hero, slime = sim.characters()[0], sim.enemies()[0]

        def boost(event):
            event.hit.attacker_stats.add_property(Property.ATK_FLAT, 100)

        sim.events.subscribe(BeforeHitEvent, boost)
        sim.attack(attack(hero, [slime]))

        assert sim.hp(slime) == pytest.approx(5000.0 - 2 * EXPECTED_HIT)
        assert sim.stats(hero).atk == 100.0

    def test_redirect_moves_the_hit(self, two_slimes):
        hero = two_slimes.characters()[0]
        first, second = two_slimes.enemies()
        results = []

        def redirect(event):
            event.hit.defender = second

        two_slimes.events.subscribe(BeforeHitEvent, redirect)
        two_slimes.events.subscribe(DamageResultEvent, results.append)
        two_slimes.attack(attack(hero, [first]))

        assert [r.defender for r in results] == [second]
        assert two_slimes.hp(first) == 5000.0
        assert two_slimes.hp(second) == pytest.approx(5000.0 - EXPECTED_HIT)

    def test_redirect_to_removed_target_is_skipped(self, two_slimes):
        hero = two_slimes.characters()[0]
        first, second = two_slimes.enemies()
        two_slimes.remove_target(second)
        results = []
        ends = []

        def redirect(event):
            event.hit.defender = second

        two_slimes.events.subscribe(BeforeHitEvent, redirect)
        two_slimes.events.subscribe(DamageResultEvent, results.append)
        two_slimes.events.subscribe(AttackEndEvent, ends.append)
        two_slimes.attack(attack(hero, [first]))

        assert results == []
        assert two_slimes.hp(first) == 5000.0
        assert len(ends) == 1


# =============================================================================
# Death and removal
# =============================================================================


class TestDeath:

    def test_lethal_hit_removes_defender(self, sim):
        hero, slime = sim.characters()[0], sim.enemies()[0]
        log = trace(sim)

        sim.attack(attack(hero, [slime], base_damage={DamageFormula.BY_ATK: 100.0}))

        names = [name for name, _ in log]
        assert names == [
            "AttackStartEvent", "BeforeHitEvent", "DamageResultEvent", "AfterHitEvent",
            "TargetDeathEvent", "TargetRemovedEvent", "AttackEndEvent",
        ]
        assert not sim.is_valid(slime)
        assert sim.enemies() == []
        assert slime not in sim.turn_order()

    def test_defender_removed_mid_attack_is_skipped(self, two_slimes):
        hero = two_slimes.characters()[0]
        first, second = two_slimes.enemies()

        def remove_second(event):
            if event.defender == first:
                two_slimes.remove_target(second)

        two_slimes.events.subscribe(AfterHitEvent, remove_second)
        results = []
        two_slimes.events.subscribe(DamageResultEvent, results.append)

        two_slimes.attack(attack(hero, [first, second]))

        assert [r.defender for r in results] == [first]


# =============================================================================
# Deferred attack end
# =============================================================================


class TestAttackEndHold:

    def test_hold_defers_until_release(self, sim):
        hero, slime = sim.characters()[0], sim.enemies()[0]
        holds = []
        ends = []
        sim.events.subscribe(AttackStartEvent, lambda e: holds.append(e.hold_end()))
        sim.events.subscribe(AttackEndEvent, ends.append)

        sim.attack(attack(hero, [slime]))
        assert ends == []
        assert sim._combat.held_attacks() == 1

        holds[0].release()
        holds[0].release()
        assert len(ends) == 1
        assert sim._combat.held_attacks() == 0

    def test_release_during_attack_ends_normally(self, sim):
        hero, slime = sim.characters()[0], sim.enemies()[0]
        holds = []
        ends = []
        sim.events.subscribe(AttackStartEvent, lambda e: holds.append(e.hold_end()))
        sim.events.subscribe(AfterHitEvent, lambda e: holds[0].release())
        sim.events.subscribe(AttackEndEvent, ends.append)

        sim.attack(attack(hero, [slime]))

        assert len(ends) == 1

    def test_forgotten_hold_released_at_turn_end(self, sim, caplog):
        hero, slime = sim.characters()[0], sim.enemies()[0]
        ends = []
        sim.events.subscribe(AttackStartEvent, lambda e: e.hold_end())
        sim.events.subscribe(AttackEndEvent, ends.append)

        sim.attack(attack(hero, [slime]))
        with caplog.at_level(logging.WARNING, logger="turnsim.engine.combat"):
            sim.events.emit(TurnEndEvent(hero))

        assert len(ends) == 1
        assert "still held" in caplog.text

    def test_failed_attack_leaves_nothing_pending(self, sim):
        hero, slime = sim.characters()[0], sim.enemies()[0]
        holds = []
        ends = []

        def explode(event):
            raise ValueError("boom")

        sim.events.subscribe(AttackStartEvent, lambda e: holds.append(e.hold_end()))
        sim.events.subscribe(AttackEndEvent, ends.append)
        sub = sim.events.subscribe(BeforeHitEvent, explode)

        with pytest.raises(ListenerError):
            sim.attack(attack(hero, [slime]))
        assert sim._combat.held_attacks() == 0

        holds[0].release()
        assert ends == []

        sim.events.unsubscribe(sub)
        sim.step()

        assert len(ends) == 1
        assert sim._combat.held_attacks() == 0

    def test_hold_outside_attack(self, sim):
        hero, slime = sim.characters()[0], sim.enemies()[0]
        event = AttackStartEvent(hero, [slime], AttackType.NORMAL, AttackEffect.SINGLE, DamageType.FIRE)
        with pytest.raises(RuntimeError):
            event.hold_end()


# =============================================================================
# Healing
# =============================================================================


class TestHeal:

    def test_overflow_reported(self, sim):
        hero = sim.characters()[0]
        sim.modify_hp(hero, -100)
        ends = []
        sim.events.subscribe(HealEndEvent, ends.append)

        sim.heal(Heal(source=hero, targets=[hero], heal_value=300))

        assert sim.hp(hero) == 1000.0
        [end] = ends
        assert end.heal_amount == pytest.approx(100.0)
        assert end.overflow_heal == pytest.approx(200.0)

    def test_heal_start_is_mutable(self, sim):
        hero = sim.characters()[0]
        sim.modify_hp(hero, -500)

        def halve(event):
            event.heal_amount /= 2

        sim.events.subscribe(HealStartEvent, halve)
        sim.heal(Heal(source=hero, targets=[hero], base_heal={DamageFormula.BY_ATK: 2.0}))

        assert sim.hp(hero) == pytest.approx(600.0)

    def test_heal_boost(self):
        sim = Simulation(make_config(characters=[make_character(extra={Property.HEAL_BOOST: 0.5})]))
        hero = sim.characters()[0]
        sim.modify_hp(hero, -500)

        sim.heal(Heal(source=hero, targets=[hero], heal_value=100))

        assert sim.hp(hero) == pytest.approx(650.0)

    def test_invalid_target(self, sim):
        hero = sim.characters()[0]
        with pytest.raises(InvalidTargetError):
            sim.heal(Heal(source=hero, targets=[hero, 999], heal_value=10))
