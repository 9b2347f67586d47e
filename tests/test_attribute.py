"""Attribute service: stat snapshots, energy policies, HP and stance."""

import pytest

from conftest import make_character, make_config, make_enemy

from turnsim.content import create_attack_up, create_defense_down
from turnsim.errors import InvalidTargetError
from turnsim.event import (
    EnergyChangeEvent,
    HPChangeEvent,
    StanceBreakEvent,
    StanceChangeEvent,
    TargetDeathEvent,
    TurnStartEvent,
)
from turnsim.model import EnergyAdd, Property
from turnsim.simulation import Simulation


@pytest.fixture
def hero(sim):
    return sim.characters()[0]


@pytest.fixture
def slime(sim):
    return sim.enemies()[0]


def recorder(sim, event_type):
    seen = []
    sim.events.subscribe(event_type, seen.append)
    return seen


class TestStats:

    def test_base_values(self, sim, hero):
        stats = sim.stats(hero)
        assert stats.atk == 100.0
        assert stats.defense == 50.0
        assert stats.max_hp == 1000.0
        assert stats.current_hp == 1000.0
        assert stats.level == 80

    def test_modifiers_fold_in(self, sim, hero, slime):
        sim.add_modifier(hero, create_attack_up(slime, count=2))
        sim.add_modifier(hero, create_defense_down(slime))

        stats = sim.stats(hero)
        assert stats.atk == pytest.approx(120.0)
        assert stats.defense == pytest.approx(42.5)
        assert stats.debuff_count == 1

    def test_extra_properties(self):
        sim = Simulation(make_config(characters=[make_character(
            extra={Property.EFFECT_HIT_RATE: 0.4, Property.EFFECT_RES: 0.25})]))
        stats = sim.stats(sim.characters()[0])

        assert stats.effect_hit_rate == pytest.approx(0.4)
        assert stats.effect_res == pytest.approx(0.25)

    def test_snapshot_is_detached(self, sim, hero):
        snapshot = sim.stats(hero)
        snapshot.add_property(Property.ATK_FLAT, 500)
        assert sim.stats(hero).atk == 100.0

    def test_target_without_attributes(self, sim):
        totem = sim.add_neutral("totem")
        with pytest.raises(InvalidTargetError, match="no attributes"):
            sim.stats(totem)


class TestEnergy:

    @pytest.fixture
    def regen_sim(self):
        hero = make_character(extra={Property.ENERGY_REGEN: 0.2})
        return Simulation(make_config(characters=[hero]))

    def test_normal_scales_with_regen(self, regen_sim):
        hero = regen_sim.characters()[0]
        assert regen_sim.add_energy(hero, EnergyAdd.NORMAL, 10) == pytest.approx(12.0)

    def test_fixed_ignores_regen(self, regen_sim):
        hero = regen_sim.characters()[0]
        assert regen_sim.add_energy(hero, EnergyAdd.FIXED, 10) == pytest.approx(10.0)

    def test_replace_and_clamp(self, sim, hero):
        assert sim.add_energy(hero, EnergyAdd.REPLACE, 500) == 120.0
        assert sim.full_energy(hero)
        assert sim.add_energy(hero, EnergyAdd.FIXED, -1000) == 0.0
        assert not sim.full_energy(hero)

    def test_event_always_emitted(self, sim, hero):
        seen = recorder(sim, EnergyChangeEvent)
        sim.add_energy(hero, EnergyAdd.FIXED, 0)
        sim.add_energy(hero, EnergyAdd.FIXED, 30)

        assert [(e.old_energy, e.new_energy) for e in seen] == [(0.0, 0.0), (0.0, 30.0)]

    def test_starting_energy_from_config(self):
        sim = Simulation(make_config(characters=[make_character(energy=60)]))
        assert sim.energy(sim.characters()[0]) == 60.0


class TestHP:

    def test_clamped_to_range(self, sim, hero, slime):
        assert sim.modify_hp(hero, 99999) == 1000.0
        assert sim.modify_hp(slime, -99999) == 0.0

    def test_reaching_zero_is_lethal(self, sim, hero, slime):
        deaths = recorder(sim, TargetDeathEvent)

        sim.modify_hp(slime, -2500, hero)
        assert sim.is_valid(slime)
        sim.set_hp_ratio(slime, 0.0, hero)

        assert [(d.target, d.killer) for d in deaths] == [(slime, hero)]
        assert not sim.is_valid(slime)
        assert sim.enemies() == []

    def test_event_carries_source(self, sim, hero, slime):
        seen = recorder(sim, HPChangeEvent)
        sim.modify_hp(hero, -250, slime)

        [event] = seen
        assert event.source == slime
        assert (event.old_hp, event.new_hp, event.max_hp) == (1000.0, 750.0, 1000.0)

    def test_set_hp_ratio(self, sim, hero):
        assert sim.set_hp_ratio(hero, 0.25) == pytest.approx(250.0)
        assert sim.hp(hero) == pytest.approx(250.0)


class TestStance:

    @pytest.fixture
    def tough(self):
        return Simulation(make_config(enemies=[make_enemy(toughness=60)]))

    def test_no_toughness_unaffected(self, sim, slime):
        seen = recorder(sim, StanceChangeEvent)
        assert sim.modify_stance(slime, -30) == 0.0
        assert seen == []

    def test_break_emitted_once(self, tough):
        slime = tough.enemies()[0]
        breaks = recorder(tough, StanceBreakEvent)

        tough.modify_stance(slime, -40)
        tough.modify_stance(slime, -40)
        tough.modify_stance(slime, -40)

        assert tough.stance(slime) == 0.0
        assert len(breaks) == 1
        assert tough.stats(slime).is_broken

    def test_recovers_at_own_turn_start(self, tough):
        slime = tough.enemies()[0]
        tough.modify_stance(slime, -60)

        tough.events.emit(TurnStartEvent(slime, 0.0, 0.0))

        assert tough.stance(slime) == 60.0
        assert not tough.stats(slime).is_broken
