"""
Simulation Tests

End-to-end runs: termination, cycle accounting, cancellation, and
seed determinism.
"""

import json
import threading

import pytest

from conftest import make_character, make_config, make_enemy

from turnsim.content import create_burn, create_vulnerability
from turnsim.errors import InvalidTargetError
from turnsim.event import DamageResultEvent, TurnEndEvent
from turnsim.model import AttackEffect, DamageType, EnergyAdd, ModifyGauge
from turnsim.simulation import SimConfig, Simulation
from turnsim.state.combat import Attack, Heal, Shield
from turnsim.simulation.simulation import cycle_limit, cycles_elapsed


class TestCycles:

    @pytest.mark.parametrize("total_av,expected", [
        (0.0, 0),
        (149.9, 0),
        (150.0, 1),
        (249.9, 1),
        (250.0, 2),
        (950.0, 9),
    ])
    def test_cycles_elapsed(self, total_av, expected):
        assert cycles_elapsed(total_av) == expected

    def test_cycle_limit(self):
        assert cycle_limit(1) == 150.0
        assert cycle_limit(3) == 350.0


class TestRun:

    def test_victory(self):
        sim = Simulation(make_config(characters=[make_character(atk=100000)]))

        result = sim.run()

        assert result.victory
        assert result.turns == 1
        assert result.turn_order == [1]
        assert result.total_damage > 5000
        assert result.damage_dealt["hero"] == result.total_damage
        assert sim.enemies() == []

    def test_defeat(self):
        sim = Simulation(make_config(enemies=[make_enemy(atk=100000)]))

        result = sim.run()

        assert not result.victory
        assert sim.characters() == []
        assert result.turn_order == [1, 2]

    def test_stops_at_cycle_limit(self):
        sim = Simulation(make_config(
            characters=[make_character(atk=1)],
            enemies=[make_enemy(hp=1e9)],
            max_cycles=1,
        ))

        result = sim.run()

        # hero at 100, slime at 111.1; hero's next turn (200) is past 150
        assert result.turns == 2
        assert result.total_av <= cycle_limit(1)
        assert not result.victory
        assert not result.cancelled

    def test_longer_limit_runs_more_turns(self):
        short = make_config(characters=[make_character(atk=1)], enemies=[make_enemy(hp=1e9)], max_cycles=2)
        long = make_config(characters=[make_character(atk=1)], enemies=[make_enemy(hp=1e9)], max_cycles=6)

        assert Simulation(long).run().turns > Simulation(short).run().turns

    def test_result_is_json_serializable(self, sim):
        data = sim.run().to_dict()
        assert json.loads(json.dumps(data)) == data
        assert data["target_id_mapping"] == {"1": "hero", "2": "slime"}


class TestCancellation:

    def test_cancel_before_start(self, sim):
        cancel = threading.Event()
        cancel.set()

        result = sim.run(cancel)

        assert result.cancelled
        assert result.turns == 0

    def test_cancel_between_turns(self, sim):
        cancel = threading.Event()
        sim.events.subscribe(TurnEndEvent, lambda e: cancel.set())

        result = sim.run(cancel)

        assert result.cancelled
        assert result.turns == 1


class TestDeterminism:

    def test_same_seed_same_result(self, config_dict):
        config = SimConfig.from_dict(config_dict)

        first = Simulation(config).run()
        second = Simulation(config).run()

        assert first.to_dict() == second.to_dict()
        assert first.rand_draws == second.rand_draws > 0

    def test_interleaved_runs_are_isolated(self, config_dict):
        config = SimConfig.from_dict(config_dict)
        expected = Simulation(config).run().to_dict()

        a, b = Simulation(config), Simulation(config)
        for _ in range(3):
            a.step()
            b.step()

        assert a.run().to_dict() == expected
        assert b.run().to_dict() == expected

    def test_seeds_change_outcomes(self, config_dict):
        config = SimConfig.from_dict(config_dict)
        damages = {
            json.dumps(Simulation(config.with_seed(seed)).run().damage_dealt, sort_keys=True)
            for seed in range(6)
        }
        assert len(damages) > 1


class TestScriptedDeterminism:

    def script(self, sim):
        """A fixed sequence of facade calls; returns damage numbers and turn order."""
        numbers = []
        sim.events.subscribe(DamageResultEvent, lambda e: numbers.append(
            (e.attacker, e.defender, e.base_damage, e.bonus_damage, e.total_damage,
             e.hp_damage, e.shield_damage, e.is_crit)))
        pyro, frost = sim.characters()
        first, second = sim.enemies()

        sim.add_modifier(first, create_vulnerability(frost, duration=2))
        sim.attack(Attack(attacker=pyro, targets=[first, second], damage_type=DamageType.FIRE,
                          attack_effect=AttackEffect.BLAST))
        sim.modify_gauge(frost, ModifyGauge.NORMALIZED, 0.3)
        sim.add_modifier(second, create_burn(pyro, duration=3))
        order = [sim.step() for _ in range(6)]
        return numbers, order

    def test_same_seed_same_numbers(self, config_dict):
        config = SimConfig.from_dict(config_dict)
        assert self.script(Simulation(config)) == self.script(Simulation(config))


class TestNeverIssuedTarget:

    GHOST = 999

    def state(self, sim):
        return (
            sim.result().to_dict(),
            [sim.stats(t) for t in sim.characters() + sim.enemies()],
            [sim.gauge(t) for t in sim.turn_order()],
            [sim.modifiers(t) for t in sim.characters() + sim.enemies()],
        )

    def test_mutations_rejected_without_effect(self, sim):
        hero, slime = sim.characters()[0], sim.enemies()[0]
        sim.add_modifier(slime, create_vulnerability(hero))
        before = self.state(sim)
        ghost = self.GHOST

        calls = [
            lambda: sim.add_modifier(ghost, create_vulnerability(hero)),
            lambda: sim.remove_modifier(ghost, "Vulnerability"),
            lambda: sim.remove_modifier_from_source(ghost, hero, "Vulnerability"),
            lambda: sim.extend_modifier_duration(ghost, "Vulnerability", 1),
            lambda: sim.extend_modifier_count(ghost, "Vulnerability", 1),
            lambda: sim.add_energy(ghost, EnergyAdd.FIXED, 10),
            lambda: sim.modify_hp(ghost, -10),
            lambda: sim.modify_stance(ghost, -10),
            lambda: sim.modify_gauge(ghost, ModifyGauge.BY_AMOUNT, 10),
            lambda: sim.set_gauge(ghost, 10),
            lambda: sim.attack(Attack(attacker=hero, targets=[slime, ghost])),
            lambda: sim.attack(Attack(attacker=ghost, targets=[slime])),
            lambda: sim.heal(Heal(source=hero, targets=[ghost], heal_value=10)),
            lambda: sim.add_shield("s", Shield(source=hero, target=ghost, shield_value=10)),
        ]
        for call in calls:
            with pytest.raises(InvalidTargetError):
                call()

        assert self.state(sim) == before
