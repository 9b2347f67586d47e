"""
Damage Rule Tests

The standard rule in isolation (synthetic snapshots) and end to end
through a Simulation with modifiers in play.
"""

import pytest

from conftest import make_config, make_enemy

from turnsim.calc import (
    DAMAGE_RULES,
    StandardDamageRule,
    create_damage_rule,
    def_multiplier,
    res_multiplier,
)
from turnsim.content import create_attack_up, create_defense_down, create_vulnerability
from turnsim.event import DamageResultEvent
from turnsim.model import AttackEffect, AttackType, DamageFormula, DamageType, Property
from turnsim.simulation import Simulation
from turnsim.state.combat import Attack, Hit
from turnsim.state.rng import Random
from turnsim.state.stats import Stats


def snapshot(target, level=80, **props):
    values = {Property[k.upper()]: v for k, v in props.items()}
    return Stats(target=target, level=level, props=values)


def make_hit(attacker_stats, defender_stats, damage_type=DamageType.FIRE, **kwargs):
    return Hit(
        attacker=attacker_stats.target,
        defender=defender_stats.target,
        attacker_stats=attacker_stats,
        defender_stats=defender_stats,
        attack_type=AttackType.NORMAL,
        attack_effect=AttackEffect.SINGLE,
        damage_type=damage_type,
        formula=kwargs.pop("formula", {DamageFormula.BY_ATK: 1.0}),
        **kwargs,
    )


# =============================================================================
# Multipliers
# =============================================================================


class TestMultipliers:

    def test_def_multiplier(self):
        assert def_multiplier(0, 80) == 1.0
        assert def_multiplier(1000, 80) == pytest.approx(0.5)
        assert def_multiplier(50, 80) == pytest.approx(1 - 50 / 1050)

    @pytest.mark.parametrize("res,expected", [
        (0.0, 1.0),
        (0.2, 0.8),
        (-0.5, 1.5),
        (0.95, 0.1),
        (-3.0, 2.0),
    ])
    def test_res_multiplier_clamped(self, res, expected):
        assert res_multiplier(res) == pytest.approx(expected)


# =============================================================================
# Standard rule
# =============================================================================


class TestStandardRule:

    def test_plain_hit(self):
        atk = snapshot(1, atk_base=1000, crit_chance=0.0)
        dfn = snapshot(2, def_base=0)
        hit = make_hit(atk, dfn)

        StandardDamageRule().compute(hit, Random(1))

        assert hit.base_damage == pytest.approx(1000.0)
        assert hit.bonus_damage == pytest.approx(1000.0)
        assert hit.total_damage == pytest.approx(1000.0)

    def test_flat_value_and_hit_ratio(self):
        atk = snapshot(1, atk_base=1000)
        dfn = snapshot(2)
        hit = make_hit(atk, dfn, damage_value=200, hit_ratio=0.5)

        StandardDamageRule().compute(hit, Random(1))

        assert hit.base_damage == pytest.approx(600.0)

    def test_guaranteed_crit_and_damage_bonus(self):
        atk = snapshot(1, atk_base=1000, crit_chance=1.0, crit_dmg=0.5,
                       all_dmg_percent=0.1, fire_dmg_percent=0.2)
        dfn = snapshot(2)
        hit = make_hit(atk, dfn)
        rng = Random(1)

        StandardDamageRule().compute(hit, rng)

        assert hit.is_crit
        assert hit.bonus_damage == pytest.approx(1000 * 1.5 * 1.3)
        # No draw is spent on a certain outcome
        assert rng.counter == 0

    def test_resistance_and_damage_taken(self):
        atk = snapshot(1, atk_base=1000)
        dfn = snapshot(2, fire_res=0.2, all_dmg_taken=0.25)
        hit = make_hit(atk, dfn)

        StandardDamageRule().compute(hit, Random(1))

        assert hit.total_damage == pytest.approx(1000 * 0.8 * 1.25)

    def test_toughness_reduction_until_broken(self):
        atk = snapshot(1, atk_base=1000)
        unbroken = snapshot(2)
        unbroken.max_stance, unbroken.stance = 60, 30
        broken = snapshot(3)
        broken.max_stance, broken.stance = 60, 0

        first = make_hit(atk, unbroken)
        second = make_hit(atk, broken)
        StandardDamageRule().compute(first, Random(1))
        StandardDamageRule().compute(second, Random(1))

        assert first.total_damage == pytest.approx(900.0)
        assert second.total_damage == pytest.approx(1000.0)

    def test_immune(self):
        hit = make_hit(snapshot(1, atk_base=1000, crit_chance=0.5), snapshot(2), immune=True)
        rng = Random(1)

        StandardDamageRule().compute(hit, rng)

        assert hit.total_damage == 0.0
        assert rng.counter == 0

    def test_partial_crit_uses_one_draw(self):
        atk = snapshot(1, atk_base=1000, crit_chance=0.5, crit_dmg=1.0)
        rng = Random(7)
        StandardDamageRule().compute(make_hit(atk, snapshot(2)), rng)
        assert rng.counter == 1

    def test_registry(self):
        assert "standard" in DAMAGE_RULES
        assert isinstance(create_damage_rule("standard"), StandardDamageRule)
        with pytest.raises(KeyError):
            create_damage_rule("nope")


# =============================================================================
# Through the simulation
# =============================================================================


class TestModifiedDamage:

    def hit_once(self, sim, attacker, defender):
        results = []
        sim.events.subscribe(DamageResultEvent, results.append)
        sim.attack(Attack(attacker=attacker, targets=[defender]))
        return results[-1].total_damage

    def test_vulnerability_uplift(self, sim):
        hero, slime = sim.characters()[0], sim.enemies()[0]
        baseline = self.hit_once(sim, hero, slime)

        sim.add_modifier(slime, create_vulnerability(hero, duration=2))
        boosted = self.hit_once(sim, hero, slime)

        assert baseline == pytest.approx(100 * (1 - 50 / 1050))
        assert boosted == pytest.approx(baseline * 1.10)

    def test_vulnerability_amount_override(self, sim):
        hero, slime = sim.characters()[0], sim.enemies()[0]
        baseline = self.hit_once(sim, hero, slime)

        sim.add_modifier(slime, create_vulnerability(hero, amount=0.5))

        assert self.hit_once(sim, hero, slime) == pytest.approx(baseline * 1.5)

    def test_attack_up_and_defense_down(self, sim):
        hero, slime = sim.characters()[0], sim.enemies()[0]

        sim.add_modifier(hero, create_attack_up(slime, count=3))
        sim.add_modifier(slime, create_defense_down(hero))

        defense = 50 * 0.85
        expected = 130 * (1 - defense / (defense + 1000))
        assert self.hit_once(sim, hero, slime) == pytest.approx(expected)

    def test_non_weak_element_resisted(self):
        sim = Simulation(make_config(enemies=[make_enemy(weaknesses=[DamageType.FIRE])]))
        hero, slime = sim.characters()[0], sim.enemies()[0]

        # The hero hits with PHYSICAL, which the slime resists by 20%
        assert self.hit_once(sim, hero, slime) == pytest.approx(100 * (1 - 50 / 1050) * 0.8)
