"""
Shared pytest fixtures for the turnsim test suite.

This module provides reusable fixtures for:
- Bare event bus / target registry / modifier manager wiring
- Run configs with hand-picked stats
- Fully built Simulations
"""

import pytest

from turnsim.engine.modifier import ModifierManager
from turnsim.engine.target import TargetRegistry
from turnsim.event import System
from turnsim.model import DamageType, TargetCategory
from turnsim.simulation import CharacterConfig, EnemyConfig, SimConfig, Simulation
from turnsim.state.rng import Random


# =============================================================================
# Component Fixtures
# =============================================================================


@pytest.fixture
def events():
    return System()


@pytest.fixture
def targets():
    return TargetRegistry()


@pytest.fixture
def character(targets):
    return targets.add_target(TargetCategory.CHARACTER, "hero")


@pytest.fixture
def enemy(targets):
    return targets.add_target(TargetCategory.ENEMY, "slime")


@pytest.fixture
def other_enemy(targets):
    return targets.add_target(TargetCategory.ENEMY, "slime2")


@pytest.fixture
def manager(events, targets):
    """Modifier manager with no engine; only hook-free kinds work here."""
    return ModifierManager(events, targets)


@pytest.fixture
def record(events):
    """Subscribe a recorder: record(EventType) -> list that fills on emit."""
    def _record(event_type):
        seen = []
        events.subscribe(event_type, seen.append)
        return seen
    return _record


@pytest.fixture
def rng_seed_42():
    """RNG initialized with seed 42 for deterministic tests."""
    return Random(42)


# =============================================================================
# Config Fixtures
# =============================================================================


def make_character(**overrides):
    data = dict(
        key="hero", hp=1000.0, atk=100.0, defense=50.0, spd=100.0,
        crit_chance=0.0, crit_damage=0.5, element=DamageType.PHYSICAL,
        script="basic_character",
    )
    data.update(overrides)
    return CharacterConfig(**data)


def make_enemy(**overrides):
    data = dict(
        key="slime", hp=5000.0, atk=80.0, defense=50.0, spd=90.0,
        weaknesses=list(DamageType), script="basic_enemy",
    )
    data.update(overrides)
    return EnemyConfig(**data)


def make_config(characters=None, enemies=None, **overrides):
    data = dict(
        characters=characters or [make_character()],
        enemies=enemies or [make_enemy()],
        seed=42,
        max_cycles=5,
    )
    data.update(overrides)
    return SimConfig(**data)


@pytest.fixture
def sim_config():
    return make_config()


@pytest.fixture
def sim(sim_config):
    """One hero (ATK 100, no crit) against one slime (DEF 50, weak to everything)."""
    return Simulation(sim_config)


@pytest.fixture
def config_dict():
    return {
        "seed": "BATTLE1",
        "max_cycles": 4,
        "characters": [
            {"key": "pyro", "hp": 1200, "atk": 650, "def": 450, "spd": 105,
             "element": "FIRE", "crit_chance": 0.5, "crit_damage": 1.0},
            {"key": "frost", "hp": 1100, "atk": 600, "def": 500, "spd": 98,
             "element": "ICE", "extra": {"ICE_DMG_PERCENT": 0.2}},
        ],
        "enemies": [
            {"key": "slime", "hp": 9000, "atk": 280, "def": 900, "spd": 90,
             "toughness": 60, "weaknesses": ["FIRE"]},
            {"key": "slime", "hp": 9000, "atk": 280, "def": 900, "spd": 92,
             "toughness": 60, "weaknesses": ["ICE"]},
        ],
    }
