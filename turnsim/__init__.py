"""
turnsim - deterministic turn-based combat simulation engine.

Modules:
- event: typed synchronous publish/subscribe bus and event payloads
- engine: modifier manager, attributes, combat, shields, turn order, targets
- calc: pluggable damage rules
- content / registry: modifier kinds, their hooks, and action scripts
- simulation: run config, per-battle Simulation context, batch driver
"""

__version__ = "0.1.0"

from .errors import (
    EngineError, InvalidTargetError, InvalidModifierError, NotFoundError,
    ListenerError, ReentrantEmissionError, ConfigError,
)
from .key import TargetID, ModifierKey
from .model import (
    TargetCategory, StatusType, BehaviorFlag, AttackType, AttackEffect,
    DamageType, DamageFormula, EnergyAdd, ModifyGauge, StackingBehavior,
    DurationMerge, TickMoment, Property,
)
from .state import (
    Random, BaseStats, Stats, ModifierInstance, INFINITE_DURATION,
    Attack, Hit, Heal, Shield, CharacterInfo, EnemyInfo,
)
from .engine import Engine
from .registry import ModifierHook, ModifierContext, modifier_hook, action_script
from .simulation import (
    SimConfig, CharacterConfig, EnemyConfig, load_config,
    Simulation, IterationResult, BatchConfig, BatchResult, BatchSimulator,
)

__all__ = [
    "__version__",
    # Errors
    "EngineError", "InvalidTargetError", "InvalidModifierError", "NotFoundError",
    "ListenerError", "ReentrantEmissionError", "ConfigError",
    # Identifiers and enums
    "TargetID", "ModifierKey",
    "TargetCategory", "StatusType", "BehaviorFlag", "AttackType", "AttackEffect",
    "DamageType", "DamageFormula", "EnergyAdd", "ModifyGauge", "StackingBehavior",
    "DurationMerge", "TickMoment", "Property",
    # State
    "Random", "BaseStats", "Stats", "ModifierInstance", "INFINITE_DURATION",
    "Attack", "Hit", "Heal", "Shield", "CharacterInfo", "EnemyInfo",
    # Engine
    "Engine", "ModifierHook", "ModifierContext", "modifier_hook", "action_script",
    # Simulation
    "SimConfig", "CharacterConfig", "EnemyConfig", "load_config",
    "Simulation", "IterationResult", "BatchConfig", "BatchResult", "BatchSimulator",
]
