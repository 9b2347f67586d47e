"""
Simulation module - run configuration, the per-battle context, and the
batch driver.
"""

from .config import CharacterConfig, EnemyConfig, SimConfig, load_config
from .simulation import Simulation, IterationResult, cycles_elapsed, cycle_limit
from .batch import BatchConfig, BatchResult, BatchSimulator, derive_seeds

__all__ = [
    "CharacterConfig", "EnemyConfig", "SimConfig", "load_config",
    "Simulation", "IterationResult", "cycles_elapsed", "cycle_limit",
    "BatchConfig", "BatchResult", "BatchSimulator", "derive_seeds",
]
