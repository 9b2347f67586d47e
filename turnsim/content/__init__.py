"""
Content module - static game data definitions.

Contains modifier kinds and their instance factories.
"""

# Modifiers
from .modifiers import (
    ModifierConfig, MODIFIER_DATA,
    create_modifier_config, create_modifier,
    create_burn, create_vulnerability, create_defense_down,
    create_frozen, create_attack_up, create_fortify,
)

__all__ = [
    "ModifierConfig", "MODIFIER_DATA",
    "create_modifier_config", "create_modifier",
    "create_burn", "create_vulnerability", "create_defense_down",
    "create_frozen", "create_attack_up", "create_fortify",
]
