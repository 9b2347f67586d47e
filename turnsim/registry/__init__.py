"""
Decorator-based registration for modifier behavior and action scripts.

Usage:
    from turnsim.registry import modifier_hook, action_script, ModifierHook

    @modifier_hook(ModifierHook.ON_BEFORE_BEING_HIT, modifier="Vulnerability")
    def vulnerability_taken(ctx: ModifierContext, event: BeforeHitEvent) -> None:
        event.hit.defender_stats.add_property(Property.ALL_DMG_TAKEN, ctx.param("amount"))

    @action_script("basic_enemy")
    class BasicEnemy(ActionScript):
        ...

Kind metadata lives in content/modifiers.py; this module wires it into the
default MODIFIER_REGISTRY. A simulation may be given its own registry (see
ModifierRegistry.copy) so tests can add kinds without touching the default.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from ..content.modifiers import MODIFIER_DATA, ModifierConfig, create_modifier_config
from ..key import ModifierKey, TargetID
from ..state.modifier import ModifierInstance

if TYPE_CHECKING:
    from ..engine import Engine


# =============================================================================
# Hooks
# =============================================================================

class ModifierHook(Enum):
    """Points at which a modifier kind may run code."""
    # Lifecycle
    ON_ADD = "onAdd"
    ON_REMOVE = "onRemove"
    ON_EXTEND_DURATION = "onExtendDuration"
    ON_EXTEND_COUNT = "onExtendCount"

    # Turn
    ON_TURN_START = "onTurnStart"
    ON_TURN_END = "onTurnEnd"

    # Hit pipeline (owner attacking / owner being hit)
    ON_BEFORE_HIT = "onBeforeHit"
    ON_BEFORE_BEING_HIT = "onBeforeBeingHit"
    ON_AFTER_HIT = "onAfterHit"
    ON_AFTER_BEING_HIT = "onAfterBeingHit"
    ON_DAMAGE_DEALT = "onDamageDealt"
    ON_DAMAGE_TAKEN = "onDamageTaken"

    # Healing
    ON_BEFORE_BEING_HEALED = "onBeforeBeingHealed"


# =============================================================================
# Context
# =============================================================================

@dataclass
class ModifierContext:
    """Passed to every modifier hook."""
    engine: Engine
    modifier: ModifierInstance
    config: ModifierConfig

    @property
    def owner(self) -> TargetID:
        return self.modifier.owner

    @property
    def source(self) -> TargetID:
        return self.modifier.source

    @property
    def count(self) -> float:
        return self.modifier.count

    @property
    def duration(self) -> int:
        return self.modifier.duration

    def param(self, key: str, default: float = 0.0) -> float:
        """Instance state overrides the kind's params."""
        state = self.modifier.state
        if isinstance(state, dict) and state.get(key) is not None:
            return state[key]
        return self.config.params.get(key, default)

    def remove_self(self) -> None:
        self.engine.remove_modifier_instance(self.modifier)


Hook = Callable[[ModifierContext, Any], None]


# =============================================================================
# Registry
# =============================================================================

class ModifierRegistry:
    """Kind metadata plus ordered hook functions per (kind, hook)."""

    def __init__(self, name: str = "modifiers"):
        self.name = name
        self._configs: Dict[ModifierKey, ModifierConfig] = {}
        self._hooks: Dict[ModifierKey, Dict[ModifierHook, List[Hook]]] = {}

    def register(self, config: ModifierConfig, replace: bool = False) -> ModifierConfig:
        if config.name in self._configs and not replace:
            raise ValueError(f"modifier kind already registered: {config.name}")
        self._configs[config.name] = config
        return config

    def get(self, name: ModifierKey) -> Optional[ModifierConfig]:
        return self._configs.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._configs

    def list_modifiers(self) -> List[ModifierKey]:
        return list(self._configs.keys())

    def add_hook(self, hook: ModifierHook, modifier: ModifierKey, func: Hook) -> None:
        self._hooks.setdefault(modifier, {}).setdefault(hook, []).append(func)

    def hook(self, hook: ModifierHook, modifier: ModifierKey) -> Callable[[Hook], Hook]:
        """Decorator form of add_hook for this registry."""
        def decorator(func: Hook) -> Hook:
            self.add_hook(hook, modifier, func)
            return func
        return decorator

    def get_hooks(self, modifier: ModifierKey, hook: ModifierHook) -> List[Hook]:
        return self._hooks.get(modifier, {}).get(hook, [])

    def copy(self, name: Optional[str] = None) -> ModifierRegistry:
        new = ModifierRegistry(name or self.name)
        new._configs = dict(self._configs)
        new._hooks = {
            kind: {hook: list(funcs) for hook, funcs in hooks.items()}
            for kind, hooks in self._hooks.items()
        }
        return new


# Default registry
MODIFIER_REGISTRY = ModifierRegistry("modifiers")

for _name in MODIFIER_DATA:
    MODIFIER_REGISTRY.register(create_modifier_config(_name))


def modifier_hook(hook: ModifierHook, modifier: ModifierKey):
    """
    Decorator to register a hook on the default registry.

    Args:
        hook: Hook point
        modifier: Kind name this hook belongs to
    """
    return MODIFIER_REGISTRY.hook(hook, modifier)


# =============================================================================
# Action scripts
# =============================================================================

ACTION_SCRIPTS: Dict[str, Callable[..., Any]] = {}


def action_script(name: str):
    """
    Decorator to register an action script factory.

    The factory is called as factory(engine, target) and must return an
    object with an act() method.
    """
    def decorator(factory):
        ACTION_SCRIPTS[name] = factory
        return factory
    return decorator


def get_action_script(name: str) -> Optional[Callable[..., Any]]:
    return ACTION_SCRIPTS.get(name)


__all__ = [
    "ModifierHook",
    "ModifierContext",
    "ModifierRegistry",
    "MODIFIER_REGISTRY",
    "modifier_hook",
    "ACTION_SCRIPTS",
    "action_script",
    "get_action_script",
]

# Import handlers to register them (decorators populate the registries)
from . import modifiers as _modifiers  # noqa: F401, E402
from . import scripts as _scripts  # noqa: F401, E402
