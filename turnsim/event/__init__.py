"""
Event system - typed, synchronous, ordered publish/subscribe.
"""

from .handler import Handler, Subscription, Listener
from .system import System
from .events import (
    AttackStartEvent,
    AttackEndEvent,
    BeforeHitEvent,
    DamageResultEvent,
    AfterHitEvent,
    ModifierAddedEvent,
    ModifierRemovedEvent,
    ModifierExtendedDurationEvent,
    ModifierExtendedCountEvent,
    EnergyChangeEvent,
    HPChangeEvent,
    StanceChangeEvent,
    StanceBreakEvent,
    HealStartEvent,
    HealEndEvent,
    ShieldAddedEvent,
    ShieldRemovedEvent,
    GaugeChangeEvent,
    TurnStartEvent,
    TurnEndEvent,
    TargetDeathEvent,
    TargetRemovedEvent,
)

__all__ = [
    "Handler",
    "Subscription",
    "Listener",
    "System",
    "AttackStartEvent",
    "AttackEndEvent",
    "BeforeHitEvent",
    "DamageResultEvent",
    "AfterHitEvent",
    "ModifierAddedEvent",
    "ModifierRemovedEvent",
    "ModifierExtendedDurationEvent",
    "ModifierExtendedCountEvent",
    "EnergyChangeEvent",
    "HPChangeEvent",
    "StanceChangeEvent",
    "StanceBreakEvent",
    "HealStartEvent",
    "HealEndEvent",
    "ShieldAddedEvent",
    "ShieldRemovedEvent",
    "GaugeChangeEvent",
    "TurnStartEvent",
    "TurnEndEvent",
    "TargetDeathEvent",
    "TargetRemovedEvent",
]
