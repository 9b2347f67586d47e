"""
Modifier hook handlers.

Kinds that only contribute stats or flags (AttackUp, DefenseDown, Frozen,
Fortify) need no handler; the manager folds their metadata in directly.
"""

from __future__ import annotations

from ..event.events import BeforeHitEvent, TurnStartEvent
from ..model import AttackType, DamageFormula, DamageType, Property
from ..state.combat import Attack
from . import ModifierContext, ModifierHook, modifier_hook


# =============================================================================
# DEBUFFS
# =============================================================================

@modifier_hook(ModifierHook.ON_TURN_START, modifier="Burn")
def burn_tick(ctx: ModifierContext, event: TurnStartEvent) -> None:
    """Fire damage from the source at the start of the owner's turn."""
    engine = ctx.engine
    if not engine.is_valid(ctx.source) or not engine.is_valid(ctx.owner):
        return
    engine.attack(Attack(
        attacker=ctx.source,
        targets=[ctx.owner],
        attack_type=AttackType.DOT,
        damage_type=DamageType.FIRE,
        base_damage={DamageFormula.BY_ATK: ctx.param("dot_multiplier") * ctx.count},
    ))


@modifier_hook(ModifierHook.ON_BEFORE_BEING_HIT, modifier="Vulnerability")
def vulnerability_taken(ctx: ModifierContext, event: BeforeHitEvent) -> None:
    event.hit.defender_stats.add_property(
        Property.ALL_DMG_TAKEN, ctx.param("amount") * ctx.count
    )
