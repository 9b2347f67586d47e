"""
Modifier manager - single owner of every live modifier instance.

Instances are kept per owner in insertion order, and owners are kept in the
order they first received a modifier, so every walk over "all modifiers" is
reproducible.

Lifecycle:
    add_modifier -> [merge | replace | new] -> ON_ADD -> ModifierAddedEvent
    ... ticks at the owner's turn boundaries ...
    duration 0 / count 0 / explicit removal -> ON_REMOVE -> ModifierRemovedEvent

Hook dispatch:
    The manager subscribes once per event type and forwards to the hooks
    registered for each instance of the relevant owner:

    TurnStartEvent    -> ON_TURN_START (active)      then TURN_START ticks
    TurnEndEvent      -> ON_TURN_END (active)        then TURN_END ticks
    BeforeHitEvent    -> ON_BEFORE_HIT (attacker),   ON_BEFORE_BEING_HIT (defender)
    DamageResultEvent -> ON_DAMAGE_DEALT (attacker), ON_DAMAGE_TAKEN (defender)
    AfterHitEvent     -> ON_AFTER_HIT (attacker),    ON_AFTER_BEING_HIT (defender)
    HealStartEvent    -> ON_BEFORE_BEING_HEALED (target)

An instance added during its owner's own turn does not lose duration at
that turn's end unless it was added with tick_immediately. TURN_START kinds
only tick instances that were already present when the turn started.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, Iterable, List, Optional

from ..errors import InvalidModifierError, ListenerError, ReentrantEmissionError
from ..event.events import (
    AfterHitEvent,
    BeforeHitEvent,
    DamageResultEvent,
    HealStartEvent,
    ModifierAddedEvent,
    ModifierExtendedCountEvent,
    ModifierExtendedDurationEvent,
    ModifierRemovedEvent,
    TurnEndEvent,
    TurnStartEvent,
)
from ..event.handler import listener_name
from ..event.system import System
from ..key import ModifierKey, TargetID
from ..model import BehaviorFlag, DurationMerge, Property, StackingBehavior, StatusType, TickMoment
from ..registry import MODIFIER_REGISTRY, ModifierContext, ModifierHook, ModifierRegistry
from ..content.modifiers import ModifierConfig
from ..state.modifier import INFINITE_DURATION, ModifierInstance
from .target import TargetRegistry

if TYPE_CHECKING:
    from . import Engine

logger = logging.getLogger(__name__)


def merge_duration(policy: DurationMerge, old: int, new: int) -> int:
    """Combine two remaining durations; -1 is infinite."""
    if policy is DurationMerge.REPLACE:
        return new
    if old == INFINITE_DURATION or new == INFINITE_DURATION:
        return INFINITE_DURATION
    if policy is DurationMerge.SUM:
        return old + new
    return max(old, new)


class ModifierManager:
    """Stacking, ticking and hook dispatch for all targets."""

    def __init__(
        self,
        events: System,
        targets: TargetRegistry,
        registry: Optional[ModifierRegistry] = None,
        engine: Optional[Engine] = None,
    ):
        self.events = events
        self.targets = targets
        self.registry = registry or MODIFIER_REGISTRY
        self.engine = engine
        self._instances: Dict[TargetID, List[ModifierInstance]] = {}
        self._active: Optional[TargetID] = None

        events.subscribe(TurnStartEvent, self._on_turn_start)
        events.subscribe(TurnEndEvent, self._on_turn_end)
        events.subscribe(BeforeHitEvent, self._on_before_hit)
        events.subscribe(DamageResultEvent, self._on_damage_result)
        events.subscribe(AfterHitEvent, self._on_after_hit)
        events.subscribe(HealStartEvent, self._on_heal_start)

    # =========================================================================
    # Add
    # =========================================================================

    def add_modifier(self, target: TargetID, instance: ModifierInstance) -> None:
        """
        Apply a modifier to `target`.

        Raises:
            InvalidTargetError: target unknown or removed
            InvalidModifierError: missing name/source, unknown kind, or
                count/duration out of domain
        """
        self.targets.validate(target)
        config = self._validate(instance)

        live = instance.copy()
        live.owner = target
        live.status_type = config.status_type
        live.flags = config.flags
        live.max_count = config.max_count
        live.count = min(live.count if live.count is not None else 1.0, config.max_count)
        live.skip_next_tick = self._grace(target, live, config)

        existing = self._find_merge_target(target, live, config)
        if existing is not None and config.stacking is StackingBehavior.REPLACE_BY_SOURCE:
            self._remove(existing)
            existing = None

        if existing is None:
            self._instances.setdefault(target, []).append(live)
            logger.debug("add %s on %s from %s (count=%s, duration=%s)",
                         live.name, target, live.source, live.count, live.duration)
            self._run_hooks(live, ModifierHook.ON_ADD, None)
            self.events.emit(ModifierAddedEvent(target, live.copy(), merged=False))
            return

        existing.count = min(existing.count + live.count, config.max_count)
        existing.duration = merge_duration(config.duration_merge, existing.duration, live.duration)
        existing.skip_next_tick = existing.skip_next_tick or live.skip_next_tick
        if live.state is not None:
            existing.state = live.state
        if live.stats is not None:
            existing.stats = live.stats
        logger.debug("merge %s on %s from %s (count=%s, duration=%s)",
                     existing.name, target, existing.source, existing.count, existing.duration)
        self._run_hooks(existing, ModifierHook.ON_ADD, None)
        self.events.emit(ModifierAddedEvent(target, existing.copy(), merged=True))

    def _validate(self, instance: ModifierInstance) -> ModifierConfig:
        if not instance.name:
            raise InvalidModifierError(instance, "missing modifier kind")
        if instance.source is None:
            raise InvalidModifierError(instance, "missing source")
        config = self.registry.get(instance.name)
        if config is None:
            raise InvalidModifierError(instance, f"unknown modifier kind {instance.name!r}")
        if not self.targets.was_issued(instance.source):
            raise InvalidModifierError(instance, f"unknown source {instance.source}")
        if instance.duration != INFINITE_DURATION and instance.duration < 1:
            raise InvalidModifierError(instance, f"duration {instance.duration} out of domain")
        if instance.count is not None and instance.count <= 0:
            raise InvalidModifierError(instance, f"count {instance.count} out of domain")
        return config

    def _grace(self, target: TargetID, live: ModifierInstance, config: ModifierConfig) -> bool:
        # TURN_START kinds never tick on the turn they were added in anyway
        return (target == self._active
                and config.tick_at is TickMoment.TURN_END
                and not live.tick_immediately
                and not live.is_infinite)

    def _find_merge_target(
        self, target: TargetID, live: ModifierInstance, config: ModifierConfig
    ) -> Optional[ModifierInstance]:
        if config.stacking is StackingBehavior.MULTIPLE:
            return None
        for inst in self._instances.get(target, ()):
            if inst.name != live.name:
                continue
            if config.stacking is StackingBehavior.UNIQUE or inst.source == live.source:
                return inst
        return None

    # =========================================================================
    # Remove
    # =========================================================================

    def remove_modifier(self, target: TargetID, kind: ModifierKey) -> None:
        """Remove every instance of `kind` on `target`, whatever its source."""
        self.targets.validate(target)
        for inst in self._matching(target, kind):
            self._remove(inst)

    def remove_modifier_from_source(self, target: TargetID, source: TargetID, kind: ModifierKey) -> None:
        self.targets.validate(target)
        for inst in self._matching(target, kind):
            if inst.source == source:
                self._remove(inst)

    def remove_modifier_instance(self, instance: ModifierInstance) -> bool:
        """Remove one live instance by identity. False if it is already gone."""
        if not self._is_live(instance):
            return False
        self._remove(instance)
        return True

    def remove_all(self, target: TargetID) -> None:
        """Drop every instance owned by `target` (used when it leaves combat)."""
        for inst in list(self._instances.get(target, ())):
            if self._is_live(inst):
                self._remove(inst)
        self._instances.pop(target, None)

    def _remove(self, instance: ModifierInstance) -> None:
        owned = self._instances.get(instance.owner, [])
        for i, inst in enumerate(owned):
            if inst is instance:
                del owned[i]
                break
        logger.debug("remove %s from %s (source %s)", instance.name, instance.owner, instance.source)
        self._run_hooks(instance, ModifierHook.ON_REMOVE, None)
        self.events.emit(ModifierRemovedEvent(instance.owner, instance.copy()))

    # =========================================================================
    # Extend
    # =========================================================================

    def extend_modifier_duration(self, target: TargetID, kind: ModifierKey, amount: int) -> None:
        """
        Add `amount` turns to every finite instance of `kind`. Reaching zero
        removes the instance; infinite instances are left alone.
        """
        self.targets.validate(target)
        if amount == 0:
            return
        for inst in self._matching(target, kind):
            if inst.is_infinite or not self._is_live(inst):
                continue
            old = inst.duration
            inst.duration = max(0, old + amount)
            self._run_hooks(inst, ModifierHook.ON_EXTEND_DURATION, None)
            self.events.emit(ModifierExtendedDurationEvent(target, inst.copy(), old, inst.duration))
            if inst.duration == 0 and self._is_live(inst):
                self._remove(inst)

    def extend_modifier_count(self, target: TargetID, kind: ModifierKey, amount: float) -> None:
        """Add to count, clamped to [0, max_count]. Reaching zero removes."""
        self.targets.validate(target)
        if amount == 0:
            return
        for inst in self._matching(target, kind):
            if not self._is_live(inst):
                continue
            old = inst.count
            inst.count = min(max(0.0, old + amount), inst.max_count)
            self._run_hooks(inst, ModifierHook.ON_EXTEND_COUNT, None)
            self.events.emit(ModifierExtendedCountEvent(target, inst.copy(), old, inst.count))
            if inst.count <= 0 and self._is_live(inst):
                self._remove(inst)

    # =========================================================================
    # Queries
    # =========================================================================

    def has_modifier(self, target: TargetID, kind: ModifierKey) -> bool:
        return any(inst.name == kind for inst in self._instances.get(target, ()))

    def modifier_count(self, target: TargetID, status_type: StatusType) -> int:
        """Number of live instances of the given status type."""
        return sum(1 for inst in self._instances.get(target, ()) if inst.status_type is status_type)

    def has_behavior_flag(self, target: TargetID, *flags: BehaviorFlag) -> bool:
        wanted = set(flags)
        return any(inst.flags & wanted for inst in self._instances.get(target, ()))

    def behavior_flags(self, target: TargetID) -> FrozenSet[BehaviorFlag]:
        flags = set()
        for inst in self._instances.get(target, ()):
            flags |= inst.flags
        return frozenset(flags)

    def modifiers(self, target: TargetID, kind: Optional[ModifierKey] = None) -> List[ModifierInstance]:
        """Copies of the live instances, in insertion order."""
        return [inst.copy() for inst in self._instances.get(target, ())
                if kind is None or inst.name == kind]

    def modifier_stats(self, target: TargetID) -> Dict[Property, float]:
        """Summed property contributions of every live instance."""
        totals: Dict[Property, float] = {}
        for inst in self._instances.get(target, ()):
            config = self.registry.get(inst.name)
            stats = inst.stats if inst.stats is not None else config.stats
            scale = inst.count if config.stats_scale_with_count else 1.0
            for prop, amount in stats.items():
                totals[prop] = totals.get(prop, 0.0) + amount * scale
        return totals

    def _matching(self, target: TargetID, kind: ModifierKey) -> List[ModifierInstance]:
        return [inst for inst in self._instances.get(target, ()) if inst.name == kind]

    def _is_live(self, instance: ModifierInstance) -> bool:
        return any(inst is instance for inst in self._instances.get(instance.owner, ()))

    # =========================================================================
    # Ticking
    # =========================================================================

    def _tick_at(self, instance: ModifierInstance) -> TickMoment:
        return self.registry.get(instance.name).tick_at

    def _tick(self, due: Iterable[ModifierInstance]) -> None:
        for inst in due:
            if not self._is_live(inst) or inst.is_infinite:
                continue
            if inst.skip_next_tick:
                inst.skip_next_tick = False
                continue
            inst.duration -= 1
            if inst.duration <= 0:
                self._remove(inst)

    def _on_turn_start(self, event: TurnStartEvent) -> None:
        owner = event.active
        self._active = owner
        due = [inst for inst in self._instances.get(owner, ())
               if self._tick_at(inst) is TickMoment.TURN_START]
        self._dispatch(owner, ModifierHook.ON_TURN_START, event)
        self._tick(due)

    def _on_turn_end(self, event: TurnEndEvent) -> None:
        owner = event.active
        self._dispatch(owner, ModifierHook.ON_TURN_END, event)
        self._tick([inst for inst in self._instances.get(owner, ())
                    if self._tick_at(inst) is TickMoment.TURN_END])
        self._active = None

    # =========================================================================
    # Hook dispatch
    # =========================================================================

    def _on_before_hit(self, event: BeforeHitEvent) -> None:
        self._dispatch(event.attacker, ModifierHook.ON_BEFORE_HIT, event)
        self._dispatch(event.defender, ModifierHook.ON_BEFORE_BEING_HIT, event)

    def _on_damage_result(self, event: DamageResultEvent) -> None:
        self._dispatch(event.attacker, ModifierHook.ON_DAMAGE_DEALT, event)
        self._dispatch(event.defender, ModifierHook.ON_DAMAGE_TAKEN, event)

    def _on_after_hit(self, event: AfterHitEvent) -> None:
        self._dispatch(event.attacker, ModifierHook.ON_AFTER_HIT, event)
        self._dispatch(event.defender, ModifierHook.ON_AFTER_BEING_HIT, event)

    def _on_heal_start(self, event: HealStartEvent) -> None:
        self._dispatch(event.target, ModifierHook.ON_BEFORE_BEING_HEALED, event)

    def _dispatch(self, owner: TargetID, hook: ModifierHook, event: Any) -> None:
        for inst in list(self._instances.get(owner, ())):
            if self._is_live(inst):
                self._run_hooks(inst, hook, event)

    def _run_hooks(self, instance: ModifierInstance, hook: ModifierHook, event: Any) -> None:
        hooks = self.registry.get_hooks(instance.name, hook)
        if not hooks:
            return
        config = self.registry.get(instance.name)
        ctx = ModifierContext(self.engine, instance, config)
        for func in hooks:
            try:
                func(ctx, event)
            except (ListenerError, ReentrantEmissionError):
                raise
            except Exception as exc:
                raise ListenerError(
                    type(event).__name__ if event is not None else hook.value,
                    listener_name(func),
                    exc,
                    target=instance.owner,
                    modifier=instance.name,
                    phase=hook.value,
                ) from exc


__all__ = ["ModifierManager", "merge_duration"]
