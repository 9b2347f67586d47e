"""
Action scripts - what a target does when its turn comes up.

Scripts only touch combat state through the engine facade they are built
with. Every random choice goes through engine.rand so a run is reproducible
from its seed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List

from ..content.modifiers import create_burn, create_defense_down, create_vulnerability
from ..key import TargetID
from ..model import AttackEffect, AttackType, BehaviorFlag, DamageFormula, DamageType, EnergyAdd
from ..state.combat import Attack
from . import action_script

if TYPE_CHECKING:
    from ..engine import Engine

logger = logging.getLogger(__name__)


class ActionScript:
    """Base class; subclasses implement act()."""

    def __init__(self, engine: Engine, target: TargetID):
        self.engine = engine
        self.target = target
        self.actions = 0

    def can_act(self) -> bool:
        return (self.engine.is_valid(self.target)
                and not self.engine.has_behavior_flag(self.target, BehaviorFlag.DISABLE_ACTION))

    def act(self) -> None:
        raise NotImplementedError

    def _pick(self, candidates: List[TargetID]) -> TargetID:
        targetable = [
            t for t in candidates
            if not self.engine.has_behavior_flag(t, BehaviorFlag.UNTARGETABLE)
        ]
        return self.engine.rand.choice(targetable or candidates)


@action_script("basic_character")
class BasicCharacter(ActionScript):
    """
    Ultimate (AoE) whenever energy is full, otherwise alternates basic
    attack and skill. The skill hits the main target and its neighbours,
    then debuffs the main target: Burn for fire characters, Vulnerability
    for the rest.
    """

    def act(self) -> None:
        if not self.can_act():
            logger.debug("%s cannot act", self.target)
            return
        enemies = self.engine.enemies()
        if not enemies:
            return

        info = self.engine.character_info(self.target)
        element = info.element

        if self.engine.full_energy(self.target):
            self.engine.add_energy(self.target, EnergyAdd.REPLACE, 0)
            self.engine.attack(Attack(
                attacker=self.target,
                targets=enemies,
                attack_type=AttackType.ULT,
                attack_effect=AttackEffect.AOE,
                damage_type=element,
                base_damage={DamageFormula.BY_ATK: 2.0},
                energy_gain=5,
                stance_damage=20,
            ))
        elif self.actions % 2 == 1:
            main = self._pick(enemies)
            self.engine.attack(Attack(
                attacker=self.target,
                targets=[main] + self.engine.adjacent_to(main),
                attack_type=AttackType.SKILL,
                attack_effect=AttackEffect.BLAST,
                damage_type=element,
                base_damage={DamageFormula.BY_ATK: 1.5},
                energy_gain=30,
                stance_damage=20,
            ))
            if self.engine.is_valid(main):
                if element is DamageType.FIRE:
                    self.engine.add_modifier(main, create_burn(self.target, duration=2))
                else:
                    self.engine.add_modifier(main, create_vulnerability(self.target, duration=2))
        else:
            main = self._pick(enemies)
            self.engine.attack(Attack(
                attacker=self.target,
                targets=[main],
                attack_type=AttackType.NORMAL,
                damage_type=element,
                base_damage={DamageFormula.BY_ATK: 1.0},
                energy_gain=20,
                stance_damage=10,
            ))
        self.actions += 1


@action_script("basic_enemy")
class BasicEnemy(ActionScript):
    """Single-target hits; every third action also lowers the victim's DEF."""

    def act(self) -> None:
        if not self.can_act():
            logger.debug("%s cannot act", self.target)
            return
        characters = self.engine.characters()
        if not characters:
            return

        victim = self._pick(characters)
        self.engine.attack(Attack(
            attacker=self.target,
            targets=[victim],
            attack_type=AttackType.NORMAL,
            damage_type=DamageType.PHYSICAL,
            base_damage={DamageFormula.BY_ATK: 1.0},
        ))
        self.actions += 1
        if self.actions % 3 == 0 and self.engine.is_valid(victim):
            self.engine.add_modifier(victim, create_defense_down(self.target, duration=2))


__all__ = ["ActionScript", "BasicCharacter", "BasicEnemy"]
