"""
Info collaborator - read-only static metadata keyed by TargetID.
"""

from __future__ import annotations

from typing import Dict

from ..errors import NotFoundError
from ..key import TargetID
from ..state.info import CharacterInfo, EnemyInfo
from ..state.stats import BaseStats


class InfoService:
    def __init__(self):
        self._characters: Dict[TargetID, CharacterInfo] = {}
        self._enemies: Dict[TargetID, EnemyInfo] = {}

    def add_character(self, target: TargetID, info: CharacterInfo) -> None:
        self._characters[target] = info

    def add_enemy(self, target: TargetID, info: EnemyInfo) -> None:
        self._enemies[target] = info

    def character_info(self, target: TargetID) -> CharacterInfo:
        info = self._characters.get(target)
        if info is None:
            raise NotFoundError(target, "character info")
        return info

    def enemy_info(self, target: TargetID) -> EnemyInfo:
        info = self._enemies.get(target)
        if info is None:
            raise NotFoundError(target, "enemy info")
        return info

    def base_stats(self, target: TargetID) -> BaseStats:
        if target in self._characters:
            return self._characters[target].base_stats
        if target in self._enemies:
            return self._enemies[target].base_stats
        raise NotFoundError(target, "base stats")

    def level(self, target: TargetID) -> int:
        if target in self._characters:
            return self._characters[target].level
        if target in self._enemies:
            return self._enemies[target].level
        raise NotFoundError(target, "level")

    def max_energy(self, target: TargetID) -> float:
        """Characters only; enemies and neutrals have no energy."""
        info = self._characters.get(target)
        return info.max_energy if info else 0.0

    def toughness(self, target: TargetID) -> float:
        info = self._enemies.get(target)
        return info.toughness if info else 0.0

    def key(self, target: TargetID) -> str:
        if target in self._characters:
            return self._characters[target].key
        if target in self._enemies:
            return self._enemies[target].key
        raise NotFoundError(target, "key")


__all__ = ["InfoService"]
