"""
Target registry - issues TargetIDs and answers categorical queries.

Characters and enemies each have a lineup (insertion order); adjacency is
neighbourhood within that lineup. Removing a target closes the gap, so the
two targets that flanked it become adjacent. Neutrals are never adjacent to
anything.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Set

from ..errors import InvalidTargetError
from ..key import TargetID, TargetIDGenerator
from ..model import TargetCategory


class TargetRegistry:
    """Single owner of TargetID allocation for one simulation."""

    def __init__(self, generator: Optional[TargetIDGenerator] = None):
        self._generator = generator or TargetIDGenerator()
        self._category: Dict[TargetID, TargetCategory] = {}
        self._names: Dict[TargetID, str] = {}
        self._removed: Set[TargetID] = set()
        self._lineups: Dict[TargetCategory, List[TargetID]] = {
            TargetCategory.CHARACTER: [],
            TargetCategory.ENEMY: [],
            TargetCategory.NEUTRAL: [],
        }

    # =========================================================================
    # Mutation
    # =========================================================================

    def add_target(self, category: TargetCategory, name: str = "") -> TargetID:
        target = self._generator.new()
        self._category[target] = category
        self._names[target] = name or f"{category.value.lower()}{target}"
        self._lineups[category].append(target)
        return target

    def remove_target(self, target: TargetID) -> None:
        """Take a target out of combat. Its ID is never reissued."""
        self.validate(target)
        self._removed.add(target)
        self._lineups[self._category[target]].remove(target)

    # =========================================================================
    # Queries
    # =========================================================================

    def is_valid(self, target: TargetID) -> bool:
        return target in self._category and target not in self._removed

    def was_issued(self, target: TargetID) -> bool:
        return target in self._category

    def validate(self, target: TargetID) -> None:
        if target not in self._category:
            raise InvalidTargetError(target, "never issued")
        if target in self._removed:
            raise InvalidTargetError(target, "removed from combat")

    def category(self, target: TargetID) -> TargetCategory:
        if target not in self._category:
            raise InvalidTargetError(target, "never issued")
        return self._category[target]

    def name(self, target: TargetID) -> str:
        if target not in self._names:
            raise InvalidTargetError(target, "never issued")
        return self._names[target]

    def is_character(self, target: TargetID) -> bool:
        return self.is_valid(target) and self._category[target] is TargetCategory.CHARACTER

    def is_enemy(self, target: TargetID) -> bool:
        return self.is_valid(target) and self._category[target] is TargetCategory.ENEMY

    def is_neutral(self, target: TargetID) -> bool:
        return self.is_valid(target) and self._category[target] is TargetCategory.NEUTRAL

    def adjacent_to(self, target: TargetID) -> List[TargetID]:
        if not self.is_valid(target):
            return []
        category = self._category[target]
        if category is TargetCategory.NEUTRAL:
            return []
        lineup = self._lineups[category]
        idx = lineup.index(target)
        adjacent = []
        if idx > 0:
            adjacent.append(lineup[idx - 1])
        if idx < len(lineup) - 1:
            adjacent.append(lineup[idx + 1])
        return adjacent

    def characters(self) -> List[TargetID]:
        return list(self._lineups[TargetCategory.CHARACTER])

    def enemies(self) -> List[TargetID]:
        return list(self._lineups[TargetCategory.ENEMY])

    def neutrals(self) -> List[TargetID]:
        return list(self._lineups[TargetCategory.NEUTRAL])

    def all_targets(self) -> List[TargetID]:
        """Every live target, in issue order."""
        return [t for t in self._category if t not in self._removed]

    def issued(self) -> Dict[TargetID, str]:
        """Every issued ID (removed ones included) and its name."""
        return dict(self._names)


__all__ = ["TargetRegistry"]
