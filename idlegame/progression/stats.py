"""
Stat registry - trainable stats and their growth parameters.

A registry is an explicitly constructed, read-only catalog. The game
builds one at startup (from the built-in table or from merged content
packs) and passes it to whoever needs it; there is no module-level
registry to mutate.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from idlegame.state import StatPoints
from idlegame.values import finite_or, is_finite_number, is_non_empty_string


class StatCategory(Enum):
    """Stat categories."""
    CORE = "core"
    COMBAT = "combat"
    SOCIAL = "social"
    UTILITY = "utility"


@dataclass(frozen=True)
class StatGrowth:
    """How a stat grows when its training task completes."""
    reward_per_completion: float = 1.0
    task_base_seconds: float = 2.5
    task_scale_factor: float = 0.3


@dataclass(frozen=True)
class StatCaps:
    """Upper bounds (math.inf when unbounded)."""
    points: float = math.inf


@dataclass(frozen=True)
class StatDefinition:
    """Complete definition of a stat."""
    id: str
    label: str
    category: StatCategory = StatCategory.CORE
    base_value: float = 0.0
    growth: StatGrowth = field(default_factory=StatGrowth)
    caps: StatCaps = field(default_factory=StatCaps)

    # Reserved for derived-stat computation; nothing reads it yet
    derived_dependencies: tuple[str, ...] = ()

    def clamp(self, points: float) -> float:
        """Clamp points into [base_value, caps.points]."""
        return min(max(points, self.base_value), self.caps.points)


def _core_stat(stat_id: str, label: str) -> StatDefinition:
    return StatDefinition(
        id=stat_id,
        label=label,
        category=StatCategory.CORE,
        base_value=0,
        growth=StatGrowth(
            reward_per_completion=1,
            task_base_seconds=2.5,
            task_scale_factor=0.38,
        ),
    )


BUILTIN_STATS: tuple[StatDefinition, ...] = (
    _core_stat("strength", "Strength"),
    _core_stat("endurance", "Endurance"),
    _core_stat("dexterity", "Dexterity"),
)


class StatRegistry:
    """
    Read-only catalog of stat definitions.

    Usage:
        stats = StatRegistry.default()
        stats.get("strength")          # StatDefinition or None
        stats.sanitize_stats(raw)      # clamped points per stat
    """

    def __init__(self, definitions: Iterable[StatDefinition]):
        self._definitions = tuple(definitions)
        self._by_id: dict[str, StatDefinition] = {}
        for definition in self._definitions:
            if definition.id in self._by_id:
                raise ValueError(f"Duplicate stat id: {definition.id}")
            self._by_id[definition.id] = definition

    @classmethod
    def default(cls) -> StatRegistry:
        """Registry holding the built-in stats."""
        return cls(BUILTIN_STATS)

    @classmethod
    def from_content(cls, entries: Iterable[Mapping[str, Any]]) -> StatRegistry:
        """
        Build a registry from merged content-pack stat entries.

        Entries use the authored camelCase shape (``baseValue``,
        ``growth.rewardPerCompletion``, ``caps.points``...). Missing
        numbers fall back to the StatGrowth/StatCaps defaults.

        Raises:
            ValueError: On a missing id, an unknown category or malformed
                derivedDependencies
        """
        return cls(_definition_from_entry(entry) for entry in entries)

    def get(self, stat_id: str) -> Optional[StatDefinition]:
        """Get a stat definition (None when unknown)."""
        return self._by_id.get(stat_id)

    def by_category(self, category: StatCategory) -> list[StatDefinition]:
        return [d for d in self._definitions if d.category == category]

    @property
    def ids(self) -> list[str]:
        return [d.id for d in self._definitions]

    def __iter__(self) -> Iterator[StatDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, stat_id: object) -> bool:
        return stat_id in self._by_id

    def create_default_stats_state(self) -> dict[str, StatPoints]:
        """Fresh stats map seeded at each stat's base value."""
        return {d.id: StatPoints(points=d.base_value) for d in self._definitions}

    def sanitize_stats(self, input_stats: Any = None) -> dict[str, StatPoints]:
        """
        Coerce an untrusted stats map into one that honors every cap.

        For each known stat the supplied points are used when finite,
        otherwise the base value; the result is clamped into
        [base_value, cap]. Unknown stat ids are dropped.
        """
        source = input_stats if isinstance(input_stats, Mapping) else {}
        sanitized: dict[str, StatPoints] = {}

        for definition in self._definitions:
            raw_points = _points_of(source.get(definition.id))
            points = finite_or(raw_points, definition.base_value)
            sanitized[definition.id] = StatPoints(points=definition.clamp(points))

        return sanitized


def _points_of(entry: Any) -> Any:
    if isinstance(entry, StatPoints):
        return entry.points
    if isinstance(entry, Mapping):
        return entry.get("points")
    return None


def _definition_from_entry(entry: Mapping[str, Any]) -> StatDefinition:
    stat_id = entry.get("id")
    if not is_non_empty_string(stat_id):
        raise ValueError("Stat entry is missing an id")

    category_name = entry.get("category", StatCategory.CORE.value)
    try:
        category = StatCategory(category_name)
    except ValueError:
        raise ValueError(f"Stat '{stat_id}' has unknown category '{category_name}'") from None

    growth = entry.get("growth") if isinstance(entry.get("growth"), Mapping) else {}
    caps = entry.get("caps") if isinstance(entry.get("caps"), Mapping) else {}
    defaults = StatGrowth()

    cap_points = caps.get("points")
    return StatDefinition(
        id=stat_id,
        label=entry.get("label") if is_non_empty_string(entry.get("label")) else stat_id,
        category=category,
        base_value=finite_or(entry.get("baseValue"), 0.0),
        growth=StatGrowth(
            reward_per_completion=finite_or(
                growth.get("rewardPerCompletion"), defaults.reward_per_completion
            ),
            task_base_seconds=finite_or(
                growth.get("taskBaseSeconds"), defaults.task_base_seconds
            ),
            task_scale_factor=finite_or(
                growth.get("taskScaleFactor"), defaults.task_scale_factor
            ),
        ),
        caps=StatCaps(points=cap_points if is_finite_number(cap_points) else math.inf),
        derived_dependencies=_dependencies_of(stat_id, entry.get("derivedDependencies")),
    )


def _dependencies_of(stat_id: str, value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list) or not all(is_non_empty_string(dep) for dep in value):
        raise ValueError(
            f"Stat '{stat_id}' derivedDependencies must be a list of non-empty strings"
        )
    return tuple(value)
