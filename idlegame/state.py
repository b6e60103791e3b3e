"""
Runtime state records.

These are the mutable pieces of a session: per-stat points, per-task
progress, the economy and owned equipment. They are Pydantic models so
every assignment is type-checked, and they carry camelCase aliases so
``to_dict()`` produces the persisted wire shape directly.

Nothing here decides what a *valid* value is beyond its type; range
rules (stat caps, finite numbers, defaults) live in the sanitizers of
the registries and the save service.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class StateRecord(BaseModel):
    """Base class for persisted runtime records."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
        extra='forbid',
    )

    @classmethod
    def from_dict(cls, data: dict[str, Any]):
        """Build a record from wire (camelCase) or field names."""
        return cls.model_validate(data)

    def to_dict(self) -> dict[str, Any]:
        """Serialize using wire (camelCase) field names."""
        return self.model_dump(by_alias=True)

    def clone(self):
        """Create a deep copy of this record."""
        return self.model_copy(deep=True)


class StatPoints(StateRecord):
    """Accumulated points for one stat."""
    points: float = 0.0


class TaskProgress(StateRecord):
    """
    Progress toward the next completion of one task.

    Attributes:
        level: Completions so far
        mastery_tier: floor(level / 100)
        mastery_multiplier: Reward multiplier derived from the tier
        elapsed: Seconds accumulated toward the next completion
    """
    level: int | float = 0
    mastery_tier: int | float = 0
    mastery_multiplier: float = 1.0
    elapsed: float = 0.0


class JobProgress(StateRecord):
    """Job experience and level."""
    xp: float = 0.0
    level: int = 1


class RuntimeState(StateRecord):
    """The aggregate that gets persisted."""
    stats: dict[str, StatPoints] = Field(default_factory=dict)
    task_progress: dict[str, TaskProgress] = Field(default_factory=dict)
    money: float = 0.0
    job: JobProgress = Field(default_factory=JobProgress)
    owned_equipment_ids: list[str] = Field(default_factory=list)
    equipped_by_slot: dict[str, str] = Field(default_factory=dict)
    item_xp: dict[str, Any] = Field(default_factory=dict)
    item_rank: dict[str, Any] = Field(default_factory=dict)
