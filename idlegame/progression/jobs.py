"""
Job registry - paid tasks that earn money and job experience.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class JobDefinition:
    """Complete definition of a job."""
    id: str
    label: str
    base_seconds: float
    scale_factor: float
    money_base: float
    xp_base: float


BUILTIN_JOBS: tuple[JobDefinition, ...] = (
    JobDefinition(
        id="warehouse",
        label="Warehouse Shift",
        base_seconds=3.2,
        scale_factor=0.22,
        money_base=6,
        xp_base=4,
    ),
    JobDefinition(
        id="courier",
        label="Courier Route",
        base_seconds=4,
        scale_factor=0.18,
        money_base=9,
        xp_base=5,
    ),
    JobDefinition(
        id="artisan",
        label="Artisan Contract",
        base_seconds=5.6,
        scale_factor=0.16,
        money_base=14,
        xp_base=7,
    ),
)


class JobRegistry:
    """Read-only catalog of job definitions."""

    def __init__(self, definitions: Iterable[JobDefinition]):
        self._definitions = tuple(definitions)
        self._by_id: dict[str, JobDefinition] = {}
        for definition in self._definitions:
            if definition.id in self._by_id:
                raise ValueError(f"Duplicate job id: {definition.id}")
            self._by_id[definition.id] = definition

    @classmethod
    def default(cls) -> JobRegistry:
        return cls(BUILTIN_JOBS)

    def get(self, job_id: str) -> Optional[JobDefinition]:
        """Get a job definition (None when unknown)."""
        return self._by_id.get(job_id)

    @property
    def ids(self) -> list[str]:
        return [d.id for d in self._definitions]

    def __iter__(self) -> Iterator[JobDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, job_id: object) -> bool:
        return job_id in self._by_id
