"""
Task definitions, task catalog and task-progress normalization.

A task is one of three variants:
- StatTask: trains a stat
- JobTask: works a paid job
- IdleTask: does nothing (never completes)

Raw task definitions come from content packs (or the built-in
fallback) and are resolved against the stat and job registries into a
TaskCatalog. The catalog always holds exactly one task with the
reserved id "idle".
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Optional

from idlegame.progression.jobs import JobRegistry
from idlegame.progression.stats import StatRegistry
from idlegame.state import TaskProgress
from idlegame.values import finite_or, is_non_empty_string


logger = logging.getLogger(__name__)

IDLE_TASK_ID = "idle"


@dataclass(frozen=True)
class TaskDefinition:
    """Base for the task variants."""
    id: str
    label: str


@dataclass(frozen=True)
class StatTask(TaskDefinition):
    """Training task for one stat."""
    stat_id: str


@dataclass(frozen=True)
class JobTask(TaskDefinition):
    """Paid work for one job."""
    job_id: str


@dataclass(frozen=True)
class IdleTask(TaskDefinition):
    """The do-nothing task."""


def normalize_task_progress_entry(source: Any) -> TaskProgress:
    """
    Coerce anything into a complete TaskProgress.

    Missing or non-finite fields fall back to level 0, mastery tier 0,
    multiplier 1 and elapsed 0. Accepts None, scalars, partial dicts
    (camelCase wire keys) and TaskProgress instances.
    """
    if isinstance(source, TaskProgress):
        source = source.to_dict()
    entry = source if isinstance(source, Mapping) else {}

    return TaskProgress(
        level=finite_or(entry.get("level"), 0),
        mastery_tier=finite_or(entry.get("masteryTier"), 0),
        mastery_multiplier=finite_or(entry.get("masteryMultiplier"), 1.0),
        elapsed=finite_or(entry.get("elapsed"), 0.0),
    )


def local_id(scoped_id: str) -> str:
    """Strip the pack namespace: 'base:strength' -> 'strength'."""
    _, separator, local = scoped_id.partition(":")
    return local if separator else scoped_id


def build_default_task_definitions(
    stats: StatRegistry,
    jobs: JobRegistry,
) -> list[dict[str, Any]]:
    """Raw task definitions covering every stat and job, plus idle."""
    definitions: list[dict[str, Any]] = [
        {"id": stat.id, "label": f"{stat.label} Training", "type": "stat", "stat": stat.id}
        for stat in stats
    ]
    definitions.extend(
        {"id": job.id, "label": job.label, "type": "job", "job": job.id}
        for job in jobs
    )
    definitions.append({"id": IDLE_TASK_ID, "label": "Idle", "type": "idle"})
    return definitions


class TaskCatalog:
    """
    Ordered, read-only task lookup.

    Order is: every non-idle task in definition order, then idle.
    """

    def __init__(self, tasks: Iterable[TaskDefinition]):
        by_id: dict[str, TaskDefinition] = {}
        for task in tasks:
            if task.id in by_id:
                raise ValueError(f"Duplicate task id: {task.id}")
            by_id[task.id] = task

        idle = by_id.pop(IDLE_TASK_ID, None)
        if not isinstance(idle, IdleTask):
            idle = IdleTask(id=IDLE_TASK_ID, label="Idle")
        by_id[IDLE_TASK_ID] = idle

        self._by_id = by_id

    @classmethod
    def from_definitions(
        cls,
        definitions: Iterable[Mapping[str, Any]],
        stats: StatRegistry,
        jobs: JobRegistry,
    ) -> TaskCatalog:
        """
        Resolve raw definitions against the registries.

        Entries without an id, repeated ids, unknown types and links to
        stats/jobs that do not exist are skipped. A link is looked up by
        its full id first and then by its local (unscoped) id.
        """
        tasks: list[TaskDefinition] = []
        seen: set[str] = set()

        for raw in definitions:
            if not isinstance(raw, Mapping):
                continue
            task_id = raw.get("id")
            if not is_non_empty_string(task_id) or task_id in seen:
                continue

            task = _resolve_task(raw, task_id, stats, jobs)
            if task is None:
                logger.debug("Skipping unresolvable task definition '%s'", task_id)
                continue

            tasks.append(task)
            seen.add(task_id)

        return cls(tasks)

    @classmethod
    def default(cls, stats: StatRegistry, jobs: JobRegistry) -> TaskCatalog:
        return cls.from_definitions(build_default_task_definitions(stats, jobs), stats, jobs)

    def get(self, task_id: str) -> Optional[TaskDefinition]:
        return self._by_id.get(task_id)

    @property
    def order(self) -> list[str]:
        return list(self._by_id)

    @property
    def progress_task_ids(self) -> list[str]:
        """Ids that carry task progress (everything except idle)."""
        return [task_id for task_id in self._by_id if task_id != IDLE_TASK_ID]

    def __iter__(self) -> Iterator[TaskDefinition]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._by_id


def _resolve_task(
    raw: Mapping[str, Any],
    task_id: str,
    stats: StatRegistry,
    jobs: JobRegistry,
) -> Optional[TaskDefinition]:
    task_type = raw.get("type")
    label = raw.get("label")

    if task_type == "stat":
        link = raw.get("stat") or task_id
        if not isinstance(link, str):
            return None
        stat = stats.get(link) or stats.get(local_id(link))
        if stat is None:
            return None
        return StatTask(id=task_id, label=label or f"{stat.label} Training", stat_id=stat.id)

    if task_type == "job":
        link = raw.get("job") or task_id
        if not isinstance(link, str):
            return None
        job = jobs.get(link) or jobs.get(local_id(link))
        if job is None:
            return None
        return JobTask(id=task_id, label=label or job.label, job_id=job.id)

    if task_type == "idle":
        # Only the reserved id is idle
        if task_id != IDLE_TASK_ID:
            return None
        return IdleTask(id=task_id, label=label or "Idle")

    return None
