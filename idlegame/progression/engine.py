"""
Progression engine - turns elapsed time into task completions.

Each tick adds the wall-clock delta to the active task's elapsed time.
Whenever elapsed reaches the time needed for the next completion, the
needed amount is subtracted (the remainder carries over), one reward is
applied and the threshold is recomputed for the new level. A single
long tick therefore grants every completion it paid for and no time is
lost between ticks.

Usage:
    engine = ProgressionEngine(catalog, stats, jobs, event_bus=bus)
    engine.adopt_state(save_service.load_game())
    engine.select_task("strength")
    loop.add(engine.update)
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Optional

from idlecore.core.events import EventBus
from idlegame.progression.jobs import JobRegistry
from idlegame.progression.leveling import (
    FALLBACK_JOB_BASE_SECONDS,
    FALLBACK_JOB_SCALE_FACTOR,
    FALLBACK_STAT_BASE_SECONDS,
    FALLBACK_STAT_SCALE_FACTOR,
    apply_job_experience,
    mastery_for_level,
    required_job_xp,
    seconds_for_completion,
)
from idlegame.progression.stats import StatRegistry
from idlegame.progression.tasks import (
    IDLE_TASK_ID,
    IdleTask,
    JobTask,
    StatTask,
    TaskCatalog,
    TaskDefinition,
    normalize_task_progress_entry,
)
from idlegame.state import RuntimeState, StatPoints, TaskProgress


logger = logging.getLogger(__name__)


class TaskEvent(Enum):
    """Task events (values are the wire names)."""
    CHANGED = "task:changed"
    LEVEL_CHANGED = "task:levelChanged"
    MASTERY_CHANGED = "task:masteryChanged"


class JobEvent(Enum):
    """Job events."""
    LEVEL_CHANGED = "job:levelChanged"


class ProgressionEngine:
    """
    Owns the runtime state during play and applies task rewards.

    Publishes:
    - TaskEvent.CHANGED when a task is selected
    - TaskEvent.LEVEL_CHANGED after every completion
    - TaskEvent.MASTERY_CHANGED when a completion moves the mastery tier
    - JobEvent.LEVEL_CHANGED when job experience crosses a level
    """

    def __init__(
        self,
        catalog: TaskCatalog,
        stats: StatRegistry,
        jobs: JobRegistry,
        event_bus: Optional[EventBus] = None,
        state: Optional[RuntimeState] = None,
    ):
        self.catalog = catalog
        self.stats = stats
        self.jobs = jobs
        self.event_bus = event_bus

        self._active_task_id = IDLE_TASK_ID
        self.state = RuntimeState()
        self.adopt_state(state or RuntimeState(stats=stats.create_default_stats_state()))

    # State

    def adopt_state(self, state: RuntimeState) -> None:
        """
        Install a runtime state (e.g. freshly loaded).

        Task progress is reconciled to the catalog: every non-idle task
        gets a normalized record and records for unknown tasks are
        dropped. Missing stats are seeded at their base value and any
        job level-ups the stored XP already pays for are applied.
        """
        state.task_progress = {
            task_id: normalize_task_progress_entry(state.task_progress.get(task_id))
            for task_id in self.catalog.progress_task_ids
        }

        for stat in self.stats:
            if stat.id not in state.stats:
                state.stats[stat.id] = StatPoints(points=stat.base_value)

        state.job.level = max(state.job.level, 1)
        state.job.xp = max(state.job.xp, 0.0)
        apply_job_experience(state.job, 0)

        self.state = state
        if self._active_task_id not in self.catalog:
            self._active_task_id = IDLE_TASK_ID

    def set_catalog(self, catalog: TaskCatalog) -> None:
        """Swap in rebuilt task definitions and reconcile progress."""
        self.catalog = catalog
        self.adopt_state(self.state)

    @property
    def active_task_id(self) -> str:
        return self._active_task_id

    @property
    def active_task(self) -> TaskDefinition:
        return self.catalog.get(self._active_task_id)

    def select_task(self, task_id: str) -> bool:
        """
        Make a task the active one.

        Returns:
            False when the task id is unknown
        """
        if task_id not in self.catalog:
            logger.debug("Ignoring selection of unknown task '%s'", task_id)
            return False

        self._active_task_id = task_id
        self._publish(TaskEvent.CHANGED, task_id=task_id)
        return True

    # Timing

    def task_parameters(self, task: TaskDefinition) -> tuple[float, float]:
        """(base_seconds, scale_factor) for a task, with fallbacks."""
        if isinstance(task, JobTask):
            job = self.jobs.get(task.job_id)
            if job is None:
                return FALLBACK_JOB_BASE_SECONDS, FALLBACK_JOB_SCALE_FACTOR
            return job.base_seconds, job.scale_factor

        stat = self.stats.get(task.stat_id) if isinstance(task, StatTask) else None
        if stat is None:
            return FALLBACK_STAT_BASE_SECONDS, FALLBACK_STAT_SCALE_FACTOR
        return stat.growth.task_base_seconds, stat.growth.task_scale_factor

    def seconds_for_next_completion(self, task_id: str) -> float:
        """Seconds the next completion needs; math.inf for idle."""
        task = self.catalog.get(task_id)
        if task is None or isinstance(task, IdleTask):
            return math.inf

        base_seconds, scale_factor = self.task_parameters(task)
        level = self._progress_for(task_id).level
        return seconds_for_completion(base_seconds, scale_factor, level)

    def progress_fraction(self, task_id: str) -> float:
        """Share of the next completion already accrued (0..1)."""
        needed = self.seconds_for_next_completion(task_id)
        if math.isinf(needed) or needed <= 0:
            return 0.0
        return min(self._progress_for(task_id).elapsed / needed, 1.0)

    def seconds_remaining(self) -> float:
        """Seconds until the active task completes; math.inf when idle."""
        needed = self.seconds_for_next_completion(self._active_task_id)
        if math.isinf(needed):
            return math.inf
        return max(needed - self._progress_for(self._active_task_id).elapsed, 0.0)

    @property
    def job_xp_required(self) -> float:
        """XP needed for the next job level."""
        return required_job_xp(self.state.job.level)

    # Loop

    def update(self, dt: float) -> int:
        """
        Advance the active task by ``dt`` seconds.

        Returns:
            Number of completions applied during this tick
        """
        task = self.catalog.get(self._active_task_id)
        if task is None or isinstance(task, IdleTask) or dt <= 0:
            return 0

        progress = self._progress_for(task.id)
        progress.elapsed += dt

        completions = 0
        needed = self.seconds_for_next_completion(task.id)
        while needed > 0 and progress.elapsed >= needed:
            progress.elapsed -= needed
            tier_changed = self.apply_task_reward(task.id)
            completions += 1

            self._publish(TaskEvent.LEVEL_CHANGED, task_id=task.id, level=progress.level)
            if tier_changed:
                self._publish(
                    TaskEvent.MASTERY_CHANGED,
                    task_id=task.id,
                    tier=progress.mastery_tier,
                )

            needed = self.seconds_for_next_completion(task.id)

        return completions

    # Rewards

    def apply_task_reward(self, task_id: str) -> bool:
        """
        Apply one completion of a task.

        Increments the task level, recomputes mastery and grants the
        job or stat reward scaled by the mastery multiplier.

        Returns:
            True if the mastery tier changed
        """
        task = self.catalog.get(task_id)
        if task is None or isinstance(task, IdleTask):
            return False

        progress = self._progress_for(task_id)
        previous_tier = progress.mastery_tier

        progress.level += 1
        tier, multiplier = mastery_for_level(progress.level)
        progress.mastery_tier = tier
        progress.mastery_multiplier = multiplier

        if isinstance(task, JobTask):
            self._reward_job(task, multiplier)
        elif isinstance(task, StatTask):
            self._reward_stat(task, multiplier)

        return tier != previous_tier

    def gain_job_experience(self, amount: float) -> int:
        """Feed XP into job leveling; returns levels gained."""
        gained = apply_job_experience(self.state.job, amount)
        if gained:
            self._publish(JobEvent.LEVEL_CHANGED, level=self.state.job.level, gained=gained)
        return gained

    def _reward_job(self, task: JobTask, multiplier: float) -> None:
        job = self.jobs.get(task.job_id)
        money_base = job.money_base if job else 0
        xp_base = job.xp_base if job else 0

        self.state.money += money_base * self.state.job.level * multiplier
        self.gain_job_experience(xp_base * multiplier)

    def _reward_stat(self, task: StatTask, multiplier: float) -> None:
        definition = self.stats.get(task.stat_id)
        reward = definition.growth.reward_per_completion if definition else 1

        entry = self.state.stats.get(task.stat_id)
        if entry is None:
            base = definition.base_value if definition else 0.0
            entry = self.state.stats[task.stat_id] = StatPoints(points=base)

        points = entry.points + reward * multiplier
        if definition is not None:
            # Caps are enforced on every gain, not only when saving
            points = definition.clamp(points)
        entry.points = points

    # Helpers

    def _progress_for(self, task_id: str) -> TaskProgress:
        progress = self.state.task_progress.get(task_id)
        if progress is None:
            progress = self.state.task_progress[task_id] = TaskProgress()
        return progress

    def _publish(self, event_type: Enum, **data) -> None:
        if self.event_bus:
            self.event_bus.publish(event_type, **data)
