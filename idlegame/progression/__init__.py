"""
Progression module - stats, jobs, tasks and the completion loop.

Provides:
- Stat and job registries
- Task definitions and the task catalog
- Task-progress normalization
- Completion timing, mastery and job-leveling math
- The progression engine
"""

from idlegame.progression.stats import (
    StatRegistry,
    StatDefinition,
    StatCategory,
    StatGrowth,
    StatCaps,
)
from idlegame.progression.jobs import JobRegistry, JobDefinition
from idlegame.progression.tasks import (
    TaskCatalog,
    TaskDefinition,
    StatTask,
    JobTask,
    IdleTask,
    IDLE_TASK_ID,
    normalize_task_progress_entry,
    build_default_task_definitions,
)
from idlegame.progression.leveling import (
    seconds_for_completion,
    mastery_for_level,
    required_job_xp,
    apply_job_experience,
    MASTERY_LEVEL_STEP,
    MASTERY_BONUS_STEP,
    JOB_LEVEL_XP_BASE,
    JOB_LEVEL_XP_SCALE,
    TICK_INTERVAL,
)
from idlegame.progression.engine import ProgressionEngine, TaskEvent, JobEvent

__all__ = [
    # Stats
    "StatRegistry",
    "StatDefinition",
    "StatCategory",
    "StatGrowth",
    "StatCaps",
    # Jobs
    "JobRegistry",
    "JobDefinition",
    # Tasks
    "TaskCatalog",
    "TaskDefinition",
    "StatTask",
    "JobTask",
    "IdleTask",
    "IDLE_TASK_ID",
    "normalize_task_progress_entry",
    "build_default_task_definitions",
    # Math
    "seconds_for_completion",
    "mastery_for_level",
    "required_job_xp",
    "apply_job_experience",
    "MASTERY_LEVEL_STEP",
    "MASTERY_BONUS_STEP",
    "JOB_LEVEL_XP_BASE",
    "JOB_LEVEL_XP_SCALE",
    "TICK_INTERVAL",
    # Engine
    "ProgressionEngine",
    "TaskEvent",
    "JobEvent",
]
