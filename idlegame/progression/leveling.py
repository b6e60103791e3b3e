"""
Progression math: completion times, mastery tiers and the job XP curve.

All functions here are pure; the engine owns the state they operate on.
"""

from __future__ import annotations

import math

from idlegame.state import JobProgress


# Mastery: one tier every 100 task levels, +5% reward per tier
MASTERY_LEVEL_STEP = 100
MASTERY_BONUS_STEP = 0.05

# Job XP needed from level L to L+1 is BASE * SCALE ** (L - 1)
JOB_LEVEL_XP_BASE = 24
JOB_LEVEL_XP_SCALE = 1.28

# Seconds between progression ticks
TICK_INTERVAL = 0.1

# Used when a task's linked definition cannot be found
FALLBACK_JOB_BASE_SECONDS = 4.0
FALLBACK_JOB_SCALE_FACTOR = 0.2
FALLBACK_STAT_BASE_SECONDS = 2.5
FALLBACK_STAT_SCALE_FACTOR = 0.3


def seconds_for_completion(base_seconds: float, scale_factor: float, level: float) -> float:
    """
    Seconds needed for the next completion at a given task level.

    Linear slowdown: every level adds ``base_seconds * scale_factor``.
    """
    return base_seconds * (1 + level * scale_factor)


def mastery_for_level(level: float) -> tuple[int, float]:
    """
    Mastery tier and reward multiplier for a task level.

    Returns:
        (tier, multiplier)
    """
    tier = math.floor(level / MASTERY_LEVEL_STEP)
    return tier, 1 + tier * MASTERY_BONUS_STEP


def required_job_xp(level: int) -> float:
    """XP needed to go from ``level`` to ``level + 1``."""
    return JOB_LEVEL_XP_BASE * JOB_LEVEL_XP_SCALE ** (level - 1)


def apply_job_experience(job: JobProgress, amount: float) -> int:
    """
    Add experience and apply every level-up it pays for.

    The requirement is recomputed after each level, so one large gain
    can cross several thresholds. Leaves ``job.xp`` below the
    requirement of the final level.

    Returns:
        Number of levels gained
    """
    xp = job.xp + amount
    level = job.level
    gained = 0

    required = required_job_xp(level)
    while xp >= required:
        xp -= required
        level += 1
        gained += 1
        required = required_job_xp(level)

    job.xp = xp
    job.level = level
    return gained
