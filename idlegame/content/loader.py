"""
Startup content loading with explicit fallbacks.

Missing or broken content must never stop the game from starting, but
the fallback should be visible. Each loader returns a LoadResult that
carries the value actually used, whether it is a fallback, and why.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Generic, Iterable, Optional, TypeVar

from idlegame.content.files import load_pack_files, read_json_if_exists
from idlegame.content.packs import ContentPackError, MergedContent, merge_content_packs
from idlegame.inventory.equipment import validate_equipment_definitions
from idlegame.progression.jobs import JobRegistry
from idlegame.progression.stats import StatRegistry
from idlegame.progression.tasks import build_default_task_definitions


logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass
class LoadResult(Generic[T]):
    """
    Outcome of a content load.

    Attributes:
        value: The content to use (the fallback when loading failed)
        used_fallback: True when value is the fallback
        error: Why the fallback was used
    """
    value: T
    used_fallback: bool = False
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return not self.used_fallback

    @classmethod
    def loaded(cls, value: T) -> LoadResult[T]:
        return cls(value=value)

    @classmethod
    def fallback(cls, value: T, error: str) -> LoadResult[T]:
        return cls(value=value, used_fallback=True, error=error)


def load_content(
    packs_dir: str | Path,
    active_pack_ids: Iterable[str] = (),
) -> MergedContent:
    """
    Read and merge packs from disk.

    Raises:
        OSError, ValueError (bad JSON or encoding), ContentPackError
    """
    return merge_content_packs(load_pack_files(packs_dir), active_pack_ids)


def load_task_definitions(
    packs_dir: str | Path | None,
    stats: StatRegistry,
    jobs: JobRegistry,
    active_pack_ids: Iterable[str] = (),
) -> LoadResult[list[dict[str, Any]]]:
    """
    Task definitions from content packs, or the built-in set.

    Falls back when no directory is configured, the packs cannot be
    read or merged, or they define no tasks.
    """
    defaults = build_default_task_definitions(stats, jobs)
    if packs_dir is None:
        return LoadResult.fallback(defaults, "No packs directory configured.")

    try:
        merged = load_content(packs_dir, active_pack_ids)
    except (OSError, ValueError, RecursionError, ContentPackError) as e:
        logger.warning("Using built-in tasks; content packs failed to load: %s", e)
        return LoadResult.fallback(defaults, str(e))

    if not merged.tasks:
        return LoadResult.fallback(defaults, "Content packs define no tasks.")

    return LoadResult.loaded(merged.tasks)


def load_equipment_definitions(path: str | Path | None) -> LoadResult[list[dict[str, Any]]]:
    """
    Equipment definitions from a JSON file.

    An invalid file is rejected as a whole (logged, not applied); the
    fallback is an empty list.
    """
    if path is None:
        return LoadResult.fallback([], "No equipment file configured.")

    try:
        payload = read_json_if_exists(Path(path))
    except (OSError, ValueError, RecursionError) as e:
        logger.warning("Equipment file %s could not be read: %s", path, e)
        return LoadResult.fallback([], str(e))

    if payload is None:
        return LoadResult.fallback([], f"Equipment file not found: {path}")

    validation = validate_equipment_definitions(payload)
    if not validation.is_valid:
        logger.error(
            "Skipping invalid equipment definitions in %s:\n- %s",
            path,
            "\n- ".join(validation.errors),
        )
        return LoadResult.fallback([], "; ".join(validation.errors))

    return LoadResult.loaded(payload)
