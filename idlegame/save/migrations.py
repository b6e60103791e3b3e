"""
Save format versions and forward migrations.

Each entry in MIGRATIONS upgrades a payload from its key version to the
next one and returns a new payload; inputs are never mutated. Loading
walks the chain until SAVE_VERSION is reached. Versions are never
downgraded.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Callable, Optional

from idlegame.values import is_integer


logger = logging.getLogger(__name__)

SAVE_VERSION = 2

Migration = Callable[[dict[str, Any]], dict[str, Any]]


def _migrate_v1_to_v2(payload: dict[str, Any]) -> dict[str, Any]:
    """equippedEquipmentIds was renamed to equippedBySlot."""
    runtime_state = payload.get("runtimeState")
    if not isinstance(runtime_state, Mapping):
        runtime_state = {}

    equipped = runtime_state.get("equippedBySlot")
    if not isinstance(equipped, Mapping):
        legacy = runtime_state.get("equippedEquipmentIds")
        equipped = legacy if isinstance(legacy, Mapping) else {}

    return {
        **payload,
        "saveVersion": 2,
        "runtimeState": {**runtime_state, "equippedBySlot": equipped},
    }


MIGRATIONS: dict[int, Migration] = {
    1: _migrate_v1_to_v2,
}


def migrate_save_payload(
    payload: Any,
    migrations: Optional[Mapping[int, Migration]] = None,
    target_version: int = SAVE_VERSION,
) -> Optional[dict[str, Any]]:
    """
    Upgrade a parsed save payload to the current version.

    A payload without an integer ``saveVersion`` is treated as version 1.

    Args:
        payload: Parsed JSON
        migrations: Step table (defaults to MIGRATIONS)
        target_version: Version to migrate to

    Returns:
        The migrated payload, or None when the payload is not an object,
        its version is out of range or a migration step is missing
    """
    if not isinstance(payload, Mapping):
        return None

    steps = MIGRATIONS if migrations is None else migrations

    raw_version = payload.get("saveVersion")
    version = int(raw_version) if is_integer(raw_version) else 1
    if version < 1 or version > target_version:
        logger.warning("Unsupported save version %s", raw_version)
        return None

    migrated = {**payload, "saveVersion": version}
    while version < target_version:
        step = steps.get(version)
        if step is None:
            logger.warning("No save migration from version %d", version)
            return None

        migrated = step(migrated)
        logger.debug("Migrated save from version %d to %s", version, migrated.get("saveVersion"))
        version = migrated["saveVersion"]

    return migrated
