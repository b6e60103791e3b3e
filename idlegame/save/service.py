"""
Save/Load service - runtime state persistence.

Provides:
- One save under a fixed key in a key-value storage
- Forward migration of older save versions
- Field-by-field sanitizing, so corrupt data degrades to defaults
- Autosave on a timer driven by the tick loop
- Immediate saves on task selection, level and mastery changes
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from enum import Enum, auto
from typing import Any, Callable, Optional

from idlecore.core.events import Event, EventBus
from idlecore.resources.storage import KeyValueStorage
from idlegame.progression.engine import TaskEvent
from idlegame.progression.stats import StatRegistry
from idlegame.progression.tasks import normalize_task_progress_entry
from idlegame.save.migrations import SAVE_VERSION, migrate_save_payload
from idlegame.state import JobProgress, RuntimeState, TaskProgress
from idlegame.values import finite_or


logger = logging.getLogger(__name__)

SAVE_KEY = "game-save"

# Task events that trigger an immediate save
SAVE_TRIGGERS: tuple[TaskEvent, ...] = (
    TaskEvent.CHANGED,
    TaskEvent.MASTERY_CHANGED,
    TaskEvent.LEVEL_CHANGED,
)


class SaveEvent(Enum):
    """Save system events."""
    SAVE_COMPLETED = auto()
    LOAD_COMPLETED = auto()
    LOAD_RECOVERED = auto()


def default_runtime_state(registry: Optional[StatRegistry] = None) -> RuntimeState:
    """A fresh runtime state with every stat at its base value."""
    registry = registry or StatRegistry.default()
    return RuntimeState(stats=registry.create_default_stats_state())


def sanitize_runtime_state(raw: Any, registry: Optional[StatRegistry] = None) -> RuntimeState:
    """
    Build a valid RuntimeState from untrusted data.

    Every field is checked on its own; a bad field falls back to its
    default without affecting the others.

    Args:
        raw: A RuntimeState or a camelCase mapping (wire shape)
        registry: Stats to sanitize against (defaults to the built-ins)
    """
    registry = registry or StatRegistry.default()
    if isinstance(raw, RuntimeState):
        raw = raw.to_dict()
    source = raw if isinstance(raw, Mapping) else {}

    job = source.get("job")
    if not isinstance(job, Mapping):
        job = {}

    equipped = source.get("equippedBySlot")
    if not isinstance(equipped, Mapping):
        # Saves written before the v2 rename
        equipped = source.get("equippedEquipmentIds")

    return RuntimeState(
        stats=registry.sanitize_stats(source.get("stats")),
        task_progress=_sanitize_task_progress(source.get("taskProgress")),
        money=finite_or(source.get("money"), 0.0),
        job=JobProgress(
            xp=max(finite_or(job.get("xp"), 0.0), 0.0),
            level=max(int(finite_or(job.get("level"), 1)), 1),
        ),
        owned_equipment_ids=_string_list(source.get("ownedEquipmentIds")),
        equipped_by_slot=_string_map(equipped),
        item_xp=_plain_dict(source.get("itemXp")),
        item_rank=_plain_dict(source.get("itemRank")),
    )


def build_save_payload(
    runtime_state: RuntimeState | Mapping[str, Any],
    registry: Optional[StatRegistry] = None,
) -> dict[str, Any]:
    """Stamp the current version on a sanitized copy of the state."""
    return {
        "saveVersion": SAVE_VERSION,
        "runtimeState": sanitize_runtime_state(runtime_state, registry).to_dict(),
    }


def save_game(
    runtime_state: RuntimeState | Mapping[str, Any],
    storage: Optional[KeyValueStorage],
    registry: Optional[StatRegistry] = None,
) -> bool:
    """
    Persist the state under SAVE_KEY.

    Returns:
        False when there is no storage
    """
    if storage is None:
        return False

    payload = build_save_payload(runtime_state, registry)
    storage.set_item(SAVE_KEY, json.dumps(payload))
    return True


def read_save(
    storage: Optional[KeyValueStorage],
    registry: Optional[StatRegistry] = None,
) -> tuple[RuntimeState, Optional[str]]:
    """
    Load the saved state and say why defaults were used, if they were.

    Returns:
        (state, problem) where problem is None for a usable save or when
        there is simply no save yet
    """
    defaults = default_runtime_state(registry)
    if storage is None:
        return defaults, None

    try:
        raw = storage.get_item(SAVE_KEY)
    except (OSError, ValueError) as e:
        # ValueError covers undecodable bytes in a save file
        return defaults, f"Save data could not be read: {e}"
    if not raw:
        return defaults, None

    try:
        parsed = json.loads(raw)
    except (ValueError, RecursionError) as e:
        return defaults, f"Save data is not valid JSON: {e}"

    migrated = migrate_save_payload(parsed)
    if migrated is None:
        return defaults, "Save data could not be migrated to the current version."

    return sanitize_runtime_state(migrated.get("runtimeState"), registry), None


def load_game(
    storage: Optional[KeyValueStorage],
    registry: Optional[StatRegistry] = None,
) -> RuntimeState:
    """
    Load the saved state, falling back to defaults on any corruption.

    Never raises for bad save data.
    """
    state, problem = read_save(storage, registry)
    if problem:
        logger.warning("Using default state: %s", problem)
    return state


class SaveService:
    """
    Persists the runtime state on a timer and on task events.

    The timer is driven by update(dt) from the tick loop, so it never
    runs outside the loop.

    Usage:
        saves = SaveService(lambda: engine.state, event_bus=bus,
                            interval=10.0, storage=storage)
        engine.adopt_state(saves.load_game())
        saves.start()
        loop.add(saves.update)
    """

    def __init__(
        self,
        get_runtime_state: Optional[Callable[[], RuntimeState]] = None,
        event_bus: Optional[EventBus] = None,
        interval: float = 30.0,
        storage: Optional[KeyValueStorage] = None,
        registry: Optional[StatRegistry] = None,
    ):
        self.get_runtime_state = get_runtime_state
        self.event_bus = event_bus
        self.interval = interval
        self.storage = storage
        self.registry = registry

        self._running = False
        self._timer = 0.0
        self._subscribed = False

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Arm the autosave timer and listen for task events."""
        self._running = True
        self._timer = 0.0

        if self.event_bus and not self._subscribed:
            for event_type in SAVE_TRIGGERS:
                self.event_bus.subscribe(event_type, self._on_task_event)
            self._subscribed = True

        logger.debug("Autosave armed every %.1fs", self.interval)

    def stop(self) -> None:
        """Disarm the autosave timer."""
        self._running = False
        self._timer = 0.0

    def update(self, dt: float) -> None:
        """Advance the autosave timer."""
        if not self._running or self.interval <= 0:
            return

        self._timer += dt
        if self._timer >= self.interval:
            self._timer = 0.0
            self.save_game()

    def save_game(self) -> bool:
        """
        Save the current state now.

        Returns:
            False without a state getter or storage
        """
        if not self.get_runtime_state:
            return False

        saved = save_game(self.get_runtime_state(), self.storage, self.registry)
        if saved and self.event_bus:
            self.event_bus.publish(SaveEvent.SAVE_COMPLETED, key=SAVE_KEY)
        return saved

    def load_game(self) -> RuntimeState:
        """Load the saved state (defaults when missing or corrupt)."""
        state, problem = read_save(self.storage, self.registry)

        if problem:
            logger.warning("Using default state: %s", problem)
            if self.event_bus:
                self.event_bus.publish(SaveEvent.LOAD_RECOVERED, key=SAVE_KEY, error=problem)
        elif self.event_bus:
            self.event_bus.publish(SaveEvent.LOAD_COMPLETED, key=SAVE_KEY)

        return state

    def _on_task_event(self, event: Event) -> None:
        self.save_game()


def _sanitize_task_progress(source: Any) -> dict[str, TaskProgress]:
    if not isinstance(source, Mapping):
        return {}
    return {
        task_id: normalize_task_progress_entry(entry)
        for task_id, entry in source.items()
        if isinstance(task_id, str)
    }


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def _string_map(value: Any) -> dict[str, str]:
    if not isinstance(value, Mapping):
        return {}
    return {
        slot: item_id
        for slot, item_id in value.items()
        if isinstance(slot, str) and isinstance(item_id, str)
    }


def _plain_dict(value: Any) -> dict[str, Any]:
    return dict(value) if isinstance(value, Mapping) else {}
