"""
Save module - runtime state persistence.

Provides:
- Save/load of the runtime state under one storage key
- Versioned save format with forward migrations
- Sanitizing of untrusted save data
- Autosave on a timer and on task events
"""

from idlegame.save.migrations import SAVE_VERSION, MIGRATIONS, migrate_save_payload
from idlegame.save.service import (
    SAVE_KEY,
    SaveEvent,
    SaveService,
    build_save_payload,
    default_runtime_state,
    load_game,
    read_save,
    sanitize_runtime_state,
    save_game,
)

__all__ = [
    "SAVE_KEY",
    "SAVE_VERSION",
    "MIGRATIONS",
    "migrate_save_payload",
    "SaveEvent",
    "SaveService",
    "build_save_payload",
    "default_runtime_state",
    "load_game",
    "read_save",
    "sanitize_runtime_state",
    "save_game",
]
