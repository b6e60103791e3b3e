"""
Resources module - persistence backends.
"""

from idlecore.resources.storage import KeyValueStorage, MemoryStorage, FileStorage

__all__ = [
    "KeyValueStorage",
    "MemoryStorage",
    "FileStorage",
]
