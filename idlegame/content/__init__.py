"""
Content module - declarative content packs.

Provides:
- Dependency-ordered pack merge with scoped ids
- Reading packs from a directory tree
- Startup loaders that report their fallbacks
"""

from idlegame.content.packs import (
    MergedContent,
    PackMetadata,
    PackRecord,
    ContentPackError,
    PackFormatError,
    DuplicateIdError,
    MissingDependencyError,
    DependencyCycleError,
    MissingOverrideTargetError,
    ActivePackNotFoundError,
    resolve_scoped_id,
    resolve_pack_order,
    merge_content_packs,
)
from idlegame.content.files import load_pack_files, PACK_FILES
from idlegame.content.loader import (
    LoadResult,
    load_content,
    load_task_definitions,
    load_equipment_definitions,
)

__all__ = [
    # Merge
    "MergedContent",
    "PackMetadata",
    "PackRecord",
    "resolve_scoped_id",
    "resolve_pack_order",
    "merge_content_packs",
    # Errors
    "ContentPackError",
    "PackFormatError",
    "DuplicateIdError",
    "MissingDependencyError",
    "DependencyCycleError",
    "MissingOverrideTargetError",
    "ActivePackNotFoundError",
    # Files
    "load_pack_files",
    "PACK_FILES",
    # Loaders
    "LoadResult",
    "load_content",
    "load_task_definitions",
    "load_equipment_definitions",
]
