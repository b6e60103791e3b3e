"""
Read content packs from a directory tree.

Layout:
    <packs_dir>/
        base/
            pack.json
            stats.json
            equipment.json
            tasks.json
            skills.json
        expansion/
            ...

Every sub-directory is a pack named after the directory. Each file is
optional; malformed JSON is not.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any


logger = logging.getLogger(__name__)

PACK_FILES: tuple[str, ...] = ("pack", "stats", "equipment", "tasks", "skills")


def read_json_if_exists(path: Path) -> Any | None:
    """Parse a JSON file, or return None when it does not exist."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except FileNotFoundError:
        return None


def load_pack_files(packs_dir: str | Path) -> dict[str, dict[str, Any]]:
    """
    Load every pack under a directory.

    Returns:
        pack id -> raw pack source, ready for merge_content_packs()

    Raises:
        FileNotFoundError: If packs_dir does not exist
        ValueError: If a pack file is not valid UTF-8 JSON
    """
    root = Path(packs_dir)
    if not root.is_dir():
        raise FileNotFoundError(f"Packs directory not found: {root}")

    packs: dict[str, dict[str, Any]] = {}
    for pack_dir in sorted(p for p in root.iterdir() if p.is_dir()):
        pack: dict[str, Any] = {}
        for name in PACK_FILES:
            parsed = read_json_if_exists(pack_dir / f"{name}.json")
            if parsed is not None:
                pack[name] = parsed
        packs[pack_dir.name] = pack
        logger.debug("Read pack '%s' (%s)", pack_dir.name, ", ".join(pack) or "empty")

    return packs
