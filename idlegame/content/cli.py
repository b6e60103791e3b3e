"""
Content validation tool.

Loads every pack from a directory, merges them and validates the merged
equipment and stats. Exits non-zero with itemized errors on failure.

Usage:
    python -m idlegame.content.cli content/packs
    python -m idlegame.content.cli content/packs --active expansion
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from idlegame.content.loader import load_content
from idlegame.content.packs import ContentPackError, MergedContent
from idlegame.inventory.equipment import validate_equipment_definitions
from idlegame.progression.stats import StatRegistry


logger = logging.getLogger("ContentValidation")

DEFAULT_PACKS_DIR = Path("content") / "packs"


def collect_content_errors(merged: MergedContent) -> list[str]:
    """Problems in already-merged content (empty when valid)."""
    errors = list(validate_equipment_definitions(merged.equipment).errors)

    try:
        StatRegistry.from_content(merged.stats)
    except ValueError as e:
        errors.append(f"stats: {e}")

    return errors


def validate_packs(packs_dir: str | Path, active_pack_ids: Sequence[str] = ()) -> int:
    """
    Validate the packs in a directory.

    Returns:
        Process exit code (0 when valid)
    """
    try:
        merged = load_content(packs_dir, active_pack_ids)
    except (OSError, ValueError, RecursionError, ContentPackError) as e:
        logger.error("Failed to validate content: %s", e)
        return 1

    errors = collect_content_errors(merged)
    if errors:
        logger.error("Content validation failed for merged pack definitions:")
        for error in errors:
            logger.error("- %s", error)
        return 1

    logger.info(
        "Content validation passed for %d pack(s): %s.",
        len(merged.metadata),
        ", ".join(merged.resolved_order),
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Validate content packs.")
    parser.add_argument(
        "packs_dir",
        nargs="?",
        default=str(DEFAULT_PACKS_DIR),
        help="Directory holding one sub-directory per pack",
    )
    parser.add_argument(
        "--active",
        nargs="*",
        default=[],
        metavar="PACK",
        help="Packs to activate (default: all)",
    )
    parser.add_argument("--log-level", default="INFO")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="[%(levelname)s] %(message)s",
    )
    return validate_packs(args.packs_dir, args.active)


if __name__ == "__main__":
    sys.exit(main())
