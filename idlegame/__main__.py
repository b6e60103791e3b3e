"""
Run the idle game headless.

Usage:
    python -m idlegame --packs content/packs --saves saves --task courier
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from idlecore.resources.storage import FileStorage
from idlegame.game import GameConfig, IdleGame


logger = logging.getLogger("idlegame")


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run the idle game without a UI.")
    parser.add_argument("--packs", default=None, help="Content packs directory")
    parser.add_argument("--active", nargs="*", default=[], metavar="PACK")
    parser.add_argument("--equipment", default=None, help="Equipment definitions file")
    parser.add_argument("--saves", default="saves", help="Directory for save files")
    parser.add_argument("--task", default=None, help="Task to work on")
    parser.add_argument("--ticks", type=int, default=None, help="Stop after this many ticks")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args(argv)

    config = GameConfig(
        packs_dir=args.packs,
        active_pack_ids=args.active,
        equipment_path=args.equipment,
        log_level=args.log_level,
    )
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    game = IdleGame(config, storage=FileStorage(args.saves))
    game.start()
    if args.task and not game.engine.select_task(args.task):
        logger.error("Unknown task '%s'", args.task)
        game.shutdown()
        return 1

    try:
        game.run(args.ticks)
    except KeyboardInterrupt:
        pass
    finally:
        game.shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())
