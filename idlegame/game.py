"""
Headless idle game - wires the progression engine, saves and content.

The IdleGame owns the single event bus and hands it to every component
that publishes or listens. Startup order matters: the save is loaded
and adopted before autosave is armed, so the first save never
overwrites a good save with defaults.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

from idlecore.core.events import EventBus
from idlecore.core.loop import LoopConfig, TickLoop
from idlecore.resources.storage import KeyValueStorage
from idlegame.content.loader import load_equipment_definitions, load_task_definitions
from idlegame.inventory.equipment import EquipmentView, build_equipment_view
from idlegame.progression.engine import ProgressionEngine
from idlegame.progression.jobs import JobRegistry
from idlegame.progression.leveling import TICK_INTERVAL
from idlegame.progression.stats import StatRegistry
from idlegame.progression.tasks import IDLE_TASK_ID, TaskCatalog
from idlegame.save.service import SaveService


logger = logging.getLogger(__name__)


class GameConfig:
    """Configuration for the idle game."""

    def __init__(
        self,
        tick_interval: float = TICK_INTERVAL,
        autosave_interval: float = 10.0,
        packs_dir: str | Path | None = None,
        active_pack_ids: Sequence[str] = (),
        equipment_path: str | Path | None = None,
        log_level: str = "INFO",
    ):
        self.tick_interval = tick_interval
        self.autosave_interval = autosave_interval
        self.packs_dir = packs_dir
        self.active_pack_ids = list(active_pack_ids)
        self.equipment_path = equipment_path
        self.log_level = log_level


class IdleGame:
    """
    Main game class.

    Usage:
        game = IdleGame(GameConfig(packs_dir="content/packs"),
                        storage=FileStorage("saves"))
        game.start()
        game.engine.select_task("courier")
        game.run()
        game.shutdown()
    """

    def __init__(
        self,
        config: GameConfig | None = None,
        storage: Optional[KeyValueStorage] = None,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Callable[[float], Any] = time.sleep,
    ):
        self.config = config or GameConfig()
        self.storage = storage

        self.event_bus = EventBus()
        self.stats = StatRegistry.default()
        self.jobs = JobRegistry.default()
        self.catalog = TaskCatalog.default(self.stats, self.jobs)
        self.engine = ProgressionEngine(
            self.catalog, self.stats, self.jobs, event_bus=self.event_bus
        )
        self.save_service = SaveService(
            lambda: self.engine.state,
            event_bus=self.event_bus,
            interval=self.config.autosave_interval,
            storage=storage,
            registry=self.stats,
        )
        self.equipment_definitions: list[dict[str, Any]] = []

        self.loop = TickLoop(LoopConfig(tick_interval=self.config.tick_interval), clock, sleep)
        self.loop.add(self.update)

        self._started = False

    @property
    def is_started(self) -> bool:
        return self._started

    @property
    def equipment_view(self) -> EquipmentView:
        """Owned and equipped items resolved against the loaded definitions."""
        state = self.engine.state
        return build_equipment_view(
            self.equipment_definitions,
            state.owned_equipment_ids,
            state.equipped_by_slot,
        )

    def start(self) -> None:
        """Load content and the save, then arm autosave."""
        tasks = load_task_definitions(
            self.config.packs_dir, self.stats, self.jobs, self.config.active_pack_ids
        )
        if tasks.used_fallback:
            logger.info("Using built-in tasks: %s", tasks.error)
        self.catalog = TaskCatalog.from_definitions(tasks.value, self.stats, self.jobs)
        self.engine.set_catalog(self.catalog)

        self.equipment_definitions = load_equipment_definitions(self.config.equipment_path).value

        self.engine.adopt_state(self.save_service.load_game())
        self.engine.select_task(IDLE_TASK_ID)

        self.save_service.start()
        self._started = True
        logger.info(
            "Idle game started with %d task(s) and %d equipment definition(s)",
            len(self.catalog),
            len(self.equipment_definitions),
        )

    def update(self, dt: float) -> None:
        """Advance progression and the autosave timer."""
        self.engine.update(dt)
        self.save_service.update(dt)

    def run(self, max_ticks: int | None = None) -> None:
        """Run the tick loop (starting the game first if needed)."""
        if not self._started:
            self.start()
        self.loop.run(max_ticks)

    def quit(self) -> None:
        """Request loop exit after the current tick."""
        self.loop.stop()

    def shutdown(self) -> bool:
        """
        Stop autosave and write a final save.

        Returns:
            Whether the final save was written
        """
        self.loop.stop()
        self.save_service.stop()
        saved = self.save_service.save_game()
        self._started = False
        logger.info("Idle game shut down (saved: %s)", saved)
        return saved
