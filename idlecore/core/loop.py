"""
Real-time tick loop.

Measures wall-clock time between ticks and hands the delta to every
registered updatable. Unlike a physics loop there is no fixed step and
no clamping of large deltas: an idle game must credit the full time a
suspended process was away, so consumers are expected to carry
remainders themselves.

Usage:
    loop = TickLoop(LoopConfig(tick_interval=0.1))
    loop.add(engine.update)
    loop.add(save_service.update)
    loop.run()
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable


logger = logging.getLogger(__name__)

Updatable = Callable[[float], Any]


class LoopConfig:
    """Configuration for the tick loop."""

    def __init__(
        self,
        tick_interval: float = 0.1,
        max_delta: float | None = None,
    ):
        if tick_interval <= 0:
            raise ValueError("tick_interval must be positive")
        self.tick_interval = tick_interval
        # None means deltas are passed through untouched
        self.max_delta = max_delta


class TickLoop:
    """
    Cooperative single-threaded loop.

    Each tick runs every updatable to completion, in registration order,
    before the next tick is scheduled. The clock and sleep functions are
    injectable so tests can drive time by hand.
    """

    def __init__(
        self,
        config: LoopConfig | None = None,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Callable[[float], Any] = time.sleep,
    ):
        self.config = config or LoopConfig()
        self._clock = clock
        self._sleep = sleep
        self._updatables: list[Updatable] = []
        self._previous: float | None = None
        self._running = False
        self._ticks = 0

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def ticks(self) -> int:
        """Number of ticks processed so far."""
        return self._ticks

    def add(self, updatable: Updatable) -> None:
        self._updatables.append(updatable)

    def remove(self, updatable: Updatable) -> None:
        if updatable in self._updatables:
            self._updatables.remove(updatable)

    def reset_clock(self) -> None:
        """Restart delta measurement from the current clock reading."""
        self._previous = self._clock()

    def step(self) -> float:
        """
        Run a single tick.

        Returns:
            The delta in seconds handed to the updatables
        """
        now = self._clock()
        if self._previous is None:
            self._previous = now
        delta = max(now - self._previous, 0.0)
        self._previous = now

        if self.config.max_delta is not None:
            delta = min(delta, self.config.max_delta)

        for updatable in list(self._updatables):
            updatable(delta)

        self._ticks += 1
        return delta

    def run(self, max_ticks: int | None = None) -> None:
        """
        Tick until stop() is called or max_ticks is reached.

        Args:
            max_ticks: Optional tick budget (None runs until stopped)
        """
        self._running = True
        self.reset_clock()
        logger.debug("Tick loop started (interval %.3fs)", self.config.tick_interval)

        processed = 0
        try:
            while self._running:
                started = self._clock()
                self.step()
                processed += 1
                if max_ticks is not None and processed >= max_ticks:
                    break

                remaining = self.config.tick_interval - (self._clock() - started)
                if remaining > 0:
                    self._sleep(remaining)
        finally:
            self._running = False
            logger.debug("Tick loop stopped after %d ticks", processed)

    def stop(self) -> None:
        """Request loop shutdown after the current tick."""
        self._running = False
