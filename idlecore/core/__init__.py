"""
Core runtime module.

Exports:
- EventBus, Event: Typed publish/subscribe
- TickLoop, LoopConfig: Real-time cooperative loop
"""

from idlecore.core.events import EventBus, Event, EventHandler
from idlecore.core.loop import TickLoop, LoopConfig, Updatable

__all__ = [
    # Events
    "EventBus",
    "Event",
    "EventHandler",
    # Loop
    "TickLoop",
    "LoopConfig",
    "Updatable",
]
