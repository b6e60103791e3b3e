"""
Typed event bus for decoupled communication.

Event types are Enum members so publishers and subscribers agree on a
closed vocabulary instead of loose strings. A single owner (the game
orchestrator) creates the bus and hands it to the components that
publish or listen.

Usage:
    class TaskEvent(Enum):
        CHANGED = "task:changed"

    bus.subscribe(TaskEvent.CHANGED, on_task_changed)
    bus.publish(TaskEvent.CHANGED, task_id="strength")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable
from weakref import WeakMethod, ref


logger = logging.getLogger(__name__)


@dataclass
class Event:
    """
    Event data container.

    Attributes:
        type: The event type (Enum member)
        data: Keyword payload given to publish()
        consumed: Whether a handler stopped propagation
    """
    type: Enum
    data: dict[str, Any] = field(default_factory=dict)
    consumed: bool = False

    @property
    def name(self) -> str:
        """Wire name of the event (the Enum value when it is a string)."""
        value = self.type.value
        return value if isinstance(value, str) else self.type.name

    def consume(self) -> None:
        """Stop delivery to lower-priority handlers."""
        self.consumed = True

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]


EventHandler = Callable[[Event], None]


@dataclass(eq=False)
class _Subscription:
    priority: int
    handler_ref: Any
    one_shot: bool
    weak: bool

    def resolve(self) -> EventHandler | None:
        if not self.weak:
            return self.handler_ref
        return self.handler_ref()


class EventBus:
    """
    Publish/subscribe hub.

    Features:
    - Enum-typed events
    - Priority ordering (higher first, stable among equals)
    - Optional weak references so dead listeners fall away
    - One-shot handlers
    - Consumption stops propagation
    - Events published from inside a handler are queued, not nested
    """

    def __init__(self):
        self._subscriptions: dict[Enum, list[_Subscription]] = {}
        self._queue: list[Event] = []
        self._dispatching = False

    def subscribe(
        self,
        event_type: Enum,
        handler: EventHandler,
        priority: int = 0,
        one_shot: bool = False,
        weak: bool = True,
    ) -> None:
        """
        Register a handler for an event type.

        Args:
            event_type: The event type to listen for
            handler: Callback receiving the Event
            priority: Higher priority handlers run first
            one_shot: Remove the handler after its first call
            weak: Hold the handler weakly (bound methods via WeakMethod)
        """
        if weak:
            handler_ref = WeakMethod(handler) if hasattr(handler, "__self__") else ref(handler)
        else:
            handler_ref = handler

        subscription = _Subscription(priority, handler_ref, one_shot, weak)
        subscriptions = self._subscriptions.setdefault(event_type, [])

        index = len(subscriptions)
        for i, existing in enumerate(subscriptions):
            if priority > existing.priority:
                index = i
                break
        subscriptions.insert(index, subscription)

    def unsubscribe(self, event_type: Enum, handler: EventHandler) -> None:
        subscriptions = self._subscriptions.get(event_type)
        if not subscriptions:
            return
        self._subscriptions[event_type] = [
            s for s in subscriptions if s.resolve() != handler
        ]

    def has_subscribers(self, event_type: Enum) -> bool:
        return any(
            s.resolve() is not None for s in self._subscriptions.get(event_type, [])
        )

    def publish(self, event_type: Enum, **data: Any) -> Event:
        """
        Publish an event.

        Args:
            event_type: The event type
            **data: Event payload

        Returns:
            The Event (check .consumed to see whether it was handled)
        """
        event = Event(type=event_type, data=data)
        if self._dispatching:
            self._queue.append(event)
        else:
            self._dispatch(event)
        return event

    def clear(self, event_type: Enum | None = None) -> None:
        """Drop handlers for one event type, or all of them."""
        if event_type is None:
            self._subscriptions.clear()
        else:
            self._subscriptions.pop(event_type, None)

    def _dispatch(self, event: Event) -> None:
        subscriptions = self._subscriptions.get(event.type)
        if subscriptions:
            self._dispatching = True
            try:
                self._deliver(event, subscriptions)
            finally:
                self._dispatching = False

        while self._queue:
            self._dispatch(self._queue.pop(0))

    def _deliver(self, event: Event, subscriptions: list[_Subscription]) -> None:
        spent: list[_Subscription] = []

        for subscription in list(subscriptions):
            handler = subscription.resolve()
            if handler is None:
                spent.append(subscription)
                continue

            try:
                handler(event)
            except Exception:
                logger.exception("Error in event handler for %s", event.name)

            if subscription.one_shot:
                spent.append(subscription)
            if event.consumed:
                break

        for subscription in spent:
            if subscription in subscriptions:
                subscriptions.remove(subscription)
