"""
Typed event bus and one-shot signals for decoupled battle notifications.

Uses Enums for event types to prevent magic strings.

Usage:
    # Subscribe
    event_bus.subscribe(BattleEvent.LOG_ENTRY, on_log_entry)

    # Publish
    event_bus.publish(BattleEvent.LOG_ENTRY, message="Battle begins!")

    # Single-fire outcome shared by several observers
    outcome = OneShotSignal()
    outcome.subscribe(lambda result: print(result.winner.name))
    outcome.fire(result)
    result = await outcome
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Generator, Generic, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")


class BattleEvent(Enum):
    """Built-in battle events."""
    # Lifecycle
    BATTLE_STARTED = auto()   # combatant_a, combatant_b, turn_order
    BATTLE_ENDED = auto()     # winner, loser

    # Turns
    TURN_STARTED = auto()     # combatant, turn
    TURN_ENDED = auto()       # combatant, turn

    # Log
    LOG_ENTRY = auto()        # message, index


@dataclass(frozen=True)
class Event:
    """
    A published battle notification.

    Attributes:
        type: The BattleEvent member
        data: Event-specific payload (see the comments on BattleEvent)
    """
    type: BattleEvent
    data: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]


EventHandler = Callable[[Event], None]


class EventBus:
    """
    Publish/subscribe hub for BattleEvent notifications.

    Handlers run synchronously, highest priority first and in subscription
    order among equal priorities. An event published from inside a handler
    is delivered after the current one has reached every handler, so the
    battle log is observed in order. A failing handler is logged and does
    not stop delivery to the others.
    """

    def __init__(self):
        # event type -> [(priority, handler)], kept sorted
        self._handlers: dict[BattleEvent, list[tuple[int, EventHandler]]] = {}
        self._pending: deque[Event] = deque()
        self._dispatching = False

    def subscribe(self, event_type: BattleEvent, handler: EventHandler, priority: int = 0) -> None:
        """
        Register `handler` for `event_type`.

        Args:
            event_type: The event to listen for
            handler: Callback taking the Event
            priority: Higher values are called first (default 0)
        """
        handlers = self._handlers.setdefault(event_type, [])
        position = next(
            (i for i, (p, _) in enumerate(handlers) if priority > p),
            len(handlers),
        )
        handlers.insert(position, (priority, handler))

    def unsubscribe(self, event_type: BattleEvent, handler: EventHandler) -> None:
        """Remove every registration of `handler` for `event_type`."""
        handlers = self._handlers.get(event_type)
        if handlers:
            handlers[:] = [(p, h) for p, h in handlers if h != handler]

    def publish(self, event_type: BattleEvent, **data: Any) -> Event:
        """
        Deliver an event to its handlers.

        Returns:
            The published Event
        """
        event = Event(type=event_type, data=data)
        self._pending.append(event)

        if not self._dispatching:
            self._dispatching = True
            try:
                while self._pending:
                    self._dispatch(self._pending.popleft())
            finally:
                self._dispatching = False
                self._pending.clear()

        return event

    def clear(self, event_type: BattleEvent | None = None) -> None:
        """Drop handlers for one event type, or for all of them."""
        if event_type is None:
            self._handlers.clear()
        else:
            self._handlers.pop(event_type, None)

    def handler_count(self, event_type: BattleEvent) -> int:
        return len(self._handlers.get(event_type, ()))

    def _dispatch(self, event: Event) -> None:
        # Snapshot so handlers may (un)subscribe while being notified
        for _, handler in list(self._handlers.get(event.type, ())):
            try:
                handler(event)
            except Exception:
                logger.exception("Error in event handler for %s", event.type)


class OneShotSignal(Generic[T]):
    """
    A notification that fires at most once.

    Any number of observers may subscribe; each is called exactly once with
    the fired value. Observers subscribing after the signal fired are called
    immediately. The signal is also awaitable from inside a running event
    loop: ``value = await signal``.
    """

    def __init__(self):
        self._observers: list[Callable[[T], None]] = []
        self._waiters: list[asyncio.Future] = []
        self._fired = False
        self._value: T | None = None

    @property
    def fired(self) -> bool:
        """Whether the signal has fired."""
        return self._fired

    @property
    def value(self) -> T | None:
        """The fired value, or None while pending."""
        return self._value

    def subscribe(self, observer: Callable[[T], None]) -> None:
        """Register an observer. Called immediately if already fired."""
        if self._fired:
            self._notify(observer, self._value)
            return
        self._observers.append(observer)

    def unsubscribe(self, observer: Callable[[T], None]) -> None:
        """Remove an observer that has not been notified yet."""
        if observer in self._observers:
            self._observers.remove(observer)

    def fire(self, value: T) -> bool:
        """
        Fire the signal.

        Args:
            value: Payload delivered to every observer and waiter

        Returns:
            True on the first call, False (and no notifications) afterwards
        """
        if self._fired:
            return False

        self._fired = True
        self._value = value

        observers, self._observers = self._observers, []
        for observer in observers:
            self._notify(observer, value)

        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(value)

        return True

    async def wait(self) -> T:
        """Suspend until the signal fires and return its value."""
        if self._fired:
            return self._value

        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        return await waiter

    def __await__(self) -> Generator[Any, None, T]:
        return self.wait().__await__()

    def _notify(self, observer: Callable[[T], None], value: T) -> None:
        try:
            observer(value)
        except Exception:
            logger.exception("Error in signal observer %r", observer)
