"""
Event publication for the Cardparlor engines.

Engines never call into a presentation layer. Each derived change of a table
(a card turned over, a foundation completed, a round paid out) is published
by name on an `EventEmitter`, normally the process-wide one returned by
`EventBus.get_instance()`, and renderers subscribe to the names they draw.

Event data is always a plain dict carrying at least ``game_id`` so that
several sessions can share one bus.
"""

from bisect import insort
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from itertools import count
from typing import Any, Callable, Dict, List, Optional, Union
import logging
import threading

logger = logging.getLogger("cardparlor.events")

EventName = Union[str, Enum]

# Subscriptions stored under this key receive every event
_ANY = "*"


class EventPriority(Enum):
    """Priority levels for event handlers."""

    LOW = 0
    NORMAL = 1
    HIGH = 2
    CRITICAL = 3


@dataclass(frozen=True)
class Subscription:
    """A registered handler. Sorts by priority (highest first), then age."""

    callback: Callable = field(compare=False)
    priority: int = 1
    sequence: int = 0

    @property
    def sort_key(self):
        return (-self.priority, self.sequence)


def event_name(event_type: EventName) -> str:
    """Subscriptions and emissions are keyed by the enum member name."""
    if isinstance(event_type, Enum):
        return event_type.name
    return event_type


class EventEmitter:
    """
    Publishes named events to prioritised subscribers.

    A handler that raises is logged and skipped; the emitting transition
    carries on with the remaining handlers.
    """

    def __init__(self):
        self._subscriptions: Dict[str, List[Subscription]] = defaultdict(list)
        self._sequence = count()
        self._lock = threading.RLock()
        self._local = threading.local()

    def _buffers(self) -> List[list]:
        if not hasattr(self._local, "buffers"):
            self._local.buffers = []
        return self._local.buffers

    @contextmanager
    def deferred(self):
        """
        Hold back events emitted in the block until it exits.

        Engines wrap a transition and the assignment of its result in this
        block, so handlers only run once the new state is stored and may
        read it or issue further intents. Blocks nest; events of an inner
        block are handed to the enclosing one. If the block raises, its
        events are discarded.
        """
        buffer = []
        buffers = self._buffers()
        buffers.append(buffer)
        try:
            yield
        finally:
            buffers.pop()
        for event_type, data in buffer:
            self.emit(event_type, data)

    def _subscribe(self, key: str, callback: Callable, priority: EventPriority) -> Callable:
        subscription = Subscription(callback, priority.value, next(self._sequence))
        with self._lock:
            insort(self._subscriptions[key], subscription, key=lambda s: s.sort_key)

        def unsubscribe():
            with self._lock:
                handlers = self._subscriptions.get(key, [])
                if subscription in handlers:
                    handlers.remove(subscription)

        return unsubscribe

    def on(
        self,
        event_type: EventName,
        callback: Callable,
        priority: EventPriority = EventPriority.NORMAL,
    ) -> Callable:
        """
        Subscribe to one event type.

        Args:
            event_type: Event to listen for (string or enum member)
            callback: Called as ``callback(data)``
            priority: Handlers with a higher priority run first

        Returns:
            A function that removes the subscription
        """
        return self._subscribe(event_name(event_type), callback, priority)

    def once(
        self,
        event_type: EventName,
        callback: Callable,
        priority: EventPriority = EventPriority.NORMAL,
    ) -> Callable:
        """Subscribe for the next occurrence only."""
        unsubscribe: Optional[Callable] = None

        def handle_once(data):
            unsubscribe()
            callback(data)

        unsubscribe = self.on(event_type, handle_once, priority)
        return unsubscribe

    def on_any(
        self, callback: Callable, priority: EventPriority = EventPriority.NORMAL
    ) -> Callable:
        """
        Subscribe to every event.

        The callback receives a single ``(event_name, data)`` tuple.
        """
        return self._subscribe(_ANY, callback, priority)

    def emit(self, event_type: EventName, data: Dict[str, Any]) -> None:
        """
        Deliver an event to its subscribers, then to the catch-all ones.

        Args:
            event_type: The event being published
            data: Event payload
        """
        buffers = self._buffers()
        if buffers:
            buffers[-1].append((event_type, data))
            return

        name = event_name(event_type)
        with self._lock:
            calls = [(s.callback, data) for s in self._subscriptions.get(name, ())]
            calls += [(s.callback, (name, data)) for s in self._subscriptions.get(_ANY, ())]

        # Handlers run outside the lock so they may subscribe or emit themselves
        for callback, payload in calls:
            try:
                callback(payload)
            except Exception as e:
                logger.error(f"Error in event handler for {name}: {e}", exc_info=True)

    def listener_count(self, event_type: EventName) -> int:
        with self._lock:
            return len(self._subscriptions.get(event_name(event_type), ()))

    def remove_all_listeners(self, event_type: Optional[EventName] = None) -> None:
        """
        Drop the subscriptions of one event type, or every subscription
        (catch-all ones included) when no type is given.
        """
        with self._lock:
            if event_type is None:
                self._subscriptions.clear()
            else:
                self._subscriptions.pop(event_name(event_type), None)


class EventBus:
    """
    Holder of the process-wide emitter the engines publish on.
    """

    _instance: Optional[EventEmitter] = None
    _lock = threading.Lock()

    @classmethod
    def get_instance(cls) -> EventEmitter:
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = EventEmitter()
        return cls._instance


class EngineEventType(Enum):
    """
    Event types published by the Cardparlor engines.
    """

    # Game lifecycle
    GAME_CREATED = "game_created"
    GAME_WON = "game_won"
    GAME_LOST = "game_lost"
    GAME_RESET = "game_reset"

    # Patience events
    MOVE_EXECUTED = "move_executed"
    CARD_FLIPPED = "card_flipped"
    FOUNDATION_COMPLETED = "foundation_completed"
    STOCK_DEALT = "stock_dealt"
    STOCK_RECYCLED = "stock_recycled"
    AUTOPLAY_STARTED = "autoplay_started"
    AUTOPLAY_STOPPED = "autoplay_stopped"

    # Blackjack events
    PLAYER_BET = "player_bet"
    CARD_DEALT = "card_dealt"
    PLAYER_ACTION = "player_action"
    HAND_BUSTED = "hand_busted"
    CARD_REVEALED = "card_revealed"
    DEALER_ACTION = "dealer_action"
    ROUND_RESOLVED = "round_resolved"
    BANKROLL_UPDATED = "bankroll_updated"

    # Rejections
    ACTION_REJECTED = "action_rejected"
