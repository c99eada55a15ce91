"""Round events consumed by renderers and sound layers."""

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, Callable

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Types of round events."""

    # Round flow
    ROUND_STARTED = auto()
    ROUND_ENDED = auto()

    # Betting
    BET_PLACED = auto()
    BET_CLEARED = auto()

    # Shoe
    CARD_DEALT = auto()
    SHOE_SHUFFLED = auto()

    # Player actions
    PLAYER_HIT = auto()
    PLAYER_STAND = auto()
    PLAYER_DOUBLE = auto()
    PLAYER_SPLIT = auto()
    HAND_ADVANCED = auto()

    # Insurance
    INSURANCE_OFFERED = auto()
    INSURANCE_TAKEN = auto()
    INSURANCE_DECLINED = auto()
    INSURANCE_RESOLVED = auto()

    # Dealer
    DEALER_REVEALS = auto()
    DEALER_HITS = auto()
    DEALER_STANDS = auto()
    DEALER_BUSTS = auto()
    DEALER_BLACKJACK = auto()

    # Outcomes
    PLAYER_BLACKJACK = auto()
    PLAYER_BUSTS = auto()
    HAND_RESOLVED = auto()

    # Rejections
    INVALID_ACTION = auto()
    INSUFFICIENT_FUNDS = auto()


@dataclass(frozen=True)
class GameEvent:
    """
    Immutable round event.

    Events are how the engine tells the presentation layer what happened;
    ``data`` only ever holds plain values and card snapshots.
    """

    event_type: EventType
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"{self.event_type.name}: {self.data}"


EventHandler = Callable[[GameEvent], None]


class EventEmitter:
    """Dispatches events to per-type and catch-all subscribers, keeping a bounded history."""

    def __init__(self, history_size: int = 500) -> None:
        self._handlers: dict[EventType | None, list[EventHandler]] = {}
        self._history: deque[GameEvent] = deque(maxlen=history_size)

    def subscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> None:
        """
        Subscribe to events.

        Args:
            handler: Called with each matching event
            event_type: Specific type to listen for, or None for every event
        """
        self._handlers.setdefault(event_type, []).append(handler)

    def unsubscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> bool:
        """Remove a handler; returns False if it was not subscribed."""
        handlers = self._handlers.get(event_type, [])
        if handler not in handlers:
            return False
        handlers.remove(handler)
        return True

    def emit(self, event: GameEvent) -> None:
        """Record the event and deliver it to type-specific, then catch-all, handlers."""
        logger.debug("event %s", event)
        self._history.append(event)

        for handler in list(self._handlers.get(event.event_type, [])):
            handler(event)
        for handler in list(self._handlers.get(None, [])):
            handler(event)

    def emit_new(self, event_type: EventType, **data: Any) -> GameEvent:
        """Create, emit, and return a new event."""
        event = GameEvent(event_type=event_type, data=data)
        self.emit(event)
        return event

    @property
    def history(self) -> list[GameEvent]:
        """Return a copy of the recorded events, oldest first."""
        return list(self._history)

    def of_type(self, event_type: EventType) -> list[GameEvent]:
        """Return recorded events of one type."""
        return [e for e in self._history if e.event_type == event_type]

    def clear_history(self) -> None:
        self._history.clear()
