"""Round engine, phases, and events."""

from blackjack_core.game.events import EventEmitter, EventType, GameEvent
from blackjack_core.game.state import Phase
from blackjack_core.game.engine import BlackjackTable, Round, TableSnapshot

__all__ = [
    "EventEmitter",
    "EventType",
    "GameEvent",
    "Phase",
    "BlackjackTable",
    "Round",
    "TableSnapshot",
]
