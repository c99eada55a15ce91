"""Exception hierarchy for the blackjack engine."""

from typing import Any


class BlackjackError(Exception):
    """Base class for all engine errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details if details is not None else {}


class EmptyShoeError(BlackjackError):
    """Raised when a card is dealt from a shoe with no cards left."""

    def __init__(self, message: str = "Cannot deal from an empty shoe", details=None) -> None:
        super().__init__(message, details)


class InvalidActionError(BlackjackError):
    """Raised when an action is not legal in the current phase or hand."""

    def __init__(self, message: str = "Invalid action", details=None) -> None:
        super().__init__(message, details)


class InsufficientFundsError(InvalidActionError):
    """Raised when the balance cannot cover a bet, double, split, or insurance."""

    def __init__(self, message: str = "Insufficient funds", details=None) -> None:
        super().__init__(message, details)
