"""Round phase enumeration."""

from enum import Enum, auto


class Phase(Enum):
    """
    Round state machine phases.

    Flow: IDLE → BETTING → DEALING → (INSURANCE) → PLAYER_TURN ⇄ SPLIT_TURN
    → DEALER_TURN → RESOLUTION → IDLE
    """

    # No bet, no cards on the table
    IDLE = auto()

    # A bet is on the table, cards not yet dealt
    BETTING = auto()

    # Initial four cards going out
    DEALING = auto()

    # Dealer shows an Ace; waiting for the insurance decision
    INSURANCE = auto()

    # Player acting on the first (or only) hand
    PLAYER_TURN = auto()

    # Player acting on a hand after a split
    SPLIT_TURN = auto()

    # Dealer completes the house hand
    DEALER_TURN = auto()

    # Settling bets
    RESOLUTION = auto()

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()

    @property
    def is_player_turn(self) -> bool:
        return self in (Phase.PLAYER_TURN, Phase.SPLIT_TURN)


# Valid phase transitions
VALID_TRANSITIONS: dict[Phase, list[Phase]] = {
    Phase.IDLE: [Phase.BETTING],
    Phase.BETTING: [Phase.IDLE, Phase.DEALING],
    Phase.DEALING: [Phase.INSURANCE, Phase.PLAYER_TURN, Phase.RESOLUTION],  # RESOLUTION on a natural
    Phase.INSURANCE: [Phase.PLAYER_TURN, Phase.RESOLUTION],
    Phase.PLAYER_TURN: [Phase.SPLIT_TURN, Phase.DEALER_TURN],
    Phase.SPLIT_TURN: [Phase.SPLIT_TURN, Phase.DEALER_TURN],
    Phase.DEALER_TURN: [Phase.RESOLUTION],
    Phase.RESOLUTION: [Phase.IDLE],
}


def is_valid_transition(from_phase: Phase, to_phase: Phase) -> bool:
    """
    Check if a phase transition is valid.

    Args:
        from_phase: Current phase
        to_phase: Desired phase

    Returns:
        True if the transition is allowed
    """
    return to_phase in VALID_TRANSITIONS.get(from_phase, [])
