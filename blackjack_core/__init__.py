"""Blackjack round engine - 100% UI-agnostic."""

from blackjack_core.cards import Card, Rank, Shoe, Suit, build_shoe, deal, shuffle
from blackjack_core.dealer import run_dealer
from blackjack_core.exceptions import (
    BlackjackError,
    EmptyShoeError,
    InsufficientFundsError,
    InvalidActionError,
)
from blackjack_core.hand import (
    Hand,
    can_split,
    hand_value,
    is_blackjack,
    is_bust,
    score_label,
)
from blackjack_core.resolver import (
    HandResult,
    InsuranceResult,
    Outcome,
    RoundResult,
    resolve_hands,
    resolve_insurance,
)
from blackjack_core.rules import RuleSet

__all__ = [
    "Card",
    "Rank",
    "Suit",
    "Shoe",
    "build_shoe",
    "shuffle",
    "deal",
    "Hand",
    "hand_value",
    "is_bust",
    "is_blackjack",
    "can_split",
    "score_label",
    "run_dealer",
    "Outcome",
    "HandResult",
    "InsuranceResult",
    "RoundResult",
    "resolve_hands",
    "resolve_insurance",
    "RuleSet",
    "BlackjackError",
    "EmptyShoeError",
    "InvalidActionError",
    "InsufficientFundsError",
]
