"""Hand evaluation for blackjack."""

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Sequence

from blackjack_core.cards import Card

BLACKJACK = 21


def _ace_adjusted(cards: Iterable[Card]) -> tuple[int, int]:
    """Return (total, aces still counted as 11) after demoting aces as needed."""
    total = 0
    aces = 0

    for card in cards:
        if card.is_ace:
            aces += 1
        total += card.value

    # Reduce aces from 11 to 1 as needed
    while total > BLACKJACK and aces > 0:
        total -= 10
        aces -= 1

    return total, aces


def _visible(cards: Iterable[Card]) -> list[Card]:
    return [card for card in cards if not card.face_down]


def hand_value(cards: Sequence[Card]) -> int:
    """
    Calculate the best value of the visible cards.

    Returns the highest value that doesn't bust, or the lowest bust value.
    Face-down cards are ignored, so a hand of only face-down cards is 0.
    """
    return _ace_adjusted(_visible(cards))[0]


def full_value(cards: Sequence[Card]) -> int:
    """Calculate the best value over every card, face-down ones included."""
    return _ace_adjusted(cards)[0]


def is_bust(cards: Sequence[Card]) -> bool:
    """Check if the visible value exceeds 21."""
    return hand_value(cards) > BLACKJACK


def is_blackjack(cards: Sequence[Card]) -> bool:
    """
    Check for a natural: exactly two cards totalling 21.

    Evaluated over all cards, so a dealer's concealed hole card counts.
    """
    return len(cards) == 2 and full_value(cards) == BLACKJACK


def can_split(cards: Sequence[Card]) -> bool:
    """Check for two cards of the same rank (a 10 and a King do not qualify)."""
    return len(cards) == 2 and cards[0].rank == cards[1].rank


def is_soft(cards: Sequence[Card]) -> bool:
    """Check if a visible ace is currently counted as 11."""
    return _ace_adjusted(_visible(cards))[1] > 0


def score_label(cards: Sequence[Card]) -> str:
    """
    Display string for the visible total, e.g. '17' or 'soft 17'.

    Soft only when counting every ace as 11 needs no reduction, so A-A reads
    '12' and A-A-5 reads '17'. A soft 21 reads '21'.
    """
    visible = _visible(cards)
    total = hand_value(visible)
    raw = sum(card.value for card in visible)
    has_ace = any(card.is_ace for card in visible)
    if has_ace and raw <= BLACKJACK and total == raw and total < BLACKJACK:
        return f"soft {total}"
    return str(total)


@dataclass
class Hand:
    """A blackjack hand owned by exactly one seat (a player position or the dealer)."""

    cards: list[Card] = field(default_factory=list)
    bet: int = 0
    is_doubled: bool = False
    is_split_hand: bool = False
    is_split_aces: bool = False

    def add_card(self, card: Card) -> None:
        """Add a card to the hand."""
        self.cards.append(card)

    def reveal(self) -> None:
        """Turn every card face up."""
        self.cards = [card.flipped(False) for card in self.cards]

    def snapshot(self) -> tuple[Card, ...]:
        """Return an independent copy of the cards for read-only consumers."""
        return tuple(self.cards)

    @property
    def value(self) -> int:
        """Visible hand value."""
        return hand_value(self.cards)

    @property
    def label(self) -> str:
        return score_label(self.cards)

    @property
    def is_soft(self) -> bool:
        return is_soft(self.cards)

    @property
    def is_busted(self) -> bool:
        return is_bust(self.cards)

    @property
    def is_blackjack(self) -> bool:
        """A natural; hands created by a split never count."""
        return is_blackjack(self.cards) and not self.is_split_hand

    @property
    def is_pair(self) -> bool:
        return can_split(self.cards)

    @property
    def can_double(self) -> bool:
        """Check if the hand can be doubled down."""
        return len(self.cards) == 2 and not self.is_doubled and not self.is_split_aces

    @property
    def has_hole_card(self) -> bool:
        return any(card.face_down for card in self.cards)

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __str__(self) -> str:
        cards_str = " ".join(str(card) for card in self.cards)
        if self.is_blackjack:
            return f"{cards_str} (BLACKJACK)"
        if self.is_busted:
            return f"{cards_str} (BUST)"
        return f"{cards_str} ({self.label})"

    def __repr__(self) -> str:
        return f"Hand({self.cards!r}, bet={self.bet}, value={self.value})"
