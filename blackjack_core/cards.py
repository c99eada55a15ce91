"""Card, Shoe, and shuffling - immutable card representations."""

from dataclasses import dataclass, replace
from enum import Enum, auto
from random import Random, SystemRandom
from typing import Iterable, Iterator, Sequence

from blackjack_core.exceptions import EmptyShoeError

CARDS_PER_DECK = 52

# OS entropy unless a caller injects a seeded Random
_default_rng: Random = SystemRandom()


class Suit(Enum):
    """Card suits."""

    CLUBS = auto()
    DIAMONDS = auto()
    HEARTS = auto()
    SPADES = auto()

    def __str__(self) -> str:
        symbols = {
            Suit.CLUBS: "♣",
            Suit.DIAMONDS: "♦",
            Suit.HEARTS: "♥",
            Suit.SPADES: "♠",
        }
        return symbols[self]


class Rank(Enum):
    """Card ranks, numbered 1 (Ace) through 13 (King)."""

    ACE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13

    def __str__(self) -> str:
        return self.label

    @property
    def label(self) -> str:
        """Short display label ('A', '2'..'10', 'J', 'Q', 'K')."""
        return {
            Rank.ACE: "A",
            Rank.JACK: "J",
            Rank.QUEEN: "Q",
            Rank.KING: "K",
        }.get(self, str(self.value))

    @property
    def blackjack_value(self) -> int:
        """Return the blackjack point value (Ace = 11, face cards = 10)."""
        if self == Rank.ACE:
            return 11
        return min(self.value, 10)

    @property
    def is_ace(self) -> bool:
        """Check if this rank is an Ace."""
        return self == Rank.ACE

    @property
    def is_ten_value(self) -> bool:
        """Check if this rank has a value of 10."""
        return self.value >= 10


_RANK_LOOKUP = {
    "A": Rank.ACE,
    "1": Rank.ACE,
    "2": Rank.TWO,
    "3": Rank.THREE,
    "4": Rank.FOUR,
    "5": Rank.FIVE,
    "6": Rank.SIX,
    "7": Rank.SEVEN,
    "8": Rank.EIGHT,
    "9": Rank.NINE,
    "10": Rank.TEN,
    "T": Rank.TEN,
    "J": Rank.JACK,
    "Q": Rank.QUEEN,
    "K": Rank.KING,
}

_SUIT_LOOKUP = {
    "C": Suit.CLUBS,
    "♣": Suit.CLUBS,
    "D": Suit.DIAMONDS,
    "♦": Suit.DIAMONDS,
    "H": Suit.HEARTS,
    "♥": Suit.HEARTS,
    "S": Suit.SPADES,
    "♠": Suit.SPADES,
}


@dataclass(frozen=True, slots=True)
class Card:
    """Immutable playing card.

    ``face_down`` only hides the card from the visible total; a face-down
    card still counts when checking for a natural.
    """

    rank: Rank
    suit: Suit
    face_down: bool = False

    def __str__(self) -> str:
        if self.face_down:
            return "??"
        return f"{self.rank}{self.suit}"

    def __repr__(self) -> str:
        flag = ", face_down=True" if self.face_down else ""
        return f"Card({self.rank.name}, {self.suit.name}{flag})"

    @property
    def value(self) -> int:
        """Return the blackjack point value."""
        return self.rank.blackjack_value

    @property
    def is_ace(self) -> bool:
        return self.rank.is_ace

    @property
    def is_ten_value(self) -> bool:
        return self.rank.is_ten_value

    def flipped(self, face_down: bool) -> "Card":
        """Return a copy of this card with the given orientation."""
        if self.face_down == face_down:
            return self
        return replace(self, face_down=face_down)

    @classmethod
    def from_string(cls, s: str, face_down: bool = False) -> "Card":
        """Create a card from a string like 'AS', '10♦', 'Kh'."""
        s = s.strip().upper()
        if len(s) < 2:
            raise ValueError(f"Invalid card string: {s!r}")

        rank_str, suit_str = s[:-1], s[-1]
        if rank_str not in _RANK_LOOKUP:
            raise ValueError(f"Invalid rank: {rank_str!r}")
        if suit_str not in _SUIT_LOOKUP:
            raise ValueError(f"Invalid suit: {suit_str!r}")

        return cls(_RANK_LOOKUP[rank_str], _SUIT_LOOKUP[suit_str], face_down)


def ordered_deck() -> list[Card]:
    """Return one unshuffled 52-card deck, suit by suit."""
    return [Card(rank, suit) for suit in Suit for rank in Rank]


def shuffle(cards: Sequence[Card], rng: Random | None = None) -> list[Card]:
    """
    Return a uniformly shuffled copy of ``cards``.

    Fisher-Yates: for i from the last index down to 1, swap with j drawn
    uniformly from [0, i] inclusive. The input sequence is left untouched.
    """
    rng = rng or _default_rng
    shuffled = list(cards)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


class Shoe:
    """A multi-deck shoe dealt from the top (the end of the sequence)."""

    def __init__(self, cards: Iterable[Card], num_decks: int) -> None:
        """
        Wrap an already-ordered card sequence.

        Use :func:`build_shoe` for a fresh shuffled shoe, or
        :meth:`Shoe.stacked` for a fixed sequence.
        """
        if num_decks < 1:
            raise ValueError("Shoe must have at least 1 deck")
        self._cards: list[Card] = list(cards)
        self._num_decks = num_decks

    @classmethod
    def stacked(cls, cards: Iterable[Card]) -> "Shoe":
        """
        Build an unshuffled shoe from a fixed sequence.

        The last card of ``cards`` is dealt first.
        """
        cards = list(cards)
        num_decks = max(1, -(-len(cards) // CARDS_PER_DECK))
        return cls(cards, num_decks=num_decks)

    def deal(self) -> Card:
        """Remove and return the top card."""
        if not self._cards:
            raise EmptyShoeError(details={"num_decks": self._num_decks})
        return self._cards.pop()

    def needs_reshuffle(self, threshold: int) -> bool:
        """Check if fewer than ``threshold`` cards remain."""
        return len(self._cards) < threshold

    @property
    def cards_remaining(self) -> int:
        return len(self._cards)

    @property
    def cards_dealt(self) -> int:
        """Return the number of cards dealt (never negative for stacked shoes)."""
        return max(0, self.total_cards - len(self._cards))

    @property
    def total_cards(self) -> int:
        """Return the number of cards in a full shoe."""
        return self._num_decks * CARDS_PER_DECK

    @property
    def num_decks(self) -> int:
        return self._num_decks

    @property
    def decks_remaining(self) -> float:
        """Return the estimated number of decks remaining."""
        return len(self._cards) / CARDS_PER_DECK

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)

    def __repr__(self) -> str:
        return f"Shoe(num_decks={self._num_decks}, remaining={len(self._cards)})"


def build_shoe(deck_count: int = 6, rng: Random | None = None) -> Shoe:
    """
    Build and shuffle a shoe of ``deck_count`` standard decks.

    Every (rank, suit) pair appears exactly ``deck_count`` times.
    """
    if deck_count < 1:
        raise ValueError("Shoe must have at least 1 deck")
    ordered = [card for _ in range(deck_count) for card in ordered_deck()]
    return Shoe(shuffle(ordered, rng), num_decks=deck_count)


def deal(shoe: Shoe) -> Card:
    """Remove and return the top card of ``shoe``; raises EmptyShoeError when empty."""
    return shoe.deal()
