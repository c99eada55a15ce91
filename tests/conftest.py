"""Pytest fixtures for blackjack engine tests."""

import pytest
from random import Random

from blackjack_core.cards import Card, Rank, Shoe, Suit, build_shoe
from blackjack_core.hand import Hand
from blackjack_core.rules import RuleSet
from blackjack_core.game import BlackjackTable


def cards_from(*codes: str) -> list[Card]:
    """Parse card codes like 'AS', '10D', 'KH'; a trailing '*' marks the card face down."""
    parsed = []
    for code in codes:
        face_down = code.endswith("*")
        parsed.append(Card.from_string(code.rstrip("*"), face_down=face_down))
    return parsed


def stacked(*codes: str) -> Shoe:
    """A shoe that deals ``codes`` in the order given."""
    return Shoe.stacked(reversed(cards_from(*codes)))


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def shoe(rng):
    """A shuffled 6-deck shoe."""
    return build_shoe(6, rng=rng)


@pytest.fixture
def parse():
    """Card-code parser (see ``cards_from``)."""
    return cards_from


@pytest.fixture
def empty_hand():
    """An empty player hand."""
    return Hand()


@pytest.fixture
def blackjack_hand():
    """A natural blackjack hand."""
    return Hand(cards=[Card(Rank.ACE, Suit.SPADES), Card(Rank.KING, Suit.HEARTS)])


@pytest.fixture
def soft_17_hand():
    """A soft 17 hand (A-6)."""
    return Hand(cards=[Card(Rank.ACE, Suit.SPADES), Card(Rank.SIX, Suit.HEARTS)])


@pytest.fixture
def hard_16_hand():
    """A hard 16 hand (10-6)."""
    return Hand(cards=[Card(Rank.TEN, Suit.SPADES), Card(Rank.SIX, Suit.HEARTS)])


@pytest.fixture
def pair_8s_hand():
    """A pair of 8s hand."""
    return Hand(cards=[Card(Rank.EIGHT, Suit.SPADES), Card(Rank.EIGHT, Suit.CLUBS)])


@pytest.fixture
def bust_hand():
    """A busted hand."""
    return Hand(
        cards=[
            Card(Rank.TEN, Suit.SPADES),
            Card(Rank.SIX, Suit.HEARTS),
            Card(Rank.KING, Suit.CLUBS),
        ]
    )


@pytest.fixture
def rules():
    """Default ruleset."""
    return RuleSet()


@pytest.fixture
def stacked_rules():
    """Default rules without the threshold reshuffle, so stacked shoes play out exactly."""
    return RuleSet(reshuffle_threshold=0)


@pytest.fixture
def table(rng, rules):
    """A table with a shuffled shoe and 1000 balance."""
    return BlackjackTable(rules=rules, balance=1000, rng=rng)


@pytest.fixture
def stacked_table(rng, stacked_rules):
    """
    Factory for a table dealing a fixed sequence.

    Initial deal order is player, dealer up, player, dealer hole.
    """

    def _make(*codes: str, balance: int = 1000, rules: RuleSet | None = None) -> BlackjackTable:
        return BlackjackTable(
            rules=rules or stacked_rules,
            balance=balance,
            rng=rng,
            shoe=stacked(*codes),
        )

    return _make



@pytest.fixture
def stack():
    """Shoe builder dealing card codes in the order given."""
    return stacked
