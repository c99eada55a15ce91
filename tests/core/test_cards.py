"""Tests for Card, Shoe, shuffle, and deal."""

import pytest
from collections import Counter
from random import Random

from blackjack_core.cards import (
    Card,
    Rank,
    Shoe,
    Suit,
    build_shoe,
    deal,
    ordered_deck,
    shuffle,
)
from blackjack_core.exceptions import EmptyShoeError


class TestCard:
    """Tests for the Card class."""

    def test_card_creation(self):
        """Test creating a card."""
        card = Card(Rank.ACE, Suit.SPADES)
        assert card.rank == Rank.ACE
        assert card.suit == Suit.SPADES
        assert card.face_down is False

    def test_rank_numbering(self):
        """Test ranks run 1 (Ace) to 13 (King)."""
        assert Rank.ACE.value == 1
        assert Rank.JACK.value == 11
        assert Rank.KING.value == 13
        assert len(Rank) == 13

    def test_card_immutability(self):
        """Test that cards are immutable."""
        card = Card(Rank.ACE, Suit.SPADES)
        with pytest.raises(AttributeError):
            card.face_down = True

    def test_card_value(self):
        """Test card blackjack values."""
        assert Card(Rank.TWO, Suit.HEARTS).value == 2
        assert Card(Rank.NINE, Suit.HEARTS).value == 9
        assert Card(Rank.TEN, Suit.HEARTS).value == 10
        assert Card(Rank.JACK, Suit.HEARTS).value == 10
        assert Card(Rank.QUEEN, Suit.HEARTS).value == 10
        assert Card(Rank.KING, Suit.HEARTS).value == 10
        assert Card(Rank.ACE, Suit.HEARTS).value == 11

    def test_card_is_ten_value(self):
        """Test ten-value detection."""
        for rank in (Rank.TEN, Rank.JACK, Rank.QUEEN, Rank.KING):
            assert Card(rank, Suit.SPADES).is_ten_value
        assert not Card(Rank.NINE, Suit.SPADES).is_ten_value
        assert not Card(Rank.ACE, Suit.SPADES).is_ten_value

    def test_flipped_returns_new_card(self):
        """Test flipping produces a copy and leaves the original alone."""
        card = Card(Rank.KING, Suit.CLUBS)
        hidden = card.flipped(True)
        assert hidden.face_down
        assert not card.face_down
        assert hidden.flipped(False) == card

    def test_flipped_same_orientation_is_identity(self):
        card = Card(Rank.KING, Suit.CLUBS)
        assert card.flipped(False) is card

    def test_face_down_str_hides_card(self):
        """Test a face-down card renders as unknown."""
        assert str(Card(Rank.ACE, Suit.SPADES, face_down=True)) == "??"

    def test_card_from_string(self):
        """Test creating cards from strings."""
        assert Card.from_string("AS") == Card(Rank.ACE, Suit.SPADES)
        assert Card.from_string("2H") == Card(Rank.TWO, Suit.HEARTS)
        assert Card.from_string("10D") == Card(Rank.TEN, Suit.DIAMONDS)
        assert Card.from_string("kc") == Card(Rank.KING, Suit.CLUBS)

    def test_card_from_string_with_symbols(self):
        """Test creating cards from strings with suit symbols."""
        assert Card.from_string("A♠") == Card(Rank.ACE, Suit.SPADES)
        assert Card.from_string("K♥") == Card(Rank.KING, Suit.HEARTS)

    @pytest.mark.parametrize("bad", ["", "A", "ZS", "AX", "11H"])
    def test_card_from_string_invalid(self, bad):
        with pytest.raises(ValueError):
            Card.from_string(bad)

    def test_card_str(self):
        """Test string representation."""
        assert str(Card(Rank.ACE, Suit.SPADES)) == "A♠"
        assert str(Card(Rank.TEN, Suit.DIAMONDS)) == "10♦"

    def test_card_hash(self):
        """Test that cards can be used in sets/dicts."""
        cards = {Card(Rank.ACE, Suit.SPADES), Card(Rank.ACE, Suit.SPADES)}
        assert len(cards) == 1


class TestShuffle:
    """Tests for the Fisher-Yates shuffle."""

    def test_shuffle_does_not_mutate_input(self, rng):
        """Test the input sequence is left untouched."""
        original = ordered_deck()
        before = list(original)
        shuffle(original, rng)
        assert original == before

    def test_shuffle_returns_independent_copy(self, rng):
        original = ordered_deck()
        shuffled = shuffle(original, rng)
        assert shuffled is not original
        assert Counter(shuffled) == Counter(original)

    def test_shuffle_changes_order(self, rng):
        original = ordered_deck()
        assert shuffle(original, rng) != original

    def test_shuffling_twice_gives_different_orders(self, rng):
        base = ordered_deck()
        assert shuffle(base, rng) != shuffle(base, rng)

    def test_shuffle_is_reproducible_with_seed(self):
        base = ordered_deck()
        assert shuffle(base, Random(7)) == shuffle(base, Random(7))

    def test_shuffle_default_rng(self):
        """Test shuffling works with the OS entropy source."""
        base = ordered_deck()
        assert Counter(shuffle(base)) == Counter(base)

    def test_shuffle_empty_and_single(self, rng):
        assert shuffle([], rng) == []
        card = Card(Rank.ACE, Suit.SPADES)
        assert shuffle([card], rng) == [card]

    def test_swap_partner_range_is_inclusive(self):
        """Test j is drawn from [0, i] inclusive at every step."""

        class RecordingRandom(Random):
            def __init__(self):
                super().__init__(0)
                self.calls = []

            def randint(self, a, b):
                self.calls.append((a, b))
                return super().randint(a, b)

        recorder = RecordingRandom()
        shuffle(ordered_deck(), recorder)
        assert recorder.calls == [(0, i) for i in range(51, 0, -1)]


class TestShoe:
    """Tests for shoe building and dealing."""

    def test_shoe_size(self, shoe):
        """Test a six-deck shoe holds 312 cards."""
        assert len(shoe) == 312
        assert shoe.num_decks == 6
        assert shoe.total_cards == 312

    @pytest.mark.parametrize("deck_count", [1, 2, 6, 8])
    def test_composition(self, deck_count, rng):
        """Test every rank-suit pair appears exactly deck_count times."""
        shoe = build_shoe(deck_count, rng=rng)
        assert len(shoe) == deck_count * 52

        counts = Counter((card.rank, card.suit) for card in shoe)
        assert len(counts) == 52
        assert set(counts.values()) == {deck_count}

    def test_all_cards_start_face_up(self, shoe):
        assert not any(card.face_down for card in shoe)

    def test_invalid_deck_count_raises(self):
        with pytest.raises(ValueError):
            build_shoe(0)

    def test_deal_takes_top_card(self, shoe):
        """Test dealing pops from the end of the sequence."""
        top = list(shoe)[-1]
        assert deal(shoe) == top
        assert len(shoe) == 311

    def test_size_strictly_decreases(self, shoe):
        sizes = []
        for _ in range(10):
            shoe.deal()
            sizes.append(len(shoe))
        assert sizes == list(range(311, 301, -1))

    def test_deal_empty_raises(self, rng):
        """Test that dealing from an empty shoe fails loudly."""
        shoe = build_shoe(1, rng=rng)
        for _ in range(52):
            deal(shoe)

        with pytest.raises(EmptyShoeError):
            deal(shoe)

    def test_stacked_shoe_order(self):
        """Test a stacked shoe deals its last card first."""
        cards = [Card(Rank.TWO, Suit.CLUBS), Card(Rank.ACE, Suit.SPADES)]
        shoe = Shoe.stacked(cards)
        assert shoe.deal() == Card(Rank.ACE, Suit.SPADES)
        assert shoe.deal() == Card(Rank.TWO, Suit.CLUBS)

    def test_needs_reshuffle(self):
        shoe = Shoe.stacked(ordered_deck()[:15])
        assert not shoe.needs_reshuffle(15)
        shoe.deal()
        assert shoe.needs_reshuffle(15)

    def test_tracking_properties(self, shoe):
        """Test dealt and remaining counters."""
        for _ in range(52):
            shoe.deal()
        assert shoe.cards_dealt == 52
        assert shoe.cards_remaining == 260
        assert abs(shoe.decks_remaining - 5.0) < 0.01
