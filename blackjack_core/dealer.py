"""Dealer policy: fixed, non-interactive completion of the house hand."""

from typing import Callable, Sequence

from blackjack_core.cards import Card, Shoe
from blackjack_core.hand import Hand, hand_value, is_soft

DEALER_STANDS_ON = 17


def dealer_should_hit(
    cards: Sequence[Card],
    stand_threshold: int = DEALER_STANDS_ON,
    hits_soft_17: bool = False,
) -> bool:
    """Determine if the dealer draws another card."""
    value = hand_value(cards)
    if value < stand_threshold:
        return True
    return hits_soft_17 and value == 17 and is_soft(cards)


def run_dealer(
    dealer_hand: Hand,
    shoe: Shoe,
    stand_threshold: int = DEALER_STANDS_ON,
    *,
    hits_soft_17: bool = False,
    draw: Callable[[], Card] | None = None,
) -> list[Card]:
    """
    Reveal the dealer's cards and draw until the stand threshold is reached.

    Mutates ``dealer_hand`` in place and returns the cards drawn. ``draw``
    overrides where cards come from (defaults to ``shoe.deal``).
    """
    draw = draw or shoe.deal
    dealer_hand.reveal()

    drawn: list[Card] = []
    while dealer_should_hit(dealer_hand.cards, stand_threshold, hits_soft_17):
        card = draw()
        dealer_hand.add_card(card)
        drawn.append(card)
    return drawn
