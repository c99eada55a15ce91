"""Round settlement: per-hand outcomes, payouts, and insurance."""

from dataclasses import dataclass, field
from decimal import ROUND_FLOOR, Decimal
from enum import Enum
from typing import Sequence

from blackjack_core.cards import Card
from blackjack_core.hand import BLACKJACK, full_value, is_blackjack


class Outcome(Enum):
    """Result of one player hand against the dealer."""

    WIN = "win"
    LOSE = "lose"
    PUSH = "push"
    BLACKJACK = "blackjack"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class HandResult:
    """Settlement of a single player hand."""

    outcome: Outcome
    delta: int  # Net profit (+) or loss (-)
    bet: int

    @property
    def credit(self) -> int:
        """Gross amount returned when the bet was deducted at bet time."""
        return self.bet + self.delta


@dataclass(frozen=True)
class InsuranceResult:
    """Settlement of the insurance side bet."""

    stake: int
    delta: int

    @property
    def won(self) -> bool:
        return self.delta > 0

    @property
    def credit(self) -> int:
        return self.stake + self.delta if self.won else 0


@dataclass(frozen=True)
class RoundResult:
    """Everything settled at the end of a round."""

    hands: list[HandResult] = field(default_factory=list)
    insurance: InsuranceResult | None = None

    @property
    def net(self) -> int:
        """Net change to the balance across all hands and insurance."""
        total = sum(r.delta for r in self.hands)
        if self.insurance is not None:
            total += self.insurance.delta
        return total

    @property
    def credit(self) -> int:
        """Gross amount to return to a balance that had stakes deducted up front."""
        total = sum(r.credit for r in self.hands)
        if self.insurance is not None:
            total += self.insurance.credit
        return total


def blackjack_profit(bet: int, payout: float = 1.5) -> int:
    """Profit on a natural, truncated toward zero: floor(bet * payout)."""
    profit = Decimal(bet) * Decimal(str(payout))
    return int(profit.to_integral_value(rounding=ROUND_FLOOR))


def resolve_hand(
    player_cards: Sequence[Card],
    dealer_cards: Sequence[Card],
    bet: int,
    *,
    natural_eligible: bool = True,
    blackjack_payout: float = 1.5,
) -> HandResult:
    """
    Settle one player hand against the dealer hand.

    Rules are applied in priority order: player bust, naturals, dealer bust,
    then a straight comparison of totals. All cards count, face down or not.
    """
    player_total = full_value(player_cards)
    dealer_total = full_value(dealer_cards)
    player_bj = natural_eligible and is_blackjack(player_cards)
    dealer_bj = is_blackjack(dealer_cards)

    if player_total > BLACKJACK:
        return HandResult(Outcome.LOSE, -bet, bet)
    if player_bj and dealer_bj:
        return HandResult(Outcome.PUSH, 0, bet)
    if player_bj:
        return HandResult(Outcome.BLACKJACK, blackjack_profit(bet, blackjack_payout), bet)
    if dealer_bj:
        return HandResult(Outcome.LOSE, -bet, bet)
    if dealer_total > BLACKJACK:
        return HandResult(Outcome.WIN, bet, bet)
    if player_total > dealer_total:
        return HandResult(Outcome.WIN, bet, bet)
    if player_total < dealer_total:
        return HandResult(Outcome.LOSE, -bet, bet)
    return HandResult(Outcome.PUSH, 0, bet)


def resolve_hands(
    dealer_cards: Sequence[Card],
    player_hands: Sequence[Sequence[Card]],
    bets: Sequence[int],
    *,
    blackjack_payout: float = 1.5,
) -> list[HandResult]:
    """
    Settle every player hand independently against the single dealer hand.

    A natural only earns the premium when the player holds one hand;
    split hands forfeit it.
    """
    if len(player_hands) != len(bets):
        raise ValueError(
            f"Got {len(player_hands)} hands but {len(bets)} bets"
        )
    if any(bet < 0 for bet in bets):
        raise ValueError("Bets cannot be negative")

    natural_eligible = len(player_hands) == 1
    return [
        resolve_hand(
            cards,
            dealer_cards,
            bet,
            natural_eligible=natural_eligible,
            blackjack_payout=blackjack_payout,
        )
        for cards, bet in zip(player_hands, bets)
    ]


def insurance_stake(bet: int) -> int:
    """Maximum insurance stake: half the main bet, rounded down."""
    return bet // 2


def resolve_insurance(
    dealer_cards: Sequence[Card],
    stake: int,
    payout: int = 2,
) -> InsuranceResult:
    """Insurance pays ``payout``:1 when the dealer holds a natural, else the stake is lost."""
    if stake < 0:
        raise ValueError("Insurance stake cannot be negative")
    if is_blackjack(dealer_cards):
        return InsuranceResult(stake, stake * payout)
    return InsuranceResult(stake, -stake)
