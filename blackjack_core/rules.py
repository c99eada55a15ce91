"""Blackjack rule variations."""

from dataclasses import dataclass

from blackjack_core.config import GameConfig


@dataclass(frozen=True)
class RuleSet:
    """
    Blackjack table rules configuration.

    Defaults mirror the home table: six decks, dealer stands on all 17s,
    3:2 naturals, one split, insurance at 2:1.
    """

    # Shoe
    num_decks: int = 6
    reshuffle_threshold: int = 15  # Rebuild before a deal when fewer remain

    # Betting limits
    min_bet: int = 10
    max_bet: int | None = None

    # Dealer rules
    dealer_stands_on: int = 17
    dealer_hits_soft_17: bool = False
    peek_on_ten: bool = False  # Aces are always peeked after the insurance decision

    # Payouts
    blackjack_payout: float = 1.5
    insurance_allowed: bool = True
    insurance_payout: int = 2

    # Doubling and splitting
    double_allowed: bool = True
    double_after_split: bool = True
    max_hands: int = 2  # No re-splitting

    def __post_init__(self) -> None:
        """Validate rule combinations."""
        if self.num_decks < 1 or self.num_decks > 8:
            raise ValueError("num_decks must be between 1 and 8")
        if self.reshuffle_threshold < 0:
            raise ValueError("reshuffle_threshold cannot be negative")
        if self.reshuffle_threshold >= self.num_decks * 52:
            raise ValueError("reshuffle_threshold must be smaller than the shoe")
        if self.min_bet < 1:
            raise ValueError("min_bet must be at least 1")
        if self.max_bet is not None and self.max_bet < self.min_bet:
            raise ValueError("max_bet cannot be below min_bet")
        if not 12 <= self.dealer_stands_on <= 21:
            raise ValueError("dealer_stands_on must be between 12 and 21")
        if self.blackjack_payout < 1.0:
            raise ValueError("blackjack_payout must be at least 1.0")
        if self.insurance_payout < 1:
            raise ValueError("insurance_payout must be at least 1")
        if self.max_hands not in (1, 2):
            raise ValueError("max_hands must be 1 (no splits) or 2")

    @property
    def splits_allowed(self) -> bool:
        return self.max_hands > 1

    @classmethod
    def standard(cls) -> "RuleSet":
        """The default six-deck table."""
        return cls()

    @classmethod
    def vegas_strip(cls) -> "RuleSet":
        """Vegas Strip style rules: the dealer peeks under tens as well."""
        return cls(
            num_decks=6,
            dealer_hits_soft_17=False,
            blackjack_payout=1.5,
            peek_on_ten=True,
        )

    @classmethod
    def from_config(cls, game_config: GameConfig) -> "RuleSet":
        """Build rules from environment-driven configuration."""
        return cls(
            num_decks=game_config.num_decks,
            reshuffle_threshold=game_config.reshuffle_threshold,
            min_bet=game_config.min_bet,
            max_bet=game_config.max_bet,
            dealer_stands_on=game_config.dealer_stands_on,
            blackjack_payout=game_config.blackjack_payout,
            insurance_allowed=game_config.insurance_allowed,
            double_allowed=game_config.double_allowed,
        )
