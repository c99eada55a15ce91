"""Configuration management with environment variable support."""

import os
from dataclasses import dataclass, field


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _env_bool(name: str, default: bool) -> bool:
    return os.getenv(name, str(default)).lower() == "true"


def _env_optional_int(name: str) -> int | None:
    """Read an optional integer; unset or empty means no value."""
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else None


@dataclass(frozen=True)
class GameConfig:
    """Default table configuration."""

    num_decks: int = field(default_factory=lambda: _env_int("BLACKJACK_NUM_DECKS", 6))
    min_bet: int = field(default_factory=lambda: _env_int("BLACKJACK_MIN_BET", 10))
    max_bet: int | None = field(default_factory=lambda: _env_optional_int("BLACKJACK_MAX_BET"))
    dealer_stands_on: int = field(
        default_factory=lambda: _env_int("BLACKJACK_DEALER_STANDS_ON", 17)
    )
    reshuffle_threshold: int = field(
        default_factory=lambda: _env_int("BLACKJACK_RESHUFFLE_THRESHOLD", 15)
    )
    blackjack_payout: float = field(
        default_factory=lambda: float(os.getenv("BLACKJACK_PAYOUT", "1.5"))
    )
    insurance_allowed: bool = field(
        default_factory=lambda: _env_bool("BLACKJACK_INSURANCE_ENABLED", True)
    )
    double_allowed: bool = field(
        default_factory=lambda: _env_bool("BLACKJACK_DOUBLE_ENABLED", True)
    )


@dataclass(frozen=True)
class AppConfig:
    """Application configuration."""

    starting_balance: int = field(
        default_factory=lambda: _env_int("BLACKJACK_STARTING_BALANCE", 1000)
    )
    game: GameConfig = field(default_factory=GameConfig)


# Global configuration instance
config = AppConfig()
