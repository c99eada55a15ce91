"""Blackjack round engine with state machine."""

import logging
from dataclasses import dataclass, field
from random import Random
from typing import Callable

from transitions import Machine

from blackjack_core.cards import Card, Shoe, build_shoe
from blackjack_core.config import config
from blackjack_core.dealer import run_dealer
from blackjack_core.exceptions import InsufficientFundsError, InvalidActionError
from blackjack_core.game.events import EventEmitter, EventType, GameEvent
from blackjack_core.game.state import Phase
from blackjack_core.hand import BLACKJACK, Hand, is_blackjack, score_label
from blackjack_core.resolver import (
    RoundResult,
    insurance_stake,
    resolve_hands,
    resolve_insurance,
)
from blackjack_core.rules import RuleSet

logger = logging.getLogger(__name__)


@dataclass
class Round:
    """Everything on the table for one betting cycle."""

    shoe: Shoe
    dealer_hand: Hand = field(default_factory=Hand)
    player_hands: list[Hand] = field(default_factory=list)
    active_hand_index: int = 0
    split_aces: bool = False
    insurance_stake: int = 0
    insurance_decided: bool = False
    result: RoundResult | None = None

    @property
    def active_hand(self) -> Hand | None:
        """Get the hand currently being played, if any."""
        if 0 <= self.active_hand_index < len(self.player_hands):
            return self.player_hands[self.active_hand_index]
        return None

    @property
    def bets(self) -> list[int]:
        return [hand.bet for hand in self.player_hands]

    @property
    def has_split(self) -> bool:
        return len(self.player_hands) > 1

    @property
    def dealer_upcard(self) -> Card | None:
        if not self.dealer_hand.cards:
            return None
        return self.dealer_hand.cards[0]


@dataclass(frozen=True)
class TableSnapshot:
    """Read-only copy of the table for rendering; nothing here aliases engine state."""

    phase: Phase
    balance: int
    current_bet: int
    dealer_cards: tuple[Card, ...]
    dealer_label: str
    player_hands: tuple[tuple[Card, ...], ...]
    player_labels: tuple[str, ...]
    bets: tuple[int, ...]
    active_hand_index: int
    insurance_stake: int
    cards_remaining: int
    can_hit: bool
    can_stand: bool
    can_double: bool
    can_split: bool
    can_insure: bool
    last_result: RoundResult | None


class BlackjackTable:
    """
    Single-seat blackjack table driven by a state machine.

    Bets are deducted from ``balance`` when they are placed on the felt
    (deal, double, split, insurance) and credited back at resolution, so
    the net effect per round equals ``RoundResult.net``. Communication with
    a UI happens through events and return values only.
    """

    STATES = [p.name.lower() for p in Phase]

    TRANSITIONS = [
        {"trigger": "open_betting", "source": "idle", "dest": "betting"},
        {"trigger": "withdraw_bet", "source": "betting", "dest": "idle"},
        {"trigger": "begin_deal", "source": "betting", "dest": "dealing"},
        {"trigger": "offer_insurance", "source": "dealing", "dest": "insurance"},
        {"trigger": "begin_player_turn", "source": ["dealing", "insurance"], "dest": "player_turn"},
        {"trigger": "begin_split_turn", "source": ["player_turn", "split_turn"], "dest": "split_turn"},
        {"trigger": "begin_dealer_turn", "source": ["player_turn", "split_turn"], "dest": "dealer_turn"},
        {"trigger": "settle", "source": ["dealing", "insurance", "dealer_turn"], "dest": "resolution"},
        {"trigger": "finish_round", "source": "resolution", "dest": "idle"},
    ]

    def __init__(
        self,
        rules: RuleSet | None = None,
        balance: int | None = None,
        rng: Random | None = None,
        shoe: Shoe | None = None,
    ) -> None:
        """
        Initialize a table.

        Args:
            rules: Table rules (defaults come from environment configuration)
            balance: Starting balance in whole units
            rng: Random source for shuffles; seed it for reproducible play
            shoe: Pre-built shoe, e.g. a stacked one; a fresh shoe otherwise
        """
        self.rules = rules or RuleSet.from_config(config.game)
        self.balance = balance if balance is not None else config.starting_balance
        self._rng = rng
        self.shoe = shoe if shoe is not None else build_shoe(self.rules.num_decks, rng)

        self.current_bet = 0
        self.round: Round | None = None
        self.last_result: RoundResult | None = None
        self.events = EventEmitter()

        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="idle",
            auto_transitions=False,
            model_attribute="_machine_state",
        )

    @property
    def phase(self) -> Phase:
        """Get current phase as enum."""
        return Phase[self._machine_state.upper()]  # type: ignore[attr-defined]

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to round events."""
        self.events.subscribe(handler, event_type)

    # Betting

    def place_bet(self, amount: int) -> Phase:
        """Put a bet on the table (replacing any pending bet)."""
        if self.phase not in (Phase.IDLE, Phase.BETTING):
            self._reject("Cannot bet in current phase")

        if amount < self.rules.min_bet:
            self._reject(f"Bet must be at least {self.rules.min_bet}", amount=amount)
        if self.rules.max_bet is not None and amount > self.rules.max_bet:
            self._reject(f"Bet cannot exceed {self.rules.max_bet}", amount=amount)
        if amount > self.balance:
            self._reject_funds(amount)

        self.current_bet = amount
        if self.phase == Phase.IDLE:
            self.open_betting()

        self.events.emit_new(EventType.BET_PLACED, amount=amount)
        return self.phase

    def clear_bet(self) -> Phase:
        """Take the pending bet back before the deal."""
        self._require_phase(Phase.BETTING, "clear bet")
        self.current_bet = 0
        self.withdraw_bet()
        self.events.emit_new(EventType.BET_CLEARED)
        return self.phase

    def deal(self) -> Phase:
        """Start the round: deduct the bet and deal two cards each."""
        self._require_phase(Phase.BETTING, "deal")
        bet = self.current_bet
        if bet > self.balance:
            self._reject_funds(bet)

        if self.shoe.needs_reshuffle(self.rules.reshuffle_threshold):
            self._reshuffle("threshold")

        self.begin_deal()
        self.balance -= bet
        self.round = Round(shoe=self.shoe, player_hands=[Hand(bet=bet)])

        player_hand = self.round.player_hands[0]
        dealer_hand = self.round.dealer_hand

        # Deal: player, dealer, player, dealer (hole card face down)
        self._deal_to(player_hand)
        self._deal_to(dealer_hand)
        self._deal_to(player_hand)
        self._deal_to(dealer_hand, face_down=True)

        self.events.emit_new(EventType.ROUND_STARTED, bet=bet, balance=self.balance)

        if player_hand.is_blackjack:
            self.events.emit_new(EventType.PLAYER_BLACKJACK)
            self._reveal_dealer()
            return self._resolve_round()

        upcard = self.round.dealer_upcard
        if upcard is not None and upcard.is_ace and self.rules.insurance_allowed:
            self.offer_insurance()
            self.events.emit_new(EventType.INSURANCE_OFFERED, stake=insurance_stake(bet))
            return self.phase

        if self._dealer_peeks() and is_blackjack(dealer_hand.cards):
            return self._dealer_natural()

        self.begin_player_turn()
        return self.phase

    # Insurance

    def take_insurance(self) -> Phase:
        """Stake half the bet that the dealer holds a natural."""
        self._require_phase(Phase.INSURANCE, "take insurance")
        round_ = self._current_round()
        stake = insurance_stake(round_.player_hands[0].bet)

        if stake < 1:
            self._reject("Bet too small to insure", stake=stake)
        if stake > self.balance:
            self._reject_funds(stake)

        self.balance -= stake
        round_.insurance_stake = stake
        round_.insurance_decided = True
        self.events.emit_new(EventType.INSURANCE_TAKEN, amount=stake)
        return self._complete_insurance_decision()

    def decline_insurance(self) -> Phase:
        """Play on without insurance."""
        self._require_phase(Phase.INSURANCE, "decline insurance")
        self._current_round().insurance_decided = True
        self.events.emit_new(EventType.INSURANCE_DECLINED)
        return self._complete_insurance_decision()

    def _complete_insurance_decision(self) -> Phase:
        """Dealer peeks under the Ace once the decision is made."""
        if is_blackjack(self._current_round().dealer_hand.cards):
            return self._dealer_natural()
        self.begin_player_turn()
        return self.phase

    # Player actions

    def hit(self) -> Phase:
        """Take one more card on the active hand."""
        hand = self._require_active_hand("hit")
        if hand.is_split_aces:
            self._reject("Split aces receive exactly one card")
        if hand.value >= BLACKJACK:
            self._reject("Hand already totals 21", hand_value=hand.value)

        card = self._deal_to(hand)
        index = self._current_round().active_hand_index
        self.events.emit_new(
            EventType.PLAYER_HIT,
            hand_index=index,
            card=str(card),
            hand_value=hand.value,
        )

        if hand.is_busted:
            self.events.emit_new(EventType.PLAYER_BUSTS, hand_index=index)
            return self._advance_to_next_hand()
        if hand.value == BLACKJACK:
            return self._advance_to_next_hand()
        return self.phase

    def stand(self) -> Phase:
        """Keep the active hand as it is."""
        hand = self._require_active_hand("stand")
        self.events.emit_new(
            EventType.PLAYER_STAND,
            hand_index=self._current_round().active_hand_index,
            hand_value=hand.value,
        )
        return self._advance_to_next_hand()

    def double(self) -> Phase:
        """Double the bet, take exactly one card, and stand."""
        hand = self._require_active_hand("double")
        if not self.rules.double_allowed:
            self._reject("Doubling down is disabled at this table")
        if not hand.can_double:
            self._reject("Can only double on the first two cards")
        if hand.is_split_hand and not self.rules.double_after_split:
            self._reject("Doubling after a split is not allowed")
        if hand.bet > self.balance:
            self._reject_funds(hand.bet)

        self.balance -= hand.bet
        hand.bet *= 2
        hand.is_doubled = True

        card = self._deal_to(hand)
        index = self._current_round().active_hand_index
        self.events.emit_new(
            EventType.PLAYER_DOUBLE,
            hand_index=index,
            card=str(card),
            hand_value=hand.value,
            new_bet=hand.bet,
        )
        if hand.is_busted:
            self.events.emit_new(EventType.PLAYER_BUSTS, hand_index=index)

        return self._advance_to_next_hand()

    def split(self) -> Phase:
        """Split a pair into two hands, each with its own bet."""
        round_ = self.round
        if self.phase != Phase.PLAYER_TURN or round_ is None:
            self._reject("Can only split on the first hand")
        if not self.rules.splits_allowed or round_.has_split:
            self._reject("Re-splitting is not allowed")

        hand = round_.player_hands[0]
        if not hand.is_pair:
            self._reject("Can only split two cards of the same rank")
        if hand.bet > self.balance:
            self._reject_funds(hand.bet)

        self.balance -= hand.bet
        aces = hand.cards[0].is_ace

        second_card = hand.cards.pop()
        new_hand = Hand(cards=[second_card], bet=hand.bet, is_split_hand=True)
        hand.is_split_hand = True
        round_.player_hands.append(new_hand)

        # One card to each hand, first hand first
        self._deal_to(hand)
        self._deal_to(new_hand)

        if aces:
            hand.is_split_aces = True
            new_hand.is_split_aces = True
            round_.split_aces = True

        round_.active_hand_index = 0
        self.begin_split_turn()
        self.events.emit_new(
            EventType.PLAYER_SPLIT,
            hand1_value=hand.value,
            hand2_value=new_hand.value,
            split_aces=aces,
        )

        if aces:
            # Split aces stand on their single card
            return self._advance_to_next_hand()
        return self.phase

    # Capability checks for the UI

    @property
    def can_hit(self) -> bool:
        hand = self._active_hand_in_turn()
        return hand is not None and not hand.is_split_aces and hand.value < BLACKJACK

    @property
    def can_stand(self) -> bool:
        return self._active_hand_in_turn() is not None

    @property
    def can_double(self) -> bool:
        hand = self._active_hand_in_turn()
        if hand is None or not hand.can_double or not self.rules.double_allowed:
            return False
        if hand.is_split_hand and not self.rules.double_after_split:
            return False
        return hand.bet <= self.balance

    @property
    def can_split(self) -> bool:
        if self.phase != Phase.PLAYER_TURN or self.round is None:
            return False
        if not self.rules.splits_allowed or self.round.has_split:
            return False
        hand = self.round.player_hands[0]
        return hand.is_pair and hand.bet <= self.balance

    @property
    def can_insure(self) -> bool:
        if self.phase != Phase.INSURANCE or self.round is None:
            return False
        stake = insurance_stake(self.round.player_hands[0].bet)
        return 1 <= stake <= self.balance

    @property
    def is_broke(self) -> bool:
        """Check if the balance can no longer cover the minimum bet."""
        return self.balance < self.rules.min_bet

    def snapshot(self) -> TableSnapshot:
        """Copy the visible table state for a renderer."""
        round_ = self.round
        dealer_cards = round_.dealer_hand.snapshot() if round_ else ()
        hands = tuple(h.snapshot() for h in round_.player_hands) if round_ else ()
        return TableSnapshot(
            phase=self.phase,
            balance=self.balance,
            current_bet=self.current_bet,
            dealer_cards=dealer_cards,
            dealer_label=score_label(dealer_cards),
            player_hands=hands,
            player_labels=tuple(score_label(cards) for cards in hands),
            bets=tuple(round_.bets) if round_ else (),
            active_hand_index=round_.active_hand_index if round_ else 0,
            insurance_stake=round_.insurance_stake if round_ else 0,
            cards_remaining=self.shoe.cards_remaining,
            can_hit=self.can_hit,
            can_stand=self.can_stand,
            can_double=self.can_double,
            can_split=self.can_split,
            can_insure=self.can_insure,
            last_result=self.last_result,
        )

    # Internal flow

    def _advance_to_next_hand(self) -> Phase:
        """Move to the next hand or, after the last one, the dealer turn."""
        round_ = self._current_round()
        round_.active_hand_index += 1

        if round_.active_hand_index >= len(round_.player_hands):
            return self._play_dealer()

        self.begin_split_turn()
        self.events.emit_new(EventType.HAND_ADVANCED, hand_index=round_.active_hand_index)
        if round_.player_hands[round_.active_hand_index].is_split_aces:
            return self._advance_to_next_hand()
        return self.phase

    def _play_dealer(self) -> Phase:
        """Dealer reveals and draws to the stand threshold."""
        self.begin_dealer_turn()
        dealer_hand = self._current_round().dealer_hand
        self._reveal_dealer()

        drawn = run_dealer(
            dealer_hand,
            self.shoe,
            self.rules.dealer_stands_on,
            hits_soft_17=self.rules.dealer_hits_soft_17,
            draw=self._draw,
        )
        for card in drawn:
            self.events.emit_new(EventType.DEALER_HITS, card=str(card))

        if dealer_hand.is_busted:
            self.events.emit_new(EventType.DEALER_BUSTS, hand_value=dealer_hand.value)
        else:
            self.events.emit_new(EventType.DEALER_STANDS, hand_value=dealer_hand.value)

        return self._resolve_round()

    def _dealer_peeks(self) -> bool:
        upcard = self._current_round().dealer_upcard
        if upcard is None:
            return False
        return upcard.is_ace or (upcard.is_ten_value and self.rules.peek_on_ten)

    def _dealer_natural(self) -> Phase:
        self.events.emit_new(EventType.DEALER_BLACKJACK)
        self._reveal_dealer()
        return self._resolve_round()

    def _reveal_dealer(self) -> None:
        dealer_hand = self._current_round().dealer_hand
        if not dealer_hand.has_hole_card:
            return
        dealer_hand.reveal()
        self.events.emit_new(
            EventType.DEALER_REVEALS,
            cards=[str(card) for card in dealer_hand.cards],
            hand_value=dealer_hand.value,
        )

    def _resolve_round(self) -> Phase:
        """Settle every hand plus insurance, credit the balance, and return to idle."""
        self.settle()
        round_ = self._current_round()

        hands = resolve_hands(
            round_.dealer_hand.cards,
            [hand.cards for hand in round_.player_hands],
            round_.bets,
            blackjack_payout=self.rules.blackjack_payout,
        )

        insurance = None
        if round_.insurance_stake:
            insurance = resolve_insurance(
                round_.dealer_hand.cards,
                round_.insurance_stake,
                self.rules.insurance_payout,
            )
            self.events.emit_new(
                EventType.INSURANCE_RESOLVED,
                stake=insurance.stake,
                delta=insurance.delta,
            )

        for index, result in enumerate(hands):
            self.events.emit_new(
                EventType.HAND_RESOLVED,
                hand_index=index,
                outcome=result.outcome.value,
                delta=result.delta,
                bet=result.bet,
            )

        result = RoundResult(hands=hands, insurance=insurance)
        self.balance += result.credit
        round_.result = result
        self.last_result = result

        logger.info("Round settled: net=%+d balance=%d", result.net, self.balance)
        self.events.emit_new(EventType.ROUND_ENDED, net=result.net, balance=self.balance)

        self.finish_round()
        return self.phase

    def _deal_to(self, hand: Hand, face_down: bool = False) -> Card:
        """Deal a card from the shoe onto a hand."""
        card = self._draw()
        if face_down:
            card = card.flipped(True)
        hand.add_card(card)

        round_ = self._current_round()
        is_dealer = hand is round_.dealer_hand
        self.events.emit_new(
            EventType.CARD_DEALT,
            card=str(card),
            seat="dealer" if is_dealer else "player",
            hand_index=None if is_dealer else self._hand_index(hand),
            hand_value=hand.value,
        )
        return card

    def _hand_index(self, hand: Hand) -> int:
        """Position of a player hand, by identity (equal hands may coexist)."""
        for index, candidate in enumerate(self._current_round().player_hands):
            if candidate is hand:
                return index
        raise ValueError("Hand does not belong to this round")

    def _draw(self) -> Card:
        """Deal from the shoe, rebuilding it first if it has run dry."""
        if not self.shoe.cards_remaining:
            self._reshuffle("exhausted")
        return self.shoe.deal()

    def _reshuffle(self, reason: str) -> None:
        self.shoe = build_shoe(self.rules.num_decks, self._rng)
        if self.round is not None:
            self.round.shoe = self.shoe
        logger.info("Shoe rebuilt (%s): %d cards", reason, len(self.shoe))
        self.events.emit_new(EventType.SHOE_SHUFFLED, reason=reason, cards=len(self.shoe))

    # Guards

    def _current_round(self) -> Round:
        if self.round is None:
            self._reject("No round in progress")
        return self.round

    def _active_hand_in_turn(self) -> Hand | None:
        if not self.phase.is_player_turn or self.round is None:
            return None
        return self.round.active_hand

    def _require_phase(self, phase: Phase, action: str) -> None:
        if self.phase != phase:
            self._reject(f"Cannot {action} during {self.phase}")

    def _require_active_hand(self, action: str) -> Hand:
        hand = self._active_hand_in_turn()
        if hand is None:
            self._reject(f"Cannot {action} during {self.phase}")
        return hand

    def _reject(self, message: str, **details) -> None:
        details.setdefault("phase", self.phase.name)
        logger.warning("Rejected action: %s", message)
        self.events.emit_new(EventType.INVALID_ACTION, message=message, **details)
        raise InvalidActionError(message, details)

    def _reject_funds(self, required: int) -> None:
        details = {"required": required, "available": self.balance}
        logger.warning("Insufficient funds: need %d, have %d", required, self.balance)
        self.events.emit_new(EventType.INSUFFICIENT_FUNDS, **details)
        raise InsufficientFundsError(
            f"Need {required} but only {self.balance} available", details
        )
