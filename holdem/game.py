from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set, Tuple

from .cards import Card, Deck, cards_to_labels
from .evaluator import evaluate_hand
from .hand_value import HandValue
from .models import (
    ActRequest,
    CommunityCards,
    HandResult,
    Player,
    PlayerSummary,
    PlayType,
    Street,
    TableConfig,
)
from .pots import distribute_pots

LOGGER = logging.getLogger("holdem.engine")

# GameEngine keeps all table state in memory. No networking lives here, only
# poker rules, chip accounting and betting order.

Event = Dict[str, object]


class InvalidActionError(ValueError):
    """A move that breaks the betting protocol; nothing is applied."""


class InvalidRaiseError(InvalidActionError):
    def __init__(self, message: str, min_raise_to: int) -> None:
        super().__init__(message)
        self.min_raise_to = min_raise_to


@dataclass
class HandContext:
    # All mutable info about the current hand (board, ledgers, who still owes action).
    hand_id: str
    street: Street = Street.PRE_FLOP
    community: CommunityCards = field(default_factory=CommunityCards)
    bets_this_street: Dict[str, int] = field(default_factory=dict)
    bets_this_hand: Dict[str, int] = field(default_factory=dict)
    min_raise_increment: int = 0
    any_bet_this_street: bool = False
    pending: Set[str] = field(default_factory=set)
    pre_events: List[Event] = field(default_factory=list)


class GameEngine:
    """No-Limit Texas Hold'em engine for a single table."""

    def __init__(
        self,
        players: Sequence[Player],
        config: Optional[TableConfig] = None,
        *,
        rng: Optional[random.Random] = None,
        deck: Optional[Deck] = None,
    ) -> None:
        self.config = config or TableConfig()
        if len(players) > self.config.max_players:
            raise ValueError("Table is full")
        self.players: List[Player] = list(players)
        for idx, player in enumerate(self.players):
            player.position = idx
        self.small_blind = self.config.sb
        self.big_blind = self.config.bb
        self.rng = rng if rng is not None else random.Random(self.config.seed)
        self.deck = deck if deck is not None else Deck(self.rng)
        # The first hand rotates these forward, so seat 0 and 1 usually post first.
        self.small_blind_position = max(len(self.players) - 1, 0)
        self.big_blind_position = 0
        self.active_seats: List[int] = list(range(len(self.players)))
        self.current_turn: Optional[int] = None
        self.hand: Optional[HandContext] = None
        self.hand_counter = 0
        self.last_result: Optional[HandResult] = None

    # Read-only helpers -----------------------------------------------

    @property
    def street(self) -> Optional[Street]:
        return self.hand.street if self.hand else None

    @property
    def community(self) -> Tuple[Card, ...]:
        return self.hand.community.cards if self.hand else ()

    @property
    def pot(self) -> int:
        # Sum of everything committed this hand, folded players included.
        if not self.hand:
            return 0
        return sum(self.hand.bets_this_hand.values())

    @property
    def current_bet(self) -> int:
        if not self.hand:
            return 0
        return max(self.hand.bets_this_street.values(), default=0)

    @property
    def min_raise_to(self) -> int:
        if not self.hand:
            return self.big_blind
        return self.current_bet + self.hand.min_raise_increment

    @property
    def dealer_index(self) -> int:
        return (self.small_blind_position - 1) % max(len(self.players), 1)

    def to_call(self, player_id: str) -> int:
        if not self.hand:
            return 0
        return max(self.current_bet - self.hand.bets_this_street.get(player_id, 0), 0)

    def player_by_id(self, player_id: str) -> Player:
        for player in self.players:
            if player.id == player_id:
                return player
        raise InvalidActionError(f"Unknown player {player_id}")

    def stacks(self) -> Dict[str, int]:
        return {player.id: player.chips for player in self.players}

    def is_hand_complete(self) -> bool:
        return bool(self.hand and self.hand.street == Street.SHOWDOWN)

    def is_match_over(self) -> bool:
        return sum(1 for player in self.players if player.chips > 0) <= 1

    def consume_pre_events(self) -> List[Event]:
        if not self.hand:
            return []
        events = list(self.hand.pre_events)
        self.hand.pre_events.clear()
        return events

    # Hand lifecycle --------------------------------------------------

    def next_hand(self) -> Tuple[List[str], Optional[int]]:
        """Start a new hand; returns (removed player ids, seat to act first)."""
        funded = [player for player in self.players if player.chips > 0]
        if len(funded) < 2:
            raise RuntimeError("Not enough players with chips to start a hand")

        losers = [player.id for player in self.players if player.chips == 0]
        small_blind_player = self._next_funded_after(self.small_blind_position)

        self.players = funded
        for idx, player in enumerate(self.players):
            player.position = idx
            player.hand.reset()
        self.active_seats = list(range(len(self.players)))
        self.small_blind_position = self.players.index(small_blind_player)
        self.big_blind_position = (self.small_blind_position + 1) % len(self.players)
        if losers:
            LOGGER.info("Removed %d busted player(s): %s", len(losers), ", ".join(losers))

        self.hand_counter += 1
        ctx = HandContext(
            hand_id=f"H-{self.hand_counter:05d}",
            bets_this_street={player.id: 0 for player in self.players},
            bets_this_hand={player.id: 0 for player in self.players},
            min_raise_increment=self.big_blind,
        )
        self.hand = ctx
        self.last_result = None
        self.current_turn = None

        self.deck.reset()
        self._deal_hole_cards()
        self._post_blinds(ctx)

        # Blinds count as a bet so the big blind keeps its option to raise.
        ctx.any_bet_this_street = True
        if not self._open_betting(ctx):
            ctx.pre_events.extend(self._advance_street(ctx))
        return losers, self.current_turn

    def play_hand(self) -> HandResult:
        """Deal a new hand and ask each player's strategy until it finishes."""
        self.next_hand()
        while not self.is_hand_complete():
            if self.current_turn is None:
                raise RuntimeError("No player left to act")
            player = self.players[self.current_turn]
            action = player.act(self.build_act_request(player))
            self.apply_move(player.id, action.play, action.amount)
        assert self.last_result is not None
        return self.last_result

    def _next_funded_after(self, seat: int) -> Player:
        count = len(self.players)
        for step in range(1, count + 1):
            candidate = self.players[(seat + step) % count]
            if candidate.chips > 0:
                return candidate
        raise RuntimeError("No funded player found")

    def _deal_hole_cards(self) -> None:
        count = len(self.players)
        ordered = [(self.small_blind_position + step) % count for step in range(count)]
        for _ in range(2):
            for seat in ordered:
                self.players[seat].hand.add(self.deck.draw())

    def _post_blinds(self, ctx: HandContext) -> None:
        sb_player = self.players[self.small_blind_position]
        bb_player = self.players[self.big_blind_position]
        # Short stacks post what they have; that is an all-in, not an error.
        sb_posted = self._commit(sb_player, self.small_blind)
        bb_posted = self._commit(bb_player, self.big_blind)
        ctx.pre_events.append(
            {
                "ev": "POST_BLINDS",
                "sb_seat": self.small_blind_position,
                "bb_seat": self.big_blind_position,
                "sb": sb_posted,
                "bb": bb_posted,
            }
        )

    def _commit(self, player: Player, amount: int) -> int:
        assert self.hand is not None
        bet = player.bet(amount)
        self.hand.bets_this_street[player.id] += bet
        self.hand.bets_this_hand[player.id] += bet
        return bet

    def _open_betting(self, ctx: HandContext) -> bool:
        """Pick who must act this street. Returns False when nobody has to."""
        active = [self.players[seat] for seat in self.active_seats]
        funded = [player.id for player in active if player.chips > 0]
        if len(funded) < 2:
            # A lone stack only acts if it still owes chips to an all-in.
            funded = [player_id for player_id in funded if self.to_call(player_id) > 0]
        ctx.pending = set(funded)
        if not ctx.pending:
            self.current_turn = None
            return False

        if ctx.street == Street.PRE_FLOP:
            start = self.big_blind_position + 1
        else:
            start = self.small_blind_position
        self.current_turn = self._next_pending_from(start)
        return True

    def _next_pending_from(self, start: int) -> Optional[int]:
        assert self.hand is not None
        count = len(self.players)
        for step in range(count):
            seat = (start + step) % count
            if seat in self.active_seats and self.players[seat].id in self.hand.pending:
                return seat
        return None

    # Dealing ---------------------------------------------------------

    def deal_flop(self) -> List[Card]:
        return self._deal_board(3)

    def deal_turn(self) -> List[Card]:
        return self._deal_board(1)

    def deal_river(self) -> List[Card]:
        return self._deal_board(1)

    def _deal_board(self, count: int) -> List[Card]:
        if not self.hand:
            raise RuntimeError("Hand not in progress")
        self.deck.burn()
        cards = [self.deck.draw() for _ in range(count)]
        for card in cards:
            self.hand.community.add(card)
        return cards

    def _advance_street(self, ctx: HandContext) -> List[Event]:
        events: List[Event] = []
        while True:
            ctx.street = Street(ctx.street + 1)
            if ctx.street == Street.SHOWDOWN:
                events.extend(self._resolve_showdown(ctx))
                return events

            if ctx.street == Street.FLOP:
                cards = self.deal_flop()
            elif ctx.street == Street.TURN:
                cards = self.deal_turn()
            else:
                cards = self.deal_river()
            events.append({"ev": ctx.street.name, "cards": cards_to_labels(cards)})
            LOGGER.debug("%s %s: %s", ctx.hand_id, ctx.street.name, " ".join(card.label for card in cards))

            for player_id in ctx.bets_this_street:
                ctx.bets_this_street[player_id] = 0
            ctx.min_raise_increment = self.big_blind
            ctx.any_bet_this_street = False

            if self._open_betting(ctx):
                return events
            # Nobody left who can bet: keep dealing until showdown.

    # Action handling -------------------------------------------------

    def build_act_request(self, player: Player) -> ActRequest:
        ctx = self._require_hand()
        others = {
            self.players[seat].id: PlayerSummary(
                chips=self.players[seat].chips,
                bet_chips=ctx.bets_this_street[self.players[seat].id],
            )
            for seat in self.active_seats
            if self.players[seat].id != player.id
        }
        return ActRequest(
            hole_cards=player.hand.cards,
            community_cards=ctx.community.cards,
            street=ctx.street,
            to_call=self.to_call(player.id),
            min_raise=self.min_raise_to,
            any_bet_this_street=ctx.any_bet_this_street,
            pot_size=self.pot,
            your_current_bet=ctx.bets_this_street.get(player.id, 0),
            your_hand_bet=ctx.bets_this_hand.get(player.id, 0),
            your_stack=player.chips,
            num_active_players=len(self.active_seats),
            your_seat_index=player.position,
            dealer_index=self.dealer_index,
            small_blind=self.small_blind,
            big_blind=self.big_blind,
            other_active_players=others,
        )

    def apply_move(self, player_id: str, play: PlayType, amount: Optional[int] = None) -> List[Event]:
        ctx = self._require_hand()
        if ctx.street == Street.SHOWDOWN:
            raise InvalidActionError("Hand is already complete")
        try:
            play = PlayType(play)
        except ValueError:
            raise InvalidActionError(f"Unsupported action {play!r}") from None
        if amount is not None and amount < 0:
            raise InvalidActionError("Move amount cannot be negative")

        player = self.player_by_id(player_id)
        seat = player.position
        if seat not in self.active_seats:
            raise InvalidActionError(f"{player.name} is not active in this hand")
        if seat != self.current_turn:
            raise InvalidActionError(f"Not {player.name}'s turn")

        owed = self.to_call(player_id)
        street_bet = ctx.bets_this_street[player_id]
        coerced: Optional[PlayType] = None

        # Normalize to the move that will actually be applied; validate before
        # any chips change hands.
        if play == PlayType.CHECK and owed > 0:
            LOGGER.warning("%s cannot check facing %s; treating it as a call", player.name, owed)
            coerced, play = play, PlayType.CALL
        if play == PlayType.CALL and owed <= 0:
            play = PlayType.CHECK
        elif play == PlayType.CALL and owed >= player.chips:
            play = PlayType.ALL_IN
        if play == PlayType.RAISE:
            if amount is None:
                raise InvalidActionError("Raise requires amount")
            if amount >= player.chips + street_bet:
                play = PlayType.ALL_IN
            elif amount < self.min_raise_to:
                raise InvalidRaiseError(
                    f"Raise must be at least {self.min_raise_to} (call {self.current_bet} + "
                    f"min raise {ctx.min_raise_increment}); got {amount}",
                    self.min_raise_to,
                )

        event: Event = {"ev": play.value, "seat": seat, "player": player_id}
        if coerced is not None:
            event["coerced"] = coerced.value

        if play == PlayType.FOLD:
            self.active_seats.remove(seat)
            ctx.pending.discard(player_id)
        elif play == PlayType.CHECK:
            ctx.pending.discard(player_id)
        elif play == PlayType.CALL:
            event["amount"] = self._commit(player, owed)
            ctx.any_bet_this_street = True
            ctx.pending.discard(player_id)
        elif play == PlayType.RAISE:
            assert amount is not None
            previous_bet = self.current_bet
            event["amount"] = self._commit(player, amount - street_bet)
            ctx.min_raise_increment = amount - previous_bet
            ctx.any_bet_this_street = True
            self._reopen_action(ctx, player_id)
        else:
            previous_bet = self.current_bet
            event["amount"] = self._commit(player, player.chips)
            total = ctx.bets_this_street[player_id]
            ctx.any_bet_this_street = True
            if total > previous_bet:
                ctx.min_raise_increment = total - previous_bet
                self._reopen_action(ctx, player_id)
            else:
                # Short all-in: nobody else gets to act again.
                ctx.pending.discard(player_id)

        if player.chips == 0:
            ctx.pending.discard(player_id)

        LOGGER.debug("%s %s: %s", ctx.hand_id, player.name, event)
        events = [event]
        events.extend(self._advance_after_action(ctx, seat))
        return events

    def _reopen_action(self, ctx: HandContext, raiser_id: str) -> None:
        ctx.pending = {
            self.players[seat].id
            for seat in self.active_seats
            if self.players[seat].id != raiser_id and self.players[seat].chips > 0
        }

    def _advance_after_action(self, ctx: HandContext, seat: int) -> List[Event]:
        if len(self.active_seats) == 1:
            return self._resolve_showdown(ctx)
        if not ctx.pending:
            return self._advance_street(ctx)
        self.current_turn = self._next_pending_from(seat + 1)
        return []

    def _require_hand(self) -> HandContext:
        if not self.hand:
            raise RuntimeError("Hand not in progress")
        return self.hand

    # Showdown --------------------------------------------------------

    def _resolve_showdown(self, ctx: HandContext) -> List[Event]:
        events: List[Event] = []
        ctx.street = Street.SHOWDOWN
        ctx.pending.clear()
        self.current_turn = None

        contributions = dict(ctx.bets_this_hand)
        pot = sum(contributions.values())
        board = ctx.community.cards
        remaining = [self.players[seat] for seat in self.active_seats]

        if len(remaining) == 1:
            # Everyone else folded: no cards are shown.
            winner = remaining[0]
            showdown: Tuple[Tuple[Player, HandValue], ...] = ()
            winners: Tuple[Player, ...] = (winner,)
            awards = {winner.id: pot}
        else:
            showdown = tuple((player, evaluate_hand(player.hand.cards, board)) for player in remaining)
            for player, value in showdown:
                events.append(
                    {
                        "ev": "SHOWDOWN",
                        "seat": player.position,
                        "player": player.id,
                        "hand": cards_to_labels(player.hand.cards),
                        "rank": value.describe(),
                        "cards": value.labels(),
                    }
                )
            best = max(value for _, value in showdown)
            winners = tuple(player for player, value in showdown if value == best)
            awards = distribute_pots(contributions, [(player.id, value) for player, value in showdown])

        for player in remaining:
            won = awards.get(player.id, 0)
            if won:
                player.add_winnings(won)
                events.append({"ev": "POT_AWARD", "seat": player.position, "player": player.id, "amount": won})

        for player_id in contributions:
            ctx.bets_this_street[player_id] = 0
            ctx.bets_this_hand[player_id] = 0

        for player in self.players:
            if player.chips == 0:
                events.append({"ev": "ELIMINATED", "seat": player.position, "player": player.id})

        self.last_result = HandResult(
            board=board,
            showdown_hands=showdown,
            winners=winners,
            awards={player_id: amount for player_id, amount in awards.items() if amount},
            hand_id=ctx.hand_id,
        )
        LOGGER.info(
            "Hand %s: pot %s won by %s",
            ctx.hand_id,
            pot,
            ", ".join(player.name for player in winners),
        )
        return events

    # Snapshot helpers ------------------------------------------------

    def table_state(self) -> Dict[str, object]:
        ctx = self.hand
        return {
            "hand_id": ctx.hand_id if ctx else None,
            "street": ctx.street.name if ctx else None,
            "pot": self.pot,
            "current_bet": self.current_bet,
            "community": cards_to_labels(self.community),
            "next_actor": self.current_turn,
            "sb_seat": self.small_blind_position,
            "bb_seat": self.big_blind_position,
            "players": [
                {
                    "seat": player.position,
                    "id": player.id,
                    "name": player.name,
                    "chips": player.chips,
                    "committed": ctx.bets_this_street.get(player.id, 0) if ctx else 0,
                    "active": player.position in self.active_seats,
                }
                for player in self.players
            ],
        }
