from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Protocol, Tuple

from .cards import Card
from .hand_value import HandValue


class Street(IntEnum):
    PRE_FLOP = 0
    FLOP = 1
    TURN = 2
    RIVER = 3
    SHOWDOWN = 4


class PlayType(str, Enum):
    FOLD = "FOLD"
    CHECK = "CHECK"
    CALL = "CALL"
    RAISE = "RAISE"
    ALL_IN = "ALL_IN"


@dataclass
class TableConfig:
    max_players: int = 6
    starting_stack: int = 1_000
    sb: int = 5
    bb: int = 10
    seed: Optional[int] = None


@dataclass(frozen=True)
class PlayerAction:
    play: PlayType
    # For RAISE: the total this player will have committed this street.
    amount: Optional[int] = None


@dataclass(frozen=True)
class PlayerSummary:
    chips: int
    bet_chips: int


@dataclass(frozen=True)
class ActRequest:
    """Read-only table snapshot handed to a strategy on its turn."""

    hole_cards: Tuple[Card, ...]
    community_cards: Tuple[Card, ...]
    street: Street
    to_call: int
    min_raise: int
    any_bet_this_street: bool
    pot_size: int
    your_current_bet: int
    your_hand_bet: int
    your_stack: int
    num_active_players: int
    your_seat_index: int
    dealer_index: int
    small_blind: int
    big_blind: int
    other_active_players: Mapping[str, PlayerSummary] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "hole_cards", tuple(self.hole_cards))
        object.__setattr__(self, "community_cards", tuple(self.community_cards))
        object.__setattr__(self, "other_active_players", MappingProxyType(dict(self.other_active_players)))

    def to_payload(self) -> Dict[str, object]:
        return {
            "hole": [card.label for card in self.hole_cards],
            "community": [card.label for card in self.community_cards],
            "street": self.street.name,
            "to_call": self.to_call,
            "min_raise": self.min_raise,
            "any_bet_this_street": self.any_bet_this_street,
            "pot": self.pot_size,
            "your_current_bet": self.your_current_bet,
            "your_hand_bet": self.your_hand_bet,
            "stack": self.your_stack,
            "active_players": self.num_active_players,
            "seat": self.your_seat_index,
            "dealer": self.dealer_index,
            "sb": self.small_blind,
            "bb": self.big_blind,
            "opponents": {
                player_id: {"chips": summary.chips, "bet": summary.bet_chips}
                for player_id, summary in self.other_active_players.items()
            },
        }


class PlayerStrategy(Protocol):
    def act(self, request: ActRequest) -> PlayerAction:
        ...


class HoleCards:
    CAPACITY = 2

    def __init__(self) -> None:
        self._cards: List[Card] = []

    @property
    def cards(self) -> Tuple[Card, ...]:
        return tuple(self._cards)

    def add(self, card: Card) -> None:
        if len(self._cards) >= self.CAPACITY:
            raise ValueError("Hand is already full")
        self._cards.append(card)

    def reset(self) -> None:
        self._cards.clear()

    def __len__(self) -> int:
        return len(self._cards)


class CommunityCards(HoleCards):
    CAPACITY = 5


@dataclass(eq=False)
class Player:
    name: str
    chips: int
    strategy: Optional[PlayerStrategy] = None
    position: int = 0
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    hand: HoleCards = field(default_factory=HoleCards)

    def bet(self, amount: int) -> int:
        bet = min(amount, self.chips)
        self.chips -= bet
        return bet

    def add_winnings(self, amount: int) -> None:
        self.chips += amount

    def act(self, request: ActRequest) -> PlayerAction:
        if self.strategy is None:
            raise RuntimeError(f"Player {self.name} has no strategy")
        return self.strategy.act(request)


@dataclass(frozen=True)
class HandResult:
    board: Tuple[Card, ...]
    showdown_hands: Tuple[Tuple[Player, HandValue], ...]
    winners: Tuple[Player, ...]
    awards: Mapping[str, int] = field(default_factory=dict)
    hand_id: str = ""

    def to_payload(self) -> Dict[str, object]:
        return {
            "hand_id": self.hand_id,
            "board": [card.label for card in self.board],
            "showdown": [
                {"player": player.id, "name": player.name, "rank": value.describe(), "cards": value.labels()}
                for player, value in self.showdown_hands
            ],
            "winners": [player.id for player in self.winners],
            "awards": dict(self.awards),
        }
