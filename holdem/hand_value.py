from __future__ import annotations

import functools
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Sequence, Tuple

from .cards import ACE, Card


class HandRank(IntEnum):
    HIGH_CARD = 0
    PAIR = 1
    TWO_PAIR = 2
    THREE_OF_A_KIND = 3
    STRAIGHT = 4
    FLUSH = 5
    FULL_HOUSE = 6
    FOUR_OF_A_KIND = 7
    STRAIGHT_FLUSH = 8
    ROYAL_FLUSH = 9


# Number of rank-defining cards for each category; kickers fill up to five.
CARDS_PER_RANK: Dict[HandRank, int] = {
    HandRank.HIGH_CARD: 1,
    HandRank.PAIR: 2,
    HandRank.TWO_PAIR: 4,
    HandRank.THREE_OF_A_KIND: 3,
    HandRank.STRAIGHT: 5,
    HandRank.FLUSH: 5,
    HandRank.FULL_HOUSE: 5,
    HandRank.FOUR_OF_A_KIND: 4,
    HandRank.STRAIGHT_FLUSH: 5,
    HandRank.ROYAL_FLUSH: 5,
}

WHEEL_VALUES = (5, 4, 3, 2, ACE)


def _desc_value_asc_suit(card: Card) -> Tuple[int, int]:
    return (-card.value, card.suit)


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class HandValue:
    """Best five-card hand: the rank-defining cards plus ordered kickers.

    Instances compare on ``(rank, cards, kickers)`` element by element, so two
    values are equal only when :meth:`sort` has produced the same layout.
    """

    rank: HandRank
    cards: Tuple[Card, ...]
    kickers: Tuple[Card, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "rank", HandRank(self.rank))
        object.__setattr__(self, "cards", tuple(self.cards))
        object.__setattr__(self, "kickers", tuple(self.kickers))
        if len(self.cards) + len(self.kickers) != 5:
            raise ValueError(
                f"A hand value needs exactly 5 cards, got {len(self.cards)} + {len(self.kickers)} kickers"
            )

    def _key(self) -> Tuple[HandRank, Tuple[Card, ...], Tuple[Card, ...]]:
        return (self.rank, self.cards, self.kickers)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HandValue):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: "HandValue") -> bool:
        if not isinstance(other, HandValue):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    @property
    def is_wheel(self) -> bool:
        values = {card.value for card in self.cards}
        return self.rank in (HandRank.STRAIGHT, HandRank.STRAIGHT_FLUSH) and values == set(WHEEL_VALUES)

    def sort(self) -> "HandValue":
        """Return a copy with cards and kickers in canonical order."""
        if self.rank == HandRank.FULL_HOUSE:
            cards = _sort_full_house(self.cards)
        elif self.is_wheel:
            cards = [
                max(card for card in self.cards if card.value == value)
                for value in WHEEL_VALUES
            ]
        else:
            cards = sorted(self.cards, key=_desc_value_asc_suit)
        kickers = sorted(self.kickers, key=_desc_value_asc_suit)
        return HandValue(self.rank, tuple(cards), tuple(kickers))

    def describe(self) -> str:
        return self.rank.name.lower()

    def labels(self) -> List[str]:
        return [card.label for card in self.cards + self.kickers]

    def __str__(self) -> str:
        return f"{self.describe()} [{' '.join(self.labels())}]"


def _sort_full_house(cards: Sequence[Card]) -> List[Card]:
    groups: Dict[int, List[Card]] = {}
    for card in cards:
        groups.setdefault(card.value, []).append(card)
    trips = next(group for group in groups.values() if len(group) == 3)
    pair = next(group for group in groups.values() if len(group) == 2)
    return sorted(trips, key=lambda c: c.suit, reverse=True) + sorted(pair, key=lambda c: c.suit, reverse=True)
