from __future__ import annotations

import random
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Iterator, List, Optional, Sequence

RANKS = "23456789TJQKA"
RANK_VALUE = {rank: idx for idx, rank in enumerate(RANKS, start=2)}
VALUE_RANK = {idx: rank for rank, idx in RANK_VALUE.items()}
ACE = 14


class Suit(IntEnum):
    # Fixed total order; used as the secondary sort key for cards.
    DIAMONDS = 1
    CLUBS = 2
    HEARTS = 3
    SPADES = 4

    @property
    def label(self) -> str:
        return _SUIT_LABELS[self]

    @property
    def symbol(self) -> str:
        return _SUIT_SYMBOLS[self]


_SUIT_LABELS = {Suit.DIAMONDS: "d", Suit.CLUBS: "c", Suit.HEARTS: "h", Suit.SPADES: "s"}
_SUIT_SYMBOLS = {Suit.DIAMONDS: "♦", Suit.CLUBS: "♣", Suit.HEARTS: "♥", Suit.SPADES: "♠"}
SUITS = "".join(_SUIT_LABELS[suit] for suit in Suit)
_LABEL_SUITS = {label: suit for suit, label in _SUIT_LABELS.items()}


@dataclass(frozen=True, order=True)
class Card:
    value: int
    suit: Suit

    def __post_init__(self) -> None:
        if self.value not in VALUE_RANK:
            raise ValueError(f"Invalid value: {self.value}")
        if not isinstance(self.suit, Suit):
            raise ValueError(f"Invalid suit: {self.suit}")

    @property
    def rank(self) -> str:
        return VALUE_RANK[self.value]

    @property
    def label(self) -> str:
        return f"{self.rank}{self.suit.label}"

    @property
    def pretty(self) -> str:
        return f"{self.rank}{self.suit.symbol}"

    def __str__(self) -> str:
        return self.label


def full_deck() -> List[Card]:
    return [Card(value, suit) for value in range(2, ACE + 1) for suit in Suit]


class Deck:
    """A 52-card deck that draws from the top (end of the list).

    Every deck owns its random source so several tables can shuffle
    independently of each other.
    """

    def __init__(self, rng: Optional[random.Random] = None, seed: Optional[int] = None) -> None:
        self._rng = rng if rng is not None else random.Random(seed)
        self._cards: List[Card] = []
        self.reset()

    def reset(self) -> None:
        self._cards = full_deck()
        self._shuffle()

    def _shuffle(self) -> None:
        # Fisher-Yates, in place.
        for idx in range(len(self._cards) - 1, 0, -1):
            swap = self._rng.randint(0, idx)
            self._cards[idx], self._cards[swap] = self._cards[swap], self._cards[idx]

    def draw(self) -> Card:
        if not self._cards:
            raise ValueError("Deck is empty")
        return self._cards.pop()

    def burn(self) -> None:
        self.draw()

    def peek(self) -> Card:
        if not self._cards:
            raise ValueError("Deck is empty")
        return self._cards[-1]

    def count(self) -> int:
        return len(self._cards)

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(list(self._cards))


def cards_to_labels(cards: Iterable[Card]) -> List[str]:
    return [card.label for card in cards]


def parse_label(label: str) -> Card:
    if len(label) != 2:
        raise ValueError(f"Invalid card label: {label}")
    rank, suit = label[0].upper(), label[1].lower()
    if rank not in RANK_VALUE:
        raise ValueError(f"Invalid rank: {label[0]}")
    if suit not in _LABEL_SUITS:
        raise ValueError(f"Invalid suit: {label[1]}")
    return Card(RANK_VALUE[rank], _LABEL_SUITS[suit])


def parse_cards(labels: Sequence[str]) -> List[Card]:
    return [parse_label(label) for label in labels]
