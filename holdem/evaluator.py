from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from .cards import ACE, Card, Suit
from .hand_value import HandRank, HandValue

HAND_SIZE = 7


def evaluate_hand(hole: Sequence[Card], board: Sequence[Card]) -> HandValue:
    """Best hand from two hole cards and a full five-card board."""
    return evaluate_best(list(hole) + list(board))


def evaluate_best(cards: Sequence[Card]) -> HandValue:
    """Return the sorted best HandValue for exactly 7 cards. Higher is better."""
    cards = list(cards)
    if len(cards) != HAND_SIZE:
        raise ValueError(f"Expected {HAND_SIZE} cards, got {len(cards)}")
    if len(set(cards)) != len(cards):
        raise ValueError("Duplicate cards: " + " ".join(card.label for card in cards))
    return _evaluate(sorted(cards, reverse=True)).sort()


def _evaluate(cards: List[Card]) -> HandValue:
    groups: Dict[int, List[Card]] = {}
    for card in cards:
        groups.setdefault(card.value, []).append(card)

    # First match wins, strongest category first.
    for check in (
        _straight_flush,
        _four_of_a_kind,
        _full_house,
        _flush,
        _straight,
        _three_of_a_kind,
        _pairs,
    ):
        value = check(cards, groups)
        if value is not None:
            return value

    best = cards[0]
    return HandValue(HandRank.HIGH_CARD, [best], _kickers(4, cards[1:]))


def _kickers(count: int, pool: Sequence[Card]) -> List[Card]:
    return sorted(pool, key=lambda c: (c.value, c.suit), reverse=True)[:count]


def _by_suit(cards: Sequence[Card]) -> Dict[Suit, List[Card]]:
    suited: Dict[Suit, List[Card]] = {}
    for card in cards:
        suited.setdefault(card.suit, []).append(card)
    return suited


def _straight_top(values: Sequence[int]) -> Optional[int]:
    """Highest top value of a five-card run, with the ace also playing low."""
    present = set(values)
    if ACE in present:
        present.add(1)
    for top in range(ACE, 4, -1):
        if all(top - offset in present for offset in range(5)):
            return top
    return None


def _run_cards(cards: Sequence[Card], top: int) -> List[Card]:
    # Highest-suited card for each value in the run; 1 stands for the ace.
    run = []
    for offset in range(5):
        value = top - offset
        if value == 1:
            value = ACE
        run.append(max(card for card in cards if card.value == value))
    return run


def _straight_flush(cards: List[Card], groups: Dict[int, List[Card]]) -> Optional[HandValue]:
    best_top = 0
    best_cards: List[Card] = []
    for suited in _by_suit(cards).values():
        if len(suited) < 5:
            continue
        top = _straight_top([card.value for card in suited])
        if top is not None and top > best_top:
            best_top = top
            best_cards = _run_cards(suited, top)
    if not best_cards:
        return None
    rank = HandRank.ROYAL_FLUSH if best_top == ACE else HandRank.STRAIGHT_FLUSH
    return HandValue(rank, best_cards)


def _four_of_a_kind(cards: List[Card], groups: Dict[int, List[Card]]) -> Optional[HandValue]:
    for value, group in groups.items():
        if len(group) == 4:
            rest = [card for card in cards if card.value != value]
            return HandValue(HandRank.FOUR_OF_A_KIND, group, _kickers(1, rest))
    return None


def _full_house(cards: List[Card], groups: Dict[int, List[Card]]) -> Optional[HandValue]:
    trips = [value for value, group in groups.items() if len(group) == 3]
    pairs = [value for value, group in groups.items() if len(group) == 2]
    if not trips or not pairs:
        return None
    return HandValue(HandRank.FULL_HOUSE, groups[max(trips)] + groups[max(pairs)])


def _flush(cards: List[Card], groups: Dict[int, List[Card]]) -> Optional[HandValue]:
    for suited in _by_suit(cards).values():
        if len(suited) >= 5:
            top_five = sorted(suited, key=lambda c: (-c.value, c.suit))[:5]
            return HandValue(HandRank.FLUSH, top_five)
    return None


def _straight(cards: List[Card], groups: Dict[int, List[Card]]) -> Optional[HandValue]:
    top = _straight_top(list(groups))
    if top is None:
        return None
    return HandValue(HandRank.STRAIGHT, _run_cards(cards, top))


def _three_of_a_kind(cards: List[Card], groups: Dict[int, List[Card]]) -> Optional[HandValue]:
    trips = [value for value, group in groups.items() if len(group) == 3]
    if not trips:
        return None
    value = max(trips)
    rest = [card for card in cards if card.value != value]
    return HandValue(HandRank.THREE_OF_A_KIND, groups[value], _kickers(2, rest))


def _pairs(cards: List[Card], groups: Dict[int, List[Card]]) -> Optional[HandValue]:
    pairs = sorted((value for value, group in groups.items() if len(group) == 2), reverse=True)
    if not pairs:
        return None
    if len(pairs) == 1:
        value = pairs[0]
        rest = [card for card in cards if card.value != value]
        return HandValue(HandRank.PAIR, groups[value], _kickers(3, rest))
    high, low = pairs[0], pairs[1]
    rest = [card for card in cards if card.value not in (high, low)]
    return HandValue(HandRank.TWO_PAIR, groups[high] + groups[low], _kickers(1, rest))
