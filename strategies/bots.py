from __future__ import annotations

import random
from typing import Optional

from holdem.evaluator import evaluate_best
from holdem.hand_value import HandRank
from holdem.models import ActRequest, PlayerAction, PlayType, Street


class FoldBot:
    """Folds every decision, even when checking is free."""

    def act(self, request: ActRequest) -> PlayerAction:
        return PlayerAction(PlayType.FOLD)


class CheckOrFoldBot:
    def act(self, request: ActRequest) -> PlayerAction:
        if request.to_call == 0:
            return PlayerAction(PlayType.CHECK)
        return PlayerAction(PlayType.FOLD)


class CheckOrCallBot:
    def act(self, request: ActRequest) -> PlayerAction:
        if request.to_call == 0:
            return PlayerAction(PlayType.CHECK)
        return PlayerAction(PlayType.CALL)


class AllInBot:
    def act(self, request: ActRequest) -> PlayerAction:
        return PlayerAction(PlayType.ALL_IN)


class RandomBot:
    """Picks uniformly among the moves that are legal right now."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()

    def act(self, request: ActRequest) -> PlayerAction:
        choices = [PlayType.FOLD, PlayType.ALL_IN]
        choices.append(PlayType.CHECK if request.to_call == 0 else PlayType.CALL)
        if request.your_stack + request.your_current_bet > request.min_raise:
            choices.append(PlayType.RAISE)
        play = self._rng.choice(choices)
        if play == PlayType.RAISE:
            top = request.your_stack + request.your_current_bet - 1
            return PlayerAction(play, self._rng.randint(request.min_raise, top))
        return PlayerAction(play)


def _rough_hand_strength(request: ActRequest) -> int:
    """Very rough proxy for hand quality used to drive aggression choices."""
    hole = request.hole_cards
    if len(hole) < 2:
        return 0

    values = [card.value for card in hole]
    score = sum(values)
    if values[0] == values[1]:
        score += 14  # pairs are quite strong pre-flop
    else:
        gap = abs(values[0] - values[1])
        if gap == 1:
            score += 4
        elif gap == 2:
            score += 2
    if hole[0].suit == hole[1].suit:
        score += 3
    if min(values) >= 11:
        score += 2

    # Connecting with the board counts for more than raw card height.
    board_values = {card.value for card in request.community_cards}
    score += 8 * sum(1 for value in values if value in board_values)
    return score


class BaselineBot:
    """Aggressive demo bot: mixes in random raises with a bias toward stronger holdings."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()

    def _should_raise(self, strength: int, street: Street, facing_bet: bool) -> bool:
        # Encourage more post-flop barreling and occasional light opens.
        base = 0.2 if facing_bet else 0.35
        street_bonus = {
            Street.PRE_FLOP: 0.0,
            Street.FLOP: 0.05,
            Street.TURN: 0.1,
            Street.RIVER: 0.12,
        }.get(street, 0.0)
        scaled_strength = min(strength / 45.0, 0.45)
        probability = min(0.85, base + street_bonus + scaled_strength)

        # Always attack with premium holdings.
        if strength >= 36:
            return True
        return self._rng.random() < probability

    def _choose_raise_amount(self, min_raise_to: int, max_raise_to: int, facing_bet: bool) -> int:
        if max_raise_to <= min_raise_to:
            return max_raise_to

        span = max_raise_to - min_raise_to
        roll = self._rng.random()

        # Facing a bet: weight toward stronger responses, otherwise mix in more probes.
        if facing_bet:
            if roll < 0.2:
                return min_raise_to
            if roll > 0.85:
                return max_raise_to
        else:
            if roll < 0.35:
                return min_raise_to
            if roll > 0.9:
                return max_raise_to

        return min_raise_to + int(span * self._rng.random())

    def act(self, request: ActRequest) -> PlayerAction:
        strength = _rough_hand_strength(request)
        facing_bet = request.to_call > 0
        max_raise_to = request.your_stack + request.your_current_bet

        can_raise = max_raise_to > request.your_current_bet + request.to_call
        if can_raise and self._should_raise(strength, request.street, facing_bet):
            amount = self._choose_raise_amount(request.min_raise, max_raise_to, facing_bet)
            if amount >= max_raise_to:
                return PlayerAction(PlayType.ALL_IN)
            return PlayerAction(PlayType.RAISE, amount)

        if facing_bet:
            # Weak hands give up against big bets.
            if strength < 18 and request.to_call * 3 > request.pot_size:
                return PlayerAction(PlayType.FOLD)
            return PlayerAction(PlayType.CALL)
        return PlayerAction(PlayType.CHECK)


class FlipACoinBot:
    """Folds or moves all in with even odds."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()

    def act(self, request: ActRequest) -> PlayerAction:
        return PlayerAction(PlayType.FOLD if self._rng.random() < 0.5 else PlayType.ALL_IN)


def _has_pair_or_better(request: ActRequest) -> bool:
    cards = list(request.hole_cards) + list(request.community_cards)
    if len(cards) == 7:
        return evaluate_best(cards).rank >= HandRank.PAIR
    values = [card.value for card in cards]
    return len(set(values)) < len(values)


class PairKingBot:
    """Bets any pair or better and otherwise plays scared.

    Before the flop it still calls anything up to ten big blinds.
    """

    def act(self, request: ActRequest) -> PlayerAction:
        max_raise_to = request.your_stack + request.your_current_bet
        if _has_pair_or_better(request):
            if max_raise_to <= request.min_raise:
                return PlayerAction(PlayType.ALL_IN)
            # Sizing grows with the street: +1, +2, +4, +8.
            bigger = request.min_raise + 2 ** int(request.street)
            return PlayerAction(PlayType.RAISE, bigger if bigger < max_raise_to else request.min_raise)

        if request.to_call == 0:
            return PlayerAction(PlayType.CHECK)
        if (
            request.street == Street.PRE_FLOP
            and request.your_stack > request.to_call
            and request.your_current_bet + request.to_call <= 10 * request.big_blind
        ):
            return PlayerAction(PlayType.CALL)
        return PlayerAction(PlayType.FOLD)
