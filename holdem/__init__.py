"""Texas Hold'em primitives: cards, hand evaluation, betting engine and pots."""

from .cards import Card, Deck, RANKS, SUITS, Suit, parse_cards, parse_label
from .evaluator import evaluate_best, evaluate_hand
from .game import GameEngine, HandContext, InvalidActionError, InvalidRaiseError
from .hand_value import HandRank, HandValue
from .models import (
    ActRequest,
    CommunityCards,
    HandResult,
    HoleCards,
    Player,
    PlayerAction,
    PlayerStrategy,
    PlayerSummary,
    PlayType,
    Street,
    TableConfig,
)
from .pots import SidePot, build_side_pots, distribute_pots

__all__ = [
    "Card",
    "Deck",
    "RANKS",
    "SUITS",
    "Suit",
    "parse_cards",
    "parse_label",
    "evaluate_best",
    "evaluate_hand",
    "GameEngine",
    "HandContext",
    "InvalidActionError",
    "InvalidRaiseError",
    "HandRank",
    "HandValue",
    "ActRequest",
    "CommunityCards",
    "HandResult",
    "HoleCards",
    "Player",
    "PlayerAction",
    "PlayerStrategy",
    "PlayerSummary",
    "PlayType",
    "Street",
    "TableConfig",
    "SidePot",
    "build_side_pots",
    "distribute_pots",
]
