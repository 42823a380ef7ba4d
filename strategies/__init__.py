"""Reference strategies and the name -> factory registry used by the CLIs."""

from __future__ import annotations

import random
from typing import Callable, Dict, Optional

from holdem.models import PlayerStrategy

from .bots import (
    AllInBot,
    BaselineBot,
    CheckOrCallBot,
    CheckOrFoldBot,
    FlipACoinBot,
    FoldBot,
    PairKingBot,
    RandomBot,
)

StrategyFactory = Callable[[random.Random], PlayerStrategy]

STRATEGIES: Dict[str, StrategyFactory] = {
    "fold": lambda rng: FoldBot(),
    "check_or_fold": lambda rng: CheckOrFoldBot(),
    "check_or_call": lambda rng: CheckOrCallBot(),
    "all_in": lambda rng: AllInBot(),
    "random": RandomBot,
    "baseline": BaselineBot,
    "flip_a_coin": FlipACoinBot,
    "pair_king": lambda rng: PairKingBot(),
}


def create_strategy(name: str, rng: Optional[random.Random] = None) -> PlayerStrategy:
    try:
        factory = STRATEGIES[name]
    except KeyError:
        raise ValueError(f"Unknown strategy {name!r}; choose from {', '.join(sorted(STRATEGIES))}") from None
    return factory(rng or random.Random())


__all__ = [
    "STRATEGIES",
    "AllInBot",
    "BaselineBot",
    "CheckOrCallBot",
    "CheckOrFoldBot",
    "FlipACoinBot",
    "FoldBot",
    "PairKingBot",
    "RandomBot",
    "create_strategy",
]
