from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence

from holdem.game import GameEngine
from holdem.models import HandResult, Player, TableConfig
from strategies import create_strategy

LOGGER = logging.getLogger("poker_sim")


def build_table(
    config: TableConfig,
    strategy_names: Sequence[str],
    players: int,
) -> GameEngine:
    """Seat ``players`` players, cycling through ``strategy_names``."""
    if players < 2:
        raise ValueError("Need at least two players")
    if not strategy_names:
        raise ValueError("Need at least one strategy")

    rng = random.Random(config.seed)
    seated: List[Player] = []
    for idx in range(players):
        name = strategy_names[idx % len(strategy_names)]
        # Every bot draws from its own stream so tables stay reproducible.
        strategy = create_strategy(name, random.Random(rng.getrandbits(32)))
        seated.append(Player(name=f"Player {idx + 1} ({name})", chips=config.starting_stack, strategy=strategy))
    return GameEngine(seated, config, rng=random.Random(rng.getrandbits(32)))


def log_result(engine: GameEngine, result: HandResult) -> None:
    LOGGER.info("Board: %s", " ".join(card.pretty for card in result.board) or "-")
    for player, value in result.showdown_hands:
        LOGGER.info(
            "%-24s | Hole: %s -> %s %s",
            player.name,
            " ".join(card.pretty for card in player.hand.cards),
            value.describe(),
            " ".join(card.pretty for card in value.cards),
        )
    names = ", ".join(player.name for player in result.winners)
    LOGGER.info("Winner%s: %s", "s" if len(result.winners) > 1 else "", names)
    log_stacks(engine)


def log_stacks(engine: GameEngine) -> None:
    for player in sorted(engine.players, key=lambda p: p.chips, reverse=True):
        LOGGER.info("%-24s | %s", player.name, player.chips)


def run_simulation(engine: GameEngine, max_hands: int) -> int:
    """Play until one player holds every chip or ``max_hands`` is reached."""
    hands_played = 0
    total = sum(player.chips for player in engine.players)
    while hands_played < max_hands and not engine.is_match_over():
        hands_played += 1
        LOGGER.info("-- Hand #%d --", hands_played)
        result = engine.play_hand()
        log_result(engine, result)
        remaining = sum(player.chips for player in engine.players)
        if remaining != total:
            raise RuntimeError(f"Chip total drifted from {total} to {remaining}")

    LOGGER.info("Game over after %d hands. Final standings:", hands_played)
    log_stacks(engine)
    return hands_played


def winner(engine: GameEngine) -> Optional[Player]:
    funded = [player for player in engine.players if player.chips > 0]
    return funded[0] if len(funded) == 1 else None
