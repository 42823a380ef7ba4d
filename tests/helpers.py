from __future__ import annotations

import random
from typing import Iterable, List, Optional, Sequence, Tuple

from holdem.cards import Deck, full_deck, parse_cards
from holdem.game import GameEngine
from holdem.models import ActRequest, Player, PlayerAction, PlayType, TableConfig


class ScriptedStrategy:
    """Replays a fixed list of moves, then checks or calls forever."""

    def __init__(self, moves: Iterable[Tuple[PlayType, Optional[int]]] = ()) -> None:
        self.moves = list(moves)
        self.requests: List[ActRequest] = []

    def act(self, request: ActRequest) -> PlayerAction:
        self.requests.append(request)
        if self.moves:
            play, amount = self.moves.pop(0)
            return PlayerAction(play, amount)
        return PlayerAction(PlayType.CHECK if request.to_call == 0 else PlayType.CALL)


class StackedDeck(Deck):
    """Deals ``labels`` first, in order, after every reset."""

    def __init__(self, labels: Sequence[str]) -> None:
        self._top = parse_cards(labels)
        super().__init__(random.Random(0))

    def reset(self) -> None:
        rest = [card for card in full_deck() if card not in self._top]
        # draw() pops from the end of the list.
        self._cards = rest + list(reversed(self._top))


def make_players(stacks: Sequence[int], names: Optional[Sequence[str]] = None) -> List[Player]:
    names = names or [f"Player{idx}" for idx in range(len(stacks))]
    return [Player(name=name, chips=chips, strategy=ScriptedStrategy()) for name, chips in zip(names, stacks)]


def create_engine(
    stacks: Sequence[int] = (100, 100, 100),
    *,
    sb: int = 1,
    bb: int = 2,
    seed: int = 42,
    deck: Optional[Deck] = None,
) -> GameEngine:
    """Instantiate an engine with one player per stack."""
    config = TableConfig(max_players=max(len(stacks), 2), starting_stack=max(stacks), sb=sb, bb=bb, seed=seed)
    return GameEngine(make_players(stacks), config, deck=deck)


def total_chips(engine: GameEngine) -> int:
    return sum(player.chips for player in engine.players) + engine.pot


def finish_passively(engine: GameEngine) -> None:
    """Check or call for whoever is to act until the hand is over."""
    while not engine.is_hand_complete():
        assert engine.current_turn is not None
        player = engine.players[engine.current_turn]
        play = PlayType.CHECK if engine.to_call(player.id) == 0 else PlayType.CALL
        engine.apply_move(player.id, play)
