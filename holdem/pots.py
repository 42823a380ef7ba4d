from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from .hand_value import HandValue


@dataclass(frozen=True)
class SidePot:
    amount: int
    eligible: Tuple[str, ...]


def build_side_pots(contributions: Mapping[str, int], eligible: Iterable[str]) -> List[SidePot]:
    """Slice the chips committed this hand into main and side pots.

    ``eligible`` are the players who reached showdown; folded players still
    fund every slice up to their contribution. A slice nobody can win is
    merged into the previous one so no chips are lost.
    """
    contenders = set(eligible)
    committed = {player_id: amount for player_id, amount in contributions.items() if amount > 0}

    pots: List[SidePot] = []
    carried = 0
    previous_level = 0
    for level in sorted(set(committed.values())):
        funders = [player_id for player_id, amount in committed.items() if amount >= level]
        slice_total = (level - previous_level) * len(funders)
        previous_level = level
        winners = tuple(player_id for player_id in funders if player_id in contenders)
        if not winners:
            if pots:
                last = pots[-1]
                pots[-1] = SidePot(last.amount + slice_total, last.eligible)
            else:
                carried += slice_total
            continue
        pots.append(SidePot(slice_total + carried, winners))
        carried = 0

    if carried:
        raise ValueError("No eligible player for any pot")
    return pots


def distribute_pots(
    contributions: Mapping[str, int],
    showdown_hands: Sequence[Tuple[str, HandValue]],
) -> Dict[str, int]:
    """Award every side pot to the best eligible hand(s).

    Splits are even; odd chips go to the first winner in showdown order.
    Returns player id -> chips won; the values sum to the total contributed.
    """
    order = [player_id for player_id, _ in showdown_hands]
    values = dict(showdown_hands)
    awards: Dict[str, int] = {player_id: 0 for player_id in order}

    for pot in build_side_pots(contributions, order):
        contenders = [player_id for player_id in order if player_id in pot.eligible]
        best = max(values[player_id] for player_id in contenders)
        winners = [player_id for player_id in contenders if values[player_id] == best]
        share, remainder = divmod(pot.amount, len(winners))
        for player_id in winners:
            awards[player_id] += share
        awards[winners[0]] += remainder

    return awards
