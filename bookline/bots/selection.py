"""
Weighted Selection - Picks the automated side's reply.

Weights are relative masses, not a normalized distribution:
{0.7, 0.3} and {0.07, 0.03} select identically. A child without
an authored weight counts as DEFAULT_WEIGHT.
"""

from __future__ import annotations
from typing import Iterable, Mapping
import random

from ..opening_tree.node import MoveNode


def select_weighted_move(
    children: Mapping[str, MoveNode],
    allowed: Iterable[str] | None = None,
    rng: random.Random | None = None,
) -> str | None:
    """
    Select one move from the children by relative weight.

    Args:
        children: Candidate moves (label -> node)
        allowed: Optional restriction; only labels present in both are candidates
        rng: Random source (module-level random if not provided)

    Returns:
        The selected label, or None if no candidate remains
        (the line is exhausted).
    """
    moves = list(children.keys())
    if allowed is not None:
        allowed = set(allowed)
        moves = [move for move in moves if move in allowed]

    if not moves:
        return None

    # No randomness consumed when the choice is moot
    if len(moves) == 1:
        return moves[0]

    total_weight = 0.0
    cumulative: list[tuple[str, float]] = []
    for move in moves:
        total_weight += children[move].effective_weight
        cumulative.append((move, total_weight))

    rng = rng or random
    if total_weight <= 0:
        return rng.choice(moves)

    r = rng.random() * total_weight

    for move, running in cumulative:
        if running >= r:
            return move

    # Float rounding; never fail a selection
    return moves[-1]


def move_probabilities(children: Mapping[str, MoveNode]) -> dict[str, float]:
    """
    Get the normalized selection probability of each child.

    All-zero weights are reported as uniform.
    """
    if not children:
        return {}

    weights = {move: child.effective_weight for move, child in children.items()}
    total_weight = sum(weights.values())

    if total_weight <= 0:
        return {move: 1.0 / len(weights) for move in weights}

    return {move: weight / total_weight for move, weight in weights.items()}
