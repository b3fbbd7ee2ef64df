"""
Bots module - The automated side of a drill.

Provides:
- select_weighted_move: Weighted random reply selection
- move_probabilities: Normalized view of reply weights
- ReplyPolicy: Interface for reply decision-making
- WeightedReplyPolicy / FirstReplyPolicy: Concrete policies
"""

from .selection import select_weighted_move, move_probabilities
from .policy import ReplyPolicy, ReplyDecision, WeightedReplyPolicy, FirstReplyPolicy

__all__ = [
    "select_weighted_move",
    "move_probabilities",
    "ReplyPolicy",
    "ReplyDecision",
    "WeightedReplyPolicy",
    "FirstReplyPolicy",
]
