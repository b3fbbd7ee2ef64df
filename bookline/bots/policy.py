"""
Reply Policy - Interface for the automated side's decision-making.

A ReplyPolicy looks at the current node and returns a decision.
Decisions include:
- Which book reply to play (or none, if the line is exhausted)
- Explanation (for UI/debugging)
- Selection probability of the chosen reply
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable
import random

from ..opening_tree.node import MoveNode
from .selection import select_weighted_move, move_probabilities


@dataclass
class ReplyDecision:
    """
    A reply chosen by a policy.

    move is None when no authored reply is available.
    """
    move: str | None
    explanation: str = ""
    probability: float = 1.0

    @property
    def exhausted(self) -> bool:
        return self.move is None


class ReplyPolicy(ABC):
    """
    Abstract base class for reply policies.

    A policy defines how the automated side picks among
    the authored replies at a node.
    """

    @abstractmethod
    def select_reply(
        self,
        node: MoveNode,
        allowed: Iterable[str] | None = None,
    ) -> ReplyDecision:
        """
        Select a reply from the node's children.

        Args:
            node: Current node in the opening tree
            allowed: Optional restriction on the candidate replies

        Returns:
            ReplyDecision with the selected move (None if exhausted)
        """
        pass

    def get_name(self) -> str:
        """Get the policy's name/identifier."""
        return self.__class__.__name__


def _candidates(node: MoveNode, allowed: Iterable[str] | None) -> dict[str, MoveNode]:
    if allowed is None:
        return dict(node.children)
    allowed = set(allowed)
    return {move: child for move, child in node.children.items() if move in allowed}


class WeightedReplyPolicy(ReplyPolicy):
    """
    Weighted policy - picks replies in proportion to their authored weight.

    Used for real drills. Seed it for reproducible sessions.
    """

    def __init__(self, seed: int | None = None):
        self.rng = random.Random(seed)

    def select_reply(
        self,
        node: MoveNode,
        allowed: Iterable[str] | None = None,
    ) -> ReplyDecision:
        candidates = _candidates(node, allowed)
        move = select_weighted_move(candidates, rng=self.rng)
        if move is None:
            return ReplyDecision(move=None, explanation="No authored reply", probability=0.0)

        return ReplyDecision(
            move=move,
            explanation="Selected by weight",
            probability=move_probabilities(candidates)[move],
        )


class FirstReplyPolicy(ReplyPolicy):
    """
    First-reply policy - always plays the first allowed reply.

    Used for:
    - Deterministic testing
    - Walking the main line of a tree
    """

    def select_reply(
        self,
        node: MoveNode,
        allowed: Iterable[str] | None = None,
    ) -> ReplyDecision:
        candidates = _candidates(node, allowed)
        if not candidates:
            return ReplyDecision(move=None, explanation="No authored reply", probability=0.0)

        return ReplyDecision(
            move=next(iter(candidates)),
            explanation="Selected first reply",
        )
