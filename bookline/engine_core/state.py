"""
Session State - The mutable state of one drill session.

Design principles:
- Owned exclusively by SessionEngine; nothing else mutates it
- path and node are always consistent (node is the end of path)
- Snapshots are frozen copies handed to the presentation layer
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from ..opening_tree.node import MoveNode


class Turn(Enum):
    """Whose move it is, or whether the drill is over."""
    AUTOMATED_TO_MOVE = "automated_to_move"
    LEARNER_TO_MOVE = "learner_to_move"
    COMPLETE = "complete"


@dataclass
class SessionState:
    """
    Live state of a drill session.

    Attributes:
        path: Move labels from the root to the current node (prefix included)
        node: Node at the end of path
        turn: Current turn
        allowed_replies: Replies the automated side may pick at the first branch
        epoch: Generation counter, bumped by every reset
    """
    path: list[str]
    node: MoveNode
    turn: Turn = Turn.AUTOMATED_TO_MOVE
    allowed_replies: set[str] = field(default_factory=set)
    epoch: int = 0

    def advance(self, move: str) -> MoveNode:
        """Descend to a child and return it. The move must be a child."""
        child = self.node.children[move]
        self.path.append(move)
        self.node = child
        return child

    def freeze(self) -> SessionSnapshot:
        """Take a read-only copy."""
        return SessionSnapshot(
            path=tuple(self.path),
            node=self.node,
            turn=self.turn,
            allowed_replies=frozenset(self.allowed_replies),
            epoch=self.epoch,
        )


@dataclass(frozen=True)
class SessionSnapshot:
    """
    Read-only view of a session, taken after a committed transition.
    """
    path: tuple[str, ...]
    node: MoveNode
    turn: Turn
    allowed_replies: frozenset[str]
    epoch: int

    @property
    def is_complete(self) -> bool:
        return self.turn == Turn.COMPLETE
