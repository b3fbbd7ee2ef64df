"""
Transition Results - What the engine reports back after each call.

Results are values, not exceptions: a wrong guess by the learner
is expected and recoverable, and an exhausted line is a normal end.
Only misuse (wrong turn) raises.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

from .state import SessionSnapshot, Turn


class TransitionKind(Enum):
    """Kinds of transitions published to listeners."""
    REPLY = "reply"  # Automated side played a move
    LINE_EXHAUSTED = "line_exhausted"  # No authored reply remained
    PLAYER_MOVE = "player_move"  # Learner's move accepted
    MOVE_REJECTED = "move_rejected"  # Learner's move not in the book
    RESET = "reset"
    VARIATION_TOGGLED = "variation_toggled"


@dataclass(frozen=True)
class TransitionResult:
    """
    Result of a call into the engine.

    Contains:
    - Whether the move was accepted
    - The move played (if any)
    - The snapshot after the call
    - Whether an automated reply should now be scheduled
    """
    accepted: bool
    kind: TransitionKind
    snapshot: SessionSnapshot
    move: str | None = None
    reason: str | None = None

    @property
    def turn(self) -> Turn:
        return self.snapshot.turn

    @property
    def reply_due(self) -> bool:
        """True if the orchestrator should schedule advance_automated."""
        return (
            self.kind in (TransitionKind.PLAYER_MOVE, TransitionKind.RESET)
            and self.snapshot.turn == Turn.AUTOMATED_TO_MOVE
        )

    @property
    def line_complete(self) -> bool:
        return self.snapshot.is_complete

    @property
    def annotation(self) -> str | None:
        """Annotation of the node reached by an accepted move."""
        return self.snapshot.node.annotation if self.accepted else None

    @classmethod
    def rejected(cls, snapshot: SessionSnapshot, move: str, reason: str) -> TransitionResult:
        """Create a rejection result."""
        return cls(
            accepted=False,
            kind=TransitionKind.MOVE_REJECTED,
            snapshot=snapshot,
            move=move,
            reason=reason,
        )

    @classmethod
    def committed(
        cls,
        kind: TransitionKind,
        snapshot: SessionSnapshot,
        move: str | None = None,
    ) -> TransitionResult:
        """Create a result for a committed transition."""
        return cls(accepted=True, kind=kind, snapshot=snapshot, move=move)


@dataclass(frozen=True)
class TransitionEvent:
    """Notification sent to engine listeners."""
    kind: TransitionKind
    snapshot: SessionSnapshot
    move: str | None = None
