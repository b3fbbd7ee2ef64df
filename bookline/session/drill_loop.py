"""
Drill Loop - Orchestrates one drill between the UI and the engine.

The loop:
1. Automated side plays its reply (after a "thinking" delay)
2. Learner proposes a move (board squares or typed text)
3. Oracle checks the move is legal in the game
4. Engine checks the move against the book
5. If accepted and the line goes on, schedule the next reply
6. Repeat until the line is complete

The engine never starts timers; this loop does. Every scheduled
reply captures the engine's epoch, so a reset while a reply is
pending turns that reply into a no-op.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable
import asyncio
import logging

from ..engine_core import SessionEngine, Turn, TransitionResult, TransitionKind
from ..legality import LegalityOracle

logger = logging.getLogger(__name__)

Scheduler = Callable[[float, Callable[[], None]], Any]


class LoopState(Enum):
    """State of the drill loop."""
    WAITING_REPLY = "waiting_reply"  # Automated side is thinking
    WAITING_LEARNER = "waiting_learner"  # Learner to move
    COMPLETE = "complete"  # Line finished


_TURN_TO_LOOP_STATE = {
    Turn.AUTOMATED_TO_MOVE: LoopState.WAITING_REPLY,
    Turn.LEARNER_TO_MOVE: LoopState.WAITING_LEARNER,
    Turn.COMPLETE: LoopState.COMPLETE,
}


@dataclass
class TurnResult:
    """
    Result of a learner action or an automated reply.

    Contains feedback for the learner and what happened.
    """
    success: bool
    loop_state: LoopState

    # Feedback line for the status bar
    feedback: str = ""

    # Learner move (normalized label) if one was submitted
    move: str | None = None

    # Automated reply, if one was played during this call
    reply: str | None = None

    # True if a reply is scheduled to run later
    reply_scheduled: bool = False

    # Annotation of the node reached
    annotation: str | None = None

    errors: list[str] = field(default_factory=list)


def default_scheduler(delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle | None:
    """
    Run callback after delay on the running asyncio loop.

    Without a running loop, or with no delay, the callback runs now.
    """
    if delay <= 0:
        callback()
        return None
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        callback()
        return None
    return loop.call_later(delay, callback)


class DrillLoop:
    """
    The drill driver for one session.

    Usage:
        loop = DrillLoop(engine, oracle=ChessLegalityOracle(), reply_delay=1.0)

        result = loop.begin()              # first automated reply
        result = loop.play_squares("e4", "e5")
        show(result.feedback)

        loop.reset()
    """

    def __init__(
        self,
        engine: SessionEngine,
        oracle: LegalityOracle | None = None,
        reply_delay: float = 0.0,
        scheduler: Scheduler | None = None,
    ):
        self.engine = engine
        self.oracle = oracle
        self.reply_delay = reply_delay
        self.scheduler = scheduler or default_scheduler
        self.feedback = ""
        self._pending_token: object | None = None
        self._pending_handle: Any = None

    @property
    def state(self) -> LoopState:
        return _TURN_TO_LOOP_STATE[self.engine.turn]

    @property
    def reply_pending(self) -> bool:
        return self._pending_token is not None

    def begin(self) -> TurnResult:
        """
        Start the drill: the automated side makes the first reply.
        """
        if self.engine.turn != Turn.AUTOMATED_TO_MOVE or self.reply_pending:
            return self._failure("Drill already started")
        return self._request_reply()

    def play_squares(
        self,
        from_square: str,
        to_square: str,
        promotion: str | None = None,
    ) -> TurnResult:
        """Play a learner move given as board squares (drag and drop)."""
        if self.engine.turn != Turn.LEARNER_TO_MOVE:
            return self._not_your_turn()

        if self.oracle is None:
            return self._failure("No legality oracle configured")

        verdict = self.oracle.normalize(self.engine.path, from_square, to_square, promotion)
        if not verdict.legal:
            return self._failure(verdict.reason or "Illegal move")

        return self.play_move(verdict.label)

    def play_text(self, text: str) -> TurnResult:
        """Play a learner move typed as text (SAN or squares)."""
        if self.engine.turn != Turn.LEARNER_TO_MOVE:
            return self._not_your_turn()

        if self.oracle is None:
            return self.play_move(text.strip())

        verdict = self.oracle.normalize_text(self.engine.path, text)
        if not verdict.legal:
            return self._failure(verdict.reason or "Illegal move")

        return self.play_move(verdict.label)

    def play_move(self, label: str) -> TurnResult:
        """
        Play a learner move given as an already-legal move label.
        """
        if self.engine.turn != Turn.LEARNER_TO_MOVE:
            return self._not_your_turn()

        result = self.engine.submit_player_move(label)

        if not result.accepted:
            self.feedback = f'"{label}" is not the correct move. Try again!'
            return TurnResult(
                success=False,
                loop_state=self.state,
                feedback=self.feedback,
                move=label,
            )

        if result.line_complete:
            self.feedback = f"Great! You played {label}. This line is complete!"
            return TurnResult(
                success=True,
                loop_state=self.state,
                feedback=self.feedback,
                move=label,
                annotation=result.annotation,
            )

        self.feedback = f"Good! You played {label}. Thinking..."
        reply_result = self._request_reply()
        reply_result.move = label
        reply_result.annotation = reply_result.annotation or result.annotation
        return reply_result

    def toggle_variation(self, move: str) -> bool:
        """Enable or disable a reply at the first branch."""
        return self.engine.toggle_variation(move)

    def reset(self) -> TurnResult:
        """
        Restart the drill and schedule the opening reply.

        Any reply still pending from before the reset is dropped.
        """
        self.cancel_pending()
        self.engine.reset()
        self.feedback = "Drill restarted."
        return self._request_reply()

    def position(self) -> str | None:
        """Position identifier of the current node, or None without an oracle or a legal path."""
        if self.oracle is None:
            return None
        return self.oracle.position(self.engine.path)

    # =========================================================================
    # Reply scheduling
    # =========================================================================

    def _request_reply(self) -> TurnResult:
        """Schedule (or play now) the automated side's reply."""
        reply = self.engine.deferred_reply()
        token = object()
        played: list[TransitionResult] = []

        def fire():
            if self._pending_token is token:
                self._pending_token = None
                self._pending_handle = None
            result = reply()
            if result is None:
                return
            played.append(result)
            self.feedback = self._reply_feedback(result)

        self._pending_token = token
        handle = self.scheduler(self.reply_delay, fire)

        if played:
            # Scheduler ran the reply right away
            result = played[0]
            return TurnResult(
                success=True,
                loop_state=self.state,
                feedback=self.feedback,
                reply=result.move,
                annotation=result.annotation,
            )

        if self._pending_token is token:
            self._pending_handle = handle

        return TurnResult(
            success=True,
            loop_state=self.state,
            feedback=self.feedback,
            reply_scheduled=self.reply_pending,
        )

    def cancel_pending(self):
        """Cancel a pending reply; the epoch guard covers schedulers without cancel."""
        handle = self._pending_handle
        if self._pending_token is not None:
            logger.debug("Dropping pending reply")
        self._pending_token = None
        self._pending_handle = None
        if handle is not None and hasattr(handle, "cancel"):
            handle.cancel()

    def _reply_feedback(self, result: TransitionResult) -> str:
        if result.kind == TransitionKind.LINE_EXHAUSTED:
            return "You've reached the end of this line!"

        move = result.move
        if result.line_complete:
            return f"Opponent played {move}. This line is complete!"
        if len(result.snapshot.node.children) == 1:
            return f"Opponent played {move}. There's one best response here."
        return f"Opponent played {move}. What's your next move?"

    def _not_your_turn(self) -> TurnResult:
        if self.engine.turn == Turn.COMPLETE:
            return self._failure("This line is complete. Reset to practice again.")
        return self._failure("Wait for the opponent's reply.")

    def _failure(self, error: str) -> TurnResult:
        return TurnResult(
            success=False,
            loop_state=self.state,
            feedback=self.feedback,
            errors=[error],
        )
