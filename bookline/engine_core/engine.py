"""
Session Engine - The turn-based state machine of a drill.

States:
    AUTOMATED_TO_MOVE -> LEARNER_TO_MOVE -> AUTOMATED_TO_MOVE -> ...
    either side's move may end the line -> COMPLETE

The engine is the single point of state mutation for a session.
It never starts timers: after an accepted learner move it reports
that a reply is due, and the orchestrating layer decides when to
call advance_automated(). Deferred calls carry the epoch they were
scheduled in; a reset bumps the epoch, which turns any outstanding
deferred call into a no-op.

Only the first branch after the fixed prefix is filtered by
allowed_replies. Later branches always use every authored reply.
"""

from __future__ import annotations
from typing import Callable, Sequence
import logging

from ..errors import BooklineError
from ..opening_tree.node import MoveNode
from ..opening_tree.navigation import navigate_to_path, is_legal_in_tree, possible_moves
from ..bots.policy import ReplyPolicy, WeightedReplyPolicy
from .state import SessionState, SessionSnapshot, Turn
from .result import TransitionResult, TransitionEvent, TransitionKind

logger = logging.getLogger(__name__)

Listener = Callable[[TransitionEvent], None]


class IllegalTransitionError(BooklineError):
    """Raised when an engine method is called in a turn that forbids it."""

    def __init__(self, operation: str, turn: Turn):
        self.operation = operation
        self.turn = turn
        super().__init__(f"Cannot {operation} while turn is {turn.value}")


class PrefixNotFoundError(BooklineError):
    """Raised when the starting prefix is not a line of the tree."""

    def __init__(self, prefix: Sequence[str]):
        self.prefix = list(prefix)
        super().__init__(f"Starting prefix not found in tree: {' '.join(prefix) or '(empty)'}")


class SessionEngine:
    """
    Drives one learner's drill over an opening tree.

    Usage:
        engine = SessionEngine.start(tree, ["e4", "e5", "Nf3"])

        engine.advance_automated()          # automated side replies
        result = engine.submit_player_move("Bc4")
        if result.reply_due:
            schedule(engine.deferred_reply())

        engine.reset()                      # restart the drill
    """

    def __init__(
        self,
        tree: MoveNode,
        prefix: Sequence[str] = (),
        policy: ReplyPolicy | None = None,
    ):
        start_node = navigate_to_path(tree, prefix)
        if start_node is None:
            raise PrefixNotFoundError(prefix)

        self.tree = tree
        self.prefix: tuple[str, ...] = tuple(prefix)
        self.policy = policy or WeightedReplyPolicy()
        self._start_node = start_node
        self._listeners: list[Listener] = []

        # Every branch is enabled at the start
        self._state = SessionState(
            path=list(self.prefix),
            node=start_node,
            turn=Turn.AUTOMATED_TO_MOVE,
            allowed_replies=set(possible_moves(start_node)),
            epoch=0,
        )

    @classmethod
    def start(
        cls,
        tree: MoveNode,
        prefix: Sequence[str] = (),
        policy: ReplyPolicy | None = None,
    ) -> SessionEngine:
        """Create an engine positioned at the end of the prefix."""
        return cls(tree, prefix, policy)

    # =========================================================================
    # Read-only state
    # =========================================================================

    @property
    def turn(self) -> Turn:
        return self._state.turn

    @property
    def epoch(self) -> int:
        return self._state.epoch

    @property
    def node(self) -> MoveNode:
        return self._state.node

    @property
    def path(self) -> tuple[str, ...]:
        return tuple(self._state.path)

    @property
    def allowed_replies(self) -> frozenset[str]:
        return frozenset(self._state.allowed_replies)

    @property
    def first_branch(self) -> MoveNode:
        """The node whose replies allowed_replies filters."""
        return self._start_node

    @property
    def is_first_branch(self) -> bool:
        return len(self._state.path) == len(self.prefix)

    def snapshot(self) -> SessionSnapshot:
        """Get a read-only copy of the current state."""
        return self._state.freeze()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener for transition events.

        Returns a callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # =========================================================================
    # Transitions
    # =========================================================================

    def advance_automated(self, expected_epoch: int | None = None) -> TransitionResult | None:
        """
        Play the automated side's reply.

        Args:
            expected_epoch: Epoch captured when the call was scheduled.
                If the session was reset since, the call does nothing.

        Returns:
            TransitionResult, or None for a stale deferred call.

        Raises:
            IllegalTransitionError: if it is not the automated side's turn
        """
        if expected_epoch is not None and expected_epoch != self._state.epoch:
            logger.debug(
                "Dropping stale reply (scheduled in epoch %d, now %d)",
                expected_epoch, self._state.epoch,
            )
            return None

        self._require_turn(Turn.AUTOMATED_TO_MOVE, "advance the automated side")

        allowed = self._state.allowed_replies if self.is_first_branch else None
        decision = self.policy.select_reply(self._state.node, allowed)

        if decision.exhausted:
            self._state.turn = Turn.COMPLETE
            logger.debug("Line exhausted at %s", " ".join(self._state.path))
            return self._commit(TransitionKind.LINE_EXHAUSTED)

        node = self._state.advance(decision.move)
        self._state.turn = Turn.COMPLETE if node.ends_line else Turn.LEARNER_TO_MOVE
        logger.debug(
            "Automated reply %s (p=%.2f): %s",
            decision.move, decision.probability, decision.explanation,
        )
        return self._commit(TransitionKind.REPLY, decision.move)

    def submit_player_move(self, move: str) -> TransitionResult:
        """
        Submit the learner's move.

        The caller must already have checked the move is legal in the
        game itself; this only checks it against the book.

        Returns:
            Rejection result (state unchanged) if the move is off-book,
            otherwise the accepted result. Check result.reply_due to
            know whether to schedule the automated reply.

        Raises:
            IllegalTransitionError: if it is not the learner's turn
        """
        self._require_turn(Turn.LEARNER_TO_MOVE, "submit a player move")

        if not is_legal_in_tree(self._state.node, move):
            result = TransitionResult.rejected(
                self._state.freeze(), move, f"{move} is not the book move"
            )
            self._publish(TransitionEvent(result.kind, result.snapshot, move))
            return result

        node = self._state.advance(move)
        self._state.turn = Turn.COMPLETE if node.ends_line else Turn.AUTOMATED_TO_MOVE
        return self._commit(TransitionKind.PLAYER_MOVE, move)

    def deferred_reply(self) -> Callable[[], TransitionResult | None]:
        """
        Get a callable that plays the automated reply later.

        The callable captures the current epoch; if the session is
        reset before it runs, it does nothing.
        """
        epoch = self._state.epoch

        def reply() -> TransitionResult | None:
            return self.advance_automated(expected_epoch=epoch)

        return reply

    def toggle_variation(self, move: str) -> bool:
        """
        Enable or disable a reply at the first branch.

        The last enabled reply cannot be disabled, and moves that are
        not replies at the first branch are ignored.

        Returns:
            True if the allowed set changed.
        """
        if self._start_node.child(move) is None:
            logger.debug("Ignoring toggle of unknown variation %s", move)
            return False

        allowed = self._state.allowed_replies
        if move in allowed:
            if len(allowed) == 1:
                return False
            allowed.remove(move)
        else:
            allowed.add(move)

        self._commit(TransitionKind.VARIATION_TOGGLED, move)
        return True

    def reset(self) -> TransitionResult:
        """
        Restart the drill from the end of the prefix.

        Keeps the learner's variation choices and bumps the epoch.
        """
        self._state.path = list(self.prefix)
        self._state.node = self._start_node
        self._state.turn = Turn.AUTOMATED_TO_MOVE
        self._state.epoch += 1
        return self._commit(TransitionKind.RESET)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _require_turn(self, turn: Turn, operation: str):
        if self._state.turn != turn:
            raise IllegalTransitionError(operation, self._state.turn)

    def _commit(self, kind: TransitionKind, move: str | None = None) -> TransitionResult:
        snapshot = self._state.freeze()
        self._publish(TransitionEvent(kind, snapshot, move))
        return TransitionResult.committed(kind, snapshot, move)

    def _publish(self, event: TransitionEvent):
        for listener in list(self._listeners):
            listener(event)
