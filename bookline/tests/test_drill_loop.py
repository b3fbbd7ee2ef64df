"""
Tests for the drill loop and session manager.

Tests:
- Reply scheduling and feedback
- Oracle-checked learner moves
- Reset drops pending replies
- Session lifecycle
"""

import pytest

from ..engine_core import SessionEngine, Turn
from ..bots import FirstReplyPolicy
from ..session import (
    DrillLoop,
    LoopState,
    SessionManager,
    SessionState,
    default_scheduler,
)
from ..opening_tree import parse_opening_tree
from ..openings import UnknownOpeningError, SCOTCH_GAMBIT_PREFIX
from .conftest import SAMPLE_PREFIX


@pytest.fixture
def loop(engine, oracle, manual_scheduler) -> DrillLoop:
    """Drill loop with replies held by a manual scheduler."""
    return DrillLoop(engine, oracle=oracle, reply_delay=1.0, scheduler=manual_scheduler)


@pytest.fixture
def instant_loop(engine, oracle) -> DrillLoop:
    """Drill loop that replies immediately."""
    return DrillLoop(engine, oracle=oracle)


class TestReplyScheduling:
    """Tests for scheduled automated replies."""

    def test_begin_schedules_reply(self, loop, manual_scheduler):
        result = loop.begin()

        assert result.success
        assert result.reply_scheduled
        assert result.reply is None
        assert loop.reply_pending
        assert loop.state == LoopState.WAITING_REPLY
        assert manual_scheduler.calls[0][0] == 1.0

    def test_scheduled_reply_plays(self, loop, manual_scheduler):
        loop.begin()
        manual_scheduler.run_all()

        assert not loop.reply_pending
        assert loop.state == LoopState.WAITING_LEARNER
        assert loop.engine.path[-1] == "f5"
        assert loop.feedback == "Opponent played f5. There's one best response here."

    def test_begin_twice_fails(self, loop):
        loop.begin()
        result = loop.begin()

        assert not result.success
        assert result.errors == ["Drill already started"]

    def test_instant_reply(self, instant_loop):
        """Without a delay the reply comes back in the same call."""
        result = instant_loop.begin()

        assert result.success
        assert result.reply == "f5"
        assert not result.reply_scheduled
        assert result.annotation == "Latvian Gambit"
        assert instant_loop.state == LoopState.WAITING_LEARNER

    def test_accepted_move_triggers_reply(self, instant_loop):
        instant_loop.begin()

        result = instant_loop.play_move("Nxe5")

        assert result.move == "Nxe5"
        assert result.reply == "Qf6"
        assert result.feedback == "Opponent played Qf6. There's one best response here."

    def test_learner_waits_for_reply(self, loop, manual_scheduler):
        """Moves during the thinking delay are refused."""
        loop.begin()

        result = loop.play_text("Nxe5")

        assert not result.success
        assert result.errors == ["Wait for the opponent's reply."]


class TestLearnerMoves:
    """Tests for learner input."""

    def test_squares_are_normalized(self, instant_loop):
        instant_loop.begin()

        result = instant_loop.play_squares("f3", "e5")

        assert result.success
        assert result.move == "Nxe5"
        assert instant_loop.engine.path[-2:] == ("Nxe5", "Qf6")

    def test_text_is_normalized(self, instant_loop):
        instant_loop.begin()

        result = instant_loop.play_text("f3e5")

        assert result.success
        assert result.move == "Nxe5"

    def test_illegal_move_never_reaches_engine(self, instant_loop):
        """The oracle rejects moves that are not legal in the game."""
        instant_loop.begin()
        before = instant_loop.engine.snapshot()

        result = instant_loop.play_squares("e1", "e3")

        assert not result.success
        assert result.errors
        assert instant_loop.engine.snapshot() == before

    def test_off_book_move(self, instant_loop):
        instant_loop.begin()

        result = instant_loop.play_squares("d2", "d4")

        assert not result.success
        assert result.move == "d4"
        assert result.feedback == '"d4" is not the correct move. Try again!'
        assert instant_loop.state == LoopState.WAITING_LEARNER

    def test_line_completion(self, instant_loop):
        instant_loop.begin()
        instant_loop.play_move("Nxe5")

        result = instant_loop.play_text("d4")

        assert result.success
        assert result.feedback == "Great! You played d4. This line is complete!"
        assert result.annotation == "White is better."
        assert instant_loop.state == LoopState.COMPLETE

    def test_move_after_completion(self, instant_loop):
        instant_loop.begin()
        instant_loop.play_move("Nxe5")
        instant_loop.play_move("d4")

        result = instant_loop.play_move("Qe7")

        assert not result.success
        assert result.errors == ["This line is complete. Reset to practice again."]

    def test_text_without_oracle(self, engine):
        """Without an oracle typed text is used as the label."""
        loop = DrillLoop(engine)
        loop.begin()

        assert loop.play_text(" Nxe5 ").move == "Nxe5"

    def test_position(self, instant_loop, oracle):
        instant_loop.begin()

        assert instant_loop.position() == oracle.position(SAMPLE_PREFIX + ["f5"])
        assert DrillLoop(instant_loop.engine).position() is None


class TestBrokenBookLine:
    """Tests for a tree whose authored reply is not a legal move."""

    @pytest.fixture
    def broken_loop(self, oracle) -> DrillLoop:
        tree = parse_opening_tree({
            "move": None,
            "children": {"e4": {"children": {"Qxh7": {"children": {"Nf3": {}}}}}},
        })
        engine = SessionEngine.start(tree, ["e4"], policy=FirstReplyPolicy())
        return DrillLoop(engine, oracle=oracle)

    def test_typed_move_is_rejected(self, broken_loop):
        broken_loop.begin()
        before = broken_loop.engine.snapshot()

        result = broken_loop.play_text("Nf3")

        assert not result.success
        assert "not a legal game" in result.errors[0]
        assert broken_loop.engine.snapshot() == before

    def test_square_move_is_rejected(self, broken_loop):
        broken_loop.begin()

        result = broken_loop.play_squares("g1", "f3")

        assert not result.success
        assert broken_loop.state == LoopState.WAITING_LEARNER

    def test_no_position(self, broken_loop):
        broken_loop.begin()
        assert broken_loop.position() is None


class TestReset:
    """Tests for resetting with a reply pending."""

    def test_reset_drops_pending_reply(self, loop, manual_scheduler):
        loop.begin()
        manual_scheduler.run_all()
        loop.play_move("Nxe5")
        assert loop.reply_pending

        result = loop.reset()

        assert result.feedback == "Drill restarted."
        assert loop.engine.path == tuple(SAMPLE_PREFIX)
        assert manual_scheduler.pending == 2

        # The reply scheduled before the reset does nothing
        manual_scheduler.run_next()
        assert loop.engine.path == tuple(SAMPLE_PREFIX)
        assert loop.engine.turn == Turn.AUTOMATED_TO_MOVE
        assert loop.reply_pending

        manual_scheduler.run_next()
        assert loop.engine.path == tuple(SAMPLE_PREFIX) + ("f5",)
        assert not loop.reply_pending

    def test_reset_after_completion(self, instant_loop):
        instant_loop.begin()
        instant_loop.play_move("Nxe5")
        instant_loop.play_move("d4")

        result = instant_loop.reset()

        assert result.success
        assert result.reply == "f5"
        assert instant_loop.state == LoopState.WAITING_LEARNER

    def test_toggle_then_reset(self, instant_loop):
        instant_loop.begin()
        instant_loop.toggle_variation("f5")

        result = instant_loop.reset()

        assert result.reply == "Be7"


class TestDefaultScheduler:
    """Tests for the default scheduler."""

    def test_runs_now_without_delay(self):
        calls = []
        assert default_scheduler(0, lambda: calls.append(1)) is None
        assert calls == [1]

    def test_runs_now_without_event_loop(self):
        calls = []
        default_scheduler(5.0, lambda: calls.append(1))
        assert calls == [1]

    def test_uses_running_loop(self):
        import asyncio

        async def scenario():
            calls = []
            handle = default_scheduler(0.01, lambda: calls.append(1))
            assert calls == []
            await asyncio.sleep(0.05)
            return handle, calls

        handle, calls = asyncio.run(scenario())
        assert handle is not None
        assert calls == [1]


class TestSessionManager:
    """Tests for session lifecycle."""

    @pytest.fixture
    def manager(self, oracle):
        return SessionManager(oracle=oracle)

    def test_create_catalog_session(self, manager):
        session = manager.create_session("scotch-gambit", seed=3)

        assert session.session_id in manager.list_active_sessions()
        assert session.engine.path == tuple(SCOTCH_GAMBIT_PREFIX)
        assert session.state == SessionState.OPPONENT_THINKING
        assert session.metadata["seed"] == 3

    def test_session_states_follow_turns(self, manager):
        session = manager.create_session("scotch-gambit", policy=FirstReplyPolicy())

        session.loop.begin()
        assert session.state == SessionState.YOUR_TURN

    def test_unknown_opening(self, manager):
        with pytest.raises(UnknownOpeningError):
            manager.create_session("kings-gambit")

    def test_end_session(self, manager):
        session = manager.create_session("scotch-gambit")

        assert manager.end_session(session.session_id)
        assert session.state == SessionState.ENDED
        assert manager.get_session(session.session_id) is None
        assert not manager.end_session(session.session_id)

    def test_sessions_are_independent(self, manager):
        first = manager.create_session("scotch-gambit", policy=FirstReplyPolicy())
        second = manager.create_session("scotch-gambit", policy=FirstReplyPolicy())

        first.loop.begin()

        assert first.engine.turn == Turn.LEARNER_TO_MOVE
        assert second.engine.turn == Turn.AUTOMATED_TO_MOVE
        assert first.opening.tree is not None

    def test_cleanup_stale_sessions(self, manager):
        session = manager.create_session("scotch-gambit")
        session.created_at -= 7200
        manager.create_session("scotch-gambit")

        assert manager.cleanup_stale_sessions(max_age_seconds=3600) == 1
        assert len(manager.list_active_sessions()) == 1
