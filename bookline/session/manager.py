"""
Session Manager - Creates and manages drill sessions.

LIFECYCLE:
1. Opening tree is loaded and validated once (catalog or file)
2. User starts a drill -> create an ephemeral session (in-memory only)
3. During the drill:
   - Automated side replies from the weighted script
   - Learner proposes moves; the oracle checks legality
   - Engine checks the book and advances the line
4. Drill ends -> learner may reset and practice again
5. Session ends -> removed from memory

PERSISTENCE RULES:
- No database
- Nothing survives a process restart
- One engine per session; sessions share only the immutable tree
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
import logging
import time
import uuid

from ..engine_core import SessionEngine, Turn
from ..bots import ReplyPolicy, WeightedReplyPolicy
from ..legality import LegalityOracle, ChessLegalityOracle
from ..openings import LoadedOpening, load_opening
from .drill_loop import DrillLoop, Scheduler

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """State of a drill session."""
    OPPONENT_THINKING = "opponent_thinking"
    YOUR_TURN = "your_turn"
    LINE_COMPLETE = "line_complete"
    ENDED = "ended"


@dataclass
class Session:
    """
    An ephemeral drill session.

    Contains:
    - The loaded opening (shared, immutable)
    - The engine (owned, mutable)
    - The drill loop driving it
    - Session metadata
    """
    session_id: str
    opening: LoadedOpening
    engine: SessionEngine
    loop: DrillLoop
    created_at: float
    ended: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def state(self) -> SessionState:
        if self.ended:
            return SessionState.ENDED
        return {
            Turn.AUTOMATED_TO_MOVE: SessionState.OPPONENT_THINKING,
            Turn.LEARNER_TO_MOVE: SessionState.YOUR_TURN,
            Turn.COMPLETE: SessionState.LINE_COMPLETE,
        }[self.engine.turn]

    def is_active(self) -> bool:
        """Check if session is still active."""
        return not self.ended


class SessionManager:
    """
    Manages drill sessions.

    Responsibilities:
    - Create sessions from loaded openings
    - Track active sessions
    - Clean up ended or stale sessions

    No persistence - sessions are in-memory only.
    """

    def __init__(
        self,
        oracle: LegalityOracle | None = None,
        reply_delay: float = 0.0,
        scheduler: Scheduler | None = None,
    ):
        self._sessions: dict[str, Session] = {}
        self.oracle = oracle or ChessLegalityOracle()
        self.reply_delay = reply_delay
        self.scheduler = scheduler

    def create_session(
        self,
        opening: LoadedOpening | str,
        seed: int | None = None,
        policy: ReplyPolicy | None = None,
    ) -> Session:
        """
        Create a new drill session.

        Args:
            opening: Loaded opening, or a catalog id
            seed: Optional seed for reproducible replies
            policy: Optional reply policy (weighted by default)

        Returns:
            New Session, positioned after the opening prefix
        """
        if isinstance(opening, str):
            opening = load_opening(opening)

        engine = SessionEngine.start(
            opening.tree,
            opening.prefix,
            policy=policy or WeightedReplyPolicy(seed=seed),
        )
        loop = DrillLoop(
            engine,
            oracle=self.oracle,
            reply_delay=self.reply_delay,
            scheduler=self.scheduler,
        )

        session = Session(
            session_id=str(uuid.uuid4()),
            opening=opening,
            engine=engine,
            loop=loop,
            created_at=time.time(),
            metadata={"seed": seed},
        )

        self._sessions[session.session_id] = session
        logger.info("Created session %s for %s", session.session_id, opening.opening_id)
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str) -> bool:
        """
        End a session and remove it from memory.

        Returns False if the session did not exist.
        """
        session = self._sessions.pop(session_id, None)
        if not session:
            return False

        session.loop.cancel_pending()
        session.ended = True
        logger.info("Ended session %s", session_id)
        return True

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """
        End sessions older than max_age.

        Returns the number of sessions removed.
        """
        current_time = time.time()
        stale = [
            session_id for session_id, session in self._sessions.items()
            if current_time - session.created_at > max_age_seconds
        ]

        for session_id in stale:
            self.end_session(session_id)

        return len(stale)
