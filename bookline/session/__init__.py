"""
Session Module - Manages ephemeral drill sessions.

A session represents one learner drilling one opening:
- Created when the learner starts a drill
- Holds the engine positioned in the opening tree
- Schedules the automated side's replies
- Destroyed when the learner leaves

Sessions are EPHEMERAL:
- No persistence to database
- Nothing survives a restart
- Only the immutable opening tree is shared
"""

from .manager import SessionManager, Session, SessionState
from .drill_loop import DrillLoop, LoopState, TurnResult, default_scheduler

__all__ = [
    "SessionManager",
    "Session",
    "SessionState",
    "DrillLoop",
    "LoopState",
    "TurnResult",
    "default_scheduler",
]
