"""
Engine Core - The drill session state machine.

The engine is the runtime that:
1. Positions a session at the end of a fixed opening prefix
2. Plays the automated side's replies via a ReplyPolicy
3. Checks the learner's moves against the book
4. Detects the end of a line
5. Resets, invalidating stale deferred replies
"""

from .state import Turn, SessionState, SessionSnapshot
from .result import TransitionResult, TransitionEvent, TransitionKind
from .engine import SessionEngine, IllegalTransitionError, PrefixNotFoundError

__all__ = [
    "Turn",
    "SessionState",
    "SessionSnapshot",
    "TransitionResult",
    "TransitionEvent",
    "TransitionKind",
    "SessionEngine",
    "IllegalTransitionError",
    "PrefixNotFoundError",
]
