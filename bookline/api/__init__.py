"""
API Module - Drill UI interface.

Exposes drill sessions via REST API. A UI:
1. Lists openings and creates a drill session
2. Submits learner moves (board squares or typed text)
3. Polls the session for the automated side's reply
4. Toggles variations and resets the drill

All state is session-scoped. No persistent user accounts required.
"""

from .schemas import (
    # Requests
    CreateSessionRequest,
    MoveRequest,
    # Responses
    SessionResponse,
    MoveResponse,
    VariationsResponse,
    ToggleVariationResponse,
    OpeningListResponse,
    ErrorResponse,
    # Shared
    OpeningInfo,
    VariationInfo,
    SessionStatus,
    ErrorCode,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CreateSessionRequest",
    "MoveRequest",
    # Responses
    "SessionResponse",
    "MoveResponse",
    "VariationsResponse",
    "ToggleVariationResponse",
    "OpeningListResponse",
    "ErrorResponse",
    # Shared
    "OpeningInfo",
    "VariationInfo",
    "SessionStatus",
    "ErrorCode",
    # Service
    "APIService",
    "create_app",
]
