"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the exact contract between a drill UI and the engine.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has ended
- UNKNOWN_OPENING: Opening id is not in the catalog
- INVALID_TREE: Opening tree failed validation
- ILLEGAL_TRANSITION: Operation not allowed in the current turn
- VALIDATION_ERROR: Request body is invalid
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class SessionStatus(str, Enum):
    """Session status values."""
    OPPONENT_THINKING = "opponent_thinking"
    YOUR_TURN = "your_turn"
    LINE_COMPLETE = "line_complete"
    ENDED = "ended"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    UNKNOWN_OPENING = "UNKNOWN_OPENING"
    INVALID_TREE = "INVALID_TREE"
    ILLEGAL_TRANSITION = "ILLEGAL_TRANSITION"
    VALIDATION_ERROR = "VALIDATION_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class OpeningInfo(BaseModel):
    """Catalog entry for display."""
    opening_id: str
    name: str
    prefix: list[str] = Field(default_factory=list)
    description: str = ""


class VariationInfo(BaseModel):
    """A reply at the first branch, with whether the learner enabled it."""
    move: str
    annotation: str = ""
    weight: Optional[float] = Field(None, ge=0.0, le=1.0)
    probability: float = Field(..., ge=0.0, le=1.0)
    selected: bool = True


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request to create a new drill session."""
    opening_id: str = Field("scotch-gambit", description="Catalog opening id")
    seed: Optional[int] = Field(None, description="Seed for reproducible replies")


class MoveRequest(BaseModel):
    """
    A learner move.

    Either board squares (from a drag) or typed text (SAN or squares).
    """
    from_square: Optional[str] = Field(None, description="Source square, e.g. e2")
    to_square: Optional[str] = Field(None, description="Target square, e.g. e4")
    promotion: Optional[str] = Field(None, description="Promotion piece: q, r, b, n")
    move: Optional[str] = Field(None, description="Typed move, e.g. Nf3 or g1f3")


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class SessionResponse(BaseModel):
    """Snapshot of a drill session."""
    session_id: str
    opening_id: str
    opening_name: str
    status: SessionStatus
    path: list[str] = Field(default_factory=list)
    prefix_length: int = 0
    position: Optional[str] = Field(None, description="FEN of the current position")
    possible_moves: list[str] = Field(
        default_factory=list, description="Book continuations from the current node"
    )
    annotation: Optional[str] = None
    allowed_replies: list[str] = Field(default_factory=list)
    epoch: int = 0
    feedback: str = ""
    reply_pending: bool = False
    created_at: float = 0.0
    api_version: str = "v1"


class MoveResponse(BaseModel):
    """Result of submitting a learner move."""
    session_id: str
    accepted: bool
    move: Optional[str] = None
    reply: Optional[str] = Field(None, description="Automated reply played right away")
    reply_scheduled: bool = False
    feedback: str = ""
    errors: list[str] = Field(default_factory=list)
    session: SessionResponse
    api_version: str = "v1"


class VariationsResponse(BaseModel):
    """Replies at the first branch."""
    session_id: str
    variations: list[VariationInfo] = Field(default_factory=list)


class ToggleVariationResponse(BaseModel):
    """Result of toggling a variation."""
    session_id: str
    move: str
    changed: bool
    allowed_replies: list[str] = Field(default_factory=list)


class OpeningListResponse(BaseModel):
    """Catalog listing."""
    openings: list[OpeningInfo]
    count: int


class SessionListResponse(BaseModel):
    """Response listing active sessions."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    """Response after ending a session."""
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
