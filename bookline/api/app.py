"""
FastAPI Application - REST API for drill UIs.

Endpoints:
    GET    /api/v1/openings                          List catalog openings
    POST   /api/v1/sessions                          Create drill session
    GET    /api/v1/sessions                          List active sessions
    GET    /api/v1/sessions/{id}                     Get session snapshot
    DELETE /api/v1/sessions/{id}                     End session
    POST   /api/v1/sessions/{id}/moves               Submit learner move
    GET    /api/v1/sessions/{id}/variations          First-branch replies
    POST   /api/v1/sessions/{id}/variations/{move}   Toggle a variation
    POST   /api/v1/sessions/{id}/reset               Restart the drill

Reply Flow:
    1. POST /moves checks legality, then the book
    2. If the move is accepted and the line goes on, the automated
       reply is scheduled after BOOKLINE_REPLY_DELAY seconds
    3. The UI polls GET /sessions/{id} until status is your_turn
    4. POST /reset drops any reply still pending

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Union
import logging
import os

# Environment configuration
BOOKLINE_ENV = os.getenv("BOOKLINE_ENV", "development")
BOOKLINE_REPLY_DELAY = float(os.getenv("BOOKLINE_REPLY_DELAY", "1.0"))
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

logger = logging.getLogger(__name__)


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    from .service import APIService
    from .schemas import (
        # Request models
        CreateSessionRequest,
        MoveRequest,
        # Response models
        SessionResponse,
        MoveResponse,
        VariationsResponse,
        ToggleVariationResponse,
        OpeningListResponse,
        ErrorResponse,
        SessionListResponse,
        EndSessionResponse,
        HealthResponse,
        # Enums
        ErrorCode,
    )
    from ..engine_core import IllegalTransitionError
    from ..opening_tree import ValidationError
    from ..openings import UnknownOpeningError
    from ..session import SessionManager
    from .. import __version__

    app = FastAPI(
        title="Bookline API",
        description="""
Opening book drills - practice a repertoire against weighted replies.

## Reply Flow

After a learner move via `POST /moves`:

1. **Rejected** (`accepted=false`): the position is unchanged, try again
2. **Accepted, line complete**: reset to practice again
3. **Accepted, line goes on**: the reply arrives after a short delay
   (`reply_scheduled=true`); poll the session until it is `your_turn`

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `UNKNOWN_OPENING` | Opening id is not in the catalog |
| `INVALID_TREE` | Opening tree failed validation |
| `ILLEGAL_TRANSITION` | Operation not allowed in the current turn |
| `VALIDATION_ERROR` | Request body is invalid |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Service instance
    api_service = service or APIService(
        session_manager=SessionManager(reply_delay=BOOKLINE_REPLY_DELAY),
    )

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: dict | None = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def from_service(response, status_code: int = 404):
        """Turn a service-level ErrorResponse into a JSONResponse."""
        if isinstance(response, ErrorResponse):
            if response.error_code != ErrorCode.SESSION_NOT_FOUND:
                status_code = 400
            return make_error_response(
                response.error_code,
                response.error,
                status_code=status_code,
                details=response.details,
            )
        return response

    @app.exception_handler(IllegalTransitionError)
    async def illegal_transition_handler(request, exc: IllegalTransitionError):
        return make_error_response(
            ErrorCode.ILLEGAL_TRANSITION,
            str(exc),
            status_code=409,
            details={"operation": exc.operation, "turn": exc.turn.value},
        )

    @app.exception_handler(ValidationError)
    async def invalid_tree_handler(request, exc: ValidationError):
        return make_error_response(
            ErrorCode.INVALID_TREE,
            str(exc),
            status_code=400,
            details={"errors": exc.errors},
        )

    # =========================================================================
    # Opening Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/openings",
        response_model=OpeningListResponse,
        tags=["Openings"],
        summary="List catalog openings",
    )
    async def list_openings() -> OpeningListResponse:
        """List the openings that can be drilled."""
        return api_service.list_openings()

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Unknown opening or invalid tree"},
        },
        tags=["Sessions"],
        summary="Create a new drill session",
    )
    async def create_session(
        body: CreateSessionRequest | None = None,
    ) -> Union[SessionResponse, JSONResponse]:
        """
        Create a new drill session.

        The automated side's first reply is played (or scheduled)
        right away.
        """
        request = body or CreateSessionRequest()
        try:
            return api_service.create_session(request)
        except UnknownOpeningError as e:
            return make_error_response(
                ErrorCode.UNKNOWN_OPENING,
                str(e),
                details={"opening_id": request.opening_id},
            )

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active sessions",
    )
    async def list_sessions() -> SessionListResponse:
        """List all active session IDs."""
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session snapshot",
    )
    async def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        """Get the current state of a drill session."""
        return from_service(api_service.get_session(session_id))

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a drill session",
    )
    async def end_session(session_id: str) -> EndSessionResponse:
        """End a drill session and drop any pending reply."""
        success = api_service.end_session(session_id)
        return EndSessionResponse(success=success, session_id=session_id)

    # =========================================================================
    # Drill Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions/{session_id}/moves",
        response_model=MoveResponse,
        responses={
            400: {"model": ErrorResponse, "description": "No move given"},
            404: {"model": ErrorResponse},
        },
        tags=["Drill"],
        summary="Submit a learner move",
    )
    async def submit_move(
        session_id: str,
        body: MoveRequest,
    ) -> Union[MoveResponse, JSONResponse]:
        """
        Submit a learner move as board squares or typed text.

        A rejected move (illegal, off-book or out of turn) comes back
        with `accepted=false` and the position unchanged.
        """
        return from_service(api_service.submit_move(session_id, body))

    @app.get(
        "/api/v1/sessions/{session_id}/variations",
        response_model=VariationsResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Drill"],
        summary="List first-branch replies",
    )
    async def get_variations(session_id: str) -> Union[VariationsResponse, JSONResponse]:
        """Replies the automated side may choose at the first branch."""
        return from_service(api_service.get_variations(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/variations/{move}",
        response_model=ToggleVariationResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Drill"],
        summary="Toggle a variation",
    )
    async def toggle_variation(
        session_id: str,
        move: str,
    ) -> Union[ToggleVariationResponse, JSONResponse]:
        """
        Enable or disable a reply at the first branch.

        Disabling the last enabled reply is a no-op (`changed=false`).
        """
        return from_service(api_service.toggle_variation(session_id, move))

    @app.post(
        "/api/v1/sessions/{session_id}/reset",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Drill"],
        summary="Restart the drill",
    )
    async def reset_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        """Return to the end of the prefix and play a fresh first reply."""
        return from_service(api_service.reset_session(session_id))

    # =========================================================================
    # System Endpoints
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="bookline",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Bookline API",
            "version": __version__,
            "environment": BOOKLINE_ENV,
            "docs": "/api/docs",
            "health": "/health",
        }

    logger.debug("Created app (env=%s, reply delay=%.2fs)", BOOKLINE_ENV, BOOKLINE_REPLY_DELAY)
    return app


# For running directly: uvicorn bookline.api.app:app
app = None
try:
    app = create_app()
except ImportError:
    # FastAPI not installed
    pass
