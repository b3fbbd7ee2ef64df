"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to drill loop calls
2. Manages sessions
3. Formats responses for the UI

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field

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
    # Enums
    SessionStatus,
    ErrorCode,
)
from ..session import SessionManager, Session, TurnResult
from ..openings import list_openings, available_variations


@dataclass
class APIService:
    """
    Main API service for drill UIs.

    Usage:
        service = APIService()

        # Create session (first reply is played or scheduled)
        session = service.create_session(CreateSessionRequest(opening_id="scotch-gambit"))

        # Submit a learner move
        result = service.submit_move(session.session_id, MoveRequest(move="c3"))
    """
    session_manager: SessionManager = field(default_factory=SessionManager)

    def list_openings(self) -> OpeningListResponse:
        """List catalog openings."""
        openings = [
            OpeningInfo(
                opening_id=source.opening_id,
                name=source.name,
                prefix=list(source.prefix),
                description=source.description,
            )
            for source in list_openings()
        ]
        return OpeningListResponse(openings=openings, count=len(openings))

    def create_session(self, request: CreateSessionRequest) -> SessionResponse:
        """
        Create a new drill session and start it.

        Raises:
            UnknownOpeningError: if the opening id is not in the catalog
        """
        session = self.session_manager.create_session(
            request.opening_id,
            seed=request.seed,
        )
        session.loop.begin()
        return self._session_to_response(session)

    def get_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        """Get session snapshot."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return _not_found(session_id)
        return self._session_to_response(session)

    def submit_move(
        self,
        session_id: str,
        request: MoveRequest,
    ) -> MoveResponse | ErrorResponse:
        """
        Submit a learner move.

        Board squares go through the legality oracle first; typed
        moves are parsed by the oracle. Only a legal move ever reaches
        the engine's book check.
        """
        session = self.session_manager.get_session(session_id)
        if not session:
            return _not_found(session_id)

        if request.from_square and request.to_square:
            result = session.loop.play_squares(
                request.from_square,
                request.to_square,
                request.promotion,
            )
        elif request.move:
            result = session.loop.play_text(request.move)
        else:
            return ErrorResponse(
                error="Provide from_square and to_square, or move",
                error_code=ErrorCode.VALIDATION_ERROR,
            )

        return self._turn_result_to_response(session, result)

    def get_variations(self, session_id: str) -> VariationsResponse | ErrorResponse:
        """Get the replies at the first branch and whether each is enabled."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return _not_found(session_id)

        allowed = session.engine.allowed_replies
        return VariationsResponse(
            session_id=session_id,
            variations=[
                VariationInfo(
                    move=variation.move,
                    annotation=variation.annotation,
                    weight=variation.weight,
                    probability=variation.probability,
                    selected=variation.move in allowed,
                )
                for variation in available_variations(session.opening)
            ],
        )

    def toggle_variation(
        self,
        session_id: str,
        move: str,
    ) -> ToggleVariationResponse | ErrorResponse:
        """Enable or disable a reply at the first branch."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return _not_found(session_id)

        changed = session.loop.toggle_variation(move)
        return ToggleVariationResponse(
            session_id=session_id,
            move=move,
            changed=changed,
            allowed_replies=self._ordered_allowed(session),
        )

    def reset_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        """Restart the drill from the end of the prefix."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return _not_found(session_id)

        session.loop.reset()
        return self._session_to_response(session)

    def end_session(self, session_id: str) -> bool:
        """End a drill session."""
        return self.session_manager.end_session(session_id)

    def list_sessions(self) -> list[str]:
        """List active session IDs."""
        return self.session_manager.list_active_sessions()

    # =========================================================================
    # Helper methods
    # =========================================================================

    def _session_to_response(self, session: Session) -> SessionResponse:
        """Convert Session to SessionResponse."""
        snapshot = session.engine.snapshot()
        return SessionResponse(
            session_id=session.session_id,
            opening_id=session.opening.opening_id,
            opening_name=session.opening.name,
            status=SessionStatus(session.state.value),
            path=list(snapshot.path),
            prefix_length=len(session.engine.prefix),
            position=session.loop.position(),
            possible_moves=list(snapshot.node.children),
            annotation=snapshot.node.annotation,
            allowed_replies=self._ordered_allowed(session),
            epoch=snapshot.epoch,
            feedback=session.loop.feedback,
            reply_pending=session.loop.reply_pending,
            created_at=session.created_at,
        )

    def _turn_result_to_response(self, session: Session, result: TurnResult) -> MoveResponse:
        """Convert a drill loop TurnResult to MoveResponse."""
        return MoveResponse(
            session_id=session.session_id,
            accepted=result.success,
            move=result.move,
            reply=result.reply,
            reply_scheduled=result.reply_scheduled,
            feedback=result.feedback,
            errors=result.errors,
            session=self._session_to_response(session),
        )

    def _ordered_allowed(self, session: Session) -> list[str]:
        """Allowed replies in tree order."""
        allowed = session.engine.allowed_replies
        return [move for move in session.engine.first_branch.children if move in allowed]


def _not_found(session_id: str) -> ErrorResponse:
    return ErrorResponse(
        error=f"Session {session_id} not found",
        error_code=ErrorCode.SESSION_NOT_FOUND,
    )
