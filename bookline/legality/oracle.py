"""
Legality Oracle - Turns board input into move labels.

The drill engine only checks book membership. Whether a drag from
one square to another is a legal move of the game at all is the
oracle's job, and it runs first: only a normalized label ever
reaches SessionEngine.submit_player_move().
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable
import logging

import chess

from ..opening_tree.node import MoveNode
from ..opening_tree.navigation import terminal_paths

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OracleVerdict:
    """
    Oracle answer for a proposed move.

    Either a normalized label, or a rejection reason.
    """
    label: str | None = None
    reason: str | None = None

    @property
    def legal(self) -> bool:
        return self.label is not None

    @classmethod
    def accept(cls, label: str) -> OracleVerdict:
        return cls(label=label)

    @classmethod
    def reject(cls, reason: str) -> OracleVerdict:
        return cls(reason=reason)


class LegalityOracle(ABC):
    """
    Abstract base class for game legality oracles.
    """

    @abstractmethod
    def normalize(
        self,
        path: Iterable[str],
        from_square: str,
        to_square: str,
        promotion: str | None = None,
    ) -> OracleVerdict:
        """
        Check a proposed move in the position reached by path.

        Args:
            path: Move labels played so far from the initial position
            from_square: Source square (e.g. "e2")
            to_square: Target square (e.g. "e4")
            promotion: Optional promotion piece letter

        Returns:
            OracleVerdict with the move label or a rejection reason
        """
        pass

    @abstractmethod
    def normalize_text(self, path: Iterable[str], text: str) -> OracleVerdict:
        """Check a move typed by the learner in the position reached by path."""
        pass

    @abstractmethod
    def position(self, path: Iterable[str]) -> str | None:
        """Get a position identifier (FEN), or None if path is not a legal game."""
        pass



class ChessLegalityOracle(LegalityOracle):
    """
    Chess oracle backed by python-chess.

    Labels are SAN. A pawn reaching the last rank without an explicit
    promotion piece is promoted to a queen.
    """

    def __init__(self, starting_fen: str = chess.STARTING_FEN):
        self.starting_fen = starting_fen

    def board(self, path: Iterable[str]) -> chess.Board:
        """
        Replay path from the starting position.

        Every label must be the canonical SAN python-chess writes for
        that move ("Re1+", not "Re1").

        Raises:
            ValueError: if a label in path is not legal, canonical SAN
        """
        board = chess.Board(self.starting_fen)
        for label in path:
            move = board.parse_san(label)
            san = board.san(move)
            if san != label:
                raise ValueError(f"book move {label!r} should be written {san!r}")
            board.push(move)
        return board

    def normalize(
        self,
        path: Iterable[str],
        from_square: str,
        to_square: str,
        promotion: str | None = None,
    ) -> OracleVerdict:
        try:
            board = self.board(path)
        except ValueError as e:
            return _broken_line(e)

        try:
            source = chess.parse_square(from_square.lower())
            target = chess.parse_square(to_square.lower())
        except ValueError:
            return OracleVerdict.reject(f"Unknown square: {from_square}-{to_square}")

        try:
            piece_type = chess.Piece.from_symbol(promotion).piece_type if promotion else None
        except ValueError:
            return OracleVerdict.reject(f"Unknown promotion piece: {promotion}")

        move = _with_auto_queen(board, chess.Move(source, target, promotion=piece_type))
        if move not in board.legal_moves:
            return OracleVerdict.reject(f"{from_square}{to_square} is not a legal move")

        return OracleVerdict.accept(board.san(move))

    def normalize_text(self, path: Iterable[str], text: str) -> OracleVerdict:
        """Check a move typed as SAN or UCI (e.g. "Nf3" or "g1f3")."""
        try:
            board = self.board(path)
        except ValueError as e:
            return _broken_line(e)
        text = text.strip()

        try:
            move = board.parse_san(text)
        except ValueError:
            try:
                move = chess.Move.from_uci(text.lower())
            except ValueError:
                return OracleVerdict.reject(f"Cannot read move: {text}")
            move = _with_auto_queen(board, move)
            if move not in board.legal_moves:
                return OracleVerdict.reject(f"{text} is not a legal move")

        return OracleVerdict.accept(board.san(move))

    def position(self, path: Iterable[str]) -> str | None:
        path = list(path)
        try:
            return self.board(path).fen()
        except ValueError:
            logger.warning("No position for book line %s", " ".join(path))
            return None

    def unplayable_lines(self, tree: MoveNode) -> list[list[str]]:
        """
        Find book lines that are not legal games.

        Returns every terminal path containing a move that is not
        legal, canonical SAN in the position where it occurs.
        """
        bad: list[list[str]] = []
        for line in terminal_paths(tree):
            try:
                self.board(line)
            except ValueError:
                bad.append(line)
        return bad


def _with_auto_queen(board: chess.Board, move: chess.Move) -> chess.Move:
    """Promote to a queen when a pawn move needs a piece and none was given."""
    if move.promotion is None and move not in board.legal_moves:
        queen_move = chess.Move(move.from_square, move.to_square, promotion=chess.QUEEN)
        if queen_move in board.legal_moves:
            return queen_move
    return move


def _broken_line(error: ValueError) -> OracleVerdict:
    logger.warning("Book line is not a legal game: %s", error)
    return OracleVerdict.reject(f"Book line is not a legal game: {error}")
