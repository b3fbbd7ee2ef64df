"""
Tests for the chess legality oracle.

Tests:
- Board squares become SAN labels
- Illegal input is rejected with a reason
- Typed SAN and squares
- Promotion handling
"""

import chess
import pytest

from ..legality import ChessLegalityOracle, OracleVerdict
from ..opening_tree import parse_opening_tree
from .conftest import SAMPLE_PREFIX


class TestNormalize:
    """Tests for square-based input."""

    def test_opening_move(self, oracle):
        verdict = oracle.normalize([], "e2", "e4")

        assert verdict.legal
        assert verdict.label == "e4"

    def test_capture_after_path(self, oracle):
        verdict = oracle.normalize(SAMPLE_PREFIX + ["f5"], "f3", "e5")
        assert verdict.label == "Nxe5"

    def test_castling(self, oracle):
        path = ["e4", "e5", "Nf3", "Nc6", "Bc4", "Bc5"]
        assert oracle.normalize(path, "e1", "g1").label == "O-O"

    def test_uppercase_squares(self, oracle):
        assert oracle.normalize([], "G1", "F3").label == "Nf3"

    def test_illegal_move(self, oracle):
        verdict = oracle.normalize([], "e2", "e5")

        assert not verdict.legal
        assert verdict.label is None
        assert "not a legal move" in verdict.reason

    def test_wrong_side(self, oracle):
        """Black pieces cannot move on White's turn."""
        assert not oracle.normalize([], "e7", "e5").legal

    def test_unknown_square(self, oracle):
        verdict = oracle.normalize([], "z9", "e4")

        assert not verdict.legal
        assert "Unknown square" in verdict.reason

    def test_unknown_promotion_piece(self, oracle):
        verdict = oracle.normalize([], "e2", "e4", promotion="x")
        assert "Unknown promotion" in verdict.reason


class TestPromotion:
    """Tests for pawn promotion."""

    FEN = "8/4P3/8/8/8/8/k7/4K3 w - - 0 1"

    def test_auto_queen(self):
        oracle = ChessLegalityOracle(starting_fen=self.FEN)
        assert oracle.normalize([], "e7", "e8").label == "e8=Q"

    def test_explicit_piece(self):
        oracle = ChessLegalityOracle(starting_fen=self.FEN)
        assert oracle.normalize([], "e7", "e8", promotion="n").label == "e8=N"

    def test_typed_squares_auto_queen(self):
        oracle = ChessLegalityOracle(starting_fen=self.FEN)
        assert oracle.normalize_text([], "e7e8").label == "e8=Q"

    def test_typed_squares_with_piece(self):
        oracle = ChessLegalityOracle(starting_fen=self.FEN)
        assert oracle.normalize_text([], "e7e8r").label == "e8=R"


class TestNormalizeText:
    """Tests for typed input."""

    @pytest.mark.parametrize("text", ["Nf3", "g1f3", " Nf3 ", "G1F3"])
    def test_san_and_squares(self, oracle, text):
        assert oracle.normalize_text([], text).label == "Nf3"

    def test_unreadable(self, oracle):
        verdict = oracle.normalize_text([], "hello")

        assert not verdict.legal
        assert "Cannot read move" in verdict.reason

    def test_illegal_uci(self, oracle):
        verdict = oracle.normalize_text([], "e2e5")

        assert not verdict.legal
        assert "not a legal move" in verdict.reason


class TestPositions:
    """Tests for positions and book checks."""

    def test_position_is_fen(self, oracle):
        assert oracle.position([]) == chess.STARTING_FEN
        assert oracle.position(["e4"]).startswith("rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b")

    def test_invalid_path_raises(self, oracle):
        with pytest.raises(ValueError):
            oracle.board(["e4", "e4"])

    def test_sample_tree_is_playable(self, oracle, sample_tree):
        assert oracle.unplayable_lines(sample_tree) == []

    def test_unplayable_lines(self, oracle):
        tree = parse_opening_tree({
            "move": None,
            "children": {
                "e4": {"children": {"e5": {}, "Ke2": {}}},
            },
        })
        assert oracle.unplayable_lines(tree) == [["e4", "Ke2"]]


class TestOracleVerdict:
    def test_accept_and_reject(self):
        assert OracleVerdict.accept("e4").legal
        assert not OracleVerdict.reject("nope").legal


class TestBrokenPaths:
    """Tests for book paths that are not a legal game."""

    BROKEN = ["e4", "Qxh7"]

    def test_normalize_rejects(self, oracle):
        verdict = oracle.normalize(self.BROKEN, "g1", "f3")

        assert not verdict.legal
        assert "not a legal game" in verdict.reason

    def test_normalize_text_rejects(self, oracle):
        verdict = oracle.normalize_text(self.BROKEN, "Nf3")

        assert not verdict.legal
        assert "not a legal game" in verdict.reason

    def test_position_is_none(self, oracle):
        assert oracle.position(self.BROKEN) is None

    def test_missing_check_sign(self, oracle):
        """Labels must be written the way python-chess writes them."""
        with pytest.raises(ValueError, match="Qh5#"):
            oracle.board(["e4", "f6", "d4", "g5", "Qh5"])

    def test_non_canonical_lines_are_unplayable(self, oracle):
        tree = parse_opening_tree({
            "move": None,
            "children": {
                "e4": {"children": {
                    "f6": {"children": {"d4": {"children": {
                        "g5": {"children": {"Qh5": {}, "Qh5#": {}}},
                    }}}},
                    "e5": {"children": {"Nf3+": {}}},
                }},
            },
        })

        assert oracle.unplayable_lines(tree) == [
            ["e4", "f6", "d4", "g5", "Qh5"],
            ["e4", "e5", "Nf3+"],
        ]
