"""Legality - oracles that normalize board input into move labels."""

from .oracle import LegalityOracle, ChessLegalityOracle, OracleVerdict

__all__ = [
    "LegalityOracle",
    "ChessLegalityOracle",
    "OracleVerdict",
]
