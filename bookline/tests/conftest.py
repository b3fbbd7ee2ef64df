"""
Pytest fixtures for Bookline tests.
"""

import pytest

from ..opening_tree import MoveNode, parse_opening_tree
from ..engine_core import SessionEngine
from ..bots import FirstReplyPolicy, WeightedReplyPolicy
from ..legality import ChessLegalityOracle


# 1.e4 e5 2.Nf3, then Black picks a reply
SAMPLE_PREFIX = ["e4", "e5", "Nf3"]


class ManualScheduler:
    """Scheduler that holds callbacks until the test runs them."""

    def __init__(self):
        self.calls = []

    def __call__(self, delay, callback):
        self.calls.append((delay, callback))
        return None

    @property
    def pending(self) -> int:
        return len(self.calls)

    def run_next(self):
        _, callback = self.calls.pop(0)
        callback()

    def run_all(self):
        while self.calls:
            self.run_next()


@pytest.fixture
def sample_raw_tree() -> dict:
    """Raw opening tree with a two-way first branch."""
    return {
        "move": None,
        "children": {
            "e4": {
                "move": "e4",
                "children": {
                    "e5": {
                        "move": "e5",
                        "children": {
                            "Nf3": {
                                "move": "Nf3",
                                "children": {
                                    "f5": {
                                        "move": "f5",
                                        "comment": "Latvian Gambit",
                                        "frequency": 0.7,
                                        "children": {
                                            "Nxe5": {
                                                "move": "Nxe5",
                                                "children": {
                                                    "Qf6": {
                                                        "move": "Qf6",
                                                        "frequency": 0.6,
                                                        "children": {
                                                            "d4": {
                                                                "move": "d4",
                                                                "comment": "White is better.",
                                                                "isEndOfVariation": True,
                                                                "children": {},
                                                            },
                                                        },
                                                    },
                                                    "Nc6": {
                                                        "move": "Nc6",
                                                        "frequency": 0.4,
                                                        "children": {
                                                            "Nxc6": {
                                                                "move": "Nxc6",
                                                                "isEndOfVariation": True,
                                                                "children": {},
                                                            },
                                                        },
                                                    },
                                                },
                                            },
                                        },
                                    },
                                    "Be7": {
                                        "move": "Be7",
                                        "frequency": 0.3,
                                        "children": {
                                            "Bc4": {
                                                "move": "Bc4",
                                                "children": {
                                                    "Nf6": {
                                                        "move": "Nf6",
                                                        "children": {
                                                            "d3": {"move": "d3", "children": {}},
                                                        },
                                                    },
                                                },
                                            },
                                        },
                                    },
                                },
                            },
                        },
                    },
                },
            },
        },
    }


@pytest.fixture
def sample_tree(sample_raw_tree) -> MoveNode:
    """Parsed sample tree."""
    return parse_opening_tree(sample_raw_tree)


@pytest.fixture
def engine(sample_tree) -> SessionEngine:
    """Engine positioned after the sample prefix, playing first replies."""
    return SessionEngine.start(sample_tree, SAMPLE_PREFIX, policy=FirstReplyPolicy())


@pytest.fixture
def weighted_engine(sample_tree) -> SessionEngine:
    """Engine with a seeded weighted policy."""
    return SessionEngine.start(sample_tree, SAMPLE_PREFIX, policy=WeightedReplyPolicy(seed=7))


@pytest.fixture
def oracle() -> ChessLegalityOracle:
    return ChessLegalityOracle()


@pytest.fixture
def manual_scheduler() -> ManualScheduler:
    return ManualScheduler()
