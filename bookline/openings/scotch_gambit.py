"""
Scotch Gambit - The bundled opening.

1.e4 e5 2.Nf3 Nc6 3.d4 exd4 4.Bc4

The learner plays White. The drill starts after 4.Bc4 with Black
to move; Black's first reply is the branch the learner can filter.

The tree is authored in the loader's input schema so it goes
through the same validation as any user-supplied file.
"""

SCOTCH_GAMBIT_PREFIX = ["e4", "e5", "Nf3", "Nc6", "d4", "exd4", "Bc4"]


def _line(*moves, comment=None, end=True):
    """Build a single forced line of nodes, innermost last."""
    node = {"move": moves[-1], "children": {}}
    if comment:
        node["comment"] = comment
    if end:
        node["isEndOfVariation"] = True
    for move in reversed(moves[:-1]):
        node = {"move": move, "children": {node["move"]: node}}
    return node


def _after_bc5():
    return {
        "move": "Bc5",
        "frequency": 0.45,
        "comment": "The most common reply, keeping the extra pawn for now.",
        "children": {
            "c3": {
                "move": "c3",
                "comment": "Offer a second pawn for quick development.",
                "children": {
                    "Nf6": {
                        "move": "Nf6",
                        "frequency": 0.6,
                        "children": {
                            "e5": _line(
                                "e5", "d5", "Bb5", "Ne4", "cxd4", "Bb6",
                                comment="White regains the pawn with a space advantage.",
                            ),
                        },
                    },
                    "dxc3": {
                        "move": "dxc3",
                        "frequency": 0.4,
                        "children": {
                            "Nxc3": _line(
                                "Nxc3", "d6", "Qb3",
                                comment="Strong pressure on f7 for the sacrificed pawn.",
                            ),
                        },
                    },
                },
            },
        },
    }


def _after_nf6():
    return {
        "move": "Nf6",
        "frequency": 0.35,
        "comment": "Transposes to the Two Knights Defense.",
        "children": {
            "e5": {
                "move": "e5",
                "comment": "Kick the knight and gain space.",
                "children": {
                    "d5": {
                        "move": "d5",
                        "frequency": 0.8,
                        "children": {
                            "Bb5": _line(
                                "Bb5", "Ne4", "Nxd4", "Bd7", "Bxc6", "bxc6",
                                comment="White has regained the pawn with a pleasant game.",
                            ),
                        },
                    },
                    "Ng4": {
                        "move": "Ng4",
                        "frequency": 0.2,
                        "children": {
                            "O-O": _line(
                                "O-O", "d6", "exd6", "Bxd6", "Re1+", "Kf8",
                                comment="Black has lost the right to castle.",
                            ),
                        },
                    },
                },
            },
        },
    }


def _after_be7():
    return {
        "move": "Be7",
        "frequency": 0.15,
        "comment": "Solid but passive.",
        "children": {
            "Nxd4": _line(
                "Nxd4", "d6", "Nxc6", "bxc6", "O-O",
                comment="White is ahead in development.",
            ),
        },
    }


def _after_bb4():
    return {
        "move": "Bb4+",
        "frequency": 0.05,
        "comment": "A rare check.",
        "children": {
            "c3": {
                "move": "c3",
                "children": {
                    "dxc3": {
                        "move": "dxc3",
                        "children": {
                            "O-O": {
                                "move": "O-O",
                                "comment": "The gambit is in full swing; the line ends here.",
                                "isEndOfVariation": True,
                                "children": {
                                    "cxb2": _line("cxb2", "Bxb2"),
                                },
                            },
                        },
                    },
                },
            },
        },
    }


def create_scotch_gambit_tree() -> dict:
    """Create the raw Scotch Gambit tree (loader input schema)."""
    black_replies = [_after_bc5(), _after_nf6(), _after_be7(), _after_bb4()]

    node = {
        "move": "Bc4",
        "comment": "The Scotch Gambit: development before material.",
        "children": {reply["move"]: reply for reply in black_replies},
    }
    for move in reversed(SCOTCH_GAMBIT_PREFIX[:-1]):
        node = {"move": move, "children": {node["move"]: node}}

    return {"move": None, "children": {"e4": node}}
