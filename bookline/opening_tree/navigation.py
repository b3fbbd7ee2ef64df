"""
Tree Navigation - Read-only queries over an opening tree.

The session's core loop only needs navigate_to_path and
is_legal_in_tree. The remaining queries serve tooling (CLI, API
variation listing) and tests.
"""

from __future__ import annotations
from typing import Iterable

from .node import MoveNode


def navigate_to_path(root: MoveNode, moves: Iterable[str]) -> MoveNode | None:
    """
    Walk a sequence of moves from the root.

    Returns the node reached, or None the first time a move
    is not among the current node's children.
    """
    node = root
    for move in moves:
        child = node.child(move)
        if child is None:
            return None
        node = child
    return node


def is_legal_in_tree(node: MoveNode, move: str) -> bool:
    """Check if a move is a book continuation from this node."""
    return node.child(move) is not None


def possible_moves(node: MoveNode) -> list[str]:
    """Get the book continuations from this node."""
    return list(node.children.keys())


def tree_depth(node: MoveNode) -> int:
    """Get the length of the longest line below this node (0 for a leaf)."""
    if node.is_leaf:
        return 0
    return 1 + max(tree_depth(child) for child in node.children.values())


def terminal_paths(node: MoveNode, current_path: list[str] | None = None) -> list[list[str]]:
    """
    Enumerate every line from this node to the end of a variation.

    A line ends at a node marked terminal or at a node with no
    children. Descent stops at a terminal node even if it has children.
    """
    current_path = current_path or []

    if node.ends_line:
        return [list(current_path)]

    paths: list[list[str]] = []
    for move, child in node.children.items():
        paths.extend(terminal_paths(child, current_path + [move]))
    return paths
