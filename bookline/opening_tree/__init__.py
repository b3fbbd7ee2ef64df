"""Opening tree - immutable move tree, validating loader and queries."""

from .node import MoveNode, DEFAULT_WEIGHT
from .loader import (
    parse_opening_tree,
    load_opening_tree,
    load_opening_tree_file,
    LoadResult,
    ValidationError,
)
from .navigation import (
    navigate_to_path,
    is_legal_in_tree,
    possible_moves,
    tree_depth,
    terminal_paths,
)

__all__ = [
    "MoveNode",
    "DEFAULT_WEIGHT",
    "parse_opening_tree",
    "load_opening_tree",
    "load_opening_tree_file",
    "LoadResult",
    "ValidationError",
    "navigate_to_path",
    "is_legal_in_tree",
    "possible_moves",
    "tree_depth",
    "terminal_paths",
]
