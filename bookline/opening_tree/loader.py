"""
Opening Tree Loader - Validates untrusted input into a MoveNode tree.

Input schema (nested JSON-like records):
    {
        "move": str | null,             # null at the root
        "comment": str,                 # optional
        "children": {label: <node>},
        "frequency": number in [0, 1],  # optional
        "isEndOfVariation": bool        # optional
    }

Normalization rules:
1. move is coerced to a string (empty/missing becomes None)
2. frequency outside [0, 1] or not a number is dropped, not rejected
3. isEndOfVariation is honored only when exactly true
4. children must be a mapping; every entry must be a valid node

A malformed descendant fails the whole load. A corrupt training
script must never show the learner an incomplete line, so no
partial tree is ever returned.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from numbers import Real
from pathlib import Path
from typing import Any, Mapping
import json
import logging

from ..errors import BooklineError
from .node import MoveNode

logger = logging.getLogger(__name__)


class ValidationError(BooklineError):
    """Raised when opening tree input is malformed."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(
            f"Opening tree validation failed with {len(errors)} error(s): "
            + "; ".join(errors[:3])
        )


@dataclass
class LoadResult:
    """
    Tagged result of loading an opening tree.

    Either ok with a tree, or not ok with the reasons.
    """
    ok: bool
    tree: MoveNode | None = None
    errors: list[str] = field(default_factory=list)

    @classmethod
    def success(cls, tree: MoveNode) -> LoadResult:
        return cls(ok=True, tree=tree)

    @classmethod
    def failure(cls, errors: list[str]) -> LoadResult:
        return cls(ok=False, errors=errors)


def parse_opening_tree(raw: Any) -> MoveNode:
    """
    Parse raw input into an opening tree.

    Raises:
        ValidationError: if the input or any descendant is malformed
    """
    if not isinstance(raw, Mapping):
        raise ValidationError(["Opening tree must be a mapping"])

    errors: list[str] = []
    tree = _parse_node(raw, "root", errors, set())
    if errors:
        raise ValidationError(errors)
    return tree


def load_opening_tree(raw: Any) -> LoadResult:
    """
    Load an opening tree without raising.

    Returns LoadResult with the tree, or with the validation errors.
    """
    try:
        tree = parse_opening_tree(raw)
    except ValidationError as e:
        logger.warning("Rejected opening tree: %s", e)
        return LoadResult.failure(e.errors)
    return LoadResult.success(tree)


def load_opening_tree_file(path: str | Path) -> LoadResult:
    """Load an opening tree from a JSON file."""
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError:
        return LoadResult.failure([f"File not found: {path}"])
    except json.JSONDecodeError as e:
        return LoadResult.failure([f"Invalid JSON in {path}: {e}"])

    return load_opening_tree(raw)


def _parse_node(
    raw: Any,
    location: str,
    errors: list[str],
    seen: set[int],
) -> MoveNode | None:
    """Parse one node, appending problems to errors."""
    if not isinstance(raw, Mapping):
        errors.append(f"{location}: node must be a mapping, got {type(raw).__name__}")
        return None

    if id(raw) in seen:
        errors.append(f"{location}: node contains itself")
        return None
    seen = seen | {id(raw)}

    move = raw.get("move")
    move = str(move) if move else None

    comment = raw.get("comment")
    annotation = str(comment) if comment else None

    weight = _parse_weight(raw.get("frequency"))
    terminal = raw.get("isEndOfVariation") is True

    children: dict[str, MoveNode] = {}
    raw_children = raw.get("children")
    if raw_children is not None:
        if not isinstance(raw_children, Mapping):
            errors.append(
                f"{location}.children: must be a mapping, got {type(raw_children).__name__}"
            )
        else:
            for label, raw_child in raw_children.items():
                if not isinstance(label, str) or not label:
                    errors.append(f"{location}.children: invalid move label {label!r}")
                    continue
                child = _parse_node(raw_child, f"{location}.children.{label}", errors, seen)
                if child is not None:
                    children[label] = child

    return MoveNode(
        move=move,
        children=children,
        annotation=annotation,
        weight=weight,
        terminal=terminal,
    )


def _parse_weight(value: Any) -> float | None:
    """Keep a frequency only if it is a number within [0, 1]."""
    # bool is a Real subclass; true/false is not a frequency
    if isinstance(value, bool) or not isinstance(value, Real):
        return None
    value = float(value)
    if not 0.0 <= value <= 1.0:
        return None
    return value
