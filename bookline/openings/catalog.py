"""
Opening Catalog - Named opening sources for drills.

Each source pairs a raw opening tree with the fixed prefix the
drill starts after. Trees are validated on load; a corrupt tree
never reaches a session.
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Sequence
import logging

from ..errors import BooklineError
from ..opening_tree import (
    MoveNode,
    ValidationError,
    parse_opening_tree,
    load_opening_tree_file,
    navigate_to_path,
)
from ..bots.selection import move_probabilities
from .scotch_gambit import SCOTCH_GAMBIT_PREFIX, create_scotch_gambit_tree

logger = logging.getLogger(__name__)


class UnknownOpeningError(BooklineError):
    """Raised when an opening id is not in the catalog."""

    def __init__(self, opening_id: str):
        self.opening_id = opening_id
        super().__init__(f"Unknown opening source: {opening_id}")


@dataclass(frozen=True)
class OpeningSource:
    """A named opening that can be drilled."""
    opening_id: str
    name: str
    prefix: tuple[str, ...]
    create_raw: Callable[[], Any]
    description: str = ""


@dataclass(frozen=True)
class LoadedOpening:
    """A validated opening tree ready for a session."""
    opening_id: str
    name: str
    tree: MoveNode
    prefix: tuple[str, ...]

    @property
    def first_branch(self) -> MoveNode | None:
        """Node right after the prefix, where the learner picks variations."""
        return navigate_to_path(self.tree, self.prefix)


@dataclass(frozen=True)
class VariationInfo:
    """A reply at the first branch, as shown in a variation picker."""
    move: str
    annotation: str
    weight: float | None
    probability: float


OPENINGS: dict[str, OpeningSource] = {
    "scotch-gambit": OpeningSource(
        opening_id="scotch-gambit",
        name="Scotch Gambit",
        prefix=tuple(SCOTCH_GAMBIT_PREFIX),
        create_raw=create_scotch_gambit_tree,
        description="1.e4 e5 2.Nf3 Nc6 3.d4 exd4 4.Bc4 - play White against Black's replies.",
    ),
}


def list_openings() -> list[OpeningSource]:
    """List all catalog entries."""
    return list(OPENINGS.values())


def load_opening(opening_id: str) -> LoadedOpening:
    """
    Load and validate a catalog opening.

    Raises:
        UnknownOpeningError: if the id is not in the catalog
        ValidationError: if the bundled tree is malformed
    """
    source = OPENINGS.get(opening_id)
    if source is None:
        raise UnknownOpeningError(opening_id)

    try:
        tree = parse_opening_tree(source.create_raw())
    except ValidationError:
        logger.error("Bundled opening %s failed validation", opening_id)
        raise

    return LoadedOpening(
        opening_id=source.opening_id,
        name=source.name,
        tree=tree,
        prefix=source.prefix,
    )


def load_opening_file(path: str | Path, prefix: Sequence[str] = ()) -> LoadedOpening:
    """
    Load an opening tree from a JSON file.

    Raises:
        ValidationError: if the file cannot be read or the tree is malformed
    """
    result = load_opening_tree_file(path)
    if not result.ok:
        raise ValidationError(result.errors)

    path = Path(path)
    return LoadedOpening(
        opening_id=path.stem,
        name=path.stem.replace("-", " ").replace("_", " ").title(),
        tree=result.tree,
        prefix=tuple(prefix),
    )


def available_variations(opening: LoadedOpening) -> list[VariationInfo]:
    """Get the replies at the first branch with their selection odds."""
    branch = opening.first_branch
    if branch is None:
        return []

    probabilities = move_probabilities(branch.children)
    return [
        VariationInfo(
            move=move,
            annotation=child.annotation or "",
            weight=child.weight,
            probability=probabilities[move],
        )
        for move, child in branch.children.items()
    ]
