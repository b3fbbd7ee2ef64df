"""
Move Node - The immutable opening tree.

An opening tree is a rooted, finite, acyclic tree of moves:
- The root has no move (move is None)
- Every other node carries the move label that reached it
- Children are keyed by move label

Nodes are built once by the loader and never mutated.
Identity matters: a session holds on to node objects for its
whole lifetime, so nodes compare by identity, not by content.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


# Weight assumed for a node without an authored frequency
DEFAULT_WEIGHT = 0.5


@dataclass(frozen=True, eq=False)
class MoveNode:
    """
    A node in the opening tree.

    Attributes:
        move: Move label (SAN) that reached this node, None at the root
        annotation: Optional explanation shown to the learner
        children: Read-only mapping of move label -> child node
        weight: Relative selection weight in [0, 1], None if not authored
        terminal: True if an authored line ends here
    """
    move: str | None
    children: Mapping[str, MoveNode] = field(default_factory=dict)
    annotation: str | None = None
    weight: float | None = None
    terminal: bool = False

    def __post_init__(self):
        # Freeze the children mapping so the tree cannot be edited in place
        if not isinstance(self.children, MappingProxyType):
            object.__setattr__(self, "children", MappingProxyType(dict(self.children)))

    @property
    def is_root(self) -> bool:
        return self.move is None

    @property
    def is_leaf(self) -> bool:
        return len(self.children) == 0

    @property
    def ends_line(self) -> bool:
        """True if reaching this node completes a drill."""
        return self.terminal or self.is_leaf

    @property
    def effective_weight(self) -> float:
        """Weight used for selection (DEFAULT_WEIGHT when not authored)."""
        return self.weight if self.weight is not None else DEFAULT_WEIGHT

    def child(self, move: str) -> MoveNode | None:
        """Get the child reached by a move, or None."""
        return self.children.get(move)

    def __repr__(self) -> str:
        return (
            f"MoveNode(move={self.move!r}, children={list(self.children)!r}, "
            f"weight={self.weight!r}, terminal={self.terminal!r})"
        )
