"""Tree Model: an immutable arena of syntax nodes.

Nodes are stored in pre-order, so a node's arena index doubles as its
stable identity and its descendants occupy the contiguous index range
``[node.id + 1, node.id + node.size)``. Parent links are arena indices,
never object references; the Tree is the sole owner of its nodes.

Trees are built once (see ``astdelta.tree.builder``) and never mutated.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Span:
    """Source byte range. Carried through for reporting only."""

    start: int = 0
    end: int = 0


@dataclass(frozen=True, slots=True, eq=False)
class Node:
    """A single syntax node.

    Equality and hashing are by identity: two nodes are the same node only
    if they are the same arena slot of the same tree.
    """

    id: int
    kind: str
    value: str | None
    span: Span
    parent: int | None
    children: tuple[int, ...]
    height: int
    size: int
    depth: int
    hash: str

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def label(self) -> tuple[str, str | None]:
        return (self.kind, self.value)

    def __repr__(self) -> str:
        if self.value is None:
            return f"Node({self.id}, {self.kind})"
        return f"Node({self.id}, {self.kind}:{self.value!r})"


class Tree:
    """Read-only arena of nodes with O(1) access to derived fields."""

    __slots__ = ("_nodes",)

    def __init__(self, nodes: Sequence[Node]) -> None:
        self._nodes: tuple[Node, ...] = tuple(nodes)

    # --- Access ---------------------------------------------------------

    @property
    def root(self) -> Node:
        return self._nodes[0]

    @property
    def nodes(self) -> tuple[Node, ...]:
        return self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __getitem__(self, node_id: int) -> Node:
        return self._nodes[node_id]

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes)

    def __contains__(self, node: object) -> bool:
        if not isinstance(node, Node):
            return False
        return 0 <= node.id < len(self._nodes) and self._nodes[node.id] is node

    def __repr__(self) -> str:
        return f"Tree(root={self.root!r}, size={len(self)})"

    # --- Navigation -----------------------------------------------------

    def parent(self, node: Node) -> Node | None:
        if node.parent is None:
            return None
        return self._nodes[node.parent]

    def children(self, node: Node) -> list[Node]:
        return [self._nodes[i] for i in node.children]

    def position(self, node: Node) -> int:
        """Index of ``node`` among its siblings (0 for the root)."""
        if node.parent is None:
            return 0
        return self._nodes[node.parent].children.index(node.id)

    def descendants(self, node: Node) -> Sequence[Node]:
        """All strict descendants of ``node`` in pre-order."""
        return self._nodes[node.id + 1 : node.id + node.size]

    def subtree(self, node: Node) -> Sequence[Node]:
        """``node`` followed by its descendants, in pre-order."""
        return self._nodes[node.id : node.id + node.size]

    def ancestors(self, node: Node) -> Iterator[Node]:
        """Strict ancestors of ``node``, nearest first."""
        current = node.parent
        while current is not None:
            ancestor = self._nodes[current]
            yield ancestor
            current = ancestor.parent

    def is_descendant(self, node: Node, ancestor: Node) -> bool:
        return ancestor.id < node.id < ancestor.id + ancestor.size

    def preorder(self, node: Node | None = None) -> Sequence[Node]:
        if node is None:
            return self._nodes
        return self.subtree(node)

    def postorder(self, node: Node | None = None) -> Iterator[Node]:
        """Children before parents, siblings left to right."""
        start = self.root if node is None else node
        stack: list[tuple[Node, bool]] = [(start, False)]
        while stack:
            current, expanded = stack.pop()
            if expanded or current.is_leaf:
                yield current
                continue
            stack.append((current, True))
            for child_id in reversed(current.children):
                stack.append((self._nodes[child_id], False))

    def leaves(self) -> Iterator[Node]:
        return (n for n in self._nodes if n.is_leaf)

    # --- Comparison and export ------------------------------------------

    def structurally_equal(self, other: Tree) -> bool:
        """True when both trees have identical shape, kinds and values."""
        if len(self) != len(other) or self.root.hash != other.root.hash:
            return False
        return all(
            a.kind == b.kind and a.value == b.value and len(a.children) == len(b.children)
            for a, b in zip(self._nodes, other._nodes, strict=True)
        )

    def to_dict(self, node: Node | None = None) -> dict[str, Any]:
        """Nested plain-data form, inverse of ``tree_from_dict``."""
        start = self.root if node is None else node
        out: dict[int, dict[str, Any]] = {}
        for current in reversed(self.subtree(start)):
            entry: dict[str, Any] = {"kind": current.kind}
            if current.value is not None:
                entry["value"] = current.value
            if current.span != Span():
                entry["span"] = [current.span.start, current.span.end]
            if current.children:
                entry["children"] = [out.pop(c) for c in current.children]
            out[current.id] = entry
        return out[start.id]
