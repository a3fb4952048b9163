"""Signature index: structural hash buckets per height."""

from __future__ import annotations

from collections import defaultdict

from astdelta.tree.models import Node, Tree


class SignatureIndex:
    """Nodes of one tree grouped by height, then by structural hash.

    Buckets list nodes in pre-order. Pure function of the tree.
    """

    __slots__ = ("tree", "_by_height")

    def __init__(self, tree: Tree) -> None:
        self.tree = tree
        by_height: dict[int, dict[str, list[Node]]] = defaultdict(lambda: defaultdict(list))
        for current in tree:
            by_height[current.height][current.hash].append(current)
        self._by_height = {h: dict(groups) for h, groups in by_height.items()}

    @property
    def max_height(self) -> int:
        return self.tree.root.height

    def heights(self, min_height: int = 1) -> list[int]:
        """Populated heights >= ``min_height``, tallest first."""
        return sorted((h for h in self._by_height if h >= min_height), reverse=True)

    def at_height(self, height: int) -> dict[str, list[Node]]:
        return self._by_height.get(height, {})

    def candidates(self, node: Node) -> list[Node]:
        """Nodes in this tree sharing ``node``'s height and hash."""
        return self._by_height.get(node.height, {}).get(node.hash, [])


def isomorphic(src: Tree, a: Node, dst: Tree, b: Node) -> bool:
    """Exact check that two subtrees are identical in shape, kinds and values.

    Guards against hash collisions: compares every pre-order offset.
    """
    if a.hash != b.hash or a.size != b.size:
        return False
    for x, y in zip(src.subtree(a), dst.subtree(b), strict=True):
        if x.kind != y.kind or x.value != y.value or len(x.children) != len(y.children):
            return False
    return True
