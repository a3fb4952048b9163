"""Mapping store: a partial, injective relation between two trees.

Pairs are keyed by arena index on both sides. Every insertion is checked
for uniqueness, so the store can never hold contradictory pairs. Once
frozen, the store rejects further insertions.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from astdelta.core.errors import InvariantViolation
from astdelta.tree.models import Node, Tree


class MappingStore:
    """Injective mapping between ``src`` and ``dst`` nodes."""

    __slots__ = ("src", "dst", "_src_to_dst", "_dst_to_src", "_frozen")

    def __init__(self, src: Tree, dst: Tree) -> None:
        self.src = src
        self.dst = dst
        self._src_to_dst: dict[int, int] = {}
        self._dst_to_src: dict[int, int] = {}
        self._frozen = False

    # --- Mutation -------------------------------------------------------

    def add(self, src_node: Node, dst_node: Node) -> None:
        """Record a pair.

        Raises:
            InvariantViolation: if either node is already mapped, or the
                store is frozen.
        """
        self._add_ids(src_node.id, dst_node.id)

    def _add_ids(self, src_id: int, dst_id: int) -> None:
        if self._frozen:
            raise InvariantViolation.frozen(src_id, dst_id)
        if src_id in self._src_to_dst or dst_id in self._dst_to_src:
            raise InvariantViolation.conflict(
                src_id,
                dst_id,
                (self._src_to_dst.get(src_id), self._dst_to_src.get(dst_id)),
            )
        self._src_to_dst[src_id] = dst_id
        self._dst_to_src[dst_id] = src_id

    def add_subtree(self, src_node: Node, dst_node: Node) -> int:
        """Map two isomorphic subtrees node by node. Returns pairs added.

        Isomorphic subtrees share their pre-order layout, so the i-th node of
        one subtree pairs with the i-th node of the other.
        """
        if src_node.size != dst_node.size:
            raise InvariantViolation.conflict(src_node.id, dst_node.id, (None, None))
        for offset in range(src_node.size):
            self._add_ids(src_node.id + offset, dst_node.id + offset)
        return src_node.size

    def add_all(self, pairs: Iterable[tuple[int, int]]) -> None:
        """Seed from plain ``(src_id, dst_id)`` pairs."""
        for src_id, dst_id in pairs:
            if not (0 <= src_id < len(self.src) and 0 <= dst_id < len(self.dst)):
                raise InvariantViolation.conflict(src_id, dst_id, (None, None))
            self._add_ids(src_id, dst_id)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    # --- Lookup ---------------------------------------------------------

    def has_src(self, node: Node) -> bool:
        return node.id in self._src_to_dst

    def has_dst(self, node: Node) -> bool:
        return node.id in self._dst_to_src

    def dst_id_for(self, node: Node) -> int | None:
        return self._src_to_dst.get(node.id)

    def dst_for(self, node: Node) -> Node | None:
        dst_id = self._src_to_dst.get(node.id)
        return None if dst_id is None else self.dst[dst_id]

    def src_for(self, node: Node) -> Node | None:
        src_id = self._dst_to_src.get(node.id)
        return None if src_id is None else self.src[src_id]

    def src_subtree_free(self, node: Node) -> bool:
        """True when no node of the source subtree is mapped."""
        return not any(i in self._src_to_dst for i in range(node.id, node.id + node.size))

    def dst_subtree_free(self, node: Node) -> bool:
        return not any(i in self._dst_to_src for i in range(node.id, node.id + node.size))

    def __len__(self) -> int:
        return len(self._src_to_dst)

    def __contains__(self, pair: object) -> bool:
        if not isinstance(pair, tuple) or len(pair) != 2:
            return False
        src_node, dst_node = pair
        if not isinstance(src_node, Node) or not isinstance(dst_node, Node):
            return False
        return self._src_to_dst.get(src_node.id) == dst_node.id

    def __iter__(self) -> Iterator[tuple[Node, Node]]:
        for src_id in sorted(self._src_to_dst):
            yield self.src[src_id], self.dst[self._src_to_dst[src_id]]

    def pairs(self) -> list[tuple[Node, Node]]:
        """Mapped pairs ordered by source pre-order."""
        return list(self)

    def id_pairs(self) -> frozenset[tuple[int, int]]:
        """Plain-data snapshot of the mapping."""
        return frozenset(self._src_to_dst.items())

    def copy(self) -> MappingStore:
        clone = MappingStore(self.src, self.dst)
        clone._src_to_dst = dict(self._src_to_dst)
        clone._dst_to_src = dict(self._dst_to_src)
        return clone

    # --- Verification ---------------------------------------------------

    def validate(self) -> None:
        """Check injectivity and kind preservation.

        Raises:
            InvariantViolation: on any inconsistency.
        """
        if len(self._src_to_dst) != len(self._dst_to_src):
            raise InvariantViolation.conflict(-1, -1, (len(self._src_to_dst), len(self._dst_to_src)))
        for src_id, dst_id in self._src_to_dst.items():
            if self._dst_to_src.get(dst_id) != src_id:
                raise InvariantViolation.conflict(src_id, dst_id, (dst_id, self._dst_to_src.get(dst_id)))
            if not (0 <= src_id < len(self.src) and 0 <= dst_id < len(self.dst)):
                raise InvariantViolation.conflict(src_id, dst_id, (None, None))
            src_node, dst_node = self.src[src_id], self.dst[dst_id]
            if src_node.kind != dst_node.kind:
                raise InvariantViolation.kind_mismatch(src_id, src_node.kind, dst_id, dst_node.kind)
