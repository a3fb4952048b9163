"""Top-down matcher: greedy pairing of identical subtrees, tallest first.

For every height from the tallest down to ``min_height``, source and
destination nodes sharing a structural hash are paired:

- a hash held by exactly one free source node and one free destination
  node is accepted immediately;
- other groups are resolved once the unique ones are in, source nodes with
  the fewest candidates first. Candidates whose parent is already mapped to
  the source node's parent win; then the closest span start; then arena id.

Accepting a pair maps both subtrees in one pass. Sweeps repeat until a
full sweep adds nothing.
"""

from __future__ import annotations

import structlog

from astdelta.matching.mapping import MappingStore
from astdelta.matching.signatures import SignatureIndex, isomorphic
from astdelta.tree.models import Node, Tree

log = structlog.get_logger(__name__)


class TopDownMatcher:
    def __init__(
        self,
        src: Tree,
        dst: Tree,
        min_height: int = 2,
        src_index: SignatureIndex | None = None,
        dst_index: SignatureIndex | None = None,
    ) -> None:
        self.src = src
        self.dst = dst
        self.min_height = min_height
        self.src_index = src_index or SignatureIndex(src)
        self.dst_index = dst_index or SignatureIndex(dst)

    def match(self, mapping: MappingStore) -> int:
        """Add identical-subtree pairs to ``mapping``. Returns pairs added."""
        total = 0
        sweeps = 0
        while True:
            sweeps += 1
            added = self._sweep(mapping)
            total += added
            if not added:
                break
        log.debug("top_down_done", pairs=total, sweeps=sweeps)
        return total

    def _heights(self) -> list[int]:
        shared = set(self.src_index.heights(self.min_height)) & set(self.dst_index.heights(self.min_height))
        return sorted(shared, reverse=True)

    def _sweep(self, mapping: MappingStore) -> int:
        added = 0
        for height in self._heights():
            dst_groups = self.dst_index.at_height(height)
            ambiguous: list[tuple[Node, list[Node]]] = []

            for digest, src_nodes in self.src_index.at_height(height).items():
                dst_nodes = dst_groups.get(digest)
                if not dst_nodes:
                    continue
                src_free = [n for n in src_nodes if mapping.src_subtree_free(n)]
                dst_free = [n for n in dst_nodes if mapping.dst_subtree_free(n)]
                if not src_free or not dst_free:
                    continue

                if len(src_free) == 1 and len(dst_free) == 1:
                    a, b = src_free[0], dst_free[0]
                    if isomorphic(self.src, a, self.dst, b):
                        added += mapping.add_subtree(a, b)
                    continue

                for a in src_free:
                    candidates = [b for b in dst_free if isomorphic(self.src, a, self.dst, b)]
                    if candidates:
                        ambiguous.append((a, candidates))

            ambiguous.sort(key=lambda item: (len(item[1]), item[0].id))
            for a, candidates in ambiguous:
                if not mapping.src_subtree_free(a):
                    continue
                free = [b for b in candidates if mapping.dst_subtree_free(b)]
                if not free:
                    continue
                best = min(free, key=lambda b, a=a: self._rank(mapping, a, b))
                added += mapping.add_subtree(a, best)
        return added

    def _rank(self, mapping: MappingStore, a: Node, b: Node) -> tuple[int, int, int]:
        a_parent = self.src.parent(a)
        b_parent = self.dst.parent(b)
        parent_mapped = (
            a_parent is not None
            and b_parent is not None
            and mapping.dst_for(a_parent) is b_parent
        )
        return (0 if parent_mapped else 1, abs(a.span.start - b.span.start), b.id)
