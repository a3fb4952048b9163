"""Bottom-up container matcher.

Walks unmatched source containers in post-order. A container's candidates
are the unmatched, same-kind destination ancestors of its matched
descendants' partners; the best candidate by Dice coefficient is accepted
when the coefficient exceeds the threshold. Post-order lets container
matches propagate upward. Both roots are paired last when still free and
of the same kind.
"""

from __future__ import annotations

from bisect import bisect_left, bisect_right

import structlog

from astdelta.matching.mapping import MappingStore
from astdelta.matching.similarity import dice
from astdelta.tree.models import Node, Tree

log = structlog.get_logger(__name__)


class BottomUpMatcher:
    def __init__(self, src: Tree, dst: Tree, threshold: float = 0.5) -> None:
        self.src = src
        self.dst = dst
        self.threshold = threshold

    def match(self, mapping: MappingStore) -> list[tuple[Node, Node]]:
        """Add container pairs to ``mapping``. Returns the new pairs."""
        added: list[tuple[Node, Node]] = []
        for a in self.src.postorder():
            if a.is_leaf or mapping.has_src(a):
                continue
            candidate = self._best_candidate(mapping, a)
            if candidate is not None:
                mapping.add(a, candidate)
                added.append((a, candidate))

        src_root, dst_root = self.src.root, self.dst.root
        if (
            not mapping.has_src(src_root)
            and not mapping.has_dst(dst_root)
            and src_root.kind == dst_root.kind
        ):
            mapping.add(src_root, dst_root)
            added.append((src_root, dst_root))

        log.debug("bottom_up_done", pairs=len(added))
        return added

    def _best_candidate(self, mapping: MappingStore, a: Node) -> Node | None:
        partners = sorted(
            dst_id
            for s in self.src.descendants(a)
            if (dst_id := mapping.dst_id_for(s)) is not None
        )
        if not partners:
            return None

        a_size = a.size - 1
        matched = len(partners)
        best: Node | None = None
        best_key: tuple[float, int, int, int] | None = None
        seen: set[int] = set()

        for partner_id in partners:
            for c in self.dst.ancestors(self.dst[partner_id]):
                if c.id in seen:
                    break
                seen.add(c.id)
                c_size = c.size - 1
                # ancestors only grow; past this size no candidate can pass
                if c_size >= matched and dice(matched, a_size, c_size) <= self.threshold:
                    break
                if c.kind != a.kind or mapping.has_dst(c):
                    continue
                # partners inside c occupy the id range (c.id, c.id + c.size)
                count = bisect_left(partners, c.id + c.size) - bisect_right(partners, c.id)
                score = dice(count, a_size, c_size)
                if score <= self.threshold:
                    continue
                key = (-score, -count, abs(a.span.start - c.span.start), c.id)
                if best_key is None or key < best_key:
                    best, best_key = c, key
        return best
