"""Recovery matcher: pairs the unmatched children of mapped containers.

Catches renamed identifiers, edited literals and edited statements that
the isomorphism-driven stages cannot see. For each mapped container pair,
unmatched children are aligned in three steps:

1. LCS over ``(kind, value)`` labels, kept when similarity >= threshold;
2. remaining same-kind pairs by descending similarity (ties: closer
   sibling positions, then arena ids), kept when similarity >= threshold;
3. a kind left exactly once on both sides is paired if similarity > 0.

Every recovered container pair is queued so recovery descends into it.
"""

from __future__ import annotations

from collections import Counter, deque

import structlog

from astdelta.matching.mapping import MappingStore
from astdelta.matching.similarity import longest_common_subsequence, node_similarity
from astdelta.tree.models import Node, Tree

log = structlog.get_logger(__name__)


class RecoveryMatcher:
    def __init__(
        self,
        src: Tree,
        dst: Tree,
        threshold: float = 0.6,
        value_weight: float = 0.5,
    ) -> None:
        self.src = src
        self.dst = dst
        self.threshold = threshold
        self.value_weight = value_weight

    def match(self, mapping: MappingStore) -> list[tuple[Node, Node]]:
        """Add recovered child pairs to ``mapping``. Returns the new pairs."""
        added: list[tuple[Node, Node]] = []
        queue = deque((a, c) for a, c in mapping.pairs() if not a.is_leaf and not c.is_leaf)
        while queue:
            a, c = queue.popleft()
            for x, y in self._align_children(mapping, a, c):
                added.append((x, y))
                if not x.is_leaf and not y.is_leaf:
                    queue.append((x, y))
        log.debug("recovery_done", pairs=len(added))
        return added

    def _score(self, mapping: MappingStore, x: Node, y: Node) -> float:
        return node_similarity(mapping, x, y, self.value_weight)

    def _align_children(self, mapping: MappingStore, a: Node, c: Node) -> list[tuple[Node, Node]]:
        xs = [(i, x) for i, x in enumerate(self.src.children(a)) if not mapping.has_src(x)]
        ys = [(j, y) for j, y in enumerate(self.dst.children(c)) if not mapping.has_dst(y)]
        if not xs or not ys:
            return []

        accepted: list[tuple[Node, Node]] = []

        def accept(x: Node, y: Node) -> None:
            mapping.add(x, y)
            accepted.append((x, y))

        for (_, x), (_, y) in longest_common_subsequence(xs, ys, lambda p, q: p[1].label == q[1].label):
            if self._score(mapping, x, y) >= self.threshold:
                accept(x, y)

        xs = [(i, x) for i, x in xs if not mapping.has_src(x)]
        ys = [(j, y) for j, y in ys if not mapping.has_dst(y)]
        if not xs or not ys:
            return accepted

        ranked: list[tuple[float, int, int, int, Node, Node]] = []
        scores: dict[tuple[int, int], float] = {}
        for i, x in xs:
            for j, y in ys:
                if x.kind != y.kind:
                    continue
                score = self._score(mapping, x, y)
                scores[(x.id, y.id)] = score
                if score >= self.threshold:
                    ranked.append((-score, abs(i - j), x.id, y.id, x, y))
        ranked.sort(key=lambda r: r[:4])
        for _, _, _, _, x, y in ranked:
            if not mapping.has_src(x) and not mapping.has_dst(y):
                accept(x, y)

        left_x = [x for _, x in xs if not mapping.has_src(x)]
        left_y = [y for _, y in ys if not mapping.has_dst(y)]
        kinds_x = Counter(x.kind for x in left_x)
        kinds_y = Counter(y.kind for y in left_y)
        for x in left_x:
            if kinds_x[x.kind] != 1 or kinds_y[x.kind] != 1:
                continue
            y = next(y for y in left_y if y.kind == x.kind)
            if scores.get((x.id, y.id), 0.0) > 0.0:
                accept(x, y)
        return accepted
