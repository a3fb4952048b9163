"""Similarity measures used by the container and recovery matchers."""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Sequence
from typing import TypeVar

from rapidfuzz.distance import Levenshtein

from astdelta.matching.mapping import MappingStore
from astdelta.tree.models import Node, Tree

T = TypeVar("T")
U = TypeVar("U")


def dice(common: int, size_a: int, size_b: int) -> float:
    """Dice coefficient ``2|A∩B| / (|A|+|B|)``; 0.0 for two empty sets."""
    total = size_a + size_b
    if total == 0:
        return 0.0
    return 2.0 * common / total


def value_similarity(a: str, b: str) -> float:
    """``1 - normalized Levenshtein distance``, in [0, 1]."""
    if a == b:
        return 1.0
    return 1.0 - Levenshtein.normalized_distance(a, b)


def common_mapped_descendants(mapping: MappingStore, a: Node, c: Node) -> int:
    """Descendants of source ``a`` whose partner is a descendant of ``c``."""
    dst = mapping.dst
    common = 0
    for s in mapping.src.descendants(a):
        partner = mapping.dst_for(s)
        if partner is not None and dst.is_descendant(partner, c):
            common += 1
    return common


def mapped_dice(mapping: MappingStore, a: Node, c: Node) -> float:
    return dice(common_mapped_descendants(mapping, a, c), a.size - 1, c.size - 1)


def shape_dice(src: Tree, a: Node, dst: Tree, c: Node) -> float:
    """Dice over the descendant kind multisets of ``a`` and ``c``."""
    kinds_a = Counter(n.kind for n in src.descendants(a))
    kinds_c = Counter(n.kind for n in dst.descendants(c))
    return dice(sum((kinds_a & kinds_c).values()), a.size - 1, c.size - 1)


def _has_mapped_descendant(mapping: MappingStore, a: Node, c: Node) -> bool:
    if any(mapping.has_src(n) for n in mapping.src.descendants(a)):
        return True
    return any(mapping.has_dst(n) for n in mapping.dst.descendants(c))


def structural_similarity(mapping: MappingStore, a: Node, c: Node) -> float:
    """Mapped-descendant Dice when matching evidence exists, else shape Dice.

    Two leaves are structurally identical.
    """
    if a.is_leaf and c.is_leaf:
        return 1.0
    if _has_mapped_descendant(mapping, a, c):
        return mapped_dice(mapping, a, c)
    return shape_dice(mapping.src, a, mapping.dst, c)


def node_similarity(mapping: MappingStore, a: Node, c: Node, value_weight: float = 0.5) -> float:
    """Combined similarity of a source and a destination node, in [0, 1].

    Kind equality is a hard requirement. Values weigh ``value_weight`` when
    present on both sides; a value present on one side only scores 0 for the
    value part; nodes without values are scored on structure alone.
    """
    if a.kind != c.kind:
        return 0.0
    structure = structural_similarity(mapping, a, c)
    if a.value is None and c.value is None:
        return structure
    if a.value is None or c.value is None:
        return (1.0 - value_weight) * structure
    return value_weight * value_similarity(a.value, c.value) + (1.0 - value_weight) * structure


def longest_common_subsequence(
    xs: Sequence[T],
    ys: Sequence[U],
    equal: Callable[[T, U], bool],
) -> list[tuple[T, U]]:
    """LCS alignment of two sequences under ``equal``.

    On ties the backtrack keeps the earliest elements of ``xs``, so for
    ``[A, B]`` vs ``[B, A]`` the result is ``[(A, A)]``.
    """
    n, m = len(xs), len(ys)
    lengths = [[0] * (m + 1) for _ in range(n + 1)]
    for i in range(n):
        for j in range(m):
            if equal(xs[i], ys[j]):
                lengths[i + 1][j + 1] = lengths[i][j] + 1
            else:
                lengths[i + 1][j + 1] = max(lengths[i + 1][j], lengths[i][j + 1])

    result: list[tuple[T, U]] = []
    i, j = n, m
    while i and j:
        if lengths[i][j] == lengths[i - 1][j]:
            i -= 1
        elif lengths[i][j] == lengths[i][j - 1]:
            j -= 1
        else:
            result.append((xs[i - 1], ys[j - 1]))
            i -= 1
            j -= 1
    result.reverse()
    return result
