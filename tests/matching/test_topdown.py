"""Tests for matching/topdown.py."""

from __future__ import annotations

from astdelta.matching.mapping import MappingStore
from astdelta.matching.topdown import TopDownMatcher
from astdelta.tree import ParsedNode, Span, build_tree, node


class TestTopDownMatcher:
    def test_given_identical_trees_when_matched_then_every_node_paired(self) -> None:
        # Given
        src = build_tree(node("Block", node("If", node("Cond", value="x")), node("Return", "x")))
        dst = build_tree(node("Block", node("If", node("Cond", value="x")), node("Return", "x")))
        mapping = MappingStore(src, dst)

        # When
        added = TopDownMatcher(src, dst).match(mapping)

        # Then
        assert added == len(src)
        assert mapping.id_pairs() == frozenset((i, i) for i in range(len(src)))

    def test_given_moved_subtree_when_matched_then_paired_across_positions(self) -> None:
        src = build_tree(node("Block", node("If", "c"), node("Return", "x")))
        dst = build_tree(node("Block", node("Return", "x"), node("If", "d")))
        mapping = MappingStore(src, dst)

        added = TopDownMatcher(src, dst).match(mapping)

        assert added == 2
        assert mapping.id_pairs() == frozenset({(3, 1), (4, 2)})

    def test_leaves_below_min_height_are_left_alone(self) -> None:
        src = build_tree(node("Block", "a"))
        dst = build_tree(node("Other", "a"))

        mapping = MappingStore(src, dst)
        assert TopDownMatcher(src, dst).match(mapping) == 0

        mapping = MappingStore(src, dst)
        assert TopDownMatcher(src, dst, min_height=1).match(mapping) == 1
        assert mapping.id_pairs() == frozenset({(1, 1)})

    def test_partially_mapped_subtrees_are_skipped(self) -> None:
        # Given a seed that maps one leaf of otherwise identical trees
        src = build_tree(node("Block", node("Call", "f")))
        dst = build_tree(node("Block", node("Call", "f")))
        mapping = MappingStore(src, dst)
        mapping.add(src[2], dst[2])

        # When
        added = TopDownMatcher(src, dst).match(mapping)

        # Then neither Call nor Block is fully free on both sides
        assert added == 0


class TestAmbiguousGroups:
    @staticmethod
    def _trees():
        # src: 0 Root, 1 P, 2 Call, 3 f, 4 x
        src = build_tree(node("Root", node("P", node("Call", "f"), "x")))
        # dst: 0 Root, 1 Q, 2 Call, 3 f, 4 P, 5 Call, 6 f, 7 y
        dst = build_tree(
            node("Root", node("Q", node("Call", "f")), node("P", node("Call", "f"), "y"))
        )
        return src, dst

    def test_without_evidence_lowest_id_wins(self) -> None:
        src, dst = self._trees()
        mapping = MappingStore(src, dst)

        TopDownMatcher(src, dst).match(mapping)

        assert mapping.dst_for(src[2]) is dst[2]

    def test_mapped_parent_wins(self) -> None:
        # Given the parents are already known to correspond
        src, dst = self._trees()
        mapping = MappingStore(src, dst)
        mapping.add(src[1], dst[4])

        # When
        TopDownMatcher(src, dst).match(mapping)

        # Then the candidate under the partner parent is chosen
        assert mapping.dst_for(src[2]) is dst[5]
        assert mapping.dst_for(src[3]) is dst[6]

    def test_closest_span_wins_over_id(self) -> None:
        # Given two identical destination candidates at different offsets
        def call(start: int) -> ParsedNode:
            leaf = ParsedNode(kind="Leaf", value="f", span=Span(start + 5, start + 6))
            return ParsedNode(kind="Call", children=[leaf], span=Span(start, start + 8))

        src = build_tree(ParsedNode(kind="Block", children=[call(40)]))
        dst = build_tree(ParsedNode(kind="Module", children=[call(0), call(42)]))
        mapping = MappingStore(src, dst)

        # When
        TopDownMatcher(src, dst).match(mapping)

        # Then
        assert mapping.dst_for(src[1]) is dst[3]

    def test_each_destination_used_once(self) -> None:
        src = build_tree(node("A", node("Call", "f"), node("Call", "f")))
        dst = build_tree(node("B", node("Call", "f")))
        mapping = MappingStore(src, dst)

        added = TopDownMatcher(src, dst).match(mapping)

        assert added == 2
        assert mapping.dst_for(src[1]) is dst[1]
        assert mapping.dst_for(src[3]) is None
