"""Tests for diff/tracking.py."""

from __future__ import annotations

import pytest

from astdelta.diff.engine import DiffResult, diff_trees
from astdelta.diff.tracking import (
    BODY_CHANGED,
    MOVED,
    NO_CHANGE,
    REMOVED,
    UPDATED,
    track_lines,
    track_node,
)
from astdelta.tree import LineIndex, LineRange, ParsedNode, Span, build_tree, node

SRC_TEXT = "if x>0\nreturn x\n"
DST_TEXT = "return x\nif x>=0\n"


def _at(parsed: ParsedNode, start: int, end: int) -> ParsedNode:
    parsed.span = Span(start, end)
    return parsed


@pytest.fixture
def reordered() -> DiffResult:
    src = build_tree(
        _at(
            node(
                "Block",
                _at(node("IfStmt", _at(node("Cond", value="x>0"), 3, 6)), 0, 6),
                _at(node("Return", _at(node("Name", value="x"), 14, 15)), 7, 15),
            ),
            0,
            16,
        )
    )
    dst = build_tree(
        _at(
            node(
                "Block",
                _at(node("Return", _at(node("Name", value="x"), 7, 8)), 0, 8),
                _at(node("IfStmt", _at(node("Cond", value="x>=0"), 12, 16)), 9, 16),
            ),
            0,
            17,
        )
    )
    return diff_trees(src, dst)


class TestTrackNode:
    def test_moved_statement(self, reordered: DiffResult) -> None:
        change = track_node(reordered, reordered.src[3])

        assert change.changes == (MOVED,)
        assert change.partner is reordered.dst[1]
        assert change.changed

    def test_updated_leaf(self, reordered: DiffResult) -> None:
        assert track_node(reordered, reordered.src[2]).changes == (UPDATED,)

    def test_container_of_updated_leaf(self, reordered: DiffResult) -> None:
        assert track_node(reordered, reordered.src[1]).changes == (BODY_CHANGED,)

    def test_root_sees_the_move_below_it(self, reordered: DiffResult) -> None:
        assert track_node(reordered, reordered.src.root).changes == (BODY_CHANGED,)

    def test_untouched_leaf(self, reordered: DiffResult) -> None:
        change = track_node(reordered, reordered.src[4])

        assert change.changes == (NO_CHANGE,)
        assert not change.changed

    def test_removed_node(self) -> None:
        result = diff_trees(build_tree(node("Block", "A", "B", "C")), build_tree(node("Block", "A", "C")))

        change = track_node(result, result.src[2])

        assert change.changes == (REMOVED,)
        assert change.partner is None

    def test_insert_into_partner_marks_body(self) -> None:
        result = diff_trees(build_tree(node("Block", "A", "C")), build_tree(node("Block", "A", "B", "C")))

        assert track_node(result, result.src.root).changes == (BODY_CHANGED,)
        assert track_node(result, result.src[1]).changes == (NO_CHANGE,)

    def test_partner_range_filled_from_destination_lines(self, reordered: DiffResult) -> None:
        change = track_node(reordered, reordered.src[1], dst_lines=LineIndex(DST_TEXT))

        assert change.partner_range == LineRange(9, 16, 2, 2)

    def test_partner_range_absent_without_line_index(self, reordered: DiffResult) -> None:
        assert track_node(reordered, reordered.src[1]).partner_range is None


class TestTrackLines:
    def test_statement_located_by_lines(self, reordered: DiffResult) -> None:
        # Given the return statement on line 2 of the source
        src_lines, dst_lines = LineIndex(SRC_TEXT), LineIndex(DST_TEXT)

        # When
        change = track_lines(reordered, src_lines, 2, 2, kind="Return", dst_lines=dst_lines)

        # Then it now lives on line 1
        assert change is not None
        assert change.changes == (MOVED,)
        assert change.partner_range == LineRange(0, 8, 1, 1)

    def test_first_node_in_preorder_wins_without_kind(self, reordered: DiffResult) -> None:
        change = track_lines(reordered, LineIndex(SRC_TEXT), 1, 1)

        assert change is not None
        assert change.node.kind == "IfStmt"

    def test_whole_block(self, reordered: DiffResult) -> None:
        change = track_lines(reordered, LineIndex(SRC_TEXT), 1, 2)

        assert change is not None
        assert change.node is reordered.src.root

    def test_no_node_on_lines(self, reordered: DiffResult) -> None:
        assert track_lines(reordered, LineIndex(SRC_TEXT), 5, 5) is None
