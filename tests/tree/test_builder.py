"""Tests for tree/builder.py: parsed and flat inputs, malformed trees."""

from __future__ import annotations

import pytest

from astdelta.core.errors import ErrorCode, StructureError
from astdelta.tree.builder import (
    NodeRecord,
    ParsedNode,
    build_tree,
    build_tree_from_records,
    node,
    to_parsed,
    tree_from_dict,
)


class TestBuildTree:
    def test_given_none_when_build_then_missing_root(self) -> None:
        with pytest.raises(StructureError) as exc_info:
            build_tree(None)
        assert exc_info.value.code == ErrorCode.STRUCTURE_MISSING_ROOT

    def test_given_shared_child_when_build_then_cycle(self) -> None:
        # Given
        shared = ParsedNode(kind="Name", value="x")
        root = ParsedNode(kind="Pair", children=[shared, shared])

        # When / Then
        with pytest.raises(StructureError) as exc_info:
            build_tree(root)
        assert exc_info.value.code == ErrorCode.STRUCTURE_CYCLE

    def test_given_self_loop_when_build_then_cycle(self) -> None:
        root = ParsedNode(kind="Loop")
        root.children.append(root)
        with pytest.raises(StructureError):
            build_tree(root)

    def test_deep_tree_builds_without_recursion_limit(self) -> None:
        # Given a chain far deeper than the interpreter recursion limit
        root = ParsedNode(kind="Expr")
        current = root
        for _ in range(20_000):
            child = ParsedNode(kind="Expr")
            current.children.append(child)
            current = child

        # When
        tree = build_tree(root)

        # Then
        assert len(tree) == 20_001
        assert tree.root.height == 20_001
        assert tree[20_000].depth == 20_000
        assert len(list(tree.postorder())) == 20_001

    def test_node_shorthand_wraps_strings_in_leaves(self) -> None:
        tree = build_tree(node("Call", "f", node("Args")))
        assert [(n.kind, n.value) for n in tree] == [
            ("Call", None),
            ("Leaf", "f"),
            ("Args", None),
        ]


class TestBuildTreeFromRecords:
    def test_builds_preorder_from_any_record_order(self) -> None:
        # Given records listed children-first
        records = [
            NodeRecord(kind="Name", parent=2, value="x"),
            NodeRecord(kind="Stmt", parent=2),
            NodeRecord(kind="Block", parent=None),
        ]

        # When
        tree = build_tree_from_records(records)

        # Then children keep record order within their parent
        assert [n.kind for n in tree] == ["Block", "Name", "Stmt"]
        assert tree.root.children == (1, 2)

    def test_empty_records_missing_root(self) -> None:
        with pytest.raises(StructureError) as exc_info:
            build_tree_from_records([])
        assert exc_info.value.code == ErrorCode.STRUCTURE_MISSING_ROOT

    def test_no_root(self) -> None:
        records = [NodeRecord(kind="A", parent=1), NodeRecord(kind="B", parent=0)]
        with pytest.raises(StructureError) as exc_info:
            build_tree_from_records(records)
        assert exc_info.value.code == ErrorCode.STRUCTURE_MISSING_ROOT

    def test_multiple_roots(self) -> None:
        records = [NodeRecord(kind="A", parent=None), NodeRecord(kind="B", parent=None)]
        with pytest.raises(StructureError) as exc_info:
            build_tree_from_records(records)
        assert exc_info.value.code == ErrorCode.STRUCTURE_MULTIPLE_ROOTS
        assert exc_info.value.details["roots"] == [0, 1]

    def test_dangling_parent(self) -> None:
        records = [NodeRecord(kind="A", parent=None), NodeRecord(kind="B", parent=7)]
        with pytest.raises(StructureError) as exc_info:
            build_tree_from_records(records)
        assert exc_info.value.code == ErrorCode.STRUCTURE_DANGLING_PARENT

    def test_unreachable_cycle(self) -> None:
        # Given nodes 1 and 2 point at each other and never reach the root
        records = [
            NodeRecord(kind="Root", parent=None),
            NodeRecord(kind="A", parent=2),
            NodeRecord(kind="B", parent=1),
        ]

        with pytest.raises(StructureError) as exc_info:
            build_tree_from_records(records)
        assert exc_info.value.code == ErrorCode.STRUCTURE_CYCLE
        assert exc_info.value.details["nodes"] == [1, 2]

    def test_self_parent_is_cycle(self) -> None:
        records = [NodeRecord(kind="Root", parent=None), NodeRecord(kind="A", parent=1)]
        with pytest.raises(StructureError) as exc_info:
            build_tree_from_records(records)
        assert exc_info.value.code == ErrorCode.STRUCTURE_CYCLE


class TestConversions:
    def test_tree_from_dict_none_is_missing_root(self) -> None:
        with pytest.raises(StructureError):
            tree_from_dict(None)

    def test_tree_from_dict_child_without_kind_is_malformed(self) -> None:
        data = {"kind": "Block", "children": [{"kind": "Call"}, {"value": "x"}]}

        with pytest.raises(StructureError) as exc_info:
            tree_from_dict(data)

        assert exc_info.value.code == ErrorCode.STRUCTURE_MALFORMED_NODE
        assert exc_info.value.details["path"] == "root.children[1]"

    @pytest.mark.parametrize("data", [{"value": "x"}, {"kind": "Block", "children": ["x"]}])
    def test_tree_from_dict_rejects_entries_that_are_not_nodes(self, data: dict) -> None:
        with pytest.raises(StructureError) as exc_info:
            tree_from_dict(data)
        assert exc_info.value.code == ErrorCode.STRUCTURE_MALFORMED_NODE

    def test_to_parsed_copies_subtree(self) -> None:
        tree = build_tree(node("Block", node("Return", node("Name", value="x"))))

        parsed = to_parsed(tree, tree[1])

        assert parsed.kind == "Return"
        assert [c.value for c in parsed.children] == ["x"]
        assert build_tree(parsed).root.hash == tree[1].hash

    def test_to_parsed_is_independent_of_tree(self) -> None:
        tree = build_tree(node("Block", "a"))
        parsed = to_parsed(tree)
        parsed.children.clear()
        assert len(tree) == 2
