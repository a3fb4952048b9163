"""Tests for matching/mapping.py: the injective mapping store."""

from __future__ import annotations

import pytest

from astdelta.core.errors import ErrorCode, InvariantViolation
from astdelta.matching.mapping import MappingStore
from astdelta.tree import Tree, build_tree, node


@pytest.fixture
def trees() -> tuple[Tree, Tree]:
    src = build_tree(node("Block", node("Call", "f"), node("Call", "g")))
    dst = build_tree(node("Block", node("Call", "g"), node("Call", "f")))
    return src, dst


class TestAdd:
    def test_given_pair_when_added_then_both_directions_resolve(
        self, trees: tuple[Tree, Tree]
    ) -> None:
        # Given
        src, dst = trees
        mapping = MappingStore(src, dst)

        # When
        mapping.add(src[1], dst[3])

        # Then
        assert mapping.dst_for(src[1]) is dst[3]
        assert mapping.src_for(dst[3]) is src[1]
        assert mapping.has_src(src[1]) and mapping.has_dst(dst[3])
        assert (src[1], dst[3]) in mapping
        assert len(mapping) == 1

    def test_unmapped_lookups_are_none(self, trees: tuple[Tree, Tree]) -> None:
        src, dst = trees
        mapping = MappingStore(src, dst)
        assert mapping.dst_for(src.root) is None
        assert mapping.src_for(dst.root) is None

    def test_given_mapped_src_when_added_again_then_conflict(
        self, trees: tuple[Tree, Tree]
    ) -> None:
        src, dst = trees
        mapping = MappingStore(src, dst)
        mapping.add(src[1], dst[3])

        with pytest.raises(InvariantViolation) as exc_info:
            mapping.add(src[1], dst[1])
        assert exc_info.value.code == ErrorCode.INVARIANT_MAPPING_CONFLICT
        assert exc_info.value.details["existing_dst_for_src"] == 3

    def test_given_mapped_dst_when_added_again_then_conflict(
        self, trees: tuple[Tree, Tree]
    ) -> None:
        src, dst = trees
        mapping = MappingStore(src, dst)
        mapping.add(src[1], dst[3])

        with pytest.raises(InvariantViolation):
            mapping.add(src[3], dst[3])
        assert len(mapping) == 1

    def test_given_frozen_when_added_then_rejected(self, trees: tuple[Tree, Tree]) -> None:
        src, dst = trees
        mapping = MappingStore(src, dst)
        mapping.freeze()

        with pytest.raises(InvariantViolation) as exc_info:
            mapping.add(src.root, dst.root)
        assert exc_info.value.code == ErrorCode.INVARIANT_MAPPING_FROZEN
        assert mapping.frozen


class TestSubtreesAndSeeds:
    def test_add_subtree_pairs_by_offset(self, trees: tuple[Tree, Tree]) -> None:
        src, dst = trees
        mapping = MappingStore(src, dst)

        added = mapping.add_subtree(src[1], dst[3])

        assert added == 2
        assert mapping.id_pairs() == frozenset({(1, 3), (2, 4)})

    def test_add_subtree_size_mismatch(self, trees: tuple[Tree, Tree]) -> None:
        src, dst = trees
        with pytest.raises(InvariantViolation):
            MappingStore(src, dst).add_subtree(src.root, dst[1])

    def test_subtree_free(self, trees: tuple[Tree, Tree]) -> None:
        src, dst = trees
        mapping = MappingStore(src, dst)
        mapping.add(src[2], dst[4])
        assert not mapping.src_subtree_free(src.root)
        assert not mapping.src_subtree_free(src[1])
        assert mapping.src_subtree_free(src[3])
        assert mapping.dst_subtree_free(dst[1])

    def test_add_all_from_plain_pairs(self, trees: tuple[Tree, Tree]) -> None:
        src, dst = trees
        mapping = MappingStore(src, dst)
        mapping.add_all([(0, 0), (1, 3)])
        assert mapping.id_pairs() == frozenset({(0, 0), (1, 3)})

    def test_add_all_out_of_range(self, trees: tuple[Tree, Tree]) -> None:
        src, dst = trees
        with pytest.raises(InvariantViolation):
            MappingStore(src, dst).add_all([(0, 99)])


class TestViews:
    def test_pairs_sorted_by_source(self, trees: tuple[Tree, Tree]) -> None:
        src, dst = trees
        mapping = MappingStore(src, dst)
        mapping.add(src[3], dst[1])
        mapping.add(src[1], dst[3])
        assert [(a.id, b.id) for a, b in mapping.pairs()] == [(1, 3), (3, 1)]

    def test_copy_is_independent_and_unfrozen(self, trees: tuple[Tree, Tree]) -> None:
        src, dst = trees
        mapping = MappingStore(src, dst)
        mapping.add(src.root, dst.root)
        mapping.freeze()

        clone = mapping.copy()
        clone.add(src[1], dst[3])

        assert len(mapping) == 1
        assert len(clone) == 2

    def test_contains_rejects_non_pairs(self, trees: tuple[Tree, Tree]) -> None:
        src, dst = trees
        mapping = MappingStore(src, dst)
        assert (0, 0) not in mapping
        assert "x" not in mapping


class TestValidate:
    def test_consistent_mapping_passes(self, trees: tuple[Tree, Tree]) -> None:
        src, dst = trees
        mapping = MappingStore(src, dst)
        mapping.add_subtree(src[1], dst[3])
        mapping.validate()

    def test_kind_mismatch_detected(self, trees: tuple[Tree, Tree]) -> None:
        src, dst = trees
        mapping = MappingStore(src, dst)
        mapping.add(src.root, dst[1])

        with pytest.raises(InvariantViolation) as exc_info:
            mapping.validate()
        assert exc_info.value.code == ErrorCode.INVARIANT_KIND_MISMATCH
