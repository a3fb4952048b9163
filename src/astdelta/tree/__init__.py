"""Tree Model: nodes, trees, builders and front-end adapters."""

from astdelta.tree.builder import (
    NodeRecord,
    ParsedNode,
    build_tree,
    build_tree_from_records,
    node,
    to_parsed,
    tree_from_dict,
)
from astdelta.tree.lines import LineIndex, LineRange, locate, range_of
from astdelta.tree.models import Node, Span, Tree

__all__ = [
    "LineIndex",
    "LineRange",
    "Node",
    "NodeRecord",
    "ParsedNode",
    "Span",
    "Tree",
    "build_tree",
    "build_tree_from_records",
    "locate",
    "node",
    "range_of",
    "to_parsed",
    "tree_from_dict",
]
