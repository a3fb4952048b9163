"""astdelta: structural diffing of syntax trees.

Typical use::

    from astdelta import build_tree, diff_trees, node

    src = build_tree(node("Block", node("Return", "x")))
    dst = build_tree(node("Block", node("Return", "y")))
    result = diff_trees(src, dst)
    for action in result.actions:
        print(action.to_dict())
"""

from astdelta.actions import Delete, Insert, Move, Update, generate_script, replay
from astdelta.config import AstDeltaConfig, MatchingConfig, load_config
from astdelta.core import AstDeltaError, InvariantViolation, StructureError
from astdelta.diff import DiffResult, SizeLimitExceeded, diff_trees, track_node
from astdelta.matching import Matcher, MappingStore
from astdelta.tree import (
    Node,
    ParsedNode,
    Tree,
    build_tree,
    build_tree_from_records,
    node,
    tree_from_dict,
)

__version__ = "0.1.0"

__all__ = [
    "AstDeltaConfig",
    "AstDeltaError",
    "Delete",
    "DiffResult",
    "Insert",
    "InvariantViolation",
    "MappingStore",
    "Matcher",
    "MatchingConfig",
    "Move",
    "Node",
    "ParsedNode",
    "SizeLimitExceeded",
    "StructureError",
    "Tree",
    "Update",
    "build_tree",
    "build_tree_from_records",
    "diff_trees",
    "generate_script",
    "load_config",
    "node",
    "replay",
    "track_node",
    "tree_from_dict",
]
