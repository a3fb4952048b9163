"""Follow one source node through a diff.

Change types for a tracked node:
- removed: the node has no partner
- moved: the node itself was moved
- updated: the node's own value changed
- body_changed: some action touched a node strictly inside its subtree
- no_change: none of the above
"""

from __future__ import annotations

from dataclasses import dataclass

from astdelta.actions.models import Delete, Insert, Move, Update
from astdelta.diff.engine import DiffResult
from astdelta.tree.lines import LineIndex, LineRange, locate, range_of
from astdelta.tree.models import Node

REMOVED = "removed"
MOVED = "moved"
UPDATED = "updated"
BODY_CHANGED = "body_changed"
NO_CHANGE = "no_change"


@dataclass(frozen=True, slots=True)
class NodeChange:
    """Change summary for one tracked source node."""

    node: Node
    partner: Node | None
    changes: tuple[str, ...]
    partner_range: LineRange | None = None

    @property
    def changed(self) -> bool:
        return self.changes != (NO_CHANGE,)


def _touches_body(result: DiffResult, node: Node, partner: Node) -> bool:
    src, dst = result.src, result.dst
    for action in result.actions:
        if isinstance(action, Insert):
            # an inserted child of the partner lands inside the body too
            if action.parent is not None and (
                action.parent is partner or dst.is_descendant(action.parent, partner)
            ):
                return True
        elif isinstance(action, Move):
            if src.is_descendant(action.node, node):
                return True
            if action.parent is not None and (
                action.parent is partner or dst.is_descendant(action.parent, partner)
            ):
                return True
        elif isinstance(action, (Delete, Update)):
            if src.is_descendant(action.node, node):
                return True
    return False


def track_node(result: DiffResult, node: Node, dst_lines: LineIndex | None = None) -> NodeChange:
    """Summarize what happened to source ``node``.

    With ``dst_lines``, the partner's line range is filled in.
    """
    partner = result.dst_for(node)
    if partner is None:
        return NodeChange(node=node, partner=None, changes=(REMOVED,))

    changes: list[str] = []
    if any(isinstance(a, Move) and a.node is node for a in result.actions):
        changes.append(MOVED)
    if any(isinstance(a, Update) and a.node is node for a in result.actions):
        changes.append(UPDATED)
    if _touches_body(result, node, partner):
        changes.append(BODY_CHANGED)

    partner_range = range_of([partner], dst_lines) if dst_lines is not None else None
    return NodeChange(
        node=node,
        partner=partner,
        changes=tuple(changes) or (NO_CHANGE,),
        partner_range=partner_range,
    )


def track_lines(
    result: DiffResult,
    src_lines: LineIndex,
    start_line: int,
    end_line: int,
    kind: str | None = None,
    dst_lines: LineIndex | None = None,
) -> NodeChange | None:
    """Track the source node spanning ``start_line..end_line``.

    Returns None when no node of ``kind`` spans exactly those lines.
    """
    node = locate(result.src, src_lines, start_line, end_line, kind)
    if node is None:
        return None
    return track_node(result, node, dst_lines)
