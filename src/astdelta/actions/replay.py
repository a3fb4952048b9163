"""Apply an edit script to a copy of the source tree.

Replay is independent of the generator: it only interprets the actions.
The mapping is needed to resolve destination parents that already exist
in the source (a mapped parent stands for its source partner).
"""

from __future__ import annotations

from collections.abc import Iterable

from astdelta.actions.models import Action, Delete, Insert, Move, Update
from astdelta.core.errors import InvariantViolation
from astdelta.matching.mapping import MappingStore
from astdelta.tree.builder import ParsedNode, build_tree, to_parsed
from astdelta.tree.models import Node, Tree


class _Replay:
    def __init__(self, mapping: MappingStore) -> None:
        src = mapping.src
        self.dst = mapping.dst
        self.top = ParsedNode(kind="<replay-root>")
        self.parents: dict[int, ParsedNode] = {}
        # source id -> working node
        self.work: dict[int, ParsedNode] = {}
        for n in src:
            copy = ParsedNode(kind=n.kind, value=n.value, span=n.span)
            self.work[n.id] = copy
            parent = self.top if n.parent is None else self.work[n.parent]
            self._attach(copy, parent, len(parent.children))
        # destination id -> working node
        self.placed: dict[int, ParsedNode] = {
            dst_node.id: self.work[src_node.id] for src_node, dst_node in mapping
        }

    def _attach(self, child: ParsedNode, parent: ParsedNode, position: int) -> None:
        if not 0 <= position <= len(parent.children):
            raise InvariantViolation.script_mismatch("position out of range", position=position)
        parent.children.insert(position, child)
        self.parents[id(child)] = parent

    def _detach(self, child: ParsedNode) -> None:
        parent = self.parents.pop(id(child), None)
        if parent is not None:
            # ParsedNode compares by value; equal-looking siblings must survive
            parent.children[:] = [c for c in parent.children if c is not child]

    def _resolve(self, parent: Node | None) -> ParsedNode:
        if parent is None:
            return self.top
        target = self.placed.get(parent.id)
        if target is None:
            raise InvariantViolation.script_mismatch("unknown parent", dst_id=parent.id)
        return target

    def _source(self, node: Node) -> ParsedNode:
        target = self.work.get(node.id)
        if target is None:
            raise InvariantViolation.script_mismatch("unknown source node", src_id=node.id)
        return target

    def apply(self, action: Action) -> None:
        if isinstance(action, Insert):
            parent = self._resolve(action.parent)
            if action.subtree:
                inserted = to_parsed(self.dst, action.node)
            else:
                inserted = ParsedNode(kind=action.node.kind, value=action.node.value, span=action.node.span)
            self._attach(inserted, parent, action.position)
            self.placed[action.node.id] = inserted
        elif isinstance(action, Delete):
            self._detach(self._source(action.node))
        elif isinstance(action, Update):
            target = self._source(action.node)
            if target.value != action.old_value:
                raise InvariantViolation.script_mismatch(
                    "stale update", src_id=action.node.id, value=target.value
                )
            target.value = action.new_value
        elif isinstance(action, Move):
            target = self._source(action.node)
            parent = self._resolve(action.parent)
            self._detach(target)
            self._attach(target, parent, action.position)
        else:
            raise TypeError(f"not an action: {action!r}")

    def result(self) -> Tree:
        if len(self.top.children) != 1:
            raise InvariantViolation.script_mismatch("root count", roots=len(self.top.children))
        return build_tree(self.top.children[0])


def replay(mapping: MappingStore, actions: Iterable[Action]) -> Tree:
    """Apply ``actions`` to a copy of ``mapping.src`` and return the result.

    For a correct script the result is structurally equal to
    ``mapping.dst``.

    Raises:
        InvariantViolation: if an action refers to an unknown node or an
            impossible position.
    """
    state = _Replay(mapping)
    for action in actions:
        state.apply(action)
    return state.result()
