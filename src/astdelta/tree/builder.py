"""Build Trees from parsed forms.

Two input shapes are accepted:
- nested ``ParsedNode`` objects (what front ends produce)
- flat ``NodeRecord`` lists with parent indices (arena form)

Both paths run in O(n) without recursion and compute height, size, depth
and structural hash bottom-up.
"""

from __future__ import annotations

import hashlib
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from astdelta.config.constants import HASH_DIGEST_SIZE, LEAF_HEIGHT
from astdelta.core.errors import StructureError
from astdelta.tree.models import Node, Span, Tree


@dataclass(slots=True)
class ParsedNode:
    """Mutable input node handed over by a front end."""

    kind: str
    value: str | None = None
    children: list[ParsedNode] = field(default_factory=list)
    span: Span = Span()


@dataclass(frozen=True, slots=True)
class NodeRecord:
    """Flat arena entry. Children follow record order within a parent."""

    kind: str
    parent: int | None
    value: str | None = None
    span: Span = Span()


def _digest(kind: str, value: str | None, child_hashes: Sequence[str]) -> str:
    h = hashlib.blake2b(digest_size=HASH_DIGEST_SIZE)
    h.update(kind.encode())
    h.update(b"\x00")
    if value is not None:
        h.update(b"\x01")
        h.update(value.encode())
    h.update(b"\x00")
    for child in child_hashes:
        h.update(child.encode())
        h.update(b",")
    return h.hexdigest()


def _finalize(
    kinds: list[str],
    values: list[str | None],
    spans: list[Span],
    parents: list[int | None],
    children: list[list[int]],
) -> Tree:
    """Compute derived fields. Indices must be in pre-order."""
    n = len(kinds)
    heights = [LEAF_HEIGHT] * n
    sizes = [1] * n
    hashes = [""] * n
    depths = [0] * n

    for i in range(1, n):
        parent = parents[i]
        assert parent is not None
        depths[i] = depths[parent] + 1

    for i in range(n - 1, -1, -1):
        kids = children[i]
        if kids:
            heights[i] = 1 + max(heights[c] for c in kids)
            sizes[i] = 1 + sum(sizes[c] for c in kids)
        hashes[i] = _digest(kinds[i], values[i], [hashes[c] for c in kids])

    return Tree(
        [
            Node(
                id=i,
                kind=kinds[i],
                value=values[i],
                span=spans[i],
                parent=parents[i],
                children=tuple(children[i]),
                height=heights[i],
                size=sizes[i],
                depth=depths[i],
                hash=hashes[i],
            )
            for i in range(n)
        ]
    )


def build_tree(root: ParsedNode | None) -> Tree:
    """Build a Tree from a nested parsed form.

    Raises:
        StructureError: if ``root`` is None, or a parsed node is reachable
            more than once (shared or cyclic input).
    """
    if root is None:
        raise StructureError.missing_root()

    kinds: list[str] = []
    values: list[str | None] = []
    spans: list[Span] = []
    parents: list[int | None] = []
    children: list[list[int]] = []
    seen: set[int] = set()

    stack: list[tuple[ParsedNode, int | None]] = [(root, None)]
    while stack:
        parsed, parent = stack.pop()
        if id(parsed) in seen:
            raise StructureError.cycle([len(kinds)])
        seen.add(id(parsed))

        index = len(kinds)
        kinds.append(parsed.kind)
        values.append(parsed.value)
        spans.append(parsed.span)
        parents.append(parent)
        children.append([])
        if parent is not None:
            children[parent].append(index)
        for child in reversed(parsed.children):
            stack.append((child, index))

    return _finalize(kinds, values, spans, parents, children)


def build_tree_from_records(records: Sequence[NodeRecord]) -> Tree:
    """Build a Tree from a flat arena with parent indices.

    Record order need not be pre-order; the resulting Tree re-indexes nodes.

    Raises:
        StructureError: no root, several roots, a parent index out of range,
            or nodes unreachable from the root.
    """
    if not records:
        raise StructureError.missing_root()

    roots = [i for i, r in enumerate(records) if r.parent is None]
    if not roots:
        raise StructureError.missing_root()
    if len(roots) > 1:
        raise StructureError.multiple_roots(roots)

    kids: list[list[int]] = [[] for _ in records]
    for i, record in enumerate(records):
        if record.parent is None:
            continue
        if not (0 <= record.parent < len(records)):
            raise StructureError.dangling_parent(i, record.parent)
        if record.parent == i:
            raise StructureError.cycle([i])
        kids[record.parent].append(i)

    parsed = [ParsedNode(kind=r.kind, value=r.value, span=r.span) for r in records]
    reached = 0
    stack = [roots[0]]
    while stack:
        i = stack.pop()
        reached += 1
        parsed[i].children = [parsed[c] for c in kids[i]]
        stack.extend(kids[i])

    if reached != len(records):
        orphans = _unreachable(records, kids, roots[0])
        raise StructureError.cycle(orphans)

    return build_tree(parsed[roots[0]])


def _unreachable(records: Sequence[NodeRecord], kids: list[list[int]], root: int) -> list[int]:
    seen = {root}
    stack = [root]
    while stack:
        for child in kids[stack.pop()]:
            if child not in seen:
                seen.add(child)
                stack.append(child)
    return [i for i in range(len(records)) if i not in seen]


def tree_from_dict(data: Mapping[str, Any] | None) -> Tree:
    """Build a Tree from the nested dict form produced by ``Tree.to_dict``.

    Raises:
        StructureError: if ``data`` is None or an entry is not a mapping
            with a ``"kind"``.
    """
    if data is None:
        raise StructureError.missing_root()
    return build_tree(_parsed_from_dict(data))


def _node_kind(entry: Any, path: str) -> str:
    if not isinstance(entry, Mapping):
        raise StructureError.malformed_node(path, "expected a mapping")
    if "kind" not in entry:
        raise StructureError.malformed_node(path, "missing \"kind\"")
    return str(entry["kind"])


def _parsed_from_dict(data: Mapping[str, Any]) -> ParsedNode:
    root = ParsedNode(kind=_node_kind(data, "root"))
    stack: list[tuple[Mapping[str, Any], ParsedNode, str]] = [(data, root, "root")]
    while stack:
        entry, parsed, path = stack.pop()
        value = entry.get("value")
        parsed.value = None if value is None else str(value)
        span = entry.get("span")
        if span is not None:
            parsed.span = Span(int(span[0]), int(span[1]))
        for index, child in enumerate(entry.get("children", ())):
            child_path = f"{path}.children[{index}]"
            child_node = ParsedNode(kind=_node_kind(child, child_path))
            parsed.children.append(child_node)
            stack.append((child, child_node, child_path))
    return root


def to_parsed(tree: Tree, node: Node | None = None) -> ParsedNode:
    """Copy a (sub)tree back into mutable ``ParsedNode`` form."""
    start = tree.root if node is None else node
    copies: dict[int, ParsedNode] = {}
    for current in tree.subtree(start):
        copy = ParsedNode(kind=current.kind, value=current.value, span=current.span)
        copies[current.id] = copy
        if current.id != start.id and current.parent is not None:
            copies[current.parent].children.append(copy)
    return copies[start.id]


def node(kind: str, *children: ParsedNode | str, value: str | None = None) -> ParsedNode:
    """Shorthand constructor: ``node("Call", node("Name", value="f"))``.

    Bare string children become value-only leaves of kind ``"Leaf"``.
    """
    kids = [ParsedNode(kind="Leaf", value=c) if isinstance(c, str) else c for c in children]
    return ParsedNode(kind=kind, value=value, children=kids)
