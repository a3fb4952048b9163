"""Edit script generation (Chawathe et al., as refined by GumTree).

Given a frozen mapping, walks the destination tree in pre-order while
editing a mutable working copy of the source:

- unmapped destination node: Insert under its parent's partner;
- mapped node with a different value: Update;
- mapped node under a non-partner parent: Move;
- children of every visited pair are re-aligned with an LCS over mapped
  children; mapped children outside the LCS become Moves.

Source nodes still unmapped after the walk are deleted, one Delete per
maximal unmapped subtree, deepest first. A virtual root sits above both
trees so a root replacement is an ordinary insert plus delete.

The working copy is checked against the destination at the end; a
mismatch means the mapping or the generator is broken and raises.
"""

from __future__ import annotations

from collections.abc import Iterator

import structlog

from astdelta.actions.models import Action, Delete, Insert, Move, Update
from astdelta.config.constants import VIRTUAL_ROOT_KIND
from astdelta.core.errors import InvariantViolation
from astdelta.matching.mapping import MappingStore
from astdelta.matching.similarity import longest_common_subsequence
from astdelta.tree.models import Node, Tree

log = structlog.get_logger(__name__)


class _WorkNode:
    """Mutable node of the working copy.

    ``src`` is the originating source node (None for inserted nodes),
    ``dst`` the destination node it currently stands for (None while
    unmapped).
    """

    __slots__ = ("kind", "value", "children", "parent", "src", "dst")

    def __init__(
        self,
        kind: str,
        value: str | None,
        src: Node | None = None,
        dst: Node | None = None,
    ) -> None:
        self.kind = kind
        self.value = value
        self.children: list[_WorkNode] = []
        self.parent: _WorkNode | None = None
        self.src = src
        self.dst = dst

    def detach(self) -> None:
        if self.parent is not None:
            self.parent.children.remove(self)
            self.parent = None

    def attach(self, parent: _WorkNode, position: int) -> None:
        parent.children.insert(position, self)
        self.parent = parent

    def preorder(self) -> Iterator[_WorkNode]:
        stack = [self]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(current.children))


class EditScriptGenerator:
    """Turns a mapping into an ordered edit script.

    One generator handles one mapping; call ``generate`` once.
    """

    def __init__(self, mapping: MappingStore) -> None:
        self.mapping = mapping
        self.src: Tree = mapping.src
        self.dst: Tree = mapping.dst
        self._root = _WorkNode(VIRTUAL_ROOT_KIND, None)
        # destination id -> working node standing for it
        self._partner: dict[int, _WorkNode] = {}
        self._src_in_order: set[int] = set()
        self._dst_in_order: set[int] = set()
        self.actions: list[Action] = []

    def generate(self) -> list[Action]:
        self.mapping.validate()
        self._copy_source()

        for x in self.dst.preorder():
            self._visit(x)

        self._delete_unmapped()
        self._verify()
        log.debug("script_generated", actions=len(self.actions))
        return self.actions

    # --- Setup ----------------------------------------------------------

    def _copy_source(self) -> None:
        work = [_WorkNode(n.kind, n.value, src=n) for n in self.src]
        for n in self.src:
            for child_id in n.children:
                work[child_id].attach(work[n.id], len(work[n.id].children))
        work[0].attach(self._root, 0)

        for src_node, dst_node in self.mapping:
            w = work[src_node.id]
            w.dst = dst_node
            self._partner[dst_node.id] = w

    # --- Walk -----------------------------------------------------------

    def _visit(self, x: Node) -> None:
        y = self.dst.parent(x)
        z = self._root if y is None else self._partner[y.id]
        w = self._partner.get(x.id)

        if w is None:
            k = self._find_pos(x)
            w = _WorkNode(x.kind, x.value, dst=x)
            w.attach(z, k)
            self._partner[x.id] = w
            self.actions.append(Insert(x, y, k))
        else:
            if w.value != x.value:
                assert w.src is not None
                self.actions.append(Update(w.src, w.value, x.value))
                w.value = x.value
            if w.parent is not z:
                assert w.src is not None
                w.detach()
                k = self._find_pos(x)
                w.attach(z, k)
                self.actions.append(Move(w.src, y, k))

        self._src_in_order.add(id(w))
        self._dst_in_order.add(x.id)
        self._align_children(w, x)

    def _align_children(self, w: _WorkNode, x: Node) -> None:
        dst_children = self.dst.children(x)
        for c in w.children:
            self._src_in_order.discard(id(c))
        for c in dst_children:
            self._dst_in_order.discard(c.id)

        s1 = [c for c in w.children if c.dst is not None and c.dst.parent == x.id]
        s2 = [c for c in dst_children if c.id in self._partner and self._partner[c.id].parent is w]
        if not s1 or not s2:
            return

        kept = longest_common_subsequence(s1, s2, lambda a, b: a.dst is b)
        for a, b in kept:
            self._src_in_order.add(id(a))
            self._dst_in_order.add(b.id)

        for b in s2:
            if b.id in self._dst_in_order:
                continue
            a = self._partner[b.id]
            assert a.src is not None
            a.detach()
            k = self._find_pos(b)
            a.attach(w, k)
            self.actions.append(Move(a.src, x, k))
            self._src_in_order.add(id(a))
            self._dst_in_order.add(b.id)

    def _find_pos(self, x: Node) -> int:
        """Target index for ``x`` among its parent's working children.

        Right after the partner of the nearest in-order left sibling, or
        first when there is none.
        """
        y = self.dst.parent(x)
        siblings = [x] if y is None else self.dst.children(y)
        index = siblings.index(x)
        for v in reversed(siblings[:index]):
            if v.id in self._dst_in_order:
                u = self._partner[v.id]
                assert u.parent is not None
                return u.parent.children.index(u) + 1
        return 0

    # --- Deletes --------------------------------------------------------

    def _delete_unmapped(self) -> None:
        doomed: list[_WorkNode] = []
        nodes = list(self._root.preorder())
        for w in reversed(nodes):
            if w is self._root or w.dst is not None:
                continue
            parent = w.parent
            if parent is self._root or (parent is not None and parent.dst is not None):
                assert w.src is not None
                doomed.append(w)
                self.actions.append(Delete(w.src))
        for w in doomed:
            w.detach()

    # --- Verification ---------------------------------------------------

    def _verify(self) -> None:
        roots = self._root.children
        if len(roots) != 1:
            raise InvariantViolation.script_mismatch("root count", roots=len(roots))
        expected = self.dst.preorder()
        produced = list(roots[0].preorder())
        if len(produced) != len(expected):
            raise InvariantViolation.script_mismatch(
                "node count", produced=len(produced), expected=len(expected)
            )
        for w, x in zip(produced, expected, strict=True):
            if w.dst is not x:
                raise InvariantViolation.script_mismatch("node order", dst_id=x.id)
            if w.kind != x.kind or w.value != x.value or len(w.children) != len(x.children):
                raise InvariantViolation.script_mismatch("node label", dst_id=x.id)


def generate_script(mapping: MappingStore) -> list[Action]:
    """Edit script transforming ``mapping.src`` into ``mapping.dst``.

    Raises:
        InvariantViolation: if the mapping is not injective or pairs nodes of
            different kinds, or the script fails to reproduce the destination.
    """
    return EditScriptGenerator(mapping).generate()
