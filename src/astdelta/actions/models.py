"""Edit actions.

All actions reference nodes by identity. ``Delete``, ``Update`` and
``Move`` name source nodes; ``Insert`` names destination nodes. Parents
are always destination nodes, i.e. where the node ends up; ``None`` stands
for the (virtual) slot above the tree root. Positions are child indices in
the evolving working copy at the moment the action is applied, with
deletions applied last.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

from astdelta.tree.models import Node


def _ref(node: Node | None) -> dict[str, Any] | None:
    if node is None:
        return None
    ref: dict[str, Any] = {"id": node.id, "kind": node.kind}
    if node.value is not None:
        ref["value"] = node.value
    return ref


@dataclass(frozen=True, slots=True)
class Insert:
    """Insert destination ``node`` as the ``position``-th child of ``parent``.

    ``subtree=True`` inserts the node's whole destination subtree at once.
    """

    node: Node
    parent: Node | None
    position: int
    subtree: bool = False

    name: ClassVar[str] = "insert"

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.name,
            "node": _ref(self.node),
            "parent": _ref(self.parent),
            "position": self.position,
            "subtree": self.subtree,
        }


@dataclass(frozen=True, slots=True)
class Delete:
    """Remove source ``node`` together with its current subtree."""

    node: Node

    name: ClassVar[str] = "delete"

    def to_dict(self) -> dict[str, Any]:
        return {"action": self.name, "node": _ref(self.node)}


@dataclass(frozen=True, slots=True)
class Update:
    """Change the value of source ``node``."""

    node: Node
    old_value: str | None
    new_value: str | None

    name: ClassVar[str] = "update"

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.name,
            "node": _ref(self.node),
            "old_value": self.old_value,
            "new_value": self.new_value,
        }


@dataclass(frozen=True, slots=True)
class Move:
    """Detach source ``node`` and re-attach it under ``parent`` at ``position``."""

    node: Node
    parent: Node | None
    position: int

    name: ClassVar[str] = "move"

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.name,
            "node": _ref(self.node),
            "parent": _ref(self.parent),
            "position": self.position,
        }


Action = Insert | Delete | Update | Move
