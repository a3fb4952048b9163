"""One-call structural diff of two trees.

Runs the matching pipeline and the edit script generator. No I/O, no
shared state: every call owns its indexes, mapping and working copy.

Pairs too large for full matching fall back to replacing the whole tree
(insert the destination subtree, delete the source root) and carry a
``SizeLimitExceeded`` warning instead of raising.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

import structlog

from astdelta.actions.generator import generate_script
from astdelta.actions.models import Action, Delete, Insert
from astdelta.config.models import AstDeltaConfig, MatchingConfig
from astdelta.core.errors import InvariantViolation
from astdelta.core.logging import get_pair_id
from astdelta.matching.mapping import MappingStore
from astdelta.matching.pipeline import Matcher
from astdelta.tree.models import Node, Tree

log = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class SizeLimitExceeded:
    """Warning record: the pair was diffed with the whole-tree fallback."""

    src_size: int
    dst_size: int
    limit: int

    @property
    def message(self) -> str:
        return (
            f"{self.src_size} + {self.dst_size} nodes exceed "
            f"max_tree_size_for_full_matching={self.limit}; replaced whole tree"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "warning": "size_limit_exceeded",
            "src_size": self.src_size,
            "dst_size": self.dst_size,
            "limit": self.limit,
            "message": self.message,
        }


@dataclass
class DiffResult:
    """Outcome of one diff.

    ``store`` is the frozen mapping; ``mapping`` exposes it as sorted
    ``(src_id, dst_id)`` pairs.
    """

    store: MappingStore = field(repr=False)
    actions: list[Action]
    warnings: list[SizeLimitExceeded] = field(default_factory=list)
    stage_counts: dict[str, int] = field(default_factory=dict)
    stage_snapshots: dict[str, frozenset[tuple[int, int]]] = field(default_factory=dict)

    @property
    def src(self) -> Tree:
        return self.store.src

    @property
    def dst(self) -> Tree:
        return self.store.dst

    @property
    def mapping(self) -> list[tuple[int, int]]:
        return sorted(self.store.id_pairs())

    def dst_for(self, node: Node) -> Node | None:
        return self.store.dst_for(node)

    def src_for(self, node: Node) -> Node | None:
        return self.store.src_for(node)

    def action_counts(self) -> dict[str, int]:
        return dict(Counter(action.name for action in self.actions))

    def to_dict(self) -> dict[str, Any]:
        """Plain-data form, safe to pickle and to serialize as JSON."""
        return {
            "src_size": len(self.src),
            "dst_size": len(self.dst),
            "mapping": [list(pair) for pair in self.mapping],
            "actions": [action.to_dict() for action in self.actions],
            "warnings": [w.to_dict() for w in self.warnings],
            "stage_counts": dict(self.stage_counts),
        }


def _matching_config(config: AstDeltaConfig | MatchingConfig | None) -> MatchingConfig:
    if config is None:
        return MatchingConfig()
    if isinstance(config, AstDeltaConfig):
        return config.matching
    return config


def diff_trees(
    src: Tree,
    dst: Tree,
    config: AstDeltaConfig | MatchingConfig | None = None,
    *,
    seed: Iterable[tuple[int, int]] | None = None,
    record_stages: bool = False,
) -> DiffResult:
    """Compute the mapping and edit script from ``src`` to ``dst``.

    Args:
        src: Source (old) tree.
        dst: Destination (new) tree.
        config: Matching thresholds; defaults when omitted.
        seed: ``(src_id, dst_id)`` pairs to start matching from, e.g. the
            mapping of a previous comparison.
        record_stages: Keep a mapping snapshot after every matching stage.

    Returns:
        DiffResult with a frozen mapping and the ordered edit script.

    Raises:
        InvariantViolation: on an inconsistent seed or an engine defect;
            ``details`` carries the pair sizes and the current pair id.
    """
    cfg = _matching_config(config)
    limit = cfg.max_tree_size_for_full_matching

    if len(src) + len(dst) > limit:
        warning = SizeLimitExceeded(src_size=len(src), dst_size=len(dst), limit=limit)
        log.warning(
            "size_limit_exceeded",
            src_size=warning.src_size,
            dst_size=warning.dst_size,
            limit=limit,
        )
        store = MappingStore(src, dst)
        store.freeze()
        actions: list[Action] = [
            Insert(dst.root, None, 0, subtree=True),
            Delete(src.root),
        ]
        return DiffResult(store=store, actions=actions, warnings=[warning])

    try:
        matched = Matcher(cfg).match(src, dst, seed, record_stages=record_stages)
        actions = generate_script(matched.mapping)
    except InvariantViolation as exc:
        log.error("diff_invariant_violation", error=exc.error_name, **exc.details)
        raise exc.with_context(
            src_size=len(src),
            dst_size=len(dst),
            pair_id=get_pair_id(),
        ) from exc

    result = DiffResult(
        store=matched.mapping,
        actions=actions,
        stage_counts=matched.stage_counts,
        stage_snapshots=matched.stage_snapshots,
    )
    log.debug("diff_done", pairs=len(matched.mapping), **result.action_counts())
    return result
