"""Matching pipeline: runs the stages in their fixed order.

seed → top-down → bottom-up → recovery. Each stage only adds pairs; the
mapping is frozen when the pipeline returns.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

import structlog

from astdelta.config.models import MatchingConfig
from astdelta.matching.bottomup import BottomUpMatcher
from astdelta.matching.mapping import MappingStore
from astdelta.matching.recovery import RecoveryMatcher
from astdelta.matching.signatures import SignatureIndex
from astdelta.matching.topdown import TopDownMatcher
from astdelta.tree.models import Tree

log = structlog.get_logger(__name__)

STAGES = ("seed", "top_down", "bottom_up", "recovery")


@dataclass
class MatchResult:
    """Frozen mapping plus per-stage bookkeeping."""

    mapping: MappingStore
    stage_counts: dict[str, int] = field(default_factory=dict)
    # Populated only when record_stages=True
    stage_snapshots: dict[str, frozenset[tuple[int, int]]] = field(default_factory=dict)


class Matcher:
    """Runs the four matching stages over one source/destination pair.

    Usage::

        result = Matcher(MatchingConfig()).match(src, dst)
        partner = result.mapping.dst_for(src.root)
    """

    def __init__(self, config: MatchingConfig | None = None) -> None:
        self.config = config or MatchingConfig()

    def match(
        self,
        src: Tree,
        dst: Tree,
        seed: Iterable[tuple[int, int]] | None = None,
        *,
        record_stages: bool = False,
    ) -> MatchResult:
        """Compute the mapping between ``src`` and ``dst``.

        Args:
            seed: Pre-existing ``(src_id, dst_id)`` pairs to start from.
            record_stages: Keep a mapping snapshot after every stage.
        """
        cfg = self.config
        mapping = MappingStore(src, dst)
        result = MatchResult(mapping=mapping)

        def checkpoint(stage: str, count: int) -> None:
            result.stage_counts[stage] = count
            if record_stages:
                result.stage_snapshots[stage] = mapping.id_pairs()

        if seed is not None:
            mapping.add_all(seed)
        checkpoint("seed", len(mapping))

        top_down = TopDownMatcher(
            src,
            dst,
            min_height=cfg.min_height_for_top_down,
            src_index=SignatureIndex(src),
            dst_index=SignatureIndex(dst),
        )
        checkpoint("top_down", top_down.match(mapping))

        bottom_up = BottomUpMatcher(src, dst, threshold=cfg.dice_threshold)
        checkpoint("bottom_up", len(bottom_up.match(mapping)))

        recovery = RecoveryMatcher(
            src,
            dst,
            threshold=cfg.recovery_similarity_threshold,
            value_weight=cfg.value_weight,
        )
        checkpoint("recovery", len(recovery.match(mapping)))

        mapping.freeze()
        log.debug("matching_done", pairs=len(mapping), **result.stage_counts)
        return result
