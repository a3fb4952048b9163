"""Batch runner: diff many independent pairs, inline or in a process pool.

Pairs share nothing, so each worker builds its own trees, indexes and
mapping. A failing pair is recorded in its ``PairOutcome.error`` and the
batch continues. There are no retries.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable
from concurrent.futures import FIRST_COMPLETED, Future, ProcessPoolExecutor, wait
from dataclasses import dataclass
from typing import Any

import structlog

from astdelta.config.models import AstDeltaConfig, MatchingConfig
from astdelta.core.errors import AstDeltaError, InternalError
from astdelta.core.logging import clear_pair_id, set_pair_id
from astdelta.diff.engine import diff_trees
from astdelta.tree.models import Tree
from astdelta.tree.sources import parse_source

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class DiffPair:
    """One unit of work.

    ``src``/``dst`` are either built Trees or source text; text needs
    ``language`` so the front end can parse it.
    """

    pair_id: str
    src: Tree | str | bytes
    dst: Tree | str | bytes
    language: str | None = None


@dataclass
class PairOutcome:
    """Result of one pair: ``result`` on success, ``error`` on failure."""

    pair_id: str
    result: dict[str, Any] | None = None
    error: dict[str, Any] | None = None
    elapsed_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


def _as_tree(side: Tree | str | bytes, language: str | None) -> Tree:
    if isinstance(side, Tree):
        return side
    if language is None:
        raise InternalError.unexpected("source text given without a language")
    return parse_source(side, language)


def _diff_pair(pair: DiffPair, config: MatchingConfig) -> PairOutcome:
    """Diff a single pair (worker function)."""
    start = time.monotonic()
    outcome = PairOutcome(pair_id=pair.pair_id)
    set_pair_id(pair.pair_id)
    try:
        src = _as_tree(pair.src, pair.language)
        dst = _as_tree(pair.dst, pair.language)
        outcome.result = diff_trees(src, dst, config).to_dict()
    except AstDeltaError as e:
        log.error("pair_failed", error=e.error_name, message=e.message)
        outcome.error = e.to_dict()
    except Exception as e:
        log.exception("pair_crashed")
        outcome.error = InternalError.unexpected(str(e), exception=type(e).__name__).to_dict()
    finally:
        clear_pair_id()
    outcome.elapsed_ms = int((time.monotonic() - start) * 1000)
    return outcome


def run_batch(
    pairs: Iterable[DiffPair],
    config: AstDeltaConfig | None = None,
    max_workers: int | None = None,
    should_stop: Callable[[], bool] | None = None,
) -> list[PairOutcome]:
    """Diff every pair and return outcomes in input order.

    Args:
        pairs: Work items.
        config: Engine config; ``config.batch.max_workers`` is the default
            worker count.
        max_workers: Override for the worker count. 1 runs inline.
        should_stop: Polled before each pair is started; once it returns
            True no further pairs are started and the outcomes collected so
            far are returned. The pool holds at most ``max_workers`` pairs
            in flight, so queued pairs are never started after a stop.
    """
    cfg = config or AstDeltaConfig()
    workers = max_workers if max_workers is not None else cfg.batch.max_workers
    items = list(pairs)
    stop = should_stop or (lambda: False)

    if workers > 1 and len(items) > 1:
        outcomes = _parallel(items, cfg.matching, workers, stop)
    else:
        outcomes = _sequential(items, cfg.matching, stop)

    failed = sum(1 for o in outcomes if not o.ok)
    log.info("batch_done", pairs=len(outcomes), failed=failed, workers=workers)
    return outcomes


def _sequential(
    items: list[DiffPair],
    config: MatchingConfig,
    stop: Callable[[], bool],
) -> list[PairOutcome]:
    outcomes = []
    for pair in items:
        if stop():
            log.info("batch_stopped", remaining=len(items) - len(outcomes))
            break
        outcomes.append(_diff_pair(pair, config))
    return outcomes


def _parallel(
    items: list[DiffPair],
    config: MatchingConfig,
    workers: int,
    stop: Callable[[], bool],
) -> list[PairOutcome]:
    """Keep at most ``workers`` pairs in flight so ``stop`` gates every start."""
    results: dict[int, PairOutcome] = {}
    queue = iter(enumerate(items))
    stopped = False

    with ProcessPoolExecutor(max_workers=workers) as executor:
        pending: dict[Future[PairOutcome], int] = {}

        def fill() -> None:
            nonlocal stopped
            while not stopped and len(pending) < workers:
                entry = next(queue, None)
                if entry is None:
                    return
                index, pair = entry
                if stop():
                    log.info("batch_stopped", remaining=len(items) - index)
                    stopped = True
                    return
                pending[executor.submit(_diff_pair, pair, config)] = index

        fill()
        while pending:
            done, _ = wait(pending, return_when=FIRST_COMPLETED)
            for future in done:
                index = pending.pop(future)
                try:
                    results[index] = future.result()
                except Exception as e:
                    # worker process died or the pair could not be pickled
                    log.error("pair_crashed", pair_id=items[index].pair_id, error=str(e))
                    results[index] = PairOutcome(
                        pair_id=items[index].pair_id,
                        error=InternalError.unexpected(str(e), exception=type(e).__name__).to_dict(),
                    )
            fill()

    return [results[i] for i in sorted(results)]
