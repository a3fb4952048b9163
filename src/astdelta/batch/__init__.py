"""Fixture identifiers and the batch pair runner."""

from astdelta.batch.corpus import FixtureId
from astdelta.batch.runner import DiffPair, PairOutcome, run_batch

__all__ = ["DiffPair", "FixtureId", "PairOutcome", "run_batch"]
