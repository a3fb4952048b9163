"""Matching stages and the mapping store."""

from astdelta.matching.bottomup import BottomUpMatcher
from astdelta.matching.mapping import MappingStore
from astdelta.matching.pipeline import STAGES, Matcher, MatchResult
from astdelta.matching.recovery import RecoveryMatcher
from astdelta.matching.signatures import SignatureIndex, isomorphic
from astdelta.matching.similarity import (
    dice,
    longest_common_subsequence,
    node_similarity,
    value_similarity,
)
from astdelta.matching.topdown import TopDownMatcher

__all__ = [
    "STAGES",
    "BottomUpMatcher",
    "MappingStore",
    "MatchResult",
    "Matcher",
    "RecoveryMatcher",
    "SignatureIndex",
    "TopDownMatcher",
    "dice",
    "isomorphic",
    "longest_common_subsequence",
    "node_similarity",
    "value_similarity",
]
