"""One-call diff engine and tracked-node summaries."""

from astdelta.diff.engine import DiffResult, SizeLimitExceeded, diff_trees
from astdelta.diff.tracking import NodeChange, track_lines, track_node

__all__ = [
    "DiffResult",
    "NodeChange",
    "SizeLimitExceeded",
    "diff_trees",
    "track_lines",
    "track_node",
]
