"""Engine constants.

Values here are implementation details, not user-configurable.
For configurable thresholds, see models.py (MatchingConfig).
"""

LEAF_HEIGHT = 1
"""Height of a node without children."""

HASH_DIGEST_SIZE = 16
"""Bytes of blake2b digest used for structural subtree hashes."""

VIRTUAL_ROOT_KIND = "<virtual-root>"
"""Kind of the synthetic parent placed above both roots during script generation."""

FIXTURE_COMMIT_MIN_LEN = 7
FIXTURE_COMMIT_MAX_LEN = 40
"""Accepted commit hash lengths in fixture identifiers."""
