"""Core module exports."""

from astdelta.core.errors import (
    AstDeltaError,
    ConfigError,
    ErrorCode,
    FrontEndError,
    InternalError,
    InvariantViolation,
    StructureError,
)
from astdelta.core.logging import (
    clear_pair_id,
    configure_logging,
    get_logger,
    get_pair_id,
    set_pair_id,
)

__all__ = [
    # Errors
    "AstDeltaError",
    "ConfigError",
    "ErrorCode",
    "FrontEndError",
    "InternalError",
    "InvariantViolation",
    "StructureError",
    # Logging
    "clear_pair_id",
    "configure_logging",
    "get_logger",
    "get_pair_id",
    "set_pair_id",
]
