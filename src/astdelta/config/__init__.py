"""Config module exports."""

from astdelta.config.loader import load_config
from astdelta.config.models import (
    AstDeltaConfig,
    BatchConfig,
    LoggingConfig,
    LogOutputConfig,
    MatchingConfig,
)

__all__ = [
    "load_config",
    "AstDeltaConfig",
    "BatchConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "MatchingConfig",
]
