"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (ASTDELTA__SECTION__KEY)
3. Project YAML (<root>/.astdelta/config.yaml)
4. Global YAML (~/.config/astdelta/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    ASTDELTA__<SECTION>__<KEY>=<VALUE>

Examples:
    ASTDELTA__LOGGING__LEVEL=DEBUG
    ASTDELTA__MATCHING__DICE_THRESHOLD=0.4
    ASTDELTA__BATCH__MAX_WORKERS=4
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        ASTDELTA__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs per-stage match counts for every pair.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class MatchingConfig(BaseModel):
    """Matcher thresholds and resource limits.

    Env vars:
        ASTDELTA__MATCHING__MIN_HEIGHT_FOR_TOP_DOWN: Smallest subtree height matched top-down
        ASTDELTA__MATCHING__DICE_THRESHOLD: Bottom-up container acceptance threshold
        ASTDELTA__MATCHING__RECOVERY_SIMILARITY_THRESHOLD: Child recovery threshold
        ASTDELTA__MATCHING__MAX_TREE_SIZE_FOR_FULL_MATCHING: Node cap per pair
    """

    min_height_for_top_down: int = Field(
        default=2,
        description="Subtrees shorter than this are left to the later stages. "
        "TRADEOFF: 1 matches identical leaves eagerly and can pair unrelated tokens.",
    )
    dice_threshold: float = Field(
        default=0.5,
        description="A container pair is accepted when the Dice coefficient of "
        "their matched descendants exceeds this value.",
    )
    recovery_similarity_threshold: float = Field(
        default=0.6,
        description="Minimum combined similarity for pairing unmatched children.",
    )
    value_weight: float = Field(
        default=0.5,
        description="Weight of value similarity against structural similarity "
        "when scoring child pairs.",
    )
    max_tree_size_for_full_matching: int = Field(
        default=100_000,
        description="Pairs with more nodes (source + destination) fall back to a "
        "whole-tree delete+insert. RISK: recovery matching is quadratic per container.",
    )

    @field_validator("min_height_for_top_down", "max_tree_size_for_full_matching")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"Must be >= 1, got {v}")
        return v

    @field_validator("dice_threshold", "recovery_similarity_threshold", "value_weight")
    @classmethod
    def validate_unit_interval(cls, v: float) -> float:
        if not (0.0 <= v <= 1.0):
            raise ValueError(f"Must be within [0, 1], got {v}")
        return v


class BatchConfig(BaseModel):
    """Batch runner configuration.

    Env vars:
        ASTDELTA__BATCH__MAX_WORKERS: Parallel worker processes
    """

    max_workers: int = Field(
        default=1,
        description="Worker processes for independent pairs. 1 runs pairs inline.",
    )

    @field_validator("max_workers")
    @classmethod
    def validate_workers(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_workers must be >= 1, got {v}")
        return v


class AstDeltaConfig(BaseModel):
    """Root configuration for astdelta."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    batch: BatchConfig = Field(default_factory=BatchConfig)
