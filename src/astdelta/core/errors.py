"""astdelta error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Tree structure
- 4xxx: Engine invariants
- 5xxx: Front end
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Tree structure (3xxx)
    STRUCTURE_MISSING_ROOT = 3001
    STRUCTURE_MULTIPLE_ROOTS = 3002
    STRUCTURE_DANGLING_PARENT = 3003
    STRUCTURE_CYCLE = 3004
    STRUCTURE_MALFORMED_NODE = 3005

    # Engine invariants (4xxx)
    INVARIANT_MAPPING_CONFLICT = 4001
    INVARIANT_MAPPING_FROZEN = 4002
    INVARIANT_KIND_MISMATCH = 4003
    INVARIANT_SCRIPT_MISMATCH = 4004

    # Front end (5xxx)
    FRONTEND_LANGUAGE_UNAVAILABLE = 5001
    FRONTEND_UNSUPPORTED_FILE = 5002

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class AstDeltaError(Exception):
    """Base error with structured context for reports and batch outcomes."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'STRUCTURE_MISSING_ROOT')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON reports."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(AstDeltaError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class StructureError(AstDeltaError):
    """Malformed tree input. Fatal, never retried."""

    @classmethod
    def missing_root(cls) -> "StructureError":
        return cls(
            code=ErrorCode.STRUCTURE_MISSING_ROOT,
            message="Tree has no root node",
        )

    @classmethod
    def multiple_roots(cls, indices: list[int]) -> "StructureError":
        return cls(
            code=ErrorCode.STRUCTURE_MULTIPLE_ROOTS,
            message=f"Tree has {len(indices)} root nodes, expected exactly one",
            details={"roots": indices},
        )

    @classmethod
    def dangling_parent(cls, index: int, parent: int) -> "StructureError":
        return cls(
            code=ErrorCode.STRUCTURE_DANGLING_PARENT,
            message=f"Node {index} references missing parent {parent}",
            details={"index": index, "parent": parent},
        )

    @classmethod
    def cycle(cls, indices: list[int]) -> "StructureError":
        return cls(
            code=ErrorCode.STRUCTURE_CYCLE,
            message="Tree contains nodes unreachable from the root or reachable twice",
            details={"nodes": indices[:20], "count": len(indices)},
        )

    @classmethod
    def malformed_node(cls, path: str, reason: str) -> "StructureError":
        return cls(
            code=ErrorCode.STRUCTURE_MALFORMED_NODE,
            message=f"Malformed node at {path}: {reason}",
            details={"path": path, "reason": reason},
        )


class InvariantViolation(AstDeltaError):
    """Engine defect: the mapping or the generated script is inconsistent."""

    @classmethod
    def conflict(cls, src_id: int, dst_id: int, existing: tuple[int | None, int | None]) -> "InvariantViolation":
        return cls(
            code=ErrorCode.INVARIANT_MAPPING_CONFLICT,
            message=f"Mapping pair ({src_id}, {dst_id}) conflicts with an existing pair",
            details={
                "src": src_id,
                "dst": dst_id,
                "existing_dst_for_src": existing[0],
                "existing_src_for_dst": existing[1],
            },
        )

    @classmethod
    def frozen(cls, src_id: int, dst_id: int) -> "InvariantViolation":
        return cls(
            code=ErrorCode.INVARIANT_MAPPING_FROZEN,
            message=f"Cannot add ({src_id}, {dst_id}): mapping is frozen",
            details={"src": src_id, "dst": dst_id},
        )

    @classmethod
    def kind_mismatch(cls, src_id: int, src_kind: str, dst_id: int, dst_kind: str) -> "InvariantViolation":
        return cls(
            code=ErrorCode.INVARIANT_KIND_MISMATCH,
            message=f"Mapped nodes differ in kind: {src_kind!r} vs {dst_kind!r}",
            details={"src": src_id, "dst": dst_id, "src_kind": src_kind, "dst_kind": dst_kind},
        )

    @classmethod
    def script_mismatch(cls, reason: str, **details: Any) -> "InvariantViolation":
        return cls(
            code=ErrorCode.INVARIANT_SCRIPT_MISMATCH,
            message=f"Edit script does not reproduce the destination: {reason}",
            details=details,
        )

    def with_context(self, **context: Any) -> "InvariantViolation":
        """Copy of this error with pair context merged into details."""
        return type(self)(
            code=self.code,
            message=self.message,
            retryable=self.retryable,
            details={**self.details, **context},
        )


class FrontEndError(AstDeltaError):
    """Errors converting source text into trees."""

    @classmethod
    def language_unavailable(cls, language: str, package: str | None = None) -> "FrontEndError":
        message = f"Language not available: {language}"
        details: dict[str, Any] = {"language": language}
        if package is not None:
            message += f" (install {package})"
            details["package"] = package
        return cls(
            code=ErrorCode.FRONTEND_LANGUAGE_UNAVAILABLE,
            message=message,
            details=details,
        )

    @classmethod
    def unsupported_file(cls, path: str) -> "FrontEndError":
        return cls(
            code=ErrorCode.FRONTEND_UNSUPPORTED_FILE,
            message=f"No front end for file: {path}",
            details={"path": path},
        )


class InternalError(AstDeltaError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
