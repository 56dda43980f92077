"""Stubforge error types with typed error codes.

Error code ranges:
- 1xxx: Generation (fail the build, never recovered automatically)
- 2xxx: Config
- 5xxx: Runtime (raised by generated doubles at the point of access)
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Generation (1xxx)
    SIGNATURE_CONFLICT = 1001
    ARITY_MISMATCH = 1002
    UNSUPPORTED_CONSTRUCT = 1003

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Runtime (5xxx)
    UNCONFIGURED_ACCESS = 5001
    SEQUENCE_EXHAUSTED = 5002
    VERIFICATION_FAILED = 5003

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class StubforgeError(Exception):
    """Base error with structured context for diagnostics."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'SIGNATURE_CONFLICT')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for structured reporting."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class GenerationError(StubforgeError):
    """Generation-time errors. Prevent any output for the affected unit."""

    @classmethod
    def signature_conflict(
        cls, name: str, signatures: list[str], surfaces: list[str]
    ) -> "GenerationError":
        return cls(
            code=ErrorCode.SIGNATURE_CONFLICT,
            message=(
                f"Member '{name}' is declared with incompatible signatures "
                f"on {', '.join(surfaces)}: {'; '.join(signatures)}"
            ),
            details={"member": name, "signatures": signatures, "surfaces": surfaces},
        )

    @classmethod
    def arity_mismatch(cls, target: str, expected: int, actual: int) -> "GenerationError":
        return cls(
            code=ErrorCode.ARITY_MISMATCH,
            message=f"'{target}' declares {expected} type parameter(s) but {actual} were supplied",
            details={"target": target, "expected": expected, "actual": actual},
        )

    @classmethod
    def unsupported_construct(
        cls, target: str, reason: str, member: str | None = None
    ) -> "GenerationError":
        details: dict[str, Any] = {"target": target, "reason": reason}
        if member is not None:
            details["member"] = member
        return cls(
            code=ErrorCode.UNSUPPORTED_CONSTRUCT,
            message=f"Cannot generate '{target}': {reason}",
            details=details,
        )


class ConfigError(StubforgeError):
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


class InternalError(StubforgeError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
