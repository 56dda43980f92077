"""Errors raised by generated doubles at the point of access."""

from typing import Any

from stubforge.core.errors import ErrorCode, StubforgeError


class UnconfiguredAccess(StubforgeError):
    """Strict double accessed with no callback, no override and no safe default."""

    @classmethod
    def not_configured(
        cls, surface: str, member: str, accessor: str | None = None
    ) -> "UnconfiguredAccess":
        target = f"{surface}.{member}" if surface else member
        if accessor:
            target = f"{target} ({accessor})"
        details: dict[str, Any] = {"surface": surface, "member": member}
        if accessor:
            details["accessor"] = accessor
        return cls(
            code=ErrorCode.UNCONFIGURED_ACCESS,
            message=(
                f"{target} was called on a strict double but has no callback, "
                "no override and no safe default"
            ),
            details=details,
        )


class SequenceExhausted(StubforgeError):
    """Every step of a callback sequence has been used up."""

    @classmethod
    def exhausted(cls, member: str, calls: int) -> "SequenceExhausted":
        return cls(
            code=ErrorCode.SEQUENCE_EXHAUSTED,
            message=f"Callback sequence for {member} is exhausted after {calls} call(s)",
            details={"member": member, "calls": calls},
        )


class VerificationFailed(StubforgeError):
    """Observed call count does not satisfy the expectation."""

    @classmethod
    def mismatch(cls, member: str, expected: str, actual: int) -> "VerificationFailed":
        return cls(
            code=ErrorCode.VERIFICATION_FAILED,
            message=f"Expected {member} to be called {expected}, but it was called {actual} time(s)",
            details={"member": member, "expected": expected, "actual": actual},
        )
