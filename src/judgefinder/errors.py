"""
Exception hierarchy for judge lookup and search.

All exceptions carry a machine-readable ``code`` so callers (HTTP layers,
the CLI) can map them without string matching.

Hierarchy:
    JudgeFinderError
    ├── InvalidInputError        - bad identifier / query, raised before any I/O
    ├── BackendUnavailableError  - record store unreachable or timed out
    ├── RecordMappingError       - stored row missing a required field
    └── InternalError            - invariant broken inside the engines
"""

from __future__ import annotations


class JudgeFinderError(Exception):
    """Base exception for the judgefinder package."""

    def __init__(self, message: str, code: str = "JUDGEFINDER_ERROR") -> None:
        super().__init__(message)
        self.message = message
        self.code = code

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class InvalidInputError(JudgeFinderError):
    """Caller-supplied identifier or query failed validation."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, "INVALID_INPUT")
        self.field = field


class BackendUnavailableError(JudgeFinderError):
    """The record store could not answer (connection, timeout, open circuit)."""

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(f"{operation} failed: {reason}", "BACKEND_UNAVAILABLE")
        self.operation = operation
        self.reason = reason


class RecordMappingError(JudgeFinderError):
    """A storage row could not be mapped into an entity."""

    def __init__(self, entity: str, missing_field: str) -> None:
        super().__init__(
            f"{entity} row is missing required field '{missing_field}'",
            "RECORD_MAPPING",
        )
        self.entity = entity
        self.missing_field = missing_field


class InternalError(JudgeFinderError):
    """Programming error: an engine produced an impossible state."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "INTERNAL")
