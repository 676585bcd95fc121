"""Failure values and exceptions for the review gate."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


# ---------------------------------------------------------------------------
# Returned failures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ValidationError:
    """A single field or item failed a format/content rule."""

    message: str
    item_id: str | None = None

    def __str__(self) -> str:
        if self.item_id:
            return f"{self.item_id}: {self.message}"
        return self.message


class GateErrorKind(str, Enum):
    NOT_READY = "not_ready"
    MISSING_REASON = "missing_reason"
    ILLEGAL_TRANSITION = "illegal_transition"
    SUBMISSION_FAILED = "submission_failed"


@dataclass(frozen=True)
class GateError:
    """A session-level action was refused; the session is left untouched."""

    kind: GateErrorKind
    message: str
    blocking_reasons: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        if self.blocking_reasons:
            return f"[{self.kind.value}] {self.message}: {'; '.join(self.blocking_reasons)}"
        return f"[{self.kind.value}] {self.message}"


# ---------------------------------------------------------------------------
# Raised errors
# ---------------------------------------------------------------------------


class ProfileError(Exception):
    """Review profile configuration error."""


class InvariantViolation(AssertionError):
    """A rejected item without a comment slipped past the reason policy."""
