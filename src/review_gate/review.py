"""Session, readiness and snapshot models for the review gate."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from .items import Item


class SessionStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def label(self) -> str:
        return _SESSION_LABELS[self]


_SESSION_LABELS = {
    SessionStatus.DRAFT: "Pending",
    SessionStatus.SUBMITTED: "Submitted",
    SessionStatus.UNDER_REVIEW: "Under Review",
    SessionStatus.APPROVED: "Verified",
    SessionStatus.REJECTED: "Rejected",
}


class Readiness(BaseModel):
    """Aggregate review state of a review set."""

    model_config = ConfigDict(frozen=True)

    ready: bool
    pending_count: int
    approved_count: int = 0
    rejected_count: int = 0
    blocking_reasons: list[str] = []


class ReviewStats(BaseModel):
    """Per-status counts shown in the reviewer progress bar."""

    model_config = ConfigDict(frozen=True)

    approved: int
    rejected: int
    pending: int
    total: int


class SessionEvent(BaseModel):
    """Audit record of a session transition or submitter edit."""

    model_config = ConfigDict(extra="allow")

    action: str
    from_status: SessionStatus
    to_status: SessionStatus
    at: str
    reason: Optional[str] = None
    detail: dict = {}


class ReviewNote(BaseModel):
    """Reviewer comment on the session as a whole."""

    author: str
    text: str
    at: str


class SessionSnapshot(BaseModel):
    """Serializable state of one review session."""

    model_config = ConfigDict(extra="allow")

    profile: str
    status: SessionStatus = SessionStatus.DRAFT
    items: list[Item] = []
    submitted_at: Optional[str] = None
    ack_reference: Optional[str] = None
    rejection_reason: Optional[str] = None
    history: list[SessionEvent] = []
    notes: list[ReviewNote] = []
