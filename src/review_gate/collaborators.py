"""Contracts for the pickers and transports a screen plugs into the gate."""

from __future__ import annotations

from typing import Optional, Protocol, Union

from pydantic import BaseModel

from .items import Attachment
from .review import SessionSnapshot


class Ack(BaseModel):
    """Submission accepted by the backend."""

    reference: Optional[str] = None
    message: Optional[str] = None


class SubmissionFailure(BaseModel):
    """Submission refused or not delivered."""

    message: str = "Failed to submit. Please try again."
    retryable: bool = True


SubmissionResult = Union[Ack, SubmissionFailure]


class AttachmentPicker(Protocol):
    def pick(self) -> Attachment | None:
        """Return the picked attachment, or None if the user cancelled."""
        ...


class SubmissionTransport(Protocol):
    def submit(self, snapshot: SessionSnapshot) -> SubmissionResult:
        ...
