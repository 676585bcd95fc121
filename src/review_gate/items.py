"""Reviewable item models: documents, form fields and application records."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ItemKind(str, Enum):
    DOCUMENT = "document"
    FIELD = "field"
    APPLICATION = "application"


class ItemStatus(str, Enum):
    """Tri-state review status. ``"verified"`` is accepted for APPROVED."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            key = value.strip().lower()
            if key == "verified":
                return cls.APPROVED
            for member in cls:
                if member.value == key:
                    return member
        return None

    @property
    def is_terminal(self) -> bool:
        return self is not ItemStatus.PENDING


class Attachment(BaseModel):
    """Completed pick result from a file or camera picker."""

    model_config = ConfigDict(extra="allow")

    uri: str
    name: str
    mime_hint: Optional[str] = None
    size_bytes: Optional[int] = None


# ---------------------------------------------------------------------------
# Payload variants
# ---------------------------------------------------------------------------


class DocumentPayload(BaseModel):
    """Uploaded document attachment."""

    kind: Literal["document"] = "document"
    file_name: str
    mime_hint: Optional[str] = None
    size_bytes: Optional[int] = None
    source_uri: Optional[str] = None


class FieldPayload(BaseModel):
    """Form field value checked by a validator rule."""

    kind: Literal["field"] = "field"
    rule: str
    raw_value: str = ""
    normalized_value: Optional[str] = None


class ApplicationPayload(BaseModel):
    """Reference to an external scholarship application."""

    kind: Literal["application"] = "application"
    application_id: str
    title: Optional[str] = None
    applicant: Optional[str] = None


ItemPayload = Annotated[
    Union[DocumentPayload, FieldPayload, ApplicationPayload],
    Field(discriminator="kind"),
]


class ItemEvent(BaseModel):
    """One recorded status change of an item."""

    status: ItemStatus
    comment: Optional[str] = None
    at: str


class Item(BaseModel):
    """Atomic reviewable unit."""

    model_config = ConfigDict(extra="allow")

    id: str
    payload: ItemPayload
    status: ItemStatus = ItemStatus.PENDING
    label: Optional[str] = None
    comment: Optional[str] = None
    history: list[ItemEvent] = []

    @property
    def kind(self) -> ItemKind:
        return ItemKind(self.payload.kind)

    @property
    def has_comment(self) -> bool:
        return bool(self.comment and self.comment.strip())

    @classmethod
    def for_document(
        cls, item_id: str, attachment: Attachment, label: str | None = None,
    ) -> Item:
        return cls(
            id=item_id,
            label=label,
            payload=DocumentPayload(
                file_name=attachment.name,
                mime_hint=attachment.mime_hint,
                size_bytes=attachment.size_bytes,
                source_uri=attachment.uri,
            ),
        )

    @classmethod
    def for_field(
        cls, item_id: str, rule: str, raw_value: str = "", label: str | None = None,
    ) -> Item:
        return cls(
            id=item_id,
            label=label,
            payload=FieldPayload(rule=rule, raw_value=raw_value),
        )

    @classmethod
    def for_application(
        cls,
        item_id: str,
        title: str | None = None,
        applicant: str | None = None,
        application_id: str | None = None,
    ) -> Item:
        return cls(
            id=item_id,
            label=title,
            payload=ApplicationPayload(
                application_id=application_id or item_id,
                title=title,
                applicant=applicant,
            ),
        )


def display_status(item: Item) -> str:
    """Status label as the screens show it."""
    if item.status is ItemStatus.APPROVED:
        return "Approved" if item.kind is ItemKind.APPLICATION else "Verified"
    return item.status.value.capitalize()
