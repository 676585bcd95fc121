"""Attachment size/type limits for document uploads."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath

from .errors import ValidationError
from .items import Attachment

MB = 1024 * 1024

DEFAULT_MAX_BYTES = 5 * MB
DEFAULT_ACCEPTED_TYPES = ("pdf", "jpg", "png")

# type key -> (mime types, file extensions)
_TYPE_TABLE: dict[str, tuple[tuple[str, ...], tuple[str, ...]]] = {
    "pdf": (("application/pdf",), (".pdf",)),
    "jpg": (("image/jpeg", "image/jpg"), (".jpg", ".jpeg")),
    "png": (("image/png",), (".png",)),
    "zip": (("application/zip", "application/x-zip-compressed"), (".zip",)),
}

KNOWN_TYPES = tuple(_TYPE_TABLE)


@dataclass(frozen=True)
class AttachmentPolicy:
    max_bytes: int = DEFAULT_MAX_BYTES
    accepted_types: tuple[str, ...] = DEFAULT_ACCEPTED_TYPES

    @property
    def max_size_label(self) -> str:
        if self.max_bytes % MB == 0:
            return f"{self.max_bytes // MB}MB"
        return format_file_size(self.max_bytes)


def detect_type(attachment: Attachment) -> str | None:
    """Map an attachment to a type key by MIME hint, falling back to extension."""
    mime = (attachment.mime_hint or "").lower()
    suffix = PurePosixPath(attachment.name).suffix.lower()
    for key, (mimes, _) in _TYPE_TABLE.items():
        if mime in mimes:
            return key
    for key, (_, suffixes) in _TYPE_TABLE.items():
        if suffix in suffixes:
            return key
    return None


def check_attachment(
    attachment: Attachment, policy: AttachmentPolicy,
) -> ValidationError | None:
    """Return a ValidationError if the attachment breaks the policy."""
    if attachment.size_bytes is not None and attachment.size_bytes > policy.max_bytes:
        return ValidationError(
            f"Please select a file smaller than {policy.max_size_label}"
        )
    if detect_type(attachment) not in policy.accepted_types:
        accepted = ", ".join(t.upper() for t in policy.accepted_types)
        return ValidationError(f"Unsupported file type. Accepted: {accepted}")
    return None


def format_file_size(size_bytes: int | None) -> str:
    if not size_bytes:
        return ""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    if size_bytes < MB:
        return f"{size_bytes / 1024:.1f} KB"
    return f"{size_bytes / MB:.1f} MB"
