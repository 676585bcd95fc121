"""Review gate for the scholarship platform's KYC, document and application reviews."""

from .attachments import AttachmentPolicy, check_attachment, format_file_size
from .collaborators import Ack, AttachmentPicker, SubmissionFailure, SubmissionTransport
from .errors import (
    GateError,
    GateErrorKind,
    InvariantViolation,
    ProfileError,
    ValidationError,
)
from .gate import ReviewGate
from .items import (
    ApplicationPayload,
    Attachment,
    DocumentPayload,
    FieldPayload,
    Item,
    ItemEvent,
    ItemKind,
    ItemStatus,
    display_status,
)
from .profiles import (
    DocumentSlot,
    FieldSpec,
    GateSettings,
    ReviewProfile,
    load_profile,
    load_settings,
)
from .review import (
    Readiness,
    ReviewNote,
    ReviewStats,
    SessionEvent,
    SessionSnapshot,
    SessionStatus,
)
from .review_set import ReviewSet, compute_readiness
from .validators import ValidationResult, is_known_rule, validate

__all__ = [
    "Ack",
    "ApplicationPayload",
    "Attachment",
    "AttachmentPicker",
    "AttachmentPolicy",
    "DocumentPayload",
    "DocumentSlot",
    "FieldPayload",
    "FieldSpec",
    "GateError",
    "GateErrorKind",
    "GateSettings",
    "InvariantViolation",
    "Item",
    "ItemEvent",
    "ItemKind",
    "ItemStatus",
    "ProfileError",
    "Readiness",
    "ReviewGate",
    "ReviewNote",
    "ReviewProfile",
    "ReviewSet",
    "ReviewStats",
    "SessionEvent",
    "SessionSnapshot",
    "SessionStatus",
    "SubmissionFailure",
    "SubmissionTransport",
    "ValidationError",
    "ValidationResult",
    "check_attachment",
    "compute_readiness",
    "display_status",
    "format_file_size",
    "is_known_rule",
    "load_profile",
    "load_settings",
    "validate",
]
