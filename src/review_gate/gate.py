"""Review gate: session state machine over one review set."""

from __future__ import annotations

import logging
from typing import Any

from .attachments import check_attachment
from .collaborators import SubmissionFailure, SubmissionTransport
from .errors import GateError, GateErrorKind, ProfileError, ValidationError
from .items import Attachment, Item, ItemEvent, ItemKind, ItemStatus
from .policy import require_reason
from .profiles import GateSettings, ReviewProfile, load_profile, load_settings
from .review import Readiness, ReviewNote, SessionEvent, SessionSnapshot, SessionStatus
from .review_set import ReviewSet, now_iso
from .validators import ValidationResult, validate

logger = logging.getLogger(__name__)


# (from_status, action) -> to_status
TRANSITIONS: dict[tuple[SessionStatus, str], SessionStatus] = {
    (SessionStatus.DRAFT, "submit"): SessionStatus.SUBMITTED,
    (SessionStatus.SUBMITTED, "begin_review"): SessionStatus.UNDER_REVIEW,
    (SessionStatus.UNDER_REVIEW, "approve"): SessionStatus.APPROVED,
    (SessionStatus.UNDER_REVIEW, "reject"): SessionStatus.REJECTED,
    (SessionStatus.REJECTED, "resubmit"): SessionStatus.DRAFT,
}

# Session states in which reviewers may still mark items.
ITEM_REVIEW_STATES = frozenset({
    SessionStatus.DRAFT,
    SessionStatus.SUBMITTED,
    SessionStatus.UNDER_REVIEW,
})


class ReviewGate:
    """Decides whether submit/approve/reject may fire for one review session.

    Every operation either applies completely or returns a failure value
    (ValidationError / GateError) and leaves the session untouched. Callers
    serialize access; the gate assumes one call in flight at a time.
    """

    def __init__(
        self,
        profile: ReviewProfile,
        review_set: ReviewSet | None = None,
        transport: SubmissionTransport | None = None,
        settings: GateSettings | None = None,
    ) -> None:
        self.profile = profile
        self.settings = settings or GateSettings()
        self.transport = transport
        if review_set is None:
            review_set = ReviewSet(strict=self.settings.strict)
        review_set.required_count = profile.required_count
        review_set.required_kind = profile.item_kind
        self._set = review_set
        for spec in profile.fields:
            if spec.id not in self._set:
                self._set.add(Item.for_field(spec.id, spec.rule, label=spec.label))

        self._status = SessionStatus.DRAFT
        self.submitted_at: str | None = None
        self.ack_reference: str | None = None
        self.rejection_reason: str | None = None
        self._history: list[SessionEvent] = []
        self._notes: list[ReviewNote] = []

    @classmethod
    def from_profile(
        cls,
        name: str,
        transport: SubmissionTransport | None = None,
        settings: GateSettings | None = None,
    ) -> ReviewGate:
        settings = settings or load_settings()
        return cls(load_profile(name, settings), transport=transport, settings=settings)

    # -- queries ------------------------------------------------------------

    @property
    def status(self) -> SessionStatus:
        return self._status

    def get_session_status(self) -> SessionStatus:
        return self._status

    @property
    def review_set(self) -> ReviewSet:
        return self._set

    @property
    def history(self) -> list[SessionEvent]:
        return list(self._history)

    @property
    def notes(self) -> list[ReviewNote]:
        return list(self._notes)

    def get_readiness(self) -> Readiness:
        return self._set.readiness()

    def validate_field(self, rule_name: str, raw_value: str | None) -> ValidationResult:
        return validate(rule_name, raw_value)

    # -- submitter edits (draft only) ----------------------------------------

    def set_field(
        self, field_id: str, raw_value: str,
    ) -> ValidationResult | ValidationError | GateError:
        """Store a form value and return its validation result for inline display."""
        if self._status is not SessionStatus.DRAFT:
            return self._illegal("edit fields")
        item = self._set.get(field_id)
        if item is None or item.kind is not ItemKind.FIELD:
            return ValidationError("unknown field", item_id=field_id)

        result = validate(item.payload.rule, raw_value)
        self._set.replace(self._field_update(item, raw_value, result))
        return result

    def attach_document(
        self, slot_id: str, attachment: Attachment | None,
    ) -> Item | ValidationError | GateError | None:
        """Accept a picked attachment for a document slot.

        ``None`` means the pick was cancelled and nothing changes. Attaching
        to a filled slot replaces the document with a fresh pending one; the
        previous file and its comment stay in the session history.
        """
        if attachment is None:
            return None
        if self._status is not SessionStatus.DRAFT:
            return self._illegal("attach documents")
        slots = {slot.id: slot for slot in self.profile.documents}
        open_slots = not slots and self.profile.item_kind is ItemKind.DOCUMENT
        if not open_slots and slot_id not in slots:
            return ValidationError("unknown document slot", item_id=slot_id)
        error = check_attachment(attachment, self.profile.attachments)
        if error is not None:
            return ValidationError(error.message, item_id=slot_id)

        slot = slots.get(slot_id)
        new_item = Item.for_document(slot_id, attachment, label=slot.label if slot else None)
        old = self._set.get(slot_id)
        if old is None:
            stored = self._set.add(new_item)
            self._record("attach_document", detail={"item_id": slot_id, "file_name": attachment.name})
            return stored

        if old.kind is not ItemKind.DOCUMENT:
            return ValidationError("not a document slot", item_id=slot_id)
        new_item = new_item.model_copy(
            update={"history": [*old.history, ItemEvent(status=ItemStatus.PENDING, at=now_iso())]},
        )
        self._set.replace(new_item)
        self._record(
            "replace_document",
            detail={
                "item_id": slot_id,
                "file_name": attachment.name,
                "previous_file_name": old.payload.file_name,
                "previous_status": old.status.value,
                "previous_comment": old.comment,
            },
        )
        return new_item

    def remove_document(self, slot_id: str) -> Item | ValidationError | GateError:
        if self._status is not SessionStatus.DRAFT:
            return self._illegal("remove documents")
        item = self._set.get(slot_id)
        if item is None or item.kind is not ItemKind.DOCUMENT:
            return ValidationError("no document attached", item_id=slot_id)
        self._set.remove(slot_id)
        self._record(
            "remove_document",
            detail={
                "item_id": slot_id,
                "file_name": item.payload.file_name,
                "previous_status": item.status.value,
                "previous_comment": item.comment,
            },
        )
        return item

    def assign_application(
        self,
        application_id: str,
        title: str | None = None,
        applicant: str | None = None,
    ) -> Item | ValidationError | GateError:
        if self._status is not SessionStatus.DRAFT:
            return self._illegal("assign applications")
        if application_id in self._set:
            return ValidationError("duplicate item", item_id=application_id)
        stored = self._set.add(Item.for_application(application_id, title=title, applicant=applicant))
        self._record("assign_application", detail={"item_id": application_id})
        return stored

    # -- reviewer actions ---------------------------------------------------

    def set_item_status(
        self,
        item_id: str,
        status: ItemStatus | str,
        comment: str | None = None,
    ) -> Item | ValidationError | GateError:
        if self._status not in ITEM_REVIEW_STATES:
            return self._illegal("change item status")
        return self._set.set_item_status(item_id, status, comment)

    def add_note(self, author: str, text: str) -> ReviewNote | ValidationError:
        body = require_reason(text)
        if body is None:
            return ValidationError("note text required")
        note = ReviewNote(author=author, text=body, at=now_iso())
        self._notes.append(note)
        return note

    # -- session transitions ------------------------------------------------

    def submit(self) -> SessionStatus | GateError:
        """Draft -> Submitted.

        Form fields are checked first; documents are only looked at once
        every field passes. The transport (if any) must acknowledge before
        anything is committed.
        """
        if (self._status, "submit") not in TRANSITIONS:
            return self._illegal("submit")

        reasons: list[str] = []
        committed: dict[str, Item] = {}
        for item in self._set.of_kind(ItemKind.FIELD):
            result = validate(item.payload.rule, item.payload.raw_value)
            if not result.valid:
                reasons.append(f"{item.id}: {result.error}")
            else:
                committed[item.id] = self._field_update(
                    item, item.payload.raw_value, result, edited=False,
                )
        if reasons:
            return GateError(GateErrorKind.NOT_READY, "form fields are invalid", reasons)

        reasons = [
            f"{slot.id} missing" for slot in self.profile.documents if slot.id not in self._set
        ]
        shortfall = self._set.missing_required()
        if shortfall is not None:
            reasons.append(shortfall)
        if reasons:
            return GateError(GateErrorKind.NOT_READY, "required items are missing", reasons)

        submitted_at = now_iso()
        ack_reference = None
        if self.transport is not None:
            snapshot = self.snapshot().model_copy(
                update={
                    "status": SessionStatus.SUBMITTED,
                    "submitted_at": submitted_at,
                    "items": [committed.get(i.id, i) for i in self._set],
                },
            )
            outcome = self.transport.submit(snapshot)
            if isinstance(outcome, SubmissionFailure):
                logger.warning("Submission of %s failed: %s", self.profile.name, outcome.message)
                return GateError(GateErrorKind.SUBMISSION_FAILED, outcome.message)
            ack_reference = outcome.reference

        for item in committed.values():
            self._set.replace(item)
        self.submitted_at = submitted_at
        self.ack_reference = ack_reference
        return self._transition("submit")

    def begin_review(self) -> SessionStatus | GateError:
        """Submitted -> Under Review; fired by the reviewer side."""
        if (self._status, "begin_review") not in TRANSITIONS:
            return self._illegal("begin_review")
        return self._transition("begin_review")

    def approve(self) -> SessionStatus | GateError:
        if (self._status, "approve") not in TRANSITIONS:
            return self._illegal("approve")
        readiness = self._set.readiness()
        if not readiness.ready:
            return GateError(
                GateErrorKind.NOT_READY, "review is incomplete", readiness.blocking_reasons,
            )
        return self._transition("approve")

    def reject(self, reason: str | None) -> SessionStatus | GateError:
        if (self._status, "reject") not in TRANSITIONS:
            return self._illegal("reject")
        text = require_reason(reason)
        if text is None:
            return GateError(GateErrorKind.MISSING_REASON, "a reason is required to reject")
        self.rejection_reason = text
        return self._transition("reject", reason=text)

    def resubmit(self) -> SessionStatus | GateError:
        """Rejected -> Draft. Only previously rejected items go back to pending."""
        if (self._status, "resubmit") not in TRANSITIONS:
            return self._illegal("resubmit")
        reset = [i.id for i in self._set if i.status is ItemStatus.REJECTED]
        for item_id in reset:
            self._set.set_item_status(item_id, ItemStatus.PENDING)
        self.submitted_at = None
        self.ack_reference = None
        self.rejection_reason = None
        return self._transition("resubmit", detail={"reset_items": reset})

    # -- snapshots ----------------------------------------------------------

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            profile=self.profile.name,
            status=self._status,
            items=[item.model_copy(deep=True) for item in self._set],
            submitted_at=self.submitted_at,
            ack_reference=self.ack_reference,
            rejection_reason=self.rejection_reason,
            history=list(self._history),
            notes=list(self._notes),
        )

    @classmethod
    def restore(
        cls,
        snapshot: SessionSnapshot,
        profile: ReviewProfile,
        transport: SubmissionTransport | None = None,
        settings: GateSettings | None = None,
    ) -> ReviewGate:
        """Rebuild a gate from a saved snapshot; items are audited on load."""
        if snapshot.profile != profile.name:
            raise ProfileError(
                f"snapshot belongs to profile '{snapshot.profile}', not '{profile.name}'"
            )
        settings = settings or load_settings()
        review_set = ReviewSet(snapshot.items, strict=settings.strict)
        gate = cls(profile, review_set=review_set, transport=transport, settings=settings)
        gate._status = snapshot.status
        gate.submitted_at = snapshot.submitted_at
        gate.ack_reference = snapshot.ack_reference
        gate.rejection_reason = snapshot.rejection_reason
        gate._history = list(snapshot.history)
        gate._notes = list(snapshot.notes)
        review_set.audit()
        return gate

    # -- internals ----------------------------------------------------------

    def _transition(
        self, action: str, reason: str | None = None, detail: dict[str, Any] | None = None,
    ) -> SessionStatus:
        from_status = self._status
        to_status = TRANSITIONS[(from_status, action)]
        self._history.append(
            SessionEvent(
                action=action,
                from_status=from_status,
                to_status=to_status,
                at=now_iso(),
                reason=reason,
                detail=detail or {},
            )
        )
        self._status = to_status
        logger.info(
            "Session %s: %s -> %s (%s)",
            self.profile.name, from_status.value, to_status.value, action,
        )
        return to_status

    def _record(self, action: str, detail: dict[str, Any]) -> None:
        self._history.append(
            SessionEvent(
                action=action,
                from_status=self._status,
                to_status=self._status,
                at=now_iso(),
                detail=detail,
            )
        )

    def _illegal(self, action: str) -> GateError:
        return GateError(
            GateErrorKind.ILLEGAL_TRANSITION,
            f"cannot {action} while session is {self._status.value}",
        )

    @staticmethod
    def _field_update(
        item: Item, raw_value: str, result: ValidationResult, edited: bool = True,
    ) -> Item:
        """Apply a field value; a passing format check verifies the field.

        Once a reviewer has rejected a field, format checks no longer verify
        it. An edit sends it back to PENDING for the reviewer; a re-check on
        submit leaves its status alone.
        """
        if _reviewer_rejected(item):
            status = ItemStatus.PENDING if edited else item.status
        else:
            status = ItemStatus.APPROVED if result.valid else ItemStatus.PENDING
        history = list(item.history)
        if status is not item.status:
            history.append(ItemEvent(status=status, at=now_iso()))
        return item.model_copy(
            update={
                "status": status,
                "payload": item.payload.model_copy(
                    update={"raw_value": raw_value, "normalized_value": result.normalized_value},
                ),
                "history": history,
            },
        )


def _reviewer_rejected(item: Item) -> bool:
    return any(event.status is ItemStatus.REJECTED for event in item.history)
