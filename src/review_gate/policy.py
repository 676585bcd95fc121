"""Comment/reason policy: no rejection without a justification."""

from __future__ import annotations

from typing import Iterable

from .errors import ValidationError
from .items import Item, ItemStatus

COMMENT_REQUIRED = "comment required"


def require_reason(reason: str | None) -> str | None:
    """Return the trimmed reason, or None if it is missing or blank."""
    text = (reason or "").strip()
    return text or None


def check_status_change(
    item: Item, new_status: ItemStatus, comment: str | None = None,
) -> ValidationError | None:
    """Pre-condition for moving ``item`` to ``new_status``.

    A rejection needs a non-empty comment, either supplied with the change
    or already on the item when none is supplied.
    """
    if new_status is not ItemStatus.REJECTED:
        return None
    effective = comment if comment is not None else item.comment
    if require_reason(effective) is None:
        return ValidationError(COMMENT_REQUIRED, item_id=item.id)
    return None


def is_violation(item: Item) -> bool:
    return item.status is ItemStatus.REJECTED and not item.has_comment


def find_violations(items: Iterable[Item]) -> list[Item]:
    """Items that are rejected without a comment."""
    return [item for item in items if is_violation(item)]
