"""Ordered collection of reviewable items and its aggregate state."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Iterable, Iterator

from .errors import InvariantViolation, ValidationError
from .items import Item, ItemEvent, ItemKind, ItemStatus
from .policy import check_status_change, find_violations, is_violation
from .review import Readiness, ReviewStats

logger = logging.getLogger(__name__)


def now_iso() -> str:
    return datetime.now(UTC).isoformat()


def compute_readiness(items: Iterable[Item]) -> Readiness:
    """Single pass over ``items``; no side effects.

    An item blocks when it is pending, or rejected without a comment.
    Blocking reasons follow item order.
    """
    approved = rejected = pending = 0
    reasons: list[str] = []
    for item in items:
        if item.status is ItemStatus.PENDING:
            pending += 1
            reasons.append(f"{item.id} pending")
        elif item.status is ItemStatus.APPROVED:
            approved += 1
        else:
            rejected += 1
            if is_violation(item):
                reasons.append(f"{item.id} rejected without comment")
    return Readiness(
        ready=not reasons,
        pending_count=pending,
        approved_count=approved,
        rejected_count=rejected,
        blocking_reasons=reasons,
    )


class ReviewSet:
    """Items of one review session, kept in insertion order.

    Items are copied on the way in, so no item is shared with another set.
    """

    def __init__(
        self,
        items: Iterable[Item] | None = None,
        required_count: int = 0,
        strict: bool = False,
        required_kind: ItemKind | None = None,
    ) -> None:
        self.required_count = required_count
        self.required_kind = required_kind
        self.strict = strict
        self._items: list[Item] = []
        for item in items or []:
            self.add(item)

    # -- collection ---------------------------------------------------------

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Item]:
        return iter(list(self._items))

    def __contains__(self, item_id: object) -> bool:
        return self._position(item_id) is not None

    @property
    def items(self) -> list[Item]:
        return list(self._items)

    def get(self, item_id: str) -> Item | None:
        pos = self._position(item_id)
        return None if pos is None else self._items[pos]

    def of_kind(self, kind: ItemKind) -> list[Item]:
        return [item for item in self._items if item.kind is kind]

    def add(self, item: Item) -> Item:
        if item.id in self:
            raise ValueError(f"duplicate item id: {item.id}")
        stored = item.model_copy(deep=True)
        self._items.append(stored)
        return stored

    def remove(self, item_id: str) -> Item | None:
        pos = self._position(item_id)
        if pos is None:
            return None
        return self._items.pop(pos)

    def replace(self, item: Item) -> Item:
        """Swap in a new version of an existing item, keeping its position."""
        pos = self._position(item.id)
        if pos is None:
            raise KeyError(item.id)
        self._items[pos] = item
        return item

    def _position(self, item_id: object) -> int | None:
        for pos, item in enumerate(self._items):
            if item.id == item_id:
                return pos
        return None

    # -- transitions --------------------------------------------------------

    def set_item_status(
        self,
        item_id: str,
        new_status: ItemStatus | str,
        comment: str | None = None,
    ) -> Item | ValidationError:
        """Move one item to ``new_status``.

        Landing on REJECTED needs a non-empty comment. On failure the item is
        left exactly as it was.
        """
        item = self.get(item_id)
        if item is None:
            return ValidationError("unknown item", item_id=item_id)
        try:
            status = ItemStatus(new_status)
        except ValueError:
            return ValidationError(f"unknown status: {new_status}", item_id=item_id)

        error = check_status_change(item, status, comment)
        if error is not None:
            return error

        new_comment = item.comment
        if comment is not None:
            new_comment = comment.strip() or None
        updated = item.model_copy(
            update={
                "status": status,
                "comment": new_comment,
                "history": [
                    *item.history,
                    ItemEvent(status=status, comment=new_comment, at=now_iso()),
                ],
            },
        )
        logger.debug("Item %s: %s -> %s", item_id, item.status.value, status.value)
        return self.replace(updated)

    # -- aggregates ---------------------------------------------------------

    @property
    def approved_count(self) -> int:
        return sum(1 for i in self._items if i.status is ItemStatus.APPROVED)

    @property
    def rejected_count(self) -> int:
        return sum(1 for i in self._items if i.status is ItemStatus.REJECTED)

    @property
    def pending_count(self) -> int:
        return sum(1 for i in self._items if i.status is ItemStatus.PENDING)

    def stats(self) -> ReviewStats:
        return ReviewStats(
            approved=self.approved_count,
            rejected=self.rejected_count,
            pending=self.pending_count,
            total=len(self._items),
        )

    def audit(self) -> list[str]:
        """Find items rejected without a comment.

        Strict sets raise InvariantViolation. Otherwise each offender is
        logged and forced back to PENDING. Returns the healed item ids.
        """
        healed: list[str] = []
        for item in find_violations(self._items):
            if self.strict:
                raise InvariantViolation(
                    f"item {item.id} is rejected without a comment"
                )
            logger.warning(
                "Item %s rejected without comment; resetting to pending", item.id,
            )
            self.replace(
                item.model_copy(
                    update={
                        "status": ItemStatus.PENDING,
                        "history": [
                            *item.history,
                            ItemEvent(status=ItemStatus.PENDING, at=now_iso()),
                        ],
                    },
                )
            )
            healed.append(item.id)
        return healed

    def readiness(self, kinds: Iterable[ItemKind] | None = None) -> Readiness:
        """Audit, then compute readiness over the set (or the given kinds)."""
        self.audit()
        wanted = set(kinds) if kinds is not None else None
        items = [i for i in self._items if wanted is None or i.kind in wanted]
        result = compute_readiness(items)
        shortfall = self.missing_required()
        if shortfall is not None:
            result = result.model_copy(
                update={
                    "ready": False,
                    "blocking_reasons": [*result.blocking_reasons, shortfall],
                },
            )
        return result

    def missing_required(self) -> str | None:
        """Blocking reason if fewer than ``required_count`` items of ``required_kind`` exist."""
        counted = self.of_kind(self.required_kind) if self.required_kind else self._items
        if len(counted) < self.required_count:
            return f"at least {self.required_count} items required"
        return None

    # -- queries ------------------------------------------------------------

    def filter(
        self, status: ItemStatus | str | None = None, query: str = "",
    ) -> list[Item]:
        """Items matching a status and a case-insensitive text query."""
        wanted = ItemStatus(status) if status is not None else None
        needle = query.strip().lower()
        result = []
        for item in self._items:
            if wanted is not None and item.status is not wanted:
                continue
            if needle and not any(needle in text.lower() for text in _search_texts(item)):
                continue
            result.append(item)
        return result


def _search_texts(item: Item) -> list[str]:
    texts = [item.id, item.label or ""]
    payload = item.payload
    if item.kind is ItemKind.DOCUMENT:
        texts.append(payload.file_name)
    elif item.kind is ItemKind.APPLICATION:
        texts.extend([payload.application_id, payload.title or "", payload.applicant or ""])
    return texts
