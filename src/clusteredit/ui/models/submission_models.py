"""Submission state models for tracking the cluster submit lifecycle.

These enums and dataclasses describe where the submission controller is in
its state machine and what the external create/update operation returned.
They are used by the domain layer (SubmissionController) and emitted via
events.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


def _utcnow() -> datetime:
    """Return current UTC time."""
    return datetime.now(timezone.utc)


class SubmissionStatus(Enum):
    """Status of the submission controller.

    Values:
        IDLE: Nothing in flight; the user may submit.
        VALIDATING: Verdicts are being computed for every draft.
        INVALID: At least one draft failed validation; nothing was sent.
        SUBMITTING: The external operation is in flight.
        FAILED: The external operation reported an error; session still open.
    """

    IDLE = "idle"
    VALIDATING = "validating"
    INVALID = "invalid"
    SUBMITTING = "submitting"
    FAILED = "failed"


class OutcomeKind(Enum):
    """Terminal (or pending) result of one external operation call.

    Values:
        PENDING: The call has been issued and not yet completed.
        SUCCESS: The backend accepted the request.
        ERROR: The backend (or transport) reported a failure.
        STALE: The call completed after its session was closed; ignored.
    """

    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"
    STALE = "stale"


@dataclass(slots=True)
class OperationOutcome:
    """Result of a create/update call as seen by the controller.

    Attributes:
        kind: Where the call ended up.
        generation: Session generation the call was issued for.
        message: Error text surfaced to the user (ERROR only).
        data: Response payload returned by the operation (SUCCESS only).
        started_at: When the call was issued.
        completed_at: When the call finished (any non-pending kind).
    """

    kind: OutcomeKind
    generation: int
    message: str = ""
    data: Any = None
    started_at: datetime = field(default_factory=_utcnow)
    completed_at: datetime | None = None

    @classmethod
    def pending(cls, generation: int) -> "OperationOutcome":
        return cls(kind=OutcomeKind.PENDING, generation=generation)

    @property
    def is_pending(self) -> bool:
        return self.kind is OutcomeKind.PENDING

    @property
    def is_success(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    @property
    def is_error(self) -> bool:
        return self.kind is OutcomeKind.ERROR

    @property
    def is_stale(self) -> bool:
        return self.kind is OutcomeKind.STALE

    def mark_success(self, data: Any = None) -> None:
        self.kind = OutcomeKind.SUCCESS
        self.data = data
        self.completed_at = _utcnow()

    def mark_error(self, message: str) -> None:
        self.kind = OutcomeKind.ERROR
        self.message = message
        self.completed_at = _utcnow()

    def mark_stale(self) -> None:
        self.kind = OutcomeKind.STALE
        self.completed_at = _utcnow()


@dataclass(slots=True, frozen=True)
class ValidationReport:
    """Summary of a submit-time validation pass.

    Attributes:
        checked_ids: Draft ids validated, in collection order.
        invalid_ids: Draft ids with at least one failing field, in order.
    """

    checked_ids: tuple[str, ...]
    invalid_ids: tuple[str, ...]

    @property
    def passed(self) -> bool:
        return not self.invalid_ids

    @property
    def first_invalid_id(self) -> str | None:
        return self.invalid_ids[0] if self.invalid_ids else None


__all__ = [
    "SubmissionStatus",
    "OutcomeKind",
    "OperationOutcome",
    "ValidationReport",
]
