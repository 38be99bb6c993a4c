"""Submission controller domain service.

Validates every draft of the open session, sends the batch (create) or the
single record (update) to the backend and reconciles the session with the
result. This is the single source of truth for submission state.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Sequence

from ...editor.draft_model import EditMode
from ...editor.validation import validate_record
from ...services.cluster_api import ClusterSpec, ClusterUpdate, describe_error
from ..events import (
    EditSessionClosed,
    EventBus,
    SubmissionFailed,
    SubmissionRejected,
    SubmissionStarted,
    SubmissionSucceeded,
)
from ..models.submission_models import OperationOutcome, SubmissionStatus, ValidationReport

if TYPE_CHECKING:  # pragma: no cover
    from ...services.cluster_api import CreateOperation, UpdateOperation
    from .session_store import EditSessionStore

LOGGER = logging.getLogger(__name__)


class SubmissionController:
    """Domain manager for the submit lifecycle of the cluster editor.

    Only one submission may be in flight at a time; a submit issued while
    one is running is ignored. Completions that arrive after their session
    was closed are recorded as stale and otherwise ignored.

    Events Emitted:
        - SubmissionRejected: When validation blocks the submit
        - SubmissionStarted: When the external call is issued
        - SubmissionSucceeded: When the backend accepted the request
        - SubmissionFailed: When the backend reported an error
    """

    def __init__(
        self,
        session_store: EditSessionStore,
        create_operation: CreateOperation,
        update_operation: UpdateOperation,
        event_bus: EventBus,
    ) -> None:
        """Initialize the controller.

        Args:
            session_store: Store owning the draft workspace.
            create_operation: Coroutine function sending a create batch.
            update_operation: Coroutine function sending one update.
            event_bus: The event bus for publishing events.
        """
        self._store = session_store
        self._create = create_operation
        self._update = update_operation
        self._bus = event_bus
        self._status = SubmissionStatus.IDLE
        self._error_message: str | None = None
        self._outcome: OperationOutcome | None = None
        self._report: ValidationReport | None = None
        self._bus.subscribe(EditSessionClosed, self._on_session_closed)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def status(self) -> SubmissionStatus:
        return self._status

    @property
    def is_submitting(self) -> bool:
        return self._status is SubmissionStatus.SUBMITTING

    @property
    def error_message(self) -> str | None:
        """Banner text of the last failed submission, if any."""
        return self._error_message

    @property
    def last_outcome(self) -> OperationOutcome | None:
        return self._outcome

    @property
    def last_report(self) -> ValidationReport | None:
        return self._report

    # ------------------------------------------------------------------
    # Submission Lifecycle
    # ------------------------------------------------------------------

    def validate_all(self) -> ValidationReport:
        """Validate every draft in tab order and write all verdicts."""
        workspace = self._store.workspace
        checked: list[str] = []
        invalid: list[str] = []
        for record in workspace.drafts():
            verdicts = validate_record(record)
            self._store.record_verdicts(record.id, verdicts)
            checked.append(record.id)
            if any(verdict.failed for verdict in verdicts.values()):
                invalid.append(record.id)
        report = ValidationReport(checked_ids=tuple(checked), invalid_ids=tuple(invalid))
        self._report = report
        return report

    async def submit(self) -> OperationOutcome | None:
        """Validate and, if everything passes, send the session to the backend.

        Returns:
            The outcome of the external call, or None when nothing was sent
            (session closed, submission already in flight, or validation
            failed).

        Emits:
            SubmissionRejected: If any draft failed validation.
            SubmissionStarted: Before awaiting the external call.
            SubmissionSucceeded: On success, after the session is closed.
            SubmissionFailed: On error.
        """
        workspace = self._store.workspace
        if not workspace.is_open:
            LOGGER.debug("SubmissionController.submit ignored: session closed")
            return None
        if self.is_submitting:
            LOGGER.debug("SubmissionController.submit ignored: submission in flight")
            return None

        self._status = SubmissionStatus.VALIDATING
        report = self.validate_all()
        if not report.passed:
            first_invalid = report.invalid_ids[0]
            self._status = SubmissionStatus.INVALID
            workspace.set_focused(first_invalid)
            LOGGER.debug(
                "SubmissionController: validation failed for %d draft(s), focusing %s",
                len(report.invalid_ids),
                first_invalid,
            )
            self._bus.publish(SubmissionRejected(
                first_invalid_id=first_invalid,
                invalid_count=len(report.invalid_ids),
            ))
            return None

        mode = workspace.mode
        generation = workspace.generation
        request = self._build_request(mode)
        outcome = OperationOutcome.pending(generation)
        self._outcome = outcome
        self._error_message = None
        self._status = SubmissionStatus.SUBMITTING

        LOGGER.debug(
            "SubmissionController: submitting mode=%s, drafts=%d, generation=%d",
            mode.value,
            workspace.draft_count(),
            generation,
        )
        self._bus.publish(SubmissionStarted(mode=mode.value, draft_count=workspace.draft_count()))

        try:
            if mode is EditMode.CREATE:
                data = await self._create(request)
            else:
                data = await self._update(request)
        except asyncio.CancelledError:
            if self._outcome is outcome:
                self._status = SubmissionStatus.IDLE
            raise
        except Exception as exc:
            if self._is_stale(generation):
                outcome.mark_stale()
                LOGGER.debug("SubmissionController: stale error ignored, generation=%d", generation)
                return outcome
            message = describe_error(exc)
            outcome.mark_error(message)
            self._status = SubmissionStatus.FAILED
            self._error_message = message
            LOGGER.warning("SubmissionController: %s failed: %s", mode.value, message)
            self._bus.publish(SubmissionFailed(mode=mode.value, error=message))
            return outcome

        if self._is_stale(generation):
            outcome.mark_stale()
            LOGGER.debug("SubmissionController: stale success ignored, generation=%d", generation)
            return outcome

        outcome.mark_success(data)
        self._status = SubmissionStatus.IDLE
        self._store.close(reason="submitted")
        LOGGER.debug("SubmissionController: %s succeeded", mode.value)
        self._bus.publish(SubmissionSucceeded(mode=mode.value))
        return outcome

    # ------------------------------------------------------------------
    # Internal Helpers
    # ------------------------------------------------------------------

    def _build_request(self, mode: EditMode) -> Sequence[ClusterSpec] | ClusterUpdate:
        drafts = self._store.workspace.drafts()
        if mode is EditMode.CREATE:
            return [ClusterSpec(name=record.cluster_name, crane_url=record.crane_url) for record in drafts]
        record = drafts[0]
        return ClusterUpdate(id=record.id, name=record.cluster_name, crane_url=record.crane_url)

    def _is_stale(self, generation: int) -> bool:
        workspace = self._store.workspace
        return not workspace.is_open or workspace.generation != generation

    def _on_session_closed(self, event: Any) -> None:
        self._status = SubmissionStatus.IDLE
        self._error_message = None
        self._report = None


__all__ = ["SubmissionController"]
