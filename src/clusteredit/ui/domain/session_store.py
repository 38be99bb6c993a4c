"""Edit session store domain manager.

Wraps DraftWorkspace with event emission so the dialog never mutates drafts
directly. This is the single entry point for UI-originated draft actions.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Mapping

from ...editor.draft_model import DraftRecord, EditMode
from ...editor.validation import ValidatedField, Verdict, validate_field
from ...editor.workspace import DraftNotFoundError
from ..events import (
    DraftAdded,
    DraftRemoved,
    DraftUpdated,
    EditSessionClosed,
    EditSessionOpened,
    EventBus,
    FocusedDraftChanged,
    ValidationChanged,
)

if TYPE_CHECKING:  # pragma: no cover
    from ...editor.workspace import DraftWorkspace

LOGGER = logging.getLogger(__name__)


class EditSessionStore:
    """Domain manager for the draft tabs of the cluster editor.

    All draft/tab operations coming from the UI go through this class so every
    state change is published on the event bus.

    Events Emitted:
        - EditSessionOpened / EditSessionClosed: lifecycle transitions
        - DraftAdded / DraftRemoved / DraftUpdated: collection changes
        - FocusedDraftChanged: whenever the workspace focus moves
        - ValidationChanged: for each verdict written on blur
    """

    def __init__(self, workspace: DraftWorkspace, event_bus: EventBus) -> None:
        """Initialize the store.

        Args:
            workspace: The underlying DraftWorkspace to wrap.
            event_bus: The event bus for publishing events.
        """
        self._workspace = workspace
        self._bus = event_bus
        self._workspace.add_focus_listener(self._on_focus_changed)

    @property
    def workspace(self) -> DraftWorkspace:
        return self._workspace

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self, mode: EditMode, seed_records: Iterable[DraftRecord] = ()) -> None:
        """Open the editor in ``mode`` seeded with ``seed_records``.

        Raises:
            ValueError: If the seeds do not fit the mode.

        Emits:
            EditSessionOpened: After the workspace is populated.
        """
        self._workspace.open(mode, seed_records)
        LOGGER.debug("EditSessionStore.open: mode=%s", mode.value)
        self._bus.publish(EditSessionOpened(mode=mode.value, draft_ids=self._workspace.draft_ids()))

    def close(self, reason: str = "cancel") -> None:
        """Close the editor and drop its drafts and verdicts.

        Closing an already-closed session is a no-op.

        Emits:
            EditSessionClosed: If the session was open.
        """
        if not self._workspace.is_open:
            return
        mode = self._workspace.mode
        discarded = 0
        if reason != "submitted":
            discarded = sum(not record.is_blank() for record in self._workspace.drafts())
        self._workspace.close()
        LOGGER.debug("EditSessionStore.close: reason=%s, discarded=%d", reason, discarded)
        self._bus.publish(EditSessionClosed(mode=mode.value, reason=reason, discarded=discarded))

    # ------------------------------------------------------------------
    # Draft actions
    # ------------------------------------------------------------------

    def add_draft(self) -> DraftRecord | None:
        """Append a blank draft tab (create mode only)."""
        record = self._workspace.add_draft()
        if record is not None:
            self._bus.publish(DraftAdded(draft_id=record.id))
        return record

    def remove_draft(self, draft_id: str) -> DraftRecord | None:
        """Remove a draft tab; refused silently for the last tab."""
        record = self._workspace.remove_draft(draft_id)
        if record is not None:
            self._bus.publish(DraftRemoved(draft_id=draft_id))
        return record

    def update_draft(self, draft_id: str, **fields: str) -> DraftRecord | None:
        """Apply an edit coming from an input widget.

        Returns:
            The updated record, or None when ``draft_id`` is stale.
        """
        try:
            record = self._workspace.update_draft(draft_id, **fields)
        except DraftNotFoundError:
            LOGGER.warning("EditSessionStore.update_draft: unknown draft_id=%s", draft_id)
            return None
        self._bus.publish(DraftUpdated(draft_id=draft_id, fields=tuple(fields)))
        return record

    def set_focused(self, draft_id: str) -> DraftRecord | None:
        try:
            return self._workspace.set_focused(draft_id)
        except DraftNotFoundError:
            LOGGER.warning("EditSessionStore.set_focused: unknown draft_id=%s", draft_id)
            return None

    def validate_field(self, draft_id: str, field: ValidatedField) -> Verdict | None:
        """Blur handler: validate one field and store the verdict.

        Returns:
            The verdict, or None when ``draft_id`` is stale.
        """
        try:
            record = self._workspace.get_draft(draft_id)
        except DraftNotFoundError:
            LOGGER.warning("EditSessionStore.validate_field: unknown draft_id=%s", draft_id)
            return None
        verdict = validate_field(record, field)
        self.record_verdict(draft_id, field, verdict)
        return verdict

    def record_verdict(self, draft_id: str, field: ValidatedField, verdict: Verdict) -> None:
        self.record_verdicts(draft_id, {field: verdict})

    def record_verdicts(self, draft_id: str, verdicts: Mapping[ValidatedField, Verdict]) -> None:
        """Store ``verdicts`` for one draft and publish one event per field."""
        self._workspace.validation.record_all(draft_id, verdicts)
        for field, verdict in verdicts.items():
            self._bus.publish(ValidationChanged(
                draft_id=draft_id,
                field=field.value,
                failed=verdict.failed,
                message=verdict.message,
            ))

    # ------------------------------------------------------------------
    # Internal Helpers
    # ------------------------------------------------------------------

    def _on_focus_changed(self, draft: DraftRecord | None) -> None:
        self._bus.publish(FocusedDraftChanged(draft_id=draft.id if draft is not None else None))


__all__ = ["EditSessionStore"]
