"""Tests for the EditSessionStore domain manager."""

from __future__ import annotations

import logging

import pytest

from clusteredit.editor.draft_model import DraftRecord, EditMode
from clusteredit.editor.validation import (
    NAME_EMPTY_MESSAGE,
    PASSED,
    URL_TRAILING_SLASH_MESSAGE,
    ValidatedField,
    Verdict,
)
from clusteredit.ui.domain.session_store import EditSessionStore
from clusteredit.ui.events import (
    DraftAdded,
    DraftRemoved,
    DraftUpdated,
    EditSessionClosed,
    EditSessionOpened,
    EventBus,
    FocusedDraftChanged,
    ValidationChanged,
)
from tests.helpers import EventRecorder

ALL_EVENTS = (
    EditSessionOpened,
    EditSessionClosed,
    DraftAdded,
    DraftRemoved,
    DraftUpdated,
    FocusedDraftChanged,
    ValidationChanged,
)


@pytest.fixture
def recorder(event_bus: EventBus) -> EventRecorder:
    return EventRecorder(event_bus, *ALL_EVENTS)


# =============================================================================
# Lifecycle
# =============================================================================


def test_open_publishes_focus_then_opened(session_store: EditSessionStore, recorder: EventRecorder) -> None:
    session_store.open(EditMode.CREATE)

    assert recorder.types() == [FocusedDraftChanged, EditSessionOpened]
    opened = recorder.of_type(EditSessionOpened)[0]
    assert opened.mode == "create"
    assert opened.draft_ids == session_store.workspace.draft_ids()


def test_open_update_with_seed(session_store: EditSessionStore, recorder: EventRecorder) -> None:
    session_store.open(EditMode.UPDATE, [DraftRecord(id="cls-7", cluster_name="a", crane_url="http://a")])

    opened = recorder.of_type(EditSessionOpened)[0]
    assert opened.mode == "update"
    assert opened.draft_ids == ("cls-7",)


def test_open_with_bad_seeds_raises_and_publishes_nothing(
    session_store: EditSessionStore, recorder: EventRecorder
) -> None:
    with pytest.raises(ValueError):
        session_store.open(EditMode.UPDATE)
    assert recorder.of_type(EditSessionOpened) == []


def test_close_publishes_reason(session_store: EditSessionStore, recorder: EventRecorder) -> None:
    session_store.open(EditMode.CREATE)

    session_store.close(reason="cancel")

    closed = recorder.of_type(EditSessionClosed)
    assert len(closed) == 1
    assert closed[0].reason == "cancel"
    assert closed[0].mode == "create"
    assert not session_store.workspace.is_open


def test_close_when_not_open_is_a_no_op(session_store: EditSessionStore, recorder: EventRecorder) -> None:
    session_store.close()
    assert recorder.events == []


def test_cancel_reports_drafts_with_unsent_input(session_store: EditSessionStore, recorder: EventRecorder) -> None:
    session_store.open(EditMode.CREATE)
    first = session_store.workspace.draft_ids()[0]
    session_store.update_draft(first, cluster_name="prod")
    session_store.add_draft()

    session_store.close(reason="cancel")

    assert recorder.of_type(EditSessionClosed)[0].discarded == 1


def test_submitted_close_discards_nothing(session_store: EditSessionStore, recorder: EventRecorder) -> None:
    session_store.open(EditMode.UPDATE, [DraftRecord(id="cls-7", cluster_name="a", crane_url="http://a")])

    session_store.close(reason="submitted")

    assert recorder.of_type(EditSessionClosed)[0].discarded == 0


# =============================================================================
# Draft actions
# =============================================================================


def test_add_and_remove_publish_events(session_store: EditSessionStore, recorder: EventRecorder) -> None:
    session_store.open(EditMode.CREATE)
    first = session_store.workspace.focused_id
    recorder.events.clear()

    added = session_store.add_draft()
    assert added is not None
    assert recorder.types() == [FocusedDraftChanged, DraftAdded]
    recorder.events.clear()

    session_store.remove_draft(added.id)

    assert recorder.types() == [FocusedDraftChanged, DraftRemoved]
    assert recorder.of_type(FocusedDraftChanged)[0].draft_id == first


def test_refused_actions_publish_nothing(session_store: EditSessionStore, recorder: EventRecorder) -> None:
    session_store.open(EditMode.UPDATE, [DraftRecord(id="cls-1")])
    recorder.events.clear()

    assert session_store.add_draft() is None
    assert session_store.remove_draft("cls-1") is None
    assert recorder.events == []


def test_update_draft_publishes_changed_fields(session_store: EditSessionStore, recorder: EventRecorder) -> None:
    session_store.open(EditMode.CREATE)
    draft_id = session_store.workspace.draft_ids()[0]

    record = session_store.update_draft(draft_id, cluster_name="prod")

    assert record is not None and record.cluster_name == "prod"
    updated = recorder.of_type(DraftUpdated)
    assert updated[0].draft_id == draft_id
    assert updated[0].fields == ("cluster_name",)


def test_stale_ids_are_logged_not_raised(
    session_store: EditSessionStore, recorder: EventRecorder, caplog: pytest.LogCaptureFixture
) -> None:
    session_store.open(EditMode.CREATE)
    recorder.events.clear()

    with caplog.at_level(logging.WARNING):
        assert session_store.update_draft("ghost", cluster_name="x") is None
        assert session_store.set_focused("ghost") is None
        assert session_store.validate_field("ghost", ValidatedField.CLUSTER_NAME) is None

    assert recorder.events == []
    assert sum("ghost" in record.getMessage() for record in caplog.records) == 3


def test_set_focused_publishes_only_on_change(session_store: EditSessionStore, recorder: EventRecorder) -> None:
    session_store.open(EditMode.CREATE)
    first = session_store.workspace.draft_ids()[0]
    session_store.add_draft()
    recorder.events.clear()

    session_store.set_focused(first)
    session_store.set_focused(first)

    assert [event.draft_id for event in recorder.of_type(FocusedDraftChanged)] == [first]


# =============================================================================
# Blur validation
# =============================================================================


def test_validate_field_records_and_publishes_verdict(
    session_store: EditSessionStore, recorder: EventRecorder
) -> None:
    session_store.open(EditMode.CREATE)
    draft_id = session_store.workspace.draft_ids()[0]
    session_store.update_draft(draft_id, crane_url="https://crane.example.com/")

    verdict = session_store.validate_field(draft_id, ValidatedField.CRANE_URL)

    assert verdict is not None and verdict.failed
    assert session_store.workspace.validation.get(draft_id, ValidatedField.CRANE_URL) == verdict
    changed = recorder.of_type(ValidationChanged)
    assert changed[-1].field == "crane_url"
    assert changed[-1].message == URL_TRAILING_SLASH_MESSAGE


def test_blur_only_touches_one_field(session_store: EditSessionStore) -> None:
    session_store.open(EditMode.CREATE)
    draft_id = session_store.workspace.draft_ids()[0]

    verdict = session_store.validate_field(draft_id, ValidatedField.CLUSTER_NAME)

    assert verdict is not None and verdict.message == NAME_EMPTY_MESSAGE
    assert session_store.workspace.validation.get(draft_id, ValidatedField.CRANE_URL) is None


def test_blur_verdict_is_overwritten_after_fix(session_store: EditSessionStore) -> None:
    session_store.open(EditMode.CREATE)
    draft_id = session_store.workspace.draft_ids()[0]
    session_store.validate_field(draft_id, ValidatedField.CLUSTER_NAME)

    session_store.update_draft(draft_id, cluster_name="prod")
    session_store.validate_field(draft_id, ValidatedField.CLUSTER_NAME)

    assert not session_store.workspace.validation.has_failure(draft_id)


def test_record_verdicts_stores_all_and_publishes_each(
    session_store: EditSessionStore, recorder: EventRecorder
) -> None:
    session_store.open(EditMode.CREATE)
    draft_id = session_store.workspace.draft_ids()[0]
    recorder.events.clear()

    session_store.record_verdicts(draft_id, {
        ValidatedField.CLUSTER_NAME: Verdict.fail(NAME_EMPTY_MESSAGE),
        ValidatedField.CRANE_URL: PASSED,
    })

    assert session_store.workspace.validation.for_draft(draft_id) == {
        ValidatedField.CLUSTER_NAME: Verdict.fail(NAME_EMPTY_MESSAGE),
        ValidatedField.CRANE_URL: PASSED,
    }
    changed = recorder.of_type(ValidationChanged)
    assert [(event.field, event.failed) for event in changed] == [("cluster_name", True), ("crane_url", False)]
