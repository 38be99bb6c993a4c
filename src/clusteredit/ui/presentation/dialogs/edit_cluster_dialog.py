"""Tabbed dialog for adding clusters or editing one existing cluster."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

from PySide6.QtWidgets import (
    QDialog,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QTabWidget,
    QToolButton,
    QVBoxLayout,
    QWidget,
)

from ....editor.draft_model import DraftRecord, EditMode
from ....editor.validation import ValidatedField
from ...domain.session_store import EditSessionStore
from ...domain.submission_controller import SubmissionController
from ...events import (
    DraftAdded,
    DraftRemoved,
    EditSessionClosed,
    EditSessionOpened,
    EventBus,
    FocusedDraftChanged,
    SubmissionFailed,
    SubmissionRejected,
    SubmissionStarted,
    SubmissionSucceeded,
    ValidationChanged,
)

__all__ = ["EditClusterDialog", "DraftPage"]

LOGGER = logging.getLogger(__name__)

SubmitScheduler = Callable[[Awaitable[Any]], Any]

_ERROR_STYLE = "color: #d54941;"
_BANNER_STYLE = "color: #d54941; background: #fff0ed; border: 1px solid #f6c9c1; padding: 8px;"


class DraftPage(QWidget):
    """Form page for one draft: two inputs, each with an inline message."""

    def __init__(self, draft_id: str, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.draft_id = draft_id

        self.name_input = QLineEdit(self)
        self.name_input.setObjectName("cluster_name_input")
        self.name_error = QLabel(self)
        self.name_error.setObjectName("cluster_name_error")
        self.name_error.setStyleSheet(_ERROR_STYLE)

        self.url_input = QLineEdit(self)
        self.url_input.setObjectName("crane_url_input")
        self.url_input.setPlaceholderText("https://crane.example.com")
        self.url_error = QLabel(self)
        self.url_error.setObjectName("crane_url_error")
        self.url_error.setStyleSheet(_ERROR_STYLE)

        layout = QFormLayout(self)
        layout.setContentsMargins(24, 24, 24, 24)
        layout.addRow("Cluster name *", self.name_input)
        layout.addRow("", self.name_error)
        layout.addRow("Crane URL", self.url_input)
        layout.addRow("", self.url_error)

    def load(self, record: DraftRecord) -> None:
        self.name_input.setText(record.cluster_name)
        self.url_input.setText(record.crane_url)

    def input_for(self, field: ValidatedField) -> QLineEdit:
        return self.name_input if field is ValidatedField.CLUSTER_NAME else self.url_input

    def error_label_for(self, field: ValidatedField) -> QLabel:
        return self.name_error if field is ValidatedField.CLUSTER_NAME else self.url_error

    def show_verdict(self, field: ValidatedField, failed: bool, message: str) -> None:
        label = self.error_label_for(field)
        label.setText(message if failed else "")
        label.setVisible(failed)


class EditClusterDialog(QDialog):
    """Presents the draft workspace as tabs and forwards user actions.

    The dialog owns no state of its own: every edit goes to the session store
    and every redraw is driven by events from the bus.
    """

    def __init__(
        self,
        session_store: EditSessionStore,
        controller: SubmissionController,
        event_bus: EventBus,
        *,
        submit_scheduler: SubmitScheduler | None = None,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._store = session_store
        self._controller = controller
        self._bus = event_bus
        self._schedule = submit_scheduler or asyncio.ensure_future
        self._pages: dict[str, DraftPage] = {}
        self._syncing = False

        self.setModal(True)
        self._build_ui()
        self._subscribe()
        self._rebuild_tabs()
        self._refresh_submission_state()

    # ------------------------------------------------------------------
    # Public helpers
    # ------------------------------------------------------------------
    def page(self, draft_id: str) -> DraftPage:
        return self._pages[draft_id]

    def tab_titles(self) -> list[str]:
        return [self._tabs.tabText(index) for index in range(self._tabs.count())]

    def request_submit(self) -> None:
        """Schedule a submit on the event loop; ignored while one is running."""

        if self._controller.is_submitting:
            LOGGER.debug("EditClusterDialog: submit ignored while submitting")
            return
        self._schedule(self._controller.submit())

    def teardown(self) -> None:
        """Detach from the bus and drop whatever the session still holds."""

        self._unsubscribe()
        self._store.close(reason="teardown")

    def reject(self) -> None:  # noqa: D401 - Qt override
        self._store.close(reason="cancel")
        # closing an open session already hid the dialog via _on_session_closed
        if self.isVisible():
            super().reject()

    # ------------------------------------------------------------------
    # UI wiring
    # ------------------------------------------------------------------
    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)

        self._hint = QLabel(
            "Enter a reachable Crane endpoint to collect cost data for the new cluster.",
            self,
        )
        self._hint.setWordWrap(True)
        layout.addWidget(self._hint)

        self._tabs = QTabWidget(self)
        self._tabs.setObjectName("draft_tabs")
        self._tabs.currentChanged.connect(self._handle_tab_changed)
        self._tabs.tabCloseRequested.connect(self._handle_tab_close_requested)
        self._add_button = QToolButton(self._tabs)
        self._add_button.setObjectName("add_draft_button")
        self._add_button.setText("+")
        self._add_button.clicked.connect(lambda: self._store.add_draft())
        self._tabs.setCornerWidget(self._add_button)
        layout.addWidget(self._tabs)

        self._banner = QLabel(self)
        self._banner.setObjectName("error_banner")
        self._banner.setWordWrap(True)
        self._banner.setStyleSheet(_BANNER_STYLE)
        self._banner.setVisible(False)
        layout.addWidget(self._banner)

        buttons = QHBoxLayout()
        buttons.addStretch(1)
        self._cancel_button = QPushButton("Cancel", self)
        self._cancel_button.setObjectName("cancel_button")
        self._cancel_button.clicked.connect(self.reject)
        self._submit_button = QPushButton("OK", self)
        self._submit_button.setObjectName("submit_button")
        self._submit_button.setDefault(True)
        self._submit_button.clicked.connect(lambda: self.request_submit())
        buttons.addWidget(self._cancel_button)
        buttons.addWidget(self._submit_button)
        layout.addLayout(buttons)

    def _subscribe(self) -> None:
        self._bus.subscribe(EditSessionOpened, self._on_structure_changed)
        self._bus.subscribe(DraftAdded, self._on_structure_changed)
        self._bus.subscribe(DraftRemoved, self._on_structure_changed)
        self._bus.subscribe(EditSessionClosed, self._on_session_closed)
        self._bus.subscribe(FocusedDraftChanged, self._on_focus_changed)
        self._bus.subscribe(ValidationChanged, self._on_validation_changed)
        self._bus.subscribe(SubmissionStarted, self._on_submission_changed)
        self._bus.subscribe(SubmissionSucceeded, self._on_submission_changed)
        self._bus.subscribe(SubmissionFailed, self._on_submission_changed)
        self._bus.subscribe(SubmissionRejected, self._on_submission_changed)

    def _unsubscribe(self) -> None:
        self._bus.unsubscribe(EditSessionOpened, self._on_structure_changed)
        self._bus.unsubscribe(DraftAdded, self._on_structure_changed)
        self._bus.unsubscribe(DraftRemoved, self._on_structure_changed)
        self._bus.unsubscribe(EditSessionClosed, self._on_session_closed)
        self._bus.unsubscribe(FocusedDraftChanged, self._on_focus_changed)
        self._bus.unsubscribe(ValidationChanged, self._on_validation_changed)
        self._bus.unsubscribe(SubmissionStarted, self._on_submission_changed)
        self._bus.unsubscribe(SubmissionSucceeded, self._on_submission_changed)
        self._bus.unsubscribe(SubmissionFailed, self._on_submission_changed)
        self._bus.unsubscribe(SubmissionRejected, self._on_submission_changed)

    def _bind_page(self, page: DraftPage) -> None:
        page.name_input.textEdited.connect(
            lambda text, page=page: self._handle_field_edited(page, cluster_name=text)
        )
        page.url_input.textEdited.connect(
            lambda text, page=page: self._handle_field_edited(page, crane_url=text)
        )
        page.name_input.editingFinished.connect(
            lambda page=page: self._handle_field_blurred(page, ValidatedField.CLUSTER_NAME)
        )
        page.url_input.editingFinished.connect(
            lambda page=page: self._handle_field_blurred(page, ValidatedField.CRANE_URL)
        )

    def _is_live(self, page: DraftPage) -> bool:
        # pages being torn down still emit editingFinished when they lose focus
        return not self._syncing and self._pages.get(page.draft_id) is page

    # ------------------------------------------------------------------
    # Qt signal handlers
    # ------------------------------------------------------------------
    def _handle_tab_changed(self, index: int) -> None:
        if self._syncing or index < 0:
            return
        page = self._tabs.widget(index)
        if isinstance(page, DraftPage):
            self._store.set_focused(page.draft_id)

    def _handle_field_edited(self, page: DraftPage, **fields: str) -> None:
        if self._is_live(page):
            self._store.update_draft(page.draft_id, **fields)

    def _handle_field_blurred(self, page: DraftPage, field: ValidatedField) -> None:
        if self._is_live(page):
            self._store.validate_field(page.draft_id, field)

    def _handle_tab_close_requested(self, index: int) -> None:
        page = self._tabs.widget(index)
        if isinstance(page, DraftPage):
            self._store.remove_draft(page.draft_id)

    # ------------------------------------------------------------------
    # Bus handlers
    # ------------------------------------------------------------------
    def _on_structure_changed(self, _event: Any) -> None:
        self._rebuild_tabs()
        self._refresh_submission_state()

    def _on_session_closed(self, event: EditSessionClosed) -> None:
        self._rebuild_tabs()
        self._refresh_submission_state()
        if not self.isVisible():
            return
        if event.reason == "submitted":
            super().accept()
        else:
            super().reject()

    def _on_focus_changed(self, event: FocusedDraftChanged) -> None:
        self._sync_current_tab(event.draft_id)

    def _on_validation_changed(self, event: ValidationChanged) -> None:
        page = self._pages.get(event.draft_id)
        if page is not None:
            page.show_verdict(ValidatedField(event.field), event.failed, event.message)

    def _on_submission_changed(self, _event: Any) -> None:
        self._refresh_submission_state()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def _rebuild_tabs(self) -> None:
        workspace = self._store.workspace
        create_mode = workspace.mode is EditMode.CREATE
        self.setWindowTitle("Add cluster" if create_mode else "Update cluster")

        self._syncing = True
        try:
            while self._tabs.count():
                widget = self._tabs.widget(0)
                self._tabs.removeTab(0)
                if widget is not None:
                    widget.deleteLater()
            self._pages.clear()
            for record in workspace.drafts():
                page = DraftPage(record.id)
                page.load(record)
                for field, verdict in workspace.validation.for_draft(record.id).items():
                    page.show_verdict(field, verdict.failed, verdict.message)
                for field in ValidatedField:
                    if workspace.validation.get(record.id, field) is None:
                        page.show_verdict(field, False, "")
                self._bind_page(page)
                self._pages[record.id] = page
                self._tabs.addTab(page, workspace.tab_label(record.id))
        finally:
            self._syncing = False

        self._tabs.setTabsClosable(create_mode and workspace.draft_count() > 1)
        self._add_button.setVisible(create_mode)
        self._add_button.setEnabled(workspace.can_add())
        self._sync_current_tab(workspace.focused_id)

    def _sync_current_tab(self, draft_id: str | None) -> None:
        page = self._pages.get(draft_id) if draft_id is not None else None
        if page is None:
            return
        index = self._tabs.indexOf(page)
        if index >= 0 and self._tabs.currentIndex() != index:
            self._syncing = True
            try:
                self._tabs.setCurrentIndex(index)
            finally:
                self._syncing = False

    def _refresh_submission_state(self) -> None:
        busy = self._controller.is_submitting
        self._submit_button.setEnabled(not busy)
        self._submit_button.setText("Submitting…" if busy else "OK")
        message = self._controller.error_message
        self._banner.setText(message or "")
        self._banner.setVisible(bool(message))
