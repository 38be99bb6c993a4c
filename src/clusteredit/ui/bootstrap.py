"""Edit session bootstrap module.

Creates and wires the event bus, draft workspace, domain managers and use
cases of the cluster editor. The dialog is created separately so this wiring
can be exercised without a QApplication.

Usage:
    from clusteredit.ui.bootstrap import create_edit_session

    session = create_edit_session(create_operation=api.add_clusters,
                                  update_operation=api.update_cluster)
    session.open_create.execute()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..editor.workspace import DraftWorkspace
from .application.session_ops import CloseSessionUseCase, OpenCreateSessionUseCase, OpenUpdateSessionUseCase
from .domain.session_store import EditSessionStore
from .domain.submission_controller import SubmissionController
from .events import EventBus

if TYPE_CHECKING:  # pragma: no cover - imports for type checking only
    from ..services.cluster_api import CreateOperation, UpdateOperation

_LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class EditSession:
    """Components of one cluster editor, wired together."""

    event_bus: EventBus
    workspace: DraftWorkspace
    store: EditSessionStore
    controller: SubmissionController
    open_create: OpenCreateSessionUseCase
    open_update: OpenUpdateSessionUseCase
    close: CloseSessionUseCase


def create_edit_session(
    *,
    create_operation: CreateOperation,
    update_operation: UpdateOperation,
    event_bus: EventBus | None = None,
    workspace: DraftWorkspace | None = None,
) -> EditSession:
    """Create and wire the components of the cluster editor.

    Args:
        create_operation: Coroutine function sending a batch create.
        update_operation: Coroutine function sending one update.
        event_bus: Optional pre-created bus (shared with a host window).
        workspace: Optional pre-created DraftWorkspace.
    """
    bus = event_bus or EventBus()
    workspace = workspace or DraftWorkspace()
    store = EditSessionStore(workspace=workspace, event_bus=bus)
    controller = SubmissionController(
        session_store=store,
        create_operation=create_operation,
        update_operation=update_operation,
        event_bus=bus,
    )
    _LOGGER.debug("Created edit session components")
    return EditSession(
        event_bus=bus,
        workspace=workspace,
        store=store,
        controller=controller,
        open_create=OpenCreateSessionUseCase(store),
        open_update=OpenUpdateSessionUseCase(store),
        close=CloseSessionUseCase(store),
    )
