"""Edit session use cases.

This module provides the use cases that open and close the cluster editor:
- OpenCreateSessionUseCase: Open with one blank draft
- OpenUpdateSessionUseCase: Open with the cluster being edited
- CloseSessionUseCase: Cancel/close the editor
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ...editor.draft_model import DraftRecord, EditMode

if TYPE_CHECKING:  # pragma: no cover - imports for type checking only
    from ...services.cluster_api import ClusterRecord
    from ..domain.session_store import EditSessionStore

LOGGER = logging.getLogger(__name__)


class OpenCreateSessionUseCase:
    """Use case for opening the editor to add new clusters.

    Events Emitted:
        - EditSessionOpened: After the blank draft is seeded
        - FocusedDraftChanged: When the blank draft receives focus
    """

    __slots__ = ("_session_store",)

    def __init__(self, session_store: EditSessionStore) -> None:
        self._session_store = session_store

    def execute(self) -> str:
        """Open the editor in create mode.

        Returns:
            The id of the blank draft.
        """
        self._session_store.open(EditMode.CREATE)
        draft_id = self._session_store.workspace.draft_ids()[0]
        LOGGER.debug("OpenCreateSessionUseCase: seeded draft %s", draft_id)
        return draft_id


class OpenUpdateSessionUseCase:
    """Use case for opening the editor on one existing cluster.

    The draft keeps the backend-assigned cluster id so the update request
    can address the record.
    """

    __slots__ = ("_session_store",)

    def __init__(self, session_store: EditSessionStore) -> None:
        self._session_store = session_store

    def execute(self, cluster: ClusterRecord) -> str:
        """Open the editor in update mode seeded from ``cluster``.

        Raises:
            ValueError: If the cluster has no id.
        """
        if not cluster.id:
            raise ValueError("cannot edit a cluster without an id")
        seed = DraftRecord(id=cluster.id, cluster_name=cluster.name, crane_url=cluster.crane_url)
        self._session_store.open(EditMode.UPDATE, [seed])
        LOGGER.debug("OpenUpdateSessionUseCase: editing cluster %s", cluster.id)
        return seed.id


class CloseSessionUseCase:
    """Use case for closing the editor without submitting.

    Any submission still in flight is left to complete on its own; its
    result is ignored because the session it belonged to is gone.
    """

    __slots__ = ("_session_store",)

    def __init__(self, session_store: EditSessionStore) -> None:
        self._session_store = session_store

    def execute(self, reason: str = "cancel") -> None:
        self._session_store.close(reason=reason)
