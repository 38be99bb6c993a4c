"""Domain layer for the cluster editor.

Domain Managers:
    - EditSessionStore: Draft/tab lifecycle and blur validation
    - SubmissionController: Submit state machine

All domain managers:
    - Receive dependencies via constructor injection
    - Emit events to notify other layers of state changes
    - Have no direct dependencies on Qt or UI widgets
"""

from __future__ import annotations

from .session_store import EditSessionStore
from .submission_controller import SubmissionController

__all__: list[str] = [
    "EditSessionStore",
    "SubmissionController",
]
