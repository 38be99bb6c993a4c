"""UI package holding the cluster editor's domain managers and dialog."""

from .bootstrap import EditSession, create_edit_session
from .domain import EditSessionStore, SubmissionController
from .events import EventBus

__all__ = [
    "EditSession",
    "create_edit_session",
    "EditSessionStore",
    "SubmissionController",
    "EventBus",
]
