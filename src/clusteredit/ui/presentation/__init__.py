"""Presentation layer for the cluster editor.

Thin Qt components that respond to domain events and delegate user actions
to the domain layer. No business logic lives here.
"""

from __future__ import annotations

from .dialogs import DraftPage, EditClusterDialog

__all__: list[str] = [
    "DraftPage",
    "EditClusterDialog",
]
