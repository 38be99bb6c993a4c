"""Dialog implementations for the presentation layer.

Dialogs:
    - EditClusterDialog: Tabbed add/update cluster editor
"""

from __future__ import annotations

from .edit_cluster_dialog import DraftPage, EditClusterDialog

__all__: list[str] = [
    "DraftPage",
    "EditClusterDialog",
]
