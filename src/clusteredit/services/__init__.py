"""Service layer helpers (cluster API client, settings)."""

from .cluster_api import (
    ClusterApiClient,
    ClusterApiError,
    ClusterRecord,
    ClusterSpec,
    ClusterUpdate,
    CreateOperation,
    UpdateOperation,
    describe_error,
)
from .settings import Settings, SettingsStore

__all__ = [
    "ClusterApiClient",
    "ClusterApiError",
    "ClusterRecord",
    "ClusterSpec",
    "ClusterUpdate",
    "CreateOperation",
    "UpdateOperation",
    "describe_error",
    "Settings",
    "SettingsStore",
]
