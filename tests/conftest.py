"""Shared pytest fixtures."""

from __future__ import annotations

import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from clusteredit.editor.workspace import DraftWorkspace
from clusteredit.ui.domain.session_store import EditSessionStore
from clusteredit.ui.events import EventBus


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def workspace() -> DraftWorkspace:
    return DraftWorkspace()


@pytest.fixture
def session_store(workspace: DraftWorkspace, event_bus: EventBus) -> EditSessionStore:
    return EditSessionStore(workspace=workspace, event_bus=event_bus)


@pytest.fixture(autouse=True)
def _isolated_log_dir(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("CLUSTEREDIT_LOG_DIR", str(tmp_path / "logs"))
