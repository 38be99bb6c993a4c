"""Application layer for the cluster editor.

Use Cases:
    - OpenCreateSessionUseCase / OpenUpdateSessionUseCase: seed sources
    - CloseSessionUseCase: cancel and teardown

All use cases receive dependencies via constructor injection and orchestrate
domain managers without direct UI coupling.
"""

from __future__ import annotations

from .session_ops import (
    CloseSessionUseCase,
    OpenCreateSessionUseCase,
    OpenUpdateSessionUseCase,
)

__all__: list[str] = [
    "CloseSessionUseCase",
    "OpenCreateSessionUseCase",
    "OpenUpdateSessionUseCase",
]
