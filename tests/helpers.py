"""Shared test helpers and stub classes.

Import from here instead of duplicating these classes in individual test files.
"""

from __future__ import annotations

import asyncio
from typing import Any

from clusteredit.ui.events import Event, EventBus


class EventRecorder:
    """Collects every event of the given types published on a bus.

    Example:
        recorder = EventRecorder(bus, DraftAdded, DraftRemoved)
        ...
        assert recorder.types() == [DraftAdded]
    """

    def __init__(self, bus: EventBus, *event_types: type[Event]) -> None:
        self.events: list[Event] = []
        for event_type in event_types:
            bus.subscribe(event_type, self._record)

    def _record(self, event: Event) -> None:
        self.events.append(event)

    def types(self) -> list[type[Event]]:
        return [type(event) for event in self.events]

    def of_type(self, event_type: type[Event]) -> list[Any]:
        return [event for event in self.events if isinstance(event, event_type)]


class RecordingOperation:
    """Fake create/update operation that records calls.

    When ``gate`` is set the call blocks until the test releases it, which
    keeps a submission in flight for as long as the test needs.
    """

    def __init__(self, result: Any = None, error: Exception | None = None, gated: bool = False) -> None:
        self.result = result
        self.error = error
        self.calls: list[Any] = []
        self.gate: asyncio.Event | None = asyncio.Event() if gated else None
        self.started = asyncio.Event()

    async def __call__(self, request: Any) -> Any:
        self.calls.append(request)
        self.started.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.result
