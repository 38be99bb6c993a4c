"""Event bus infrastructure for decoupled edit-session communication.

The session store and the submission controller publish the events defined
here; the dialog (or any other observer) subscribes to redraw itself without
holding references back into the domain layer.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import (
    Callable,
    Generic,
    TypeVar,
    TYPE_CHECKING,
)
from weakref import WeakMethod, ref

if TYPE_CHECKING:  # pragma: no cover - imports for type checking only
    from typing import DefaultDict

logger = logging.getLogger(__name__)

E = TypeVar("E", bound="Event")

Handler = Callable[[E], None]


@dataclass(slots=True)
class Event:
    """Base class for all events in the system.

    Example::

        @dataclass(slots=True)
        class DraftAdded(Event):
            draft_id: str
    """

    pass


# =============================================================================
# Session Events
# =============================================================================


@dataclass(slots=True)
class EditSessionOpened(Event):
    """Emitted when the editor is opened.

    Attributes:
        mode: ``"create"`` or ``"update"``.
        draft_ids: Ids of the seeded drafts, in tab order.
    """

    mode: str
    draft_ids: tuple[str, ...]


@dataclass(slots=True)
class EditSessionClosed(Event):
    """Emitted when the editor is closed and its drafts dropped.

    Attributes:
        mode: The mode the session was running in.
        reason: ``"cancel"``, ``"submitted"`` or ``"teardown"``.
        discarded: Drafts with unsent input dropped by the close.
    """

    mode: str
    reason: str
    discarded: int = 0


# =============================================================================
# Draft Events
# =============================================================================


@dataclass(slots=True)
class DraftAdded(Event):
    """Emitted when a blank draft tab is appended."""

    draft_id: str


@dataclass(slots=True)
class DraftRemoved(Event):
    """Emitted when a draft tab is removed."""

    draft_id: str


@dataclass(slots=True)
class DraftUpdated(Event):
    """Emitted when a field of a draft is edited.

    Attributes:
        draft_id: The edited draft.
        fields: Names of the fields that changed.
    """

    draft_id: str
    fields: tuple[str, ...]


@dataclass(slots=True)
class FocusedDraftChanged(Event):
    """Emitted when the active tab changes.

    Attributes:
        draft_id: The newly focused draft, or None when the session is empty.
    """

    draft_id: str | None


@dataclass(slots=True)
class ValidationChanged(Event):
    """Emitted when a verdict is written for a draft field.

    Attributes:
        draft_id: The validated draft.
        field: Field name (``"cluster_name"`` or ``"crane_url"``).
        failed: Whether the check failed.
        message: Message to show under the field when ``failed``.
    """

    draft_id: str
    field: str
    failed: bool
    message: str


# =============================================================================
# Submission Events
# =============================================================================


@dataclass(slots=True)
class SubmissionRejected(Event):
    """Emitted when validation blocks a submit.

    Attributes:
        first_invalid_id: The draft that received focus.
        invalid_count: Number of drafts with at least one failing field.
    """

    first_invalid_id: str
    invalid_count: int


@dataclass(slots=True)
class SubmissionStarted(Event):
    """Emitted when the external create/update call is issued."""

    mode: str
    draft_count: int


@dataclass(slots=True)
class SubmissionSucceeded(Event):
    """Emitted when the backend accepted the submission."""

    mode: str


@dataclass(slots=True)
class SubmissionFailed(Event):
    """Emitted when the backend reported an error.

    Attributes:
        mode: The mode the submission was made in.
        error: Message shown in the error banner.
    """

    mode: str
    error: str


class EventBus(Generic[E]):
    """A typed publish-subscribe event bus.

    Handlers are stored as weak references where possible (bound methods) so
    a closed dialog does not keep receiving events.

    Thread Safety:
        Not thread-safe. All operations happen on the UI event loop thread.
    """

    __slots__ = ("_handlers",)

    def __init__(self) -> None:
        self._handlers: DefaultDict[type[Event], list[_HandlerRef]] = defaultdict(list)

    def subscribe(self, event_type: type[E], handler: Handler[E]) -> None:
        """Register ``handler`` for events of exactly ``event_type``."""
        handler_ref = _HandlerRef.create(handler)
        self._handlers[event_type].append(handler_ref)
        logger.debug(
            "Subscribed handler %s to event type %s",
            _handler_name(handler),
            event_type.__name__,
        )

    def unsubscribe(self, event_type: type[E], handler: Handler[E]) -> None:
        """Remove the first registration of ``handler``; unknown handlers are ignored."""
        handlers = self._handlers.get(event_type)
        if handlers is None:
            return

        for i, handler_ref in enumerate(handlers):
            if handler_ref.matches(handler):
                handlers.pop(i)
                logger.debug(
                    "Unsubscribed handler %s from event type %s",
                    _handler_name(handler),
                    event_type.__name__,
                )
                return

    def publish(self, event: E) -> None:
        """Deliver ``event`` synchronously to every handler in registration order.

        A handler that raises is logged; the remaining handlers still run.
        """
        event_type = type(event)
        handlers = self._handlers.get(event_type)
        if not handlers:
            logger.debug("No handlers for event type %s", event_type.__name__)
            return

        logger.debug("Publishing %s to %d handler(s)", event_type.__name__, len(handlers))

        dead_refs: list[_HandlerRef] = []
        for handler_ref in list(handlers):
            handler = handler_ref.resolve()
            if handler is None:
                dead_refs.append(handler_ref)
                continue
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "Handler %s raised exception for event %s",
                    _handler_name(handler),
                    event_type.__name__,
                )

        for handler_ref in dead_refs:
            if handler_ref in handlers:
                handlers.remove(handler_ref)

    def clear(self) -> None:
        self._handlers.clear()
        logger.debug("Cleared all event handlers")

    def handler_count(self, event_type: type[E] | None = None) -> int:
        if event_type is not None:
            return len(self._handlers.get(event_type, []))
        return sum(len(handlers) for handlers in self._handlers.values())


class _HandlerRef:
    """Weak reference for bound methods, strong reference for everything else."""

    __slots__ = ("_ref", "_is_weak")

    def __init__(self, handler_ref: WeakMethod | ref | Handler, is_weak: bool) -> None:
        self._ref = handler_ref
        self._is_weak = is_weak

    @classmethod
    def create(cls, handler: Handler) -> _HandlerRef:
        if hasattr(handler, "__self__") and hasattr(handler, "__func__"):
            try:
                return cls(WeakMethod(handler), is_weak=True)
            except TypeError:
                pass
        return cls(handler, is_weak=False)

    def resolve(self) -> Handler | None:
        if not self._is_weak:
            return self._ref  # type: ignore[return-value]
        return self._ref()  # type: ignore[operator]

    def matches(self, handler: Handler) -> bool:
        resolved = self.resolve()
        if resolved is None:
            return False
        return resolved == handler


def _handler_name(handler: Handler) -> str:
    if hasattr(handler, "__self__") and hasattr(handler, "__func__"):
        cls_name = type(handler.__self__).__name__
        return f"{cls_name}.{handler.__func__.__name__}"
    if hasattr(handler, "__name__"):
        return handler.__name__
    return repr(handler)


__all__ = [
    "Event",
    "EventBus",
    "Handler",
    "EditSessionOpened",
    "EditSessionClosed",
    "DraftAdded",
    "DraftRemoved",
    "DraftUpdated",
    "FocusedDraftChanged",
    "ValidationChanged",
    "SubmissionRejected",
    "SubmissionStarted",
    "SubmissionSucceeded",
    "SubmissionFailed",
]
