"""Workspace model holding the draft tabs of one cluster edit session."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Protocol

from .draft_model import DraftIdSequence, DraftRecord, EditMode
from .validation import ValidationState

__all__ = ["DraftWorkspace", "DraftNotFoundError", "FocusListener"]

LOGGER = logging.getLogger(__name__)


class FocusListener(Protocol):
    """Callback signature fired whenever the focused draft changes."""

    def __call__(self, draft: Optional[DraftRecord]) -> None:  # pragma: no cover - protocol
        ...


class DraftNotFoundError(KeyError):
    """Raised when an operation references a draft id that is not open."""

    def __init__(self, draft_id: str) -> None:
        super().__init__(f"Unknown draft_id: {draft_id}")
        self.draft_id = draft_id


class DraftWorkspace:
    """Ordered drafts, focused draft, mode and verdicts of one edit session.

    A closed workspace in create mode still holds one blank draft so the
    dialog can render immediately; a closed update workspace holds nothing.
    """

    def __init__(
        self,
        *,
        mode: EditMode = EditMode.CREATE,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._id_factory = id_factory or DraftIdSequence().next_id
        self._mode = mode
        self._drafts: Dict[str, DraftRecord] = {}
        self._order: List[str] = []
        self._focused_id: str | None = None
        # draft id -> id that was focused when the draft was added
        self._focus_origin: Dict[str, str | None] = {}
        self._is_open = False
        self._generation = 0
        self._validation = ValidationState()
        self._listeners: List[FocusListener] = []
        self._seed_blank()
        self._focused_id = self._order[0]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def open(self, mode: EditMode, seed_records: Iterable[DraftRecord] = ()) -> None:
        """Start a new session in ``mode`` populated from ``seed_records``."""

        seeds = list(seed_records)
        if mode is EditMode.UPDATE and len(seeds) != 1:
            raise ValueError(f"update mode needs exactly one seed record, got {len(seeds)}")
        ids = [record.id for record in seeds]
        if len(set(ids)) != len(ids):
            raise ValueError("seed records must have distinct ids")

        self._mode = mode
        self._clear_drafts()
        if seeds:
            for record in seeds:
                self._insert(record)
        else:
            self._seed_blank()
        self._is_open = True
        self._generation += 1
        LOGGER.debug(
            "DraftWorkspace.open: mode=%s, drafts=%d, generation=%d",
            mode.value,
            len(self._order),
            self._generation,
        )
        self._set_focus(self._order[0])

    def close(self) -> None:
        """Hide the session and drop everything it held."""

        was_open = self._is_open
        self._is_open = False
        self.reset()
        if was_open:
            self._generation += 1
        LOGGER.debug("DraftWorkspace.close: generation=%d", self._generation)

    def reset(self) -> None:
        """Return to the initial shape for the current mode and clear verdicts."""

        self._clear_drafts()
        if self._mode is EditMode.CREATE or self._is_open:
            self._seed_blank()
        self._set_focus(self._order[0] if self._order else None)

    # ------------------------------------------------------------------
    # Draft operations
    # ------------------------------------------------------------------
    def add_draft(self) -> DraftRecord | None:
        """Append a blank draft and focus it (create mode only)."""

        if not self.can_add():
            LOGGER.debug("DraftWorkspace.add_draft ignored: mode=%s, open=%s", self._mode.value, self._is_open)
            return None
        previous = self._focused_id
        record = DraftRecord(id=self._fresh_id())
        self._insert(record)
        self._focus_origin[record.id] = previous
        self._set_focus(record.id)
        return record

    def remove_draft(self, draft_id: str) -> DraftRecord | None:
        """Remove ``draft_id`` unless that would break the create-mode minimum."""

        if not self.can_remove(draft_id):
            LOGGER.debug("DraftWorkspace.remove_draft ignored: draft_id=%s", draft_id)
            return None
        index = self._order.index(draft_id)
        self._order.pop(index)
        record = self._drafts.pop(draft_id)
        origin = self._focus_origin.pop(draft_id, None)
        self._validation.discard(draft_id)

        if self._focused_id == draft_id:
            if origin is not None and origin in self._drafts:
                fallback = origin
            else:
                fallback = self._order[index - 1] if index > 0 else self._order[0]
            self._set_focus(fallback)
        return record

    def update_draft(self, draft_id: str, **fields: str) -> DraftRecord:
        """Merge ``fields`` into the draft and return the new record."""

        record = self.get_draft(draft_id).merged(**fields)
        self._drafts[draft_id] = record
        return record

    def set_focused(self, draft_id: str) -> DraftRecord:
        record = self.get_draft(draft_id)
        self._set_focus(draft_id)
        return record

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------
    def add_focus_listener(self, listener: FocusListener) -> None:
        self._listeners.append(listener)

    def remove_focus_listener(self, listener: FocusListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:  # pragma: no cover - listener not registered
            pass

    def _notify_focus_listeners(self) -> None:
        draft = self.focused_draft
        for listener in list(self._listeners):
            listener(draft)

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------
    @property
    def mode(self) -> EditMode:
        return self._mode

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def generation(self) -> int:
        """Counter bumped on every open/close; identifies one session."""

        return self._generation

    @property
    def focused_id(self) -> str | None:
        return self._focused_id

    @property
    def focused_draft(self) -> DraftRecord | None:
        if self._focused_id is None:
            return None
        return self._drafts.get(self._focused_id)

    @property
    def validation(self) -> ValidationState:
        return self._validation

    def get_draft(self, draft_id: str) -> DraftRecord:
        record = self._drafts.get(draft_id)
        if record is None:
            raise DraftNotFoundError(draft_id)
        return record

    def drafts(self) -> tuple[DraftRecord, ...]:
        return tuple(self._drafts[draft_id] for draft_id in self._order)

    def iter_drafts(self) -> Iterator[DraftRecord]:
        for draft_id in self._order:
            yield self._drafts[draft_id]

    def draft_ids(self) -> tuple[str, ...]:
        return tuple(self._order)

    def draft_count(self) -> int:
        return len(self._order)

    def index_of(self, draft_id: str) -> int:
        try:
            return self._order.index(draft_id)
        except ValueError:
            raise DraftNotFoundError(draft_id) from None

    def can_add(self) -> bool:
        return self._is_open and self._mode is EditMode.CREATE

    def can_remove(self, draft_id: str) -> bool:
        return (
            self._is_open
            and self._mode is EditMode.CREATE
            and draft_id in self._drafts
            and len(self._order) > 1
        )

    def tab_label(self, draft_id: str) -> str:
        """Human-friendly tab title, numbered by tab position."""

        return f"Cluster {self.index_of(draft_id) + 1}"

    def snapshot(self) -> dict[str, Any]:
        return {
            "mode": self._mode.value,
            "is_open": self._is_open,
            "focused_id": self._focused_id,
            "drafts": [record.snapshot() for record in self.iter_drafts()],
            "validation": self._validation.snapshot(),
        }

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _insert(self, record: DraftRecord) -> None:
        self._drafts[record.id] = record
        self._order.append(record.id)

    def _clear_drafts(self) -> None:
        self._drafts.clear()
        self._order.clear()
        self._focus_origin.clear()
        self._validation.clear()

    def _seed_blank(self) -> None:
        self._insert(DraftRecord(id=self._fresh_id()))

    def _fresh_id(self) -> str:
        candidate = self._id_factory()
        while candidate in self._drafts:
            candidate = self._id_factory()
        return candidate

    def _set_focus(self, draft_id: str | None) -> None:
        if self._focused_id == draft_id:
            return
        self._focused_id = draft_id
        self._notify_focus_listeners()
