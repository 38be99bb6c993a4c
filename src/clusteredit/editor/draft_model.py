"""Dataclasses representing cluster drafts held by the edit session."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Iterator

__all__ = ["EditMode", "DraftRecord", "DraftIdSequence", "EDITABLE_FIELDS"]

EDITABLE_FIELDS: tuple[str, ...] = ("cluster_name", "crane_url")


class EditMode(Enum):
    """Whether the session creates a batch of clusters or updates one."""

    CREATE = "create"
    UPDATE = "update"


@dataclass(slots=True, frozen=True)
class DraftRecord:
    """One in-progress cluster definition shown in its own tab."""

    id: str
    cluster_name: str = ""
    crane_url: str = ""

    def merged(self, **fields: str) -> "DraftRecord":
        """Return a copy with ``fields`` applied over the current values."""

        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise TypeError(f"Unknown draft field(s): {', '.join(sorted(unknown))}")
        return replace(self, **fields)

    def is_blank(self) -> bool:
        return not self.cluster_name and not self.crane_url

    def snapshot(self) -> Dict[str, Any]:
        return {"id": self.id, "cluster_name": self.cluster_name, "crane_url": self.crane_url}


class DraftIdSequence:
    """Client-side id generator for drafts created locally."""

    def __init__(self, prefix: str = "draft") -> None:
        self._prefix = prefix
        self._counter: Iterator[int] = itertools.count(1)

    def next_id(self) -> str:
        return f"{self._prefix}-{next(self._counter)}"
