"""Field validators for cluster drafts and the verdict map they feed.

The checks are pure: they read a :class:`DraftRecord` and return a
:class:`Verdict`. Writing verdicts into a :class:`ValidationState` is the
caller's job (the blur handler or the submission controller).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterator, Mapping

from .draft_model import DraftRecord

__all__ = [
    "ValidatedField",
    "Verdict",
    "PASSED",
    "ValidationState",
    "validate_name",
    "validate_url",
    "validate_field",
    "validate_record",
    "NAME_EMPTY_MESSAGE",
    "URL_EMPTY_MESSAGE",
    "URL_MALFORMED_MESSAGE",
    "URL_TRAILING_SLASH_MESSAGE",
]

NAME_EMPTY_MESSAGE = "cluster name must not be empty."
URL_EMPTY_MESSAGE = "URL must not be empty"
URL_MALFORMED_MESSAGE = "malformed URL, must start with http(s)://"
URL_TRAILING_SLASH_MESSAGE = "trailing slash must be removed — it breaks downstream dashboard links"

_URL_SCHEMES: tuple[str, ...] = ("http://", "https://")


class ValidatedField(Enum):
    """Draft fields that carry a verdict."""

    CLUSTER_NAME = "cluster_name"
    CRANE_URL = "crane_url"


@dataclass(slots=True, frozen=True)
class Verdict:
    """Outcome of validating one field of one draft."""

    failed: bool
    message: str = ""

    @classmethod
    def fail(cls, message: str) -> "Verdict":
        return cls(failed=True, message=message)


PASSED = Verdict(failed=False)


def validate_name(record: DraftRecord) -> Verdict:
    if not record.cluster_name.strip():
        return Verdict.fail(NAME_EMPTY_MESSAGE)
    return PASSED


def validate_url(record: DraftRecord) -> Verdict:
    """Check the Crane URL; the first failing rule decides the message."""

    url = record.crane_url
    if not url:
        return Verdict.fail(URL_EMPTY_MESSAGE)
    if not url.startswith(_URL_SCHEMES):
        return Verdict.fail(URL_MALFORMED_MESSAGE)
    if url.endswith("/"):
        return Verdict.fail(URL_TRAILING_SLASH_MESSAGE)
    return PASSED


_VALIDATORS: Mapping[ValidatedField, Callable[[DraftRecord], Verdict]] = {
    ValidatedField.CLUSTER_NAME: validate_name,
    ValidatedField.CRANE_URL: validate_url,
}


def validate_field(record: DraftRecord, field: ValidatedField) -> Verdict:
    return _VALIDATORS[field](record)


def validate_record(record: DraftRecord) -> Dict[ValidatedField, Verdict]:
    """Run every field check against ``record``."""

    return {field: validate_field(record, field) for field in ValidatedField}


class ValidationState:
    """Verdicts keyed by draft id, then by field.

    Derived data only. Entries are overwritten on every blur/submit and are
    dropped together with their draft.
    """

    def __init__(self) -> None:
        self._verdicts: Dict[str, Dict[ValidatedField, Verdict]] = {}

    def record(self, draft_id: str, field: ValidatedField, verdict: Verdict) -> None:
        self._verdicts.setdefault(draft_id, {})[field] = verdict

    def record_all(self, draft_id: str, verdicts: Mapping[ValidatedField, Verdict]) -> None:
        for field, verdict in verdicts.items():
            self.record(draft_id, field, verdict)

    def get(self, draft_id: str, field: ValidatedField) -> Verdict | None:
        return self._verdicts.get(draft_id, {}).get(field)

    def for_draft(self, draft_id: str) -> Dict[ValidatedField, Verdict]:
        return dict(self._verdicts.get(draft_id, {}))

    def has_failure(self, draft_id: str) -> bool:
        return any(verdict.failed for verdict in self._verdicts.get(draft_id, {}).values())

    def discard(self, draft_id: str) -> None:
        self._verdicts.pop(draft_id, None)

    def clear(self) -> None:
        self._verdicts.clear()

    def draft_ids(self) -> Iterator[str]:
        return iter(tuple(self._verdicts))

    def is_empty(self) -> bool:
        return not self._verdicts

    def __contains__(self, draft_id: object) -> bool:
        return draft_id in self._verdicts

    def __len__(self) -> int:
        return len(self._verdicts)

    def snapshot(self) -> dict[str, dict[str, dict[str, object]]]:
        return {
            draft_id: {
                field.value: {"failed": verdict.failed, "message": verdict.message}
                for field, verdict in verdicts.items()
            }
            for draft_id, verdicts in self._verdicts.items()
        }
