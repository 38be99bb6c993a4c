"""Editor package containing the draft models, validators and workspace."""

from .draft_model import DraftRecord, EditMode
from .validation import ValidatedField, ValidationState, Verdict, validate_name, validate_url
from .workspace import DraftNotFoundError, DraftWorkspace

__all__ = [
    "DraftRecord",
    "DraftWorkspace",
    "DraftNotFoundError",
    "EditMode",
    "ValidatedField",
    "ValidationState",
    "Verdict",
    "validate_name",
    "validate_url",
]
