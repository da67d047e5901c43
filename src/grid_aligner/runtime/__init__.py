"""Runtime helpers for operation preconditions and board commits."""

from .commit import commit_all, commit_fields, ensure_committed
from .validation import validate_columns, validate_selection

__all__ = [
    "commit_all",
    "commit_fields",
    "ensure_committed",
    "validate_columns",
    "validate_selection",
]
