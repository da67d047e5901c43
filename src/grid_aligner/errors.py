"""
Error types raised by the aligner.

Validation errors are raised before any board mutation and are safe to
retry. ``CommitError`` may leave earlier mutations applied.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Sequence

    from grid_aligner.type_defs import CommitResult, NotifyLevel


class AlignmentError(Exception):
    """Base class for errors reported to the user as a notification."""

    level: NotifyLevel = "error"


class EmptySelectionError(AlignmentError):
    """No eligible image items were selected."""

    level: NotifyLevel = "info"

    def __init__(self, message: str = "Select at least one image.") -> None:
        super().__init__(message)


class InvalidColumnCountError(AlignmentError, ValueError):
    """The requested column count is below one."""

    def __init__(self, columns: int) -> None:
        self.columns = columns
        super().__init__(f"Columns must be at least 1, got {columns}.")


class MissingNumberError(AlignmentError):
    """Strict number sorting found items without a number in the title."""

    def __init__(self, examples: Sequence[str], missing_count: int) -> None:
        self.examples = list(examples)
        self.missing_count = missing_count
        shown = ", ".join(f'"{label}"' for label in self.examples)
        super().__init__(
            f"{missing_count} image(s) have no number in the title "
            f"(e.g. {shown}). Nothing was moved.",
        )


class SamplingError(AlignmentError):
    """An image could not be loaded or sampled for its color."""

    def __init__(self, source: object, cause: BaseException) -> None:
        self.source = source
        self.cause = cause
        super().__init__(f"Could not sample image {source!r}: {cause}")


class CommitError(AlignmentError):
    """One or more item mutations were rejected by the board."""

    def __init__(self, failures: Sequence[CommitResult]) -> None:
        self.failures = list(failures)
        ids = ", ".join(result.id for result in self.failures)
        super().__init__(
            f"Failed to update {len(self.failures)} item(s): {ids}. "
            "Some items may already have moved.",
        )


class OperationInProgressError(AlignmentError):
    """An operation was started while another one is still running."""

    def __init__(self) -> None:
        super().__init__("An alignment is already in progress.")
