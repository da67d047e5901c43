"""Precondition checks run before an operation touches the board."""

from __future__ import annotations

from typing import TYPE_CHECKING

from grid_aligner.errors import EmptySelectionError, InvalidColumnCountError

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Sequence

    from grid_aligner.type_defs import ImageItem


def validate_selection(items: Sequence[ImageItem]) -> None:
    """Ensure there is at least one image to work on."""
    if not items:
        raise EmptySelectionError


def validate_columns(columns: int) -> None:
    """Ensure the grid has at least one column."""
    if columns < 1:
        raise InvalidColumnCountError(columns)
