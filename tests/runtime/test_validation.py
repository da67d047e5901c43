"""Tests for runtime.validation helpers."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from grid_aligner.errors import EmptySelectionError, InvalidColumnCountError
from grid_aligner.runtime import validation as runtime_validation
from grid_aligner.type_defs import ImageItem


def test_validate_selection_empty() -> None:
    with pytest.raises(EmptySelectionError, match="Select at least one"):
        runtime_validation.validate_selection([])


def test_validate_selection_success(
    make_item: Callable[..., ImageItem],
) -> None:
    runtime_validation.validate_selection([make_item("a")])


@pytest.mark.parametrize("columns", [0, -1, -20])
def test_validate_columns_failure(columns: int) -> None:
    with pytest.raises(InvalidColumnCountError) as info:
        runtime_validation.validate_columns(columns)
    assert info.value.columns == columns
    assert isinstance(info.value, ValueError)


@pytest.mark.parametrize("columns", [1, 4, 1000])
def test_validate_columns_success(columns: int) -> None:
    runtime_validation.validate_columns(columns)


def test_empty_selection_is_informational() -> None:
    assert EmptySelectionError.level == "info"
    assert InvalidColumnCountError.level == "error"
