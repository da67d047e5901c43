"""
Ordering strategies for selected images.

Every strategy returns a new list and leaves the items untouched. The
original input index is always the last tie-break, so results are
deterministic for any input.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from grid_aligner.constants import (
    GRAY_SATURATION_THRESHOLD,
    MAX_MISSING_NUMBER_EXAMPLES,
)
from grid_aligner.errors import MissingNumberError
from grid_aligner.logging_utils import logger
from grid_aligner.titles import TitlePolicy
from grid_aligner.type_defs import ColorStats, ImageItem, OrderingKey

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Mapping, Sequence

    from grid_aligner.type_defs import SortStrategy

_GENERATED_LABEL_STRATEGIES: frozenset[str] = frozenset({"number", "color"})


def _label(item: ImageItem, labels: Mapping[str, str] | None) -> str:
    if labels is not None and item.id in labels:
        return labels[item.id]
    return item.title or ""


def ordering_keys(
    items: Sequence[ImageItem],
    *,
    policy: TitlePolicy | None = None,
    labels: Mapping[str, str] | None = None,
    colors: Mapping[str, ColorStats | None] | None = None,
) -> list[OrderingKey]:
    """Derive one ordering key per item, in input order."""
    policy = policy or TitlePolicy()
    keys: list[OrderingKey] = []
    for index, item in enumerate(items):
        label = _label(item, labels)
        number = policy.extract(label)
        stats = colors.get(item.id) if colors is not None else None
        keys.append(
            OrderingKey(
                has_number=number is not None,
                number=number,
                normalized_label=label.lower(),
                original_index=index,
                brightness=stats.luminance if stats is not None else None,
            ),
        )
    return keys


def sort_by_geometry(items: Sequence[ImageItem]) -> list[ImageItem]:
    """
    Order items in reading order: top to bottom, then left to right.

    Items are grouped into rows first. An item opens a new row when its
    center sits lower than the current row's first item by more than half
    the smaller of the two heights, so sub-pixel offsets do not split a
    visual row.
    """
    indexed = sorted(
        enumerate(items),
        key=lambda pair: (pair[1].y, pair[1].x, pair[0]),
    )
    rows: list[list[tuple[int, ImageItem]]] = []
    row_head: ImageItem | None = None
    for index, item in indexed:
        if row_head is not None:
            tolerance = min(row_head.height, item.height) / 2
            if item.y - row_head.y <= tolerance:
                rows[-1].append((index, item))
                continue
        rows.append([(index, item)])
        row_head = item

    ordered: list[ImageItem] = []
    for row in rows:
        row.sort(key=lambda pair: (pair[1].x, pair[0]))
        ordered.extend(item for _, item in row)
    return ordered


def sort_by_number(
    items: Sequence[ImageItem],
    *,
    strict: bool = False,
    policy: TitlePolicy | None = None,
    labels: Mapping[str, str] | None = None,
) -> list[ImageItem]:
    """
    Order items by the number in their title.

    Numbered items come first (ascending, then by lower-cased label), the
    rest follow alphabetically.

    Raises:
        MissingNumberError: In strict mode, if any item has no number.

    """
    keys = ordering_keys(items, policy=policy, labels=labels)
    for item, key in zip(items, keys, strict=True):
        logger.debug("Title %r => %s", _label(item, labels) or item.id,
                     key.number)

    if strict:
        missing = [
            _label(item, labels) or item.id
            for item, key in zip(items, keys, strict=True)
            if not key.has_number
        ]
        if missing:
            raise MissingNumberError(
                missing[:MAX_MISSING_NUMBER_EXAMPLES],
                len(missing),
            )

    def sort_key(pair: tuple[ImageItem, OrderingKey]) -> tuple[int, int, str, int]:
        key = pair[1]
        if key.number is not None:
            return (0, key.number, key.normalized_label, key.original_index)
        return (1, 0, key.normalized_label, key.original_index)

    pairs = sorted(zip(items, keys, strict=True), key=sort_key)
    return [item for item, _ in pairs]


def sort_alphabetically(
    items: Sequence[ImageItem],
    *,
    labels: Mapping[str, str] | None = None,
) -> list[ImageItem]:
    """Order items by lower-cased title, ignoring numbers."""
    keys = ordering_keys(items, labels=labels)
    pairs = sorted(
        zip(items, keys, strict=True),
        key=lambda pair: (pair[1].normalized_label, pair[1].original_index),
    )
    return [item for item, _ in pairs]


def sort_by_color(
    items: Sequence[ImageItem],
    colors: Mapping[str, ColorStats | None],
    *,
    gray_first: bool = False,
) -> list[ImageItem]:
    """
    Order items from brightest to darkest average color.

    Items without stats get a neutral mid-grey. If no item has stats at
    all, the geometry order is returned instead. With ``gray_first``,
    low-saturation images are placed before colored ones.
    """
    if not any(colors.get(item.id) is not None for item in items):
        logger.warning(
            "Could not compute colors for any image, "
            "falling back to geometry sort.",
        )
        return sort_by_geometry(items)

    def sort_key(pair: tuple[int, ImageItem]) -> tuple[int, float, float, int]:
        index, item = pair
        stats = colors.get(item.id) or ColorStats.neutral()
        group = 0
        if gray_first and stats.saturation >= GRAY_SATURATION_THRESHOLD:
            group = 1
        return (group, -stats.luminance, -stats.lightness, index)

    return [item for _, item in sorted(enumerate(items), key=sort_key)]


def needs_generated_labels(strategy: SortStrategy) -> bool:
    """Whether ``strategy`` numbers untitled items before sorting."""
    return strategy in _GENERATED_LABEL_STRATEGIES


def plan_generated_labels(items: Sequence[ImageItem]) -> dict[str, str]:
    """
    Plan sequential titles ("1", "2", ...) for untitled items.

    Untitled items are numbered in geometry order. Nothing is written;
    the caller commits the plan once ordering has succeeded.
    """
    untitled = [item for item in items if not item.title]
    return {
        item.id: str(position)
        for position, item in enumerate(sort_by_geometry(untitled), start=1)
    }


def order_items(  # noqa: PLR0913
    items: Sequence[ImageItem],
    strategy: SortStrategy,
    *,
    strict: bool = False,
    policy: TitlePolicy | None = None,
    labels: Mapping[str, str] | None = None,
    colors: Mapping[str, ColorStats | None] | None = None,
    gray_first: bool = False,
) -> list[ImageItem]:
    """
    Order ``items`` with the named strategy.

    Args:
        items: Items in selection order.
        strategy: One of number, alphabetical, geometry, color.
        strict: Fail number sorts when a title has no number.
        policy: Title normalization used for number extraction.
        labels: Title overrides by item id (planned generated labels).
        colors: Color stats by item id for the color strategy.
        gray_first: Put low-saturation images first in color sorts.

    Returns:
        A new list holding the same item objects in sorted order.

    Raises:
        MissingNumberError: Strict number sort with unnumbered titles.
        ValueError: Unknown strategy.

    """
    if strategy == "number":
        return sort_by_number(items, strict=strict, policy=policy,
                              labels=labels)
    if strategy == "alphabetical":
        return sort_alphabetically(items, labels=labels)
    if strategy == "geometry":
        return sort_by_geometry(items)
    if strategy == "color":
        return sort_by_color(items, colors or {}, gray_first=gray_first)
    msg = f"Unknown sort strategy: {strategy!r}"
    raise ValueError(msg)
