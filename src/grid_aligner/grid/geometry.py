"""Bounding boxes and uniform resizing for board items."""

from __future__ import annotations

from typing import TYPE_CHECKING

from grid_aligner.type_defs import BoundingBox, ImageItem, Resize

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Iterable, Sequence

    from grid_aligner.type_defs import SizeMode


def bounding_box(items: Iterable[ImageItem]) -> BoundingBox:
    """Return the box enclosing every item's current geometry."""
    items = list(items)
    if not items:
        msg = "Cannot compute a bounding box of no items"
        raise ValueError(msg)
    return BoundingBox(
        left=min(item.left for item in items),
        top=min(item.top for item in items),
        right=max(item.right for item in items),
        bottom=max(item.bottom for item in items),
    )


def _scaled(other: float, current: float, target: float) -> float:
    """Scale ``other`` by ``target / current`` keeping aspect ratio."""
    if current <= 0:
        return other
    return other * target / current


def plan_resize(
    items: Sequence[ImageItem],
    size_mode: SizeMode,
    *,
    preserve_aspect: bool = True,
) -> list[Resize]:
    """
    Plan matching every item to the smallest width or height.

    With ``preserve_aspect`` the other dimension scales proportionally;
    otherwise it is left as is. Only items whose size changes are
    returned.
    """
    if size_mode == "none" or not items:
        return []

    resizes: list[Resize] = []
    if size_mode == "width":
        target = min(item.width for item in items)
        for item in items:
            height = (
                _scaled(item.height, item.width, target)
                if preserve_aspect else item.height
            )
            if (target, height) != (item.width, item.height):
                resizes.append(Resize(item.id, target, height))
    elif size_mode == "height":
        target = min(item.height for item in items)
        for item in items:
            width = (
                _scaled(item.width, item.height, target)
                if preserve_aspect else item.width
            )
            if (width, target) != (item.width, item.height):
                resizes.append(Resize(item.id, width, target))
    else:
        msg = f"Unknown size mode: {size_mode!r}"
        raise ValueError(msg)
    return resizes


def apply_resize(items: Iterable[ImageItem], resizes: Iterable[Resize]) -> None:
    """Write planned sizes onto the matching items in place."""
    by_id = {resize.id: resize for resize in resizes}
    for item in items:
        resize = by_id.get(item.id)
        if resize is not None:
            item.width = resize.width
            item.height = resize.height
