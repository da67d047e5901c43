"""
Grid placement for ordered board items.

Two cell-sizing policies are supported:

* ``uniform``: every cell is as wide as the widest item and as tall as the
  tallest one; items are centered in their cell.
* ``packed``: each row is as tall as its tallest item and items in a row
  sit next to each other with the horizontal gap between them.

The finished grid is anchored so that its chosen corner lands on the same
corner of the items' bounding box before layout. Right anchors fill rows
right to left and bottom anchors stack rows bottom to top.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from grid_aligner.grid.geometry import bounding_box
from grid_aligner.type_defs import BoundingBox, ImageItem, Placement

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Sequence

    from grid_aligner.config import LayoutConfig
    from grid_aligner.type_defs import AnchorCorner, RowMode


@dataclass(frozen=True)
class GridParams:
    """Parameters for one grid placement."""

    columns: int = 1
    horizontal_gap: float = 0.0
    vertical_gap: float = 0.0
    anchor_corner: AnchorCorner = "top-left"
    row_mode: RowMode = "packed"

    @classmethod
    def from_config(cls, config: LayoutConfig) -> GridParams:
        return cls(
            columns=config.columns,
            horizontal_gap=config.horizontal_gap,
            vertical_gap=config.vertical_gap,
            anchor_corner=config.anchor_corner,
            row_mode=config.row_mode,
        )


@dataclass(frozen=True)
class _Anchor:
    """Grid origin (top-left) in board space plus mirroring flags."""

    left: float
    top: float
    flip_x: bool
    flip_y: bool


def _resolve_anchor(
    bbox: BoundingBox,
    grid_w: float,
    grid_h: float,
    corner: AnchorCorner,
) -> _Anchor:
    flip_x = corner in ("top-right", "bottom-right")
    flip_y = corner in ("bottom-left", "bottom-right")
    left = bbox.right - grid_w if flip_x else bbox.left
    top = bbox.bottom - grid_h if flip_y else bbox.top
    return _Anchor(left, top, flip_x, flip_y)


def grid_shape(count: int, columns: int) -> tuple[int, int]:
    """Return (rows, columns) actually used for ``count`` items."""
    if count <= 0:
        return 0, 0
    cols = min(max(1, columns), count)
    return math.ceil(count / cols), cols


def _uniform_placements(
    items: Sequence[ImageItem],
    bbox: BoundingBox,
    params: GridParams,
) -> list[Placement]:
    rows, cols = grid_shape(len(items), params.columns)
    cell_w = max(item.width for item in items)
    cell_h = max(item.height for item in items)
    grid_w = cols * cell_w + (cols - 1) * params.horizontal_gap
    grid_h = rows * cell_h + (rows - 1) * params.vertical_gap
    anchor = _resolve_anchor(bbox, grid_w, grid_h, params.anchor_corner)

    placements: list[Placement] = []
    for index, item in enumerate(items):
        row, col = divmod(index, cols)
        if anchor.flip_x:
            col = cols - 1 - col
        if anchor.flip_y:
            row = rows - 1 - row
        cell_left = anchor.left + col * (cell_w + params.horizontal_gap)
        cell_top = anchor.top + row * (cell_h + params.vertical_gap)
        placements.append(
            Placement(
                id=item.id,
                x=cell_left + cell_w / 2,
                y=cell_top + cell_h / 2,
                width=item.width,
                height=item.height,
            ),
        )
    return placements


def _packed_placements(
    items: Sequence[ImageItem],
    bbox: BoundingBox,
    params: GridParams,
) -> list[Placement]:
    rows, cols = grid_shape(len(items), params.columns)
    row_members = [items[r * cols:(r + 1) * cols] for r in range(rows)]

    row_heights = [max(item.height for item in row) for row in row_members]
    row_widths = [
        sum(item.width for item in row)
        + params.horizontal_gap * (len(row) - 1)
        for row in row_members
    ]
    grid_w = max(row_widths)
    grid_h = sum(row_heights) + params.vertical_gap * (rows - 1)

    # centers relative to a top-left origin at (0, 0)
    base: list[tuple[float, float]] = []
    row_top = 0.0
    for row, height in zip(row_members, row_heights, strict=True):
        center_y = row_top + height / 2
        cursor_x = 0.0
        for item in row:
            base.append((cursor_x + item.width / 2, center_y))
            cursor_x += item.width + params.horizontal_gap
        row_top += height + params.vertical_gap

    anchor = _resolve_anchor(bbox, grid_w, grid_h, params.anchor_corner)
    placements: list[Placement] = []
    for item, (x0, y0) in zip(items, base, strict=True):
        if anchor.flip_x:
            x0 = grid_w - x0
        if anchor.flip_y:
            y0 = grid_h - y0
        placements.append(
            Placement(
                id=item.id,
                x=anchor.left + x0,
                y=anchor.top + y0,
                width=item.width,
                height=item.height,
            ),
        )
    return placements


def compute_placements(
    items: Sequence[ImageItem],
    params: GridParams,
) -> list[Placement]:
    """
    Compute new centers for ``items`` laid out in order.

    Sizes are read from the items as they are now, so any resize must be
    applied first. The result is in input order.
    """
    if not items:
        return []
    bbox = bounding_box(items)
    if params.row_mode == "uniform":
        return _uniform_placements(items, bbox, params)
    if params.row_mode == "packed":
        return _packed_placements(items, bbox, params)
    msg = f"Unknown row mode: {params.row_mode!r}"
    raise ValueError(msg)


def layout_items(
    items: Sequence[ImageItem],
    config: LayoutConfig,
) -> list[Placement]:
    """Compute placements using the layout section of the config."""
    return compute_placements(items, GridParams.from_config(config))


def apply_placements(
    items: Sequence[ImageItem],
    placements: Sequence[Placement],
) -> None:
    """Move the matching items to their placed centers in place."""
    by_id = {placement.id: placement for placement in placements}
    for item in items:
        placement = by_id.get(item.id)
        if placement is not None:
            item.x = placement.x
            item.y = placement.y
