"""
Grid layout split into geometry helpers and placement layouts.

The package exposes the entry points used by the orchestrator directly.
"""

from __future__ import annotations

from . import geometry, layouts
from .geometry import apply_resize, bounding_box, plan_resize
from .layouts import (
    GridParams,
    apply_placements,
    compute_placements,
    grid_shape,
    layout_items,
)

__all__ = [
    "GridParams",
    "apply_placements",
    "apply_resize",
    "bounding_box",
    "compute_placements",
    "geometry",
    "grid_shape",
    "layout_items",
    "layouts",
    "plan_resize",
]
