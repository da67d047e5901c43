"""
Defines shared types for the grid aligner.

Centralizes the board item model, derived per-operation records, and the
literal option sets used by configuration and the CLI.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

from grid_aligner.constants import NEUTRAL_LUMINANCE, NEUTRAL_SATURATION

SortStrategy = Literal["number", "alphabetical", "geometry", "color"]
SizeMode = Literal["none", "width", "height"]
AnchorCorner = Literal["top-left", "top-right", "bottom-left", "bottom-right"]
RowMode = Literal["uniform", "packed"]
NotifyLevel = Literal["info", "error"]

SORT_STRATEGIES: tuple[SortStrategy, ...] = (
    "number",
    "alphabetical",
    "geometry",
    "color",
)
SIZE_MODES: tuple[SizeMode, ...] = ("none", "width", "height")
ANCHOR_CORNERS: tuple[AnchorCorner, ...] = (
    "top-left",
    "top-right",
    "bottom-left",
    "bottom-right",
)
ROW_MODES: tuple[RowMode, ...] = ("uniform", "packed")


@dataclass(frozen=True, slots=True)
class UrlSource:
    """Image reachable by URL or local path."""

    url: str


@dataclass(frozen=True, slots=True)
class BytesSource:
    """Image given as encoded bytes."""

    data: bytes


ImageSourceRef = UrlSource | BytesSource


@dataclass(slots=True)
class ImageItem:
    """
    An image on the board.

    Position is the item's center. The aligner mutates instances in place
    for the duration of one operation and commits changes through the
    board.
    """

    id: str
    title: str = ""
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    source: ImageSourceRef | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def left(self) -> float:
        return self.x - self.width / 2

    @property
    def top(self) -> float:
        return self.y - self.height / 2

    @property
    def right(self) -> float:
        return self.x + self.width / 2

    @property
    def bottom(self) -> float:
        return self.y + self.height / 2


@dataclass(frozen=True, slots=True)
class OrderingKey:
    """Per-item sort data derived fresh for each ordering call."""

    has_number: bool
    number: int | None
    normalized_label: str
    original_index: int
    brightness: float | None = None


@dataclass(frozen=True, slots=True)
class ColorStats:
    """Average color summary of an image, all values in [0, 1]."""

    luminance: float
    saturation: float = NEUTRAL_SATURATION
    lightness: float = NEUTRAL_LUMINANCE

    @classmethod
    def neutral(cls) -> ColorStats:
        """Return the mid-grey stand-in for unreadable images."""
        return cls(NEUTRAL_LUMINANCE, NEUTRAL_SATURATION, NEUTRAL_LUMINANCE)

    @classmethod
    def from_luminance(
        cls,
        value: float,
        saturation: float = NEUTRAL_SATURATION,
    ) -> ColorStats:
        """Build stats from cached brightness and, if known, saturation."""
        return cls(value, saturation, value)


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Axis-aligned box in board coordinates (y grows downward)."""

    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top


@dataclass(frozen=True, slots=True)
class Resize:
    """New size for one item."""

    id: str
    width: float
    height: float


@dataclass(frozen=True, slots=True)
class Placement:
    """New center position for one item, with its final size."""

    id: str
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True, slots=True)
class Mutation:
    """Field changes for a single board item."""

    id: str
    fields: dict[str, Any]


@dataclass(frozen=True, slots=True)
class CommitResult:
    """Outcome of committing one mutation."""

    id: str
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True, slots=True)
class ImportedFile:
    """An image file read by the host for the import variant."""

    name: str
    data: bytes
    path: Path | None = None
