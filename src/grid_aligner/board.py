"""
Host board interfaces and a JSON snapshot implementation.

The aligner only talks to the board through ``Board``. ``JsonBoard``
keeps a snapshot of board items in memory, which lets the CLI and tests
drive the aligner without a live canvas.
"""

from __future__ import annotations

import io
import json
import uuid
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from PIL import Image
from pydantic import BaseModel, Field

from grid_aligner.constants import IMAGE_ITEM_TYPE
from grid_aligner.grid.geometry import bounding_box
from grid_aligner.logging_utils import logger
from grid_aligner.type_defs import (
    BoundingBox,
    ImageItem,
    ImageSourceRef,
    UrlSource,
)

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Sequence

    from grid_aligner.type_defs import ImportedFile, Mutation, NotifyLevel


class Board(Protocol):
    """Narrow view of the host canvas used by the aligner."""

    async def get_selection(self) -> list[ImageItem]: ...

    async def commit(self, mutation: Mutation) -> None: ...

    def notify(self, level: NotifyLevel, message: str) -> None: ...

    async def create_image(
        self,
        file: ImportedFile,
        *,
        x: float,
        y: float,
        title: str,
        metadata: dict[str, Any],
    ) -> ImageItem: ...

    async def zoom_to(self, items: Sequence[ImageItem]) -> None: ...


class BoardItem(BaseModel):
    """One item in a board snapshot."""

    id: str
    type: str = IMAGE_ITEM_TYPE
    title: str = ""
    x: float = 0.0
    y: float = 0.0
    width: float = Field(0.0, ge=0)
    height: float = Field(0.0, ge=0)
    url: str | None = None
    selected: bool = True
    metadata: dict[str, Any] = Field(default_factory=dict)

    def to_image_item(self) -> ImageItem:
        source: ImageSourceRef | None = (
            UrlSource(self.url) if self.url else None
        )
        return ImageItem(
            id=self.id,
            title=self.title,
            x=self.x,
            y=self.y,
            width=self.width,
            height=self.height,
            source=source,
            metadata=dict(self.metadata),
        )


class Viewport(BaseModel):
    """Visible board area after a zoom."""

    left: float
    top: float
    right: float
    bottom: float


class BoardSnapshot(BaseModel):
    """Serializable board state."""

    items: list[BoardItem] = Field(default_factory=list)
    viewport: Viewport | None = None


_ITEM_FIELDS = frozenset({"title", "x", "y", "width", "height", "metadata"})


class JsonBoard:
    """In-memory board backed by a JSON snapshot."""

    def __init__(self, snapshot: BoardSnapshot | None = None) -> None:
        self.snapshot = snapshot or BoardSnapshot()
        self.notifications: list[tuple[NotifyLevel, str]] = []

    @classmethod
    def load(cls, path: str | Path) -> JsonBoard:
        board_path = Path(path)
        if not board_path.is_file():
            msg = f"Board file not found: {path}"
            raise FileNotFoundError(msg)
        with board_path.open("r", encoding="utf-8") as f:
            return cls(BoardSnapshot.model_validate(json.load(f)))

    def save(self, path: str | Path) -> Path:
        out_path = Path(path)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        with out_path.open("w", encoding="utf-8") as f:
            json.dump(
                self.snapshot.model_dump(mode="json", exclude_none=True),
                f,
                indent=2,
            )
            f.write("\n")
        return out_path

    def _find(self, item_id: str) -> BoardItem:
        for item in self.snapshot.items:
            if item.id == item_id:
                return item
        msg = f"No item with id {item_id!r} on the board"
        raise KeyError(msg)

    async def get_selection(self) -> list[ImageItem]:
        return [
            item.to_image_item()
            for item in self.snapshot.items
            if item.selected and item.type == IMAGE_ITEM_TYPE
        ]

    async def commit(self, mutation: Mutation) -> None:
        record = self._find(mutation.id)
        unknown = set(mutation.fields) - _ITEM_FIELDS
        if unknown:
            msg = f"Cannot update fields {sorted(unknown)} on {mutation.id}"
            raise ValueError(msg)
        for name, value in mutation.fields.items():
            setattr(record, name, value)

    def notify(self, level: NotifyLevel, message: str) -> None:
        self.notifications.append((level, message))
        if level == "error":
            logger.error("%s", message)
        else:
            logger.info("%s", message)

    async def create_image(
        self,
        file: ImportedFile,
        *,
        x: float,
        y: float,
        title: str,
        metadata: dict[str, Any],
    ) -> ImageItem:
        with Image.open(io.BytesIO(file.data)) as img:
            width, height = img.size
        record = BoardItem(
            id=uuid.uuid4().hex,
            title=title,
            x=x,
            y=y,
            width=width,
            height=height,
            url=str(file.path) if file.path is not None else None,
            selected=False,
            metadata=dict(metadata),
        )
        self.snapshot.items.append(record)
        return record.to_image_item()

    async def zoom_to(self, items: Sequence[ImageItem]) -> None:
        if not items:
            return
        box: BoundingBox = bounding_box(items)
        self.snapshot.viewport = Viewport(
            left=box.left, top=box.top, right=box.right, bottom=box.bottom,
        )
        logger.debug("Viewport moved to %s", box)
