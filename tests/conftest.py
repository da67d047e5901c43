"""
Test configuration and shared fixtures for grid_aligner.

Defines item factories, an in-memory board that can be told to reject
commits, a scripted color sampler, and helpers that write real image
files with Pillow.

Note:
    This file is automatically loaded by pytest and should not be
    renamed.

"""
from __future__ import annotations

import io
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from PIL import Image

from grid_aligner.board import BoardItem, BoardSnapshot, JsonBoard
from grid_aligner.config import AlignerConfig
from grid_aligner.constants import COLOR_MODE_RGB
from grid_aligner.errors import SamplingError
from grid_aligner.logging_utils import logger
from grid_aligner.type_defs import (
    BytesSource,
    ColorStats,
    ImageItem,
    ImageSourceRef,
    Mutation,
    UrlSource,
)


class RecordingBoard(JsonBoard):
    """JsonBoard that records commits and can reject chosen item ids."""

    def __init__(
        self,
        snapshot: BoardSnapshot | None = None,
        *,
        fail_ids: set[str] | None = None,
    ) -> None:
        super().__init__(snapshot)
        self.fail_ids = set(fail_ids or ())
        self.commits: list[Mutation] = []

    async def commit(self, mutation: Mutation) -> None:
        self.commits.append(mutation)
        if mutation.id in self.fail_ids:
            msg = f"board rejected {mutation.id}"
            raise RuntimeError(msg)
        await super().commit(mutation)

    def item(self, item_id: str) -> BoardItem:
        return self._find(item_id)


class ScriptedSampler:
    """Sampler returning fixed stats per URL; unknown sources fail."""

    def __init__(self, stats: dict[str, ColorStats] | None = None) -> None:
        self.stats = dict(stats or {})
        self.calls: list[ImageSourceRef] = []

    async def sample(self, source: ImageSourceRef) -> ColorStats:
        self.calls.append(source)
        if isinstance(source, UrlSource) and source.url in self.stats:
            return self.stats[source.url]
        if isinstance(source, BytesSource) and "<bytes>" in self.stats:
            return self.stats["<bytes>"]
        raise SamplingError(source, OSError("unreadable"))


@pytest.fixture
def make_item() -> Callable[..., ImageItem]:
    """Factory for ImageItem with unit size and sequential ids."""
    counter = {"n": 0}

    def _make(
        title: str = "",
        *,
        x: float = 0.0,
        y: float = 0.0,
        width: float = 1.0,
        height: float = 1.0,
        item_id: str | None = None,
        **kwargs: Any,
    ) -> ImageItem:
        counter["n"] += 1
        return ImageItem(
            id=item_id or f"img{counter['n']}",
            title=title,
            x=x,
            y=y,
            width=width,
            height=height,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_board() -> Callable[..., RecordingBoard]:
    """Build a RecordingBoard from plain item dictionaries."""

    def _build(
        items: list[dict[str, Any]],
        *,
        fail_ids: set[str] | None = None,
    ) -> RecordingBoard:
        snapshot = BoardSnapshot.model_validate({"items": items})
        return RecordingBoard(snapshot, fail_ids=fail_ids)

    return _build


@pytest.fixture
def make_config() -> Callable[..., AlignerConfig]:
    """Build AlignerConfig instances with optional section overrides."""

    def _build(
        *,
        sort: dict[str, Any] | None = None,
        layout: dict[str, Any] | None = None,
        sampling: dict[str, Any] | None = None,
    ) -> AlignerConfig:
        data: dict[str, Any] = {
            "layout": {"horizontal_gap": 0, "vertical_gap": 0},
        }
        if sort:
            data["sort"] = dict(sort)
        if layout:
            data["layout"].update(layout)
        if sampling:
            data["sampling"] = dict(sampling)
        return AlignerConfig.model_validate(data)

    return _build


@pytest.fixture
def scripted_sampler() -> Callable[..., ScriptedSampler]:
    """Factory for ScriptedSampler instances."""
    return ScriptedSampler


@pytest.fixture
def png_bytes() -> Callable[..., bytes]:
    """Encode a solid-color PNG of the given size."""

    def _encode(
        color: str | tuple[int, ...] = "white",
        size: tuple[int, int] = (8, 8),
        mode: str = COLOR_MODE_RGB,
    ) -> bytes:
        buf = io.BytesIO()
        Image.new(mode, size, color=color).save(buf, format="PNG")
        return buf.getvalue()

    return _encode


@pytest.fixture
def make_image_file(tmp_path: Path) -> Callable[..., Path]:
    """Write a solid-color PNG under tmp_path and return its path."""

    def _write(
        name: str,
        color: str | tuple[int, ...] = "white",
        size: tuple[int, int] = (8, 8),
    ) -> Path:
        path = tmp_path / name
        Image.new(COLOR_MODE_RGB, size, color=color).save(path, format="PNG")
        return path

    return _write


@pytest.fixture(autouse=True)
def enable_logger_propagation(monkeypatch: pytest.MonkeyPatch) -> None:
    """Enable propagation for the aligner logger to allow caplog to work."""
    monkeypatch.setattr(logger, "propagate", True)
