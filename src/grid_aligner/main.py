"""Top-level orchestration: order the selection, resize, lay out, commit."""

from __future__ import annotations

import asyncio
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeVar

import grid_aligner.grid as ga_grid
import grid_aligner.ordering as ga_ordering
import grid_aligner.runtime as ga_runtime
from grid_aligner.brightness import (
    BrightnessSampler,
    Sampler,
    cached_brightness,
    cached_saturation,
)
from grid_aligner.config import AlignerConfig
from grid_aligner.constants import NEUTRAL_SATURATION
from grid_aligner.errors import (
    AlignmentError,
    OperationInProgressError,
    SamplingError,
)
from grid_aligner.logging_utils import logger
from grid_aligner.type_defs import (
    ColorStats,
    ImageItem,
    ImageSourceRef,
    Placement,
)

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Awaitable, Iterator, Sequence

    from grid_aligner.board import Board
    from grid_aligner.type_defs import SortStrategy

T = TypeVar("T")

GENERIC_FAILURE_MESSAGE = (
    "Something went wrong while arranging images. "
    "Please check the board and try again."
)


@dataclass(slots=True)
class AlignmentReport:
    """Summary of a completed alignment."""

    ordered_ids: list[str]
    placements: list[Placement]
    strategy_used: SortStrategy
    generated_labels: dict[str, str] = field(default_factory=dict)
    resized_ids: list[str] = field(default_factory=list)


class AlignmentOrchestrator:
    """
    Run one ordering + grid layout operation against a board.

    Only one operation may run at a time per orchestrator; a second
    request while one is in flight is rejected.
    """

    def __init__(
        self,
        board: Board,
        config: AlignerConfig | None = None,
        sampler: Sampler | None = None,
    ) -> None:
        self.board = board
        self.config = config or AlignerConfig()
        self._sampler = sampler
        self._in_flight = False

    @property
    def sampler(self) -> Sampler:
        if self._sampler is None:
            self._sampler = BrightnessSampler.from_config(self.config.sampling)
        return self._sampler

    @property
    def busy(self) -> bool:
        return self._in_flight

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        if self._in_flight:
            raise OperationInProgressError
        self._in_flight = True
        try:
            yield
        finally:
            self._in_flight = False

    async def align_selection(self) -> AlignmentReport:
        """Align the board's current image selection."""
        with self._exclusive():
            items = await self.board.get_selection()
            return await self._align(items)

    async def align_items(self, items: Sequence[ImageItem]) -> AlignmentReport:
        """Align an explicit list of board images."""
        with self._exclusive():
            return await self._align(list(items))

    async def run(self) -> AlignmentReport | None:
        """Align the selection and report the outcome to the user."""
        return await run_reported(self.board, self.align_selection())

    async def collect_colors(
        self,
        items: Sequence[ImageItem],
    ) -> dict[str, ColorStats | None]:
        """
        Gather color stats per item.

        Cached brightness in metadata wins; other items are sampled. When
        gray-first ordering is on, a cached brightness is only used if its
        saturation was cached too, otherwise the image is sampled again.
        A failed sample maps to None and is left for the ordering fallback.
        """
        key = self.config.sampling.metadata_key
        gray_first = self.config.sort.gray_first
        colors: dict[str, ColorStats | None] = {}
        pending: list[tuple[ImageItem, ImageSourceRef]] = []
        for item in items:
            cached = cached_brightness(item, key)
            saturation = cached_saturation(item, key)
            if cached is not None and (
                saturation is not None or not gray_first or item.source is None
            ):
                colors[item.id] = ColorStats.from_luminance(
                    cached,
                    NEUTRAL_SATURATION if saturation is None else saturation,
                )
            elif item.source is None:
                logger.warning("No image source for %s, using neutral color",
                               item.id)
                colors[item.id] = None
            else:
                if cached is not None:
                    logger.debug("No cached saturation for %s, sampling",
                                 item.id)
                pending.append((item, item.source))

        async def sample_one(
            item: ImageItem,
            source: ImageSourceRef,
        ) -> ColorStats | None:
            try:
                stats = await self.sampler.sample(source)
            except SamplingError as e:
                logger.warning("Failed to compute color for %s: %s",
                               item.id, e.cause)
                return None
            except Exception as e:  # noqa: BLE001
                logger.warning("Failed to compute color for %s: %s",
                               item.id, e)
                return None
            logger.debug("Color of %s: %s", item.id, stats)
            return stats

        sampled = await asyncio.gather(
            *(sample_one(item, source) for item, source in pending),
        )
        for (item, _), stats in zip(pending, sampled, strict=True):
            colors[item.id] = stats
        return colors

    async def _align(self, items: list[ImageItem]) -> AlignmentReport:
        sort_cfg = self.config.sort
        layout_cfg = self.config.layout

        ga_runtime.validate_selection(items)
        ga_runtime.validate_columns(layout_cfg.columns)
        logger.info(
            "Aligning %d image(s): sort=%s strict=%s columns=%d anchor=%s "
            "rows=%s size=%s",
            len(items),
            sort_cfg.strategy,
            sort_cfg.strict_number_validation,
            layout_cfg.columns,
            layout_cfg.anchor_corner,
            layout_cfg.row_mode,
            layout_cfg.size_mode,
        )

        strategy: SortStrategy = sort_cfg.strategy
        labels: dict[str, str] = {}
        if ga_ordering.needs_generated_labels(strategy):
            labels = ga_ordering.plan_generated_labels(items)

        colors: dict[str, ColorStats | None] | None = None
        if strategy == "color":
            colors = await self.collect_colors(items)
            if not any(stats is not None for stats in colors.values()):
                strategy = "geometry"

        # Ordering may reject the operation; nothing is written before it.
        ordered = ga_ordering.order_items(
            items,
            strategy,
            strict=sort_cfg.strict_number_validation,
            policy=sort_cfg.title_policy(),
            labels=labels,
            colors=colors,
            gray_first=sort_cfg.gray_first,
        )

        if labels:
            titled = [item for item in items if item.id in labels]
            for item in titled:
                item.title = labels[item.id]
            await ga_runtime.commit_fields(self.board, titled, "title")
            logger.info("Numbered %d untitled image(s)", len(titled))

        resizes = ga_grid.plan_resize(
            ordered,
            layout_cfg.size_mode,
            preserve_aspect=layout_cfg.preserve_aspect,
        )
        if resizes:
            ga_grid.apply_resize(ordered, resizes)
            resized_ids = {resize.id for resize in resizes}
            await ga_runtime.commit_fields(
                self.board,
                [item for item in ordered if item.id in resized_ids],
                "width",
                "height",
            )

        placements = ga_grid.layout_items(ordered, layout_cfg)
        ga_grid.apply_placements(ordered, placements)
        await ga_runtime.commit_fields(self.board, ordered, "x", "y")

        logger.info("Aligned %d image(s) using %s order", len(ordered),
                    strategy)
        self.board.notify("info", f"Aligned {len(ordered)} image(s).")
        return AlignmentReport(
            ordered_ids=[item.id for item in ordered],
            placements=placements,
            strategy_used=strategy,
            generated_labels=labels,
            resized_ids=[resize.id for resize in resizes],
        )


async def run_reported(board: Board, operation: Awaitable[T]) -> T | None:
    """
    Await ``operation`` and turn any failure into one user notification.

    Known errors are reported with their own message and level. Anything
    else is logged with its traceback and reported generically. Changes
    already committed stay in place.
    """
    try:
        return await operation
    except AlignmentError as e:
        if e.level == "error":
            logger.error("Operation failed: %s", e)
        else:
            logger.info("Operation skipped: %s", e)
        board.notify(e.level, str(e))
    except Exception:
        logger.exception("Operation failed unexpectedly")
        board.notify("error", GENERIC_FAILURE_MESSAGE)
    return None


async def align_selection(
    board: Board,
    config: AlignerConfig | None = None,
    sampler: Sampler | None = None,
) -> AlignmentReport | None:
    """Align the board's current selection and report the outcome."""
    return await AlignmentOrchestrator(board, config, sampler).run()
