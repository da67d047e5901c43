"""
Import image files onto the board and arrange them.

Each file is tagged with its average brightness and saturation in item
metadata so the color strategy can reuse them without sampling again.
The new images are then ordered and laid out like a regular selection,
and the viewport is moved onto them.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from grid_aligner.brightness import BrightnessSampler, Sampler, cache_metadata
from grid_aligner.config import AlignerConfig
from grid_aligner.errors import EmptySelectionError, SamplingError
from grid_aligner.logging_utils import logger
from grid_aligner.main import AlignmentOrchestrator, AlignmentReport, run_reported
from grid_aligner.type_defs import BytesSource, ColorStats, ImportedFile

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Iterable, Sequence

    from grid_aligner.board import Board
    from grid_aligner.type_defs import ImageItem


def read_image_files(paths: Iterable[str | Path]) -> list[ImportedFile]:
    """Read files from disk, skipping paths that are not regular files."""
    files: list[ImportedFile] = []
    for raw in paths:
        path = Path(raw)
        if not path.is_file():
            logger.warning("Skipping %s: not a file", path)
            continue
        files.append(ImportedFile(name=path.name, data=path.read_bytes(),
                                  path=path))
    return files


async def _color_stats(sampler: Sampler, file: ImportedFile) -> ColorStats:
    try:
        return await sampler.sample(BytesSource(file.data))
    except SamplingError as e:
        logger.warning("Failed to compute color for %s, using neutral: %s",
                       file.name, e.cause)
    except Exception as e:  # noqa: BLE001
        logger.warning("Failed to compute color for %s, using neutral: %s",
                       file.name, e)
    return ColorStats.neutral()


async def import_and_align(
    board: Board,
    files: Sequence[ImportedFile],
    config: AlignerConfig | None = None,
    sampler: Sampler | None = None,
    *,
    origin: tuple[float, float] = (0.0, 0.0),
) -> AlignmentReport:
    """
    Create one board image per file, then order and lay them out.

    Images are created at ``origin`` and the grid is anchored on their
    combined bounding box.

    Raises:
        EmptySelectionError: If ``files`` is empty.

    """
    config = config or AlignerConfig()
    if not files:
        msg = "Choose at least one image file to import."
        raise EmptySelectionError(msg)
    sampler = sampler or BrightnessSampler.from_config(config.sampling)
    key = config.sampling.metadata_key

    x, y = origin
    created: list[ImageItem] = []
    for file in files:
        stats = await _color_stats(sampler, file)
        item = await board.create_image(
            file,
            x=x,
            y=y,
            title=file.name,
            metadata=cache_metadata(stats, key),
        )
        logger.debug("Imported %s as %s (brightness %.3f)", file.name,
                     item.id, stats.luminance)
        created.append(item)
    logger.info("Imported %d image(s)", len(created))

    report = await AlignmentOrchestrator(board, config, sampler).align_items(
        created,
    )
    await board.zoom_to(created)
    return report


async def import_files(
    board: Board,
    files: Sequence[ImportedFile],
    config: AlignerConfig | None = None,
    sampler: Sampler | None = None,
    *,
    origin: tuple[float, float] = (0.0, 0.0),
) -> AlignmentReport | None:
    """Import and align files, reporting any failure to the user."""
    return await run_reported(
        board,
        import_and_align(board, files, config, sampler, origin=origin),
    )
