"""CLI argument parsing and main entry point."""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import TYPE_CHECKING

import grid_aligner.config as ga_config
import grid_aligner.importer as ga_importer
import grid_aligner.main as ga_main
from grid_aligner.board import JsonBoard
from grid_aligner.logging_utils import logger, set_verbosity
from grid_aligner.type_defs import (
    ANCHOR_CORNERS,
    ROW_MODES,
    SIZE_MODES,
    SORT_STRATEGIES,
)

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Sequence

_ORIGIN_PARTS = 2


def non_negative_float(text: str) -> float:
    """Argparse type that accepts floats >= 0."""
    try:
        value = float(text)
    except ValueError as exc:
        msg = f"invalid number: {text!r}"
        raise argparse.ArgumentTypeError(msg) from exc
    if value < 0:
        msg = f"must be >= 0, got {text}"
        raise argparse.ArgumentTypeError(msg)
    return value


def positive_int(text: str) -> int:
    """Argparse type that accepts integers >= 1."""
    try:
        value = int(text)
    except ValueError as exc:
        msg = f"invalid integer: {text!r}"
        raise argparse.ArgumentTypeError(msg) from exc
    if value < 1:
        msg = f"must be >= 1, got {text}"
        raise argparse.ArgumentTypeError(msg)
    return value


def positive_float(text: str) -> float:
    """Argparse type that accepts floats > 0."""
    value = non_negative_float(text)
    if value == 0:
        msg = f"must be > 0, got {text}"
        raise argparse.ArgumentTypeError(msg)
    return value


def parse_origin(text: str) -> tuple[float, float]:
    """Parse ``X,Y`` into a coordinate pair."""
    parts = text.split(",")
    if len(parts) != _ORIGIN_PARTS:
        msg = "origin must look like X,Y, e.g., 0,0"
        raise argparse.ArgumentTypeError(msg)
    try:
        return float(parts[0]), float(parts[1])
    except ValueError as exc:
        msg = "origin coordinates must be numbers"
        raise argparse.ArgumentTypeError(msg) from exc


def build_arg_parser() -> argparse.ArgumentParser:
    """Construct the argument parser for the command-line interface."""
    p = argparse.ArgumentParser(
        description="Sort board images and arrange them in a grid",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "grid-aligner --board board.json --columns 3\n"
            "grid-aligner --board board.json --sort color --anchor "
            "bottom-right\n"
            "grid-aligner --board board.json --import scans/*.png "
            "--origin 100,200\n"
        ),
    )

    board = p.add_argument_group("board")
    board.add_argument(
        "--board", type=str, help="Path to the board snapshot JSON")
    board.add_argument(
        "--output", type=str,
        help="Where to write the updated board (default: overwrite --board)")

    sort = p.add_argument_group("sorting")
    sort.add_argument(
        "--sort", choices=list(SORT_STRATEGIES), help="Sort strategy")
    sort.add_argument(
        "--strict", action="store_true",
        help="Abort number sorting if any title has no number")
    sort.add_argument(
        "--gray-first", action="store_true",
        help="In color sorting, place grey/white images first")
    sort.add_argument(
        "--no-strip-extension", action="store_true",
        help="Keep file extensions when reading numbers from titles")
    sort.add_argument(
        "--no-strip-copy-suffix", action="store_true",
        help="Keep '(copy)' markers when reading numbers from titles")

    layout = p.add_argument_group("layout")
    layout.add_argument(
        "--columns", type=int, help="Images per row")
    layout.add_argument(
        "--h-gap", type=non_negative_float, help="Horizontal gap")
    layout.add_argument(
        "--v-gap", type=non_negative_float, help="Vertical gap")
    layout.add_argument(
        "--size-mode", choices=list(SIZE_MODES),
        help="Match every image to the smallest width or height")
    layout.add_argument(
        "--no-preserve-aspect", action="store_true",
        help="Resize only the matched dimension")
    layout.add_argument(
        "--anchor", choices=list(ANCHOR_CORNERS),
        help="Corner of the selection the grid starts from")
    layout.add_argument(
        "--row-mode", choices=list(ROW_MODES),
        help="uniform cells or packed rows")

    imp = p.add_argument_group("import")
    imp.add_argument(
        "--import", dest="import_files", nargs="+", metavar="FILE",
        help="Image files to add to the board before arranging")
    imp.add_argument(
        "--origin", type=parse_origin, default=(0.0, 0.0),
        help="Board position for imported images (default: 0,0)")

    sampling = p.add_argument_group("sampling")
    sampling.add_argument(
        "--sample-size", type=positive_int,
        help="Edge length in pixels images are downscaled to before averaging")
    sampling.add_argument(
        "--timeout", type=positive_float,
        help="Seconds to wait for each remote image download")

    cfg = p.add_argument_group("config")
    cfg.add_argument(
        "--config", type=str, help="Path to config.toml file")
    cfg.add_argument(
        "--validate-config-only", action="store_true",
        help="Validate config file and exit")
    cfg.add_argument(
        "--verbose", action="store_true", help="Enable debug logging")

    return p


def log_parameters(cfg: ga_config.AlignerConfig, args: argparse.Namespace) -> None:
    """Log the effective settings for this run."""
    if getattr(args, "config", None):
        logger.info("Loaded config from: %s", args.config)
    logger.info("Board: %s", args.board)
    logger.info("Sort Strategy: %s", cfg.sort.strategy)
    logger.info("Strict Numbers: %s",
                "Enabled" if cfg.sort.strict_number_validation else "Disabled")
    logger.info("Columns: %d", cfg.layout.columns)
    logger.info("Gaps: %g x %g", cfg.layout.horizontal_gap,
                cfg.layout.vertical_gap)
    logger.info("Size Mode: %s", cfg.layout.size_mode)
    logger.info("Anchor Corner: %s", cfg.layout.anchor_corner)
    logger.info("Row Mode: %s", cfg.layout.row_mode)
    if cfg.sort.strategy == "color":
        logger.info("Sample Size: %d", cfg.sampling.sample_size)
        logger.info("Download Timeout: %gs", cfg.sampling.timeout_seconds)


def run_from_args(args: argparse.Namespace) -> int:
    """Run one align or import operation; return the process exit code."""
    base_cfg: ga_config.AlignerConfig | None = None
    if args.config:
        base_cfg = ga_config.ConfigLoader.load(args.config)
        if args.validate_config_only:
            logger.info("Config %s validated successfully.", args.config)
            return 0

    cfg = ga_config.build_config_from_cli(vars(args), base_config=base_cfg)
    log_parameters(cfg, args)

    board = JsonBoard.load(args.board)
    if args.import_files:
        files = ga_importer.read_image_files(args.import_files)
        report = asyncio.run(
            ga_importer.import_files(board, files, cfg, origin=args.origin),
        )
    else:
        report = asyncio.run(ga_main.AlignmentOrchestrator(board, cfg).run())

    out_path = board.save(args.output or args.board)
    logger.info("Board written to %s", out_path)
    errors = [msg for level, msg in board.notifications if level == "error"]
    return 1 if report is None and errors else 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command-line interface."""
    arg_parser = build_arg_parser()
    args = arg_parser.parse_args(argv)
    set_verbosity(verbose=args.verbose)
    if args.validate_config_only and not args.config:
        arg_parser.error("--validate-config-only requires --config")
    if not args.validate_config_only and not args.board:
        arg_parser.error("the following arguments are required: --board")

    return run_from_args(args)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
