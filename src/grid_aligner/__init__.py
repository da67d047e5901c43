"""Public package exports for the grid aligner."""

from __future__ import annotations

from .board import Board, JsonBoard
from .config import AlignerConfig, ConfigLoader
from .importer import import_and_align, import_files
from .main import AlignmentOrchestrator, AlignmentReport, align_selection
from .ordering import order_items
from .titles import extract_number

__all__ = [
    "AlignerConfig",
    "AlignmentOrchestrator",
    "AlignmentReport",
    "Board",
    "ConfigLoader",
    "JsonBoard",
    "align_selection",
    "extract_number",
    "import_and_align",
    "import_files",
    "order_items",
]
