"""
Configuration schema and loader for the grid aligner.

Defines Pydantic models for the sorting, layout and sampling sections,
a TOML-based config loader, and the merge of CLI overrides on top of a
loaded or default configuration.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomlkit
from pydantic import BaseModel, Field

from grid_aligner.config_defaults import (
    DEFAULT_ANCHOR_CORNER,
    DEFAULT_BRIGHTNESS_METADATA_KEY,
    DEFAULT_COLUMNS,
    DEFAULT_GRAY_FIRST,
    DEFAULT_HORIZONTAL_GAP,
    DEFAULT_PRESERVE_ASPECT,
    DEFAULT_ROW_MODE,
    DEFAULT_SAMPLE_SIZE,
    DEFAULT_SAMPLE_TIMEOUT,
    DEFAULT_SIZE_MODE,
    DEFAULT_SORT_STRATEGY,
    DEFAULT_STRICT_NUMBER_VALIDATION,
    DEFAULT_STRIP_COPY_SUFFIX,
    DEFAULT_STRIP_EXTENSION,
    DEFAULT_VERTICAL_GAP,
)
from grid_aligner.titles import TitlePolicy
from grid_aligner.type_defs import (
    AnchorCorner,
    RowMode,
    SizeMode,
    SortStrategy,
)


class SortConfig(BaseModel):
    """Control how the selection is ordered."""

    strategy: SortStrategy = Field(DEFAULT_SORT_STRATEGY)
    strict_number_validation: bool = DEFAULT_STRICT_NUMBER_VALIDATION
    strip_extension: bool = DEFAULT_STRIP_EXTENSION
    strip_copy_suffix: bool = DEFAULT_STRIP_COPY_SUFFIX
    gray_first: bool = DEFAULT_GRAY_FIRST

    def title_policy(self) -> TitlePolicy:
        return TitlePolicy(
            strip_extension=self.strip_extension,
            strip_copy_suffix=self.strip_copy_suffix,
        )


class LayoutConfig(BaseModel):
    """
    Control grid shape, spacing, resizing and anchoring.

    ``columns`` is checked when an operation starts, so a bad value is
    reported to the user instead of failing config parsing.
    """

    columns: int = Field(DEFAULT_COLUMNS)
    horizontal_gap: float = Field(DEFAULT_HORIZONTAL_GAP, ge=0)
    vertical_gap: float = Field(DEFAULT_VERTICAL_GAP, ge=0)
    size_mode: SizeMode = Field(DEFAULT_SIZE_MODE)
    anchor_corner: AnchorCorner = Field(DEFAULT_ANCHOR_CORNER)
    row_mode: RowMode = Field(DEFAULT_ROW_MODE)
    preserve_aspect: bool = DEFAULT_PRESERVE_ASPECT


class SamplingConfig(BaseModel):
    """Control average-color sampling for the color strategy."""

    sample_size: int = Field(DEFAULT_SAMPLE_SIZE, ge=1)
    timeout_seconds: float = Field(DEFAULT_SAMPLE_TIMEOUT, gt=0)
    metadata_key: str = Field(DEFAULT_BRIGHTNESS_METADATA_KEY, min_length=1)


class AlignerConfig(BaseModel):
    """
    Root configuration object combining all supported sections.

    Mirrors the structure of config.toml.
    """

    sort: SortConfig = Field(
        default_factory=lambda: SortConfig.model_validate({}),
    )
    layout: LayoutConfig = Field(
        default_factory=lambda: LayoutConfig.model_validate({}),
    )
    sampling: SamplingConfig = Field(
        default_factory=lambda: SamplingConfig.model_validate({}),
    )


class ConfigLoader:
    """
    Loads and parses a TOML configuration file into a typed config object.

    Falls back to defaults for any missing subsections or fields.
    """

    @staticmethod
    def load(path: str) -> AlignerConfig:
        """Load and validate an aligner configuration from a TOML file."""
        config_path = Path(path)
        if not config_path.is_file():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)

        with config_path.open("r", encoding="utf-8") as f:
            doc = tomlkit.load(f)

        return AlignerConfig.model_validate(doc.unwrap())


# CLI argument name -> (section, field)
_CLI_FIELD_MAP: dict[str, tuple[str, str]] = {
    "sort": ("sort", "strategy"),
    "strict": ("sort", "strict_number_validation"),
    "gray_first": ("sort", "gray_first"),
    "columns": ("layout", "columns"),
    "h_gap": ("layout", "horizontal_gap"),
    "v_gap": ("layout", "vertical_gap"),
    "size_mode": ("layout", "size_mode"),
    "anchor": ("layout", "anchor_corner"),
    "row_mode": ("layout", "row_mode"),
    "sample_size": ("sampling", "sample_size"),
    "timeout": ("sampling", "timeout_seconds"),
}

# Negative CLI flags: setting them stores False into (section, field)
_CLI_NEGATED_FLAGS: dict[str, tuple[str, str]] = {
    "no_strip_extension": ("sort", "strip_extension"),
    "no_strip_copy_suffix": ("sort", "strip_copy_suffix"),
    "no_preserve_aspect": ("layout", "preserve_aspect"),
}


def build_config_from_cli(
    args: dict[str, Any],
    base_config: AlignerConfig | None = None,
) -> AlignerConfig:
    """
    Merge parsed CLI arguments over a base configuration.

    Arguments that are absent or None leave the base value in place.
    Boolean switches only override when set.
    """
    base = base_config or AlignerConfig()
    data = base.model_dump()

    for arg_name, (section, field) in _CLI_FIELD_MAP.items():
        value = args.get(arg_name)
        if value is None or value is False:
            continue
        data[section][field] = value

    for arg_name, (section, field) in _CLI_NEGATED_FLAGS.items():
        if args.get(arg_name):
            data[section][field] = False

    return AlignerConfig.model_validate(data)
