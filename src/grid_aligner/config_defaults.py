"""Shared default values for user-facing configuration settings."""
from grid_aligner.type_defs import (
    AnchorCorner,
    RowMode,
    SizeMode,
    SortStrategy,
)

# Sorting
DEFAULT_SORT_STRATEGY: SortStrategy = "number"
DEFAULT_STRICT_NUMBER_VALIDATION = False
DEFAULT_STRIP_EXTENSION = True
DEFAULT_STRIP_COPY_SUFFIX = True
DEFAULT_GRAY_FIRST = False

# Layout
DEFAULT_COLUMNS = 4
DEFAULT_HORIZONTAL_GAP = 20.0
DEFAULT_VERTICAL_GAP = 20.0
DEFAULT_SIZE_MODE: SizeMode = "none"
DEFAULT_ANCHOR_CORNER: AnchorCorner = "top-left"
DEFAULT_ROW_MODE: RowMode = "packed"
DEFAULT_PRESERVE_ASPECT = True

# Sampling
# Images are downscaled to a square of this size before averaging.
DEFAULT_SAMPLE_SIZE = 50
DEFAULT_SAMPLE_TIMEOUT = 10.0
DEFAULT_BRIGHTNESS_METADATA_KEY = "grid_aligner.brightness"
