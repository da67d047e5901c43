"""
Constants used internally by the grid aligner.

These are implementation-level values that should not be overridden
via config files or CLI arguments.
"""

# Rec. 709 luma coefficients for relative luminance
LUMA_RED = 0.2126
LUMA_GREEN = 0.7152
LUMA_BLUE = 0.0722

CHANNEL_MAX = 255

# Saturation below this counts as grey/white for gray-first color sorts
GRAY_SATURATION_THRESHOLD = 0.1

# Neutral color used when an image cannot be sampled
NEUTRAL_LUMINANCE = 0.5
NEUTRAL_SATURATION = 0.0

# Cached saturation lives next to cached brightness under "<key>.saturation"
SATURATION_KEY_SUFFIX = ".saturation"

# Number of example labels carried by a strict-mode validation error
MAX_MISSING_NUMBER_EXAMPLES = 3

# Internal color constants
COLOR_MODE_RGB = "RGB"
COLOR_WHITE = (255, 255, 255)

# Board item type handled by the aligner
IMAGE_ITEM_TYPE = "image"

# HTTP schemes fetched over the network by the sampler
HTTP_SCHEMES = ("http", "https")
