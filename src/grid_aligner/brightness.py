"""
Average-color sampling for color-based ordering.

Images are downscaled to a small square, averaged per channel, and
summarised as luminance, saturation and lightness. Loading runs in a
worker thread so the event loop only waits on the result.
"""

from __future__ import annotations

import asyncio
import io
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol
from urllib.parse import unquote, urlparse

import numpy as np
import requests
from PIL import Image

from grid_aligner.config_defaults import (
    DEFAULT_SAMPLE_SIZE,
    DEFAULT_SAMPLE_TIMEOUT,
)
from grid_aligner.constants import (
    CHANNEL_MAX,
    COLOR_MODE_RGB,
    COLOR_WHITE,
    HTTP_SCHEMES,
    LUMA_BLUE,
    LUMA_GREEN,
    LUMA_RED,
    SATURATION_KEY_SUFFIX,
)
from grid_aligner.errors import SamplingError
from grid_aligner.logging_utils import logger
from grid_aligner.type_defs import (
    BytesSource,
    ColorStats,
    ImageItem,
    ImageSourceRef,
    UrlSource,
)

if TYPE_CHECKING:  # pragma: no cover
    from grid_aligner.config import SamplingConfig

_RGB = tuple[int, int, int]

_HUE_SECTOR_DEG = 60
_HUE_SECTORS = 6


class Sampler(Protocol):
    """Anything that can turn an image source into color stats."""

    async def sample(self, source: ImageSourceRef) -> ColorStats: ...


def to_rgb(img: Image.Image, *, bg_color: _RGB = COLOR_WHITE) -> Image.Image:
    """Convert PIL image to RGB, alpha compositing if needed."""
    if img.mode == COLOR_MODE_RGB:
        return img
    if img.mode in ("RGBA", "LA", "PA") or "transparency" in img.info:
        bg = Image.new("RGBA", img.size, (*bg_color, 255))
        comp = Image.alpha_composite(bg, img.convert("RGBA"))
        return comp.convert(COLOR_MODE_RGB)
    return img.convert(COLOR_MODE_RGB)


def average_color(img: Image.Image, sample_size: int = DEFAULT_SAMPLE_SIZE) -> _RGB:
    """Return the rounded mean RGB of ``img`` after downscaling."""
    if sample_size < 1:
        msg = f"sample_size must be positive, got {sample_size}"
        raise ValueError(msg)
    small = to_rgb(img).resize(
        (sample_size, sample_size),
        Image.Resampling.BILINEAR,
    )
    pixels = np.asarray(small, dtype=np.float64).reshape(-1, 3)
    r, g, b = (int(round(channel)) for channel in pixels.mean(axis=0))
    return r, g, b


def rgb_to_hsl(r: int, g: int, b: int) -> tuple[float, float, float]:
    """
    Convert 0-255 RGB to HSL.

    Returns:
        Hue in degrees [0, 360), saturation and lightness in [0, 1].

    """
    rf, gf, bf = r / CHANNEL_MAX, g / CHANNEL_MAX, b / CHANNEL_MAX
    hi = max(rf, gf, bf)
    lo = min(rf, gf, bf)
    lightness = (hi + lo) / 2
    if hi == lo:
        return 0.0, 0.0, lightness

    d = hi - lo
    if lightness > 0.5:  # noqa: PLR2004
        saturation = d / (2 - hi - lo)
    else:
        saturation = d / (hi + lo)

    if hi == rf:
        hue = (gf - bf) / d + (_HUE_SECTORS if gf < bf else 0)
    elif hi == gf:
        hue = (bf - rf) / d + 2
    else:
        hue = (rf - gf) / d + 4
    return hue * _HUE_SECTOR_DEG, saturation, lightness


def relative_luminance(r: int, g: int, b: int) -> float:
    """Perceptual brightness of a 0-255 RGB color, in [0, 1]."""
    return (LUMA_RED * r + LUMA_GREEN * g + LUMA_BLUE * b) / CHANNEL_MAX


def color_stats(
    img: Image.Image,
    sample_size: int = DEFAULT_SAMPLE_SIZE,
) -> ColorStats:
    """Summarise an image's average color."""
    r, g, b = average_color(img, sample_size)
    _, saturation, lightness = rgb_to_hsl(r, g, b)
    return ColorStats(
        luminance=relative_luminance(r, g, b),
        saturation=saturation,
        lightness=lightness,
    )


def _local_path(url: str) -> Path:
    parsed = urlparse(url)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    return Path(url)


def load_source_image(
    source: ImageSourceRef,
    *,
    timeout: float = DEFAULT_SAMPLE_TIMEOUT,
    session: requests.Session | None = None,
) -> Image.Image:
    """
    Decode the image behind ``source``.

    Raises:
        requests.RequestException: If an HTTP download fails.
        OSError: If the bytes cannot be read or decoded.

    """
    if isinstance(source, BytesSource):
        data = source.data
    elif isinstance(source, UrlSource):
        if urlparse(source.url).scheme in HTTP_SCHEMES:
            getter: Any = session if session is not None else requests
            response = getter.get(source.url, timeout=timeout)
            response.raise_for_status()
            data = response.content
        else:
            data = _local_path(source.url).read_bytes()
    else:
        msg = f"Unsupported image source: {source!r}"
        raise TypeError(msg)

    with Image.open(io.BytesIO(data)) as img:
        img.load()
        return img.copy()


def saturation_key(metadata_key: str) -> str:
    """Metadata key holding the cached saturation next to ``metadata_key``."""
    return f"{metadata_key}{SATURATION_KEY_SUFFIX}"


def _cached_unit_value(item: ImageItem, key: str) -> float | None:
    value = item.metadata.get(key)
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    if not 0.0 <= value <= 1.0:
        logger.debug("Ignoring out-of-range cached value %r for %s on %s",
                     value, key, item.id)
        return None
    return float(value)


def cached_brightness(item: ImageItem, metadata_key: str) -> float | None:
    """Return a cached brightness from item metadata if it is usable."""
    return _cached_unit_value(item, metadata_key)


def cached_saturation(item: ImageItem, metadata_key: str) -> float | None:
    """Return the saturation cached alongside brightness, if any."""
    return _cached_unit_value(item, saturation_key(metadata_key))


def cache_metadata(stats: ColorStats, metadata_key: str) -> dict[str, float]:
    """Metadata entries that let a later color sort skip sampling."""
    return {
        metadata_key: stats.luminance,
        saturation_key(metadata_key): stats.saturation,
    }


class BrightnessSampler:
    """Sample color stats from URLs, paths, or in-memory bytes."""

    def __init__(
        self,
        *,
        sample_size: int = DEFAULT_SAMPLE_SIZE,
        timeout: float = DEFAULT_SAMPLE_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.sample_size = sample_size
        self.timeout = timeout
        self.session = session

    @classmethod
    def from_config(cls, config: SamplingConfig) -> BrightnessSampler:
        return cls(
            sample_size=config.sample_size,
            timeout=config.timeout_seconds,
        )

    def sample_sync(self, source: ImageSourceRef) -> ColorStats:
        """Load and sample ``source`` in the calling thread."""
        try:
            img = load_source_image(
                source,
                timeout=self.timeout,
                session=self.session,
            )
            return color_stats(img, self.sample_size)
        except (
            OSError,
            ValueError,
            TypeError,
            Image.DecompressionBombError,
            requests.RequestException,
        ) as e:
            raise SamplingError(_describe(source), e) from e

    async def sample(self, source: ImageSourceRef) -> ColorStats:
        return await asyncio.to_thread(self.sample_sync, source)


def _describe(source: ImageSourceRef) -> str:
    if isinstance(source, UrlSource):
        return source.url
    if isinstance(source, BytesSource):
        return f"<{len(source.data)} bytes>"
    return repr(source)
