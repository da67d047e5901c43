"""
Tests for average-color sampling.

Covers:
- Color math (HSL conversion, luminance)
- Loading from bytes, paths, file URLs and HTTP
- Error wrapping and cached brightness and saturation values
"""
from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path

import pytest
import requests
from PIL import Image
from pytest_mock import MockerFixture

import grid_aligner.brightness as ga_brightness
from grid_aligner.config import SamplingConfig
from grid_aligner.errors import SamplingError
from grid_aligner.type_defs import BytesSource, ColorStats, ImageItem, UrlSource

pytestmark = pytest.mark.visual


class TestColorMath:
    """Pure conversions."""

    @pytest.mark.parametrize(
        ("rgb", "expected"),
        [
            ((255, 255, 255), (0.0, 0.0, 1.0)),
            ((0, 0, 0), (0.0, 0.0, 0.0)),
            ((255, 0, 0), (0.0, 1.0, 0.5)),
            ((0, 255, 0), (120.0, 1.0, 0.5)),
            ((0, 0, 255), (240.0, 1.0, 0.5)),
            ((255, 0, 255), (300.0, 1.0, 0.5)),
        ],
    )
    def test_rgb_to_hsl(
        self,
        rgb: tuple[int, int, int],
        expected: tuple[float, float, float],
    ) -> None:
        assert ga_brightness.rgb_to_hsl(*rgb) == pytest.approx(expected)

    def test_relative_luminance_bounds(self) -> None:
        assert ga_brightness.relative_luminance(255, 255, 255) == pytest.approx(1.0)
        assert ga_brightness.relative_luminance(0, 0, 0) == 0.0
        green = ga_brightness.relative_luminance(0, 255, 0)
        blue = ga_brightness.relative_luminance(0, 0, 255)
        assert green > blue

    def test_average_color_of_split_image(self) -> None:
        img = Image.new("RGB", (10, 10), color="black")
        img.paste((255, 255, 255), (0, 0, 5, 10))
        r, g, b = ga_brightness.average_color(img, sample_size=10)
        assert r == g == b
        assert 120 <= r <= 135

    def test_average_color_rejects_bad_size(self) -> None:
        with pytest.raises(ValueError, match="sample_size"):
            ga_brightness.average_color(Image.new("RGB", (2, 2)), 0)

    def test_transparent_pixels_composite_on_white(self) -> None:
        img = Image.new("RGBA", (4, 4), (0, 0, 0, 0))
        assert ga_brightness.average_color(img, 4) == (255, 255, 255)

    def test_color_stats(self) -> None:
        stats = ga_brightness.color_stats(Image.new("RGB", (4, 4), "white"))
        assert isinstance(stats, ColorStats)
        assert stats.luminance == pytest.approx(1.0)
        assert (stats.saturation, stats.lightness) == (0.0, 1.0)


class TestLoadSourceImage:
    """Every source kind decodes to a PIL image."""

    def test_bytes(self, png_bytes: Callable[..., bytes]) -> None:
        img = ga_brightness.load_source_image(
            BytesSource(png_bytes("red", (3, 2))),
        )
        assert img.size == (3, 2)

    def test_path_and_file_url(
        self, make_image_file: Callable[..., Path],
    ) -> None:
        path = make_image_file("p.png", "blue", (5, 5))
        assert ga_brightness.load_source_image(UrlSource(str(path))).size == (5, 5)
        assert ga_brightness.load_source_image(
            UrlSource(path.as_uri()),
        ).size == (5, 5)

    def test_http_uses_session(
        self,
        mocker: MockerFixture,
        png_bytes: Callable[..., bytes],
    ) -> None:
        session = mocker.Mock(spec=requests.Session)
        session.get.return_value.content = png_bytes("green", (6, 6))
        img = ga_brightness.load_source_image(
            UrlSource("https://example.test/a.png"),
            timeout=3.0,
            session=session,
        )
        assert img.size == (6, 6)
        session.get.assert_called_once_with(
            "https://example.test/a.png", timeout=3.0,
        )
        session.get.return_value.raise_for_status.assert_called_once()

    def test_unsupported_source(self) -> None:
        with pytest.raises(TypeError, match="Unsupported image source"):
            ga_brightness.load_source_image("plain string")  # type: ignore[arg-type]


class TestBrightnessSampler:
    """Async sampling and error wrapping."""

    def test_sample_white_and_black(
        self, png_bytes: Callable[..., bytes],
    ) -> None:
        sampler = ga_brightness.BrightnessSampler(sample_size=4)
        white = asyncio.run(sampler.sample(BytesSource(png_bytes("white"))))
        black = asyncio.run(sampler.sample(BytesSource(png_bytes("black"))))
        assert white.luminance == pytest.approx(1.0)
        assert black.luminance == pytest.approx(0.0)

    def test_undecodable_bytes_raise_sampling_error(self) -> None:
        sampler = ga_brightness.BrightnessSampler()
        with pytest.raises(SamplingError) as info:
            sampler.sample_sync(BytesSource(b"not an image"))
        assert isinstance(info.value.cause, OSError)

    def test_missing_path_raises_sampling_error(self, tmp_path: Path) -> None:
        sampler = ga_brightness.BrightnessSampler()
        with pytest.raises(SamplingError, match="missing.png"):
            sampler.sample_sync(UrlSource(str(tmp_path / "missing.png")))

    def test_http_error_is_wrapped(self, mocker: MockerFixture) -> None:
        session = mocker.Mock(spec=requests.Session)
        session.get.side_effect = requests.ConnectionError("offline")
        sampler = ga_brightness.BrightnessSampler(session=session)
        with pytest.raises(SamplingError) as info:
            sampler.sample_sync(UrlSource("http://example.test/x.png"))
        assert isinstance(info.value.cause, requests.ConnectionError)

    def test_oversized_image_raises_sampling_error(
        self,
        png_bytes: Callable[..., bytes],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 10)
        sampler = ga_brightness.BrightnessSampler()
        with pytest.raises(SamplingError) as info:
            sampler.sample_sync(BytesSource(png_bytes(size=(8, 8))))
        assert isinstance(info.value.cause, Image.DecompressionBombError)

    def test_from_config(self) -> None:
        cfg = SamplingConfig(sample_size=12, timeout_seconds=2.5)
        sampler = ga_brightness.BrightnessSampler.from_config(cfg)
        assert sampler.sample_size == 12
        assert sampler.timeout == 2.5


@pytest.mark.parametrize(
    ("value", "expected"),
    [(0.25, 0.25), (1, 1.0), (0, 0.0), (1.5, None), (-0.1, None),
     ("0.3", None), (True, None), (None, None)],
)
def test_cached_brightness(value: object, expected: float | None) -> None:
    item = ImageItem(id="i", metadata={"k": value} if value is not None else {})
    assert ga_brightness.cached_brightness(item, "k") == expected


def test_cached_saturation_sits_next_to_brightness() -> None:
    item = ImageItem(id="i", metadata={"k": 0.4, "k.saturation": 0.75})
    assert ga_brightness.saturation_key("k") == "k.saturation"
    assert ga_brightness.cached_saturation(item, "k") == 0.75
    assert ga_brightness.cached_saturation(ImageItem(id="j"), "k") is None
    bad = ImageItem(id="b", metadata={"k.saturation": 2})
    assert ga_brightness.cached_saturation(bad, "k") is None


def test_cache_metadata() -> None:
    stats = ColorStats(0.5, 0.25, 0.4)
    assert ga_brightness.cache_metadata(stats, "k") == {
        "k": 0.5,
        "k.saturation": 0.25,
    }
