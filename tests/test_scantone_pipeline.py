import numpy as np
import pytest

from scantone.audio import Audio
from scantone.config import SonifyConfig
from scantone.edges import DARK_TO_LIGHT, LIGHT_TO_DARK, Edge
from scantone.errors import InvalidConfigError, InvalidScanlineError
from scantone.pipeline import Sonifier, sonify


def _band_scanline() -> np.ndarray:
    scanline = np.zeros(100, dtype=np.uint8)
    scanline[40:60] = 255
    return scanline


class TestBrightBand:
    """A single bright band in a dark scanline produces exactly one click."""

    def test_edges(self) -> None:
        analysis = Sonifier().analyze(_band_scanline())
        assert analysis.edges == (
            Edge(position=40, transition=DARK_TO_LIGHT, distance=40),
            Edge(position=60, transition=LIGHT_TO_DARK, distance=20),
        )
        assert analysis.rising_edges == (analysis.edges[0],)
        assert analysis.smoothed.size == 100

    @pytest.mark.parametrize("sample_rate", [44_100, 48_000])
    def test_render(self, sample_rate: int) -> None:
        audio = Sonifier(SonifyConfig(sample_rate=sample_rate)).render(_band_scanline())
        assert isinstance(audio, Audio)
        assert audio.sample_rate == sample_rate
        assert len(audio) == int(0.1 * sample_rate)

        start = int(0.04 * sample_rate)
        click_len = int(0.01 * sample_rate)
        nonzero = np.flatnonzero(audio.samples)
        assert nonzero.min() >= start
        assert nonzero.max() < start + click_len
        assert float(np.max(np.abs(audio.samples))) == pytest.approx(1.0)


@pytest.mark.parametrize(
    "scanline",
    [
        np.zeros(0, dtype=np.uint8),
        np.array([200], dtype=np.uint8),
        np.full(640, 90, dtype=np.uint8),
        np.full(640, 255, dtype=np.uint8),
    ],
)
def test_degenerate_scanlines_render_silence(scanline: np.ndarray) -> None:
    audio = Sonifier().render(scanline)
    assert len(audio) == 4410
    assert audio.is_silent


def test_sonify_matches_sonifier() -> None:
    config = SonifyConfig(threshold=100, smoothing_window=3)
    rng = np.random.default_rng(5)
    scanline = rng.integers(0, 256, size=320, dtype=np.uint8)
    assert np.array_equal(sonify(scanline, config), Sonifier(config).render(scanline).samples)


def test_each_render_owns_its_buffer() -> None:
    sonifier = Sonifier()
    first = sonifier.render(_band_scanline())
    second = sonifier.render(_band_scanline())
    assert np.array_equal(first.samples, second.samples)
    assert not np.shares_memory(first.samples, second.samples)


def test_mapping_config_is_validated_on_construction() -> None:
    sonifier = Sonifier({"threshold": 64})
    assert sonifier.config.threshold == 64
    with pytest.raises(InvalidConfigError):
        Sonifier({"min_distance": 300})


def test_malformed_scanline_is_rejected() -> None:
    with pytest.raises(InvalidScanlineError):
        Sonifier().render(np.zeros((2, 10), dtype=np.uint8))
