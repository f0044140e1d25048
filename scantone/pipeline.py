from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from .audio import Audio, FloatArray
from .config import SonifyConfig, parse_config
from .edges import Edge, detect_edges
from .smoothing import BrightnessArray, BrightnessInput, as_brightness, moving_average
from .synth import render_clicks

_LOGGER = logging.getLogger("scantone.pipeline")


@dataclass(frozen=True, slots=True)
class ScanAnalysis:
    """Intermediate products of one scanline: the smoothed samples and their edges."""

    smoothed: BrightnessArray
    edges: tuple[Edge, ...]

    @property
    def rising_edges(self) -> tuple[Edge, ...]:
        return tuple(edge for edge in self.edges if edge.is_rising)


class Sonifier:
    """Turns brightness scanlines into click buffers with a fixed config.

    The config is validated when the sonifier is built; every call to
    ``render`` allocates its own output buffer, so one instance can serve
    any number of frames.
    """

    def __init__(self, config: SonifyConfig | Mapping[str, Any] | None = None) -> None:
        match config:
            case None:
                self.config = SonifyConfig()
            case SonifyConfig():
                self.config = config
            case _:
                self.config = parse_config(config)

    @property
    def sample_rate(self) -> int:
        return self.config.sample_rate

    def analyze(self, scanline: BrightnessInput) -> ScanAnalysis:
        raw = as_brightness(scanline)
        smoothed = moving_average(raw, self.config.smoothing_window)
        edges = detect_edges(smoothed, self.config.threshold)
        return ScanAnalysis(smoothed=smoothed, edges=tuple(edges))

    def render(self, scanline: BrightnessInput) -> Audio:
        analysis = self.analyze(scanline)
        samples = render_clicks(analysis.edges, analysis.smoothed.size, self.config)
        _LOGGER.debug(
            "Scanline of %d samples -> %d edges (%d audible), %d audio samples",
            analysis.smoothed.size,
            len(analysis.edges),
            len(analysis.rising_edges),
            samples.size,
        )
        return Audio(samples=samples, sample_rate=self.config.sample_rate)


def sonify(scanline: BrightnessInput, config: SonifyConfig | None = None) -> FloatArray:
    """Render one scanline with ``config`` (defaults if omitted)."""

    return Sonifier(config).render(scanline).samples
