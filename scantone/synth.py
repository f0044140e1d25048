from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import numpy as np
from numpy.typing import DTypeLike, NDArray

from .audio import FloatArray
from .config import SonifyConfig
from .edges import Edge
from .pitch import PitchMapper

_LOGGER = logging.getLogger("scantone.synth")


def buffer_length(input_length: int, config: SonifyConfig) -> int:
    """Number of audio samples covering ``input_length`` scanline samples."""

    return int((input_length / config.scan_rate) * config.sample_rate)


def edge_offset(position: int, config: SonifyConfig) -> int:
    """Audio sample index at which a click for ``position`` starts."""

    return int((position / config.scan_rate) * config.sample_rate)


def silence(config: SonifyConfig) -> FloatArray:
    """Short all-zero buffer signalling a scanline without edges."""

    return np.zeros(config.silent_samples, dtype=np.float32)


def click_waveform(
    frequency: float, config: SonifyConfig, *, dtype: DTypeLike = np.float32
) -> NDArray[np.floating[Any]]:
    """Generate an exponentially decaying sine burst."""

    length = config.click_samples
    if length <= 0:
        return np.zeros(0, dtype=dtype)
    i = np.arange(length, dtype=np.float64)
    envelope = np.exp(-config.decay_rate * (i / length))
    tone = np.sin(2 * np.pi * frequency * i / config.sample_rate)
    return (tone * envelope * config.click_gain).astype(dtype, copy=False)


def normalize_peak(buffer: FloatArray) -> FloatArray:
    """Scale ``buffer`` so its largest magnitude is 1.0; all-zero stays as is."""

    if buffer.size == 0:
        return buffer
    peak = float(np.max(np.abs(buffer)))
    if peak > 0.0:
        buffer = buffer / peak
    return buffer


def render_clicks(edges: Iterable[Edge], input_length: int, config: SonifyConfig) -> FloatArray:
    """Mix one click per dark-to-light edge into a peak-normalized buffer.

    Light-to-dark edges only contribute to the distance bookkeeping of the
    detector and stay silent. Overlapping clicks are summed, and samples
    falling past the end of the buffer are dropped.
    """

    edges = list(edges)
    if not edges:
        return silence(config)

    total = buffer_length(input_length, config)
    output = np.zeros(total, dtype=np.float64)
    pitch = PitchMapper.from_config(config)
    sounding = 0

    for edge in edges:
        if not edge.is_rising:
            continue
        start = edge_offset(edge.position, config)
        if start >= total:
            continue
        click = click_waveform(pitch(edge.distance), config, dtype=np.float64)
        end = min(start + click.size, total)
        output[start:end] += click[: end - start]
        sounding += 1

    _LOGGER.debug(
        "Rendered %d of %d edges into %d samples at %d Hz",
        sounding,
        len(edges),
        total,
        config.sample_rate,
    )
    return normalize_peak(output).astype(np.float32)
