"""Centered moving-average smoothing of brightness scanlines."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import numpy as np
from numpy.typing import NDArray

from .errors import InvalidConfigError, InvalidScanlineError

BrightnessArray = NDArray[np.uint8]
BrightnessInput = NDArray[np.integer[Any]] | Sequence[int]


def as_brightness(samples: BrightnessInput) -> BrightnessArray:
    """Coerce a 1-D array-like of 0..255 integers into a uint8 scanline."""

    array = np.asarray(samples)
    if array.ndim != 1:
        raise InvalidScanlineError(f"brightness must be one-dimensional, got shape {array.shape}")
    if array.size == 0:
        return np.zeros(0, dtype=np.uint8)
    if array.dtype == np.uint8:
        return array
    if array.dtype.kind == "f":
        if not np.all(np.isfinite(array)) or not np.all(array == np.floor(array)):
            raise InvalidScanlineError("brightness values must be whole numbers")
    elif array.dtype.kind not in "iub":
        raise InvalidScanlineError(f"unsupported brightness dtype: {array.dtype}")
    low, high = array.min(), array.max()
    if low < 0 or high > 255:
        raise InvalidScanlineError(f"brightness values must lie in [0, 255], got [{low}, {high}]")
    return array.astype(np.uint8)


def moving_average(samples: BrightnessInput, window_size: int) -> BrightnessArray:
    """Average each sample with its ``window_size // 2`` neighbours on both sides.

    The window is truncated at the ends of the scanline, so boundary samples
    average over fewer values. Means are rounded half up and the output keeps
    the input length.
    """

    if window_size < 1:
        raise InvalidConfigError(f"window_size must be >= 1, got {window_size}")
    data = as_brightness(samples)
    length = data.size
    if length == 0:
        return np.zeros(0, dtype=np.uint8)

    half = window_size // 2
    cumulative = np.concatenate(([0], np.cumsum(data, dtype=np.int64)))
    index = np.arange(length)
    lo = np.maximum(index - half, 0)
    hi = np.minimum(index + half + 1, length)
    sums = cumulative[hi] - cumulative[lo]
    counts = hi - lo
    # floor(sum / count + 0.5) in integer arithmetic
    rounded = (2 * sums + counts) // (2 * counts)
    return np.clip(rounded, 0, 255).astype(np.uint8)
