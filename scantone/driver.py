from __future__ import annotations

import logging
import time
from typing import Any, Callable

import numpy as np
from numpy.typing import NDArray

from .audio import Audio
from .errors import InvalidScanlineError, PlaybackError
from .logging_utils import log_exception
from .pipeline import Sonifier
from .playback import PlaybackSink
from .smoothing import BrightnessArray

_LOGGER = logging.getLogger("scantone.driver")

DEFAULT_MAX_FPS = 30.0
GREEN_CHANNEL = 1


def green_scanline(frame: NDArray[Any], row: int | None = None) -> BrightnessArray:
    """Pull the green channel of one row out of an ``H x W x 3|4`` uint8 frame."""

    pixels = np.asarray(frame)
    if pixels.ndim != 3 or pixels.shape[2] not in (3, 4):
        raise InvalidScanlineError(f"expected an H x W x 3 or H x W x 4 frame, got {pixels.shape}")
    if pixels.dtype != np.uint8:
        raise InvalidScanlineError(f"expected uint8 pixels, got {pixels.dtype}")
    height = pixels.shape[0]
    index = 0 if row is None else row
    if not -height <= index < height:
        raise InvalidScanlineError(f"row {index} outside frame of height {height}")
    return np.ascontiguousarray(pixels[index, :, GREEN_CHANNEL])


class FrameDriver:
    """Feeds frames through a sonifier at a bounded rate.

    Frames arriving sooner than ``1 / max_fps`` seconds after the last
    processed one are skipped. Rendered audio is submitted to ``sink`` when
    one is given; a failing sink is logged and does not stop later frames.
    """

    def __init__(
        self,
        sonifier: Sonifier,
        sink: PlaybackSink | None = None,
        *,
        max_fps: float = DEFAULT_MAX_FPS,
        row: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_fps <= 0:
            raise ValueError(f"max_fps must be positive, got {max_fps}")
        self.sonifier = sonifier
        self.sink = sink
        self.row = row
        self._min_interval = 1.0 / max_fps
        self._clock = clock
        self._last_time: float | None = None
        self.frames_processed = 0
        self.frames_skipped = 0

    def _due(self, now: float) -> bool:
        return self._last_time is None or now - self._last_time >= self._min_interval

    def process_scanline(self, scanline: NDArray[Any]) -> Audio | None:
        now = self._clock()
        if not self._due(now):
            self.frames_skipped += 1
            return None
        self._last_time = now
        audio = self.sonifier.render(scanline)
        self.frames_processed += 1
        if self.sink is not None:
            self._submit(audio)
        return audio

    def process(self, frame: NDArray[Any]) -> Audio | None:
        return self.process_scanline(green_scanline(frame, self.row))

    def _submit(self, audio: Audio) -> None:
        assert self.sink is not None
        try:
            self.sink.submit(audio)
        except PlaybackError as exc:
            _LOGGER.warning("Dropping frame audio: %s", exc, exc_info=True)
            log_exception("scantone playback", exc)
