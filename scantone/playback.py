from __future__ import annotations

import logging
import time
from types import TracebackType
from typing import Any, Callable

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict

from .audio import Audio, FloatArray, ensure_audio_contract
from .config import SAMPLE_RATE
from .errors import PlaybackError

_LOGGER = logging.getLogger("scantone.playback")

DEFAULT_GAIN = 0.5


class PlaybackBackend(BaseModel):
    """Output device hooks.

    ``play`` starts a buffer and returns without waiting for it; it replaces
    whatever the device was still playing.
    """

    name: str
    play: Callable[[FloatArray, int], None]
    stop: Callable[[], None]

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        arbitrary_types_allowed=True,
    )


def _load_backend() -> PlaybackBackend | None:
    return _load_sounddevice() or _load_simpleaudio()


def resolve_backend() -> PlaybackBackend:
    backend = _load_backend()
    if backend is None:
        raise PlaybackError(
            "Playback requires sounddevice or simpleaudio. "
            "Install one of them (or write the buffer with Audio.save())."
        )
    return backend


class PlaybackSink:
    """Owns an output device between ``initialize()`` and ``shutdown()``.

    Buffers handed to ``submit`` are scaled by the master gain and started
    immediately. A buffer submitted while an earlier one is still sounding is
    mixed into the unplayed remainder, so overlapping frames add up instead
    of cutting each other off. ``shutdown`` lets the remainder finish before
    releasing the device unless ``drain=False`` is passed.
    """

    def __init__(
        self,
        *,
        sample_rate: int = SAMPLE_RATE,
        gain: float = DEFAULT_GAIN,
        backend: PlaybackBackend | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if sample_rate <= 0:
            raise PlaybackError(f"sample_rate must be positive, got {sample_rate}")
        self.sample_rate = sample_rate
        self._gain = _clamp_gain(gain)
        self._backend_override = backend
        self._backend: PlaybackBackend | None = None
        self._clock = clock
        self._sleep = sleep
        self._playing: FloatArray | None = None
        self._started = 0.0

    @property
    def is_initialized(self) -> bool:
        return self._backend is not None

    @property
    def backend_name(self) -> str | None:
        return self._backend.name if self._backend is not None else None

    @property
    def gain(self) -> float:
        return self._gain

    def set_gain(self, gain: float) -> None:
        self._gain = _clamp_gain(gain)

    def initialize(self) -> None:
        if self._backend is not None:
            return
        self._backend = self._backend_override or resolve_backend()
        _LOGGER.info(
            "Playback sink ready on %s at %d Hz (gain %.2f)",
            self._backend.name,
            self.sample_rate,
            self._gain,
        )

    def _unplayed(self, now: float) -> FloatArray:
        if self._playing is None:
            return np.zeros(0, dtype=np.float32)
        played = int((now - self._started) * self.sample_rate)
        return self._playing[max(played, 0) :]

    def remaining(self) -> float:
        """Seconds until everything submitted so far has finished sounding."""

        return self._unplayed(self._clock()).size / self.sample_rate

    def submit(self, audio: Audio | FloatArray) -> None:
        backend = self._backend
        if backend is None:
            raise PlaybackError("Playback sink not initialized; call initialize() first.")
        if isinstance(audio, Audio):
            if audio.sample_rate != self.sample_rate:
                raise PlaybackError(
                    f"Audio rendered at {audio.sample_rate} Hz, sink expects {self.sample_rate} Hz"
                )
            samples = audio.samples
        else:
            samples = ensure_audio_contract(audio)
        if samples.size == 0:
            return

        now = self._clock()
        tail = self._unplayed(now)
        mixed = np.zeros(max(tail.size, samples.size), dtype=np.float32)
        mixed[: tail.size] += tail
        mixed[: samples.size] += samples * self._gain
        np.clip(mixed, -1.0, 1.0, out=mixed)
        try:
            backend.play(mixed, self.sample_rate)
        except PlaybackError:
            raise
        except Exception as exc:
            raise PlaybackError(f"{backend.name} playback failed: {exc}") from exc
        self._playing = mixed
        self._started = now

    def wait(self) -> None:
        """Block until the audio submitted so far has played out."""

        remaining = self.remaining()
        if remaining > 0:
            self._sleep(remaining)

    def shutdown(self, *, drain: bool = True) -> None:
        backend = self._backend
        if backend is None:
            return
        if drain:
            self.wait()
        self._backend = None
        self._playing = None
        try:
            backend.stop()
        except Exception as exc:
            _LOGGER.warning("Failed to stop %s playback: %s", backend.name, exc, exc_info=True)
        _LOGGER.info("Playback sink on %s shut down", backend.name)

    def __enter__(self) -> "PlaybackSink":
        self.initialize()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.shutdown(drain=exc_type is None)


def _clamp_gain(gain: float) -> float:
    return float(min(1.0, max(0.0, gain)))


def _load_sounddevice() -> PlaybackBackend | None:
    try:
        import sounddevice as sd_module  # type: ignore[import]
    except (ImportError, OSError) as exc:
        _LOGGER.info("sounddevice not available: %s", exc, exc_info=True)
        return None
    sd: Any = sd_module

    def _play(samples: FloatArray, sample_rate: int) -> None:
        sd.play(samples, sample_rate)

    def _stop() -> None:
        sd.stop()

    return PlaybackBackend(name="sounddevice", play=_play, stop=_stop)


def _load_simpleaudio() -> PlaybackBackend | None:
    try:
        import simpleaudio as sa_module  # type: ignore[import]
    except ImportError as exc:
        _LOGGER.info("simpleaudio not available: %s", exc, exc_info=True)
        return None
    sa: Any = sa_module

    def _to_int16(samples: FloatArray) -> NDArray[np.int16]:
        clipped = np.clip(samples, -1.0, 1.0)
        return (clipped * 32_767).astype(np.int16)

    current: list[Any] = []

    def _play(samples: FloatArray, sample_rate: int) -> None:
        if current:
            current.pop().stop()
        current.append(sa.play_buffer(_to_int16(samples), 1, 2, sample_rate))

    def _stop() -> None:
        current.clear()
        sa.stop_all()

    return PlaybackBackend(name="simpleaudio", play=_play, stop=_stop)
