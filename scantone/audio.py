from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path
from typing import Any

import numpy as np
import soundfile as sf  # type: ignore[import]
from numpy.typing import DTypeLike, NDArray
from pydantic import BaseModel, ConfigDict, model_validator

from .config import SAMPLE_RATE
from .errors import InvalidConfigError

FloatArray = NDArray[np.float32]
AudioNumbers = NDArray[np.floating[Any]] | Sequence[float] | FloatArray


def ensure_audio_contract(audio: AudioNumbers, *, check_peak: bool = True) -> FloatArray:
    """Flatten to mono float32 and pull anything above full scale back to 1.0."""

    mono: FloatArray = np.asarray(audio, dtype=np.float32).reshape(-1)
    if mono.size == 0 or not check_peak:
        return mono
    peak = float(np.max(np.abs(mono)))
    if peak > 1.0:
        mono = mono / peak
    return mono


def iter_chunks(chunks: Iterable[AudioNumbers]) -> Iterator[FloatArray]:
    for chunk in chunks:
        yield ensure_audio_contract(chunk)


def _looks_like_samples(sequence: Sequence[object]) -> bool:
    match sequence:
        case []:
            return True
        case [int() | float() | np.floating(), *_]:
            return True
        case _:
            return False


def write_wav(
    path: str | Path,
    audio_or_chunks: AudioNumbers | Iterable[AudioNumbers],
    *,
    sample_rate: int = SAMPLE_RATE,
) -> Path:
    """Write one buffer, or a run of buffers back to back, as a mono float wav."""

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    match audio_or_chunks:
        case np.ndarray() as array:
            sf.write(target, ensure_audio_contract(array), sample_rate, subtype="FLOAT")
            return target
        case str() | bytes():
            raise InvalidConfigError("audio_or_chunks must be audio samples or chunk iterables")
        case Sequence() as sequence if _looks_like_samples(sequence):
            sf.write(target, ensure_audio_contract(sequence), sample_rate, subtype="FLOAT")
            return target
        case Iterable() as chunks:
            pass
        case _:
            raise InvalidConfigError("audio_or_chunks must be audio samples or chunk iterables")

    with sf.SoundFile(
        target,
        mode="w",
        samplerate=sample_rate,
        channels=1,
        subtype="FLOAT",
    ) as handle:
        for chunk in iter_chunks(chunks):
            handle.write(chunk)

    return target


def read_wav(path: str | Path) -> tuple[FloatArray, int]:
    data, sample_rate = sf.read(Path(path), dtype="float32", always_2d=False)
    return ensure_audio_contract(data, check_peak=False), int(sample_rate)


class Audio(BaseModel):
    """A rendered mono buffer together with the rate it was rendered at."""

    samples: FloatArray
    sample_rate: int = SAMPLE_RATE

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        arbitrary_types_allowed=True,
    )

    @model_validator(mode="after")
    def _normalize(self) -> "Audio":
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        object.__setattr__(self, "samples", ensure_audio_contract(self.samples))
        return self

    @property
    def duration(self) -> float:
        return self.samples.size / self.sample_rate

    @property
    def is_silent(self) -> bool:
        return not np.any(self.samples)

    def to_numpy(self) -> FloatArray:
        return self.samples

    def __array__(
        self, dtype: DTypeLike | None = None, copy: bool | None = None
    ) -> NDArray[np.generic]:
        return np.asarray(self.samples, dtype=dtype)

    def __len__(self) -> int:
        return int(self.samples.size)

    def save(self, path: str | Path) -> Path:
        return write_wav(path, self.samples, sample_rate=self.sample_rate)

    def play(self, sink: Any) -> None:
        """Start this buffer on an initialized ``PlaybackSink`` without waiting.

        The sink keeps the device open until the buffer has played out when it
        is shut down.
        """

        sink.submit(self)
