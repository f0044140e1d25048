from __future__ import annotations

from dataclasses import dataclass

from .config import (
    DEFAULT_MAX_DISTANCE,
    DEFAULT_MAX_FREQUENCY,
    DEFAULT_MIN_DISTANCE,
    DEFAULT_MIN_FREQUENCY,
    SonifyConfig,
)
from .errors import InvalidConfigError


def distance_to_frequency(
    distance: float,
    *,
    min_distance: float = DEFAULT_MIN_DISTANCE,
    max_distance: float = DEFAULT_MAX_DISTANCE,
    min_frequency: float = DEFAULT_MIN_FREQUENCY,
    max_frequency: float = DEFAULT_MAX_FREQUENCY,
) -> float:
    """Map inter-edge distance to pitch, shorter distances sounding higher.

    ``min_distance`` maps to ``max_frequency`` and ``max_distance`` to
    ``min_frequency``; distances outside the range are clamped.
    """

    if max_distance <= min_distance:
        raise InvalidConfigError(
            f"max_distance ({max_distance}) must exceed min_distance ({min_distance})"
        )
    clamped = max(min_distance, min(max_distance, distance))
    normalized = (clamped - min_distance) / (max_distance - min_distance)
    inverted = 1.0 - normalized
    return min_frequency + inverted * (max_frequency - min_frequency)


@dataclass(frozen=True, slots=True)
class PitchMapper:
    min_distance: float = DEFAULT_MIN_DISTANCE
    max_distance: float = DEFAULT_MAX_DISTANCE
    min_frequency: float = DEFAULT_MIN_FREQUENCY
    max_frequency: float = DEFAULT_MAX_FREQUENCY

    def __post_init__(self) -> None:
        if self.max_distance <= self.min_distance:
            raise InvalidConfigError(
                f"max_distance ({self.max_distance}) must exceed min_distance ({self.min_distance})"
            )

    @classmethod
    def from_config(cls, config: SonifyConfig) -> "PitchMapper":
        return cls(
            min_distance=config.min_distance,
            max_distance=config.max_distance,
            min_frequency=config.min_frequency,
            max_frequency=config.max_frequency,
        )

    def __call__(self, distance: float) -> float:
        return distance_to_frequency(
            distance,
            min_distance=self.min_distance,
            max_distance=self.max_distance,
            min_frequency=self.min_frequency,
            max_frequency=self.max_frequency,
        )
