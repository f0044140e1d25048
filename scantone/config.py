from __future__ import annotations

import logging
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .errors import InvalidConfigError

_LOGGER = logging.getLogger("scantone.config")

SAMPLE_RATE = 44_100

DEFAULT_THRESHOLD = 128
DEFAULT_SMOOTHING_WINDOW = 4
DEFAULT_SCAN_RATE = 1000.0
DEFAULT_CLICK_DURATION = 0.01
DEFAULT_MIN_FREQUENCY = 200.0
DEFAULT_MAX_FREQUENCY = 4000.0
DEFAULT_MIN_DISTANCE = 5
DEFAULT_MAX_DISTANCE = 200
DEFAULT_DECAY_RATE = 8.0
DEFAULT_CLICK_GAIN = 0.3
DEFAULT_SILENT_DURATION = 0.1


class SonifyConfig(BaseModel):
    """Fixed constants for one scanline-to-audio pipeline.

    ``scan_rate`` is the number of input samples that map to one second of
    audio; ``sample_rate`` is supplied by the playback backend.
    """

    threshold: int = Field(default=DEFAULT_THRESHOLD, ge=0, le=255)
    smoothing_window: int = Field(default=DEFAULT_SMOOTHING_WINDOW, ge=1)
    scan_rate: float = Field(default=DEFAULT_SCAN_RATE, gt=0)
    click_duration: float = Field(default=DEFAULT_CLICK_DURATION, gt=0)
    min_frequency: float = Field(default=DEFAULT_MIN_FREQUENCY, gt=0)
    max_frequency: float = Field(default=DEFAULT_MAX_FREQUENCY, gt=0)
    min_distance: int = Field(default=DEFAULT_MIN_DISTANCE, ge=0)
    max_distance: int = Field(default=DEFAULT_MAX_DISTANCE, ge=0)
    decay_rate: float = Field(default=DEFAULT_DECAY_RATE, ge=0)
    click_gain: float = Field(default=DEFAULT_CLICK_GAIN, gt=0)
    silent_duration: float = Field(default=DEFAULT_SILENT_DURATION, ge=0)
    sample_rate: int = Field(default=SAMPLE_RATE, gt=0)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def _check_ranges(self) -> "SonifyConfig":
        if self.max_distance <= self.min_distance:
            raise ValueError(
                f"max_distance ({self.max_distance}) must exceed min_distance ({self.min_distance})"
            )
        if self.max_frequency < self.min_frequency:
            raise ValueError(
                f"max_frequency ({self.max_frequency}) must not be below "
                f"min_frequency ({self.min_frequency})"
            )
        return self

    @property
    def click_samples(self) -> int:
        return int(self.click_duration * self.sample_rate)

    @property
    def silent_samples(self) -> int:
        return int(self.silent_duration * self.sample_rate)

    def with_overrides(self, **overrides: Any) -> "SonifyConfig":
        """Return a re-validated copy with the non-None overrides applied."""

        payload = self.model_dump()
        payload.update({key: value for key, value in overrides.items() if value is not None})
        return parse_config(payload)


def parse_config(payload: Mapping[str, Any]) -> SonifyConfig:
    """Parse a config payload, raising InvalidConfigError on failure."""

    try:
        return SonifyConfig.model_validate(payload)
    except ValidationError as exc:
        _LOGGER.warning("Failed to parse sonify config: %s", exc, exc_info=True)
        raise InvalidConfigError(str(exc)) from exc
