from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

import numpy as np

from .smoothing import BrightnessInput, as_brightness

_LOGGER = logging.getLogger("scantone.edges")

TransitionType = Literal["dark_to_light", "light_to_dark"]
DARK_TO_LIGHT: TransitionType = "dark_to_light"
LIGHT_TO_DARK: TransitionType = "light_to_dark"


@dataclass(frozen=True, slots=True)
class Edge:
    """A threshold crossing between ``position - 1`` and ``position``.

    ``distance`` counts samples since the previous edge, or since the start
    of the scanline for the first edge.
    """

    position: int
    transition: TransitionType
    distance: int

    @property
    def is_rising(self) -> bool:
        return self.transition == DARK_TO_LIGHT


def light_states(smoothed: BrightnessInput, threshold: int) -> np.ndarray:
    """Per-sample ``sample > threshold`` flags."""

    return as_brightness(smoothed) > threshold


def detect_edges(smoothed: BrightnessInput, threshold: int) -> list[Edge]:
    """List every light/dark state change in scan order."""

    light = light_states(smoothed, threshold)
    if light.size < 2:
        return []

    positions = np.flatnonzero(light[1:] != light[:-1]) + 1
    if positions.size == 0:
        return []
    distances = np.diff(positions, prepend=0)

    edges = [
        Edge(
            position=int(position),
            transition=DARK_TO_LIGHT if light[position] else LIGHT_TO_DARK,
            distance=int(distance),
        )
        for position, distance in zip(positions, distances)
    ]
    _LOGGER.debug("Detected %d edges over %d samples", len(edges), light.size)
    return edges
