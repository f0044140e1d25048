from __future__ import annotations

import logging

from .audio import Audio, read_wav, write_wav
from .config import SAMPLE_RATE, SonifyConfig, parse_config
from .driver import FrameDriver, green_scanline
from .edges import DARK_TO_LIGHT, LIGHT_TO_DARK, Edge, TransitionType, detect_edges
from .errors import (
    InvalidConfigError,
    InvalidScanlineError,
    PlaybackError,
    ScantoneError,
)
from .logging_utils import configure_logging, log_exception
from .pipeline import ScanAnalysis, Sonifier, sonify
from .pitch import PitchMapper, distance_to_frequency
from .playback import PlaybackBackend, PlaybackSink
from .smoothing import moving_average
from .synth import click_waveform, normalize_peak, render_clicks, silence

__all__ = [
    "SAMPLE_RATE",
    "DARK_TO_LIGHT",
    "LIGHT_TO_DARK",
    "Audio",
    "Edge",
    "FrameDriver",
    "InvalidConfigError",
    "InvalidScanlineError",
    "PitchMapper",
    "PlaybackBackend",
    "PlaybackError",
    "PlaybackSink",
    "ScanAnalysis",
    "ScantoneError",
    "SonifyConfig",
    "Sonifier",
    "TransitionType",
    "click_waveform",
    "configure_logging",
    "detect_edges",
    "distance_to_frequency",
    "green_scanline",
    "log_exception",
    "moving_average",
    "normalize_peak",
    "parse_config",
    "read_wav",
    "render_clicks",
    "silence",
    "sonify",
    "write_wav",
]

__version__ = "0.1.0"

logging.getLogger("scantone").addHandler(logging.NullHandler())
