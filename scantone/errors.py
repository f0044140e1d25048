from __future__ import annotations


class ScantoneError(Exception):
    """Base error for the scantone library."""


class InvalidConfigError(ScantoneError):
    """Raised when a sonification config cannot be parsed or validated."""


class InvalidScanlineError(ScantoneError):
    """Raised when brightness input is not a 1-D array of 8-bit values."""


class PlaybackError(ScantoneError):
    """Raised when audio cannot be handed to a playback backend."""
