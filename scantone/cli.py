from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import Any

import numpy as np
from numpy.typing import NDArray
from rich.console import Console

from .audio import Audio, write_wav
from .config import SonifyConfig
from .driver import green_scanline
from .errors import InvalidScanlineError
from .logging_utils import DEBUG_ENV, configure_logging, log_exception
from .pipeline import Sonifier
from .playback import PlaybackSink

_LOGGER = logging.getLogger("scantone.cli")
_CONSOLE = Console(stderr=True)
_DEMO_LENGTH = 100
_DEMO_BAND = slice(40, 60)


def demo_scanline() -> NDArray[np.uint8]:
    """A dark 100-sample scanline with one bright band over samples 40..59."""

    scanline = np.zeros(_DEMO_LENGTH, dtype=np.uint8)
    scanline[_DEMO_BAND] = 255
    return scanline


def load_scanlines(path: Path, *, row: int | None = None) -> list[NDArray[Any]]:
    """Read scanlines from a ``.npy`` array or a text file of brightness values.

    A 1-D array is one scanline, a 2-D array is one scanline per row, and a
    3-D array is treated as an RGB(A) frame whose green channel is sampled.
    """

    if path.suffix == ".npy":
        data = np.load(path, allow_pickle=False)
    else:
        tokens = path.read_text(encoding="utf-8").replace(",", " ").split()
        try:
            data = np.array([int(token) for token in tokens], dtype=np.int64)
        except ValueError as exc:
            raise InvalidScanlineError(f"{path} holds non-integer brightness values") from exc

    match data.ndim:
        case 1:
            return [data]
        case 2:
            return list(data)
        case 3:
            return [green_scanline(data, row)]
        case _:
            raise InvalidScanlineError(f"cannot read scanlines from array of shape {data.shape}")


def _add_config_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--threshold", type=int, default=None)
    parser.add_argument("--window", dest="smoothing_window", type=int, default=None)
    parser.add_argument("--scan-rate", dest="scan_rate", type=float, default=None)
    parser.add_argument("--sample-rate", dest="sample_rate", type=int, default=None)


def _config_from_args(args: argparse.Namespace) -> SonifyConfig:
    return SonifyConfig().with_overrides(
        threshold=args.threshold,
        smoothing_window=args.smoothing_window,
        scan_rate=args.scan_rate,
        sample_rate=args.sample_rate,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="scantone")
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="Render brightness scanlines to a wav file.")
    render.add_argument("input", type=Path)
    render.add_argument("-o", "--output", type=Path, default=Path("scantone.wav"))
    render.add_argument("--row", type=int, default=None, help="Frame row to sample.")
    render.add_argument("--play", action="store_true", help="Also play the result.")
    _add_config_options(render)

    demo = sub.add_parser("demo", help="Render a single bright band as a click.")
    demo.add_argument("-o", "--output", type=Path, default=Path("demo.wav"))
    demo.add_argument("--play", action="store_true")
    _add_config_options(demo)
    return parser


def _play(audio: Audio) -> None:
    with PlaybackSink(sample_rate=audio.sample_rate) as sink:
        _CONSOLE.print(f"Playing {audio.duration:.2f}s of audio")
        sink.submit(audio)


def _render_error(context: str, exc: BaseException) -> None:
    _CONSOLE.print(f"[bold red]{context} failed:[/] {type(exc).__name__}: {exc}")


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    try:
        parser = build_parser()
        args = parser.parse_args(argv)
        sonifier = Sonifier(_config_from_args(args))

        if args.command == "demo":
            audio = sonifier.render(demo_scanline())
            path = audio.save(args.output)
            _CONSOLE.print(f"Wrote demo to {path} (sr={audio.sample_rate})")
            if args.play:
                _play(audio)
            return 0

        if args.command == "render":
            scanlines = load_scanlines(args.input, row=args.row)
            with _CONSOLE.status(f"Rendering {len(scanlines)} scanline(s)"):
                rendered = [sonifier.render(scanline) for scanline in scanlines]
            path = write_wav(
                args.output,
                [audio.samples for audio in rendered],
                sample_rate=sonifier.sample_rate,
            )
            _CONSOLE.print(f"Wrote {len(rendered)} scanline(s) to {path}")
            if args.play and rendered:
                joined = np.concatenate([audio.samples for audio in rendered])
                _play(Audio(samples=joined, sample_rate=sonifier.sample_rate))
            return 0

        parser.print_help()
        return 1
    except Exception as exc:
        debug = bool(os.environ.get(DEBUG_ENV))
        _LOGGER.warning("scantone CLI failed: %s", exc, exc_info=debug)
        log_exception("scantone CLI", exc)
        _render_error("scantone CLI", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
