from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import numpy as np
import pytest

from scantone.audio import read_wav
from scantone.cli import build_parser, demo_scanline, load_scanlines, main
from scantone.errors import InvalidScanlineError
from scantone.logging_utils import LOG_DIR_ENV


@pytest.fixture(autouse=True)
def _log_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv(LOG_DIR_ENV, str(tmp_path / "logs"))
    logger = logging.getLogger("scantone")
    before = list(logger.handlers)
    yield
    for handler in list(logger.handlers):
        if handler not in before:
            logger.removeHandler(handler)
            handler.close()


def test_demo_scanline() -> None:
    scanline = demo_scanline()
    assert scanline.size == 100
    assert np.flatnonzero(scanline).tolist() == list(range(40, 60))


def test_demo_writes_wav(tmp_path: Path) -> None:
    target = tmp_path / "demo.wav"
    assert main(["demo", "-o", str(target)]) == 0
    samples, sample_rate = read_wav(target)
    assert sample_rate == 44_100
    assert samples.size == 4410
    assert float(np.max(np.abs(samples))) == pytest.approx(1.0, abs=1e-6)


def test_render_text_scanline(tmp_path: Path) -> None:
    source = tmp_path / "line.txt"
    source.write_text(", ".join(str(v) for v in demo_scanline()), encoding="utf-8")
    target = tmp_path / "line.wav"
    assert main(["render", str(source), "-o", str(target), "--sample-rate", "48000"]) == 0
    samples, sample_rate = read_wav(target)
    assert (samples.size, sample_rate) == (4800, 48_000)


def test_render_npy_stack_concatenates(tmp_path: Path) -> None:
    source = tmp_path / "stack.npy"
    np.save(source, np.stack([demo_scanline(), np.zeros(100, dtype=np.uint8)]))
    target = tmp_path / "stack.wav"
    assert main(["render", str(source), "-o", str(target)]) == 0
    samples, _ = read_wav(target)
    assert samples.size == 2 * 4410
    assert np.any(samples[:4410])
    assert not np.any(samples[4410:])


def test_load_scanlines_from_frame(tmp_path: Path) -> None:
    frame = np.zeros((3, 50, 3), dtype=np.uint8)
    frame[2, 10:20, 1] = 255
    source = tmp_path / "frame.npy"
    np.save(source, frame)
    (scanline,) = load_scanlines(source, row=2)
    assert np.flatnonzero(scanline).tolist() == list(range(10, 20))


def test_load_scanlines_rejects_garbage(tmp_path: Path) -> None:
    source = tmp_path / "bad.txt"
    source.write_text("1 2 three", encoding="utf-8")
    with pytest.raises(InvalidScanlineError):
        load_scanlines(source)


def test_invalid_config_returns_error(tmp_path: Path) -> None:
    assert main(["demo", "-o", str(tmp_path / "x.wav"), "--window", "0"]) == 1
    assert not (tmp_path / "x.wav").exists()


def test_parser_requires_command() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args([])
