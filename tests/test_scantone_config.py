import pytest
from pydantic import ValidationError

from scantone.config import SonifyConfig, parse_config
from scantone.errors import InvalidConfigError


def test_defaults() -> None:
    config = SonifyConfig()
    assert config.threshold == 128
    assert config.smoothing_window == 4
    assert config.scan_rate == 1000.0
    assert config.click_duration == pytest.approx(0.01)
    assert (config.min_frequency, config.max_frequency) == (200.0, 4000.0)
    assert (config.min_distance, config.max_distance) == (5, 200)
    assert config.decay_rate == 8.0
    assert config.click_gain == pytest.approx(0.3)
    assert config.silent_duration == pytest.approx(0.1)
    assert config.sample_rate == 44_100


def test_derived_sample_counts() -> None:
    config = SonifyConfig(sample_rate=48_000)
    assert config.click_samples == 480
    assert config.silent_samples == 4800


@pytest.mark.parametrize(
    "payload",
    [
        {"min_distance": 50, "max_distance": 50},
        {"min_distance": 60, "max_distance": 10},
        {"min_frequency": 900.0, "max_frequency": 100.0},
        {"sample_rate": 0},
        {"sample_rate": -44_100},
        {"scan_rate": 0},
        {"smoothing_window": 0},
        {"click_duration": 0},
        {"threshold": 256},
    ],
)
def test_invalid_configs_fail_fast(payload: dict[str, object]) -> None:
    with pytest.raises(ValidationError):
        SonifyConfig.model_validate(payload)
    with pytest.raises(InvalidConfigError):
        parse_config(payload)


def test_unknown_keys_rejected() -> None:
    with pytest.raises(InvalidConfigError):
        parse_config({"threshold": 100, "volume": 3})


def test_config_is_frozen() -> None:
    config = SonifyConfig()
    with pytest.raises(ValidationError):
        config.threshold = 10  # type: ignore[misc]


def test_with_overrides_skips_none() -> None:
    config = SonifyConfig().with_overrides(threshold=90, scan_rate=None)
    assert config.threshold == 90
    assert config.scan_rate == 1000.0


def test_with_overrides_revalidates() -> None:
    with pytest.raises(InvalidConfigError):
        SonifyConfig().with_overrides(max_distance=1)
