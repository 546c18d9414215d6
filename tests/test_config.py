"""
Tests for analysis configuration
"""
from pathlib import Path

import pytest
from pydantic import ValidationError

from stormimpact.config import AnalysisConfig, get_config


def test_defaults():
    """Test documented defaults"""
    config = AnalysisConfig()

    assert config.frequency_threshold == 150
    assert config.fatality_weight == 2.0
    assert config.top_n == 5
    assert config.trend_period == "day"
    assert config.data_url.endswith("StormData.csv.bz2")


def test_cache_path():
    """Test cache path joins directory and filename"""
    config = AnalysisConfig(cache_dir="/tmp/storms", data_filename="storms.csv.bz2")
    assert config.cache_path == Path("/tmp/storms/storms.csv.bz2")


def test_environment_overrides(monkeypatch):
    """Test STORM_ prefixed environment variables are read"""
    monkeypatch.setenv("STORM_FREQUENCY_THRESHOLD", "50")
    monkeypatch.setenv("STORM_FATALITY_WEIGHT", "3.5")
    monkeypatch.setenv("STORM_TOP_N", "10")

    config = get_config()

    assert config.frequency_threshold == 50
    assert config.fatality_weight == 3.5
    assert config.top_n == 10


def test_get_config_overrides():
    """Test keyword overrides take precedence"""
    config = get_config(frequency_threshold=0, trend_period="day")

    assert config.frequency_threshold == 0
    assert config.trend_period == "day"


@pytest.mark.parametrize("overrides", [
    {"top_n": -1},
    {"frequency_threshold": -1},
    {"trend_period": "month"},
])
def test_invalid_values_rejected(overrides):
    """Test out of range settings fail when the config is built"""
    with pytest.raises(ValidationError):
        AnalysisConfig(**overrides)


def test_invalid_environment_value_rejected(monkeypatch):
    """Test a bad trend period from the environment is rejected"""
    monkeypatch.setenv("STORM_TREND_PERIOD", "month")

    with pytest.raises(ValidationError):
        get_config()
