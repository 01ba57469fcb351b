"""
Tests for the simulation settings.
"""

from pathlib import Path

import pytest

from pitsim.core.config import BUNDLED_DATA_DIR, DATA_DIR_ENV, SimulationConfig, resolve_data_dir
from pitsim.core.logging import parse_level


def test_defaults():
    """Test the default settings."""
    config = SimulationConfig()
    assert config.max_turns == 1000
    assert config.starting_distance == 5
    assert config.workers == 1
    assert not config.use_vision


@pytest.mark.parametrize(
    "overrides",
    [{"max_turns": 0}, {"workers": 0}, {"chunk_size": 0}, {"starting_distance": 30}],
)
def test_invalid_settings_raise(overrides):
    """Test that nonsensical settings are rejected."""
    with pytest.raises(ValueError):
        SimulationConfig(**overrides)


def test_resolve_data_dir(monkeypatch, tmp_path):
    """Test the precedence explicit > environment > bundled."""
    monkeypatch.delenv(DATA_DIR_ENV, raising=False)
    assert resolve_data_dir() == BUNDLED_DATA_DIR
    monkeypatch.setenv(DATA_DIR_ENV, str(tmp_path))
    assert resolve_data_dir() == tmp_path
    assert resolve_data_dir("elsewhere") == Path("elsewhere")


def test_parse_level():
    """Test level names, with WARNING for unknown ones."""
    assert parse_level("debug") == 10
    assert parse_level("INFO") == 20
    assert parse_level("loud") == 30
