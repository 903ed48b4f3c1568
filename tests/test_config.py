"""Tests for configuration loading."""

import pytest
from pydantic import ValidationError

from smart_parking.config import AppConfig, load_config, load_config_or_default
from smart_parking.state.models import SlotType


def test_defaults():
    config = AppConfig()

    assert config.api.port == 8000
    assert config.seed.enabled is False
    assert [b.name for b in config.seed.buildings] == ["A", "B", "C"]
    assert config.log_level == "INFO"


def test_load_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        """
api:
  port: 9000
log_level: debug
seed:
  enabled: true
  random_seed: 42
  buildings:
    - name: D
      floors: 1
      sections: [Main]
      slots_per_section: 4
      special_slots: {electric: 1}
"""
    )

    config = load_config(path)

    assert config.api.port == 9000
    assert config.api.host == "0.0.0.0"
    assert config.log_level == "DEBUG"
    assert config.seed.random_seed == 42
    assert config.seed.buildings[0].special_slots == {SlotType.ELECTRIC: 1}


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")

    assert load_config(path) == AppConfig()


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")

    assert load_config_or_default(tmp_path / "nope.yaml") == AppConfig()


@pytest.mark.parametrize(
    "data",
    [
        {"log_level": "loud"},
        {"seed": {"occupied_ratio": 1.5}},
        {"seed": {"buildings": [{"name": "X", "floors": 0, "sections": ["A"], "slots_per_section": 1}]}},
        {"seed": {"buildings": [{"name": "X", "floors": 1, "sections": [], "slots_per_section": 1}]}},
        {"seed": {"demo_vehicles": []}},
    ],
)
def test_invalid_config(data):
    with pytest.raises(ValidationError):
        AppConfig(**data)
