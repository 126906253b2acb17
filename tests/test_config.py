import pytest
from pathlib import Path
from pydantic import ValidationError

from mountfeed.config import MountFeedingConfig, load_config, DEFAULT_CONFIG_PATH

def test_defaults_match_shipped_file():
    defaults = MountFeedingConfig()
    assert defaults.enable is True
    assert defaults.content_speed_multiplier == 0.75
    assert defaults.unhappy_speed_multiplier == 0.50
    assert defaults.decay_amount == 670
    assert defaults.decay_interval == 7500
    assert defaults.decay_only_while_mounted is True
    assert defaults.decay_multiplier.stationary == 0.5
    assert defaults.decay_multiplier.moving == 1.0
    assert defaults.decay_multiplier.flying == 1.5
    assert defaults.default_satisfaction == 999000
    assert defaults.unhappy_no_fly is True
    assert defaults.save_interval == 300000
    assert defaults.dismount_grace_ms == 1000
    assert defaults.benefit_tiers == ((5, 350000), (10, 175000), (14, 80000))

    assert DEFAULT_CONFIG_PATH.exists()
    assert load_config() == defaults

def test_missing_file_yields_defaults(tmp_path):
    assert load_config(tmp_path / "nope.toml") == MountFeedingConfig()

def test_partial_file_overrides(tmp_path):
    path = tmp_path / "mount_feeding.toml"
    path.write_text(
        "[mount_feeding]\n"
        "enable = false\n"
        "decay_amount = 1000\n"
        "unhappy_no_fly = false\n"
        "[mount_feeding.decay_multiplier]\n"
        "flying = 3.0\n",
        encoding="utf-8",
    )
    config = load_config(path)
    assert config.enable is False
    assert config.decay_amount == 1000
    assert config.unhappy_no_fly is False
    assert config.decay_multiplier.flying == 3.0
    # Untouched keys keep their defaults
    assert config.decay_multiplier.stationary == 0.5
    assert config.decay_interval == 7500

def test_tiers_are_sorted_by_gap(tmp_path):
    path = tmp_path / "mount_feeding.toml"
    path.write_text(
        "[mount_feeding]\n"
        "[[mount_feeding.food_benefit]]\n"
        "max_level_gap = 10\n"
        "amount = 100\n"
        "[[mount_feeding.food_benefit]]\n"
        "max_level_gap = 2\n"
        "amount = 900\n",
        encoding="utf-8",
    )
    config = load_config(path)
    assert config.benefit_tiers == ((2, 900), (10, 100))

@pytest.mark.parametrize("overrides", [
    {"content_speed_multiplier": 0.0},
    {"unhappy_speed_multiplier": 1.5},
    {"decay_interval": 0},
    {"save_interval": -1},
    {"default_satisfaction": 1_000_000},
    {"food_benefit": []},
])
def test_invalid_values_rejected(overrides):
    with pytest.raises(ValidationError):
        MountFeedingConfig(**overrides)

def test_config_is_frozen():
    config = MountFeedingConfig()
    with pytest.raises(ValidationError):
        config.enable = False
