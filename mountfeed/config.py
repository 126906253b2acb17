"""
MountFeed — mountfeed/config.py
Mount feeding configuration: TOML on disk, validated by Pydantic.
=================================================================
Version:     0.2
Stack:       Python 3.11+ | Pydantic v2 | tomllib
Status:      Production-ready.

File layout (data/mount_feeding.toml)
-------------------------------------
  [mount_feeding]
  enable = true
  content_speed_multiplier = 0.75
  ...
  [mount_feeding.decay_multiplier]
  stationary = 0.5
  moving = 1.0
  flying = 1.5
  [[mount_feeding.food_benefit]]
  max_level_gap = 5
  amount = 350000

Every key is optional; omitted keys keep their defaults.
"""

import tomllib
from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mountfeed.satisfaction import DEFAULT_FOOD_BENEFIT_TIERS, SATISFACTION_MAX

DATA_DIR = Path(__file__).parent.parent / "data"
DEFAULT_CONFIG_PATH = DATA_DIR / "mount_feeding.toml"

# ================================================================================
# SCHEMAS
# ================================================================================

class DecayMultipliers(BaseModel):
    model_config = ConfigDict(frozen=True)
    stationary: float = Field(default=0.5, ge=0.0)
    moving: float = Field(default=1.0, ge=0.0)
    flying: float = Field(default=1.5, ge=0.0)

class FoodBenefitTier(BaseModel):
    model_config = ConfigDict(frozen=True)
    max_level_gap: int
    amount: int = Field(gt=0)

def _default_tiers() -> List[FoodBenefitTier]:
    return [FoodBenefitTier(max_level_gap=gap, amount=amount) for gap, amount in DEFAULT_FOOD_BENEFIT_TIERS]

class MountFeedingConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    enable: bool = True
    content_speed_multiplier: float = Field(default=0.75, gt=0.0, le=1.0)
    unhappy_speed_multiplier: float = Field(default=0.50, gt=0.0, le=1.0)
    decay_amount: int = Field(default=670, ge=0)
    decay_interval: int = Field(default=7500, gt=0)            # ms
    decay_only_while_mounted: bool = True
    decay_multiplier: DecayMultipliers = Field(default_factory=DecayMultipliers)
    default_satisfaction: int = Field(default=SATISFACTION_MAX, ge=0, le=SATISFACTION_MAX)
    unhappy_no_fly: bool = True
    save_interval: int = Field(default=300000, gt=0)           # ms
    dismount_grace_ms: int = Field(default=1000, ge=0)
    food_benefit: List[FoodBenefitTier] = Field(default_factory=_default_tiers, min_length=1)

    @field_validator("food_benefit")
    @classmethod
    def _sort_tiers(cls, tiers: List[FoodBenefitTier]) -> List[FoodBenefitTier]:
        return sorted(tiers, key=lambda t: t.max_level_gap)

    @property
    def benefit_tiers(self) -> Tuple[Tuple[int, int], ...]:
        return tuple((t.max_level_gap, t.amount) for t in self.food_benefit)

# ================================================================================
# LOADER
# ================================================================================

def load_config(path: Optional[Path] = None) -> MountFeedingConfig:
    """Loads the [mount_feeding] table. A missing file yields the defaults."""
    if path is None:
        path = DEFAULT_CONFIG_PATH

    if not path.exists():
        return MountFeedingConfig()

    with open(path, "rb") as f:
        data = tomllib.load(f)

    return MountFeedingConfig(**data.get("mount_feeding", {}))
