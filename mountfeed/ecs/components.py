"""
MountFeed — mountfeed/ecs/components.py
ECS Component Definitions for python-tcod-ecs.
==============================================
Version:     0.2
Stack:       Python 3.11+ | python-tcod-ecs
Status:      Production-ready.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional

from mountfeed.satisfaction import SatisfactionState

# Aura effect types understood by the host.
AURA_MOUNTED = "mounted"
AURA_MOD_INCREASE_MOUNTED_SPEED = "mod_increase_mounted_speed"
AURA_MOD_INCREASE_MOUNTED_FLIGHT_SPEED = "mod_increase_mounted_flight_speed"
AURA_FEATHER_FALL = "feather_fall"

MOUNT_SPEED_AURA_TYPES = (AURA_MOD_INCREASE_MOUNTED_SPEED, AURA_MOD_INCREASE_MOUNTED_FLIGHT_SPEED)

# ============================================================
# HOST: PLAYERS, MOVEMENT, AURAS
# ============================================================

@dataclass
class PlayerIdentity:
    player_id: int
    name: str
    level: int = 1

@dataclass
class MovementState:
    is_moving: bool = False
    is_flying: bool = False
    is_falling: bool = False
    can_fly: bool = False

@dataclass
class AuraEffect:
    aura_type: str
    amount: int = 0
    base_amount: Optional[int] = None   # unmodified magnitude; defaults to amount

    def __post_init__(self) -> None:
        if self.base_amount is None:
            self.base_amount = self.amount

@dataclass
class Aura:
    spell_id: int
    name: str
    effects: List[AuraEffect] = field(default_factory=list)
    duration: int = -1          # ms remaining; -1 = until removed
    max_duration: int = -1

    def has_effect(self, aura_type: str) -> bool:
        return any(e.aura_type == aura_type for e in self.effects)

@dataclass
class ActiveAuras:
    auras: List[Aura] = field(default_factory=list)

@dataclass
class ChatLog:
    messages: List[str] = field(default_factory=list)

# ============================================================
# HOST: ITEMS
# ============================================================

@dataclass
class ItemIdentity:
    entity_id: str
    name: str
    description: str
    template_origin: Optional[str] = None
    value: int = 10

@dataclass
class Quantity:
    amount: int = 1
    max_stack: int = 1

@dataclass
class FoodItem:
    food_type: int = 0
    item_level: int = 1

# ============================================================
# MOUNT SATISFACTION SESSION RECORD
# Present on a player entity only while that player is online.
# ============================================================

@dataclass
class MountSatisfaction:
    satisfaction: int
    last_state: SatisfactionState
    pending_speed_update: bool = False
    decay_timer: int = 0
    save_timer: int = 0
    base_ground_speed: int = 0
    base_flying_speed: int = 0
    last_mount_spell_id: int = 0
    dismount_time_ms: int = 0
    flying_disabled: bool = False
