"""
MountFeed — mountfeed/ecs/systems.py
ECS Systems: host capabilities (auras, flight, items, chat) and the
shared mount effects the satisfaction subsystem writes through them.
====================================================================
Version:     0.2
Stack:       Python 3.11+ | python-tcod-ecs
Status:      Production-ready.

Architecture notes
------------------
- Systems are plain functions operating on tcod.ecs entities.
- Aura changes are announced on the EventBus as host.aura_* events.
- apply_speed_penalty / update_flying_state are the only writers of
  mount speed amounts and flight capability on behalf of satisfaction.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional

import tcod.ecs
from mountfeed.ecs.components import (
    PlayerIdentity,
    MovementState,
    Aura,
    AuraEffect,
    ActiveAuras,
    ChatLog,
    ItemIdentity,
    Quantity,
    MountSatisfaction,
    AURA_MOUNTED,
    AURA_MOD_INCREASE_MOUNTED_SPEED,
    AURA_MOD_INCREASE_MOUNTED_FLIGHT_SPEED,
    AURA_FEATHER_FALL,
    MOUNT_SPEED_AURA_TYPES,
)
from mountfeed.events import (
    EventBus,
    HostEvent,
    EVT_AURA_APPLY,
    EVT_AURA_REMOVE,
)

SLOW_FALL_SPELL_ID: int = 130
SLOW_FALL_DURATION_MS: int = 30000

# ============================================================
# PLAYER QUERIES
# ============================================================

def find_player(registry: tcod.ecs.Registry, player_id: Optional[int]) -> Optional[tcod.ecs.Entity]:
    """Finds an online player entity by its persistent identity."""
    if player_id is None:
        return None
    for entity in registry.Q.all_of(components=[PlayerIdentity]):
        if entity.components[PlayerIdentity].player_id == player_id:
            return entity
    return None

def player_name(entity: tcod.ecs.Entity) -> str:
    if PlayerIdentity in entity.components:
        return entity.components[PlayerIdentity].name
    return str(entity)

def host_event(entity: tcod.ecs.Entity, event_key: str, data: Optional[Dict[str, Any]] = None) -> HostEvent:
    """Builds an event envelope addressed from a player entity."""
    ident = entity.components.get(PlayerIdentity)
    return HostEvent(
        event_key=event_key,
        source=player_name(entity),
        player_id=ident.player_id if ident else None,
        data=data or {},
    )

def _movement(entity: tcod.ecs.Entity) -> MovementState:
    if MovementState not in entity.components:
        entity.components[MovementState] = MovementState()
    return entity.components[MovementState]

def is_moving(entity: tcod.ecs.Entity) -> bool:
    return _movement(entity).is_moving

def is_flying(entity: tcod.ecs.Entity) -> bool:
    return _movement(entity).is_flying

def is_falling(entity: tcod.ecs.Entity) -> bool:
    return _movement(entity).is_falling

# ============================================================
# AURA SYSTEMS
# ============================================================

def get_auras(entity: tcod.ecs.Entity) -> List[Aura]:
    if ActiveAuras not in entity.components:
        return []
    return entity.components[ActiveAuras].auras

def get_aura(entity: tcod.ecs.Entity, spell_id: int) -> Optional[Aura]:
    for aura in get_auras(entity):
        if aura.spell_id == spell_id:
            return aura
    return None

def get_aura_effects_by_type(entity: tcod.ecs.Entity, aura_type: str) -> List[AuraEffect]:
    """All live effects of one type, in aura application order."""
    return [e for aura in get_auras(entity) for e in aura.effects if e.aura_type == aura_type]

def is_mounted(entity: tcod.ecs.Entity) -> bool:
    return bool(get_aura_effects_by_type(entity, AURA_MOUNTED))

def apply_aura(entity: tcod.ecs.Entity, aura: Aura, bus: EventBus) -> Aura:
    """
    Adds an aura and announces it. Re-applying a spell already present
    refreshes its duration instead (no new announcement).
    """
    existing = get_aura(entity, aura.spell_id)
    if existing is not None:
        refresh_aura(existing)
        return existing

    if ActiveAuras not in entity.components:
        entity.components[ActiveAuras] = ActiveAuras()
    entity.components[ActiveAuras].auras.append(aura)

    if any(aura.has_effect(t) for t in MOUNT_SPEED_AURA_TYPES):
        rescale_mount_speeds(entity)

    if aura.has_effect(AURA_MOD_INCREASE_MOUNTED_FLIGHT_SPEED):
        _movement(entity).can_fly = True

    bus.emit(host_event(entity, EVT_AURA_APPLY, {"aura": aura}))
    return aura

def remove_aura(entity: tcod.ecs.Entity, spell_id: int, bus: EventBus) -> bool:
    aura = get_aura(entity, spell_id)
    if aura is None:
        return False

    entity.components[ActiveAuras].auras.remove(aura)

    if aura.has_effect(AURA_MOD_INCREASE_MOUNTED_FLIGHT_SPEED):
        set_can_fly(entity, False)

    bus.emit(host_event(entity, EVT_AURA_REMOVE, {"aura": aura}))
    return True

def rescale_mount_speeds(entity: tcod.ecs.Entity) -> None:
    """
    Host mount scaling: recomputes every mounted speed amount from its
    unmodified magnitude. Runs before aura-apply and level-change
    announcements, so listeners re-capture clean amounts.
    """
    for aura_type in MOUNT_SPEED_AURA_TYPES:
        for effect in get_aura_effects_by_type(entity, aura_type):
            effect.amount = effect.base_amount

def refresh_aura(aura: Aura) -> None:
    aura.duration = aura.max_duration

def aura_tick_system(registry: tcod.ecs.Registry, bus: EventBus, diff: int) -> None:
    """Counts down timed auras and removes the ones that ran out."""
    for entity in list(registry.Q.all_of(components=[ActiveAuras])):
        expired = []
        for aura in entity.components[ActiveAuras].auras:
            if aura.duration < 0:
                continue
            aura.duration -= diff
            if aura.duration <= 0:
                expired.append(aura.spell_id)
        for spell_id in expired:
            remove_aura(entity, spell_id, bus)

def make_mount_aura(spell_id: int, name: str, ground_speed: int, flight_speed: int = 0) -> Aura:
    """A mount spell: the mounted marker plus its speed effects."""
    effects = [AuraEffect(aura_type=AURA_MOUNTED)]
    if ground_speed > 0:
        effects.append(AuraEffect(aura_type=AURA_MOD_INCREASE_MOUNTED_SPEED, amount=ground_speed))
    if flight_speed > 0:
        effects.append(AuraEffect(aura_type=AURA_MOD_INCREASE_MOUNTED_FLIGHT_SPEED, amount=flight_speed))
    return Aura(spell_id=spell_id, name=name, effects=effects)

def make_slow_fall_aura() -> Aura:
    return Aura(
        spell_id=SLOW_FALL_SPELL_ID,
        name="Slow Fall",
        effects=[AuraEffect(aura_type=AURA_FEATHER_FALL)],
        duration=SLOW_FALL_DURATION_MS,
        max_duration=SLOW_FALL_DURATION_MS,
    )

# ============================================================
# MOVEMENT SYSTEMS
# ============================================================

def set_can_fly(entity: tcod.ecs.Entity, can_fly: bool) -> None:
    """Toggles flight capability. Losing it mid-air starts a descent."""
    movement = _movement(entity)
    movement.can_fly = can_fly
    if not can_fly and movement.is_flying:
        movement.is_flying = False
        movement.is_falling = True

def take_off_system(entity: tcod.ecs.Entity) -> bool:
    movement = _movement(entity)
    if not is_mounted(entity) or not movement.can_fly:
        return False
    movement.is_flying = True
    movement.is_falling = False
    return True

def land_system(entity: tcod.ecs.Entity) -> None:
    movement = _movement(entity)
    movement.is_flying = False
    movement.is_falling = False

def set_moving_system(entity: tcod.ecs.Entity, moving: bool) -> None:
    _movement(entity).is_moving = moving

# ============================================================
# INVENTORY & CHAT SYSTEMS
# ============================================================

def destroy_item_count(actor: tcod.ecs.Entity, item: tcod.ecs.Entity, count: int = 1) -> int:
    """
    Destroys up to count units of a carried item stack.
    Returns the number actually destroyed. An emptied stack is removed
    from the inventory and cleared.
    """
    if item not in actor.relation_tags_many["IsCarrying"]:
        return 0

    qty = item.components.get(Quantity)
    available = qty.amount if qty else 1
    destroyed = min(count, available)

    if qty and qty.amount > destroyed:
        qty.amount -= destroyed
    else:
        actor.relation_tags_many["IsCarrying"].remove(item)
        item.clear()
    return destroyed

def item_name(item: tcod.ecs.Entity) -> str:
    if ItemIdentity in item.components:
        return item.components[ItemIdentity].name
    return str(item)

def send_system_message(entity: tcod.ecs.Entity, text: str) -> None:
    if ChatLog not in entity.components:
        entity.components[ChatLog] = ChatLog()
    entity.components[ChatLog].messages.append(text)

# ============================================================
# MOUNT SATISFACTION EFFECTS
# ============================================================

def apply_speed_penalty(entity: tcod.ecs.Entity, record: MountSatisfaction, multiplier: float) -> None:
    """
    Rewrites every mounted speed effect from the captured base speeds.
    Always derived from the base, so repeated calls are idempotent.
    """
    for effect in get_aura_effects_by_type(entity, AURA_MOD_INCREASE_MOUNTED_SPEED):
        new_amount = int(record.base_ground_speed * multiplier)
        if new_amount > 0:
            effect.amount = new_amount

    for effect in get_aura_effects_by_type(entity, AURA_MOD_INCREASE_MOUNTED_FLIGHT_SPEED):
        new_amount = int(record.base_flying_speed * multiplier)
        if new_amount > 0:
            effect.amount = new_amount

def update_flying_state(entity: tcod.ecs.Entity, record: MountSatisfaction, unhappy: bool, unhappy_no_fly: bool) -> None:
    """Suspends flight while unhappy and restores it once that passes. Ground mounts are left alone."""
    if not unhappy_no_fly or not is_mounted(entity):
        return

    if not get_aura_effects_by_type(entity, AURA_MOD_INCREASE_MOUNTED_FLIGHT_SPEED):
        return

    if unhappy and not record.flying_disabled:
        # Stays mounted but descends and cannot take off
        set_can_fly(entity, False)
        record.flying_disabled = True
    elif not unhappy and record.flying_disabled:
        set_can_fly(entity, True)
        record.flying_disabled = False

def slow_fall_system(entity: tcod.ecs.Entity, bus: EventBus) -> None:
    """
    Keeps Slow Fall up for as long as a flight-suspended mount is
    falling, and drops it the moment the player is grounded.
    """
    if is_falling(entity):
        aura = get_aura(entity, SLOW_FALL_SPELL_ID)
        if aura is not None:
            refresh_aura(aura)
        else:
            apply_aura(entity, make_slow_fall_aura(), bus)
    elif get_aura(entity, SLOW_FALL_SPELL_ID) is not None:
        remove_aura(entity, SLOW_FALL_SPELL_ID, bus)
