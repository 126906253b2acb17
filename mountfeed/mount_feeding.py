"""
MountFeed — mountfeed/mount_feeding.py
Mount Feeding System: satisfaction lifecycle driven by host events.
===================================================================
Version:     0.2
Stack:       Python 3.11+ | bespoke EventBus | python-tcod-ecs
Status:      Production-ready.

Architecture notes
------------------
- The session record (MountSatisfaction) lives on the player entity for
  as long as the player is online. No module-level store.
- Aura and level events only mark the record dirty
  (pending_speed_update). The next player update captures the base
  speeds and writes the penalty, because the granting system may still
  be adjusting amounts when the aura event fires.
- Within one update, speed capture always runs before decay so a decay
  transition never penalises a stale or zero base speed.
- Item use returns True once the player is (or was just) mounted, which
  replaces normal food behaviour entirely while mounted.

Event handling per host event
-----------------------------
  host.item_use       _on_item_use        feed, or fall through
  host.aura_apply     _on_aura_apply      arm recompute, track mount id
  host.aura_remove    _on_aura_remove     dismount bookkeeping
  host.player_login   _on_login           load / create record
  host.player_logout  _on_logout          persist / discard record
  host.player_update  _on_update          capture, fall, decay, save
  host.level_changed  _on_level_changed   arm recompute
"""

from __future__ import annotations
from typing import Optional

import tcod.ecs
from mountfeed.config import MountFeedingConfig
from mountfeed.ecs.components import (
    PlayerIdentity,
    FoodItem,
    MountSatisfaction,
    AURA_MOUNTED,
    AURA_MOD_INCREASE_MOUNTED_SPEED,
    AURA_MOD_INCREASE_MOUNTED_FLIGHT_SPEED,
    MOUNT_SPEED_AURA_TYPES,
)
from mountfeed.ecs.systems import (
    find_player,
    host_event,
    is_mounted,
    is_moving,
    is_flying,
    item_name,
    get_aura_effects_by_type,
    apply_speed_penalty,
    update_flying_state,
    slow_fall_system,
    destroy_item_count,
    send_system_message,
)
from mountfeed.events import (
    EventBus,
    GameClock,
    HostEvent,
    EVT_ITEM_USE,
    EVT_AURA_APPLY,
    EVT_AURA_REMOVE,
    EVT_PLAYER_LOGIN,
    EVT_PLAYER_LOGOUT,
    EVT_PLAYER_UPDATE,
    EVT_LEVEL_CHANGED,
    EVT_SESSION_OPENED,
    EVT_SESSION_CLOSED,
    EVT_MOUNT_FED,
    EVT_FEED_REJECTED,
    EVT_STATE_CHANGED,
    EVT_SATISFACTION_DECAYED,
    EVT_SPEED_CAPTURED,
    EVT_SATISFACTION_SAVED,
)
from mountfeed.satisfaction import (
    SATISFACTION_MAX,
    SatisfactionState,
    clamp_satisfaction,
    food_benefit,
    speed_multiplier,
    state_of,
)
from mountfeed.storage import SatisfactionStore

MSG_ALREADY_SATISFIED = "Your mount is already fully satisfied."
MSG_TOO_LOW_LEVEL = "That food is too low level for your mount."
MSG_EATS = "Your mount happily eats the {item}."


class MountFeedingSystem:
    def __init__(
        self,
        bus: EventBus,
        registry: tcod.ecs.Registry,
        store: SatisfactionStore,
        clock: GameClock,
        config: Optional[MountFeedingConfig] = None,
    ) -> None:
        self.bus = bus
        self.registry = registry
        self.store = store
        self.clock = clock
        self.config = config if config is not None else MountFeedingConfig()

        bus.subscribe(EVT_ITEM_USE, self._on_item_use)
        bus.subscribe(EVT_AURA_APPLY, self._on_aura_apply)
        bus.subscribe(EVT_AURA_REMOVE, self._on_aura_remove)
        bus.subscribe(EVT_PLAYER_LOGIN, self._on_login)
        bus.subscribe(EVT_PLAYER_LOGOUT, self._on_logout)
        bus.subscribe(EVT_PLAYER_UPDATE, self._on_update)
        bus.subscribe(EVT_LEVEL_CHANGED, self._on_level_changed)

    def reload_config(self, config: MountFeedingConfig) -> None:
        """Swaps tunables at runtime. Running timers finish their current interval."""
        self.config = config

    # ----------------------------------------------------------
    # Record access
    # ----------------------------------------------------------

    def get_record(self, entity: tcod.ecs.Entity) -> Optional[MountSatisfaction]:
        return entity.components.get(MountSatisfaction)

    def _resolve(self, event: HostEvent) -> Optional[tcod.ecs.Entity]:
        return find_player(self.registry, event.player_id)

    # ----------------------------------------------------------
    # Shared effects
    # ----------------------------------------------------------

    def multiplier_for(self, state: SatisfactionState) -> float:
        return speed_multiplier(
            state,
            content=self.config.content_speed_multiplier,
            unhappy=self.config.unhappy_speed_multiplier,
        )

    def state_message(self, state: SatisfactionState) -> str:
        if state == SatisfactionState.HAPPY:
            return "|cff00ff00Your mount is happy and moving at full speed.|r"
        if state == SatisfactionState.CONTENT:
            pct = self.config.content_speed_multiplier * 100.0
            return f"|cffffff00Your mount is getting hungry. Speed reduced to {pct:.0f}%.|r"
        pct = self.config.unhappy_speed_multiplier * 100.0
        if self.config.unhappy_no_fly:
            return f"|cffff0000Your mount is unhappy! Speed reduced to {pct:.0f}% and cannot fly.|r"
        return f"|cffff0000Your mount is unhappy! Speed reduced to {pct:.0f}%.|r"

    def _refresh_effects(self, entity: tcod.ecs.Entity, record: MountSatisfaction, state: SatisfactionState) -> None:
        """Rewrites speed and flight after a state transition (mounted players only)."""
        if not is_mounted(entity):
            return
        if record.base_ground_speed > 0:
            apply_speed_penalty(entity, record, self.multiplier_for(state))
        update_flying_state(entity, record, state == SatisfactionState.UNHAPPY, self.config.unhappy_no_fly)

    def _transition(self, entity: tcod.ecs.Entity, record: MountSatisfaction,
                    old_state: SatisfactionState, cause: str) -> None:
        new_state = state_of(record.satisfaction)
        record.last_state = new_state
        if new_state == old_state:
            return

        send_system_message(entity, self.state_message(new_state))
        self._refresh_effects(entity, record, new_state)
        self.bus.emit(host_event(entity, EVT_STATE_CHANGED, {
            "from_state": old_state.label,
            "to_state": new_state.label,
            "satisfaction": record.satisfaction,
            "cause": cause,
        }))

    def save(self, entity: tcod.ecs.Entity, record: MountSatisfaction) -> None:
        player_id = entity.components[PlayerIdentity].player_id
        self.store.save(player_id, record.satisfaction)
        self.bus.emit(host_event(entity, EVT_SATISFACTION_SAVED, {"satisfaction": record.satisfaction}))

    # ----------------------------------------------------------
    # Feeding
    # ----------------------------------------------------------

    def _was_mounted_recently(self, record: MountSatisfaction) -> bool:
        # last_mount_spell_id survives dismounts, so one mount can open several windows
        if record.last_mount_spell_id == 0:
            return False
        elapsed = self.clock.now_ms - record.dismount_time_ms
        return elapsed < self.config.dismount_grace_ms

    def _on_item_use(self, event: HostEvent) -> bool:
        if not self.config.enable:
            return False

        entity = self._resolve(event)
        item = event.data.get("item")
        if entity is None or item is None:
            return False

        food = item.components.get(FoodItem)
        if food is None or food.food_type == 0:
            return False

        record = self.get_record(entity)
        if record is None:
            return False

        if not is_mounted(entity) and not self._was_mounted_recently(record):
            return False

        # Mounted, or auto-dismounted by the client to eat: intercept from here on
        if record.satisfaction >= SATISFACTION_MAX:
            send_system_message(entity, MSG_ALREADY_SATISFIED)
            self.bus.emit(host_event(entity, EVT_FEED_REJECTED, {"reason": "fully_satisfied", "item": item_name(item)}))
            return True

        level = entity.components[PlayerIdentity].level
        benefit = food_benefit(level, food.item_level, self.config.benefit_tiers)
        if benefit == 0:
            send_system_message(entity, MSG_TOO_LOW_LEVEL)
            self.bus.emit(host_event(entity, EVT_FEED_REJECTED, {"reason": "too_low_level", "item": item_name(item)}))
            return True

        name = item_name(item)
        destroy_item_count(entity, item, 1)

        old_state = state_of(record.satisfaction)
        record.satisfaction = min(record.satisfaction + benefit, SATISFACTION_MAX)
        send_system_message(entity, MSG_EATS.format(item=name))
        self.bus.emit(host_event(entity, EVT_MOUNT_FED, {
            "item": name,
            "benefit": benefit,
            "satisfaction": record.satisfaction,
        }))
        self._transition(entity, record, old_state, cause="feeding")
        return True

    # ----------------------------------------------------------
    # Auras
    # ----------------------------------------------------------

    def _on_aura_apply(self, event: HostEvent) -> None:
        if not self.config.enable:
            return

        aura = event.data.get("aura")
        if aura is None:
            return

        has_mount_speed = any(aura.has_effect(t) for t in MOUNT_SPEED_AURA_TYPES)
        is_mount_aura = aura.has_effect(AURA_MOUNTED)
        if not has_mount_speed and not is_mount_aura:
            return

        entity = self._resolve(event)
        record = self.get_record(entity) if entity is not None else None
        if record is None:
            return

        if has_mount_speed:
            record.pending_speed_update = True

        if is_mount_aura:
            record.last_mount_spell_id = aura.spell_id
            record.flying_disabled = False

    def _on_aura_remove(self, event: HostEvent) -> None:
        if not self.config.enable:
            return

        aura = event.data.get("aura")
        if aura is None or not aura.has_effect(AURA_MOUNTED):
            return

        entity = self._resolve(event)
        record = self.get_record(entity) if entity is not None else None
        if record is None:
            return

        # Arms the grace window: clients dismount before the food use arrives
        record.dismount_time_ms = self.clock.now_ms
        record.base_ground_speed = 0
        record.base_flying_speed = 0
        record.pending_speed_update = False
        record.flying_disabled = False

    # ----------------------------------------------------------
    # Lifecycle
    # ----------------------------------------------------------

    def _on_login(self, event: HostEvent) -> None:
        if not self.config.enable:
            return

        entity = self._resolve(event)
        if entity is None:
            return

        player_id = entity.components[PlayerIdentity].player_id
        stored = self.store.load(player_id)
        satisfaction = clamp_satisfaction(stored if stored is not None else self.config.default_satisfaction)

        record = MountSatisfaction(
            satisfaction=satisfaction,
            last_state=state_of(satisfaction),
            decay_timer=self.config.decay_interval,
            save_timer=self.config.save_interval,
        )
        entity.components[MountSatisfaction] = record

        self.bus.emit(host_event(entity, EVT_SESSION_OPENED, {
            "satisfaction": satisfaction,
            "state": record.last_state.label,
            "restored": stored is not None,
        }))

    def _on_logout(self, event: HostEvent) -> None:
        entity = self._resolve(event)
        if entity is None:
            return

        record = self.get_record(entity)
        if record is None:
            return

        self.save(entity, record)
        del entity.components[MountSatisfaction]
        self.bus.emit(host_event(entity, EVT_SESSION_CLOSED, {"satisfaction": record.satisfaction}))

    def _on_level_changed(self, event: HostEvent) -> None:
        if not self.config.enable:
            return

        entity = self._resolve(event)
        if entity is None or not is_mounted(entity):
            return

        record = self.get_record(entity)
        if record is None:
            return

        # Mount scaling may recompute amounts on level change; re-capture
        record.pending_speed_update = True

    # ----------------------------------------------------------
    # Update (once per player per server tick)
    # ----------------------------------------------------------

    def _on_update(self, event: HostEvent) -> None:
        if not self.config.enable:
            return

        entity = self._resolve(event)
        if entity is None:
            return

        record = self.get_record(entity)
        if record is None:
            return

        diff = int(event.data.get("diff", 0))

        self._capture_speeds(entity, record)
        self._reconcile_flight(entity, record)
        self._decay(entity, record, diff)

        record.save_timer -= diff
        if record.save_timer <= 0:
            record.save_timer = self.config.save_interval
            self.save(entity, record)

    def _capture_speeds(self, entity: tcod.ecs.Entity, record: MountSatisfaction) -> None:
        if not record.pending_speed_update or not is_mounted(entity):
            return

        record.pending_speed_update = False

        # Amounts already include any external scaling
        ground = get_aura_effects_by_type(entity, AURA_MOD_INCREASE_MOUNTED_SPEED)
        flying = get_aura_effects_by_type(entity, AURA_MOD_INCREASE_MOUNTED_FLIGHT_SPEED)
        record.base_ground_speed = ground[0].amount if ground else 0
        record.base_flying_speed = flying[0].amount if flying else 0

        state = state_of(record.satisfaction)
        if state != SatisfactionState.HAPPY:
            apply_speed_penalty(entity, record, self.multiplier_for(state))
        update_flying_state(entity, record, state == SatisfactionState.UNHAPPY, self.config.unhappy_no_fly)

        # Re-announce on every mount / level change, not only on transition
        send_system_message(entity, self.state_message(state))
        self.bus.emit(host_event(entity, EVT_SPEED_CAPTURED, {
            "base_ground_speed": record.base_ground_speed,
            "base_flying_speed": record.base_flying_speed,
            "state": state.label,
        }))

    def _reconcile_flight(self, entity: tcod.ecs.Entity, record: MountSatisfaction) -> None:
        if not record.flying_disabled or not is_mounted(entity):
            return

        slow_fall_system(entity, self.bus)

        # Flight returns on the first update that finds the mount no longer unhappy
        if state_of(record.satisfaction) != SatisfactionState.UNHAPPY:
            update_flying_state(entity, record, False, self.config.unhappy_no_fly)

    def _decay(self, entity: tcod.ecs.Entity, record: MountSatisfaction, diff: int) -> None:
        mounted = is_mounted(entity)
        if self.config.decay_only_while_mounted and not mounted:
            return

        record.decay_timer -= diff
        if record.decay_timer > 0:
            return
        record.decay_timer = self.config.decay_interval

        # Sampled at decay time only, not integrated over the interval
        mults = self.config.decay_multiplier
        mult = mults.stationary
        if mounted:
            if is_flying(entity):
                mult = mults.flying
            elif is_moving(entity):
                mult = mults.moving

        amount = int(self.config.decay_amount * mult)
        old_state = state_of(record.satisfaction)
        record.satisfaction = max(0, record.satisfaction - amount)
        self.bus.emit(host_event(entity, EVT_SATISFACTION_DECAYED, {
            "amount": amount,
            "satisfaction": record.satisfaction,
        }))
        self._transition(entity, record, old_state, cause="decay")
