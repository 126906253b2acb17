"""
MountFeed — mountfeed/loop.py
Main Simulation Loop: wires ECS registry, EventBus, clock, store,
journal and the mount feeding subsystem behind a small host API.
=================================================================
Version:     0.2
Stack:       Python 3.11+ | python-tcod-ecs
Status:      Integration entry point.

Update order per loop.update(diff)
----------------------------------
  1. game clock advances by diff
  2. timed auras count down / expire     (aura_tick_system)
  3. host.player_update per online player (one event each)
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import tcod.ecs

from mountfeed.config import MountFeedingConfig, load_config
from mountfeed.ecs.components import (
    PlayerIdentity,
    MovementState,
    ActiveAuras,
    ChatLog,
    AURA_MOUNTED,
)
from mountfeed.ecs.systems import (
    aura_tick_system,
    apply_aura,
    remove_aura,
    get_auras,
    find_player,
    is_mounted,
    rescale_mount_speeds,
    host_event,
    make_mount_aura,
    destroy_item_count,
    item_name,
    send_system_message,
    set_moving_system,
    take_off_system,
    land_system,
)
from mountfeed.events import (
    EventBus,
    GameClock,
    EVT_ITEM_USE,
    EVT_PLAYER_LOGIN,
    EVT_PLAYER_LOGOUT,
    EVT_PLAYER_UPDATE,
    EVT_LEVEL_CHANGED,
)
from mountfeed.item_factory import give_item
from mountfeed.journal import SatisfactionJournal
from mountfeed.mount_feeding import MountFeedingSystem
from mountfeed.storage import SatisfactionStore


class SimulationLoop:
    """
    Core executor for the MountFeed host simulation.
    Owns the Registry, EventBus, GameClock, SatisfactionStore and
    SatisfactionJournal, and the MountFeedingSystem wired to them.
    """
    def __init__(
        self,
        db_path: Optional[Path] = None,
        journal_path: Optional[Path] = None,
        config: Optional[MountFeedingConfig] = None,
    ):
        if db_path is None:
            db_path = Path("sessions/characters.db")
        if journal_path is None:
            journal_path = Path("sessions/mount_journal.jsonl")

        self.registry = tcod.ecs.Registry()
        self.bus = EventBus()
        self.clock = GameClock()
        self.store = SatisfactionStore(db_path)

        self.journal = SatisfactionJournal(bus=self.bus, journal_path=journal_path, clock=self.clock)
        self.mount_feeding = MountFeedingSystem(
            bus=self.bus,
            registry=self.registry,
            store=self.store,
            clock=self.clock,
            config=config if config is not None else load_config(),
        )

    def reload_config(self, config_path: Optional[Path] = None) -> MountFeedingConfig:
        config = load_config(config_path)
        self.mount_feeding.reload_config(config)
        return config

    # ----------------------------------------------------------
    # Sessions
    # ----------------------------------------------------------

    def login(self, player_id: int, name: str, level: int = 1) -> tcod.ecs.Entity:
        """Brings a player online. An already-online player keeps their session."""
        existing = find_player(self.registry, player_id)
        if existing is not None:
            return existing

        player = self.registry.new_entity()
        player.components[PlayerIdentity] = PlayerIdentity(player_id=player_id, name=name, level=level)
        player.components[MovementState] = MovementState()
        player.components[ActiveAuras] = ActiveAuras()
        player.components[ChatLog] = ChatLog()

        self.bus.emit(host_event(player, EVT_PLAYER_LOGIN))
        return player

    def logout(self, player: tcod.ecs.Entity) -> None:
        self.bus.emit(host_event(player, EVT_PLAYER_LOGOUT))
        for item in list(player.relation_tags_many["IsCarrying"]):
            item.clear()
        player.clear()

    def online_players(self) -> List[tcod.ecs.Entity]:
        return list(self.registry.Q.all_of(components=[PlayerIdentity]))

    def update(self, diff: int) -> None:
        """Advance the simulation by diff milliseconds."""
        self.clock.advance(diff)
        aura_tick_system(self.registry, self.bus, diff)

        for player in self.online_players():
            self.bus.emit(host_event(player, EVT_PLAYER_UPDATE, {"diff": diff}))

    def run_for(self, duration: int, step: int = 100) -> None:
        """Calls update() in fixed steps until duration ms have passed."""
        elapsed = 0
        while elapsed < duration:
            diff = min(step, duration - elapsed)
            self.update(diff)
            elapsed += diff

    def set_level(self, player: tcod.ecs.Entity, level: int) -> None:
        ident = player.components[PlayerIdentity]
        old_level = ident.level
        if level == old_level:
            return
        ident.level = level
        if is_mounted(player):
            rescale_mount_speeds(player)
        self.bus.emit(host_event(player, EVT_LEVEL_CHANGED, {"old_level": old_level}))

    # ----------------------------------------------------------
    # Mounts & movement
    # ----------------------------------------------------------

    def mount(self, player: tcod.ecs.Entity, spell_id: int, name: str,
              ground_speed: int, flight_speed: int = 0) -> None:
        """Summons a mount. Any current mount is dismissed first."""
        self.dismount(player)
        apply_aura(player, make_mount_aura(spell_id, name, ground_speed, flight_speed), self.bus)

    def dismount(self, player: tcod.ecs.Entity) -> bool:
        for aura in list(get_auras(player)):
            if aura.has_effect(AURA_MOUNTED):
                return remove_aura(player, aura.spell_id, self.bus)
        return False

    def set_moving(self, player: tcod.ecs.Entity, moving: bool) -> None:
        set_moving_system(player, moving)

    def take_off(self, player: tcod.ecs.Entity) -> bool:
        return take_off_system(player)

    def land(self, player: tcod.ecs.Entity) -> None:
        land_system(player)

    # ----------------------------------------------------------
    # Items
    # ----------------------------------------------------------

    def give_item(self, player: tcod.ecs.Entity, item_path: str, amount: int = 1) -> tcod.ecs.Entity:
        return give_item(self.registry, player, item_path, amount)

    def use_item(self, player: tcod.ecs.Entity, item: tcod.ecs.Entity) -> bool:
        """
        Offers the use to subscribers first. If nobody handles it, edible
        items are simply eaten. Returns True if the item was handled or used.
        """
        if item not in player.relation_tags_many["IsCarrying"]:
            return False

        if self.bus.emit(host_event(player, EVT_ITEM_USE, {"item": item})):
            return True

        if "food" not in item.tags:
            return False

        name = item_name(item)
        destroy_item_count(player, item, 1)
        send_system_message(player, f"You eat the {name}.")
        return True
