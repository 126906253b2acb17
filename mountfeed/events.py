"""
MountFeed — mountfeed/events.py
Event keys, event envelope, event bus and game clock.
=====================================================
Version:     0.2
Stack:       Python 3.11+ | Pydantic v2 | bespoke pub-sub
Status:      Production-ready.

Architecture notes
------------------
- EventBus is Pydantic v2–typed. All events are HostEvent instances.
- Host callbacks (login, aura changes, ticks, item use...) arrive as
  host.* events. The mount subsystem answers with mount.* events.
- Item use is the only host event that negotiates a result: emit()
  returns True when any handler reports the action fully handled.
- The journal receives every event via wildcard subscription ("*").
- Game time is injected through GameClock. Nothing here reads wall time.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


# ============================================================
# CANONICAL EVENT KEYS
# Never use raw strings. Add new keys here only.
# ============================================================

# Host -> mount subsystem
EVT_ITEM_USE              = "host.item_use"
EVT_AURA_APPLY            = "host.aura_apply"
EVT_AURA_REMOVE           = "host.aura_remove"
EVT_PLAYER_LOGIN          = "host.player_login"
EVT_PLAYER_LOGOUT         = "host.player_logout"
EVT_PLAYER_UPDATE         = "host.player_update"
EVT_LEVEL_CHANGED         = "host.level_changed"

# Mount subsystem -> journal / observers
EVT_SESSION_OPENED        = "mount.session_opened"
EVT_SESSION_CLOSED        = "mount.session_closed"
EVT_MOUNT_FED             = "mount.fed"
EVT_FEED_REJECTED         = "mount.feed_rejected"
EVT_STATE_CHANGED         = "mount.state_changed"
EVT_SATISFACTION_DECAYED  = "mount.decayed"
EVT_SPEED_CAPTURED        = "mount.speed_captured"
EVT_SATISFACTION_SAVED    = "mount.satisfaction_saved"


# ============================================================
# EVENT MODEL  (Pydantic v2)
# data may carry live host objects (auras, item entities) for the
# handlers; the journal only ever serialises the flat fields it knows.
# ============================================================

class HostEvent(BaseModel):
    """Base envelope for every event on the bus."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    event_key: str
    source: str
    player_id: Optional[int] = None
    data: Dict[str, Any] = {}


# ============================================================
# EVENT BUS
# ============================================================

HandlerFn = Callable[[HostEvent], Optional[bool]]


class EventBus:
    """
    Bespoke pub-sub. Pass the instance at construction; there is no global singleton.

    Wildcard key "*" receives every emitted event (used by the journal).
    Per-handler errors are swallowed and logged to stderr so emission
    always continues and one broken handler never stalls the update loop.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[HandlerFn]] = {}

    def subscribe(self, event_key: str, handler: HandlerFn) -> None:
        self._subscribers.setdefault(event_key, []).append(handler)

    def unsubscribe(self, event_key: str, handler: HandlerFn) -> None:
        if event_key in self._subscribers:
            self._subscribers[event_key] = [
                h for h in self._subscribers[event_key] if h != handler
            ]

    def emit(self, event: HostEvent) -> bool:
        """
        Deliver event to its subscribers, then to wildcard subscribers.
        Returns True if any handler returned a truthy value (handled).
        """
        targets = (
            self._subscribers.get(event.event_key, [])
            + self._subscribers.get("*", [])
        )
        handled = False
        for handler in targets:
            try:
                if handler(event):
                    handled = True
            except Exception as exc:  # noqa: BLE001
                print(
                    f"[EventBus] Handler error on '{event.event_key}': {exc}",
                    file=sys.stderr,
                )
        return handled


# ============================================================
# GAME CLOCK
# Shared by reference; the loop advances it in place.
# ============================================================

@dataclass
class GameClock:
    """Monotonic game time in milliseconds since server start."""
    now_ms: int = 0

    def advance(self, diff: int) -> None:
        self.now_ms += max(0, diff)

    def to_dict(self) -> Dict[str, Any]:
        return {"ms": self.now_ms}
