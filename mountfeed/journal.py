"""
MountFeed — mountfeed/journal.py
Satisfaction Journal: append-only history of mount satisfaction events.
=======================================================================
Version:     0.2
Stack:       Python 3.11+ | stdlib json | bespoke EventBus
Status:      Production-ready. No gameplay logic here.

Architecture notes
------------------
- The journal is a PASSIVE wildcard subscriber. It never emits events.
- Append-only JSONL. Inscribed entries are immutable after write.
- Significance gate (int 1–5): events below JOURNAL_SIGNIFICANCE_MIN
  are discarded silently. Host callbacks and per-tick decay score 1.
- Game time comes from the injected GameClock. Never the system clock.

Significance Scoring Reference (JOURNAL_SIGNIFICANCE_MIN = 2)
-------------------------------------------------------------
  1: noise (host.* callbacks, mount.decayed, mount.speed_captured)
  2: routine (mount.fed, mount.feed_rejected, mount.satisfaction_saved)
  3: notable (mount.state_changed)
  4: session (mount.session_opened, mount.session_closed)
  5: reserved: state_changed into or out of "unhappy" is raised to 5
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from mountfeed.events import (
    EventBus,
    GameClock,
    HostEvent,
    EVT_SESSION_OPENED,
    EVT_SESSION_CLOSED,
    EVT_MOUNT_FED,
    EVT_FEED_REJECTED,
    EVT_STATE_CHANGED,
    EVT_SATISFACTION_DECAYED,
    EVT_SPEED_CAPTURED,
    EVT_SATISFACTION_SAVED,
)


# ============================================================
# DESIGN VARIABLE DEFAULTS
# ============================================================

JOURNAL_SIGNIFICANCE_MIN: int = 2


_SIGNIFICANCE_TABLE: Dict[str, int] = {
    EVT_SATISFACTION_DECAYED:  1,
    EVT_SPEED_CAPTURED:        1,

    EVT_MOUNT_FED:             2,
    EVT_FEED_REJECTED:         2,
    EVT_SATISFACTION_SAVED:    2,

    EVT_STATE_CHANGED:         3,

    EVT_SESSION_OPENED:        4,
    EVT_SESSION_CLOSED:        4,
}

_VERBS: Dict[str, str] = {
    EVT_SESSION_OPENED:       "logged_in",
    EVT_SESSION_CLOSED:       "logged_out",
    EVT_MOUNT_FED:            "fed_mount",
    EVT_FEED_REJECTED:        "refused_food",
    EVT_STATE_CHANGED:        "mood_changed",
    EVT_SATISFACTION_DECAYED: "grew_hungrier",
    EVT_SPEED_CAPTURED:       "mounted",
    EVT_SATISFACTION_SAVED:   "saved",
}


# ============================================================
# JOURNAL ENTRY  (immutable after construction)
# ============================================================

@dataclass(frozen=True)
class JournalEntry:
    event_id: str                       # UUID4 string
    timestamp: Dict[str, Any]           # {ms}
    actor_handle: str                   # player name
    player_id: Optional[int]
    payload: Dict[str, Any]             # {event_type, verb, object, modifier}
    significance: int                   # 1–5

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-safe dict for JSONL write."""
        return {
            "event_id":     self.event_id,
            "timestamp":    self.timestamp,
            "actor_handle": self.actor_handle,
            "player_id":    self.player_id,
            "payload":      self.payload,
            "significance": self.significance,
        }


# ============================================================
# PAYLOAD BUILDER
# ============================================================

def _json_safe(value: Any) -> Any:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, dict):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    return str(value)

def build_payload(event: HostEvent) -> Dict[str, Any]:
    """
    Normalise an event into {event_type, verb, object, modifier}.
    Unknown keys fall back to verb "occurred" with the raw data made
    JSON-safe, since host events may carry live aura or item objects.
    """
    key = event.event_key
    data = event.data

    if key == EVT_STATE_CHANGED:
        return {
            "event_type": key,
            "verb": _VERBS[key],
            "object": data.get("to_state"),
            "modifier": {
                "from_state": data.get("from_state"),
                "satisfaction": data.get("satisfaction"),
                "cause": data.get("cause"),
            },
        }
    if key in (EVT_MOUNT_FED, EVT_FEED_REJECTED):
        modifier = {k: v for k, v in data.items() if k != "item"}
        return {
            "event_type": key,
            "verb": _VERBS[key],
            "object": data.get("item"),
            "modifier": _json_safe(modifier),
        }
    if key in _VERBS:
        return {
            "event_type": key,
            "verb": _VERBS[key],
            "object": event.source,
            "modifier": _json_safe(dict(data)),
        }

    return {
        "event_type": key,
        "verb": "occurred",
        "object": event.source,
        "modifier": _json_safe(dict(data)),
    }

def score_significance(event: HostEvent) -> int:
    base = _SIGNIFICANCE_TABLE.get(event.event_key, 1)
    if event.event_key == EVT_STATE_CHANGED and "unhappy" in (
        event.data.get("from_state"), event.data.get("to_state")
    ):
        base = 5
    return base


# ============================================================
# JOURNAL INSCRIBER
# ============================================================

class SatisfactionJournal:
    """
    Wildcard subscriber that inscribes qualifying events to JSONL.

    Usage:
        bus = EventBus()
        clock = GameClock()
        journal = SatisfactionJournal(bus, Path("sessions/mount_journal.jsonl"), clock)
    """

    def __init__(
        self,
        bus: EventBus,
        journal_path: Path,
        clock: GameClock,
        significance_min: int = JOURNAL_SIGNIFICANCE_MIN,
    ) -> None:
        self.bus = bus
        self.journal_path = journal_path
        self.clock = clock
        self.significance_min = significance_min

        self.journal_path.parent.mkdir(parents=True, exist_ok=True)

        bus.subscribe("*", self._on_event)

    def _on_event(self, event: HostEvent) -> None:
        significance = score_significance(event)
        if significance < self.significance_min:
            return  # below threshold; discard silently
        self._inscribe(event, significance)

    def _inscribe(self, event: HostEvent, significance: int) -> JournalEntry:
        entry = JournalEntry(
            event_id=str(uuid.uuid4()),
            timestamp=self.clock.to_dict(),
            actor_handle=event.source,
            player_id=event.player_id,
            payload=build_payload(event),
            significance=significance,
        )
        self._append_jsonl(entry)
        return entry

    def _append_jsonl(self, entry: JournalEntry) -> None:
        with open(self.journal_path, "a", encoding="utf-8") as fh:
            fh.write(json.dumps(entry.to_dict(), ensure_ascii=False) + "\n")


# ============================================================
# JOURNAL READER  (read-only queries)
# ============================================================

class JournalReader:
    def __init__(self, journal_path: Path) -> None:
        self.journal_path = journal_path

    def all_entries(self) -> List[Dict[str, Any]]:
        """Return all inscribed entries in insertion order."""
        if not self.journal_path.exists():
            return []
        entries = []
        with open(self.journal_path, "r", encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if line:
                    entries.append(json.loads(line))
        return entries

    def by_event_type(self, event_type: str) -> List[Dict[str, Any]]:
        return [
            e for e in self.all_entries()
            if e.get("payload", {}).get("event_type") == event_type
        ]

    def by_actor(self, actor_handle: str) -> List[Dict[str, Any]]:
        return [e for e in self.all_entries() if e.get("actor_handle") == actor_handle]

    def by_significance(self, minimum: int) -> List[Dict[str, Any]]:
        return [e for e in self.all_entries() if e.get("significance", 0) >= minimum]

    def state_changes(self) -> List[Dict[str, Any]]:
        return self.by_event_type(EVT_STATE_CHANGED)
