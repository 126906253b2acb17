import pytest

from mountfeed.config import MountFeedingConfig
from mountfeed.ecs.components import MountSatisfaction
from mountfeed.events import HostEvent, EVT_PLAYER_LOGIN, EVT_SESSION_OPENED, EVT_SESSION_CLOSED
from mountfeed.loop import SimulationLoop
from mountfeed.satisfaction import SatisfactionState

@pytest.fixture
def sim(tmp_path):
    return SimulationLoop(
        db_path=tmp_path / "characters.db",
        journal_path=tmp_path / "journal.jsonl",
        config=MountFeedingConfig(),
    )

def test_new_player_starts_at_default(sim):
    player = sim.login(1, "Aric")
    record = sim.mount_feeding.get_record(player)

    assert record.satisfaction == 999000
    assert record.last_state == SatisfactionState.HAPPY
    assert record.decay_timer == 7500
    assert record.save_timer == 300000
    assert record.last_mount_spell_id == 0

def test_stored_value_is_restored(sim):
    sim.store.save(1, 250000)
    player = sim.login(1, "Aric")
    record = sim.mount_feeding.get_record(player)

    assert record.satisfaction == 250000
    assert record.last_state == SatisfactionState.UNHAPPY

def test_out_of_range_stored_value_is_clamped(sim):
    sim.store.save(1, 5_000_000)
    player = sim.login(1, "Aric")
    assert sim.mount_feeding.get_record(player).satisfaction == 999000

def test_configured_default_for_new_players(tmp_path):
    sim = SimulationLoop(
        db_path=tmp_path / "characters.db",
        journal_path=tmp_path / "journal.jsonl",
        config=MountFeedingConfig(default_satisfaction=400000),
    )
    player = sim.login(1, "Aric")
    assert sim.mount_feeding.get_record(player).satisfaction == 400000

def test_logout_persists_and_relogin_restores(sim):
    player = sim.login(1, "Aric")
    sim.mount_feeding.get_record(player).satisfaction = 500000

    sim.logout(player)
    assert sim.store.load(1) == 500000
    assert sim.online_players() == []

    player = sim.login(1, "Aric")
    assert sim.mount_feeding.get_record(player).satisfaction == 500000

def test_logout_removes_record(sim):
    player = sim.login(1, "Aric")
    sim.bus.emit(HostEvent(event_key="host.player_logout", source="Aric", player_id=1))

    assert MountSatisfaction not in player.components

def test_logout_saves_even_after_feature_disabled(sim):
    player = sim.login(1, "Aric")
    sim.mount_feeding.get_record(player).satisfaction = 420000
    sim.mount_feeding.reload_config(MountFeedingConfig(enable=False))

    sim.logout(player)

    assert sim.store.load(1) == 420000

def test_disabled_login_creates_no_record(tmp_path):
    sim = SimulationLoop(
        db_path=tmp_path / "characters.db",
        journal_path=tmp_path / "journal.jsonl",
        config=MountFeedingConfig(enable=False),
    )
    player = sim.login(1, "Aric")
    sim.logout(player)

    assert sim.store.load(1) is None

def test_players_are_independent(sim):
    sim.store.save(2, 100000)
    aric = sim.login(1, "Aric")
    bryn = sim.login(2, "Bryn")

    sim.mount_feeding.get_record(aric).satisfaction = 700000
    sim.logout(aric)

    assert sim.mount_feeding.get_record(bryn).satisfaction == 100000
    assert sim.store.load(1) == 700000
    assert sim.store.load(2) == 100000

def test_events_for_unknown_players_are_ignored(sim):
    # No entity for player 99: nothing is created, nothing raises
    sim.bus.emit(HostEvent(event_key=EVT_PLAYER_LOGIN, source="ghost", player_id=99))
    assert sim.online_players() == []

def test_session_events_are_emitted(sim):
    seen = []
    sim.bus.subscribe(EVT_SESSION_OPENED, seen.append)
    sim.bus.subscribe(EVT_SESSION_CLOSED, seen.append)

    sim.store.save(1, 500000)
    player = sim.login(1, "Aric")
    sim.logout(player)

    assert [e.event_key for e in seen] == [EVT_SESSION_OPENED, EVT_SESSION_CLOSED]
    assert seen[0].data == {"satisfaction": 500000, "state": "content", "restored": True}
    assert seen[1].data == {"satisfaction": 500000}

def test_reload_config_from_file(sim, tmp_path):
    path = tmp_path / "tuned.toml"
    path.write_text("[mount_feeding]\ncontent_speed_multiplier = 0.9\n", encoding="utf-8")

    config = sim.reload_config(path)

    assert config.content_speed_multiplier == 0.9
    assert sim.mount_feeding.config is config

def test_second_login_reuses_online_session(sim):
    first = sim.login(1, "Aric")
    sim.mount_feeding.get_record(first).satisfaction = 450000

    second = sim.login(1, "Aric")

    assert second == first
    assert len(sim.online_players()) == 1
    assert sim.mount_feeding.get_record(second).satisfaction == 450000
