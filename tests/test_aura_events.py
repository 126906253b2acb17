"""
MountFeed — tests/test_aura_events.py
How host aura callbacks arm speed recapture and track the last mount.
"""

import pytest

from mountfeed.config import MountFeedingConfig
from mountfeed.ecs.components import Aura, AuraEffect, AURA_MOD_INCREASE_MOUNTED_SPEED
from mountfeed.ecs.systems import apply_aura, remove_aura, get_aura, make_mount_aura, is_mounted
from mountfeed.loop import SimulationLoop

@pytest.fixture
def sim(tmp_path):
    return SimulationLoop(
        db_path=tmp_path / "characters.db",
        journal_path=tmp_path / "journal.jsonl",
        config=MountFeedingConfig(),
    )

def test_unrelated_aura_is_ignored(sim):
    player = sim.login(1, "Aric")
    shield = Aura(spell_id=17, name="Power Word: Shield", effects=[AuraEffect(aura_type="school_absorb", amount=44)])

    apply_aura(player, shield, sim.bus)

    record = sim.mount_feeding.get_record(player)
    assert record.pending_speed_update is False
    assert record.last_mount_spell_id == 0

def test_mount_aura_arms_recapture_and_remembers_spell(sim):
    player = sim.login(1, "Aric")
    apply_aura(player, make_mount_aura(32242, "Swift Blue Gryphon", 100, 280), sim.bus)

    record = sim.mount_feeding.get_record(player)
    assert record.pending_speed_update is True
    assert record.last_mount_spell_id == 32242

def test_speed_buff_without_mount_marker_arms_recapture_only(sim):
    player = sim.login(1, "Aric")
    sim.mount(player, 458, "Brown Horse", ground_speed=60)
    sim.update(100)

    carrot = Aura(spell_id=48776, name="Carrot on a Stick",
                  effects=[AuraEffect(aura_type=AURA_MOD_INCREASE_MOUNTED_SPEED, amount=3)])
    apply_aura(player, carrot, sim.bus)

    record = sim.mount_feeding.get_record(player)
    assert record.pending_speed_update is True
    assert record.last_mount_spell_id == 458

def test_reapplying_same_aura_refreshes_silently(sim):
    player = sim.login(1, "Aric")
    aura = make_mount_aura(458, "Brown Horse", 60)
    apply_aura(player, aura, sim.bus)
    sim.update(100)

    apply_aura(player, make_mount_aura(458, "Brown Horse", 60), sim.bus)

    assert sim.mount_feeding.get_record(player).pending_speed_update is False
    assert get_aura(player, 458) is aura

def test_expired_timed_mount_counts_as_dismount(sim):
    player = sim.login(1, "Aric")
    rental = make_mount_aura(61425, "Rented Camel", 60)
    rental.duration = rental.max_duration = 5000
    apply_aura(player, rental, sim.bus)
    sim.update(100)
    assert sim.mount_feeding.get_record(player).base_ground_speed == 60

    sim.update(4900)

    record = sim.mount_feeding.get_record(player)
    assert not is_mounted(player)
    assert record.base_ground_speed == 0
    assert record.dismount_time_ms == 5000

def test_removing_non_mount_aura_keeps_dismount_time(sim):
    player = sim.login(1, "Aric")
    sim.mount(player, 458, "Brown Horse", ground_speed=60)
    carrot = Aura(spell_id=48776, name="Carrot on a Stick",
                  effects=[AuraEffect(aura_type=AURA_MOD_INCREASE_MOUNTED_SPEED, amount=3)])
    apply_aura(player, carrot, sim.bus)
    sim.update(100)

    remove_aura(player, 48776, sim.bus)

    record = sim.mount_feeding.get_record(player)
    assert record.dismount_time_ms == 0
    assert record.base_ground_speed == 60
