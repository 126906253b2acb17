"""
MountFeed — run.py
Scripted demo session: mount up, fly until the mount sulks, feed it.
Prints the player's chat log. Optional argument: path to a config TOML.
"""

import sys
import tempfile
from pathlib import Path

# Ensure we can import the mountfeed package from a checkout
project_root = Path(__file__).parent.resolve()
sys.path.insert(0, str(project_root))

from mountfeed.config import load_config
from mountfeed.ecs.components import ChatLog
from mountfeed.loop import SimulationLoop
from mountfeed.satisfaction import THRESHOLD_CONTENT

def main():
    config = load_config(Path(sys.argv[1]) if len(sys.argv) > 1 else None)

    with tempfile.TemporaryDirectory() as tmpdir:
        sim = SimulationLoop(
            db_path=Path(tmpdir) / "characters.db",
            journal_path=Path(tmpdir) / "mount_journal.jsonl",
            config=config,
        )
        sim.store.save(1, 340000)

        player = sim.login(1, "Aric", level=50)
        food = sim.give_item(player, "consumables/mutton_chop", amount=5)

        sim.mount(player, 32242, "Swift Blue Gryphon", ground_speed=100, flight_speed=280)
        sim.update(100)
        sim.take_off(player)

        # Fly until the mount turns unhappy and flight is suspended
        while sim.mount_feeding.get_record(player).satisfaction >= THRESHOLD_CONTENT:
            sim.update(config.decay_interval)
        sim.land(player)
        sim.update(100)

        sim.use_item(player, food)
        print(f"Satisfaction after feeding: {sim.mount_feeding.get_record(player).satisfaction}")

        messages = list(player.components[ChatLog].messages)
        sim.logout(player)
        print(f"Persisted value: {sim.store.load(1)}")

        print("\n--- CHAT LOG ---")
        for line in messages:
            print(line)

if __name__ == "__main__":
    main()
