import sqlite3
from contextlib import closing

from mountfeed.storage import SatisfactionStore

def test_load_missing_row_returns_none(tmp_path):
    store = SatisfactionStore(tmp_path / "characters.db")
    assert store.load(42) is None

def test_save_is_an_upsert(tmp_path):
    path = tmp_path / "characters.db"
    store = SatisfactionStore(path)
    store.save(42, 500000)
    store.save(42, 123456)

    assert store.load(42) == 123456

    with closing(sqlite3.connect(path)) as conn:
        count = conn.execute("SELECT COUNT(*) FROM mount_feeding WHERE guid = 42").fetchone()[0]
    assert count == 1

def test_rows_are_independent_per_player(tmp_path):
    store = SatisfactionStore(tmp_path / "characters.db")
    store.save(1, 100)
    store.save(2, 200)
    store.delete(1)

    assert store.load(1) is None
    assert store.load(2) == 200
    assert store.all_records() == {2: 200}

def test_schema_survives_reopen(tmp_path):
    path = tmp_path / "nested" / "characters.db"
    SatisfactionStore(path).save(7, 777)
    assert SatisfactionStore(path).load(7) == 777
