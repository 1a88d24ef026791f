import sqlite3

import pytest

from conftest import utc
from unfuddle_slack.db import CURSOR_TABLE, CursorStore, StorageError, open_connection


def _row_count(path):
    conn = sqlite3.connect(path)
    try:
        return conn.execute(f"SELECT COUNT(*) FROM {CURSOR_TABLE}").fetchone()[0]
    finally:
        conn.close()


def test_ensure_schema_is_idempotent(db_params):
    with open_connection(db_params) as conn:
        store = CursorStore(conn, db_params, clock=lambda: utc(2024, 1, 1))
        store.ensure_schema()
        store.ensure_schema()
        store.load()
        store.ensure_schema()
        store.load()

    assert _row_count(db_params.path) == 1


def test_load_seeds_current_time_on_first_run(db_params):
    now = utc(2024, 5, 6, 7, 8, 9)
    with open_connection(db_params) as conn:
        store = CursorStore(conn, db_params, clock=lambda: now)
        store.ensure_schema()
        assert store.load() == now


def test_load_returns_persisted_value(db_params):
    with open_connection(db_params) as conn:
        store = CursorStore(conn, db_params, clock=lambda: utc(2024, 1, 1))
        store.ensure_schema()
        store.load()
        store.save(utc(2024, 1, 1, 0, 0, 10))

    with open_connection(db_params) as conn:
        store = CursorStore(conn, db_params, clock=lambda: utc(2030, 1, 1))
        store.ensure_schema()
        loaded = store.load()

    assert loaded == utc(2024, 1, 1, 0, 0, 10)
    assert loaded.tzinfo is not None


def test_load_reseeds_when_table_holds_several_rows(db_params):
    conn = sqlite3.connect(db_params.path)
    conn.execute(f"CREATE TABLE {CURSOR_TABLE} ( time TEXT NOT NULL )")
    conn.execute(f"INSERT INTO {CURSOR_TABLE} (time) VALUES ('2020-01-01T00:00:00+00:00')")
    conn.execute(f"INSERT INTO {CURSOR_TABLE} (time) VALUES ('2021-01-01T00:00:00+00:00')")
    conn.commit()
    conn.close()

    now = utc(2024, 2, 2)
    with open_connection(db_params) as conn:
        store = CursorStore(conn, db_params, clock=lambda: now)
        store.ensure_schema()
        assert store.load() == now

    assert _row_count(db_params.path) == 1


def test_load_treats_naive_values_as_utc(db_params):
    conn = sqlite3.connect(db_params.path)
    conn.execute(f"CREATE TABLE {CURSOR_TABLE} ( time TEXT NOT NULL )")
    conn.execute(f"INSERT INTO {CURSOR_TABLE} (time) VALUES ('2024-01-01 00:00:05')")
    conn.commit()
    conn.close()

    with open_connection(db_params) as conn:
        store = CursorStore(conn, db_params)
        assert store.load() == utc(2024, 1, 1, 0, 0, 5)


def test_save_without_row_raises_storage_error(db_params):
    with open_connection(db_params) as conn:
        store = CursorStore(conn, db_params)
        store.ensure_schema()
        with pytest.raises(StorageError):
            store.save(utc(2024, 1, 1))


def test_save_on_closed_connection_raises_storage_error(db_params):
    with open_connection(db_params) as conn:
        store = CursorStore(conn, db_params)
        store.ensure_schema()
        store.load()
    with pytest.raises(StorageError):
        store.save(utc(2024, 1, 1))


def test_open_connection_closes_on_error(db_params):
    with pytest.raises(RuntimeError):
        with open_connection(db_params) as conn:
            raise RuntimeError("boom")
    with pytest.raises(sqlite3.ProgrammingError):
        conn.execute("SELECT 1")
