"""Tests for live_measures.db schema and DAO functions."""

# pylint: disable=missing-class-docstring,missing-function-docstring,redefined-outer-name

from __future__ import annotations

import sqlite3
from collections.abc import Generator
from pathlib import Path

import pytest

from live_measures.db import (
    count_live_measures,
    db_exists,
    db_path,
    delete_by_component,
    delete_by_component_excluding_metrics,
    get_live_measures,
    init_db,
    insert_live_measure,
    reset_db,
    supports_upsert,
    upsert_live_measure,
)
from live_measures.models import LiveMeasureRecord


@pytest.fixture()
def db(tmp_path: Path) -> Generator[sqlite3.Connection, None, None]:
    """Fresh live_measures.db in a temp directory."""
    conn = init_db(hot_zone=str(tmp_path))
    yield conn
    conn.close()


def _rec(component: str, metric: str, value: float | None = 1.0,
         project: str = "p") -> LiveMeasureRecord:
    return LiveMeasureRecord(component_uuid=component, project_uuid=project,
                             metric_uuid=metric, value=value)


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    def test_init_creates_table(self, db: sqlite3.Connection) -> None:
        tables = {
            row[0]
            for row in db.execute(
                "SELECT name FROM sqlite_master WHERE type='table'"
            ).fetchall()
        }
        assert "live_measures" in tables

    def test_init_idempotent(self, db: sqlite3.Connection, tmp_path: Path) -> None:
        _ = db
        conn2 = init_db(hot_zone=str(tmp_path))
        assert count_live_measures(conn2) == 0
        conn2.close()

    def test_db_path_from_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MEASURES_HOT_ZONE", str(tmp_path / "hz"))
        assert db_path() == tmp_path / "hz" / "live_measures.db"

    def test_explicit_hot_zone_wins(self, tmp_path: Path,
                                    monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MEASURES_HOT_ZONE", "/nowhere")
        assert db_path(str(tmp_path)) == tmp_path / "live_measures.db"

    def test_reset(self, tmp_path: Path) -> None:
        conn = init_db(hot_zone=str(tmp_path))
        conn.close()
        assert db_exists(str(tmp_path))
        reset_db(str(tmp_path))
        assert not db_exists(str(tmp_path))

    def test_supports_upsert_on_modern_sqlite(self, db: sqlite3.Connection) -> None:
        expected = sqlite3.sqlite_version_info >= (3, 24, 0)
        assert supports_upsert(db) is expected


# ---------------------------------------------------------------------------
# live_measures CRUD
# ---------------------------------------------------------------------------


class TestLiveMeasures:
    def test_insert_and_get(self, db: sqlite3.Connection) -> None:
        insert_live_measure(db, _rec("c1", "m1", 3.0))
        db.commit()
        rows = get_live_measures(db, "c1")
        assert len(rows) == 1
        assert rows[0].value == 3.0
        assert rows[0].updated_at > 0

    def test_insert_duplicate_fails(self, db: sqlite3.Connection) -> None:
        insert_live_measure(db, _rec("c1", "m1"))
        with pytest.raises(sqlite3.IntegrityError):
            insert_live_measure(db, _rec("c1", "m1"))

    def test_upsert_updates_existing(self, db: sqlite3.Connection) -> None:
        upsert_live_measure(db, _rec("c1", "m1", 1.0))
        upsert_live_measure(db, _rec("c1", "m1", 9.0))
        db.commit()
        rows = get_live_measures(db, "c1")
        assert len(rows) == 1
        assert rows[0].value == 9.0

    def test_delete_by_component(self, db: sqlite3.Connection) -> None:
        insert_live_measure(db, _rec("c1", "m1"))
        insert_live_measure(db, _rec("c1", "m2"))
        insert_live_measure(db, _rec("c2", "m1"))
        assert delete_by_component(db, "c1") == 2
        assert get_live_measures(db, "c1") == []
        assert len(get_live_measures(db, "c2")) == 1

    def test_delete_excluding_metrics(self, db: sqlite3.Connection) -> None:
        for metric in ("m1", "m2", "m3"):
            insert_live_measure(db, _rec("c1", metric))
        insert_live_measure(db, _rec("c2", "m2"))
        deleted = delete_by_component_excluding_metrics(db, "c1", ["m2"])
        assert deleted == 2
        assert [r.metric_uuid for r in get_live_measures(db, "c1")] == ["m2"]
        assert len(get_live_measures(db, "c2")) == 1

    def test_delete_excluding_nothing_clears_component(self, db: sqlite3.Connection) -> None:
        insert_live_measure(db, _rec("c1", "m1"))
        assert delete_by_component_excluding_metrics(db, "c1", []) == 1
        assert get_live_measures(db, "c1") == []

    def test_count_by_project(self, db: sqlite3.Connection) -> None:
        insert_live_measure(db, _rec("c1", "m1", project="p1"))
        insert_live_measure(db, _rec("c2", "m1", project="p2"))
        assert count_live_measures(db) == 2
        assert count_live_measures(db, "p1") == 1
