"""live_measures.db schema, lifecycle, and DAO functions.

SQLite DB at $MEASURES_HOT_ZONE/live_measures.db. Holds the latest value of
every stored (component, metric) pair; rebuildable by re-running an
analysis.

Schema:
  - live_measures: one row per (component_uuid, metric_uuid)

DAO functions never commit; transaction boundaries belong to the caller
(the persist step commits).
"""

from __future__ import annotations

import logging
import os
import sqlite3
import time
from collections.abc import Iterable
from pathlib import Path

from .models import LiveMeasureRecord

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_SCHEMA = """
PRAGMA journal_mode = WAL;
PRAGMA synchronous = NORMAL;
PRAGMA temp_store = MEMORY;

CREATE TABLE IF NOT EXISTS live_measures (
    component_uuid  TEXT NOT NULL,
    project_uuid    TEXT NOT NULL,
    metric_uuid     TEXT NOT NULL,
    value           REAL,
    text_value      TEXT,
    variation       REAL,
    measure_data    TEXT,
    updated_at      INTEGER NOT NULL,
    PRIMARY KEY(component_uuid, metric_uuid)
);

CREATE INDEX IF NOT EXISTS idx_lm_project ON live_measures(project_uuid);
"""

# INSERT ... ON CONFLICT DO UPDATE landed in SQLite 3.24.0
_UPSERT_MIN_SQLITE = (3, 24, 0)


# ---------------------------------------------------------------------------
# Database lifecycle
# ---------------------------------------------------------------------------


def _resolve_db_path(hot_zone: str | None = None) -> Path:
    """Resolve live_measures.db path from MEASURES_HOT_ZONE or explicit path."""
    if hot_zone:
        return Path(hot_zone) / "live_measures.db"

    env_hz = os.environ.get("MEASURES_HOT_ZONE", "")
    if env_hz:
        return Path(env_hz) / "live_measures.db"

    base = "/dev/shm/measures" if Path("/dev/shm").exists() else "/tmp/measures"
    return Path(base) / "live_measures.db"


def init_db(hot_zone: str | None = None) -> sqlite3.Connection:
    """Initialise live_measures.db, creating schema if needed.

    Returns an open connection. The caller is responsible for closing it.
    """
    resolved = _resolve_db_path(hot_zone)
    resolved.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(resolved))
    conn.row_factory = sqlite3.Row
    conn.executescript(_SCHEMA)
    log.debug("live_measures.db initialised at %s", resolved)
    return conn


def db_path(hot_zone: str | None = None) -> Path:
    """Return the resolved live_measures.db path (may not exist yet)."""
    return _resolve_db_path(hot_zone)


def db_exists(hot_zone: str | None = None) -> bool:
    return _resolve_db_path(hot_zone).exists()


def reset_db(hot_zone: str | None = None) -> None:
    """Delete live_measures.db entirely."""
    p = _resolve_db_path(hot_zone)
    if p.exists():
        p.unlink()
        log.info("Deleted live_measures.db at %s", p)


def supports_upsert(conn: sqlite3.Connection) -> bool:
    """Whether the backend can express a single INSERT ... ON CONFLICT."""
    row = conn.execute("SELECT sqlite_version()").fetchone()
    version = tuple(int(p) for p in row[0].split(".")[:3])
    return version >= _UPSERT_MIN_SQLITE


# ---------------------------------------------------------------------------
# live_measures CRUD
# ---------------------------------------------------------------------------


def _row(record: LiveMeasureRecord) -> dict[str, object]:
    d = record.to_dict()
    d["updated_at"] = int(time.time() * 1000)
    return d


def insert_live_measure(conn: sqlite3.Connection, record: LiveMeasureRecord) -> None:
    """Insert a row. Fails with IntegrityError if the pair already exists."""
    conn.execute(
        """INSERT INTO live_measures (component_uuid, project_uuid, metric_uuid,
            value, text_value, variation, measure_data, updated_at)
        VALUES (:component_uuid, :project_uuid, :metric_uuid,
            :value, :text_value, :variation, :measure_data, :updated_at)
        """,
        _row(record),
    )


def upsert_live_measure(conn: sqlite3.Connection, record: LiveMeasureRecord) -> None:
    """Insert or update the row keyed by (component_uuid, metric_uuid)."""
    conn.execute(
        """INSERT INTO live_measures (component_uuid, project_uuid, metric_uuid,
            value, text_value, variation, measure_data, updated_at)
        VALUES (:component_uuid, :project_uuid, :metric_uuid,
            :value, :text_value, :variation, :measure_data, :updated_at)
        ON CONFLICT(component_uuid, metric_uuid) DO UPDATE SET
            project_uuid=excluded.project_uuid, value=excluded.value,
            text_value=excluded.text_value, variation=excluded.variation,
            measure_data=excluded.measure_data, updated_at=excluded.updated_at
        """,
        _row(record),
    )


def delete_by_component(conn: sqlite3.Connection, component_uuid: str) -> int:
    """Delete every row of a component. Returns the number of rows deleted."""
    cur = conn.execute(
        "DELETE FROM live_measures WHERE component_uuid = ?", (component_uuid,),
    )
    return cur.rowcount


def delete_by_component_excluding_metrics(conn: sqlite3.Connection,
                                          component_uuid: str,
                                          metric_uuids: Iterable[str]) -> int:
    """Delete rows of a component whose metric is not in `metric_uuids`.

    An empty `metric_uuids` deletes every row of the component.
    """
    keep = list(metric_uuids)
    if not keep:
        return delete_by_component(conn, component_uuid)
    placeholders = ", ".join("?" for _ in keep)
    cur = conn.execute(
        f"""DELETE FROM live_measures
            WHERE component_uuid = ? AND metric_uuid NOT IN ({placeholders})""",
        (component_uuid, *keep),
    )
    return cur.rowcount


def get_live_measures(conn: sqlite3.Connection,
                      component_uuid: str) -> list[LiveMeasureRecord]:
    """All stored rows of a component, ordered by metric uuid."""
    rows = conn.execute(
        "SELECT * FROM live_measures WHERE component_uuid = ? ORDER BY metric_uuid",
        (component_uuid,),
    ).fetchall()
    return [LiveMeasureRecord.from_dict(dict(r)) for r in rows]


def count_live_measures(conn: sqlite3.Connection,
                        project_uuid: str | None = None) -> int:
    if project_uuid:
        row = conn.execute(
            "SELECT COUNT(*) FROM live_measures WHERE project_uuid = ?",
            (project_uuid,),
        ).fetchone()
    else:
        row = conn.execute("SELECT COUNT(*) FROM live_measures").fetchone()
    return int(row[0])
