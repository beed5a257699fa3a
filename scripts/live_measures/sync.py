"""Write strategies that make a component's stored rows match its kept records.

Both strategies leave exactly `records` stored for the component:
  - UpsertSynchronizer: upsert every record, then delete the complement
  - DeleteInsertSynchronizer: delete everything, then insert every record

The strategy is picked once per step from the backend capability.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Sequence
from typing import Protocol

from .db import (
    delete_by_component,
    delete_by_component_excluding_metrics,
    insert_live_measure,
    upsert_live_measure,
)
from .models import LiveMeasureRecord

log = logging.getLogger(__name__)


class LiveMeasureSynchronizer(Protocol):
    name: str

    def sync(self, conn: sqlite3.Connection, component_uuid: str,
             records: Sequence[LiveMeasureRecord]) -> int:
        """Synchronize one component. Returns the number of records written."""
        ...


def _check_owned(component_uuid: str, records: Sequence[LiveMeasureRecord]) -> None:
    for record in records:
        if record.component_uuid != component_uuid:
            raise ValueError(
                f"Record for component {record.component_uuid} can not be "
                f"synchronized on component {component_uuid}"
            )


class UpsertSynchronizer:
    name = "upsert"

    def sync(self, conn: sqlite3.Connection, component_uuid: str,
             records: Sequence[LiveMeasureRecord]) -> int:
        _check_owned(component_uuid, records)
        for record in records:
            upsert_live_measure(conn, record)
        # Metrics no longer reported (e.g. coverage back to its best value)
        # must not survive. Rows of deleted components are purged elsewhere.
        deleted = delete_by_component_excluding_metrics(
            conn, component_uuid, [r.metric_uuid for r in records])
        if deleted:
            log.debug("Removed %d stale live measures of %s", deleted, component_uuid)
        return len(records)


class DeleteInsertSynchronizer:
    name = "delete-insert"

    def sync(self, conn: sqlite3.Connection, component_uuid: str,
             records: Sequence[LiveMeasureRecord]) -> int:
        _check_owned(component_uuid, records)
        delete_by_component(conn, component_uuid)
        for record in records:
            insert_live_measure(conn, record)
        return len(records)


def select_synchronizer(supports_upsert: bool) -> LiveMeasureSynchronizer:
    synchronizer: LiveMeasureSynchronizer
    if supports_upsert:
        synchronizer = UpsertSynchronizer()
    else:
        synchronizer = DeleteInsertSynchronizer()
    log.debug("Using %s live measure synchronizer", synchronizer.name)
    return synchronizer
