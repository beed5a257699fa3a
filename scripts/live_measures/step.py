"""The persist-live-measures computation step.

Walks the whole component tree (project down to files, parents first) and,
for each component:
  1. pulls its raw measures
  2. keeps those that pass `filters.should_persist`
  3. projects them to LiveMeasureRecord
  4. hands them to the synchronizer chosen at step start

One statistic is reported: `insertsOrUpdates`, the number of records
written across the tree. The step commits once at the end; with
`commit_each_component` it also commits after every component so readers
see progress on large trees.
"""

from __future__ import annotations

import enum
import logging
import sqlite3

from .db import supports_upsert as backend_supports_upsert
from .filters import is_excluded_on_file, should_persist
from .models import Component, LiveMeasureRecord
from .projector import to_live_measure_record
from .repository import MeasureRepository, MetricRepository
from .sync import LiveMeasureSynchronizer, select_synchronizer
from .tree import Order, visit

log = logging.getLogger(__name__)

INSERTS_OR_UPDATES = "insertsOrUpdates"


class ComputationStatistics:
    """Statistics sink of a computation step. Each key is reported once."""

    def __init__(self) -> None:
        self._values: dict[str, object] = {}

    def add(self, key: str, value: object) -> ComputationStatistics:
        if not key or not key.strip():
            raise ValueError("Statistic has null key")
        if value is None:
            raise ValueError(f"Statistic with key [{key}] has null value")
        if key in self._values:
            raise ValueError(f"Statistic with key [{key}] is already present")
        self._values[key] = value
        return self

    def get(self, key: str) -> object | None:
        return self._values.get(key)

    def as_dict(self) -> dict[str, object]:
        return dict(self._values)

    def __str__(self) -> str:
        return " | ".join(f"{k}={v}" for k, v in self._values.items())


class StepState(enum.Enum):
    NOT_STARTED = "not_started"
    TRAVERSAL_IN_PROGRESS = "traversal_in_progress"
    COMMITTED = "committed"
    FAILED = "failed"


class PersistLiveMeasuresStep:
    """Synchronizes `live_measures` with the raw measures of one analysis."""

    description = "Persist live measures"

    def __init__(self, conn: sqlite3.Connection, root: Component,
                 metric_repository: MetricRepository,
                 measure_repository: MeasureRepository,
                 supports_upsert: bool | None = None,
                 commit_each_component: bool = True) -> None:
        self.conn = conn
        self.root = root
        self.metric_repository = metric_repository
        self.measure_repository = measure_repository
        self.supports_upsert = supports_upsert
        self.commit_each_component = commit_each_component
        self.state = StepState.NOT_STARTED
        self.inserts_or_updates = 0

    def execute(self, statistics: ComputationStatistics) -> None:
        if self.state is not StepState.NOT_STARTED:
            raise RuntimeError(f"Step already executed (state: {self.state.value})")

        use_upsert = self.supports_upsert
        if use_upsert is None:
            use_upsert = backend_supports_upsert(self.conn)
        synchronizer = select_synchronizer(use_upsert)

        self.state = StepState.TRAVERSAL_IN_PROGRESS
        try:
            visited = visit(
                self.root,
                lambda component: self._persist_component(component, synchronizer),
                order=Order.PRE_ORDER,
            )
            self.conn.commit()
        except Exception:
            self.state = StepState.FAILED
            self.conn.rollback()
            raise
        self.state = StepState.COMMITTED

        statistics.add(INSERTS_OR_UPDATES, self.inserts_or_updates)
        log.info("%s: %d components | %s", self.description, visited, statistics)

    # -----------------------------------------------------------------------

    def _kept_records(self, component: Component) -> list[LiveMeasureRecord]:
        records: list[LiveMeasureRecord] = []
        measures = self.measure_repository.get_raw_measures(component)
        for metric_key, measure in measures.items():
            if is_excluded_on_file(component, metric_key):
                continue
            metric = self.metric_repository.get_by_key(metric_key)
            if not should_persist(component, metric, measure):
                continue
            records.append(
                to_live_measure_record(measure, metric, component, self.root.uuid))
        return records

    def _persist_component(self, component: Component,
                           synchronizer: LiveMeasureSynchronizer) -> None:
        records = self._kept_records(component)
        written = synchronizer.sync(self.conn, component.uuid, records)
        if self.commit_each_component:
            self.conn.commit()
        self.inserts_or_updates += written
        log.debug("%s: %d live measures", component, written)
