"""Metric and raw measure repositories.

In-memory stores filled once per analysis, read-only during the persist
step. `load_analysis` builds both (plus the component tree) from the JSON
document accepted by `python -m live_measures persist`.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from .metrics import CORE_METRICS
from .models import Component, Measure, Metric
from .tree import build_tree, walk

log = logging.getLogger(__name__)


class MetricRepository:
    """Metric definitions indexed by key."""

    def __init__(self, metrics: Iterable[Metric] = ()) -> None:
        self._by_key: dict[str, Metric] = {}
        self._keys_by_uuid: dict[str, str] = {}
        for metric in metrics:
            self.add(metric)

    def add(self, metric: Metric) -> None:
        existing = self._by_key.get(metric.key)
        if existing is not None and existing.uuid != metric.uuid:
            raise ValueError(
                f"Metric '{metric.key}' already registered with uuid {existing.uuid}"
            )
        owner = self._keys_by_uuid.get(metric.uuid)
        if owner is not None and owner != metric.key:
            raise ValueError(f"Metric uuid {metric.uuid} already used by '{owner}'")
        if existing is not None and existing != metric:
            raise ValueError(
                f"Metric '{metric.key}' already registered with a different definition"
            )
        self._by_key[metric.key] = metric
        self._keys_by_uuid[metric.uuid] = metric.key

    def get_by_key(self, key: str) -> Metric:
        """Return the metric for `key`. Unknown keys are a caller error."""
        try:
            return self._by_key[key]
        except KeyError:
            raise ValueError(f"Metric with key '{key}' does not exist") from None

    def get_all(self) -> list[Metric]:
        return list(self._by_key.values())

    def __len__(self) -> int:
        return len(self._by_key)


class MeasureRepository:
    """Raw measures computed for each component, keyed by metric key."""

    def __init__(self) -> None:
        self._raw: dict[str, dict[str, Measure]] = {}

    def add(self, component: Component, metric_key: str, measure: Measure) -> None:
        by_metric = self._raw.setdefault(component.uuid, {})
        if metric_key in by_metric:
            raise ValueError(
                f"Measure for metric '{metric_key}' already exists on {component}"
            )
        by_metric[metric_key] = measure

    def get_raw_measures(self, component: Component) -> dict[str, Measure]:
        """All raw measures of a component (empty dict when none)."""
        return dict(self._raw.get(component.uuid, {}))


# ---------------------------------------------------------------------------
# JSON input
# ---------------------------------------------------------------------------


def load_analysis(path: str | Path) -> tuple[Component, MetricRepository, MeasureRepository]:
    """Load an analysis document.

    Format:
      {"tree": {...component...},
       "metrics": [{"uuid", "key", "type", "best_value", ...}],   (optional)
       "measures": {"<component uuid>": {"<metric key>": {...measure...}}}}

    Core metrics are registered first. An input metric with the key of an
    already registered one must repeat its definition exactly.
    """
    doc: dict[str, Any] = json.loads(Path(path).read_text())
    root = build_tree(doc["tree"])

    metric_repo = MetricRepository(CORE_METRICS)
    for raw_metric in doc.get("metrics", []):
        metric_repo.add(Metric.from_dict(raw_metric))

    components = {c.uuid: c for c in walk(root)}
    measure_repo = MeasureRepository()
    for component_uuid, by_key in doc.get("measures", {}).items():
        component = components.get(component_uuid)
        if component is None:
            raise ValueError(f"Measures given for unknown component '{component_uuid}'")
        for metric_key, raw_measure in by_key.items():
            measure_repo.add(component, metric_key, Measure.from_dict(raw_measure))

    log.debug("Loaded %d components, %d metrics from %s",
              len(components), len(metric_repo), path)
    return root, metric_repo, measure_repo
