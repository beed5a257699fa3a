"""Decides which raw measures are worth storing as live measures.

Three rules, applied in order, first "drop" wins:
  1. distribution metrics are never stored on files
  2. a file measure equal to its metric's best value is implied by absence
  3. a measure with no value, no variation and no data is empty
"""

from __future__ import annotations

from .metrics import FILE_COMPLEXITY_DISTRIBUTION_KEY, FUNCTION_COMPLEXITY_DISTRIBUTION_KEY
from .models import Component, ComponentType, Measure, MeasureValueType, Metric

# Redundant at file level: the file's own complexity already says it all.
NOT_TO_PERSIST_ON_FILE_METRIC_KEYS = frozenset({
    FILE_COMPLEXITY_DISTRIBUTION_KEY,
    FUNCTION_COMPLEXITY_DISTRIBUTION_KEY,
})


def is_excluded_on_file(component: Component, metric_key: str) -> bool:
    return component.type is ComponentType.FILE and metric_key in NOT_TO_PERSIST_ON_FILE_METRIC_KEYS


def _equals_best_value(measure: Measure, best_value: float) -> bool:
    vt = measure.value_type
    if vt is MeasureValueType.BOOLEAN:
        return measure.value is (int(best_value) == 1)
    if vt in (MeasureValueType.INT, MeasureValueType.LONG):
        return int(best_value) == measure.value
    if vt is MeasureValueType.DOUBLE:
        return best_value == measure.value
    return False


def is_best_value_optimized(metric: Metric, component: Component, measure: Measure) -> bool:
    """True when the measure can be dropped because it holds the best value.

    Only files are optimized, and only for metrics that declare a best value
    and opt in. Measures carrying data or a quality gate status are kept.
    """
    if component.type is not ComponentType.FILE:
        return False
    if not metric.best_value_optimized or metric.best_value is None:
        return False
    if measure.data is not None or measure.quality_gate_status is not None:
        return False
    if measure.has_variation and measure.variation != metric.best_value:
        return False
    return (measure.value_type is MeasureValueType.NO_VALUE
            or _equals_best_value(measure, metric.best_value))


def is_non_empty(measure: Measure) -> bool:
    return (measure.value_type is not MeasureValueType.NO_VALUE
            or measure.has_variation
            or measure.data is not None)


def should_persist(component: Component, metric: Metric, measure: Measure) -> bool:
    """Whether `measure` belongs in the live measures of `component`."""
    if is_excluded_on_file(component, metric.key):
        return False
    if is_best_value_optimized(metric, component, measure):
        return False
    return is_non_empty(measure)
