"""Measure -> LiveMeasureRecord conversion."""

from __future__ import annotations

from .models import (
    Component,
    Level,
    LiveMeasureRecord,
    Measure,
    MeasureValueType,
    Metric,
    MetricType,
)

# Measure value types each metric type may carry (NO_VALUE always allowed)
_COMPATIBLE_VALUE_TYPES: dict[MetricType, frozenset[MeasureValueType]] = {
    MetricType.INT: frozenset({MeasureValueType.INT, MeasureValueType.LONG}),
    MetricType.RATING: frozenset({MeasureValueType.INT}),
    MetricType.MILLISEC: frozenset({MeasureValueType.INT, MeasureValueType.LONG}),
    MetricType.WORK_DUR: frozenset({MeasureValueType.INT, MeasureValueType.LONG}),
    MetricType.FLOAT: frozenset({MeasureValueType.DOUBLE}),
    MetricType.PERCENT: frozenset({MeasureValueType.DOUBLE}),
    MetricType.BOOL: frozenset({MeasureValueType.BOOLEAN}),
    MetricType.STRING: frozenset({MeasureValueType.STRING}),
    MetricType.DATA: frozenset({MeasureValueType.STRING}),
    MetricType.DISTRIB: frozenset({MeasureValueType.STRING}),
    MetricType.LEVEL: frozenset({MeasureValueType.LEVEL}),
}


def _numeric_value(measure: Measure) -> float | None:
    vt = measure.value_type
    if vt is MeasureValueType.BOOLEAN:
        return 1.0 if measure.value else 0.0
    if vt in (MeasureValueType.INT, MeasureValueType.LONG, MeasureValueType.DOUBLE):
        return float(measure.value)  # type: ignore[arg-type]
    return None


def _text_value(measure: Measure) -> str | None:
    if measure.value_type is MeasureValueType.STRING:
        return str(measure.value)
    if measure.value_type is MeasureValueType.LEVEL and isinstance(measure.value, Level):
        return measure.value.name
    return None


def to_live_measure_record(measure: Measure, metric: Metric, component: Component,
                           project_uuid: str) -> LiveMeasureRecord:
    """Convert a kept measure to its storage shape.

    Raises ValueError when the measure's value type does not fit the metric.
    """
    vt = measure.value_type
    if vt is not MeasureValueType.NO_VALUE and vt not in _COMPATIBLE_VALUE_TYPES[metric.type]:
        raise ValueError(
            f"Measure of type {vt.name} is not compatible with metric "
            f"'{metric.key}' of type {metric.type.name} on {component}"
        )
    return LiveMeasureRecord(
        component_uuid=component.uuid,
        project_uuid=project_uuid,
        metric_uuid=metric.uuid,
        value=_numeric_value(measure),
        text_value=_text_value(measure),
        variation=measure.variation,
        data=measure.data,
    )
