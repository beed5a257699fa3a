"""Data models for live measures.

Pure Python dataclasses and enums, no storage concerns:
  - Component: node of the analysed tree (project, module, directory, file)
  - Metric: metric definition (key, type, best value)
  - Measure: raw computed value for one (component, metric) pair
  - LiveMeasureRecord: storage shape of a kept measure (maps to `live_measures`)
  - InputFile, BlameLine: SCM blame input
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Union


class ComponentType(enum.Enum):
    """Component depth levels, ordered from root to leaves."""

    PROJECT = 0
    MODULE = 1
    DIRECTORY = 2
    FILE = 3

    def is_deeper_than(self, other: ComponentType) -> bool:
        return self.value > other.value


@dataclass(frozen=True)
class Component:
    """A node of the analysed component tree.

    Built once per analysis and never mutated during reconciliation.
    """

    uuid: str
    key: str
    type: ComponentType
    children: tuple[Component, ...] = ()

    def __str__(self) -> str:
        return f"{self.type.name}:{self.key}"


class MetricType(enum.Enum):
    INT = "INT"
    FLOAT = "FLOAT"
    PERCENT = "PERCENT"
    BOOL = "BOOL"
    STRING = "STRING"
    MILLISEC = "MILLISEC"
    DATA = "DATA"
    LEVEL = "LEVEL"
    DISTRIB = "DISTRIB"
    RATING = "RATING"
    WORK_DUR = "WORK_DUR"


def _as_bool(raw: Any) -> bool:
    """JSON flag: a real boolean, or one of the strings "true" / "false"."""
    if isinstance(raw, str):
        value = raw.strip().lower()
        if value not in ("true", "false"):
            raise ValueError(f"Not a boolean value: '{raw}'")
        return value == "true"
    return bool(raw)


@dataclass(frozen=True)
class Metric:
    """Metric definition as stored in the metric repository."""

    uuid: str
    key: str
    name: str
    type: MetricType
    best_value: float | None = None
    best_value_optimized: bool = False
    decimal_scale: int | None = None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Metric:
        """Reconstruct from a JSON/DB dict."""
        best = d.get("best_value")
        scale = d.get("decimal_scale")
        return cls(
            uuid=str(d["uuid"]),
            key=d["key"],
            name=d.get("name", d["key"]),
            type=MetricType(d["type"]),
            best_value=float(best) if best is not None else None,
            best_value_optimized=_as_bool(d.get("best_value_optimized", False)),
            decimal_scale=int(scale) if scale is not None else None,
        )


class MeasureValueType(enum.Enum):
    NO_VALUE = "NO_VALUE"
    BOOLEAN = "BOOLEAN"
    INT = "INT"
    LONG = "LONG"
    DOUBLE = "DOUBLE"
    STRING = "STRING"
    LEVEL = "LEVEL"


class Level(enum.Enum):
    OK = "OK"
    WARN = "WARN"
    ERROR = "ERROR"


@dataclass(frozen=True)
class QualityGateStatus:
    level: Level
    text: str | None = None


MeasureValue = Union[bool, int, float, str, Level, None]

# Python types accepted for each value type. bool is a subclass of int, so
# INT/LONG/DOUBLE reject it explicitly in Measure.__post_init__.
_VALUE_TYPES: dict[MeasureValueType, tuple[type, ...]] = {
    MeasureValueType.BOOLEAN: (bool,),
    MeasureValueType.INT: (int,),
    MeasureValueType.LONG: (int,),
    MeasureValueType.DOUBLE: (int, float),
    MeasureValueType.STRING: (str,),
    MeasureValueType.LEVEL: (Level,),
}


@dataclass(frozen=True)
class Measure:
    """Raw measure computed upstream for one component and one metric.

    Use the factory classmethods; the constructor rejects a value that does
    not agree with its value type.
    """

    value_type: MeasureValueType
    value: MeasureValue = None
    variation: float | None = None
    data: str | None = None
    quality_gate_status: QualityGateStatus | None = None

    def __post_init__(self) -> None:
        if self.value_type is MeasureValueType.NO_VALUE:
            if self.value is not None:
                raise ValueError(f"NO_VALUE measure can not hold a value: {self.value!r}")
            return
        expected = _VALUE_TYPES[self.value_type]
        numeric_bool = self.value_type is not MeasureValueType.BOOLEAN and isinstance(self.value, bool)
        if not isinstance(self.value, expected) or numeric_bool:
            raise ValueError(
                f"Value {self.value!r} is not compatible with value type {self.value_type.name}"
            )

    @property
    def has_variation(self) -> bool:
        return self.variation is not None

    @classmethod
    def no_value(cls, *, variation: float | None = None, data: str | None = None) -> Measure:
        return cls(MeasureValueType.NO_VALUE, None, variation, data)

    @classmethod
    def bool_value(cls, value: bool, *, variation: float | None = None,
                   data: str | None = None) -> Measure:
        return cls(MeasureValueType.BOOLEAN, value, variation, data)

    @classmethod
    def int_value(cls, value: int, *, variation: float | None = None,
                  data: str | None = None) -> Measure:
        return cls(MeasureValueType.INT, value, variation, data)

    @classmethod
    def long_value(cls, value: int, *, variation: float | None = None,
                   data: str | None = None) -> Measure:
        return cls(MeasureValueType.LONG, value, variation, data)

    @classmethod
    def double_value(cls, value: float, *, variation: float | None = None,
                     data: str | None = None) -> Measure:
        return cls(MeasureValueType.DOUBLE, float(value), variation, data)

    @classmethod
    def string_value(cls, value: str, *, variation: float | None = None) -> Measure:
        return cls(MeasureValueType.STRING, value, variation)

    @classmethod
    def level_value(cls, value: Level, *, variation: float | None = None,
                    quality_gate_status: QualityGateStatus | None = None) -> Measure:
        return cls(MeasureValueType.LEVEL, value, variation, None, quality_gate_status)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Measure:
        """Reconstruct from a JSON input dict.

        Expected keys: value_type, value, variation, data, quality_gate_status.
        """
        value_type = MeasureValueType(d.get("value_type", "NO_VALUE"))
        value: MeasureValue = d.get("value")
        if value_type is MeasureValueType.LEVEL and value is not None:
            value = Level(value)
        elif value_type is MeasureValueType.DOUBLE and isinstance(value, int) \
                and not isinstance(value, bool):
            value = float(value)
        variation = d.get("variation")
        qg = d.get("quality_gate_status")
        return cls(
            value_type=value_type,
            value=value,
            variation=float(variation) if variation is not None else None,
            data=d.get("data"),
            quality_gate_status=(
                QualityGateStatus(Level(qg["level"]), qg.get("text")) if qg else None
            ),
        )


@dataclass
class LiveMeasureRecord:
    """Stored representation of a kept measure.

    Maps to the `live_measures` table. One row per (component, metric).
    """

    component_uuid: str
    project_uuid: str
    metric_uuid: str
    value: float | None = None
    text_value: str | None = None
    variation: float | None = None
    data: str | None = None
    updated_at: int = field(default=0, compare=False)

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a flat dict suitable for DB insertion."""
        return {
            "component_uuid": self.component_uuid,
            "project_uuid": self.project_uuid,
            "metric_uuid": self.metric_uuid,
            "value": self.value,
            "text_value": self.text_value,
            "variation": self.variation,
            "measure_data": self.data,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> LiveMeasureRecord:
        """Reconstruct from a DB row dict."""
        return cls(
            component_uuid=d["component_uuid"],
            project_uuid=d["project_uuid"],
            metric_uuid=d["metric_uuid"],
            value=d.get("value"),
            text_value=d.get("text_value"),
            variation=d.get("variation"),
            data=d.get("measure_data"),
            updated_at=int(d.get("updated_at") or 0),
        )


# ---------------------------------------------------------------------------
# SCM blame
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InputFile:
    """A source file expected to receive blame data."""

    path: str
    lines: int = 0

    def __str__(self) -> str:
        return self.path


@dataclass(frozen=True)
class BlameLine:
    """Blame of a single source line, as reported by the SCM provider."""

    date: datetime | None = None
    revision: str | None = None
    author: str | None = None
