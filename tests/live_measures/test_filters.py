"""Tests for live_measures.filters."""

# pylint: disable=missing-class-docstring,missing-function-docstring

from __future__ import annotations

import pytest

from live_measures.filters import (
    NOT_TO_PERSIST_ON_FILE_METRIC_KEYS,
    is_best_value_optimized,
    is_non_empty,
    should_persist,
)
from live_measures.models import (
    Component,
    ComponentType,
    Level,
    Measure,
    Metric,
    MetricType,
    QualityGateStatus,
)

FILE = Component(uuid="f1", key="src/a.py", type=ComponentType.FILE)
DIRECTORY = Component(uuid="d1", key="src", type=ComponentType.DIRECTORY)
PROJECT = Component(uuid="p1", key="proj", type=ComponentType.PROJECT)

COVERAGE = Metric(uuid="6", key="coverage", name="Coverage", type=MetricType.PERCENT,
                  best_value=100.0, best_value_optimized=True)
BUGS = Metric(uuid="12", key="bugs", name="Bugs", type=MetricType.INT,
              best_value=0.0, best_value_optimized=True)
NCLOC = Metric(uuid="2", key="ncloc", name="Lines of Code", type=MetricType.INT)
HAS_TESTS = Metric(uuid="30", key="has_tests", name="Has tests", type=MetricType.BOOL,
                   best_value=1.0, best_value_optimized=True)
NOT_OPTIMIZED = Metric(uuid="31", key="uncovered", name="Uncovered", type=MetricType.INT,
                       best_value=0.0, best_value_optimized=False)
DISTRIB = Metric(uuid="5", key="function_complexity_distribution", name="Distribution",
                 type=MetricType.DISTRIB)


# ---------------------------------------------------------------------------
# File-level exclusion
# ---------------------------------------------------------------------------


class TestFileExclusion:
    @pytest.mark.parametrize("key", sorted(NOT_TO_PERSIST_ON_FILE_METRIC_KEYS))
    def test_distribution_never_stored_on_file(self, key: str) -> None:
        metric = Metric(uuid="x", key=key, name=key, type=MetricType.DISTRIB)
        assert not should_persist(FILE, metric, Measure.string_value("1=0;2=3"))

    def test_distribution_stored_on_directory(self) -> None:
        assert should_persist(DIRECTORY, DISTRIB, Measure.string_value("1=0;2=3"))

    def test_distribution_stored_on_project(self) -> None:
        assert should_persist(PROJECT, DISTRIB, Measure.string_value("1=0;2=3"))


# ---------------------------------------------------------------------------
# Best value optimization
# ---------------------------------------------------------------------------


class TestBestValue:
    def test_double_best_value_dropped_on_file(self) -> None:
        assert not should_persist(FILE, COVERAGE, Measure.double_value(100.0))

    def test_double_other_value_kept(self) -> None:
        assert should_persist(FILE, COVERAGE, Measure.double_value(99.9))

    def test_int_best_value_dropped_on_file(self) -> None:
        assert not should_persist(FILE, BUGS, Measure.int_value(0))

    def test_int_other_value_kept(self) -> None:
        assert should_persist(FILE, BUGS, Measure.int_value(2))

    def test_long_best_value_dropped(self) -> None:
        assert not should_persist(FILE, BUGS, Measure.long_value(0))

    def test_bool_best_value(self) -> None:
        assert not should_persist(FILE, HAS_TESTS, Measure.bool_value(True))
        assert should_persist(FILE, HAS_TESTS, Measure.bool_value(False))

    def test_best_value_kept_above_file_level(self) -> None:
        assert should_persist(DIRECTORY, COVERAGE, Measure.double_value(100.0))
        assert should_persist(PROJECT, BUGS, Measure.int_value(0))

    def test_metric_without_best_value_never_dropped(self) -> None:
        assert should_persist(FILE, NCLOC, Measure.int_value(0))

    def test_metric_not_optimized_keeps_best_value(self) -> None:
        assert should_persist(FILE, NOT_OPTIMIZED, Measure.int_value(0))

    def test_data_prevents_optimization(self) -> None:
        measure = Measure.int_value(0, data="details")
        assert not is_best_value_optimized(BUGS, FILE, measure)
        assert should_persist(FILE, BUGS, measure)

    def test_quality_gate_status_prevents_optimization(self) -> None:
        status_metric = Metric(uuid="40", key="gate", name="Gate", type=MetricType.LEVEL,
                               best_value=0.0, best_value_optimized=True)
        measure = Measure.level_value(Level.OK,
                                      quality_gate_status=QualityGateStatus(Level.OK))
        assert not is_best_value_optimized(status_metric, FILE, measure)

    def test_variation_different_from_best_keeps(self) -> None:
        measure = Measure.int_value(0, variation=3.0)
        assert should_persist(FILE, BUGS, measure)

    def test_variation_equal_to_best_drops(self) -> None:
        measure = Measure.int_value(0, variation=0.0)
        assert not should_persist(FILE, BUGS, measure)

    def test_no_value_on_optimized_file_metric_dropped(self) -> None:
        assert is_best_value_optimized(BUGS, FILE, Measure.no_value())

    def test_string_value_never_equals_best(self) -> None:
        metric = Metric(uuid="41", key="label", name="Label", type=MetricType.STRING,
                        best_value=0.0, best_value_optimized=True)
        assert should_persist(FILE, metric, Measure.string_value("0"))


# ---------------------------------------------------------------------------
# Non-empty
# ---------------------------------------------------------------------------


class TestNonEmpty:
    def test_no_value_is_empty(self) -> None:
        assert not is_non_empty(Measure.no_value())
        assert not should_persist(PROJECT, NCLOC, Measure.no_value())

    def test_no_value_with_variation_kept(self) -> None:
        assert is_non_empty(Measure.no_value(variation=2.0))
        assert should_persist(PROJECT, NCLOC, Measure.no_value(variation=2.0))

    def test_no_value_with_data_kept(self) -> None:
        assert should_persist(PROJECT, NCLOC, Measure.no_value(data="{}"))

    def test_value_kept(self) -> None:
        assert is_non_empty(Measure.int_value(0))
