"""Core metric catalogue.

Keys and best values of the metrics every analysis produces. Plugins may
register more metrics through the JSON input of `persist`; these are the
built-in defaults loaded when the input does not define a metric.
"""

from __future__ import annotations

from .models import Metric, MetricType

# ---------------------------------------------------------------------------
# Metric keys
# ---------------------------------------------------------------------------

LINES_KEY = "lines"
NCLOC_KEY = "ncloc"
COMPLEXITY_KEY = "complexity"
FILE_COMPLEXITY_DISTRIBUTION_KEY = "file_complexity_distribution"
FUNCTION_COMPLEXITY_DISTRIBUTION_KEY = "function_complexity_distribution"
COVERAGE_KEY = "coverage"
LINE_COVERAGE_KEY = "line_coverage"
UNCOVERED_LINES_KEY = "uncovered_lines"
DUPLICATED_LINES_KEY = "duplicated_lines"
DUPLICATED_LINES_DENSITY_KEY = "duplicated_lines_density"
VIOLATIONS_KEY = "violations"
BUGS_KEY = "bugs"
CODE_SMELLS_KEY = "code_smells"
VULNERABILITIES_KEY = "vulnerabilities"
RELIABILITY_RATING_KEY = "reliability_rating"
SQALE_RATING_KEY = "sqale_rating"
TECHNICAL_DEBT_KEY = "sqale_index"
TESTS_KEY = "tests"
TEST_SUCCESS_DENSITY_KEY = "test_success_density"
ALERT_STATUS_KEY = "alert_status"
QUALITY_GATE_DETAILS_KEY = "quality_gate_details"
LAST_COMMIT_DATE_KEY = "last_commit_date"


def _metric(uuid: str, key: str, name: str, mtype: MetricType,
            best_value: float | None = None,
            optimized: bool = False) -> Metric:
    return Metric(uuid=uuid, key=key, name=name, type=mtype,
                  best_value=best_value, best_value_optimized=optimized)


CORE_METRICS: tuple[Metric, ...] = (
    _metric("1", LINES_KEY, "Lines", MetricType.INT),
    _metric("2", NCLOC_KEY, "Lines of Code", MetricType.INT),
    _metric("3", COMPLEXITY_KEY, "Cyclomatic Complexity", MetricType.INT),
    _metric("4", FILE_COMPLEXITY_DISTRIBUTION_KEY, "File Distribution / Complexity",
            MetricType.DISTRIB),
    _metric("5", FUNCTION_COMPLEXITY_DISTRIBUTION_KEY, "Function Distribution / Complexity",
            MetricType.DISTRIB),
    _metric("6", COVERAGE_KEY, "Coverage", MetricType.PERCENT, 100.0, True),
    _metric("7", LINE_COVERAGE_KEY, "Line Coverage", MetricType.PERCENT, 100.0, True),
    _metric("8", UNCOVERED_LINES_KEY, "Uncovered Lines", MetricType.INT, 0.0, True),
    _metric("9", DUPLICATED_LINES_KEY, "Duplicated Lines", MetricType.INT, 0.0, True),
    _metric("10", DUPLICATED_LINES_DENSITY_KEY, "Duplicated Lines (%)", MetricType.PERCENT,
            0.0, True),
    _metric("11", VIOLATIONS_KEY, "Issues", MetricType.INT, 0.0, True),
    _metric("12", BUGS_KEY, "Bugs", MetricType.INT, 0.0, True),
    _metric("13", CODE_SMELLS_KEY, "Code Smells", MetricType.INT, 0.0, True),
    _metric("14", VULNERABILITIES_KEY, "Vulnerabilities", MetricType.INT, 0.0, True),
    _metric("15", RELIABILITY_RATING_KEY, "Reliability Rating", MetricType.RATING, 1.0, True),
    _metric("16", SQALE_RATING_KEY, "Maintainability Rating", MetricType.RATING, 1.0, True),
    _metric("17", TECHNICAL_DEBT_KEY, "Technical Debt", MetricType.WORK_DUR, 0.0, True),
    _metric("18", TESTS_KEY, "Unit Tests", MetricType.INT),
    _metric("19", TEST_SUCCESS_DENSITY_KEY, "Unit Test Success (%)", MetricType.PERCENT,
            100.0, True),
    _metric("20", ALERT_STATUS_KEY, "Quality Gate Status", MetricType.LEVEL),
    _metric("21", QUALITY_GATE_DETAILS_KEY, "Quality Gate Details", MetricType.DATA),
    _metric("22", LAST_COMMIT_DATE_KEY, "Date of Last Commit", MetricType.MILLISEC),
)
