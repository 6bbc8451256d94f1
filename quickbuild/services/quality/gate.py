"""
Quality gate evaluation.

Compares observed values against metric definitions. Criticality comes only
from the definition, never from how far a value missed its threshold.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone

from ...core.di import LazyService
from ...core.interfaces.logger import ILogger
from ...core.models.gate import (
    Comparison,
    GateDecision,
    MetricResult,
    MetricStatus,
    QualityGateMetric,
    QualityGateReport,
)
from ..logging import NullLogger

DEFAULT_MIN_SCORE = 85.0

DEFAULT_METRICS: tuple[QualityGateMetric, ...] = (
    QualityGateMetric(
        name="build_success_rate",
        threshold=100,
        comparison=Comparison.EQUALS,
        unit="%",
        description="Builds that produced a verified artifact",
    ),
    QualityGateMetric(
        name="build_time",
        threshold=300,
        comparison=Comparison.AT_MOST,
        unit="s",
        description="Duration of the last build",
    ),
    QualityGateMetric(
        name="integration_test_pass_rate",
        threshold=100,
        comparison=Comparison.EQUALS,
        unit="%",
        description="Scenario assertions passed",
    ),
    QualityGateMetric(
        name="validation_errors",
        threshold=0,
        comparison=Comparison.AT_MOST,
        description="Static validation errors",
    ),
    QualityGateMetric(
        name="validation_warnings",
        threshold=5,
        comparison=Comparison.AT_MOST,
        critical=False,
        description="Static validation warnings",
    ),
    QualityGateMetric(
        name="unit_test_coverage",
        threshold=95,
        comparison=Comparison.AT_LEAST,
        unit="%",
        description="Line coverage of unit tests",
    ),
    QualityGateMetric(
        name="critical_vulnerabilities",
        threshold=0,
        comparison=Comparison.AT_MOST,
        description="Critical findings of the security scan",
    ),
    QualityGateMetric(
        name="documentation_coverage",
        threshold=100,
        comparison=Comparison.AT_LEAST,
        critical=False,
        unit="%",
        description="Documented public APIs",
    ),
)


def meets_threshold(observed: float, threshold: float, comparison: Comparison | str) -> bool:
    comparison = Comparison(comparison)
    if comparison == Comparison.AT_MOST:
        return observed <= threshold
    if comparison == Comparison.AT_LEAST:
        return observed >= threshold
    return math.isclose(observed, threshold, rel_tol=1e-9, abs_tol=1e-9)


class QualityGateEvaluator:
    logger = LazyService(ILogger, NullLogger)

    def __init__(
        self,
        metrics: Sequence[QualityGateMetric] = DEFAULT_METRICS,
        min_score: float = DEFAULT_MIN_SCORE,
        strict: bool = False,
        logger: ILogger | None = None,
    ) -> None:
        names = [m.name for m in metrics]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate metric definitions: {', '.join(duplicates)}")
        self._metrics = list(metrics)
        self._min_score = min_score
        self._strict = strict
        self.logger = logger

    def evaluate(self, observed: Mapping[str, float]) -> QualityGateReport:
        """Evaluate every defined metric; a missing observation is a miss."""
        results = [self._evaluate_metric(m, observed.get(m.name)) for m in self._metrics]
        draft = QualityGateReport(
            results=results,
            decision=GateDecision.PASS,
            strict=self._strict,
            min_score=float(self._min_score),
            generated_at=datetime.now(timezone.utc).isoformat(),
        )
        report = QualityGateReport(
            results=results,
            decision=self._decide(draft),
            strict=draft.strict,
            min_score=draft.min_score,
            generated_at=draft.generated_at,
        )
        self.logger.info(
            "Quality gate: %s (score %.1f%%, %d critical failures)",
            report.decision,
            report.score,
            report.critical_failures,
        )
        return report

    def _evaluate_metric(self, metric: QualityGateMetric, value: float | None) -> MetricResult:
        if value is not None and meets_threshold(value, metric.threshold, metric.comparison):
            status = MetricStatus.PASS
        elif metric.critical:
            status = MetricStatus.FAIL
        else:
            status = MetricStatus.WARN
        self.logger.debug("Metric %s: observed=%s status=%s", metric.name, value, status.value)
        return MetricResult(
            name=metric.name,
            observed=float(value) if value is not None else None,
            threshold=float(metric.threshold),
            comparison=Comparison(metric.comparison),
            critical=metric.critical,
            status=status,
            unit=metric.unit,
        )

    def _decide(self, report: QualityGateReport) -> GateDecision:
        if report.critical_failures > 0:
            return GateDecision.FAIL
        if self._strict and report.passed_count != report.total:
            return GateDecision.FAIL
        if report.score < self._min_score:
            return GateDecision.WARN
        return GateDecision.PASS
