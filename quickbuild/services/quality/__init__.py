"""Quality gate evaluation and pipeline metrics."""

from .gate import DEFAULT_METRICS, QualityGateEvaluator, meets_threshold
from .metrics import MetricsStore, load_metric_definitions, load_observed

__all__ = [
    "DEFAULT_METRICS",
    "MetricsStore",
    "QualityGateEvaluator",
    "load_metric_definitions",
    "load_observed",
    "meets_threshold",
]
