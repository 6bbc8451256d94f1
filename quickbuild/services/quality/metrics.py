"""
Pipeline metrics persistence and metric definition loading.
"""

from __future__ import annotations

import json
from pathlib import Path

try:
    import tomllib
except ImportError:
    import tomli as tomllib

from pydantic import ValidationError

from ...core.exceptions import ConfigFileError
from ...core.models.gate import QualityGateMetric


def _read_table(path: Path) -> dict:
    """Read a JSON or TOML file (by suffix) into a dict."""
    try:
        if path.suffix == ".toml":
            with open(path, "rb") as f:
                return tomllib.load(f)
        with open(path) as f:
            data = json.load(f)
    except (tomllib.TOMLDecodeError, json.JSONDecodeError) as e:
        raise ConfigFileError(f"Cannot parse {path}: {e}", file_path=str(path), cause=e) from e
    except OSError as e:
        raise ConfigFileError(f"Cannot read {path}: {e}", file_path=str(path), cause=e) from e
    if not isinstance(data, dict):
        raise ConfigFileError(f"Expected an object at the top level of {path}", file_path=str(path))
    return data


def _numbers(data: dict, path: Path) -> dict[str, float]:
    observed = {}
    for name, value in data.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigFileError(
                f"Observed value for {name!r} is not a number: {value!r}", file_path=str(path)
            )
        observed[name] = float(value)
    return observed


def load_observed(path: Path) -> dict[str, float]:
    """Load observed metric values from a flat JSON or TOML table."""
    data = _read_table(path)
    return _numbers(data.get("metrics", data), path)


def load_metric_definitions(path: Path) -> list[QualityGateMetric]:
    """Load ``[[metric]]`` definitions (TOML) or a ``metric`` list (JSON)."""
    data = _read_table(path)
    entries = data.get("metric", [])
    try:
        metrics = [QualityGateMetric.model_validate(entry) for entry in entries]
    except ValidationError as e:
        raise ConfigFileError(
            f"Invalid metric definition in {path}: {e}", file_path=str(path), cause=e
        ) from e

    seen: set[str] = set()
    for metric in metrics:
        if metric.name in seen:
            raise ConfigFileError(f"Duplicate metric {metric.name!r} in {path}", file_path=str(path))
        seen.add(metric.name)
    return metrics


class MetricsStore:
    """Observed values recorded by pipeline commands, kept as a JSON file in the workspace."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> dict[str, float]:
        if not self.path.exists():
            return {}
        return _numbers(_read_table(self.path), self.path)

    def update(self, **values: float) -> dict[str, float]:
        """Merge ``values`` into the stored metrics and save."""
        metrics = self.load()
        metrics.update({k: float(v) for k, v in values.items()})
        self.save(metrics)
        return metrics

    def save(self, metrics: dict[str, float]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".tmp")
        tmp.write_text(json.dumps(metrics, indent=2, sort_keys=True) + "\n")
        tmp.replace(self.path)

    def clear(self) -> bool:
        if self.path.exists():
            self.path.unlink()
            return True
        return False
