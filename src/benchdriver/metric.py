"""Measurement descriptors and per-pair results.

Hierarchy::

    Metric   (static descriptor: name, unit, direction)
    Context  (one executable inside one job)
    Result   (values keyed by Metric, for one job x context pair)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from benchdriver.config import Executable


@dataclass(frozen=True)
class Metric:
    """A named, directional unit of measurement."""

    name: str
    unit: str = ""
    larger_is_better: bool = True
    worse_word: str = "slower"

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a YAML/JSON-compatible dict."""
        return {
            "name": self.name,
            "unit": self.unit,
            "larger_is_better": self.larger_is_better,
            "worse_word": self.worse_word,
        }


@dataclass(frozen=True)
class Context:
    """Identifies which executable a Result belongs to, within a job."""

    name: str
    executable: Executable


@dataclass(frozen=True)
class Result:
    """One measurement for one (job, executable) pair."""

    values: Mapping[Metric, float]
    duration: float | None = None
    loop_count: int | None = None
    environment: Mapping[str, str] = field(default_factory=dict)

    def value(self, metric: Metric) -> float:
        """Return the value reported for *metric*."""
        return self.values[metric]
