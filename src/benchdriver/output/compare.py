"""Default output: the simple table followed by a per-job ranking.

For every job measured on more than one executable, executables are listed
best first and each one after the best gets its ratio to the best value::

    Comparison:
      sorted
               3.13:   11.000M bytes
               3.12:   12.345M bytes - 1.12x  larger

The direction comes from ``Metric.larger_is_better`` and the wording from
``Metric.worse_word``.
"""

from __future__ import annotations

import math

from benchdriver.formatting import humanize_value
from benchdriver.metric import Context, Metric, Result
from benchdriver.output.simple import SimpleFormatter


def rank(entries: list[tuple[Context, Result]], metric: Metric) -> list[tuple[Context, float]]:
    """Order ``(context, result)`` pairs best first; ties keep report order."""
    values = [(context, result.value(metric)) for context, result in entries]
    return sorted(values, key=lambda cv: cv[1], reverse=metric.larger_is_better)


def ratio(best: float, value: float, larger_is_better: bool) -> float:
    """How many times worse *value* is than *best* (1.0 means equal)."""
    numerator, denominator = (best, value) if larger_is_better else (value, best)
    if denominator == 0:
        return 1.0 if numerator == 0 else math.inf
    return numerator / denominator


class CompareFormatter(SimpleFormatter):
    """Text table per metric plus a ranking of executables within each job."""

    def render_metric(self, metric: Metric) -> None:
        super().render_metric(metric)

        rankings = []
        for job_name in self.ordered_jobs():
            entries = list(self.results[job_name].values())
            if len(entries) > 1:
                rankings.append((job_name, rank(entries, metric)))
        if not rankings:
            return

        unit = f" {metric.unit}" if metric.unit else ""
        width = max(len(context.name) for _, ranked in rankings for context, _ in ranked)
        self.write("Comparison:")
        for job_name, ranked in rankings:
            self.write(f"  {job_name}")
            best = ranked[0][1]
            for index, (context, value) in enumerate(ranked):
                line = f"    {context.name.rjust(width)}: {humanize_value(value):>10}{unit}"
                if index > 0:
                    times = ratio(best, value, metric.larger_is_better)
                    line += f" - {times:.2f}x  {metric.worse_word}"
                self.write(line)
        self.write()
