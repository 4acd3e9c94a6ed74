"""Plain text table: one row per job, one column per executable."""

from __future__ import annotations

from benchdriver.formatting import format_table, humanize_value
from benchdriver.metric import Metric
from benchdriver.output.base import BufferedFormatter


class SimpleFormatter(BufferedFormatter):
    """Aligned text table per metric, printed when the benchmark phase closes."""

    def render(self) -> None:
        for metric in self.metrics:
            self.render_metric(metric)

    def render_metric(self, metric: Metric) -> None:
        contexts = self.reported_contexts
        headers = [""] + [c.name for c in contexts]
        alignments = ["l"] + ["r"] * len(contexts)

        title = f"{metric.name} ({metric.unit})" if metric.unit else metric.name
        rows: list[list[str]] = []
        for job_name in self.ordered_jobs():
            by_context = self.results[job_name]
            row = [job_name]
            for context in contexts:
                entry = by_context.get(context.name)
                row.append(humanize_value(entry[1].value(metric)) if entry else "")
            rows.append(row)
        self.write(title)
        self.write(format_table(headers, rows, alignments=alignments))
        self.write()

    def ordered_jobs(self) -> list[str]:
        """Reported job names, configured ones first."""
        ordered = [n for n in self.job_names if n in self.results]
        return ordered + [n for n in self.results if n not in self.job_names]
