"""Markdown table output, suitable for READMEs and issue comments."""

from __future__ import annotations

from benchdriver.formatting import humanize_value
from benchdriver.output.base import BufferedFormatter


class MarkdownFormatter(BufferedFormatter):
    """One markdown table per metric, followed by the executable versions."""

    def render(self) -> None:
        contexts = self.reported_contexts
        jobs = [n for n in self.job_names if n in self.results]
        jobs += [n for n in self.results if n not in self.job_names]

        for metric in self.metrics:
            unit = f" ({metric.unit})" if metric.unit else ""
            self.write(f"# {metric.name}{unit}")
            self.write()
            self.write("|" + "|".join([""] + [c.name for c in contexts]) + "|")
            self.write("|" + "|".join([":---"] + ["---:"] * len(contexts)) + "|")
            for job_name in jobs:
                cells = [job_name]
                for context in contexts:
                    entry = self.results[job_name].get(context.name)
                    cells.append(humanize_value(entry[1].value(metric)) if entry else "")
                self.write("|" + "|".join(_escape(c) for c in cells) + "|")
            self.write()

        for context in contexts:
            description = context.executable.description
            if description:
                self.write(f"- {context.name}: {description}")
            else:
                self.write(f"- {context.name}")


def _escape(cell: str) -> str:
    return cell.replace("|", "\\|").replace("\n", " ")
