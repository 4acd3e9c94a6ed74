"""YAML record of a single run.

Writes ``benchdriver.record.yml`` with the declared metrics and every
value reported in the benchmark phase.  Older records are overwritten,
never merged.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Any

import yaml

from benchdriver.output.base import BufferedFormatter

log = logging.getLogger("benchdriver")

DEFAULT_RECORD_PATH = Path("benchdriver.record.yml")


class RecordFormatter(BufferedFormatter):
    """Dump the run's results to a YAML file."""

    def __init__(
        self,
        *,
        job_names: list[str],
        context_names: list[str],
        stream: IO[str] | None = None,
        path: Path = DEFAULT_RECORD_PATH,
    ) -> None:
        super().__init__(job_names=job_names, context_names=context_names, stream=stream)
        self.path = path

    def to_dict(self) -> dict[str, Any]:
        """Serialize the collected results to a YAML-compatible dict."""
        results: dict[str, dict[str, Any]] = {}
        for job_name, by_context in self.results.items():
            results[job_name] = {}
            for context_name, (context, result) in by_context.items():
                results[job_name][context_name] = {
                    "command": list(context.executable.command),
                    "values": {m.name: result.values[m] for m in self.metrics},
                    "loop_count": result.loop_count,
                    "duration": result.duration,
                    "environment": dict(result.environment),
                }
        return {
            "metrics": [m.to_dict() for m in self.metrics],
            "job_names": list(self.job_names),
            "context_names": list(self.context_names),
            "results": results,
        }

    def render(self) -> None:
        self.path.write_text(yaml.safe_dump(self.to_dict(), sort_keys=False))
        log.info("Results recorded to %s", self.path)
        self.write(f"Results recorded to {self.path}")
