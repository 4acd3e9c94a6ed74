"""Benchmark jobs and job file loading.

A job file is either a plain Python file (one job, named after the file)
or a YAML mapping::

    prelude: |
      import json
      data = {"a": [1, 2, 3]}
    loop_count: 10000
    executables: [py312, py313]   # optional, names from --executables
    benchmark:
      dumps: json.dumps(data)
      loads: json.loads('{"a": [1, 2, 3]}')
    teardown: ""

``benchmark`` may also be a single script string, or a list whose items
are script strings or mappings with ``name``, ``script`` and optional
``prelude`` (appended to the top-level prelude) and ``loop_count``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Sequence

import yaml

from benchdriver.config import Executable

log = logging.getLogger("benchdriver")


@dataclass(frozen=True)
class Job:
    """A named unit of benchmark work."""

    name: str
    script: str
    prelude: str = ""
    teardown: str = ""
    loop_count: int | None = None  # None: the runner chooses
    executables: tuple[Executable, ...] = ()  # Empty: run on all executables

    def __post_init__(self) -> None:
        if self.loop_count is not None and (
            isinstance(self.loop_count, bool)
            or not isinstance(self.loop_count, int)
            or self.loop_count < 1
        ):
            raise ValueError(
                f"Job '{self.name}' loop_count must be a positive integer "
                f"(got {self.loop_count!r})"
            )
        object.__setattr__(self, "executables", tuple(self.executables))

    def runnable_execs(self, executables: Sequence[Executable]) -> list[Executable]:
        """Return the configured executables this job runs against.

        Declaration order of *executables* is preserved.
        """
        if not self.executables:
            return list(executables)
        return [e for e in executables if e in self.executables]


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_jobs(path: Path, executables: Sequence[Executable] = ()) -> list[Job]:
    """Load jobs from a ``.py`` or YAML job file.

    Args:
        path: Job file path.
        executables: Configured executables, used to resolve the names
            listed under a YAML file's ``executables`` key.

    Returns:
        Jobs in file order.
    """
    if not path.exists():
        raise FileNotFoundError(f"Job file not found: {path}")

    if path.suffix == ".py":
        return [Job(name=path.stem, script=path.read_text())]

    data = yaml.safe_load(path.read_text())
    if not isinstance(data, dict):
        raise ValueError(f"Job file must be a YAML mapping, got {type(data).__name__}: {path}")
    jobs = parse_jobs(data, executables)
    log.debug("Loaded %d job(s) from %s", len(jobs), path)
    return jobs


def parse_jobs(data: dict[str, Any], executables: Sequence[Executable] = ()) -> list[Job]:
    """Build jobs from a parsed YAML job document."""
    if "benchmark" not in data:
        raise ValueError("Job file has no 'benchmark' key")

    prelude = _text(data.get("prelude"), "prelude")
    teardown = _text(data.get("teardown"), "teardown")
    loop_count = data.get("loop_count")
    restrict = _resolve_executables(data.get("executables") or [], executables)

    benchmark = data["benchmark"]
    entries: list[dict[str, Any]]
    if isinstance(benchmark, str):
        entries = [{"name": benchmark.strip(), "script": benchmark}]
    elif isinstance(benchmark, dict):
        entries = [{"name": str(name), "script": script} for name, script in benchmark.items()]
    elif isinstance(benchmark, list):
        entries = []
        for item in benchmark:
            if isinstance(item, str):
                entries.append({"name": item.strip(), "script": item})
            elif isinstance(item, dict):
                entries.append(item)
            else:
                raise ValueError(
                    f"Benchmark entries must be strings or mappings, got {type(item).__name__}"
                )
    else:
        raise ValueError(
            f"'benchmark' must be a string, list or mapping, got {type(benchmark).__name__}"
        )

    jobs: list[Job] = []
    for entry in entries:
        script = entry.get("script")
        if not isinstance(script, str):
            raise ValueError(f"Benchmark entry {entry!r} has no script")
        name = str(entry.get("name") or script.strip())
        extra_prelude = _text(entry.get("prelude"), "prelude")
        jobs.append(
            Job(
                name=name,
                script=script,
                prelude="\n".join(p for p in (prelude, extra_prelude) if p),
                teardown=teardown,
                loop_count=entry.get("loop_count", loop_count),
                executables=restrict,
            )
        )
    return jobs


def _text(value: Any, key: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"'{key}' must be a string, got {type(value).__name__}")
    return value


def _resolve_executables(
    names: list[Any],
    executables: Sequence[Executable],
) -> tuple[Executable, ...]:
    by_name = {e.name: e for e in executables}
    resolved: list[Executable] = []
    for name in names:
        if str(name) not in by_name:
            raise ValueError(
                f"Unknown executable '{name}' in job file. "
                f"Available: {', '.join(by_name) or '(none)'}"
            )
        resolved.append(by_name[str(name)])
    return tuple(resolved)
