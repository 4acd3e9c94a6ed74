"""Runner registry and job orchestration.

A runner is constructed with ``config`` (a :class:`RunnerConfig`) and
``output`` (an :class:`Output`) and exposes ``run(jobs)``.  Runners are
registered by name; :func:`run_jobs` picks one from ``Config.runner_type``.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Sequence

from benchdriver.config import Config
from benchdriver.job import Job
from benchdriver.output import Output

log = logging.getLogger("benchdriver")

RunnerFactory = Callable[..., Any]

_REGISTRY: dict[str, RunnerFactory] = {}


def register_runner(name: str, factory: RunnerFactory) -> None:
    """Register a runner class under *name*."""
    if not name or ":" in name:
        raise ValueError(f"Invalid runner type '{name}'")
    _REGISTRY[name] = factory


def get_runner_class(name: str) -> RunnerFactory:
    """Return the runner class registered under *name*."""
    try:
        return _REGISTRY[name]
    except KeyError:
        raise ValueError(
            f"Unknown runner type '{name}'. Available: {', '.join(runner_types())}"
        ) from None


def runner_types() -> list[str]:
    """Names of all registered runners, sorted."""
    return sorted(_REGISTRY)


def select_jobs(jobs: Sequence[Job], filters: Sequence[str]) -> list[Job]:
    """Keep jobs whose name matches any of *filters* (all if none given)."""
    if not filters:
        return list(jobs)
    patterns = [re.compile(f) for f in filters]
    return [job for job in jobs if any(p.search(job.name) for p in patterns)]


def run_jobs(jobs: Sequence[Job], config: Config, **output_options: Any) -> Output:
    """Run *jobs* with the configured runner and output.

    Args:
        jobs: Jobs in declaration order.  Names must be unique.
        config: The resolved run configuration.
        output_options: Extra keyword arguments for the formatter.

    Returns:
        The Output the runner reported through.

    Raises:
        ValueError: On duplicate job names or unknown runner type.
    """
    seen: set[str] = set()
    for job in jobs:
        if job.name in seen:
            raise ValueError(f"Duplicate job name '{job.name}'")
        seen.add(job.name)

    runner_cls = get_runner_class(config.runner_type)
    jobs = select_jobs(jobs, config.filters)
    if not jobs:
        log.warning("No jobs matched the given filters")

    output = Output(
        config.output_type,
        job_names=[job.name for job in jobs],
        context_names=[e.name for e in config.executables],
        **output_options,
    )
    runner = runner_cls(config=config.runner_config, output=output)
    log.info(
        "Running %d job(s) on %d executable(s) with the '%s' runner",
        len(jobs),
        len(config.executables),
        config.runner_type,
    )
    runner.run(jobs)
    return output


# Built-in runners.
from benchdriver.runner.elapsed import ElapsedTimeRunner  # noqa: E402
from benchdriver.runner.memory import MemoryRunner  # noqa: E402

register_runner("memory", MemoryRunner)
register_runner("time", ElapsedTimeRunner)
