"""Runners measured through GNU ``/usr/bin/time``.

Each (job, executable) pair is measured by:

1. Rendering the job into a Python program.
2. Writing it to a temporary file that lives for one subprocess call.
3. Running ``/usr/bin/time <command...> <script>`` and capturing
   combined stdout/stderr.
4. Parsing the resource summary line GNU time prints on exit::

       0.01user 0.00system 0:00.01elapsed 90%CPU (0avgtext+0avgdata 9344maxresident)k

Repetitions go through :func:`benchdriver.repeater.with_repeat`; the
best value is reported.  Linux only.
"""

from __future__ import annotations

import dataclasses
import functools
import logging
import os
import platform
import re
import subprocess
import tempfile
from contextlib import contextmanager
from typing import ClassVar, Iterator, Sequence

import click

from benchdriver.config import Executable, RunnerConfig
from benchdriver.errors import ExecutionError, OutputParseError, UnsupportedEnvironmentError
from benchdriver.job import Job
from benchdriver.metric import Metric
from benchdriver.output import Output
from benchdriver.repeater import with_repeat
from benchdriver.script import build_script

log = logging.getLogger("benchdriver")

TIME_COMMAND = "/usr/bin/time"

TIME_PATTERN = re.compile(
    r"^(?P<user>\d+\.\d+)user\s+(?P<system>\d+\.\d+)system\s+"
    r"(?P<elapsed>(?:\d+:)?\d+:\d+(?:\.\d+)?)elapsed"
    r".+\([^\s]+\s+(?P<maxresident>\d+)maxresident\)k$",
    re.MULTILINE,
)


class GnuTimeRunner:
    """Base class: subclasses set ``METRIC`` and implement :meth:`extract`."""

    METRIC: ClassVar[Metric]
    time_command: str = TIME_COMMAND

    def __init__(self, *, config: RunnerConfig, output: Output) -> None:
        self.config = config
        self.output = output

    def run(self, jobs: Sequence[Job]) -> None:
        """Measure every job on each of its runnable executables."""
        self.check_environment()

        self.output.metrics = [self.METRIC]

        jobs = [
            job if job.loop_count is not None else dataclasses.replace(job, loop_count=1)
            for job in jobs
        ]

        with self.output.with_benchmark():
            for job in jobs:
                with self.output.with_job(job.name):
                    for executable in job.runnable_execs(self.config.executables):
                        value = with_repeat(
                            functools.partial(self.run_benchmark, job, executable),
                            repeat_count=self.config.repeat_count,
                            larger_is_better=self.METRIC.larger_is_better,
                        )
                        if self.config.verbose >= 1:
                            log.debug("%s on %s: %r", job.name, executable.name, value)
                        with self.output.with_context(executable.name, executable):
                            self.output.report(
                                values={self.METRIC: value},
                                loop_count=job.loop_count,
                            )

    def check_environment(self) -> None:
        """Fail fast when the host cannot provide the measurement."""
        system = platform.system()
        if system != "Linux":
            raise UnsupportedEnvironmentError(
                f"{self.METRIC.name} measurement is not supported on '{system}' for now"
            )
        if not os.access(self.time_command, os.X_OK):
            raise UnsupportedEnvironmentError(
                f"{self.time_command} is not available; install GNU time"
            )

    def run_benchmark(self, job: Job, executable: Executable) -> float:
        """Run *job* once on *executable* and return the metric value."""
        if job.loop_count is None:
            raise ValueError(f"Job '{job.name}' has no loop_count")
        script = build_script(
            prelude=job.prelude,
            script=job.script,
            teardown=job.teardown,
            loop_count=job.loop_count,
        )
        with self.script_file(script) as path:
            output = self.execute([self.time_command, *executable.command, path])
        return self.parse(output)

    @contextmanager
    def script_file(self, script: str) -> Iterator[str]:
        """Write *script* to a temporary file, removed on exit."""
        if self.config.verbose >= 2:
            sep = "-" * 30
            click.echo(f"\n\n{sep}[Script begin]{sep}\n{script}\n{sep}[Script end]{sep}\n", err=True)

        fd, path = tempfile.mkstemp(prefix="benchdriver-", suffix=".py")
        try:
            with os.fdopen(fd, "w") as f:
                f.write(script + "\n")
            yield path
        finally:
            try:
                os.unlink(path)
            except FileNotFoundError:
                pass

    def execute(self, args: list[str]) -> str:
        """Run *args*, returning combined stdout/stderr.

        Raises:
            ExecutionError: If the process exits with a non-zero status.
        """
        proc = subprocess.run(
            args,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )
        if proc.returncode != 0:
            raise ExecutionError(args, proc.returncode, proc.stdout)
        return proc.stdout

    def parse(self, output: str) -> float:
        """Extract the metric value from GNU time output."""
        match = TIME_PATTERN.search(output)
        if match is None:
            raise OutputParseError(f"Unexpected format given from {self.time_command}", output)
        return self.extract(match)

    def extract(self, match: re.Match[str]) -> float:
        raise NotImplementedError
