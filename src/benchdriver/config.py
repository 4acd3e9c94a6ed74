"""Run configuration and executable definitions.

Handles:
- The immutable ``Executable`` model (with its cached version description).
- The ``RunnerConfig`` subset handed to runner plugins.
- Parsing ``name::command`` executable specs from the CLI.
- Validating the final configuration before execution.
"""

from __future__ import annotations

import logging
import platform
import re
import shlex
import subprocess
import sys
import threading
from dataclasses import dataclass, field
from pathlib import Path

log = logging.getLogger("benchdriver")


# ---------------------------------------------------------------------------
# Executable
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Executable:
    """A named interpreter invocation prefix under test.

    ``command`` is stored as a tuple and never changes.  The version
    ``description`` is probed lazily, at most once per instance, and kept
    in a lock-guarded cache cell that is excluded from equality and hashing.
    """

    name: str
    command: tuple[str, ...]
    _cache: dict[str, str] = field(
        default_factory=dict, init=False, repr=False, compare=False, hash=False
    )
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False, hash=False
    )

    def __post_init__(self) -> None:
        if isinstance(self.command, str):
            raise TypeError(f"Executable '{self.name}' command must be a sequence of strings")
        command = tuple(self.command)
        if not command:
            raise ValueError(f"Executable '{self.name}' has an empty command")
        object.__setattr__(self, "command", command)

    @property
    def description(self) -> str:
        """Version string reported by ``<command> --version``."""
        with self._lock:
            if "description" not in self._cache:
                self._cache["description"] = _probe_description(self.command)
            return self._cache["description"]


def _probe_description(command: tuple[str, ...]) -> str:
    """Run ``<command> --version`` and return its trimmed output."""
    try:
        proc = subprocess.run(
            [*command, "--version"],
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            timeout=30,
        )
    except (subprocess.TimeoutExpired, OSError) as exc:
        log.warning("Could not describe executable %s: %s", shlex.join(command), exc)
        return ""
    if proc.returncode != 0:
        log.warning(
            "Version probe for %s failed (exit %d)", shlex.join(command), proc.returncode
        )
        return ""
    return proc.stdout.rstrip()


def default_executable() -> Executable:
    """The interpreter running benchdriver, named by its version."""
    return Executable(name=platform.python_version(), command=(sys.executable,))


def parse_executables(spec: str) -> list[Executable]:
    """Parse an executables spec from the CLI.

    Format: ``"name::command args;name2::command2 args"``.  An entry
    without ``::`` uses the command text as its name.

    Examples::

        "3.12::/usr/bin/python3.12"
        "jit::/opt/py/bin/python3 -X jit;nojit::/opt/py/bin/python3"
    """
    executables: list[Executable] = []
    for part in spec.split(";"):
        part = part.strip()
        if not part:
            continue
        if "::" in part:
            name, command_text = part.split("::", 1)
            name = name.strip()
        else:
            name, command_text = part, part
        command = shlex.split(command_text)
        if not name:
            raise ValueError(f"Executable name cannot be empty in '{part}'")
        if not command:
            raise ValueError(f"Executable '{name}' has an empty command")
        executables.append(Executable(name=name, command=tuple(command)))
    if not executables:
        raise ValueError(f"No executables found in '{spec}'")
    return executables


# ---------------------------------------------------------------------------
# RunnerConfig / Config
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RunnerConfig:
    """Subset of Config passed to runner plugins."""

    executables: tuple[Executable, ...]
    repeat_count: int = 1
    run_duration: float = 3.0
    verbose: int = 0


@dataclass
class Config:
    """Resolved configuration for a benchmark run."""

    runner_type: str = "memory"
    output_type: str = "compare"
    paths: list[Path] = field(default_factory=list)
    executables: list[Executable] = field(default_factory=lambda: [default_executable()])
    filters: list[str] = field(default_factory=list)  # Regexes on job names
    repeat_count: int = 1
    run_duration: float = 3.0  # Seconds; used by duration-based runners only
    verbose: int = 0

    @property
    def runner_config(self) -> RunnerConfig:
        """The runner-facing view of this configuration."""
        return RunnerConfig(
            executables=tuple(self.executables),
            repeat_count=self.repeat_count,
            run_duration=self.run_duration,
            verbose=self.verbose,
        )


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@dataclass
class ValidationError:
    """A single configuration validation error."""

    field: str
    message: str
    severity: str = "error"  # "error" or "warning"


def validate_config(config: Config) -> list[ValidationError]:
    """Validate a run configuration.

    Returns a list of validation errors.  Empty list means valid.
    """
    from benchdriver.output import output_types
    from benchdriver.runner import runner_types

    errors: list[ValidationError] = []

    if not config.executables:
        errors.append(
            ValidationError(field="executables", message="No executables defined.")
        )

    seen: set[str] = set()
    for executable in config.executables:
        if executable.name in seen:
            errors.append(
                ValidationError(
                    field="executables",
                    message=f"Duplicate executable name '{executable.name}'.",
                )
            )
        seen.add(executable.name)

    if isinstance(config.repeat_count, bool) or not isinstance(config.repeat_count, int):
        errors.append(
            ValidationError(
                field="repeat_count",
                message=f"Repeat count must be an integer (got {config.repeat_count!r}).",
            )
        )
    elif config.repeat_count < 1:
        errors.append(
            ValidationError(
                field="repeat_count",
                message=f"Repeat count must be at least 1 (got {config.repeat_count}).",
            )
        )

    if config.run_duration <= 0:
        errors.append(
            ValidationError(
                field="run_duration",
                message=f"Run duration must be positive (got {config.run_duration}).",
            )
        )

    for pattern in config.filters:
        try:
            re.compile(pattern)
        except re.error as exc:
            errors.append(
                ValidationError(
                    field="filters",
                    message=f"Invalid filter regex '{pattern}': {exc}",
                )
            )

    if config.runner_type not in runner_types():
        errors.append(
            ValidationError(
                field="runner_type",
                message=(
                    f"Unknown runner type '{config.runner_type}'. "
                    f"Available: {', '.join(runner_types())}"
                ),
            )
        )
    elif config.runner_type in ("memory", "time") and config.run_duration != 3.0:
        errors.append(
            ValidationError(
                field="run_duration",
                message=f"Runner '{config.runner_type}' ignores --run-duration.",
                severity="warning",
            )
        )

    if ":" in config.output_type or config.output_type not in output_types():
        errors.append(
            ValidationError(
                field="output_type",
                message=(
                    f"Unknown output type '{config.output_type}'. "
                    f"Available: {', '.join(output_types())}"
                ),
            )
        )

    return errors
