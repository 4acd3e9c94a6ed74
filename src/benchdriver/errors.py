"""Error taxonomy for benchdriver.

Every failure aborts the run; there is no partial-result mode.
"""

from __future__ import annotations

import shlex
from typing import Any, Mapping, Sequence


class BenchDriverError(Exception):
    """Base error type for harness failures."""

    def __init__(self, message: str, *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.context = dict(context or {})


class UnsupportedEnvironmentError(BenchDriverError):
    """The host lacks an OS facility the metric depends on."""


class ExecutionError(BenchDriverError):
    """A benchmark subprocess exited with a non-zero status."""

    def __init__(self, command: Sequence[str], returncode: int, output: str) -> None:
        self.command = tuple(command)
        self.returncode = returncode
        self.output = output
        super().__init__(
            f"Failed to execute: {shlex.join(self.command)} (status: {returncode})\n{output}",
            context={"command": list(self.command), "returncode": returncode},
        )


class OutputParseError(BenchDriverError):
    """Captured measurement output did not match the expected format."""

    def __init__(self, message: str, output: str) -> None:
        self.output = output
        super().__init__(f"{message}:\n{output}")


class ProtocolError(BenchDriverError, ValueError):
    """The output protocol was driven out of order or with bad arguments."""
