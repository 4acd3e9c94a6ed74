"""Benchmark program rendering.

Turns a job's prelude, benchmark body and teardown into one Python
program.  Pure text transform: nothing here touches the filesystem.
"""

from __future__ import annotations

import textwrap
from dataclasses import dataclass

# Prefixed so they cannot shadow names in user scripts.
LOOP_VARIABLE = "__benchdriver_i"
CODE_VARIABLE = "__benchdriver_code"
CODE_FILENAME = "<benchmark>"


@dataclass(frozen=True)
class BenchmarkScript:
    """Prelude, body and teardown of one benchmark program."""

    prelude: str
    script: str
    teardown: str
    loop_count: int

    def render(self) -> str:
        """Return the full program text.

        A ``loop_count`` above one compiles ``script`` once and runs the
        compiled code that many times at module level, so assignments in
        the body stay visible to ``teardown``.

        Raises:
            ValueError: If ``loop_count`` is not a positive integer.
        """
        body = _loop(self.script, self.loop_count)
        return "\n".join([self.prelude, body, self.teardown])


def build_script(prelude: str, script: str, teardown: str, loop_count: int) -> str:
    """Render a benchmark program; see :class:`BenchmarkScript`."""
    return BenchmarkScript(
        prelude=prelude,
        script=script,
        teardown=teardown,
        loop_count=loop_count,
    ).render()


def _loop(content: str, times: int) -> str:
    if isinstance(times, bool) or not isinstance(times, int) or times <= 0:
        raise ValueError(f"Unexpected loop count: {times!r}")

    body = textwrap.dedent(content)
    if times == 1:
        return body

    # Compiled once, run in module scope; the source text is never re-indented.
    source = body.strip("\n") or "pass"
    return (
        f"{CODE_VARIABLE} = compile({source!r}, {CODE_FILENAME!r}, 'exec')\n"
        f"for {LOOP_VARIABLE} in range({times}):\n"
        f"    exec({CODE_VARIABLE})"
    )
