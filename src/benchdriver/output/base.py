"""Formatter base classes.

A formatter receives the protocol calls forwarded by
:class:`benchdriver.output.Output`.  Scope methods are context managers
so a formatter may stream as scopes open or buffer until they close.
"""

from __future__ import annotations

import sys
from contextlib import contextmanager
from typing import IO, Iterator

from benchdriver.errors import ProtocolError
from benchdriver.metric import Context, Metric, Result


class Formatter:
    """Base formatter: tracks scopes, renders nothing."""

    def __init__(
        self,
        *,
        job_names: list[str],
        context_names: list[str],
        stream: IO[str] | None = None,
    ) -> None:
        self.job_names = job_names
        self.context_names = context_names
        self.stream = stream if stream is not None else sys.stdout
        self.metrics: list[Metric] = []
        self.in_warmup = False
        self.current_job: str | None = None
        self.current_context: Context | None = None

    @contextmanager
    def with_warmup(self) -> Iterator[None]:
        self.in_warmup = True
        try:
            yield
        finally:
            self.in_warmup = False

    @contextmanager
    def with_benchmark(self) -> Iterator[None]:
        yield

    @contextmanager
    def with_job(self, name: str) -> Iterator[None]:
        self.current_job = name
        try:
            yield
        finally:
            self.current_job = None

    @contextmanager
    def with_context(self, context: Context) -> Iterator[None]:
        self.current_context = context
        try:
            yield
        finally:
            self.current_context = None

    def report(self, result: Result) -> None:
        raise NotImplementedError

    def write(self, text: str = "") -> None:
        self.stream.write(text + "\n")


class BufferedFormatter(Formatter):
    """Collects benchmark results and renders them when the phase closes.

    Warmup reports are dropped.
    """

    def __init__(
        self,
        *,
        job_names: list[str],
        context_names: list[str],
        stream: IO[str] | None = None,
    ) -> None:
        super().__init__(job_names=job_names, context_names=context_names, stream=stream)
        # job name -> context name -> (Context, Result), in report order
        self.results: dict[str, dict[str, tuple[Context, Result]]] = {}

    @contextmanager
    def with_benchmark(self) -> Iterator[None]:
        yield
        self.render()

    def report(self, result: Result) -> None:
        if self.in_warmup:
            return
        if self.current_job is None or self.current_context is None:
            raise ProtocolError("report called outside a job and context")
        by_context = self.results.setdefault(self.current_job, {})
        by_context[self.current_context.name] = (self.current_context, result)

    @property
    def reported_contexts(self) -> list[Context]:
        """Contexts that reported at least once, in configured order."""
        seen: dict[str, Context] = {}
        for by_context in self.results.values():
            for name, (context, _) in by_context.items():
                seen.setdefault(name, context)
        ordered = [seen[n] for n in self.context_names if n in seen]
        ordered += [c for n, c in seen.items() if n not in self.context_names]
        return ordered

    def render(self) -> None:
        raise NotImplementedError
