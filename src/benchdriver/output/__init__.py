"""Output protocol between runners and formatters.

Runners never render anything themselves.  They drive an :class:`Output`
through this nesting, and the selected formatter decides what to show::

    output.metrics = [...]                 # exactly once, first
    with output.with_warmup():             # optional, before the benchmark
        with output.with_job(name):
            with output.with_context(name, executable):
                output.report(values={...})
    with output.with_benchmark():          # exactly once
        with output.with_job(name):
            with output.with_context(name, executable):
                output.report(values={...}, loop_count=...)

Calls made out of this order raise :class:`ProtocolError` at the call
site.  Formatters are looked up by name in an explicit registry.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Iterator, Mapping, Sequence

from benchdriver.config import Executable
from benchdriver.errors import ProtocolError
from benchdriver.logging import get_logger
from benchdriver.metric import Context, Metric, Result
from benchdriver.output.base import Formatter

log = get_logger("output")

FormatterFactory = Callable[..., Formatter]

_RESERVED_CHARS = (":", "/", "\\")
_REGISTRY: dict[str, FormatterFactory] = {}


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


def validate_output_type(output_type: str) -> None:
    """Reject empty type names and names containing reserved delimiters."""
    if not output_type:
        raise ProtocolError("Output type cannot be empty")
    for char in _RESERVED_CHARS:
        if char in output_type:
            raise ProtocolError(f"Output type '{output_type}' cannot contain '{char}'")


def register_output(name: str, factory: FormatterFactory) -> None:
    """Register a formatter factory under *name*."""
    validate_output_type(name)
    _REGISTRY[name] = factory


def get_output_class(name: str) -> FormatterFactory:
    """Return the formatter factory registered under *name*."""
    validate_output_type(name)
    try:
        return _REGISTRY[name]
    except KeyError:
        raise ProtocolError(
            f"Unknown output type '{name}'. Available: {', '.join(output_types())}"
        ) from None


def output_types() -> list[str]:
    """Names of all registered formatters, sorted."""
    return sorted(_REGISTRY)


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


class Output:
    """Validating front end of a formatter.

    Holds the declared metrics and the current scope nesting, nothing else.
    """

    def __init__(
        self,
        output_type: str,
        *,
        job_names: Sequence[str],
        context_names: Sequence[str],
        **options: Any,
    ) -> None:
        validate_output_type(output_type)
        factory = get_output_class(output_type)
        self.output_type = output_type
        self._formatter = factory(
            job_names=list(job_names),
            context_names=list(context_names),
            **options,
        )
        self._metrics: tuple[Metric, ...] | None = None
        self._phase: str | None = None
        self._warmup_done = False
        self._benchmark_done = False
        self._job: str | None = None
        self._context: Context | None = None

    @property
    def formatter(self) -> Formatter:
        return self._formatter

    @property
    def metrics(self) -> tuple[Metric, ...]:
        return self._metrics or ()

    @metrics.setter
    def metrics(self, metrics: Sequence[Metric]) -> None:
        if self._metrics is not None:
            raise ProtocolError("Metrics can only be declared once")
        if self._phase is not None or self._warmup_done or self._benchmark_done:
            raise ProtocolError("Metrics must be declared before any phase")
        metrics = tuple(metrics)
        if not metrics:
            raise ProtocolError("At least one metric must be declared")
        for metric in metrics:
            if not isinstance(metric, Metric):
                raise ProtocolError(f"Not a Metric: {metric!r}")
        if len(set(metrics)) != len(metrics):
            raise ProtocolError("Duplicate metrics declared")
        self._metrics = metrics
        self._formatter.metrics = list(metrics)

    @contextmanager
    def with_warmup(self) -> Iterator[None]:
        self._check_phase_open("warmup")
        if self._warmup_done:
            raise ProtocolError("Warmup phase can only run once")
        if self._benchmark_done:
            raise ProtocolError("Warmup phase must come before the benchmark phase")
        with self._phase_scope("warmup"), self._formatter.with_warmup():
            yield
        self._warmup_done = True

    @contextmanager
    def with_benchmark(self) -> Iterator[None]:
        self._check_phase_open("benchmark")
        if self._benchmark_done:
            raise ProtocolError("Benchmark phase can only run once")
        with self._phase_scope("benchmark"), self._formatter.with_benchmark():
            yield
        self._benchmark_done = True

    @contextmanager
    def with_job(self, name: str) -> Iterator[None]:
        if self._phase is None:
            raise ProtocolError(f"with_job('{name}') called outside a phase")
        if self._job is not None:
            raise ProtocolError(f"with_job('{name}') nested inside job '{self._job}'")
        self._job = name
        try:
            with self._formatter.with_job(name):
                yield
        finally:
            self._job = None

    @contextmanager
    def with_context(self, name: str, executable: Executable) -> Iterator[None]:
        if self._job is None:
            raise ProtocolError(f"with_context('{name}') called outside a job")
        if self._context is not None:
            raise ProtocolError(
                f"with_context('{name}') nested inside context '{self._context.name}'"
            )
        context = Context(name=name, executable=executable)
        self._context = context
        try:
            with self._formatter.with_context(context):
                yield
        finally:
            self._context = None

    def report(
        self,
        values: Mapping[Metric, float],
        duration: float | None = None,
        loop_count: int | None = None,
        environment: Mapping[str, str] | None = None,
    ) -> None:
        """Emit one Result for the innermost open (job, context) pair."""
        if self._metrics is None:
            raise ProtocolError("report called before metrics were declared")
        if self._context is None:
            raise ProtocolError("report called outside with_context")

        not_metrics = [repr(m) for m in values if not isinstance(m, Metric)]
        if not_metrics:
            raise ProtocolError(f"Values must be keyed by Metric, got: {', '.join(not_metrics)}")
        unknown = [m.name for m in values if m not in self._metrics]
        if unknown:
            raise ProtocolError(f"Undeclared metric(s) reported: {', '.join(unknown)}")
        missing = [m.name for m in self._metrics if m not in values]
        if missing:
            raise ProtocolError(f"Missing value(s) for metric(s): {', '.join(missing)}")

        result = Result(
            values={m: float(values[m]) for m in self._metrics},
            duration=duration,
            loop_count=loop_count,
            environment=dict(environment or {}),
        )
        log.debug("%s/%s: %r", self._job, self._context.name, result.values)
        self._formatter.report(result)

    def _check_phase_open(self, phase: str) -> None:
        if self._metrics is None:
            raise ProtocolError(f"Metrics must be declared before the {phase} phase")
        if self._phase is not None:
            raise ProtocolError(f"Cannot open {phase} phase inside {self._phase} phase")

    @contextmanager
    def _phase_scope(self, phase: str) -> Iterator[None]:
        self._phase = phase
        try:
            yield
        finally:
            self._phase = None


# Built-in formatters.
from benchdriver.output.compare import CompareFormatter  # noqa: E402
from benchdriver.output.markdown import MarkdownFormatter  # noqa: E402
from benchdriver.output.record import RecordFormatter  # noqa: E402
from benchdriver.output.simple import SimpleFormatter  # noqa: E402

register_output("compare", CompareFormatter)
register_output("simple", SimpleFormatter)
register_output("markdown", MarkdownFormatter)
register_output("record", RecordFormatter)
