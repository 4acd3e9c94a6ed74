"""Tests for benchdriver.output: the nested reporting protocol."""

from __future__ import annotations

import unittest
from unittest.mock import patch

from bench_test_helpers import RecordingFormatter, make_executable

from benchdriver.errors import ProtocolError
from benchdriver.metric import Metric
from benchdriver.output import (
    Output,
    get_output_class,
    output_types,
    register_output,
    validate_output_type,
)
from benchdriver.output.compare import CompareFormatter
from benchdriver.output.markdown import MarkdownFormatter
from benchdriver.output.record import RecordFormatter
from benchdriver.output.simple import SimpleFormatter

RSS = Metric(name="Max resident set size", unit="bytes", larger_is_better=False)
IPS = Metric(name="Iteration per second", unit="i/s")


def _make_output(metrics: list[Metric] | None = None) -> Output:
    output = Output("recording", job_names=["job"], context_names=["py"])
    if metrics is not None:
        output.metrics = metrics
    return output


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestRegistry(unittest.TestCase):
    """Tests for formatter registration and lookup."""

    def test_builtins_registered(self) -> None:
        self.assertIs(get_output_class("compare"), CompareFormatter)
        self.assertIs(get_output_class("simple"), SimpleFormatter)
        self.assertIs(get_output_class("markdown"), MarkdownFormatter)
        self.assertIs(get_output_class("record"), RecordFormatter)
        for name in ("compare", "simple", "markdown", "record"):
            self.assertIn(name, output_types())

    def test_register_custom(self) -> None:
        register_output("custom_recording", RecordingFormatter)
        self.assertIs(get_output_class("custom_recording"), RecordingFormatter)

    def test_unknown_type(self) -> None:
        with self.assertRaises(ProtocolError) as cm:
            get_output_class("nope")
        self.assertIn("Available", str(cm.exception))

    def test_register_rejects_delimiter(self) -> None:
        with self.assertRaises(ProtocolError):
            register_output("foo:bar", RecordingFormatter)

    def test_validate_rejects_reserved_characters(self) -> None:
        for name in ("foo:bar", "foo/bar", "foo\\bar", ""):
            with self.assertRaises(ProtocolError):
                validate_output_type(name)

    def test_protocol_error_is_value_error(self) -> None:
        with self.assertRaises(ValueError):
            validate_output_type("foo:bar")


class TestOutputConstruction(unittest.TestCase):
    """Tests for Output.__init__."""

    def test_delimiter_rejected_before_resolution(self) -> None:
        with patch("benchdriver.output.get_output_class") as lookup:
            with self.assertRaises(ProtocolError):
                Output("foo:bar", job_names=[], context_names=[])
        lookup.assert_not_called()

    def test_formatter_receives_names(self) -> None:
        output = Output("recording", job_names=["a", "b"], context_names=["py"])
        formatter = output.formatter
        self.assertIsInstance(formatter, RecordingFormatter)
        self.assertEqual(formatter.job_names, ["a", "b"])
        self.assertEqual(formatter.context_names, ["py"])

    def test_unknown_type(self) -> None:
        with self.assertRaises(ProtocolError):
            Output("does_not_exist", job_names=[], context_names=[])


# ---------------------------------------------------------------------------
# metrics=
# ---------------------------------------------------------------------------


class TestMetrics(unittest.TestCase):
    """Tests for metric declaration."""

    def test_declared_metrics_forwarded(self) -> None:
        output = _make_output([RSS, IPS])
        self.assertEqual(output.metrics, (RSS, IPS))
        self.assertEqual(output.formatter.metrics, [RSS, IPS])

    def test_declare_twice(self) -> None:
        output = _make_output([RSS])
        with self.assertRaises(ProtocolError):
            output.metrics = [IPS]

    def test_declare_empty(self) -> None:
        output = _make_output()
        with self.assertRaises(ProtocolError):
            output.metrics = []

    def test_declare_duplicates(self) -> None:
        output = _make_output()
        with self.assertRaises(ProtocolError):
            output.metrics = [RSS, RSS]

    def test_declare_non_metric(self) -> None:
        output = _make_output()
        with self.assertRaises(ProtocolError):
            output.metrics = ["rss"]  # type: ignore[list-item]

    def test_phase_requires_metrics(self) -> None:
        output = _make_output()
        with self.assertRaises(ProtocolError):
            with output.with_benchmark():
                pass
        with self.assertRaises(ProtocolError):
            with output.with_warmup():
                pass


# ---------------------------------------------------------------------------
# Nesting
# ---------------------------------------------------------------------------


class TestNesting(unittest.TestCase):
    """Tests for the scope grammar."""

    def test_full_session(self) -> None:
        output = _make_output([RSS])
        exe = make_executable("py")
        with output.with_warmup():
            with output.with_job("job"):
                with output.with_context("py", exe):
                    output.report(values={RSS: 1.0})
        with output.with_benchmark():
            with output.with_job("job"):
                with output.with_context("py", exe):
                    output.report(values={RSS: 2.0}, loop_count=10)

        formatter = output.formatter
        self.assertEqual(
            formatter.events,
            [
                ("warmup",),
                ("job", "job"),
                ("context", "py"),
                ("report",),
                ("end_warmup",),
                ("benchmark",),
                ("job", "job"),
                ("context", "py"),
                ("report",),
                ("end_benchmark",),
            ],
        )
        job, context, in_warmup, result = formatter.reports[1]
        self.assertEqual(job, "job")
        self.assertEqual(context.name, "py")
        self.assertIs(context.executable, exe)
        self.assertFalse(in_warmup)
        self.assertEqual(result.values, {RSS: 2.0})
        self.assertEqual(result.loop_count, 10)
        self.assertIsNone(result.duration)
        self.assertEqual(dict(result.environment), {})
        self.assertTrue(formatter.reports[0][2])

    def test_job_outside_phase(self) -> None:
        output = _make_output([RSS])
        with self.assertRaises(ProtocolError):
            with output.with_job("job"):
                pass

    def test_context_outside_job(self) -> None:
        output = _make_output([RSS])
        with output.with_benchmark():
            with self.assertRaises(ProtocolError):
                with output.with_context("py", make_executable()):
                    pass

    def test_nested_job(self) -> None:
        output = _make_output([RSS])
        with output.with_benchmark():
            with output.with_job("a"):
                with self.assertRaises(ProtocolError):
                    with output.with_job("b"):
                        pass

    def test_nested_context(self) -> None:
        output = _make_output([RSS])
        exe = make_executable()
        with output.with_benchmark():
            with output.with_job("a"):
                with output.with_context("py", exe):
                    with self.assertRaises(ProtocolError):
                        with output.with_context("py2", exe):
                            pass

    def test_nested_phase(self) -> None:
        output = _make_output([RSS])
        with output.with_benchmark():
            with self.assertRaises(ProtocolError):
                with output.with_warmup():
                    pass

    def test_benchmark_only_once(self) -> None:
        output = _make_output([RSS])
        with output.with_benchmark():
            pass
        with self.assertRaises(ProtocolError):
            with output.with_benchmark():
                pass

    def test_warmup_after_benchmark(self) -> None:
        output = _make_output([RSS])
        with output.with_benchmark():
            pass
        with self.assertRaises(ProtocolError):
            with output.with_warmup():
                pass

    def test_warmup_only_once(self) -> None:
        output = _make_output([RSS])
        with output.with_warmup():
            pass
        with self.assertRaises(ProtocolError):
            with output.with_warmup():
                pass

    def test_metrics_after_phase(self) -> None:
        output = Output("recording", job_names=[], context_names=[])
        output.metrics = [RSS]
        with output.with_warmup():
            pass
        with self.assertRaises(ProtocolError):
            output.metrics = [IPS]

    def test_scope_restored_after_exception(self) -> None:
        output = _make_output([RSS])
        exe = make_executable()
        with output.with_benchmark():
            with self.assertRaises(KeyError):
                with output.with_job("a"):
                    with output.with_context("py", exe):
                        raise KeyError("boom")
            with output.with_job("b"):
                with output.with_context("py", exe):
                    output.report(values={RSS: 3.0})
        self.assertEqual(output.formatter.reports[0][0], "b")


# ---------------------------------------------------------------------------
# report
# ---------------------------------------------------------------------------


class TestReport(unittest.TestCase):
    """Tests for report()."""

    def test_report_before_metrics(self) -> None:
        output = _make_output()
        with self.assertRaises(ProtocolError) as cm:
            output.report(values={RSS: 1.0})
        self.assertIn("metrics", str(cm.exception))

    def test_report_outside_context(self) -> None:
        output = _make_output([RSS])
        with output.with_benchmark():
            with output.with_job("job"):
                with self.assertRaises(ProtocolError):
                    output.report(values={RSS: 1.0})

    def _report(self, output: Output, values: dict[Metric, float]) -> None:
        with output.with_benchmark():
            with output.with_job("job"):
                with output.with_context("py", make_executable()):
                    output.report(values=values)

    def test_missing_metric(self) -> None:
        output = _make_output([RSS, IPS])
        with self.assertRaises(ProtocolError) as cm:
            self._report(output, {RSS: 1.0})
        self.assertIn(IPS.name, str(cm.exception))

    def test_undeclared_metric(self) -> None:
        output = _make_output([RSS])
        with self.assertRaises(ProtocolError) as cm:
            self._report(output, {RSS: 1.0, IPS: 2.0})
        self.assertIn(IPS.name, str(cm.exception))

    def test_non_metric_key(self) -> None:
        output = _make_output([RSS])
        with self.assertRaises(ProtocolError) as cm:
            self._report(output, {"rss": 1.0})  # type: ignore[dict-item]
        self.assertIn("'rss'", str(cm.exception))
        self.assertEqual(output.formatter.reports, [])

    def test_values_coerced_to_float(self) -> None:
        output = _make_output([RSS])
        self._report(output, {RSS: 7})
        result = output.formatter.reports[0][3]
        self.assertIsInstance(result.values[RSS], float)

    def test_environment_passed_through(self) -> None:
        output = _make_output([RSS])
        with output.with_benchmark():
            with output.with_job("job"):
                with output.with_context("py", make_executable()):
                    output.report(values={RSS: 1.0}, duration=0.5, environment={"k": "v"})
        result = output.formatter.reports[0][3]
        self.assertEqual(result.duration, 0.5)
        self.assertEqual(dict(result.environment), {"k": "v"})


if __name__ == "__main__":
    unittest.main()
