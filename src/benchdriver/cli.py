"""Command-line interface for benchdriver.

Subcommands:
    benchdriver run     Run benchmark job files
    benchdriver list    Print the registered runner and output types
"""

from __future__ import annotations

from pathlib import Path

import click

from benchdriver import __version__
from benchdriver.errors import BenchDriverError
from benchdriver.logging import setup_logging


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """Compare Python snippets across interpreters."""


@main.command()
@click.argument(
    "paths",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-e",
    "--executables",
    "executables_spec",
    type=str,
    default=None,
    help="Executables: 'name::command args;name2::command2' (default: this Python).",
)
@click.option(
    "-r",
    "--runner",
    "runner_type",
    type=str,
    default="memory",
    show_default=True,
    help="Runner type (see 'benchdriver list').",
)
@click.option(
    "-o",
    "--output",
    "output_type",
    type=str,
    default="compare",
    show_default=True,
    help="Output type (see 'benchdriver list').",
)
@click.option(
    "--filter",
    "filters",
    type=str,
    multiple=True,
    help="Only run jobs whose name matches this regex (repeatable).",
)
@click.option("--repeat-count", type=int, default=1, show_default=True)
@click.option(
    "--run-duration",
    type=float,
    default=3.0,
    show_default=True,
    help="Seconds per measurement for duration-based runners.",
)
@click.option("-v", "--verbose", count=True, help="Repeat for more detail (-vv shows scripts).")
@click.option("-q", "--quiet", is_flag=True, help="Only show warnings and errors.")
@click.option("--log-file", type=click.Path(path_type=Path), default=None)
def run(  # noqa: PLR0913
    paths: tuple[Path, ...],
    executables_spec: str | None,
    runner_type: str,
    output_type: str,
    filters: tuple[str, ...],
    repeat_count: int,
    run_duration: float,
    verbose: int,
    quiet: bool,
    log_file: Path | None,
) -> None:
    """Run the jobs defined in PATHS (.py or YAML files).

    \b
    Examples:
        # Peak memory of a snippet under two interpreters
        benchdriver run bench.yml \\
            -e "3.12::/usr/bin/python3.12;3.13::/usr/bin/python3.13"

        # Best-of-5 elapsed time, markdown output
        benchdriver run bench.yml -r time -o markdown --repeat-count 5
    """
    from benchdriver.config import Config, parse_executables, validate_config
    from benchdriver.job import load_jobs
    from benchdriver.runner import run_jobs

    setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)

    try:
        config = Config(
            runner_type=runner_type,
            output_type=output_type,
            paths=list(paths),
            filters=list(filters),
            repeat_count=repeat_count,
            run_duration=run_duration,
            verbose=verbose,
        )
        if executables_spec:
            config.executables = parse_executables(executables_spec)

        errors = validate_config(config)
        for w in (e for e in errors if e.severity == "warning"):
            click.echo(f"Warning: {w.field}: {w.message}", err=True)
        fatal = [e for e in errors if e.severity == "error"]
        if fatal:
            messages = [f"  {e.field}: {e.message}" for e in fatal]
            raise ValueError("Invalid configuration:\n" + "\n".join(messages))

        jobs = []
        for path in config.paths:
            jobs.extend(load_jobs(path, config.executables))

        run_jobs(jobs, config)
    except (BenchDriverError, ValueError, FileNotFoundError) as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc
    except KeyboardInterrupt:
        click.echo("\nBenchmark interrupted.", err=True)
        raise SystemExit(130)  # noqa: B904


@main.command("list")
def list_cmd() -> None:
    """Print the registered runner and output types."""
    from benchdriver.output import output_types
    from benchdriver.runner import runner_types

    click.echo(f"Runners: {', '.join(runner_types())}")
    click.echo(f"Outputs: {', '.join(output_types())}")
