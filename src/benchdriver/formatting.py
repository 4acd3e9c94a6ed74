"""Shared text formatting helpers for benchdriver output."""

from __future__ import annotations

import math

_SI_PREFIXES = ["", "k", "M", "G", "T", "P", "E"]


def humanize_value(value: float, precision: int = 3) -> str:
    """Format a value with an SI prefix: ``'512.000'``, ``'12.345M'``.

    Values below 1000 keep their magnitude.  NaN renders as ``'N/A'``.
    """
    if math.isnan(value):
        return "N/A"
    scaled = abs(value)
    index = 0
    while scaled >= 1000 and index < len(_SI_PREFIXES) - 1:
        scaled /= 1000
        index += 1
    sign = "-" if value < 0 else ""
    return f"{sign}{scaled:.{precision}f}{_SI_PREFIXES[index]}"


def format_table(
    headers: list[str],
    rows: list[list[str]],
    *,
    alignments: list[str] | None = None,
    indent: int = 2,
) -> str:
    """Format a list of rows as an aligned text table.

    Auto-calculates column widths from content.  Right-aligns columns
    marked ``'r'`` in *alignments*.

    Args:
        headers: Column header strings.
        rows: List of rows, each a list of cell strings.
        alignments: Per-column alignment: ``'l'``, ``'r'``, or ``'c'``.
        indent: Number of leading spaces per line.

    Returns:
        The formatted table as a string.
    """
    if not headers:
        return ""

    ncols = len(headers)
    if alignments is None:
        alignments = ["l"] * ncols
    while len(alignments) < ncols:
        alignments.append("l")

    proc_rows: list[list[str]] = []
    for row in rows:
        padded = list(row) + [""] * (ncols - len(row))
        proc_rows.append(padded[:ncols])

    widths = [len(h) for h in headers]
    for row in proc_rows:
        for ci, cell in enumerate(row):
            widths[ci] = max(widths[ci], len(cell))

    prefix = " " * indent

    def _format_cell(text: str, width: int, align: str) -> str:
        if align == "r":
            return text.rjust(width)
        if align == "c":
            return text.center(width)
        return text.ljust(width)

    lines: list[str] = []
    header_line = "  ".join(_format_cell(headers[i], widths[i], alignments[i]) for i in range(ncols))
    lines.append((prefix + header_line).rstrip())

    for row in proc_rows:
        row_line = "  ".join(_format_cell(row[i], widths[i], alignments[i]) for i in range(ncols))
        lines.append((prefix + row_line).rstrip())

    return "\n".join(lines)
