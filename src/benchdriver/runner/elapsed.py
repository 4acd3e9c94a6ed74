"""Wall-clock time of the whole benchmark process."""

from __future__ import annotations

import re

from benchdriver.metric import Metric
from benchdriver.runner.gnu_time import GnuTimeRunner


class ElapsedTimeRunner(GnuTimeRunner):
    """Reports elapsed seconds, interpreter startup included; smaller is better."""

    METRIC = Metric(
        name="Execution time",
        unit="s",
        larger_is_better=False,
        worse_word="slower",
    )

    def extract(self, match: re.Match[str]) -> float:
        return parse_elapsed(match["elapsed"])


def parse_elapsed(text: str) -> float:
    """Convert GNU time's ``[h:]m:ss[.ss]`` elapsed field to seconds."""
    seconds = 0.0
    for part in text.split(":"):
        seconds = seconds * 60 + float(part)
    return seconds
