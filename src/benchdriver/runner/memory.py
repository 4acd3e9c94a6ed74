"""Max resident set size of the benchmark process."""

from __future__ import annotations

import re

from benchdriver.metric import Metric
from benchdriver.runner.gnu_time import GnuTimeRunner


class MemoryRunner(GnuTimeRunner):
    """Reports peak RSS in bytes; smaller is better."""

    METRIC = Metric(
        name="Max resident set size",
        unit="bytes",
        larger_is_better=False,
        worse_word="larger",
    )

    def extract(self, match: re.Match[str]) -> float:
        # GNU time reports kilobytes.
        return int(match["maxresident"]) * 1000.0
