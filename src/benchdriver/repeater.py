"""Best-of-N repetition.

Repeated measurements are dominated by one-sided noise (scheduling
jitter, cold caches), so the best observed value is the one reported.
"""

from __future__ import annotations

import logging
from typing import Callable

log = logging.getLogger("benchdriver")


def with_repeat(
    func: Callable[[], float],
    *,
    repeat_count: int,
    larger_is_better: bool,
) -> float:
    """Call *func* exactly *repeat_count* times and return the best value.

    Args:
        func: Zero-argument measurement.  Its exceptions propagate as-is.
        repeat_count: Number of calls; must be a positive integer.
        larger_is_better: Return the maximum if True, else the minimum.

    Raises:
        ValueError: If *repeat_count* is not a positive integer.
    """
    if isinstance(repeat_count, bool) or not isinstance(repeat_count, int) or repeat_count < 1:
        raise ValueError(f"repeat_count must be a positive integer (got {repeat_count!r})")

    values: list[float] = []
    for i in range(repeat_count):
        value = func()
        log.debug("Repeat %d/%d: %r", i + 1, repeat_count, value)
        values.append(value)

    return max(values) if larger_is_better else min(values)
