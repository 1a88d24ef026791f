"""Fixed-interval scheduling of sync cycles."""

import logging
import time
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


def run_every(
    job: Callable[[], Any],
    interval_seconds: int,
    max_runs: Optional[int] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """
    Run ``job`` repeatedly, waiting ``interval_seconds`` after each run.

    Runs never overlap: the next one starts only after the previous one has
    returned and the interval has elapsed. An exception escaping ``job`` is
    logged and the loop continues with the next run.

    Args:
        job: Callable to invoke once per interval.
        interval_seconds: Seconds to wait between the end of one run and the
            start of the next.
        max_runs: Stop after this many runs; run forever if None.
        sleep: Sleep function (injectable for tests).

    Returns:
        Number of runs performed.
    """
    if interval_seconds < 0:
        raise ValueError("interval_seconds must not be negative")

    runs = 0
    while max_runs is None or runs < max_runs:
        try:
            job()
        except Exception as e:
            logger.error(f"Unexpected error in scheduled run: {e}", exc_info=True)
        runs += 1

        if max_runs is not None and runs >= max_runs:
            break
        logger.debug(f"Next run in {interval_seconds} seconds")
        sleep(interval_seconds)

    return runs
