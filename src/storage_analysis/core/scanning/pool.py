from __future__ import annotations

"""
Bounded Worker Pool Helper.

Runs one phase of the analysis (discovery or size computation) as a set of
independent units on a bounded ThreadPoolExecutor and closes the phase with
a wait-all barrier. A failing unit is logged and yields None; it never
aborts its siblings. Results keep the submission order so that the output
does not depend on thread scheduling.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Callable, List, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def run_parallel(
        worker: Callable[[T], R],
        units: Sequence[T],
        *,
        max_workers: int,
        thread_name_prefix: str,
        describe: Callable[[T], str] = str,
) -> List[Optional[R]]:
    """
    Execute a worker over every unit and wait for all of them.

    On interruption (KeyboardInterrupt or any exception raised while
    waiting) pending units are cancelled and the exception propagates
    without waiting for the running ones.

    Args:
        worker: Callable applied to each unit.
        units: Work items, one task each.
        max_workers: Upper bound of concurrently running tasks.
        thread_name_prefix: Name prefix of the worker threads.
        describe: Formats a unit for log messages.

    Returns:
        List[Optional[R]]: One result per unit, None for failed units.
    """
    if not units:
        return []

    executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=thread_name_prefix)
    try:
        futures = [executor.submit(worker, unit) for unit in units]
        wait(futures)
    except BaseException:
        executor.shutdown(wait=False, cancel_futures=True)
        raise
    executor.shutdown(wait=True)

    results: List[Optional[R]] = []
    for unit, future in zip(units, futures):
        try:
            results.append(future.result())
        except Exception as e:
            logger.error(f"Aggregate Exception (Not included): {describe(unit)} ({e})", exc_info=True)
            results.append(None)
    return results
