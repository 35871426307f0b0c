"""
Concurrent task rounds.

A round runs independent tasks on a thread pool and joins them by index: the
result list lines up with the task list regardless of completion order. The
first failure stops the round and is re-raised; results of tasks still
running are discarded.
"""

import concurrent.futures
import logging
from typing import Callable, List, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_round(tasks: Sequence[Callable[[], T]], max_workers: int = 8,
              name: str = "round") -> List[T]:
    """
    Run tasks concurrently and wait for all of them.

    Args:
        tasks: Zero-argument callables
        max_workers: Upper bound on concurrently running tasks
        name: Label used in log messages

    Returns:
        List[T]: One result per task, in task order

    Raises:
        Exception: The first error raised by a task (lowest index among the
            tasks that had failed when the round stopped)
    """
    if not tasks:
        return []

    workers = max(1, min(max_workers, len(tasks)))
    logger.debug(f"Starting {name} with {len(tasks)} task(s) on {workers} worker(s)")

    executor = concurrent.futures.ThreadPoolExecutor(max_workers=workers,
                                                     thread_name_prefix=f"stylestats-{name}")
    try:
        futures = [executor.submit(task) for task in tasks]
        done, not_done = concurrent.futures.wait(
            futures, return_when=concurrent.futures.FIRST_EXCEPTION)

        failed = [f for f in futures if f in done and f.exception() is not None]
        if failed:
            for future in not_done:
                future.cancel()
            first = failed[0]
            logger.debug(f"{name} stopped after failure of task {futures.index(first)}")
            raise first.exception()

        return [future.result() for future in futures]
    finally:
        # Running tasks cannot be interrupted; their results are dropped
        executor.shutdown(wait=False, cancel_futures=True)
