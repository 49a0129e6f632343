from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Callable, Sequence, TypeVar

from .errors import RenderFailedError
from .jobs import InstrumentGroup

_LOGGER = logging.getLogger("samplebank.dispatch")

T = TypeVar("T")


def _cancel_queued(futures: dict[Future[T], InstrumentGroup]) -> int:
    return sum(1 for future in futures if future.cancel())


def dispatch_groups(
    groups: Sequence[InstrumentGroup],
    work: Callable[[InstrumentGroup], T],
    *,
    workers: int,
) -> list[T]:
    """Run ``work`` once per group on a bounded pool and join.

    Returns results in input order once every group has finished. After the
    first failure, groups that have not started are cancelled, running groups
    are allowed to finish, and RenderFailedError lists every failed group.
    An interrupt (Ctrl-C) cancels the queue the same way and is re-raised.
    """
    if workers < 1:
        raise ValueError("workers must be >= 1")
    if not groups:
        return []

    total = len(groups)
    pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="samplebank")
    futures: dict[Future[T], InstrumentGroup] = {pool.submit(work, group): group for group in groups}
    try:
        completed = 0
        failed = False
        for future in as_completed(futures):
            if future.cancelled():
                continue
            completed += 1
            group = futures[future]
            exc = future.exception()
            if exc is None:
                _LOGGER.info("[%d/%d] Rendered %s", completed, total, group.output_key)
                continue
            _LOGGER.error("[%d/%d] Instrument %s failed: %s", completed, total, group.output_key, exc)
            if not failed:
                failed = True
                cancelled = _cancel_queued(futures)
                if cancelled:
                    _LOGGER.warning("Render failure; cancelled %d queued instrument(s)", cancelled)
    except BaseException:
        _LOGGER.warning("Interrupted; cancelling queued instruments")
        pool.shutdown(wait=True, cancel_futures=True)
        raise
    pool.shutdown(wait=True)

    failures: dict[str, BaseException] = {}
    for future, group in futures.items():
        if future.cancelled():
            continue
        exc = future.exception()
        if exc is not None:
            failures[group.output_key] = exc
    if failures:
        raise RenderFailedError(failures)

    return [future.result() for future in futures]
