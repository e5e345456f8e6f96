"""Dedicated worker threads for running test work off the calling thread."""

import itertools
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

logger = logging.getLogger(__name__)

_counter = itertools.count(1)
_pool: Optional[ThreadPoolExecutor] = None
_pool_lock = threading.Lock()


def _shared_pool() -> ThreadPoolExecutor:
    global _pool
    with _pool_lock:
        if _pool is None:
            _pool = ThreadPoolExecutor(thread_name_prefix="caserunner-background")
        return _pool


class WorkerThread:
    """Runs a callable on its own thread, started immediately.

    Long-running test work gets a dedicated thread rather than a pooled one so
    it cannot starve other pooled work. There is no cancellation: once
    started, the work runs until it returns or raises.
    """

    def __init__(self, target: Callable[[], object], name: Optional[str] = None):
        """Start running ``target``.

        Args:
            target: Zero-argument callable to run
            name: Thread name, generated when omitted
        """
        self._target = target
        self._error: Optional[BaseException] = None
        self._thread = threading.Thread(
            target=self._run,
            name=name or f"caserunner-worker-{next(_counter)}",
            daemon=True,
        )
        self._thread.start()

    @property
    def name(self) -> str:
        return self._thread.name

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def _run(self) -> None:
        try:
            self._target()
        except BaseException as e:
            logger.debug("Work on %s raised %r", self._thread.name, e)
            self._error = e

    def join(self) -> None:
        """Block until the work completes.

        Raises:
            Whatever the work raised.
        """
        self._thread.join()
        if self._error is not None:
            raise self._error

    @staticmethod
    def queue_user_work_item(task: Callable[[], object]) -> Future:
        """Schedule short fire-and-forget work on the shared thread pool."""
        return _shared_pool().submit(task)
