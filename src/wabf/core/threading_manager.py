#!/usr/bin/env python3
"""
Threading Manager Module
Manages the worker pool and the shared cancellation signal.
"""

import threading
import logging
from typing import Callable, List, Optional

from wabf.core.work_distributor import WorkDistributor

logger = logging.getLogger(__name__)


class ThreadingManager:
    """Runs a fixed number of worker threads over one WorkDistributor."""

    def __init__(self, max_threads: int = 1, stop_event: Optional[threading.Event] = None):
        self.max_threads = max(1, int(max_threads))
        self.stop_event = stop_event if stop_event is not None else threading.Event()
        self.threads: List[threading.Thread] = []
        self._watcher: Optional[threading.Thread] = None

    def start(self, work_distributor: WorkDistributor, worker_function: Callable,
              on_finished: Optional[Callable[[], None]] = None, **worker_kwargs) -> None:
        """Start the workers; `on_finished` runs once every worker has exited."""
        for worker_id in range(self.max_threads):
            thread = threading.Thread(
                target=self._worker_wrapper,
                args=(worker_id, work_distributor, worker_function),
                kwargs=worker_kwargs,
                name=f"wabf-worker-{worker_id}",
            )
            thread.daemon = True
            thread.start()
            self.threads.append(thread)

        logger.info(f"Started {len(self.threads)} worker threads")

        self._watcher = threading.Thread(
            target=self._wait_for_workers, args=(on_finished,), name="wabf-watcher"
        )
        self._watcher.daemon = True
        self._watcher.start()

    def _wait_for_workers(self, on_finished: Optional[Callable[[], None]]):
        for thread in self.threads:
            thread.join()
        logger.debug("All worker threads finished")
        if on_finished is not None:
            on_finished()

    def _worker_wrapper(self, worker_id: int, work_distributor: WorkDistributor,
                        worker_function: Callable, **kwargs):
        """Wrapper for worker function with error handling."""
        try:
            worker_function(
                worker_id=worker_id,
                work_distributor=work_distributor,
                stop_event=self.stop_event,
                **kwargs
            )
        except Exception:
            logger.exception(f"Worker {worker_id} encountered an unexpected error")

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the workers; True when all of them have exited."""
        if self._watcher is not None:
            self._watcher.join(timeout)
            return not self._watcher.is_alive()
        return True

    def alive_count(self) -> int:
        return sum(1 for t in self.threads if t.is_alive())

    def stop(self):
        """Signal all threads to stop."""
        self.stop_event.set()

    def is_stopped(self) -> bool:
        """Check if stop signal is set."""
        return self.stop_event.is_set()
