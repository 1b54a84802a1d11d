#!/usr/bin/env python3
"""
Scan Coordinator Module
Fans candidates out to a worker pool, checks each one against the lookup
client and streams the registered ones back to a single consumer.
"""

import queue
import random
import threading
import logging
from typing import Callable, Dict, Iterable, Iterator, Optional

from wabf.config import ScanConfig, DEFAULT_JITTER
from wabf.core.lookup import LookupClient
from wabf.core.models import Registration, RunSummary, ScanOutcome
from wabf.core.threading_manager import ThreadingManager
from wabf.core.work_distributor import WorkDistributor

logger = logging.getLogger(__name__)

# Marks the end of the result stream
_CLOSED = object()


class ScanCoordinator:
    """Coordinates one scan over a candidate sequence.

    Outcomes arrive in completion order, not candidate order. Setting
    `cancel_event` stops workers from taking new candidates; lookups already
    in flight still finish and their outcomes are still delivered.
    """

    def __init__(self, lookup: LookupClient, config: Optional[ScanConfig] = None,
                 cancel_event: Optional[threading.Event] = None,
                 progress_callback: Optional[Callable[[Dict], None]] = None):
        self.lookup = lookup
        self.config = config or ScanConfig()
        self.cancel_event = cancel_event if cancel_event is not None else threading.Event()
        self.progress_callback = progress_callback
        self.summary = RunSummary()

        self._work_distributor: Optional[WorkDistributor] = None
        self._results_lock = threading.Lock()
        self._running = False

    # --- Progress -----------------------------------------------------------
    @property
    def processed(self) -> int:
        if self._work_distributor is None:
            return 0
        return self._work_distributor.get_progress()['completed']

    def get_progress(self) -> Dict:
        """Snapshot of processed/found/error counters."""
        progress = {'completed': 0, 'failed': 0, 'in_progress': 0, 'remaining': None, 'total': None}
        if self._work_distributor is not None:
            progress = self._work_distributor.get_progress()
        with self._results_lock:
            found = self.summary.found
        total = progress['total']
        percent = (100.0 * progress['completed'] / total) if total else None
        return {**progress, 'found': found, 'percent': percent, 'cancelled': self.cancel_event.is_set()}

    def _notify_progress(self):
        if self.progress_callback is None:
            return
        try:
            self.progress_callback(self.get_progress())
        except Exception:
            logger.debug("Progress callback raised but was ignored", exc_info=True)

    def cancel(self):
        self.cancel_event.set()

    # --- Scan ---------------------------------------------------------------
    def scan(self, candidates: Iterable[str], total: Optional[int] = None,
             start_index: int = 0) -> Iterator[ScanOutcome]:
        """Run the scan, yielding outcomes as workers find them.

        Workers start on the first `next()`; the stream ends once every
        worker has exited.
        """
        if self._running:
            raise RuntimeError("scan already running on this coordinator")
        self._running = True
        self.summary = RunSummary(total=total)

        work_distributor = WorkDistributor(candidates, total=total, start_index=start_index)
        self._work_distributor = work_distributor
        self.summary.total = work_distributor.total
        results: "queue.Queue" = queue.Queue(maxsize=self.config.result_buffer)
        # One per scan so leftover workers of an abandoned scan never resume
        abandoned = threading.Event()

        threading_manager = ThreadingManager(self.config.concurrency, stop_event=self.cancel_event)
        threading_manager.start(
            work_distributor=work_distributor,
            worker_function=self._worker_thread,
            on_finished=lambda: self._emit(results, _CLOSED, abandoned),
            results=results,
            abandoned=abandoned,
        )

        closed = False
        try:
            while True:
                try:
                    item = results.get(timeout=self.config.poll_interval)
                except queue.Empty:
                    self._notify_progress()
                    continue
                if item is _CLOSED:
                    closed = True
                    break
                with self._results_lock:
                    self.summary.update_with(item)
                self._notify_progress()
                yield item
        finally:
            if not closed:
                logger.debug("Result stream abandoned by consumer, stopping workers")
                abandoned.set()
            progress = work_distributor.get_progress()
            self.summary.processed = progress['completed']
            self.summary.errors = progress['failed']
            self._notify_progress()
            self._running = False
            logger.info(f"Scan finished: processed={self.summary.processed}, found={self.summary.found}, "
                        f"errors={self.summary.errors}")

    @staticmethod
    def _should_stop(stop_event: threading.Event, abandoned: threading.Event) -> bool:
        return stop_event.is_set() or abandoned.is_set()

    def _emit(self, results: "queue.Queue", item, abandoned: threading.Event) -> bool:
        """Put onto the result queue; gives up if the consumer went away."""
        while True:
            try:
                results.put(item, timeout=self.config.poll_interval)
                return True
            except queue.Full:
                if abandoned.is_set():
                    return False

    def _pause(self, stop_event: threading.Event, abandoned: threading.Event) -> bool:
        """Per-request delay plus jitter. Returns True if the scan should stop."""
        delay = self.config.delay
        if self.config.jitter > 0:
            delay += random.uniform(0, self.config.jitter)
        if delay > 0:
            stop_event.wait(delay)
        return self._should_stop(stop_event, abandoned)

    def _worker_thread(self, worker_id: int, work_distributor: WorkDistributor,
                       stop_event: threading.Event, results: "queue.Queue",
                       abandoned: threading.Event):
        """Worker thread function for checking candidates."""
        while not self._should_stop(stop_event, abandoned):
            work_item = work_distributor.get_work()
            if work_item is None:
                break  # No more work

            idx, candidate = work_item
            if self._pause(stop_event, abandoned):
                work_distributor.release(idx)
                break

            try:
                registration = self.lookup.is_registered(candidate)
            except Exception as e:
                logger.debug(f"Worker {worker_id}: error checking {candidate}: {e}")
                work_distributor.mark_failed(idx)
                continue

            work_distributor.mark_completed(idx)
            if not registration.registered:
                continue

            logger.debug(f"Worker {worker_id}: {candidate} is registered")
            outcome = self._enrich(candidate, registration)
            if not self._emit(results, outcome, abandoned):
                break

    def _enrich(self, identifier: str, registration: Registration) -> ScanOutcome:
        """Collect profile, business and avatar data; failures leave fields unset."""
        fields = {'verified_name': registration.verified_name}

        if self.config.fetch_profile:
            try:
                profile = self.lookup.get_profile(identifier)
            except Exception as e:
                logger.debug(f"Profile lookup failed for {identifier}: {e}")
            else:
                fields['status'] = profile.status
                fields['display_name'] = profile.display_name
                fields['verified_name'] = registration.verified_name or profile.verified_name

        if self.config.fetch_business:
            try:
                fields['business'] = dict(self.lookup.get_business_info(identifier) or {})
            except Exception as e:
                logger.debug(f"Business info lookup failed for {identifier}: {e}")

        if self.config.fetch_avatar:
            try:
                fields['avatar_url'] = self.lookup.get_avatar_reference(identifier)
            except Exception as e:
                logger.debug(f"Avatar lookup failed for {identifier}: {e}")

        return ScanOutcome(identifier=identifier, registered=True, **fields)


def scan(candidates: Iterable[str], concurrency: int, per_request_delay: float, lookup: LookupClient,
         cancel: Optional[threading.Event] = None, jitter: float = DEFAULT_JITTER) -> Iterator[ScanOutcome]:
    """Scan candidates with `concurrency` workers and yield registered outcomes."""
    config = ScanConfig(concurrency=concurrency, delay=per_request_delay, jitter=jitter)
    coordinator = ScanCoordinator(lookup, config=config, cancel_event=cancel)
    return coordinator.scan(candidates)
