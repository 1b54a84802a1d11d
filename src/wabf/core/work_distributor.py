#!/usr/bin/env python3
"""
Work Distributor Module
Thread-safe, lazy work distribution so each candidate is checked exactly once.
"""

import threading
import logging
from typing import Dict, Iterable, Optional, Set, Tuple

logger = logging.getLogger(__name__)


class WorkDistributor:
    """Hands out (index, candidate) pairs from a shared iterable.

    Candidates are pulled from the source only when a worker asks for one,
    so huge patterns never need to be materialized.
    """

    def __init__(self, candidates: Iterable[str], total: Optional[int] = None, start_index: int = 0):
        self._source = iter(candidates)
        self._next_index = start_index
        self._exhausted = False
        self.lock = threading.Lock()
        self.start_index = start_index
        self.in_progress: Set[int] = set()
        self.processed = 0
        self.failed = 0

        if total is None and hasattr(candidates, '__len__'):
            total = len(candidates)  # type: ignore[arg-type]
        self.total = total

        logger.info(f"WorkDistributor initialized with {total if total is not None else 'unknown'} items, "
                    f"starting at index {start_index}")

    def get_work(self) -> Optional[Tuple[int, str]]:
        """Get the next work item, or None once the source is drained."""
        with self.lock:
            if self._exhausted:
                return None
            try:
                candidate = next(self._source)
            except StopIteration:
                self._exhausted = True
                return None
            idx = self._next_index
            self._next_index += 1
            self.in_progress.add(idx)
            return idx, candidate

    def mark_completed(self, idx: int):
        """Count an attempted item, whether or not it produced an outcome."""
        with self.lock:
            self.in_progress.discard(idx)
            self.processed += 1

    def mark_failed(self, idx: int):
        """Count an attempted item whose lookup raised."""
        with self.lock:
            self.in_progress.discard(idx)
            self.processed += 1
            self.failed += 1

    def release(self, idx: int):
        """Drop an item that was taken but never attempted (cancelled)."""
        with self.lock:
            self.in_progress.discard(idx)

    def get_progress(self) -> Dict:
        """Get current progress statistics."""
        with self.lock:
            remaining = None
            if self.total is not None:
                remaining = max(self.total - self.processed - len(self.in_progress), 0)
            return {
                'completed': self.processed,
                'failed': self.failed,
                'in_progress': len(self.in_progress),
                'remaining': remaining,
                'total': self.total,
            }

    def is_complete(self) -> bool:
        """Check if the source is drained and nothing is in flight."""
        with self.lock:
            return self._exhausted and len(self.in_progress) == 0
