import threading
import unittest

from wabf.core.threading_manager import ThreadingManager
from wabf.core.work_distributor import WorkDistributor


class TestThreadingManager(unittest.TestCase):
    def test_runs_workers_and_calls_on_finished(self):
        seen = []
        lock = threading.Lock()
        finished = threading.Event()

        def worker(worker_id, work_distributor, stop_event, tag):
            while not stop_event.is_set():
                work = work_distributor.get_work()
                if work is None:
                    return
                with lock:
                    seen.append((tag, work[1]))
                work_distributor.mark_completed(work[0])

        manager = ThreadingManager(3)
        manager.start(WorkDistributor(list("abcdef")), worker, on_finished=finished.set, tag="t")
        self.assertTrue(manager.join(timeout=5))
        self.assertTrue(finished.is_set())
        self.assertEqual(sorted(c for _, c in seen), list("abcdef"))
        self.assertEqual(manager.alive_count(), 0)

    def test_worker_exception_is_contained(self):
        finished = threading.Event()

        def worker(worker_id, work_distributor, stop_event):
            raise RuntimeError("bad worker")

        manager = ThreadingManager(2)
        with self.assertLogs("wabf.core.threading_manager", level="ERROR"):
            manager.start(WorkDistributor([]), worker, on_finished=finished.set)
            self.assertTrue(manager.join(timeout=5))
        self.assertTrue(finished.is_set())

    def test_stop_sets_shared_event(self):
        event = threading.Event()
        manager = ThreadingManager(0, stop_event=event)
        self.assertEqual(manager.max_threads, 1)
        self.assertFalse(manager.is_stopped())
        manager.stop()
        self.assertTrue(event.is_set())
        self.assertTrue(manager.is_stopped())


if __name__ == '__main__':
    unittest.main()
