import threading
import unittest

from wabf.core.work_distributor import WorkDistributor


class TestWorkDistributor(unittest.TestCase):
    def test_each_item_handed_out_once(self):
        items = [str(i) for i in range(500)]
        distributor = WorkDistributor(items)
        taken = []
        lock = threading.Lock()

        def worker():
            while True:
                work = distributor.get_work()
                if work is None:
                    return
                with lock:
                    taken.append(work)
                distributor.mark_completed(work[0])

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(sorted(c for _, c in taken), sorted(items))
        self.assertEqual(len({idx for idx, _ in taken}), 500)
        self.assertTrue(distributor.is_complete())
        self.assertEqual(distributor.get_progress()['completed'], 500)

    def test_lazy_source_and_start_index(self):
        distributor = WorkDistributor((c for c in ["a", "b"]), start_index=10)
        self.assertIsNone(distributor.total)
        self.assertEqual(distributor.get_work(), (10, "a"))
        self.assertEqual(distributor.get_work(), (11, "b"))
        self.assertIsNone(distributor.get_work())

    def test_progress_counts(self):
        distributor = WorkDistributor(["1", "2", "3"])
        a = distributor.get_work()
        b = distributor.get_work()
        distributor.mark_completed(a[0])
        distributor.mark_failed(b[0])
        progress = distributor.get_progress()
        self.assertEqual(progress['completed'], 2)
        self.assertEqual(progress['failed'], 1)
        self.assertEqual(progress['remaining'], 1)
        self.assertEqual(progress['total'], 3)

    def test_release_does_not_count(self):
        distributor = WorkDistributor(["1"])
        idx, _ = distributor.get_work()
        distributor.release(idx)
        self.assertEqual(distributor.get_progress()['completed'], 0)
        self.assertEqual(distributor.get_progress()['in_progress'], 0)


if __name__ == '__main__':
    unittest.main()
