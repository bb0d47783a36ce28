import threading
import unittest

from infrastructure.scheduler import ThreadScheduler


class ThreadSchedulerTests(unittest.TestCase):
    def test_task_runs_repeatedly_until_cancelled(self):
        calls = []
        done = threading.Event()

        def task():
            calls.append(1)
            if len(calls) >= 3:
                done.set()

        handle = ThreadScheduler().schedule_repeating(0.01, task)
        self.addCleanup(handle.cancel)
        self.assertTrue(done.wait(5))
        handle.cancel()
        handle.join(5)
        self.assertFalse(handle.is_alive())

    def test_failing_task_keeps_running(self):
        done = threading.Event()
        attempts = []

        def task():
            attempts.append(1)
            if len(attempts) >= 2:
                done.set()
            raise RuntimeError("boom")

        handle = ThreadScheduler().schedule_repeating(0.01, task)
        self.addCleanup(handle.cancel)
        with self.assertLogs("infrastructure.scheduler", level="ERROR"):
            self.assertTrue(done.wait(5))

    def test_interval_must_be_positive(self):
        with self.assertRaises(ValueError):
            ThreadScheduler().schedule_repeating(0, lambda: None)


if __name__ == "__main__":
    unittest.main()
