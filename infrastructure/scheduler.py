from __future__ import annotations

import logging
import threading
from typing import Callable, Protocol


logger = logging.getLogger(__name__)


class ScheduledTask(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """
    Runs a callable repeatedly without blocking the caller.

    The host may supply its own implementation (for example one driven by
    game ticks); `ThreadScheduler` is the stand-alone default.
    """

    def schedule_repeating(
        self,
        interval: float,
        task: Callable[[], None],
    ) -> ScheduledTask:
        ...


class _RepeatingThread(threading.Thread):
    def __init__(self, interval: float, task: Callable[[], None]) -> None:
        super().__init__(name=f"repeating-{getattr(task, '__name__', 'task')}", daemon=True)
        self._interval = interval
        self._task = task
        self._stopped = threading.Event()

    def run(self) -> None:
        # The first run happens one full interval after scheduling.
        while not self._stopped.wait(self._interval):
            try:
                self._task()
            except Exception:
                logger.exception("Scheduled task %s failed", self.name)

    def cancel(self) -> None:
        self._stopped.set()


class ThreadScheduler:
    """Schedules each task on its own daemon thread."""

    def schedule_repeating(
        self,
        interval: float,
        task: Callable[[], None],
    ) -> ScheduledTask:
        if interval <= 0:
            raise ValueError("Interval must be greater than zero.")
        thread = _RepeatingThread(interval, task)
        thread.start()
        return thread
