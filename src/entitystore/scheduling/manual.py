"""
Manual scheduler and clock for deterministic tests.

Nothing runs on its own: one-off tasks wait for ``run_pending()`` and timed
tasks fire while ``advance()`` moves the shared ManualClock forward.
"""

from concurrent.futures import Future
from datetime import datetime, timedelta
from typing import List, Optional
import logging

from .scheduler import Scheduler, ScheduledTask, Task
from ..core.timeunit import TimeUnit

logger = logging.getLogger(__name__)

class ManualClock:
    """Callable clock that only moves when told to"""

    def __init__(self, start: Optional[datetime] = None):
        self._now = start or datetime(2024, 1, 1)

    def __call__(self) -> datetime:
        return self._now

    def now(self) -> datetime:
        return self._now

    def advance(self, amount: float, unit: TimeUnit = TimeUnit.SECONDS) -> datetime:
        self._now += unit.to_timedelta(amount)
        return self._now

    def set(self, moment: datetime) -> None:
        self._now = moment

class _ManualTask(ScheduledTask):

    def __init__(self, task: Task, due: datetime, interval: Optional[timedelta]):
        self.task = task
        self.due = due
        self.interval = interval
        self.runs = 0
        self._cancelled = False
        self._finished = False

    def cancel(self) -> bool:
        if self._cancelled or self._finished:
            return False
        self._cancelled = True
        return True

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    @property
    def is_active(self) -> bool:
        return not (self._cancelled or self._finished)

    def fire(self) -> None:
        self.runs += 1
        try:
            self.task()
        except Exception:
            logger.exception("Manual scheduled task failed")
        if self.interval is None:
            self._finished = True
        else:
            self.due += self.interval

class ManualScheduler(Scheduler):
    """Scheduler whose tasks run only when the test drives it"""

    def __init__(self, clock: Optional[ManualClock] = None):
        self.clock = clock or ManualClock()
        self.timed_tasks: List[_ManualTask] = []
        self._pending: List[tuple] = []

    def run(self, task: Task) -> Future:
        future: Future = Future()
        self._pending.append((task, future))
        return future

    def run_later(self, task: Task, delay: float,
                  unit: TimeUnit = TimeUnit.SECONDS) -> ScheduledTask:
        scheduled = _ManualTask(task, self.clock() + unit.to_timedelta(delay), None)
        self.timed_tasks.append(scheduled)
        return scheduled

    def run_at_fixed_rate(self, task: Task, delay: float, interval: float,
                          unit: TimeUnit = TimeUnit.SECONDS) -> ScheduledTask:
        scheduled = _ManualTask(task, self.clock() + unit.to_timedelta(delay),
                                unit.to_timedelta(interval))
        self.timed_tasks.append(scheduled)
        return scheduled

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def run_pending(self) -> int:
        """Run queued one-off tasks, including ones queued while running"""
        count = 0
        while self._pending:
            task, future = self._pending.pop(0)
            count += 1
            try:
                future.set_result(task())
            except Exception as e:
                logger.exception("Manual one-off task failed")
                future.set_exception(e)
        return count

    def advance(self, amount: float, unit: TimeUnit = TimeUnit.SECONDS) -> int:
        """
        Move the clock forward, firing every timed task that comes due.

        Returns:
            Number of timed task runs
        """
        target = self.clock() + unit.to_timedelta(amount)
        fired = 0
        while True:
            due = [t for t in self.timed_tasks if t.is_active and t.due <= target]
            if not due:
                break
            next_task = min(due, key=lambda t: t.due)
            if next_task.due > self.clock():
                self.clock.set(next_task.due)
            next_task.fire()
            fired += 1
        self.clock.set(target)
        return fired

__all__ = ["ManualClock", "ManualScheduler"]
