"""
Schedulers - Background Task Execution

⏱️ Injected Scheduling Capability:
Storage services never create threads themselves. They ask a Scheduler to run
work now, after a delay, or at a fixed rate, and keep the returned
ScheduledTask to cancel it later. ThreadPoolScheduler is the default
implementation; tests use ManualScheduler instead.
"""

from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, List, Optional
import logging
import threading
import time

from ..core.timeunit import TimeUnit

logger = logging.getLogger(__name__)

Task = Callable[[], object]

class ScheduledTask(ABC):
    """Handle on a delayed or repeating task"""

    @abstractmethod
    def cancel(self) -> bool:
        """
        Stop future runs without interrupting one already in progress.

        Returns:
            True if this call cancelled the task, False if it was already
            cancelled or finished
        """
        pass

    @property
    @abstractmethod
    def is_cancelled(self) -> bool:
        pass

class Scheduler(ABC):
    """Run-now, run-later and run-at-fixed-rate capability"""

    @abstractmethod
    def run(self, task: Task) -> Future:
        """Run ``task`` as soon as a worker is free"""
        pass

    @abstractmethod
    def run_later(self, task: Task, delay: float,
                  unit: TimeUnit = TimeUnit.SECONDS) -> ScheduledTask:
        """Run ``task`` once after ``delay``"""
        pass

    @abstractmethod
    def run_at_fixed_rate(self, task: Task, delay: float, interval: float,
                          unit: TimeUnit = TimeUnit.SECONDS) -> ScheduledTask:
        """Run ``task`` after ``delay`` and then every ``interval``"""
        pass

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work"""
        pass

class _ThreadedTask(ScheduledTask):
    """Delayed or repeating task driven by its own daemon thread"""

    def __init__(self, task: Task, delay: float, interval: Optional[float], name: str):
        self._task = task
        self._delay = delay
        self._interval = interval
        self._stopped = threading.Event()
        self._finished = threading.Event()
        self._thread = threading.Thread(target=self._loop, name=name, daemon=True)

    def start(self) -> "_ThreadedTask":
        self._thread.start()
        return self

    def _loop(self) -> None:
        next_run = time.monotonic() + self._delay
        try:
            while not self._stopped.wait(max(0.0, next_run - time.monotonic())):
                try:
                    self._task()
                except Exception:
                    logger.exception(f"Scheduled task {self._thread.name} failed")

                if self._interval is None:
                    break
                # Fixed rate; an overrunning run is followed immediately by the next one
                next_run = max(next_run + self._interval, time.monotonic())
        finally:
            self._finished.set()

    def cancel(self) -> bool:
        if self._stopped.is_set() or self._finished.is_set():
            return False
        self._stopped.set()
        return True

    @property
    def is_cancelled(self) -> bool:
        return self._stopped.is_set()

    def join(self, timeout: Optional[float] = None) -> None:
        self._thread.join(timeout)

class ThreadPoolScheduler(Scheduler):
    """
    Scheduler backed by a thread pool for one-off work.

    Delayed and repeating tasks each get a daemon thread. A repeating task is
    single-flight: a run never starts before the previous one returned.
    """

    def __init__(self, name: str = "storage", max_workers: int = 4):
        self.name = name
        self._executor = ThreadPoolExecutor(max_workers=max_workers,
                                            thread_name_prefix=f"{name}-scheduler")
        self._tasks: List[_ThreadedTask] = []
        self._lock = threading.Lock()
        self._counter = 0

    def _next_name(self) -> str:
        with self._lock:
            self._counter += 1
            return f"{self.name}-task-{self._counter}"

    def _track(self, task: _ThreadedTask) -> _ThreadedTask:
        with self._lock:
            self._tasks = [t for t in self._tasks if not t._finished.is_set()]
            self._tasks.append(task)
        return task.start()

    def run(self, task: Task) -> Future:
        def guarded():
            try:
                return task()
            except Exception:
                logger.exception(f"Task submitted to scheduler '{self.name}' failed")
                raise
        return self._executor.submit(guarded)

    def run_later(self, task: Task, delay: float,
                  unit: TimeUnit = TimeUnit.SECONDS) -> ScheduledTask:
        return self._track(_ThreadedTask(task, unit.to_seconds(delay), None, self._next_name()))

    def run_at_fixed_rate(self, task: Task, delay: float, interval: float,
                          unit: TimeUnit = TimeUnit.SECONDS) -> ScheduledTask:
        if interval <= 0:
            raise ValueError("interval must be positive")
        return self._track(_ThreadedTask(task, unit.to_seconds(delay),
                                         unit.to_seconds(interval), self._next_name()))

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        if wait:
            for task in tasks:
                task.join()
        self._executor.shutdown(wait=wait)
        logger.info(f"Scheduler '{self.name}' shut down")

    def __repr__(self) -> str:
        return f"ThreadPoolScheduler(name={self.name!r})"

_default_scheduler: Optional[Scheduler] = None
_default_lock = threading.Lock()

def get_default_scheduler() -> Scheduler:
    """Shared scheduler used by services that are not given one"""
    global _default_scheduler
    with _default_lock:
        if _default_scheduler is None:
            _default_scheduler = ThreadPoolScheduler()
        return _default_scheduler

def set_default_scheduler(scheduler: Optional[Scheduler]) -> None:
    global _default_scheduler
    with _default_lock:
        _default_scheduler = scheduler

__all__ = [
    "Task", "ScheduledTask", "Scheduler", "ThreadPoolScheduler",
    "get_default_scheduler", "set_default_scheduler"
]
