"""
Scheduling - Background Task Execution

Components:
- Scheduler / ScheduledTask: the capability storage services depend on
- ThreadPoolScheduler: thread-based default implementation
- ManualScheduler / ManualClock: deterministic doubles for tests
"""

from .scheduler import (
    Task, ScheduledTask, Scheduler, ThreadPoolScheduler,
    get_default_scheduler, set_default_scheduler
)
from .manual import ManualClock, ManualScheduler

__all__ = [
    "Task", "ScheduledTask", "Scheduler", "ThreadPoolScheduler",
    "get_default_scheduler", "set_default_scheduler",
    "ManualClock", "ManualScheduler"
]
