# cogload/controller/scheduler.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, List, Optional
import structlog

log = structlog.get_logger()

@dataclass
class PeriodicTask:
    name: str
    interval_ms: int
    fn: Callable[[int], None]
    next_due: int
    cancelled: bool = False
    runs: int = 0

    def cancel(self) -> None:
        self.cancelled = True

class TickScheduler:
    """
    Cooperative fixed-interval scheduler. Nothing runs on its own: the
    owner calls run_due(now) from its single execution context and every
    task whose deadline has passed fires once. Missed intervals are
    skipped rather than replayed.
    """
    def __init__(self):
        self._tasks: List[PeriodicTask] = []

    @property
    def tasks(self) -> List[PeriodicTask]:
        return [t for t in self._tasks if not t.cancelled]

    def every(self, interval_ms: int, fn: Callable[[int], None], now: int, name: str = "") -> PeriodicTask:
        task = PeriodicTask(name=name or getattr(fn, "__name__", "task"),
                            interval_ms=interval_ms, fn=fn, next_due=now + interval_ms)
        self._tasks.append(task)
        return task

    def run_due(self, now: int) -> int:
        """Fire due tasks in deadline order; returns how many ran."""
        fired = 0
        for task in sorted(self.tasks, key=lambda t: t.next_due):
            # an earlier task in this pass may have cancelled the rest
            if task.cancelled or task.next_due > now:
                continue
            task.fn(now)
            task.runs += 1
            fired += 1
            task.next_due += task.interval_ms
            if task.next_due <= now:
                missed = (now - task.next_due) // task.interval_ms + 1
                task.next_due += missed * task.interval_ms
                log.debug("scheduler.task.skipped", task=task.name, missed=missed)
        return fired

    def next_deadline(self) -> Optional[int]:
        pending = self.tasks
        return min(t.next_due for t in pending) if pending else None

    def cancel_all(self) -> None:
        for task in self._tasks:
            task.cancel()
        self._tasks.clear()
