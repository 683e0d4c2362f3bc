from __future__ import annotations
from typing import Optional

class IdleDetector:
    """
    Time since the last raw input event; only input events move the mark,
    and the mark never moves backwards. Counting starts at started_at.
    """
    def __init__(self, threshold_ms: int = 5000, started_at: Optional[int] = None):
        self.threshold_ms = threshold_ms
        self.last_activity: Optional[int] = started_at

    def touch(self, ts: int) -> None:
        # hooks on separate threads can enqueue slightly out of order
        if self.last_activity is None or ts > self.last_activity:
            self.last_activity = ts

    def idle_for(self, now: int) -> int:
        if self.last_activity is None:
            return 0
        return max(0, now - self.last_activity)

    def is_idle(self, now: int) -> bool:
        return self.idle_for(now) > self.threshold_ms
