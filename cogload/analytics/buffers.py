# cogload/analytics/buffers.py
from __future__ import annotations
from collections import deque
from typing import Deque, Iterator, List, TypeVar, Generic
import structlog

from cogload.hooks.events import BaseEvent, KeyEvent, PointerSample

log = structlog.get_logger()

E = TypeVar("E", bound=BaseEvent)

class EventBuffer(Generic[E]):
    """
    Append-only, age-bounded sequence of input events in arrival order.
    Pruning only ever drops from the front, so order is never disturbed.
    """
    def __init__(self):
        self._items: Deque[E] = deque()

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[E]:
        return iter(self._items)

    def record(self, ev: E) -> None:
        self._items.append(ev)

    def prune(self, cutoff: int) -> int:
        """Drop every entry with timestamp <= cutoff; returns how many were dropped."""
        dropped = 0
        while self._items and self._items[0].timestamp <= cutoff:
            self._items.popleft()
            dropped += 1
        return dropped

    def in_window(self, start: int, end: int) -> List[E]:
        return [ev for ev in self._items if start <= ev.timestamp <= end]

class KeyBuffer(EventBuffer[KeyEvent]):
    pass

class PointerBuffer(EventBuffer[PointerSample]):
    """
    Pointer samples with a hard size cap on top of time retention:
    once the buffer grows past high_water it is cut back to the
    most recent low_water samples.
    """
    def __init__(self, high_water: int = 1000, low_water: int = 500):
        super().__init__()
        self.high_water = high_water
        self.low_water = low_water

    def record(self, ev: PointerSample) -> None:
        self._items.append(ev)
        if len(self._items) > self.high_water:
            before = len(self._items)
            while len(self._items) > self.low_water:
                self._items.popleft()
            log.warning("pointer.truncate", before=before, after=len(self._items))
