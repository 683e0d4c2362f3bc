# cogload/utils/queueing.py
from __future__ import annotations
from queue import Queue, Full, Empty
from typing import Any, List

def safe_put(q: Queue, item) -> bool:
    """
    Put without blocking; if the queue is full, drop the oldest item and retry.
    Returns True when something had to be dropped to make room.
    """
    try:
        q.put_nowait(item)
        return False
    except Full:
        try:
            q.get_nowait()  # drop oldest
        except Empty:
            pass
        q.put_nowait(item)
        return True

def drain(q: Queue, first_timeout: float = 0.0, limit: int = 1000) -> List[Any]:
    """Wait up to first_timeout for one item, then take whatever else is queued."""
    out: List[Any] = []
    try:
        out.append(q.get(timeout=first_timeout) if first_timeout > 0 else q.get_nowait())
    except Empty:
        return out
    while len(out) < limit:
        try:
            out.append(q.get_nowait())
        except Empty:
            break
    return out
