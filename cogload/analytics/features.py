# cogload/analytics/features.py
from __future__ import annotations
import math
from dataclasses import dataclass, field
from typing import Sequence, List

from cogload.hooks.events import KeyEvent, KeyAction, PointerSample

@dataclass
class WindowFeatures:
    """Per-tick feature lists extracted from one time window."""
    dwell: List[float] = field(default_factory=list)
    flight: List[float] = field(default_factory=list)
    pointer_intervals: List[float] = field(default_factory=list)
    pointer_accels: List[float] = field(default_factory=list)
    key_count: int = 0
    pointer_count: int = 0

    @property
    def sample_count(self) -> int:
        return self.key_count + self.pointer_count

def dwell_times(keys: Sequence[KeyEvent]) -> List[float]:
    """
    Press -> release duration per key. Each press is paired with the first
    release of the same key that comes later in time (first match in the
    release list, not the nearest); presses without one are skipped.
    """
    downs = [k for k in keys if k.action == KeyAction.DOWN]
    ups = [k for k in keys if k.action == KeyAction.UP]
    out: List[float] = []
    for down in downs:
        match = next((up for up in ups if up.key == down.key and up.timestamp > down.timestamp), None)
        if match is not None:
            out.append(float(match.timestamp - down.timestamp))
    return out

def flight_times(keys: Sequence[KeyEvent]) -> List[float]:
    # gaps between consecutive presses, any key
    downs = [k.timestamp for k in keys if k.action == KeyAction.DOWN]
    return [float(b - a) for a, b in zip(downs, downs[1:])]

def pointer_intervals(samples: Sequence[PointerSample]) -> List[float]:
    return [float(b.timestamp - a.timestamp) for a, b in zip(samples, samples[1:])]

def pointer_accelerations(samples: Sequence[PointerSample]) -> List[float]:
    """|d2 - d1| over each run of three samples, d = Euclidean step length."""
    out: List[float] = []
    for i in range(2, len(samples)):
        a, b, c = samples[i - 2], samples[i - 1], samples[i]
        d1 = math.hypot(b.x - a.x, b.y - a.y)
        d2 = math.hypot(c.x - b.x, c.y - b.y)
        out.append(abs(d2 - d1))
    return out

def extract_features(keys: Sequence[KeyEvent], pointers: Sequence[PointerSample]) -> WindowFeatures:
    """Inputs are the events already restricted to the current window."""
    return WindowFeatures(
        dwell=dwell_times(keys),
        flight=flight_times(keys),
        pointer_intervals=pointer_intervals(pointers),
        pointer_accels=pointer_accelerations(pointers),
        key_count=len(keys),
        pointer_count=len(pointers),
    )
