# cogload/analytics/metrics.py
from __future__ import annotations
from collections import deque
from dataclasses import dataclass
from typing import Deque, Sequence, Dict, Any
import math
import numpy as np

from cogload.analytics.config import TrackerConfig
from cogload.analytics.features import WindowFeatures

@dataclass(frozen=True)
class MetricsSnapshot:
    load: float = 0.0
    volatility: float = 0.0
    sample_count: int = 0
    buffer_size: int = 0
    anomaly_count: int = 0
    idle: bool = True

    def to_record(self) -> Dict[str, Any]:
        return {
            "load": round(self.load, 3),
            "volatility": round(self.volatility, 3),
            "sample_count": self.sample_count,
            "buffer_size": self.buffer_size,
            "anomaly_count": self.anomaly_count,
            "idle": self.idle,
        }

def mean(values: Sequence[float]) -> float:
    """Arithmetic mean; 0.0 for an empty sequence."""
    if len(values) == 0:
        return 0.0
    return float(np.asarray(values, dtype=float).mean())

def population_variance(values: Sequence[float]) -> float:
    """Variance over N (not N-1); 0.0 for fewer than two samples."""
    if len(values) < 2:
        return 0.0
    return float(np.asarray(values, dtype=float).var())

def composite_latency(features: WindowFeatures, cfg: TrackerConfig) -> float:
    return (
        cfg.dwell_weight * mean(features.dwell)
        + cfg.flight_weight * mean(features.flight)
        + cfg.pointer_interval_weight * mean(features.pointer_intervals)
        + cfg.pointer_accel_weight * population_variance(features.pointer_accels)
    )

class RollingStats:
    """Fixed-capacity FIFO of recent values with mean / population std."""
    def __init__(self, capacity: int = 30):
        self.capacity = capacity
        self._values: Deque[float] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._values)

    def push(self, value: float) -> None:
        self._values.append(float(value))

    def mean(self) -> float:
        return mean(self._values)

    def std(self) -> float:
        return math.sqrt(population_variance(self._values))

@dataclass(frozen=True)
class AggregateResult:
    composite: float
    volatility: float
    anomaly: bool

class LatencyAggregator:
    """
    Tracks composite latency over the rolling window and flags anomalies:
    a value is anomalous when it sits more than `threshold` standard
    deviations from the rolling mean. The value is added to the window
    before the comparison. The anomaly counter only ever grows.
    """
    def __init__(self, capacity: int = 30, threshold: float = 2.5):
        self.threshold = threshold
        self.window = RollingStats(capacity)
        self.anomaly_count = 0

    def update(self, composite: float) -> AggregateResult:
        self.window.push(composite)
        mu = self.window.mean()
        sigma = self.window.std()
        anomaly = sigma > 0 and abs(composite - mu) > self.threshold * sigma
        if anomaly:
            self.anomaly_count += 1
        return AggregateResult(composite=composite, volatility=sigma, anomaly=anomaly)
