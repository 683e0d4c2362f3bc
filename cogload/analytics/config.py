from __future__ import annotations
from dataclasses import dataclass

@dataclass(frozen=True)
class TrackerConfig:
    # feature window (ms)
    window_ms: int = 1000

    # composite latency blend
    dwell_weight: float = 0.3
    flight_weight: float = 0.3
    pointer_interval_weight: float = 0.2
    pointer_accel_weight: float = 0.2

    # rolling statistics / anomaly
    rolling_capacity: int = 30
    anomaly_threshold: float = 2.5   # in rolling standard deviations

    # smoothing
    ema_alpha: float = 0.15
    load_scale: float = 2.0          # load = ema / load_scale
    load_max: float = 100.0

    # idle
    idle_threshold_ms: int = 5000

    # cadences
    tick_interval_ms: int = 1000
    prune_interval_ms: int = 10000
    retention_ms: int = 10000

    # pointer buffer hard cap
    pointer_high_water: int = 1000
    pointer_low_water: int = 500

    # published sequences
    history_size: int = 200
    trail_size: int = 100

    def __post_init__(self):
        for name in ("window_ms", "rolling_capacity", "tick_interval_ms", "prune_interval_ms",
                     "retention_ms", "pointer_high_water", "pointer_low_water",
                     "history_size", "trail_size", "idle_threshold_ms"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)!r}")
        if self.pointer_low_water >= self.pointer_high_water:
            raise ValueError("pointer_low_water must be below pointer_high_water")
        if not 0.0 < self.ema_alpha <= 1.0:
            raise ValueError(f"ema_alpha must be in (0, 1], got {self.ema_alpha!r}")
        if self.load_scale <= 0 or self.anomaly_threshold <= 0:
            raise ValueError("load_scale and anomaly_threshold must be positive")
        weights = (self.dwell_weight, self.flight_weight,
                   self.pointer_interval_weight, self.pointer_accel_weight)
        if any(w < 0 for w in weights):
            raise ValueError("composite weights must be non-negative")
