from __future__ import annotations

def normalize_load(ema: float, scale: float = 2.0, upper: float = 100.0) -> float:
    """Fixed linear rescale of the smoothed latency into [0, upper]."""
    return max(0.0, min(upper, ema / scale))

class EmaSmoother:
    """Exponential moving average, starts at 0 and persists across ticks."""
    def __init__(self, alpha: float = 0.15):
        self.alpha = float(alpha)
        self.value = 0.0

    def update(self, x: float) -> float:
        self.value = self.alpha * x + (1.0 - self.alpha) * self.value
        return self.value
