# tests/test_metrics.py
# How to run:
#   From repo root: pytest -q
#
# Verifies:
#   - mean / population variance fallbacks on short input
#   - composite latency blend
#   - rolling window capacity, volatility and spike detection
#   - EMA smoothing and load clamping

import math
import pytest

from cogload.analytics.config import TrackerConfig
from cogload.analytics.features import WindowFeatures
from cogload.analytics.metrics import (
    mean, population_variance, composite_latency, RollingStats, LatencyAggregator,
)
from cogload.analytics.smoother import EmaSmoother, normalize_load

def test_mean_and_variance_fallbacks():
    assert mean([]) == 0.0
    assert population_variance([]) == 0.0
    assert population_variance([42.0]) == 0.0

def test_variance_divides_by_n():
    assert population_variance([1.0, 3.0]) == pytest.approx(1.0)
    assert population_variance([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(4.0)

def test_composite_reduces_to_weighted_dwell():
    feats = WindowFeatures(dwell=[120.0])
    assert composite_latency(feats, TrackerConfig()) == pytest.approx(36.0)

def test_composite_blends_all_features():
    feats = WindowFeatures(
        dwell=[100.0], flight=[200.0],
        pointer_intervals=[50.0, 30.0], pointer_accels=[1.0, 3.0],
    )
    # 0.3*100 + 0.3*200 + 0.2*40 + 0.2*1
    assert composite_latency(feats, TrackerConfig()) == pytest.approx(98.2)

def test_rolling_window_never_exceeds_capacity():
    rs = RollingStats(capacity=30)
    for i in range(100):
        rs.push(float(i))
        assert len(rs) <= 30
    assert rs.mean() == pytest.approx(sum(range(70, 100)) / 30)

def test_spike_after_flat_run_flags_only_last_tick():
    agg = LatencyAggregator(capacity=30, threshold=2.5)
    flags = [agg.update(0.0).anomaly for _ in range(30)]
    assert not any(flags)
    last = agg.update(1000.0)
    assert last.anomaly
    assert agg.anomaly_count == 1
    assert last.volatility > 0

def test_anomaly_count_is_non_decreasing():
    agg = LatencyAggregator()
    seen = []
    for v in [0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 500, 0, 0, 0, 800, 1, 2, 3]:
        agg.update(float(v))
        seen.append(agg.anomaly_count)
    assert seen == sorted(seen)

def test_volatility_is_population_std():
    agg = LatencyAggregator()
    agg.update(1.0)
    res = agg.update(3.0)
    assert res.volatility == pytest.approx(1.0)
    assert not res.anomaly

def test_ema_starts_at_zero_and_persists():
    ema = EmaSmoother(alpha=0.15)
    assert ema.update(36.0) == pytest.approx(5.4)
    assert ema.update(36.0) == pytest.approx(0.15 * 36 + 0.85 * 5.4)

def test_normalize_load_clamps():
    assert normalize_load(10.0) == pytest.approx(5.0)
    assert normalize_load(1e9) == 100.0
    assert normalize_load(-4.0) == 0.0
    assert not math.isnan(normalize_load(0.0))
