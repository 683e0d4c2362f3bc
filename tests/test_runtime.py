# tests/test_runtime.py
# How to run:
#   From repo root: pytest -q
#
# What this covers:
#   - Queued hook events reach the engine through the feed on pump()
#   - Hook lifecycle and idempotent runtime teardown (engine stopped on the consumer thread)
#   - Bounded queue drops the oldest event when full
#   - Config validation and CLI argument mapping
# Fake hooks stand in for pynput so no display is needed.

import queue
import threading

import pytest

from cogload.analytics.config import TrackerConfig
from cogload.analytics.engine import TrackerEngine
from cogload.controller.runner import HookRuntime
from cogload.hooks.events import KeyEvent, KeyAction, PointerSample
from cogload.tools.cli import build_parser, config_from_args
from cogload.utils.queueing import safe_put, drain

class FakeHook:
    def __init__(self):
        self.started = 0
        self.stopped = 0

    def start(self):
        self.started += 1

    def stop(self):
        self.stopped += 1

class FakeClock:
    def __init__(self, now=0):
        self.now = now

    def __call__(self):
        return self.now

def test_pump_delivers_events_and_runs_ticks():
    clock = FakeClock(0)
    eng = TrackerEngine(clock=clock)
    rt = HookRuntime(eng, hooks=[])
    eng.start(rt.feed)

    rt.events.put(KeyEvent(timestamp=0, key="a", action=KeyAction.DOWN))
    rt.events.put(KeyEvent(timestamp=120, key="a", action=KeyAction.UP))
    rt.events.put(PointerSample(timestamp=130, x=1.0, y=2.0))
    clock.now = 500
    assert rt.pump() == 3
    assert len(eng.keys) == 2 and len(eng.pointers) == 1
    assert eng.load_history == ()

    clock.now = 1000
    assert rt.pump() == 0
    assert len(eng.load_history) == 1
    assert eng.snapshot.sample_count == 3

def test_runtime_start_stop_is_idempotent():
    hooks = [FakeHook(), FakeHook()]
    eng = TrackerEngine()
    rt = HookRuntime(eng, hooks=hooks, poll_sec=0.01)
    rt.start()
    assert eng.running
    rt.stop()
    rt.stop()
    assert [h.started for h in hooks] == [1, 1]
    assert [h.stopped for h in hooks] == [1, 1]
    assert not eng.running
    assert not rt._consumer_thr.is_alive()

def test_safe_put_drops_oldest_when_full():
    q = queue.Queue(maxsize=2)
    assert safe_put(q, 1) is False
    assert safe_put(q, 2) is False
    assert safe_put(q, 3) is True
    assert drain(q) == [2, 3]
    assert drain(q) == []

def test_config_rejects_bad_values():
    with pytest.raises(ValueError):
        TrackerConfig(tick_interval_ms=0)
    with pytest.raises(ValueError):
        TrackerConfig(pointer_high_water=100, pointer_low_water=100)
    with pytest.raises(ValueError):
        TrackerConfig(ema_alpha=1.5)
    with pytest.raises(ValueError):
        TrackerConfig(dwell_weight=-0.1)

def test_cli_args_override_config():
    args = build_parser().parse_args(["--tick-ms", "500", "--idle-ms", "3000", "--no-export"])
    cfg = config_from_args(args)
    assert cfg.tick_interval_ms == 500
    assert cfg.idle_threshold_ms == 3000
    assert cfg.prune_interval_ms == 10000
    assert args.no_export

class RecordingEngine(TrackerEngine):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.stopped_on = None

    def stop(self):
        if self.stopped_on is None:
            self.stopped_on = threading.current_thread()
        super().stop()

def test_engine_is_stopped_on_consumer_thread():
    eng = RecordingEngine()
    rt = HookRuntime(eng, hooks=[FakeHook()], poll_sec=0.01)
    rt.start()
    rt.stop()
    assert eng.stopped_on is rt._consumer_thr
    assert not eng.running

def test_slow_tick_is_not_torn_down_midway():
    entered, gate = threading.Event(), threading.Event()

    def slow_listener(snap):
        entered.set()
        gate.wait(timeout=5)

    clock = FakeClock(0)
    eng = TrackerEngine(clock=clock, on_snapshot=slow_listener)
    rt = HookRuntime(eng, hooks=[], poll_sec=0.01, join_timeout=0.05)
    rt.start()
    clock.now = 1000
    assert entered.wait(timeout=5)

    rt.stop()
    # the tick is still in progress, so the engine must still be live
    assert eng.running
    assert rt._consumer_thr.is_alive()

    gate.set()
    rt._consumer_thr.join(timeout=5)
    assert not eng.running
    assert len(eng.load_history) == 1
