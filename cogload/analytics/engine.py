# cogload/analytics/engine.py
from __future__ import annotations
from collections import deque
from typing import Callable, Deque, Optional, Tuple
import structlog

from cogload.hooks.events import (
    EventType, KeyEvent, PointerSample, epoch_ms
)
from cogload.analytics.config import TrackerConfig
from cogload.analytics.buffers import KeyBuffer, PointerBuffer
from cogload.analytics.features import extract_features
from cogload.analytics.metrics import MetricsSnapshot, LatencyAggregator, composite_latency
from cogload.analytics.smoother import EmaSmoother, normalize_load
from cogload.analytics.idle import IdleDetector
from cogload.analytics.telemetry import TelemetryLog
from cogload.controller.event_bus import InputFeed
from cogload.controller.scheduler import TickScheduler

log = structlog.get_logger()

Clock = Callable[[], int]

class TrackerEngine:
    """
    Owns buffers, statistics and published state for one tracking session.

    Raw events are buffered as they arrive; on every tick the current window
    is turned into features -> composite latency -> rolling stats / anomaly
    check -> EMA -> normalized load, then published as an immutable
    MetricsSnapshot. All mutation happens on the caller's thread; nothing
    here blocks or spawns threads.
    """
    def __init__(
        self,
        config: Optional[TrackerConfig] = None,
        clock: Clock = epoch_ms,
        on_snapshot: Optional[Callable[[MetricsSnapshot], None]] = None,
    ):
        self.cfg = config or TrackerConfig()
        self.clock = clock
        self._on_snapshot = on_snapshot

        self.keys = KeyBuffer()
        self.pointers = PointerBuffer(self.cfg.pointer_high_water, self.cfg.pointer_low_water)
        self.aggregator = LatencyAggregator(self.cfg.rolling_capacity, self.cfg.anomaly_threshold)
        self.smoother = EmaSmoother(self.cfg.ema_alpha)
        self.idle = IdleDetector(self.cfg.idle_threshold_ms, started_at=self.clock())
        self.telemetry = TelemetryLog()
        self.scheduler = TickScheduler()

        self._snapshot = MetricsSnapshot()
        self._history: Deque[float] = deque(maxlen=self.cfg.history_size)
        self._trail: Deque[PointerSample] = deque(maxlen=self.cfg.trail_size)

        self._feed: Optional[InputFeed] = None
        self._running = False
        self._stopped = False

    # ---- lifecycle ----

    @property
    def running(self) -> bool:
        return self._running

    def start(self, feed: Optional[InputFeed] = None) -> None:
        if self._stopped:
            raise RuntimeError("engine was stopped; create a new TrackerEngine")
        if self._running:
            return
        now = self.clock()
        self.idle.touch(now)
        if feed is not None:
            feed.subscribe(EventType.KEY, self.handle_key)
            feed.subscribe(EventType.POINTER, self.handle_pointer)
            self._feed = feed
        self.scheduler.every(self.cfg.tick_interval_ms, self.tick, now, name="tick")
        self.scheduler.every(self.cfg.prune_interval_ms, self.prune, now, name="prune")
        self._running = True
        log.info("engine.start", tick_ms=self.cfg.tick_interval_ms, prune_ms=self.cfg.prune_interval_ms)

    def stop(self) -> None:
        """Deregister from the feed and cancel both timers. Safe to call repeatedly."""
        if self._stopped:
            return
        self._stopped = True
        self._running = False
        if self._feed is not None:
            self._feed.unsubscribe(EventType.KEY, self.handle_key)
            self._feed.unsubscribe(EventType.POINTER, self.handle_pointer)
            self._feed = None
        self.scheduler.cancel_all()
        log.info("engine.stop", anomalies=self.aggregator.anomaly_count, telemetry=len(self.telemetry))

    # ---- raw input ----

    def handle_key(self, ev: KeyEvent) -> None:
        if self._stopped:
            log.debug("engine.event.ignored", etype=ev.etype.name)
            return
        self.keys.record(ev)
        self.idle.touch(ev.timestamp)
        self.telemetry.append(self.clock(), ev.action.telemetry_kind, metric=ev.key)

    def handle_pointer(self, ev: PointerSample) -> None:
        if self._stopped:
            log.debug("engine.event.ignored", etype=ev.etype.name)
            return
        self.pointers.record(ev)
        self.idle.touch(ev.timestamp)
        self._trail.append(ev)

    # ---- periodic work ----

    def advance(self, now: Optional[int] = None) -> int:
        """Run whichever periodic actions are due at `now`."""
        if not self._running:
            return 0
        return self.scheduler.run_due(self.clock() if now is None else now)

    def tick(self, now: Optional[int] = None) -> Optional[MetricsSnapshot]:
        if self._stopped:
            return None
        now = self.clock() if now is None else now
        start = now - self.cfg.window_ms
        keys = self.keys.in_window(start, now)
        pointers = self.pointers.in_window(start, now)
        feats = extract_features(keys, pointers)

        composite = composite_latency(feats, self.cfg)
        agg = self.aggregator.update(composite)
        if agg.anomaly:
            self.telemetry.append(now, "anomaly", metric="compositeLatency", value=composite)
            log.info("engine.anomaly", composite=round(composite, 3),
                     anomalies=self.aggregator.anomaly_count)

        ema = self.smoother.update(composite)
        load = normalize_load(ema, self.cfg.load_scale, self.cfg.load_max)
        idle = self.idle.is_idle(now)

        snap = MetricsSnapshot(
            load=0.0 if idle else load,
            volatility=0.0 if idle else agg.volatility,
            sample_count=feats.sample_count,
            buffer_size=len(self.pointers),
            anomaly_count=self.aggregator.anomaly_count,
            idle=idle,
        )
        self._snapshot = snap
        self._history.append(snap.load)
        self.telemetry.append(now, "metrics_computed", metric="load", value=load)
        log.debug("engine.tick", composite=round(composite, 3), **snap.to_record())

        if self._on_snapshot:
            self._on_snapshot(snap)
        return snap

    def prune(self, now: Optional[int] = None) -> Tuple[int, int]:
        if self._stopped:
            return (0, 0)
        now = self.clock() if now is None else now
        cutoff = now - self.cfg.retention_ms
        dropped = (self.keys.prune(cutoff), self.pointers.prune(cutoff))
        log.debug("buffers.prune", cutoff=cutoff, keys=dropped[0], pointers=dropped[1])
        return dropped

    # ---- published state ----

    @property
    def snapshot(self) -> MetricsSnapshot:
        return self._snapshot

    @property
    def load_history(self) -> Tuple[float, ...]:
        return tuple(self._history)

    @property
    def pointer_trail(self) -> Tuple[PointerSample, ...]:
        return tuple(self._trail)

    def export_csv(self) -> str:
        return self.telemetry.to_csv()

    def export(self, dest_dir: str = ".") -> str:
        return self.telemetry.export(dest_dir, export_ms=self.clock())
