from __future__ import annotations
import argparse
import time
from dataclasses import replace
from typing import Optional, Sequence
import structlog

from cogload.logging_config import configure_logging
from cogload.analytics.config import TrackerConfig
from cogload.analytics.engine import TrackerEngine
from cogload.analytics.metrics import MetricsSnapshot
from cogload.controller.runner import HookRuntime

log = structlog.get_logger()

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="cogload", description="Cognitive load tracker")
    ap.add_argument("--duration", type=float, default=None,
                    help="seconds to track before exporting (default: until Ctrl+C)")
    ap.add_argument("--export-dir", default=".", help="directory for the telemetry CSV")
    ap.add_argument("--no-export", action="store_true", help="skip the CSV export on exit")
    ap.add_argument("--tick-ms", type=int, default=None)
    ap.add_argument("--idle-ms", type=int, default=None)
    ap.add_argument("--debug", action="store_true")
    ap.add_argument("--console-logs", action="store_true", help="human-readable logs instead of JSON")
    return ap

def config_from_args(args: argparse.Namespace) -> TrackerConfig:
    cfg = TrackerConfig()
    if args.tick_ms is not None:
        cfg = replace(cfg, tick_interval_ms=args.tick_ms)
    if args.idle_ms is not None:
        cfg = replace(cfg, idle_threshold_ms=args.idle_ms)
    return cfg

def _log_snapshot(snap: MetricsSnapshot) -> None:
    log.info("metrics.snapshot", **snap.to_record())

def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(debug=args.debug, json=not args.console_logs)
    try:
        cfg = config_from_args(args)
    except ValueError as e:
        log.error("config.invalid", err=str(e))
        return 2

    engine = TrackerEngine(config=cfg, on_snapshot=_log_snapshot)
    runtime = HookRuntime(engine)
    runtime.start()
    log.info("app.start", msg="Tracking keyboard and pointer input", duration=args.duration)
    try:
        deadline = None if args.duration is None else time.monotonic() + args.duration
        while deadline is None or time.monotonic() < deadline:
            time.sleep(0.2)
    except KeyboardInterrupt:
        log.info("app.interrupt")
    finally:
        runtime.stop()

    if not args.no_export:
        engine.export(args.export_dir)
    log.info("app.stop", msg="Exited cleanly")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
