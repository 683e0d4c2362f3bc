# tests/test_events.py
# How to run:
#   From repo root: pytest -q
#
# What this covers:
#   - Auto-setting of EventType by dataclass __post_init__
#   - Stable serialization schema (to_record)
#   - Telemetry row rendering (ISO timestamp, empty optional fields, value formatting)

from datetime import datetime, timezone

from cogload.hooks.events import (
    KeyEvent, PointerSample, TelemetryRecord,
    KeyAction, EventType, iso_from_ms,
)

def _parse_iso(s: str) -> datetime:
    return datetime.fromisoformat(s.replace("Z", "+00:00"))

def test_keyevent_auto_etype_and_serialization():
    ev = KeyEvent(timestamp=1_700_000_000_000, key="a", action=KeyAction.DOWN)
    assert ev.etype == EventType.KEY
    rec = ev.to_record()
    assert rec["etype"] == "KEY"
    assert rec["key"] == "a"
    assert rec["action"] == "down"
    assert rec["timestamp"] == 1_700_000_000_000
    assert _parse_iso(rec["t_utc"]).tzinfo is not None

def test_pointer_sample_auto_etype_and_serialization():
    ev = PointerSample(timestamp=5, x=10.0, y=20.5)
    assert ev.etype == EventType.POINTER
    rec = ev.to_record()
    assert rec["etype"] == "POINTER"
    assert rec["x"] == 10.0 and rec["y"] == 20.5

def test_default_timestamp_is_epoch_ms():
    ev = KeyEvent(key="b", action=KeyAction.UP)
    assert isinstance(ev.timestamp, int)
    assert ev.timestamp > 1_600_000_000_000

def test_key_action_telemetry_kind():
    assert KeyAction.DOWN.telemetry_kind == "keydown"
    assert KeyAction.UP.telemetry_kind == "keyup"

def test_iso_from_ms_is_utc_with_millis():
    s = iso_from_ms(1_500)
    assert s == "1970-01-01T00:00:01.500Z"
    assert _parse_iso(s) == datetime(1970, 1, 1, 0, 0, 1, 500_000, tzinfo=timezone.utc)

def test_telemetry_row_renders_optional_fields_empty():
    row = TelemetryRecord(timestamp=0, kind="keydown", metric="a").to_row()
    assert row == ["1970-01-01T00:00:00.000Z", "keydown", "a", ""]

def test_telemetry_row_value_formatting():
    assert TelemetryRecord(0, "anomaly", "compositeLatency", 36.0).to_row()[3] == "36"
    assert TelemetryRecord(0, "metrics_computed", "load", 0.0).to_row()[3] == "0"
    assert TelemetryRecord(0, "metrics_computed", "load", 2.7).to_row()[3] == "2.7"
