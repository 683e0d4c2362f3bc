from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, Dict, Any
import time
from datetime import datetime, timezone

# --- timing helpers ---
def epoch_ms() -> int:
    # Wall-clock milliseconds; every buffer and window works in this unit
    return int(time.time() * 1000)

def iso_from_ms(ts_ms: int) -> str:
    dt = datetime.fromtimestamp(ts_ms / 1000.0, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")

# --- core enums ---
class EventType(Enum):
    """Top-level classifier for event routing."""
    KEY = auto()
    POINTER = auto()

class KeyAction(Enum):
    DOWN = "down"
    UP = "up"

    @property
    def telemetry_kind(self) -> str:
        return "keydown" if self is KeyAction.DOWN else "keyup"

# --- base event ---
@dataclass(frozen=True)
class BaseEvent:
    """Common shape for all input events."""
    etype: EventType = field(init=False)         # auto-set by subclasses
    timestamp: int = field(default_factory=epoch_ms)

    def to_record(self) -> Dict[str, Any]:
        return {
            "etype": self.etype.name,
            "timestamp": self.timestamp,
            "t_utc": iso_from_ms(self.timestamp),
        }

# --- key event ---
@dataclass(frozen=True)
class KeyEvent(BaseEvent):
    """Key press/release transition (identity + timing only)."""
    key: str = ""
    action: KeyAction = KeyAction.DOWN

    def __post_init__(self):
        object.__setattr__(self, "etype", EventType.KEY)

    def to_record(self) -> Dict[str, Any]:
        base = super().to_record()
        base.update({
            "key": self.key,
            "action": self.action.value,
        })
        return base

# --- pointer sample ---
@dataclass(frozen=True)
class PointerSample(BaseEvent):
    """Pointer position at a point in time."""
    x: float = 0.0
    y: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "etype", EventType.POINTER)

    def to_record(self) -> Dict[str, Any]:
        base = super().to_record()
        base.update({"x": self.x, "y": self.y})
        return base

# --- telemetry ---
@dataclass(frozen=True)
class TelemetryRecord:
    """One row of the telemetry log: raw key events, tick results, anomalies."""
    timestamp: int
    kind: str                       # "keydown" | "keyup" | "metrics_computed" | "anomaly"
    metric: Optional[str] = None
    value: Optional[float] = None

    def to_row(self) -> list[str]:
        return [
            iso_from_ms(self.timestamp),
            self.kind,
            self.metric or "",
            _format_value(self.value),
        ]

def _format_value(value: Optional[float]) -> str:
    if value is None:
        return ""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)
