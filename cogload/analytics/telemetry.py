# cogload/analytics/telemetry.py
from __future__ import annotations
import csv
import io
import os
from typing import List, Optional, Iterator
import structlog

from cogload.hooks.events import TelemetryRecord, epoch_ms

log = structlog.get_logger()

CSV_HEADER = ["Timestamp", "Type", "Metric", "Value"]

def export_filename(export_ms: int) -> str:
    return f"cognitive-load-telemetry-{export_ms}.csv"

class TelemetryLog:
    """
    Append-only session log of raw key events, tick results and anomalies.
    Kept in emission order; never pruned (export-only).
    """
    def __init__(self):
        self._records: List[TelemetryRecord] = []

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[TelemetryRecord]:
        return iter(self._records)

    def append(self, timestamp: int, kind: str, metric: Optional[str] = None,
               value: Optional[float] = None) -> TelemetryRecord:
        rec = TelemetryRecord(timestamp=timestamp, kind=kind, metric=metric, value=value)
        self._records.append(rec)
        return rec

    def records(self) -> List[TelemetryRecord]:
        return list(self._records)

    def to_csv(self) -> str:
        """Point-in-time dump; an empty log still yields the header line."""
        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for rec in self._records:
            writer.writerow(rec.to_row())
        return buf.getvalue()

    def export(self, dest_dir: str = ".", export_ms: Optional[int] = None) -> str:
        export_ms = epoch_ms() if export_ms is None else export_ms
        os.makedirs(dest_dir, exist_ok=True)
        path = os.path.join(dest_dir, export_filename(export_ms))
        with open(path, "w", encoding="utf-8", newline="") as fh:
            fh.write(self.to_csv())
        log.info("telemetry.export", path=path, records=len(self._records))
        return path
