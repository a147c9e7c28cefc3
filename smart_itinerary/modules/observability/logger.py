"""
Structured JSON logger: append-only, one object per line (.jsonl).

Usage:
    from smart_itinerary.modules.observability.logger import StructuredLogger

    perf = StructuredLogger("/var/log/itinerary")
    perf.log("itinerary", "PERFORMANCE", {"component": "generate", "duration_ms": 3.1})

Records go to <logs_dir>/<stream>.jsonl.  With no logs_dir (the default when
ITINERARY_PERF_LOG_DIR is unset) the logger is disabled and log() is a no-op,
so planning stays free of file I/O.
"""

from __future__ import annotations

import json
import os
import threading
from datetime import datetime, timezone
from pathlib import Path

from smart_itinerary import config


class StructuredLogger:
    """Thread-safe, append-only JSONL logger."""

    def __init__(self, logs_dir: Path | str | None = None) -> None:
        if logs_dir is None:
            logs_dir = config.PERF_LOG_DIR or None
        self._logs_dir = Path(logs_dir) if logs_dir else None
        self._lock = threading.Lock()
        self._handles: dict[str, object] = {}  # stream -> file handle

    @property
    def enabled(self) -> bool:
        return self._logs_dir is not None

    # ── public API ────────────────────────────────────────────────────────

    def log(self, stream: str, event_type: str, payload: dict) -> None:
        """Append one structured JSON record to ``<stream>.jsonl``."""
        if not self.enabled:
            return
        record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "stream": stream,
            "event_type": event_type,
            "payload": payload,
        }
        line = json.dumps(record, default=str, ensure_ascii=False) + "\n"

        with self._lock:
            fh = self._handles.get(stream)
            if fh is None:
                fh = self._open(stream)
            fh.write(line)  # type: ignore[union-attr]
            fh.flush()  # type: ignore[union-attr]

    def close(self, stream: str | None = None) -> None:
        """Close one or all open file handles."""
        with self._lock:
            if stream:
                fh = self._handles.pop(stream, None)
                if fh:
                    fh.close()  # type: ignore[union-attr]
            else:
                for fh in self._handles.values():
                    fh.close()  # type: ignore[union-attr]
                self._handles.clear()

    # ── internals ─────────────────────────────────────────────────────────

    def _open(self, stream: str):  # noqa: ANN202
        os.makedirs(self._logs_dir, exist_ok=True)
        path = self._logs_dir / f"{stream}.jsonl"
        fh = open(path, "a", encoding="utf-8")  # noqa: SIM115
        self._handles[stream] = fh
        return fh
