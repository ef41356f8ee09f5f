from __future__ import annotations

import json
import os
import threading
from typing import Any, Dict, Iterable, Optional, TextIO


class TelemetryLogger:
    """Structured JSONL logger for simulation ticks.

    Thread-safe, append-only; one JSON object per car per tick.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        self._lock = threading.Lock()
        self._fp: Optional[TextIO] = open(self.path, "a", encoding="utf-8")
        self.records_written = 0

    def log_many(self, records: Iterable[Dict[str, Any]]) -> None:
        """Append records to the JSONL file, one line each."""
        if self._fp is None:
            raise ValueError(f"telemetry log {self.path} is closed")
        lines = [json.dumps(r, separators=(",", ":")) for r in records]
        if not lines:
            return
        with self._lock:
            self._fp.write("\n".join(lines) + "\n")
            self._fp.flush()
            self.records_written += len(lines)

    def close(self) -> None:
        if self._fp is not None:
            self._fp.close()
            self._fp = None

    def __enter__(self) -> "TelemetryLogger":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
