"""Command timing and NDJSON lifecycle events."""

from __future__ import annotations

import json
import sys
import time
from datetime import datetime, timezone
from typing import Any


class Timer:
    """Simple context-manager timer for measuring duration_ms."""

    def __init__(self) -> None:
        self.start: float = 0
        self.elapsed_ms: int = 0

    def __enter__(self) -> "Timer":
        self.start = time.perf_counter()
        return self

    def __exit__(self, *args: Any) -> None:
        self.elapsed_ms = int((time.perf_counter() - self.start) * 1000)


class EventEmitter:
    """Emits NDJSON lifecycle events (``table.loaded``, ``table.persisted`` ...) to stderr."""

    def __init__(self, enabled: bool = False, *, command: str = "") -> None:
        self.enabled = enabled
        self.command = command

    def emit(self, event: str, data: dict[str, Any] | None = None) -> None:
        if not self.enabled:
            return
        payload = {
            "event": event,
            "command": self.command,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "data": data or {},
        }
        sys.stderr.write(json.dumps(payload) + "\n")
        sys.stderr.flush()
