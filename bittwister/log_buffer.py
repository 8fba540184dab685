"""
Log Buffer — bounded, kind-filtered, thread-safe event stream.

Workers append concurrently; the caller reads snapshots.  Each appended
line is also forwarded to the stdlib logger so terminal output and the
in-memory buffer agree.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Iterable, Optional, Union

from .models import FileJob, LogEvent, LogKind

logger = logging.getLogger(__name__)

DEFAULT_LOG_LIMIT = 500
MIN_LOG_LIMIT = 10
MAX_LOG_LIMIT = 2000

DEFAULT_KINDS = frozenset(k for k in LogKind if k is not LogKind.SILENT)

_LEVELS = {
    LogKind.INFO: logging.INFO,
    LogKind.SUCCESS: logging.INFO,
    LogKind.WARNING: logging.WARNING,
    LogKind.ERROR: logging.ERROR,
    LogKind.DEBUG: logging.DEBUG,
}


def clamp_limit(limit: int) -> int:
    return max(MIN_LOG_LIMIT, min(MAX_LOG_LIMIT, limit))


def parse_kinds(text: str) -> frozenset[LogKind]:
    """Parse 'Info,Warning,Error' (case-insensitive) into a set of kinds."""
    kinds = set()
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        for kind in LogKind:
            if kind.value.lower() == part.lower():
                kinds.add(kind)
                break
        else:
            raise ValueError(f"Unknown log kind {part!r}")
    return frozenset(kinds)


class LogBuffer:
    """Append-only log stream shared by concurrent workers."""

    def __init__(self, limit: int = DEFAULT_LOG_LIMIT,
                 enabled_kinds: Optional[Iterable[LogKind]] = None,
                 forward: bool = True):
        self.limit = clamp_limit(limit)
        self.enabled_kinds = frozenset(
            DEFAULT_KINDS if enabled_kinds is None else enabled_kinds)
        self._forward = forward
        self._events: deque[LogEvent] = deque(maxlen=self.limit)
        self._lock = threading.Lock()
        self.dropped = 0

    def should_log(self, kind: LogKind) -> bool:
        if kind is LogKind.SILENT:
            return False
        return kind in self.enabled_kinds

    def append(self, kind: LogKind, line: str) -> bool:
        """Record ``line`` if ``kind`` is enabled; returns whether it was kept."""
        return self._append(LogEvent(kind=kind, message=line))

    def record(self, item: Union[LogEvent, FileJob]) -> bool:
        if isinstance(item, FileJob):
            return self._append(LogEvent(kind=item.kind, message=item.log_line,
                                         error_kind=item.error_kind))
        return self._append(item)

    def _append(self, event: LogEvent) -> bool:
        if self._forward and event.kind in _LEVELS:
            logger.log(_LEVELS[event.kind], "%s", event.message)
        if not self.should_log(event.kind):
            return False
        with self._lock:
            if len(self._events) == self._events.maxlen:
                self.dropped += 1
            self._events.append(event)
        return True

    def events(self) -> list[LogEvent]:
        with self._lock:
            return list(self._events)

    def lines(self) -> list[str]:
        return [e.message for e in self.events()]

    def clear(self):
        with self._lock:
            self._events.clear()
            self.dropped = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
