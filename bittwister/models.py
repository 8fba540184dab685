"""
Data Model — configuration, job results and log classification.

Every engine call receives its configuration explicitly (CorruptionConfig /
RecoveryConfig) and hands back one FileJob per processed file.  Jobs carry a
LogKind so an external sink can filter by kind without the engine knowing
which kinds are enabled.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

DEFAULT_HEADER_SIZE = 256

CORRUPTED_PREFIX = "corrupted_"
RECOVERED_PREFIX = "recovered_"


class CorruptionMethod(str, Enum):
    """Byte-transform applied to the header region (or whole file)."""
    HEADER_FLIP = "header-flip"         # bitwise complement
    RANDOM_BYTES = "random-bytes"       # uniform random bytes
    ZERO_FILL = "zero-fill"             # all 0x00
    REVERSE_BYTES = "reverse-bytes"     # header byte order reversed
    BIT_SHIFT_LEFT = "bit-shift-left"   # (b << 1) & 0xFF
    OVERWRITE_ALL = "overwrite-all"     # whole file randomized

    @property
    def label(self) -> str:
        return _METHOD_LABELS[self]

    @property
    def is_recoverable(self) -> bool:
        """False for transforms no repair rule can ever undo."""
        return self is not CorruptionMethod.OVERWRITE_ALL

    @classmethod
    def parse(cls, text: str) -> "CorruptionMethod":
        """Accept a slug, display label, member name or CamelCase name."""
        key = "".join(ch for ch in text.lower() if ch.isalnum())
        for method in cls:
            if key in (_squash(method.value), _squash(method.name),
                       _squash(method.label)):
                return method
        choices = ", ".join(m.value for m in cls)
        raise ValueError(f"Unknown corruption method {text!r} (choose from {choices})")


_METHOD_LABELS = {
    CorruptionMethod.HEADER_FLIP: "Header Flip",
    CorruptionMethod.RANDOM_BYTES: "Random Bytes",
    CorruptionMethod.ZERO_FILL: "Zero Fill",
    CorruptionMethod.REVERSE_BYTES: "Reverse Bytes",
    CorruptionMethod.BIT_SHIFT_LEFT: "Bit-Shift Left",
    CorruptionMethod.OVERWRITE_ALL: "Overwrite All",
}


def _squash(text: str) -> str:
    return "".join(ch for ch in text.lower() if ch.isalnum())


class LogKind(str, Enum):
    INFO = "Info"
    WARNING = "Warning"
    ERROR = "Error"
    DEBUG = "Debug"
    SUCCESS = "Success"
    SILENT = "Silent"   # filter-only, never recorded


class JobStatus(str, Enum):
    # corruption
    SUCCESS = "success"
    ERROR = "error"
    # recovery
    RECOVERED = "recovered"
    NOT_CORRUPTED = "not-corrupted"
    FAILED = "failed"


class ErrorKind(str, Enum):
    IO_ERROR = "IOError"
    UNKNOWN_PATTERN = "UnknownPattern"
    TYPE_MISMATCH = "TypeMismatch"
    DIRECTORY_CREATE_ERROR = "DirectoryCreateError"


def _check_header_size(header_size: int):
    if header_size < 0:
        raise ValueError(f"header_size must be >= 0, got {header_size}")


@dataclass(frozen=True)
class CorruptionConfig:
    """Settings for one corruption run."""
    method: CorruptionMethod = CorruptionMethod.HEADER_FLIP
    header_size: int = DEFAULT_HEADER_SIZE
    keep_original: bool = True
    destination_dir: Optional[str] = None

    def __post_init__(self):
        _check_header_size(self.header_size)


@dataclass(frozen=True)
class RecoveryConfig:
    """Settings for one recovery run."""
    replace_original: bool = False
    destination_dir: Optional[str] = None
    header_size: int = DEFAULT_HEADER_SIZE

    def __post_init__(self):
        _check_header_size(self.header_size)


@dataclass
class FileJob:
    """Terminal outcome for one processed file."""
    source_path: str
    output_path: str = ""
    status: JobStatus = JobStatus.ERROR
    message: str = ""
    kind: LogKind = LogKind.ERROR
    error_kind: Optional[ErrorKind] = None
    method: str = ""            # repair rule that produced the output
    recoverable: bool = True    # False once OVERWRITE_ALL has been applied

    @property
    def outcome(self) -> str:
        """Success / Error view shared by both pipelines."""
        if self.status in (JobStatus.SUCCESS, JobStatus.RECOVERED,
                           JobStatus.NOT_CORRUPTED):
            return "Success"
        return "Error"

    @property
    def ok(self) -> bool:
        return self.outcome == "Success"

    @property
    def status_icon(self) -> str:
        icons = {
            JobStatus.SUCCESS: "✅",
            JobStatus.RECOVERED: "✅",
            JobStatus.NOT_CORRUPTED: "ℹ️",
            JobStatus.ERROR: "❌",
            JobStatus.FAILED: "❌",
        }
        return icons.get(self.status, "❓")

    @property
    def log_line(self) -> str:
        return f"{self.status_icon} {self.message}"

    def to_dict(self) -> dict:
        return {
            "source": self.source_path,
            "output": self.output_path,
            "status": self.status.value,
            "outcome": self.outcome,
            "kind": self.kind.value,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "method": self.method,
            "recoverable": self.recoverable,
            "message": self.message,
        }


@dataclass
class LogEvent:
    """A log-worthy event that is not itself a file outcome."""
    kind: LogKind
    message: str
    timestamp: float = field(default_factory=time.time)
    error_kind: Optional[ErrorKind] = None
