"""
Header Repair Engine — best-effort magic-number reconstruction.

Repair rules run in a fixed order; the first rule that yields a candidate
wins, even if a later rule would also apply:

  a. PNG  — first 4 bytes zero  → 89 50 4E 47
  b. ZIP  — first 2 bytes zero  → 50 4B
  c. JPEG — first 3 bytes zero  → FF D8 FF
  d. PDF  — first 4 bytes zero  → 25 50 44 46
  e. Bitwise unflip of the header, accepted only if the result carries the
     extension's magic number
  f. Byte un-reverse of the header, same acceptance test
  g. Header entirely zero → header filled with 0xFF

Candidates are validated in memory (content type must equal the type
implied by the extension) before anything is written, so a FAILED job
never leaves a half-written output behind.

Recovery cannot undo OVERWRITE_ALL or reproduce the exact bytes destroyed
by ZERO_FILL / RANDOM_BYTES; at best a structurally valid header is
restored.

Outcomes per file: RECOVERED, NOT_CORRUPTED, or FAILED with one of
UnknownPattern, TypeMismatch, IOError.
"""

from __future__ import annotations

import hashlib
import logging
import os
from dataclasses import dataclass
from typing import Callable, Optional

from . import signatures
from .models import (
    CORRUPTED_PREFIX, RECOVERED_PREFIX, ErrorKind, FileJob, JobStatus, LogKind,
    RecoveryConfig,
)
from .signatures import JPEG_MAGIC, PDF_MAGIC, PNG_MAGIC, ZIP_MAGIC
from .transforms import flip_bits, reverse, split_header

logger = logging.getLogger(__name__)

# (data, extension, header_size) → repaired bytes or None
RuleFunc = Callable[[bytes, str, int], Optional[bytes]]


@dataclass(frozen=True)
class RepairRule:
    name: str
    apply: RuleFunc


# ══════════════════════════════════════════════════════════════
#  Repair rules
# ══════════════════════════════════════════════════════════════

def _zeroed(data: bytes, count: int) -> bool:
    return len(data) >= count and not any(data[:count])


def _magic_patch(extensions: tuple[str, ...], magic: bytes) -> RuleFunc:
    def rule(data: bytes, ext: str, header_size: int) -> Optional[bytes]:
        if _zeroed(data, len(magic)) and ext in extensions:
            return magic + data[len(magic):]
        return None
    return rule


def _undo(transform) -> RuleFunc:
    def rule(data: bytes, ext: str, header_size: int) -> Optional[bytes]:
        prefix, suffix = split_header(data, header_size)
        candidate = transform(prefix) + suffix
        # a no-op (empty or palindromic prefix) repairs nothing
        if candidate != data and signatures.matches(candidate, ext):
            return candidate
        return None
    return rule


def _header_patch(data: bytes, ext: str, header_size: int) -> Optional[bytes]:
    prefix, suffix = split_header(data, header_size)
    if prefix and not any(prefix):
        return b"\xFF" * len(prefix) + suffix
    return None


REPAIR_RULES: list[RepairRule] = [
    RepairRule("Repaired PNG header", _magic_patch(("png",), PNG_MAGIC)),
    RepairRule("Repaired ZIP header", _magic_patch(("zip",), ZIP_MAGIC)),
    RepairRule("Repaired JPEG header", _magic_patch(("jpg", "jpeg"), JPEG_MAGIC)),
    RepairRule("Repaired PDF header", _magic_patch(("pdf",), PDF_MAGIC)),
    RepairRule("Recovered by bitwise unflip", _undo(flip_bits)),
    RepairRule("Recovered by byte un-reverse", _undo(reverse)),
    RepairRule("Fallback recovery by header patch", _header_patch),
]


def find_candidate(data: bytes, extension: str,
                   header_size: int) -> Optional[tuple[str, bytes]]:
    """Run the rule chain; returns (rule name, candidate) for the first hit."""
    ext = signatures.normalize_extension(extension) if extension else ""
    for rule in REPAIR_RULES:
        candidate = rule.apply(data, ext, header_size)
        if candidate is not None:
            return rule.name, candidate
    return None


# ══════════════════════════════════════════════════════════════
#  Output naming & verification
# ══════════════════════════════════════════════════════════════

def recovered_name(path: str) -> str:
    """'corrupted_photo.png' → 'recovered_photo.png'; 'a.png' → 'recovered_a.png'."""
    name = os.path.basename(path)
    if name.startswith(CORRUPTED_PREFIX) and len(name) > len(CORRUPTED_PREFIX):
        name = name[len(CORRUPTED_PREFIX):]
    return RECOVERED_PREFIX + name


def resolve_output_path(path: str, config: RecoveryConfig) -> str:
    if config.replace_original:
        return path
    if config.destination_dir:
        return os.path.join(config.destination_dir, os.path.basename(path))
    return os.path.join(os.path.dirname(os.path.abspath(path)), recovered_name(path))


def verify_saved_file(path: str, expected: bytes) -> Optional[str]:
    """Read ``path`` back; returns what differs from ``expected``, or None."""
    try:
        with open(path, "rb") as f:
            saved = f.read()
    except OSError as e:
        return f"readback failed ({e.strerror or e})"
    if len(saved) != len(expected):
        return f"readback has {len(saved)} bytes, wrote {len(expected)}"
    if hashlib.md5(saved).digest() != hashlib.md5(expected).digest():
        return "readback checksum differs"
    return None


# ══════════════════════════════════════════════════════════════
#  Main entry point
# ══════════════════════════════════════════════════════════════

def _fail(job: FileJob, error_kind: ErrorKind, message: str) -> FileJob:
    job.status = JobStatus.FAILED
    job.kind = LogKind.ERROR
    job.error_kind = error_kind
    job.message = message
    return job


def recover_file(path: str, config: RecoveryConfig) -> FileJob:
    """Attempt to rebuild the header of ``path``.

    Args:
        path: Possibly damaged file
        config: Output policy and header size

    Returns:
        FileJob with status RECOVERED, NOT_CORRUPTED or FAILED
    """
    job = FileJob(source_path=path)
    ext = signatures.extension_of(path)

    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        return _fail(job, ErrorKind.IO_ERROR, f"Error: {path}: {e.strerror or e}")

    pre_type = signatures.classify_extension(ext) if ext else None
    hit = find_candidate(data, ext, config.header_size)

    if hit is None:
        if signatures.matches(data, ext) or signatures.classify_content(data):
            job.status = JobStatus.NOT_CORRUPTED
            job.kind = LogKind.INFO
            job.message = f"Not corrupted: {path}"
            return job
        return _fail(job, ErrorKind.UNKNOWN_PATTERN,
                     f"Recovery failed: {path}: unknown corruption pattern")

    method, candidate = hit
    job.method = method

    post_type = signatures.classify_content(candidate)
    if post_type is None or post_type != pre_type:
        logger.debug("%s: %s produced type %s, expected %s",
                      path, method, post_type, pre_type)
        return _fail(job, ErrorKind.TYPE_MISMATCH,
                     f"Recovery failed: {path}: type mismatch after {method} "
                     f"(expected {pre_type or 'unknown'}, got {post_type or 'unknown'})")

    out_path = resolve_output_path(path, config)
    job.output_path = out_path
    try:
        if config.destination_dir and not config.replace_original:
            os.makedirs(config.destination_dir, exist_ok=True)
        with open(out_path, "wb") as f:
            f.write(candidate)
    except OSError as e:
        return _fail(job, ErrorKind.IO_ERROR,
                     f"Error: {out_path}: {e.strerror or e}")

    problem = verify_saved_file(out_path, candidate)
    if problem:
        return _fail(job, ErrorKind.IO_ERROR,
                     f"Recovery failed: {out_path}: {problem}")

    job.status = JobStatus.RECOVERED
    job.kind = LogKind.SUCCESS
    job.message = f"{method}: {out_path}"
    return job
