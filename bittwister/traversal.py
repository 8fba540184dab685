"""
Traversal Engine — corrupt every regular file under a directory tree.

The tree is mirrored into ``<base>/corrupted_<root name>``; each file is
handed to corrupt_file() with its output pinned to the matching mirrored
directory.  Hidden entries (dot-names) and symlinks are skipped.

Directory creation is best-effort: a failed mkdir is reported as a
DirectoryCreateError warning and the walk keeps going, so files in that
branch still produce their own (Error) FileJob.
"""

from __future__ import annotations

import logging
import os
import random
from typing import Callable, Iterator, Optional

from .corruptor import corrupt_file, corrupted_name, resolve_base_dir
from .models import CorruptionConfig, ErrorKind, FileJob, LogEvent, LogKind

logger = logging.getLogger(__name__)

EventCallback = Callable[[LogEvent], None]

_LEVELS = {LogKind.WARNING: logging.WARNING, LogKind.ERROR: logging.ERROR}


def _emit(on_event: Optional[EventCallback], kind: LogKind, message: str,
          error_kind: Optional[ErrorKind] = None):
    if on_event is not None:
        on_event(LogEvent(kind=kind, message=message, error_kind=error_kind))
    else:
        logger.log(_LEVELS.get(kind, logging.INFO), "%s", message)


def _make_dir(path: str, on_event: Optional[EventCallback]) -> bool:
    try:
        os.makedirs(path, exist_ok=True)
        return True
    except OSError as e:
        _emit(on_event, LogKind.WARNING,
              f"⚠️ Could not create directory {path}: {e.strerror or e}",
              ErrorKind.DIRECTORY_CREATE_ERROR)
        return False


def mirror_root_for(root_dir: str, config: CorruptionConfig,
                    default_dir: Optional[str] = None) -> str:
    base = resolve_base_dir(root_dir, config, default_dir=default_dir)
    return os.path.join(base, corrupted_name(root_dir))


def iter_corrupt_tree(root_dir: str, config: CorruptionConfig,
                      rng: Optional[random.Random] = None,
                      default_dir: Optional[str] = None,
                      on_event: Optional[EventCallback] = None,
                      ) -> Iterator[FileJob]:
    """Yield one FileJob per regular file under ``root_dir``."""
    mirror_root = mirror_root_for(root_dir, config, default_dir)
    skip = os.path.realpath(mirror_root)

    _emit(on_event, LogKind.INFO, f"📂 Scanning folder: {root_dir}")
    _make_dir(mirror_root, on_event)

    yield from _walk(root_dir, mirror_root, config, rng, on_event, skip)


def _walk(src_dir: str, out_dir: str, config: CorruptionConfig,
          rng: Optional[random.Random], on_event: Optional[EventCallback],
          skip: str) -> Iterator[FileJob]:
    try:
        with os.scandir(src_dir) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        _emit(on_event, LogKind.ERROR,
              f"❌ Cannot read directory {src_dir}: {e.strerror or e}")
        return

    for entry in entries:
        if entry.name.startswith("."):
            continue
        try:
            if entry.is_dir(follow_symlinks=False):
                if os.path.realpath(entry.path) == skip:
                    continue
                sub_out = os.path.join(out_dir, entry.name)
                _make_dir(sub_out, on_event)
                yield from _walk(entry.path, sub_out, config, rng, on_event, skip)
            elif entry.is_file(follow_symlinks=False):
                yield corrupt_file(entry.path, config, output_dir=out_dir, rng=rng)
        except OSError as e:
            _emit(on_event, LogKind.WARNING,
                  f"⚠️ Skipping {entry.path}: {e.strerror or e}")


def corrupt_tree(root_dir: str, config: CorruptionConfig,
                 rng: Optional[random.Random] = None,
                 default_dir: Optional[str] = None,
                 on_event: Optional[EventCallback] = None) -> list[FileJob]:
    return list(iter_corrupt_tree(root_dir, config, rng, default_dir, on_event))
