"""
Corruption Engine — read → transform → write a corrupted copy.

The source file is never modified.  Output always goes to
``<base>/corrupted_<basename>`` where ``base`` is resolved as:

  1. ``output_dir`` override (directory traversal pins this)
  2. keep_original → config.destination_dir, else the default user directory
  3. otherwise     → the source file's own directory

An existing file at the output path is replaced.  I/O failures never
escape: they become an Error FileJob.
"""

from __future__ import annotations

import logging
import os
import random
from typing import Optional

from . import transforms
from .models import (
    CORRUPTED_PREFIX, CorruptionConfig, ErrorKind, FileJob, JobStatus, LogKind,
)

logger = logging.getLogger(__name__)


def default_output_dir() -> str:
    """~/Desktop when it exists, otherwise the home directory."""
    home = os.path.expanduser("~")
    desktop = os.path.join(home, "Desktop")
    if os.path.isdir(desktop):
        return desktop
    return home


def corrupted_name(path: str) -> str:
    return CORRUPTED_PREFIX + os.path.basename(os.path.abspath(path))


def resolve_base_dir(source_path: str, config: CorruptionConfig,
                     output_dir: Optional[str] = None,
                     default_dir: Optional[str] = None) -> str:
    if output_dir:
        return output_dir
    if config.keep_original:
        return config.destination_dir or default_dir or default_output_dir()
    return os.path.dirname(os.path.abspath(source_path))


def corrupt_file(path: str, config: CorruptionConfig,
                 output_dir: Optional[str] = None,
                 rng: Optional[random.Random] = None,
                 default_dir: Optional[str] = None) -> FileJob:
    """Write a corrupted copy of ``path``.

    Args:
        path: Source file
        config: Method, header size and destination policy
        output_dir: Pinned output directory (bypasses destination policy)
        rng: Random source for the randomized methods
        default_dir: Replacement for the default user directory

    Returns:
        FileJob with status SUCCESS or ERROR
    """
    job = FileJob(source_path=path, recoverable=config.method.is_recoverable)
    base = resolve_base_dir(path, config, output_dir, default_dir)
    out_path = os.path.join(base, corrupted_name(path))
    job.output_path = out_path

    try:
        with open(path, "rb") as f:
            data = f.read()

        corrupted = transforms.apply(config.method, data, config.header_size, rng)

        if output_dir is None:
            os.makedirs(base, exist_ok=True)
        with open(out_path, "wb") as f:
            f.write(corrupted)
    except OSError as e:
        logger.debug("Corruption failed for %s: %s", path, e)
        job.status = JobStatus.ERROR
        job.kind = LogKind.ERROR
        job.error_kind = ErrorKind.IO_ERROR
        job.message = f"Error: {path}: {e.strerror or e}"
        return job

    job.status = JobStatus.SUCCESS
    job.kind = LogKind.SUCCESS
    job.message = out_path
    if not config.method.is_recoverable:
        job.message += " (irreversible: no repair rule can restore this file)"
    logger.debug("%s applied to %s (%d bytes) -> %s",
                 config.method.label, path, len(data), out_path)
    return job
