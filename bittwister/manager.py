"""
Job Manager — fans top-level paths out to worker threads.

One task per top-level input path (file or directory root).  Workers push
FileJobs and LogEvents onto a single queue; the calling thread drains it and
yields jobs as they arrive, recording every event in the optional LogBuffer.
Directory roots are walked sequentially inside their own worker.
"""

from __future__ import annotations

import logging
import os
import queue
import random
import threading
from collections import Counter
from typing import Callable, Iterable, Iterator, Optional

from .corruptor import corrupt_file
from .header_repair import recover_file
from .log_buffer import LogBuffer
from .models import (
    CorruptionConfig, ErrorKind, FileJob, JobStatus, LogKind,
    RecoveryConfig,
)
from .traversal import iter_corrupt_tree

logger = logging.getLogger(__name__)

# path, emit(item) → None
PathHandler = Callable[[str, Callable[[object], None]], None]

_DONE = object()


def _missing_path_job(path: str, status: JobStatus) -> FileJob:
    return FileJob(source_path=path, status=status, kind=LogKind.ERROR,
                   error_kind=ErrorKind.IO_ERROR,
                   message=f"Error: {path}: No such file or directory")


class JobRunner:
    """Run a per-path handler on a bounded pool of worker threads."""

    def __init__(self, handler: PathHandler, workers: int = 0,
                 sink: Optional[LogBuffer] = None,
                 cancel: Optional[threading.Event] = None):
        self._handler = handler
        self._workers = workers
        self._sink = sink if sink is not None else LogBuffer()
        self._cancel = cancel if cancel is not None else threading.Event()

    def cancel(self):
        """Stop handing out top-level paths; in-flight paths finish."""
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def run(self, paths: Iterable[str]) -> Iterator[FileJob]:
        paths = list(paths)
        if not paths:
            return
        pending: queue.Queue = queue.Queue()
        for p in paths:
            pending.put(p)
        results: queue.Queue = queue.Queue()

        n_workers = self._workers or min(len(paths), os.cpu_count() or 2)
        n_workers = max(1, min(n_workers, len(paths)))
        threads = [
            threading.Thread(target=self._worker, args=(pending, results),
                             name=f"bittwister-worker-{i}", daemon=True)
            for i in range(n_workers)
        ]
        for t in threads:
            t.start()

        finished = 0
        try:
            while finished < n_workers:
                item = results.get()
                if item is _DONE:
                    finished += 1
                    continue
                self._sink.record(item)
                if isinstance(item, FileJob):
                    yield item
        finally:
            if finished < n_workers:
                # consumer stopped early; let in-flight paths finish
                self._cancel.set()
            for t in threads:
                t.join()

    def _worker(self, pending: queue.Queue, results: queue.Queue):
        try:
            while not self._cancel.is_set():
                try:
                    path = pending.get_nowait()
                except queue.Empty:
                    break
                try:
                    self._handler(path, results.put)
                except Exception as e:
                    logger.error("Unexpected error processing %s: %s",
                                 path, e, exc_info=True)
                    results.put(FileJob(
                        source_path=path, status=JobStatus.ERROR,
                        kind=LogKind.ERROR, error_kind=ErrorKind.IO_ERROR,
                        message=f"Error: {path}: {e}"))
        finally:
            results.put(_DONE)


def corruption_handler(config: CorruptionConfig,
                       rng: Optional[random.Random] = None,
                       default_dir: Optional[str] = None) -> PathHandler:
    def handle(path: str, emit: Callable[[object], None]):
        if os.path.isdir(path):
            for job in iter_corrupt_tree(path, config, rng=rng,
                                         default_dir=default_dir, on_event=emit):
                emit(job)
        elif os.path.exists(path):
            emit(corrupt_file(path, config, rng=rng, default_dir=default_dir))
        else:
            emit(_missing_path_job(path, JobStatus.ERROR))
    return handle


def recovery_handler(config: RecoveryConfig) -> PathHandler:
    def handle(path: str, emit: Callable[[object], None]):
        if os.path.isdir(path):
            emit(FileJob(source_path=path, status=JobStatus.FAILED,
                         kind=LogKind.ERROR, error_kind=ErrorKind.IO_ERROR,
                         message=f"Error: {path}: is a directory "
                                 "(recovery works on single files)"))
        elif os.path.exists(path):
            emit(recover_file(path, config))
        else:
            emit(_missing_path_job(path, JobStatus.FAILED))
    return handle


def corrupt_paths(paths: Iterable[str], config: CorruptionConfig, *,
                  workers: int = 0, sink: Optional[LogBuffer] = None,
                  rng: Optional[random.Random] = None,
                  default_dir: Optional[str] = None,
                  cancel: Optional[threading.Event] = None) -> Iterator[FileJob]:
    """Corrupt copies of files and directory trees; yields one job per file.

    ``rng`` is shared across workers, so seeded output is only reproducible
    with ``workers=1``.  Setting ``cancel`` stops remaining top-level paths
    from being started.
    """
    runner = JobRunner(corruption_handler(config, rng, default_dir), workers,
                       sink, cancel)
    return runner.run(paths)


def recover_paths(paths: Iterable[str], config: RecoveryConfig, *,
                  workers: int = 0,
                  sink: Optional[LogBuffer] = None,
                  cancel: Optional[threading.Event] = None) -> Iterator[FileJob]:
    """Attempt header recovery on each file; yields one job per path."""
    runner = JobRunner(recovery_handler(config), workers, sink, cancel)
    return runner.run(paths)


def summarize(jobs: Iterable[FileJob]) -> dict[str, int]:
    counts = Counter(job.status.value for job in jobs)
    return dict(sorted(counts.items()))

