#!/usr/bin/env python3
"""
BitTwister — File Corruption Testing & Header Recovery — Entry Point.

Usage:
    python main.py corrupt photo.png                 # copy to ~/Desktop
    python main.py corrupt -m zero-fill --in-place docs/
    python main.py recover corrupted_photo.png
    python main.py recover --replace-original broken.pdf
"""

APP_VERSION = "1.0.0"

import sys
import json
import random
import logging
import argparse

from bittwister.log_buffer import (
    DEFAULT_LOG_LIMIT, LogBuffer, parse_kinds,
)
from bittwister.manager import corrupt_paths, recover_paths, summarize
from bittwister.models import (
    DEFAULT_HEADER_SIZE, CorruptionConfig, CorruptionMethod, FileJob,
    RecoveryConfig,
)


def _configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _confirm(prompt: str) -> bool:
    try:
        return input(prompt).strip().lower() == "y"
    except (EOFError, KeyboardInterrupt):
        print()
        return False


def _write_json(path: str, jobs: list[FileJob], sink: LogBuffer):
    with open(path, "w") as f:
        json.dump({
            "version": APP_VERSION,
            "summary": summarize(jobs),
            "jobs": [job.to_dict() for job in jobs],
            "log": sink.lines(),
        }, f, indent=2, ensure_ascii=False)
    print(f"  Log: {path}")


def corrupt_mode(args, sink: LogBuffer) -> list[FileJob]:
    config = CorruptionConfig(
        method=args.method,
        header_size=args.header_size,
        keep_original=not args.in_place,
        destination_dir=args.output or None,
    )

    print(f"Method:      {config.method.label}")
    print(f"Header size: {config.header_size} bytes")
    if config.keep_original:
        print(f"Output:      {config.destination_dir or '(default folder)'}")
    else:
        print("Output:      next to each source")
    print()

    if not config.method.is_recoverable and not args.force:
        print("  🛑 WARNING: this method overwrites the whole file with random")
        print("  bytes. The result cannot be recovered.")
        if not _confirm("  Continue anyway? [y/N]: "):
            print("  Aborted.")
            return []

    rng = random.Random(args.seed) if args.seed is not None else None
    return list(corrupt_paths(args.paths, config, workers=args.workers,
                              sink=sink, rng=rng))


def recover_mode(args, sink: LogBuffer) -> list[FileJob]:
    config = RecoveryConfig(
        replace_original=args.replace_original,
        destination_dir=args.output or None,
        header_size=args.header_size,
    )
    if config.replace_original and not args.force:
        if not _confirm("  Recovered files will overwrite the originals. Continue? [y/N]: "):
            print("  Aborted.")
            return []
    return list(recover_paths(args.paths, config, workers=args.workers, sink=sink))


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Corrupt copies of files for testing, or repair damaged headers.")
    parser.add_argument("--version", action="version",
                        version=f"%(prog)s {APP_VERSION}")
    sub = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("paths", nargs="+", help="Files (or folders, for corrupt)")
    common.add_argument("-o", "--output", default="", help="Output directory")
    common.add_argument("--header-size", type=int, default=DEFAULT_HEADER_SIZE,
                        help=f"Header bytes to transform (default {DEFAULT_HEADER_SIZE})")
    common.add_argument("--workers", type=int, default=0,
                        help="Worker threads (0 = one per input, capped at CPU count)")
    common.add_argument("--force", action="store_true",
                        help="Skip confirmation prompts")
    common.add_argument("--log-limit", type=int, default=DEFAULT_LOG_LIMIT,
                        help="Max log lines kept (10-2000)")
    common.add_argument("--log-kinds", default="Info,Warning,Error,Debug,Success",
                        help="Comma-separated log kinds to record")
    common.add_argument("--json", default="", help="Write jobs and log to a JSON file")
    common.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    p_corrupt = sub.add_parser("corrupt", parents=[common],
                               help="Write corrupted copies")
    p_corrupt.add_argument("-m", "--method", type=CorruptionMethod.parse,
                           default=CorruptionMethod.HEADER_FLIP,
                           help="header-flip | random-bytes | zero-fill | "
                                "reverse-bytes | bit-shift-left | overwrite-all")
    p_corrupt.add_argument("--in-place", action="store_true",
                           help="Write the copy next to the source instead of the output folder")
    p_corrupt.add_argument("--seed", type=int, default=None,
                           help="Seed for the random methods")

    p_recover = sub.add_parser("recover", parents=[common],
                               help="Repair damaged file headers")
    p_recover.add_argument("--replace-original", action="store_true",
                           help="Overwrite the damaged file with the repaired one")
    return parser


def main(argv=None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.header_size < 0:
        parser.error("--header-size must be >= 0")
    try:
        kinds = parse_kinds(args.log_kinds)
    except ValueError as e:
        parser.error(str(e))

    sink = LogBuffer(limit=args.log_limit, enabled_kinds=kinds, forward=True)

    print(f"BitTwister {APP_VERSION}")
    print("=" * 60)

    if args.command == "corrupt":
        jobs = corrupt_mode(args, sink)
    else:
        jobs = recover_mode(args, sink)

    counts = summarize(jobs)
    print(f"\n{'=' * 60}")
    print(f"  Done — {len(jobs)} file(s): "
          + ", ".join(f"{n} {status}" for status, n in counts.items()))
    print(f"{'=' * 60}")

    if args.json:
        _write_json(args.json, jobs, sink)

    return 0 if all(job.ok for job in jobs) else 1


if __name__ == "__main__":
    sys.exit(main())
