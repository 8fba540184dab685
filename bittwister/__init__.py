# bittwister — File Corruption & Header Recovery Engine
# Deliberately damages copies of files and repairs damaged headers.
#
# Architecture (bottom → top):
#   models         — Configs, FileJob results, LogKind classification
#   transforms     — Header byte transforms (flip, random, zero, reverse, shift)
#   signatures     — Magic-number catalog + type classification (Pillow fallback)
#   log_buffer     — Bounded, kind-filtered, thread-safe log stream
#   corruptor      — Corrupt one file into a derived output path
#   traversal      — Mirror a directory tree, corrupting every file
#   header_repair  — Ordered repair-rule chain + in-memory validation
#   manager        — Worker threads per input path, result collection

__version__ = "1.0.0"
