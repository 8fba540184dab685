"""
File Signature Catalog — magic numbers at offset 0, keyed by extension.

DESIGN RATIONALE
────────────────
Header repair only needs to answer two questions:
  • "does this header look like a <ext> file?"  → matches()
  • "what type is this, by name or by content?"  → classify_extension(),
                                                    classify_content()

The catalog covers the formats the repair rules know how to rebuild
(PNG, JPEG, ZIP, PDF) plus common fixed-magic formats.  Anything the
catalog does not cover falls back to Pillow's format registry, so image
types such as WebP or ICO are still classifiable.

Exported:
  • SignatureEntry      — one (extension, magic) pair with its type name
  • HEADER_SIGNATURES   — ordered list of all entries
  • SIGNATURES_BY_EXT   — extension → entries
"""

from __future__ import annotations

import io
import logging
import os
from dataclasses import dataclass
from typing import Optional

from PIL import Image

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignatureEntry:
    """Describes one magic number at offset 0."""
    extension: str              # file extension without dot
    magic: bytes
    type_name: str              # canonical type shared by aliases (jpg/jpeg)
    description: str = ""


# ══════════════════════════════════════════════════════════════
#  Catalog
# ══════════════════════════════════════════════════════════════

PNG_MAGIC = b"\x89PNG"
JPEG_MAGIC = b"\xFF\xD8\xFF"
ZIP_MAGIC = b"PK"
PDF_MAGIC = b"%PDF"

SIG_PNG = SignatureEntry("png", PNG_MAGIC, "png", "PNG Image")
SIG_JPG = SignatureEntry("jpg", JPEG_MAGIC, "jpeg", "JPEG Image")
SIG_JPEG = SignatureEntry("jpeg", JPEG_MAGIC, "jpeg", "JPEG Image")
SIG_ZIP = SignatureEntry("zip", ZIP_MAGIC, "zip", "ZIP Archive")
SIG_PDF = SignatureEntry("pdf", PDF_MAGIC, "pdf", "PDF Document")

HEADER_SIGNATURES: list[SignatureEntry] = [
    # ── Repairable ──
    SIG_PNG, SIG_JPG, SIG_JPEG, SIG_ZIP, SIG_PDF,

    # ── Images ──
    SignatureEntry("gif", b"GIF87a", "gif", "GIF Image"),
    SignatureEntry("gif", b"GIF89a", "gif", "GIF Image"),
    SignatureEntry("bmp", b"BM", "bmp", "BMP Image"),
    SignatureEntry("tif", b"II\x2A\x00", "tiff", "TIFF Image (LE)"),
    SignatureEntry("tif", b"MM\x00\x2A", "tiff", "TIFF Image (BE)"),
    SignatureEntry("tiff", b"II\x2A\x00", "tiff", "TIFF Image (LE)"),
    SignatureEntry("tiff", b"MM\x00\x2A", "tiff", "TIFF Image (BE)"),

    # ── ZIP containers ──
    SignatureEntry("docx", ZIP_MAGIC, "zip", "Word Document (OOXML)"),
    SignatureEntry("xlsx", ZIP_MAGIC, "zip", "Excel Workbook (OOXML)"),
    SignatureEntry("pptx", ZIP_MAGIC, "zip", "PowerPoint Presentation (OOXML)"),
    SignatureEntry("jar", ZIP_MAGIC, "zip", "Java Archive"),
    SignatureEntry("apk", ZIP_MAGIC, "zip", "Android Package"),

    # ── Archives ──
    SignatureEntry("gz", b"\x1F\x8B", "gzip", "GZIP Archive"),
    SignatureEntry("7z", b"7z\xBC\xAF\x27\x1C", "7z", "7-Zip Archive"),
    SignatureEntry("rar", b"Rar!\x1A\x07", "rar", "RAR Archive"),
]

SIGNATURES_BY_EXT: dict[str, list[SignatureEntry]] = {}
for _sig in HEADER_SIGNATURES:
    SIGNATURES_BY_EXT.setdefault(_sig.extension, []).append(_sig)

# Pillow format name → catalog type name
_PIL_TYPE_NAMES = {
    "JPEG": "jpeg",
    "MPO": "jpeg",
    "TIFF": "tiff",
    "JPEG2000": "jp2",
}

# Formats with a real magic number; Pillow's headerless formats (TGA and
# friends) would accept almost any garbage.
_SNIFF_FORMATS = ("PNG", "JPEG", "GIF", "BMP", "TIFF", "WEBP", "ICO",
                  "PPM", "JPEG2000", "PSD")


def normalize_extension(extension: str) -> str:
    """'.JPG' / 'jpg' → 'jpg'."""
    return extension.lower().rsplit(".", 1)[-1]


def extension_of(path: str) -> str:
    """'/a/Photo.JPG' → 'jpg'; empty string when the name has no extension."""
    return os.path.splitext(path)[1][1:].lower()


def lookup(extension: str) -> list[SignatureEntry]:
    """Catalog entries for an extension (empty for unknown extensions)."""
    return SIGNATURES_BY_EXT.get(normalize_extension(extension), [])


def matches(header: bytes, extension: str) -> bool:
    """True if ``header`` starts with a registered magic for ``extension``.

    Extension lookup is case-insensitive; unknown extensions return False.
    """
    return any(header[:len(sig.magic)] == sig.magic for sig in lookup(extension))


def magic_for(extension: str) -> Optional[bytes]:
    """The first registered magic number for an extension, if any."""
    entries = lookup(extension)
    return entries[0].magic if entries else None


def _pil_type(format_name: str) -> str:
    return _PIL_TYPE_NAMES.get(format_name, format_name.lower())


def classify_extension(extension: str) -> Optional[str]:
    """Best-effort type name from the extension alone."""
    ext = normalize_extension(extension)
    if not ext:
        return None
    entries = SIGNATURES_BY_EXT.get(ext)
    if entries:
        return entries[0].type_name
    pil_format = Image.registered_extensions().get("." + ext)
    if pil_format:
        return _pil_type(pil_format)
    return None


def identify(data: bytes) -> Optional[SignatureEntry]:
    """Longest catalog magic that prefixes ``data``."""
    best: Optional[SignatureEntry] = None
    for sig in HEADER_SIGNATURES:
        if data[:len(sig.magic)] == sig.magic:
            if best is None or len(sig.magic) > len(best.magic):
                best = sig
    return best


def classify_content(data: bytes) -> Optional[str]:
    """Best-effort type name from the bytes themselves.

    Catalog magic numbers first, then Pillow's image identification.
    """
    if not data:
        return None
    sig = identify(data)
    if sig is not None:
        return sig.type_name
    try:
        with Image.open(io.BytesIO(data), formats=_SNIFF_FORMATS) as img:
            return _pil_type(img.format) if img.format else None
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        logger.debug("Pillow could not identify content: %s", e)
        return None


def get_known_extensions() -> list[str]:
    return sorted(SIGNATURES_BY_EXT)
