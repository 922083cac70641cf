# -*- coding: utf-8 -*-
"""
String and encoding helpers for Log Compass.

Pod logs are pulled off removable media written by several firmware
generations.  Most are UTF-8, older units write Latin-1 or cp1252
degree signs, and a damaged card yields raw bytes.  This module
centralises the decode logic so that every reader behaves the same.
"""

import unicodedata

# ---------------------------------------------------------------------------
# Encoding detection heuristics
# ---------------------------------------------------------------------------

# Encodings seen on pod media, ordered by probability.  We try each one
# in sequence until decode succeeds.
_ENCODING_CANDIDATES = [
    "utf-8",
    "cp1252",
    "latin-1",
]


def detect_encoding(raw_bytes):
    """Attempt to determine the encoding of *raw_bytes* by trial decoding.

    Returns the first encoding from ``_ENCODING_CANDIDATES`` that
    decodes without error, or ``'latin-1'`` as the ultimate fallback
    (latin-1 never raises because every byte 0x00-0xFF is a valid
    codepoint).
    """
    if isinstance(raw_bytes, str):
        return "utf-8"

    for enc in _ENCODING_CANDIDATES:
        try:
            raw_bytes.decode(enc)
            return enc
        except (UnicodeDecodeError, LookupError):
            continue
    return "latin-1"


# ---------------------------------------------------------------------------
# Safe conversion functions
# ---------------------------------------------------------------------------

def safe_decode(value, encoding=None, errors="replace"):
    """Decode bytes to text, replacing undecodable bytes rather than
    raising.  Text passes through unchanged."""
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        if encoding is None:
            encoding = detect_encoding(bytes(value))
        return bytes(value).decode(encoding, errors)
    return str(value)


def has_binary_content(raw_bytes):
    """True when *raw_bytes* contains NUL bytes, which never occur in a
    healthy text log."""
    return b"\x00" in raw_bytes


def read_lines(path, limit=None):
    """Read *path* as text lines with line terminators removed.

    Raises ``OSError`` for unreadable files; the caller decides whether
    that is fatal.  With *limit* only the first *limit* lines are
    returned.
    """
    with open(path, "rb") as f:
        raw = f.read()
    lines = safe_decode(raw).splitlines()
    if limit is not None:
        return lines[:limit]
    return lines


# ---------------------------------------------------------------------------
# Unicode normalisation
# ---------------------------------------------------------------------------

def strip_control_characters(text):
    """Normalise *text* to NFC and drop C0/C1 control characters except
    tab.  Serial consoles on older pods leave stray escape codes in the
    log."""
    text = unicodedata.normalize("NFC", text)
    return "".join(
        ch for ch in text
        if not unicodedata.category(ch).startswith("C") or ch == "\t"
    )
