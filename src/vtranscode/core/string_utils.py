"""String and byte decoding utilities.

ffmpeg and ffprobe echo container metadata verbatim, so their output is not
guaranteed to be valid UTF-8. These helpers turn raw output into text without
ever raising on malformed byte sequences.
"""

from __future__ import annotations

# Single-byte encoding used when output is not valid UTF-8. Every byte
# sequence decodes under ISO-8859-1, so the fallback cannot fail.
FALLBACK_ENCODING = "iso-8859-1"


def is_valid_utf8(data: bytes) -> bool:
    """Check whether a byte string is well-formed UTF-8.

    Decodes with ``surrogateescape`` so that invalid bytes surface as lone
    surrogates instead of an exception.

    Args:
        data: Raw bytes to check.

    Returns:
        True if every byte belongs to a valid UTF-8 sequence.

    Example:
        >>> is_valid_utf8("Straße".encode("utf-8"))
        True
        >>> is_valid_utf8(b"caf\\xe9")
        False
    """
    if data.isascii():
        return True
    text = data.decode("utf-8", errors="surrogateescape")
    return not any("\udc80" <= char <= "\udcff" for char in text)


def repair_encoding(data: bytes | str) -> str:
    """Decode process output, falling back to ISO-8859-1 for garbled bytes.

    Args:
        data: Raw bytes read from a process, or text that is already decoded.

    Returns:
        Decoded text. UTF-8 when the bytes are valid UTF-8, otherwise the
        bytes reinterpreted as ISO-8859-1.
    """
    if isinstance(data, str):
        return data
    if is_valid_utf8(data):
        return data.decode("utf-8")
    return data.decode(FALLBACK_ENCODING)
