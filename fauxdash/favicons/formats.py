"""
Image format sniffing from magic bytes.
"""

from __future__ import annotations

from typing import Optional

PNG_SIGNATURE = b"\x89PNG"


def detect_format(data: bytes) -> Optional[str]:
    """Guess an image format from its leading bytes.

    Args:
        data: Raw response body

    Returns:
        One of ``ico``, ``png``, ``jpeg``, ``gif``, ``webp``, ``bmp``, ``svg`` or None
    """
    if len(data) >= 4 and data[0] == 0x00 and data[1] == 0x00 and data[2] in (0x01, 0x02) and data[3] == 0x00:
        return "ico"
    if data.startswith(PNG_SIGNATURE):
        return "png"
    if data.startswith(b"\xff\xd8\xff"):
        return "jpeg"
    if data.startswith(b"GIF"):
        return "gif"
    if len(data) > 11 and data[8:12] == b"WEBP":
        return "webp"
    if data.startswith(b"BM"):
        return "bmp"

    head = data[:500].decode("utf-8", errors="ignore")
    if "<svg" in head or ("<?xml" in head and "svg" in head):
        return "svg"
    return None
