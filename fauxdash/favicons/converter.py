"""
Favicon image conversion with Pillow.

Everything is normalised to an RGBA PNG that fits inside 128x128 without ever
being enlarged. ICO containers are searched for their largest frame; when
Pillow cannot parse the container, an embedded PNG stream is looked for
directly.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from fauxdash.core.logging_config import get_logger

from .formats import PNG_SIGNATURE, detect_format

logger = get_logger(__name__)

MAX_SIZE = (128, 128)
SUPPORTED_FORMATS = {"PNG", "JPEG", "GIF", "WEBP", "BMP", "TIFF", "ICO"}

HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{6})$")

THEME_COLORS = {
    "Slate": "#64748b",
    "Gray": "#6b7280",
    "Zinc": "#71717a",
    "Neutral": "#737373",
    "Stone": "#78716c",
    "Red": "#ef4444",
    "Orange": "#f97316",
    "Amber": "#f59e0b",
    "Yellow": "#eab308",
    "Lime": "#84cc16",
    "Green": "#22c55e",
    "Emerald": "#10b981",
    "Teal": "#14b8a6",
    "Cyan": "#06b6d4",
    "Sky": "#0ea5e9",
    "Blue": "#3b82f6",
    "Indigo": "#6366f1",
    "Violet": "#8b5cf6",
    "Purple": "#a855f7",
    "Fuchsia": "#d946ef",
    "Pink": "#ec4899",
    "Rose": "#f43f5e",
}
_THEME_COLORS_BY_NAME = {name.lower(): value for name, value in THEME_COLORS.items()}


@dataclass
class ConversionResult:
    """PNG bytes on success, an error message otherwise."""

    success: bool
    data: Optional[bytes] = None
    error: Optional[str] = None


def _to_png_bytes(image: Image.Image) -> bytes:
    image = image.convert("RGBA")
    image.thumbnail(MAX_SIZE, Image.LANCZOS)
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def _largest_ico_frame(image: Image.Image) -> Image.Image:
    sizes = image.ico.sizes()
    if not sizes:
        return image
    best = max(sizes, key=lambda size: size[0] * size[1])
    return image.ico.getimage(best)


def _convert_ico(data: bytes) -> ConversionResult:
    try:
        with Image.open(BytesIO(data)) as image:
            frame = _largest_ico_frame(image)
            return ConversionResult(success=True, data=_to_png_bytes(frame))
    except (UnidentifiedImageError, OSError, ValueError, SyntaxError) as ico_error:
        logger.debug(f"Pillow could not read ICO container: {ico_error}")
        offset = data.find(PNG_SIGNATURE)
        if offset != -1:
            try:
                with Image.open(BytesIO(data[offset:])) as embedded:
                    return ConversionResult(success=True, data=_to_png_bytes(embedded))
            except (UnidentifiedImageError, OSError, ValueError) as png_error:
                logger.debug(f"Embedded PNG extraction failed: {png_error}")
        return ConversionResult(success=False, error=f"ICO processing failed: {ico_error}")


def convert_to_png(data: bytes) -> ConversionResult:
    """Convert a downloaded icon to a normalised PNG.

    Args:
        data: Raw image bytes

    Returns:
        ConversionResult with PNG bytes or an error
    """
    fmt = detect_format(data)
    if fmt == "svg":
        return ConversionResult(success=False, error="SVG conversion not supported")
    if fmt == "ico":
        return _convert_ico(data)

    try:
        with Image.open(BytesIO(data)) as image:
            if image.format not in SUPPORTED_FORMATS:
                return ConversionResult(success=False, error=f"Unsupported format: {image.format}")
            if getattr(image, "n_frames", 1) > 1:
                image.seek(0)
            return ConversionResult(success=True, data=_to_png_bytes(image))
    except (UnidentifiedImageError, OSError, ValueError) as e:
        return ConversionResult(success=False, error=f"Image conversion failed: {e}")


def _write_gray_pair(source: Path, black_path: Path, white_path: Path) -> None:
    with Image.open(source) as image:
        rgba = image.convert("RGBA")
        alpha = rgba.getchannel("A")
        gray = ImageOps.grayscale(rgba)

        black = Image.merge("RGBA", (gray, gray, gray, alpha))
        black.save(black_path, format="PNG")

        inverted = ImageOps.invert(gray)
        white = Image.merge("RGBA", (inverted, inverted, inverted, alpha))
        white.save(white_path, format="PNG")


def convert_to_grayscale(source: Path, base_name: str, directory: Path) -> tuple[str, str]:
    """Write black and white grayscale variants of a favicon.

    The white variant is the inverted grayscale image so that it reads on
    dark backgrounds. Alpha is preserved in both.

    Args:
        source: Source PNG (ideally the ``_original`` copy)
        base_name: File name stem shared by all variants
        directory: Favicon directory

    Returns:
        Tuple of (black filename, white filename)
    """
    black_name = f"{base_name}_grayscale_black.png"
    white_name = f"{base_name}_grayscale_white.png"
    _write_gray_pair(source, directory / black_name, directory / white_name)
    return black_name, white_name


def convert_to_monotone(source: Path, base_name: str, directory: Path) -> tuple[str, str]:
    """Write the ``_monotone_black`` / ``_monotone_white`` pair used by themed icon sets."""
    black_name = f"{base_name}_monotone_black.png"
    white_name = f"{base_name}_monotone_white.png"
    _write_gray_pair(source, directory / black_name, directory / white_name)
    return black_name, white_name


def parse_color(color: str) -> Optional[tuple[int, int, int]]:
    """Resolve ``#rrggbb`` (``#`` optional) or a theme colour name to RGB."""
    value = color.strip()
    match = HEX_COLOR.match(value)
    if match is None:
        named = _THEME_COLORS_BY_NAME.get(value.lower())
        if named is None:
            return None
        match = HEX_COLOR.match(named)
    digits = match.group(1)
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


def tint_favicon(source: Path, target: Path, rgb: tuple[int, int, int]) -> None:
    """Write a single-hue copy of a favicon.

    Luminance comes from the grayscale image: black stays black, white stays
    white and mid-tones take ``rgb``. Transparency is kept.
    """
    with Image.open(source) as image:
        rgba = image.convert("RGBA")
        alpha = rgba.getchannel("A")
        gray = ImageOps.grayscale(rgba)
        tinted = ImageOps.colorize(gray, black=(0, 0, 0), white=(255, 255, 255), mid=rgb)
        tinted.putalpha(alpha)
        tinted.save(target, format="PNG")


def is_readable_image(path: Path) -> bool:
    try:
        with Image.open(path) as image:
            image.verify()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError):
        return False
    return True


def invert_colors(source: Path, target: Path) -> None:
    """Write a colour-inverted copy of a favicon, keeping transparency."""
    with Image.open(source) as image:
        rgba = image.convert("RGBA")
        r, g, b, a = rgba.split()
        rgb = Image.merge("RGB", (r, g, b))
        inverted = ImageOps.invert(rgb)
        ir, ig, ib = inverted.split()
        Image.merge("RGBA", (ir, ig, ib, a)).save(target, format="PNG")
