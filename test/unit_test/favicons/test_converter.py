from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

from fauxdash.favicons import (
    THEME_COLORS,
    convert_to_grayscale,
    convert_to_monotone,
    convert_to_png,
    invert_colors,
    is_readable_image,
    parse_color,
    tint_favicon,
)


def _open(data: bytes) -> Image.Image:
    image = Image.open(BytesIO(data))
    image.load()
    return image


def _encode(image: Image.Image, fmt: str, **params) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format=fmt, **params)
    return buffer.getvalue()


def test_large_jpeg_is_shrunk_to_rgba_png():
    jpeg = _encode(Image.new("RGB", (300, 200), (200, 10, 10)), "JPEG")

    result = convert_to_png(jpeg)

    assert result.success
    image = _open(result.data)
    assert image.format == "PNG"
    assert image.mode == "RGBA"
    assert image.size == (128, 85)


def test_small_image_is_not_enlarged(make_png):
    result = convert_to_png(make_png((16, 16)))
    assert _open(result.data).size == (16, 16)


def test_ico_uses_largest_frame(make_png):
    ico = _encode(_open(make_png((64, 64))), "ICO", sizes=[(16, 16), (32, 32)])

    result = convert_to_png(ico)

    assert result.success
    assert _open(result.data).size == (32, 32)


def test_broken_ico_with_embedded_png(make_png):
    data = b"\x00\x00\x01\x00\x00\x00" + make_png((24, 24))

    result = convert_to_png(data)

    assert result.success
    assert _open(result.data).size == (24, 24)


def test_svg_is_rejected():
    result = convert_to_png(b'<svg xmlns="http://www.w3.org/2000/svg"></svg>')
    assert not result.success
    assert result.error == "SVG conversion not supported"


def test_garbage_is_rejected():
    result = convert_to_png(b"definitely not an image" * 10)
    assert not result.success
    assert result.error.startswith("Image conversion failed")


def test_grayscale_variants(tmp_path: Path):
    source = tmp_path / "nas_original.png"
    Image.new("RGBA", (4, 4), (200, 100, 50, 128)).save(source)

    black_name, white_name = convert_to_grayscale(source, "nas", tmp_path)

    assert (black_name, white_name) == ("nas_grayscale_black.png", "nas_grayscale_white.png")
    r, g, b, a = Image.open(tmp_path / black_name).convert("RGBA").getpixel((0, 0))
    assert r == g == b
    assert a == 128
    wr, wg, wb, wa = Image.open(tmp_path / white_name).convert("RGBA").getpixel((0, 0))
    assert (wr, wa) == (255 - r, 128)


def test_invert_keeps_alpha(tmp_path: Path):
    source = tmp_path / "nas.png"
    target = tmp_path / "nas_inverted.png"
    Image.new("RGBA", (2, 2), (10, 20, 30, 200)).save(source)

    invert_colors(source, target)

    assert Image.open(target).convert("RGBA").getpixel((1, 1)) == (245, 235, 225, 200)


def test_monotone_pair(tmp_path: Path):
    source = tmp_path / "nas.png"
    Image.new("RGBA", (4, 4), (0, 0, 0, 255)).save(source)

    black_name, white_name = convert_to_monotone(source, "nas", tmp_path)

    assert (black_name, white_name) == ("nas_monotone_black.png", "nas_monotone_white.png")
    assert Image.open(tmp_path / black_name).convert("RGBA").getpixel((0, 0)) == (0, 0, 0, 255)
    assert Image.open(tmp_path / white_name).convert("RGBA").getpixel((0, 0)) == (255, 255, 255, 255)


@pytest.mark.parametrize(
    "color, expected",
    [
        ("#ff0000", (255, 0, 0)),
        ("00ff80", (0, 255, 128)),
        ("  #ABCDEF ", (171, 205, 239)),
        ("slate", (100, 116, 139)),
        ("Red", (239, 68, 68)),
        ("#fff", None),
        ("chartreuse", None),
        ("", None),
    ],
)
def test_parse_color(color, expected):
    assert parse_color(color) == expected


def test_every_theme_colour_parses():
    for name in THEME_COLORS:
        assert parse_color(name) is not None, name


def test_tint_keeps_hue_and_alpha(tmp_path: Path):
    source = tmp_path / "nas.png"
    target = tmp_path / "nas_themed_ff0000.png"
    Image.new("RGBA", (2, 2), (200, 100, 50, 128)).save(source)

    tint_favicon(source, target, (255, 0, 0))

    r, g, b, a = Image.open(target).convert("RGBA").getpixel((0, 0))
    assert g == b == 0
    assert r > 200
    assert a == 128


def test_tint_keeps_white_white(tmp_path: Path):
    source = tmp_path / "nas.png"
    target = tmp_path / "nas_themed_3b82f6.png"
    Image.new("RGBA", (2, 2), (255, 255, 255, 255)).save(source)

    tint_favicon(source, target, (59, 130, 246))

    assert Image.open(target).convert("RGBA").getpixel((1, 1)) == (255, 255, 255, 255)


def test_is_readable_image(tmp_path: Path):
    good = tmp_path / "good.png"
    bad = tmp_path / "bad.png"
    Image.new("RGBA", (2, 2)).save(good)
    bad.write_bytes(b"\x89PNG truncated")

    assert is_readable_image(good)
    assert not is_readable_image(bad)
    assert not is_readable_image(tmp_path / "missing.png")
