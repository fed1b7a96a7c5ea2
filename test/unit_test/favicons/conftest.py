from io import BytesIO
from typing import Callable, Tuple

import pytest
from PIL import Image


def _make_png(size: Tuple[int, int] = (32, 32)) -> bytes:
    width, height = size
    image = Image.new("RGBA", size)
    image.putdata([((x * 8) % 256, (y * 8) % 256, (x * y) % 256, 255) for y in range(height) for x in range(width)])
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def make_png() -> Callable[..., bytes]:
    """Build a patterned PNG that does not compress below a real icon's size."""
    return _make_png
