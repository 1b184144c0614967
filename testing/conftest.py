"""Synthetic images shared by the test modules."""

import numpy as np
import pytest
from PIL import Image, ImageDraw

WHITE = (255, 255, 255)
BLACK = (0, 0, 0)


def blank(width=100, height=100, color=WHITE) -> Image.Image:
    return Image.new('RGB', (width, height), color)


def ring_image(width=100, height=100, cx=50, cy=50, radius=20) -> Image.Image:
    """One-pixel circle outline: pixels whose distance to the center rounds to ``radius``."""
    ys, xs = np.mgrid[0:height, 0:width]
    dist = np.hypot(xs - cx, ys - cy)
    pixels = np.full((height, width, 3), 255, dtype=np.uint8)
    pixels[np.abs(dist - radius) < 0.5] = 0
    return Image.fromarray(pixels)


def text_like_image(width=200, height=100) -> Image.Image:
    """Rows of short vertical bars, the texture of printed text."""
    img = blank(width, height)
    draw = ImageDraw.Draw(img)
    for top in range(10, height - 20, 15):
        for x in range(10, width - 10, 6):
            draw.line([(x, top), (x, top + 7)], fill=BLACK)
    return img


@pytest.fixture
def white_image():
    return blank()


@pytest.fixture
def horizontal_line_image():
    img = blank()
    ImageDraw.Draw(img).line([(0, 50), (99, 50)], fill=BLACK)
    return img


@pytest.fixture
def two_squares_image():
    img = blank(120, 120)
    draw = ImageDraw.Draw(img)
    draw.rectangle([10, 10, 39, 39], fill=BLACK)
    draw.rectangle([70, 70, 99, 99], fill=BLACK)
    return img


@pytest.fixture
def arrow_image():
    """Horizontal line with an arrowhead at its right end."""
    img = blank()
    draw = ImageDraw.Draw(img)
    draw.line([(10, 50), (90, 50)], fill=BLACK)
    draw.line([(90, 50), (80, 40)], fill=BLACK)
    draw.line([(90, 50), (80, 60)], fill=BLACK)
    return img


@pytest.fixture
def circle_image():
    return ring_image()


@pytest.fixture
def text_image():
    return text_like_image()


@pytest.fixture
def checkerboard_image():
    ys, xs = np.mgrid[0:100, 0:150]
    pixels = np.where(((xs + ys) % 2 == 0)[..., None], 0, 255).astype(np.uint8)
    return Image.fromarray(np.repeat(pixels, 3, axis=2))


@pytest.fixture
def image_file(tmp_path, two_squares_image):
    path = tmp_path / "squares.png"
    two_squares_image.save(path)
    return str(path)
