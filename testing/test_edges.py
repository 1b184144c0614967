"""Tests for the luminance edge map and contour extraction."""

import numpy as np
from PIL import Image

from image_tools.detection import build_edges, find_contours, luminance
from image_tools.utils import to_pixel_array


def _pixels(img: Image.Image) -> np.ndarray:
    return to_pixel_array(img)


def test_white_image_has_no_edges(white_image):
    edges = build_edges(_pixels(white_image))
    assert edges.shape == (100, 100)
    assert edges.dtype == bool
    assert not edges.any()


def test_vertical_step_marks_left_of_boundary():
    pixels = np.full((50, 50, 3), 255, dtype=np.uint8)
    pixels[:, 25:] = 0
    edges = build_edges(pixels)

    # x=24 is white with a black right neighbor
    assert edges[1:-1, 24].all()
    assert not edges[:, 25].any()
    assert int(edges.sum()) == 48


def test_border_is_never_an_edge():
    rng = np.random.default_rng(0)
    pixels = rng.integers(0, 256, size=(40, 60, 3), dtype=np.uint8)
    edges = build_edges(pixels)
    assert not edges[0, :].any()
    assert not edges[-1, :].any()
    assert not edges[:, 0].any()
    assert not edges[:, -1].any()


def test_threshold_is_strictly_greater_than_30():
    pixels = np.zeros((10, 10, 3), dtype=np.uint8)
    pixels[:, 5:] = 30
    assert not build_edges(pixels).any()

    pixels[:, 5:] = 32
    assert build_edges(pixels)[1:-1, 4].all()


def test_tiny_images_have_no_interior():
    assert not build_edges(np.zeros((2, 2, 3), dtype=np.uint8)).any()
    assert build_edges(np.zeros((1, 5, 3), dtype=np.uint8)).shape == (1, 5)


def test_luminance_weights():
    pixels = np.array([[[255, 0, 0], [0, 255, 0], [0, 0, 255]]], dtype=np.uint8)
    assert luminance(pixels).tolist() == [[76, 149, 29]]


def test_contours_group_connected_pixels():
    edges = np.zeros((30, 30), dtype=bool)
    edges[5, 2:20] = True          # 18 pixels
    edges[10:14, 10:14] = True     # 16 pixels
    edges[20, 20] = True           # too small

    contours = find_contours(edges)
    assert [len(c) for c in contours] == [18, 16]


def test_contours_use_eight_connectivity():
    edges = np.zeros((20, 20), dtype=bool)
    for i in range(12):
        edges[2 + i, 2 + i] = True   # diagonal staircase
    contours = find_contours(edges)
    assert len(contours) == 1
    assert len(contours[0]) == 12


def test_contours_drop_small_components():
    edges = np.zeros((20, 20), dtype=bool)
    edges[5, 5:14] = True   # 9 pixels
    assert find_contours(edges) == []


def test_contours_follow_first_encounter_order():
    edges = np.zeros((40, 40), dtype=bool)
    edges[30, 0:15] = True
    edges[2, 20:35] = True
    contours = find_contours(edges)
    assert len(contours) == 2
    assert contours[0][:, 1].min() == 2
    assert contours[1][:, 1].min() == 30


def test_square_outline_is_one_contour(two_squares_image):
    edges = build_edges(_pixels(two_squares_image))
    contours = find_contours(edges)
    assert len(contours) == 2
    for contour in contours:
        assert len(contour) == 119
        xs, ys = contour[:, 0], contour[:, 1]
        assert xs.max() - xs.min() == 30
        assert ys.max() - ys.min() == 30
