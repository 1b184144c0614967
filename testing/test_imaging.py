"""Tests for cropping, grid overlay, color sampling, measurement and image info."""

import numpy as np
import pytest
from PIL import Image, ImageDraw

from image_tools import InvalidParameterError, ImageLoadError
from image_tools.cache import ImageCache
from image_tools.color import dominant_colors, rgb_to_hsl, sample_color, sample_colors_multi
from image_tools.debugging import edge_detect, get_dimensions, get_image_info
from image_tools.measure import check_alignment, compare_regions, measure_distance
from image_tools.spatial import crop_quadrant, crop_region, get_quadrant_coordinates, grid_overlay
from image_tools.utils import load_image


@pytest.fixture
def quadrants_image():
    """200x100 image with a distinct color in each quadrant."""
    img = Image.new('RGB', (200, 100))
    draw = ImageDraw.Draw(img)
    draw.rectangle([0, 0, 99, 49], fill=(255, 0, 0))
    draw.rectangle([100, 0, 199, 49], fill=(0, 255, 0))
    draw.rectangle([0, 50, 99, 99], fill=(0, 0, 255))
    draw.rectangle([100, 50, 199, 99], fill=(255, 255, 255))
    return img


# Loading

def test_load_image_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_image(str(tmp_path / "missing.png"))


def test_load_image_rejects_garbage(tmp_path):
    path = tmp_path / "broken.png"
    path.write_bytes(b"not an image")
    with pytest.raises(ImageLoadError):
        load_image(str(path))


def test_load_image_converts_to_rgb():
    rgba = Image.new('RGBA', (4, 4), (10, 20, 30, 128))
    assert load_image(rgba).mode == 'RGB'


# Cropping

def test_crop_region_and_scale(quadrants_image):
    cropped = crop_region(quadrants_image, 10, 10, 60, 40)
    assert cropped.size == (50, 30)
    assert cropped.getpixel((0, 0)) == (255, 0, 0)

    assert crop_region(quadrants_image, 10, 10, 60, 40, scale=2.0).size == (100, 60)


@pytest.mark.parametrize("coords", [(-1, 0, 10, 10), (0, 0, 201, 10), (50, 10, 50, 20), (60, 10, 40, 20)])
def test_crop_region_rejects_bad_bounds(quadrants_image, coords):
    with pytest.raises(InvalidParameterError):
        crop_region(quadrants_image, *coords)


@pytest.mark.parametrize("name,expected", [
    ("top-left", (0, 0, 100, 50)),
    ("top-right", (100, 0, 200, 50)),
    ("bottom-left", (0, 50, 100, 100)),
    ("bottom-right", (100, 50, 200, 100)),
    ("top-half", (0, 0, 200, 50)),
    ("bottom-half", (0, 50, 200, 100)),
    ("left-half", (0, 0, 100, 100)),
    ("right-half", (100, 0, 200, 100)),
    ("center", (50, 25, 150, 75)),
    ("top_right", (100, 0, 200, 50)),
])
def test_quadrant_coordinates(quadrants_image, name, expected):
    assert get_quadrant_coordinates(quadrants_image, name) == expected


def test_crop_quadrant(quadrants_image):
    cropped = crop_quadrant(quadrants_image, "bottom-left")
    assert cropped.size == (100, 50)
    assert cropped.getpixel((10, 10)) == (0, 0, 255)

    with pytest.raises(InvalidParameterError):
        crop_quadrant(quadrants_image, "middle")


# Grid

def test_grid_overlay_draws_lines(white_image):
    img, meta = grid_overlay(white_image, grid_spacing=25, show_coordinates=False, grid_color="#0000FF")

    assert img.size == (100, 100)
    assert meta["vertical_lines"] == [25, 50, 75]
    assert meta["horizontal_lines"] == [25, 50, 75]
    assert img.getpixel((25, 10)) == (0, 0, 255)
    assert img.getpixel((10, 10)) == (255, 255, 255)


def test_grid_overlay_blends_translucent_color(white_image):
    img, _ = grid_overlay(white_image, grid_spacing=50, show_coordinates=False)
    r, g, b = img.getpixel((50, 5))
    assert r == 255 and 120 <= g <= 135 and 120 <= b <= 135


def test_grid_overlay_bad_color_falls_back(white_image):
    img, _ = grid_overlay(white_image, grid_spacing=50, show_coordinates=False, grid_color="nope")
    assert img.getpixel((50, 5))[0] == 255
    assert img.getpixel((50, 5))[1] < 255


def test_grid_overlay_labels_intersections(white_image):
    img, _ = grid_overlay(white_image, grid_spacing=50, show_coordinates=True)
    label_area = np.asarray(img)[52:62, 52:70]
    assert (label_area < 100).any()


def test_grid_spacing_validation(white_image):
    with pytest.raises(InvalidParameterError):
        grid_overlay(white_image, grid_spacing=0)


# Colors

def test_sample_color(quadrants_image):
    color = sample_color(quadrants_image, 150, 10)
    assert color["hex"] == "#00FF00"
    assert color["rgb"] == {"r": 0, "g": 255, "b": 0}
    assert color["rgba"]["a"] == 255
    assert color["hsl"] == {"h": 120, "s": 100, "l": 50}


def test_sample_color_reports_alpha():
    img = Image.new('RGBA', (10, 10), (10, 20, 30, 128))
    img.putpixel((2, 3), (200, 100, 50, 0))

    half = sample_color(img, 1, 1)
    assert half["rgba"] == {"r": 10, "g": 20, "b": 30, "a": 128}
    assert half["rgb"] == {"r": 10, "g": 20, "b": 30}
    assert half["hex"] == "#0A141E"

    assert sample_color(img, 2, 3)["rgba"]["a"] == 0
    samples = sample_colors_multi(img, [{"x": 2, "y": 3}])["samples"]
    assert samples[0]["color"]["rgba"]["a"] == 0


def test_sample_color_from_transparent_file(tmp_path):
    path = tmp_path / "overlay.png"
    Image.new('RGBA', (8, 8), (255, 0, 0, 64)).save(path)

    color = sample_color(str(path), 4, 4)
    assert color["rgba"] == {"r": 255, "g": 0, "b": 0, "a": 64}
    # Other tools still see plain RGB
    assert load_image(str(path)).mode == 'RGB'


def test_sample_color_out_of_bounds(quadrants_image):
    with pytest.raises(InvalidParameterError):
        sample_color(quadrants_image, 200, 0)


def test_rgb_to_hsl():
    assert rgb_to_hsl(255, 255, 255) == {"h": 0, "s": 0, "l": 100}
    assert rgb_to_hsl(255, 0, 0) == {"h": 0, "s": 100, "l": 50}
    assert rgb_to_hsl(0, 0, 255) == {"h": 240, "s": 100, "l": 50}


def test_sample_colors_multi(quadrants_image):
    result = sample_colors_multi(quadrants_image, [
        {"x": 5, "y": 5, "label": "title"},
        {"x": 150, "y": 75},
    ])
    first, second = result["samples"]
    assert first["label"] == "title"
    assert first["color"]["hex"] == "#FF0000"
    assert "label" not in second
    assert second["color"]["hex"] == "#FFFFFF"

    with pytest.raises(InvalidParameterError):
        sample_colors_multi(quadrants_image, [{"x": 5, "y": 5}, {"x": 500, "y": 5}])


def test_dominant_colors(quadrants_image):
    colors = dominant_colors(quadrants_image, count=3)["colors"]
    assert len(colors) == 3
    assert all(c["percentage"] == pytest.approx(25.0) for c in colors)
    # 255 quantizes to 240
    assert {c["hex"] for c in dominant_colors(quadrants_image)["colors"]} == {
        "#F00000", "#00F000", "#0000F0", "#F0F0F0"
    }


def test_dominant_colors_in_region(quadrants_image):
    colors = dominant_colors(quadrants_image, region={"x1": 0, "y1": 0, "x2": 100, "y2": 50})["colors"]
    assert colors == [{"hex": "#F00000", "percentage": 100.0, "rgb": {"r": 240, "g": 0, "b": 0}}]


def test_dominant_colors_count_validation(quadrants_image):
    with pytest.raises(InvalidParameterError):
        dominant_colors(quadrants_image, count=0)


# Measurement

def test_measure_distance(white_image):
    result = measure_distance(white_image, 0, 0, 30, 40)
    assert result["distance_pixels"] == 50.0
    assert result["delta_x"] == 30
    assert result["delta_y"] == 40
    assert result["angle_degrees"] == 53.1
    assert result["distance_percent_width"] == 50.0
    assert result["distance_percent_height"] == 50.0


def test_check_alignment():
    row = check_alignment([{"x": 10, "y": 100}, {"x": 50, "y": 102}, {"x": 90, "y": 98}])
    assert row["horizontally_aligned"]
    assert not row["vertically_aligned"]
    assert row["average_y"] == 100.0

    loose = check_alignment([{"x": 10, "y": 0}, {"x": 10, "y": 30}], tolerance=5)
    assert loose["vertically_aligned"]
    assert not loose["horizontally_aligned"]
    assert loose["horizontal_variance"] == 15.0


def test_check_alignment_trivial_cases():
    for points in ([], [{"x": 3, "y": 4}]):
        result = check_alignment(points)
        assert result["horizontally_aligned"] and result["vertically_aligned"]


def test_compare_regions(quadrants_image):
    same = compare_regions(quadrants_image,
                           {"x1": 0, "y1": 0, "x2": 20, "y2": 20},
                           {"x1": 50, "y1": 10, "x2": 70, "y2": 30})
    assert same["similarity_score"] == 1.0
    assert same["same_size"]
    assert same["total_pixels"] == 400

    different = compare_regions(quadrants_image,
                                {"x1": 0, "y1": 0, "x2": 20, "y2": 20},
                                {"x1": 100, "y1": 0, "x2": 130, "y2": 10})
    assert different["similarity_score"] == 0.0
    assert not different["same_size"]
    assert different["total_pixels"] == 200
    assert different["region2_size"] == {"x": 30, "y": 10}
    assert different["average_color_diff"] == 170.0


# Image info and edges

def test_get_image_info(tmp_path):
    path = tmp_path / "alpha.png"
    Image.new('RGBA', (64, 32), (0, 0, 0, 0)).save(path)
    cache = ImageCache()

    info = get_image_info(str(path), cache)
    assert info["width"] == 64
    assert info["height"] == 32
    assert info["format"] == "png"
    assert info["has_alpha"] is True
    assert info["color_depth"] == "8-bit"
    assert info["file_size_bytes"] == path.stat().st_size
    assert info["aspect_ratio"] == 2.0
    assert info["size_assessment"] == "TINY"
    assert str(path) in cache


def test_get_image_info_jpeg(tmp_path):
    path = tmp_path / "photo.jpg"
    Image.new('RGB', (10, 10), (200, 10, 10)).save(path)
    info = get_image_info(str(path))
    assert info["format"] == "jpeg"
    assert info["has_alpha"] is False


def test_get_dimensions(quadrants_image):
    assert get_dimensions(quadrants_image) == {"width": 200, "height": 100}


def test_edge_detect(two_squares_image):
    edges = edge_detect(two_squares_image)
    assert edges.mode == 'L'
    assert edges.size == two_squares_image.size
    values = np.asarray(edges)
    assert set(np.unique(values)) <= {0, 255}
    assert values.max() == 255


def test_edge_detect_threshold_validation(white_image):
    with pytest.raises(InvalidParameterError):
        edge_detect(white_image, 200, 100)
