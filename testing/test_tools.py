"""Tests for tool definitions and name-based dispatch."""

import base64
import io

import pytest
from PIL import Image

from image_tools import ImageCache, ImageToolsConfig, InvalidParameterError, UnknownToolError
from image_tools.tools import TOOL_DEFINITIONS, TOOL_NAMES, ToolExecutor


@pytest.fixture
def executor():
    return ToolExecutor()


def test_tool_definitions_are_well_formed():
    assert len(TOOL_DEFINITIONS) == 16
    assert len(set(TOOL_NAMES)) == 16

    for tool in TOOL_DEFINITIONS:
        assert tool["type"] == "function"
        function = tool["function"]
        assert function["name"].startswith("image_")
        assert function["description"]
        params = function["parameters"]
        assert params["type"] == "object"
        assert set(params["required"]) <= set(params["properties"])


def test_every_path_tool_requires_path():
    for tool in TOOL_DEFINITIONS:
        params = tool["function"]["parameters"]
        if "path" in params["properties"]:
            assert "path" in params["required"]


def test_every_tool_has_a_handler(executor, image_file):
    handlers = executor._handlers({"path": image_file})
    assert set(handlers) == set(TOOL_NAMES)


def test_image_load_caches_pixels(executor, image_file):
    info = executor.execute("image_load", {"path": image_file})
    assert info["width"] == 120
    assert info["format"] == "png"
    assert image_file in executor.cache

    assert executor.execute("image_dimensions", {"path": image_file}) == {"width": 120, "height": 120}
    assert len(executor.cache) == 1


def test_detect_rectangles_tool(executor, image_file):
    result = executor.execute("image_detect_rectangles", {"path": image_file})
    assert result["count"] == 2
    first = result["rectangles"][0]
    assert first["bounds"] == {"x1": 9, "y1": 9, "x2": 39, "y2": 39}
    assert first["fill_color"] == "#000000"


def test_detect_rectangles_uses_config_defaults(image_file):
    executor = ToolExecutor(ImageToolsConfig(min_area=5000))
    assert executor.execute("image_detect_rectangles", {"path": image_file})["count"] == 0
    # An explicit argument beats the configured default
    assert executor.execute("image_detect_rectangles", {"path": image_file, "min_area": 100})["count"] == 2


def test_detect_rectangles_with_region(executor, image_file):
    region = {"x1": 60, "y1": 60, "x2": 110, "y2": 110}
    result = executor.execute("image_detect_rectangles", {"path": image_file, "region": region})
    assert result["count"] == 1
    assert result["rectangles"][0]["bounds"]["x1"] == 69


def test_other_detectors_return_plain_dicts(executor, image_file):
    for name, key in [
        ("image_detect_lines", "lines"),
        ("image_detect_circles", "circles"),
        ("image_detect_text_regions", "regions"),
    ]:
        result = executor.execute(name, {"path": image_file, "min_radius": 5, "max_radius": 20})
        assert isinstance(result[key], list)
        assert result["count"] == len(result[key])


def test_crop_tool_returns_png(executor, image_file):
    result = executor.execute("image_crop", {"path": image_file, "x1": 0, "y1": 0, "x2": 40, "y2": 20, "scale": 2})
    assert (result["width"], result["height"]) == (80, 40)
    assert result["mime_type"] == "image/png"

    decoded = Image.open(io.BytesIO(base64.b64decode(result["image_base64"])))
    assert decoded.size == (80, 40)


def test_crop_quadrant_tool(executor, image_file):
    result = executor.execute("image_crop_quadrant", {"path": image_file, "region": "bottom_right"})
    assert (result["width"], result["height"]) == (60, 60)


def test_grid_and_edges_tools(executor, image_file):
    grid = executor.execute("image_grid_overlay", {"path": image_file, "grid_spacing": 30})
    assert grid["grid_spacing"] == 30
    assert grid["width"] == 120

    edges = executor.execute("image_edge_detect", {"path": image_file})
    assert edges["mime_type"] == "image/png"


def test_color_and_measure_tools(executor, image_file):
    assert executor.execute("image_sample_color", {"path": image_file, "x": 20, "y": 20})["hex"] == "#000000"

    multi = executor.execute("image_sample_colors_multi", {
        "path": image_file, "points": [{"x": 0, "y": 0, "label": "corner"}],
    })
    assert multi["samples"][0]["color"]["hex"] == "#FFFFFF"

    dominant = executor.execute("image_dominant_colors", {"path": image_file, "count": 1})
    assert dominant["colors"][0]["hex"] == "#F0F0F0"

    distance = executor.execute("image_measure_distance", {"path": image_file, "x1": 0, "y1": 0, "x2": 0, "y2": 60})
    assert distance["distance_pixels"] == 60.0

    compare = executor.execute("image_compare_regions", {
        "path": image_file,
        "region1": {"x1": 10, "y1": 10, "x2": 40, "y2": 40},
        "region2": {"x1": 70, "y1": 70, "x2": 100, "y2": 100},
    })
    assert compare["similarity_score"] == 1.0


def test_check_alignment_needs_no_image(executor):
    result = executor.execute("image_check_alignment", {"points": [{"x": 1, "y": 5}, {"x": 40, "y": 6}]})
    assert result["horizontally_aligned"]


def test_unknown_tool(executor):
    with pytest.raises(UnknownToolError) as excinfo:
        executor.execute("image_teleport", {})
    assert excinfo.value.tool_name == "image_teleport"


def test_missing_arguments(executor, image_file):
    with pytest.raises(InvalidParameterError):
        executor.execute("image_detect_lines", {})
    with pytest.raises(InvalidParameterError):
        executor.execute("image_crop", {"path": image_file, "x1": 0})


def test_missing_file(executor, tmp_path):
    with pytest.raises(FileNotFoundError):
        executor.execute("image_dimensions", {"path": str(tmp_path / "nope.png")})


def test_shared_cache_between_executors(image_file):
    cache = ImageCache(max_images=1)
    ToolExecutor(cache=cache).execute("image_load", {"path": image_file})
    assert image_file in cache
    assert len(cache) == 1


def test_alpha_survives_the_cache(executor, tmp_path):
    path = tmp_path / "translucent.png"
    Image.new('RGBA', (20, 20), (0, 0, 255, 100)).save(path)

    executor.execute("image_load", {"path": str(path)})
    color = executor.execute("image_sample_color", {"path": str(path), "x": 5, "y": 5})
    assert color["rgba"] == {"r": 0, "g": 0, "b": 255, "a": 100}

    # Detectors and crops on the same cached image still work in RGB
    assert executor.execute("image_detect_rectangles", {"path": str(path)})["count"] == 0
    assert executor.execute("image_crop", {"path": str(path), "x1": 0, "y1": 0, "x2": 10, "y2": 10})["width"] == 10


def test_integral_float_arguments_are_accepted(executor, image_file):
    result = executor.execute("image_detect_circles", {"path": image_file, "min_radius": 5.0, "max_radius": 8.0})
    assert result["count"] == len(result["circles"])

    grid = executor.execute("image_grid_overlay", {"path": image_file, "grid_spacing": 40.0})
    assert grid["grid_spacing"] == 40

    assert len(executor.execute("image_dominant_colors", {"path": image_file, "count": 2.0})["colors"]) == 2


@pytest.mark.parametrize("name,args", [
    ("image_detect_circles", {"min_radius": 5.5}),
    ("image_detect_circles", {"max_radius": "20"}),
    ("image_detect_lines", {"min_length": True}),
    ("image_dominant_colors", {"count": 1.5}),
])
def test_non_integer_arguments_rejected(executor, image_file, name, args):
    with pytest.raises(InvalidParameterError):
        executor.execute(name, {"path": image_file, **args})


@pytest.mark.parametrize("name,args", [
    ("image_detect_lines", {"detect_arrows": "false"}),
    ("image_detect_lines", {"detect_arrows": 1}),
    ("image_grid_overlay", {"show_coordinates": "no"}),
])
def test_flags_must_be_booleans(executor, image_file, name, args):
    with pytest.raises(InvalidParameterError):
        executor.execute(name, {"path": image_file, **args})


def test_line_tool_describes_duplicate_suppression():
    description = next(
        tool["function"]["description"] for tool in TOOL_DEFINITIONS
        if tool["function"]["name"] == "image_detect_lines"
    )
    assert "Near-duplicate" in description
    assert "at most 50" in description
