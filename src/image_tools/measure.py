"""Measurement tools: distances, alignment checks and region comparison."""

import math
from typing import Union, Dict, Any, List

import numpy as np
from PIL import Image

from .exceptions import InvalidParameterError
from .utils import crop_to_region, load_image, to_pixel_array

# Mean per-channel difference above which two pixels count as different
PIXEL_DIFF_THRESHOLD = 10


def measure_distance(
    image_input: Union[str, Image.Image],
    x1: int,
    y1: int,
    x2: int,
    y2: int
) -> Dict[str, Any]:
    """
    Distance and angle between two points, also relative to the image size.

    Example:
        >>> measure_distance("ui.png", 0, 0, 30, 40)["distance_pixels"]
        50.0
    """
    img = load_image(image_input)
    width, height = img.size

    delta_x = int(x2 - x1)
    delta_y = int(y2 - y1)
    distance = math.hypot(delta_x, delta_y)
    angle = math.degrees(math.atan2(delta_y, delta_x))

    return {
        "distance_pixels": round(distance, 2),
        "delta_x": delta_x,
        "delta_y": delta_y,
        "angle_degrees": round(angle, 1),
        "distance_percent_width": round(distance / width * 100, 1),
        "distance_percent_height": round(distance / height * 100, 1),
    }


def check_alignment(points: List[Dict[str, int]], tolerance: float = 5) -> Dict[str, Any]:
    """
    Check whether points share a row or a column.

    Uses the population standard deviation of y (horizontal alignment) and
    x (vertical alignment). Fewer than two points are trivially aligned.

    Args:
        points: List of {"x", "y"}
        tolerance: Maximum standard deviation in pixels

    Returns:
        Dictionary with alignment flags, deviations and averages
    """
    if tolerance < 0:
        raise InvalidParameterError("must be >= 0", parameter="tolerance", value=tolerance)

    if len(points) < 2:
        return {
            "horizontally_aligned": True,
            "vertically_aligned": True,
            "horizontal_variance": 0.0,
            "vertical_variance": 0.0,
            "average_y": 0.0,
            "average_x": 0.0,
        }

    try:
        xs = np.array([p["x"] for p in points], dtype=np.float64)
        ys = np.array([p["y"] for p in points], dtype=np.float64)
    except (KeyError, TypeError) as e:
        raise InvalidParameterError("Each point needs x and y", parameter="points") from e

    std_x = float(xs.std())
    std_y = float(ys.std())
    return {
        "horizontally_aligned": std_y <= tolerance,
        "vertically_aligned": std_x <= tolerance,
        "horizontal_variance": round(std_y, 2),
        "vertical_variance": round(std_x, 2),
        "average_y": round(float(ys.mean()), 2),
        "average_x": round(float(xs.mean()), 2),
    }


def compare_regions(
    image_input: Union[str, Image.Image],
    region1: Dict[str, int],
    region2: Dict[str, int]
) -> Dict[str, Any]:
    """
    Pixel-by-pixel comparison of two regions of the same image.

    Regions of different sizes are compared over their shared top-left
    anchored extent.

    Args:
        image_input: File path or PIL Image
        region1, region2: {x1, y1, x2, y2} boxes

    Returns:
        Dictionary with similarity_score (0-1), pixels_different, total_pixels,
        same_size, region sizes and average_color_diff

    Example:
        >>> result = compare_regions("icons.png", {"x1": 0, "y1": 0, "x2": 32, "y2": 32},
        ...                          {"x1": 40, "y1": 0, "x2": 72, "y2": 32})
        >>> result["similarity_score"]
        1.0
    """
    img = load_image(image_input)
    crop1, _, _ = crop_to_region(img, region1)
    crop2, _, _ = crop_to_region(img, region2)

    w1, h1 = crop1.size
    w2, h2 = crop2.size
    min_w, min_h = min(w1, w2), min(h1, h2)

    a = to_pixel_array(crop1)[:min_h, :min_w].astype(np.int16)
    b = to_pixel_array(crop2)[:min_h, :min_w].astype(np.int16)
    diff = np.abs(a - b).sum(axis=2) / 3.0

    total_pixels = min_w * min_h
    pixels_different = int(np.count_nonzero(diff > PIXEL_DIFF_THRESHOLD))

    return {
        "similarity_score": round(1.0 - pixels_different / total_pixels, 3),
        "pixels_different": pixels_different,
        "total_pixels": total_pixels,
        "same_size": w1 == w2 and h1 == h2,
        "region1_size": {"x": w1, "y": h1},
        "region2_size": {"x": w2, "y": h2},
        "average_color_diff": round(float(diff.mean()), 2),
    }
