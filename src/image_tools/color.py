"""Color sampling and dominant color analysis."""

import colorsys
from typing import Union, Dict, Any, List, Optional

import numpy as np
from PIL import Image

from .exceptions import InvalidParameterError
from .utils import crop_to_region, hex_color, load_image, to_pixel_array, validate_point

# Channel bucket width used when grouping similar colors
QUANTIZE_STEP = 16


def rgb_to_hsl(r: int, g: int, b: int) -> Dict[str, int]:
    """HSL as whole degrees (0-359) and whole percentages."""
    h, l, s = colorsys.rgb_to_hls(r / 255.0, g / 255.0, b / 255.0)
    return {"h": round(h * 360) % 360, "s": round(s * 100), "l": round(l * 100)}


def describe_color(r: int, g: int, b: int, a: int = 255) -> Dict[str, Any]:
    r, g, b, a = int(r), int(g), int(b), int(a)
    return {
        "hex": hex_color((r, g, b)),
        "rgb": {"r": r, "g": g, "b": b},
        "rgba": {"r": r, "g": g, "b": b, "a": a},
        "hsl": rgb_to_hsl(r, g, b),
    }


def sample_color(
    image_input: Union[str, Image.Image],
    x: int,
    y: int
) -> Dict[str, Any]:
    """
    Exact color of one pixel in hex, RGB, RGBA and HSL.

    Args:
        image_input: File path or PIL Image
        x, y: Pixel coordinate

    Returns:
        Dictionary with hex, rgb, rgba and hsl entries

    Example:
        >>> sample_color("logo.png", 10, 10)["hex"]
        '#1A73E8'
    """
    img = load_image(image_input, keep_alpha=True)
    x, y = validate_point(img, x, y)
    # Opaque sources are loaded as RGB and report alpha 255
    return describe_color(*img.getpixel((x, y)))


def sample_colors_multi(
    image_input: Union[str, Image.Image],
    points: List[Dict[str, Any]]
) -> Dict[str, Any]:
    """
    Sample several labelled points in one call.

    Args:
        image_input: File path or PIL Image
        points: List of {"x", "y", optional "label"}

    Returns:
        {"samples": [{"label"?, "x", "y", "color"}]}; the first point outside
        the image fails the whole call
    """
    img = load_image(image_input, keep_alpha=True)
    samples = []
    for point in points:
        try:
            x, y = int(point["x"]), int(point["y"])
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidParameterError(
                "Each point needs integer x and y", parameter="points", value=point
            ) from e
        entry = {"x": x, "y": y, "color": sample_color(img, x, y)}
        if point.get("label"):
            entry = {"label": str(point["label"]), **entry}
        samples.append(entry)
    return {"samples": samples}


def dominant_colors(
    image_input: Union[str, Image.Image],
    count: int = 5,
    region: Optional[Dict[str, int]] = None
) -> Dict[str, Any]:
    """
    Most common colors after quantizing each channel to steps of 16.

    Args:
        image_input: File path or PIL Image
        count: Number of colors to return
        region: Optional {x1, y1, x2, y2} to analyze instead of the whole image

    Returns:
        {"colors": [{"hex", "percentage", "rgb"}]} sorted by percentage
    """
    if count < 1:
        raise InvalidParameterError("must be >= 1", parameter="count", value=count)

    img, _, _ = crop_to_region(load_image(image_input), region)
    pixels = to_pixel_array(img).reshape(-1, 3)
    quantized = (pixels // QUANTIZE_STEP) * QUANTIZE_STEP

    colors, counts = np.unique(quantized, axis=0, return_counts=True)
    order = np.argsort(-counts, kind='stable')[:count]
    total = len(pixels)

    result = []
    for i in order:
        r, g, b = (int(c) for c in colors[i])
        result.append({
            "hex": hex_color((r, g, b)),
            "percentage": float(counts[i]) / total * 100,
            "rgb": {"r": r, "g": g, "b": b},
        })
    return {"colors": result}
