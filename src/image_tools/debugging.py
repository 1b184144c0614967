"""Image metadata and edge visualization tools."""

import logging
from pathlib import Path
from typing import Union, Dict, Any, Optional

import cv2
import numpy as np
from PIL import Image

from .cache import ImageCache
from .exceptions import InvalidParameterError, ImageLoadError
from .utils import assess_image_size, has_alpha, load_image

logger = logging.getLogger(__name__)

_FORMATS_BY_EXTENSION = {
    ".png": "png",
    ".jpg": "jpeg",
    ".jpeg": "jpeg",
    ".gif": "gif",
    ".webp": "webp",
    ".bmp": "bmp",
}

_SIXTEEN_BIT_MODES = {"I;16", "I;16B", "I;16L", "I;16N", "I"}


def get_image_info(path: str, cache: Optional[ImageCache] = None) -> Dict[str, Any]:
    """
    Load an image and report its basic properties.

    The decoded pixels go into ``cache`` (when given) so later tool calls on
    the same path skip decoding.

    Args:
        path: Image file path
        cache: Optional shared ImageCache

    Returns:
        Dictionary with:
        - width, height: Image dimensions in pixels
        - format: png, jpeg, gif, webp, bmp or unknown
        - color_depth: "8-bit" or "16-bit"
        - has_alpha: Whether the file carries an alpha channel
        - file_size_bytes: Size on disk
        - aspect_ratio: Width/height ratio
        - size_assessment: "TINY", "SMALL", "MEDIUM", "LARGE", or "XLARGE"

    Example:
        >>> info = get_image_info("screenshot.png")
        >>> info["format"], info["has_alpha"]
        ('png', True)
    """
    img = cache.load(path) if cache is not None else load_image(path)
    width, height = img.size

    # Mode and format come from the file header, the decoded copy is RGB
    try:
        with Image.open(path) as header:
            mode = header.mode
            alpha = has_alpha(header)
    except OSError as e:
        raise ImageLoadError(str(e), path=path) from e

    extension = Path(path).suffix.lower()

    return {
        "width": width,
        "height": height,
        "format": _FORMATS_BY_EXTENSION.get(extension, "unknown"),
        "color_depth": "16-bit" if mode in _SIXTEEN_BIT_MODES else "8-bit",
        "has_alpha": alpha,
        "file_size_bytes": Path(path).stat().st_size,
        "aspect_ratio": round(width / height, 3) if height > 0 else 0,
        "size_assessment": assess_image_size(width, height),
    }


def get_dimensions(image_input: Union[str, Image.Image]) -> Dict[str, int]:
    """Width and height only."""
    width, height = load_image(image_input).size
    return {"width": width, "height": height}


def edge_detect(
    image_input: Union[str, Image.Image],
    threshold_low: int = 50,
    threshold_high: int = 150
) -> Image.Image:
    """
    Canny edge image for visual inspection of shapes and boundaries.

    Applies a 5x5 Gaussian blur, then Canny with hysteresis thresholds.

    Args:
        image_input: File path or PIL Image
        threshold_low: Lower hysteresis threshold (0-255)
        threshold_high: Upper hysteresis threshold (0-255)

    Returns:
        Grayscale PIL Image; edges are white on black

    Example:
        >>> edges = edge_detect("diagram.png", 30, 100)
        >>> edges.save("diagram_edges.png")
    """
    if not 0 <= threshold_low <= threshold_high <= 255:
        raise InvalidParameterError(
            f"Thresholds must satisfy 0 <= low <= high <= 255, got {threshold_low}/{threshold_high}"
        )

    img = load_image(image_input)
    gray = cv2.cvtColor(np.array(img), cv2.COLOR_RGB2GRAY)
    blurred = cv2.GaussianBlur(gray, (5, 5), 0)
    edges = cv2.Canny(blurred, threshold_low, threshold_high)

    logger.debug("edge_detect: %d edge pixels (low=%d, high=%d)",
                 int(np.count_nonzero(edges)), threshold_low, threshold_high)
    return Image.fromarray(edges)
