"""Shared utilities for image tools."""

from typing import Union, Tuple, Dict, Any, Optional
from pathlib import Path
import base64
import io

from PIL import Image, UnidentifiedImageError
import numpy as np

from .exceptions import ImageLoadError, InvalidParameterError


def has_alpha(img: Image.Image) -> bool:
    """Whether an image carries transparency (alpha band or palette transparency)."""
    return 'A' in img.getbands() or (img.mode == 'P' and 'transparency' in img.info)


def load_image(image_input: Union[str, Image.Image], keep_alpha: bool = False) -> Image.Image:
    """
    Load an image from file path or return PIL Image object.

    Args:
        image_input: File path (str) or PIL Image object
        keep_alpha: Return RGBA instead of RGB when the source has transparency

    Returns:
        PIL Image object in RGB mode (or RGBA with ``keep_alpha``)

    Raises:
        FileNotFoundError: If file path doesn't exist
        ImageLoadError: If file is not a valid image
    """
    if isinstance(image_input, Image.Image):
        return _normalize_mode(image_input, keep_alpha)

    if not isinstance(image_input, (str, Path)):
        raise InvalidParameterError(
            f"Expected str or PIL Image, got {type(image_input).__name__}",
            parameter="image_input",
        )

    path = Path(image_input)
    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {image_input}")

    try:
        img = Image.open(path)
        # Force load to ensure validity
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ImageLoadError(str(e), path=str(image_input)) from e
    return _normalize_mode(img, keep_alpha)


def _normalize_mode(img: Image.Image, keep_alpha: bool) -> Image.Image:
    target = 'RGBA' if keep_alpha and has_alpha(img) else 'RGB'
    if img.mode != target:
        return img.convert(target)
    return img


def to_pixel_array(img: Image.Image) -> np.ndarray:
    """Return an (H, W, 3) uint8 array view of an RGB image."""
    return np.asarray(img.convert('RGB') if img.mode != 'RGB' else img, dtype=np.uint8)


def hex_color(rgb) -> str:
    """Format an (r, g, b) triple as #RRGGBB."""
    r, g, b = (int(c) for c in rgb[:3])
    return f"#{r:02X}{g:02X}{b:02X}"


def sample_hex(pixels: np.ndarray, x: int, y: int) -> str:
    """Hex color of the pixel at (x, y) in an (H, W, 3) array."""
    return hex_color(pixels[y, x])


def validate_coordinates(
    img: Image.Image,
    x1: int,
    y1: int,
    x2: int,
    y2: int
) -> Tuple[int, int, int, int]:
    """
    Validate crop coordinates against image bounds.

    Args:
        img: PIL Image
        x1, y1: Top-left corner
        x2, y2: Bottom-right corner (exclusive)

    Returns:
        Tuple of coordinates (x1, y1, x2, y2)

    Raises:
        InvalidParameterError: If coordinates are invalid
    """
    width, height = img.size

    if x1 < 0 or y1 < 0 or x2 > width or y2 > height:
        raise InvalidParameterError(
            f"Coordinates ({x1}, {y1}, {x2}, {y2}) exceed image bounds ({width}, {height})"
        )

    if x1 >= x2 or y1 >= y2:
        raise InvalidParameterError(
            f"Invalid coordinates: top-left ({x1}, {y1}) must be before bottom-right ({x2}, {y2})"
        )

    return int(x1), int(y1), int(x2), int(y2)


def validate_point(img: Image.Image, x: int, y: int) -> Tuple[int, int]:
    """Ensure (x, y) addresses a pixel inside the image."""
    width, height = img.size
    if x < 0 or y < 0 or x >= width or y >= height:
        raise InvalidParameterError(
            f"Point ({x}, {y}) is outside image bounds ({width}x{height})"
        )
    return int(x), int(y)


def as_int(value: Any, parameter: str) -> int:
    """
    Accept an int or an integral float (JSON often sends 5.0 for 5).

    Raises:
        InvalidParameterError: For booleans, fractions and non-numbers
    """
    if isinstance(value, bool) or not isinstance(value, (int, float, np.integer, np.floating)):
        raise InvalidParameterError("must be an integer", parameter=parameter, value=value)
    if isinstance(value, (float, np.floating)) and not float(value).is_integer():
        raise InvalidParameterError("must be an integer", parameter=parameter, value=value)
    return int(value)


def as_flag(value: Any, parameter: str) -> bool:
    """Accept only real booleans; strings such as "false" are rejected."""
    if not isinstance(value, (bool, np.bool_)):
        raise InvalidParameterError("must be true or false", parameter=parameter, value=value)
    return bool(value)


def crop_to_region(
    img: Image.Image,
    region: Optional[Dict[str, int]]
) -> Tuple[Image.Image, int, int]:
    """
    Crop an image to an optional {x1, y1, x2, y2} region.

    Returns:
        Tuple of (cropped image, x offset, y offset). Without a region the
        image is returned unchanged with a zero offset.
    """
    if region is None:
        return img, 0, 0
    try:
        x1, y1, x2, y2 = (region[k] for k in ("x1", "y1", "x2", "y2"))
    except (KeyError, TypeError) as e:
        raise InvalidParameterError(
            "Region must provide x1, y1, x2, y2", parameter="region", value=region
        ) from e
    x1, y1, x2, y2 = validate_coordinates(img, x1, y1, x2, y2)
    return img.crop((x1, y1, x2, y2)), x1, y1


def assess_image_size(width: int, height: int) -> str:
    """Coarse size bucket used in image information reports."""
    total_pixels = width * height
    if total_pixels < 100_000:
        return "TINY"
    elif total_pixels < 500_000:
        return "SMALL"
    elif total_pixels < 2_000_000:
        return "MEDIUM"
    elif total_pixels < 8_000_000:
        return "LARGE"
    return "XLARGE"


def encode_image_to_base64(image: Image.Image) -> Tuple[str, str]:
    """
    Encode PIL Image to base64 PNG.

    Args:
        image: PIL Image object

    Returns:
        Tuple of (base64_string, mime_type)
    """
    buffer = io.BytesIO()
    image.save(buffer, format='PNG')
    return base64.b64encode(buffer.getvalue()).decode('utf-8'), "image/png"


def image_payload(image: Image.Image, **extra: Any) -> Dict[str, Any]:
    """JSON-ready description of an image produced by a tool."""
    encoded, mime_type = encode_image_to_base64(image)
    payload = {
        "width": image.size[0],
        "height": image.size[1],
        "image_base64": encoded,
        "mime_type": mime_type,
    }
    payload.update(extra)
    return payload


def load_pixels(
    image_input: Union[str, Image.Image],
    region: Optional[Dict[str, int]] = None
) -> Tuple[np.ndarray, int, int]:
    """
    Load an image (optionally cropped to a region) as an RGB pixel array.

    Returns:
        Tuple of ((H, W, 3) uint8 array, x offset, y offset). Add the offsets
        to any coordinate found in the array to map it back to the source image.
    """
    img = load_image(image_input)
    img, offset_x, offset_y = crop_to_region(img, region)
    return to_pixel_array(img), offset_x, offset_y
