"""Spatial tools for navigation and focus - cropping and grid overlays."""

from typing import Union, Tuple, Dict, Any
from PIL import Image, ImageColor, ImageDraw

from .exceptions import InvalidParameterError
from .utils import load_image, validate_coordinates

DEFAULT_GRID_COLOR = (255, 0, 0, 128)

QUADRANT_NAMES = [
    "top-left", "top-right", "bottom-left", "bottom-right",
    "top-half", "bottom-half", "left-half", "right-half", "center",
]


def get_quadrant_coordinates(img: Image.Image, region: str) -> Tuple[int, int, int, int]:
    """
    Pixel bounds of a named region.

    Args:
        img: PIL Image
        region: One of QUADRANT_NAMES; underscores are accepted for hyphens

    Returns:
        Tuple (x1, y1, x2, y2)
    """
    width, height = img.size
    mid_x, mid_y = width // 2, height // 2
    quarter_w, quarter_h = width // 4, height // 4

    regions = {
        "top-left": (0, 0, mid_x, mid_y),
        "top-right": (mid_x, 0, width, mid_y),
        "bottom-left": (0, mid_y, mid_x, height),
        "bottom-right": (mid_x, mid_y, width, height),
        "top-half": (0, 0, width, mid_y),
        "bottom-half": (0, mid_y, width, height),
        "left-half": (0, 0, mid_x, height),
        "right-half": (mid_x, 0, width, height),
        "center": (quarter_w, quarter_h, width - quarter_w, height - quarter_h),
    }

    key = region.strip().lower().replace("_", "-")
    if key not in regions:
        raise InvalidParameterError(
            f"Unknown region. Use one of: {', '.join(QUADRANT_NAMES)}",
            parameter="region",
            value=region,
        )
    return regions[key]


def crop_region(
    image_input: Union[str, Image.Image],
    x1: int,
    y1: int,
    x2: int,
    y2: int,
    scale: float = 1.0
) -> Image.Image:
    """
    Precise crop using pixel coordinates, optionally rescaled.

    Args:
        image_input: File path or PIL Image
        x1, y1: Top-left corner in pixels
        x2, y2: Bottom-right corner in pixels (exclusive)
        scale: Resize factor applied after cropping (Lanczos); 1.0 keeps size

    Returns:
        Cropped PIL Image

    Example:
        >>> img = crop_region("chart.png", 100, 50, 300, 150, scale=2.0)
        >>> img.size
        (400, 200)
    """
    img = load_image(image_input)
    x1, y1, x2, y2 = validate_coordinates(img, x1, y1, x2, y2)
    cropped = img.crop((x1, y1, x2, y2))

    if scale != 1.0 and scale > 0:
        new_size = (max(1, int(cropped.size[0] * scale)), max(1, int(cropped.size[1] * scale)))
        cropped = cropped.resize(new_size, Image.LANCZOS)
    return cropped


def crop_quadrant(
    image_input: Union[str, Image.Image],
    region: str,
    scale: float = 1.0
) -> Image.Image:
    """
    Crop a named region of the image - fast pre-cropping without coordinates.

    Args:
        image_input: File path or PIL Image
        region: "top-left", "top-right", "bottom-left", "bottom-right",
            "top-half", "bottom-half", "left-half", "right-half" or "center"
        scale: Resize factor applied after cropping

    Returns:
        Cropped PIL Image

    Example:
        >>> img = crop_quadrant("photo.jpg", "top-right")
        >>> # Returns top-right 25% of the image
    """
    img = load_image(image_input)
    x1, y1, x2, y2 = get_quadrant_coordinates(img, region)
    return crop_region(img, x1, y1, x2, y2, scale=scale)


def _parse_color(color: str) -> Tuple[int, int, int, int]:
    """Parse #RRGGBB or #RRGGBBAA; anything else falls back to translucent red."""
    try:
        rgba = ImageColor.getrgb(color)
    except (ValueError, AttributeError):
        return DEFAULT_GRID_COLOR
    if len(rgba) == 3:
        return (*rgba, 255)
    return rgba


def grid_overlay(
    image_input: Union[str, Image.Image],
    grid_spacing: int = 50,
    show_coordinates: bool = True,
    grid_color: str = "#FF000080"
) -> Tuple[Image.Image, Dict[str, Any]]:
    """
    Overlay a pixel-coordinate grid to make positions easy to read off.

    Lines are drawn every ``grid_spacing`` pixels; intersections are labelled
    with their "x,y" pixel coordinates.

    Args:
        image_input: File path or PIL Image
        grid_spacing: Pixels between grid lines
        show_coordinates: Draw "x,y" labels at intersections
        grid_color: #RRGGBB or #RRGGBBAA color of the grid lines

    Returns:
        Tuple of:
        - Annotated PIL Image with grid overlay
        - Metadata dict with grid spacing and line positions

    Example:
        >>> img, meta = grid_overlay("photo.jpg", grid_spacing=100)
        >>> meta["vertical_lines"][:3]
        [100, 200, 300]
    """
    if grid_spacing < 1:
        raise InvalidParameterError("must be >= 1", parameter="grid_spacing", value=grid_spacing)

    img = load_image(image_input).convert('RGBA')
    width, height = img.size

    overlay = Image.new('RGBA', img.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)
    line_color = _parse_color(grid_color)

    xs = list(range(grid_spacing, width, grid_spacing))
    ys = list(range(grid_spacing, height, grid_spacing))
    for x in xs:
        draw.line([(x, 0), (x, height - 1)], fill=line_color, width=1)
    for y in ys:
        draw.line([(0, y), (width - 1, y)], fill=line_color, width=1)

    if show_coordinates:
        for y in ys:
            for x in xs:
                label = f"{x},{y}"
                left, top, right, bottom = draw.textbbox((x + 2, y + 2), label)
                draw.rectangle([left - 1, top - 1, right, bottom], fill=(0, 0, 0, 180))
                draw.text((x + 2, y + 2), label, fill=(255, 255, 255, 255))

    result = Image.alpha_composite(img, overlay)
    metadata = {
        "grid_spacing": grid_spacing,
        "vertical_lines": xs,
        "horizontal_lines": ys,
        "show_coordinates": show_coordinates,
    }
    return result.convert('RGB'), metadata
