"""
Image Tools - Shape Detection and Image Inspection Toolkit

Gives an LLM agent precise, pixel-level facts about an image that it cannot
reliably read off by eye: exact colors, distances, and the positions of
rectangles, lines, circles and text-like areas.

Tool Categories:
    1. DETECTION SUITE - Shapes & Features
       - detect_rectangles(): Axis-aligned boxes with fill/border colors
       - detect_lines(): Hough line segments with thickness and arrowheads
       - detect_circles(): Hough circles with duplicate filtering
       - detect_text_regions(): Text-like areas from edge texture

    2. SPATIAL SUITE - Navigation & Focus
       - crop_region(): Precise cropping with optional scaling
       - crop_quadrant(): Named quadrants, halves and center
       - grid_overlay(): Pixel-coordinate grid with labels

    3. COLOR & MEASUREMENT SUITE
       - sample_color() / sample_colors_multi(): Exact pixel colors
       - dominant_colors(): Most common quantized colors
       - measure_distance(), check_alignment(), compare_regions()

    4. DEBUGGING SUITE - Metadata & Visualization
       - get_image_info(), get_dimensions(): File and size metadata
       - edge_detect(): Canny edge image

Example Usage:
    >>> from image_tools import detect_lines, detect_rectangles
    >>> result = detect_lines("diagram.png", min_length=30, detect_arrows=True)
    >>> for line in result.lines:
    ...     print(line.start, line.end, line.has_arrow_end)

Tool dispatch by name (for LLM function calling or the stdio server) lives in
image_tools.tools (TOOL_DEFINITIONS, ToolExecutor).
"""

__version__ = "0.1.0"

from .exceptions import ImageToolsError, InvalidParameterError, ImageLoadError, UnknownToolError
from .schemas import (
    Point, Bounds, Rectangle, Line, Circle, TextRegion,
    RectanglesResult, LinesResult, CirclesResult, TextRegionsResult,
)
from .config import ImageToolsConfig
from .cache import ImageCache
from .utils import load_image

# Detection suite
from .detection import (
    build_edges,
    find_contours,
    detect_rectangles,
    detect_lines,
    detect_circles,
    detect_text_regions,
)

# Spatial suite
from .spatial import crop_region, crop_quadrant, grid_overlay

# Color & measurement suite
from .color import sample_color, sample_colors_multi, dominant_colors
from .measure import measure_distance, check_alignment, compare_regions

# Debugging suite
from .debugging import get_image_info, get_dimensions, edge_detect

__all__ = [
    # Errors
    'ImageToolsError',
    'InvalidParameterError',
    'ImageLoadError',
    'UnknownToolError',
    # Models
    'Point',
    'Bounds',
    'Rectangle',
    'Line',
    'Circle',
    'TextRegion',
    'RectanglesResult',
    'LinesResult',
    'CirclesResult',
    'TextRegionsResult',
    # Runtime
    'ImageToolsConfig',
    'ImageCache',
    'load_image',
    # Detection
    'build_edges',
    'find_contours',
    'detect_rectangles',
    'detect_lines',
    'detect_circles',
    'detect_text_regions',
    # Spatial
    'crop_region',
    'crop_quadrant',
    'grid_overlay',
    # Color & measurement
    'sample_color',
    'sample_colors_multi',
    'dominant_colors',
    'measure_distance',
    'check_alignment',
    'compare_regions',
    # Debugging
    'get_image_info',
    'get_dimensions',
    'edge_detect',
]
