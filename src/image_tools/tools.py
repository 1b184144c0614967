"""
Tool definitions and dispatch.

TOOL_DEFINITIONS follows the function-calling schema format so the same list
can be handed to an LLM client or served over the protocol server.
ToolExecutor maps a tool name plus JSON arguments onto the library functions,
filling omitted optional arguments from ImageToolsConfig.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from PIL import Image

from .cache import ImageCache
from .color import dominant_colors, sample_color, sample_colors_multi
from .config import ImageToolsConfig
from .debugging import edge_detect, get_dimensions, get_image_info
from .detection import detect_circles, detect_lines, detect_rectangles, detect_text_regions
from .exceptions import InvalidParameterError, UnknownToolError
from .measure import check_alignment, compare_regions, measure_distance
from .spatial import QUADRANT_NAMES, crop_quadrant, crop_region, grid_overlay
from .utils import as_flag, as_int, image_payload

logger = logging.getLogger(__name__)

_PATH = {"type": "string", "description": "Path to the image file"}

_REGION = {
    "type": "object",
    "description": "Optional region {x1, y1, x2, y2} to restrict the analysis",
    "properties": {
        "x1": {"type": "integer"},
        "y1": {"type": "integer"},
        "x2": {"type": "integer"},
        "y2": {"type": "integer"},
    },
    "required": ["x1", "y1", "x2", "y2"],
}

_POINT = {
    "type": "object",
    "properties": {
        "x": {"type": "integer"},
        "y": {"type": "integer"},
        "label": {"type": "string", "description": "Optional label for the point"},
    },
    "required": ["x", "y"],
}


def _tool(name: str, description: str, properties: Dict[str, Any], required: List[str]) -> Dict[str, Any]:
    return {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "parameters": {
                "type": "object",
                "properties": properties,
                "required": required,
            },
        },
    }


def _coords(description: str) -> Dict[str, Any]:
    return {
        "x1": {"type": "integer", "description": f"{description} start X"},
        "y1": {"type": "integer", "description": f"{description} start Y"},
        "x2": {"type": "integer", "description": f"{description} end X"},
        "y2": {"type": "integer", "description": f"{description} end Y"},
    }


TOOL_DEFINITIONS = [
    _tool(
        "image_load",
        "Load an image and return its metadata (dimensions, format, color depth, alpha, file size). "
        "Use this FIRST; later tools on the same path reuse the loaded pixels.",
        {"path": _PATH},
        ["path"],
    ),
    _tool(
        "image_dimensions",
        "Return just the width and height of an image.",
        {"path": _PATH},
        ["path"],
    ),
    _tool(
        "image_crop",
        "Crop a rectangular region by pixel coordinates, optionally scaling it up to inspect detail. "
        "Returns the cropped image as base64 PNG.",
        {
            "path": _PATH,
            **_coords("Crop"),
            "scale": {"type": "number", "description": "Resize factor after cropping (default 1.0)"},
        },
        ["path", "x1", "y1", "x2", "y2"],
    ),
    _tool(
        "image_crop_quadrant",
        "Crop a named region (quadrant, half or center) without computing coordinates.",
        {
            "path": _PATH,
            "region": {"type": "string", "enum": QUADRANT_NAMES, "description": "Named region to crop"},
            "scale": {"type": "number", "description": "Resize factor after cropping (default 1.0)"},
        },
        ["path", "region"],
    ),
    _tool(
        "image_sample_color",
        "Get the exact color at a pixel as hex, RGB, RGBA and HSL.",
        {
            "path": _PATH,
            "x": {"type": "integer", "description": "X coordinate"},
            "y": {"type": "integer", "description": "Y coordinate"},
        },
        ["path", "x", "y"],
    ),
    _tool(
        "image_sample_colors_multi",
        "Sample colors at several labelled points in one call.",
        {
            "path": _PATH,
            "points": {"type": "array", "items": _POINT, "description": "Points to sample"},
        },
        ["path", "points"],
    ),
    _tool(
        "image_dominant_colors",
        "List the most common colors (quantized) with their share of the image or region.",
        {
            "path": _PATH,
            "count": {"type": "integer", "description": "Number of colors to return (default 5)"},
            "region": _REGION,
        },
        ["path"],
    ),
    _tool(
        "image_measure_distance",
        "Measure the distance and angle between two points, in pixels and as a share of the image size.",
        {"path": _PATH, **_coords("Measurement")},
        ["path", "x1", "y1", "x2", "y2"],
    ),
    _tool(
        "image_grid_overlay",
        "Overlay a coordinate grid with x,y labels to read off pixel positions.",
        {
            "path": _PATH,
            "grid_spacing": {"type": "integer", "description": "Pixels between grid lines (default 50)"},
            "show_coordinates": {"type": "boolean", "description": "Label intersections (default true)"},
            "grid_color": {"type": "string", "description": "Grid color as #RRGGBB or #RRGGBBAA"},
        },
        ["path"],
    ),
    _tool(
        "image_detect_text_regions",
        "Find areas that look like lines of text (edge density and horizontal strokes). Does not read text.",
        {
            "path": _PATH,
            "min_confidence": {"type": "number", "description": "Minimum confidence 0-1 (default 0.5)"},
            "region": _REGION,
        },
        ["path"],
    ),
    _tool(
        "image_detect_rectangles",
        "Detect axis-aligned rectangles (boxes, buttons, panels) with fill and border colors.",
        {
            "path": _PATH,
            "min_area": {"type": "integer", "description": "Minimum area in pixels (default 100)"},
            "tolerance": {"type": "number", "description": "Minimum rectangularity 0-1 (default 0.9)"},
            "region": _REGION,
        },
        ["path"],
    ),
    _tool(
        "image_detect_lines",
        "Detect straight line segments with length, angle, color, thickness and optional arrowheads. "
        "Strongest lines first, at most 50. Near-duplicate segments that retrace an already reported "
        "line (within 5 degrees, endpoints within 3 px) are dropped.",
        {
            "path": _PATH,
            "min_length": {"type": "integer", "description": "Minimum line length in pixels (default 20)"},
            "detect_arrows": {"type": "boolean", "description": "Check endpoints for arrowheads (default false)"},
            "region": _REGION,
        },
        ["path"],
    ),
    _tool(
        "image_detect_circles",
        "Detect circles with center, radius and fill color. Keep the radius range tight on large images.",
        {
            "path": _PATH,
            "min_radius": {"type": "integer", "description": "Minimum radius (default 5)"},
            "max_radius": {"type": "integer", "description": "Maximum radius (default 500)"},
            "region": _REGION,
        },
        ["path"],
    ),
    _tool(
        "image_edge_detect",
        "Return a Canny edge image (white edges on black) to see shapes and boundaries.",
        {
            "path": _PATH,
            "threshold_low": {"type": "integer", "description": "Lower threshold (default 50)"},
            "threshold_high": {"type": "integer", "description": "Upper threshold (default 150)"},
        },
        ["path"],
    ),
    _tool(
        "image_check_alignment",
        "Check whether points are horizontally or vertically aligned within a tolerance.",
        {
            "points": {"type": "array", "items": _POINT, "description": "Points to check"},
            "tolerance": {"type": "number", "description": "Max standard deviation in pixels (default 5)"},
        },
        ["points"],
    ),
    _tool(
        "image_compare_regions",
        "Compare two regions of the image pixel by pixel and report their similarity.",
        {"path": _PATH, "region1": _REGION, "region2": _REGION},
        ["path", "region1", "region2"],
    ),
]

TOOL_NAMES = [tool["function"]["name"] for tool in TOOL_DEFINITIONS]


class ToolExecutor:
    """
    Execute tools by name against cached images.

    Example:
        >>> executor = ToolExecutor()
        >>> executor.execute("image_detect_lines", {"path": "diagram.png", "detect_arrows": True})
        {'lines': [...], 'count': 3}
    """

    def __init__(self, config: Optional[ImageToolsConfig] = None, cache: Optional[ImageCache] = None):
        self.config = config or ImageToolsConfig()
        self.cache = cache if cache is not None else ImageCache(self.config.cache_max_images)

    @staticmethod
    def _path(args: Dict[str, Any]) -> str:
        path = args.get("path")
        if not path or not isinstance(path, str):
            raise InvalidParameterError("path is required", parameter="path", value=path)
        return path

    def _image(self, args: Dict[str, Any]) -> Image.Image:
        return self.cache.load(self._path(args))

    @staticmethod
    def _required(args: Dict[str, Any], *names: str) -> List[Any]:
        missing = [name for name in names if name not in args]
        if missing:
            raise InvalidParameterError(f"Missing required argument(s): {', '.join(missing)}")
        return [args[name] for name in names]

    def _handlers(self, args: Dict[str, Any]) -> Dict[str, Callable[[], Dict[str, Any]]]:
        cfg = self.config
        get = args.get

        def crop():
            x1, y1, x2, y2 = self._required(args, "x1", "y1", "x2", "y2")
            return image_payload(crop_region(self._image(args), x1, y1, x2, y2, scale=get("scale", 1.0)))

        def crop_named():
            (region,) = self._required(args, "region")
            return image_payload(crop_quadrant(self._image(args), region, scale=get("scale", 1.0)))

        def grid():
            img, meta = grid_overlay(
                self._image(args),
                grid_spacing=as_int(get("grid_spacing", cfg.grid_spacing), "grid_spacing"),
                show_coordinates=as_flag(get("show_coordinates", True), "show_coordinates"),
                grid_color=get("grid_color", cfg.grid_color),
            )
            return image_payload(img, grid_spacing=meta["grid_spacing"])

        return {
            "image_load": lambda: get_image_info(self._path(args), self.cache),
            "image_dimensions": lambda: get_dimensions(self._image(args)),
            "image_crop": crop,
            "image_crop_quadrant": crop_named,
            "image_sample_color": lambda: sample_color(self._image(args), *self._required(args, "x", "y")),
            "image_sample_colors_multi": lambda: sample_colors_multi(
                self._image(args), *self._required(args, "points")),
            "image_dominant_colors": lambda: dominant_colors(
                self._image(args),
                count=as_int(get("count", cfg.dominant_color_count), "count"),
                region=get("region"),
            ),
            "image_measure_distance": lambda: measure_distance(
                self._image(args), *self._required(args, "x1", "y1", "x2", "y2")),
            "image_grid_overlay": grid,
            "image_detect_text_regions": lambda: detect_text_regions(
                self._image(args),
                min_confidence=get("min_confidence", cfg.min_confidence),
                region=get("region"),
            ).model_dump(),
            "image_detect_rectangles": lambda: detect_rectangles(
                self._image(args),
                min_area=get("min_area", cfg.min_area),
                tolerance=get("tolerance", cfg.tolerance),
                region=get("region"),
            ).model_dump(),
            "image_detect_lines": lambda: detect_lines(
                self._image(args),
                min_length=get("min_length", cfg.min_length),
                detect_arrows=get("detect_arrows", cfg.detect_arrows),
                region=get("region"),
            ).model_dump(),
            "image_detect_circles": lambda: detect_circles(
                self._image(args),
                min_radius=get("min_radius", cfg.min_radius),
                max_radius=get("max_radius", cfg.max_radius),
                region=get("region"),
            ).model_dump(),
            "image_edge_detect": lambda: image_payload(edge_detect(
                self._image(args),
                threshold_low=as_int(get("threshold_low", cfg.canny_low), "threshold_low"),
                threshold_high=as_int(get("threshold_high", cfg.canny_high), "threshold_high"),
            )),
            "image_check_alignment": lambda: check_alignment(
                *self._required(args, "points"), tolerance=get("tolerance", cfg.alignment_tolerance)),
            "image_compare_regions": lambda: compare_regions(
                self._image(args), *self._required(args, "region1", "region2")),
        }

    def execute(self, tool_name: str, args: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Run one tool and return its JSON-compatible result.

        Raises:
            UnknownToolError: If no tool has this name
            InvalidParameterError: If arguments are missing or out of range
            FileNotFoundError: If the image path does not exist
        """
        args = args or {}
        handlers = self._handlers(args)
        if tool_name not in handlers:
            raise UnknownToolError(tool_name)

        logger.debug("Executing %s with %s", tool_name, sorted(args))
        return handlers[tool_name]()
