"""Rectangle and circle detection on the edge map."""

import logging
import math
from typing import Union, List, Dict, Optional

import cv2
import numpy as np
from PIL import Image

from ..exceptions import InvalidParameterError
from ..schemas import (
    Bounds, Circle, CirclesResult, Point, Rectangle, RectanglesResult
)
from ..utils import as_int, load_pixels, sample_hex
from .edges import build_edges, find_contours

logger = logging.getLogger(__name__)

# Candidate centers per edge pixel, spaced 10 degrees apart
CIRCLE_VOTE_ANGLES = 36

# A center needs at least this fraction of 2*r votes
CIRCLE_VOTE_RATIO = 0.6

# Side of the square window a circle center must dominate
CIRCLE_PEAK_WINDOW = 11


def rectangularity(point_count: int, width: int, height: int) -> float:
    """
    Perimeter-matching score in (-inf, 1].

    Compares the number of contour pixels with the perimeter of the bounding
    box. Circles and blobs can score well too; the score is a heuristic.
    """
    perimeter = 2 * (width + height)
    if perimeter == 0:
        return 0.0
    return 1.0 - abs(point_count - perimeter) / perimeter


def detect_rectangles(
    image_input: Union[str, Image.Image],
    min_area: int = 100,
    tolerance: float = 0.9,
    region: Optional[Dict[str, int]] = None
) -> RectanglesResult:
    """
    Find axis-aligned rectangles by scoring contour bounding boxes.

    Args:
        image_input: File path or PIL Image
        min_area: Minimum bounding-box area in pixels
        tolerance: Minimum rectangularity score in [0, 1]
        region: Optional {x1, y1, x2, y2} to restrict the search

    Returns:
        RectanglesResult sorted by area, largest first

    Example:
        >>> result = detect_rectangles("flowchart.png", min_area=500)
        >>> for rect in result.rectangles:
        ...     print(rect.bounds, rect.fill_color)
    """
    if min_area < 0:
        raise InvalidParameterError("must be >= 0", parameter="min_area", value=min_area)
    if not 0.0 <= tolerance <= 1.0:
        raise InvalidParameterError("must be within [0, 1]", parameter="tolerance", value=tolerance)

    pixels, offset_x, offset_y = load_pixels(image_input, region)
    edges = build_edges(pixels)

    rectangles = []
    for contour in find_contours(edges):
        if len(contour) < 4:
            continue

        min_x, min_y = (int(v) for v in contour.min(axis=0))
        max_x, max_y = (int(v) for v in contour.max(axis=0))
        width = max_x - min_x
        height = max_y - min_y
        area = width * height
        if area < min_area:
            continue

        score = rectangularity(len(contour), width, height)
        if score < tolerance:
            continue

        center_x = (min_x + max_x) // 2
        center_y = (min_y + max_y) // 2
        rectangles.append(Rectangle(
            bounds=Bounds(x1=min_x, y1=min_y, x2=max_x, y2=max_y).shifted(offset_x, offset_y),
            center=Point(x=center_x + offset_x, y=center_y + offset_y),
            width=width,
            height=height,
            area=area,
            fill_color=sample_hex(pixels, center_x, center_y),
            border_color=sample_hex(pixels, min_x, min_y),
            confidence=float(score),
        ))

    # sorted() is stable, equal areas keep contour order
    rectangles = sorted(rectangles, key=lambda r: r.area, reverse=True)
    logger.debug("detect_rectangles: %d rectangles (min_area=%d, tolerance=%.2f)",
                 len(rectangles), min_area, tolerance)
    return RectanglesResult(rectangles=rectangles, count=len(rectangles))


def _circle_offsets(radius: int):
    angles = np.deg2rad(np.arange(CIRCLE_VOTE_ANGLES) * (360 // CIRCLE_VOTE_ANGLES))
    dx = np.floor(radius * np.cos(angles) + 0.5).astype(np.int64)
    dy = np.floor(radius * np.sin(angles) + 0.5).astype(np.int64)
    return dx, dy


def _vote_circle_centers(xs: np.ndarray, ys: np.ndarray, radius: int,
                         width: int, height: int) -> np.ndarray:
    """Accumulate center votes for one radius into an (H, W) grid."""
    dx, dy = _circle_offsets(radius)
    cx = (xs[:, None] - dx[None, :]).ravel()
    cy = (ys[:, None] - dy[None, :]).ravel()
    inside = (cx >= 0) & (cx < width) & (cy >= 0) & (cy < height)
    flat = cy[inside] * width + cx[inside]
    return np.bincount(flat, minlength=width * height).reshape(height, width)


def filter_duplicate_circles(circles: List[Circle]) -> List[Circle]:
    """
    Drop circles whose center lies too close to an already kept circle.

    A candidate is a duplicate when a kept center is closer than the mean of
    the two radii. Earlier circles win, so the input order decides which
    member of a cluster survives.
    """
    kept: List[Circle] = []
    for circle in circles:
        duplicate = False
        for existing in kept:
            distance = math.hypot(circle.center.x - existing.center.x,
                                  circle.center.y - existing.center.y)
            if distance < (circle.radius + existing.radius) / 2:
                duplicate = True
                break
        if not duplicate:
            kept.append(circle)
    return kept


def detect_circles(
    image_input: Union[str, Image.Image],
    min_radius: int = 5,
    max_radius: int = 500,
    region: Optional[Dict[str, int]] = None
) -> CirclesResult:
    """
    Find circles with a per-radius Hough vote over candidate centers.

    Radii are swept from ``min_radius`` to ``max_radius`` inclusive. Runtime
    grows with the radius range times the image area, so keep the range tight.

    Args:
        image_input: File path or PIL Image
        min_radius: Smallest radius to test (>= 1)
        max_radius: Largest radius to test (>= min_radius)
        region: Optional {x1, y1, x2, y2} to restrict the search

    Returns:
        CirclesResult sorted by confidence, highest first
    """
    min_radius = as_int(min_radius, "min_radius")
    max_radius = as_int(max_radius, "max_radius")
    if min_radius < 1:
        raise InvalidParameterError("must be >= 1", parameter="min_radius", value=min_radius)
    if max_radius < min_radius:
        raise InvalidParameterError(
            f"must be >= min_radius ({min_radius})", parameter="max_radius", value=max_radius
        )

    pixels, offset_x, offset_y = load_pixels(image_input, region)
    height, width = pixels.shape[:2]
    edges = build_edges(pixels)
    ys, xs = np.nonzero(edges)
    ys = ys.astype(np.int64)
    xs = xs.astype(np.int64)

    # Centers must sit at least min_radius away from the top/left border
    x_lo, x_hi = min_radius, min(width - min_radius, width - 1)
    y_lo, y_hi = min_radius, min(height - min_radius, height - 1)

    if len(xs) == 0 or x_lo > x_hi or y_lo > y_hi:
        logger.debug("detect_circles: nothing to vote on")
        return CirclesResult()

    found: List[Circle] = []
    kernel = np.ones((CIRCLE_PEAK_WINDOW, CIRCLE_PEAK_WINDOW), dtype=np.uint8)
    for radius in range(min_radius, max_radius + 1):
        votes = _vote_circle_centers(xs, ys, radius, width, height)
        required = CIRCLE_VOTE_RATIO * 2 * radius

        # Local maximum test: a cell equal to the max of its 11x11 window
        window_max = cv2.dilate(votes.astype(np.float32), kernel,
                                borderType=cv2.BORDER_CONSTANT, borderValue=0)
        mask = (votes >= required) & (votes.astype(np.float32) == window_max)
        band = np.zeros_like(mask)
        band[y_lo:y_hi + 1, x_lo:x_hi + 1] = True
        mask &= band

        for y, x in zip(*np.nonzero(mask)):
            x, y = int(x), int(y)
            count = int(votes[y, x])
            found.append(Circle(
                center=Point(x=x + offset_x, y=y + offset_y),
                radius=radius,
                diameter=radius * 2,
                fill_color=sample_hex(pixels, x, y),
                confidence=min(count / (2.0 * radius), 1.0),
            ))

    circles = filter_duplicate_circles(found)
    circles = sorted(circles, key=lambda c: c.confidence, reverse=True)
    logger.debug("detect_circles: %d candidates, %d after duplicate filtering (radius %d-%d)",
                 len(found), len(circles), min_radius, max_radius)
    return CirclesResult(circles=circles, count=len(circles))
