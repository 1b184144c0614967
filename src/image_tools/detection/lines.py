"""
Hough-transform line detection.

Edge pixels vote in a (rho, theta) accumulator with theta in whole degrees
0..179. Peaks become segments whose endpoints are the extreme supporting edge
pixels. Each segment also gets an approximate stroke thickness, and optionally
a check for an arrowhead at either end.
"""

import logging
import math
from typing import Union, List, Dict, Optional, Tuple

import cv2
import numpy as np
from PIL import Image

from ..exceptions import InvalidParameterError
from ..schemas import Line, LinesResult, Point
from ..utils import as_flag, as_int, load_pixels, sample_hex
from .edges import build_edges

logger = logging.getLogger(__name__)

NUM_ANGLES = 180
PEAK_WINDOW = 2            # +/- cells in rho and theta
SUPPORT_DISTANCE = 2.0     # max perpendicular distance of a supporting pixel
MAX_LINES = 50
THICKNESS_REACH = 10       # pixels sampled on each side of the midpoint
ARROW_WING_LENGTH = 10
ARROW_WING_MIN_PIXELS = 3

# Near-duplicate suppression for peaks that trace an accepted line again
DUPLICATE_ANGLE_DEGREES = 5.0
DUPLICATE_DISTANCE = 3.0

_THETAS = np.deg2rad(np.arange(NUM_ANGLES))
_COS = np.cos(_THETAS)
_SIN = np.sin(_THETAS)
_COS[np.abs(_COS) < 1e-12] = 0.0
_SIN[np.abs(_SIN) < 1e-12] = 0.0


def _vote(xs: np.ndarray, ys: np.ndarray, max_dist: int) -> np.ndarray:
    """Fill the (2*max_dist+1, 180) accumulator; rho is rounded half up."""
    n_rho = 2 * max_dist + 1
    accumulator = np.zeros((n_rho, NUM_ANGLES), dtype=np.int64)
    for theta in range(NUM_ANGLES):
        rho = xs * _COS[theta] + ys * _SIN[theta]
        rho_idx = np.floor(rho + 0.5).astype(np.int64) + max_dist
        accumulator[:, theta] = np.bincount(rho_idx, minlength=n_rho)[:n_rho]
    return accumulator


def find_peaks(accumulator: np.ndarray, threshold: int) -> List[Tuple[int, int, int]]:
    """
    Local maxima of the accumulator within a +/-2 window.

    Theta wraps modulo 180; rho does not. A cell that only ties with its
    neighbors still counts, so thick strokes can yield adjacent peaks.

    Returns:
        List of (rho_index, theta, votes), most votes first
    """
    w = PEAK_WINDOW
    padded = np.pad(accumulator, ((w, w), (0, 0)), mode='constant', constant_values=0)
    padded = np.pad(padded, ((0, 0), (w, w)), mode='wrap')
    kernel = np.ones((2 * w + 1, 2 * w + 1), dtype=np.uint8)
    window_max = cv2.dilate(padded.astype(np.float32), kernel)[w:-w, w:-w]

    mask = (accumulator >= threshold) & (accumulator > 0)
    mask &= accumulator.astype(np.float32) >= window_max
    rho_idx, thetas = np.nonzero(mask)
    votes = accumulator[rho_idx, thetas]
    order = np.argsort(-votes, kind='stable')
    return [(int(rho_idx[i]), int(thetas[i]), int(votes[i])) for i in order]


def estimate_thickness(edges: np.ndarray, x1: int, y1: int, x2: int, y2: int) -> int:
    """Count edge pixels on the perpendicular through the segment midpoint."""
    height, width = edges.shape
    dx = float(x2 - x1)
    dy = float(y2 - y1)
    length = math.hypot(dx, dy)
    if length == 0:
        return 1

    perp_x = -dy / length
    perp_y = dx / length
    mid_x = (x1 + x2) / 2
    mid_y = (y1 + y2) / 2

    thickness = 0
    for d in range(-THICKNESS_REACH, THICKNESS_REACH + 1):
        px = int(mid_x + d * perp_x)
        py = int(mid_y + d * perp_y)
        if 0 <= px < width and 0 <= py < height and edges[py, px]:
            thickness += 1
    return max(thickness, 1)


def has_arrowhead(edges: np.ndarray, end_x: int, end_y: int, other_x: int, other_y: int) -> bool:
    """
    Look for two arrowhead wings at (end_x, end_y).

    The wings are the segment direction rotated by +/-45 degrees, walked back
    from the endpoint for 1..10 pixels. Both need at least 3 edge pixels.
    """
    height, width = edges.shape
    dx = float(end_x - other_x)
    dy = float(end_y - other_y)
    length = math.hypot(dx, dy)
    if length == 0:
        return False
    dx /= length
    dy /= length

    c = math.cos(math.pi / 4)
    s = math.sin(math.pi / 4)
    wings = [
        (dx * c - dy * s, dx * s + dy * c),
        (dx * c + dy * s, -dx * s + dy * c),
    ]

    counts = []
    for wx, wy in wings:
        count = 0
        for d in range(1, ARROW_WING_LENGTH + 1):
            px = end_x - int(d * wx)
            py = end_y - int(d * wy)
            if 0 <= px < width and 0 <= py < height and edges[py, px]:
                count += 1
        counts.append(count)
    return all(count >= ARROW_WING_MIN_PIXELS for count in counts)


def _trace_segment(xs: np.ndarray, ys: np.ndarray, rho: int, theta: int,
                   min_length: int) -> Optional[Tuple[int, int, int, int]]:
    """
    Endpoints (x1, y1, x2, y2) of the edge pixels supporting one peak.

    Returns None when fewer than ``min_length`` pixels support the peak or the
    extreme pixels lie closer than ``min_length``.
    """
    cos_t, sin_t = _COS[theta], _SIN[theta]
    support = np.abs(xs * cos_t + ys * sin_t - rho) < SUPPORT_DISTANCE
    if np.count_nonzero(support) < min_length:
        return None

    # Project onto the line direction (sin, -cos)
    sx, sy = xs[support], ys[support]
    projection = sx * sin_t - sy * cos_t
    first, last = int(np.argmin(projection)), int(np.argmax(projection))
    x1, y1 = int(sx[first]), int(sy[first])
    x2, y2 = int(sx[last]), int(sy[last])

    if math.hypot(x2 - x1, y2 - y1) < min_length:
        return None
    return x1, y1, x2, y2


def _is_duplicate(line: Line, accepted: List[Line]) -> bool:
    """True when ``line`` retraces an accepted line (similar angle, endpoints on it)."""
    for other in accepted:
        diff = abs(line.angle_degrees - other.angle_degrees) % 180.0
        if min(diff, 180.0 - diff) > DUPLICATE_ANGLE_DEGREES:
            continue
        ox = other.end.x - other.start.x
        oy = other.end.y - other.start.y
        norm = math.hypot(ox, oy)
        if norm == 0:
            continue
        near = True
        for p in (line.start, line.end):
            dist = abs(ox * (p.y - other.start.y) - oy * (p.x - other.start.x)) / norm
            if dist > DUPLICATE_DISTANCE:
                near = False
                break
        if near:
            return True
    return False


def detect_lines(
    image_input: Union[str, Image.Image],
    min_length: int = 20,
    detect_arrows: bool = False,
    region: Optional[Dict[str, int]] = None,
    merge_duplicates: bool = True
) -> LinesResult:
    """
    Find straight line segments with a Hough transform.

    Args:
        image_input: File path or PIL Image
        min_length: Minimum segment length and supporting pixel count
        detect_arrows: Check both endpoints for arrowheads
        region: Optional {x1, y1, x2, y2} to restrict the search
        merge_duplicates: Skip peaks that retrace an already accepted line

    Returns:
        LinesResult with at most 50 lines, in descending vote order

    Example:
        >>> result = detect_lines("diagram.png", min_length=30, detect_arrows=True)
        >>> arrows = [l for l in result.lines if l.has_arrow_end]
    """
    min_length = as_int(min_length, "min_length")
    detect_arrows = as_flag(detect_arrows, "detect_arrows")
    if min_length < 0:
        raise InvalidParameterError("must be >= 0", parameter="min_length", value=min_length)

    pixels, offset_x, offset_y = load_pixels(image_input, region)
    height, width = pixels.shape[:2]
    edges = build_edges(pixels)

    ys, xs = np.nonzero(edges)
    if len(xs) == 0:
        return LinesResult()
    xs = xs.astype(np.float64)
    ys = ys.astype(np.float64)

    max_dist = int(math.ceil(math.sqrt(width * width + height * height)))
    accumulator = _vote(xs, ys, max_dist)
    peaks = find_peaks(accumulator, min_length // 2)

    lines: List[Line] = []
    for rho_idx, theta, votes in peaks:
        if len(lines) >= MAX_LINES:
            break

        rho = rho_idx - max_dist
        segment = _trace_segment(xs, ys, rho, theta, min_length)
        if segment is None:
            continue
        x1, y1, x2, y2 = segment
        length = math.hypot(x2 - x1, y2 - y1)

        angle = round(math.degrees(math.atan2(y2 - y1, x2 - x1)), 1)
        if angle <= -180.0:
            angle += 360.0

        arrow_start = arrow_end = False
        if detect_arrows:
            arrow_start = has_arrowhead(edges, x1, y1, x2, y2)
            arrow_end = has_arrowhead(edges, x2, y2, x1, y1)

        line = Line(
            start=Point(x=x1 + offset_x, y=y1 + offset_y),
            end=Point(x=x2 + offset_x, y=y2 + offset_y),
            length=round(length, 1),
            angle_degrees=angle,
            color=sample_hex(pixels, (x1 + x2) // 2, (y1 + y2) // 2),
            thickness_approx=estimate_thickness(edges, x1, y1, x2, y2),
            has_arrow_start=arrow_start,
            has_arrow_end=arrow_end,
        )
        if merge_duplicates and _is_duplicate(line, lines):
            logger.debug("Skipping peak rho=%d theta=%d (%d votes): retraces accepted line",
                         rho, theta, votes)
            continue
        lines.append(line)

    logger.debug("detect_lines: %d edge pixels, %d peaks, %d lines",
                 len(xs), len(peaks), len(lines))
    return LinesResult(lines=lines, count=len(lines))
