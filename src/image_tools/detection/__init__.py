"""
Shape and feature detection on a luminance edge map.

All detectors build their own edge map, keep no state between calls and never
modify the source image, so they are safe to run concurrently.
"""

from .edges import build_edges, find_contours, luminance, EDGE_THRESHOLD, MIN_CONTOUR_POINTS
from .shapes import detect_rectangles, detect_circles, filter_duplicate_circles, rectangularity
from .lines import detect_lines, find_peaks, estimate_thickness, has_arrowhead, MAX_LINES
from .text import (
    detect_text_regions, merge_overlapping_regions, merge_until_stable, horizontal_score
)

__all__ = [
    'build_edges',
    'find_contours',
    'luminance',
    'EDGE_THRESHOLD',
    'MIN_CONTOUR_POINTS',
    'detect_rectangles',
    'detect_circles',
    'filter_duplicate_circles',
    'rectangularity',
    'detect_lines',
    'find_peaks',
    'estimate_thickness',
    'has_arrowhead',
    'MAX_LINES',
    'detect_text_regions',
    'merge_overlapping_regions',
    'merge_until_stable',
    'horizontal_score',
]
