"""Text-like region detection from edge density and stroke orientation."""

import logging
from typing import Union, List, Dict, Optional, Tuple

import numpy as np
from PIL import Image

from ..exceptions import InvalidParameterError
from ..schemas import Bounds, TextRegion, TextRegionsResult
from ..utils import load_pixels
from .edges import build_edges

logger = logging.getLogger(__name__)

# (width, height) of the sliding windows, stepped by half their size
WINDOW_SIZES: List[Tuple[int, int]] = [(100, 30), (150, 40), (200, 50), (80, 25)]

MIN_DENSITY = 0.05
MAX_DENSITY = 0.4
IDEAL_DENSITY = 0.2


def horizontal_score(window: np.ndarray) -> float:
    """
    Share of horizontal runs among all runs of edge pixels in a window.

    A run is a maximal stretch of edge pixels along a row (horizontal) or a
    column (vertical). Text lines produce many short horizontal runs.
    """
    if window.size == 0:
        return 0.0
    h_runs = int(np.count_nonzero(window[:, 0])) + int(np.count_nonzero(window[:, 1:] & ~window[:, :-1]))
    v_runs = int(np.count_nonzero(window[0, :])) + int(np.count_nonzero(window[1:, :] & ~window[:-1, :]))
    total = h_runs + v_runs
    if total == 0:
        return 0.0
    return h_runs / total


def merge_overlapping_regions(regions: List[TextRegion]) -> List[TextRegion]:
    """
    Single left-to-right merge pass.

    Each candidate merges into the first kept region it overlaps (union of
    bounds, max confidence, area recomputed); otherwise it is kept as is.
    A candidate overlapping two separate kept regions only joins the first.
    Inputs are copied, the caller's regions are not modified.
    """
    kept: List[TextRegion] = []
    for region in regions:
        for existing in kept:
            if existing.bounds.overlaps(region.bounds):
                existing.bounds = existing.bounds.union(region.bounds)
                existing.confidence = max(existing.confidence, region.confidence)
                existing.area = existing.bounds.area
                break
        else:
            kept.append(region.model_copy())
    return kept


def merge_until_stable(regions: List[TextRegion]) -> List[TextRegion]:
    """Repeat the merge pass until a pass merges nothing."""
    merged = merge_overlapping_regions(regions)
    while len(merged) < len(regions):
        regions = merged
        merged = merge_overlapping_regions(regions)
    return merged


def detect_text_regions(
    image_input: Union[str, Image.Image],
    min_confidence: float = 0.5,
    region: Optional[Dict[str, int]] = None
) -> TextRegionsResult:
    """
    Locate areas that look like lines of text.

    Slides four window sizes over the edge map and scores windows whose edge
    density is plausible for text by how horizontal their strokes are. Overlapping
    hits are merged. This finds text-like texture; it does not read anything.

    Args:
        image_input: File path or PIL Image
        min_confidence: Minimum window confidence in [0, 1]
        region: Optional {x1, y1, x2, y2} to restrict the search

    Returns:
        TextRegionsResult sorted by confidence, highest first

    Example:
        >>> result = detect_text_regions("screenshot.png", min_confidence=0.4)
        >>> boxes = [r.bounds for r in result.regions]
    """
    if not 0.0 <= min_confidence <= 1.0:
        raise InvalidParameterError(
            "must be within [0, 1]", parameter="min_confidence", value=min_confidence
        )

    pixels, offset_x, offset_y = load_pixels(image_input, region)
    height, width = pixels.shape[:2]
    edges = build_edges(pixels)

    # Summed-area table for O(1) edge counts per window
    integral = np.zeros((height + 1, width + 1), dtype=np.int64)
    integral[1:, 1:] = edges.cumsum(axis=0).cumsum(axis=1)

    candidates: List[TextRegion] = []
    for win_w, win_h in WINDOW_SIZES:
        step_x, step_y = win_w // 2, win_h // 2
        area = win_w * win_h
        for y in range(0, height - win_h + 1, step_y):
            for x in range(0, width - win_w + 1, step_x):
                edge_count = (integral[y + win_h, x + win_w] - integral[y, x + win_w]
                              - integral[y + win_h, x] + integral[y, x])
                density = edge_count / area
                if density < MIN_DENSITY or density > MAX_DENSITY:
                    continue

                score = horizontal_score(edges[y:y + win_h, x:x + win_w])
                confidence = score * (1 - abs(density - IDEAL_DENSITY) / IDEAL_DENSITY)
                if confidence < min_confidence:
                    continue

                candidates.append(TextRegion(
                    bounds=Bounds(x1=x + offset_x, y1=y + offset_y,
                                  x2=x + win_w + offset_x, y2=y + win_h + offset_y),
                    confidence=round(float(confidence), 3),
                    area=area,
                ))

    regions = merge_until_stable(candidates)
    regions = sorted(regions, key=lambda r: r.confidence, reverse=True)
    logger.debug("detect_text_regions: %d windows accepted, %d regions after merging",
                 len(candidates), len(regions))
    return TextRegionsResult(regions=regions, count=len(regions))
