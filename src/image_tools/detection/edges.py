"""Edge map and contour extraction shared by all detectors."""

import logging
from typing import List

import numpy as np

logger = logging.getLogger(__name__)

# Luminance step (0-255 scale) that marks a pixel as an edge
EDGE_THRESHOLD = 30

# Contours with fewer pixels than this are treated as noise
MIN_CONTOUR_POINTS = 10

# 8-connectivity neighbor offsets as (dy, dx)
_NEIGHBORS = [(-1, -1), (-1, 0), (-1, 1), (0, -1), (0, 1), (1, -1), (1, 0), (1, 1)]


def luminance(pixels: np.ndarray) -> np.ndarray:
    """
    Grayscale luminance Y = 0.299R + 0.587G + 0.114B, truncated to 8 bits.

    Args:
        pixels: (H, W, 3) uint8 RGB array

    Returns:
        (H, W) int16 array, safe to difference without overflow
    """
    rgb = pixels.astype(np.float64)
    gray = 0.299 * rgb[..., 0] + 0.587 * rgb[..., 1] + 0.114 * rgb[..., 2]
    return gray.astype(np.uint8).astype(np.int16)


def build_edges(pixels: np.ndarray, threshold: int = EDGE_THRESHOLD) -> np.ndarray:
    """
    Build the boolean edge map of an RGB pixel array.

    A pixel is an edge when its luminance differs by more than ``threshold``
    from its right or its lower neighbor. The outer one-pixel border is never
    an edge.

    Args:
        pixels: (H, W, 3) uint8 RGB array
        threshold: Luminance step required to mark an edge

    Returns:
        (H, W) boolean array

    Example:
        >>> edges = build_edges(to_pixel_array(load_image("diagram.png")))
        >>> int(edges.sum())  # number of edge pixels
    """
    height, width = pixels.shape[:2]
    edges = np.zeros((height, width), dtype=bool)
    if width < 3 or height < 3:
        return edges

    gray = luminance(pixels)
    center = gray[1:-1, 1:-1]
    right = gray[1:-1, 2:]
    below = gray[2:, 1:-1]
    edges[1:-1, 1:-1] = (np.abs(center - right) > threshold) | (np.abs(center - below) > threshold)

    logger.debug("Edge map %dx%d: %d edge pixels", width, height, int(edges.sum()))
    return edges


def find_contours(edges: np.ndarray, min_points: int = MIN_CONTOUR_POINTS) -> List[np.ndarray]:
    """
    Group edge pixels into 8-connected contours.

    Pixels are scanned in row-major order and every unvisited edge pixel seeds
    a stack-based flood fill. Point order inside a contour follows visitation
    order and carries no meaning; only aggregates (count, bounding box) do.

    Args:
        edges: (H, W) boolean edge map
        min_points: Contours smaller than this are discarded

    Returns:
        List of (N, 2) int arrays of (x, y) points, in first-encounter order
    """
    height, width = edges.shape
    visited = np.zeros_like(edges, dtype=bool)
    contours = []

    for seed in np.flatnonzero(edges):
        sy, sx = divmod(int(seed), width)
        if visited[sy, sx]:
            continue

        visited[sy, sx] = True
        stack = [(sx, sy)]
        points = []
        while stack:
            x, y = stack.pop()
            points.append((x, y))
            for dy, dx in _NEIGHBORS:
                nx, ny = x + dx, y + dy
                if 0 <= nx < width and 0 <= ny < height and edges[ny, nx] and not visited[ny, nx]:
                    visited[ny, nx] = True
                    stack.append((nx, ny))

        if len(points) >= min_points:
            contours.append(np.array(points, dtype=np.int64))

    logger.debug("Found %d contours with at least %d points", len(contours), min_points)
    return contours
