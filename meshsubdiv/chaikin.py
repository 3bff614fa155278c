"""
Chaikin Curve Subdivision
=========================

Corner-cutting refinement of an open polyline. Every segment (p0, p1) is
replaced by the two points

    q = 3/4 p0 + 1/4 p1
    r = 1/4 p0 + 3/4 p1

so an n-point polyline becomes 2 (n - 1) points per iteration.
"""

import numpy as np
from typing import Optional


# Zig-zag used by the demo when no control points are given
DEFAULT_CONTROL_POINTS = np.array([
    [-0.8, -0.5, 0.0],
    [-0.5,  0.6, 0.0],
    [ 0.0, -0.3, 0.0],
    [ 0.5,  0.7, 0.0],
    [ 0.8, -0.4, 0.0],
])


def chaikin_subdivide(points: np.ndarray) -> np.ndarray:
    """
    Perform one Chaikin iteration.

    Args:
        points: (N, D) ordered control points

    Returns:
        (2 * (N - 1), D) refined points; inputs with fewer than 2 points
        are returned unchanged (as a copy)
    """
    points = np.asarray(points, dtype=np.float64)
    if len(points) < 2:
        return points.copy()

    p0 = points[:-1]
    p1 = points[1:]
    q = 0.75 * p0 + 0.25 * p1
    r = 0.25 * p0 + 0.75 * p1

    # Interleave q and r segment by segment
    refined = np.empty((2 * len(p0),) + points.shape[1:])
    refined[0::2] = q
    refined[1::2] = r
    return refined


def chaikin_curve(points: Optional[np.ndarray] = None,
                  iterations: int = 0) -> np.ndarray:
    """
    Apply ``iterations`` Chaikin passes to a polyline.

    Args:
        points: Control points (default: DEFAULT_CONTROL_POINTS)
        iterations: Number of passes, >= 0

    Returns:
        Refined point sequence, to be drawn as connected segments
    """
    if iterations < 0:
        raise ValueError(f"iterations must be >= 0, got {iterations}")

    if points is None:
        points = DEFAULT_CONTROL_POINTS
    result = np.array(points, dtype=np.float64)

    for _ in range(iterations):
        if len(result) < 2:
            break
        result = chaikin_subdivide(result)

    return result


def polyline_segments(points: np.ndarray) -> np.ndarray:
    """(N - 1, 2, D) array of consecutive segments for line rendering."""
    points = np.asarray(points, dtype=np.float64)
    if len(points) < 2:
        return np.zeros((0, 2) + points.shape[1:])
    return np.stack([points[:-1], points[1:]], axis=1)
