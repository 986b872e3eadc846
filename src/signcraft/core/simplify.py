"""Douglas-Peucker polyline simplification.

The classic algorithm recurses on the sub-polylines on either side of the
farthest point. Here the recursion is replaced by an explicit stack of index
ranges into the original point list, so no sub-lists are copied and the
stack depth is bounded by the input length.
"""

import math
from collections.abc import Sequence

from signcraft.domain import Path, Point2D

CHORD_EPSILON = 1e-4


def perpendicular_distance(point: Point2D, line_start: Point2D, line_end: Point2D) -> float:
    """Distance from a point to the infinite line through two points.

    Falls back to point-to-point distance when the chord has (near) zero
    length.

    Args:
        point: The point to measure
        line_start: First point on the line
        line_end: Second point on the line

    Returns:
        Non-negative distance
    """
    dx = line_end.x - line_start.x
    dy = line_end.y - line_start.y
    length = math.hypot(dx, dy)

    if length < CHORD_EPSILON:
        return math.hypot(point.x - line_start.x, point.y - line_start.y)

    return abs(
        dy * point.x - dx * point.y + line_end.x * line_start.y - line_end.y * line_start.x
    ) / length


def simplify_indices(points: Sequence[Point2D], tolerance: float) -> list[int]:
    """Indices of the points kept by Douglas-Peucker.

    Args:
        points: Input polyline
        tolerance: Maximum allowed perpendicular deviation (negative = 0)

    Returns:
        Sorted indices, always including the first and last index
    """
    n = len(points)
    if n <= 2:
        return list(range(n))

    tolerance = max(0.0, tolerance)
    keep = [False] * n
    keep[0] = keep[n - 1] = True

    stack: list[tuple[int, int]] = [(0, n - 1)]
    while stack:
        first, last = stack.pop()
        if last - first < 2:
            continue

        start = points[first]
        end = points[last]
        max_dist = -1.0
        max_index = first
        for i in range(first + 1, last):
            dist = perpendicular_distance(points[i], start, end)
            if dist > max_dist:
                max_dist = dist
                max_index = i

        if max_dist > tolerance:
            keep[max_index] = True
            stack.append((first, max_index))
            stack.append((max_index, last))

    return [i for i in range(n) if keep[i]]


def simplify(points: Sequence[Point2D], tolerance: float) -> list[Point2D]:
    """Reduce a polyline with the Douglas-Peucker algorithm.

    Guarantees:
    - first and last points are preserved
    - the result is a subsequence of the input (no point is moved)
    - every discarded point lies within ``tolerance`` of the kept chord
      bracketing it

    Args:
        points: Input polyline
        tolerance: Maximum allowed perpendicular deviation

    Returns:
        Simplified polyline

    Examples:
        >>> pts = [Point2D(0, 0), Point2D(1, 0.1), Point2D(2, 0)]
        >>> simplify(pts, 0.5)
        [Point2D(x=0, y=0), Point2D(x=2, y=0)]
    """
    return [points[i] for i in simplify_indices(points, tolerance)]


def simplify_path(path: Path, tolerance: float) -> Path:
    """Simplify a Path, keeping its closed flag."""
    return Path(points=simplify(path.points, tolerance), closed=path.closed)
