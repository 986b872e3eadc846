"""Internal Bezier curve flattening algorithms.

This is an internal module containing helper functions for the curve sampler.
Not intended for public use.
"""

import math

from signcraft.domain import Point2D

# Subdivision depth 16 already yields 65536 segments per curve.
MAX_SUBDIVISION_DEPTH = 16


def quadratic_point(p0: Point2D, p1: Point2D, p2: Point2D, t: float) -> Point2D:
    """Evaluate a quadratic Bezier curve at parameter t."""
    mt = 1 - t
    return Point2D(
        mt * mt * p0.x + 2 * mt * t * p1.x + t * t * p2.x,
        mt * mt * p0.y + 2 * mt * t * p1.y + t * t * p2.y,
    )


def cubic_point(p0: Point2D, p1: Point2D, p2: Point2D, p3: Point2D, t: float) -> Point2D:
    """Evaluate a cubic Bezier curve at parameter t."""
    mt = 1 - t
    a = mt * mt * mt
    b = 3 * mt * mt * t
    c = 3 * mt * t * t
    d = t * t * t
    return Point2D(
        a * p0.x + b * p1.x + c * p2.x + d * p3.x,
        a * p0.y + b * p1.y + c * p2.y + d * p3.y,
    )


def sample_quadratic(points: list[Point2D], samples: int) -> list[Point2D]:
    """Sample a quadratic Bezier at ``samples + 1`` uniform parameter steps.

    Args:
        points: Control points [p0, p1, p2]
        samples: Number of segments (at least 1)

    Returns:
        Points from t=0 to t=1 inclusive
    """
    p0, p1, p2 = points
    samples = max(1, samples)
    return [quadratic_point(p0, p1, p2, i / samples) for i in range(samples + 1)]


def sample_cubic(points: list[Point2D], samples: int) -> list[Point2D]:
    """Sample a cubic Bezier at ``samples + 1`` uniform parameter steps.

    Args:
        points: Control points [p0, p1, p2, p3]
        samples: Number of segments (at least 1)

    Returns:
        Points from t=0 to t=1 inclusive
    """
    p0, p1, p2, p3 = points
    samples = max(1, samples)
    return [cubic_point(p0, p1, p2, p3, i / samples) for i in range(samples + 1)]


def flatten_quadratic(points: list[Point2D], tolerance: float,
                      depth: int = 0) -> list[Point2D]:
    """Flatten a quadratic Bezier curve using recursive subdivision.

    Args:
        points: List of 3 control points [p0, p1, p2]
        tolerance: Maximum distance from true curve
        depth: Current subdivision depth

    Returns:
        List of points approximating the curve
    """
    p0, p1, p2 = points

    # Actual curve midpoint (at t=0.5)
    curve_mid_x = 0.25 * p0.x + 0.5 * p1.x + 0.25 * p2.x
    curve_mid_y = 0.25 * p0.y + 0.5 * p1.y + 0.25 * p2.y

    # Chord midpoint
    line_mid_x = (p0.x + p2.x) / 2
    line_mid_y = (p0.y + p2.y) / 2

    distance = math.hypot(curve_mid_x - line_mid_x, curve_mid_y - line_mid_y)

    if distance <= tolerance or depth >= MAX_SUBDIVISION_DEPTH:
        return [p0, p2]

    # Subdivide at t=0.5
    mid = Point2D(curve_mid_x, curve_mid_y)
    left = [p0, Point2D((p0.x + p1.x) / 2, (p0.y + p1.y) / 2), mid]
    right = [mid, Point2D((p1.x + p2.x) / 2, (p1.y + p2.y) / 2), p2]

    left_points = flatten_quadratic(left, tolerance, depth + 1)
    right_points = flatten_quadratic(right, tolerance, depth + 1)

    # Combine, avoiding duplicate midpoint
    return left_points[:-1] + right_points


def flatten_cubic(points: list[Point2D], tolerance: float, depth: int = 0) -> list[Point2D]:
    """Flatten a cubic Bezier curve using recursive subdivision.

    Uses De Casteljau's algorithm for subdivision.

    Args:
        points: List of 4 control points [p0, p1, p2, p3]
        tolerance: Maximum distance from true curve
        depth: Current subdivision depth

    Returns:
        List of points approximating the curve
    """
    p0, p1, p2, p3 = points

    curve_mid_x = 0.125 * (p0.x + 3 * p1.x + 3 * p2.x + p3.x)
    curve_mid_y = 0.125 * (p0.y + 3 * p1.y + 3 * p2.y + p3.y)

    line_mid_x = (p0.x + p3.x) / 2
    line_mid_y = (p0.y + p3.y) / 2

    # Control points far off the chord can still put the midpoint on it (S curves)
    control_offset = max(
        _distance_to_chord(p1, p0, p3),
        _distance_to_chord(p2, p0, p3),
    )
    distance = max(
        math.hypot(curve_mid_x - line_mid_x, curve_mid_y - line_mid_y),
        0.75 * control_offset,
    )

    if distance <= tolerance or depth >= MAX_SUBDIVISION_DEPTH:
        return [p0, p3]

    # First level
    q1 = Point2D((p0.x + p1.x) / 2, (p0.y + p1.y) / 2)
    q2 = Point2D((p1.x + p2.x) / 2, (p1.y + p2.y) / 2)
    q3 = Point2D((p2.x + p3.x) / 2, (p2.y + p3.y) / 2)

    # Second level
    r1 = Point2D((q1.x + q2.x) / 2, (q1.y + q2.y) / 2)
    r2 = Point2D((q2.x + q3.x) / 2, (q2.y + q3.y) / 2)

    # Third level (midpoint)
    mid = Point2D((r1.x + r2.x) / 2, (r1.y + r2.y) / 2)

    left = flatten_cubic([p0, q1, r1, mid], tolerance, depth + 1)
    right = flatten_cubic([mid, r2, q3, p3], tolerance, depth + 1)

    return left[:-1] + right


def _distance_to_chord(point: Point2D, start: Point2D, end: Point2D) -> float:
    dx = end.x - start.x
    dy = end.y - start.y
    length = math.hypot(dx, dy)
    if length < 1e-12:
        return math.hypot(point.x - start.x, point.y - start.y)
    return abs(dy * point.x - dx * point.y + end.x * start.y - end.y * start.x) / length
