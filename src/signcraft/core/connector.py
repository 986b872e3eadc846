"""Joins ordered stroke paths into as few continuous paths as possible.

Paths are consumed in the given order (the reading order of the strokes).
Whenever the end of the accumulated path is within ``max_gap_distance`` of
the start of the next path, the two are joined with a gently curved cubic
bridge; otherwise the accumulated path is finished and a new one begins.
Used for single-line neon lettering where each tube should be as long as
possible.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass, field

from signcraft.core._bezier import sample_cubic
from signcraft.core.simplify import simplify
from signcraft.domain import Path, Point2D, total_length

DEFAULT_MAX_GAP = 50.0
DEFAULT_SIMPLIFY_TOLERANCE = 0.5
BRIDGE_SEGMENTS = 10

# Bridge control points sit at these chord fractions, pushed sideways by
# BRIDGE_BULGE times the chord length in opposite directions.
BRIDGE_CONTROL_FRACTIONS = (0.33, 0.67)
BRIDGE_BULGE = 0.2


@dataclass(frozen=True, slots=True)
class ConnectionStats:
    """Segment counts before and after connecting.

    Attributes:
        original_segments: Number of input paths
        connected_segments: Number of output paths
    """

    original_segments: int = 0
    connected_segments: int = 0


@dataclass
class ConnectionResult:
    """Outcome of connecting a list of paths.

    Attributes:
        connected_paths: Continuous output paths
        connection_count: Number of bridges inserted
        total_length: Sum of the output path lengths
        stats: Segment counts
    """

    connected_paths: list[Path] = field(default_factory=list)
    connection_count: int = 0
    total_length: float = 0.0
    stats: ConnectionStats = field(default_factory=ConnectionStats)

    def to_lists(self) -> list[list[list[float]]]:
        """Connected paths as nested [x, y] lists."""
        return [path.to_list() for path in self.connected_paths]


def bridge_curve(start: Point2D, end: Point2D,
                 segments: int = BRIDGE_SEGMENTS) -> list[Point2D]:
    """Sample an S-shaped cubic Bezier from ``start`` to ``end``.

    The control points are offset perpendicular to the chord by
    ``BRIDGE_BULGE`` of its length, on opposite sides, so the seam never
    reads as a straight line.

    Args:
        start: Bridge start point
        end: Bridge end point
        segments: Number of uniform parameter steps

    Returns:
        ``segments + 1`` points from start to end
    """
    dx = end.x - start.x
    dy = end.y - start.y
    perp_x = -dy * BRIDGE_BULGE
    perp_y = dx * BRIDGE_BULGE
    near, far = BRIDGE_CONTROL_FRACTIONS

    control1 = Point2D(start.x + dx * near + perp_x, start.y + dy * near + perp_y)
    control2 = Point2D(start.x + dx * far - perp_x, start.y + dy * far - perp_y)
    return sample_cubic([start, control1, control2, end], segments)


def connect(
    paths: Sequence[Path | Sequence[Sequence[float]]],
    max_gap_distance: float = DEFAULT_MAX_GAP,
    simplify_tolerance: float = DEFAULT_SIMPLIFY_TOLERANCE,
    bridge_segments: int = BRIDGE_SEGMENTS,
) -> ConnectionResult:
    """Connect ordered paths with curved bridges where gaps are small.

    Args:
        paths: Ordered paths, as Path objects or lists of [x, y] pairs
        max_gap_distance: Largest end-to-start gap that gets bridged
        simplify_tolerance: Douglas-Peucker tolerance applied to each bridge
        bridge_segments: Sample count of each bridge before simplification

    Returns:
        ConnectionResult; empty input gives an empty result
    """
    candidates = [_as_path(p) for p in paths]
    candidates = [p for p in candidates if not p.is_empty()]
    if not candidates:
        return ConnectionResult()

    connected: list[Path] = []
    connections = 0
    current = list(candidates[0].points)

    for following in candidates[1:]:
        gap = current[-1].distance_to(following.start)
        if gap <= max_gap_distance:
            bridge = simplify(
                bridge_curve(current[-1], following.start, bridge_segments),
                simplify_tolerance,
            )
            current.extend(bridge[1:])
            current.extend(following.points[1:])
            connections += 1
        else:
            connected.append(Path(points=current).deduplicated())
            current = list(following.points)

    connected.append(Path(points=current).deduplicated())

    return ConnectionResult(
        connected_paths=connected,
        connection_count=connections,
        total_length=total_length(connected),
        stats=ConnectionStats(
            original_segments=len(candidates),
            connected_segments=len(connected),
        ),
    )


def group_by_count(paths: Sequence[Path], count: int) -> list[list[Path]]:
    """Split paths into ``count`` contiguous groups of ceil(len / count).

    Grouping is purely positional: glyphs made of several strokes (``i``,
    ``j``) shift later strokes into the wrong group when stroke counts are
    uneven. Trailing groups can be empty.

    Args:
        paths: Flat ordered path list
        count: Number of groups (values below 1 are treated as 1)

    Returns:
        Exactly ``count`` groups
    """
    count = max(1, count)
    per_group = math.ceil(len(paths) / count) if paths else 0
    return [list(paths[i * per_group:(i + 1) * per_group]) for i in range(count)]


def _as_path(path: Path | Sequence[Sequence[float]]) -> Path:
    if isinstance(path, Path):
        return path
    return Path.from_list(path)
