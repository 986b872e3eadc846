"""Planar geometric types for path representation.

This module defines the 2D types that flow between the pipeline stages:
- Point2D: An immutable point in plane coordinates
- Path: An ordered, open or closed sequence of points
- PathCommand: One SVG-style drawing command, before flattening
"""

import math
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any

EPSILON = 1e-9


@dataclass(frozen=True, slots=True)
class Point2D:
    """A point in 2D space.

    Coordinates are pixels or millimeters depending on the pipeline stage.
    Immutable and hashable for use in sets/dicts.

    Attributes:
        x: X coordinate
        y: Y coordinate
    """

    x: float
    y: float

    def to_tuple(self) -> tuple[float, float]:
        """Convert to simple (x, y) tuple."""
        return (self.x, self.y)

    def distance_to(self, other: "Point2D") -> float:
        """Euclidean distance to another point."""
        return math.hypot(other.x - self.x, other.y - self.y)

    def is_close(self, other: "Point2D", tolerance: float = EPSILON) -> bool:
        """Check whether two points coincide within tolerance."""
        return self.distance_to(other) <= tolerance


@dataclass
class Path:
    """An ordered sequence of points.

    A path is open unless ``closed`` is set. Closed paths produced by the
    pipeline repeat their first point at the end so consumers that only look
    at coordinates still see a closed ring.

    Attributes:
        points: Ordered points along the path
        closed: Whether the path forms a loop
    """

    points: list[Point2D] = field(default_factory=list)
    closed: bool = False

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[Point2D]:
        return iter(self.points)

    def __getitem__(self, index: int) -> Point2D:
        return self.points[index]

    def is_empty(self) -> bool:
        """Check if the path has no points."""
        return not self.points

    @property
    def start(self) -> Point2D:
        """First point of the path."""
        return self.points[0]

    @property
    def end(self) -> Point2D:
        """Last point of the path."""
        return self.points[-1]

    def is_geometrically_closed(self, tolerance: float = EPSILON) -> bool:
        """Check whether the first and last points coincide."""
        if len(self.points) < 2:
            return False
        return self.points[0].is_close(self.points[-1], tolerance)

    def length(self) -> float:
        """Sum of consecutive-point distances."""
        return sum(
            self.points[i].distance_to(self.points[i + 1])
            for i in range(len(self.points) - 1)
        )

    def deduplicated(self, tolerance: float = EPSILON) -> "Path":
        """Return a copy with consecutive coincident points removed.

        Args:
            tolerance: Distance under which two neighbours count as one point

        Returns:
            New path satisfying the no-coincident-neighbours invariant
        """
        result: list[Point2D] = []
        for point in self.points:
            if result and result[-1].is_close(point, tolerance):
                continue
            result.append(point)
        return Path(points=result, closed=self.closed)

    def close(self) -> "Path":
        """Return a closed copy, appending the start point if needed."""
        points = list(self.points)
        if points and not points[0].is_close(points[-1]):
            points.append(points[0])
        return Path(points=points, closed=True)

    def reversed(self) -> "Path":
        """Return a copy traversed in the opposite direction."""
        return Path(points=list(reversed(self.points)), closed=self.closed)

    def transformed(self, scale: float = 1.0, dx: float = 0.0, dy: float = 0.0,
                    flip_y: bool = False) -> "Path":
        """Return a scaled and translated copy.

        Args:
            scale: Uniform scale factor
            dx: Offset added to x after scaling
            dy: Offset added to y after scaling
            flip_y: Negate y before scaling (raster rows grow downward)
        """
        sign = -1.0 if flip_y else 1.0
        return Path(
            points=[Point2D(p.x * scale + dx, sign * p.y * scale + dy) for p in self.points],
            closed=self.closed,
        )

    def bounding_box(self) -> tuple[float, float, float, float]:
        """Bounding box of the path as (min_x, min_y, max_x, max_y)."""
        if not self.points:
            return (0.0, 0.0, 0.0, 0.0)
        xs = [p.x for p in self.points]
        ys = [p.y for p in self.points]
        return (min(xs), min(ys), max(xs), max(ys))

    def signed_area(self) -> float:
        """Signed area using the shoelace formula (positive = counter-clockwise)."""
        n = len(self.points)
        if n < 3:
            return 0.0

        area = 0.0
        for i in range(n):
            j = (i + 1) % n
            area += self.points[i].x * self.points[j].y
            area -= self.points[j].x * self.points[i].y
        return area / 2.0

    def to_list(self) -> list[list[float]]:
        """Serialize to a list of [x, y] pairs."""
        return [[p.x, p.y] for p in self.points]

    @classmethod
    def from_list(cls, data: Sequence[Sequence[float]], closed: bool = False) -> "Path":
        """Build a path from [x, y] pairs.

        Entries with fewer than two coordinates are skipped.
        """
        points = [Point2D(float(item[0]), float(item[1])) for item in data if len(item) >= 2]
        return cls(points=points, closed=closed)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {"points": self.to_list(), "closed": self.closed}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Path":
        """Deserialize from dictionary."""
        return cls.from_list(data["points"], closed=data.get("closed", False))


@dataclass(frozen=True, slots=True)
class PathCommand:
    """A single path drawing command with its raw operands.

    Attributes:
        name: Command letter; lower case means relative coordinates
        args: Numeric operands in document order
    """

    name: str
    args: tuple[float, ...] = ()

    @property
    def kind(self) -> str:
        """Upper-case command letter."""
        return self.name.upper()

    @property
    def is_relative(self) -> bool:
        """Whether operands are relative to the cursor."""
        return self.name.islower()


def total_length(paths: Sequence[Path]) -> float:
    """Aggregate length of several paths."""
    return sum(path.length() for path in paths)
