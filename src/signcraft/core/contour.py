"""Moore-neighbour boundary tracing.

Every foreground pixel with at least one background 8-neighbour is a
boundary pixel. Background pixels are grouped into 4-connected regions,
with everything touching the raster edge (or lying outside it) forming one
outside region. Each boundary is traced against one region at a time:
scanning in row order, an unvisited boundary pixel starts a clockwise
walk that steps to the first unvisited neighbour touching that region in
the ring E, SE, S, SW, W, NW, N, NE, beginning two steps counter-clockwise
of the last move. The walk ends when it returns to its start, repeats a
state, or after ``width * height`` steps.

Once a walk finishes, the whole 8-connected band of unvisited pixels
touching the same region is marked visited, so one boundary produces one
loop and no pixel belongs to two loops. Walks never step onto pixels an
earlier loop visited, so the inner boundary of a thin wall is still traced
from the pixels the outer loop left over.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from signcraft.domain import BinaryRaster, Path, Point2D

DEFAULT_MIN_LENGTH = 10

# Region label for background connected to the raster edge
OUTSIDE = 0
_FOREGROUND = -1

# Clockwise starting east, in raster coordinates (y grows downward)
DIRECTIONS: tuple[tuple[int, int], ...] = (
    (1, 0), (1, 1), (0, 1), (-1, 1), (-1, 0), (-1, -1), (0, -1), (1, -1),
)
_AXES: tuple[tuple[int, int], ...] = ((1, 0), (0, 1), (-1, 0), (0, -1))


@dataclass
class ScalarField:
    """A row-major grid of scalar samples (e.g. a heightmap).

    Attributes:
        values: ``width * height`` samples
        width: Number of columns
        height: Number of rows
    """

    values: Sequence[float]
    width: int
    height: int


class _Grid:
    """Foreground mask and background region labels over either input type."""

    def __init__(self, source: BinaryRaster | ScalarField, threshold: float) -> None:
        self.width = source.width
        self.height = source.height
        if isinstance(source, BinaryRaster):
            values: Sequence[float] = source.data
        else:
            values = source.values
        size = self.width * self.height
        self.mask = bytearray(
            1 if i < len(values) and values[i] > threshold else 0 for i in range(size)
        )
        self.labels = self._label_background()

    def _label_background(self) -> list[int]:
        width, height = self.width, self.height
        labels = [_FOREGROUND] * (width * height)
        unlabeled = -2
        for i, value in enumerate(self.mask):
            if not value:
                labels[i] = unlabeled

        next_label = OUTSIDE + 1
        for start in range(width * height):
            if labels[start] != unlabeled:
                continue
            region = next_label
            next_label += 1
            labels[start] = region
            members = [start]
            stack = [start]
            at_edge = False
            while stack:
                index = stack.pop()
                x, y = index % width, index // width
                if x == 0 or y == 0 or x == width - 1 or y == height - 1:
                    at_edge = True
                for dx, dy in _AXES:
                    nx, ny = x + dx, y + dy
                    if 0 <= nx < width and 0 <= ny < height:
                        neighbor = ny * width + nx
                        if labels[neighbor] == unlabeled:
                            labels[neighbor] = region
                            members.append(neighbor)
                            stack.append(neighbor)
            if at_edge:
                for index in members:
                    labels[index] = OUTSIDE
        return labels

    def is_foreground(self, x: int, y: int) -> bool:
        if x < 0 or y < 0 or x >= self.width or y >= self.height:
            return False
        return bool(self.mask[y * self.width + x])

    def region(self, x: int, y: int) -> int:
        """Background region at (x, y); foreground reads as -1."""
        if x < 0 or y < 0 or x >= self.width or y >= self.height:
            return OUTSIDE
        return self.labels[y * self.width + x]

    def regions_at(self, x: int, y: int) -> set[int]:
        """Background regions 8-adjacent to a foreground pixel."""
        if not self.is_foreground(x, y):
            return set()
        regions = {self.region(x + dx, y + dy) for dx, dy in DIRECTIONS}
        regions.discard(_FOREGROUND)
        return regions

    def touches(self, x: int, y: int, region: int) -> bool:
        if not self.is_foreground(x, y):
            return False
        return any(self.region(x + dx, y + dy) == region for dx, dy in DIRECTIONS)


def trace(
    source: BinaryRaster | ScalarField,
    threshold: float = 0.0,
    min_length: int = DEFAULT_MIN_LENGTH,
) -> list[Path]:
    """Trace every distinct boundary into a closed loop.

    Args:
        source: Binary raster or scalar field to trace
        threshold: Samples strictly greater than this are foreground
        min_length: Loops with this many points or fewer are discarded

    Returns:
        Closed paths in pixel coordinates, in discovery order
    """
    grid = _Grid(source, threshold)
    width, height = grid.width, grid.height
    visited = bytearray(width * height)
    loops: list[Path] = []

    for y in range(1, height - 1):
        for x in range(1, width - 1):
            regions = grid.regions_at(x, y)
            if visited[y * width + x] or not regions:
                continue

            region = min(regions)
            walk = _walk_boundary(grid, x, y, region, visited)
            _mark_band(grid, walk, region, visited)

            if len(walk) > min_length:
                points = [Point2D(float(px), float(py)) for px, py in walk]
                points.append(points[0])
                loops.append(Path(points=points, closed=True))

    return loops


def trace_field(values: Sequence[float], width: int, height: int,
                threshold: float, min_length: int = DEFAULT_MIN_LENGTH) -> list[Path]:
    """Trace a flat list of scalar samples."""
    return trace(ScalarField(values, width, height), threshold, min_length)


def _walk_boundary(grid: _Grid, start_x: int, start_y: int, region: int,
                   visited: bytearray) -> list[tuple[int, int]]:
    width = grid.width
    max_steps = grid.width * grid.height
    walk: list[tuple[int, int]] = []
    states: set[tuple[int, int, int]] = set()
    cx, cy = start_x, start_y
    direction = 0

    while True:
        walk.append((cx, cy))

        for i in range(8):
            check = (direction + i) % 8
            dx, dy = DIRECTIONS[check]
            nx, ny = cx + dx, cy + dy
            if grid.touches(nx, ny, region) and not visited[ny * width + nx]:
                cx, cy = nx, ny
                direction = (check + 6) % 8
                break
        else:
            # Isolated pixel
            break

        if (cx, cy) == (start_x, start_y) or len(walk) >= max_steps:
            break
        # Cycling without reaching the start
        if (cx, cy, direction) in states:
            break
        states.add((cx, cy, direction))

    return walk


def _mark_band(grid: _Grid, seeds: list[tuple[int, int]], region: int,
               visited: bytearray) -> None:
    width = grid.width
    stack = list(seeds)
    seen = set(seeds)
    while stack:
        x, y = stack.pop()
        visited[y * width + x] = 1
        for dx, dy in DIRECTIONS:
            nx, ny = x + dx, y + dy
            neighbor = (nx, ny)
            if (
                neighbor not in seen
                and grid.touches(nx, ny, region)
                and not visited[ny * width + nx]
            ):
                seen.add(neighbor)
                stack.append(neighbor)
