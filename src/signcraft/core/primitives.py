"""Primitive solids: plates, hole walls and mounting hole layouts.

All plates are centered on the origin with their thickness split evenly
above and below z=0. Holes are represented only by their cylindrical walls
overlaid on the plate; the plate faces are not cut (except for the coarse
cell skipping on rectangular plates), so the result is an approximation that
slicers interpret as a plate with holes but that is not guaranteed manifold.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass

from signcraft.config.settings import (
    MIN_HOLE_SPACING,
    BackingPlateConfig,
    HolePattern,
    PlateShape,
)
from signcraft.domain import Mesh, Point2D, Vector3

DEFAULT_DISC_SEGMENTS = 32
DEFAULT_HOLE_SEGMENTS = 16
HEXAGON_SIDES = 6
CORNER_ARC_SEGMENTS = 8

# Rectangular plates with holes are faced with a grid of this many cells
# along their longer side.
FACE_GRID_CELLS = 32

UP = Vector3(0.0, 0.0, 1.0)
DOWN = Vector3(0.0, 0.0, -1.0)


@dataclass(frozen=True, slots=True)
class Hole:
    """A round mounting hole through a plate.

    Attributes:
        x: Center x in mm
        y: Center y in mm
        radius: Hole radius in mm
    """

    x: float
    y: float
    radius: float

    def contains(self, x: float, y: float) -> bool:
        """Check whether a point lies inside or on the hole."""
        dx = x - self.x
        dy = y - self.y
        return dx * dx + dy * dy <= self.radius * self.radius


def side_wall(mesh: Mesh, p1: Point2D, p2: Point2D, bottom: float, top: float,
              normal: Vector3 | None = None) -> None:
    """Vertical quad over edge p1 -> p2, facing right of the direction of travel."""
    mesh.add_quad(
        (p1.x, p1.y, bottom),
        (p2.x, p2.y, bottom),
        (p2.x, p2.y, top),
        (p1.x, p1.y, top),
        normal,
    )


def _edge_normal(p1: Point2D, p2: Point2D) -> Vector3:
    return Vector3(p2.y - p1.y, p1.x - p2.x, 0.0).normalized()


def box_plate(width: float, height: float, thickness: float,
              center: tuple[float, float, float] = (0.0, 0.0, 0.0)) -> Mesh:
    """Axis-aligned rectangular prism.

    Args:
        width: Extent along x
        height: Extent along y
        thickness: Extent along z
        center: Center of the box

    Returns:
        Mesh of exactly 12 triangles, two per face
    """
    cx, cy, cz = center
    w, h = width / 2, height / 2
    corners = [
        Point2D(cx - w, cy - h),
        Point2D(cx + w, cy - h),
        Point2D(cx + w, cy + h),
        Point2D(cx - w, cy + h),
    ]
    return polygon_plate(corners, thickness, z_center=cz)


def polygon_plate(vertices: Sequence[Point2D], thickness: float,
                  z_center: float = 0.0) -> Mesh:
    """Prism over a convex counter-clockwise polygon.

    Caps are fans from the polygon centroid for polygons with more than four
    vertices and a single quad split for quadrilaterals. Side walls carry the
    outward edge normal.

    Args:
        vertices: Convex outline in counter-clockwise order
        thickness: Prism height
        z_center: Height of the mid-plane

    Returns:
        Plate mesh
    """
    mesh = Mesh()
    n = len(vertices)
    if n < 3:
        return mesh

    top = z_center + thickness / 2
    bottom = z_center - thickness / 2

    if n == 4:
        a, b, c, d = vertices
        mesh.add_quad((a.x, a.y, top), (b.x, b.y, top), (c.x, c.y, top), (d.x, d.y, top), UP)
        mesh.add_quad((a.x, a.y, bottom), (d.x, d.y, bottom), (c.x, c.y, bottom),
                      (b.x, b.y, bottom), DOWN)
    else:
        cx = sum(v.x for v in vertices) / n
        cy = sum(v.y for v in vertices) / n
        for i in range(n):
            p1 = vertices[i]
            p2 = vertices[(i + 1) % n]
            mesh.add_triangle((cx, cy, top), (p1.x, p1.y, top), (p2.x, p2.y, top), UP)
            mesh.add_triangle((cx, cy, bottom), (p2.x, p2.y, bottom), (p1.x, p1.y, bottom), DOWN)

    for i in range(n):
        p1 = vertices[i]
        p2 = vertices[(i + 1) % n]
        side_wall(mesh, p1, p2, bottom, top, _edge_normal(p1, p2))

    return mesh


def disc_plate(diameter: float, thickness: float,
               segments: int = DEFAULT_DISC_SEGMENTS) -> Mesh:
    """Circular plate made of radial wedges.

    Each wedge contributes a top and a bottom fan triangle plus a two-triangle
    side wall whose normal is the radial direction at the wedge's angular
    midpoint.

    Args:
        diameter: Plate diameter
        thickness: Plate thickness
        segments: Number of wedges (at least 3)

    Returns:
        Mesh of ``4 * segments`` triangles
    """
    mesh = Mesh()
    segments = max(3, segments)
    radius = diameter / 2
    top = thickness / 2
    bottom = -thickness / 2

    for i in range(segments):
        angle1 = (i / segments) * 2 * math.pi
        angle2 = ((i + 1) / segments) * 2 * math.pi
        p1 = Point2D(math.cos(angle1) * radius, math.sin(angle1) * radius)
        p2 = Point2D(math.cos(angle2) * radius, math.sin(angle2) * radius)

        mesh.add_triangle((0.0, 0.0, top), (p1.x, p1.y, top), (p2.x, p2.y, top), UP)
        mesh.add_triangle((0.0, 0.0, bottom), (p2.x, p2.y, bottom), (p1.x, p1.y, bottom), DOWN)

        mid = (angle1 + angle2) / 2
        side_wall(mesh, p1, p2, bottom, top, Vector3(math.cos(mid), math.sin(mid), 0.0))

    return mesh


def regular_polygon(sides: int, diameter: float,
                    start_angle: float = -math.pi / 2) -> list[Point2D]:
    """Vertices of a regular polygon inscribed in a circle, counter-clockwise."""
    radius = diameter / 2
    return [
        Point2D(
            math.cos(start_angle + 2 * math.pi * i / sides) * radius,
            math.sin(start_angle + 2 * math.pi * i / sides) * radius,
        )
        for i in range(sides)
    ]


def rounded_rectangle(width: float, height: float, radius: float,
                      arc_segments: int = CORNER_ARC_SEGMENTS) -> list[Point2D]:
    """Counter-clockwise outline of a rectangle with rounded corners.

    The radius is clamped to half the smaller side; zero gives four corners.
    """
    w, h = width / 2, height / 2
    radius = max(0.0, min(radius, w, h))
    if radius == 0:
        return [Point2D(-w, -h), Point2D(w, -h), Point2D(w, h), Point2D(-w, h)]

    outline: list[Point2D] = []
    # Corner centers, each followed by the start angle of its arc
    corners = (
        (w - radius, -h + radius, -math.pi / 2),
        (w - radius, h - radius, 0.0),
        (-w + radius, h - radius, math.pi / 2),
        (-w + radius, -h + radius, math.pi),
    )
    for cx, cy, start in corners:
        for i in range(arc_segments + 1):
            angle = start + (math.pi / 2) * i / arc_segments
            point = Point2D(cx + math.cos(angle) * radius, cy + math.sin(angle) * radius)
            if not outline or not outline[-1].is_close(point):
                outline.append(point)
    if len(outline) > 1 and outline[0].is_close(outline[-1]):
        outline.pop()
    return outline


def cylindrical_hole(x: float, y: float, radius: float, thickness: float,
                     segments: int = DEFAULT_HOLE_SEGMENTS) -> Mesh:
    """Open tube marking a hole through a plate.

    Only the wall is emitted, with normals facing the hole axis; there are no
    caps.

    Args:
        x: Hole center x
        y: Hole center y
        radius: Hole radius
        thickness: Height of the wall, centered on z=0
        segments: Number of wall facets (at least 3)

    Returns:
        Mesh of ``2 * segments`` triangles
    """
    mesh = Mesh()
    segments = max(3, segments)
    top = thickness / 2
    bottom = -thickness / 2

    for i in range(segments):
        angle1 = (i / segments) * 2 * math.pi
        angle2 = ((i + 1) / segments) * 2 * math.pi
        p1 = Point2D(x + math.cos(angle1) * radius, y + math.sin(angle1) * radius)
        p2 = Point2D(x + math.cos(angle2) * radius, y + math.sin(angle2) * radius)
        mid = (angle1 + angle2) / 2
        # Walking clockwise puts the facing side toward the axis
        side_wall(mesh, p2, p1, bottom, top, Vector3(-math.cos(mid), -math.sin(mid), 0.0))

    return mesh


def _steps(start: float, stop: float, spacing: float) -> list[float]:
    """Values start, start + spacing, ... not exceeding stop."""
    if stop < start:
        return []
    count = int(math.floor((stop - start) / spacing + 1e-9)) + 1
    return [start + i * spacing for i in range(count)]


def hole_centers(pattern: HolePattern | str, width: float, height: float,
                 inset: float, spacing: float) -> list[tuple[float, float]]:
    """Mounting hole positions for a plate centered on the origin.

    Args:
        pattern: Layout policy
        width: Plate width
        height: Plate height
        inset: Distance of the hole row from each edge; clamped so it stays
            below half the smaller dimension
        spacing: Pitch for grid and perimeter layouts; clamped positive

    Returns:
        (x, y) centers inside ``[-w+inset, w-inset] x [-h+inset, h-inset]``
        where w and h are the half extents
    """
    pattern = HolePattern(pattern)
    w, h = width / 2, height / 2
    inset = max(0.0, min(inset, min(w, h) * 0.999))
    spacing = max(spacing, MIN_HOLE_SPACING)
    left, right = -w + inset, w - inset
    low, high = -h + inset, h - inset

    if pattern is HolePattern.CORNERS:
        return [(left, high), (right, high), (left, low), (right, low)]

    if pattern is HolePattern.GRID:
        return [(x, y) for x in _steps(left, right, spacing) for y in _steps(low, high, spacing)]

    if pattern is HolePattern.PERIMETER:
        centers: list[tuple[float, float]] = []
        for x in _steps(left, right, spacing):
            centers.append((x, high))
            centers.append((x, low))
        # Side columns start one step in so corner holes are not repeated
        for y in _steps(low + spacing, high - spacing, spacing):
            centers.append((left, y))
            centers.append((right, y))
        return centers

    return []


def gridded_plate(width: float, height: float, thickness: float,
                  holes: Sequence[Hole], cells: int = FACE_GRID_CELLS) -> Mesh:
    """Rectangular plate whose faces skip cells touching a hole.

    The top and bottom faces are tiled with square cells of side
    ``max(width, height) / cells``; a cell is left out when any of its corners
    lies inside a hole. The four side walls are whole quads. Without holes
    this is just :func:`box_plate`.

    Args:
        width: Plate width
        height: Plate height
        thickness: Plate thickness
        holes: Holes whose cells are left open
        cells: Grid cells along the longer side

    Returns:
        Plate mesh
    """
    if not holes:
        return box_plate(width, height, thickness)

    mesh = Mesh()
    w, h = width / 2, height / 2
    top, bottom = thickness / 2, -thickness / 2
    size = max(width, height) / max(1, cells)

    for i in range(math.ceil(width / size - 1e-9)):
        x1 = -w + i * size
        x2 = min(w, x1 + size)
        for j in range(math.ceil(height / size - 1e-9)):
            y1 = -h + j * size
            y2 = min(h, y1 + size)
            corners = ((x1, y1), (x2, y1), (x2, y2), (x1, y2))
            if any(hole.contains(cx, cy) for hole in holes for cx, cy in corners):
                continue
            mesh.add_quad((x1, y1, top), (x2, y1, top), (x2, y2, top), (x1, y2, top), UP)
            mesh.add_quad((x1, y1, bottom), (x1, y2, bottom), (x2, y2, bottom),
                          (x2, y1, bottom), DOWN)

    outline = [Point2D(-w, -h), Point2D(w, -h), Point2D(w, h), Point2D(-w, h)]
    for k in range(4):
        p1, p2 = outline[k], outline[(k + 1) % 4]
        side_wall(mesh, p1, p2, bottom, top, _edge_normal(p1, p2))

    return mesh


def backing_plate(settings: BackingPlateConfig) -> Mesh:
    """Mounting plate with hole walls, built from a settings record.

    Circle and hexagon plates use ``max(width, height)`` as their diameter,
    square plates use it as their side. Rounded rectangles with a positive
    corner radius get a rounded outline; otherwise the rectangular shapes
    are gridded so their faces stay open over the holes.

    Args:
        settings: Plate settings

    Returns:
        Plate mesh including all hole walls
    """
    size = max(settings.width, settings.height)
    thickness = settings.thickness
    if settings.shape is PlateShape.SQUARE:
        width = height = size
    else:
        width, height = settings.width, settings.height

    holes: list[Hole] = []
    if settings.hole_diameter > 0:
        holes = [
            Hole(x, y, settings.hole_diameter / 2)
            for x, y in hole_centers(
                settings.hole_pattern, width, height, settings.hole_inset, settings.grid_spacing
            )
        ]

    if settings.shape is PlateShape.CIRCLE:
        mesh = disc_plate(size, thickness, settings.segments)
    elif settings.shape is PlateShape.HEXAGON:
        mesh = polygon_plate(regular_polygon(HEXAGON_SIDES, size), thickness)
    elif settings.shape is PlateShape.ROUNDED_RECT and settings.corner_radius > 0:
        outline = rounded_rectangle(width, height, settings.corner_radius)
        mesh = polygon_plate(outline, thickness)
    else:
        mesh = gridded_plate(width, height, thickness, holes)

    for hole in holes:
        mesh.extend(cylindrical_hole(hole.x, hole.y, hole.radius, thickness,
                                     settings.hole_segments))

    return mesh
