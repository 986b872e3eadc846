"""Solid extrusion of planar outlines and tubes swept along centerlines.

Outlines (with optional holes) are triangulated with earcut and turned into
prisms: a bottom cap, a top cap and one vertical quad per ring edge. Rings
are normalized so outlines run counter-clockwise and holes clockwise, which
makes every side wall face out of the solid.

Centerlines are turned into round tubes by placing a ring of vertices
perpendicular to the path at every point and stitching consecutive rings.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass, field

import mapbox_earcut as earcut
import numpy as np

from signcraft.core.primitives import DOWN, UP, side_wall
from signcraft.domain import Mesh, Path, Point2D, Vector3
from signcraft.exceptions import TriangulationError

DEFAULT_TUBE_SEGMENTS = 12
MIN_RING_AREA = 1e-9


@dataclass
class Shape:
    """An outline and the holes it contains.

    Attributes:
        outline: Outer ring
        holes: Inner rings cut out of the outline
    """

    outline: Path
    holes: list[Path] = field(default_factory=list)


def _ring(path: Path) -> list[Point2D]:
    """Open ring without consecutive duplicates or a repeated start point."""
    points = path.deduplicated().points
    if len(points) > 1 and points[0].is_close(points[-1]):
        points = points[:-1]
    return points


def _oriented(points: list[Point2D], ccw: bool) -> list[Point2D]:
    if (Path(points).signed_area() > 0) != ccw:
        return list(reversed(points))
    return points


def point_in_polygon(point: Point2D, ring: Sequence[Point2D]) -> bool:
    """Even-odd ray casting test.

    Args:
        point: Query point
        ring: Polygon vertices (closed or open)

    Returns:
        True when the point is inside the polygon
    """
    inside = False
    n = len(ring)
    j = n - 1
    for i in range(n):
        pi, pj = ring[i], ring[j]
        if (pi.y > point.y) != (pj.y > point.y):
            x_cross = (pj.x - pi.x) * (point.y - pi.y) / (pj.y - pi.y) + pi.x
            if point.x < x_cross:
                inside = not inside
        j = i
    return inside


def _centroid(points: Sequence[Point2D]) -> Point2D:
    n = len(points)
    return Point2D(sum(p.x for p in points) / n, sum(p.y for p in points) / n)


def triangulate(outline: Sequence[Point2D], holes: Sequence[Sequence[Point2D]] = ()) -> np.ndarray:
    """Earcut triangulation of a polygon with holes.

    Args:
        outline: Outer ring, counter-clockwise
        holes: Inner rings, clockwise

    Returns:
        ``(N, 3)`` array of indices into the concatenated ring vertices,
        each triangle counter-clockwise

    Raises:
        TriangulationError: If earcut rejects the input
    """
    rings = [list(outline)] + [list(h) for h in holes]
    coords = np.asarray([(p.x, p.y) for ring in rings for p in ring], dtype=np.float64)
    ring_ends = np.cumsum([len(ring) for ring in rings]).astype(np.uint32)

    try:
        indices = earcut.triangulate_float64(coords.reshape(-1, 2), ring_ends)
    except (TypeError, ValueError) as e:
        raise TriangulationError(str(e)) from e

    faces = np.asarray(indices, dtype=np.int64).reshape(-1, 3)
    if len(faces) == 0:
        return faces

    a, b, c = coords[faces[:, 0]], coords[faces[:, 1]], coords[faces[:, 2]]
    area = (b[:, 0] - a[:, 0]) * (c[:, 1] - a[:, 1]) - (b[:, 1] - a[:, 1]) * (c[:, 0] - a[:, 0])
    clockwise = area < 0
    faces[clockwise] = faces[clockwise][:, ::-1]
    return faces


def extrude_polygon(outline: Path, holes: Sequence[Path] = (), depth: float = 5.0,
                    base_z: float = 0.0) -> Mesh:
    """Extrude a polygon with holes into a prism.

    Args:
        outline: Outer ring (any orientation)
        holes: Inner rings (any orientation)
        depth: Prism height
        base_z: Height of the bottom cap

    Returns:
        Mesh with caps and side walls; empty for degenerate outlines

    Raises:
        TriangulationError: If the caps cannot be triangulated
    """
    outer = _ring(outline)
    if len(outer) < 3 or abs(Path(outer).signed_area()) < MIN_RING_AREA:
        return Mesh()

    rings = [_oriented(outer, ccw=True)]
    for hole in holes:
        inner = _ring(hole)
        if len(inner) >= 3 and abs(Path(inner).signed_area()) >= MIN_RING_AREA:
            rings.append(_oriented(inner, ccw=False))

    vertices = [p for ring in rings for p in ring]
    faces = triangulate(rings[0], rings[1:])
    top = base_z + depth
    mesh = Mesh()

    for i, j, k in faces:
        a, b, c = vertices[i], vertices[j], vertices[k]
        mesh.add_triangle((a.x, a.y, top), (b.x, b.y, top), (c.x, c.y, top), UP)
        mesh.add_triangle((a.x, a.y, base_z), (c.x, c.y, base_z), (b.x, b.y, base_z), DOWN)

    for ring in rings:
        for n, p1 in enumerate(ring):
            side_wall(mesh, p1, ring[(n + 1) % len(ring)], base_z, top)

    return mesh


def classify_rings(rings: Sequence[Path], by_nesting: bool = False) -> list[Shape]:
    """Group closed rings into outlines with holes.

    By default counter-clockwise rings are outlines and clockwise rings are
    holes. With ``by_nesting`` the orientation is ignored and a ring nested
    inside an odd number of other rings is a hole, which suits traced
    rasters and fonts with either winding convention. Each hole is assigned
    to the smallest larger outline containing it; holes with no such
    outline are dropped.

    Args:
        rings: Closed rings
        by_nesting: Classify by containment depth instead of orientation

    Returns:
        Shapes in outline order
    """
    candidates = [(ring, _ring(ring)) for ring in rings]
    candidates = [(ring, pts) for ring, pts in candidates if len(pts) >= 3]

    outlines: list[tuple[Path, list[Point2D]]] = []
    holes: list[tuple[Path, list[Point2D]]] = []
    for ring, pts in candidates:
        if by_nesting:
            depth = sum(
                1 for other, other_pts in candidates
                if other is not ring and point_in_polygon(pts[0], other_pts)
            )
            is_hole = depth % 2 == 1
        else:
            is_hole = Path(pts).signed_area() < 0
        (holes if is_hole else outlines).append((ring, pts))

    shapes = [Shape(outline=ring) for ring, _ in outlines]
    areas = [abs(Path(pts).signed_area()) for _, pts in outlines]

    for hole, pts in holes:
        center = _centroid(pts)
        hole_area = abs(Path(pts).signed_area())
        owners = [
            i for i, (_, outline_pts) in enumerate(outlines)
            if areas[i] > hole_area
            and (point_in_polygon(center, outline_pts) or point_in_polygon(pts[0], outline_pts))
        ]
        if owners:
            smallest = min(owners, key=lambda i: areas[i])
            shapes[smallest].holes.append(hole)

    return shapes


def extrude_contours(contours: Sequence[Path], depth: float = 5.0, base_z: float = 0.0,
                     by_nesting: bool = False) -> Mesh:
    """Classify rings into shapes and extrude every shape.

    Args:
        contours: Closed rings
        depth: Extrusion height
        base_z: Height of the bottom caps
        by_nesting: See :func:`classify_rings`

    Returns:
        Merged mesh of all shapes
    """
    return Mesh.merge(
        extrude_polygon(shape.outline, shape.holes, depth, base_z)
        for shape in classify_rings(contours, by_nesting)
    )


def _tube_ring(center: Vector3, tangent: Vector3, radius: float,
               segments: int) -> list[Vector3]:
    side = Vector3(-tangent.y, tangent.x, 0.0).normalized()
    up = Vector3(0.0, 0.0, 1.0)
    ring = []
    for k in range(segments):
        theta = 2 * math.pi * k / segments
        offset = side.scaled(math.cos(theta) * radius) + up.scaled(math.sin(theta) * radius)
        ring.append(center + offset)
    return ring


def sweep_tube(path: Path, radius: float, segments: int = DEFAULT_TUBE_SEGMENTS,
               z: float | None = None, capped: bool = True) -> Mesh:
    """Sweep a round tube along a planar path.

    Rings are perpendicular to the local tangent (the average of the
    incoming and outgoing segment directions). Closed paths are joined back
    to their start and never capped.

    Args:
        path: Centerline in the XY plane
        radius: Tube radius
        segments: Facets around the tube (at least 3)
        z: Height of the centerline; defaults to ``radius`` so the tube
            rests on z=0
        capped: Close open ends with flat fans

    Returns:
        Tube mesh; empty when the path has fewer than two distinct points
    """
    closed = path.closed or path.is_geometrically_closed()
    points = _ring(path) if closed else path.deduplicated().points
    if closed and len(points) < 3:
        closed = False
    if len(points) < 2 or radius <= 0:
        return Mesh()

    segments = max(3, segments)
    height = radius if z is None else z
    n = len(points)
    centers = [Vector3(p.x, p.y, height) for p in points]

    rings: list[list[Vector3]] = []
    for i in range(n):
        if closed:
            prev, nxt = centers[i - 1], centers[(i + 1) % n]
        else:
            prev, nxt = centers[max(0, i - 1)], centers[min(n - 1, i + 1)]
        tangent = (nxt - prev).normalized()
        rings.append(_tube_ring(centers[i], tangent, radius, segments))

    mesh = Mesh()
    spans = n if closed else n - 1
    for i in range(spans):
        ring_a, ring_b = rings[i], rings[(i + 1) % n]
        for k in range(segments):
            k2 = (k + 1) % segments
            mesh.add_quad(ring_a[k], ring_a[k2], ring_b[k2], ring_b[k])

    if capped and not closed:
        start, end = centers[0], centers[-1]
        for k in range(segments):
            k2 = (k + 1) % segments
            mesh.add_triangle(start, rings[0][k2], rings[0][k])
            mesh.add_triangle(end, rings[-1][k], rings[-1][k2])

    return mesh
