"""Triangle soup types for mesh synthesis and STL export.

This module defines:
- Vector3: A 3D point or direction
- Triangle: Three vertices plus an outward unit normal
- Mesh: An ordered collection of self-contained triangles
"""

import math
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import NamedTuple

NORMAL_EPSILON = 1e-12


class Vector3(NamedTuple):
    """A point or direction in 3D space."""

    x: float
    y: float
    z: float

    def __sub__(self, other: "Vector3") -> "Vector3":  # type: ignore[override]
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __add__(self, other: "Vector3") -> "Vector3":  # type: ignore[override]
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def scaled(self, factor: float) -> "Vector3":
        """Multiply every component by ``factor``."""
        return Vector3(self.x * factor, self.y * factor, self.z * factor)

    def cross(self, other: "Vector3") -> "Vector3":
        """Cross product."""
        return Vector3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def dot(self, other: "Vector3") -> float:
        """Dot product."""
        return self.x * other.x + self.y * other.y + self.z * other.z

    def length(self) -> float:
        """Euclidean length."""
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def normalized(self) -> "Vector3":
        """Unit vector in the same direction; zero vector stays zero."""
        length = self.length()
        if length < NORMAL_EPSILON:
            return ZERO
        return Vector3(self.x / length, self.y / length, self.z / length)


ZERO = Vector3(0.0, 0.0, 0.0)


def face_normal(v1: Vector3, v2: Vector3, v3: Vector3) -> Vector3:
    """Unit normal of (v2 - v1) x (v3 - v1).

    Degenerate (zero-area) triangles get the zero vector, never NaN.
    """
    return (v2 - v1).cross(v3 - v1).normalized()


@dataclass(frozen=True, slots=True)
class Triangle:
    """A triangle with an outward unit normal.

    The winding v1 -> v2 -> v3 matches the normal under the right-hand rule.

    Attributes:
        v1: First vertex
        v2: Second vertex
        v3: Third vertex
        normal: Unit normal (zero vector for degenerate triangles)
    """

    v1: Vector3
    v2: Vector3
    v3: Vector3
    normal: Vector3 = ZERO

    @classmethod
    def from_vertices(cls, v1: Iterable[float], v2: Iterable[float],
                      v3: Iterable[float]) -> "Triangle":
        """Build a triangle and compute its normal from the winding."""
        a, b, c = Vector3(*v1), Vector3(*v2), Vector3(*v3)
        return cls(a, b, c, face_normal(a, b, c))

    def with_computed_normal(self) -> "Triangle":
        """Return a copy whose normal is recomputed from the vertices."""
        return Triangle(self.v1, self.v2, self.v3, face_normal(self.v1, self.v2, self.v3))

    def area(self) -> float:
        """Triangle area."""
        return (self.v2 - self.v1).cross(self.v3 - self.v1).length() / 2.0

    def is_degenerate(self) -> bool:
        """Check whether the triangle has (numerically) zero area."""
        return self.area() < NORMAL_EPSILON

    def flipped(self) -> "Triangle":
        """Reverse winding and normal."""
        n = self.normal
        return Triangle(self.v1, self.v3, self.v2, Vector3(-n.x, -n.y, -n.z))

    def translated(self, offset: Vector3) -> "Triangle":
        """Move all vertices by ``offset``."""
        return Triangle(self.v1 + offset, self.v2 + offset, self.v3 + offset, self.normal)


@dataclass
class Mesh:
    """An ordered collection of triangles.

    No vertex sharing or indexing: every triangle is self-contained.

    Attributes:
        triangles: Triangles in emission order
    """

    triangles: list[Triangle] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.triangles)

    def __iter__(self) -> Iterator[Triangle]:
        return iter(self.triangles)

    def add_triangle(self, v1: Iterable[float], v2: Iterable[float],
                     v3: Iterable[float], normal: Iterable[float] | None = None) -> None:
        """Append a triangle.

        Args:
            v1: First vertex
            v2: Second vertex
            v3: Third vertex
            normal: Explicit normal; computed from the winding when omitted
        """
        if normal is None:
            self.triangles.append(Triangle.from_vertices(v1, v2, v3))
        else:
            self.triangles.append(
                Triangle(Vector3(*v1), Vector3(*v2), Vector3(*v3), Vector3(*normal))
            )

    def add_quad(self, a: Iterable[float], b: Iterable[float], c: Iterable[float],
                 d: Iterable[float], normal: Iterable[float] | None = None) -> None:
        """Append quad a-b-c-d as triangles (a, b, c) and (a, c, d)."""
        a, b, c, d = tuple(a), tuple(b), tuple(c), tuple(d)
        self.add_triangle(a, b, c, normal)
        self.add_triangle(a, c, d, normal)

    def extend(self, other: "Mesh | Iterable[Triangle]") -> None:
        """Append all triangles from another mesh."""
        self.triangles.extend(other)

    def translated(self, dx: float = 0.0, dy: float = 0.0, dz: float = 0.0) -> "Mesh":
        """Return a copy moved by (dx, dy, dz)."""
        offset = Vector3(dx, dy, dz)
        return Mesh([t.translated(offset) for t in self.triangles])

    def bounds(self) -> tuple[Vector3, Vector3]:
        """Axis-aligned bounding box as (min, max)."""
        if not self.triangles:
            return ZERO, ZERO
        xs: list[float] = []
        ys: list[float] = []
        zs: list[float] = []
        for tri in self.triangles:
            for v in (tri.v1, tri.v2, tri.v3):
                xs.append(v.x)
                ys.append(v.y)
                zs.append(v.z)
        return Vector3(min(xs), min(ys), min(zs)), Vector3(max(xs), max(ys), max(zs))

    @classmethod
    def merge(cls, meshes: Iterable["Mesh"]) -> "Mesh":
        """Concatenate several meshes."""
        merged = cls()
        for mesh in meshes:
            merged.extend(mesh)
        return merged
