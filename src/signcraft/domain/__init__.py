"""Domain models for signcraft.

This module contains the core value types passed between pipeline stages.
All models are designed to be:

- Immutable where possible (using frozen dataclasses)
- Created fresh per generation request and discarded after export
- Independent of image, font and STL library details

Key classes:
- Point2D: A 2D point
- Path: An ordered open or closed point sequence
- PathCommand: An unflattened drawing command
- BinaryRaster: A thresholded 0/1 image
- Vector3: A 3D point or direction
- Triangle: Three vertices plus a unit normal
- Mesh: A triangle soup
"""

from signcraft.domain.mesh import Mesh, Triangle, Vector3, face_normal
from signcraft.domain.path import Path, PathCommand, Point2D, total_length
from signcraft.domain.raster import BinaryRaster, Skeleton

__all__: list[str] = [
    # 2D types
    "Point2D",
    "Path",
    "PathCommand",
    "total_length",
    # Raster types
    "BinaryRaster",
    "Skeleton",
    # 3D types
    "Vector3",
    "Triangle",
    "Mesh",
    "face_normal",
]
