"""STL serialization of triangle meshes.

Binary layout: an 80-byte header holding the name (truncated, zero-filled),
a little-endian uint32 triangle count, then 50 bytes per triangle (normal,
v1, v2, v3 as float32 triples and a zero uint16 attribute).

ASCII layout: ``solid <name>``, one ``facet normal ... endfacet`` block per
triangle with six-decimal fixed-point numbers, ``endsolid <name>``.

Triangles without a normal get one computed from their winding; degenerate
triangles get the zero vector. NaN is never written.
"""

import math
import re
import struct
from enum import Enum
from pathlib import Path

from signcraft.domain import Mesh, Triangle, Vector3, face_normal
from signcraft.exceptions import STLFormatError

HEADER_SIZE = 80
COUNT_SIZE = 4
TRIANGLE_SIZE = 50

_TRIANGLE_STRUCT = struct.Struct("<12fH")
_COUNT_STRUCT = struct.Struct("<I")

_NUMBER = r"([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)"
_VERTEX = rf"vertex\s+{_NUMBER}\s+{_NUMBER}\s+{_NUMBER}\s+"
_FACET_RE = re.compile(
    rf"facet\s+normal\s+{_NUMBER}\s+{_NUMBER}\s+{_NUMBER}\s+outer\s+loop\s+"
    + _VERTEX * 3
    + r"endloop\s+endfacet",
    re.IGNORECASE,
)


class STLFormat(str, Enum):
    """STL encoding."""

    BINARY = "binary"
    ASCII = "ascii"


def _export_normal(triangle: Triangle) -> Vector3:
    normal = triangle.normal
    if normal.length() == 0.0 or not all(math.isfinite(c) for c in normal):
        normal = face_normal(triangle.v1, triangle.v2, triangle.v3)
    if not all(math.isfinite(c) for c in normal):
        return Vector3(0.0, 0.0, 0.0)
    return normal


def _header(name: str) -> bytes:
    return name.encode("ascii", errors="replace")[:HEADER_SIZE].ljust(HEADER_SIZE, b"\0")


def write_binary(mesh: Mesh, name: str = "signcraft") -> bytes:
    """Encode a mesh as binary STL."""
    chunks = [_header(name), _COUNT_STRUCT.pack(len(mesh))]
    for tri in mesh:
        chunks.append(_TRIANGLE_STRUCT.pack(*_export_normal(tri), *tri.v1, *tri.v2, *tri.v3, 0))
    return b"".join(chunks)


def write_ascii(mesh: Mesh, name: str = "signcraft") -> bytes:
    """Encode a mesh as ASCII STL."""
    lines = [f"solid {name}"]
    for tri in mesh:
        n = _export_normal(tri)
        lines.append(f"  facet normal {n.x:.6f} {n.y:.6f} {n.z:.6f}")
        lines.append("    outer loop")
        for v in (tri.v1, tri.v2, tri.v3):
            lines.append(f"      vertex {v.x:.6f} {v.y:.6f} {v.z:.6f}")
        lines.append("    endloop")
        lines.append("  endfacet")
    lines.append(f"endsolid {name}")
    return ("\n".join(lines) + "\n").encode("ascii", errors="replace")


def write_stl(mesh: Mesh, name: str = "signcraft",
              format: STLFormat | str = STLFormat.BINARY) -> bytes:
    """Serialize a mesh to STL bytes.

    Args:
        mesh: Triangles to write
        name: Solid name stored in the header
        format: ``binary`` or ``ascii``

    Returns:
        Encoded STL document

    Raises:
        STLFormatError: If the format is unknown
    """
    try:
        stl_format = STLFormat(format)
    except ValueError as e:
        raise STLFormatError(f"unknown format '{format}'") from e

    if stl_format is STLFormat.ASCII:
        return write_ascii(mesh, name)
    return write_binary(mesh, name)


def save_stl(mesh: Mesh, path: Path, name: str | None = None,
             format: STLFormat | str = STLFormat.BINARY) -> int:
    """Write a mesh to a file.

    Args:
        mesh: Triangles to write
        path: Output file
        name: Solid name (defaults to the file stem)
        format: ``binary`` or ``ascii``

    Returns:
        Number of bytes written
    """
    data = write_stl(mesh, name or path.stem, format)
    path.write_bytes(data)
    return len(data)


def read_triangle_count(data: bytes) -> int:
    """Triangle count stored in a binary STL header.

    Raises:
        STLFormatError: If the data is shorter than a header
    """
    if len(data) < HEADER_SIZE + COUNT_SIZE:
        raise STLFormatError("data shorter than the 84-byte binary header")
    return _COUNT_STRUCT.unpack_from(data, HEADER_SIZE)[0]


def read_binary_stl(data: bytes) -> Mesh:
    """Decode binary STL.

    Raises:
        STLFormatError: If the data is truncated
    """
    count = read_triangle_count(data)
    expected = HEADER_SIZE + COUNT_SIZE + count * TRIANGLE_SIZE
    if len(data) < expected:
        raise STLFormatError(f"expected {expected} bytes for {count} triangles, got {len(data)}")

    mesh = Mesh()
    offset = HEADER_SIZE + COUNT_SIZE
    for _ in range(count):
        values = _TRIANGLE_STRUCT.unpack_from(data, offset)
        mesh.add_triangle(values[3:6], values[6:9], values[9:12], values[0:3])
        offset += TRIANGLE_SIZE
    return mesh


def read_ascii_stl(data: bytes | str) -> Mesh:
    """Decode ASCII STL.

    Raises:
        STLFormatError: If the text does not start with ``solid``
    """
    text = data.decode("ascii", errors="replace") if isinstance(data, bytes) else data
    if not text.lstrip().lower().startswith("solid"):
        raise STLFormatError("ASCII STL must start with 'solid'")

    mesh = Mesh()
    for match in _FACET_RE.finditer(text):
        values = [float(v) for v in match.groups()]
        mesh.add_triangle(values[3:6], values[6:9], values[9:12], values[0:3])
    return mesh


def read_stl(data: bytes) -> Mesh:
    """Decode STL, detecting the encoding.

    Data whose size matches the binary count is read as binary even when the
    header happens to start with ``solid``.
    """
    if len(data) >= HEADER_SIZE + COUNT_SIZE:
        count = read_triangle_count(data)
        if len(data) == HEADER_SIZE + COUNT_SIZE + count * TRIANGLE_SIZE:
            return read_binary_stl(data)
    return read_ascii_stl(data)
