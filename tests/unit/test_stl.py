"""Unit tests for STL serialization."""

from pathlib import Path

import pytest

from signcraft.domain import Mesh, Triangle, Vector3
from signcraft.exceptions import STLFormatError
from signcraft.io.stl import (
    read_ascii_stl,
    read_binary_stl,
    read_stl,
    read_triangle_count,
    save_stl,
    write_stl,
)


@pytest.fixture
def mesh() -> Mesh:
    """Two triangles forming a unit square in the XY plane."""
    result = Mesh()
    result.add_quad((0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0))
    return result


class TestBinary:
    """Tests for binary STL."""

    def test_size(self, mesh: Mesh) -> None:
        """Test 84 header bytes plus 50 bytes per triangle."""
        data = write_stl(mesh)
        assert len(data) == 84 + 50 * 2
        assert read_triangle_count(data) == 2

    def test_empty_mesh(self) -> None:
        """Test an empty mesh is a bare header."""
        data = write_stl(Mesh())
        assert len(data) == 84
        assert read_triangle_count(data) == 0

    def test_header_name(self) -> None:
        """Test the name is stored zero-filled and truncated to 80 bytes."""
        assert write_stl(Mesh(), name="plate")[:6] == b"plate\0"
        assert write_stl(Mesh(), name="x" * 100)[:80] == b"x" * 80

    def test_read_back(self, mesh: Mesh) -> None:
        """Test vertices and normals survive encoding."""
        decoded = read_binary_stl(write_stl(mesh))
        assert len(decoded) == 2
        first = decoded.triangles[0]
        assert tuple(first.v2) == (1.0, 0.0, 0.0)
        assert tuple(first.normal) == (0.0, 0.0, 1.0)

    def test_truncated(self, mesh: Mesh) -> None:
        """Test truncated data is rejected."""
        with pytest.raises(STLFormatError):
            read_binary_stl(write_stl(mesh)[:-10])

    def test_short_header(self) -> None:
        """Test data shorter than the header is rejected."""
        with pytest.raises(STLFormatError):
            read_triangle_count(b"solid")


class TestAscii:
    """Tests for ASCII STL."""

    def test_layout(self, mesh: Mesh) -> None:
        """Test solid and endsolid lines and one facet per triangle."""
        text = write_stl(mesh, name="sign", format="ascii").decode("ascii")
        lines = text.strip().splitlines()
        assert lines[0] == "solid sign"
        assert lines[-1] == "endsolid sign"
        assert text.count("facet normal") == 2
        assert text.count("vertex") == 6
        assert "  facet normal 0.000000 0.000000 1.000000" in lines

    def test_read_back(self, mesh: Mesh) -> None:
        """Test ASCII output decodes to the same triangles."""
        decoded = read_ascii_stl(write_stl(mesh, format="ascii"))
        assert [tuple(t.v3) for t in decoded] == [tuple(t.v3) for t in mesh]

    def test_requires_solid(self) -> None:
        """Test text not starting with solid is rejected."""
        with pytest.raises(STLFormatError):
            read_ascii_stl("facet normal 0 0 1")


class TestNormals:
    """Tests for exported normals."""

    def test_degenerate_triangle_zero_normal(self) -> None:
        """Test collinear triangles are written with a zero normal."""
        flat = Mesh([Triangle(Vector3(0, 0, 0), Vector3(1, 0, 0), Vector3(2, 0, 0))])
        decoded = read_stl(write_stl(flat))
        assert tuple(decoded.triangles[0].normal) == (0.0, 0.0, 0.0)
        assert "nan" not in write_stl(flat, format="ascii").decode("ascii")

    def test_missing_normal_computed(self) -> None:
        """Test triangles stored without a normal get one from their winding."""
        tri = Triangle(Vector3(0, 0, 0), Vector3(0, 1, 0), Vector3(1, 0, 0))
        decoded = read_stl(write_stl(Mesh([tri])))
        assert tuple(decoded.triangles[0].normal) == (0.0, 0.0, -1.0)


class TestFormats:
    """Tests for format selection and detection."""

    def test_unknown_format(self, mesh: Mesh) -> None:
        """Test unknown formats raise STLFormatError."""
        with pytest.raises(STLFormatError, match="obj"):
            write_stl(mesh, format="obj")

    @pytest.mark.parametrize("stl_format", ["binary", "ascii"])
    def test_detection(self, mesh: Mesh, stl_format: str) -> None:
        """Test read_stl detects the encoding."""
        assert len(read_stl(write_stl(mesh, format=stl_format))) == 2

    def test_binary_header_starting_with_solid(self, mesh: Mesh) -> None:
        """Test binary data named 'solid' is still read as binary."""
        data = write_stl(mesh, name="solid model")
        assert data.startswith(b"solid")
        assert len(read_stl(data)) == 2

    def test_save(self, mesh: Mesh, tmp_path: Path) -> None:
        """Test save_stl writes the file and names the solid after it."""
        output = tmp_path / "badge.stl"
        written = save_stl(mesh, output, format="ascii")
        assert written == output.stat().st_size
        assert output.read_text().startswith("solid badge")
