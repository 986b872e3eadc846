"""Unit tests for plates, hole walls and hole layouts."""

import math

import pytest

from signcraft.config import BackingPlateConfig, HolePattern, PlateShape
from signcraft.core.primitives import (
    Hole,
    backing_plate,
    box_plate,
    cylindrical_hole,
    disc_plate,
    gridded_plate,
    hole_centers,
    polygon_plate,
    regular_polygon,
    rounded_rectangle,
)
from signcraft.domain import Mesh, Path, face_normal


def assert_normals_follow_winding(mesh: Mesh) -> None:
    """Every stored normal agrees with the right-hand-rule winding."""
    for tri in mesh:
        if tri.is_degenerate():
            continue
        assert face_normal(tri.v1, tri.v2, tri.v3).dot(tri.normal) > 0.99


class TestBoxPlate:
    """Tests for box_plate."""

    def test_twelve_triangles(self) -> None:
        """Test a box has two triangles per face."""
        assert len(box_plate(100, 50, 3)) == 12

    def test_extent(self) -> None:
        """Test the box is centered on the given point."""
        low, high = box_plate(10, 20, 4, center=(5, 0, 2)).bounds()
        assert tuple(low) == (0, -10, 0)
        assert tuple(high) == (10, 10, 4)

    def test_normals(self) -> None:
        """Test normals agree with winding and point outward."""
        mesh = box_plate(10, 10, 2)
        assert_normals_follow_winding(mesh)
        for tri in mesh:
            centroid_x = (tri.v1.x + tri.v2.x + tri.v3.x) / 3
            centroid_y = (tri.v1.y + tri.v2.y + tri.v3.y) / 3
            centroid_z = (tri.v1.z + tri.v2.z + tri.v3.z) / 3
            outward = (centroid_x * tri.normal.x + centroid_y * tri.normal.y
                       + centroid_z * tri.normal.z)
            assert outward > 0


class TestDiscPlate:
    """Tests for disc_plate."""

    def test_triangle_count(self) -> None:
        """Test four triangles per segment."""
        assert len(disc_plate(100, 3, segments=32)) == 128

    def test_minimum_segments(self) -> None:
        """Test segment count is clamped to three."""
        assert len(disc_plate(10, 1, segments=1)) == 12

    def test_normals(self) -> None:
        """Test fan and wall normals agree with winding."""
        assert_normals_follow_winding(disc_plate(50, 3, segments=16))


class TestPolygonPlate:
    """Tests for polygon_plate."""

    def test_hexagon(self) -> None:
        """Test a hexagon has six fan triangles per cap and two per wall."""
        mesh = polygon_plate(regular_polygon(6, 100), 3)
        assert len(mesh) == 6 * 4
        assert_normals_follow_winding(mesh)

    def test_degenerate(self) -> None:
        """Test fewer than three vertices give an empty mesh."""
        assert len(polygon_plate(regular_polygon(2, 10), 1)) == 0


class TestRoundedRectangle:
    """Tests for rounded_rectangle."""

    def test_counter_clockwise(self) -> None:
        """Test the outline winds counter-clockwise."""
        outline = rounded_rectangle(100, 50, 10)
        assert Path(outline).signed_area() > 0

    def test_area_close_to_expected(self) -> None:
        """Test the area is the rectangle minus the rounded-off corners."""
        outline = rounded_rectangle(100, 50, 10, arc_segments=32)
        expected = 100 * 50 - (4 - math.pi) * 10 * 10
        assert Path(outline).signed_area() == pytest.approx(expected, rel=1e-3)

    def test_radius_clamped(self) -> None:
        """Test radius larger than half a side is clamped."""
        outline = rounded_rectangle(20, 10, 50)
        xs = [p.x for p in outline]
        ys = [p.y for p in outline]
        assert max(xs) == pytest.approx(10)
        assert max(ys) == pytest.approx(5)

    def test_zero_radius_is_rectangle(self) -> None:
        """Test zero radius gives four corners."""
        assert len(rounded_rectangle(20, 10, 0)) == 4

    def test_no_coincident_points(self) -> None:
        """Test arc joins do not repeat points."""
        outline = rounded_rectangle(20, 20, 10)
        assert all(not a.is_close(b) for a, b in zip(outline, outline[1:] + outline[:1]))


class TestCylindricalHole:
    """Tests for cylindrical_hole."""

    def test_triangle_count(self) -> None:
        """Test two triangles per wall facet."""
        assert len(cylindrical_hole(0, 0, 2, 3, segments=16)) == 32

    def test_normals_face_axis(self) -> None:
        """Test wall normals point toward the hole axis."""
        mesh = cylindrical_hole(5, -5, 2, 3, segments=12)
        assert_normals_follow_winding(mesh)
        for tri in mesh:
            mid_x = (tri.v1.x + tri.v2.x + tri.v3.x) / 3 - 5
            mid_y = (tri.v1.y + tri.v2.y + tri.v3.y) / 3 + 5
            assert mid_x * tri.normal.x + mid_y * tri.normal.y < 0

    def test_height(self) -> None:
        """Test the wall spans the plate thickness."""
        low, high = cylindrical_hole(0, 0, 1, 4).bounds()
        assert low.z == -2
        assert high.z == 2


class TestHoleCenters:
    """Tests for hole_centers."""

    def test_corners(self) -> None:
        """Test the corner layout has four holes at the inset."""
        centers = hole_centers(HolePattern.CORNERS, 200, 100, 10, 50)
        assert sorted(centers) == [(-90, -40), (-90, 40), (90, -40), (90, 40)]

    def test_none(self) -> None:
        """Test the empty layout."""
        assert hole_centers("none", 200, 100, 10, 50) == []

    @pytest.mark.parametrize("pattern", [HolePattern.GRID, HolePattern.PERIMETER])
    def test_inside_inset_rectangle(self, pattern: HolePattern) -> None:
        """Test grid and perimeter holes stay inside the inset rectangle."""
        centers = hole_centers(pattern, 200, 100, 10, 30)
        assert centers
        for x, y in centers:
            assert -90 - 1e-9 <= x <= 90 + 1e-9
            assert -40 - 1e-9 <= y <= 40 + 1e-9

    def test_grid_count(self) -> None:
        """Test grid steps by the spacing in both directions."""
        centers = hole_centers(HolePattern.GRID, 200, 100, 10, 60)
        # x: -90, -30, 30, 90; y: -40, 20
        assert len(centers) == 8

    def test_perimeter_no_duplicates(self) -> None:
        """Test corner holes are not repeated by the side columns."""
        centers = hole_centers(HolePattern.PERIMETER, 200, 100, 10, 20)
        assert len(centers) == len(set(centers))
        assert all(abs(x) == pytest.approx(90) or abs(y) == pytest.approx(40)
                   for x, y in centers)

    def test_inset_clamped(self) -> None:
        """Test an inset larger than the plate collapses toward the center."""
        centers = hole_centers(HolePattern.CORNERS, 20, 10, 100, 5)
        for x, y in centers:
            assert abs(x) <= 10
            assert abs(y) <= 5


class TestGriddedPlate:
    """Tests for gridded_plate."""

    def test_without_holes_is_box(self) -> None:
        """Test the plain plate is a 12-triangle box."""
        assert len(gridded_plate(100, 50, 3, [])) == 12

    def test_cells_skipped_over_holes(self) -> None:
        """Test faces over a hole are left open."""
        full_cells = 32 * 16
        mesh = gridded_plate(100, 50, 3, [Hole(0, 0, 5)], cells=32)
        face_triangles = len(mesh) - 8
        assert face_triangles < full_cells * 4
        assert face_triangles % 4 == 0
        assert_normals_follow_winding(mesh)


class TestBackingPlate:
    """Tests for backing_plate."""

    def test_default_rectangle_with_corner_holes(self) -> None:
        """Test the default plate includes four hole walls."""
        mesh = backing_plate(BackingPlateConfig())
        plate_only = gridded_plate(
            200, 100, 3, [Hole(x, y, 2) for x, y in hole_centers("corners", 200, 100, 10, 50)]
        )
        assert len(mesh) == len(plate_only) + 4 * 32

    def test_circle(self) -> None:
        """Test a circular plate without holes is a 32-segment disc."""
        settings = BackingPlateConfig(shape=PlateShape.CIRCLE, hole_pattern=HolePattern.NONE)
        assert len(backing_plate(settings)) == 128

    def test_hexagon(self) -> None:
        """Test hexagon plate triangle count."""
        settings = BackingPlateConfig(shape="hexagon", hole_pattern="none")
        assert len(backing_plate(settings)) == 24

    def test_square_uses_larger_side(self) -> None:
        """Test square plates are max(width, height) on each side."""
        settings = BackingPlateConfig(shape="square", width=80, height=40, hole_pattern="none")
        low, high = backing_plate(settings).bounds()
        assert high.x - low.x == pytest.approx(80)
        assert high.y - low.y == pytest.approx(80)

    def test_rounded_rectangle(self) -> None:
        """Test rounded plates stay within the plate rectangle."""
        settings = BackingPlateConfig(
            shape=PlateShape.ROUNDED_RECT, corner_radius=15, hole_pattern="none"
        )
        mesh = backing_plate(settings)
        low, high = mesh.bounds()
        assert high.x == pytest.approx(100)
        assert high.y == pytest.approx(50)
        assert len(mesh) > 12
        assert_normals_follow_winding(mesh)

    def test_zero_hole_diameter(self) -> None:
        """Test holes of zero diameter add no walls."""
        settings = BackingPlateConfig(hole_diameter=0)
        assert len(backing_plate(settings)) == 12
