"""Unit tests for Zhang-Suen thinning and skeleton path extraction."""

import math

import pytest

from signcraft.core.thinning import (
    count_components,
    extract_skeleton_paths,
    neighbor_count,
    thin,
    transitions,
)
from signcraft.domain import BinaryRaster, Point2D


def _raster(width: int, height: int, pixels) -> BinaryRaster:
    raster = BinaryRaster(width, height)
    for x, y in pixels:
        raster.data[y * width + x] = 1
    return raster


@pytest.fixture
def horizontal_bar() -> BinaryRaster:
    """A 160 x 20 bar spanning rows 15..34 of a 200 x 50 image."""
    return _raster(200, 50, ((x, y) for x in range(20, 180) for y in range(15, 35)))


@pytest.fixture
def annulus() -> BinaryRaster:
    """A thick ring centred in a 60 x 60 image."""
    return _raster(
        60, 60,
        ((x, y) for x in range(60) for y in range(60)
         if 12 <= math.hypot(x - 30, y - 30) <= 22),
    )


class TestTransitions:
    """Tests for the A(P1) transition count."""

    def test_single_run(self) -> None:
        """Test one contiguous run of foreground gives one transition."""
        assert transitions((0, 1, 1, 1, 0, 0, 0, 0)) == 1

    def test_alternating(self) -> None:
        """Test alternating neighbours give four transitions."""
        assert transitions((0, 1, 0, 1, 0, 1, 0, 1)) == 4

    def test_wraparound(self) -> None:
        """Test the sequence is treated as circular."""
        assert transitions((1, 1, 0, 0, 0, 0, 0, 0)) == 1
        assert transitions((1, 0, 0, 0, 0, 0, 0, 1)) == 1


class TestThin:
    """Tests for thin."""

    def test_bar_centerline(self, horizontal_bar: BinaryRaster) -> None:
        """Test the longest skeleton path runs along the middle of the bar."""
        skeleton = thin(horizontal_bar)
        paths = extract_skeleton_paths(skeleton)
        longest = max(paths, key=len)

        ys = [p.y for p in longest]
        mean_y = sum(ys) / len(ys)
        variance = sum((y - mean_y) ** 2 for y in ys) / len(ys)
        assert mean_y == pytest.approx(25, abs=1.5)
        assert variance < 2
        assert longest.length() > 100

    def test_bar_stays_connected(self, horizontal_bar: BinaryRaster) -> None:
        """Test thinning keeps the bar a single component."""
        skeleton = thin(horizontal_bar)
        assert count_components(skeleton) == 1
        assert 0 < skeleton.foreground_count() < horizontal_bar.foreground_count()

    def test_annulus_stays_connected(self, annulus: BinaryRaster) -> None:
        """Test a ring thins to a single connected loop."""
        skeleton = thin(annulus)
        assert count_components(skeleton) == 1
        assert count_components(annulus) == 1
        assert skeleton.get(30, 30) == 0
        assert skeleton.foreground_count() < annulus.foreground_count() // 4

    def test_separate_shapes_stay_separate(self) -> None:
        """Test two blobs thin to two components."""
        blobs = _raster(
            40, 20,
            [(x, y) for x in range(3, 9) for y in range(2, 18)]
            + [(x, y) for x in range(25, 31) for y in range(2, 18)],
        )
        assert count_components(thin(blobs)) == 2

    def test_input_not_modified(self, horizontal_bar: BinaryRaster) -> None:
        """Test thinning works on a copy."""
        before = bytes(horizontal_bar.data)
        thin(horizontal_bar)
        assert bytes(horizontal_bar.data) == before

    def test_one_pixel_line_unchanged(self) -> None:
        """Test an already-thin line has nothing to remove."""
        line = _raster(20, 5, ((x, 2) for x in range(2, 18)))
        assert thin(line).data == line.data

    def test_iteration_cap(self, horizontal_bar: BinaryRaster) -> None:
        """Test the iteration cap stops thinning early."""
        partial = thin(horizontal_bar, max_iterations=1)
        full = thin(horizontal_bar)
        assert partial.foreground_count() > full.foreground_count()
        assert thin(horizontal_bar, max_iterations=0).data == horizontal_bar.data

    def test_tiny_raster(self) -> None:
        """Test rasters smaller than 3x3 are returned unchanged."""
        tiny = BinaryRaster.from_rows([[1, 1], [1, 1]])
        assert thin(tiny).data == tiny.data


class TestCountComponents:
    """Tests for count_components."""

    def test_empty(self) -> None:
        """Test an empty raster has no components."""
        assert count_components(BinaryRaster(5, 5)) == 0

    def test_diagonal_touch_is_connected(self) -> None:
        """Test diagonal neighbours belong to the same component."""
        raster = BinaryRaster.from_rows([[1, 0, 0], [0, 1, 0], [0, 0, 1]])
        assert count_components(raster) == 1

    def test_neighbor_count(self) -> None:
        """Test 8-connected neighbour counting at the centre and at the edge."""
        raster = BinaryRaster.from_rows([[1, 1, 0], [0, 1, 0], [0, 0, 1]])
        assert neighbor_count(raster, 1, 1) == 3
        assert neighbor_count(raster, 0, 0) == 2


class TestExtractSkeletonPaths:
    """Tests for extract_skeleton_paths."""

    def test_straight_line(self) -> None:
        """Test a straight line becomes one open path between its endpoints."""
        line = _raster(20, 11, ((x, 5) for x in range(2, 18)))
        paths = extract_skeleton_paths(line)
        assert len(paths) == 1
        assert len(paths[0]) == 16
        assert not paths[0].closed
        assert {paths[0].start, paths[0].end} == {Point2D(2, 5), Point2D(17, 5)}

    def test_junction_splits_branches(self) -> None:
        """Test a T junction yields one chain per branch and covers every pixel."""
        pixels = [(x, 5) for x in range(2, 19)] + [(10, y) for y in range(6, 16)]
        tee = _raster(21, 18, pixels)
        paths = extract_skeleton_paths(tee)

        assert len(paths) >= 3
        ends = {p.start for p in paths} | {p.end for p in paths}
        for tip in (Point2D(2, 5), Point2D(18, 5), Point2D(10, 15)):
            assert tip in ends

        covered = {(int(p.x), int(p.y)) for path in paths for p in path}
        assert covered == set(pixels)

    def test_loop_is_closed(self) -> None:
        """Test a loop without endpoints becomes one closed path."""
        diamond = _raster(
            13, 13,
            ((x, y) for x in range(13) for y in range(13) if abs(x - 6) + abs(y - 6) == 4),
        )
        paths = extract_skeleton_paths(diamond)
        assert len(paths) == 1
        assert paths[0].closed
        assert len(paths[0]) == 17
        assert paths[0].start == paths[0].end

    def test_min_length_filters(self) -> None:
        """Test isolated pixels are dropped."""
        raster = _raster(10, 10, [(5, 5)])
        assert extract_skeleton_paths(raster) == []

    def test_empty_skeleton(self) -> None:
        """Test an empty skeleton yields no paths."""
        assert extract_skeleton_paths(BinaryRaster(10, 10)) == []
