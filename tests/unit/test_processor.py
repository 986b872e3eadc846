"""Tests for pipeline orchestration."""

from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from signcraft.config import BackingPlateConfig, SignCraftSettings
from signcraft.core.processor import SignProcessor
from signcraft.domain import BinaryRaster, PathCommand
from signcraft.exceptions import EmptyRequestError, ImageLoadError, TriangulationError

SQUARE_COMMANDS = [
    PathCommand("M", (0, 0)),
    PathCommand("L", (500, 0)),
    PathCommand("L", (500, 500)),
    PathCommand("L", (0, 500)),
    PathCommand("Z"),
]


@pytest.fixture
def processor() -> SignProcessor:
    """Processor with default settings and a mock logger."""
    return SignProcessor(SignCraftSettings(), logger=MagicMock())


def _block_raster(width: int, height: int, x0: int, y0: int, x1: int, y1: int) -> BinaryRaster:
    raster = BinaryRaster(width, height)
    for y in range(y0, y1):
        for x in range(x0, x1):
            raster.data[y * width + x] = 1
    return raster


def _covers(tri, x: float, y: float) -> bool:
    def side(a, b) -> float:
        return (b.x - a.x) * (y - a.y) - (b.y - a.y) * (x - a.x)

    signs = [side(tri.v1, tri.v2), side(tri.v2, tri.v3), side(tri.v3, tri.v1)]
    return all(s > 0 for s in signs) or all(s < 0 for s in signs)


class TestStages:
    """Tests for stage timing."""

    def test_failed_stage_is_timed(self, processor, tmp_path):
        """Test a stage that raises is logged as failed with its duration."""
        with pytest.raises(ImageLoadError):
            processor.trace(tmp_path / "missing.png")

        assert "load_image" in processor.stats.stage_durations_ms
        assert processor.stats.stage_count == 0
        processor.logger.warning.assert_called_once()
        assert processor.logger.warning.call_args.args[0] == "Stage failed"
        assert processor.logger.warning.call_args.kwargs["error_type"] == "ImageLoadError"


class TestPlate:
    """Tests for plate generation."""

    def test_default_plate(self, processor):
        """Test the default plate is produced and counted."""
        mesh = processor.plate()
        assert len(mesh) > 12
        assert processor.stats.triangle_count == len(mesh)
        assert processor.stats.stage_durations_ms.keys() == {"plate"}

    def test_explicit_settings(self, processor):
        """Test settings passed in override the configured plate."""
        mesh = processor.plate(BackingPlateConfig(shape="circle", hole_pattern="none"))
        assert len(mesh) == 128


class TestLithophane:
    """Tests for lithophane generation."""

    def test_from_rgb(self, processor):
        """Test an RGB array becomes a heightfield slab."""
        rgb = np.zeros((3, 4, 3))
        mesh = processor.lithophane_from_rgb(rgb)
        assert len(mesh) == 4 * 3 * 2 + 4 * (3 + 2)
        _, high = mesh.bounds()
        assert high.z == pytest.approx(3.2)

    def test_too_small(self, processor):
        """Test a single-row image is an empty request."""
        with pytest.raises(EmptyRequestError):
            processor.lithophane_from_rgb(np.zeros((1, 5, 3)))


class TestTrace:
    """Tests for raster tracing."""

    def test_block(self, processor):
        """Test a filled block is traced and extruded in millimeters."""
        raster = _block_raster(60, 50, 10, 10, 50, 40)
        mesh = processor.trace_raster(raster)

        assert len(mesh) >= 12
        low, high = mesh.bounds()
        assert 0 <= low.x and high.x <= 30
        assert 0 <= low.y and high.y <= 25
        assert (low.z, high.z) == (0.0, 5.0)
        assert processor.stats.path_count == 1

    def test_block_with_hole(self, processor):
        """Test an inner boundary becomes a hole rather than a second solid."""
        raster = _block_raster(60, 60, 5, 5, 55, 55)
        for y in range(20, 40):
            for x in range(20, 40):
                raster.data[y * 60 + x] = 0
        mesh = processor.trace_raster(raster)
        assert processor.stats.path_count == 2
        assert processor.stats.error_count == 0
        # The hole center (15, 15) mm stays open
        caps = [tri for tri in mesh if tri.normal.z == 1]
        assert caps
        assert not any(_covers(tri, 15.0, 15.0) for tri in caps)

    def test_empty_raster(self, processor):
        """Test a blank image is an empty request."""
        with pytest.raises(EmptyRequestError):
            processor.trace_raster(BinaryRaster(30, 30))


class TestSkeleton:
    """Tests for centerline tubes."""

    def test_bar(self, processor):
        """Test a bar becomes a tube resting on the build plate."""
        raster = _block_raster(120, 40, 10, 15, 110, 25)
        mesh = processor.skeleton_raster(raster)
        assert len(mesh) > 0
        low, high = mesh.bounds()
        assert low.z == pytest.approx(0.0, abs=1e-6)
        assert high.z == pytest.approx(6.0, abs=1e-6)
        assert processor.stats.path_count >= 1

    def test_empty_raster(self, processor):
        """Test a blank image has no centerlines."""
        with pytest.raises(EmptyRequestError):
            processor.skeleton_raster(BinaryRaster(30, 30))


class TestShape:
    """Tests for SVG path extrusion."""

    def test_square(self, processor):
        """Test a square path becomes a 12-triangle prism."""
        mesh = processor.shape("M0 0 L10 0 L10 10 L0 10 Z")
        assert len(mesh) == 12
        low, high = mesh.bounds()
        assert (low.y, high.y) == (-10.0, 0.0)
        assert high.z == 5.0

    def test_square_with_hole(self, processor):
        """Test a nested sub-path is cut out even with the same winding."""
        mesh = processor.shape("M0 0 H20 V20 H0 Z M5 5 H15 V15 H5 Z")
        assert len(mesh) == 32

    def test_scale(self):
        """Test the extrusion scale is applied to coordinates."""
        settings = SignCraftSettings()
        settings.extrusion.scale = 2.0
        processor = SignProcessor(settings, logger=MagicMock())
        low, high = processor.shape("M0 0 L10 0 L10 10 Z").bounds()
        assert high.x - low.x == pytest.approx(20.0)

    @pytest.mark.parametrize("path_data", ["", "M0 0 L10 0"])
    def test_no_outline(self, processor, path_data):
        """Test path data without an area is an empty request."""
        with pytest.raises(EmptyRequestError):
            processor.shape(path_data)

    def test_triangulation_failure_is_recorded(self, processor):
        """Test a shape that fails to triangulate is logged and skipped."""
        with patch(
            "signcraft.core.processor.extrude_polygon",
            side_effect=TriangulationError("bad ring"),
        ):
            with pytest.raises(EmptyRequestError):
                processor.shape("M0 0 L10 0 L10 10 L0 10 Z")
        assert processor.stats.error_count == 1
        assert processor.stats.errors[0][0] == "shape 0"


class TestText:
    """Tests for text rendering."""

    def _reader(self, characters: int = 1) -> MagicMock:
        reader = MagicMock()
        reader.units_per_em = 1000
        reader.text_commands.return_value = [list(SQUARE_COMMANDS)] * characters
        return reader

    def test_blank_text(self, processor, tmp_path):
        """Test blank text fails before the font is opened."""
        with pytest.raises(EmptyRequestError):
            processor.text(tmp_path / "missing.ttf", "   ")

    @patch("signcraft.core.processor.FontReader")
    def test_extruded(self, mock_reader_cls, processor, tmp_path):
        """Test glyph outlines are scaled to the em size and extruded."""
        reader = self._reader()
        mock_reader_cls.return_value = reader

        mesh = processor.text(tmp_path / "font.ttf", "O", size=40.0)

        assert len(mesh) == 12
        low, high = mesh.bounds()
        assert high.x - low.x == pytest.approx(20.0)
        reader.load.assert_called_once()
        reader.close.assert_called_once()

    @patch("signcraft.core.processor.FontReader")
    def test_tubes(self, mock_reader_cls, processor, tmp_path):
        """Test tube mode sweeps tubes along the outlines."""
        mock_reader_cls.return_value = self._reader()

        mesh = processor.text(tmp_path / "font.ttf", "O", size=40.0, tubes=True)

        assert len(mesh) > 12
        low, _ = mesh.bounds()
        assert low.z == pytest.approx(0.0, abs=1e-6)

    @patch("signcraft.core.processor.FontReader")
    def test_reader_closed_on_error(self, mock_reader_cls, processor, tmp_path):
        """Test the font is released even when layout fails."""
        reader = self._reader()
        reader.text_commands.side_effect = RuntimeError("boom")
        mock_reader_cls.return_value = reader

        with pytest.raises(RuntimeError):
            processor.text(tmp_path / "font.ttf", "A")
        reader.close.assert_called_once()


class TestCenterlineText:
    """Tests for single-line centerline text."""

    def test_bar_runs_down_the_middle(self, processor, font_path):
        """Test a bar glyph is thinned to one line along its middle."""
        with patch.object(processor, "_tubes", wraps=processor._tubes) as tubes:
            mesh = processor.text(font_path, "I", size=40.0, centerline=True)

        # The bar spans x 4..10 mm and y 0..28 mm
        lines = tubes.call_args.args[0]
        longest = max(lines, key=lambda line: line.length())
        xs = [p.x for p in longest]
        mean_x = sum(xs) / len(xs)
        assert mean_x == pytest.approx(7.0, abs=0.75)
        assert sum((x - mean_x) ** 2 for x in xs) / len(xs) < 1
        assert longest.length() > 15
        for line in lines:
            for p in line:
                assert 3.5 <= p.x <= 10.5
                assert -0.5 <= p.y <= 28.5

        low, high = mesh.bounds()
        assert low.z == pytest.approx(0.0, abs=1e-6)
        assert high.z == pytest.approx(6.0, abs=1e-6)
        assert {"rasterize", "thin", "extract_paths"} <= processor.stats.stage_durations_ms.keys()

    def test_counter_stays_open(self, processor, font_path):
        """Test the centerline of a glyph with a counter avoids the counter."""
        with patch.object(processor, "_tubes", wraps=processor._tubes) as tubes:
            processor.text(font_path, "O", size=40.0, centerline=True)

        # The counter spans x 10..18 mm and y 8..20 mm
        lines = tubes.call_args.args[0]
        assert lines
        for line in lines:
            for p in line:
                assert not (10.5 < p.x < 17.5 and 8.5 < p.y < 19.5)

    def test_one_group_per_glyph(self, processor, font_path):
        """Test each glyph is connected on its own and spaces are skipped."""
        with patch.object(processor, "_tubes", wraps=processor._tubes) as tubes:
            processor.text(font_path, "I I", size=40.0, centerline=True, tubes=True)
        assert tubes.call_count == 2


class TestExport:
    """Tests for STL export."""

    def test_binary(self, processor, tmp_path):
        """Test the file size matches the triangle count."""
        mesh = processor.plate(BackingPlateConfig(hole_pattern="none"))
        output = tmp_path / "plate.stl"
        size = processor.export(mesh, output)
        assert size == 84 + 50 * len(mesh) == output.stat().st_size
        assert processor.stats.output_bytes == size

    def test_ascii(self, processor, tmp_path):
        """Test ASCII export names the solid after the file."""
        mesh = processor.plate(BackingPlateConfig(hole_pattern="none"))
        output = tmp_path / "sign.stl"
        processor.export(mesh, output, format="ascii")
        assert output.read_text().startswith("solid sign")
