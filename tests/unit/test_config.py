"""Unit tests for configuration models."""

import pytest

from signcraft.config import (
    BackingPlateConfig,
    ConnectorConfig,
    HolePattern,
    LithophaneConfig,
    PlateShape,
    SamplingConfig,
    SignCraftSettings,
    TracingConfig,
    TubeConfig,
    get_default_settings,
)


class TestDefaults:
    """Tests for default settings."""

    def test_default_settings(self):
        """Test the defaults used by the CLI."""
        settings = get_default_settings()
        assert isinstance(settings, SignCraftSettings)
        assert settings.sampling.resolution == 100
        assert settings.tracing.threshold == 128
        assert settings.tracing.min_contour_length == 10
        assert settings.connector.max_gap_distance == 50.0
        assert settings.plate.shape is PlateShape.RECTANGLE
        assert settings.plate.hole_pattern is HolePattern.CORNERS
        assert settings.lithophane.base_thickness == 0.8
        assert settings.lithophane.max_depth == 2.4
        assert settings.logging.log_level == "WARNING"

    def test_enum_values_from_strings(self):
        """Test shapes and hole patterns accept their CLI spellings."""
        plate = BackingPlateConfig(shape="rounded-rect", hole_pattern="perimeter")
        assert plate.shape is PlateShape.ROUNDED_RECT
        assert plate.hole_pattern is HolePattern.PERIMETER


class TestClamping:
    """Tests for out-of-range values being clamped."""

    @pytest.mark.parametrize("value,expected", [(0, 1), (-5, 1), (50_000, 10_000), (300, 300)])
    def test_sampling_resolution(self, value, expected):
        """Test curve resolution is clamped."""
        assert SamplingConfig(resolution=value).resolution == expected

    def test_adaptive_tolerance_disabled(self):
        """Test non-positive tolerances fall back to fixed-step sampling."""
        assert SamplingConfig(adaptive_tolerance=0).adaptive_tolerance is None
        assert SamplingConfig(adaptive_tolerance=0.1).adaptive_tolerance == 0.1

    def test_tracing(self):
        """Test threshold, resolution and pixel size bounds."""
        tracing = TracingConfig(threshold=400, max_resolution=4, pixel_size=-1,
                                min_contour_length=-3)
        assert tracing.threshold == 255
        assert tracing.max_resolution == 16
        assert tracing.pixel_size == 0.5
        assert tracing.min_contour_length == 0

    def test_connector(self):
        """Test negative gaps and zero bridge segments."""
        connector = ConnectorConfig(max_gap_distance=-1, bridge_segments=0)
        assert connector.max_gap_distance == 0.0
        assert connector.bridge_segments == 1

    def test_tube(self):
        """Test tube radius and facet count."""
        tube = TubeConfig(radius=0, segments=1)
        assert tube.radius == 3.0
        assert tube.segments == 3

    def test_plate(self):
        """Test plate dimensions, hole sizes and spacing."""
        plate = BackingPlateConfig(width=0, thickness=-2, hole_diameter=-4, grid_spacing=0)
        assert plate.width == 0.1
        assert plate.thickness == 0.1
        assert plate.hole_diameter == 0.0
        assert plate.grid_spacing == 1.0

    def test_lithophane(self):
        """Test smoothing and resolution bounds."""
        settings = LithophaneConfig(smoothing=50, max_resolution=1, width=0)
        assert settings.smoothing == 10
        assert settings.max_resolution == 2
        assert settings.width == 1.0


class TestLithophaneFrame:
    """Tests for LithophaneConfig.frame."""

    def test_disabled(self):
        """Test no frame unless requested."""
        assert LithophaneConfig().frame() is None

    def test_enabled(self):
        """Test the frame is as tall as the thickest pixel."""
        frame = LithophaneConfig(add_frame=True, frame_thickness=4, base_thickness=1,
                                 max_depth=2).frame()
        assert frame is not None
        assert frame.thickness == 4
        assert frame.depth == 3
