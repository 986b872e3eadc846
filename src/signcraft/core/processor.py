"""Pipeline orchestration for sign generation.

This module wires the geometry stages together for each kind of request:

- plate: backing plate with mounting holes
- lithophane: luminance heightfield from an image
- trace: Moore-neighbour contours of an image, extruded
- skeleton: Zhang-Suen centerlines of an image, connected and swept as tubes
- shape: SVG path data, sampled and extruded
- text: font glyph outlines, sampled and extruded, swept as tubes, or
  filled and thinned to single-line centerline tubes

Every stage is timed and logged; malformed elements are skipped and counted
so a partial result is still produced. Only a request that yields no
geometry at all raises.
"""

import math
import time
import traceback
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path as FilePath

import numpy as np
import structlog

from signcraft.config import BackingPlateConfig, LithophaneConfig, SignCraftSettings
from signcraft.core.connector import connect, group_by_count
from signcraft.core.contour import trace as trace_contours
from signcraft.core.extrusion import classify_rings, extrude_polygon, sweep_tube
from signcraft.core.heightfield import lithophane as build_lithophane
from signcraft.core.heightfield import luminance
from signcraft.core.primitives import backing_plate
from signcraft.core.sampler import CurveSampler, parse_path_data
from signcraft.core.simplify import simplify_path
from signcraft.core.thinning import extract_skeleton_paths, thin
from signcraft.domain import BinaryRaster, Mesh, Path, PathCommand
from signcraft.exceptions import EmptyRequestError, GeometryError
from signcraft.io import (
    FontReader,
    STLFormat,
    fill_rings,
    load_grayscale,
    load_rgb,
    save_stl,
)
from signcraft.utils import GenerationStats, PipelineLogger, configure_logging

DEFAULT_TEXT_SIZE = 40.0

# Empty pixels kept around a glyph so thinning never sees it touch the edge
CENTERLINE_PADDING = 2


class SignProcessor:
    """Orchestrates the geometry pipeline for one or more requests.

    Example:
        settings = SignCraftSettings()
        processor = SignProcessor(settings)
        mesh = processor.plate()
        processor.export(mesh, Path("plate.stl"))
    """

    def __init__(
        self,
        config: SignCraftSettings,
        logger: structlog.stdlib.BoundLogger | None = None,
        quiet: bool = False,
    ) -> None:
        """Initialize the processor with configuration.

        Args:
            config: SignCraft settings
            logger: Logger to use; logging is configured from ``config`` when omitted
            quiet: Suppress console logging except errors
        """
        self.config = config
        if logger is None:
            logger = configure_logging(
                log_file=config.logging.log_file,
                console_level=config.logging.log_level,
                file_level=config.logging.file_log_level,
                quiet=quiet,
            )
        self.logger = logger
        self.pipeline_logger = PipelineLogger(self.logger)

    @property
    def stats(self) -> GenerationStats:
        """Statistics accumulated since the processor was created."""
        return self.pipeline_logger.stats

    @contextmanager
    def _stage(self, name: str, **details: object) -> Iterator[None]:
        self.pipeline_logger.log_stage_start(name, **details)
        start = time.perf_counter()
        try:
            yield
        except Exception as e:
            self.pipeline_logger.log_stage_failed(name, (time.perf_counter() - start) * 1000, e)
            raise
        self.pipeline_logger.log_stage_complete(name, (time.perf_counter() - start) * 1000)

    def _finish(self, mesh: Mesh, what: str) -> Mesh:
        if len(mesh) == 0:
            raise EmptyRequestError(what)
        self.pipeline_logger.log_mesh(len(mesh))
        return mesh

    def _log_paths(self, stage: str, paths: Sequence[Path]) -> None:
        self.pipeline_logger.log_paths(stage, len(paths), sum(len(p) for p in paths))

    # Plates and heightfields

    def plate(self, settings: BackingPlateConfig | None = None) -> Mesh:
        """Generate a backing plate.

        Args:
            settings: Plate settings (defaults to ``config.plate``)

        Returns:
            Plate mesh
        """
        settings = settings or self.config.plate
        with self._stage("plate", shape=settings.shape.value, holes=settings.hole_pattern.value):
            mesh = backing_plate(settings)
        return self._finish(mesh, "backing plate has no triangles")

    def lithophane_from_rgb(self, rgb: np.ndarray,
                            settings: LithophaneConfig | None = None) -> Mesh:
        """Generate a lithophane from an ``(rows, cols, 3)`` RGB array."""
        settings = settings or self.config.lithophane
        gray = luminance(rgb)
        rows, cols = gray.shape
        with self._stage("heightfield", cols=cols, rows=rows, smoothing=settings.smoothing):
            mesh = build_lithophane(gray.ravel(), cols, rows, settings)
        return self._finish(mesh, "image is smaller than 2x2 samples")

    def lithophane(self, image_path: FilePath,
                   settings: LithophaneConfig | None = None) -> Mesh:
        """Generate a lithophane from an image file.

        Raises:
            ImageLoadError: If the image cannot be decoded
        """
        settings = settings or self.config.lithophane
        with self._stage("load_image", path=str(image_path)):
            rgb = load_rgb(image_path, settings.max_resolution)
        return self.lithophane_from_rgb(rgb, settings)

    # Raster pipelines

    def _load_raster(self, image_path: FilePath) -> BinaryRaster:
        tracing = self.config.tracing
        with self._stage("load_image", path=str(image_path)):
            image = load_grayscale(image_path, tracing.max_resolution)
            raster = image.to_raster(tracing.threshold)
        self.logger.debug(
            "Raster thresholded",
            width=raster.width,
            height=raster.height,
            foreground=raster.foreground_count(),
        )
        return raster

    def _to_millimeters(self, paths: Sequence[Path], height: int) -> list[Path]:
        """Scale pixel paths to mm with y pointing up."""
        scale = self.config.tracing.pixel_size
        return [p.transformed(scale=scale, dy=height * scale, flip_y=True) for p in paths]

    def trace_raster(self, raster: BinaryRaster) -> Mesh:
        """Extrude the traced boundaries of a binary raster."""
        tracing = self.config.tracing
        with self._stage("trace", width=raster.width, height=raster.height):
            loops = trace_contours(raster, threshold=0, min_length=tracing.min_contour_length)
        self._log_paths("trace", loops)

        loops = self._simplify(loops, self.config.sampling.simplify_tolerance)
        return self._finish(
            self._extrude(self._to_millimeters(loops, raster.height), by_nesting=True),
            "no contours found in image",
        )

    def trace(self, image_path: FilePath) -> Mesh:
        """Trace an image's shapes and extrude them.

        Raises:
            ImageLoadError: If the image cannot be decoded
            EmptyRequestError: If no contour survives
        """
        return self.trace_raster(self._load_raster(image_path))

    def skeleton_raster(self, raster: BinaryRaster) -> Mesh:
        """Sweep tubes along the connected centerlines of a binary raster."""
        tracing = self.config.tracing
        with self._stage("thin", width=raster.width, height=raster.height):
            skeleton = thin(raster, tracing.max_thinning_iterations)
        with self._stage("extract_paths"):
            paths = extract_skeleton_paths(skeleton)
        self._log_paths("skeleton", paths)

        paths = self._simplify(paths, self.config.sampling.simplify_tolerance)
        return self._finish(
            self._tubes(self._to_millimeters(paths, raster.height)),
            "image has no centerlines",
        )

    def skeleton(self, image_path: FilePath) -> Mesh:
        """Thin an image to centerlines and sweep tubes along them.

        Raises:
            ImageLoadError: If the image cannot be decoded
            EmptyRequestError: If the skeleton is empty
        """
        return self.skeleton_raster(self._load_raster(image_path))

    # Vector pipelines

    def _sample(self, commands: Sequence[PathCommand], element: str) -> list[Path]:
        sampling = self.config.sampling
        sampler = CurveSampler(sampling.resolution, sampling.adaptive_tolerance)
        subpaths = sampler.sample_subpaths(commands)
        if sampler.skipped_commands:
            self.pipeline_logger.log_skipped(
                element, f"{sampler.skipped_commands} malformed path commands"
            )
        return subpaths

    def shape(self, path_data: str) -> Mesh:
        """Sample SVG path data and extrude the closed sub-paths.

        SVG coordinates grow downward, so the shape is flipped to keep it
        upright.

        Raises:
            EmptyRequestError: If the path data has no usable outline
        """
        extrusion = self.config.extrusion
        with self._stage("sample", length=len(path_data)):
            paths = self._sample(parse_path_data(path_data), "path data")
        self._log_paths("sample", paths)

        paths = self._simplify(paths, self.config.sampling.simplify_tolerance)
        paths = [p.transformed(scale=extrusion.scale, flip_y=True).close() for p in paths]
        return self._finish(self._extrude(paths, by_nesting=True), "path data has no outline")

    def text(self, font_path: FilePath, text: str, size: float = DEFAULT_TEXT_SIZE,
             tubes: bool = False, centerline: bool = False) -> Mesh:
        """Render a line of text as a solid or as neon-style tubes.

        Args:
            font_path: TTF or OTF font
            text: Characters to render
            size: Height of one em in mm
            tubes: Sweep tubes along connected outlines instead of extruding
            centerline: Sweep one tube along each glyph's thinned centerline
                (takes precedence over ``tubes``)

        Raises:
            FontLoadError: If the font cannot be loaded
            GlyphNotFoundError: If a character is missing from the font
            EmptyRequestError: If the text has no outlines
        """
        if not text.strip():
            raise EmptyRequestError("text is blank")

        reader = FontReader(font_path)
        with self._stage("load_font", path=str(font_path)):
            reader.load()

        try:
            scale = size / reader.units_per_em
            glyphs: list[list[Path]] = []
            with self._stage("sample", characters=len(text)):
                for char, commands in zip(text, reader.text_commands(text)):
                    glyph_paths = self._sample(commands, f"glyph '{char}'")
                    glyphs.append([p.transformed(scale=scale) for p in glyph_paths])
        finally:
            reader.close()

        paths = [p for glyph in glyphs for p in glyph]
        self._log_paths("sample", paths)

        if centerline:
            outlines = ([p.close() for p in glyph] for glyph in glyphs if glyph)
            mesh = Mesh.merge(self._tubes(self._centerline(rings)) for rings in outlines)
            return self._finish(mesh, "text has no centerlines")

        paths = self._simplify(paths, self.config.sampling.simplify_tolerance)
        if tubes:
            groups = group_by_count(paths, len(text.replace(" ", "")))
            mesh = Mesh.merge(self._tubes(group) for group in groups if group)
        else:
            mesh = self._extrude([p.close() for p in paths], by_nesting=True)
        return self._finish(mesh, "text has no outlines")

    def _centerline(self, rings: Sequence[Path]) -> list[Path]:
        """Thin a filled glyph to its single-line centerline, in mm."""
        tracing = self.config.tracing
        pixel = tracing.pixel_size
        boxes = [ring.bounding_box() for ring in rings]
        min_x = min(box[0] for box in boxes)
        min_y = min(box[1] for box in boxes)
        max_x = max(box[2] for box in boxes)
        max_y = max(box[3] for box in boxes)
        width = math.ceil((max_x - min_x) / pixel) + 2 * CENTERLINE_PADDING + 1
        height = math.ceil((max_y - min_y) / pixel) + 2 * CENTERLINE_PADDING + 1

        # mm with y up to pixels with rows growing downward, and back
        offset = CENTERLINE_PADDING * pixel
        pixel_rings = [
            ring.transformed(scale=1 / pixel, dx=(offset - min_x) / pixel,
                             dy=(offset + max_y) / pixel, flip_y=True)
            for ring in rings
        ]
        with self._stage("rasterize", width=width, height=height):
            raster = fill_rings(pixel_rings, width, height)
        with self._stage("thin", width=width, height=height):
            skeleton = thin(raster, tracing.max_thinning_iterations)
        with self._stage("extract_paths"):
            lines = extract_skeleton_paths(skeleton)
        self._log_paths("centerline", lines)

        lines = [
            line.transformed(scale=pixel, dx=min_x - offset, dy=max_y + offset, flip_y=True)
            for line in lines
        ]
        return self._simplify(lines, self.config.sampling.simplify_tolerance)

    # Shared stages

    def _simplify(self, paths: Sequence[Path], tolerance: float) -> list[Path]:
        with self._stage("simplify", tolerance=tolerance):
            simplified = [simplify_path(p, tolerance) for p in paths]
        kept = [p for p in simplified if len(p) >= 2]
        for _ in range(len(simplified) - len(kept)):
            self.pipeline_logger.log_skipped("path", "fewer than two points after simplify")
        return kept

    def _extrude(self, rings: Sequence[Path], by_nesting: bool = False) -> Mesh:
        depth = self.config.extrusion.depth
        mesh = Mesh()
        with self._stage("extrude", rings=len(rings), depth=depth):
            for index, shape in enumerate(classify_rings(rings, by_nesting)):
                self._guarded(
                    f"shape {index}",
                    lambda shape=shape: mesh.extend(
                        extrude_polygon(shape.outline, shape.holes, depth)
                    ),
                )
        return mesh

    def _tubes(self, paths: Sequence[Path]) -> Mesh:
        connector = self.config.connector
        tube = self.config.tube
        with self._stage("connect", paths=len(paths)):
            result = connect(
                paths,
                connector.max_gap_distance,
                connector.simplify_tolerance,
                connector.bridge_segments,
            )
        self.pipeline_logger.log_connections(
            result.connection_count,
            result.stats.original_segments,
            result.stats.connected_segments,
            result.total_length,
        )

        mesh = Mesh()
        with self._stage("sweep", paths=len(result.connected_paths), radius=tube.radius):
            for path in result.connected_paths:
                mesh.extend(sweep_tube(path, tube.radius, tube.segments, capped=tube.capped))
        return mesh

    def _guarded(self, element: str, action: Callable[[], object]) -> None:
        try:
            action()
        except GeometryError as e:
            self.pipeline_logger.log_error(element, e, traceback.format_exc())

    # Export

    def export(self, mesh: Mesh, output_path: FilePath, name: str | None = None,
               format: STLFormat | str = STLFormat.BINARY) -> int:
        """Write a mesh to an STL file.

        Args:
            mesh: Mesh to write
            output_path: Destination file
            name: Solid name (defaults to the file stem)
            format: ``binary`` or ``ascii``

        Returns:
            Number of bytes written
        """
        with self._stage("export", output=str(output_path)):
            size = save_stl(mesh, output_path, name, format)
        self.pipeline_logger.log_export(str(output_path), size, STLFormat(format).value)
        return size
