"""Core processing algorithms for signcraft.

This module contains the core algorithms for:

- Curve sampling (SVG path data and glyph outlines to polylines)
- Path simplification (Douglas-Peucker)
- Raster analysis (Zhang-Suen thinning, Moore-neighbour contour tracing)
- Path connection (Bezier bridges between strokes)
- Mesh synthesis (plates, holes, extrusions, tubes, heightfields)

All algorithm modules are:
- Stateless
- Pure (no side effects beyond debug logging)

Key functions:
- sample_path_data: Flatten SVG path data into a polyline
- simplify: Douglas-Peucker simplification
- thin: Reduce a binary raster to a one-pixel skeleton
- trace: Trace closed boundaries of foreground regions
- connect: Stitch stroke paths into continuous paths
- backing_plate: Plate with mounting holes
- extrude_polygon: Solid from an outline with holes
- sweep_tube: Round tube along a path
- lithophane: Heightfield from luminance samples

Key classes:
- CurveSampler: Converts path commands to polylines
- SignProcessor: Orchestrates the full pipeline
"""

from signcraft.core.connector import ConnectionResult, connect, group_by_count
from signcraft.core.contour import ScalarField, trace, trace_field
from signcraft.core.extrusion import (
    classify_rings,
    extrude_contours,
    extrude_polygon,
    sweep_tube,
    triangulate,
)
from signcraft.core.heightfield import heightfield_mesh, lithophane, luminance
from signcraft.core.primitives import (
    backing_plate,
    box_plate,
    cylindrical_hole,
    disc_plate,
    hole_centers,
)
from signcraft.core.processor import SignProcessor
from signcraft.core.sampler import CurveSampler, parse_path_data, sample_path_data
from signcraft.core.simplify import simplify, simplify_path
from signcraft.core.thinning import extract_skeleton_paths, thin

__all__ = [
    # Connector
    "ConnectionResult",
    # Sampler
    "CurveSampler",
    # Contours
    "ScalarField",
    # Processor
    "SignProcessor",
    # Primitives
    "backing_plate",
    "box_plate",
    # Extrusion
    "classify_rings",
    "connect",
    "cylindrical_hole",
    "disc_plate",
    "extract_skeleton_paths",
    "extrude_contours",
    "extrude_polygon",
    "group_by_count",
    # Heightfields
    "heightfield_mesh",
    "hole_centers",
    "lithophane",
    "luminance",
    "parse_path_data",
    "sample_path_data",
    # Simplification
    "simplify",
    "simplify_path",
    "sweep_tube",
    "thin",
    "trace",
    "trace_field",
    "triangulate",
]
