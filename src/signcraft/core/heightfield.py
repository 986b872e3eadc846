"""Heightfield meshes for lithophanes and reliefs.

A heightfield is a ``rows x cols`` grid of depths, one per grid vertex,
spread evenly over a physical width and height. Row 0 is the top edge of the
image. The mesh consists of a variable-depth front surface, a flat back at
z=0, four side walls joining the two, and optionally a rectangular frame
around the outside.
"""

from collections.abc import Sequence

import numpy as np

from signcraft.config.settings import FrameConfig, LithophaneConfig
from signcraft.core.primitives import DOWN, box_plate
from signcraft.domain import Mesh

# ITU-R BT.601 luma weights
LUMA_WEIGHTS = (0.299, 0.587, 0.114)


def luminance(rgb: np.ndarray) -> np.ndarray:
    """Normalized luma in [0, 1] from 8-bit RGB samples.

    Args:
        rgb: Array whose last axis holds at least three channels

    Returns:
        Array with the channel axis removed
    """
    rgb = np.asarray(rgb, dtype=np.float64)
    r, g, b = LUMA_WEIGHTS
    return (rgb[..., 0] * r + rgb[..., 1] * g + rgb[..., 2] * b) / 255.0


def luminance_to_depth(gray: np.ndarray, base_thickness: float, max_depth: float,
                       invert: bool = False) -> np.ndarray:
    """Map normalized luminance to material thickness.

    Dark samples become thick and bright samples thin:
    ``depth = base + (1 - gray) * max_depth``, with ``gray`` replaced by
    ``1 - gray`` first when inverting.
    """
    gray = np.clip(np.asarray(gray, dtype=np.float64), 0.0, 1.0)
    if invert:
        gray = 1.0 - gray
    return base_thickness + (1.0 - gray) * max_depth


def gaussian_kernel(radius: int) -> np.ndarray:
    """Normalized 1D Gaussian kernel of size ``2 * radius + 1``, sigma = radius / 2."""
    if radius <= 0:
        return np.ones(1)
    sigma = radius / 2
    x = np.arange(-radius, radius + 1, dtype=np.float64)
    kernel = np.exp(-(x * x) / (2 * sigma * sigma))
    return kernel / kernel.sum()


def gaussian_blur(grid: np.ndarray, radius: int) -> np.ndarray:
    """Separable Gaussian blur with edge clamping.

    Args:
        grid: 2D array
        radius: Kernel radius in samples (0 returns a copy)

    Returns:
        Blurred array of the same shape
    """
    grid = np.asarray(grid, dtype=np.float64)
    if radius <= 0 or grid.size == 0:
        return grid.copy()

    kernel = gaussian_kernel(radius)
    padded = np.pad(grid, radius, mode="edge")

    rows = np.apply_along_axis(lambda row: np.convolve(row, kernel, mode="valid"), 1, padded)
    return np.apply_along_axis(lambda col: np.convolve(col, kernel, mode="valid"), 0, rows)


def downsample(grid: np.ndarray, max_cols: int) -> np.ndarray:
    """Nearest-neighbour resample so the grid is at most ``max_cols`` wide.

    The aspect ratio is kept; grids already narrow enough are returned as is.
    """
    rows, cols = grid.shape
    if cols <= max_cols:
        return grid
    new_cols = max(2, max_cols)
    new_rows = max(2, round(rows * new_cols / cols))
    row_idx = np.minimum((np.arange(new_rows) * rows / new_rows).astype(int), rows - 1)
    col_idx = np.minimum((np.arange(new_cols) * cols / new_cols).astype(int), cols - 1)
    return grid[np.ix_(row_idx, col_idx)]


def _frame(mesh: Mesh, width: float, height: float, frame: FrameConfig) -> None:
    t, d = frame.thickness, frame.depth
    if t <= 0 or d <= 0:
        return
    z = d / 2
    # Full-width strips above and below, side strips between them
    mesh.extend(box_plate(width + 2 * t, t, d, center=(width / 2, height + t / 2, z)))
    mesh.extend(box_plate(width + 2 * t, t, d, center=(width / 2, -t / 2, z)))
    mesh.extend(box_plate(t, height, d, center=(-t / 2, height / 2, z)))
    mesh.extend(box_plate(t, height, d, center=(width + t / 2, height / 2, z)))


def heightfield_mesh(depths: Sequence[float] | np.ndarray, cols: int, rows: int,
                     width: float, height: float, frame: FrameConfig | None = None) -> Mesh:
    """Solid slab whose front surface follows a depth grid.

    Args:
        depths: ``rows * cols`` depths in row-major order (row 0 at the top)
        cols: Samples per row
        rows: Number of rows
        width: Physical width of the slab
        height: Physical height of the slab
        frame: Optional frame around the slab

    Returns:
        Mesh with ``4 * (cols - 1) * (rows - 1)`` surface triangles plus
        ``4 * ((cols - 1) + (rows - 1))`` wall triangles and 48 frame
        triangles when framed; empty when either dimension is below 2
    """
    mesh = Mesh()
    if cols < 2 or rows < 2:
        return mesh

    z = np.asarray(depths, dtype=np.float64).reshape(rows, cols)
    xs = np.linspace(0.0, width, cols)
    ys = np.linspace(height, 0.0, rows)

    def vertex(c: int, r: int, front: bool = True) -> tuple[float, float, float]:
        return (float(xs[c]), float(ys[r]), float(z[r, c]) if front else 0.0)

    for r in range(rows - 1):
        for c in range(cols - 1):
            # Counter-clockwise seen from above: lower-left, lower-right, upper-right, upper-left
            ll, lr = vertex(c, r + 1), vertex(c + 1, r + 1)
            ur, ul = vertex(c + 1, r), vertex(c, r)
            mesh.add_quad(ll, lr, ur, ul)
            mesh.add_quad(
                vertex(c, r + 1, False), vertex(c, r, False),
                vertex(c + 1, r, False), vertex(c + 1, r + 1, False),
                DOWN,
            )

    # Perimeter walked counter-clockwise so every wall faces outward
    perimeter = (
        [(c, rows - 1) for c in range(cols)]
        + [(cols - 1, r) for r in range(rows - 2, -1, -1)]
        + [(c, 0) for c in range(cols - 2, -1, -1)]
        + [(0, r) for r in range(1, rows)]
    )
    for (c1, r1), (c2, r2) in zip(perimeter, perimeter[1:]):
        mesh.add_quad(vertex(c1, r1, False), vertex(c2, r2, False),
                      vertex(c2, r2), vertex(c1, r1))

    if frame is not None:
        _frame(mesh, width, height, frame)

    return mesh


def lithophane(gray: Sequence[float] | np.ndarray, cols: int, rows: int,
               settings: LithophaneConfig) -> Mesh:
    """Build a lithophane from normalized luminance samples.

    The grid is first capped to ``settings.max_resolution`` samples across,
    then mapped to depths, smoothed and meshed.

    Args:
        gray: ``rows * cols`` luminance values in [0, 1], row-major
        cols: Samples per row
        rows: Number of rows
        settings: Lithophane settings

    Returns:
        Lithophane mesh
    """
    if cols < 2 or rows < 2:
        return Mesh()

    grid = downsample(np.asarray(gray, dtype=np.float64).reshape(rows, cols),
                      settings.max_resolution)
    depths = luminance_to_depth(grid, settings.base_thickness, settings.max_depth,
                                settings.invert)
    depths = gaussian_blur(depths, settings.smoothing)
    out_rows, out_cols = depths.shape

    return heightfield_mesh(depths.ravel(), out_cols, out_rows, settings.width,
                            settings.height, settings.frame())
