"""Image loading for tracing and lithophanes.

Images are decoded with Pillow, flattened onto white (so transparent areas
count as background), downscaled to a maximum size and handed to the
pipeline as plain buffers.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from PIL import Image, ImageChops, ImageDraw, UnidentifiedImageError

from signcraft.domain import BinaryRaster, Point2D
from signcraft.exceptions import ImageLoadError


@dataclass
class GrayscaleImage:
    """An 8-bit single-channel image.

    Attributes:
        width: Width in pixels
        height: Height in pixels
        pixels: ``width * height`` bytes, row-major
    """

    width: int
    height: int
    pixels: bytes

    def to_raster(self, threshold: int = 128, dark_is_foreground: bool = True) -> BinaryRaster:
        """Threshold into a binary raster."""
        return BinaryRaster.from_grayscale(
            self.pixels, self.width, self.height, threshold,
            channels=1, dark_is_foreground=dark_is_foreground,
        )


def _open_rgb(path: Path) -> Image.Image:
    if not path.exists():
        raise ImageLoadError(str(path), "file not found")
    try:
        with Image.open(path) as image:
            image.load()
            rgba = image.convert("RGBA")
    except (UnidentifiedImageError, OSError) as e:
        raise ImageLoadError(str(path), str(e)) from e

    background = Image.new("RGBA", rgba.size, (255, 255, 255, 255))
    return Image.alpha_composite(background, rgba).convert("RGB")


def _fit_width(image: Image.Image, max_width: int) -> Image.Image:
    """Scale down to ``max_width`` keeping the aspect ratio."""
    if image.width <= max_width:
        return image
    height = max(1, round(image.height * max_width / image.width))
    return image.resize((max_width, height), Image.Resampling.LANCZOS)


def load_grayscale(path: Path, max_size: int = 512) -> GrayscaleImage:
    """Load an image as 8-bit grayscale for thresholding.

    Args:
        path: Image file
        max_size: Neither side exceeds this many pixels after loading

    Returns:
        Grayscale image

    Raises:
        ImageLoadError: If the file is missing or cannot be decoded
    """
    image = _open_rgb(path)
    image.thumbnail((max_size, max_size), Image.Resampling.LANCZOS)
    gray = image.convert("L")
    return GrayscaleImage(gray.width, gray.height, gray.tobytes())


def load_rgb(path: Path, max_width: int = 200) -> np.ndarray:
    """Load an image as 8-bit RGB samples for heightfields.

    Args:
        path: Image file
        max_width: Images wider than this are scaled down

    Returns:
        ``(rows, cols, 3)`` array of values in [0, 255]

    Raises:
        ImageLoadError: If the file is missing or cannot be decoded
    """
    image = _fit_width(_open_rgb(path), max_width)
    return np.asarray(image, dtype=np.float64)


def fill_rings(rings: Sequence[Iterable[Point2D]], width: int, height: int) -> BinaryRaster:
    """Fill closed rings into a binary raster with the even-odd rule.

    Each ring is drawn on its own mask and XOR-ed into the result, so a
    counter nested inside an outline comes out as background whatever its
    winding.

    Args:
        rings: Rings in pixel coordinates (rows grow downward)
        width: Raster width in pixels
        height: Raster height in pixels

    Returns:
        Raster with filled pixels as foreground
    """
    canvas = Image.new("1", (width, height), 0)
    for ring in rings:
        points = [(p.x, p.y) for p in ring]
        if len(points) < 3:
            continue
        mask = Image.new("1", (width, height), 0)
        ImageDraw.Draw(mask).polygon(points, fill=1)
        canvas = ImageChops.logical_xor(canvas, mask)
    return BinaryRaster(width, height, canvas.convert("L").tobytes())
