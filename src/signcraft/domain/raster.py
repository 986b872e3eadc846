"""Binary raster type shared by thinning and contour tracing."""

from collections.abc import Sequence
from dataclasses import dataclass, field


@dataclass
class BinaryRaster:
    """A width x height grid of 0/1 samples in row-major order.

    ``data[y * width + x]`` is 1 for foreground (shape) and 0 for background.
    A raster is treated as immutable while a pipeline stage runs over it; the
    thinner works on its own copy.

    Attributes:
        width: Number of columns
        height: Number of rows
        data: Row-major samples
    """

    width: int
    height: int
    data: bytearray = field(default_factory=bytearray)

    def __post_init__(self) -> None:
        self.width = max(0, int(self.width))
        self.height = max(0, int(self.height))
        size = self.width * self.height
        if not isinstance(self.data, bytearray):
            self.data = bytearray(1 if v else 0 for v in self.data)
        if len(self.data) < size:
            self.data.extend(bytes(size - len(self.data)))
        elif len(self.data) > size:
            del self.data[size:]

    def is_empty(self) -> bool:
        """Check whether the raster has no pixels."""
        return self.width == 0 or self.height == 0

    def get(self, x: int, y: int) -> int:
        """Sample at (x, y); out-of-bounds coordinates read as background."""
        if x < 0 or y < 0 or x >= self.width or y >= self.height:
            return 0
        return self.data[y * self.width + x]

    def foreground_count(self) -> int:
        """Number of foreground pixels."""
        return sum(self.data)

    def foreground(self) -> list[tuple[int, int]]:
        """Coordinates of all foreground pixels in scan order."""
        w = self.width
        return [(i % w, i // w) for i, v in enumerate(self.data) if v]

    def copy(self) -> "BinaryRaster":
        """Return an independent copy."""
        return BinaryRaster(self.width, self.height, bytearray(self.data))

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> "BinaryRaster":
        """Build a raster from nested rows of truthy/falsy values."""
        height = len(rows)
        width = len(rows[0]) if height else 0
        data = bytearray(width * height)
        for y, row in enumerate(rows):
            for x in range(min(width, len(row))):
                data[y * width + x] = 1 if row[x] else 0
        return cls(width, height, data)

    @classmethod
    def from_grayscale(
        cls,
        buffer: Sequence[int] | bytes,
        width: int,
        height: int,
        threshold: int = 128,
        channels: int = 1,
        dark_is_foreground: bool = True,
    ) -> "BinaryRaster":
        """Threshold an 8-bit buffer into a binary raster.

        Args:
            buffer: Pixel bytes, ``channels`` values per pixel; the first
                channel of each pixel is compared to the threshold
            width: Image width in pixels
            height: Image height in pixels
            threshold: Cut-off value in [0, 255]
            channels: Values per pixel (1 for grayscale, 4 for RGBA)
            dark_is_foreground: Pixels below the threshold become foreground;
                when False, pixels at or above it do (alpha masks)

        Returns:
            BinaryRaster with the same dimensions
        """
        channels = max(1, channels)
        size = max(0, width) * max(0, height)
        available = len(buffer) // channels
        data = bytearray(size)
        for i in range(min(size, available)):
            value = buffer[i * channels]
            if dark_is_foreground:
                data[i] = 1 if value < threshold else 0
            else:
                data[i] = 1 if value >= threshold else 0
        return cls(width, height, data)

    def to_rows(self) -> list[list[int]]:
        """Return the samples as nested rows."""
        w = self.width
        return [list(self.data[y * w:(y + 1) * w]) for y in range(self.height)]


# A skeleton is a raster guaranteed one pixel wide by the thinning stage.
Skeleton = BinaryRaster
